"""Content-digest cache for confirmed coupon sets.

This module remembers the confirmed codes of the last run together with
a digest of its source bytes. A run over unchanged sources can reuse
the cached set instead of decompressing and parsing again.
"""

from __future__ import annotations

from dataclasses import asdict
import hashlib
import json
import os
from pathlib import Path
from typing import Iterable, Sequence

from core.constants import (
    CACHED_CODES_FILE_NAME,
    DIGEST_CACHE_DIR_NAME,
    DIGEST_FILE_NAME,
    HASH_ALGORITHM,
    HASH_READ_CHUNK_BYTES,
    TEMP_FILE_SUFFIX,
)
from core.errors import PromoParseError
from core.logging_config import get_logger
from core.types import ValidationRules

_LOGGER = get_logger(__name__)


def compute_sources_digest(source_paths: Sequence[Path], rules: ValidationRules) -> str:
    """Hash the validation rules and the bytes of every source in order.

    Args:
        source_paths: Gzip feed paths in configured order.
        rules: Validation rules the cached set was built with.

    Returns:
        Hex digest over all source contents.

    Raises:
        PromoParseError: If a source cannot be read.
    """
    hasher = hashlib.new(HASH_ALGORITHM)
    hasher.update(json.dumps(asdict(rules), sort_keys=True).encode("utf-8"))
    for source_path in source_paths:
        try:
            with source_path.open("rb") as source_file:
                for chunk in iter(lambda: source_file.read(HASH_READ_CHUNK_BYTES), b""):
                    hasher.update(chunk)
        except OSError as error:
            raise PromoParseError(
                f"Failed to hash source {source_path}: {error}.",
                source_path=str(source_path),
            ) from error
    return hasher.hexdigest()


class CouponDigestCache:
    """Filesystem-backed cache of the last confirmed code set."""

    def __init__(self, data_root: Path) -> None:
        self._cache_dir = data_root / DIGEST_CACHE_DIR_NAME

    def load(self, digest: str) -> frozenset[str] | None:
        """Return cached codes when the stored digest matches, else None."""
        digest_path = self._digest_path()
        codes_path = self._codes_path()
        if not digest_path.exists() or not codes_path.exists():
            return None
        stored_digest = digest_path.read_text(encoding="utf-8").strip()
        if stored_digest != digest:
            return None
        try:
            payload = json.loads(codes_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as error:
            _LOGGER.warning("digest_cache_unreadable", path=str(codes_path), error=error.msg)
            return None
        if not isinstance(payload, list) or not all(isinstance(code, str) for code in payload):
            _LOGGER.warning("digest_cache_invalid", path=str(codes_path))
            return None
        return frozenset(payload)

    def save(self, digest: str, codes: Iterable[str]) -> None:
        """Persist the confirmed set, then the digest that vouches for it."""
        self._cache_dir.mkdir(parents=True, exist_ok=True)
        _write_atomic(self._codes_path(), json.dumps(sorted(codes), indent=2) + "\n")
        _write_atomic(self._digest_path(), digest + "\n")

    def clear(self) -> None:
        """Remove all cache files."""
        for file_path in (self._digest_path(), self._codes_path()):
            file_path.unlink(missing_ok=True)

    def _digest_path(self) -> Path:
        return self._cache_dir / DIGEST_FILE_NAME

    def _codes_path(self) -> Path:
        return self._cache_dir / CACHED_CODES_FILE_NAME


def _write_atomic(target_path: Path, body: str) -> None:
    temp_path = target_path.with_name(target_path.name + TEMP_FILE_SUFFIX)
    temp_path.write_text(body, encoding="utf-8")
    os.replace(temp_path, target_path)
