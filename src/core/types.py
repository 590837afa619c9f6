"""Shared typed models.

This module defines immutable data models used by the ingest,
store, and CLI layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from core.constants import (
    DEFAULT_ALLOWED_CHARACTERS,
    DEFAULT_MAX_CODE_LENGTH,
    DEFAULT_MIN_CODE_LENGTH,
    GZIP_SUFFIX,
)

CharacterClass = Literal["alphanumeric", "digits", "letters", "uppercase", "lowercase"]


@dataclass(frozen=True)
class SourceFile:
    """One gzip feed file and its decompressed sibling.

    Attributes:
        source_path: Path to the gzip-compressed feed.
        decompressed_path: Path the decompressed copy is written to.
    """

    source_path: Path
    decompressed_path: Path

    @classmethod
    def from_path(cls, source_path: Path | str) -> "SourceFile":
        """Build a source file whose sibling drops the ``.gz`` suffix."""
        path = Path(source_path)
        if path.suffix.lower() == GZIP_SUFFIX:
            decompressed = path.with_suffix("")
        else:
            decompressed = path.with_name(f"{path.name}.decompressed")
        return cls(source_path=path, decompressed_path=decompressed)


@dataclass(frozen=True)
class ValidationRules:
    """Structural rules a candidate code must satisfy.

    Attributes:
        min_length: Inclusive lower bound on code length.
        max_length: Inclusive upper bound on code length.
        allowed_characters: Character class every code char must match.
    """

    min_length: int = DEFAULT_MIN_CODE_LENGTH
    max_length: int = DEFAULT_MAX_CODE_LENGTH
    allowed_characters: str = DEFAULT_ALLOWED_CHARACTERS


@dataclass(frozen=True)
class StoreKeys:
    """Remote key names for the two membership tiers.

    Attributes:
        filter_name: Key of the probabilistic filter.
        set_name: Key of the exact set.
    """

    filter_name: str
    set_name: str


@dataclass(frozen=True)
class DecompressionFailure:
    """One source that failed the decompression stage."""

    source: SourceFile
    reason: str


@dataclass(frozen=True)
class DecompressionReport:
    """Outcome of decompressing every configured source.

    Attributes:
        succeeded: Sources whose decompressed sibling is ready.
        failed: Sources that could not be decompressed.
    """

    succeeded: tuple[SourceFile, ...]
    failed: tuple[DecompressionFailure, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CouponRunSummary:
    """Result of one completed coupon ingestion run.

    Attributes:
        confirmed_count: Codes confirmed and written to the store.
        processed_files: Sources whose codes were merged.
        skipped_files: Sources dropped under the tolerant error policy.
        flushed_batches: Number of store writes issued.
        cache_hit: Whether the digest cache short-circuited parsing.
    """

    confirmed_count: int
    processed_files: tuple[str, ...]
    skipped_files: tuple[str, ...]
    flushed_batches: int
    cache_hit: bool = False
