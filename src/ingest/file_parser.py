"""Streaming parser for decompressed coupon feeds.

This module scans one feed line by line and returns its unique valid
codes. Duplicate lines inside a file collapse to one membership.
"""

from __future__ import annotations

from pathlib import Path

from core.constants import DEFAULT_MAX_LINE_BYTES
from core.errors import PromoParseError
from core.logging_config import get_logger
from core.types import ValidationRules
from transforms.code_validation import is_valid_code

_LOGGER = get_logger(__name__)


def parse_code_file(
    file_path: Path,
    rules: ValidationRules,
    max_line_bytes: int = DEFAULT_MAX_LINE_BYTES,
) -> frozenset[str]:
    """Collect the unique valid codes of one decompressed feed.

    Args:
        file_path: Decompressed feed file.
        rules: Validation rules applied to each trimmed line.
        max_line_bytes: Longest line accepted before the file is rejected.

    Returns:
        Set of distinct codes that passed validation.

    Raises:
        PromoParseError: If the file cannot be read or holds an overlong line.
    """
    codes: set[str] = set()
    line_count = 0
    try:
        with file_path.open("rb") as feed:
            while True:
                raw_line = feed.readline(max_line_bytes + 1)
                if not raw_line:
                    break
                line_count += 1
                if len(raw_line) > max_line_bytes and not raw_line.endswith(b"\n"):
                    raise PromoParseError(
                        f"Line {line_count} of {file_path} exceeds {max_line_bytes} bytes. "
                        "Raise coupons.max_line_bytes or fix the feed.",
                        source_path=str(file_path),
                    )
                code = raw_line.decode("utf-8", errors="replace").strip()
                if is_valid_code(code, rules):
                    codes.add(code)
    except OSError as error:
        raise PromoParseError(
            f"Failed to read coupon feed {file_path}: {error}.",
            source_path=str(file_path),
        ) from error
    _LOGGER.info(
        "feed_parsed",
        file_path=str(file_path),
        line_count=line_count,
        valid_count=len(codes),
    )
    return frozenset(codes)
