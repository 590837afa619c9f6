"""Discovery of gzip coupon feeds on disk."""

from __future__ import annotations

from pathlib import Path

from core.constants import GZIP_SUFFIX
from core.errors import PromoConfigError


def collect_gzip_files(root: Path) -> list[Path]:
    """List gzip feeds under a directory tree in stable order.

    Args:
        root: Directory to walk.

    Returns:
        Sorted paths whose suffix is ``.gz`` (case-insensitive).

    Raises:
        PromoConfigError: If the root is not an existing directory.
    """
    if not root.is_dir():
        raise PromoConfigError(
            f"Feed directory {root} does not exist or is not a directory. "
            "Provide an existing directory of .gz feeds."
        )
    return sorted(
        path for path in root.rglob("*") if path.is_file() and path.suffix.lower() == GZIP_SUFFIX
    )
