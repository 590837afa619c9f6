"""Promoload exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each pipeline stage raises a specific error type for debuggability.
"""

from __future__ import annotations


class PromoError(Exception):
    """Base exception for all Promoload failures."""


class PromoConfigError(PromoError):
    """Raised for invalid runtime configuration."""


class PromoDecompressionError(PromoError):
    """Raised when a gzip source cannot be decompressed."""

    def __init__(self, message: str, source_path: str) -> None:
        super().__init__(message)
        self.source_path = source_path
        self.stage = "decompress"


class PromoParseError(PromoError):
    """Raised when a decompressed feed file cannot be scanned."""

    def __init__(self, message: str, source_path: str) -> None:
        super().__init__(message)
        self.source_path = source_path
        self.stage = "parse"


class PromoStoreError(PromoError):
    """Raised for membership store connection and command failures."""


class PromoItemExistsError(PromoStoreError):
    """Raised when the store reports that an item is already present."""


class PromoFlushError(PromoError):
    """Raised when a confirmed batch cannot be written to the store."""

    def __init__(self, message: str, batch_size: int) -> None:
        super().__init__(message)
        self.batch_size = batch_size
        self.stage = "flush"
