"""Membership store interface consumed by the pipeline and lookups."""

from __future__ import annotations

from typing import Protocol, Sequence


class MembershipStore(Protocol):
    """Two-tier store: probabilistic filter plus authoritative exact set."""

    def add_to_filter(self, filter_name: str, codes: Sequence[str]) -> None:
        """Bulk-add codes to the probabilistic filter."""

    def add_to_set(self, set_name: str, codes: Sequence[str]) -> None:
        """Bulk-add codes to the exact set."""

    def filter_contains(self, filter_name: str, code: str) -> bool:
        """Return whether the filter may contain a code."""

    def set_contains(self, set_name: str, code: str) -> bool:
        """Return whether the exact set contains a code."""
