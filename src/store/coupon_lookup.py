"""Checkout-time coupon membership queries."""

from __future__ import annotations

from core.types import StoreKeys
from store.membership_store import MembershipStore


def is_coupon_usable(
    store: MembershipStore,
    keys: StoreKeys,
    code: str,
    exact: bool = False,
) -> bool:
    """Return whether a code was confirmed by the ingest pipeline.

    The filter answers first and never misses a confirmed code. With
    ``exact`` set, a filter hit is confirmed against the exact set to
    rule out false positives.

    Args:
        store: Populated membership store.
        keys: Filter and set key names.
        code: Code entered at checkout.
        exact: Whether to confirm filter hits against the exact set.

    Returns:
        True when the code is usable.
    """
    if not store.filter_contains(keys.filter_name, code):
        return False
    if not exact:
        return True
    return store.set_contains(keys.set_name, code)
