"""Unit tests for checkout-time coupon lookups."""

from __future__ import annotations

from core.types import StoreKeys
from store.coupon_lookup import is_coupon_usable

_KEYS = StoreKeys(filter_name="coupon_bloom", set_name="coupon_exact")


def test_is_coupon_usable_uses_filter_by_default(fake_store) -> None:
    """A filter hit should be enough without exact confirmation."""
    fake_store.add_to_filter("coupon_bloom", ["ABCD1234"])

    assert is_coupon_usable(fake_store, _KEYS, "ABCD1234") is True
    assert is_coupon_usable(fake_store, _KEYS, "NOPE1234") is False


def test_is_coupon_usable_exact_rejects_filter_false_positive(fake_store) -> None:
    """Exact mode should reject codes missing from the exact set."""
    fake_store.add_to_filter("coupon_bloom", ["FALSEPOS1"])

    assert is_coupon_usable(fake_store, _KEYS, "FALSEPOS1", exact=True) is False


def test_is_coupon_usable_exact_accepts_confirmed_code(fake_store) -> None:
    """Exact mode should accept codes present in both tiers."""
    fake_store.add_to_filter("coupon_bloom", ["ABCD1234"])
    fake_store.add_to_set("coupon_exact", ["ABCD1234"])

    assert is_coupon_usable(fake_store, _KEYS, "ABCD1234", exact=True) is True
