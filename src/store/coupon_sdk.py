"""Python SDK for coupon ingestion and lookups.

This module exposes a high-level client that owns the store connection
and digest cache lifecycle around the ingest pipeline.
"""

from __future__ import annotations

from core.config import PromoConfig
from core.types import CouponRunSummary
from ingest.digest_cache import CouponDigestCache
from ingest.pipeline import process_coupons
from store.coupon_lookup import is_coupon_usable
from store.membership_store import MembershipStore
from store.redis_store import RedisMembershipStore, connect_membership_store


class PromoClient:
    """Primary SDK entry point for coupon workflows."""

    def __init__(self, config: PromoConfig, store: MembershipStore | None = None) -> None:
        """Create SDK client.

        Args:
            config: Validated runtime configuration.
            store: Optional store, connected lazily from config when omitted.
        """
        self._config = config
        self._store = store
        self._owns_store = store is None

    @property
    def config(self) -> PromoConfig:
        """Runtime configuration this client was built with."""
        return self._config

    def ingest(self) -> CouponRunSummary:
        """Run the coupon pipeline over the configured sources.

        Returns:
            Run summary.

        Raises:
            PromoDecompressionError: If a source fails in strict mode.
            PromoParseError: If a feed fails in strict mode.
            PromoFlushError: If a store write fails.
            PromoStoreError: If the store cannot be reached.
        """
        cache = None
        if self._config.cache.enabled:
            cache = CouponDigestCache(self._config.cache.data_root)
        return process_coupons(
            self._config.coupons.files,
            self._config.coupons,
            self._membership_store(),
            cache,
        )

    def is_usable(self, code: str, exact: bool = False) -> bool:
        """Return whether a coupon code is usable at checkout."""
        return is_coupon_usable(
            self._membership_store(), self._config.coupons.store_keys, code, exact
        )

    def close(self) -> None:
        """Close the store connection if this client opened it."""
        if self._owns_store and isinstance(self._store, RedisMembershipStore):
            self._store.close()
        if self._owns_store:
            self._store = None

    def _membership_store(self) -> MembershipStore:
        if self._store is None:
            self._store = connect_membership_store(self._config.store)
        return self._store
