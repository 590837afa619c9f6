"""Public SDK surface for Promoload.

This module provides a stable import path for pipeline users.
It re-exports the primary client, pipeline entry point, and typed models.
"""

from __future__ import annotations

from core.config import CacheSettings, CouponSettings, PromoConfig, StoreSettings
from core.types import CouponRunSummary, SourceFile, StoreKeys, ValidationRules
from ingest.pipeline import process_coupons
from store.coupon_lookup import is_coupon_usable
from store.coupon_sdk import PromoClient
from store.redis_store import RedisMembershipStore, connect_membership_store
from transforms.code_validation import is_valid_code

__all__ = [
    "CacheSettings",
    "CouponRunSummary",
    "CouponSettings",
    "PromoClient",
    "PromoConfig",
    "RedisMembershipStore",
    "SourceFile",
    "StoreKeys",
    "StoreSettings",
    "ValidationRules",
    "connect_membership_store",
    "is_coupon_usable",
    "is_valid_code",
    "process_coupons",
]
