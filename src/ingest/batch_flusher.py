"""Confirmed-batch writes to the membership store.

The filter write is an optimization layer and tolerates "item exists"
replies. The exact-set write is authoritative and any failure is fatal.
"""

from __future__ import annotations

from typing import Sequence

from core.errors import PromoFlushError, PromoItemExistsError, PromoStoreError
from core.logging_config import get_logger
from core.types import StoreKeys
from store.membership_store import MembershipStore

_LOGGER = get_logger(__name__)


class BatchFlusher:
    """Write confirmed batches to the filter, then the exact set."""

    def __init__(self, store: MembershipStore, keys: StoreKeys) -> None:
        self._store = store
        self._keys = keys

    def flush(self, batch: Sequence[str]) -> None:
        """Write one confirmed batch to both membership tiers.

        Args:
            batch: Confirmed codes, each appearing in no other batch.

        Raises:
            PromoFlushError: If either write fails for a non-benign reason.
        """
        if not batch:
            return
        try:
            self._store.add_to_filter(self._keys.filter_name, batch)
        except PromoItemExistsError as error:
            _LOGGER.warning(
                "filter_items_already_present",
                filter_name=self._keys.filter_name,
                batch_size=len(batch),
                detail=str(error),
            )
        except PromoStoreError as error:
            raise PromoFlushError(
                f"Failed to add {len(batch)} codes to filter '{self._keys.filter_name}': {error}",
                batch_size=len(batch),
            ) from error
        try:
            self._store.add_to_set(self._keys.set_name, batch)
        except PromoStoreError as error:
            raise PromoFlushError(
                f"Failed to add {len(batch)} codes to set '{self._keys.set_name}': {error}",
                batch_size=len(batch),
            ) from error
        _LOGGER.info(
            "batch_flushed",
            filter_name=self._keys.filter_name,
            set_name=self._keys.set_name,
            batch_size=len(batch),
        )
