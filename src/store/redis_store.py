"""Redis-backed membership store.

This module wraps redis-py for the RedisBloom filter commands and the
exact set commands used by the coupon pipeline. Redis failures are
surfaced as Promoload store errors so callers never see driver types.
"""

from __future__ import annotations

import time
from typing import Callable, Sequence

from redis import Redis
from redis.exceptions import RedisError, ResponseError

from core.config import StoreSettings
from core.constants import ITEM_EXISTS_MARKER, MAX_RETRY_BACKOFF_SECONDS
from core.errors import PromoItemExistsError, PromoStoreError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)

ClientFactory = Callable[[StoreSettings], Redis]


def create_redis_client(settings: StoreSettings) -> Redis:
    """Construct a configured Redis client instance."""
    return Redis.from_url(
        url=settings.url,
        socket_connect_timeout=settings.connect_timeout_seconds,
        socket_timeout=settings.socket_timeout_seconds,
        max_connections=settings.max_connections,
        decode_responses=True,
        encoding="utf-8",
    )


def connect_membership_store(
    settings: StoreSettings,
    client_factory: ClientFactory = create_redis_client,
    sleep: Callable[[float], None] = time.sleep,
) -> "RedisMembershipStore":
    """Connect to Redis, retrying with capped exponential backoff.

    Args:
        settings: Store connectivity settings.
        client_factory: Builds a fresh client per attempt.
        sleep: Backoff sleep function.

    Returns:
        A store whose client answered ``PING``.

    Raises:
        PromoStoreError: If every attempt fails.
    """
    last_error: Exception | None = None
    for attempt in range(1, settings.connect_retries + 1):
        client = client_factory(settings)
        try:
            client.ping()
        except RedisError as error:
            last_error = error
            client.close()
            _LOGGER.error(
                "store_connect_failed",
                attempt=attempt,
                max_attempts=settings.connect_retries,
                error=str(error),
            )
            if attempt < settings.connect_retries:
                backoff = min(
                    settings.retry_interval_seconds * 2 ** (attempt - 1),
                    MAX_RETRY_BACKOFF_SECONDS,
                )
                _LOGGER.warning("store_connect_retrying", backoff_seconds=backoff)
                sleep(backoff)
            continue
        _LOGGER.info("store_connected", attempt=attempt)
        return RedisMembershipStore(client)
    raise PromoStoreError(
        f"Failed to connect to Redis after {settings.connect_retries} attempts: {last_error}. "
        "Check store.url and that the server is reachable."
    )


class RedisMembershipStore:
    """Membership store using ``BF.*`` commands and a plain Redis set."""

    def __init__(self, client: Redis) -> None:
        self._client = client

    def add_to_filter(self, filter_name: str, codes: Sequence[str]) -> None:
        """Bulk-add codes to the bloom filter with ``BF.MADD``.

        Raises:
            PromoItemExistsError: If Redis reports an item already present.
            PromoStoreError: For any other Redis failure.
        """
        if not codes:
            return
        try:
            reply = self._client.execute_command("BF.MADD", filter_name, *codes)
        except ResponseError as error:
            raise _classify_response_error(error, "BF.MADD", filter_name) from error
        except RedisError as error:
            raise _store_error("BF.MADD", filter_name, error) from error
        for item in reply or ():
            if isinstance(item, ResponseError):
                raise _classify_response_error(item, "BF.MADD", filter_name)

    def add_to_set(self, set_name: str, codes: Sequence[str]) -> None:
        """Bulk-add codes to the exact set with ``SADD``."""
        if not codes:
            return
        try:
            self._client.sadd(set_name, *codes)
        except RedisError as error:
            raise _store_error("SADD", set_name, error) from error

    def filter_contains(self, filter_name: str, code: str) -> bool:
        """Return ``BF.EXISTS`` for one code."""
        try:
            return bool(self._client.execute_command("BF.EXISTS", filter_name, code))
        except RedisError as error:
            raise _store_error("BF.EXISTS", filter_name, error) from error

    def set_contains(self, set_name: str, code: str) -> bool:
        """Return ``SISMEMBER`` for one code."""
        try:
            return bool(self._client.sismember(set_name, code))
        except RedisError as error:
            raise _store_error("SISMEMBER", set_name, error) from error

    def close(self) -> None:
        """Release the client's connection pool."""
        self._client.close()


def is_item_exists_error(error: BaseException) -> bool:
    """Return whether an error reports an already-present item."""
    return ITEM_EXISTS_MARKER in str(error).lower()


def _classify_response_error(error: ResponseError, command: str, key: str) -> PromoStoreError:
    if is_item_exists_error(error):
        return PromoItemExistsError(f"Redis {command} on '{key}': {error}")
    return _store_error(command, key, error)


def _store_error(command: str, key: str, error: Exception) -> PromoStoreError:
    return PromoStoreError(f"Redis {command} on '{key}' failed: {error}")
