"""Runtime configuration model for Promoload.

This module owns YAML config parsing, environment overrides, and
validation. Other modules consume a typed config object instead of
raw YAML mappings or env reads.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
import os
from pathlib import Path
from typing import Mapping, Sequence, cast

import yaml

from core.constants import (
    DEFAULT_ALLOWED_CHARACTERS,
    DEFAULT_BATCH_SIZE,
    DEFAULT_CONNECT_RETRIES,
    DEFAULT_CONNECT_TIMEOUT_SECONDS,
    DEFAULT_DATA_ROOT,
    DEFAULT_MAX_CODE_LENGTH,
    DEFAULT_MAX_CONNECTIONS,
    DEFAULT_MAX_LINE_BYTES,
    DEFAULT_MIN_CODE_LENGTH,
    DEFAULT_REDIS_URL,
    DEFAULT_RETRY_INTERVAL_SECONDS,
    DEFAULT_SOCKET_TIMEOUT_SECONDS,
    MAX_BATCH_SIZE,
    MAX_SOURCE_FILES,
    MIN_BATCH_SIZE,
    MIN_SOURCE_FILES,
    SUPPORTED_CHARACTER_CLASSES,
)
from core.errors import PromoConfigError
from core.types import SourceFile, StoreKeys, ValidationRules

_ROOT_KEYS = frozenset({"coupons", "store", "cache"})
_COUPON_KEYS = frozenset(
    {"files", "batch_size", "ignore_errors", "filter_name", "set_name", "max_line_bytes", "validation"}
)
_VALIDATION_KEYS = frozenset({"min_length", "max_length", "allowed_characters"})
_STORE_KEYS = frozenset(
    {
        "url",
        "connect_timeout_seconds",
        "socket_timeout_seconds",
        "max_connections",
        "connect_retries",
        "retry_interval_seconds",
    }
)
_CACHE_KEYS = frozenset({"enabled", "data_root"})


@dataclass(frozen=True)
class CouponSettings:
    """Validated coupon ingestion settings.

    Attributes:
        files: Ordered gzip feed sources.
        batch_size: Confirmed codes per store write.
        ignore_errors: Drop failing files instead of aborting the run.
        store_keys: Filter and exact-set key names.
        rules: Structural validation rules for codes.
        max_line_bytes: Longest accepted line in a decompressed feed.
    """

    files: tuple[SourceFile, ...]
    batch_size: int
    ignore_errors: bool
    store_keys: StoreKeys
    rules: ValidationRules
    max_line_bytes: int = DEFAULT_MAX_LINE_BYTES


@dataclass(frozen=True)
class StoreSettings:
    """Redis connectivity settings for the membership store."""

    url: str = DEFAULT_REDIS_URL
    connect_timeout_seconds: float = DEFAULT_CONNECT_TIMEOUT_SECONDS
    socket_timeout_seconds: float = DEFAULT_SOCKET_TIMEOUT_SECONDS
    max_connections: int = DEFAULT_MAX_CONNECTIONS
    connect_retries: int = DEFAULT_CONNECT_RETRIES
    retry_interval_seconds: float = DEFAULT_RETRY_INTERVAL_SECONDS


@dataclass(frozen=True)
class CacheSettings:
    """Local digest cache settings."""

    enabled: bool = False
    data_root: Path = DEFAULT_DATA_ROOT


@dataclass(frozen=True)
class PromoConfig:
    """Validated runtime configuration.

    Attributes:
        coupons: Feed sources, rules, and batching policy.
        store: Remote membership store connectivity.
        cache: Digest cache toggle and location.
    """

    coupons: CouponSettings
    store: StoreSettings
    cache: CacheSettings

    @classmethod
    def load(cls, config_path: str | Path) -> "PromoConfig":
        """Load, validate, and env-override a YAML config file.

        Args:
            config_path: Path to a ``.yaml`` or ``.yml`` file.

        Returns:
            A validated config object.

        Raises:
            PromoConfigError: If the file is missing or values are invalid.
        """
        config_file = Path(config_path).expanduser().resolve()
        payload = _load_yaml_payload(config_file)
        config = cls.from_mapping(payload, base_dir=config_file.parent)
        return _apply_env_overrides(config)

    @classmethod
    def from_mapping(cls, payload: object, base_dir: Path) -> "PromoConfig":
        """Build config from an already-parsed mapping.

        Args:
            payload: Parsed YAML root object.
            base_dir: Directory relative file paths resolve against.

        Returns:
            A validated config object.

        Raises:
            PromoConfigError: If any section fails validation.
        """
        root = _expect_mapping(payload, "config root")
        _validate_keys(root, _ROOT_KEYS, "config root")
        if "coupons" not in root:
            raise PromoConfigError("Config missing required section 'coupons'.")
        coupons = _parse_coupons(_expect_mapping(root["coupons"], "coupons"), base_dir)
        store = _parse_store(_expect_mapping(root.get("store") or {}, "store"))
        cache = _parse_cache(_expect_mapping(root.get("cache") or {}, "cache"), base_dir)
        return cls(coupons=coupons, store=store, cache=cache)


def _load_yaml_payload(config_file: Path) -> object:
    if config_file.suffix.lower() not in (".yaml", ".yml"):
        raise PromoConfigError(
            f"Invalid config file extension '{config_file.suffix}'. Expected .yaml or .yml."
        )
    if not config_file.is_file():
        raise PromoConfigError(
            f"Config file does not exist at {config_file}. Provide a valid YAML file path."
        )
    try:
        payload = cast(object, yaml.safe_load(config_file.read_text(encoding="utf-8")))
    except OSError as error:
        raise PromoConfigError(
            f"Failed to read config at {config_file}: {error}. Check file permissions and retry."
        ) from error
    except yaml.YAMLError as error:
        raise PromoConfigError(
            f"Failed to parse YAML config at {config_file}: {error}. Fix YAML syntax and retry."
        ) from error
    if payload is None:
        raise PromoConfigError(f"Config at {config_file} is empty. Define a 'coupons' section.")
    return payload


def _apply_env_overrides(config: PromoConfig) -> PromoConfig:
    redis_url = os.getenv("PROMOLOAD_REDIS_URL")
    if redis_url:
        config = replace(config, store=replace(config.store, url=redis_url))
    data_root = os.getenv("PROMOLOAD_DATA_ROOT")
    if data_root:
        resolved_root = Path(data_root).expanduser().resolve()
        config = replace(config, cache=replace(config.cache, data_root=resolved_root))
    return config


def _parse_coupons(section: Mapping[str, object], base_dir: Path) -> CouponSettings:
    _validate_keys(section, _COUPON_KEYS, "coupons")
    files = _parse_files(section.get("files"), base_dir)
    batch_size = _int_in_range(
        section.get("batch_size", DEFAULT_BATCH_SIZE),
        "coupons.batch_size",
        MIN_BATCH_SIZE,
        MAX_BATCH_SIZE,
    )
    ignore_errors = _expect_bool(section.get("ignore_errors", False), "coupons.ignore_errors")
    store_keys = StoreKeys(
        filter_name=_required_string(section, "filter_name", "coupons"),
        set_name=_required_string(section, "set_name", "coupons"),
    )
    max_line_bytes = _int_in_range(
        section.get("max_line_bytes", DEFAULT_MAX_LINE_BYTES), "coupons.max_line_bytes", 1, None
    )
    rules = _parse_validation(_expect_mapping(section.get("validation") or {}, "coupons.validation"))
    return CouponSettings(
        files=files,
        batch_size=batch_size,
        ignore_errors=ignore_errors,
        store_keys=store_keys,
        rules=rules,
        max_line_bytes=max_line_bytes,
    )


def _parse_files(raw_files: object, base_dir: Path) -> tuple[SourceFile, ...]:
    if raw_files is None:
        raise PromoConfigError("Config field 'coupons.files' is required. List gzip feed paths.")
    rows = _expect_sequence(raw_files, "coupons.files")
    if not MIN_SOURCE_FILES <= len(rows) <= MAX_SOURCE_FILES:
        raise PromoConfigError(
            f"Config field 'coupons.files' must list {MIN_SOURCE_FILES}-{MAX_SOURCE_FILES} "
            f"paths, got {len(rows)}."
        )
    sources: list[SourceFile] = []
    for index, row in enumerate(rows):
        if not isinstance(row, str) or not row.strip():
            raise PromoConfigError(
                f"Invalid coupons.files entry #{index + 1}: expected a non-empty path string."
            )
        path = Path(row.strip()).expanduser()
        if not path.is_absolute():
            path = base_dir / path
        sources.append(SourceFile.from_path(path))
    if len({source.source_path for source in sources}) != len(sources):
        raise PromoConfigError("Config field 'coupons.files' must not repeat a path.")
    if len({source.decompressed_path for source in sources}) != len(sources):
        raise PromoConfigError(
            "Config field 'coupons.files' lists paths that decompress to the same file."
        )
    return tuple(sources)


def _parse_validation(section: Mapping[str, object]) -> ValidationRules:
    _validate_keys(section, _VALIDATION_KEYS, "coupons.validation")
    min_length = _int_in_range(
        section.get("min_length", DEFAULT_MIN_CODE_LENGTH), "validation.min_length", 1, None
    )
    max_length = _int_in_range(
        section.get("max_length", DEFAULT_MAX_CODE_LENGTH), "validation.max_length", 1, None
    )
    if min_length > max_length:
        raise PromoConfigError(
            f"validation.min_length ({min_length}) cannot be greater than "
            f"validation.max_length ({max_length})."
        )
    allowed = section.get("allowed_characters", DEFAULT_ALLOWED_CHARACTERS)
    if allowed not in SUPPORTED_CHARACTER_CLASSES:
        supported_rows = ", ".join(SUPPORTED_CHARACTER_CLASSES)
        raise PromoConfigError(
            f"Invalid validation.allowed_characters value '{allowed}'. Use one of: {supported_rows}."
        )
    return ValidationRules(
        min_length=min_length,
        max_length=max_length,
        allowed_characters=cast(str, allowed),
    )


def _parse_store(section: Mapping[str, object]) -> StoreSettings:
    _validate_keys(section, _STORE_KEYS, "store")
    url = section.get("url", DEFAULT_REDIS_URL)
    if not isinstance(url, str) or not url.strip():
        raise PromoConfigError("Config field 'store.url' must be a non-empty string.")
    return StoreSettings(
        url=url.strip(),
        connect_timeout_seconds=_positive_float(
            section.get("connect_timeout_seconds", DEFAULT_CONNECT_TIMEOUT_SECONDS),
            "store.connect_timeout_seconds",
        ),
        socket_timeout_seconds=_positive_float(
            section.get("socket_timeout_seconds", DEFAULT_SOCKET_TIMEOUT_SECONDS),
            "store.socket_timeout_seconds",
        ),
        max_connections=_int_in_range(
            section.get("max_connections", DEFAULT_MAX_CONNECTIONS), "store.max_connections", 1, None
        ),
        connect_retries=_int_in_range(
            section.get("connect_retries", DEFAULT_CONNECT_RETRIES), "store.connect_retries", 1, None
        ),
        retry_interval_seconds=_positive_float(
            section.get("retry_interval_seconds", DEFAULT_RETRY_INTERVAL_SECONDS),
            "store.retry_interval_seconds",
        ),
    )


def _parse_cache(section: Mapping[str, object], base_dir: Path) -> CacheSettings:
    _validate_keys(section, _CACHE_KEYS, "cache")
    enabled = _expect_bool(section.get("enabled", False), "cache.enabled")
    raw_root = section.get("data_root")
    if raw_root is None:
        return CacheSettings(enabled=enabled)
    if not isinstance(raw_root, str) or not raw_root.strip():
        raise PromoConfigError("Config field 'cache.data_root' must be a non-empty string.")
    data_root = Path(raw_root.strip()).expanduser()
    if not data_root.is_absolute():
        data_root = base_dir / data_root
    return CacheSettings(enabled=enabled, data_root=data_root)


def _expect_mapping(value: object, context: str) -> Mapping[str, object]:
    if isinstance(value, Mapping):
        normalized_mapping = {}
        for key, payload in value.items():
            if not isinstance(key, str):
                raise PromoConfigError(
                    f"Invalid {context}: expected string keys, got {type(key).__name__}."
                )
            normalized_mapping[key] = payload
        return normalized_mapping
    raise PromoConfigError(
        f"Invalid {context}: expected object mapping, got {type(value).__name__}."
    )


def _expect_sequence(value: object, context: str) -> Sequence[object]:
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return value
    raise PromoConfigError(f"Invalid {context}: expected list, got {type(value).__name__}.")


def _validate_keys(section: Mapping[str, object], allowed: frozenset[str], context: str) -> None:
    unknown_keys = sorted(section.keys() - allowed)
    if unknown_keys:
        raise PromoConfigError(
            f"Unknown keys in {context}: {', '.join(unknown_keys)}. "
            f"Supported keys: {', '.join(sorted(allowed))}."
        )


def _required_string(section: Mapping[str, object], key: str, context: str) -> str:
    value = section.get(key)
    if not isinstance(value, str) or not value.strip():
        raise PromoConfigError(f"Config field '{context}.{key}' is required and must be a string.")
    return value.strip()


def _expect_bool(value: object, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise PromoConfigError(f"Config field '{field_name}' must be true or false.")
    return value


def _int_in_range(value: object, field_name: str, minimum: int, maximum: int | None) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise PromoConfigError(f"Config field '{field_name}' must be an integer.")
    if value < minimum or (maximum is not None and value > maximum):
        upper = "" if maximum is None else f" and <= {maximum}"
        raise PromoConfigError(
            f"Config field '{field_name}' must be >= {minimum}{upper}, got {value}."
        )
    return value


def _positive_float(value: object, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise PromoConfigError(f"Config field '{field_name}' must be a positive number.")
    return float(value)
