"""Unit tests for core config parsing."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.config import PromoConfig
from core.errors import PromoConfigError

_VALID_CONFIG = """
coupons:
  files:
    - feeds/couponbase1.gz
    - feeds/couponbase2.gz
  batch_size: 500
  ignore_errors: true
  filter_name: coupon_bloom
  set_name: coupon_exact
  validation:
    min_length: 8
    max_length: 10
    allowed_characters: uppercase
store:
  url: redis://cache:6379/2
  connect_retries: 2
cache:
  enabled: true
  data_root: state
"""


def _write_config(tmp_path: Path, body: str, name: str = "config.yaml") -> Path:
    config_path = tmp_path / name
    config_path.write_text(body, encoding="utf-8")
    return config_path


def test_load_reads_all_sections(tmp_path: Path) -> None:
    """Config should parse coupons, store, and cache sections."""
    config = PromoConfig.load(_write_config(tmp_path, _VALID_CONFIG))

    assert config.coupons.batch_size == 500
    assert config.coupons.ignore_errors is True
    assert config.coupons.rules.allowed_characters == "uppercase"
    assert config.coupons.store_keys.filter_name == "coupon_bloom"
    assert config.store.url == "redis://cache:6379/2"
    assert config.store.connect_retries == 2
    assert config.cache.enabled is True


def test_load_resolves_relative_paths_against_config_dir(tmp_path: Path) -> None:
    """Relative feed and cache paths should resolve next to the config file."""
    config = PromoConfig.load(_write_config(tmp_path, _VALID_CONFIG))

    first_source = config.coupons.files[0]
    assert first_source.source_path == tmp_path.resolve() / "feeds" / "couponbase1.gz"
    assert first_source.decompressed_path.name == "couponbase1"
    assert config.cache.data_root == tmp_path.resolve() / "state"


def test_load_applies_env_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Environment variables should override store url and data root."""
    monkeypatch.setenv("PROMOLOAD_REDIS_URL", "redis://override:6380/0")
    monkeypatch.setenv("PROMOLOAD_DATA_ROOT", str(tmp_path / "env-root"))

    config = PromoConfig.load(_write_config(tmp_path, _VALID_CONFIG))

    assert config.store.url == "redis://override:6380/0"
    assert config.cache.data_root.name == "env-root"


def test_load_applies_defaults_for_optional_sections(tmp_path: Path) -> None:
    """Store and cache sections should be optional."""
    body = """
coupons:
  files: [a.gz]
  filter_name: bloom
  set_name: exact
"""
    config = PromoConfig.load(_write_config(tmp_path, body))

    assert config.coupons.batch_size == 1000
    assert config.coupons.ignore_errors is False
    assert config.coupons.rules.min_length == 8
    assert config.coupons.rules.max_length == 10
    assert config.coupons.rules.allowed_characters == "alphanumeric"
    assert config.cache.enabled is False


@pytest.mark.parametrize(
    "override",
    [
        "  batch_size: 99\n",
        "  batch_size: 10001\n",
        "  ignore_errors: yes-please\n",
        "  unknown_field: 1\n",
        "  validation:\n    min_length: 11\n    max_length: 10\n",
        "  validation:\n    allowed_characters: hex\n",
    ],
)
def test_load_rejects_invalid_coupon_values(tmp_path: Path, override: str) -> None:
    """Out-of-range or unknown coupon fields should fail validation."""
    body = "coupons:\n  files: [a.gz]\n  filter_name: bloom\n  set_name: exact\n" + override

    with pytest.raises(PromoConfigError):
        PromoConfig.load(_write_config(tmp_path, body))


def test_load_rejects_too_many_files(tmp_path: Path) -> None:
    """More than three feed files should be rejected."""
    body = """
coupons:
  files: [a.gz, b.gz, c.gz, d.gz]
  filter_name: bloom
  set_name: exact
"""
    with pytest.raises(PromoConfigError, match="coupons.files"):
        PromoConfig.load(_write_config(tmp_path, body))


@pytest.mark.parametrize("files", ["[a.gz, a.GZ]", "[feed, feed.decompressed.gz]"])
def test_load_rejects_files_sharing_a_decompressed_path(tmp_path: Path, files: str) -> None:
    """Sources that would inflate into the same file should be rejected."""
    body = f"""
coupons:
  files: {files}
  filter_name: bloom
  set_name: exact
"""
    with pytest.raises(PromoConfigError, match="decompress to the same file"):
        PromoConfig.load(_write_config(tmp_path, body))


def test_load_rejects_missing_key_names(tmp_path: Path) -> None:
    """Filter and set key names are required."""
    body = "coupons:\n  files: [a.gz]\n  filter_name: bloom\n"

    with pytest.raises(PromoConfigError, match="set_name"):
        PromoConfig.load(_write_config(tmp_path, body))


def test_load_rejects_non_yaml_extension(tmp_path: Path) -> None:
    """Only .yaml and .yml files are accepted."""
    with pytest.raises(PromoConfigError, match="extension"):
        PromoConfig.load(_write_config(tmp_path, _VALID_CONFIG, name="config.json"))


def test_load_rejects_missing_file(tmp_path: Path) -> None:
    """A missing config path should raise a config error."""
    with pytest.raises(PromoConfigError, match="does not exist"):
        PromoConfig.load(tmp_path / "absent.yaml")


def test_load_rejects_malformed_yaml(tmp_path: Path) -> None:
    """YAML syntax errors should surface as config errors."""
    with pytest.raises(PromoConfigError, match="parse"):
        PromoConfig.load(_write_config(tmp_path, "coupons: [unclosed\n"))
