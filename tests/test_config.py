#!/usr/bin/env python3
"""
Tests for configuration loading.

Tests verify:
1. Defaults without file or environment
2. YAML file values, then STRPACK_* environment overrides
3. Value coercion (booleans, locale lists, normalization form)
4. Unknown keys and non-mapping files are rejected
"""

import pytest

from strpack.config import DEFAULT_RTL_LOCALES, Config, load_config

ENV_NAMES = [
    "STRPACK_CONFIG",
    "STRPACK_FALLBACK_LOCALE",
    "STRPACK_VERIFY",
    "STRPACK_NORMALIZATION",
    "STRPACK_RTL_LOCALES",
    "STRPACK_TOKEN_ENCODING",
    "STRPACK_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    """Test 1: No file and no environment gives the defaults."""
    config = load_config()
    assert config == Config()
    assert config.fallback_locale == "en"
    assert config.verify is True
    assert config.normalization is None
    assert config.rtl_locales == DEFAULT_RTL_LOCALES


def test_yaml_file(tmp_path):
    """Test 2: File values replace defaults."""
    path = tmp_path / "strpack.yml"
    path.write_text(
        "fallback_locale: de\n"
        "verify: false\n"
        "normalization: nfc\n"
        "rtl_locales: [ar, he]\n",
        encoding="utf-8",
    )
    config = load_config(str(path))
    assert config.fallback_locale == "de"
    assert config.verify is False
    assert config.normalization == "NFC"
    assert config.rtl_locales == ("ar", "he")
    assert config.token_encoding == "cl100k_base"


def test_config_path_from_env(tmp_path, monkeypatch):
    """Test 3: STRPACK_CONFIG points at the file."""
    path = tmp_path / "strpack.yml"
    path.write_text("log_level: DEBUG\n", encoding="utf-8")
    monkeypatch.setenv("STRPACK_CONFIG", str(path))
    assert load_config().log_level == "DEBUG"


def test_env_overrides_file(tmp_path, monkeypatch):
    """Test 4: Environment variables win over the file."""
    path = tmp_path / "strpack.yml"
    path.write_text("fallback_locale: de\nverify: true\n", encoding="utf-8")
    monkeypatch.setenv("STRPACK_FALLBACK_LOCALE", "fr")
    monkeypatch.setenv("STRPACK_VERIFY", "no")
    monkeypatch.setenv("STRPACK_RTL_LOCALES", "ar, fa ,")

    config = load_config(str(path))

    assert config.fallback_locale == "fr"
    assert config.verify is False
    assert config.rtl_locales == ("ar", "fa")


def test_empty_normalization_is_none(monkeypatch):
    """Test 5: An empty normalization form disables normalization."""
    monkeypatch.setenv("STRPACK_NORMALIZATION", "")
    assert load_config().normalization is None


def test_empty_file(tmp_path):
    """Test 6: An empty file keeps the defaults."""
    path = tmp_path / "strpack.yml"
    path.write_text("", encoding="utf-8")
    assert load_config(str(path)) == Config()


def test_unknown_key(tmp_path):
    """Test 7: Typos in the file are reported."""
    path = tmp_path / "strpack.yml"
    path.write_text("fallback: en\n", encoding="utf-8")
    with pytest.raises(ValueError, match="Unknown config keys"):
        load_config(str(path))


def test_file_must_be_mapping(tmp_path):
    """Test 8: A list is not a config."""
    path = tmp_path / "strpack.yml"
    path.write_text("- en\n- fr\n", encoding="utf-8")
    with pytest.raises(ValueError, match="must contain a mapping"):
        load_config(str(path))
