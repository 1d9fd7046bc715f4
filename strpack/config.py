"""Configuration: frozen dataclass loaded from an optional YAML file and environment variables."""

import os
from dataclasses import dataclass, fields, replace
from typing import Optional

import yaml

DEFAULT_RTL_LOCALES = ("ar", "fa", "he", "ps", "ur")


@dataclass(frozen=True)
class Config:
    fallback_locale: str = "en"
    verify: bool = True
    normalization: Optional[str] = None
    rtl_locales: tuple = DEFAULT_RTL_LOCALES
    token_encoding: str = "cl100k_base"
    log_level: str = "WARNING"


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def _parse_locales(value) -> tuple:
    if isinstance(value, (list, tuple)):
        return tuple(str(locale) for locale in value)
    return tuple(locale.strip() for locale in str(value).split(",") if locale.strip())


_PARSERS = {
    "verify": _parse_bool,
    "rtl_locales": _parse_locales,
    "normalization": lambda value: str(value).upper() if value else None,
}


def _coerce(name: str, value):
    parser = _PARSERS.get(name, str)
    return parser(value)


def load_yaml(path: str) -> dict:
    """Load a YAML config file and return its mapping."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    return data


def load_config(path: Optional[str] = None) -> Config:
    """
    Build Config from defaults, then a YAML file, then environment variables.

    The file path can also be given with STRPACK_CONFIG. Each field can be
    overridden with STRPACK_<FIELD>, e.g. STRPACK_FALLBACK_LOCALE=en.
    """
    config = Config()
    known = {f.name for f in fields(Config)}

    path = path or os.environ.get("STRPACK_CONFIG")
    if path:
        data = load_yaml(path)
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys in {path}: {sorted(unknown)}")
        config = replace(config, **{name: _coerce(name, value) for name, value in data.items()})

    overrides = {}
    for name in known:
        value = os.environ.get(f"STRPACK_{name.upper()}")
        if value is not None:
            overrides[name] = _coerce(name, value)

    return replace(config, **overrides)
