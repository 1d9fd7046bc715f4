#!/usr/bin/env python3
"""
Format handlers for catalog files.

Supported formats:
- JSON: whole catalogs keyed by locale, or nested per-locale string files
- YAML: Rails/Symfony i18n YAML
"""

from .base import (
    FormatHandler,
    FormatRegistry,
    load_catalog,
    parse_source,
)
from .json_handler import JsonHandler
from .yaml_handler import YamlHandler

# Register handlers (order matters for extension conflicts)
FormatRegistry.register(JsonHandler)
FormatRegistry.register(YamlHandler)

__all__ = [
    'FormatHandler',
    'FormatRegistry',
    'JsonHandler',
    'YamlHandler',
    'load_catalog',
    'parse_source',
]
