#!/usr/bin/env python3
"""
Base classes for catalog file handlers.

FormatHandler is the abstract base class that all format-specific handlers
must implement. A handler turns file content into a catalog
(locale -> string key -> text) and dumps a catalog back to file content.
"""

import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Iterable, Optional

from ..catalog import Catalog, flatten_strings, nest_strings

# "fr=strings/fr.json" assigns a single-locale file to a locale
LOCALE_SOURCE_PATTERN = re.compile(r"^([A-Za-z]{2,3}(?:[_-][A-Za-z0-9]+)*)=(.+)$")


class FormatHandler(ABC):
    """
    Abstract base class for format-specific handlers.

    Files hold either a whole catalog keyed by locale:

        {"en": {"title": "Hello"}, "fr": {"title": "Bonjour"}}

    or, when parsed for a given locale, that locale's strings only. Strings
    may be nested; nesting is flattened to dotted keys.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name."""
        pass

    @property
    @abstractmethod
    def file_extensions(self) -> list[str]:
        """List of file extensions this handler supports (without dot)."""
        pass

    @abstractmethod
    def load(self, content: str) -> Any:
        """Parse raw content into plain Python data."""
        pass

    @abstractmethod
    def serialize(self, data: dict) -> str:
        """Render plain Python data as file content."""
        pass

    def parse(self, content: str, locale: Optional[str] = None) -> Catalog:
        """
        Parse file content into a catalog.

        Args:
            content: Raw file content as string
            locale: Locale of a single-locale file, or None if the file
                holds a whole catalog keyed by locale

        Returns:
            Catalog
        """
        data = self.load(content)
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"{self.name.upper()} root must be a mapping")

        if locale is not None:
            return {locale: flatten_strings(data)}

        catalog = {}
        for file_locale, tree in data.items():
            if not isinstance(tree, dict):
                raise ValueError(f"Locale '{file_locale}' must map to strings, got {type(tree).__name__}")
            catalog[str(file_locale)] = flatten_strings(tree)
        return catalog

    def dump(self, catalog: Catalog, nested: bool = True) -> str:
        """
        Render a catalog as file content.

        Args:
            catalog: Catalog to write
            nested: Rebuild nesting from dotted keys (flat keys otherwise)

        Returns:
            File content as string
        """
        data = {}
        for locale in sorted(catalog):
            strings = catalog[locale] or {}
            data[locale] = nest_strings(strings) if nested else dict(sorted(strings.items()))
        return self.serialize(data)

    def validate_content(self, content: str) -> list[str]:
        """
        Validate that content is properly formatted for this handler.

        Args:
            content: Raw file content

        Returns:
            List of validation error messages (empty if valid)
        """
        try:
            data = self.load(content)
        except ValueError as e:
            return [str(e)]
        if data is not None and not isinstance(data, dict):
            return [f"{self.name.upper()} root must be a mapping"]
        return []


class FormatRegistry:
    """Registry of available format handlers."""

    _handlers: dict[str, type[FormatHandler]] = {}
    _extension_map: dict[str, str] = {}  # extension -> handler name

    @classmethod
    def register(cls, handler_class: type[FormatHandler]) -> None:
        """Register a format handler class."""
        # Create instance to get properties
        handler = handler_class()
        cls._handlers[handler.name.lower()] = handler_class
        for ext in handler.file_extensions:
            cls._extension_map[ext.lower()] = handler.name.lower()

    @classmethod
    def get_handler(cls, name: str) -> FormatHandler:
        """Get handler instance by name."""
        name_lower = name.lower()
        if name_lower not in cls._handlers:
            available = ', '.join(cls._handlers.keys())
            raise ValueError(f"Unknown format: {name}. Available: {available}")
        return cls._handlers[name_lower]()

    @classmethod
    def get_handler_for_extension(cls, extension: str) -> FormatHandler:
        """Get handler instance by file extension."""
        ext = extension.lower().lstrip('.')
        if ext not in cls._extension_map:
            available = ', '.join(cls._extension_map.keys())
            raise ValueError(f"Unknown extension: .{ext}. Supported: {available}")
        return cls.get_handler(cls._extension_map[ext])

    @classmethod
    def detect_format(cls, filepath: str) -> FormatHandler:
        """Auto-detect format from a file path."""
        return cls.get_handler_for_extension(Path(filepath).suffix)

    @classmethod
    def list_formats(cls) -> list[dict[str, Any]]:
        """List all registered formats with their extensions."""
        result = []
        for name, handler_class in cls._handlers.items():
            handler = handler_class()
            result.append({
                'name': handler.name,
                'extensions': handler.file_extensions,
            })
        return result


def parse_source(source: str) -> tuple[Optional[str], str]:
    """Split a "locale=path" source into (locale, path); plain paths get no locale."""
    match = LOCALE_SOURCE_PATTERN.match(source)
    if match and not Path(source).exists():
        return match.group(1), match.group(2)
    return None, source


def load_catalog(sources: Iterable[str], format_type: Optional[str] = None) -> Catalog:
    """
    Load and merge catalog files.

    Args:
        sources: File paths (whole catalogs) or "locale=path" (one locale)
        format_type: Format name, auto-detected per file if not provided

    Returns:
        Merged catalog; later sources win on duplicate keys
    """
    catalog: Catalog = {}

    for source in sources:
        locale, path = parse_source(source)
        handler = FormatRegistry.get_handler(format_type) if format_type else FormatRegistry.detect_format(path)
        content = Path(path).read_text(encoding="utf-8")

        for file_locale, strings in handler.parse(content, locale).items():
            catalog.setdefault(file_locale, {}).update(strings)

    return catalog
