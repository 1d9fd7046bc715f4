#!/usr/bin/env python3
"""
Exceptions raised by the string map codec.

All of them derive from ValueError, so callers that already treat bad input
as a ValueError keep working.
"""

from typing import Optional


class StrpackError(ValueError):
    """Base class for codec errors."""


class MalformedStreamError(StrpackError):
    """The encoded stream cannot be decoded."""

    def __init__(self, message: str, position: Optional[int] = None):
        if position is not None:
            message = f"{message} (at scalar {position})"
        super().__init__(message)
        self.position = position


class MissingFallbackLocaleError(StrpackError):
    """A value for the fallback locale is required but absent."""

    def __init__(self, locale: str, key: Optional[str] = None):
        if key is None:
            message = f"Catalog has no entries for fallback locale '{locale}'"
        else:
            message = f"Fallback locale '{locale}' has no value for key '{key}'"
        super().__init__(message)
        self.locale = locale
        self.key = key


class EncodingMismatchError(StrpackError):
    """Decoding the freshly encoded stream did not reproduce the catalog."""

    def __init__(self, locale: str, key: str):
        super().__init__(f"String map encoding failed, mismatch at {locale} {key}")
        self.locale = locale
        self.key = key
