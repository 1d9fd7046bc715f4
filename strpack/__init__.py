"""
strpack - compact, lossless codec for multilingual string catalogs

Packs a catalog (locale -> string key -> text) into one compact stream,
sharing key prefixes between sorted keys and omitting translations that
match the fallback locale, and unpacks it to the exact original structure.

Quick start:
    from strpack import encode_catalog, decode_catalog

    stream = encode_catalog({"en": {"a.b": "Hello"}, "fr": {"a.b": "Bonjour"}})
    catalog = decode_catalog(stream)
"""

__version__ = "1.0.0"

from .catalog import FALLBACK_LOCALE, ValidationError, backfill_catalog, validate_catalog
from .decoder import CatalogDecoder, Instruction, decode_catalog, tokenize
from .encoder import CatalogEncoder, encode_catalog
from .errors import (
    EncodingMismatchError,
    MalformedStreamError,
    MissingFallbackLocaleError,
    StrpackError,
)
from .opcodes import Opcode

__all__ = [
    "FALLBACK_LOCALE",
    "CatalogEncoder",
    "CatalogDecoder",
    "Instruction",
    "Opcode",
    "encode_catalog",
    "decode_catalog",
    "tokenize",
    "backfill_catalog",
    "validate_catalog",
    "ValidationError",
    "StrpackError",
    "MalformedStreamError",
    "MissingFallbackLocaleError",
    "EncodingMismatchError",
]
