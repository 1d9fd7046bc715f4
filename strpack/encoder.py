#!/usr/bin/env python3
"""
String map encoder.

Turns a catalog (locale -> string key -> text) into one compact stream.
The encoding is stateful and takes roughly this form:

    ( DECLARE_LOCALE locale )*
    for each string key:
        ( POP | PUSH* token )*
        BEGIN_VALUE
        for each locale that needs a value (the fallback, or a differing value):
            ( SWITCH_LOCALE locale )?
            ( ADD_VALUE text | REPEAT_VALUE )
        END_VALUE

String keys are rebuilt by the decoder from the joined token stack, so
consecutive sorted keys only pay for the part that differs. Values equal to
the fallback value are left out and filled back in at END_VALUE; equal
non-fallback values are written once and repeated.
"""

import logging
import unicodedata
from dataclasses import dataclass, field
from typing import Optional

from .catalog import (
    FALLBACK_LOCALE,
    Catalog,
    candidate_locales,
    common_prefix_length,
    sorted_keys,
    sorted_locales,
)
from .decoder import CatalogDecoder
from .errors import EncodingMismatchError, MissingFallbackLocaleError
from .opcodes import CHAR_LTR, CHAR_POP, CHAR_RTL, Opcode, escape_text

logger = logging.getLogger(__name__)


@dataclass
class _EncoderState:
    """Working state of a single encode call."""
    stack: list[str] = field(default_factory=list)
    current_locale: Optional[str] = None
    current_value: Optional[str] = None
    output: list[str] = field(default_factory=list)
    last_was_pop: bool = False

    def prefix(self) -> str:
        return "".join(self.stack)

    def emit(self, opcode: Opcode, operand: Optional[str] = None) -> None:
        if operand is None:
            self.output.append(opcode.char)
        else:
            self.output.append(opcode.char + escape_text(operand))
        self.last_was_pop = False

    def push(self, token: str) -> None:
        """Push a token, merging it with a directly preceding POP."""
        fused = self.last_was_pop
        if fused:
            self.output.pop()

        self.stack.append(token)

        if token.endswith("/"):
            opcode = Opcode.POP_PUSH_SLASH if fused else Opcode.PUSH_SLASH
            token = token[:-1]
        elif token.endswith("."):
            opcode = Opcode.POP_PUSH_DOT if fused else Opcode.PUSH_DOT
            token = token[:-1]
        else:
            opcode = Opcode.POP_PUSH if fused else Opcode.PUSH

        self.emit(opcode, token)

    def pop(self) -> None:
        self.stack.pop()
        self.output.append(Opcode.POP.char)
        self.last_was_pop = True


class CatalogEncoder:
    """Encode catalogs to the compact string map stream."""

    def __init__(
        self,
        fallback_locale: str = FALLBACK_LOCALE,
        verify: bool = False,
        normalization: Optional[str] = None,
    ):
        """
        Initialize encoder.

        Args:
            fallback_locale: Locale that every key must have; other locales
                fall back to it for omitted values
            verify: Decode the output again and compare it with the input
            normalization: Unicode normalization form applied to values
                (e.g. "NFC"), or None to keep text as given
        """
        self.fallback_locale = fallback_locale
        self.verify = verify
        self.normalization = normalization

    def encode(self, catalog: Catalog) -> str:
        """
        Encode a catalog.

        Args:
            catalog: Map of locale -> string key -> text

        Returns:
            Encoded stream

        Raises:
            MissingFallbackLocaleError: If the fallback locale or one of its
                values is missing
            EncodingMismatchError: If verification is on and fails
        """
        if self.normalization:
            catalog = self._normalize(catalog)

        locales = sorted_locales(catalog)
        keys = sorted_keys(catalog)
        self._check_fallback(catalog, locales, keys)

        state = _EncoderState()

        for locale in locales:
            state.emit(Opcode.DECLARE_LOCALE, locale)

        for i, key in enumerate(keys):
            next_key = keys[i + 1] if i + 1 < len(keys) else None
            self._encode_key(state, key, next_key)
            self._encode_values(state, catalog, key, locales)

        stream = "".join(state.output)
        logger.debug(
            "Encoded %d locales and %d keys into %d scalars",
            len(locales), len(keys), len(stream),
        )

        if self.verify:
            self._verify(catalog, stream)

        return stream

    def _check_fallback(self, catalog: Catalog, locales: list[str], keys: list[str]) -> None:
        if not locales:
            return
        if self.fallback_locale not in locales:
            raise MissingFallbackLocaleError(self.fallback_locale)
        fallback = catalog[self.fallback_locale]
        for key in keys:
            if key not in fallback:
                raise MissingFallbackLocaleError(self.fallback_locale, key)

    def _encode_key(self, state: _EncoderState, key: str, next_key: Optional[str]) -> None:
        """Move the token stack from the previous key to this one."""
        while not key.startswith(state.prefix()):
            state.pop()

        # Whittled down as tokens get pushed
        remainder = key[len(state.prefix()):]

        # Namespace, like "FRICTION/"
        if "/" in remainder:
            token = remainder.split("/", 1)[0] + "/"
            state.push(token)
            remainder = remainder[len(token):]

        while "." in remainder:
            token = remainder.split(".", 1)[0] + "."
            state.push(token)
            remainder = remainder[len(token):]

        # Share a non-trivial prefix with the next key ("label" / "labelShort")
        if next_key is not None:
            match = common_prefix_length(remainder, next_key[len(state.prefix()):])
            if match > 1:
                token = remainder[:match]
                state.push(token)
                remainder = remainder[len(token):]

        if remainder:
            state.push(remainder)

    def _encode_values(
        self,
        state: _EncoderState,
        catalog: Catalog,
        key: str,
        locales: list[str],
    ) -> None:
        state.emit(Opcode.BEGIN_VALUE)

        for locale, value in candidate_locales(catalog, key, locales, self.fallback_locale):
            if locale != state.current_locale:
                state.current_locale = locale
                state.emit(Opcode.SWITCH_LOCALE, locale)

            if value == state.current_value:
                state.emit(Opcode.REPEAT_VALUE)
            else:
                state.current_value = value
                self._add_value(state, value)

        state.emit(Opcode.END_VALUE)

    def _add_value(self, state: _EncoderState, value: str) -> None:
        """Write a value, storing LTR/RTL wrapped forms without the marks."""
        if len(value) >= 2 and value.endswith(CHAR_POP):
            if value.startswith(CHAR_LTR):
                state.emit(Opcode.ADD_VALUE_LTR, value[1:-1])
                return
            if value.startswith(CHAR_RTL):
                state.emit(Opcode.ADD_VALUE_RTL, value[1:-1])
                return
        state.emit(Opcode.ADD_VALUE, value)

    def _normalize(self, catalog: Catalog) -> Catalog:
        return {
            locale: None if strings is None else {
                key: unicodedata.normalize(self.normalization, value)
                for key, value in strings.items()
            }
            for locale, strings in catalog.items()
        }

    def _verify(self, catalog: Catalog, stream: str) -> None:
        """Double-check that the stream decodes to the input."""
        decoded = CatalogDecoder(fallback_locale=self.fallback_locale).decode(stream)
        for locale, strings in catalog.items():
            if strings is None:
                continue
            for key, value in strings.items():
                if decoded.get(locale, {}).get(key) != value:
                    raise EncodingMismatchError(locale, key)


def encode_catalog(catalog: Catalog, **kwargs) -> str:
    """Encode a catalog with a one-off CatalogEncoder."""
    return CatalogEncoder(**kwargs).encode(catalog)
