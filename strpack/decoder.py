#!/usr/bin/env python3
"""
String map decoder.

Reads the compact stream produced by CatalogEncoder back into a catalog
(locale -> string key -> text). Decoding is a single left-to-right scan:
`tokenize` splits the stream into instructions and CatalogDecoder applies
them to a fresh working state.

Locales without an explicit value for a key get the fallback locale's value
when the key's value block ends.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterator, NamedTuple, Optional

from .catalog import FALLBACK_LOCALE, Catalog
from .errors import MalformedStreamError, MissingFallbackLocaleError
from .opcodes import (
    CHAR_LTR,
    CHAR_POP,
    CHAR_RTL,
    MAX_RESERVED,
    TEXT_OPERAND_OPCODES,
    Opcode,
    read_text_run,
)

logger = logging.getLogger(__name__)


class Instruction(NamedTuple):
    """One decoded op: opcode, its text operand (if any), and its offset."""
    opcode: Opcode
    operand: Optional[str]
    position: int


def tokenize(stream: str) -> Iterator[Instruction]:
    """
    Split a stream into instructions.

    Args:
        stream: Encoded stream

    Yields:
        Instruction for each op, in stream order

    Raises:
        MalformedStreamError: On an unrecognized opcode or a dangling escape
    """
    index = 0
    length = len(stream)

    while index < length:
        position = index
        code = ord(stream[index])
        index += 1

        if code < 1 or code >= MAX_RESERVED:
            raise MalformedStreamError(f"Unrecognized code: {stream[position]!r}", position)

        opcode = Opcode(code)
        operand = None
        if opcode in TEXT_OPERAND_OPCODES:
            operand, index = read_text_run(stream, index)

        yield Instruction(opcode, operand, position)


@dataclass
class _DecoderState:
    """Working state of a single decode call."""
    catalog: Catalog = field(default_factory=dict)
    locales: list[str] = field(default_factory=list)
    stack: list[str] = field(default_factory=list)
    current_locale: Optional[str] = None
    current_value: Optional[str] = None
    fallback_value: Optional[str] = None
    seen: set[str] = field(default_factory=set)
    key: Optional[str] = None
    keys_started: bool = False


class CatalogDecoder:
    """Decode the compact string map stream back to a catalog."""

    _PUSH_SUFFIXES = {
        Opcode.PUSH: "",
        Opcode.PUSH_SLASH: "/",
        Opcode.PUSH_DOT: ".",
        Opcode.POP_PUSH: "",
        Opcode.POP_PUSH_SLASH: "/",
        Opcode.POP_PUSH_DOT: ".",
    }

    _POP_FIRST = frozenset({Opcode.POP_PUSH, Opcode.POP_PUSH_SLASH, Opcode.POP_PUSH_DOT})

    def __init__(self, fallback_locale: str = FALLBACK_LOCALE):
        """
        Initialize decoder.

        Args:
            fallback_locale: Locale whose value fills in omitted translations
        """
        self.fallback_locale = fallback_locale
        self._handlers = {
            Opcode.PUSH: self._push,
            Opcode.PUSH_SLASH: self._push,
            Opcode.PUSH_DOT: self._push,
            Opcode.POP: self._pop,
            Opcode.POP_PUSH: self._push,
            Opcode.POP_PUSH_SLASH: self._push,
            Opcode.POP_PUSH_DOT: self._push,
            Opcode.SWITCH_LOCALE: self._switch_locale,
            Opcode.BEGIN_VALUE: self._begin_value,
            Opcode.END_VALUE: self._end_value,
            Opcode.ADD_VALUE: self._add_value,
            Opcode.ADD_VALUE_LTR: self._add_value,
            Opcode.ADD_VALUE_RTL: self._add_value,
            Opcode.REPEAT_VALUE: self._repeat_value,
            Opcode.DECLARE_LOCALE: self._declare_locale,
        }

    def decode(self, stream: str) -> Catalog:
        """
        Decode a stream.

        Args:
            stream: Encoded stream

        Returns:
            Map of locale -> string key -> text

        Raises:
            MalformedStreamError: If the stream is not a valid encoding
            MissingFallbackLocaleError: If a value has to be backfilled but
                the fallback locale gave none for the key
        """
        state = _DecoderState()

        for instruction in tokenize(stream):
            self._handlers[instruction.opcode](state, instruction)

        if state.key is not None:
            raise MalformedStreamError(f"Stream ends inside the value block of '{state.key}'", len(stream))

        logger.debug(
            "Decoded %d scalars into %d locales",
            len(stream), len(state.locales),
        )
        return state.catalog

    def _declare_locale(self, state: _DecoderState, instruction: Instruction) -> None:
        locale = instruction.operand
        if state.keys_started:
            raise MalformedStreamError(f"Locale '{locale}' declared after string keys", instruction.position)
        if locale in state.catalog:
            raise MalformedStreamError(f"Locale '{locale}' declared twice", instruction.position)
        state.catalog[locale] = {}
        state.locales.append(locale)

    def _push(self, state: _DecoderState, instruction: Instruction) -> None:
        if instruction.opcode in self._POP_FIRST:
            self._pop(state, instruction)
        state.keys_started = True
        state.stack.append(instruction.operand + self._PUSH_SUFFIXES[instruction.opcode])

    def _pop(self, state: _DecoderState, instruction: Instruction) -> None:
        if not state.stack:
            raise MalformedStreamError("Pop from an empty key stack", instruction.position)
        state.keys_started = True
        state.stack.pop()

    def _switch_locale(self, state: _DecoderState, instruction: Instruction) -> None:
        locale = instruction.operand
        if locale not in state.catalog:
            raise MalformedStreamError(f"Switch to undeclared locale '{locale}'", instruction.position)
        state.current_locale = locale

    def _begin_value(self, state: _DecoderState, instruction: Instruction) -> None:
        if state.key is not None:
            raise MalformedStreamError(f"Value block of '{state.key}' was never ended", instruction.position)
        state.keys_started = True
        state.seen.clear()
        state.fallback_value = None
        state.key = "".join(state.stack)

    def _end_value(self, state: _DecoderState, instruction: Instruction) -> None:
        if state.key is None:
            raise MalformedStreamError("End of a value block that was never begun", instruction.position)

        for locale in state.locales:
            if locale not in state.seen:
                if state.fallback_value is None:
                    raise MissingFallbackLocaleError(self.fallback_locale, state.key)
                state.catalog[locale][state.key] = state.fallback_value

        state.key = None

    def _add_value(self, state: _DecoderState, instruction: Instruction) -> None:
        value = instruction.operand
        if instruction.opcode == Opcode.ADD_VALUE_LTR:
            value = f"{CHAR_LTR}{value}{CHAR_POP}"
        elif instruction.opcode == Opcode.ADD_VALUE_RTL:
            value = f"{CHAR_RTL}{value}{CHAR_POP}"
        self._store(state, instruction, value)

    def _repeat_value(self, state: _DecoderState, instruction: Instruction) -> None:
        if state.current_value is None:
            raise MalformedStreamError("Repeat with no previous value", instruction.position)
        self._store(state, instruction, state.current_value)

    def _store(self, state: _DecoderState, instruction: Instruction, value: str) -> None:
        if state.key is None:
            raise MalformedStreamError("Value outside of a value block", instruction.position)
        if state.current_locale is None:
            raise MalformedStreamError("Value before any locale was selected", instruction.position)

        state.current_value = value
        state.catalog[state.current_locale][state.key] = value
        if state.current_locale == self.fallback_locale:
            state.fallback_value = value
        state.seen.add(state.current_locale)


def decode_catalog(stream: str, **kwargs) -> Catalog:
    """Decode a stream with a one-off CatalogDecoder."""
    return CatalogDecoder(**kwargs).decode(stream)
