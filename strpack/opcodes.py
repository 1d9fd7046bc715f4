#!/usr/bin/env python3
"""
Opcode and escape vocabulary shared by the encoder and the decoder.

The stream is a plain sequence of Unicode scalars. Ordinals 1-16 are reserved:

    1  PUSH              push `token`
    2  PUSH_SLASH        push `token/`
    3  PUSH_DOT          push `token.`
    4  POP               pop one token
    5  POP_PUSH          pop, then push `token`
    6  POP_PUSH_SLASH    pop, then push `token/`
    7  POP_PUSH_DOT      pop, then push `token.`
    8  SWITCH_LOCALE     operand: locale
    9  BEGIN_VALUE       start the value block of the current key
    10 END_VALUE         end the block, backfilling absent locales
    11 ADD_VALUE         operand: text
    12 ADD_VALUE_LTR     operand: text, wrapped as LTR + text + POP
    13 ADD_VALUE_RTL     operand: text, wrapped as RTL + text + POP
    14 REPEAT_VALUE      reuse the previous value
    15 DECLARE_LOCALE    operand: locale
    16 ESCAPE            the next scalar is literal text

Text operands run until the next unescaped scalar <= 16 or the end of the
stream.
"""

from enum import IntEnum

from .errors import MalformedStreamError


class Opcode(IntEnum):
    PUSH = 1
    PUSH_SLASH = 2
    PUSH_DOT = 3
    POP = 4
    POP_PUSH = 5
    POP_PUSH_SLASH = 6
    POP_PUSH_DOT = 7
    SWITCH_LOCALE = 8
    BEGIN_VALUE = 9
    END_VALUE = 10
    ADD_VALUE = 11
    ADD_VALUE_LTR = 12
    ADD_VALUE_RTL = 13
    REPEAT_VALUE = 14
    DECLARE_LOCALE = 15
    ESCAPE = 16

    @property
    def char(self) -> str:
        return chr(self.value)


# Highest reserved ordinal; every scalar at or below it is escaped in text
MAX_RESERVED = int(Opcode.ESCAPE)

ESCAPE_CHAR = Opcode.ESCAPE.char

# Directional embedding marks
CHAR_LTR = "\u202a"
CHAR_RTL = "\u202b"
CHAR_POP = "\u202c"

# Ops that take a text operand
TEXT_OPERAND_OPCODES = frozenset({
    Opcode.PUSH,
    Opcode.PUSH_SLASH,
    Opcode.PUSH_DOT,
    Opcode.POP_PUSH,
    Opcode.POP_PUSH_SLASH,
    Opcode.POP_PUSH_DOT,
    Opcode.SWITCH_LOCALE,
    Opcode.ADD_VALUE,
    Opcode.ADD_VALUE_LTR,
    Opcode.ADD_VALUE_RTL,
    Opcode.DECLARE_LOCALE,
})


def is_reserved(char: str) -> bool:
    """Whether a scalar has to be escaped inside a text run."""
    return ord(char) <= MAX_RESERVED


def escape_text(text: str) -> str:
    """Escape every reserved scalar in text so it can be used as an operand."""
    if not any(is_reserved(char) for char in text):
        return text
    return "".join(
        ESCAPE_CHAR + char if is_reserved(char) else char
        for char in text
    )


def read_text_run(stream: str, index: int) -> tuple[str, int]:
    """
    Read one text operand starting at index.

    Args:
        stream: Encoded stream
        index: Position of the first scalar of the run

    Returns:
        Tuple of (unescaped text, index of the scalar that ended the run)

    Raises:
        MalformedStreamError: If the stream ends right after an ESCAPE
    """
    chars = []
    length = len(stream)

    while index < length:
        char = stream[index]
        code = ord(char)
        if code > MAX_RESERVED:
            chars.append(char)
            index += 1
        elif code == MAX_RESERVED:
            if index + 1 >= length:
                raise MalformedStreamError("Escape at end of stream", index)
            chars.append(stream[index + 1])
            index += 2
        else:
            break

    return "".join(chars), index
