#!/usr/bin/env python3
"""
Tests for the string map decoder.

Tests verify:
1. tokenize splits streams into instructions with offsets
2. Omitted translations are backfilled from the fallback locale
3. Directional ops restore their embedding marks
4. Malformed streams raise MalformedStreamError with a position
5. A value block without a fallback value cannot be backfilled
"""

import pytest

from strpack.decoder import CatalogDecoder, Instruction, decode_catalog, tokenize
from strpack.errors import MalformedStreamError, MissingFallbackLocaleError
from strpack.opcodes import Opcode

EXAMPLE_STREAM = (
    "\x0fen\x0ffr"
    "\x03a\x01b\x09\x08fr\x0bBonjour\x08en\x0bHello\x0a"
    "\x05c\x09\x0bWorld\x0a"
)


@pytest.fixture
def decoder():
    return CatalogDecoder()


def test_tokenize_positions():
    """Test 1: Each instruction records the offset of its opcode."""
    instructions = list(tokenize("\x0fen\x01ab\x09\x0a"))
    assert instructions == [
        Instruction(Opcode.DECLARE_LOCALE, "en", 0),
        Instruction(Opcode.PUSH, "ab", 3),
        Instruction(Opcode.BEGIN_VALUE, None, 6),
        Instruction(Opcode.END_VALUE, None, 7),
    ]


def test_tokenize_escaped_operand():
    """Test 2: Escaped scalars stay inside the operand."""
    (instruction,) = tokenize("\x0ba\x10\nb")
    assert instruction.opcode == Opcode.ADD_VALUE
    assert instruction.operand == "a\nb"


def test_decode_example(decoder):
    """Test 3: The French gap is filled with the English value."""
    assert decoder.decode(EXAMPLE_STREAM) == {
        "en": {"a.b": "Hello", "a.c": "World"},
        "fr": {"a.b": "Bonjour", "a.c": "World"},
    }


def test_decode_empty_stream(decoder):
    """Test 4: The empty stream is the empty catalog."""
    assert decoder.decode("") == {}


def test_decode_declared_locales_only(decoder):
    """Test 5: Locales with no keys decode to empty dictionaries."""
    assert decoder.decode("\x0fen\x0ffr") == {"en": {}, "fr": {}}


def test_repeat_value(decoder):
    """Test 6: Repeat stores the current value for the current locale."""
    stream = "\x0fde\x0fen\x0fnl\x01k\x09\x08de\x0bHallo\x08nl\x0e\x08en\x0bHi\x0a"
    assert decoder.decode(stream) == {
        "de": {"k": "Hallo"},
        "en": {"k": "Hi"},
        "nl": {"k": "Hallo"},
    }


def test_repeat_across_keys(decoder):
    """Test 7: The current value survives the end of a value block."""
    stream = "\x0fen\x01a\x09\x08en\x0bX\x0a\x05b\x09\x0e\x0a"
    assert decoder.decode(stream) == {"en": {"a": "X", "b": "X"}}


def test_directional_values(decoder):
    """Test 8: LTR/RTL ops wrap the operand in embedding marks."""
    stream = "\x0far\x0fen\x01k\x09\x08en\x0cHola\x08ar\x0dSalam\x0a"
    assert decoder.decode(stream) == {
        "ar": {"k": "\u202bSalam\u202c"},
        "en": {"k": "\u202aHola\u202c"},
    }


def test_pop_restores_prefix(decoder):
    """Test 9: Pops unwind the key stack one token at a time."""
    stream = (
        "\x0fen"
        "\x02NS\x03a\x01b\x09\x08en\x0b1\x0a"
        "\x04\x01c\x09\x0b2\x0a"
        "\x04\x04\x06X\x01y\x09\x0b3\x0a"
    )
    assert decoder.decode(stream) == {
        "en": {"NS/a.b": "1", "NS/a.c": "2", "X/y": "3"},
    }


def test_custom_fallback_locale():
    """Test 10: Gaps are filled from the configured fallback."""
    stream = "\x0fde\x0fen\x01k\x09\x08de\x0bJa\x0a"
    assert decode_catalog(stream, fallback_locale="de") == {
        "de": {"k": "Ja"},
        "en": {"k": "Ja"},
    }


@pytest.mark.parametrize("stream, position", [
    ("\x11", 0),
    ("\x00", 0),
    ("\x10", 0),
    ("\x0fen\x01a\x09\x7f\x0a", 6),
])
def test_unrecognized_code(decoder, stream, position):
    """Test 11: Anything that is not an opcode where one is expected is rejected."""
    with pytest.raises(MalformedStreamError) as excinfo:
        decoder.decode(stream)
    assert excinfo.value.position == position


def test_dangling_escape(decoder):
    """Test 12: An escape at the end of the stream is rejected."""
    with pytest.raises(MalformedStreamError):
        decoder.decode("\x0fen\x10")


def test_stream_ends_inside_block(decoder):
    """Test 13: A value block must be ended."""
    with pytest.raises(MalformedStreamError, match="ends inside"):
        decoder.decode("\x0fen\x01a\x09\x08en\x0bHello")


def test_nested_begin(decoder):
    """Test 14: A block cannot begin inside another one."""
    with pytest.raises(MalformedStreamError, match="never ended"):
        decoder.decode("\x0fen\x01a\x09\x09")


def test_end_without_begin(decoder):
    """Test 15: END_VALUE needs an open block."""
    with pytest.raises(MalformedStreamError, match="never begun"):
        decoder.decode("\x0fen\x01a\x0a")


def test_value_before_locale_selected(decoder):
    """Test 16: A value needs a current locale."""
    with pytest.raises(MalformedStreamError, match="locale was selected"):
        decoder.decode("\x0fen\x01a\x09\x0bx\x0a")


def test_value_outside_block(decoder):
    """Test 17: A value needs an open block."""
    with pytest.raises(MalformedStreamError, match="outside"):
        decoder.decode("\x0fen\x08en\x0bx")


def test_switch_to_undeclared_locale(decoder):
    """Test 18: Only declared locales can be selected."""
    with pytest.raises(MalformedStreamError, match="undeclared locale 'fr'"):
        decoder.decode("\x0fen\x01a\x09\x08fr\x0bx\x0a")


def test_declare_after_keys(decoder):
    """Test 19: Locale declarations come before any key op."""
    with pytest.raises(MalformedStreamError, match="after string keys"):
        decoder.decode("\x0fen\x01a\x0ffr")


def test_declare_twice(decoder):
    """Test 20: A locale is declared once."""
    with pytest.raises(MalformedStreamError, match="twice"):
        decoder.decode("\x0fen\x0fen")


def test_pop_empty_stack(decoder):
    """Test 21: Pop needs a pushed token."""
    with pytest.raises(MalformedStreamError, match="empty key stack"):
        decoder.decode("\x04")
    with pytest.raises(MalformedStreamError, match="empty key stack"):
        decoder.decode("\x0fen\x05a")


def test_repeat_without_value(decoder):
    """Test 22: Repeat needs a previous value."""
    with pytest.raises(MalformedStreamError, match="no previous value"):
        decoder.decode("\x0fen\x01a\x09\x08en\x0e\x0a")


def test_missing_fallback_value(decoder):
    """Test 23: A gap with no fallback value to copy is an error."""
    with pytest.raises(MissingFallbackLocaleError) as excinfo:
        decoder.decode("\x0fen\x0ffr\x01a\x09\x08fr\x0bSalut\x0a")
    assert excinfo.value.locale == "en"
    assert excinfo.value.key == "a"


def test_error_message_has_position(decoder):
    """Test 24: Malformed stream errors point at the offending scalar."""
    with pytest.raises(MalformedStreamError) as excinfo:
        decoder.decode("\x0fen\x01a\x0ffr")
    assert excinfo.value.position == 5
    assert "at scalar 5" in str(excinfo.value)
