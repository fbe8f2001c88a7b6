import io

import pytest

from xvtools.printf import fprintf, xformat


def test_plain_text_passes_through():
    assert xformat("hello\n") == "hello\n"


@pytest.mark.parametrize("n", [0, 7, -5, 123456, -(2**31)])
def test_decimal_round_trip(n):
    assert int(xformat("%d", n)) == n


def test_decimal_wraps_to_32_bits():
    assert int(xformat("%d", 2**31)) == -(2**31)


def test_long_takes_low_32_bits_unsigned():
    assert xformat("%l", 2**32 + 7) == xformat("%l", 7)
    assert int(xformat("%l", -1)) == 2**32 - 1


@pytest.mark.parametrize("n", [0, 1, 255, 0xDEAD, 2**31 - 1])
def test_hex_round_trip(n):
    text = xformat("%x", n)
    assert text == text.upper()
    assert int(text, 16) == n


def test_hex_negative():
    assert xformat("%x", -1) == "FFFFFFFF"


def test_pointer_is_fixed_width():
    assert xformat("%p", 0) == "0x0000000000000000"
    text = xformat("%p", 0xABC)
    assert len(text) == 18
    assert int(text, 16) == 0xABC


def test_string_and_null():
    assert xformat("[%s]", "abc") == "[abc]"
    assert xformat("%s", None) == "(null)"


def test_char():
    assert xformat("%c%c", ord("o"), ord("k")) == "ok"


def test_percent_and_unknown():
    assert xformat("100%%") == "100%"
    assert xformat("%z") == "%z"


def test_trailing_percent_is_dropped():
    assert xformat("abc%") == "abc"


def test_missing_argument():
    with pytest.raises(TypeError):
        xformat("%d %d", 1)


def test_mixed_conversions():
    assert xformat("%s=%d", "x", 3) == "x=3"


def test_fprintf_writes_to_stream():
    stream = io.StringIO()
    fprintf(stream, "%s %d\n", "n", 42)
    fprintf(stream, "done")
    assert stream.getvalue() == xformat("%s %d\n", "n", 42) + "done"