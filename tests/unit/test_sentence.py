import math

import pytest

from barometer_service.outputs.sentence import checksum, encode, format_value


def _split(line: bytes):
    text = line.decode("ascii")
    assert text.startswith("$")
    assert text.endswith("\r\n")
    payload, _, cc = text[1:-2].partition("*")
    return payload, cc


def test_encode_known_value_is_pinned():
    assert encode(1013.25) == b"$PBARO,1013.25,hPa*3D\r\n"


def test_encode_zero_pads_two_decimals():
    payload, cc = _split(encode(0.0))
    assert payload == "PBARO,0.00,hPa"
    assert cc == "09"


def test_encode_rounds_to_two_decimals():
    payload, _ = _split(encode(850.5))
    assert payload == "PBARO,850.50,hPa"
    assert encode(850.5) == b"$PBARO,850.50,hPa*01\r\n"


def test_encode_negative_value():
    assert encode(-12.345678) == b"$PBARO,-12.35,hPa*11\r\n"


@pytest.mark.parametrize("value", [0.0, 1.0, 999.99, 1013.25, 1084.7, -0.01, 12345.678, 1e-9])
def test_checksum_matches_xor_of_payload_bytes(value):
    line = encode(value)
    text = line.decode("ascii")

    assert text.count("*") == 1
    payload, cc = _split(line)

    expected = 0
    for byte in payload.encode("ascii"):
        expected ^= byte
    assert cc == "%02X" % expected
    assert cc == cc.upper()
    assert len(cc) == 2


def test_checksum_of_empty_payload_is_zero():
    assert checksum("") == 0


def test_checksum_fits_in_one_byte():
    assert 0 <= checksum("PBARO,1013.25,hPa") <= 0xFF
    assert checksum("PBARO,1013.25,hPa") == 0x3D


def test_encode_returns_bytes():
    assert isinstance(encode(1000.0), bytes)


def test_encode_nan_uses_same_formatting_rule():
    assert encode(math.nan) == b"$PBARO,nan,hPa*76\r\n"


def test_encode_infinity_uses_same_formatting_rule():
    assert encode(math.inf) == b"$PBARO,inf,hPa*76\r\n"
    assert encode(-math.inf) == b"$PBARO,-inf,hPa*5B\r\n"


@pytest.mark.parametrize("value, expected", [
    (1013.125, b"$PBARO,1013.13,hPa*38\r\n"),
    (0.125, b"$PBARO,0.13,hPa*0B\r\n"),
    (2.675, b"$PBARO,2.68,hPa*05\r\n"),
    (-1013.125, b"$PBARO,-1013.13,hPa*15\r\n"),
])
def test_encode_rounds_ties_half_up(value, expected):
    assert encode(value) == expected


@pytest.mark.parametrize("value, text", [
    (1e-9, "0.00"),
    (1e-7, "0.00"),
    (1e22, "10000000000000000000000.00"),
    (-0.001, "-0.00"),
])
def test_format_value_never_uses_exponent_notation(value, text):
    assert format_value(value) == text


def test_format_value_handles_largest_float():
    text = format_value(1.7976931348623157e308)
    assert text.endswith(".00")
    assert "E" not in text and "e" not in text
