r"""
sentence.py

Encodes a pressure reading into a PBARO sentence:

    $PBARO,<value>,hPa*<CC>\r\n

<value> always has two digits after a '.' separator and <CC> is the XOR of
every payload byte between '$' and '*', as two uppercase hex digits. Peers
parse this byte for byte, so the output must never change for a given input.

Usage:
    line = encode(1013.25)   # b"$PBARO,1013.25,hPa*3D\r\n"
"""

import math
from decimal import ROUND_HALF_UP, Decimal, localcontext

SENTENCE_ID = "PBARO"
UNITS = "hPa"
HUNDREDTHS = Decimal("0.01")


def checksum(payload: str) -> int:
    """
    Return the single-byte XOR of every character code in payload.
    """
    result = 0
    for char in payload:
        result ^= ord(char)
    return result & 0xFF


def format_value(value: float) -> str:
    """Render value with exactly two digits after the decimal point."""
    if not math.isfinite(value):
        return "%.2f" % value
    # enough precision for every finite float at two decimals
    with localcontext() as ctx:
        ctx.prec = 400
        rounded = Decimal(repr(float(value))).quantize(HUNDREDTHS, rounding=ROUND_HALF_UP)
    return format(rounded, "f")


def encode(value: float) -> bytes:
    """
    Encode a pressure value (hPa) into a framed, checksummed sentence.

    Finite values round half up on the shortest decimal repr, so 1013.125
    becomes "1013.13". Non-finite values use %-formatting and render as
    "nan", "inf" or "-inf". Neither path depends on the locale.
    """
    payload = "%s,%s,%s" % (SENTENCE_ID, format_value(value), UNITS)
    return ("$%s*%02X\r\n" % (payload, checksum(payload))).encode("ascii")
