"""Display 32-bit values as hex, signed and unsigned integers."""

from __future__ import annotations

import string
import sys
from itertools import takewhile
from typing import Optional

_PROG = "ishow"
_C_SPACE = " \t\n\v\f\r"
_DIGITS = {8: "01234567", 10: string.digits, 16: string.hexdigits}


def _is_float_text(text: str) -> bool:
    is_hex = False
    for ch in text:
        if ch in "xX":
            is_hex = True
        elif ch in "eE" and not is_hex:
            return True
        elif ch == ".":
            return True
    return False


def _strtoll_prefix(text: str) -> int:
    s = text.lstrip(_C_SPACE)
    sign = 1
    if s.startswith(("+", "-")):
        sign = -1 if s[0] == "-" else 1
        s = s[1:]
    if s[:2] in ("0x", "0X") and len(s) > 2 and s[2] in string.hexdigits:
        base, s = 16, s[2:]
    elif s.startswith("0"):
        base = 8
    else:
        base = 10
    digits = "".join(takewhile(lambda ch: ch in _DIGITS[base], s))
    return sign * int(digits, base) if digits else 0


def parse_int_val(text: str) -> int:
    """Parse a hex or decimal value into an unsigned 32-bit pattern.

    Raises ValueError for floating-point text or values outside 32 bits.
    """
    if _is_float_text(text):
        raise ValueError(f"{text!r} is not an integer")
    value = _strtoll_prefix(text)
    if not -(2**31) <= value < 2**32:
        raise ValueError(f"{text!r} does not fit in 32 bits")
    return value & 0xFFFFFFFF


def show_int(u: int) -> str:
    """Describe the pattern as hex, signed and unsigned values."""
    u &= 0xFFFFFFFF
    signed = u - (1 << 32) if u & 0x80000000 else u
    return f"Hex = 0x{u:08x},\tSigned = {signed},\tUnsigned = {u}"


def _usage() -> str:
    return f"Usage: {_PROG} val1 val2 ...\nValues may be given in hex or decimal"


def main(argv: Optional[list[str]] = None) -> int:
    """Show each value given on the command line."""
    args = sys.argv[1:] if argv is None else argv
    if not args:
        print(_usage())
        return 0
    for text in args:
        try:
            print(show_int(parse_int_val(text)))
        except ValueError:
            print(f"Cannot convert '{text}' to 32-bit number")
    return 0


if __name__ == "__main__":
    sys.exit(main())