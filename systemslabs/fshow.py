"""Display the structure of single-precision floating-point numbers."""

from __future__ import annotations

import math
import sys
from typing import Optional

from systemslabs.ishow import _is_float_text, parse_int_val
from systemslabs.reference import f2u, u2f

FLOAT_SIZE = 32
FRAC_SIZE = 23
EXP_SIZE = 8
BIAS = (1 << (EXP_SIZE - 1)) - 1
FRAC_MASK = (1 << FRAC_SIZE) - 1
EXP_MASK = (1 << EXP_SIZE) - 1

_PROG = "fshow"
_C_SPACE = " \t\n\v\f\r"


def _parse_float_bits(text: str) -> int:
    body = text.lstrip(_C_SPACE)
    if not body or body != body.rstrip() or "_" in body:
        raise ValueError(f"invalid floating point number {text!r}")
    try:
        value = float(body)
    except ValueError:
        if "x" not in body.lower():
            raise ValueError(f"invalid floating point number {text!r}") from None
        try:
            value = float.fromhex(body)
        except OverflowError:
            value = -math.inf if body.startswith("-") else math.inf
        except ValueError:
            raise ValueError(f"invalid floating point number {text!r}") from None
    return f2u(value)


def parse_num_val(text: str) -> int:
    """Parse a hex, decimal or floating-point value into a 32-bit pattern.

    Raises ValueError when the text is not a valid 32-bit value.
    """
    if _is_float_text(text):
        return _parse_float_bits(text)
    return parse_int_val(text)


def get_exp(uf: int) -> int:
    """Return the exponent field of the pattern."""
    return (uf >> FRAC_SIZE) & EXP_MASK


def get_frac(uf: int) -> int:
    """Return the fraction field of the pattern."""
    return uf & FRAC_MASK


def get_sign(uf: int) -> int:
    """Return the sign bit of the pattern."""
    return (uf >> (FLOAT_SIZE - 1)) & 0x1


def show_float(uf: int) -> str:
    """Describe the value and the fields of the single-precision pattern."""
    uf &= 0xFFFFFFFF
    f = u2f(uf)
    exp = get_exp(uf)
    frac = get_frac(uf)
    sign = get_sign(uf)

    if math.isnan(f):
        value_text = "-nan" if sign else "nan"
    else:
        value_text = "%.10g" % f
    lines = [
        "",
        f"Floating point value {value_text}",
        f"Bit Representation 0x{uf:08x}, sign = {sign:x}, "
        f"exponent = 0x{exp:02x}, fraction = 0x{frac:06x}",
    ]
    sign_char = "-" if sign else "+"
    if exp == EXP_MASK:
        lines.append(f"{sign_char}Infinity" if frac == 0 else "Not-A-Number")
    else:
        denorm = exp == 0
        uexp = 1 - BIAS if denorm else exp - BIAS
        mantissa = frac if denorm else frac + (1 << FRAC_SIZE)
        fman = mantissa / (1 << FRAC_SIZE)
        kind = "Denormalized" if denorm else "Normalized"
        lines.append(f"{kind}.  {sign_char}{fman:.10f} X 2^({uexp})")
    return "\n".join(lines) + "\n"


def _usage() -> str:
    return (
        f"Usage: {_PROG} val1 val2 ...\n"
        "Values may be given as hex patterns or as floating point numbers"
    )


def main(argv: Optional[list[str]] = None) -> int:
    """Show each value given on the command line."""
    args = sys.argv[1:] if argv is None else argv
    if not args:
        print(_usage())
        return 0
    for text in args:
        try:
            uf = parse_num_val(text)
        except ValueError:
            print(f"Invalid 32-bit number: '{text}'")
            print(_usage())
            return 0
        sys.stdout.write(show_float(uf))
    return 0


if __name__ == "__main__":
    sys.exit(main())