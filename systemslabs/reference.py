"""Straightforward reference versions of the bit-level puzzles.

These use ordinary operators and serve as the oracle the puzzle
solutions are checked against.
"""

from __future__ import annotations

import math
import struct

_MASK32 = 0xFFFFFFFF
_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1
_POS_INF_BITS = 0x7F800000
_NEG_INF_BITS = 0xFF800000


def _s32(value: int) -> int:
    value &= _MASK32
    return value - (1 << 32) if value & 0x80000000 else value


def u2f(u: int) -> float:
    """Return the single-precision value whose bit pattern is u."""
    return struct.unpack("<f", struct.pack("<I", u & _MASK32))[0]


def f2u(f: float) -> int:
    """Return the bit pattern of f rounded to single precision."""
    try:
        return struct.unpack("<I", struct.pack("<f", f))[0]
    except OverflowError:
        return _NEG_INF_BITS if f < 0 else _POS_INF_BITS


def _f32(value: float) -> float:
    return u2f(f2u(value))


def ref_bit_xor(x: int, y: int) -> int:
    """Return x ^ y."""
    return _s32(x) ^ _s32(y)


def ref_tmin() -> int:
    """Return the minimum 32-bit integer."""
    return _INT_MIN


def ref_is_tmax(x: int) -> int:
    """Return 1 if x is the maximum 32-bit integer."""
    return int(_s32(x) == _INT_MAX)


def ref_all_odd_bits(x: int) -> int:
    """Return 1 if all odd-numbered bits of x are set."""
    x = _s32(x)
    return int(all(x & (1 << i) for i in range(1, 32, 2)))


def ref_negate(x: int) -> int:
    """Return -x with 32-bit wraparound."""
    return _s32(-_s32(x))


def ref_is_ascii_digit(x: int) -> int:
    """Return 1 if x is the code of an ASCII digit."""
    return int(0x30 <= _s32(x) <= 0x39)


def ref_conditional(x: int, y: int, z: int) -> int:
    """Return y if x is non-zero, else z."""
    return _s32(y) if _s32(x) else _s32(z)


def ref_is_less_or_equal(x: int, y: int) -> int:
    """Return 1 if x <= y."""
    return int(_s32(x) <= _s32(y))


def ref_logical_neg(x: int) -> int:
    """Return !x."""
    return int(_s32(x) == 0)


def ref_how_many_bits(x: int) -> int:
    """Return the minimum number of bits to represent x in two's complement."""
    x = _s32(x)
    magnitude = -x - 1 if x < 0 else x
    return magnitude.bit_length() + 1


def ref_float_scale2(uf: int) -> int:
    """Return the bit pattern of 2*f, or uf itself when f is NaN."""
    f = u2f(uf)
    if math.isnan(f):
        return uf & _MASK32
    return f2u(2 * f)


def ref_float_float2_int(uf: int) -> int:
    """Return (int) f, or the minimum integer when f is out of range."""
    f = u2f(uf)
    if math.isnan(f) or not (_INT_MIN <= f < 2**31):
        return _INT_MIN
    return math.trunc(f)


def ref_float_power2(x: int) -> int:
    """Return the bit pattern of 2.0**x computed in single precision."""
    x = _s32(x)
    if x == _INT_MIN:
        return 0
    result = 1.0
    p2 = 2.0
    if x < 0:
        x = -x
        p2 = 0.5
    while x > 0:
        if x & 0x1:
            result = _f32(result * p2)
        p2 = _f32(p2 * p2)
        x >>= 1
    return f2u(result)