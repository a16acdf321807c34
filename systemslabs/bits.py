"""Bit-level puzzle solutions on 32-bit two's complement integers and floats.

Integer arguments are taken modulo 2**32 and read as signed 32-bit values.
Functions that return ``int`` in the puzzle set return signed 32-bit values;
functions on float bit patterns return unsigned 32-bit patterns.
"""

from __future__ import annotations

_MASK32 = 0xFFFFFFFF
_SIGN_BIT = 0x80000000


def _s32(value: int) -> int:
    value &= _MASK32
    return value - (1 << 32) if value & _SIGN_BIT else value


def _u32(value: int) -> int:
    return value & _MASK32


def bit_xor(x: int, y: int) -> int:
    """Return x ^ y built from AND and NOT only."""
    x, y = _s32(x), _s32(y)
    a = x & ~y
    b = y & ~x
    return _s32(~(~a & ~b))


def tmin() -> int:
    """Return the minimum two's complement integer."""
    return _s32(1 << 31)


def is_tmax(x: int) -> int:
    """Return 1 if x is the maximum two's complement integer, else 0."""
    x = _s32(x)
    a = ~_s32(x + 1)
    b = a ^ x
    c = ~x  # excludes -1, whose successor also satisfies the first test
    return int(not b) & int(c != 0)


def all_odd_bits(x: int) -> int:
    """Return 1 if every odd-numbered bit of x is set, else 0."""
    x = _s32(x)
    a = 0xAA
    a |= a << 8
    a |= a << 16
    a = _s32(a)
    return int(not ((x & a) ^ a))


def negate(x: int) -> int:
    """Return -x with 32-bit wraparound."""
    return _s32(1 + ~_s32(x))


def is_ascii_digit(x: int) -> int:
    """Return 1 if 0x30 <= x <= 0x39, else 0."""
    x = _s32(x)
    leading_zero = int(not (x >> 6))
    a3 = 3 << 4
    l3 = int(not ((a3 & x) ^ a3))
    tail = int(not (((x & 0x0F) + 6) & 0x10))
    return leading_zero & l3 & tail


def conditional(x: int, y: int, z: int) -> int:
    """Return y if x is non-zero, else z."""
    x, y, z = _s32(x), _s32(y), _s32(z)
    mask = int(x != 0)
    for shift in (1, 2, 4, 8, 16):
        mask |= mask << shift
    mask = _s32(mask)
    return _s32((mask & y) | (~mask & z))


def is_less_or_equal(x: int, y: int) -> int:
    """Return 1 if x <= y, else 0."""
    x, y = _s32(x), _s32(y)
    less = int(x >> 31 != 0) & int(not (y >> 31))
    greater = int(y >> 31 != 0) & int(not (x >> 31))
    y = _s32(1 + ~y)
    x = _s32(x + y)
    return (less | int(not x) | int(x >> 31 != 0)) & int(not greater)


def logical_neg(x: int) -> int:
    """Return !x computed without the ! operator."""
    x = _s32(x)
    folded = (x >> 16) | x
    for shift in (8, 4, 2, 1):
        folded = (folded >> shift) | folded
    return (folded + 1) & 0x01


def how_many_bits(x: int) -> int:
    """Return the minimum number of bits that represent x in two's complement."""
    x = _s32(x)
    flag = x >> 31
    x = (flag & ~x) | (~flag & x)
    b16 = int(x >> 16 != 0) << 4
    x >>= b16
    b8 = int(x >> 8 != 0) << 3
    x >>= b8
    b4 = int(x >> 4 != 0) << 2
    x >>= b4
    b2 = int(x >> 2 != 0) << 1
    x >>= b2
    b1 = int(x >> 1 != 0)
    x >>= b1
    return 1 + x + b1 + b2 + b4 + b8 + b16


def float_scale2(uf: int) -> int:
    """Return the bit pattern of 2*f for the single-precision pattern uf."""
    uf = _u32(uf)
    exp = _u32(uf << 1) >> 24
    tail = _u32(uf << 9) >> 9
    if exp == 0xFF:
        return uf
    if exp == 0:
        return _u32((uf ^ tail) | (tail << 1))
    exp += 1
    sign = uf & _SIGN_BIT
    if exp == 0xFF:
        return sign | (exp << 23)
    return sign | (exp << 23) | tail


def float_float2_int(uf: int) -> int:
    """Return (int) f for the single-precision pattern uf.

    Values out of range, NaN and infinities give the minimum integer.
    """
    uf = _u32(uf)
    sign = (uf >> 31) & 0x01
    exp = ((uf >> 23) & 0xFF) - 127 - 23
    tail = (1 << 23) | (_u32(uf << 9) >> 9)
    if exp < -23:
        return 0
    if exp >= 8:
        return _s32(_SIGN_BIT)
    result = tail << exp if exp > 0 else tail >> -exp
    return -result if sign else result


def float_power2(x: int) -> int:
    """Return the single-precision bit pattern of 2.0**x.

    Too large gives +infinity, too small gives 0. Exponents in the
    denormalized range are not handled and give the pattern 2.
    """
    x = _s32(x)
    if x > 127:
        return 0x7F800000
    x += 127
    if x > 0:
        return x << 23
    if x <= -23:
        return 0
    return 2