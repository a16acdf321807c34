import math

import pytest

from systemslabs import reference as ref


def test_f2u_of_one():
    assert ref.f2u(1.0) == 0x3F800000


def test_u2f_of_infinity_pattern():
    assert ref.u2f(0x7F800000) == math.inf


def test_f2u_overflow_saturates_to_infinity():
    assert ref.f2u(1e300) == 0x7F800000
    assert ref.f2u(-1e300) == 0xFF800000


@pytest.mark.parametrize(
    "uf", [0, 1, 0x00800000, 0x3F800000, 0x7F000000, 0x7F7FFFFF, 0x80000001, 0xBF800000]
)
def test_bit_pattern_round_trip(uf):
    assert ref.f2u(ref.u2f(uf)) == uf


def test_scale2_of_nan_returns_argument():
    assert ref.ref_float_scale2(0x7FC00000) == 0x7FC00000


def test_scale2_doubles_value():
    for uf in (0x3F800000, 0x00000001, 0x00400000, 0xC0490FDB):
        assert ref.u2f(ref.ref_float_scale2(uf)) == 2 * ref.u2f(uf)


def test_scale2_overflow_gives_infinity():
    assert ref.ref_float_scale2(0x7F7FFFFF) == 0x7F800000


def test_power2_matches_exact_powers():
    for x in range(-149, 128):
        assert ref.u2f(ref.ref_float_power2(x)) == 2.0**x


def test_power2_limits():
    assert ref.ref_float_power2(0) == 0x3F800000
    assert ref.ref_float_power2(127) == 0x7F000000
    assert ref.ref_float_power2(128) == 0x7F800000
    assert ref.ref_float_power2(-150) == 0
    assert ref.ref_float_power2(-0x80000000) == 0


def test_float2int_truncates():
    assert ref.ref_float_float2_int(ref.f2u(-3.75)) == -3


def test_float2int_out_of_range():
    assert ref.ref_float_float2_int(ref.f2u(float(2**31))) == ref.ref_tmin()
    assert ref.ref_float_float2_int(0x7FC00000) == ref.ref_tmin()
    assert ref.ref_float_float2_int(0x7F800000) == ref.ref_tmin()


@pytest.mark.parametrize(
    "x,expected", [(12, 5), (298, 10), (-5, 4), (0, 1), (-1, 1), (0x80000000, 32)]
)
def test_how_many_bits_examples(x, expected):
    assert ref.ref_how_many_bits(x) == expected


def test_integer_references():
    assert ref.ref_tmin() == -0x80000000
    assert ref.ref_is_tmax(0x7FFFFFFF) == 1
    assert ref.ref_is_tmax(-1) == 0
    assert ref.ref_all_odd_bits(0xAAAAAAAA) == 1
    assert ref.ref_all_odd_bits(0xFFFFFFFD) == 0
    assert ref.ref_negate(-0x80000000) == -0x80000000
    assert ref.ref_conditional(2, 4, 5) == 4
    assert ref.ref_conditional(0, 4, 5) == 5
    assert ref.ref_is_ascii_digit(0x35) == 1
    assert ref.ref_is_ascii_digit(0x3A) == 0
    assert ref.ref_is_less_or_equal(4, 5) == 1
    assert ref.ref_is_less_or_equal(5, 4) == 0
    assert ref.ref_logical_neg(3) == 0
    assert ref.ref_logical_neg(0) == 1
    assert ref.ref_bit_xor(4, 5) == 1