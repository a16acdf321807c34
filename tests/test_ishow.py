import pytest

from systemslabs import ishow


def test_show_all_ones():
    assert ishow.show_int(0xFFFFFFFF) == (
        "Hex = 0xffffffff,\tSigned = -1,\tUnsigned = 4294967295"
    )


def test_parse_hex_with_e_digit():
    assert ishow.parse_int_val("0x1e3") == 0x1E3


def test_parse_octal():
    assert ishow.parse_int_val("010") == 8


def test_parse_minimum_integer():
    assert ishow.parse_int_val("-2147483648") == 0x80000000


def test_parse_leading_space_and_trailing_junk():
    assert ishow.parse_int_val("  +42xyz") == 42


@pytest.mark.parametrize("text", ["4294967296", "-2147483649", "2.5", "1e3", ".5"])
def test_parse_rejects(text):
    with pytest.raises(ValueError):
        ishow.parse_int_val(text)


@pytest.mark.parametrize("value", [-(2**31), -12345, -1, 0, 7, 2**31 - 1])
def test_signed_round_trip(value):
    assert f"Signed = {value}," in ishow.show_int(ishow.parse_int_val(str(value)))


@pytest.mark.parametrize("value", [0, 1, 2**31, 2**32 - 1])
def test_unsigned_round_trip(value):
    assert ishow.show_int(ishow.parse_int_val(hex(value))).endswith(f"Unsigned = {value}")


def test_main_without_arguments_prints_usage(capsys):
    assert ishow.main([]) == 0
    assert "Values may be given in hex or decimal" in capsys.readouterr().out


def test_main_continues_after_bad_value(capsys):
    assert ishow.main(["1.5", "7"]) == 0
    out = capsys.readouterr().out
    assert "Cannot convert '1.5' to 32-bit number" in out
    assert "Signed = 7," in out