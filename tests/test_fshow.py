import pytest

from systemslabs import fshow


def test_parse_hex_pattern():
    assert fshow.parse_num_val("0x3f800000") == 0x3F800000


def test_parse_float_text():
    assert fshow.parse_num_val("1.0") == 0x3F800000
    assert fshow.parse_num_val("1e0") == 0x3F800000


def test_parse_negative_integer_wraps():
    assert fshow.parse_num_val("-1") == 0xFFFFFFFF


def test_parse_integer_prefix_only():
    assert fshow.parse_num_val("12abc") == 12


@pytest.mark.parametrize("text", ["1.5e", "1.0 ", "zz.q", "0x100000000", "1_0.5"])
def test_parse_rejects_invalid(text):
    with pytest.raises(ValueError):
        fshow.parse_num_val(text)


def test_parse_huge_float_is_infinity():
    assert fshow.parse_num_val("1e400") == 0x7F800000


@pytest.mark.parametrize("uf", [0, 1, 0x3F800000, 0x80800001, 0x7F800000, 0xFFC00000])
def test_fields_recombine(uf):
    sign, exp, frac = fshow.get_sign(uf), fshow.get_exp(uf), fshow.get_frac(uf)
    assert (sign << 31) | (exp << 23) | frac == uf
    assert sign in (0, 1)
    assert exp <= fshow.EXP_MASK


def test_show_infinities_and_nan():
    assert "+Infinity" in fshow.show_float(0x7F800000)
    assert "-Infinity" in fshow.show_float(0xFF800000)
    assert "Not-A-Number" in fshow.show_float(0x7FC00000)


def test_show_normalized_one():
    text = fshow.show_float(0x3F800000)
    assert "Bit Representation 0x3f800000" in text
    assert "Normalized.  +1.0000000000 X 2^(0)" in text
    assert text.startswith("\n")


def test_show_denormalized():
    text = fshow.show_float(1)
    assert "Denormalized" in text
    assert "2^(-126)" in text


def test_main_without_arguments_prints_usage(capsys):
    assert fshow.main([]) == 0
    assert "Values may be given as hex patterns" in capsys.readouterr().out


def test_main_reports_invalid_value(capsys):
    fshow.main(["zz.q", "1.0"])
    out = capsys.readouterr().out
    assert "Invalid 32-bit number: 'zz.q'" in out
    assert "0x3f800000" not in out


def test_main_shows_each_value(capsys):
    fshow.main(["1.0", "0x7f800000"])
    out = capsys.readouterr().out
    assert "0x3f800000" in out
    assert "+Infinity" in out