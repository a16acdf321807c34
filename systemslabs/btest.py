"""Test harness that checks the bit-level puzzle solutions against references.

Integer puzzles are tested on wide windows around zero and the extremes of
the argument range. Float puzzles are tested around zero, the
normalized/denormalized boundary, one, the largest normalized value, and on
infinities and NaNs.
"""

from __future__ import annotations

import getopt
import itertools
import random
import re
import signal
import sys
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Sequence, TextIO

from systemslabs import bits, reference
from systemslabs.fshow import parse_num_val
from systemslabs.ishow import _is_float_text

TIMEOUT_LIMIT = 10
TEST_RANGE = 500000
MAX_TEST_VALS = 13 * TEST_RANGE

TMIN = -(2**31)
TMAX = 2**31 - 1
FLOAT_RANGE = (1, 1)

_MASK32 = 0xFFFFFFFF
_PROG = "btest"
_LEADING_INT = re.compile(r"\s*[+-]?\d+")

ArgRange = tuple[int, int]
FixedArgs = Sequence[Optional[int]]


def _s32(value: int) -> int:
    value &= _MASK32
    return value - (1 << 32) if value & 0x80000000 else value


class TestTimeout(Exception):
    """Raised when a puzzle runs past its time limit."""

    __test__ = False


@dataclass(frozen=True)
class TestRecord:
    """A puzzle, its reference implementation and how to test it.

    A first argument range of (1, 1) marks a float puzzle whose arguments
    are single-precision bit patterns.
    """

    __test__ = False

    name: str
    solution: Callable[..., int]
    reference: Callable[..., int]
    args: int
    ops: str
    op_limit: int
    rating: int
    arg_ranges: tuple[ArgRange, ArgRange, ArgRange] = (
        (TMIN, TMAX),
        (TMIN, TMAX),
        (TMIN, TMAX),
    )


_INT_RANGES = ((TMIN, TMAX), (TMIN, TMAX), (TMIN, TMAX))
_FLOAT_RANGES = (FLOAT_RANGE, FLOAT_RANGE, FLOAT_RANGE)

TEST_SET: tuple[TestRecord, ...] = (
    TestRecord("bitXor", bits.bit_xor, reference.ref_bit_xor, 2, "& ~", 14, 1, _INT_RANGES),
    TestRecord("tmin", bits.tmin, reference.ref_tmin, 0, "! ~ & ^ | + << >>", 4, 1, _INT_RANGES),
    TestRecord("isTmax", bits.is_tmax, reference.ref_is_tmax, 1, "! ~ & ^ | +", 10, 1, _INT_RANGES),
    TestRecord(
        "allOddBits", bits.all_odd_bits, reference.ref_all_odd_bits, 1,
        "! ~ & ^ | + << >>", 12, 2, _INT_RANGES,
    ),
    TestRecord("negate", bits.negate, reference.ref_negate, 1, "! ~ & ^ | + << >>", 5, 2, _INT_RANGES),
    TestRecord(
        "isAsciiDigit", bits.is_ascii_digit, reference.ref_is_ascii_digit, 1,
        "! ~ & ^ | + << >>", 15, 3, _INT_RANGES,
    ),
    TestRecord(
        "conditional", bits.conditional, reference.ref_conditional, 3,
        "! ~ & ^ | << >>", 16, 3, _INT_RANGES,
    ),
    TestRecord(
        "isLessOrEqual", bits.is_less_or_equal, reference.ref_is_less_or_equal, 2,
        "! ~ & ^ | + << >>", 24, 3, _INT_RANGES,
    ),
    TestRecord(
        "logicalNeg", bits.logical_neg, reference.ref_logical_neg, 1,
        "~ & ^ | + << >>", 12, 4, _INT_RANGES,
    ),
    TestRecord(
        "howManyBits", bits.how_many_bits, reference.ref_how_many_bits, 1,
        "! ~ & ^ | + << >>", 90, 4, _INT_RANGES,
    ),
    TestRecord(
        "floatScale2", bits.float_scale2, reference.ref_float_scale2, 1,
        "$", 30, 4, _FLOAT_RANGES,
    ),
    TestRecord(
        "floatFloat2Int", bits.float_float2_int, reference.ref_float_float2_int, 1,
        "$", 30, 4, _FLOAT_RANGES,
    ),
    TestRecord(
        "floatPower2", bits.float_power2, reference.ref_float_power2, 1,
        "$", 30, 4, _FLOAT_RANGES,
    ),
)


def random_val(lo: int, hi: int, rng: Optional[random.Random] = None) -> int:
    """Return a random integer between lo and hi inclusive."""
    rng = rng if rng is not None else random.Random()
    weight = rng.random()
    return int(lo * (1 - weight) + hi * weight)


def _float_vals(test_range: int) -> list[int]:
    smallest_norm = 0x00800000
    one = 0x3F800000
    largest_norm = 0x7F000000
    inf = 0x7F800000
    nan = 0x7FC00000
    sign = 0x80000000

    test_range = min(test_range, 1 << 23)
    vals: list[int] = []
    for i in range(test_range):
        vals += [
            i,
            sign | i,
            smallest_norm + i,
            smallest_norm - i,
            sign | (smallest_norm + i),
            sign | (smallest_norm - i),
            one + i,
            one - i,
            sign | (one + i),
            sign | (one - i),
            largest_norm - i,
            sign | (largest_norm - i),
        ]
    vals += [inf, sign | inf, nan, sign | nan]
    return [_s32(v) for v in vals]


def gen_vals(
    lo: int,
    hi: int,
    test_range: int,
    fixed: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> list[int]:
    """Return the values to try for one argument.

    A fixed value is used alone. The range (1, 1) selects float bit
    patterns; small integer ranges are covered exhaustively; otherwise the
    values near both ends, near zero and some random ones are sampled.
    """
    if fixed is not None:
        return [_s32(fixed)]
    if lo == 1 and hi == 1:
        return _float_vals(test_range)
    if hi - MAX_TEST_VALS <= lo:
        return list(range(lo, hi + 1))

    rng = rng if rng is not None else random.Random()
    vals: list[int] = []
    for i in range(test_range):
        vals.append(lo + i)
        vals.append(hi - i)
        if lo <= i <= hi:
            vals.append(i)
        if lo <= -i <= hi:
            vals.append(-i)
        vals.append(random_val(lo, hi, rng))
    return vals


@contextmanager
def _time_limit(seconds: int, name: str) -> Iterator[Optional[float]]:
    if seconds <= 0:
        yield None
        return
    deadline = time.monotonic() + seconds
    use_signal = (
        hasattr(signal, "SIGALRM")
        and threading.current_thread() is threading.main_thread()
    )
    if not use_signal:
        yield deadline
        return

    def _on_alarm(signum, frame):
        raise TestTimeout(name)

    previous = signal.signal(signal.SIGALRM, _on_alarm)
    signal.setitimer(signal.ITIMER_REAL, seconds)
    try:
        yield deadline
    finally:
        signal.setitimer(signal.ITIMER_REAL, 0)
        signal.signal(signal.SIGALRM, previous)


def _fmt(value: int) -> str:
    value = _s32(value)
    return f"{value}[0x{value & _MASK32:x}]"


def _arg_test_ranges(args: int, test_range: int) -> list[int]:
    if args == 1:
        ranges = [test_range, 0, 0]
    elif args == 2:
        root = int(test_range ** 0.5)
        ranges = [root, root, 0]
    else:
        root = int(test_range ** 0.333)
        ranges = [root, root, root]
    return [max(r, 1) for r in ranges]


def test_function(
    record: TestRecord,
    fixed_args: Optional[FixedArgs] = None,
    grade: bool = False,
    timeout_limit: int = TIMEOUT_LIMIT,
    test_range: int = TEST_RANGE,
    rng: Optional[random.Random] = None,
    out: Optional[TextIO] = None,
) -> int:
    """Check a puzzle against its reference and return the number of errors.

    Testing stops at the first mismatch. A timeout counts as one error.
    """
    out = sys.stdout if out is None else out
    rng = rng if rng is not None else random.Random()
    fixed = list(fixed_args) if fixed_args is not None else [None, None, None]
    fixed += [None] * (3 - len(fixed))

    args = record.args
    if not 0 <= args <= 3:
        raise ValueError(
            f"Configuration error: invalid number of args ({args}) "
            f"for function {record.name}"
        )

    ranges = _arg_test_ranges(args, test_range)
    arg_vals = [
        gen_vals(record.arg_ranges[i][0], record.arg_ranges[i][1], ranges[i], fixed[i], rng)
        for i in range(args)
    ]

    try:
        with _time_limit(timeout_limit, record.name) as deadline:
            for combo in itertools.product(*arg_vals):
                got = _s32(record.solution(*combo))
                want = _s32(record.reference(*combo))
                if deadline is not None and time.monotonic() > deadline:
                    raise TestTimeout(record.name)
                if got != want:
                    if not grade:
                        shown = ",".join(_fmt(v) for v in combo)
                        out.write(
                            f"ERROR: Test {record.name}({shown}) failed...\n"
                            f"...Gives {_fmt(got)}. Should be {_fmt(want)}\n"
                        )
                    return 1
    except TestTimeout:
        out.write(
            f"ERROR: Test {record.name} failed.\n"
            f"  Timed out after {timeout_limit} secs (probably infinite loop)\n"
        )
        return 1
    return 0


test_function.__test__ = False  # type: ignore[attr-defined]


def run_tests(
    records: Optional[Sequence[TestRecord]] = None,
    only: Optional[str] = None,
    fixed_args: Optional[FixedArgs] = None,
    grade: bool = False,
    global_rating: int = 0,
    timeout_limit: int = TIMEOUT_LIMIT,
    test_range: int = TEST_RANGE,
    rng: Optional[random.Random] = None,
    out: Optional[TextIO] = None,
) -> int:
    """Test each selected puzzle, print a score table and return total errors."""
    out = sys.stdout if out is None else out
    records = TEST_SET if records is None else records
    rng = rng if rng is not None else random.Random(1)

    errors = 0
    points = 0
    max_points = 0
    out.write("Score\tRating\tErrors\tFunction\n")
    for record in records:
        if only is not None and record.name != only:
            continue
        rating = global_rating or record.rating
        terrors = test_function(
            record, fixed_args, grade, timeout_limit, test_range, rng, out
        )
        errors += terrors
        tpoints = rating if terrors == 0 else 0
        points += tpoints
        max_points += rating
        if grade or terrors < 1:
            out.write(f" {tpoints:.0f}\t{rating}\t{terrors}\t{record.name}\n")
    out.write(f"Total points: {points:.0f}/{max_points:.0f}\n")
    return errors


def _atoi(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group()) if match else 0


def _usage() -> None:
    print(f"Usage: {_PROG} [-hg] [-r <n>] [-f <name> [-1|-2|-3 <val>]*] [-T <time limit>]")
    print("  -1 <val>  Specify first function argument")
    print("  -2 <val>  Specify second function argument")
    print("  -3 <val>  Specify third function argument")
    print("  -f <name> Test only the named function")
    print("  -g        Compact output for grading (with no error msgs)")
    print("  -h        Print this message")
    print("  -r <n>    Give uniform weight of n for all problems")
    print("  -T <lim>  Set timeout limit to lim")


def main(argv: Optional[list[str]] = None) -> int:
    """Run the puzzle tests as directed by the command line."""
    args = sys.argv[1:] if argv is None else argv
    try:
        options, _rest = getopt.getopt(args, "hgf:r:T:1:2:3:")
    except getopt.GetoptError:
        _usage()
        return 1

    grade = False
    only: Optional[str] = None
    global_rating = 0
    timeout_limit = TIMEOUT_LIMIT
    fixed: list[Optional[int]] = [None, None, None]

    for flag, value in options:
        if flag == "-h":
            _usage()
            return 1
        if flag == "-g":
            grade = True
        elif flag == "-f":
            only = value
        elif flag == "-r":
            global_rating = _atoi(value)
            if global_rating < 0:
                _usage()
                return 1
        elif flag in ("-1", "-2", "-3"):
            index = int(flag[1]) - 1
            try:
                # An integer argument is accepted only while none was set before.
                if not _is_float_text(value) and (fixed[index] or 0) != 0:
                    raise ValueError(value)
                fixed[index] = parse_num_val(value)
            except ValueError:
                print(f"Bad argument '{value}'")
                return 0
        elif flag == "-T":
            timeout_limit = _atoi(value)

    run_tests(
        only=only,
        fixed_args=fixed,
        grade=grade,
        global_rating=global_rating,
        timeout_limit=timeout_limit,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())