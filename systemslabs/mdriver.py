"""Driver that checks an allocator for correctness, space use and speed.

Each trace file is replayed through the allocator. Every payload is checked
for alignment, for lying inside the heap and for not overlapping another one.
Data must survive a realloc. Utilization and throughput are combined into a
performance index.
"""

from __future__ import annotations

import getopt
import math
import sys
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, TextIO, TypeVar

from systemslabs.config import AVG_LIBC_THRUPUT, DEFAULT_TRACEFILES, TRACEDIR, UTIL_WEIGHT
from systemslabs.ftimer import fsecs, init_fsecs
from systemslabs.memlib import MemoryModel, OutOfMemory
from systemslabs.mm import TEAM, Allocator
from systemslabs.trace import OpType, RangeError, RangeList, Trace, TraceFormatError, read_trace

_T = TypeVar("_T")

HDRLINES = 4  # number of header lines in a trace file


def _linenum(opnum: int) -> int:
    """Convert a request number to its line in the trace file (origin 1)."""
    return opnum + HDRLINES + 1


@dataclass
class Stats:
    """Results of running one allocator on one trace.

    ``secs`` and ``util`` are meaningful only when ``valid`` is true.
    """

    ops: float = 0.0
    valid: bool = False
    secs: float = 0.0
    util: float = 0.0


class MallocDriver:
    """Replays traces through the allocator and a system reference."""

    def __init__(self, verbose: int = 0, out: Optional[TextIO] = None) -> None:
        self.verbose = verbose
        self.out = sys.stdout if out is None else out
        self.errors = 0
        self.mem = MemoryModel()
        self.mm = Allocator(self.mem)

    def _say(self, text: str, end: str = "\n") -> None:
        self.out.write(text + end)

    def malloc_error(self, tracenum: int, opnum: int, msg: str) -> None:
        """Count and report an error made by the allocator."""
        self.errors += 1
        self._say(f"ERROR [trace {tracenum}, line {_linenum(opnum)}]: {msg}")

    @staticmethod
    def _attempt(call: Callable[[], Optional[_T]]) -> Optional[_T]:
        try:
            return call()
        except OutOfMemory:
            return None

    def _add_range(
        self, ranges: RangeList, lo: int, size: int, tracenum: int, opnum: int
    ) -> bool:
        try:
            ranges.add(lo, size, self.mem.heap_lo(), self.mem.heap_hi())
        except RangeError as exc:
            self.malloc_error(tracenum, opnum, str(exc))
            return False
        return True

    def _init_heap(self) -> bool:
        self.mem.reset_brk()
        try:
            self.mm.init()
        except OutOfMemory:
            return False
        return True

    def eval_mm_valid(self, trace: Trace, tracenum: int, ranges: RangeList) -> bool:
        """Check the allocator for correctness on the trace."""
        ranges.clear()
        if not self._init_heap():
            self.malloc_error(tracenum, 0, "mm_init failed.")
            return False

        data = self.mem.data
        for opnum, op in enumerate(trace.ops):
            index, size = op.index, op.size
            fill = index & 0xFF

            if op.type is OpType.ALLOC:
                p = self._attempt(lambda: self.mm.malloc(size))
                if p is None:
                    self.malloc_error(tracenum, opnum, "mm_malloc failed.")
                    return False
                if not self._add_range(ranges, p, size, tracenum, opnum):
                    return False
                data[p:p + size] = bytes([fill]) * size
                trace.blocks[index] = p
                trace.block_sizes[index] = size

            elif op.type is OpType.REALLOC:
                oldp = trace.blocks[index]
                newp = self._attempt(lambda: self.mm.realloc(oldp, size))
                if newp is None:
                    self.malloc_error(tracenum, opnum, "mm_realloc failed.")
                    return False
                if oldp is not None:
                    ranges.remove(oldp)
                if not self._add_range(ranges, newp, size, tracenum, opnum):
                    return False
                keep = min(size, trace.block_sizes[index])
                if data[newp:newp + keep] != bytes([fill]) * keep:
                    self.malloc_error(
                        tracenum, opnum,
                        "mm_realloc did not preserve the data from old block",
                    )
                    return False
                data[newp:newp + size] = bytes([fill]) * size
                trace.blocks[index] = newp
                trace.block_sizes[index] = size

            else:
                p = trace.blocks[index]
                if p is not None:
                    ranges.remove(p)
                    self.mm.free(p)
        return True

    def eval_mm_util(self, trace: Trace) -> float:
        """Return peak live payload bytes over the final heap size.

        Raises RuntimeError when the allocator fails.
        """
        if not self._init_heap():
            raise RuntimeError("mm_init failed in eval_mm_util")

        total_size = 0
        max_total_size = 0
        for op in trace.ops:
            index = op.index
            if op.type is OpType.ALLOC:
                p = self._attempt(lambda: self.mm.malloc(op.size))
                if p is None:
                    raise RuntimeError("mm_malloc failed in eval_mm_util")
                trace.blocks[index] = p
                trace.block_sizes[index] = op.size
                total_size += op.size
                max_total_size = max(max_total_size, total_size)
            elif op.type is OpType.REALLOC:
                oldsize = trace.block_sizes[index]
                oldp = trace.blocks[index]
                newp = self._attempt(lambda: self.mm.realloc(oldp, op.size))
                if newp is None:
                    raise RuntimeError("mm_realloc failed in eval_mm_util")
                trace.blocks[index] = newp
                trace.block_sizes[index] = op.size
                total_size += op.size - oldsize
                max_total_size = max(max_total_size, total_size)
            else:
                p = trace.blocks[index]
                if p is not None:
                    self.mm.free(p)
                total_size -= trace.block_sizes[index]
        return max_total_size / self.mem.heapsize()

    def eval_mm_speed(self, trace: Trace) -> None:
        """Replay the trace through the allocator without any checking.

        Raises RuntimeError when the allocator fails.
        """
        if not self._init_heap():
            raise RuntimeError("mm_init failed in eval_mm_speed")
        for op in trace.ops:
            index = op.index
            if op.type is OpType.ALLOC:
                p = self._attempt(lambda: self.mm.malloc(op.size))
                if p is None:
                    raise RuntimeError("mm_malloc error in eval_mm_speed")
                trace.blocks[index] = p
            elif op.type is OpType.REALLOC:
                oldp = trace.blocks[index]
                newp = self._attempt(lambda: self.mm.realloc(oldp, op.size))
                if newp is None:
                    raise RuntimeError("mm_realloc error in eval_mm_speed")
                trace.blocks[index] = newp
            else:
                block = trace.blocks[index]
                if block is not None:
                    self.mm.free(block)

    @staticmethod
    def _run_system(trace: Trace) -> dict[int, bytearray]:
        blocks: dict[int, bytearray] = {}
        for op in trace.ops:
            if op.type is OpType.ALLOC:
                blocks[op.index] = bytearray(op.size)
            elif op.type is OpType.REALLOC:
                old = blocks.get(op.index, bytearray())
                new = bytearray(op.size)
                keep = min(len(old), op.size)
                new[:keep] = old[:keep]
                blocks[op.index] = new
            else:
                blocks.pop(op.index, None)
        return blocks

    def eval_libc_valid(self, trace: Trace, tracenum: int) -> bool:
        """Check that the system allocator can run the trace to completion."""
        try:
            self._run_system(trace)
        except MemoryError:
            self.malloc_error(tracenum, 0, "libc malloc failed")
            raise RuntimeError("System message: out of memory") from None
        return True

    def eval_libc_speed(self, trace: Trace) -> None:
        """Replay the trace through the system allocator."""
        try:
            self._run_system(trace)
        except MemoryError:
            raise RuntimeError("malloc failed in eval_libc_speed") from None


def _kops(ops: float, secs: float) -> float:
    if secs:
        return (ops / 1e3) / secs
    return math.inf if ops else math.nan


def format_results(stats: Sequence[Stats], errors: int = 0) -> str:
    """Return a table of per-trace results followed by a total line."""
    lines = ["%5s%7s %5s%8s%10s%6s" % ("trace", " valid", "util", "ops", "secs", "Kops")]
    secs = ops = util = 0.0
    for i, s in enumerate(stats):
        if s.valid:
            lines.append(
                "%2d%10s%5.0f%%%8.0f%10.6f%6.0f"
                % (i, "yes", s.util * 100.0, s.ops, s.secs, _kops(s.ops, s.secs))
            )
            secs += s.secs
            ops += s.ops
            util += s.util
        else:
            lines.append("%2d%10s%6s%8s%10s%6s" % (i, "no", "-", "-", "-", "-"))

    if errors == 0:
        avg_util = util / len(stats) if stats else 0.0
        lines.append(
            "%12s%5.0f%%%8.0f%10.6f%6.0f"
            % ("Total       ", avg_util * 100.0, ops, secs, _kops(ops, secs))
        )
    else:
        lines.append("%12s%6s%8s%10s%6s" % ("Total       ", "-", "-", "-", "-"))
    return "\n".join(lines) + "\n"


def performance_index(stats: Sequence[Stats]) -> tuple[float, float, float]:
    """Return the utilization part, throughput part and total index (0-100).

    The parts are fractions; the total is scaled to 100.
    """
    if not stats:
        raise ValueError("no statistics to rate")
    secs = sum(s.secs for s in stats)
    ops = sum(s.ops for s in stats)
    avg_util = sum(s.util for s in stats) / len(stats)
    throughput = ops / secs if secs > 0 else math.inf

    p1 = UTIL_WEIGHT * avg_util
    if throughput > AVG_LIBC_THRUPUT:
        p2 = 1.0 - UTIL_WEIGHT
    else:
        p2 = (1.0 - UTIL_WEIGHT) * (throughput / AVG_LIBC_THRUPUT)
    return p1, p2, (p1 + p2) * 100.0


def _usage() -> None:
    err = sys.stderr
    err.write("Usage: mdriver [-hvVal] [-f <file>] [-t <dir>]\n")
    err.write("Options\n")
    err.write("\t-a         Don't check the team structure.\n")
    err.write("\t-f <file>  Use <file> as the trace file.\n")
    err.write("\t-g         Generate summary info for autograder.\n")
    err.write("\t-h         Print this message.\n")
    err.write("\t-l         Run libc malloc as well.\n")
    err.write("\t-t <dir>   Directory to find default traces.\n")
    err.write("\t-v         Print per-trace performance breakdowns.\n")
    err.write("\t-V         Print additional debug info.\n")


def _check_team() -> bool:
    if TEAM.teamname == "":
        print("ERROR: Please provide the information about your team in mm.c.")
        return False
    print(f"Team Name:{TEAM.teamname}")
    if not TEAM.name1 or not TEAM.id1:
        print("ERROR.  You must fill in all team member 1 fields!")
        return False
    print(f"Member 1 :{TEAM.name1}:{TEAM.id1}")
    if bool(TEAM.name2) != bool(TEAM.id2):
        print("ERROR.  You must fill in all or none of the team member 2 ID fields!")
        return False
    if TEAM.name2:
        print(f"Member 2 :{TEAM.name2}:{TEAM.id2}")
    return True


def _load(driver: MallocDriver, tracedir: str, filename: str) -> Trace:
    if driver.verbose > 1:
        print(f"Reading tracefile: {filename}")
    return read_trace(tracedir, filename)


def main(argv: Optional[list[str]] = None) -> int:
    """Evaluate the allocator on the trace files named by the command line."""
    args = sys.argv[1:] if argv is None else argv
    try:
        options, _rest = getopt.getopt(args, "f:t:hvVgal")
    except getopt.GetoptError:
        _usage()
        return 1

    tracedir = TRACEDIR
    tracefiles: Optional[list[str]] = None
    team_check = True
    run_libc = False
    autograder = False
    verbose = 0

    for flag, value in options:
        if flag == "-g":
            autograder = True
        elif flag == "-f":
            tracefiles = [value]
            tracedir = "./"
        elif flag == "-t":
            if tracefiles is not None:
                continue
            tracedir = value if value.endswith("/") else value + "/"
        elif flag == "-a":
            team_check = False
        elif flag == "-l":
            run_libc = True
        elif flag == "-v":
            verbose = 1
        elif flag == "-V":
            verbose = 2
        elif flag == "-h":
            _usage()
            return 0

    if team_check and not _check_team():
        return 1

    if tracefiles is None:
        tracefiles = list(DEFAULT_TRACEFILES)
        print(f"Using default tracefiles in {tracedir}")

    init_fsecs(verbose)
    driver = MallocDriver(verbose)

    try:
        if run_libc:
            if verbose > 1:
                print("\nTesting libc malloc")
            libc_stats = []
            for i, name in enumerate(tracefiles):
                trace = _load(driver, tracedir, name)
                stats = Stats(ops=trace.num_ops)
                if verbose > 1:
                    print("Checking libc malloc for correctness, ", end="")
                stats.valid = driver.eval_libc_valid(trace, i)
                if stats.valid:
                    if verbose > 1:
                        print("and performance.")
                    stats.secs = fsecs(lambda t=trace: driver.eval_libc_speed(t))
                libc_stats.append(stats)
            if verbose:
                print("\nResults for libc malloc:")
                sys.stdout.write(format_results(libc_stats, driver.errors))

        if verbose > 1:
            print("\nTesting mm malloc")
        mm_stats = []
        ranges = RangeList()
        for i, name in enumerate(tracefiles):
            trace = _load(driver, tracedir, name)
            stats = Stats(ops=trace.num_ops)
            if verbose > 1:
                print("Checking mm_malloc for correctness, ", end="")
            stats.valid = driver.eval_mm_valid(trace, i, ranges)
            if stats.valid:
                if verbose > 1:
                    print("efficiency, ", end="")
                stats.util = driver.eval_mm_util(trace)
                if verbose > 1:
                    print("and performance.")
                stats.secs = fsecs(lambda t=trace: driver.eval_mm_speed(t))
            mm_stats.append(stats)
    except TraceFormatError as exc:
        print(exc)
        return 1
    except OSError as exc:
        print(f"{exc.strerror}: {exc.__cause__ or exc}")
        return 1
    except RuntimeError as exc:
        print(exc)
        return 1

    if verbose:
        print("\nResults for mm malloc:")
        sys.stdout.write(format_results(mm_stats, driver.errors))
        print()

    numcorrect = sum(1 for s in mm_stats if s.valid)
    if driver.errors == 0:
        p1, p2, perfindex = performance_index(mm_stats)
        print(
            "Perf index = %.0f (util) + %.0f (thru) = %.0f/100"
            % (p1 * 100, p2 * 100, perfindex)
        )
    else:
        perfindex = 0.0
        print(f"Terminated with {driver.errors} errors")

    if autograder:
        print(f"correct:{numcorrect}")
        print("perfidx:%.0f" % perfindex)
    return 0


if __name__ == "__main__":
    sys.exit(main())