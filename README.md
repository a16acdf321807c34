# systemslabs

Tools for three classic systems-programming exercises:

- **Cache lab**: an LRU cache simulator for memory traces and a set of
  matrix-transpose routines blocked for a small direct-mapped cache.
- **Data lab**: 32-bit integer and single-precision float puzzles solved with
  bit operations, reference implementations to check them against, a test
  harness, and two small viewers for integer and float bit patterns.
- **Malloc lab**: a simulated heap, an implicit-free-list allocator with
  boundary tags and coalescing, and a driver that replays allocation traces
  to check correctness, space utilisation and throughput.

The package has no dependencies beyond the standard library.

## Installation

```
pip install .
```

For running the test suite:

```
pip install ".[test]"
pytest
```

## Commands

### csim: cache simulator

Replays a memory trace through a cache with `2**s` sets, `E` lines per set
and `2**b`-byte blocks, using LRU replacement:

```
csim -s 4 -E 1 -b 4 -t traces/yi.trace
csim -v -s 4 -E 1 -b 4 -t traces/yi.trace
```

Only lines that start with a space are data accesses (` L 10,4`, ` S 18,4`,
` M 20,1`); other lines, such as instruction fetches, are skipped. A modify
(`M`) counts as a load followed by a store that hits.

It prints `hits:N misses:N evictions:N` and writes the same three numbers
to `.csim_results` in the current directory. `-v` prints the outcome of
every access. Unknown options are ignored; if the trace file cannot be
opened it prints `file <name> not found!`.

### btest: data lab test harness

Checks every puzzle in `systemslabs.bits` against its reference in
`systemslabs.reference`, sampling arguments near the ends of the range,
around zero and at random (float puzzles are tried around zero, the
normalised/denormalised boundary, one, the largest normalised value,
infinities and NaNs). Testing of a puzzle stops at its first mismatch,
which is printed with the arguments, the value given and the value
expected. A score table follows.

```
btest
btest -f howManyBits
btest -f bitXor -1 4 -2 5
btest -g
```

Options: `-f <name>` tests one puzzle, `-1`/`-2`/`-3 <val>` fix an argument
(hex, decimal or a floating-point number), `-g` gives compact output for
grading without error messages, `-r <n>` gives every puzzle the weight `n`,
`-T <secs>` sets the per-puzzle timeout (default 10, `0` disables it),
`-h` prints the usage.

Puzzle names in the table follow the exercise (`bitXor`, `tmin`, `isTmax`,
`allOddBits`, `negate`, `isAsciiDigit`, `conditional`, `isLessOrEqual`,
`logicalNeg`, `howManyBits`, `floatScale2`, `floatFloat2Int`,
`floatPower2`). `float_power2` does not handle exponents in the
denormalised range and returns the pattern `2` there, so `floatPower2` is
reported as failing.

### fshow and ishow: bit pattern viewers

```
fshow 0x3f800000 1.5 -2.0e-40
ishow 0xffffffff 42 -7
```

`fshow` shows a single-precision value with its sign, exponent and
fraction fields and says whether it is normalised, denormalised, infinite
or not a number. `ishow` shows a 32-bit value in hex, signed and unsigned
form. Values outside 32 bits are rejected.

### mdriver: malloc lab driver

Replays trace files through the allocator in `systemslabs.mm`:

```
mdriver -a -f short1-bal.rep
mdriver -a -v -t traces/
mdriver -a -l -V -t traces/
```

Options: `-f <file>` uses one trace file relative to the current
directory, `-t <dir>` names the directory of the default traces
(`./traces/` otherwise), `-a` skips the team information check, `-l` also
replays the traces with ordinary Python byte buffers as a reference, `-v`
prints per-trace results, `-V` prints extra detail as well, `-g` prints
`correct:` and `perfidx:` lines for an autograder, `-h` prints the usage.

Every payload is checked for 8-byte alignment, for lying inside the heap
and for not overlapping another payload, and data must survive a realloc.
The performance index weights space utilisation at 60% and throughput at
40%, with throughput credit capped at 600,000 operations per second.

A trace file starts with four numbers (suggested heap size, number of block
ids, number of operations, weight) followed by one request per line:
`a <id> <size>`, `r <id> <size>` or `f <id>`.

## Using the library

```python
from systemslabs.csim import Cache
from systemslabs.memlib import MemoryModel
from systemslabs.mm import Allocator
from systemslabs import bits

cache = Cache(set_index_bits=4, associativity=1, block_bits=4)
result = cache.access(0x10)          # an AccessResult flag: MISS, HIT, EVICTION

heap = MemoryModel(20 * (1 << 20))
alloc = Allocator(heap)
alloc.init()
p = alloc.malloc(100)
p = alloc.realloc(p, 200)
alloc.free(p)

assert bits.how_many_bits(12) == 5
```

Other pieces:

- `systemslabs.trans`: `transpose_submit`, `trans`, `trans32`, `trans64`
  and `trans61` take the dimensions `m`, `n`, an `n x m` nested list `a`
  and an `m x n` nested list `b`, and write the transpose of `a` into `b`.
  `is_transpose` checks the result and `register_functions` adds the
  routines to a `systemslabs.cachelab.TransRegistry`.
- `systemslabs.cachelab`: `init_matrix`, `rand_matrix`, `correct_trans`
  and `print_summary`.
- `systemslabs.reference`: `u2f`, `f2u` and the `ref_*` reference puzzles.
- `systemslabs.trace`: `parse_trace`, `read_trace` and `RangeList`.
- `systemslabs.ftimer`: `fsecs`, `ftimer_gettod` and `ftimer_itimer` time
  a callable in seconds, averaged over several runs.
- `systemslabs.fcyc`: `fcyc`, `CycleTimer` and `KBestSampler` time a
  callable with the K-best scheme, in nanoseconds of the performance
  counter.

## What is not included

There is no command that runs the transpose routines under a memory tracer
and counts their cache misses. To measure one, produce a trace of its
memory accesses by other means and replay it with `csim` (for example with
`-s 5 -E 1 -b 5`, a 1 KB direct-mapped cache with 32-byte blocks).