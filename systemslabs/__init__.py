"""Cache simulator, transpose routines, bit puzzles with their test harness, and a heap allocator with its trace driver."""

__version__ = "0.1.0"