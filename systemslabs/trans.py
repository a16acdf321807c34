"""Matrix transpose functions B = A^T, blocked for a small direct-mapped cache.

A is an N x M matrix (N rows of M values) and B an M x N matrix; each
function fills B in place.
"""

from __future__ import annotations

from systemslabs.cachelab import Matrix, TransRegistry

TRANSPOSE_SUBMIT_DESC = "Transpose submission"
TRANS_DESC = "Simple row-wise scan transpose"


def transpose_submit(m: int, n: int, a: Matrix, b: Matrix) -> None:
    """Transpose with the strategy chosen for the matrix width."""
    if m == 32:
        trans32(m, n, a, b)
    elif m == 64:
        trans64(m, n, a, b)
    else:
        trans61(m, n, a, b)


def trans(m: int, n: int, a: Matrix, b: Matrix) -> None:
    """Simple row-wise scan transpose."""
    for i, row in enumerate(a[:n]):
        for j, value in enumerate(row[:m]):
            b[j][i] = value


def trans32(m: int, n: int, a: Matrix, b: Matrix) -> None:
    """Transpose in 8 x 8 blocks, reading a whole block row at a time."""
    for i in range(0, m, 8):
        for j in range(0, n, 8):
            for row in range(i, i + 8):
                for offset, value in enumerate(a[row][j:j + 8]):
                    b[j + offset][row] = value


def trans64(m: int, n: int, a: Matrix, b: Matrix) -> None:
    """Transpose 8 x 8 blocks in 4 x 4 quarters to avoid conflict misses."""
    for i in range(0, m, 8):
        for j in range(0, n, 8):
            # Upper half of A: left quarter to its place, right quarter parked.
            for k in range(4):
                values = a[i + k][j:j + 8]
                for offset in range(4):
                    b[j + offset][i + k] = values[offset]
                    b[j + offset][i + k + 4] = values[offset + 4]
            # Swap the parked quarter with the lower-left quarter of A.
            for k in range(4):
                lower = [a[i + 4 + r][j + k] for r in range(4)]
                parked = b[j + k][i + 4:i + 8]
                b[j + k][i + 4:i + 8] = lower
                b[j + 4 + k][i:i + 4] = parked
            # Lower-right quarter.
            for k in range(4):
                for offset in range(4, 8):
                    b[j + offset][i + 4 + k] = a[i + 4 + k][j + offset]


def trans61(m: int, n: int, a: Matrix, b: Matrix) -> None:
    """Transpose in 17 x 17 blocks, clipped at the matrix edges."""
    block = 17
    for i in range(0, n, block):
        for j in range(0, m, block):
            for k in range(i, min(i + block, n)):
                for col in range(j, min(j + block, m)):
                    b[col][k] = a[k][col]


def register_functions(registry: TransRegistry) -> None:
    """Register the transpose functions to be evaluated."""
    registry.register(transpose_submit, TRANSPOSE_SUBMIT_DESC)
    registry.register(trans, TRANS_DESC)


def is_transpose(m: int, n: int, a: Matrix, b: Matrix) -> bool:
    """Return whether B is the transpose of A."""
    return all(
        value == b[j][i]
        for i, row in enumerate(a[:n])
        for j, value in enumerate(row[:m])
    )