import logging
import math
import sys
from concurrent.futures import ThreadPoolExecutor
from typing import TextIO, Tuple

import numpy as np
from numba import njit

from operations.base_operation import BaseOperation, OperationFactory, OperationOptions

logger = logging.getLogger(__name__)


@njit(nogil=True, cache=True)
def add_rows(a, b, out, start, end):
    # element-wise a + b over rows [start, end)
    for i in range(start, end):
        for j in range(a.shape[1]):
            out[i, j] = a[i, j] + b[i, j]


def read_matrix_input(stream: TextIO) -> Tuple[np.ndarray, np.ndarray]:
    """
    Reads two integer matrices of the same shape:

        rows cols
        <blank line>
        rows lines of matrix A
        <blank line>
        rows lines of matrix B
    """
    lines = stream.read().splitlines()
    if not lines or not lines[0].strip():
        raise ValueError("Missing matrix dimensions")

    dims = lines[0].split()
    if len(dims) != 2:
        raise ValueError(f"Expected 'rows cols', got {lines[0]!r}")
    rows, cols = (int(d) for d in dims)
    if rows < 1 or cols < 1:
        raise ValueError(f"Matrix dimensions must be positive, got {rows}x{cols}")

    body = [line for line in lines[1:] if line.strip()]
    if len(body) != 2 * rows:
        raise ValueError(f"Expected {2 * rows} matrix rows, got {len(body)}")

    def parse(block):
        matrix = np.empty((rows, cols), dtype=np.int64)
        for i, line in enumerate(block):
            values = line.split()
            if len(values) != cols:
                raise ValueError(f"Expected {cols} values in row {i}, got {len(values)}")
            matrix[i] = [int(v) for v in values]
        return matrix

    return parse(body[:rows]), parse(body[rows:])


def format_matrix(matrix: np.ndarray) -> str:
    return "".join(" ".join(str(v) for v in row) + "\n" for row in matrix)


class MultiThreadedMatrixAddition:
    """Adds two matrices with one worker per contiguous band of rows."""

    def __init__(self, threads: int = 1):
        if isinstance(threads, bool) or not isinstance(threads, int) or threads < 1:
            raise ValueError(f"Thread count must be a positive integer, got {threads!r}")
        self.threads = threads

    def add(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        a = np.ascontiguousarray(a, dtype=np.int64)
        b = np.ascontiguousarray(b, dtype=np.int64)
        if a.ndim != 2 or a.shape != b.shape:
            raise ValueError(f"Matrix shapes differ: {a.shape} and {b.shape}")

        rows = a.shape[0]
        out = np.empty_like(a)
        workers = min(self.threads, rows)
        band_height = math.ceil(rows / workers)

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="matrix-band") as executor:
            futures = [executor.submit(add_rows, a, b, out, start, min(start + band_height, rows))
                       for start in range(0, rows, band_height)]
            for future in futures:
                future.result()
        return out


class MatrixAdditionOperation(BaseOperation):
    def __init__(self):
        super().__init__("matrix-addition")

    def execute(self, options: OperationOptions) -> np.ndarray:
        if options.input:
            with open(options.input, "r", encoding="utf-8") as f:
                a, b = read_matrix_input(f)
        else:
            a, b = read_matrix_input(sys.stdin)

        logger.info("Adding %dx%d matrices with %d thread(s)", a.shape[0], a.shape[1], options.threads)
        result = MultiThreadedMatrixAddition(options.threads).add(a, b)

        text = format_matrix(result)
        if options.output:
            with open(options.output, "w", encoding="utf-8") as f:
                f.write(text)
        else:
            sys.stdout.write(text)
        return result


OperationFactory.register("matrix-addition", MatrixAdditionOperation)
