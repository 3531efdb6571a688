"""Aperture gain of a uniform rectangular antenna array."""

import numpy as np


def array_gain_db(rows: int, cols: int) -> float:
    """
    Array gain of a rows x cols element grid, 10*log10(N).

    Args:
        rows: Number of element rows (>= 1).
        cols: Number of element columns (>= 1).

    Returns:
        Gain in dB relative to a single element.

    Raises:
        ValueError: If either dimension is smaller than one.
    """
    if int(rows) != rows or int(cols) != cols:
        raise ValueError(f"Array dimensions must be whole numbers, got {rows}x{cols}")
    if rows < 1 or cols < 1:
        raise ValueError(f"Array dimensions must be at least 1x1, got {rows}x{cols}")
    return float(10 * np.log10(int(rows) * int(cols)))
