# utils/helpers.py
"""Small checks and array helpers shared by the feature kinds."""

import numpy as np

from .exceptions import PreconditionError

UNSET = -1


def check_index(value: int, upper: int, name: str) -> int:
    """Raise PreconditionError unless 0 <= value < upper."""
    if not 0 <= value < upper:
        raise PreconditionError(f"{name}={value} outside [0, {upper})")
    return value


def check_optional_index(value: int, upper: int, name: str) -> int:
    """Like check_index, but UNSET (-1) is accepted."""
    if value == UNSET:
        return value
    return check_index(value, upper, name)


def padded_window(observations: np.ndarray, center: int, radius: int) -> np.ndarray:
    """
    Concatenate the rows center-radius .. center+radius of a (length, dim) array.

    Rows outside [0, length) contribute zeros.
    """
    length, dim = observations.shape
    window = np.zeros((2 * radius + 1, dim), dtype=np.float64)
    lo = max(0, center - radius)
    hi = min(length, center + radius + 1)
    if lo < hi:
        window[lo - (center - radius):hi - (center - radius)] = observations[lo:hi]
    return window.reshape(-1)
