"""Statistics primitives used by the aggregate functions.

Every function takes a non-empty sequence of floats and returns a float.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np


def _as_array(values: Sequence[float]) -> np.ndarray:
    array = np.asarray(values, dtype=float)
    if array.size == 0:
        raise ValueError("at least one value is required")
    return array


def minimum(values: Sequence[float]) -> float:
    return float(min(_as_array(values)))


def maximum(values: Sequence[float]) -> float:
    return float(max(_as_array(values)))


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean."""
    return float(np.mean(_as_array(values)))


def median(values: Sequence[float]) -> float:
    """Middle value; the mean of the two middle values for an even count."""
    return float(np.median(_as_array(values)))


def mode(values: Sequence[float]) -> float:
    """Most frequent value. Ties go to the lowest value."""
    unique, counts = np.unique(_as_array(values), return_counts=True)
    # np.unique sorts ascending and argmax returns the first maximum
    return float(unique[np.argmax(counts)])


def choice(values: Sequence[float], rng: np.random.Generator) -> float:
    """Uniformly random pick drawn from ``rng``."""
    array = _as_array(values)
    return float(array[rng.integers(array.size)])
