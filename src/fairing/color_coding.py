"""
Map per-vertex scalar fields to RGB colors.

Colors follow a five-stop piecewise-linear ramp
blue -> cyan -> green -> yellow -> red. Values below the range are pure blue,
values above it pure red.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

# RGB at 0, 1/4, 2/4, 3/4 and 4/4 of the value range
COLOR_STOPS = np.array(
    [
        [0.0, 0.0, 1.0],  # blue
        [0.0, 1.0, 1.0],  # cyan
        [0.0, 1.0, 0.0],  # green
        [1.0, 1.0, 0.0],  # yellow
        [1.0, 0.0, 0.0],  # red
    ]
)
_STOP_POSITIONS = np.linspace(0.0, 1.0, len(COLOR_STOPS))


def value_range(values, bound: int = 1) -> Tuple[float, float]:
    """
    Value range after discarding outliers.

    The lowest and highest ``n // bound`` sorted values are dropped
    (``n = len(values) - 1``). ``bound <= 1`` keeps the full range.
    """
    values = np.sort(np.asarray(values, dtype=np.float64).ravel())
    if values.size == 0:
        raise ValueError("cannot color-code an empty field")
    if bound <= 1:
        return float(values[0]), float(values[-1])
    i = (values.size - 1) // int(bound)
    return float(values[i]), float(values[values.size - 1 - i])


def value_to_color(value, min_value: float, max_value: float) -> np.ndarray:
    """
    Color of ``value`` within ``[min_value, max_value]``.

    Accepts a scalar or an array; returns an array with a trailing RGB axis.
    A zero-width range maps every value at or below it to blue and every value
    above it to red.
    """
    value = np.asarray(value, dtype=np.float64)
    span = max_value - min_value
    if span > 0:
        t = (value - min_value) / span
    else:
        t = np.where(value > max_value, 1.0, 0.0)
    t = np.clip(t, 0.0, 1.0)
    return np.stack([np.interp(t, _STOP_POSITIONS, COLOR_STOPS[:, c]) for c in range(3)], axis=-1)


def color_coding(values, bound: int = 1) -> np.ndarray:
    """
    Colors for a per-vertex scalar field.

    Args:
        values: (N,) scalar field
        bound: outlier clamp, see :func:`value_range`

    Returns:
        colors: (N, 3) RGB in [0, 1]
    """
    min_value, max_value = value_range(values, bound)
    return value_to_color(values, min_value, max_value)
