"""Angle helpers shared by the orientation filter, targeting and projection."""

from typing import Iterable

import numpy as np


def normalize_360(angle: float) -> float:
    """Wrap an angle in degrees to [0, 360)."""
    wrapped = float(angle) % 360.0
    # Tiny negative inputs round up to exactly 360.0
    if wrapped >= 360.0:
        wrapped = 0.0
    return wrapped


def normalize_signed_180(angle: float) -> float:
    """Wrap an angle in degrees to (-180, 180]."""
    wrapped = normalize_360(angle)
    if wrapped > 180.0:
        wrapped -= 360.0
    return wrapped


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def circular_mean(angles: Iterable[float]) -> float:
    """
    Mean direction of a set of angles in degrees, in [0, 360).

    Each angle is treated as a unit vector; the mean is the direction of the
    vector sum, so samples straddling 0°/360° average to ~0° instead of ~180°.
    Returns 0.0 for an empty input.
    """
    values = np.radians(np.fromiter(angles, dtype=float))
    if values.size == 0:
        return 0.0

    sin_sum = np.sin(values).sum()
    cos_sum = np.cos(values).sum()
    return normalize_360(np.degrees(np.arctan2(sin_sum, cos_sum)))


def arithmetic_mean(values: Iterable[float]) -> float:
    data = np.fromiter(values, dtype=float)
    if data.size == 0:
        return 0.0
    return float(data.mean())
