"""Bracket lookups and linear interpolation on tabulated axes."""

from __future__ import annotations

from typing import NamedTuple

import numpy as np

from .constants import LOG10_MIN_METALLICITY


class YieldBracket(NamedTuple):
    """Pair of metallicity rows and the interpolation fraction between them."""

    low: int
    high: int
    fraction: float


def locate_bracket(axis: np.ndarray, value: float) -> tuple[int, float]:
    """Clamped forward-scan bracket on a strictly increasing axis.

    Values at or below the first node give ``(0, 0.0)``; values at or above
    the last node give ``(n - 2, 1.0)``.
    """
    n = len(axis)
    if value <= axis[0]:
        return 0, 0.0
    if value >= axis[n - 1]:
        return n - 2, 1.0
    index = 0
    while index < n - 2 and axis[index + 1] <= value:
        index += 1
    fraction = (value - axis[index]) / (axis[index + 1] - axis[index])
    return index, float(fraction)


def determine_bin_yield(log_metallicity: float, log_metallicity_axis: np.ndarray) -> YieldBracket:
    """Resolve a log10 metallicity to the bracketing rows of a yield table.

    Parameters
    ----------
    log_metallicity : float
        log10 of the total metal mass fraction.
    log_metallicity_axis : np.ndarray
        Strictly increasing log10 metallicity axis of one yield table.

    Returns
    -------
    YieldBracket
        ``low <= high`` and ``0 <= fraction <= 1``. Queries at or below the
        metallicity floor use the lowest row without interpolation, queries
        outside the axis are pinned to the edge rows with zero fraction.
    """
    if log_metallicity <= LOG10_MIN_METALLICITY:
        return YieldBracket(0, 0, 0.0)

    n_z = len(log_metallicity_axis)
    low = 0
    while low < n_z - 1 and log_metallicity_axis[low + 1] <= log_metallicity:
        low += 1
    high = min(low + 1, n_z - 1)

    if log_metallicity_axis[0] <= log_metallicity <= log_metallicity_axis[n_z - 1]:
        dz = log_metallicity - log_metallicity_axis[low]
    else:
        dz = 0.0

    width = log_metallicity_axis[high] - log_metallicity_axis[low]
    fraction = dz / width if width > 0.0 else 0.0
    return YieldBracket(low, high, float(fraction))


def lin_interp(table: np.ndarray, index: int, fraction: float) -> float:
    """Linear interpolation between ``table[index]`` and ``table[index + 1]``."""
    return float((1.0 - fraction) * table[index] + fraction * table[index + 1])


def bilin_interp(table: np.ndarray, i: int, j: int, dx: float, dy: float) -> float:
    return float(
        (1.0 - dx) * (1.0 - dy) * table[i, j]
        + (1.0 - dx) * dy * table[i, j + 1]
        + dx * (1.0 - dy) * table[i + 1, j]
        + dx * dy * table[i + 1, j + 1]
    )


def resample_log_mass(
    table_mass: np.ndarray,
    values: np.ndarray,
    log10_mass_grid: np.ndarray,
) -> np.ndarray:
    """Resample ``values[..., n_mass]`` onto a log10 mass grid.

    Linear in log10 mass, held constant beyond the table ends.
    """
    log10_table_mass = np.log10(table_mass)
    flat = values.reshape(-1, values.shape[-1])
    out = np.empty((flat.shape[0], len(log10_mass_grid)), dtype=float)
    for row in range(flat.shape[0]):
        out[row] = np.interp(log10_mass_grid, log10_table_mass, flat[row])
    return out.reshape(values.shape[:-1] + (len(log10_mass_grid),))
