"""Numba-accelerated IMF integration backend."""

from __future__ import annotations

import math

import numpy as np

try:
    from numba import njit
except Exception as exc:  # pragma: no cover - optional dependency
    njit = None
    _NUMBA_IMPORT_ERROR = exc
else:
    _NUMBA_IMPORT_ERROR = None


if njit is not None:

    @njit(cache=True)
    def _trapezoid_with_edges_numba(
        integrand: np.ndarray,
        log10_mass: np.ndarray,
        ilow: int,
        ihigh: int,
        log10_min_mass: float,
        log10_max_mass: float,
        dlog10_mass: float,
    ) -> float:
        result = 0.0
        for i in range(ilow, ihigh + 1):
            result += integrand[i]
        result -= 0.5 * (integrand[ilow] + integrand[ihigh])

        dm = (log10_min_mass - log10_mass[ilow]) / dlog10_mass
        if dm < 0.5:
            result -= dm * integrand[ilow]
        else:
            result -= 0.5 * integrand[ilow]
            result -= (dm - 0.5) * integrand[ilow + 1]

        dm = (log10_max_mass - log10_mass[ihigh - 1]) / dlog10_mass
        if dm < 0.5:
            result -= 0.5 * integrand[ihigh]
            result -= (0.5 - dm) * integrand[ihigh - 1]
        else:
            result -= (1.0 - dm) * integrand[ihigh]

        return result * dlog10_mass * math.log(10.0)


def _numba_kernel(
    integrand: np.ndarray,
    log10_mass: np.ndarray,
    ilow: int,
    ihigh: int,
    log10_min_mass: float,
    log10_max_mass: float,
    dlog10_mass: float,
) -> float:
    return float(
        _trapezoid_with_edges_numba(
            np.ascontiguousarray(integrand, dtype=np.float64),
            np.ascontiguousarray(log10_mass, dtype=np.float64),
            int(ilow),
            int(ihigh),
            float(log10_min_mass),
            float(log10_max_mass),
            float(dlog10_mass),
        )
    )


def build_numba_backend():
    if njit is None:
        raise RuntimeError(
            f"Numba backend unavailable: {_NUMBA_IMPORT_ERROR}"
        ) from _NUMBA_IMPORT_ERROR
    return _numba_kernel
