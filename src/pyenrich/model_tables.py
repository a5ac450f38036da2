"""Immutable yield-table containers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from .constants import ELEMENT_COUNT, ELEMENT_NAMES, LOG10_MIN_METALLICITY, METALLICITY_FLOOR
from .errors import TableError
from .interpolation import resample_log_mass


def _frozen(values, name: str, ndim: int) -> np.ndarray:
    arr = np.array(values, dtype=float)
    if arr.ndim != ndim:
        raise TableError(f"{name} must be {ndim}-dimensional, got shape {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise TableError(f"{name} contains non-finite values")
    arr.setflags(write=False)
    return arr


def _element_rows(names: Sequence[str]) -> list[int]:
    """Row of each tracked element in a table that lists ``names``."""
    lookup = {str(n).strip().lower(): i for i, n in enumerate(names)}
    rows = []
    for name in ELEMENT_NAMES:
        if name.lower() not in lookup:
            raise TableError(f"element {name!r} missing from yield table (have {list(names)})")
        rows.append(lookup[name.lower()])
    return rows


@dataclass(frozen=True)
class YieldTable:
    """Yields of one channel on a (metallicity, element, mass) grid.

    ``yields[iz, e, im]`` is the net mass of element ``e`` produced by one star
    of initial mass ``mass[im]``; ``ejecta[iz, im]`` is the total mass it
    ejects and ``total_metals[iz, im]`` the net mass of all metals it
    produces. All masses are in Msun, ``metallicity`` is the linear total
    metal mass fraction of the progenitor.
    """

    mass: np.ndarray
    metallicity: np.ndarray
    yields: np.ndarray
    ejecta: np.ndarray
    total_metals: np.ndarray

    def __post_init__(self) -> None:
        mass = _frozen(self.mass, "mass", 1)
        metallicity = _frozen(self.metallicity, "metallicity", 1)
        yields = _frozen(self.yields, "yields", 3)
        ejecta = _frozen(self.ejecta, "ejecta", 2)
        total_metals = _frozen(self.total_metals, "total_metals", 2)

        if len(mass) < 2 or np.any(np.diff(mass) <= 0.0) or mass[0] <= 0.0:
            raise TableError("yield mass axis must be positive and strictly increasing")
        if len(metallicity) < 1 or np.any(np.diff(metallicity) <= 0.0) or metallicity[0] < 0.0:
            raise TableError("yield metallicity axis must be non-negative and strictly increasing")
        n_z, n_mass = len(metallicity), len(mass)
        if yields.shape != (n_z, ELEMENT_COUNT, n_mass):
            raise TableError(f"yields has shape {yields.shape}, expected {(n_z, ELEMENT_COUNT, n_mass)}")
        if ejecta.shape != (n_z, n_mass):
            raise TableError(f"ejecta has shape {ejecta.shape}, expected {(n_z, n_mass)}")
        if total_metals.shape != (n_z, n_mass):
            raise TableError(f"total_metals has shape {total_metals.shape}, expected {(n_z, n_mass)}")
        if np.any(ejecta > mass[None, :]):
            raise TableError("ejected mass exceeds the progenitor mass")

        object.__setattr__(self, "mass", mass)
        object.__setattr__(self, "metallicity", metallicity)
        object.__setattr__(self, "yields", yields)
        object.__setattr__(self, "ejecta", ejecta)
        object.__setattr__(self, "total_metals", total_metals)

    @classmethod
    def from_named_elements(
        cls,
        element_names: Sequence[str],
        mass,
        metallicity,
        yields,
        ejecta,
        total_metals,
    ) -> "YieldTable":
        """Build a table from a loader's arrays, picking the tracked elements by name."""
        yields = np.asarray(yields, dtype=float)
        if yields.ndim != 3 or yields.shape[1] != len(element_names):
            raise TableError("yields element axis does not match the element names")
        return cls(mass, metallicity, yields[:, _element_rows(element_names), :], ejecta, total_metals)

    @property
    def log10_metallicity(self) -> np.ndarray:
        return np.log10(np.maximum(self.metallicity, METALLICITY_FLOOR)).clip(min=LOG10_MIN_METALLICITY)


@dataclass(frozen=True)
class SNIaYields:
    """Mass ejected per SNIa event, per tracked element and for all metals."""

    yields: np.ndarray
    total_metals: float

    def __post_init__(self) -> None:
        yields = _frozen(self.yields, "SNIa yields", 1)
        if yields.shape != (ELEMENT_COUNT,):
            raise TableError(f"SNIa yields have shape {yields.shape}, expected {(ELEMENT_COUNT,)}")
        total_metals = float(self.total_metals)
        if not np.isfinite(total_metals) or total_metals < 0.0:
            raise TableError("SNIa total metal yield must be finite and >= 0")
        object.__setattr__(self, "yields", yields)
        object.__setattr__(self, "total_metals", total_metals)

    @classmethod
    def from_named_elements(cls, element_names: Sequence[str], yields, total_metals: float) -> "SNIaYields":
        yields = np.asarray(yields, dtype=float)
        if yields.shape != (len(element_names),):
            raise TableError("SNIa yields do not match the element names")
        return cls(yields[_element_rows(element_names)], total_metals)


@dataclass(frozen=True)
class ResampledYieldTable:
    """A :class:`YieldTable` evaluated on the IMF mass bins.

    Arrays are indexed ``[iz, e, ibin]`` and ``[iz, ibin]``; the metallicity
    axis is log10 with zero metallicity mapped to the floor sentinel.
    """

    log10_metallicity: np.ndarray
    yields: np.ndarray
    ejecta: np.ndarray
    total_metals: np.ndarray

    def __post_init__(self) -> None:
        for arr in (self.log10_metallicity, self.yields, self.ejecta, self.total_metals):
            arr.setflags(write=False)

    @property
    def n_z(self) -> int:
        return len(self.log10_metallicity)


def resample_yield_table(
    table: YieldTable,
    log10_mass_grid: np.ndarray,
    element_factors: np.ndarray | None = None,
) -> ResampledYieldTable:
    """Evaluate a yield table on the IMF mass bins.

    ``element_factors`` scales each element's net yield (used to adjust
    the SNII yields of individual elements).
    """
    yields = resample_log_mass(table.mass, table.yields, log10_mass_grid)
    if element_factors is not None:
        yields = yields * np.asarray(element_factors, dtype=float)[None, :, None]
    return ResampledYieldTable(
        log10_metallicity=np.array(table.log10_metallicity, dtype=float),
        yields=yields,
        ejecta=resample_log_mass(table.mass, table.ejecta, log10_mass_grid),
        total_metals=resample_log_mass(table.mass, table.total_metals, log10_mass_grid),
    )
