"""Stellar lifetimes and dying masses.

Three formulations convert between the initial mass of a star and the age
at which it dies:

* Padovani & Matteucci (1993), closed form, metallicity independent.
* Maeder & Meynet (1989), piecewise power laws, metallicity independent.
* Portinari et al. (1998), a tabulated grid in (metallicity, mass).

The formulation is chosen once through :func:`build_lifetime_function`;
the returned object is stored in the population properties and used for
every particle.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Protocol

import numpy as np

from .constants import IMF_MAX_MASS_MSUN, YR_PER_GYR
from .errors import LifetimeModelError, TableError
from .interpolation import bilin_interp, lin_interp, locate_bracket


class LifetimeModel(IntEnum):
    """Lifetime formulation; values match the legacy integer flag."""

    PADOVANI_MATTEUCCI_1993 = 0
    MAEDER_MEYNET_1989 = 1
    PORTINARI_1998 = 2

    @classmethod
    def parse(cls, value: object) -> "LifetimeModel":
        """Accept an enum member, its integer flag or its (case-insensitive) name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().upper()
            if key in cls.__members__:
                return cls[key]
            if key.isdigit():
                value = int(key)
        if isinstance(value, (int, np.integer)) and not isinstance(value, bool):
            try:
                return cls(int(value))
            except ValueError:
                pass
        raise LifetimeModelError(f"stellar lifetime model not defined: {value!r}")


@dataclass(frozen=True)
class LifetimeTable:
    """Dying times on a (metallicity, mass) grid.

    ``log_dying_time[iz, im]`` is log10 of the lifetime in years of a star of
    initial mass ``mass[im]`` (Msun) and metal mass fraction
    ``metallicity[iz]``.
    """

    mass: np.ndarray
    metallicity: np.ndarray
    log_dying_time: np.ndarray

    def __post_init__(self) -> None:
        mass = np.array(self.mass, dtype=float)
        metallicity = np.array(self.metallicity, dtype=float)
        log_dying_time = np.array(self.log_dying_time, dtype=float)
        if mass.ndim != 1 or len(mass) < 2:
            raise TableError("lifetime mass axis needs at least 2 points")
        if metallicity.ndim != 1 or len(metallicity) < 2:
            raise TableError("lifetime metallicity axis needs at least 2 points")
        if np.any(np.diff(mass) <= 0.0):
            raise TableError("lifetime mass axis must be strictly increasing")
        if np.any(np.diff(metallicity) <= 0.0):
            raise TableError("lifetime metallicity axis must be strictly increasing")
        if log_dying_time.shape != (len(metallicity), len(mass)):
            raise TableError(
                f"log_dying_time has shape {log_dying_time.shape}, "
                f"expected {(len(metallicity), len(mass))}"
            )
        if np.any(np.diff(log_dying_time, axis=1) >= 0.0):
            raise TableError("dying times must decrease with mass")
        for arr in (mass, metallicity, log_dying_time):
            arr.setflags(write=False)
        object.__setattr__(self, "mass", mass)
        object.__setattr__(self, "metallicity", metallicity)
        object.__setattr__(self, "log_dying_time", log_dying_time)

    @property
    def n_mass(self) -> int:
        return len(self.mass)

    @property
    def n_z(self) -> int:
        return len(self.metallicity)


class LifetimeFunction(Protocol):
    model: LifetimeModel

    def dying_mass(self, age_gyr: float, metallicity: float) -> float:
        ...

    def lifetime(self, mass: float, metallicity: float) -> float:
        ...


def _massive_star_dying_mass(age_gyr: float) -> float:
    """Inverse of ``1.2 * m**-1.85 + 0.003``, shared by both analytic laws."""
    return ((age_gyr - 0.003) / 1.2) ** (-1.0 / 1.85)


def _pm93_low_mass_dying_mass(age_gyr: float) -> float:
    u = 1.338 - 0.1116 * (9.0 + np.log10(age_gyr))
    return 10 ** (7.764 - (1.79 - u * u) / 0.2232)


_PM93_JOIN_GYR = 0.039765318659064693
# The low-mass branch starts 0.3% above where the massive-star branch ends;
# capping it there keeps the dying mass non-increasing across the join.
_PM93_LOW_MASS_CAP = min(_massive_star_dying_mass(_PM93_JOIN_GYR), IMF_MAX_MASS_MSUN)

# (lower age bound in Gyr, a, b) with m = 10**((a - log10 t) / b), oldest first
_MM89_BRANCHES = (
    (8.4097378, 1.0, 0.6545),
    (0.35207776, 1.35, 3.7),
    (0.050931493, 0.77, 2.51),
    (0.010529099, 0.17, 1.78),
    (0.0037734787, -0.94, 0.86),
)


def _mm89_branch_caps() -> tuple[float, ...]:
    """Dying mass each branch may not exceed: the younger branch's value at the join."""
    caps = []
    cap = IMF_MAX_MASS_MSUN
    younger = _massive_star_dying_mass
    for threshold, a, b in reversed(_MM89_BRANCHES):
        cap = min(younger(threshold), cap)
        caps.append(cap)
        younger = lambda t, a=a, b=b: 10 ** ((a - np.log10(t)) / b)
    return tuple(reversed(caps))


_MM89_CAPS = _mm89_branch_caps()


class PadovaniMatteucci1993:
    model = LifetimeModel.PADOVANI_MATTEUCCI_1993
    branch_ages_gyr = (_PM93_JOIN_GYR, 0.003)

    def dying_mass(self, age_gyr: float, metallicity: float) -> float:
        if age_gyr > _PM93_JOIN_GYR:
            mass = min(_pm93_low_mass_dying_mass(age_gyr), _PM93_LOW_MASS_CAP)
        elif age_gyr > 0.003:
            mass = _massive_star_dying_mass(age_gyr)
        else:
            mass = IMF_MAX_MASS_MSUN
        return float(min(mass, IMF_MAX_MASS_MSUN))

    def lifetime(self, mass: float, metallicity: float) -> float:
        if mass <= 0.6:
            t = 160.0
        elif mass <= 6.6:
            t = 10 ** ((0.334 - np.sqrt(1.79 - 0.2232 * (7.764 - np.log10(mass)))) / 0.1116)
        else:
            t = 1.2 * mass**-1.85 + 0.003
        return float(t)


class MaederMeynet1989:
    model = LifetimeModel.MAEDER_MEYNET_1989
    branch_ages_gyr = tuple(threshold for threshold, _, _ in _MM89_BRANCHES) + (0.003,)

    def dying_mass(self, age_gyr: float, metallicity: float) -> float:
        for (threshold, a, b), cap in zip(_MM89_BRANCHES, _MM89_CAPS):
            if age_gyr >= threshold:
                return float(min(10 ** ((a - np.log10(age_gyr)) / b), cap))
        if age_gyr > 0.003:
            return float(min(_massive_star_dying_mass(age_gyr), IMF_MAX_MASS_MSUN))
        return IMF_MAX_MASS_MSUN

    def lifetime(self, mass: float, metallicity: float) -> float:
        if mass <= 1.3:
            t = 10 ** (-0.6545 * np.log10(mass) + 1.0)
        elif mass <= 3.0:
            t = 10 ** (-3.7 * np.log10(mass) + 1.35)
        elif mass <= 7.0:
            t = 10 ** (-2.51 * np.log10(mass) + 0.77)
        elif mass <= 15.0:
            t = 10 ** (-1.78 * np.log10(mass) + 0.17)
        elif mass <= 60.0:
            t = 10 ** (-0.86 * np.log10(mass) - 0.94)
        else:
            t = 1.2 * mass**-1.85 + 0.003
        return float(t)


def _time_bracket(row: np.ndarray, log_age_yr: float) -> tuple[int, float]:
    """Bracket a log age on one row of dying times (decreasing with mass)."""
    n = len(row)
    if log_age_yr >= row[0]:
        return 0, 0.0
    if log_age_yr <= row[n - 1]:
        return n - 2, 1.0
    i = n - 1
    while row[i] < log_age_yr:
        i -= 1
    return i, float((log_age_yr - row[i]) / (row[i + 1] - row[i]))


@dataclass(frozen=True)
class Portinari1998:
    table: LifetimeTable
    model: LifetimeModel = LifetimeModel.PORTINARI_1998

    def dying_mass(self, age_gyr: float, metallicity: float) -> float:
        if age_gyr <= 0.0:
            return IMF_MAX_MASS_MSUN
        tab = self.table
        log_age_yr = np.log10(age_gyr * YR_PER_GYR)

        iz, d_metal = locate_bracket(tab.metallicity, metallicity)
        i1, d_time1 = _time_bracket(tab.log_dying_time[iz], log_age_yr)
        i2, d_time2 = _time_bracket(tab.log_dying_time[iz + 1], log_age_yr)

        mass1 = lin_interp(tab.mass, i1, d_time1)
        mass2 = lin_interp(tab.mass, i2, d_time2)
        mass = (1.0 - d_metal) * mass1 + d_metal * mass2
        return float(min(mass, IMF_MAX_MASS_MSUN))

    def lifetime(self, mass: float, metallicity: float) -> float:
        tab = self.table
        im, d_mass = locate_bracket(tab.mass, mass)
        iz, d_metal = locate_bracket(tab.metallicity, metallicity)
        log_time_yr = bilin_interp(tab.log_dying_time, iz, im, d_metal, d_mass)
        return float(10**log_time_yr / YR_PER_GYR)


def build_lifetime_function(model: object, table: LifetimeTable | None = None) -> LifetimeFunction:
    """Select the lifetime formulation once, at initialization."""
    model = LifetimeModel.parse(model)
    if model is LifetimeModel.PADOVANI_MATTEUCCI_1993:
        return PadovaniMatteucci1993()
    if model is LifetimeModel.MAEDER_MEYNET_1989:
        return MaederMeynet1989()
    if table is None:
        raise LifetimeModelError("the Portinari et al. (1998) lifetimes need a LifetimeTable")
    return Portinari1998(table)


def dying_mass(age_gyr: float, metallicity: float, model: object, table: LifetimeTable | None = None) -> float:
    """Initial mass (Msun) of stars that die at ``age_gyr``.

    Parameters
    ----------
    age_gyr : float
        Age of the stellar population in Gyr.
    metallicity : float
        Total metal mass fraction (only used by the tabulated model).
    model : LifetimeModel or int or str
        Lifetime formulation.
    table : LifetimeTable, optional
        Required for ``LifetimeModel.PORTINARI_1998``.

    Returns
    -------
    float
        Dying mass, never above ``IMF_MAX_MASS_MSUN``.
    """
    return build_lifetime_function(model, table).dying_mass(age_gyr, metallicity)


def lifetime(mass: float, metallicity: float, model: object, table: LifetimeTable | None = None) -> float:
    """Lifetime in Gyr of a star of initial mass ``mass`` (Msun)."""
    return build_lifetime_function(model, table).lifetime(mass, metallicity)
