"""Analytic, mass-conserving tables for examples and tests.

The net yields of every synthetic table satisfy
``yields[H] + yields[He] + total_metals == 0``: stars only convert H into
heavier elements. For a particle whose H, He and total metal fractions add
up to one, the SNII and AGB normalization factor is then exactly one.
"""

from __future__ import annotations

import numpy as np

from .constants import ELEMENT_COUNT, YR_PER_GYR, Element
from .lifetimes import LifetimeTable, MaederMeynet1989
from .model_tables import SNIaYields, YieldTable

# Share of the net metal yield carried by each tracked metal; the rest is
# untracked metals.
SNII_METAL_SHARES = {
    Element.C: 0.09,
    Element.N: 0.01,
    Element.O: 0.55,
    Element.Ne: 0.09,
    Element.Mg: 0.04,
    Element.Si: 0.07,
    Element.Fe: 0.05,
}
AGB_METAL_SHARES = {
    Element.C: 0.55,
    Element.N: 0.25,
    Element.O: 0.08,
    Element.Ne: 0.02,
    Element.Mg: 0.01,
    Element.Si: 0.01,
    Element.Fe: 0.005,
}
SOLAR_METAL_SHARES = {
    Element.C: 0.178,
    Element.N: 0.052,
    Element.O: 0.430,
    Element.Ne: 0.094,
    Element.Mg: 0.053,
    Element.Si: 0.050,
    Element.Fe: 0.097,
}

SNII_MASS = np.array([6.0, 8.0, 10.0, 13.0, 15.0, 20.0, 25.0, 30.0, 40.0, 60.0, 100.0])
SNII_METALLICITY = np.array([0.0, 0.0004, 0.004, 0.008, 0.02, 0.05])
AGB_MASS = np.array([0.8, 1.0, 1.25, 1.5, 2.0, 2.5, 3.0, 4.0, 5.0, 6.0])
AGB_METALLICITY = np.array([0.0, 0.004, 0.019])
LIFETIME_MASS = np.array(
    [0.6, 0.7, 0.8, 0.9, 1.0, 1.2, 1.5, 2.0, 2.5, 3.0, 4.0, 5.0, 6.0, 7.0, 9.0, 12.0, 15.0, 20.0, 30.0, 40.0, 60.0, 100.0, 120.0]
)
LIFETIME_METALLICITY = np.array([0.0004, 0.004, 0.008, 0.02, 0.05])


def solar_composition(metallicity: float = 0.0134) -> np.ndarray:
    """Mass fractions of the tracked elements; H, He and metals sum to one."""
    x = np.zeros(ELEMENT_COUNT, dtype=float)
    helium = 0.2485 + 1.7 * metallicity
    x[Element.He] = helium
    x[Element.H] = 1.0 - helium - metallicity
    for element, share in SOLAR_METAL_SHARES.items():
        x[element] = share * metallicity
    return x


def _yield_table(
    mass: np.ndarray,
    metallicity: np.ndarray,
    remnant: np.ndarray,
    metal_fraction: np.ndarray,
    helium_ratio: float,
    shares: dict[Element, float],
) -> YieldTable:
    n_z, n_mass = len(metallicity), len(mass)
    ejecta = np.broadcast_to(mass - remnant, (n_z, n_mass)).copy()
    total_metals = metal_fraction * mass[None, :]
    yields = np.zeros((n_z, ELEMENT_COUNT, n_mass), dtype=float)
    for element, share in shares.items():
        yields[:, element, :] = share * total_metals
    yields[:, Element.He, :] = helium_ratio * total_metals
    yields[:, Element.H, :] = -(1.0 + helium_ratio) * total_metals
    return YieldTable(mass, metallicity, yields, ejecta, total_metals)


def snii_table() -> YieldTable:
    mass, z = SNII_MASS, SNII_METALLICITY
    remnant = 1.4 + 0.1 * (mass - mass[0])
    metal_fraction = 0.05 + 0.1 * np.log10(mass / mass[0])[None, :] / np.log10(mass[-1] / mass[0]) + 2.0 * z[:, None]
    return _yield_table(mass, z, remnant, metal_fraction, 0.3, SNII_METAL_SHARES)


def agb_table() -> YieldTable:
    mass, z = AGB_MASS, AGB_METALLICITY
    remnant = 0.48 + 0.077 * mass
    metal_fraction = 0.003 + 0.0015 * mass[None, :] + 0.1 * z[:, None]
    return _yield_table(mass, z, remnant, metal_fraction, 3.0, AGB_METAL_SHARES)


def snia_yields() -> SNIaYields:
    """W7-like yields per SNIa event (Msun)."""
    y = np.zeros(ELEMENT_COUNT, dtype=float)
    y[Element.C] = 4.83e-2
    y[Element.N] = 1.16e-6
    y[Element.O] = 1.43e-1
    y[Element.Ne] = 2.02e-3
    y[Element.Mg] = 8.58e-3
    y[Element.Si] = 1.53e-1
    y[Element.Fe] = 6.80e-1
    return SNIaYields(y, 1.37)


def lifetime_table() -> LifetimeTable:
    """Maeder & Meynet (1989) lifetimes, lengthened with metallicity."""
    mm89 = MaederMeynet1989()
    base = np.array([mm89.lifetime(m, 0.0) for m in LIFETIME_MASS])
    scale = 1.0 + 2.5 * LIFETIME_METALLICITY
    log_dying_time = np.log10(base[None, :] * scale[:, None] * YR_PER_GYR)
    return LifetimeTable(LIFETIME_MASS, LIFETIME_METALLICITY, log_dying_time)


def synthetic_tables() -> dict[str, object]:
    """Keyword arguments for :func:`pyenrich.properties.build_properties`."""
    return {
        "snii": snii_table(),
        "agb": agb_table(),
        "snia": snia_yields(),
        "lifetimes": lifetime_table(),
    }
