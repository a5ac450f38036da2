"""Named constants for tracked elements and stellar mass limits.

These replace the magic numbers and indices that would otherwise be
scattered across the enrichment channels.
"""

from __future__ import annotations

from enum import IntEnum
import math


class Element(IntEnum):
    """Tracked chemical elements, indexing every per-element array."""

    H = 0
    He = 1
    C = 2
    N = 3
    O = 4
    Ne = 5
    Mg = 6
    Si = 7
    Fe = 8


ELEMENT_COUNT = len(Element)

# Names as they appear in the yield tables.
ELEMENT_NAMES = (
    "Hydrogen",
    "Helium",
    "Carbon",
    "Nitrogen",
    "Oxygen",
    "Neon",
    "Magnesium",
    "Silicon",
    "Iron",
)

# ---------------------------------------------------------------------------
# Progenitor mass windows (Msun)
# ---------------------------------------------------------------------------
SNII_MIN_MASS_MSUN = 6.0
SNII_MAX_MASS_MSUN = 100.0
SNIA_MAX_MASS_MSUN = 8.0
IMF_MAX_MASS_MSUN = 100.0

LOG10_SNII_MIN_MASS_MSUN = math.log10(SNII_MIN_MASS_MSUN)
LOG10_SNII_MAX_MASS_MSUN = math.log10(SNII_MAX_MASS_MSUN)
LOG10_SNIA_MAX_MASS_MSUN = math.log10(SNIA_MAX_MASS_MSUN)

# ---------------------------------------------------------------------------
# Metallicity floor
# ---------------------------------------------------------------------------
METALLICITY_FLOOR = 1.0e-20
LOG10_MIN_METALLICITY = -20.0

# ---------------------------------------------------------------------------
# Units and defaults
# ---------------------------------------------------------------------------
YR_PER_GYR = 1.0e9
SOLAR_MASS_G = 1.989e33
SN_ENERGY_ERG = 1.0e51
SN_HEATING_TEMPERATURE_K = 10.0**7.5

IMF_N_BINS = 200
IMF_MIN_MASS_MSUN = 0.1
