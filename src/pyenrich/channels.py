"""SNIa, SNII and AGB enrichment channels.

Each channel receives the log10 range of initial masses dying during the
step and adds what those stars return to ``record``. Quantities are per
unit initial stellar mass of the particle.
"""

from __future__ import annotations

import logging
import math

import numpy as np

from .constants import (
    ELEMENT_COUNT,
    LOG10_SNIA_MAX_MASS_MSUN,
    LOG10_SNII_MAX_MASS_MSUN,
    LOG10_SNII_MIN_MASS_MSUN,
    METALLICITY_FLOOR,
    SNIA_MAX_MASS_MSUN,
    Element,
)
from .errors import NormalizationError
from .imf_mass_bins import IMFIntegrator, IMFMoment
from .interpolation import determine_bin_yield
from .model_tables import ResampledYieldTable
from .properties import StellarPopulationProperties
from .state import EnrichmentRecord, StarParticle

logger = logging.getLogger(__name__)


def evolve_snia(
    log10_min_mass: float,
    log10_max_mass: float,
    props: StellarPopulationProperties,
    particle: StarParticle,
    record: EnrichmentRecord,
    dt_gyr: float,
) -> None:
    """Type Ia supernovae from an exponential delay-time distribution.

    The particle's SNIa clock always ends the call at the end of the
    integrated window, so consecutive steps tile in time.
    """
    clock = particle.time_since_enrich_gyr

    if log10_min_mass >= LOG10_SNIA_MAX_MASS_MSUN:
        particle.time_since_enrich_gyr = clock + dt_gyr
        return

    if log10_max_mass > LOG10_SNIA_MAX_MASS_MSUN:
        lifetime_gyr = props.lifetimes.lifetime(SNIA_MAX_MASS_MSUN, particle.metal_mass_fraction_total)
        dt_gyr = max(clock + dt_gyr - lifetime_gyr, 0.0)
        clock = lifetime_gyr

    tau = props.snia_timescale_gyr
    num_snia = props.snia_efficiency * (math.exp(-clock / tau) - math.exp(-(clock + dt_gyr) / tau))
    particle.time_since_enrich_gyr = clock + dt_gyr
    record.num_snia = num_snia
    logger.debug("SNIa: clock=%g dt=%g num=%e", clock, dt_gyr, num_snia)

    if props.snia_mass_transfer:
        released_metals = num_snia * props.snia.total_metals
        record.metals_released += num_snia * props.snia.yields
        record.mass_from_snia += released_metals
        record.metals_from_snia += released_metals
        record.metal_mass_released += released_metals
        # SNIa eject no H or He, so the released mass is all metals.
        record.iron_from_snia += num_snia * props.snia.yields[Element.Fe]
    else:
        record.iron_from_snia = 0.0
        record.metals_from_snia = 0.0
        record.mass_from_snia = 0.0


def _normalised_table_yields(
    channel: str,
    log10_min_mass: float,
    log10_max_mass: float,
    table: ResampledYieldTable,
    imf: IMFIntegrator,
    particle: StarParticle,
) -> tuple[np.ndarray, float]:
    """Per-element and total-metal mass ejected by one yield table over a mass range.

    Both are rescaled so that the released H, He and metals add up to the
    tabulated ejecta mass.
    """
    z_total = particle.metal_mass_fraction_total
    iz_low, iz_high, dz = determine_bin_yield(math.log10(max(z_total, METALLICITY_FLOOR)), table.log10_metallicity)
    ejecta_low = table.ejecta[iz_low]
    ejecta_high = table.ejecta[iz_high]

    # yields are produced by the star, ejecta were already in it
    metals = np.empty(ELEMENT_COUNT, dtype=float)
    for e in Element:
        x = particle.metal_mass_fraction[e]
        stellar_yield = (1.0 - dz) * (table.yields[iz_low, e] + x * ejecta_low) + dz * (
            table.yields[iz_high, e] + x * ejecta_high
        )
        metals[e] = imf.integrate(log10_min_mass, log10_max_mass, 0.0, IMFMoment.YIELD, stellar_yield)

    stellar_yield = (1.0 - dz) * (table.total_metals[iz_low] + z_total * ejecta_low) + dz * (
        table.total_metals[iz_high] + z_total * ejecta_high
    )
    metal_mass = imf.integrate(log10_min_mass, log10_max_mass, 0.0, IMFMoment.YIELD, stellar_yield)

    np.maximum(metals, 0.0, out=metals)
    metal_mass = max(metal_mass, 0.0)

    stellar_yield = (1.0 - dz) * ejecta_low + dz * ejecta_high
    norm0 = imf.integrate(log10_min_mass, log10_max_mass, 0.0, IMFMoment.YIELD, stellar_yield)
    norm1 = metal_mass + metals[Element.H] + metals[Element.He]
    if not norm1 > 0.0:
        raise NormalizationError(f"{channel}: wrong normalization, norm1 = {norm1:e}")

    scale = norm0 / norm1
    logger.debug(
        "%s: log10 m=[%.4f, %.4f] z=(%d, %d, %.3f) norm0=%e norm1=%e",
        channel,
        log10_min_mass,
        log10_max_mass,
        iz_low,
        iz_high,
        dz,
        norm0,
        norm1,
    )
    return metals * scale, metal_mass * scale


def evolve_snii(
    log10_min_mass: float,
    log10_max_mass: float,
    props: StellarPopulationProperties,
    particle: StarParticle,
    record: EnrichmentRecord,
) -> None:
    """Type II supernovae of stars between 6 and 100 Msun."""
    log10_min_mass = max(log10_min_mass, LOG10_SNII_MIN_MASS_MSUN)
    log10_max_mass = min(log10_max_mass, LOG10_SNII_MAX_MASS_MSUN)
    if log10_min_mass >= log10_max_mass:
        return

    if not props.snii_mass_transfer:
        record.mass_from_snii = 0.0
        record.metals_from_snii = 0.0
        return

    metals, metal_mass = _normalised_table_yields("SNII", log10_min_mass, log10_max_mass, props.snii, props.imf, particle)
    record.metals_released += metals
    record.mass_from_snii += float(np.sum(metals))
    record.metal_mass_released += metal_mass
    record.metals_from_snii += metal_mass


def evolve_agb(
    log10_min_mass: float,
    log10_max_mass: float,
    props: StellarPopulationProperties,
    particle: StarParticle,
    record: EnrichmentRecord,
) -> None:
    """Mass loss of AGB stars, i.e. stars below the SNII mass window."""
    if not props.agb_mass_transfer:
        return

    log10_max_mass = min(log10_max_mass, LOG10_SNII_MIN_MASS_MSUN)
    if log10_min_mass >= log10_max_mass:
        return

    metals, metal_mass = _normalised_table_yields("AGB", log10_min_mass, log10_max_mass, props.agb, props.imf, particle)
    record.metals_released += metals
    record.mass_from_agb += float(np.sum(metals))
    record.metal_mass_released += metal_mass
    record.metals_from_agb += metal_mass
