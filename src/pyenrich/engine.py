"""Per-particle stellar evolution step."""

from __future__ import annotations

import logging
import math

from .channels import evolve_agb, evolve_snia, evolve_snii
from .errors import DyingMassOrderError
from .properties import StellarPopulationProperties
from .state import EnrichmentRecord, StarParticle

logger = logging.getLogger(__name__)


def compute_stellar_evolution(
    props: StellarPopulationProperties,
    particle: StarParticle,
    dt: float,
    record: EnrichmentRecord | None = None,
) -> EnrichmentRecord:
    """Evolve ``particle`` over a step of length ``dt``, writing into ``record``.

    Released masses are added to the record's accumulators. ``num_snia`` is
    overwritten with this step's count when SNIa progenitors die during it.

    ``dt`` and ``particle.age`` are in internal time units and converted with
    ``props.time_to_gyr``. ``record`` defaults to ``particle.enrichment``.
    """
    if record is None:
        record = particle.enrichment

    dt_gyr = dt * props.time_to_gyr
    age_gyr = particle.age * props.time_to_gyr
    z_total = particle.metal_mass_fraction_total

    log10_max_dying_mass = math.log10(props.lifetimes.dying_mass(age_gyr, z_total))
    log10_min_dying_mass = math.log10(props.lifetimes.dying_mass(age_gyr + dt_gyr, z_total))

    if log10_min_dying_mass > log10_max_dying_mass:
        raise DyingMassOrderError(
            f"min dying mass is greater than max dying mass "
            f"(log10: {log10_min_dying_mass:.6f} > {log10_max_dying_mass:.6f})"
        )

    # no star crosses its death threshold, e.g. both ages below the
    # lifetime of the most massive star
    if log10_min_dying_mass == log10_max_dying_mass:
        particle.time_since_enrich_gyr += dt_gyr
        return record

    logger.debug(
        "evolve: age=%g Gyr dt=%g Gyr dying mass=[%g, %g] Msun",
        age_gyr,
        dt_gyr,
        10**log10_min_dying_mass,
        10**log10_max_dying_mass,
    )
    evolve_snia(log10_min_dying_mass, log10_max_dying_mass, props, particle, record, dt_gyr)
    evolve_snii(log10_min_dying_mass, log10_max_dying_mass, props, particle, record)
    evolve_agb(log10_min_dying_mass, log10_max_dying_mass, props, particle, record)
    return record


def evolve_star(particle: StarParticle, props: StellarPopulationProperties, dt: float) -> EnrichmentRecord:
    """Reset the particle's enrichment record and evolve it over one step."""
    record = particle.enrichment
    record.reset()
    return compute_stellar_evolution(props, particle, dt, record)
