"""Stellar mass loss and chemical enrichment of star particles."""

from . import constants
from .config import StellarEvolutionConfig
from .constants import ELEMENT_COUNT, Element
from .diagnostics import diagnostics_from_record
from .engine import compute_stellar_evolution, evolve_star
from .errors import (
    ConfigurationError,
    DyingMassOrderError,
    EnrichmentError,
    LifetimeModelError,
    NormalizationError,
    TableError,
)
from .imf_mass_bins import IMFBins, IMFIntegrator, IMFModel, IMFMoment, build_imf_bins
from .interpolation import YieldBracket, determine_bin_yield
from .lifetimes import LifetimeModel, LifetimeTable, build_lifetime_function, dying_mass, lifetime
from .model_tables import ResampledYieldTable, SNIaYields, YieldTable
from .properties import StellarPopulationProperties, build_properties
from .state import EnrichmentRecord, StarParticle

__all__ = [
    "constants",
    "ELEMENT_COUNT",
    "Element",
    "StellarEvolutionConfig",
    "diagnostics_from_record",
    "compute_stellar_evolution",
    "evolve_star",
    "ConfigurationError",
    "DyingMassOrderError",
    "EnrichmentError",
    "LifetimeModelError",
    "NormalizationError",
    "TableError",
    "IMFBins",
    "IMFIntegrator",
    "IMFModel",
    "IMFMoment",
    "build_imf_bins",
    "YieldBracket",
    "determine_bin_yield",
    "LifetimeModel",
    "LifetimeTable",
    "build_lifetime_function",
    "dying_mass",
    "lifetime",
    "ResampledYieldTable",
    "SNIaYields",
    "YieldTable",
    "StellarPopulationProperties",
    "build_properties",
    "EnrichmentRecord",
    "StarParticle",
]
