"""Shared, read-only stellar population properties."""

from __future__ import annotations

from dataclasses import dataclass
import logging

import numpy as np

from .backends import build_kernel
from .config import StellarEvolutionConfig
from .errors import ConfigurationError
from .imf_mass_bins import IMFIntegrator, build_imf_bins
from .lifetimes import LifetimeFunction, LifetimeModel, LifetimeTable, build_lifetime_function
from .model_tables import ResampledYieldTable, SNIaYields, YieldTable, resample_yield_table

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StellarPopulationProperties:
    """Everything the enrichment channels read, built once before the first step.

    Instances are frozen and every array they hold is read-only, so one
    instance may be shared by concurrent evolution calls.
    """

    config: StellarEvolutionConfig
    lifetimes: LifetimeFunction
    imf: IMFIntegrator
    snii: ResampledYieldTable
    agb: ResampledYieldTable
    snia: SNIaYields

    @property
    def lifetime_model(self) -> LifetimeModel:
        return self.lifetimes.model

    @property
    def snia_efficiency(self) -> float:
        return self.config.snia_efficiency

    @property
    def snia_timescale_gyr(self) -> float:
        return self.config.snia_timescale_gyr

    @property
    def snia_mass_transfer(self) -> bool:
        return self.config.snia_mass_transfer

    @property
    def snii_mass_transfer(self) -> bool:
        return self.config.snii_mass_transfer

    @property
    def agb_mass_transfer(self) -> bool:
        return self.config.agb_mass_transfer

    @property
    def time_to_gyr(self) -> float:
        return self.config.time_to_gyr

    @property
    def solar_mass_g(self) -> float:
        return self.config.solar_mass_g

    # read by the feedback code, which scales them by ``num_snia``
    @property
    def sn_energy_erg(self) -> float:
        return self.config.sn_energy_erg

    @property
    def sn_heating_temperature_k(self) -> float:
        return self.config.sn_heating_temperature_k


def build_properties(
    config: StellarEvolutionConfig,
    *,
    snii: YieldTable,
    agb: YieldTable,
    snia: SNIaYields,
    lifetimes: LifetimeTable | None = None,
) -> StellarPopulationProperties:
    """Build the IMF, resample the yield tables on it and select the lifetime model."""
    if config.lifetime_model is LifetimeModel.PORTINARI_1998 and lifetimes is None:
        raise ConfigurationError("lifetime_model PORTINARI_1998 requires a lifetime table")

    imf = build_imf_bins(
        config.imf_model,
        n_bins=config.imf_n_bins,
        min_mass=config.imf_min_mass,
        max_mass=config.imf_max_mass,
        exponent=config.imf_exponent,
        kernel=build_kernel(config.backend),
    )
    props = StellarPopulationProperties(
        config=config,
        lifetimes=build_lifetime_function(config.lifetime_model, lifetimes),
        imf=imf,
        snii=resample_yield_table(snii, imf.bins.log10_mass, np.asarray(config.snii_yield_factors)),
        agb=resample_yield_table(agb, imf.bins.log10_mass),
        snia=snia,
    )
    logger.info(
        "stellar evolution: lifetimes=%s imf=%s (%d bins) backend=%s yield tables=%s",
        props.lifetime_model.name,
        config.imf_model.value,
        imf.bins.n_bins,
        config.backend,
        config.yield_table_path,
    )
    return props
