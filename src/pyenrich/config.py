"""Run configuration for stellar enrichment."""

from __future__ import annotations

from dataclasses import dataclass, fields
import math
from typing import Any, Mapping

from .backends import BACKENDS
from .constants import (
    ELEMENT_COUNT,
    IMF_MAX_MASS_MSUN,
    IMF_MIN_MASS_MSUN,
    IMF_N_BINS,
    SN_ENERGY_ERG,
    SN_HEATING_TEMPERATURE_K,
    SOLAR_MASS_G,
)
from .errors import ConfigurationError
from .imf_mass_bins import IMFModel
from .lifetimes import LifetimeModel


def _parse_bool(value: Any) -> bool:
    if isinstance(value, str):
        key = value.strip().lower()
        if key in {"1", "true", "yes", "on"}:
            return True
        if key in {"0", "false", "no", "off"}:
            return False
        raise ConfigurationError(f"not a boolean: {value!r}")
    return bool(value)


@dataclass(frozen=True)
class StellarEvolutionConfig:
    """Container for user-controlled stellar enrichment parameters."""

    yield_table_path: str | None = None
    lifetime_model: LifetimeModel = LifetimeModel.PORTINARI_1998
    snia_efficiency: float = 2.0e-3
    snia_timescale_gyr: float = 2.0
    snia_mass_transfer: bool = True
    snii_mass_transfer: bool = True
    agb_mass_transfer: bool = True
    imf_model: IMFModel = IMFModel.CHABRIER
    imf_exponent: float = 2.35
    imf_n_bins: int = IMF_N_BINS
    imf_min_mass: float = IMF_MIN_MASS_MSUN
    imf_max_mass: float = IMF_MAX_MASS_MSUN
    snii_yield_factors: tuple[float, ...] = (1.0,) * ELEMENT_COUNT
    time_to_gyr: float = 1.0
    solar_mass_g: float = SOLAR_MASS_G
    sn_energy_erg: float = SN_ENERGY_ERG
    sn_heating_temperature_k: float = SN_HEATING_TEMPERATURE_K
    backend: str = "auto"

    def __post_init__(self) -> None:
        object.__setattr__(self, "lifetime_model", LifetimeModel.parse(self.lifetime_model))
        object.__setattr__(self, "imf_model", IMFModel.parse(self.imf_model))
        object.__setattr__(self, "snii_yield_factors", tuple(float(f) for f in self.snii_yield_factors))

        for name in (
            "snia_efficiency",
            "snia_timescale_gyr",
            "imf_exponent",
            "imf_min_mass",
            "imf_max_mass",
            "time_to_gyr",
            "solar_mass_g",
            "sn_energy_erg",
            "sn_heating_temperature_k",
        ):
            if not math.isfinite(float(getattr(self, name))):
                raise ConfigurationError(f"{name} must be finite")
        if self.yield_table_path is not None and str(self.yield_table_path).strip() == "":
            raise ConfigurationError("yield_table_path cannot be empty")
        if self.snia_efficiency < 0.0:
            raise ConfigurationError("snia_efficiency must be >= 0")
        if self.snia_timescale_gyr <= 0.0:
            raise ConfigurationError("snia_timescale_gyr must be > 0")
        if self.imf_n_bins < 3:
            raise ConfigurationError("imf_n_bins must be >= 3")
        if not (0.0 < self.imf_min_mass < self.imf_max_mass):
            raise ConfigurationError("imf mass range must satisfy 0 < imf_min_mass < imf_max_mass")
        if self.imf_max_mass > IMF_MAX_MASS_MSUN:
            raise ConfigurationError(f"imf_max_mass must be <= {IMF_MAX_MASS_MSUN}")
        if self.imf_model is IMFModel.POWER_LAW and self.imf_exponent <= 0.0:
            raise ConfigurationError("imf_exponent must be > 0")
        if len(self.snii_yield_factors) != ELEMENT_COUNT:
            raise ConfigurationError(f"snii_yield_factors must have {ELEMENT_COUNT} entries")
        if any(not math.isfinite(f) or f < 0.0 for f in self.snii_yield_factors):
            raise ConfigurationError("snii_yield_factors must be finite and >= 0")
        if self.time_to_gyr <= 0.0:
            raise ConfigurationError("time_to_gyr must be > 0")
        if self.solar_mass_g <= 0.0:
            raise ConfigurationError("solar_mass_g must be > 0")
        if self.sn_energy_erg < 0.0:
            raise ConfigurationError("sn_energy_erg must be >= 0")
        if self.sn_heating_temperature_k <= 0.0:
            raise ConfigurationError("sn_heating_temperature_k must be > 0")
        if self.backend not in BACKENDS:
            raise ConfigurationError(f"backend must be one of: {', '.join(BACKENDS)}")

    @classmethod
    def from_params(cls, params: Mapping[str, Any], section: str = "EagleStellarEvolution") -> "StellarEvolutionConfig":
        """Read ``"<section>:<field>"`` entries from a parsed parameter file.

        ``"<section>:filename"`` is accepted as the yield table path. Unknown
        keys inside the section raise :class:`ConfigurationError`.
        """
        prefix = f"{section}:"
        known = {f.name: f for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in params.items():
            if not key.startswith(prefix):
                continue
            name = key[len(prefix):]
            if name == "filename":
                name = "yield_table_path"
            if name not in known:
                raise ConfigurationError(f"unknown parameter {key!r}")
            if name.endswith("_mass_transfer"):
                value = _parse_bool(value)
            elif name == "imf_n_bins":
                value = int(value)
            elif name == "snii_yield_factors":
                value = tuple(value)
            elif name in {"yield_table_path", "backend", "lifetime_model", "imf_model"}:
                pass
            else:
                try:
                    value = float(value)
                except (TypeError, ValueError) as exc:
                    raise ConfigurationError(f"{key} must be a number, got {value!r}") from exc
            kwargs[name] = value
        return cls(**kwargs)
