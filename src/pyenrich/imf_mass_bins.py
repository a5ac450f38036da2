"""IMF setup, mass-bin construction and IMF-weighted integration."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
import logging
import math
from typing import Callable

import numpy as np

from .constants import IMF_MAX_MASS_MSUN, IMF_MIN_MASS_MSUN, IMF_N_BINS
from .errors import ConfigurationError, TableError

logger = logging.getLogger(__name__)

IntegrationKernel = Callable[[np.ndarray, np.ndarray, int, int, float, float, float], float]


class IMFModel(str, Enum):
    CHABRIER = "chabrier"
    POWER_LAW = "power_law"

    @classmethod
    def parse(cls, value: object) -> "IMFModel":
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        for member in cls:
            if key in (member.value, member.name.lower()):
                return member
        if key == "salpeter":
            return cls.POWER_LAW
        raise ConfigurationError(f"IMF model not defined: {value!r}")


class IMFMoment(IntEnum):
    """Integration kernels: by number, by mass, or weighted by a per-bin yield."""

    NUMBER = 0
    MASS = 1
    YIELD = 2


@dataclass(frozen=True)
class IMFParams:
    log10_peak_mass: float
    sigma: float
    lognormal_norm: float
    powerlaw_norm: float
    exponent: float


def _imf_chabrier_params() -> IMFParams:
    return IMFParams(
        log10_peak_mass=math.log10(0.079),
        sigma=0.69,
        lognormal_norm=0.852464,
        powerlaw_norm=0.237912,
        exponent=2.3,
    )


def _imf_power_law_params(exponent: float) -> IMFParams:
    return IMFParams(log10_peak_mass=0.0, sigma=0.0, lognormal_norm=0.0, powerlaw_norm=1.0, exponent=exponent)


def _by_number_chabrier(params: IMFParams, mass: np.ndarray) -> np.ndarray:
    log10_mass = np.log10(mass)
    lognormal = (
        params.lognormal_norm
        * np.exp(-((log10_mass - params.log10_peak_mass) ** 2) / (2.0 * params.sigma**2))
        / mass
    )
    powerlaw = params.powerlaw_norm * mass ** (-params.exponent)
    return np.where(mass <= 1.0, lognormal, powerlaw)


def _by_number_power_law(params: IMFParams, mass: np.ndarray) -> np.ndarray:
    return params.powerlaw_norm * mass ** (-params.exponent)


@dataclass(frozen=True)
class IMFBins:
    """Log-spaced IMF mass bins and the number-density weight of each bin.

    ``by_number`` is dN/dm normalised so that the mass-weighted integral over
    the whole grid is one solar mass.
    """

    model: IMFModel
    mass: np.ndarray
    log10_mass: np.ndarray
    by_number: np.ndarray
    dlog10_mass: float

    def __post_init__(self) -> None:
        for name in ("mass", "log10_mass", "by_number"):
            arr = np.array(getattr(self, name), dtype=float)
            arr.setflags(write=False)
            object.__setattr__(self, name, arr)

    @property
    def n_bins(self) -> int:
        return len(self.mass)


def trapezoid_with_edges(
    integrand: np.ndarray,
    log10_mass: np.ndarray,
    ilow: int,
    ihigh: int,
    log10_min_mass: float,
    log10_max_mass: float,
    dlog10_mass: float,
) -> float:
    """Integrate ``integrand`` over ``[log10_min_mass, log10_max_mass]``.

    Trapezoid rule over the bracketing nodes, then the partial first and last
    bins are removed with nearest-node weights.
    """
    seg = integrand[ilow : ihigh + 1]
    result = float(np.sum(seg)) - 0.5 * (seg[0] + seg[-1])

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

    return float(result * dlog10_mass * math.log(10.0))


@dataclass(frozen=True)
class IMFIntegrator:
    """Integrates the IMF times a per-bin weight over a log10 mass range."""

    bins: IMFBins
    kernel: IntegrationKernel = trapezoid_with_edges

    def _clamp(self, log10_mass: float) -> float:
        grid = self.bins.log10_mass
        return float(min(max(log10_mass, grid[0]), grid[-1]))

    def locate_mass_bins(self, log10_min_mass: float, log10_max_mass: float) -> tuple[int, int]:
        """Indices of the IMF bins bracketing ``[log10_min_mass, log10_max_mass]``."""
        grid = self.bins.log10_mass
        n = len(grid)
        lo = self._clamp(log10_min_mass)
        hi = self._clamp(log10_max_mass)

        ilow = 0
        while ilow < n - 2 and grid[ilow + 1] < lo:
            ilow += 1
        ihigh = 1
        while ihigh < n - 1 and grid[ihigh] < hi:
            ihigh += 1
        return ilow, ihigh

    def integrand(self, moment: IMFMoment, exponent: float = 0.0, per_bin_weight: np.ndarray | None = None) -> np.ndarray:
        b = self.bins
        base = b.by_number * b.mass
        if exponent != 0.0:
            base = base * b.mass**exponent
        if moment is IMFMoment.NUMBER:
            return base
        if moment is IMFMoment.MASS:
            return base * b.mass
        if moment is IMFMoment.YIELD:
            if per_bin_weight is None:
                raise ValueError("IMFMoment.YIELD needs a per-bin weight array")
            weight = np.asarray(per_bin_weight, dtype=float)
            if weight.shape != base.shape:
                raise ValueError(f"per-bin weight has shape {weight.shape}, expected {base.shape}")
            return base * weight
        raise ValueError(f"Unknown IMF moment: {moment!r}")

    def integrate(
        self,
        log10_min_mass: float,
        log10_max_mass: float,
        exponent: float,
        moment: IMFMoment,
        per_bin_weight: np.ndarray | None = None,
    ) -> float:
        """Integrate ``N(m) * w(m) * m**exponent dm`` over a log10 mass range."""
        lo = self._clamp(log10_min_mass)
        hi = self._clamp(log10_max_mass)
        ilow, ihigh = self.locate_mass_bins(lo, hi)
        integrand = self.integrand(IMFMoment(moment), exponent, per_bin_weight)
        return float(self.kernel(integrand, self.bins.log10_mass, ilow, ihigh, lo, hi, self.bins.dlog10_mass))


def build_imf_bins(
    model: object = IMFModel.CHABRIER,
    *,
    n_bins: int = IMF_N_BINS,
    min_mass: float = IMF_MIN_MASS_MSUN,
    max_mass: float = IMF_MAX_MASS_MSUN,
    exponent: float = 2.35,
    kernel: IntegrationKernel = trapezoid_with_edges,
) -> IMFIntegrator:
    """Build log-spaced IMF bins, normalise them by mass and wrap an integrator."""
    model = IMFModel.parse(model)
    if n_bins < 3:
        raise ConfigurationError("IMF needs at least 3 mass bins")
    if not (0.0 < min_mass < max_mass):
        raise ConfigurationError("IMF mass range must satisfy 0 < min_mass < max_mass")

    log10_mass = np.linspace(math.log10(min_mass), math.log10(max_mass), n_bins)
    mass = 10.0**log10_mass
    dlog10_mass = float((log10_mass[-1] - log10_mass[0]) / (n_bins - 1))

    if model is IMFModel.CHABRIER:
        by_number = _by_number_chabrier(_imf_chabrier_params(), mass)
    else:
        by_number = _by_number_power_law(_imf_power_law_params(exponent), mass)

    unnormalised = IMFIntegrator(IMFBins(model, mass, log10_mass, by_number, dlog10_mass), kernel)
    norm = unnormalised.integrate(log10_mass[0], log10_mass[-1], 0.0, IMFMoment.MASS)
    if not norm > 0.0:
        raise TableError(f"IMF normalization is not positive: {norm}")

    bins = IMFBins(model, mass, log10_mass, by_number / norm, dlog10_mass)
    logger.debug("IMF %s: %d bins in [%g, %g] Msun, norm=%e", model.value, n_bins, min_mass, max_mass, norm)
    return IMFIntegrator(bins, kernel)
