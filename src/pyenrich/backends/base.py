"""Backend protocol for IMF integration kernels."""

from __future__ import annotations

from typing import Protocol

import numpy as np


class IntegrationBackend(Protocol):
    def __call__(
        self,
        integrand: np.ndarray,
        log10_mass: np.ndarray,
        ilow: int,
        ihigh: int,
        log10_min_mass: float,
        log10_max_mass: float,
        dlog10_mass: float,
    ) -> float:
        ...
