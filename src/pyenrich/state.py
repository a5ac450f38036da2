"""Per-particle enrichment state."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .constants import ELEMENT_COUNT, Element


@dataclass
class EnrichmentRecord:
    """Mass released by one particle over one step, per unit initial stellar mass.

    ``metals_released`` and ``metal_mass_released`` collect the contributions
    of all channels; the ``*_from_*`` fields belong to one channel each.
    ``num_snia`` is the number of SNIa per unit initial stellar mass.
    """

    metals_released: np.ndarray = field(default_factory=lambda: np.zeros(ELEMENT_COUNT, dtype=float))
    metal_mass_released: float = 0.0
    mass_from_agb: float = 0.0
    metals_from_agb: float = 0.0
    mass_from_snii: float = 0.0
    metals_from_snii: float = 0.0
    mass_from_snia: float = 0.0
    metals_from_snia: float = 0.0
    iron_from_snia: float = 0.0
    num_snia: float = 0.0

    def reset(self) -> None:
        self.metals_released[:] = 0.0
        self.metal_mass_released = 0.0
        self.mass_from_agb = 0.0
        self.metals_from_agb = 0.0
        self.mass_from_snii = 0.0
        self.metals_from_snii = 0.0
        self.mass_from_snia = 0.0
        self.metals_from_snia = 0.0
        self.iron_from_snia = 0.0
        self.num_snia = 0.0

    def as_dict(self) -> dict[str, float]:
        out = {f"{e.name}_released": float(self.metals_released[e]) for e in Element}
        out.update(
            metal_mass_released=self.metal_mass_released,
            mass_from_agb=self.mass_from_agb,
            metals_from_agb=self.metals_from_agb,
            mass_from_snii=self.mass_from_snii,
            metals_from_snii=self.metals_from_snii,
            mass_from_snia=self.mass_from_snia,
            metals_from_snia=self.metals_from_snia,
            iron_from_snia=self.iron_from_snia,
            num_snia=self.num_snia,
        )
        return out


@dataclass
class StarParticle:
    """Enrichment-related fields of one star particle.

    ``age`` is in internal time units; ``time_since_enrich_gyr`` is the clock
    the SNIa delay-time distribution is evaluated on.
    """

    age: float
    metal_mass_fraction: np.ndarray
    metal_mass_fraction_total: float
    time_since_enrich_gyr: float = 0.0
    enrichment: EnrichmentRecord = field(default_factory=EnrichmentRecord)

    def __post_init__(self) -> None:
        self.metal_mass_fraction = np.array(self.metal_mass_fraction, dtype=float)
        if self.metal_mass_fraction.shape != (ELEMENT_COUNT,):
            raise ValueError(f"metal_mass_fraction must have shape ({ELEMENT_COUNT},)")
        self.metal_mass_fraction_total = float(self.metal_mass_fraction_total)
