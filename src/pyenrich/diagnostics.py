"""Sanity checks on one particle's enrichment record."""

from __future__ import annotations

import numpy as np

from .constants import Element
from .state import EnrichmentRecord


def diagnostics_from_record(record: EnrichmentRecord, *, atol: float = 1.0e-12) -> dict:
    channel_mass = record.mass_from_agb + record.mass_from_snii + record.mass_from_snia
    channel_metals = record.metals_from_agb + record.metals_from_snii + record.metals_from_snia
    checks = {
        "finite": bool(np.all(np.isfinite(record.metals_released)) and np.isfinite(record.metal_mass_released)),
        "metals_nonnegative": bool(np.all(record.metals_released >= -atol)),
        "metal_mass_nonnegative": bool(record.metal_mass_released >= -atol),
        "num_snia_nonnegative": bool(record.num_snia >= -atol),
        "channel_metals_match_total": bool(abs(channel_metals - record.metal_mass_released) <= atol + 1.0e-9 * abs(channel_metals)),
        "iron_from_snia_within_total": bool(record.iron_from_snia <= record.metals_released[Element.Fe] + atol),
    }
    return {
        "total_released": float(np.sum(record.metals_released)),
        "metal_mass_released": float(record.metal_mass_released),
        "channel_mass": float(channel_mass),
        "num_snia": float(record.num_snia),
        "checks": checks,
        "all_checks_pass": bool(all(checks.values())),
    }
