"""Default NumPy backend for IMF integration."""

from __future__ import annotations

from ..imf_mass_bins import trapezoid_with_edges


def build_numpy_backend():
    return trapezoid_with_edges
