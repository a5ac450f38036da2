"""Custom exceptions for the :mod:`pyenrich` package."""
from __future__ import annotations


class EnrichmentError(Exception):
    """Base exception for stellar enrichment errors."""


class ConfigurationError(EnrichmentError, ValueError):
    """Invalid configuration or parameter value."""


class LifetimeModelError(ConfigurationError):
    """The stellar lifetime model selector is not one of the known models."""


class TableError(EnrichmentError, ValueError):
    """Lifetime or yield table with inconsistent axes or shapes."""


class NormalizationError(EnrichmentError, RuntimeError):
    """Yield normalization denominator is not positive."""


class DyingMassOrderError(EnrichmentError, RuntimeError):
    """Minimum dying mass of a step exceeds its maximum dying mass."""


__all__ = [
    "EnrichmentError",
    "ConfigurationError",
    "LifetimeModelError",
    "TableError",
    "NormalizationError",
    "DyingMassOrderError",
]
