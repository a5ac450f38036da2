"""Select the IMF integration kernel by name."""

from __future__ import annotations

import logging

from .base import IntegrationBackend
from .numba_backend import build_numba_backend
from .numpy_backend import build_numpy_backend

logger = logging.getLogger(__name__)

BACKENDS = ("numpy", "numba", "auto")


def build_kernel(name: str) -> IntegrationBackend:
    if name == "numpy":
        return build_numpy_backend()
    if name == "numba":
        return build_numba_backend()
    if name == "auto":
        try:
            return build_numba_backend()
        except RuntimeError as exc:
            logger.debug("numba backend unavailable, using numpy: %s", exc)
            return build_numpy_backend()
    raise ValueError(f"Unknown backend: {name}")
