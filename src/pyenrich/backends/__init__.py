"""IMF integration kernel backends."""

from .factory import BACKENDS, build_kernel

__all__ = ["BACKENDS", "build_kernel"]
