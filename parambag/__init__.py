"""Typed parameter bag for request-like input and configuration values."""

from .bag import ParameterBag
from .services.filters import INVALID, FilterFlag, FilterKind, FilterOptions, apply_filter

__all__ = [
    "ParameterBag",
    "FilterKind",
    "FilterFlag",
    "FilterOptions",
    "INVALID",
    "apply_filter",
]
