"""Compilation unit state and type translation policies."""

from .policy import BASIC, LIBC, TypePolicy, UnmappedTypeError, normalize_type
from .registry import (
    ConfigurationError,
    FragmentRegistry,
    PolicyAlreadySetError,
    RegistryFinalizedError,
    UnitPhase,
    UnitState,
)

__all__ = [
    "BASIC",
    "LIBC",
    "TypePolicy",
    "UnmappedTypeError",
    "normalize_type",
    "ConfigurationError",
    "FragmentRegistry",
    "PolicyAlreadySetError",
    "RegistryFinalizedError",
    "UnitPhase",
    "UnitState",
]
