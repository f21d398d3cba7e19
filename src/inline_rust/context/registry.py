"""
Per-compilation-unit fragment registry.

One FragmentRegistry belongs to one compilation unit (one Rust file). The
front end feeds it code fragments, crate declarations and the type policy as
it discovers them. When the driver decides the unit is done it calls
``finalize()``, which hands the collected state to the finalize hook exactly
once.

Lifecycle:
    UNINITIALIZED --(first registering call)--> COLLECTING --finalize()--> FINALIZED
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional, Tuple

from ..errors import InlineRustError
from .policy import BASIC, TypePolicy


class ConfigurationError(InlineRustError):
    """Raised when a unit is configured inconsistently."""

    pass


class PolicyAlreadySetError(ConfigurationError):
    """Raised when the type policy of a unit is set after initialization."""

    pass


class RegistryFinalizedError(InlineRustError):
    """Raised when a unit is used after it has been finalized."""

    pass


class UnitPhase(Enum):
    """Lifecycle phase of a compilation unit."""

    UNINITIALIZED = "uninitialized"
    COLLECTING = "collecting"
    FINALIZED = "finalized"


@dataclass
class UnitState:
    """State collected while processing a compilation unit.

    Attributes:
        policy: How to translate Rust types (fixed at creation)
        fragments: Blocks of Rust code, in registration order
        dependencies: Crate (name, version) pairs, in declaration order
    """

    policy: TypePolicy
    fragments: List[str] = field(default_factory=list)
    dependencies: List[Tuple[str, str]] = field(default_factory=list)


FinalizeHook = Callable[[UnitState], Any]


class FragmentRegistry:
    """
    Collects Rust fragments for a single compilation unit.

    The finalize hook is bound when the state is created, so a unit that
    never registers anything finalizes to a no-op.

    Example usage:
        registry = FragmentRegistry("mymodule", on_finalize=orchestrator.finalize_unit)
        registry.set_policy(BASIC + LIBC)
        registry.declare_dependency("rand", "0.3")
        registry.append_fragment("pub extern fn roll() -> u32 { rand::random() }")
        result = registry.finalize()
    """

    def __init__(
        self,
        unit_name: str,
        on_finalize: Optional[FinalizeHook] = None,
        default_policy: TypePolicy = BASIC,
    ):
        """
        Initialize registry.

        Args:
            unit_name: Name of the compilation unit (used in logs)
            on_finalize: Hook scheduled when the state is created
            default_policy: Policy used when none is set explicitly
        """
        self.unit_name = unit_name
        self.default_policy = default_policy
        self._on_finalize = on_finalize
        self._state: Optional[UnitState] = None
        self._scheduled: Optional[FinalizeHook] = None
        self._finalized = False

    @property
    def phase(self) -> UnitPhase:
        if self._finalized:
            return UnitPhase.FINALIZED
        if self._state is None:
            return UnitPhase.UNINITIALIZED
        return UnitPhase.COLLECTING

    @property
    def state(self) -> Optional[UnitState]:
        """Current state, or None before initialization and after finalize."""
        return self._state

    def _check_open(self, operation: str) -> None:
        if self._finalized:
            raise RegistryFinalizedError(
                f"Compilation unit '{self.unit_name}' has already been finalized ({operation})"
            )

    def ensure(self, policy: Optional[TypePolicy] = None) -> UnitState:
        """
        Get the unit state, initializing it if needed.

        Args:
            policy: Explicit policy; only allowed while the unit is uninitialized

        Returns:
            The unit state

        Raises:
            PolicyAlreadySetError: If a policy is given but the state already exists
            RegistryFinalizedError: If the unit has been finalized
        """
        self._check_open("ensure")

        if self._state is not None:
            if policy is not None:
                raise PolicyAlreadySetError(
                    f"The module '{self.unit_name}' has already been initialised (set_policy)"
                )
            return self._state

        self._state = UnitState(policy=policy if policy is not None else self.default_policy)
        self._scheduled = self._on_finalize
        logging.debug(f"Initialized unit '{self.unit_name}' with policy {self._state.policy.name}")
        return self._state

    def set_policy(self, policy: TypePolicy) -> None:
        """Set the type policy. Must come before any other registering call."""
        self.ensure(policy)

    def append_fragment(self, text: str) -> None:
        """Emit a raw block of Rust code into the unit."""
        state = self.ensure()
        state.fragments.append(text)
        logging.debug(f"Unit '{self.unit_name}': fragment #{len(state.fragments)} registered")

    def declare_dependency(self, name: str, version: str) -> None:
        """
        Add an extern crate dependency.

        Equivalent to adding ``name = "version"`` to the ``[dependencies]``
        of a Cargo.toml, plus the matching ``extern crate`` line in the source.

        Args:
            name: Crate name
            version: Crate version requirement
        """
        state = self.ensure()
        state.dependencies.append((name, version))
        logging.debug(f"Unit '{self.unit_name}': crate {name} = {version!r} declared")
        self.append_fragment(f"extern crate {name};")

    def query_policy(self, rust_type: str) -> Any:
        """
        Find the host type corresponding to a Rust type.

        Raises:
            UnmappedTypeError: If the policy has no mapping
        """
        return self.ensure().policy.lookup(rust_type)

    def finalize(self) -> Any:
        """
        Hand the collected state to the finalize hook and close the unit.

        Returns:
            The hook's return value, or None if the unit never registered anything

        Raises:
            RegistryFinalizedError: If called a second time
        """
        self._check_open("finalize")

        state, self._state = self._state, None
        hook, self._scheduled = self._scheduled, None
        self._finalized = True

        if state is None or hook is None:
            logging.debug(f"Unit '{self.unit_name}' finalized with nothing to build")
            return None

        logging.info(
            f"Finalizing unit '{self.unit_name}': {len(state.fragments)} fragments, "
            f"{len(state.dependencies)} crates"
        )
        return hook(state)
