"""inline-rust - compile Rust fragments collected during a compilation pass.

Fragments, crate dependencies and a type policy are registered on a
per-unit FragmentRegistry; finalizing the unit writes one Rust source file,
compiles it with rustc (or cargo, when crates are declared) and hands the
static archive to the host linker.
"""

from .build import (
    ArtifactLinker,
    BuildInvoker,
    BuildJob,
    BuildOrchestrator,
    BuildResult,
    BuildStrategy,
    CollectingLinker,
    ForeignFileKind,
    LinkListLinker,
    TempFileManager,
    ToolchainError,
    build_manifest_text,
    build_source_text,
)
from .config import InlineRustConfig, InlineRustConfigError
from .context import (
    BASIC,
    LIBC,
    ConfigurationError,
    FragmentRegistry,
    PolicyAlreadySetError,
    RegistryFinalizedError,
    TypePolicy,
    UnitPhase,
    UnmappedTypeError,
)
from .errors import InlineRustError

__version__ = "0.1.0"

__all__ = [
    "ArtifactLinker",
    "BuildInvoker",
    "BuildJob",
    "BuildOrchestrator",
    "BuildResult",
    "BuildStrategy",
    "CollectingLinker",
    "ForeignFileKind",
    "LinkListLinker",
    "TempFileManager",
    "ToolchainError",
    "build_manifest_text",
    "build_source_text",
    "InlineRustConfig",
    "InlineRustConfigError",
    "BASIC",
    "LIBC",
    "ConfigurationError",
    "FragmentRegistry",
    "PolicyAlreadySetError",
    "RegistryFinalizedError",
    "TypePolicy",
    "UnitPhase",
    "UnmappedTypeError",
    "InlineRustError",
]
