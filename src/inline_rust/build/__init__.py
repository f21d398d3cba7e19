"""
Build system components for inline-rust.

This module provides the build pipeline including:
- Source and Cargo.toml synthesis
- Temporary file management
- Compilation (rustc, or cargo when crates are declared)
- Handing the produced archive to the host linker
"""

from .artifact_linker import (
    ArtifactLinker,
    CollectingLinker,
    ForeignFileKind,
    LinkedArtifact,
    LinkListLinker,
)
from .build_invoker import BuildInvoker, BuildJob, BuildResult, BuildStrategy, ToolchainError
from .orchestrator import BuildOrchestrator
from .source_synthesizer import (
    ManifestDocument,
    ManifestSection,
    build_manifest,
    build_manifest_text,
    build_source_text,
)
from .temp_files import TempFileManager
from .toolchain_runner import ProcessResult, ToolchainRunner, terminate_process_tree

__all__ = [
    "ArtifactLinker",
    "CollectingLinker",
    "ForeignFileKind",
    "LinkedArtifact",
    "LinkListLinker",
    "BuildInvoker",
    "BuildJob",
    "BuildResult",
    "BuildStrategy",
    "ToolchainError",
    "BuildOrchestrator",
    "ManifestDocument",
    "ManifestSection",
    "build_manifest",
    "build_manifest_text",
    "build_source_text",
    "TempFileManager",
    "ProcessResult",
    "ToolchainRunner",
    "terminate_process_tree",
]
