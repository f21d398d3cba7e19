"""
Build orchestration for inline Rust compilation units.

This module wires the pieces together: it creates one FragmentRegistry per
compilation unit with the finalize hook bound to this orchestrator, and when
a unit is finalized it synthesizes the source, builds it and registers the
archive with the host linker.
"""

import logging
from typing import Optional

from ..config import InlineRustConfig
from ..context import BASIC, FragmentRegistry, TypePolicy, UnitState
from .artifact_linker import ArtifactLinker, CollectingLinker
from .build_invoker import BuildInvoker, BuildJob, BuildResult
from .source_synthesizer import build_source_text
from .temp_files import TempFileManager
from .toolchain_runner import ToolchainRunner


class BuildOrchestrator:
    """
    Drives the build of inline Rust compilation units.

    Example usage:
        with BuildOrchestrator() as orchestrator:
            unit = orchestrator.new_unit("mymodule")
            unit.append_fragment("#[no_mangle] pub extern fn one() -> i32 { 1 }")
            result = unit.finalize()
            print(result.artifact_path)
    """

    def __init__(
        self,
        config: Optional[InlineRustConfig] = None,
        linker: Optional[ArtifactLinker] = None,
        runner: Optional[ToolchainRunner] = None,
        temp_files: Optional[TempFileManager] = None
    ):
        """
        Initialize build orchestrator.

        Args:
            config: Toolchain/build settings (default: built-in defaults)
            linker: Receives produced archives (default: CollectingLinker)
            runner: Subprocess layer (default: ToolchainRunner)
            temp_files: Temporary path manager (default: from config)
        """
        self.config = config or InlineRustConfig.defaults()
        self.linker = linker or CollectingLinker()
        self.temp_files = temp_files or TempFileManager(
            base_dir=self.config.temp_dir, keep=self.config.keep_temps
        )
        self.invoker = BuildInvoker(
            linker=self.linker,
            temp_files=self.temp_files,
            runner=runner,
            rustc=self.config.rustc,
            cargo=self.config.cargo,
            work_dir_mode=self.config.work_dir_mode,
            work_dir_name=self.config.work_dir,
        )

    def new_unit(self, unit_name: str, default_policy: TypePolicy = BASIC) -> FragmentRegistry:
        """Create the registry for a new compilation unit."""
        logging.debug(f"New compilation unit '{unit_name}'")
        return FragmentRegistry(unit_name, on_finalize=self.finalize_unit, default_policy=default_policy)

    def finalize_unit(self, state: UnitState) -> BuildResult:
        """Build the collected state of a unit. Used as the finalize hook."""
        job = BuildJob(
            source=build_source_text(state.fragments),
            dependencies=list(state.dependencies),
            rustc_args=list(self.config.rustc_flags),
        )
        return self.invoker.build(job)

    def close(self) -> None:
        """Remove temporary files that weren't handed to the linker."""
        self.temp_files.cleanup()

    def __enter__(self) -> "BuildOrchestrator":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
