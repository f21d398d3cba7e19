"""Build Invoker.

This module compiles a synthesized Rust source file into a static archive and
registers the archive with the host linker.

Design:
    - No crate dependencies: call rustc directly on a temporary .rs file
    - Crate dependencies: write quasiquote.rs + Cargo.toml into a working
      directory and call `cargo rustc --release`
    - Any non-zero exit raises ToolchainError with rustc's stderr untouched
    - Blocking, no retries; either the archive is registered or nothing is
"""

import logging
import shutil
import tempfile
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from ..config.ini_parser import DEFAULT_WORK_DIR_NAME, WORK_DIR_MODES, is_valid_work_dir_name
from ..errors import InlineRustError
from .artifact_linker import ArtifactLinker, ForeignFileKind
from .source_synthesizer import (
    MANIFEST_FILE_NAME,
    SOURCE_FILE_NAME,
    STATIC_LIB_NAME,
    build_manifest_text,
)
from .temp_files import TempFileManager
from .toolchain_runner import ProcessResult, ToolchainRunner


class ToolchainError(InlineRustError):
    """Raised when rustc or cargo exits with a non-zero status."""

    PREFIX = "Rust source in quasiquote failed to compile:\n"

    def __init__(self, result: ProcessResult):
        self.result = result
        self.stderr = result.stderr
        super().__init__(self.PREFIX + result.stderr)


class BuildStrategy(Enum):
    """How a unit is compiled."""

    DIRECT = "rustc"
    CARGO = "cargo"


@dataclass
class BuildJob:
    """Everything needed for one build of one compilation unit."""

    source: str
    dependencies: List[Tuple[str, str]] = field(default_factory=list)
    rustc_args: List[str] = field(default_factory=list)
    # Set to build in a caller-owned directory; it is never removed
    work_dir: Optional[Path] = None

    @property
    def strategy(self) -> BuildStrategy:
        return BuildStrategy.CARGO if self.dependencies else BuildStrategy.DIRECT


@dataclass
class BuildResult:
    """Result of a successful build."""

    artifact_path: Path
    strategy: BuildStrategy
    process: ProcessResult


class BuildInvoker:
    """
    Compiles Rust source into a static archive and hands it to the linker.

    Example usage:
        invoker = BuildInvoker(linker=CollectingLinker(), temp_files=TempFileManager())
        result = invoker.build(BuildJob(source="pub fn f() {}\\n"))
        print(result.artifact_path)
    """

    def __init__(
        self,
        linker: ArtifactLinker,
        temp_files: Optional[TempFileManager] = None,
        runner: Optional[ToolchainRunner] = None,
        rustc: str = "rustc",
        cargo: str = "cargo",
        work_dir_mode: str = "unique",
        work_dir_name: str = DEFAULT_WORK_DIR_NAME
    ):
        """
        Initialize build invoker.

        Args:
            linker: Receives the produced archive
            temp_files: Source of temporary paths (default: a private manager)
            runner: Subprocess layer (default: ToolchainRunner())
            rustc: rustc executable
            cargo: cargo executable
            work_dir_mode: "unique" for a fresh temp directory per cargo build,
                "fixed" for `work_dir_name` in the current directory
            work_dir_name: Directory name used in "fixed" mode
        """
        if work_dir_mode not in WORK_DIR_MODES:
            raise ValueError(
                f"Invalid work_dir_mode '{work_dir_mode}'. Must be one of: {', '.join(WORK_DIR_MODES)}"
            )
        if not is_valid_work_dir_name(work_dir_name):
            raise ValueError(f"Invalid work_dir_name '{work_dir_name}'. Must be a plain directory name")
        self.linker = linker
        self.temp_files = temp_files or TempFileManager()
        self.runner = runner or ToolchainRunner()
        self.rustc = rustc
        self.cargo = cargo
        self.work_dir_mode = work_dir_mode
        self.work_dir_name = work_dir_name

    def build(self, job: BuildJob) -> BuildResult:
        """
        Build a job with the strategy its dependencies call for.

        Raises:
            ToolchainError: If rustc/cargo fails
            OSError: On filesystem failures
        """
        logging.info(f"Building with {job.strategy.value} ({len(job.dependencies)} crates)")

        if job.strategy is BuildStrategy.DIRECT:
            return self.compile_direct(job.source, ["--crate-type=staticlib"] + list(job.rustc_args))

        if job.work_dir:
            # Caller-supplied directories are left alone
            return self.compile_with_cargo(Path(job.work_dir), job.rustc_args, job.source, job.dependencies)

        work_dir = self._allocate_work_dir()
        try:
            return self.compile_with_cargo(work_dir, job.rustc_args, job.source, job.dependencies)
        finally:
            shutil.rmtree(work_dir, ignore_errors=True)
            logging.debug(f"Removed working directory {work_dir}")

    def compile_direct(self, source: str, rustc_args: Optional[Sequence[str]] = None) -> BuildResult:
        """
        Compile a complete Rust source file with rustc and link the output.

        Args:
            source: Contents of a complete Rust source file
            rustc_args: Options passed to rustc before the input path

        Returns:
            BuildResult pointing at the registered archive
        """
        src_path = self.temp_files.new_path("rs")
        out_path = self.temp_files.new_path("a")

        src_path.write_text(source, encoding="utf-8")

        cmd = self._build_rustc_command(src_path, out_path, list(rustc_args or []))
        result = self.runner.run(cmd)
        if not result.success:
            raise ToolchainError(result)

        self.temp_files.hand_off(out_path)
        self.linker.register_artifact(ForeignFileKind.RAW_OBJECT, out_path)
        return BuildResult(artifact_path=out_path, strategy=BuildStrategy.DIRECT, process=result)

    def compile_with_cargo(
        self,
        work_dir: Path,
        rustc_args: Sequence[str],
        source: str,
        dependencies: Sequence[Tuple[str, str]]
    ) -> BuildResult:
        """
        Build a Rust source file with crate dependencies through cargo.

        The caller owns `work_dir`; only the produced archive is moved out
        of it.

        Args:
            work_dir: Directory for quasiquote.rs, Cargo.toml and target/
            rustc_args: Options passed to rustc after `--`
            source: Contents of a complete Rust source file
            dependencies: Crate (name, version) pairs

        Returns:
            BuildResult pointing at the registered archive
        """
        work_dir = Path(work_dir)
        work_dir.mkdir(parents=True, exist_ok=True)

        rust_file = work_dir / SOURCE_FILE_NAME
        cargo_toml = work_dir / MANIFEST_FILE_NAME
        rust_lib = work_dir / "target" / "release" / STATIC_LIB_NAME

        rust_file.write_text(source, encoding="utf-8")
        cargo_toml.write_text(build_manifest_text(dependencies), encoding="utf-8")

        cmd = self._build_cargo_command(cargo_toml, list(rustc_args))
        result = self.runner.run(cmd)
        if not result.success:
            raise ToolchainError(result)

        # Move the library out of the working directory before it is removed
        moved_lib = self.temp_files.new_path("a")
        shutil.move(str(rust_lib), str(moved_lib))

        self.temp_files.hand_off(moved_lib)
        self.linker.register_artifact(ForeignFileKind.RAW_OBJECT, moved_lib)
        return BuildResult(artifact_path=moved_lib, strategy=BuildStrategy.CARGO, process=result)

    def _allocate_work_dir(self) -> Path:
        """Create a fresh working directory that build() may remove afterwards.

        Raises:
            FileExistsError: In "fixed" mode, if the directory already exists
        """
        if self.work_dir_mode == "fixed":
            # Shared name: two concurrent cargo builds in one directory collide
            work_dir = Path.cwd() / self.work_dir_name
            work_dir.mkdir()
            return work_dir
        return Path(tempfile.mkdtemp(prefix=f"{self.work_dir_name}-", dir=str(self.temp_files.root)))

    def _build_rustc_command(self, source: Path, output: Path, rustc_args: List[str]) -> List[str]:
        return [self.rustc] + rustc_args + [str(source), "-o", str(output)]

    def _build_cargo_command(self, manifest: Path, rustc_args: List[str]) -> List[str]:
        return [
            self.cargo,
            "rustc",
            "--release",
            f"--manifest-path={manifest}",
            "--",
        ] + rustc_args
