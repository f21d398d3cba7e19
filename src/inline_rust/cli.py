"""
Command-line interface for inline-rust.

This module provides the `inline-rust` CLI tool for compiling Rust fragment
files into a static archive outside of a host compiler.
"""

import argparse
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from inline_rust import __version__
from inline_rust.build import BuildOrchestrator, CollectingLinker, LinkListLinker, ToolchainError
from inline_rust.build.source_synthesizer import build_manifest_text, build_source_text
from inline_rust.cli_utils import CrateSpecParser, ErrorFormatter, FragmentReader, configure_logging
from inline_rust.config import InlineRustConfig, find_config
from inline_rust.context import FragmentRegistry
from inline_rust.errors import InlineRustError


@dataclass
class BuildArgs:
    """Arguments for the build command."""

    fragments: List[Path]
    crates: List[str] = field(default_factory=list)
    config: Optional[Path] = None
    rustc_flags: List[str] = field(default_factory=list)
    link_list: Optional[Path] = None
    unit: Optional[str] = None
    verbose: bool = False


@dataclass
class EmitArgs:
    """Arguments for the emit command."""

    fragments: List[Path]
    crates: List[str] = field(default_factory=list)


def load_config(config_path: Optional[Path]) -> InlineRustConfig:
    """Load an explicit config file, else inline-rust.ini in the current directory."""
    if config_path is not None:
        return InlineRustConfig.load(config_path)
    found = find_config(Path.cwd())
    if found is not None:
        return InlineRustConfig.load(found)
    return InlineRustConfig.defaults()


def build_command(args: BuildArgs) -> None:
    """Compile Rust fragments into a static archive.

    Examples:
        inline-rust build add.rs                         # rustc, no crates
        inline-rust build roll.rs --crate rand=0.3       # cargo with rand
        inline-rust build a.rs b.rs --link-list link.txt
    """
    configure_logging(args.verbose)

    try:
        config = load_config(args.config)
        config.rustc_flags = config.rustc_flags + list(args.rustc_flags)
        crates = CrateSpecParser.parse_all(args.crates)
        fragments = FragmentReader.read_fragments(args.fragments)

        linker = LinkListLinker(args.link_list) if args.link_list else CollectingLinker()
        unit_name = args.unit or args.fragments[0].stem

        if args.verbose:
            print(f"Unit: {unit_name}")
            print(f"Fragments: {len(fragments)}")
            print(f"Crates: {', '.join(f'{n}={v}' for n, v in crates) or 'none'}")
            print()

        start_time = time.time()
        with BuildOrchestrator(config=config, linker=linker) as orchestrator:
            unit = orchestrator.new_unit(unit_name)
            for name, version in crates:
                unit.declare_dependency(name, version)
            for fragment in fragments:
                unit.append_fragment(fragment)
            result = unit.finalize()
        build_time = time.time() - start_time

        ErrorFormatter.print_success("Build successful!")
        print(f"Archive: {result.artifact_path}")
        if args.verbose:
            print(f"Strategy: {result.strategy.value}")
            print(f"Build time: {build_time:.2f}s")
        sys.exit(0)

    except ToolchainError as e:
        ErrorFormatter.handle_toolchain_error(e)
    except (InlineRustError, ValueError, FileNotFoundError) as e:
        ErrorFormatter.print_error("Error", str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def emit_command(args: EmitArgs) -> None:
    """Print the synthesized Rust source (and Cargo.toml) without building."""
    try:
        crates = CrateSpecParser.parse_all(args.crates)
        fragments = FragmentReader.read_fragments(args.fragments)
    except (ValueError, FileNotFoundError) as e:
        ErrorFormatter.print_error("Error", str(e))
        sys.exit(1)

    # Same registration order as the build command, but nothing is built
    unit = FragmentRegistry("emit")
    for name, version in crates:
        unit.declare_dependency(name, version)
    for fragment in fragments:
        unit.append_fragment(fragment)

    state = unit.ensure()
    sys.stdout.write(build_source_text(state.fragments))
    if state.dependencies:
        print()
        print("# Cargo.toml")
        sys.stdout.write(build_manifest_text(state.dependencies))


def main(argv: Optional[List[str]] = None) -> None:
    """inline-rust - build Rust fragments into a linkable static archive."""
    parser = argparse.ArgumentParser(
        prog="inline-rust",
        description="inline-rust - build Rust fragments into a linkable static archive",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"inline-rust {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Build command
    build_parser = subparsers.add_parser(
        "build",
        help="Compile Rust fragment files into a static archive",
    )
    build_parser.add_argument(
        "fragments",
        nargs="+",
        type=Path,
        help="Fragment files, one fragment per file, in emission order",
    )
    build_parser.add_argument(
        "--crate",
        dest="crates",
        action="append",
        default=[],
        metavar="NAME=VERSION",
        help="Declare a crate dependency (repeatable)",
    )
    build_parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help="Path to inline-rust.ini (default: ./inline-rust.ini if present)",
    )
    build_parser.add_argument(
        "--rustc-flag",
        dest="rustc_flags",
        action="append",
        default=[],
        metavar="FLAG",
        help="Extra flag passed to rustc (repeatable)",
    )
    build_parser.add_argument(
        "--link-list",
        type=Path,
        default=None,
        help="Append the produced archive to this link-list file",
    )
    build_parser.add_argument(
        "--unit",
        default=None,
        help="Compilation unit name (default: stem of the first fragment file)",
    )
    build_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose build output",
    )

    # Emit command
    emit_parser = subparsers.add_parser(
        "emit",
        help="Print the synthesized Rust source and Cargo.toml",
    )
    emit_parser.add_argument(
        "fragments",
        nargs="+",
        type=Path,
        help="Fragment files, one fragment per file, in emission order",
    )
    emit_parser.add_argument(
        "--crate",
        dest="crates",
        action="append",
        default=[],
        metavar="NAME=VERSION",
        help="Declare a crate dependency (repeatable)",
    )

    parsed_args = parser.parse_args(argv)

    # If no command specified, show help
    if not parsed_args.command:
        parser.print_help()
        sys.exit(0)

    if parsed_args.command == "build":
        build_command(
            BuildArgs(
                fragments=parsed_args.fragments,
                crates=parsed_args.crates,
                config=parsed_args.config,
                rustc_flags=parsed_args.rustc_flags,
                link_list=parsed_args.link_list,
                unit=parsed_args.unit,
                verbose=parsed_args.verbose,
            )
        )
    elif parsed_args.command == "emit":
        emit_command(EmitArgs(fragments=parsed_args.fragments, crates=parsed_args.crates))


if __name__ == "__main__":
    main()
