"""CLI utility functions for inline-rust.

This module provides common utilities used across CLI commands including:
- Crate specification parsing (NAME=VERSION)
- Reading fragment files
- Error handling and formatting
"""

import logging
import sys
from pathlib import Path
from typing import List, Tuple

from inline_rust.build import ToolchainError


class CrateSpecParser:
    """Parses --crate NAME=VERSION arguments."""

    @staticmethod
    def parse(spec: str) -> Tuple[str, str]:
        """Parse a crate specification.

        Args:
            spec: String of the form "rand=0.3"

        Returns:
            (name, version) tuple

        Raises:
            ValueError: If the spec isn't NAME=VERSION with both parts non-empty
        """
        name, sep, version = spec.partition("=")
        name = name.strip()
        version = version.strip()
        if not sep or not name or not version:
            raise ValueError(f"Invalid crate specification '{spec}'. Expected NAME=VERSION (e.g. rand=0.3)")
        return name, version

    @staticmethod
    def parse_all(specs: List[str]) -> List[Tuple[str, str]]:
        return [CrateSpecParser.parse(spec) for spec in specs]


class FragmentReader:
    """Reads Rust fragments from files, one fragment per file."""

    @staticmethod
    def read_fragments(paths: List[Path]) -> List[str]:
        """Read fragment files in the given order.

        Trailing newlines are stripped; the synthesizer adds one per fragment.

        Raises:
            FileNotFoundError: If a file doesn't exist
        """
        fragments = []
        for path in paths:
            if not path.is_file():
                raise FileNotFoundError(f"Fragment file not found: {path}")
            fragments.append(path.read_text(encoding="utf-8").rstrip("\n"))
        return fragments


def configure_logging(verbose: bool) -> None:
    """Configure the root logger for CLI use."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )


class ErrorFormatter:
    """Formats and displays error messages with ANSI color codes."""

    # ANSI color codes
    RED = "\033[1;31m"
    GREEN = "\033[1;32m"
    YELLOW = "\033[1;33m"
    RESET = "\033[0m"

    @staticmethod
    def print_error(title: str, message: str) -> None:
        """Print formatted error message.

        Args:
            title: Error title (e.g., "Build failed")
            message: Error message details, printed unmodified
        """
        print(file=sys.stderr)
        print(f"{ErrorFormatter.RED}✗ {title}{ErrorFormatter.RESET}", file=sys.stderr)
        print(file=sys.stderr)
        print(message, file=sys.stderr)

    @staticmethod
    def print_success(message: str) -> None:
        print(f"{ErrorFormatter.GREEN}✓ {message}{ErrorFormatter.RESET}")

    @staticmethod
    def print_warning(message: str) -> None:
        print(f"{ErrorFormatter.YELLOW}✗ {message}{ErrorFormatter.RESET}", file=sys.stderr)

    @staticmethod
    def handle_toolchain_error(error: ToolchainError) -> None:
        """Print rustc/cargo diagnostics exactly as the toolchain produced them."""
        ErrorFormatter.print_error(error.PREFIX.strip(), error.stderr)
        sys.exit(1)

    @staticmethod
    def handle_keyboard_interrupt() -> None:
        ErrorFormatter.print_warning("Build interrupted")
        sys.exit(130)  # Standard exit code for SIGINT

    @staticmethod
    def handle_unexpected_error(error: Exception, verbose: bool = False) -> None:
        """Handle unexpected errors with standard formatting.

        Args:
            error: The exception to handle
            verbose: Whether to print traceback
        """
        message = f"{type(error).__name__}: {error}"
        ErrorFormatter.print_error("Unexpected error", message)

        if verbose:
            import traceback

            print("Traceback:", file=sys.stderr)
            print(traceback.format_exc(), file=sys.stderr)

        sys.exit(1)
