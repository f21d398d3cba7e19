"""
inline-rust.ini configuration parser.

This module reads the toolchain and build settings used when compiling
inline Rust code.

Example inline-rust.ini:
    [toolchain]
    rustc = rustc
    cargo = cargo
    rustc_flags = -C opt-level=2

    [build]
    work_dir_mode = unique
    work_dir = .inline-rust-quasi
    temp_dir =
    keep_temps = false

Usage:
    config = InlineRustConfig.load(Path("inline-rust.ini"))
    print(config.rustc, config.rustc_flags)
"""

import configparser
import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..errors import InlineRustError

CONFIG_FILE_NAME = "inline-rust.ini"
DEFAULT_WORK_DIR_NAME = ".inline-rust-quasi"
WORK_DIR_MODES = ("unique", "fixed")


def is_valid_work_dir_name(name: str) -> bool:
    """Check a working directory name is a single plain path component.

    Absolute paths, "." and "..", and anything with a separator would point
    the cargo working directory at an existing tree.
    """
    if not name or name in (".", ".."):
        return False
    if os.sep in name or (os.altsep and os.altsep in name):
        return False
    return not Path(name).is_absolute()


class InlineRustConfigError(InlineRustError):
    """Exception raised for inline-rust.ini configuration errors."""

    pass


@dataclass
class InlineRustConfig:
    """Toolchain and build settings."""

    rustc: str = "rustc"
    cargo: str = "cargo"
    rustc_flags: List[str] = field(default_factory=list)
    work_dir_mode: str = "unique"
    work_dir: str = DEFAULT_WORK_DIR_NAME
    temp_dir: Optional[Path] = None
    keep_temps: bool = False

    @classmethod
    def defaults(cls) -> "InlineRustConfig":
        return cls()

    @classmethod
    def load(cls, ini_path: Path) -> "InlineRustConfig":
        """
        Load configuration from an INI file.

        Missing keys keep their default values.

        Args:
            ini_path: Path to inline-rust.ini

        Raises:
            InlineRustConfigError: If the file doesn't exist, can't be parsed,
                or holds invalid values
        """
        if not ini_path.exists():
            raise InlineRustConfigError(f"Configuration file not found: {ini_path}")

        parser = configparser.ConfigParser(
            allow_no_value=True, interpolation=configparser.ExtendedInterpolation()
        )
        try:
            parser.read(ini_path, encoding="utf-8")
        except configparser.Error as e:
            raise InlineRustConfigError(f"Failed to parse {ini_path}: {e}") from e

        config = cls()
        try:
            if parser.has_section("toolchain"):
                section = parser["toolchain"]
                config.rustc = section.get("rustc", config.rustc) or config.rustc
                config.cargo = section.get("cargo", config.cargo) or config.cargo
                config.rustc_flags = shlex.split(section.get("rustc_flags", "") or "")

            if parser.has_section("build"):
                section = parser["build"]
                config.work_dir_mode = (section.get("work_dir_mode", config.work_dir_mode) or "").strip()
                config.work_dir = section.get("work_dir", config.work_dir) or config.work_dir
                temp_dir = (section.get("temp_dir", "") or "").strip()
                if temp_dir:
                    config.temp_dir = Path(temp_dir)
                config.keep_temps = section.getboolean("keep_temps", fallback=False)
        except (configparser.Error, ValueError) as e:
            raise InlineRustConfigError(f"Invalid value in {ini_path}: {e}") from e

        if config.work_dir_mode not in WORK_DIR_MODES:
            raise InlineRustConfigError(
                f"Invalid work_dir_mode '{config.work_dir_mode}' in {ini_path}. "
                + f"Must be one of: {', '.join(WORK_DIR_MODES)}"
            )

        if not is_valid_work_dir_name(config.work_dir):
            raise InlineRustConfigError(
                f"Invalid work_dir '{config.work_dir}' in {ini_path}. "
                + "Must be a plain directory name without path separators"
            )

        return config


def find_config(start_dir: Path) -> Optional[Path]:
    """
    Look for inline-rust.ini in a directory.

    Returns:
        Path to the config file, or None if there isn't one
    """
    candidate = start_dir / CONFIG_FILE_NAME
    return candidate if candidate.is_file() else None
