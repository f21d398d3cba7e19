"""Configuration parsing for inline-rust."""

from .ini_parser import CONFIG_FILE_NAME, InlineRustConfig, InlineRustConfigError, find_config

__all__ = [
    "CONFIG_FILE_NAME",
    "InlineRustConfig",
    "InlineRustConfigError",
    "find_config",
]
