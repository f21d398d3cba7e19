"""Base exception for inline-rust."""


class InlineRustError(Exception):
    """Base class for all errors raised while building inline Rust."""

    pass
