"""
Pytest configuration for inline-rust test suite.

Integration tests call a real rustc/cargo and are skipped unless --full is given.
"""

import pytest


def pytest_addoption(parser):
    """Add custom command-line options."""
    parser.addoption(
        "--full",
        action="store_true",
        default=False,
        help="Run full test suite including integration tests (needs rustc/cargo)",
    )


def pytest_configure(config):
    """Register the integration marker."""
    config.addinivalue_line("markers", "integration: test needs a real Rust toolchain")


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --full was given."""
    if config.getoption("--full"):
        return
    skip_integration = pytest.mark.skip(reason="integration test, run with --full")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)
