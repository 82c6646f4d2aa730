"""Pytest configuration for the ssmkit test suite."""

import pytest

from ssmkit import validate


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--run-statistical",
        action="store_true",
        default=False,
        help="Run sampler/density consistency tests (skipped by default, ~30s)",
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "statistical: mark test as a statistical consistency test (skipped unless --run-statistical is passed)",
    )
    config.addinivalue_line(
        "markers",
        "slow: mark test as slow (large sample sizes, may take several seconds)",
    )


def pytest_collection_modifyitems(config, items):
    """Skip statistical tests unless --run-statistical is passed."""
    if config.getoption("--run-statistical"):
        return

    skip_statistical = pytest.mark.skip(reason="need --run-statistical option to run")
    for item in items:
        if "statistical" in item.keywords:
            item.add_marker(skip_statistical)


@pytest.fixture
def ddm_spec():
    return validate("ddm", {"v": 1.0, "a": 0.8, "z": 0.5, "t": 0.3})


@pytest.fixture
def lba_spec():
    return validate("lba2", {"v": [3.0, 2.0], "A": 0.8, "k": 0.2, "t": 0.3})


@pytest.fixture
def rdm_spec():
    return validate("rdm2", {"v": [2.0, 1.0], "A": 0.5, "k": 1.0, "t": 0.2})
