"""Pytest configuration and fixtures for common-py tests."""
import logging

import pytest

from depdoctor_common import clear_run_id


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


@pytest.fixture(autouse=True)
def reset_run_id():
    """Every test starts without a run id."""
    clear_run_id()
    yield
    clear_run_id()


@pytest.fixture
def restore_logging():
    """Restore the depdoctor logger hierarchy after a test configures it."""
    root = logging.getLogger("depdoctor")
    handlers, level, propagate = list(root.handlers), root.level, root.propagate
    yield root
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
    root.propagate = propagate
