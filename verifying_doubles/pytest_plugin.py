"""
pytest integration.

Enable with ``pytest_plugins = ["verifying_doubles.pytest_plugin"]`` in a
``conftest.py``; tests then ask for the ``doubles`` fixture.
"""
import logging

import pytest

from verifying_doubles.core.config import configure_logging, settings
from verifying_doubles.sandbox import Sandbox

logger = logging.getLogger(__name__)


def pytest_configure(config):
    configure_logging(settings)
    config.addinivalue_line(
        "markers", "no_verify_doubles: skip verification of pre-declared expectations at teardown"
    )


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    outcome = yield
    report = outcome.get_result()
    # read back by the doubles fixture at teardown
    setattr(item, f"rep_{report.when}", report)


def _body_failed(node) -> bool:
    report = getattr(node, "rep_call", None)
    return report is not None and report.failed


@pytest.fixture
def doubles(request):
    """A fresh Sandbox per test: verified at teardown unless the test already failed, always reset."""
    sandbox = Sandbox()
    try:
        yield sandbox
        if request.node.get_closest_marker("no_verify_doubles") is not None:
            return
        if _body_failed(request.node):
            logger.debug(f"Skipping verification for failed test {request.node.nodeid}")
            return
        sandbox.verify()
    finally:
        sandbox.reset()
        logger.debug(f"Reset doubles for {request.node.nodeid}")
