"""Pytest fixtures for exthooks tests."""

import sys

import pytest
from loguru import logger

from exthooks.config import RunnerConfig
from exthooks.hooks import CancelToken, Dispatcher, EventRegistry, ScriptContext
from exthooks.log import configure_logging
from exthooks.scripts import ScriptRunner


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "posix: marks tests that need a POSIX shell (sh, sleep, echo)",
    )


def pytest_collection_modifyitems(config, items):
    """Skip POSIX shell tests on Windows."""
    if sys.platform != "win32":
        return

    skip_posix = pytest.mark.skip(reason="Requires a POSIX shell")
    for item in items:
        if "posix" in item.keywords:
            item.add_marker(skip_posix)


@pytest.fixture
def registry() -> EventRegistry:
    """Fresh registry per test; nothing is shared between tests."""
    return EventRegistry()


@pytest.fixture
def runner() -> ScriptRunner:
    """Script runner with short termination waits and captured output."""
    return ScriptRunner(
        RunnerConfig(
            terminate_grace=0.5,
            kill_wait=0.5,
            poll_interval=0.01,
            capture_output=True,
        )
    )


@pytest.fixture
def dispatcher(registry: EventRegistry, runner: ScriptRunner) -> Dispatcher:
    return Dispatcher(registry, runner)


@pytest.fixture
def token() -> CancelToken:
    return CancelToken()


@pytest.fixture
def make_context():
    """Factory for ScriptContext payloads."""

    def _make(event: str = "test-event", **kwargs) -> ScriptContext:
        kwargs.setdefault("extension", "test-extension")
        return ScriptContext(event=event, **kwargs)

    return _make


@pytest.fixture
def log_records():
    """Collect formatted loguru records emitted during the test."""
    records: list[str] = []
    handler_id = configure_logging(level="DEBUG", sink=records.append)
    yield records
    logger.remove(handler_id)
