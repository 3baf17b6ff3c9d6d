"""Shared fixtures for helm-releases tests."""

from collections.abc import Generator
import logging

import pytest

from helm_releases import context

_LOGGER = logging.getLogger(__name__)

# Global collector for the whole session
SESSION_COLLECTOR = context.TraceCollector()


@pytest.fixture(autouse=True)
def trace_capture() -> Generator[None, None, None]:
    """Capture traces for each test and add them to the session collector."""
    with context.get_trace_collector() as collector:
        yield
        for name, duration in collector.timings.items():
            SESSION_COLLECTOR.add(name, duration)


def pytest_sessionfinish(session: pytest.Session, exitstatus: int) -> None:
    """Log the trace summary at the end of the session."""
    for name, duration in sorted(
        SESSION_COLLECTOR.timings.items(), key=lambda x: x[1], reverse=True
    ):
        _LOGGER.info("Trace %s: %0.4fs", name, duration)
