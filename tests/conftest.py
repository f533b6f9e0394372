import logging

import pytest

from pullgen.config.environment import Environment

_PULLGEN_ENV_VARS = (
    "PULLGEN_JOIN_STRATEGY",
    "PULLGEN_LOG_LEVEL",
    "PULLGEN_BENCH_REPEAT",
    "DEBUG",
)


@pytest.fixture(scope="session", autouse=True)
def _quiet_asyncio_logging():
    """Reduce noisy asyncio logs during tests."""
    logging.getLogger("asyncio").setLevel(logging.WARNING)


@pytest.fixture(autouse=True, scope="function")
def setup_and_teardown(request, monkeypatch):
    if request.node.get_closest_marker("no_setup"):
        yield
        return

    for name in _PULLGEN_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ENV", "test")
    Environment.clear()

    yield

    Environment.clear()
