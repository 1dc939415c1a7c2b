"""Shared test configuration, pytest markers and generation-layer fixtures."""

import pytest

from fakes import ManualClock, RecordedSleep, ScriptedProvider
from services.credential_pool import CredentialPool
from services.generation_gateway import GenerationGateway

MODELS = ("model-fast", "model-lite", "model-pro")


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: calls the real Gemini API (needs GEMINI_KEYS)"
    )


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def sleep():
    return RecordedSleep()


@pytest.fixture
def make_gateway(clock, sleep):
    """Build a gateway over a fresh pool with the given keys and script."""

    def _make(keys=("key-a", "key-b"), script=None, models=MODELS):
        pool = CredentialPool(keys, clock=clock)
        provider = ScriptedProvider(script)
        gateway = GenerationGateway(pool, provider, models, sleep=sleep)
        return gateway, pool, provider

    return _make
