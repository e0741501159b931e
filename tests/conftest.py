"""
Pytest configuration and fixtures.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest


ENV_VARS = [
    "LIVEKIT_HOST",
    "LIVEKIT_KEYS",
    "LIVEKIT_HEALTHCHECK_TIMEOUT",
    "LIVEKIT_HEALTHCHECK_STRICT_KEYS",
    "DEBUG",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate tests from the caller's environment and any .env file."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    yield


class FakeSession:
    """Stand-in for a connected LiveKit room."""

    def __init__(self, identity: str):
        self.identity = identity
        self.disconnect = AsyncMock()


def make_connector(identity: str = "livekit-healthcheck", error: Exception = None, delay: float = 0.0):
    """Build an async connector that returns a FakeSession or raises."""
    calls = []

    async def connector(host, api_key, api_secret, room_name, participant_identity):
        calls.append((host, api_key, api_secret, room_name, participant_identity))
        if delay:
            await asyncio.sleep(delay)
        if error is not None:
            raise error
        session = FakeSession(identity)
        connector.sessions.append(session)
        return session

    connector.calls = calls
    connector.sessions = []
    return connector


async def stalled_connector(host, api_key, api_secret, room_name, identity):
    """Never completes."""
    await asyncio.Event().wait()


@pytest.fixture
def host():
    return "wss://livekit.example.com:7880"


@pytest.fixture
def keys_text():
    return "APIhealthcheck: 0123456789abcdef0123456789abcdef"


@pytest.fixture
def settings(host, keys_text):
    """Settings for a healthy run."""
    from livekit_healthcheck.settings import load_settings
    return load_settings(host=host, keys=keys_text, timeout="5s")


@pytest.fixture
def connector_factory():
    return make_connector


@pytest.fixture
def stalled():
    return stalled_connector
