"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient

from nutrimind.core.deps import get_generator
from nutrimind.db.sessions import MemorySessionStore
from nutrimind.db.store import MemoryKVStore
from nutrimind.main import app
from nutrimind.services.llm_openai import TextGenerator


class FakeGenerator(TextGenerator):
    """Stands in for OpenAI: returns queued replies and records every call."""

    def __init__(self, replies=None, error=None):
        self.replies = list(replies or [])
        self.error = error
        self.calls = []

    async def generate(self, messages, *, model, temperature=None, max_tokens=None):
        self.calls.append({
            "messages": messages,
            "model": model,
            "temperature": temperature,
            "max_tokens": max_tokens,
        })
        if self.error is not None:
            raise self.error
        return self.replies.pop(0) if self.replies else ""


@pytest.fixture
def fake_generator():
    return FakeGenerator()


@pytest.fixture
def store():
    return MemoryKVStore()


@pytest.fixture
def sessions():
    return MemorySessionStore()


@pytest.fixture
def client(store, sessions, fake_generator):
    """App client with fresh in-memory stores and a fake generator."""
    app.state.store = store
    app.state.sessions = sessions
    app.dependency_overrides[get_generator] = lambda: (lambda: fake_generator)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
