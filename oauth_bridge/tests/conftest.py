"""
Pytest configuration for oauth_bridge. Provider credentials are set before the app is imported
(config reads the environment at import); the in-memory store is swapped per test.
"""
import os

import pytest

os.environ["BACKEND_URL"] = "https://bridge.example"
os.environ["GOOGLE_CLIENT_ID"] = "google-client"
os.environ["GOOGLE_CLIENT_SECRET"] = "google-secret"
os.environ["NOTION_CLIENT_ID"] = "notion-client"
os.environ["NOTION_CLIENT_SECRET"] = "notion-secret"
os.environ["OAUTH_PROVIDERS"] = "google,notion"
for _key in ("GOOGLE_REDIRECT_URI", "NOTION_REDIRECT_URI", "GOOGLE_SCOPES", "BRIDGE_DATABASE_URL"):
    os.environ.pop(_key, None)

from fastapi.testclient import TestClient  # noqa: E402

from oauth_bridge.main import app, get_store  # noqa: E402
from oauth_bridge.result_store import MemoryResultStore  # noqa: E402


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    results = MemoryResultStore(ttl_seconds=600, clock=clock)
    app.dependency_overrides[get_store] = lambda: results
    yield results
    app.dependency_overrides.pop(get_store, None)


@pytest.fixture
def client(store):
    return TestClient(app)
