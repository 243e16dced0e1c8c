from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Callable

import pytest
from prometheus_client import CollectorRegistry, Counter, Histogram

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from translate_manager.core.config import Settings  # noqa: E402
import translate_manager.core.metrics as metrics  # noqa: E402
from translate_manager.services.translate_manager import TranslateManager  # noqa: E402
from translate_manager.services.translation_store import (  # noqa: E402
    InMemoryStore,
    TranslationCacheStore,
)

# Import service availability helpers for use in tests
from tests.service_availability import (  # noqa: E402, F401
    is_valkey_available,
    requires_valkey,
    skip_if_no_valkey,
)

START_MS = 1_700_000_000_000


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "requires_valkey: skip test if Valkey is not available"
    )
    config.addinivalue_line("markers", "integration: marks tests as integration tests")


class FakeValkey:
    """In-memory Valkey replacement used for tests."""

    def __init__(self) -> None:
        self._store: dict[str, str] = {}
        self.should_fail = False

    async def get(self, key: str) -> str | None:
        if self.should_fail:
            raise RuntimeError("valkey unavailable")
        return self._store.get(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        if self.should_fail:
            raise RuntimeError("valkey unavailable")
        self._store[key] = value
        return True

    async def delete(self, *keys: str) -> None:
        if self.should_fail:
            raise RuntimeError("valkey unavailable")
        for key in keys:
            self._store.pop(key, None)


class FakeClock:
    """Manually advanced epoch-millisecond clock."""

    def __init__(self, now: int = START_MS) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class RecordingLookup:
    """Async lookup returning canned records and remembering each call."""

    def __init__(self, responses: dict[str, Any] | None = None) -> None:
        self.responses = dict(responses or {})
        self.calls: list[str] = []

    async def __call__(self, language: str) -> Any:
        self.calls.append(language)
        response = self.responses[language]
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture()
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture()
def fake_valkey() -> FakeValkey:
    return FakeValkey()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def memory_store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture()
def cache_store(memory_store: InMemoryStore, clock: FakeClock) -> TranslationCacheStore:
    return TranslationCacheStore(memory_store, "TranslateManager", clock=clock)


@pytest.fixture()
def lookup() -> RecordingLookup:
    return RecordingLookup()


@pytest.fixture()
def make_manager(
    memory_store: InMemoryStore,
    clock: FakeClock,
    lookup: RecordingLookup,
    settings: Settings,
) -> Callable[..., TranslateManager]:
    """Build managers that share the test store, clock and lookup."""

    def factory(**kwargs: Any) -> TranslateManager:
        kwargs.setdefault("lookup", lookup)
        kwargs.setdefault("static_overrides", {})
        kwargs.setdefault("store", memory_store)
        kwargs.setdefault("clock", clock)
        kwargs.setdefault("settings", settings)
        return TranslateManager(**kwargs)

    return factory


@pytest.fixture
def metric_registry(monkeypatch):
    """Provide a fresh registry and rebind module-level metrics."""
    registry = CollectorRegistry()

    monkeypatch.setattr(
        metrics,
        "CACHE_EVENTS",
        Counter(
            "translate_cache_events_total",
            "Cache events",
            ["cache", "event"],
            registry=registry,
        ),
    )
    monkeypatch.setattr(
        metrics,
        "LOOKUP_REQUESTS",
        Counter(
            "translate_lookup_requests_total",
            "Lookup requests",
            ["result"],
            registry=registry,
        ),
    )
    monkeypatch.setattr(
        metrics,
        "LOOKUP_LATENCY",
        Histogram(
            "translate_lookup_seconds",
            "Lookup latency",
            ["result"],
            registry=registry,
        ),
    )
    monkeypatch.setattr(
        metrics,
        "UPDATE_NOTIFICATIONS",
        Counter(
            "translate_updates_total",
            "Update notifications",
            ["phase"],
            registry=registry,
        ),
    )
    monkeypatch.setattr(
        metrics,
        "HTTP_LOOKUP_REQUESTS",
        Counter(
            "translate_http_lookup_requests_total",
            "HTTP lookup requests",
            ["result"],
            registry=registry,
        ),
    )
    monkeypatch.setattr(
        metrics,
        "HTTP_LOOKUP_LATENCY",
        Histogram(
            "translate_http_lookup_seconds",
            "HTTP lookup latency",
            ["result"],
            registry=registry,
        ),
    )
    return registry
