"""
Cache store adapter for translation envelopes.

Persists one JSON envelope per storage key:

    {"<locale>": {...locale record...}, ..., "time": <epoch ms of last write>}

The single ``time`` field covers every locale in the envelope, so a write for
any locale refreshes the freshness of all of them.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Mapping
from functools import lru_cache
from typing import Any, Callable, Protocol

import valkey.asyncio as valkey

from translate_manager.core.config import (
    DEFAULT_STORAGE_KEY,
    Settings,
    get_settings,
)
from translate_manager.core.metrics import record_cache_event
from translate_manager.services.translation_errors import (
    CacheCorruptionError,
    InvalidLocaleError,
)

logger = logging.getLogger(__name__)

TIME_FIELD = "time"


def wall_clock_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def check_locale(locale: str) -> None:
    """Reject locale names that would overwrite the envelope timestamp."""
    if locale == TIME_FIELD:
        raise InvalidLocaleError(
            f"'{TIME_FIELD}' is reserved for the cache timestamp and cannot "
            "be used as a locale."
        )


# =============================================================================
# Key-Value Backends
# =============================================================================


class KeyValueStore(Protocol):
    """Minimal local persistence capability used by the cache adapter."""

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def delete(self, key: str) -> None: ...


class InMemoryStore:
    """Process-local store, the default persistence for a manager."""

    def __init__(self) -> None:
        self._store: dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> str | None:
        async with self._lock:
            return self._store.get(key)

    async def set(self, key: str, value: str) -> None:
        async with self._lock:
            self._store[key] = value

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._store.pop(key, None)


class ValkeyStore:
    """Valkey-backed store so several processes can share one cache envelope.

    Entries carry no TTL; staleness is decided by the envelope timestamp.
    """

    def __init__(self, client: valkey.Valkey) -> None:
        self._client = client

    async def get(self, key: str) -> str | None:
        return await self._client.get(key)

    async def set(self, key: str, value: str) -> None:
        await self._client.set(key, value)

    async def delete(self, key: str) -> None:
        await self._client.delete(key)


# =============================================================================
# Cache Store Adapter
# =============================================================================


class TranslationCacheStore:
    """Reads and writes the cache envelope for one storage key."""

    def __init__(
        self,
        store: KeyValueStore,
        storage_key: str = DEFAULT_STORAGE_KEY,
        *,
        clock: Callable[[], int] = wall_clock_ms,
        corrupt_policy: str = "reset",
    ) -> None:
        self._store = store
        self.storage_key = storage_key
        self._clock = clock
        self._corrupt_policy = corrupt_policy

    def now_ms(self) -> int:
        return self._clock()

    async def read(self) -> dict[str, Any]:
        """Return the decoded envelope, or an empty one if absent or malformed."""
        payload = await self._store.get(self.storage_key)
        if payload is None:
            return {}

        try:
            envelope = json.loads(payload)
        except (TypeError, ValueError) as exc:
            return self._handle_corruption(f"invalid JSON: {exc}")

        if not isinstance(envelope, dict):
            return self._handle_corruption(
                f"expected a JSON object, got {type(envelope).__name__}"
            )
        return envelope

    async def read_record(
        self, locale: str
    ) -> tuple[dict[str, Any], Mapping[str, Any] | None]:
        """Return the envelope and the record cached for ``locale``.

        An entry that is not a JSON object is corrupt and reads as absent.
        """
        check_locale(locale)
        envelope = await self.read()
        record = envelope.get(locale)
        if record is not None and not isinstance(record, Mapping):
            self._handle_corruption(
                f"entry for '{locale}' is {type(record).__name__}, "
                "expected a JSON object"
            )
            record = None
        return envelope, record

    async def write(self, locale: str, record: Any) -> None:
        """Store ``record`` under ``locale`` and stamp the whole envelope."""
        check_locale(locale)
        envelope = await self.read()
        envelope[locale] = record
        envelope[TIME_FIELD] = self.now_ms()
        await self._store.set(self.storage_key, json.dumps(envelope))
        record_cache_event(self.storage_key, "write")

    async def last_write_ms(self) -> int | None:
        envelope = await self.read()
        written = envelope.get(TIME_FIELD)
        return written if isinstance(written, (int, float)) else None

    async def clear(self) -> None:
        await self._store.delete(self.storage_key)

    def _handle_corruption(self, reason: str) -> dict[str, Any]:
        record_cache_event(self.storage_key, "corrupt")
        if self._corrupt_policy == "raise":
            raise CacheCorruptionError(
                f"Cache envelope '{self.storage_key}' is corrupt: {reason}"
            )
        logger.warning(
            "Discarding corrupt cache envelope '%s': %s", self.storage_key, reason
        )
        return {}


# =============================================================================
# Factory Functions
# =============================================================================


@lru_cache
def get_valkey_client(url: str | None = None) -> valkey.Valkey:
    """Return a shared Valkey client instance per URL."""
    return valkey.from_url(
        url or get_settings().valkey_url,
        encoding="utf-8",
        decode_responses=True,
    )


def create_store(settings: Settings | None = None) -> KeyValueStore:
    """Build the key-value backend selected by ``cache_backend``."""
    settings = settings or get_settings()
    if settings.cache_backend == "valkey":
        return ValkeyStore(get_valkey_client(settings.valkey_url))
    return InMemoryStore()


__all__ = [
    "InMemoryStore",
    "KeyValueStore",
    "TIME_FIELD",
    "TranslationCacheStore",
    "ValkeyStore",
    "check_locale",
    "create_store",
    "get_valkey_client",
    "wall_clock_ms",
]
