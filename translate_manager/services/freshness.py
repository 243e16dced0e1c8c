"""Freshness decisions and remote revalidation for cached locale records."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Mapping
from typing import Any

from translate_manager.core.metrics import observe_lookup, record_cache_event
from translate_manager.services.translation_dto import (
    LocaleRecord,
    Lookup,
    ResultEnvelope,
)
from translate_manager.services.translation_errors import (
    InvalidLocaleRecordError,
    LookupNotConfiguredError,
    LookupTimeoutError,
)
from translate_manager.services.translation_store import (
    TIME_FIELD,
    TranslationCacheStore,
)

logger = logging.getLogger(__name__)


def canonical_json(value: Any) -> str:
    """Key-sorted serialization used to compare locale records."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)


class FreshnessEvaluator:
    """Serve locale records from cache while fresh, otherwise from the lookup."""

    def __init__(
        self,
        cache: TranslationCacheStore,
        lookup: Lookup | None = None,
        expiry_ms: int | None = None,
        lookup_timeout_seconds: float | None = None,
    ) -> None:
        self.cache = cache
        self.lookup = lookup
        self.expiry_ms = expiry_ms
        self.lookup_timeout_seconds = lookup_timeout_seconds

    def is_fresh(self, envelope: Mapping[str, Any]) -> bool:
        """Whether the envelope timestamp is inside the freshness window."""
        written = envelope.get(TIME_FIELD)
        if not written or not isinstance(written, (int, float)):
            return False
        if self.expiry_ms is None:
            return True
        return self.cache.now_ms() - written <= self.expiry_ms

    async def fetch_fresh(self, locale: str) -> ResultEnvelope:
        """Return the cached record when fresh, else fetch and cache it."""
        envelope, cached = await self.cache.read_record(locale)
        if cached is not None and self.is_fresh(envelope):
            record_cache_event(self.cache.storage_key, "hit")
            return ResultEnvelope(data=dict(cached), is_cache=True)

        record_cache_event(
            self.cache.storage_key, "stale" if cached is not None else "miss"
        )
        record = await self.request(locale)
        return ResultEnvelope(data=dict(record))

    async def needs_update(self, locale: str) -> bool:
        """Re-fetch ``locale`` and report whether it differs from the cache."""
        _, snapshot = await self.cache.read_record(locale)
        fresh = await self.request(locale)
        changed = canonical_json(fresh) != canonical_json(snapshot)
        record_cache_event(
            self.cache.storage_key,
            "revalidate_changed" if changed else "revalidate_unchanged",
        )
        return changed

    async def request(self, locale: str) -> LocaleRecord:
        """Call the lookup for ``locale`` and write the result through the cache."""
        if self.lookup is None:
            logger.error("No translation lookup configured; call set_lookup() first.")
            raise LookupNotConfiguredError(
                "No translation lookup configured; call set_lookup() first."
            )

        start = time.perf_counter()
        try:
            record = await self._invoke_lookup(locale)
        except LookupTimeoutError:
            observe_lookup("timeout", time.perf_counter() - start)
            raise
        except Exception:
            observe_lookup("error", time.perf_counter() - start)
            raise

        if not isinstance(record, Mapping):
            observe_lookup("invalid", time.perf_counter() - start)
            raise InvalidLocaleRecordError(
                f"Translation lookup for '{locale}' returned "
                f"{type(record).__name__}, expected a mapping."
            )

        observe_lookup("success", time.perf_counter() - start)
        record = dict(record)
        await self.cache.write(locale, record)
        return record

    async def _invoke_lookup(self, locale: str) -> Any:
        assert self.lookup is not None
        if self.lookup_timeout_seconds is None:
            return await self.lookup(language=locale)
        try:
            return await asyncio.wait_for(
                self.lookup(language=locale), self.lookup_timeout_seconds
            )
        except asyncio.TimeoutError as exc:
            raise LookupTimeoutError(
                f"Translation lookup for '{locale}' timed out after "
                f"{self.lookup_timeout_seconds}s."
            ) from exc


__all__ = ["FreshnessEvaluator", "canonical_json"]
