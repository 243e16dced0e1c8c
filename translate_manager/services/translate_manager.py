"""
Translation manager with stale-while-revalidate notifications.

``update`` serves a locale from the cache when it is fresh, merges the bundled
override table into it and notifies the caller. When the data came from the
cache, a background task re-fetches the locale and notifies the caller a
second time only if the remote content changed:

    INIT -> FIRST_NOTIFIED -> DONE
                           -> SECOND_NOTIFIED -> DONE   (cache hit + changed)
    INIT -> FAILED                                      (missing override / empty)
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import math
from typing import Callable

from translate_manager.core.config import Settings, get_settings
from translate_manager.core.metrics import (
    record_cache_event,
    record_update_notification,
)
from translate_manager.services.freshness import FreshnessEvaluator
from translate_manager.services.merge import MergeEngine
from translate_manager.services.translation_dto import (
    BackgroundErrorSink,
    Lookup,
    OverrideTable,
    ResultEnvelope,
    UpdateCallback,
    UpdatePhase,
)
from translate_manager.services.translation_errors import EmptyLocaleError
from translate_manager.services.translation_store import (
    KeyValueStore,
    TranslationCacheStore,
    create_store,
    wall_clock_ms,
)

logger = logging.getLogger(__name__)


class TranslateManager:
    """Caching facade over a remote per-locale translation lookup."""

    def __init__(
        self,
        lookup: Lookup | None = None,
        static_overrides: OverrideTable | None = None,
        storage_key: str | None = None,
        expiry_ms: float | None = None,
        *,
        store: KeyValueStore | None = None,
        clock: Callable[[], int] = wall_clock_ms,
        on_background_error: BackgroundErrorSink | None = None,
        lookup_timeout_seconds: float | None = None,
        corrupt_policy: str | None = None,
        settings: Settings | None = None,
    ) -> None:
        """
        Args:
            lookup: Async callable invoked as ``lookup(language=locale)``.
            static_overrides: Locale -> record table merged under remote data.
            storage_key: Persistence namespace for the cache envelope.
            expiry_ms: Freshness window; None (or infinity) never expires.
                0 is a zero-width window, not "unbounded": every lookup
                after the clock moves past the last write goes to the remote.
            store: Key-value backend; defaults to the configured backend.
            clock: Epoch-millisecond clock used for cache timestamps.
            on_background_error: Receives ``(locale, exc)`` when revalidation fails.
            lookup_timeout_seconds: Optional upper bound for each lookup call.
            corrupt_policy: 'reset' or 'raise' for malformed cache envelopes.
            settings: Settings to read defaults from.
        """
        settings = settings or get_settings()

        if expiry_ms is None:
            expiry_ms = settings.cache_expiry_ms
        if expiry_ms is not None and math.isinf(expiry_ms):
            expiry_ms = None
        if expiry_ms is not None and expiry_ms < 0:
            raise ValueError(f"expiry_ms cannot be negative: {expiry_ms}")

        self._cache = TranslationCacheStore(
            store if store is not None else create_store(settings),
            storage_key or settings.storage_key,
            clock=clock,
            corrupt_policy=corrupt_policy or settings.cache_corrupt_policy,
        )
        self._freshness = FreshnessEvaluator(
            self._cache,
            lookup=lookup,
            expiry_ms=expiry_ms,
            lookup_timeout_seconds=(
                lookup_timeout_seconds
                if lookup_timeout_seconds is not None
                else settings.lookup_timeout_seconds
            ),
        )
        self._merge = MergeEngine(static_overrides)
        self._on_background_error = on_background_error
        self._background: set[asyncio.Task[None]] = set()

    async def __aenter__(self) -> "TranslateManager":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    @property
    def storage_key(self) -> str:
        return self._cache.storage_key

    @property
    def expiry_ms(self) -> float | None:
        return self._freshness.expiry_ms

    @property
    def cache(self) -> TranslationCacheStore:
        return self._cache

    @property
    def pending_revalidations(self) -> int:
        return sum(1 for task in self._background if not task.done())

    def set_lookup(self, lookup: Lookup) -> None:
        """Install or replace the remote lookup."""
        self._freshness.lookup = lookup

    async def update(self, locale: str, callback: UpdateCallback) -> None:
        """Notify ``callback`` with merged data for ``locale``.

        Returns once the first notification has been delivered. A cache hit
        schedules background revalidation that may deliver a second
        notification later; its failures go to ``on_background_error``.
        """
        envelope = await self._merged(locale)
        if envelope.is_empty():
            raise EmptyLocaleError(f"Locale '{locale}' is empty.")

        await self._notify(callback, envelope, UpdatePhase.FIRST)

        if envelope.is_cache is True:
            self._spawn_revalidation(locale, callback)

    async def drain(self) -> None:
        """Wait for every scheduled revalidation to finish."""
        while True:
            pending = [task for task in self._background if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    async def aclose(self) -> None:
        """Cancel outstanding revalidations."""
        tasks = list(self._background)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._background.clear()

    async def _merged(self, locale: str) -> ResultEnvelope:
        envelope = await self._freshness.fetch_fresh(locale)
        return self._merge.merge(locale, envelope)

    async def _notify(
        self,
        callback: UpdateCallback,
        envelope: ResultEnvelope,
        phase: UpdatePhase,
    ) -> None:
        result = callback(envelope, phase)
        if inspect.isawaitable(result):
            await result
        record_update_notification(phase.value)

    def _spawn_revalidation(self, locale: str, callback: UpdateCallback) -> None:
        task = asyncio.create_task(
            self._revalidate(locale, callback),
            name=f"translate-revalidate:{locale}",
        )
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _revalidate(self, locale: str, callback: UpdateCallback) -> None:
        try:
            if not await self._freshness.needs_update(locale):
                logger.debug("Cached translations for '%s' are current.", locale)
                return

            envelope = await self._merged(locale)
            if envelope.is_empty():
                logger.info(
                    "Revalidated locale '%s' is empty; skipping second update.",
                    locale,
                )
                return

            await self._notify(callback, envelope, UpdatePhase.SECOND)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            record_cache_event(self._cache.storage_key, "background_error")
            logger.exception(
                "Background revalidation failed for locale '%s'.", locale
            )
            self._report_background_error(locale, exc)

    def _report_background_error(self, locale: str, exc: Exception) -> None:
        if self._on_background_error is None:
            return
        try:
            self._on_background_error(locale, exc)
        except Exception:
            logger.exception("Background error sink raised for locale '%s'.", locale)


__all__ = ["TranslateManager"]
