from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from translate_manager.core.config import Settings, get_settings
from translate_manager.core.metrics import observe_http_lookup
from translate_manager.services.translation_dto import LocaleRecord
from translate_manager.services.translation_errors import (
    InvalidLocaleRecordError,
    LookupServiceError,
)

logger = logging.getLogger(__name__)


class HttpTranslationLookup:
    """Lookup that fetches one locale record per request over HTTP.

    Instances are awaitable callables, so they can be handed straight to
    ``TranslateManager(lookup=...)`` or ``set_lookup``.
    """

    def __init__(
        self,
        base_url: str | None = None,
        path: str | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.path = path or self.settings.lookup_path
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            base_url=base_url or self.settings.lookup_base_url,
            timeout=self.settings.lookup_http_timeout_seconds,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> "HttpTranslationLookup":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def __call__(self, language: str) -> LocaleRecord:
        url = self.path.format(language=language)
        start = time.perf_counter()
        try:
            response = await self.client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            observe_http_lookup("http_error", time.perf_counter() - start)
            raise LookupServiceError(
                f"Translation service returned {exc.response.status_code} "
                f"for '{language}'."
            ) from exc
        except httpx.HTTPError as exc:
            observe_http_lookup("unreachable", time.perf_counter() - start)
            logger.warning(
                "Translation service unreachable for '%s': %s", language, exc
            )
            raise LookupServiceError(
                f"Failed to reach translation service for '{language}'."
            ) from exc

        try:
            payload: Any = response.json()
        except ValueError as exc:
            observe_http_lookup("invalid", time.perf_counter() - start)
            raise InvalidLocaleRecordError(
                f"Translation service sent invalid JSON for '{language}'."
            ) from exc

        if not isinstance(payload, dict):
            observe_http_lookup("invalid", time.perf_counter() - start)
            raise InvalidLocaleRecordError(
                f"Translation service sent {type(payload).__name__} for "
                f"'{language}', expected an object."
            )

        observe_http_lookup("success", time.perf_counter() - start)
        return payload


__all__ = ["HttpTranslationLookup"]
