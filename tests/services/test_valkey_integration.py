"""Integration tests against a real Valkey instance."""

from __future__ import annotations

import uuid

import pytest
import valkey.asyncio as valkey

from translate_manager.services.translate_manager import TranslateManager
from translate_manager.services.translation_store import ValkeyStore
from tests.service_availability import requires_valkey

pytestmark = [pytest.mark.integration, requires_valkey]


@pytest.mark.asyncio
async def test_envelope_shared_between_managers(settings, lookup, clock):
    client = valkey.from_url(
        "valkey://localhost:6379/0", encoding="utf-8", decode_responses=True
    )
    storage_key = f"translate-test:{uuid.uuid4()}"
    try:
        store = ValkeyStore(client)
        lookup.responses["en"] = {"greeting": {"text": "hi"}}
        overrides = {"en": {"farewell": {"text": "bye"}}}

        writer = TranslateManager(
            lookup=lookup,
            static_overrides=overrides,
            storage_key=storage_key,
            store=store,
            clock=clock,
            settings=settings,
        )
        await writer.update("en", lambda envelope, phase: None)

        reader = TranslateManager(
            lookup=lookup,
            static_overrides=overrides,
            storage_key=storage_key,
            store=store,
            clock=clock,
            settings=settings,
        )
        phases = []
        await reader.update(
            "en", lambda envelope, phase: phases.append(envelope.is_cache)
        )
        await reader.drain()

        assert phases == [True]
        assert lookup.calls == ["en", "en"]
    finally:
        await client.delete(storage_key)
        await client.aclose()
