"""Data transfer objects shared by the translate manager pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Mapping

LocaleRecord = dict[str, Any]
OverrideTable = Mapping[str, Mapping[str, Any]]
Lookup = Callable[..., Awaitable[Mapping[str, Any]]]


class UpdatePhase(str, Enum):
    """Which notification a callback invocation belongs to."""

    FIRST = "first"
    SECOND = "second"


@dataclass
class ResultEnvelope:
    """Locale data handed to update callbacks.

    ``is_cache`` is True only when the record came from a fresh cache hit;
    it stays None (absent) when the record was fetched from the lookup.
    """

    data: LocaleRecord = field(default_factory=dict)
    is_cache: bool | None = None

    def is_empty(self) -> bool:
        return not self.data

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"data": self.data}
        if self.is_cache is not None:
            payload["isCache"] = self.is_cache
        return payload


UpdateCallback = Callable[[ResultEnvelope, UpdatePhase], None | Awaitable[None]]
BackgroundErrorSink = Callable[[str, BaseException], None]


__all__ = [
    "BackgroundErrorSink",
    "LocaleRecord",
    "Lookup",
    "OverrideTable",
    "ResultEnvelope",
    "UpdateCallback",
    "UpdatePhase",
]
