"""Merge bundled override translations into remotely fetched locale data."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from translate_manager.services.translation_dto import OverrideTable, ResultEnvelope
from translate_manager.services.translation_errors import MissingOverrideError


def shallow_merge(defaults: Mapping[str, Any], remote: Any) -> Any:
    """One-level merge where ``remote`` leaf keys win over ``defaults``.

    A remote value that is not a mapping (a bare string, say) replaces the
    defaults outright.
    """
    if remote is not None and not isinstance(remote, Mapping):
        return remote
    if not isinstance(defaults, Mapping):
        return copy.deepcopy(defaults) if remote is None else dict(remote)
    merged = copy.deepcopy(dict(defaults))
    if remote:
        merged.update(remote)
    return merged


class MergeEngine:
    """Apply a static override table under remote locale records."""

    def __init__(self, static_overrides: OverrideTable | None = None) -> None:
        self._overrides: dict[str, dict[str, Any]] = copy.deepcopy(
            {locale: dict(table) for locale, table in (static_overrides or {}).items()}
        )

    @property
    def locales(self) -> list[str]:
        return sorted(self._overrides)

    def merge(self, locale: str, envelope: ResultEnvelope) -> ResultEnvelope:
        """Fill ``envelope.data`` with override entries for ``locale`` in place.

        Every key of the override table is shallow-merged with the remote
        value for that key; keys only the remote record has are left alone.
        Raises ``MissingOverrideError`` when ``locale`` has no override entry.
        """
        overrides = self._overrides.get(locale)
        if overrides is None:
            raise MissingOverrideError(
                f"No static translations registered for locale '{locale}'."
            )

        for key, defaults in overrides.items():
            envelope.data[key] = shallow_merge(defaults, envelope.data.get(key))
        return envelope


__all__ = ["MergeEngine", "shallow_merge"]
