"""Translation manager exception definitions."""

from __future__ import annotations


class TranslateManagerError(Exception):
    """Base class for every error raised by the translate manager."""


class LookupNotConfiguredError(TranslateManagerError):
    """Raised when a lookup is attempted before ``set_lookup`` was called."""


class EmptyLocaleError(TranslateManagerError):
    """Raised when neither remote data nor overrides contributed any key."""


class MissingOverrideError(TranslateManagerError, KeyError):
    """Raised when a locale has no entry in the static override table."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0]) if self.args else ""


class InvalidLocaleError(TranslateManagerError, ValueError):
    """Raised for a locale name that collides with the envelope layout."""


class CacheCorruptionError(TranslateManagerError):
    """Raised for a malformed cache envelope under the 'raise' policy."""


class InvalidLocaleRecordError(TranslateManagerError):
    """Raised when a lookup returns something other than a mapping."""


class LookupTimeoutError(TranslateManagerError, TimeoutError):
    """Raised when the lookup does not settle within the configured timeout."""


class LookupServiceError(TranslateManagerError):
    """Generic wrapper for remote translation service failures."""


__all__ = [
    "TranslateManagerError",
    "LookupNotConfiguredError",
    "EmptyLocaleError",
    "MissingOverrideError",
    "InvalidLocaleError",
    "CacheCorruptionError",
    "InvalidLocaleRecordError",
    "LookupTimeoutError",
    "LookupServiceError",
]
