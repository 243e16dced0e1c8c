"""Client-side translation cache with background revalidation."""

from translate_manager.services.merge import MergeEngine, shallow_merge
from translate_manager.services.translate_manager import TranslateManager
from translate_manager.services.translation_client import HttpTranslationLookup
from translate_manager.services.translation_dto import ResultEnvelope, UpdatePhase
from translate_manager.services.translation_errors import (
    CacheCorruptionError,
    EmptyLocaleError,
    InvalidLocaleError,
    InvalidLocaleRecordError,
    LookupNotConfiguredError,
    LookupServiceError,
    LookupTimeoutError,
    MissingOverrideError,
    TranslateManagerError,
)
from translate_manager.services.translation_store import (
    InMemoryStore,
    TranslationCacheStore,
    ValkeyStore,
)

__all__ = [
    "CacheCorruptionError",
    "EmptyLocaleError",
    "HttpTranslationLookup",
    "InMemoryStore",
    "InvalidLocaleError",
    "InvalidLocaleRecordError",
    "LookupNotConfiguredError",
    "LookupServiceError",
    "LookupTimeoutError",
    "MergeEngine",
    "MissingOverrideError",
    "ResultEnvelope",
    "TranslateManager",
    "TranslateManagerError",
    "TranslationCacheStore",
    "UpdatePhase",
    "ValkeyStore",
    "shallow_merge",
]
