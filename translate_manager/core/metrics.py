from __future__ import annotations

from prometheus_client import Counter, Histogram

CACHE_EVENTS = Counter(
    "translate_cache_events_total",
    "Translation cache operations recorded by the translate manager.",
    labelnames=("cache", "event"),
)
LOOKUP_REQUESTS = Counter(
    "translate_lookup_requests_total",
    "Calls made to the remote translation lookup.",
    labelnames=("result",),
)
LOOKUP_LATENCY = Histogram(
    "translate_lookup_seconds",
    "Latency of remote translation lookups.",
    labelnames=("result",),
)
UPDATE_NOTIFICATIONS = Counter(
    "translate_updates_total",
    "Callback notifications delivered by update().",
    labelnames=("phase",),
)
HTTP_LOOKUP_REQUESTS = Counter(
    "translate_http_lookup_requests_total",
    "HTTP requests made by the translation service client.",
    labelnames=("result",),
)
HTTP_LOOKUP_LATENCY = Histogram(
    "translate_http_lookup_seconds",
    "Latency of HTTP requests to the translation service.",
    labelnames=("result",),
)


def record_cache_event(cache: str, event: str) -> None:
    """Increment a cache event counter."""
    CACHE_EVENTS.labels(cache=cache, event=event).inc()


def observe_lookup(result: str, duration_seconds: float) -> None:
    """Record lookup result and latency."""
    LOOKUP_REQUESTS.labels(result=result).inc()
    LOOKUP_LATENCY.labels(result=result).observe(duration_seconds)


def record_update_notification(phase: str) -> None:
    """Count a first or second callback notification."""
    UPDATE_NOTIFICATIONS.labels(phase=phase).inc()


def observe_http_lookup(result: str, duration_seconds: float) -> None:
    """Record an HTTP translation request result and latency."""
    HTTP_LOOKUP_REQUESTS.labels(result=result).inc()
    HTTP_LOOKUP_LATENCY.labels(result=result).observe(duration_seconds)
