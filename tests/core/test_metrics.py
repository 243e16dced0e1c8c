"""Unit tests for metrics recording helpers."""

import translate_manager.core.metrics as metrics


def test_record_cache_event(metric_registry):
    metrics.record_cache_event("TranslateManager", "hit")
    metrics.record_cache_event("TranslateManager", "hit")

    assert (
        metric_registry.get_sample_value(
            "translate_cache_events_total",
            {"cache": "TranslateManager", "event": "hit"},
        )
        == 2.0
    )


def test_observe_lookup(metric_registry):
    metrics.observe_lookup("success", 0.25)

    assert (
        metric_registry.get_sample_value(
            "translate_lookup_requests_total", {"result": "success"}
        )
        == 1.0
    )
    assert (
        metric_registry.get_sample_value(
            "translate_lookup_seconds_sum", {"result": "success"}
        )
        == 0.25
    )


def test_observe_http_lookup(metric_registry):
    metrics.observe_http_lookup("http_error", 0.5)

    assert (
        metric_registry.get_sample_value(
            "translate_http_lookup_requests_total", {"result": "http_error"}
        )
        == 1.0
    )
    assert (
        metric_registry.get_sample_value(
            "translate_http_lookup_seconds_count", {"result": "http_error"}
        )
        == 1.0
    )


def test_record_update_notification(metric_registry):
    metrics.record_update_notification("first")
    metrics.record_update_notification("second")

    assert (
        metric_registry.get_sample_value("translate_updates_total", {"phase": "first"})
        == 1.0
    )
    assert (
        metric_registry.get_sample_value(
            "translate_updates_total", {"phase": "second"}
        )
        == 1.0
    )
