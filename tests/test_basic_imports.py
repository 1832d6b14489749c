"""
Basic import tests to verify the core functionality.
"""

import pytest


def test_pipeline_imports():
    """Test that the pipeline package exposes its public classes."""
    from telemetry_pipeline import (
        TelemetryPipeline,
        create_telemetry_pipeline,
        Tracker,
        MetricsRegistry,
        WebVitalsObserver,
        ErrorRecorder,
        ExperimentAssigner,
        DashboardAggregator,
    )

    assert callable(create_telemetry_pipeline)
    for cls in (TelemetryPipeline, Tracker, MetricsRegistry, WebVitalsObserver,
                ErrorRecorder, ExperimentAssigner, DashboardAggregator):
        assert isinstance(cls, type)


def test_models_imports():
    """Test that models can be imported and instantiated."""
    from telemetry_pipeline.models import Event, EventContext, ErrorRecord, MetricSummary

    event = Event(name="click", session_id="session-1-abc", timestamp=1)
    assert event.properties == {}
    assert event.to_dict() == {"name": "click", "properties": {}, "sessionId": "session-1-abc", "timestamp": 1}

    context = EventContext(url="http://localhost/", user_agent="test")
    assert context.to_dict()["userAgent"] == "test"

    record = ErrorRecord(message="boom", timestamp=1)
    assert record.stack is None

    assert MetricSummary(avg=1.0, min=1.0, max=1.0, count=1).to_dict()["count"] == 1


def test_collector_imports():
    """Test that the collector subsystem can be imported."""
    from app.collector import create_collector_module, CollectorService

    assert callable(create_collector_module)
    assert isinstance(CollectorService, type)


def test_event_type_allowlist():
    """Test that the event type allowlist is exposed."""
    from telemetry_pipeline.event_types import EventType

    assert EventType.is_valid("web_vital_lcp")
    assert not EventType.is_valid("custom_click")
    assert "session_end" in EventType.get_allowed_types()


if __name__ == "__main__":
    pytest.main([__file__])
