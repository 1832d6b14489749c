"""
Tests for web-vital classification and observation.
"""

import pytest

from telemetry_pipeline.errors import ObserverUnavailable
from telemetry_pipeline.signals import (
    FIRST_INPUT,
    LARGEST_CONTENTFUL_PAINT,
    LAYOUT_SHIFT,
    RESOURCE,
    NullPlatform,
    PerformanceEntry,
    SimulatedPlatform,
)
from telemetry_pipeline.web_vitals import THRESHOLDS, WebVitalsObserver, classify


class TestClassify:
    """Test the threshold table."""

    @pytest.mark.parametrize("value, expected", [
        (900, "good"),
        (1000, "good"),
        (1000.1, "needs_improvement"),
        (2000, "needs_improvement"),
        (2500, "needs_improvement"),
        (3000, "poor"),
    ])
    def test_lcp(self, value, expected):
        """Test LCP classification."""
        assert classify(value, THRESHOLDS["lcp"]) == expected

    @pytest.mark.parametrize("value, expected", [
        (50, "good"),
        (100, "good"),
        (150, "needs_improvement"),
        (300, "needs_improvement"),
        (301, "poor"),
    ])
    def test_fid(self, value, expected):
        """Test FID classification."""
        assert classify(value, THRESHOLDS["fid"]) == expected

    @pytest.mark.parametrize("value, expected", [
        (0.0, "good"),
        (0.1, "good"),
        (0.2, "needs_improvement"),
        (0.25, "needs_improvement"),
        (0.3, "poor"),
    ])
    def test_cls(self, value, expected):
        """Test CLS classification."""
        assert classify(value, THRESHOLDS["cls"]) == expected

    def test_table_is_monotonic(self):
        """Test that every threshold pair is ordered."""
        for thresholds in THRESHOLDS.values():
            assert thresholds.good < thresholds.poor


class TestWebVitalsObserver:
    """Test subscription and emitted events."""

    def _vitals(self, pipeline, name):
        return [e for e in pipeline.get_events() if e.name == name]

    def test_start_subscribes_all_streams(self, pipeline, platform):
        """Test subscription to every stream."""
        assert pipeline.start() is True
        assert pipeline.web_vitals.subscribed == {LARGEST_CONTENTFUL_PAINT, FIRST_INPUT, LAYOUT_SHIFT, RESOURCE}

    def test_start_is_idempotent(self, pipeline, platform):
        """Test that starting twice subscribes once."""
        pipeline.start()
        pipeline.start()
        assert len(platform.observers[LARGEST_CONTENTFUL_PAINT]) == 1

    @pytest.mark.parametrize("value, expected", [
        (900, "good"),
        (2000, "needs_improvement"),
        (3000, "poor"),
    ])
    def test_lcp_event(self, pipeline, platform, value, expected):
        """Test the LCP event."""
        pipeline.start()
        platform.deliver_entries(LARGEST_CONTENTFUL_PAINT, [
            PerformanceEntry(entry_type=LARGEST_CONTENTFUL_PAINT, start_time=value),
        ])

        events = self._vitals(pipeline, "web_vital_lcp")
        assert len(events) == 1
        assert events[0].properties == {"value": value, "threshold": expected}

    def test_lcp_uses_latest_candidate(self, pipeline, platform):
        """Test that the latest LCP candidate wins."""
        pipeline.start()
        platform.deliver_entries(LARGEST_CONTENTFUL_PAINT, [
            PerformanceEntry(entry_type=LARGEST_CONTENTFUL_PAINT, start_time=500),
            PerformanceEntry(entry_type=LARGEST_CONTENTFUL_PAINT, start_time=2800),
        ])

        events = self._vitals(pipeline, "web_vital_lcp")
        assert len(events) == 1
        assert events[0].properties["value"] == 2800
        assert events[0].properties["threshold"] == "poor"

    def test_fid_one_event_per_entry(self, pipeline, platform):
        """Test one FID event per entry."""
        pipeline.start()
        platform.deliver_entries(FIRST_INPUT, [
            PerformanceEntry(entry_type=FIRST_INPUT, start_time=1000, processing_start=1040),
            PerformanceEntry(entry_type=FIRST_INPUT, start_time=2000, processing_start=2350),
        ])

        events = self._vitals(pipeline, "web_vital_fid")
        assert [e.properties["value"] for e in events] == [40, 350]
        assert [e.properties["threshold"] for e in events] == ["good", "poor"]

    def test_fid_entry_without_processing_start_is_skipped(self, pipeline, platform):
        """Test skipping FID entries without a processing start."""
        pipeline.start()
        platform.deliver_entries(FIRST_INPUT, [PerformanceEntry(entry_type=FIRST_INPUT, start_time=10)])
        assert self._vitals(pipeline, "web_vital_fid") == []

    def test_cls_excludes_recent_input_and_accumulates(self, pipeline, platform):
        """Test CLS accumulation without recent-input shifts."""
        pipeline.start()
        platform.deliver_entries(LAYOUT_SHIFT, [
            PerformanceEntry(entry_type=LAYOUT_SHIFT, value=0.05),
            PerformanceEntry(entry_type=LAYOUT_SHIFT, value=0.5, had_recent_input=True),
        ])
        platform.deliver_entries(LAYOUT_SHIFT, [
            PerformanceEntry(entry_type=LAYOUT_SHIFT, value=0.1),
        ])

        events = self._vitals(pipeline, "web_vital_cls")
        assert len(events) == 2
        assert events[0].properties["value"] == pytest.approx(0.05)
        assert events[0].properties["threshold"] == "good"
        assert events[1].properties["value"] == pytest.approx(0.15)
        assert events[1].properties["threshold"] == "needs_improvement"

    def test_cls_batch_of_recent_input_only_emits_nothing(self, pipeline, platform):
        """Test a batch of recent-input shifts only."""
        pipeline.start()
        platform.deliver_entries(LAYOUT_SHIFT, [
            PerformanceEntry(entry_type=LAYOUT_SHIFT, value=0.3, had_recent_input=True),
        ])
        assert self._vitals(pipeline, "web_vital_cls") == []
        assert pipeline.web_vitals.cumulative_layout_shift == 0.0

    def test_resource_timing_for_api_calls(self, pipeline, platform):
        """Test api_performance events from resource timing."""
        pipeline.start()
        platform.deliver_entries(RESOURCE, [
            PerformanceEntry(entry_type=RESOURCE, name="https://example.com/api/photos",
                             request_start=100, response_end=180, transfer_size=2048),
            PerformanceEntry(entry_type=RESOURCE, name="https://example.com/logo.png",
                             request_start=100, response_end=300),
        ])

        events = self._vitals(pipeline, "api_performance")
        assert len(events) == 1
        assert events[0].properties == {
            "url": "https://example.com/api/photos",
            "duration": 80,
            "size": 2048,
        }


class TestObserverUnavailable:
    """Test silent degradation when the host lacks the capability."""

    def test_null_platform_is_noop(self, pipeline):
        """Test that a no-op platform disables web vitals."""
        observer = WebVitalsObserver(pipeline.tracker, NullPlatform(), "test")
        assert observer.start() is False
        assert observer.subscribed == set()

    def test_partial_support(self, pipeline):
        """Test a host with some streams missing."""
        platform = SimulatedPlatform(supported_entry_types=[FIRST_INPUT])
        observer = WebVitalsObserver(pipeline.tracker, platform, "test")

        assert observer.start() is True
        assert observer.subscribed == {FIRST_INPUT}

    def test_observe_raising_unavailable(self, pipeline):
        """Test a host that reports a stream as unavailable."""
        class RaisingPlatform(NullPlatform):
            def observe(self, entry_type, callback):
                raise ObserverUnavailable(entry_type)

        observer = WebVitalsObserver(pipeline.tracker, RaisingPlatform(), "test")
        assert observer.start() is False

    def test_observe_raising_anything_never_escapes(self, pipeline):
        """Test that any observe failure is absorbed."""
        class BrokenPlatform(NullPlatform):
            def observe(self, entry_type, callback):
                raise RuntimeError("no PerformanceObserver")

        observer = WebVitalsObserver(pipeline.tracker, BrokenPlatform(), "test")
        assert observer.start() is False
