"""
Factory for creating the telemetry pipeline.

All components are wired here and handed their collaborators explicitly, so
several isolated pipelines can live in one process.
"""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import requests

from config_manager import TelemetryConfig, get_telemetry_config

from .dashboard import DashboardAggregator
from .error_recorder import ErrorRecorder
from .experiments import ExperimentAssigner
from .helpers import CommentAnalytics, EngagementTracker
from .metrics_registry import MetricsRegistry
from .models import ErrorRecord, Event, MetricSummary
from .signals import NullPlatform, PlatformSignals
from .sink import Sink
from .storage import JsonFileStorage, MemoryStorage
from .tracker import Tracker, now_ms
from .web_vitals import WebVitalsObserver

logger = logging.getLogger(__name__)


class TelemetryPipeline:
    """Context object owning every pipeline component for one session."""

    def __init__(
        self,
        config: TelemetryConfig,
        tracker: Tracker,
        metrics: MetricsRegistry,
        web_vitals: WebVitalsObserver,
        errors: ErrorRecorder,
        experiments: ExperimentAssigner,
        dashboard: DashboardAggregator,
        comments: CommentAnalytics,
        engagement: EngagementTracker,
    ):
        self.config = config
        self.tracker = tracker
        self.metrics = metrics
        self.web_vitals = web_vitals
        self.errors = errors
        self.experiments = experiments
        self.dashboard = dashboard
        self.comments = comments
        self.engagement = engagement

    @property
    def session_id(self) -> str:
        return self.tracker.session_id

    def start(self) -> bool:
        """Subscribe to host signals. Returns whether web vitals are available."""
        self.engagement.start()
        return self.web_vitals.start()

    def shutdown(self, timeout: Optional[float] = None) -> int:
        """Wait for outstanding deliveries; returns how many are still pending."""
        return self.tracker.sink.drain(timeout)

    # Producer contract

    def track(self, name: str, properties: Optional[Dict[str, Any]] = None) -> Optional[Event]:
        return self.tracker.track(name, properties)

    def set_user_id(self, user_id: Optional[int]) -> None:
        self.tracker.set_user_id(user_id)

    def track_error(self, error: Any, context: Optional[Dict[str, Any]] = None) -> Optional[ErrorRecord]:
        return self.errors.track_error(error, context)

    def start_measurement(self, name: str) -> Callable[[], Optional[float]]:
        return self.metrics.start_measurement(name)

    def record_metric(self, name: str, value: float) -> None:
        self.metrics.record_metric(name, value)

    def enroll_in_test(self, test_name: str, variants: List[str]) -> Optional[str]:
        return self.experiments.enroll_in_test(test_name, variants)

    def get_variant(self, test_name: str) -> Optional[str]:
        return self.experiments.get_variant(test_name)

    def track_conversion(self, test_name: str, conversion_type: str, value: Optional[float] = None) -> bool:
        return self.experiments.track_conversion(test_name, conversion_type, value)

    # Consumer contract

    def get_events(self) -> List[Event]:
        return self.tracker.get_events()

    def get_metrics(self) -> Dict[str, MetricSummary]:
        return self.metrics.get_metrics()

    def get_errors(self) -> List[ErrorRecord]:
        return self.errors.get_errors()

    # Test-only resets

    def clear_events(self) -> None:
        self.tracker.clear_events()

    def clear_metrics(self) -> None:
        self.metrics.clear_metrics()

    def clear_errors(self) -> None:
        self.errors.clear_errors()


def create_telemetry_pipeline(
    config: Optional[TelemetryConfig] = None,
    platform: Optional[PlatformSignals] = None,
    storage=None,
    session: Optional[requests.Session] = None,
    clock: Optional[Callable[[], int]] = None,
) -> TelemetryPipeline:
    """Create a fully wired pipeline.

    Args:
        config: Telemetry settings; defaults to the global configuration
        platform: Host signals; defaults to a no-op platform
        storage: Durable storage for the anonymous id; defaults to the
            configured JSON file, or memory if none is configured
        session: HTTP session used by the sink
        clock: Returns milliseconds since epoch

    Returns:
        TelemetryPipeline with its session already started
    """
    config = config or get_telemetry_config()
    platform = platform or NullPlatform()
    clock = clock or now_ms
    if storage is None:
        storage = JsonFileStorage(Path(config.storage_file)) if config.storage_file else MemoryStorage()

    sink = Sink(
        endpoint=config.endpoint,
        environment=config.environment,
        session=session,
        timeout=config.request_timeout,
    )
    tracker = Tracker(sink=sink, platform=platform, environment=config.environment, clock=clock)
    metrics = MetricsRegistry(tracker, config.environment, window_size=config.window_size)
    errors = ErrorRecorder(tracker, platform, config.environment, clock)
    experiments = ExperimentAssigner(
        tracker,
        storage,
        config.environment,
        clock,
        anonymous_id_key=config.anonymous_id_key,
    )
    dashboard = DashboardAggregator(
        events=tracker.get_events,
        metrics=metrics.get_metrics,
        errors=errors.get_errors,
        clock=clock,
    )

    logger.debug(f"Telemetry pipeline created: session={tracker.session_id}, env={config.environment}")

    return TelemetryPipeline(
        config=config,
        tracker=tracker,
        metrics=metrics,
        web_vitals=WebVitalsObserver(tracker, platform, config.environment),
        errors=errors,
        experiments=experiments,
        dashboard=dashboard,
        comments=CommentAnalytics(tracker),
        engagement=EngagementTracker(tracker, platform, config.environment, clock),
    )
