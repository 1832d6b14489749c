"""
Telemetry Pipeline

Client-embedded event tracking, rolling metrics, web-vital classification,
error capture and deterministic A/B assignment.
"""

from .bucketing import simple_hash
from .dashboard import DashboardAggregator
from .error_recorder import ErrorRecorder
from .event_log import EventLog
from .event_types import EventType
from .experiments import ExperimentAssigner
from .factory import TelemetryPipeline, create_telemetry_pipeline
from .metrics_registry import MetricsRegistry
from .models import ErrorRecord, Event, EventContext, MetricSummary
from .signals import NullPlatform, PerformanceEntry, ProcessPlatform, SimulatedPlatform
from .sink import Sink
from .tracker import Tracker
from .web_vitals import WebVitalsObserver, classify

__all__ = [
    'DashboardAggregator',
    'ErrorRecorder',
    'ErrorRecord',
    'Event',
    'EventContext',
    'EventLog',
    'EventType',
    'ExperimentAssigner',
    'MetricSummary',
    'MetricsRegistry',
    'NullPlatform',
    'PerformanceEntry',
    'ProcessPlatform',
    'SimulatedPlatform',
    'Sink',
    'TelemetryPipeline',
    'Tracker',
    'WebVitalsObserver',
    'classify',
    'create_telemetry_pipeline',
    'simple_hash',
]
