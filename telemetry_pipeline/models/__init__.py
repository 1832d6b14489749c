"""
Data models for the telemetry pipeline.
"""

from .dashboard import CommentMetrics, EngagementMetrics, PerformanceMetrics
from .events import Event, EventContext, Viewport
from .properties import PROPERTY_SCHEMAS, EventProperties, validate_properties
from .records import ErrorRecord, ExperimentAssignment, MetricSummary

__all__ = [
    'Event',
    'EventContext',
    'Viewport',
    'EventProperties',
    'PROPERTY_SCHEMAS',
    'validate_properties',
    'ErrorRecord',
    'ExperimentAssignment',
    'MetricSummary',
    'CommentMetrics',
    'PerformanceMetrics',
    'EngagementMetrics',
]
