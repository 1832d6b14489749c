"""
Event Types for the Telemetry Pipeline

Defines the event kinds the pipeline emits itself. Producers may track any
other name; those events carry a free-form string-keyed property map.
"""

from enum import Enum


class EventType(Enum):
    """Event kinds with a known property schema."""

    # Session lifecycle and auto-instrumentation
    SESSION_END = "session_end"
    UNCAUGHT_ERROR = "uncaught_error"
    UNHANDLED_REJECTION = "unhandled_rejection"

    # Performance
    PERFORMANCE_MEASUREMENT = "performance_measurement"
    WEB_VITAL_LCP = "web_vital_lcp"
    WEB_VITAL_FID = "web_vital_fid"
    WEB_VITAL_CLS = "web_vital_cls"
    API_PERFORMANCE = "api_performance"

    # Errors
    APPLICATION_ERROR = "application_error"

    # Experiments
    AB_TEST_ENROLLMENT = "ab_test_enrollment"
    AB_TEST_CONVERSION = "ab_test_conversion"

    # Engagement
    SCROLL_DEPTH = "scroll_depth"
    TIME_ON_PAGE = "time_on_page"
    COMMENT_INTERACTION = "comment_interaction"

    # Comment analytics
    COMMENT_VIEWED = "comment_viewed"
    COMMENT_CREATED = "comment_created"
    COMMENT_LIKE_TOGGLE = "comment_like_toggle"
    COMMENT_DELETED = "comment_deleted"
    COMMENT_ERROR = "comment_error"
    COMMENT_LIST_LOADED = "comment_list_loaded"
    COMMENT_FORM_INTERACTION = "comment_form_interaction"

    @classmethod
    def is_valid(cls, event_type: str) -> bool:
        """Check if an event type string is a known kind."""
        try:
            cls(event_type)
            return True
        except ValueError:
            return False

    @classmethod
    def get_allowed_types(cls) -> set[str]:
        """Get all known event type strings."""
        return {e.value for e in cls}
