"""
Per-kind property schemas.

Each event kind the pipeline knows about has a property model that is checked
when the event is tracked. Extra keys are allowed so producers can attach
additional context; missing or mistyped required keys are rejected.
"""

from collections.abc import Mapping
from typing import Any, Dict, Literal, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import InvariantViolation
from ..event_types import EventType


class EventProperties(BaseModel):
    """Base for property schemas."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class SessionEndProperties(EventProperties):
    duration: int = Field(ge=0, description="Session length in milliseconds")


class UncaughtErrorProperties(EventProperties):
    message: str
    filename: Optional[str] = None
    lineno: Optional[int] = None
    colno: Optional[int] = None
    stack: Optional[str] = None


class UnhandledRejectionProperties(EventProperties):
    reason: Optional[str] = None
    stack: Optional[str] = None


class PerformanceMeasurementProperties(EventProperties):
    metric_name: str = Field(alias="metricName")
    duration: float = Field(ge=0)
    category: str = "performance"


class WebVitalProperties(EventProperties):
    value: float
    threshold: Literal["good", "needs_improvement", "poor"]


class ApiPerformanceProperties(EventProperties):
    url: str
    duration: float
    size: Optional[int] = None


class ApplicationErrorProperties(EventProperties):
    error: str
    stack: Optional[str] = None


class ABTestEnrollmentProperties(EventProperties):
    test_name: str = Field(alias="testName")
    variant: str
    user_id: Union[int, str] = Field(alias="userId")


class ABTestConversionProperties(EventProperties):
    test_name: str = Field(alias="testName")
    variant: str
    conversion_type: str = Field(alias="conversionType")
    value: Optional[float] = None


class ScrollDepthProperties(EventProperties):
    depth: Literal[25, 50, 75, 100]


class TimeOnPageProperties(EventProperties):
    duration: int = Field(ge=0)
    milestone: str


class CommentProperties(EventProperties):
    comment_id: Optional[int] = Field(default=None, alias="commentId")
    photo_id: Optional[int] = Field(default=None, alias="photoId")
    series_id: Optional[int] = Field(default=None, alias="seriesId")


class CommentLikeProperties(EventProperties):
    comment_id: int = Field(alias="commentId")
    action: Literal["like", "unlike"]


class CommentErrorProperties(EventProperties):
    error: str
    operation: str
    comment_id: Optional[int] = Field(default=None, alias="commentId")


class CommentFormProperties(EventProperties):
    action: Literal["focus", "blur", "submit", "cancel"]
    content_length: int = Field(default=0, ge=0, alias="contentLength")


class CommentInteractionProperties(EventProperties):
    action: str
    comment_id: int = Field(alias="commentId")
    duration: Optional[float] = None


PROPERTY_SCHEMAS: Dict[EventType, Type[EventProperties]] = {
    EventType.SESSION_END: SessionEndProperties,
    EventType.UNCAUGHT_ERROR: UncaughtErrorProperties,
    EventType.UNHANDLED_REJECTION: UnhandledRejectionProperties,
    EventType.PERFORMANCE_MEASUREMENT: PerformanceMeasurementProperties,
    EventType.WEB_VITAL_LCP: WebVitalProperties,
    EventType.WEB_VITAL_FID: WebVitalProperties,
    EventType.WEB_VITAL_CLS: WebVitalProperties,
    EventType.API_PERFORMANCE: ApiPerformanceProperties,
    EventType.APPLICATION_ERROR: ApplicationErrorProperties,
    EventType.AB_TEST_ENROLLMENT: ABTestEnrollmentProperties,
    EventType.AB_TEST_CONVERSION: ABTestConversionProperties,
    EventType.SCROLL_DEPTH: ScrollDepthProperties,
    EventType.TIME_ON_PAGE: TimeOnPageProperties,
    EventType.COMMENT_INTERACTION: CommentInteractionProperties,
    EventType.COMMENT_VIEWED: CommentProperties,
    EventType.COMMENT_CREATED: CommentProperties,
    EventType.COMMENT_LIKE_TOGGLE: CommentLikeProperties,
    EventType.COMMENT_DELETED: CommentProperties,
    EventType.COMMENT_ERROR: CommentErrorProperties,
    EventType.COMMENT_LIST_LOADED: CommentProperties,
    EventType.COMMENT_FORM_INTERACTION: CommentFormProperties,
}


def validate_properties(name: str, properties: Any) -> Dict[str, Any]:
    """Check a property map at the pipeline boundary.

    Args:
        name: Event name
        properties: Property map supplied by the producer

    Returns:
        A shallow copy of the properties, safe to store

    Raises:
        InvariantViolation: If the map is not string-keyed or fails the
            schema registered for a known event kind
    """
    if properties is None:
        properties = {}
    if not isinstance(properties, Mapping):
        raise InvariantViolation(f"properties for '{name}' must be a mapping, got {type(properties).__name__}")

    bad_keys = [key for key in properties if not isinstance(key, str)]
    if bad_keys:
        raise InvariantViolation(f"properties for '{name}' have non-string keys: {bad_keys!r}")

    if EventType.is_valid(name):
        schema = PROPERTY_SCHEMAS.get(EventType(name))
        if schema is not None:
            try:
                schema.model_validate(dict(properties))
            except ValidationError as exc:
                raise InvariantViolation(
                    f"properties for '{name}' failed validation: {exc.error_count()} error(s)"
                ) from exc

    return dict(properties)
