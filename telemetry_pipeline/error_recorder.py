"""
ErrorRecorder

Captures exceptions with contextual metadata into its own log and mirrors
each capture into the tracker as an application_error event. Recording an
error never raises.
"""

import logging
from collections.abc import Mapping
from typing import Any, Callable, Dict, List, Optional

from .errors import CaptureFailure, InvariantViolation, guarded
from .event_types import EventType
from .models import ErrorRecord
from .signals import PlatformSignals, format_stack

logger = logging.getLogger(__name__)

DEVELOPMENT = "development"


class ErrorRecorder:
    """Unbounded log of captured application errors."""

    def __init__(self, tracker, platform: PlatformSignals, environment: str, clock: Callable[[], int]):
        self.tracker = tracker
        self.platform = platform
        self.environment = environment
        self.clock = clock
        self._errors: List[ErrorRecord] = []

    @guarded()
    def track_error(self, error: Any, context: Optional[Dict[str, Any]] = None) -> Optional[ErrorRecord]:
        """Record an error and emit its mirrored event.

        Args:
            error: Exception instance (or any object describing the failure)
            context: Extra string-keyed metadata about where it happened

        Returns:
            The stored record, or None if recording failed
        """
        if context is None:
            context = {}
        if not isinstance(context, Mapping):
            raise InvariantViolation(f"error context must be a mapping, got {type(context).__name__}")
        context = dict(context)

        try:
            message = str(error)
            stack = format_stack(error)
        except Exception as exc:
            raise CaptureFailure(f"could not describe {type(error).__name__}: {exc!r}") from exc
        if not message and isinstance(error, BaseException):
            message = type(error).__name__

        ambient = self.tracker.current_context()
        record = ErrorRecord(
            message=message,
            stack=stack,
            timestamp=self.clock(),
            user_id=self.tracker.user_id,
            context={
                **context,
                "userAgent": ambient.user_agent if ambient else None,
                "url": ambient.url if ambient else None,
            },
        )
        self._errors.append(record)

        self.tracker.track(EventType.APPLICATION_ERROR.value, {
            **context,
            "error": message,
            "stack": stack,
        })

        if self.environment == DEVELOPMENT:
            logger.error(f"Tracked error: {message}")
        return record

    def track_comment_error(self, operation: str, error: Any, comment_id: Optional[int] = None) -> Optional[ErrorRecord]:
        """Record an error raised by a comment-system operation."""
        return self.track_error(error, {
            "operation": operation,
            "commentId": comment_id,
            "component": "comment_system",
        })

    def get_errors(self) -> List[ErrorRecord]:
        return list(self._errors)

    def clear_errors(self) -> None:
        self._errors = []
