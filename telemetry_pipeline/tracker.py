"""
Tracker

The pipeline's single entry point. Stamps events with session, user and
environment context, appends them to the event log and hands them to the
sink. Also installs the auto-instrumentation hooks (unload, uncaught errors,
unhandled rejections) on the platform it is given.
"""

import logging
import time
from typing import Any, Callable, Dict, List, Optional

from .errors import InvariantViolation, guarded
from .event_log import EventLog
from .event_types import EventType
from .models import Event, EventContext, validate_properties
from .signals import ErrorInfo, PlatformSignals, format_stack
from .sink import Sink
from .storage import random_suffix

logger = logging.getLogger(__name__)

# Seconds to wait for in-flight deliveries when the host unloads
UNLOAD_FLUSH_TIMEOUT = 2.0


def now_ms() -> int:
    """Wall-clock time in milliseconds since epoch."""
    return int(time.time() * 1000)


class Tracker:
    """Stamps, records and forwards events for one session."""

    def __init__(
        self,
        sink: Sink,
        platform: PlatformSignals,
        environment: str,
        clock: Optional[Callable[[], int]] = None,
    ):
        """Initialize the tracker and start the session.

        Args:
            sink: Delivery target for every event
            platform: Host signals used for context and auto-instrumentation
            environment: Deployment environment name
            clock: Returns milliseconds since epoch
        """
        self.sink = sink
        self.platform = platform
        self.environment = environment
        self.clock = clock or now_ms
        self.session_start = self.clock()
        self.session_id = f"session-{self.session_start}-{random_suffix()}"
        self._user_id: Optional[int] = None
        self._events = EventLog()
        self._session_ended = False
        self._setup_auto_tracking()

    @property
    def user_id(self) -> Optional[int]:
        return self._user_id

    @guarded()
    def set_user_id(self, user_id: Optional[int]) -> None:
        """Set the user id stamped on subsequent events (not retroactive)."""
        if user_id is not None and (isinstance(user_id, bool) or not isinstance(user_id, int)):
            raise InvariantViolation(f"user id must be an integer, got {user_id!r}")
        self._user_id = user_id

    @guarded()
    def track(self, name: str, properties: Optional[Dict[str, Any]] = None) -> Optional[Event]:
        """Record one event and start its delivery.

        Args:
            name: Event name
            properties: String-keyed property map

        Returns:
            The recorded event, or None if it was rejected
        """
        if not isinstance(name, str) or not name:
            raise InvariantViolation(f"event name must be a non-empty string, got {name!r}")

        event = Event(
            name=name,
            properties=validate_properties(name, properties),
            user_id=self._user_id,
            session_id=self.session_id,
            timestamp=self.clock(),
            context=self.current_context(),
        )
        self._events.append(event)
        self.sink.send(event)
        return event

    @guarded(default=[])
    def get_events(self, limit: Optional[int] = None) -> List[Event]:
        """Events recorded so far, oldest first; ``limit`` keeps the most recent."""
        if limit is not None and (isinstance(limit, bool) or not isinstance(limit, int)):
            raise InvariantViolation(f"event limit must be an integer, got {limit!r}")
        return self._events.snapshot(limit)

    def clear_events(self) -> None:
        self._events.clear()

    def current_context(self) -> Optional[EventContext]:
        """Ambient context from the platform, or None if unavailable."""
        try:
            return self.platform.context()
        except Exception as exc:
            logger.warning(f"Could not read event context: {exc!r}")
            return None

    def _setup_auto_tracking(self) -> None:
        """Install lifecycle and error hooks once."""
        hooks = (
            (self.platform.on_unload, self._handle_unload),
            (self.platform.on_error, self._handle_error),
            (self.platform.on_unhandled_rejection, self._handle_rejection),
        )
        for install, handler in hooks:
            try:
                install(handler)
            except Exception as exc:
                logger.warning(f"Auto-tracking hook unavailable: {exc!r}")

    @guarded()
    def _handle_unload(self) -> None:
        if self._session_ended:
            return
        self._session_ended = True
        duration = max(0, self.clock() - self.session_start)
        # earlier deliveries are flushed; session_end is posted on this thread
        self.sink.close(UNLOAD_FLUSH_TIMEOUT)
        self.track(EventType.SESSION_END.value, {"duration": duration})

    @guarded()
    def _handle_error(self, info: ErrorInfo) -> None:
        self.track(EventType.UNCAUGHT_ERROR.value, {
            "message": info.message,
            "filename": info.filename,
            "lineno": info.lineno,
            "colno": info.colno,
            "stack": info.stack,
        })

    @guarded()
    def _handle_rejection(self, reason: Any) -> None:
        self.track(EventType.UNHANDLED_REJECTION.value, {
            "reason": str(reason) if reason is not None else None,
            "stack": format_stack(reason),
        })
