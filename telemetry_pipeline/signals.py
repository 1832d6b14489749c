"""
Platform signals.

The pipeline never talks to a host environment directly. Everything it needs
from the host (lifecycle hooks, error hooks, performance-entry streams and the
ambient context) goes through a PlatformSignals implementation, so the
aggregation and bucketing logic runs the same under a browser bridge, a plain
Python process or a test.
"""

import atexit
import logging
import platform
import sys
import traceback
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

from .models import EventContext, Viewport

logger = logging.getLogger(__name__)

LARGEST_CONTENTFUL_PAINT = "largest-contentful-paint"
FIRST_INPUT = "first-input"
LAYOUT_SHIFT = "layout-shift"
RESOURCE = "resource"

ALL_ENTRY_TYPES = (LARGEST_CONTENTFUL_PAINT, FIRST_INPUT, LAYOUT_SHIFT, RESOURCE)


@dataclass
class PerformanceEntry:
    """One performance observation delivered by the host."""
    entry_type: str
    name: str = ""
    start_time: float = 0.0
    duration: float = 0.0
    processing_start: Optional[float] = None
    value: float = 0.0
    had_recent_input: bool = False
    request_start: float = 0.0
    response_end: float = 0.0
    transfer_size: Optional[int] = None


@dataclass
class ErrorInfo:
    """An uncaught error reported by the host."""
    message: str
    filename: Optional[str] = None
    lineno: Optional[int] = None
    colno: Optional[int] = None
    error: Optional[BaseException] = None

    @property
    def stack(self) -> Optional[str]:
        return format_stack(self.error)


def format_stack(error: Any) -> Optional[str]:
    """Formatted traceback of an exception, or None if it has none."""
    if not isinstance(error, BaseException) or error.__traceback__ is None:
        return None
    return "".join(traceback.format_exception(type(error), error, error.__traceback__))


EntriesCallback = Callable[[List[PerformanceEntry]], None]


class PlatformSignals:
    """Capability interface. The base implementation supports nothing."""

    def observe(self, entry_type: str, callback: EntriesCallback) -> bool:
        """Subscribe to a performance-entry stream.

        Returns:
            False if the host cannot deliver this entry type
        """
        return False

    def on_unload(self, callback: Callable[[], None]) -> None:
        pass

    def on_error(self, callback: Callable[[ErrorInfo], None]) -> None:
        pass

    def on_unhandled_rejection(self, callback: Callable[[Any], None]) -> None:
        pass

    def on_scroll(self, callback: Callable[[float], None]) -> None:
        pass

    def context(self) -> Optional[EventContext]:
        return None


class NullPlatform(PlatformSignals):
    """Headless host: every hook is a no-op."""


class SimulatedPlatform(PlatformSignals):
    """Scriptable host for tests and event replays."""

    def __init__(
        self,
        supported_entry_types: Iterable[str] = ALL_ENTRY_TYPES,
        context: Optional[EventContext] = None,
    ):
        self.supported_entry_types = set(supported_entry_types)
        self._context = context if context is not None else EventContext(
            url="http://localhost/",
            user_agent="simulated",
            viewport=Viewport(width=1280, height=720),
        )
        self.observers: Dict[str, List[EntriesCallback]] = {}
        self.unload_listeners: List[Callable[[], None]] = []
        self.error_listeners: List[Callable[[ErrorInfo], None]] = []
        self.rejection_listeners: List[Callable[[Any], None]] = []
        self.scroll_listeners: List[Callable[[float], None]] = []

    def observe(self, entry_type: str, callback: EntriesCallback) -> bool:
        if entry_type not in self.supported_entry_types:
            return False
        self.observers.setdefault(entry_type, []).append(callback)
        return True

    def on_unload(self, callback: Callable[[], None]) -> None:
        self.unload_listeners.append(callback)

    def on_error(self, callback: Callable[[ErrorInfo], None]) -> None:
        self.error_listeners.append(callback)

    def on_unhandled_rejection(self, callback: Callable[[Any], None]) -> None:
        self.rejection_listeners.append(callback)

    def on_scroll(self, callback: Callable[[float], None]) -> None:
        self.scroll_listeners.append(callback)

    def context(self) -> Optional[EventContext]:
        return self._context

    def set_context(self, context: Optional[EventContext]) -> None:
        self._context = context

    # Host-side triggers

    def fire_unload(self) -> None:
        for listener in list(self.unload_listeners):
            listener()

    def fire_error(self, info: ErrorInfo) -> None:
        for listener in list(self.error_listeners):
            listener(info)

    def fire_rejection(self, reason: Any) -> None:
        for listener in list(self.rejection_listeners):
            listener(reason)

    def fire_scroll(self, percent: float) -> None:
        for listener in list(self.scroll_listeners):
            listener(percent)

    def deliver_entries(self, entry_type: str, entries: List[PerformanceEntry]) -> None:
        for callback in list(self.observers.get(entry_type, [])):
            callback(list(entries))


class ProcessPlatform(PlatformSignals):
    """Host mapping for a plain Python process.

    Unload is interpreter exit, uncaught errors come from ``sys.excepthook``
    and unhandled rejections from an asyncio loop's exception handler.
    Performance-entry streams are not available.
    """

    def __init__(self, loop=None, url: str = ""):
        self.loop = loop
        self.url = url
        self._error_listeners: List[Callable[[ErrorInfo], None]] = []
        self._rejection_listeners: List[Callable[[Any], None]] = []
        self._previous_excepthook = None
        self._previous_loop_handler = None

    def on_unload(self, callback: Callable[[], None]) -> None:
        atexit.register(callback)

    def on_error(self, callback: Callable[[ErrorInfo], None]) -> None:
        if self._previous_excepthook is None:
            self._previous_excepthook = sys.excepthook
            sys.excepthook = self._excepthook
        self._error_listeners.append(callback)

    def on_unhandled_rejection(self, callback: Callable[[Any], None]) -> None:
        if self.loop is None:
            logger.debug("No event loop given; unhandled rejections are not captured")
            return
        if not self._rejection_listeners:
            self._previous_loop_handler = self.loop.get_exception_handler()
            self.loop.set_exception_handler(self._loop_exception_handler)
        self._rejection_listeners.append(callback)

    def context(self) -> Optional[EventContext]:
        return EventContext(
            url=self.url,
            user_agent=f"python/{platform.python_version()} ({sys.platform})",
        )

    def _excepthook(self, exc_type, exc, tb) -> None:
        frames = traceback.extract_tb(tb) if tb is not None else []
        last = frames[-1] if frames else None
        info = ErrorInfo(
            message=str(exc),
            filename=last.filename if last else None,
            lineno=last.lineno if last else None,
            colno=getattr(last, "colno", None) if last else None,
            error=exc,
        )
        for listener in list(self._error_listeners):
            listener(info)
        self._previous_excepthook(exc_type, exc, tb)

    def _loop_exception_handler(self, loop, context: Dict[str, Any]) -> None:
        reason = context.get("exception") or context.get("message")
        for listener in list(self._rejection_listeners):
            listener(reason)
        if self._previous_loop_handler is not None:
            self._previous_loop_handler(loop, context)
        else:
            loop.default_exception_handler(context)
