"""
WebVitalsObserver

Subscribes to the host's performance-entry streams and turns each qualifying
observation into one classified event.

Threshold table (value <= good is "good", value <= poor is
"needs_improvement", anything above is "poor"):

    signal  good      poor
    lcp     1000 ms   2500 ms
    fid     100 ms    300 ms
    cls     0.1       0.25
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Set

from .errors import ObserverUnavailable, guarded
from .event_types import EventType
from .signals import (
    FIRST_INPUT,
    LARGEST_CONTENTFUL_PAINT,
    LAYOUT_SHIFT,
    RESOURCE,
    PerformanceEntry,
    PlatformSignals,
)

logger = logging.getLogger(__name__)

GOOD = "good"
NEEDS_IMPROVEMENT = "needs_improvement"
POOR = "poor"


@dataclass(frozen=True)
class Thresholds:
    """Upper bounds (inclusive) of the good and needs_improvement bands."""
    good: float
    poor: float


THRESHOLDS: Dict[str, Thresholds] = {
    "lcp": Thresholds(good=1000.0, poor=2500.0),
    "fid": Thresholds(good=100.0, poor=300.0),
    "cls": Thresholds(good=0.1, poor=0.25),
}


def classify(value: float, thresholds: Thresholds) -> str:
    """Map a raw signal value to its rating label."""
    if value <= thresholds.good:
        return GOOD
    if value <= thresholds.poor:
        return NEEDS_IMPROVEMENT
    return POOR


class WebVitalsObserver:
    """Classifies paint, input and layout-shift signals."""

    def __init__(self, tracker, platform: PlatformSignals, environment: str):
        self.tracker = tracker
        self.platform = platform
        self.environment = environment
        self.subscribed: Set[str] = set()
        self._started = False
        self._cls_total = 0.0

    @guarded(default=False)
    def start(self, include_resources: bool = True) -> bool:
        """Subscribe to the signal streams. Safe to call more than once.

        Returns:
            True if at least one stream is available on this host
        """
        if self._started:
            return bool(self.subscribed)
        self._started = True

        handlers = [
            (LARGEST_CONTENTFUL_PAINT, self._on_largest_contentful_paint),
            (FIRST_INPUT, self._on_first_input),
            (LAYOUT_SHIFT, self._on_layout_shift),
        ]
        if include_resources:
            handlers.append((RESOURCE, self._on_resource))

        for entry_type, handler in handlers:
            if self._subscribe(entry_type, handler):
                self.subscribed.add(entry_type)

        if not self.subscribed:
            logger.debug("Performance observation unavailable; web vitals disabled")
        return bool(self.subscribed)

    @property
    def cumulative_layout_shift(self) -> float:
        return self._cls_total

    def _subscribe(self, entry_type: str, handler) -> bool:
        try:
            return bool(self.platform.observe(entry_type, handler))
        except ObserverUnavailable:
            return False

    def _emit(self, event_type: EventType, signal: str, value: float) -> None:
        self.tracker.track(event_type.value, {
            "value": value,
            "threshold": classify(value, THRESHOLDS[signal]),
        })

    @guarded()
    def _on_largest_contentful_paint(self, entries: List[PerformanceEntry]) -> None:
        if not entries:
            return
        # Later candidates supersede earlier ones within a batch
        latest = entries[-1]
        self._emit(EventType.WEB_VITAL_LCP, "lcp", latest.start_time)

    @guarded()
    def _on_first_input(self, entries: List[PerformanceEntry]) -> None:
        for entry in entries:
            if entry.processing_start is None:
                continue
            self._emit(EventType.WEB_VITAL_FID, "fid", entry.processing_start - entry.start_time)

    @guarded()
    def _on_layout_shift(self, entries: List[PerformanceEntry]) -> None:
        qualifying = [entry for entry in entries if not entry.had_recent_input]
        if not qualifying:
            return
        self._cls_total += sum(entry.value for entry in qualifying)
        self._emit(EventType.WEB_VITAL_CLS, "cls", self._cls_total)

    @guarded()
    def _on_resource(self, entries: List[PerformanceEntry]) -> None:
        for entry in entries:
            if "api/" not in entry.name:
                continue
            self.tracker.track(EventType.API_PERFORMANCE.value, {
                "url": entry.name,
                "duration": entry.response_end - entry.request_start,
                "size": entry.transfer_size,
            })
