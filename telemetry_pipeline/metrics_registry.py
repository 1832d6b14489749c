"""
MetricsRegistry

Bounded rolling-window aggregation of numeric samples keyed by metric name.
Summaries are recomputed from the window on every read.
"""

import functools
import logging
import math
import time
from collections import deque
from typing import Callable, Deque, Dict, List, Optional

from .errors import InvariantViolation, guarded, report_invariant_violation
from .event_types import EventType
from .models import MetricSummary

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SIZE = 100


def _noop_stop() -> None:
    return None


class MetricsRegistry:
    """Rolling windows of the most recent samples per metric name."""

    def __init__(
        self,
        tracker,
        environment: str,
        window_size: int = DEFAULT_WINDOW_SIZE,
        timer: Callable[[], float] = time.perf_counter,
    ):
        """Initialize the registry.

        Args:
            tracker: Tracker receiving performance_measurement events
            environment: Deployment environment name
            window_size: Maximum samples kept per metric
            timer: Monotonic clock in seconds used by measurements
        """
        self.tracker = tracker
        self.environment = environment
        self.timer = timer
        if isinstance(window_size, bool) or not isinstance(window_size, int) or window_size <= 0:
            report_invariant_violation(
                f"window size must be a positive integer, got {window_size!r}; using {DEFAULT_WINDOW_SIZE}",
                environment,
            )
            window_size = DEFAULT_WINDOW_SIZE
        self.window_size = window_size
        self._windows: Dict[str, Deque[float]] = {}

    @guarded(default=_noop_stop)
    def start_measurement(self, name: str) -> Callable[[], Optional[float]]:
        """Start timing ``name``.

        Returns:
            A stop function. Calling it records the elapsed milliseconds,
            emits a performance_measurement event and returns the duration.
        """
        if not isinstance(name, str) or not name:
            raise InvariantViolation(f"metric name must be a non-empty string, got {name!r}")
        return functools.partial(self._stop_measurement, name, self.timer())

    @guarded()
    def _stop_measurement(self, name: str, start: float) -> float:
        duration = max(0.0, (self.timer() - start) * 1000.0)
        self.record_metric(name, duration)
        self.tracker.track(EventType.PERFORMANCE_MEASUREMENT.value, {
            "metricName": name,
            "duration": duration,
            "category": "performance",
        })
        return duration

    @guarded()
    def record_metric(self, name: str, value: float) -> None:
        """Append a sample, evicting the oldest when the window is full."""
        if not isinstance(name, str) or not name:
            raise InvariantViolation(f"metric name must be a non-empty string, got {name!r}")
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise InvariantViolation(f"metric '{name}' value must be a finite number, got {value!r}")

        window = self._windows.get(name)
        if window is None:
            window = deque(maxlen=self.window_size)
            self._windows[name] = window
        window.append(float(value))

    @guarded(default={})
    def get_metrics(self) -> Dict[str, MetricSummary]:
        """Summaries for every metric with at least one sample."""
        result = {}
        for name, window in self._windows.items():
            if not window:
                continue
            values = list(window)
            result[name] = MetricSummary(
                avg=sum(values) / len(values),
                min=min(values),
                max=max(values),
                count=len(values),
            )
        return result

    @guarded(default=[])
    def get_window(self, name: str) -> List[float]:
        """Current samples for ``name``, oldest first."""
        return list(self._windows.get(name, ()))

    def clear_metrics(self) -> None:
        self._windows.clear()
