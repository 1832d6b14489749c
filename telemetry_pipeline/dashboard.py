"""
DashboardAggregator

Read-only summaries over the event log, metrics registry and error log.
Holds no state of its own; every figure is recomputed on demand and an empty
source yields zeroed structures.
"""

import logging
from collections import Counter
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from .event_types import EventType
from .models import (
    CommentMetrics,
    EngagementMetrics,
    ErrorRecord,
    Event,
    MetricSummary,
    PerformanceMetrics,
)

logger = logging.getLogger(__name__)

COMMENT_PREFIX = "comment_"
LOAD_TIME_METRIC = "comment_list_load"
TOP_COMMENTERS_LIMIT = 5


class DashboardAggregator:
    """Derived statistics for the analytics dashboard."""

    def __init__(
        self,
        events: Callable[[], List[Event]],
        metrics: Callable[[], Dict[str, MetricSummary]] = dict,
        errors: Callable[[], List[ErrorRecord]] = list,
        clock: Optional[Callable[[], int]] = None,
    ):
        """Initialize the aggregator.

        Args:
            events: Returns a snapshot of the event log
            metrics: Returns the metrics registry summaries
            errors: Returns the recorded errors
            clock: Returns milliseconds since epoch, used for "today"
        """
        self._events = events
        self._metrics = metrics
        self._errors = errors
        self._clock = clock

    def _safe(self, compute: Callable[[], Any], empty: Callable[[], Any]) -> Any:
        try:
            return compute()
        except Exception as exc:
            logger.warning(f"Dashboard aggregation failed: {exc!r}")
            return empty()

    def _midnight_ms(self) -> int:
        now = datetime.fromtimestamp(self._clock() / 1000) if self._clock else datetime.now()
        midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
        return int(midnight.timestamp() * 1000)

    def get_metrics(self) -> Dict[str, MetricSummary]:
        return self._safe(self._metrics, dict)

    def get_errors(self) -> List[ErrorRecord]:
        return self._safe(self._errors, list)

    def count_events(self, prefix: str = "") -> int:
        """Number of events whose name starts with ``prefix``."""
        return self._safe(
            lambda: sum(1 for e in self._events() if e.name.startswith(prefix)),
            int,
        )

    def count_since_midnight(self, prefix: str = "") -> int:
        """Number of matching events since local midnight."""
        def compute():
            midnight = self._midnight_ms()
            return sum(
                1 for e in self._events()
                if e.name.startswith(prefix) and e.timestamp >= midnight
            )
        return self._safe(compute, int)

    def get_comment_metrics(self) -> CommentMetrics:
        """Comment totals, today's activity and top commenters."""
        def compute():
            created = [e for e in self._events() if e.name == EventType.COMMENT_CREATED.value]

            photo_ids = {
                e.properties.get("photoId") for e in created
                if e.properties.get("photoId") is not None
            }
            on_photos = sum(1 for e in created if e.properties.get("photoId") is not None)
            avg_per_photo = on_photos / len(photo_ids) if photo_ids else 0.0

            commenters = Counter(e.user_id for e in created if e.user_id is not None)
            top = [
                {"user_id": user_id, "count": count}
                for user_id, count in commenters.most_common(TOP_COMMENTERS_LIMIT)
            ]

            return CommentMetrics(
                total_comments=len(created),
                comments_today=self.count_since_midnight(COMMENT_PREFIX),
                avg_comments_per_photo=avg_per_photo,
                top_commenters=top,
            )
        return self._safe(compute, CommentMetrics)

    def get_performance_metrics(self) -> PerformanceMetrics:
        """Average comment-list load time, error rate and latest web vitals."""
        def compute():
            events = self._events()
            load = self.get_metrics().get(LOAD_TIME_METRIC)
            errors = self.get_errors()

            web_vitals = {"lcp": 0.0, "fid": 0.0, "cls": 0.0}
            names = {
                EventType.WEB_VITAL_LCP.value: "lcp",
                EventType.WEB_VITAL_FID.value: "fid",
                EventType.WEB_VITAL_CLS.value: "cls",
            }
            for event in events:
                key = names.get(event.name)
                if key is not None:
                    web_vitals[key] = float(event.properties.get("value", 0.0))

            return PerformanceMetrics(
                average_load_time=load.avg if load else 0.0,
                error_rate=(len(errors) / len(events)) * 100 if events else 0.0,
                web_vitals=web_vitals,
            )
        return self._safe(compute, PerformanceMetrics)

    def get_user_engagement_metrics(self) -> EngagementMetrics:
        """Time on page, deepest scroll milestone and interaction rate."""
        def compute():
            events = self._events()
            durations = [
                e.properties.get("duration", 0) for e in events
                if e.name == EventType.TIME_ON_PAGE.value
            ]
            depths = [
                e.properties.get("depth", 0) for e in events
                if e.name == EventType.SCROLL_DEPTH.value
            ]
            interactions = sum(1 for e in events if e.name == EventType.COMMENT_INTERACTION.value)

            return EngagementMetrics(
                average_time_on_page=sum(durations) / len(durations) if durations else 0.0,
                scroll_depth=max(depths) if depths else 0,
                interaction_rate=(interactions / max(len(events), 1)) * 100,
            )
        return self._safe(compute, EngagementMetrics)

    def get_summary(self) -> Dict[str, Any]:
        """Every dashboard figure as a JSON-ready dictionary."""
        return {
            "total_events": self.count_events(),
            "events_today": self.count_since_midnight(),
            "comments": self.get_comment_metrics().to_dict(),
            "performance": self.get_performance_metrics().to_dict(),
            "engagement": self.get_user_engagement_metrics().to_dict(),
            "metrics": {name: summary.to_dict() for name, summary in self.get_metrics().items()},
            "error_count": len(self.get_errors()),
        }
