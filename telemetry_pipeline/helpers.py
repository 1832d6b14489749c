"""
Domain helper namespaces.

Thin producers that turn application actions into tracked events. They all
funnel into the same Tracker and add no state beyond what they need to
de-duplicate milestones.
"""

import logging
from typing import Callable, Optional

from .errors import guarded
from .event_types import EventType
from .signals import PlatformSignals

logger = logging.getLogger(__name__)

SCROLL_MILESTONES = (100, 75, 50, 25)


def scroll_percent(scroll_y: float, scroll_height: float, viewport_height: float) -> float:
    """Percentage of the scrollable distance covered."""
    scrollable = scroll_height - viewport_height
    if scrollable <= 0:
        return 100.0
    return (scroll_y / scrollable) * 100


def scroll_milestone(percent: float) -> Optional[int]:
    """Highest milestone reached by ``percent``, or None below 25%."""
    for milestone in SCROLL_MILESTONES:
        if percent >= milestone:
            return milestone
    return None


def time_milestone(duration_ms: float) -> str:
    """Bucket a time-on-page duration."""
    minutes = duration_ms / (1000 * 60)
    if minutes < 1:
        return "0-1min"
    if minutes < 5:
        return "1-5min"
    if minutes < 15:
        return "5-15min"
    if minutes < 30:
        return "15-30min"
    return "30min+"


class CommentAnalytics:
    """Comment-system events."""

    def __init__(self, tracker):
        self.tracker = tracker

    def track_comment_view(self, comment_id: int, photo_id: Optional[int] = None, series_id: Optional[int] = None):
        return self.tracker.track(EventType.COMMENT_VIEWED.value, {
            "commentId": comment_id,
            "photoId": photo_id,
            "seriesId": series_id,
            "viewType": "photo" if photo_id else "series",
        })

    def track_comment_create(
        self,
        comment_id: int,
        photo_id: Optional[int] = None,
        series_id: Optional[int] = None,
        is_reply: bool = False,
    ):
        return self.tracker.track(EventType.COMMENT_CREATED.value, {
            "commentId": comment_id,
            "photoId": photo_id,
            "seriesId": series_id,
            "isReply": is_reply,
            "contentType": "photo" if photo_id else "series",
        })

    def track_comment_like(self, comment_id: int, is_liked: bool):
        return self.tracker.track(EventType.COMMENT_LIKE_TOGGLE.value, {
            "commentId": comment_id,
            "action": "like" if is_liked else "unlike",
        })

    def track_comment_delete(self, comment_id: int):
        return self.tracker.track(EventType.COMMENT_DELETED.value, {"commentId": comment_id})

    def track_comment_error(self, error: str, operation: str, comment_id: Optional[int] = None):
        return self.tracker.track(EventType.COMMENT_ERROR.value, {
            "error": error,
            "operation": operation,
            "commentId": comment_id,
        })

    def track_comment_list_load(
        self,
        photo_id: Optional[int] = None,
        series_id: Optional[int] = None,
        count: int = 0,
        load_time: float = 0,
    ):
        return self.tracker.track(EventType.COMMENT_LIST_LOADED.value, {
            "photoId": photo_id,
            "seriesId": series_id,
            "commentCount": count,
            "loadTimeMs": load_time,
        })

    def track_comment_form_interaction(self, action: str, content_length: int = 0):
        return self.tracker.track(EventType.COMMENT_FORM_INTERACTION.value, {
            "action": action,
            "contentLength": content_length,
        })


class EngagementTracker:
    """Scroll depth and time-on-page reporting."""

    def __init__(self, tracker, platform: PlatformSignals, environment: str, clock: Callable[[], int]):
        self.tracker = tracker
        self.platform = platform
        self.environment = environment
        self.clock = clock
        self.page_start = clock()
        self.scroll_depth = 0
        self._last_milestone = 0
        self._started = False

    @guarded()
    def start(self) -> None:
        """Listen for scroll updates from the host."""
        if self._started:
            return
        self._started = True
        self.platform.on_scroll(self.update_scroll_depth)

    @guarded()
    def update_scroll_depth(self, percent: float) -> Optional[int]:
        """Record a scroll position; emits when a new milestone is crossed.

        Returns:
            The milestone emitted, if any
        """
        percent = round(percent)
        if percent <= self.scroll_depth:
            return None
        self.scroll_depth = percent

        milestone = scroll_milestone(percent)
        if milestone is None or milestone <= self._last_milestone:
            return None
        self._last_milestone = milestone
        self.tracker.track(EventType.SCROLL_DEPTH.value, {"depth": milestone})
        return milestone

    @guarded()
    def report_time_on_page(self) -> Optional[int]:
        """Emit the time spent since the page started. Hosts call this periodically."""
        duration = max(0, self.clock() - self.page_start)
        self.tracker.track(EventType.TIME_ON_PAGE.value, {
            "duration": duration,
            "milestone": time_milestone(duration),
        })
        return duration

    def track_comment_interaction(self, action: str, comment_id: int, duration: Optional[float] = None):
        return self.tracker.track(EventType.COMMENT_INTERACTION.value, {
            "action": action,
            "commentId": comment_id,
            "duration": duration,
            "category": "engagement",
        })
