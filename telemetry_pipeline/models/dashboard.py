"""
Dashboard summary structures.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class CommentMetrics:
    """Comment activity derived from the event log."""

    total_comments: int = 0
    comments_today: int = 0
    avg_comments_per_photo: float = 0.0
    top_commenters: List[Dict[str, int]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "total_comments": self.total_comments,
            "comments_today": self.comments_today,
            "avg_comments_per_photo": self.avg_comments_per_photo,
            "top_commenters": self.top_commenters
        }


@dataclass
class PerformanceMetrics:
    """Load time, error rate and latest web-vital values."""

    average_load_time: float = 0.0
    error_rate: float = 0.0
    web_vitals: Dict[str, float] = field(default_factory=lambda: {"lcp": 0.0, "fid": 0.0, "cls": 0.0})

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "average_load_time": self.average_load_time,
            "error_rate": self.error_rate,
            "web_vitals": dict(self.web_vitals)
        }


@dataclass
class EngagementMetrics:
    """Time on page, scroll depth and interaction rate."""

    average_time_on_page: float = 0.0
    scroll_depth: int = 0
    interaction_rate: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "average_time_on_page": self.average_time_on_page,
            "scroll_depth": self.scroll_depth,
            "interaction_rate": self.interaction_rate
        }
