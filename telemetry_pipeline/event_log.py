"""
Append-only in-memory store of the events emitted during one session.
"""

from typing import List, Optional

from .models import Event


class EventLog:
    """Events in call order for the current pipeline lifetime."""

    def __init__(self):
        self._events: List[Event] = []

    def __len__(self) -> int:
        return len(self._events)

    def append(self, event: Event) -> None:
        self._events.append(event)

    def snapshot(self, limit: Optional[int] = None) -> List[Event]:
        """Copy of the stored events.

        Args:
            limit: Optional number of most recent events to return

        Returns:
            List of events, oldest first
        """
        events = list(self._events)
        if limit is not None:
            events = events[-limit:] if limit > 0 else []
        return events

    def clear(self) -> None:
        self._events = []
