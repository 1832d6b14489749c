"""
Collector Service

Stores events posted to the collection endpoint, one JSON file per session,
and derives per-session statistics from them.
"""

import json
import logging
import re
from pathlib import Path
from threading import Lock
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from telemetry_pipeline.dashboard import DashboardAggregator
from telemetry_pipeline.event_types import EventType
from telemetry_pipeline.models import ErrorRecord, Event

logger = logging.getLogger(__name__)

SESSION_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,128}$")


class CollectorService:
    """Receives and stores events from pipeline sinks."""

    def __init__(self, data_dir: Path):
        """Initialize the collector.

        Args:
            data_dir: Directory where session files are stored
        """
        self.data_dir = data_dir
        self.sessions_dir = data_dir / "sessions"
        self.sessions_dir.mkdir(parents=True, exist_ok=True)
        self._lock = Lock()

    def _session_file(self, session_id: str) -> Path:
        """Get session data file path."""
        return self.sessions_dir / f"{session_id}.json"

    def _load_session_data(self, session_id: str) -> Dict[str, Any]:
        """Load session data, tolerating a missing or corrupt file."""
        try:
            data = json.loads(self._session_file(session_id).read_text(encoding="utf-8"))
        except (FileNotFoundError, json.JSONDecodeError):
            data = {}

        if "events" not in data:
            data["events"] = []
        return data

    def _save_session_data(self, session_id: str, data: Dict[str, Any]) -> None:
        """Save session data to file."""
        self._session_file(session_id).write_text(
            json.dumps(data, indent=2, ensure_ascii=False, default=str), encoding="utf-8"
        )

    @staticmethod
    def is_valid_session_id(session_id: str) -> bool:
        return isinstance(session_id, str) and bool(SESSION_ID_PATTERN.match(session_id))

    def ingest(self, payload: Dict[str, Any]) -> Optional[Event]:
        """Validate and store one posted event.

        Args:
            payload: Decoded JSON body

        Returns:
            The stored event, or None if the payload was rejected
        """
        try:
            event = Event.from_dict(payload)
        except ValidationError as exc:
            logger.info(f"Rejected event payload: {exc.error_count()} validation error(s)")
            return None

        if not self.is_valid_session_id(event.session_id):
            logger.info(f"Rejected event with invalid session id {event.session_id!r}")
            return None

        with self._lock:
            data = self._load_session_data(event.session_id)
            data["events"].append(event.to_dict())
            self._save_session_data(event.session_id, data)

        return event

    def list_sessions(self) -> List[str]:
        """Ids of every session with stored events."""
        return sorted(path.stem for path in self.sessions_dir.glob("*.json"))

    def get_session_events(self, session_id: str, limit: Optional[int] = None) -> List[Event]:
        """Get stored events for a session.

        Args:
            session_id: Session identifier
            limit: Optional number of most recent events to return

        Returns:
            List of Event objects, oldest first
        """
        if not self.is_valid_session_id(session_id):
            return []

        events = []
        for raw in self._load_session_data(session_id).get("events", []):
            try:
                events.append(Event.from_dict(raw))
            except ValidationError:
                logger.warning(f"Skipping corrupt stored event in session {session_id}")

        if limit is not None:
            events = events[-limit:] if limit > 0 else []
        return events

    def get_event_stats(self, session_id: str) -> Dict[str, int]:
        """Count of stored events per event name."""
        stats: Dict[str, int] = {}
        for event in self.get_session_events(session_id):
            stats[event.name] = stats.get(event.name, 0) + 1
        return stats

    def _session_errors(self, session_id: str) -> List[ErrorRecord]:
        """Rebuild error records from mirrored application_error events."""
        records = []
        for event in self.get_session_events(session_id):
            if event.name != EventType.APPLICATION_ERROR.value:
                continue
            records.append(ErrorRecord(
                message=str(event.properties.get("error", "")),
                stack=event.properties.get("stack"),
                timestamp=event.timestamp,
                user_id=event.user_id,
                context={k: v for k, v in event.properties.items() if k not in ("error", "stack")},
            ))
        return records

    def get_dashboard(self, session_id: str) -> Dict[str, Any]:
        """Dashboard summaries computed over a session's stored events."""
        aggregator = DashboardAggregator(
            events=lambda: self.get_session_events(session_id),
            errors=lambda: self._session_errors(session_id),
        )
        return aggregator.get_summary()
