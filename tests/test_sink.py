"""
Tests for event delivery.
"""

import json
import logging
import os
import subprocess
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

from config_manager import TelemetryConfig
from telemetry_pipeline.factory import create_telemetry_pipeline
from telemetry_pipeline.models import Event
from telemetry_pipeline.sink import FINAL_DELIVERY_TIMEOUT, Sink


ENDPOINT = "http://collector.test/api/analytics"
PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Child process: one production event, then a normal interpreter exit
EXIT_SCRIPT = '''
import json
import sys
import time

from config_manager import TelemetryConfig
from telemetry_pipeline.factory import create_telemetry_pipeline
from telemetry_pipeline.signals import ProcessPlatform
from telemetry_pipeline.storage import MemoryStorage

OUT = sys.argv[1]


class Response:
    def raise_for_status(self):
        pass


class SlowSession:
    def post(self, url, data=None, headers=None, timeout=None):
        time.sleep(0.2)
        with open(OUT, "a", encoding="utf-8") as f:
            f.write(json.loads(data)["name"] + "\\n")
        return Response()


pipeline = create_telemetry_pipeline(
    config=TelemetryConfig(environment="production", storage_file=None),
    platform=ProcessPlatform(),
    storage=MemoryStorage(),
    session=SlowSession(),
)
pipeline.track("click")
'''


@pytest.fixture
def http_session():
    return MagicMock()


@pytest.fixture
def production(platform, storage, clock, http_session):
    config = TelemetryConfig(environment="production", endpoint=ENDPOINT, storage_file=None)
    return create_telemetry_pipeline(
        config=config, platform=platform, storage=storage, session=http_session, clock=clock
    )


class TestProductionDelivery:
    """Test one POST per event."""

    def test_one_request_per_event(self, production, http_session):
        """Test one POST per event."""
        for i in range(5):
            production.track("click", {"i": i})
        assert production.shutdown(timeout=5) == 0

        assert http_session.post.call_count == 5

    def test_request_body_is_the_event(self, production, http_session):
        """Test the request body and headers."""
        event = production.track("click", {"target": "like"})
        production.shutdown(timeout=5)

        args, kwargs = http_session.post.call_args
        assert args[0] == ENDPOINT
        assert kwargs["headers"] == {"Content-Type": "application/json"}
        assert json.loads(kwargs["data"].decode("utf-8")) == event.to_dict()

    def test_no_batching(self, production, http_session):
        """Test that events are never combined."""
        production.track("a")
        production.track("b")
        production.shutdown(timeout=5)

        bodies = [json.loads(call.kwargs["data"]) for call in http_session.post.call_args_list]
        assert sorted(body["name"] for body in bodies) == ["a", "b"]
        assert all(isinstance(body, dict) for body in bodies)

    def test_network_failure_is_dropped(self, production, http_session, caplog):
        """Test that a network failure drops the event with a warning."""
        http_session.post.side_effect = requests.ConnectionError("collector down")

        with caplog.at_level(logging.WARNING):
            event = production.track("click")
            production.shutdown(timeout=5)

        assert event is not None
        assert len(production.get_events()) == 1
        assert http_session.post.call_count == 1
        assert any("Failed to send analytics event" in r.getMessage() for r in caplog.records)

    def test_non_2xx_is_dropped(self, production, http_session, caplog):
        """Test that an error status drops the event with a warning."""
        response = MagicMock()
        response.raise_for_status.side_effect = requests.HTTPError("503 Server Error")
        http_session.post.return_value = response

        with caplog.at_level(logging.WARNING):
            production.track("click")
            production.shutdown(timeout=5)

        assert any("503" in r.getMessage() for r in caplog.records)

    def test_failure_does_not_affect_next_event(self, production, http_session):
        """Test that a failure does not block later events."""
        http_session.post.side_effect = [requests.Timeout("slow"), MagicMock()]

        production.track("first")
        production.shutdown(timeout=5)
        production.track("second")
        production.shutdown(timeout=5)

        assert http_session.post.call_count == 2

    def test_unserializable_properties_are_stringified(self, production, http_session):
        """Test serialization of arbitrary property values."""
        marker = object()
        production.track("custom", {"obj": marker})
        production.shutdown(timeout=5)

        body = json.loads(http_session.post.call_args.kwargs["data"])
        assert body["properties"]["obj"] == str(marker)


class TestNonProductionDelivery:
    """Test that non-production mode only logs."""

    def test_no_network_calls(self, pipeline, caplog):
        """Test that non-production delivery only logs."""
        session = MagicMock()
        pipeline.tracker.sink.session = session

        with caplog.at_level(logging.INFO):
            pipeline.track("click", {"x": 1})

        session.post.assert_not_called()
        assert pipeline.tracker.sink.pending() == 0
        assert any("Analytics event" in r.getMessage() for r in caplog.records)

    def test_send_returns_true(self):
        """Test the send result."""
        sink = Sink(ENDPOINT, "development", session=MagicMock())
        event = Event(name="x", session_id="session-1-abc", timestamp=1)
        assert sink.send(event) is True


class TestDeliveryThreads:
    """Test bookkeeping of background deliveries."""

    def test_finished_deliveries_are_released(self, production):
        """Test that finished delivery threads are released."""
        sink = production.tracker.sink
        for i in range(50):
            production.track("click", {"i": i})

        for thread in list(sink._pending):
            thread.join(5)

        assert sink._pending == []

    def test_failed_deliveries_are_released(self, production, http_session):
        """Test that failed delivery threads are released."""
        http_session.post.side_effect = requests.ConnectionError("collector down")
        sink = production.tracker.sink
        for _ in range(10):
            production.track("click")

        for thread in list(sink._pending):
            thread.join(5)

        assert sink._pending == []


class TestUnloadDelivery:
    """Test that the final events of a session are not lost."""

    def test_session_end_posted_before_unload_returns(self, production, platform, http_session):
        """Test that unload delivers session_end synchronously."""
        production.track("click")
        platform.fire_unload()

        names = [json.loads(call.kwargs["data"])["name"] for call in http_session.post.call_args_list]
        assert names == ["click", "session_end"]
        assert production.tracker.sink.pending() == 0

    def test_closed_sink_posts_inline_with_bounded_timeout(self, http_session):
        """Test inline delivery after close."""
        sink = Sink(ENDPOINT, "production", session=http_session)
        sink.close()

        sink.send(Event(name="late", session_id="session-1-abc", timestamp=1))

        assert http_session.post.call_count == 1
        assert http_session.post.call_args.kwargs["timeout"] == FINAL_DELIVERY_TIMEOUT
        assert sink._pending == []

    def test_session_end_delivered_at_interpreter_exit(self, tmp_path):
        """Test that session_end is delivered when the process exits."""
        script = tmp_path / "emit.py"
        delivered = tmp_path / "delivered.txt"
        script.write_text(EXIT_SCRIPT, encoding="utf-8")

        result = subprocess.run(
            [sys.executable, str(script), str(delivered)],
            cwd=str(PROJECT_ROOT),
            env={**os.environ, "PYTHONPATH": str(PROJECT_ROOT)},
            capture_output=True,
            text=True,
            timeout=60,
        )

        assert result.returncode == 0, result.stderr
        assert delivered.read_text(encoding="utf-8").split() == ["click", "session_end"]
