"""
Sink

Delivers one event at a time to the collection endpoint. Each event is its
own POST on its own background thread; there is no batching, no retry and
no queueing across failures. Outside production the sink only logs.

Once the sink is closed (the host is unloading) background threads may not
outlive the process, so remaining events are posted on the calling thread
with a bounded timeout instead.
"""

import json
import logging
import threading
from typing import List, Optional

import requests

from .errors import PRODUCTION, TransportFailure, guarded
from .models import Event

logger = logging.getLogger(__name__)

# Seconds allowed for a delivery made on the calling thread when no request
# timeout is configured
FINAL_DELIVERY_TIMEOUT = 2.0


class Sink:
    """Fire-and-forget event delivery."""

    def __init__(
        self,
        endpoint: str,
        environment: str,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        """Initialize the sink.

        Args:
            endpoint: Collection endpoint URL
            environment: "production" enables network delivery
            session: HTTP session used for delivery
            timeout: Per-request timeout in seconds; None waits indefinitely
        """
        self.endpoint = endpoint
        self.environment = environment
        self.session = session or requests.Session()
        self.timeout = timeout
        self.closed = False
        self._pending: List[threading.Thread] = []
        self._lock = threading.Lock()

    @property
    def is_production(self) -> bool:
        return self.environment == PRODUCTION

    @guarded(default=False)
    def send(self, event: Event) -> bool:
        """Start delivery of one event.

        Returns:
            True if delivery was started (or logged), False if the event
            could not even be serialized
        """
        body = json.dumps(event.to_dict(), ensure_ascii=False, default=str)

        if not self.is_production:
            logger.info(f"Analytics event: {body}")
            return True

        if self.closed:
            self._deliver(event.name, body, self._final_timeout())
            return True

        thread = threading.Thread(
            target=self._deliver,
            args=(event.name, body, self.timeout),
            daemon=True,
            name=f"TelemetrySink-{event.name}",
        )
        with self._lock:
            self._pending.append(thread)
        try:
            thread.start()
        except RuntimeError:
            # interpreter is shutting down and refuses new threads
            self._forget(thread)
            self._deliver(event.name, body, self._final_timeout())
        return True

    def _final_timeout(self) -> float:
        return self.timeout if self.timeout is not None else FINAL_DELIVERY_TIMEOUT

    def _post(self, body: str, timeout: Optional[float]) -> None:
        """POST one serialized event.

        Raises:
            TransportFailure: On network errors or a non-2xx response
        """
        try:
            response = self.session.post(
                self.endpoint,
                data=body.encode("utf-8"),
                headers={"Content-Type": "application/json"},
                timeout=timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise TransportFailure(str(exc)) from exc

    def _deliver(self, name: str, body: str, timeout: Optional[float]) -> None:
        """Deliver one event. Failures are logged and dropped."""
        try:
            self._post(body, timeout)
        except TransportFailure as exc:
            logger.warning(f"Failed to send analytics event '{name}': {exc}")
        except Exception as exc:
            logger.warning(f"Failed to send analytics event '{name}': {exc!r}")
        finally:
            self._forget(threading.current_thread())

    def _forget(self, thread: threading.Thread) -> None:
        with self._lock:
            if thread in self._pending:
                self._pending.remove(thread)

    def pending(self) -> int:
        """Number of deliveries still outstanding."""
        with self._lock:
            self._pending = [t for t in self._pending if t.is_alive()]
            return len(self._pending)

    @guarded(default=0)
    def drain(self, timeout: Optional[float] = None) -> int:
        """Wait for outstanding deliveries without cancelling any.

        Args:
            timeout: Seconds to wait for each outstanding delivery

        Returns:
            Number of deliveries still outstanding afterwards
        """
        with self._lock:
            threads = list(self._pending)
        for thread in threads:
            thread.join(timeout)
        return self.pending()

    def close(self, timeout: Optional[float] = None) -> int:
        """Drain outstanding deliveries and post any later event inline.

        Returns:
            Number of deliveries still outstanding after the drain
        """
        self.closed = True
        return self.drain(timeout)
