"""
Error taxonomy for the telemetry pipeline.

Errors are raised inside the pipeline and absorbed at its public boundary:
observability must never crash the application it observes.
"""

import copy
import functools
import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

PRODUCTION = "production"


class TelemetryError(Exception):
    """Base class for all pipeline errors."""


class TransportFailure(TelemetryError):
    """Delivery to the collection endpoint failed."""


class ObserverUnavailable(TelemetryError):
    """A required performance-signal capability is missing on the host."""


class CaptureFailure(TelemetryError):
    """The error-recording path itself failed."""


class InvariantViolation(TelemetryError):
    """A caller broke a pipeline invariant (bad window size, bad variants, ...)."""


def report_invariant_violation(message: str, environment: str) -> None:
    """Log an invariant violation loudly in development, quietly in production."""
    if environment == PRODUCTION:
        logger.debug(f"Invariant violation ignored: {message}")
    else:
        logger.error(f"Invariant violation: {message}")


def guarded(default: Any = None) -> Callable:
    """Decorator for public pipeline operations.

    The wrapped method's instance must expose an ``environment`` attribute.
    Any exception is absorbed and a shallow copy of ``default`` is returned
    instead, so list and dict defaults are never shared between callers.
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(self, *args, **kwargs):
            try:
                return func(self, *args, **kwargs)
            except InvariantViolation as exc:
                report_invariant_violation(str(exc), getattr(self, "environment", ""))
            except Exception as exc:
                logger.warning(f"Capture failure in {func.__qualname__}: {exc!r}")
            return copy.copy(default)
        return wrapper
    return decorator
