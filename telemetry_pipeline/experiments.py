"""
ExperimentAssigner

Hash-based variant bucketing and conversion tracking. The variant is a pure
function of (test name, identity); the session map only remembers which tests
were enrolled in this session.
"""

import logging
from collections.abc import Iterable
from typing import Callable, Dict, Optional, Sequence

from .bucketing import select_variant
from .errors import CaptureFailure, InvariantViolation, guarded
from .event_types import EventType
from .models import ExperimentAssignment
from .storage import get_or_create_anonymous_id

logger = logging.getLogger(__name__)


class ExperimentAssigner:
    """Deterministic A/B assignment for the current identity."""

    def __init__(
        self,
        tracker,
        storage,
        environment: str,
        clock: Callable[[], int],
        anonymous_id_key: str = "anonymous_id",
    ):
        """Initialize the assigner.

        Args:
            tracker: Tracker receiving enrollment and conversion events
            storage: Durable storage holding the anonymous id
            environment: Deployment environment name
            clock: Returns milliseconds since epoch
            anonymous_id_key: Storage key of the anonymous id
        """
        self.tracker = tracker
        self.storage = storage
        self.environment = environment
        self.clock = clock
        self.anonymous_id_key = anonymous_id_key
        self._active_tests: Dict[str, ExperimentAssignment] = {}

    @guarded()
    def get_anonymous_id(self) -> Optional[str]:
        """Durable anonymous id, created on first use."""
        return get_or_create_anonymous_id(self.storage, self.anonymous_id_key, self.clock)

    @guarded()
    def current_identity(self):
        """User id if known, else the durable anonymous id."""
        user_id = self.tracker.user_id
        return user_id if user_id is not None else self.get_anonymous_id()

    @guarded()
    def enroll_in_test(self, test_name: str, variants: Sequence[str]) -> Optional[str]:
        """Assign the current identity to a variant and record the enrollment.

        Args:
            test_name: Experiment name
            variants: Non-empty list of variant names

        Returns:
            The assigned variant, or None if the inputs were invalid
        """
        if not isinstance(test_name, str) or not test_name:
            raise InvariantViolation(f"test name must be a non-empty string, got {test_name!r}")
        if isinstance(variants, str) or not isinstance(variants, Iterable):
            raise InvariantViolation(f"variants for '{test_name}' must be a list of strings, got {variants!r}")
        variants = list(variants)
        if not variants or not all(isinstance(v, str) for v in variants):
            raise InvariantViolation(f"variants for '{test_name}' must be a non-empty list of strings")

        identity = self.current_identity()
        if identity is None:
            raise CaptureFailure(f"no identity available to enroll in '{test_name}'")
        variant = select_variant(test_name, str(identity), variants)

        self._active_tests[test_name] = ExperimentAssignment(variant=variant, enrolled=True)
        self.tracker.track(EventType.AB_TEST_ENROLLMENT.value, {
            "testName": test_name,
            "variant": variant,
            "userId": identity,
        })
        return variant

    @guarded()
    def get_variant(self, test_name: str) -> Optional[str]:
        """Variant enrolled this session, or None."""
        assignment = self._active_tests.get(test_name)
        return assignment.variant if assignment and assignment.enrolled else None

    def get_assignments(self) -> Dict[str, ExperimentAssignment]:
        return dict(self._active_tests)

    @guarded(default=False)
    def track_conversion(self, test_name: str, conversion_type: str, value: Optional[float] = None) -> bool:
        """Emit a conversion if the test was enrolled this session.

        Returns:
            True if a conversion event was emitted
        """
        assignment = self._active_tests.get(test_name)
        if not assignment or not assignment.enrolled:
            return False

        event = self.tracker.track(EventType.AB_TEST_CONVERSION.value, {
            "testName": test_name,
            "variant": assignment.variant,
            "conversionType": conversion_type,
            "value": value,
        })
        return event is not None

    def clear_assignments(self) -> None:
        self._active_tests.clear()
