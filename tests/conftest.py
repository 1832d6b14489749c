"""
Shared fixtures for the telemetry pipeline tests.
"""

import pytest

from config_manager import TelemetryConfig
from telemetry_pipeline.factory import create_telemetry_pipeline
from telemetry_pipeline.signals import SimulatedPlatform
from telemetry_pipeline.storage import MemoryStorage


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def platform():
    return SimulatedPlatform()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def config():
    return TelemetryConfig(environment="test", storage_file=None)


@pytest.fixture
def pipeline(config, platform, storage, clock):
    return create_telemetry_pipeline(config=config, platform=platform, storage=storage, clock=clock)
