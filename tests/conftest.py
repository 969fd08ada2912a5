"""Shared test fixtures for sitepulse."""

import logging

import pytest

from sitepulse_core.config.models import SitepulseConfig
from sitepulse_core.reload.models import NotificationKind
from sitepulse_core.timing import StepTimer


class FakeClock:
    """Manually advanced stand-in for time.perf_counter."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingNotifier:
    def __init__(self) -> None:
        self.kinds: list[NotificationKind] = []

    def notify(self, kind: NotificationKind) -> None:
        self.kinds.append(kind)


class ScriptedProbe:
    """Probe that replays tokens (or raises exceptions) in order.

    Once the script runs out, the last item is repeated.
    """

    def __init__(self, *script) -> None:
        self._script = list(script)
        self.calls = 0

    async def __call__(self) -> str:
        item = self._script[min(self.calls, len(self._script) - 1)]
        self.calls += 1
        if isinstance(item, BaseException):
            raise item
        return item


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def build_logger():
    return logging.getLogger("sitepulse.build.test")


@pytest.fixture
def step_timer(fake_clock, build_logger):
    return StepTimer(logger=build_logger, clock=fake_clock)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def sample_config():
    return SitepulseConfig()
