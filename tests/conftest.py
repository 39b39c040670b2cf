# ABOUTME: Shared pytest fixtures for cache and fetcher tests
# ABOUTME: Provides a controllable clock, an inline executor and sample builders

from concurrent.futures import Executor, Future

import pytest

from weather_widget.config import WidgetSettings
from weather_widget.weather.models import ForecastSample

BASE_TIME = 1_700_000_000.0


class FakeClock:
    """Manually advanced epoch clock"""

    def __init__(self, now: float = BASE_TIME):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class InlineExecutor(Executor):
    """Runs submitted work immediately on the calling thread"""

    def __init__(self):
        self.submitted = 0

    def submit(self, fn, *args, **kwargs):
        self.submitted += 1
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future


class DeferredExecutor(Executor):
    """Queues submitted work until run_all() is called"""

    def __init__(self):
        self.pending = []

    def submit(self, fn, *args, **kwargs):
        future = Future()
        self.pending.append((future, fn, args, kwargs))
        return future

    def run_all(self) -> None:
        pending, self.pending = self.pending, []
        for future, fn, args, kwargs in pending:
            future.set_result(fn(*args, **kwargs))


def make_sample(hour: int = 0, **overrides) -> ForecastSample:
    """Sample at BASE_TIME's hour plus `hour` hours."""
    values = {
        "timestamp": int(BASE_TIME) // 3600 * 3600 + hour * 3600,
        "precipitation": 0.0,
        "temperature": 12.0,
        "wind_speed": 10.0,
        "wind_direction": 180.0,
        "weather_code": 0,
        "surface_pressure": 1013.0,
    }
    values.update(overrides)
    return ForecastSample(**values)


def make_samples(count: int) -> list[ForecastSample]:
    return [make_sample(hour=i) for i in range(count)]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def inline_executor():
    return InlineExecutor()


@pytest.fixture
def deferred_executor():
    return DeferredExecutor()


@pytest.fixture
def settings():
    return WidgetSettings()
