import pytest

from app_runtime import LaundryConfig
from classes.Clock import Clock
from classes.Laundry import LaundryRoom
from classes.Scheduler import TickScheduler

T0 = 1_700_000_000.0


class FakeTime:
    """Controllable time source; raise_next makes the next read fail."""

    def __init__(self, start=T0):
        self.t = start
        self.fail = None

    def __call__(self):
        if self.fail is not None:
            err, self.fail = self.fail, None
            raise err
        return self.t

    def advance(self, seconds):
        self.t += seconds
        return self.t


@pytest.fixture
def fake_time():
    return FakeTime()


@pytest.fixture
def clock(fake_time):
    return Clock(source=fake_time)


@pytest.fixture
def config():
    return LaundryConfig.from_dict(
        {
            "durations": {"washer_minutes": 90, "dryer_minutes": 120},
            "machines": [
                {"kind": "washer", "id": 1},
                {"kind": "washer", "id": 2},
                {"kind": "dryer", "id": 1},
                {"kind": "dryer", "id": 2},
            ],
        }
    )


@pytest.fixture
def ticker():
    # never started: registrations are observable without background ticks
    return TickScheduler(interval=1)


@pytest.fixture
def laundry(config, clock, ticker):
    return LaundryRoom(config, clock=clock, ticker=ticker)
