from __future__ import annotations

from datetime import datetime

import pendulum

from concours.core import DeadlineClock, is_expired, time_left
from concours.schemas import ScoreConfig

DEADLINE = pendulum.datetime(2026, 4, 1, 23, 59, tz="UTC")


def test_unset_deadline_never_expires():
    config = ScoreConfig(deadline=None)

    assert is_expired(config, pendulum.datetime(2099, 1, 1, tz="UTC")) is False
    assert time_left(config, pendulum.now()) is None


def test_expires_strictly_after_deadline():
    config = ScoreConfig(deadline=DEADLINE)

    assert is_expired(config, DEADLINE.subtract(seconds=1)) is False
    assert is_expired(config, DEADLINE) is False
    assert is_expired(config, DEADLINE.add(seconds=1)) is True


def test_naive_values_are_read_as_utc():
    config = ScoreConfig(deadline="2026-04-01T23:59:00")

    assert config.deadline.tzinfo is not None
    assert is_expired(config, datetime(2026, 4, 2, 0, 0)) is True
    assert is_expired(config, pendulum.datetime(2026, 4, 2, 0, 30, tz="Africa/Tunis")) is False


def test_time_left_breaks_down_remaining_duration():
    config = ScoreConfig(deadline=DEADLINE)
    now = DEADLINE.subtract(days=2, hours=3, minutes=4, seconds=5)

    countdown = time_left(config, now)

    assert (countdown.days, countdown.hours, countdown.minutes, countdown.seconds) == (2, 3, 4, 5)
    assert countdown.expired is False
    assert time_left(config, DEADLINE.add(minutes=1)).expired is True


def test_clock_uses_injected_now_provider():
    config = ScoreConfig(deadline=DEADLINE)
    clock = DeadlineClock(now_provider=lambda: DEADLINE.add(days=1))

    assert clock.is_expired(config) is True
    assert clock.time_left(config).expired is True
