"\"\"\"Deadline clock governing submissions and self-service edits.\"\"\""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable

import pendulum

from ..schemas import ScoreConfig


@dataclass(slots=True)
class Countdown:
    """Remaining time until the configured deadline."""

    days: int
    hours: int
    minutes: int
    seconds: int
    expired: bool


def is_expired(config: ScoreConfig, now: datetime) -> bool:
    """Return True once ``now`` is past the configured deadline.

    An unset deadline never expires.
    """
    if config.deadline is None:
        return False
    return _as_instant(now) > _as_instant(config.deadline)


def time_left(config: ScoreConfig, now: datetime) -> Countdown | None:
    if config.deadline is None:
        return None
    remaining = int((_as_instant(config.deadline) - _as_instant(now)).total_seconds())
    if remaining < 0:
        return Countdown(days=0, hours=0, minutes=0, seconds=0, expired=True)
    days, rest = divmod(remaining, 86_400)
    hours, rest = divmod(rest, 3_600)
    minutes, seconds = divmod(rest, 60)
    return Countdown(days=days, hours=hours, minutes=minutes, seconds=seconds, expired=False)


def _as_instant(value: datetime) -> pendulum.DateTime:
    if isinstance(value, pendulum.DateTime):
        return value
    if value.tzinfo is None:
        return pendulum.instance(value, tz="UTC")
    return pendulum.instance(value)


class DeadlineClock:
    """Binds the deadline rules to a clock source."""

    def __init__(self, *, now_provider: Callable[[], Any] | None = None) -> None:
        self._now_provider = now_provider or pendulum.now

    def now(self) -> pendulum.DateTime:
        return _as_instant(self._now_provider())

    def is_expired(self, config: ScoreConfig) -> bool:
        return is_expired(config, self.now())

    def time_left(self, config: ScoreConfig) -> Countdown | None:
        return time_left(config, self.now())
