"""Clock abstraction so time-dependent code stays deterministic in tests."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(UTC)


def epoch_millis(clock: Clock) -> int:
    return int(clock.now().timestamp() * 1000)
