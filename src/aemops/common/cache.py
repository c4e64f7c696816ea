"""Small time-bounded cache.

Entries expire ``ttl`` after they were written, measured with the injected
clock. The cache is not synchronised: concurrent writers race and the last
write wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING

from .clock import Clock, SystemClock

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(slots=True, frozen=True)
class _Entry[V]:
    value: V
    expires_at: datetime


class TtlCache[K, V]:
    def __init__(self, ttl: timedelta, *, clock: Clock | None = None) -> None:
        if ttl < timedelta(0):
            raise ValueError("ttl must not be negative")
        self._ttl = ttl
        self._clock = clock or SystemClock()
        self._entries: dict[K, _Entry[V]] = {}

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def get(self, key: K) -> V | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock.now() >= entry.expires_at:
            self._entries.pop(key, None)
            return None
        return entry.value

    def set(self, key: K, value: V) -> None:
        self._entries[key] = _Entry(value=value, expires_at=self._clock.now() + self._ttl)

    def invalidate(self, key: K) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return self.get(key) is not None  # type: ignore[arg-type]
