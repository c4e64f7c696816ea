"""Closed result shape produced by the HTTP boundary.

Adapters never let transport exceptions escape; every call yields either a
:class:`Success` or a :class:`Failure`, and the error classifier matches on
that shape instead of probing arbitrary exception objects.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class FailureKind(StrEnum):
    HTTP_STATUS = "http_status"
    CONNECT = "connect"
    TIMEOUT = "timeout"
    PROTOCOL = "protocol"


@dataclass(frozen=True, slots=True)
class Success[T]:
    value: T
    status_code: int = 200


@dataclass(frozen=True, slots=True)
class Failure:
    kind: FailureKind
    message: str
    status_code: int | None = None
    body: object = None
    retry_after: float | None = None
    url: str | None = None


type TransportOutcome[T] = Success[T] | Failure


class TransportError(Exception):
    """Raised by :func:`unwrap` so a failure can travel up as an exception."""

    def __init__(self, failure: Failure) -> None:
        super().__init__(failure.message)
        self.failure = failure


def unwrap[T](outcome: TransportOutcome[T]) -> T:
    match outcome:
        case Success(value=value):
            return value
        case Failure() as failure:
            raise TransportError(failure)
