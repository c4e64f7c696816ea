"""Error classification and in-place retry for one logical operation."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING, Any

from .envelope import OperationEnvelope, success_envelope
from .errors import ClassifiedError, ErrorCode, create_error
from .outcome import Failure, FailureKind, TransportError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from aemops.common.clock import Clock

log = getLogger(__name__)

DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY_SECONDS = 1.0

type Sleep = Callable[[float], Awaitable[None]]
type UnitOfWork[T] = Callable[[], Awaitable[T]]


def classify_failure(failure: Failure, operation: str) -> ClassifiedError:
    details: dict[str, Any] = {"operation": operation}
    if failure.status_code is not None:
        details["status"] = failure.status_code
    if failure.url is not None:
        details["url"] = failure.url
    if failure.body not in (None, "", b""):
        details["response"] = failure.body

    match failure:
        case Failure(kind=FailureKind.CONNECT):
            return create_error(
                ErrorCode.CONNECTION_FAILED,
                f"Cannot connect to AEM during {operation}: {failure.message}",
                details,
                recoverable=True,
            )
        case Failure(kind=FailureKind.TIMEOUT):
            return create_error(
                ErrorCode.TIMEOUT,
                f"AEM request timed out during {operation}",
                details,
                recoverable=True,
            )
        case Failure(status_code=404):
            return create_error(
                ErrorCode.RESOURCE_NOT_FOUND,
                f"Resource not found during {operation}",
                details,
                recoverable=True,
            )
        case Failure(status_code=401):
            return create_error(
                ErrorCode.AUTHENTICATION_FAILED,
                f"Authentication failed during {operation}",
                details,
            )
        case Failure(status_code=403):
            return create_error(
                ErrorCode.INSUFFICIENT_PERMISSIONS,
                f"Insufficient permissions for {operation}",
                details,
            )
        case Failure(status_code=429):
            return create_error(
                ErrorCode.RATE_LIMITED,
                f"AEM rate limited {operation}",
                details,
                recoverable=True,
                retry_after=failure.retry_after,
            )
        case _:
            status = failure.status_code if failure.status_code is not None else "n/a"
            return create_error(
                ErrorCode.SYSTEM_ERROR,
                f"AEM request failed during {operation} (status {status}): {failure.message}",
                details,
                recoverable=True,
            )


def classify_error(error: BaseException, operation: str) -> ClassifiedError:
    """Map any failure onto the closed taxonomy. Deterministic for a given input."""

    match error:
        case ClassifiedError():
            return error
        case TransportError(failure=failure):
            return classify_failure(failure, operation)
        case _:
            return create_error(
                ErrorCode.SYSTEM_ERROR,
                f"Unexpected error during {operation}: {error}",
                {"operation": operation, "type": type(error).__name__},
                recoverable=False,
            )


def backoff_delay(attempt: int, base_delay: float, error: ClassifiedError) -> float:
    delay = attempt * base_delay
    if error.retry_after is not None:
        return max(delay, error.retry_after)
    return delay


async def execute[T](
    unit_of_work: UnitOfWork[T],
    operation: str,
    *,
    clock: Clock,
    max_retries: int = DEFAULT_MAX_RETRIES,
    base_delay: float = DEFAULT_BASE_DELAY_SECONDS,
    sleep: Sleep = asyncio.sleep,
) -> OperationEnvelope:
    """Run ``unit_of_work`` and wrap its result in the success envelope.

    Failures are classified. Recoverable ones are retried in place after
    ``attempt * base_delay`` seconds until ``max_retries`` attempts have been
    made; the last classified error is then raised unchanged. Each retry
    re-invokes the same remote call, so the unit of work must tolerate
    at-least-once execution.
    """

    attempts = max(1, max_retries)
    attempt = 1
    while True:
        try:
            result = await unit_of_work()
        except Exception as exc:  # noqa: BLE001
            classified = classify_error(exc, operation)
            if not classified.recoverable or attempt >= attempts:
                if classified is exc:
                    raise
                raise classified from exc
            delay = backoff_delay(attempt, base_delay, classified)
            log.warning(
                "%s attempt %s/%s failed with %s, retrying in %.2fs",
                operation,
                attempt,
                attempts,
                classified.code,
                delay,
            )
            await sleep(delay)
            attempt += 1
            continue
        return success_envelope(result, operation, clock=clock)
