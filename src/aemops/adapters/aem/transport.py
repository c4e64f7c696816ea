"""HTTP boundary: every call ends as a ``Success`` or a ``Failure`` value."""

from __future__ import annotations

from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from logging import getLogger
from typing import TYPE_CHECKING, Any

import httpx

from aemops.domain.outcome import Failure, FailureKind, Success

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping

    from aemops.adapters.http_resilience import ResilientClient
    from aemops.domain.outcome import TransportOutcome

    from .wire import FormFields

log = getLogger(__name__)


def parse_retry_after(value: str | None, *, now: datetime | None = None) -> float | None:
    """Seconds to wait from a ``Retry-After`` header (delta-seconds or HTTP date)."""

    if not value:
        return None
    text = value.strip()
    try:
        seconds = float(text)
    except ValueError:
        seconds = None
    if seconds is not None:
        return max(0.0, seconds)
    try:
        moment = parsedate_to_datetime(text)
    except (TypeError, ValueError):
        log.debug("Unparseable Retry-After header: %s", text)
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    reference = now or datetime.now(UTC)
    return max(0.0, (moment - reference).total_seconds())


def response_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def to_outcome(response: httpx.Response) -> TransportOutcome[Any]:
    body = response_body(response)
    if response.is_success:
        return Success(body, status_code=response.status_code)
    return Failure(
        kind=FailureKind.HTTP_STATUS,
        message=f"HTTP {response.status_code} {response.reason_phrase}".strip(),
        status_code=response.status_code,
        body=body,
        retry_after=parse_retry_after(response.headers.get("Retry-After")),
        url=str(response.request.url),
    )


class AemTransport:
    """Thin wrapper over :class:`ResilientClient` that never raises ``httpx`` errors."""

    def __init__(self, client: ResilientClient) -> None:
        self._client = client

    async def get_json(
        self,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
    ) -> TransportOutcome[Any]:
        return await self._call(url, lambda: self._client.get(url, params=params))

    async def post_form(self, url: str, fields: FormFields) -> TransportOutcome[Any]:
        return await self._call(url, lambda: self._client.post(url, data=fields))

    async def post_json(self, url: str, payload: Mapping[str, Any]) -> TransportOutcome[Any]:
        return await self._call(url, lambda: self._client.post(url, json=payload))

    async def _call(
        self,
        url: str,
        send: Callable[[], Awaitable[httpx.Response]],
    ) -> TransportOutcome[Any]:
        try:
            response = await send()
        except httpx.TimeoutException as exc:
            return Failure(kind=FailureKind.TIMEOUT, message=str(exc) or "timed out", url=url)
        except httpx.TransportError as exc:
            return Failure(
                kind=FailureKind.CONNECT,
                message=str(exc) or type(exc).__name__,
                url=url,
            )
        except httpx.RequestError as exc:
            # Undecodable bodies, redirect loops and the like.
            return Failure(
                kind=FailureKind.PROTOCOL,
                message=str(exc) or type(exc).__name__,
                url=url,
            )
        return to_outcome(response)
