"""Closed error taxonomy shared by every operation."""

from __future__ import annotations

from enum import StrEnum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping


class ErrorCode(StrEnum):
    CONNECTION_FAILED = "CONNECTION_FAILED"
    TIMEOUT = "TIMEOUT"
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_PATH = "INVALID_PATH"
    INVALID_COMPONENT_TYPE = "INVALID_COMPONENT_TYPE"
    INVALID_LOCALE = "INVALID_LOCALE"
    INVALID_PARAMETERS = "INVALID_PARAMETERS"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    COMPONENT_NOT_FOUND = "COMPONENT_NOT_FOUND"
    PAGE_NOT_FOUND = "PAGE_NOT_FOUND"
    UPDATE_FAILED = "UPDATE_FAILED"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    REPLICATION_FAILED = "REPLICATION_FAILED"
    QUERY_FAILED = "QUERY_FAILED"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"
    SYSTEM_ERROR = "SYSTEM_ERROR"
    RATE_LIMITED = "RATE_LIMITED"


# Failures of the request itself: retrying cannot change the outcome.
PREFLIGHT_CODES: frozenset[ErrorCode] = frozenset(
    {
        ErrorCode.INVALID_PATH,
        ErrorCode.INVALID_COMPONENT_TYPE,
        ErrorCode.INVALID_LOCALE,
        ErrorCode.INVALID_PARAMETERS,
        ErrorCode.VALIDATION_FAILED,
    }
)

PERMISSION_CODES: frozenset[ErrorCode] = frozenset(
    {
        ErrorCode.AUTHENTICATION_FAILED,
        ErrorCode.UNAUTHORIZED,
        ErrorCode.INSUFFICIENT_PERMISSIONS,
    }
)


_EXCEPTION_INTERNALS = frozenset(
    {"__traceback__", "__context__", "__cause__", "__suppress_context__", "__notes__"}
)


class ClassifiedError(Exception):
    """An operation failure mapped onto :class:`ErrorCode`.

    Instances are immutable once constructed; ``details`` is exposed as a
    read-only mapping.
    """

    __slots__ = ("_code", "_details", "_message", "_recoverable", "_retry_after")

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        *,
        details: Mapping[str, Any] | None = None,
        recoverable: bool = False,
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message)
        object.__setattr__(self, "_code", ErrorCode(code))
        object.__setattr__(self, "_message", message)
        object.__setattr__(self, "_details", MappingProxyType(dict(details or {})))
        object.__setattr__(self, "_recoverable", recoverable)
        object.__setattr__(self, "_retry_after", retry_after)

    def __setattr__(self, name: str, value: object) -> None:
        if name in _EXCEPTION_INTERNALS:
            super().__setattr__(name, value)
            return
        raise AttributeError(f"{type(self).__name__} is immutable")

    @property
    def code(self) -> ErrorCode:
        return self._code

    @property
    def message(self) -> str:
        return self._message

    @property
    def details(self) -> Mapping[str, Any]:
        return self._details

    @property
    def recoverable(self) -> bool:
        return self._recoverable

    @property
    def retry_after(self) -> float | None:
        return self._retry_after

    def __repr__(self) -> str:
        return f"ClassifiedError(code={self._code.value!r}, message={self._message!r})"


def create_error(
    code: ErrorCode,
    message: str,
    details: Mapping[str, Any] | None = None,
    *,
    recoverable: bool | None = None,
    retry_after: float | None = None,
) -> ClassifiedError:
    """Build a :class:`ClassifiedError`; preflight and permission codes are never recoverable."""

    if recoverable is None:
        recoverable = code not in PREFLIGHT_CODES and code not in PERMISSION_CODES
    return ClassifiedError(
        code,
        message,
        details=details,
        recoverable=recoverable,
        retry_after=retry_after,
    )


def invalid_parameters(message: str, **details: Any) -> ClassifiedError:
    return create_error(ErrorCode.INVALID_PARAMETERS, message, details)
