"""Canonical response envelope returned by every public operation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

if TYPE_CHECKING:
    from aemops.common.clock import Clock

    from .errors import ClassifiedError


class ErrorPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)
    recoverable: bool = False
    retry_after: float | None = None


class OperationEnvelope(BaseModel):
    """``{success, operation, timestamp, data | error}``.

    ``data`` and ``error`` are mutually exclusive and ``success`` always agrees
    with which one is present.
    """

    model_config = ConfigDict(frozen=True)

    success: bool
    operation: str
    timestamp: str
    data: Any = None
    error: ErrorPayload | None = None

    @model_validator(mode="after")
    def _check_exclusive(self) -> OperationEnvelope:
        if self.success and self.error is not None:
            raise ValueError("successful envelope cannot carry an error")
        if not self.success and (self.error is None or self.data is not None):
            raise ValueError("failed envelope must carry an error and no data")
        return self

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=False)


def success_envelope(data: Any, operation: str, *, clock: Clock) -> OperationEnvelope:
    return OperationEnvelope(
        success=True,
        operation=operation,
        timestamp=clock.now().isoformat(),
        data=data,
    )


def error_envelope(error: ClassifiedError, operation: str, *, clock: Clock) -> OperationEnvelope:
    return OperationEnvelope(
        success=False,
        operation=operation,
        timestamp=clock.now().isoformat(),
        error=ErrorPayload(
            code=error.code.value,
            message=error.message,
            details=dict(error.details),
            recoverable=error.recoverable,
            retry_after=error.retry_after,
        ),
    )
