from __future__ import annotations

import pytest
from pydantic import ValidationError

from aemops.domain.envelope import OperationEnvelope, error_envelope, success_envelope
from aemops.domain.errors import ErrorCode, create_error
from aemops.domain.results import BatchSummary
from tests.support.fakes import FakeClock


def test_success_envelope_wire_shape() -> None:
    clock = FakeClock()

    wire = success_envelope(
        BatchSummary(total=2, successful=1, failed=1), "bulkActivatePages", clock=clock
    ).to_wire()

    assert wire == {
        "success": True,
        "operation": "bulkActivatePages",
        "timestamp": clock.now().isoformat(),
        "data": {"total": 2, "successful": 1, "failed": 1},
        "error": None,
    }


def test_error_envelope_carries_classified_error() -> None:
    error = create_error(
        ErrorCode.RATE_LIMITED, "slow down", {"status": 429}, retry_after=3.0
    )

    wire = error_envelope(error, "activatePage", clock=FakeClock()).to_wire()

    assert wire["success"] is False
    assert wire["data"] is None
    assert wire["error"] == {
        "code": "RATE_LIMITED",
        "message": "slow down",
        "details": {"status": 429},
        "recoverable": True,
        "retry_after": 3.0,
    }


def test_envelope_rejects_inconsistent_shapes() -> None:
    with pytest.raises(ValidationError):
        OperationEnvelope(success=False, operation="op", timestamp="t", data={"x": 1})
    with pytest.raises(ValidationError):
        OperationEnvelope(success=False, operation="op", timestamp="t")
