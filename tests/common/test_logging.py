from __future__ import annotations

import logging

import pytest

from aemops.common.logging import OperationLog


def test_operation_log_emits_structured_lifecycle(caplog: pytest.LogCaptureFixture) -> None:
    events = OperationLog(logging.getLogger("aemops.test"))

    with caplog.at_level(logging.DEBUG, logger="aemops.test"):
        events.start("activatePage", path="/content/a")
        events.end("activatePage", duration_ms=12.5)
        events.error("activatePage", code="TIMEOUT", message="slow")
        events.performance("activatePage", duration_ms=12.5, path="/content/a")

    assert [record.levelname for record in caplog.records] == ["INFO", "INFO", "ERROR", "DEBUG"]
    assert caplog.records[0].getMessage() == "activatePage started"
    assert caplog.records[0].operation == "activatePage"  # type: ignore[attr-defined]
    assert caplog.records[0].fields == {"path": "/content/a"}  # type: ignore[attr-defined]
    assert caplog.records[2].fields == {"code": "TIMEOUT"}  # type: ignore[attr-defined]
    assert caplog.records[1].getMessage() == "activatePage finished in 12.5 ms"
