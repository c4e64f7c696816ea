from __future__ import annotations

import asyncio

import pytest

from aemops.common.clock import epoch_millis
from aemops.domain.errors import ClassifiedError, ErrorCode
from aemops.domain.outcome import TransportError
from aemops.domain.version_service import VersionService
from tests.support.fakes import FakeAemGateway, FakeClock, ok, server_error

PAGE = "/content/site/en/home"
HISTORY = {
    "jcr:versionLabels": {},
    "1.0": {
        "jcr:created": "2025-01-01T10:00:00.000Z",
        "jcr:isCheckedOut": True,
        "jcr:frozenNode": {},
    },
    "1.1": {
        "jcr:created": "2025-01-02T10:00:00.000Z",
        "jcr:isCheckedOut": False,
        "jcr:frozenNode": {"jcr:versionLabel": "release"},
    },
}


def _service(gateway: FakeAemGateway) -> VersionService:
    return VersionService(
        gateway=gateway,
        content_roots=("/content",),
        actor="svc-user",
        clock=FakeClock(),
    )


def test_history_parses_tree() -> None:
    gateway = FakeAemGateway(histories={PAGE: ok(HISTORY)})

    history = asyncio.run(_service(gateway).history(PAGE))

    assert [record.name for record in history.versions] == ["1.1", "1.0"]
    assert history.base_version == "1.1"


def test_compare_reads_both_snapshots() -> None:
    gateway = FakeAemGateway(
        versions={
            (PAGE, "1.0"): ok({"jcr:title": "Old", "hideInNav": True}),
            (PAGE, "1.1"): ok({"jcr:title": "New"}),
        }
    )

    comparison = asyncio.run(_service(gateway).compare(PAGE, "1.0", "1.1"))

    assert comparison.summary.modified == 1
    assert comparison.summary.removed == 1
    assert [diff.property for diff in comparison.differences] == ["jcr:title", "hideInNav"]


@pytest.mark.parametrize(("first", "second"), [("1.0", "1.0"), ("1.0", None), ("", "1.1")])
def test_compare_requires_two_distinct_names(first: object, second: object) -> None:
    gateway = FakeAemGateway()

    with pytest.raises(ClassifiedError) as excinfo:
        asyncio.run(_service(gateway).compare(PAGE, first, second))

    assert excinfo.value.code is ErrorCode.INVALID_PARAMETERS
    assert gateway.calls == []


def test_create_checks_out_snapshots_and_checks_in() -> None:
    gateway = FakeAemGateway(versioning={"createVersion": ok({"versionName": "1.2"})})

    created = asyncio.run(_service(gateway).create(PAGE, "launch", "before launch"))

    assert [call[1] for call in gateway.calls] == ["checkout", "createVersion", "checkin"]
    assert gateway.calls[1][3] == {"label": "launch", "comment": "before launch"}
    assert created.version_name == "1.2"
    assert created.created_by == "svc-user"


def test_create_generates_name_when_servlet_returns_none() -> None:
    gateway = FakeAemGateway()

    created = asyncio.run(_service(gateway).create(PAGE))

    assert created.version_name == f"v{epoch_millis(FakeClock())}"
    assert gateway.calls[1][3] == {}


def test_create_stops_after_failed_snapshot() -> None:
    gateway = FakeAemGateway(versioning={"createVersion": server_error()})

    with pytest.raises(TransportError):
        asyncio.run(_service(gateway).create(PAGE))

    assert [call[1] for call in gateway.calls] == ["checkout", "createVersion"]


def test_restore_records_previous_base_version() -> None:
    gateway = FakeAemGateway(histories={PAGE: ok(HISTORY)})

    restored = asyncio.run(_service(gateway).restore(PAGE, "1.0"))

    assert restored.previous_version == "1.1"
    assert restored.restored_version == "1.0"
    assert gateway.calls[-1] == ("versioning_command", "restoreVersion", PAGE, {"version": "1.0"})


def test_delete_requires_version_name() -> None:
    gateway = FakeAemGateway()

    with pytest.raises(ClassifiedError) as excinfo:
        asyncio.run(_service(gateway).delete(PAGE, " "))
    assert excinfo.value.code is ErrorCode.INVALID_PARAMETERS

    deleted = asyncio.run(_service(gateway).delete(PAGE, "1.0"))
    assert deleted.deleted_version == "1.0"
    assert gateway.calls == [("versioning_command", "deleteVersion", PAGE, {"version": "1.0"})]
