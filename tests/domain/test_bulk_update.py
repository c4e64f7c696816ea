from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import pytest

from aemops.domain.bulk_update import BulkMutationCoordinator, parse_updates
from aemops.domain.errors import ClassifiedError, ErrorCode, create_error
from aemops.domain.outcome import unwrap
from aemops.domain.results import BulkPhase, BulkPolicy, ComponentUpdate
from tests.support.fakes import not_found, ok, server_error

if TYPE_CHECKING:
    from collections.abc import Mapping

    from aemops.domain.outcome import TransportOutcome

ROOTS = ("/content",)
PATHS = [f"/content/site/en/jcr:content/root/c{index}" for index in range(1, 4)]


class FakeUpdater:
    def __init__(
        self,
        *,
        missing: set[str] | None = None,
        unreachable: set[str] | None = None,
        failing: set[str] | None = None,
    ) -> None:
        self.missing = missing or set()
        self.unreachable = unreachable or set()
        self.failing = failing or set()
        self.probed: list[str] = []
        self.updated: list[str] = []

    async def probe(self, path: str) -> TransportOutcome[Any]:
        self.probed.append(path)
        if path in self.missing:
            return not_found()
        if path in self.unreachable:
            return server_error()
        return ok({"sling:resourceType": "site/text"})

    async def update_component(self, component_path: str, properties: Mapping[str, Any]) -> str:
        self.updated.append(component_path)
        if component_path in self.missing:
            raise create_error(ErrorCode.COMPONENT_NOT_FOUND, "gone")
        if component_path in self.failing:
            unwrap(server_error())
        return f"updated {component_path} with {len(properties)}"


def _updates() -> list[ComponentUpdate]:
    return [ComponentUpdate(component_path=path, properties={"text": "x"}) for path in PATHS]


def _run(updater: FakeUpdater, policy: BulkPolicy) -> Any:
    return asyncio.run(BulkMutationCoordinator(updater=updater).run(_updates(), policy))


def test_validate_then_abort_stops_before_any_write() -> None:
    updater = FakeUpdater(missing={PATHS[1]})

    report = _run(updater, BulkPolicy.VALIDATE_THEN_ABORT)

    assert updater.probed == PATHS[:2]
    assert updater.updated == []
    assert report.stopped_in is BulkPhase.VALIDATION
    assert report.success is False
    assert report.successful_updates == 0
    assert report.failed_updates == 3
    assert report.message == "Bulk update failed during validation phase"
    assert [(item.component_path, item.phase) for item in report.results] == [
        (PATHS[1], BulkPhase.VALIDATION)
    ]
    assert report.results[0].error_code == "COMPONENT_NOT_FOUND"


def test_validate_then_continue_skips_rejected_items() -> None:
    updater = FakeUpdater(missing={PATHS[1]})

    report = _run(updater, BulkPolicy.VALIDATE_THEN_CONTINUE)

    assert updater.probed == PATHS
    assert updater.updated == [PATHS[0], PATHS[2]]
    assert report.stopped_in is None
    assert report.successful_updates == 2
    assert report.summary.failed == 1
    assert report.message == "Bulk update completed: 2/3 successful"
    assert [item.phase for item in report.results] == [
        BulkPhase.VALIDATION,
        BulkPhase.UPDATE,
        BulkPhase.UPDATE,
    ]


def test_validation_only_rejects_definitely_missing_targets() -> None:
    updater = FakeUpdater(unreachable={PATHS[0]})

    report = _run(updater, BulkPolicy.VALIDATE_THEN_ABORT)

    assert updater.updated == PATHS
    assert report.success is True
    assert report.summary.successful == 3


def test_update_abort_leaves_earlier_writes_in_place() -> None:
    updater = FakeUpdater(failing={PATHS[1]})

    report = _run(updater, BulkPolicy.UPDATE_ABORT)

    assert updater.probed == []
    assert updater.updated == PATHS[:2]
    assert report.stopped_in is BulkPhase.UPDATE
    assert [item.success for item in report.results] == [True, False]
    assert report.results[1].error_code == "SYSTEM_ERROR"
    assert report.successful_updates == 1
    assert report.failed_updates == 2


def test_update_continue_attempts_every_item_in_order() -> None:
    updater = FakeUpdater(failing={PATHS[0]}, missing={PATHS[2]})

    report = _run(updater, BulkPolicy.UPDATE_CONTINUE)

    assert updater.updated == PATHS
    assert [item.component_path for item in report.results] == PATHS
    assert [item.error_code for item in report.results] == [
        "SYSTEM_ERROR",
        None,
        "COMPONENT_NOT_FOUND",
    ]
    assert report.results[1].result == f"updated {PATHS[1]} with 1"
    assert report.successful_updates + report.failed_updates == report.total_updates


def test_policy_from_flags() -> None:
    assert BulkPolicy.from_flags() is BulkPolicy.VALIDATE_THEN_ABORT
    assert (
        BulkPolicy.from_flags(validate_first=False, continue_on_error=True)
        is BulkPolicy.UPDATE_CONTINUE
    )


def test_run_rejects_empty_updates() -> None:
    with pytest.raises(ClassifiedError) as excinfo:
        asyncio.run(BulkMutationCoordinator(updater=FakeUpdater()).run([]))

    assert excinfo.value.code is ErrorCode.INVALID_PARAMETERS


@pytest.mark.parametrize(
    "raw",
    [
        None,
        [],
        ["not-an-object"],
        [{"properties": {}}],
        [{"componentPath": "/content/a", "properties": "text=x"}],
    ],
)
def test_parse_updates_rejects_malformed_input(raw: object) -> None:
    with pytest.raises(ClassifiedError) as excinfo:
        parse_updates(raw, ROOTS)

    assert excinfo.value.code is ErrorCode.INVALID_PARAMETERS


def test_parse_updates_keeps_order() -> None:
    updates = parse_updates(
        [
            {"componentPath": "/content/b", "properties": {"a": 1}},
            {"componentPath": "/content/a", "properties": {}},
        ],
        ROOTS,
    )

    assert [update.component_path for update in updates] == ["/content/b", "/content/a"]


def test_parse_updates_rejects_paths_outside_content_roots() -> None:
    updater = FakeUpdater()
    raw = [
        {"componentPath": PATHS[0], "properties": {"text": "x"}},
        {"componentPath": "/etc/secret", "properties": {"a": 1}},
    ]

    with pytest.raises(ClassifiedError) as excinfo:
        asyncio.run(BulkMutationCoordinator(updater=updater).run(parse_updates(raw, ROOTS)))

    assert excinfo.value.code is ErrorCode.INVALID_PATH
    assert updater.probed == []
    assert updater.updated == []
