from __future__ import annotations

import asyncio
from typing import Any

import httpx

from aemops.adapters.aem.connector import AemConnector
from aemops.app import run_method
from aemops.dispatch import LIST_METHODS, MethodRegistry, describe_methods
from tests.support.fakes import FakeClock, RecordingSleep
from tests.support.http import make_client_factory, make_config


def _handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/bin/replicate.json":
        return httpx.Response(200, json={"ok": True})
    return httpx.Response(404)


def _call(name: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
    connector = AemConnector(
        make_config(),
        client_factory=make_client_factory(_handler),
        clock=FakeClock(),
        sleep=RecordingSleep(),
    )

    async def go() -> dict[str, Any]:
        async with connector:
            return await MethodRegistry(connector, clock=FakeClock()).call(name, params)

    return asyncio.run(go())


def test_registry_exposes_every_operation() -> None:
    names = [info.name for info in describe_methods()]

    assert names[-1] == LIST_METHODS
    assert {
        "activatePage",
        "deactivatePage",
        "unpublishContent",
        "bulkActivatePages",
        "bulkDeactivatePages",
        "replicateAndPublish",
        "getReplicationStatus",
        "updateComponent",
        "validateComponent",
        "bulkUpdateComponents",
        "getVersionHistory",
        "compareVersions",
        "createVersion",
        "restoreVersion",
        "deleteVersion",
        "getTemplateMetadata",
        "clearTemplateCache",
        "testConnection",
    } <= set(names)
    assert len(names) == len(set(names))


def test_list_methods_answers_with_envelope() -> None:
    result = _call(LIST_METHODS)

    assert result["success"] is True
    assert result["operation"] == LIST_METHODS
    assert {
        "name": "clearTemplateCache",
        "description": "Drop all cached template metadata",
        "parameters": [],
    } in result["data"]["methods"]


def test_unknown_method_is_an_error_envelope() -> None:
    result = _call("publishEverything")

    assert result["success"] is False
    assert result["data"] is None
    assert result["error"]["code"] == "INVALID_PARAMETERS"
    assert "activatePage" in result["error"]["details"]["available"]


def test_classified_errors_become_error_envelopes() -> None:
    result = _call("activatePage", {"pagePath": "/apps/site/page"})

    assert result["success"] is False
    assert result["operation"] == "activatePage"
    assert result["error"]["code"] == "INVALID_PATH"
    assert result["error"]["recoverable"] is False


def test_non_boolean_flags_are_rejected() -> None:
    result = _call("activatePage", {"pagePath": "/content/a", "activateTree": "yes"})

    assert result["error"]["code"] == "INVALID_PARAMETERS"


def test_successful_call_returns_wire_data() -> None:
    result = _call("bulkActivatePages", {"pagePaths": ["/content/a", "/content/b"]})

    assert result["success"] is True
    assert result["data"]["summary"] == {"total": 2, "successful": 2, "failed": 0}


def test_run_method_builds_and_closes_connector() -> None:
    result = run_method(
        "activatePage",
        {"pagePath": "/content/a"},
        config=make_config(),
        client_factory=make_client_factory(_handler),
    )

    assert result["success"] is True
    assert result["data"]["path"] == "/content/a"
