"""Endpoints, selectors and body encodings the author instance understands."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping

    from aemops.domain.commands import ReplicationCommand, VersioningCommand, WcmCommand

REPLICATE_ENDPOINT = "/bin/replicate.json"
WCM_COMMAND_ENDPOINT = "/bin/wcmcommand"
ROLLOUT_ENDPOINT = "/bin/wcm/msm/rollout"
VERSIONING_ENDPOINT = "/bin/wcm/versioning"
LOGIN_PAGE = "/libs/granite/core/content/login.html"

DEPTH_PARAM = ":depth"
HISTORY_DEPTH = 2
SNAPSHOT_DEPTH = 2

type FormFields = dict[str, str | list[str]]


def node_url(path: str) -> str:
    return f"{path}.json"


def version_history_url(path: str) -> str:
    return f"{path}.versionhistory.json"


def version_url(path: str, version_name: str) -> str:
    return f"{path}.version.{version_name}.json"


def versioning_url(command: VersioningCommand) -> str:
    return f"{VERSIONING_ENDPOINT}/{command.value}"


def depth_params(depth: int | None) -> dict[str, str] | None:
    return None if depth is None else {DEPTH_PARAM: str(depth)}


def _scalar(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def encode_properties(properties: Mapping[str, Any]) -> FormFields:
    """Sling POST encoding: ``None`` deletes, sequences repeat the key, objects become JSON."""

    fields: FormFields = {}
    for key, value in properties.items():
        if value is None:
            fields[f"{key}@Delete"] = ""
        elif isinstance(value, list | tuple):
            fields[key] = [_scalar(item) for item in value]
        elif isinstance(value, dict):
            fields[key] = json.dumps(value, ensure_ascii=False)
        else:
            fields[key] = _scalar(value)
    return fields


def replication_form(command: ReplicationCommand, path: str, *, deep: bool) -> FormFields:
    fields: FormFields = {
        "cmd": command.value,
        "path": path,
        "ignoredeactivated": "false",
        "onlymodified": "false",
    }
    if deep:
        fields["deep"] = "true"
    return fields


def wcm_command_body(command: WcmCommand, path: str) -> dict[str, Any]:
    return {
        "cmd": command.value,
        "path": path,
        "ignoredeactivated": False,
        "onlymodified": False,
    }


def rollout_form(
    command: str,
    path: str,
    *,
    component_data: Mapping[str, Any] | None,
    overrides: Mapping[str, Any] | None,
) -> FormFields:
    fields: FormFields = {"cmd": command, "path": path, "deep": "true"}
    if component_data:
        fields["componentData"] = json.dumps(component_data, ensure_ascii=False)
    if overrides:
        fields["localizedOverrides"] = json.dumps(overrides, ensure_ascii=False)
    return fields


def versioning_form(command: VersioningCommand, path: str, extra: Mapping[str, str]) -> FormFields:
    fields: FormFields = {"cmd": command.value, "path": path}
    fields.update(extra)
    return fields
