from __future__ import annotations

import json

from aemops.adapters.aem import wire
from aemops.domain.commands import ReplicationCommand, VersioningCommand, WcmCommand


def test_encode_properties_follows_sling_post_conventions() -> None:
    fields = wire.encode_properties(
        {
            "jcr:title": "Hello",
            "hideInNav": True,
            "tags": ["a", "b"],
            "config": {"x": 1},
            "obsolete": None,
            "count": 3,
        }
    )

    assert fields == {
        "jcr:title": "Hello",
        "hideInNav": "true",
        "tags": ["a", "b"],
        "config": '{"x": 1}',
        "obsolete@Delete": "",
        "count": "3",
    }


def test_replication_form_marks_deep_only_for_trees() -> None:
    shallow = wire.replication_form(ReplicationCommand.ACTIVATE, "/content/a", deep=False)
    deep = wire.replication_form(ReplicationCommand.DEACTIVATE, "/content/a", deep=True)

    assert shallow["cmd"] == "Activate"
    assert "deep" not in shallow
    assert deep["cmd"] == "Deactivate"
    assert deep["deep"] == "true"


def test_wcm_command_body() -> None:
    assert wire.wcm_command_body(WcmCommand.DEACTIVATE, "/content/a") == {
        "cmd": "deactivate",
        "path": "/content/a",
        "ignoredeactivated": False,
        "onlymodified": False,
    }


def test_rollout_form_serialises_payloads_as_json() -> None:
    fields = wire.rollout_form(
        "Rollout",
        "/content/site/de",
        component_data={"title": "Hallo"},
        overrides=None,
    )

    assert fields["cmd"] == "Rollout"
    assert json.loads(str(fields["componentData"])) == {"title": "Hallo"}
    assert "localizedOverrides" not in fields


def test_urls_and_depth() -> None:
    assert wire.node_url("/content/a") == "/content/a.json"
    assert wire.version_history_url("/content/a") == "/content/a.versionhistory.json"
    assert wire.version_url("/content/a", "1.0") == "/content/a.version.1.0.json"
    assert wire.versioning_url(VersioningCommand.CHECKIN) == "/bin/wcm/versioning/checkin"
    assert wire.depth_params(None) is None
    assert wire.depth_params(2) == {":depth": "2"}
