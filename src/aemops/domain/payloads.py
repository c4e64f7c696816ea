"""Schemas for the JSON bodies the author instance sends back.

Only the properties this package reads are modelled; JCR nodes carry many
more and those are ignored.
"""

from __future__ import annotations

from logging import getLogger
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

log = getLogger(__name__)

type JcrNode = dict[str, Any]


class AemPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class ReplicationNode(AemPayload):
    """``jcr:content`` of a page as far as replication bookkeeping goes."""

    last_replication_action: str | None = Field(default=None, alias="cq:lastReplicationAction")
    last_replicated: str | None = Field(default=None, alias="cq:lastReplicated")
    last_replicated_by: str | None = Field(default=None, alias="cq:lastReplicatedBy")


class LiveCopyNode(AemPayload):
    live_sync_config: Any = Field(default=None, alias="cq:liveSyncConfig")
    blueprint: Any = Field(default=None, alias="cq:blueprint")

    @property
    def is_live_copy(self) -> bool:
        return bool(self.live_sync_config or self.blueprint)


class RolloutResponse(AemPayload):
    replication_id: str | None = Field(default=None, alias="replicationId")


class VersionCreatedResponse(AemPayload):
    version_name: str | None = Field(default=None, alias="versionName")


class TemplateContent(AemPayload):
    title: str | None = Field(default=None, alias="jcr:title")
    description: str | None = Field(default=None, alias="jcr:description")
    thumbnail: str | None = None
    allowed_paths: list[str] | str | None = Field(default=None, alias="allowedPaths")
    status: str | None = None
    ranking: int | None = None
    template_type: str | None = Field(default=None, alias="templateType")
    last_modified: str | None = Field(default=None, alias="cq:lastModified")
    created_by: str | None = Field(default=None, alias="jcr:createdBy")
    policies: JcrNode | None = None
    structure: JcrNode | None = None
    initial: JcrNode | None = None


def parse_payload[M: AemPayload](model: type[M], payload: object) -> M:
    """Validate ``payload`` leniently; anything that is not an object yields defaults."""

    if not isinstance(payload, dict):
        return model()
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        log.warning("Ignoring malformed %s payload (%s errors)", model.__name__, exc.error_count())
        return model()


def child_node(payload: object, name: str) -> JcrNode | None:
    if not isinstance(payload, dict):
        return None
    child = payload.get(name)
    return child if isinstance(child, dict) else None
