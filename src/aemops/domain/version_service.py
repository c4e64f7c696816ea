"""Version management on top of the JCR versioning servlets."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from aemops.common.clock import Clock, SystemClock, epoch_millis

from .commands import VersioningCommand
from .errors import invalid_parameters
from .outcome import unwrap
from .payloads import VersionCreatedResponse, parse_payload
from .validation import require_content_path
from .versions import (
    VersionComparison,
    VersionHistory,
    compare_version_data,
    parse_version_history,
)

if TYPE_CHECKING:
    from .ports.versions import VersionGateway

log = getLogger(__name__)


class VersionCreated(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    version_name: str
    label: str | None = None
    comment: str | None = None
    created: str
    created_by: str


class VersionRestored(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    restored_version: str
    previous_version: str | None = None
    restored_at: str
    restored_by: str


class VersionDeleted(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    deleted_version: str
    deleted_at: str
    deleted_by: str


def _require_version_name(value: object, field_name: str = "versionName") -> str:
    if not isinstance(value, str) or not value.strip():
        raise invalid_parameters("Version name is required", **{field_name: value})
    return value


def _optional_text(value: object, field_name: str) -> str | None:
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise invalid_parameters(f"{field_name} must be a string", **{field_name: value})
    return value


@dataclass(slots=True)
class VersionService:
    gateway: VersionGateway
    content_roots: tuple[str, ...]
    actor: str
    clock: Clock = field(default_factory=SystemClock)

    async def history(self, path: object) -> VersionHistory:
        target = require_content_path(path, self.content_roots)
        tree = unwrap(await self.gateway.read_version_history(target))
        history = parse_version_history(
            target,
            tree if isinstance(tree, dict) else {},
            fallback_created=self.clock.now(),
        )
        log.info(
            "Retrieved %s versions for %s (base %s)",
            history.total_count,
            target,
            history.base_version,
        )
        return history

    async def compare(self, path: object, version1: object, version2: object) -> VersionComparison:
        target = require_content_path(path, self.content_roots)
        if (
            not isinstance(version1, str)
            or not isinstance(version2, str)
            or not version1
            or not version2
            or version1 == version2
        ):
            raise invalid_parameters(
                "Two different version names are required for comparison",
                version1=version1,
                version2=version2,
            )
        old = unwrap(await self.gateway.read_version(target, version1))
        new = unwrap(await self.gateway.read_version(target, version2))
        comparison = VersionComparison(
            path=target,
            version1=version1,
            version2=version2,
            differences=compare_version_data(
                old if isinstance(old, dict) else None,
                new if isinstance(new, dict) else None,
            ),
        )
        log.info("Compared %s and %s of %s: %s", version1, version2, target, comparison.summary)
        return comparison

    async def create(
        self,
        path: object,
        label: object = None,
        comment: object = None,
    ) -> VersionCreated:
        """Check out, snapshot, check in.

        A failure after checkout leaves the node checked out.
        """

        target = require_content_path(path, self.content_roots)
        version_label = _optional_text(label, "label")
        version_comment = _optional_text(comment, "comment")

        fields: dict[str, str] = {}
        if version_label:
            fields["label"] = version_label
        if version_comment:
            fields["comment"] = version_comment

        unwrap(await self.gateway.versioning_command(VersioningCommand.CHECKOUT, target))
        response = unwrap(
            await self.gateway.versioning_command(
                VersioningCommand.CREATE_VERSION, target, **fields
            )
        )
        unwrap(await self.gateway.versioning_command(VersioningCommand.CHECKIN, target))

        version_name = (
            parse_payload(VersionCreatedResponse, response).version_name
            or f"v{epoch_millis(self.clock)}"
        )
        log.info("Created version %s for %s", version_name, target)
        return VersionCreated(
            path=target,
            version_name=version_name,
            label=version_label,
            comment=version_comment,
            created=self.clock.now().isoformat(),
            created_by=self.actor,
        )

    async def restore(self, path: object, version_name: object) -> VersionRestored:
        target = require_content_path(path, self.content_roots)
        name = _require_version_name(version_name)

        previous = (await self.history(target)).base_version
        unwrap(
            await self.gateway.versioning_command(
                VersioningCommand.RESTORE_VERSION, target, version=name
            )
        )
        log.info("Restored %s to %s (was %s)", target, name, previous)
        return VersionRestored(
            path=target,
            restored_version=name,
            previous_version=previous,
            restored_at=self.clock.now().isoformat(),
            restored_by=self.actor,
        )

    async def delete(self, path: object, version_name: object) -> VersionDeleted:
        target = require_content_path(path, self.content_roots)
        name = _require_version_name(version_name)
        unwrap(
            await self.gateway.versioning_command(
                VersioningCommand.DELETE_VERSION, target, version=name
            )
        )
        log.info("Deleted version %s of %s", name, target)
        return VersionDeleted(
            path=target,
            deleted_version=name,
            deleted_at=self.clock.now().isoformat(),
            deleted_by=self.actor,
        )
