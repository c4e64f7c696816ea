"""Method registry mapping external camelCase names onto connector operations."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict

from aemops.common.clock import SystemClock
from aemops.domain.envelope import error_envelope, success_envelope
from aemops.domain.errors import ClassifiedError, ErrorCode, create_error, invalid_parameters

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping

    from aemops.adapters.aem.connector import AemConnector
    from aemops.common.clock import Clock
    from aemops.domain.envelope import OperationEnvelope

log = getLogger(__name__)

type Handler = Callable[[AemConnector, Mapping[str, Any]], Awaitable[OperationEnvelope]]


class MethodInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    parameters: list[str]


@dataclass(frozen=True, slots=True)
class MethodSpec:
    name: str
    description: str
    parameters: tuple[str, ...]
    handler: Handler

    def info(self) -> MethodInfo:
        return MethodInfo(
            name=self.name,
            description=self.description,
            parameters=list(self.parameters),
        )


def _flag(params: Mapping[str, Any], name: str, *, default: bool) -> bool:
    value = params.get(name, default)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise invalid_parameters(f"{name} must be a boolean", **{name: value})
    return value


def _specs() -> tuple[MethodSpec, ...]:
    return (
        MethodSpec(
            "activatePage",
            "Publish a page, optionally with its subtree",
            ("pagePath", "activateTree"),
            lambda c, p: c.activate_page(
                p.get("pagePath"), activate_tree=_flag(p, "activateTree", default=False)
            ),
        ),
        MethodSpec(
            "deactivatePage",
            "Unpublish a page, optionally with its subtree",
            ("pagePath", "deactivateTree"),
            lambda c, p: c.deactivate_page(
                p.get("pagePath"), deactivate_tree=_flag(p, "deactivateTree", default=False)
            ),
        ),
        MethodSpec(
            "unpublishContent",
            "Deactivate every given path, reporting each outcome",
            ("contentPaths", "unpublishTree"),
            lambda c, p: c.unpublish_content(
                p.get("contentPaths"), unpublish_tree=_flag(p, "unpublishTree", default=False)
            ),
        ),
        MethodSpec(
            "bulkActivatePages",
            "Activate several pages one after another",
            ("pagePaths", "activateTree"),
            lambda c, p: c.bulk_activate_pages(
                p.get("pagePaths"), activate_tree=_flag(p, "activateTree", default=False)
            ),
        ),
        MethodSpec(
            "bulkDeactivatePages",
            "Deactivate several pages one after another",
            ("pagePaths", "deactivateTree"),
            lambda c, p: c.bulk_deactivate_pages(
                p.get("pagePaths"), deactivate_tree=_flag(p, "deactivateTree", default=False)
            ),
        ),
        MethodSpec(
            "replicateAndPublish",
            "Write content to each locale and activate it there",
            ("selectedLocales", "componentData", "localizedOverrides"),
            lambda c, p: c.replicate_and_publish(
                p.get("selectedLocales"), p.get("componentData"), p.get("localizedOverrides")
            ),
        ),
        MethodSpec(
            "getReplicationStatus",
            "Read whether a path is currently published",
            ("contentPath",),
            lambda c, p: c.get_replication_status(p.get("contentPath")),
        ),
        MethodSpec(
            "updateComponent",
            "Update properties on an existing component",
            ("componentPath", "properties"),
            lambda c, p: c.update_component(p.get("componentPath"), p.get("properties")),
        ),
        MethodSpec(
            "validateComponent",
            "Check a component change against configured policy",
            ("locale", "pagePath", "component", "props"),
            lambda c, p: c.validate_component(
                locale=p.get("locale"),
                page_path=p.get("pagePath"),
                component=p.get("component"),
                props=p.get("props"),
            ),
        ),
        MethodSpec(
            "bulkUpdateComponents",
            "Update many components with a validate/continue policy",
            ("updates", "validateFirst", "continueOnError"),
            lambda c, p: c.bulk_update_components(
                p.get("updates"),
                validate_first=_flag(p, "validateFirst", default=True),
                continue_on_error=_flag(p, "continueOnError", default=False),
            ),
        ),
        MethodSpec(
            "getVersionHistory",
            "List the versions of a page, newest first",
            ("path",),
            lambda c, p: c.get_version_history(p.get("path")),
        ),
        MethodSpec(
            "compareVersions",
            "Diff two versions of a page",
            ("path", "version1", "version2"),
            lambda c, p: c.compare_versions(p.get("path"), p.get("version1"), p.get("version2")),
        ),
        MethodSpec(
            "createVersion",
            "Snapshot the current state of a page",
            ("path", "label", "comment"),
            lambda c, p: c.create_version(p.get("path"), p.get("label"), p.get("comment")),
        ),
        MethodSpec(
            "restoreVersion",
            "Restore a page to an earlier version",
            ("path", "versionName"),
            lambda c, p: c.restore_version(p.get("path"), p.get("versionName")),
        ),
        MethodSpec(
            "deleteVersion",
            "Delete one version of a page",
            ("path", "versionName"),
            lambda c, p: c.delete_version(p.get("path"), p.get("versionName")),
        ),
        MethodSpec(
            "getTemplateMetadata",
            "Read template metadata, served from cache when fresh",
            ("templatePath", "useCache"),
            lambda c, p: c.get_template_metadata(
                p.get("templatePath"), use_cache=_flag(p, "useCache", default=True)
            ),
        ),
        MethodSpec(
            "clearTemplateCache",
            "Drop all cached template metadata",
            (),
            lambda c, _p: c.clear_template_cache(),
        ),
        MethodSpec(
            "testConnection",
            "Check that the author instance answers",
            (),
            lambda c, _p: c.test_connection(),
        ),
    )


LIST_METHODS = "listMethods"


def describe_methods() -> list[MethodInfo]:
    listing = [spec.info() for spec in _specs()]
    listing.append(
        MethodInfo(
            name=LIST_METHODS,
            description="List the available methods",
            parameters=[],
        )
    )
    return listing


class MethodRegistry:
    """Runs a named method and always answers with an envelope in wire form."""

    def __init__(self, connector: AemConnector, *, clock: Clock | None = None) -> None:
        self._connector = connector
        self._clock = clock or SystemClock()
        self._methods = {spec.name: spec for spec in _specs()}

    def names(self) -> list[str]:
        return [*self._methods, LIST_METHODS]

    def describe(self) -> list[MethodInfo]:
        return describe_methods()

    async def call(self, name: str, params: Mapping[str, Any] | None = None) -> dict[str, Any]:
        if name == LIST_METHODS:
            return success_envelope(
                {"methods": self.describe()}, name, clock=self._clock
            ).to_wire()

        spec = self._methods.get(name)
        if spec is None:
            error = create_error(
                ErrorCode.INVALID_PARAMETERS,
                f"Unknown method: {name}",
                {"method": name, "available": self.names()},
            )
            return error_envelope(error, name, clock=self._clock).to_wire()

        try:
            envelope = await spec.handler(self._connector, params or {})
        except ClassifiedError as error:
            log.debug("%s returned error %s", name, error.code)
            envelope = error_envelope(error, name, clock=self._clock)
        return envelope.to_wire()
