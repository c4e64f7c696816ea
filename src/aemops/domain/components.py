"""Single-component primitives: update with verification, and prop validation."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from aemops.common.clock import Clock, SystemClock

from .errors import ErrorCode, create_error
from .outcome import Failure, unwrap
from .validation import require_content_path, require_mapping, validate_component_operation

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .outcome import TransportOutcome
    from .ports.content import ContentGateway

log = getLogger(__name__)

PAGE_VALIDATION_DEPTH = 2


class UpdateVerification(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool
    properties_changed: int
    timestamp: str


class ComponentUpdateResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str = "Component updated successfully"
    path: str
    properties: dict[str, Any]
    updated_properties: Any = None
    response: Any = None
    verification: UpdateVerification


class PropValidation(BaseModel):
    model_config = ConfigDict(frozen=True)

    valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    component_type: str
    props_validated: int


class ComponentValidationReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str = "Component validation completed successfully"
    page_data: Any = None
    component: str
    locale: str
    validation: PropValidation
    allowed_locales: list[str]
    allowed_components: list[str]


def validate_component_props(component_type: str, props: Mapping[str, Any]) -> PropValidation:
    errors: list[str] = []
    warnings: list[str] = []
    if component_type == "text" and not props.get("text") and not props.get("richText"):
        warnings.append("Text component should have text or richText property")
    if component_type == "image" and not props.get("fileReference") and not props.get("src"):
        errors.append("Image component requires fileReference or src property")
    return PropValidation(
        valid=not errors,
        errors=errors,
        warnings=warnings,
        component_type=component_type,
        props_validated=len(props),
    )


@dataclass(slots=True)
class ComponentService:
    gateway: ContentGateway
    content_roots: tuple[str, ...]
    allowed_components: tuple[str, ...] = ()
    allowed_locales: tuple[str, ...] = ()
    clock: Clock = field(default_factory=SystemClock)

    async def probe(self, path: str) -> TransportOutcome[Any]:
        return await self.gateway.read_node(path)

    async def update_component(
        self,
        component_path: str,
        properties: Mapping[str, Any],
    ) -> ComponentUpdateResult:
        """Write ``properties`` onto an existing component and read it back.

        ``None`` values delete the property on the node.
        """

        path = require_content_path(component_path, self.content_roots, field_name="componentPath")
        values = require_mapping(properties, "properties")

        probe = await self.probe(path)
        if isinstance(probe, Failure) and probe.status_code == 404:
            raise create_error(
                ErrorCode.COMPONENT_NOT_FOUND,
                f"Component not found at path: {path}",
                {"componentPath": path},
            )
        unwrap(probe)

        response = unwrap(await self.gateway.post_properties(path, values))
        updated = unwrap(await self.gateway.read_node(path))
        log.debug("Updated %s properties on %s", len(values), path)

        return ComponentUpdateResult(
            path=path,
            properties=dict(values),
            updated_properties=updated,
            response=response,
            verification=UpdateVerification(
                success=True,
                properties_changed=len(values),
                timestamp=self.clock.now().isoformat(),
            ),
        )

    async def validate_component(
        self,
        *,
        locale: object,
        page_path: object,
        component: object,
        props: object,
    ) -> ComponentValidationReport:
        request = validate_component_operation(
            locale=locale,
            page_path=page_path,
            component=component,
            props=props,
            roots=self.content_roots,
            allowed_components=self.allowed_components,
            allowed_locales=self.allowed_locales,
        )

        page_data = unwrap(
            await self.gateway.read_node(request.page_path, depth=PAGE_VALIDATION_DEPTH)
        )
        return ComponentValidationReport(
            page_data=page_data,
            component=request.component,
            locale=request.locale,
            validation=validate_component_props(request.component, request.props),
            allowed_locales=list(self.allowed_locales),
            allowed_components=list(self.allowed_components),
        )
