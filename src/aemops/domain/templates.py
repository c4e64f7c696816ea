"""Template metadata lookups behind a time-bounded cache."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from .errors import invalid_parameters
from .outcome import unwrap
from .payloads import TemplateContent, child_node, parse_payload
from .validation import require_path

if TYPE_CHECKING:
    from aemops.common.cache import TtlCache

    from .ports.content import ContentReader

log = getLogger(__name__)

# jcr:content plus its policies, structure and initial children.
TEMPLATE_DEPTH = 2


class TemplateMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    template_path: str
    title: str = "Untitled Template"
    description: str = ""
    thumbnail: str = ""
    allowed_paths: list[str] = Field(default_factory=list)
    status: str = "enabled"
    ranking: int = 0
    template_type: str = "page"
    last_modified: str | None = None
    created_by: str | None = None
    policies: dict[str, Any] = Field(default_factory=dict)
    structure: dict[str, Any] = Field(default_factory=dict)
    initial_content: dict[str, Any] = Field(default_factory=dict)
    from_cache: bool = False


def parse_template_metadata(template_path: str, payload: object) -> TemplateMetadata:
    node = child_node(payload, "jcr:content")
    if node is None:
        raise invalid_parameters("Invalid template structure", templatePath=template_path)
    content = parse_payload(TemplateContent, node)
    allowed = content.allowed_paths
    return TemplateMetadata(
        template_path=template_path,
        title=content.title or "Untitled Template",
        description=content.description or "",
        thumbnail=content.thumbnail or "",
        allowed_paths=[allowed] if isinstance(allowed, str) else list(allowed or []),
        status=content.status or "enabled",
        ranking=content.ranking or 0,
        template_type=content.template_type or "page",
        last_modified=content.last_modified,
        created_by=content.created_by,
        policies=content.policies or {},
        structure=content.structure or {},
        initial_content=content.initial or {},
    )


@dataclass(slots=True)
class TemplateCatalog:
    reader: ContentReader
    cache: TtlCache[str, TemplateMetadata]

    async def metadata(self, template_path: object, *, use_cache: bool = True) -> TemplateMetadata:
        path = require_path(template_path, "templatePath")
        if use_cache:
            cached = self.cache.get(path)
            if cached is not None:
                return cached.model_copy(update={"from_cache": True})

        payload = unwrap(await self.reader.read_node(path, depth=TEMPLATE_DEPTH))
        metadata = parse_template_metadata(path, payload)
        if use_cache:
            self.cache.set(path, metadata)
        return metadata

    def clear_cache(self) -> None:
        self.cache.clear()
        log.info("Template cache cleared")
