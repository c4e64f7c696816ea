"""Version history parsing and structural version comparison.

Everything here is pure: callers fetch the JSON trees and hand them in.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, computed_field

if TYPE_CHECKING:
    from collections.abc import Mapping

log = getLogger(__name__)

FROZEN_NODE_KEY = "jcr:frozenNode"
_AEM_DATE_FORMATS = (
    "%a %b %d %Y %H:%M:%S GMT%z",
    "%Y-%m-%dT%H:%M:%S.%f%z",
)


class DiffKind(StrEnum):
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"


class DiffRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    property: str
    kind: DiffKind
    old_value: Any = None
    new_value: Any = None


class DiffSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    added: int = 0
    removed: int = 0
    modified: int = 0


class VersionRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    label: str | None = None
    created: datetime
    created_by: str = "unknown"
    comment: str | None = None
    is_base_version: bool = False


class VersionHistory(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    versions: list[VersionRecord]

    @computed_field
    @property
    def total_count(self) -> int:
        return len(self.versions)

    @computed_field
    @property
    def base_version(self) -> str | None:
        for record in self.versions:
            if record.is_base_version:
                return record.name
        return None


class VersionComparison(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    version1: str
    version2: str
    differences: list[DiffRecord]

    @computed_field
    @property
    def summary(self) -> DiffSummary:
        return summarize_differences(self.differences)


def _serialized(value: object) -> str:
    # Key order is significant: equal content in a different order counts as modified.
    return json.dumps(value, default=str, ensure_ascii=False)


def compare_version_data(
    old: Mapping[str, Any] | None,
    new: Mapping[str, Any] | None,
) -> list[DiffRecord]:
    """Top-level property diff of two snapshots, in ``new`` order then removals."""

    old_data = old or {}
    new_data = new or {}
    differences: list[DiffRecord] = []

    for key, new_value in new_data.items():
        if key not in old_data:
            differences.append(DiffRecord(property=key, kind=DiffKind.ADDED, new_value=new_value))
        elif _serialized(old_data[key]) != _serialized(new_value):
            differences.append(
                DiffRecord(
                    property=key,
                    kind=DiffKind.MODIFIED,
                    old_value=old_data[key],
                    new_value=new_value,
                )
            )

    for key, old_value in old_data.items():
        if key not in new_data:
            differences.append(
                DiffRecord(property=key, kind=DiffKind.REMOVED, old_value=old_value)
            )

    return differences


def summarize_differences(differences: list[DiffRecord]) -> DiffSummary:
    return DiffSummary(
        added=sum(1 for diff in differences if diff.kind is DiffKind.ADDED),
        removed=sum(1 for diff in differences if diff.kind is DiffKind.REMOVED),
        modified=sum(1 for diff in differences if diff.kind is DiffKind.MODIFIED),
    )


def parse_timestamp(value: object) -> datetime | None:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        parsed = None
        # "GMT+0100 (CET)" style suffixes carry no extra information.
        candidate = text.split(" (", 1)[0]
        for fmt in _AEM_DATE_FORMATS:
            try:
                parsed = datetime.strptime(candidate, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def parse_version_history(
    path: str,
    tree: Mapping[str, Any],
    *,
    fallback_created: datetime,
) -> VersionHistory:
    """Build sorted version records from a ``.versionhistory.json`` tree.

    Only entries holding a frozen node are versions; labels and node
    properties are skipped. A version whose node is not checked out is the
    base version; when several qualify the last one seen wins.
    """

    drafts: list[dict[str, Any]] = []
    base_index: int | None = None

    for key, node in tree.items():
        if key == "jcr:versionLabels" or not isinstance(node, dict):
            continue
        frozen = node.get(FROZEN_NODE_KEY)
        if not isinstance(frozen, dict):
            continue
        created = parse_timestamp(node.get("jcr:created"))
        if created is None:
            if node.get("jcr:created") is not None:
                log.warning("Unparseable creation time for version %s of %s", key, path)
            created = fallback_created
        if node.get("jcr:isCheckedOut") is False:
            base_index = len(drafts)
        drafts.append(
            {
                "name": key,
                "label": frozen.get("jcr:versionLabel"),
                "created": created,
                "created_by": node.get("jcr:createdBy") or "unknown",
                "comment": node.get("jcr:versionComment"),
            }
        )

    records = [
        VersionRecord(**draft, is_base_version=index == base_index)
        for index, draft in enumerate(drafts)
    ]
    records.sort(key=lambda record: record.created, reverse=True)
    return VersionHistory(path=path, versions=records)
