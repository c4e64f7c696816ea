"""Result records for multi-target operations.

Aggregates (summary counts, overall success) are computed from the record
lists on access and never stored alongside them.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, computed_field

if TYPE_CHECKING:
    from collections.abc import Iterable


class BatchSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int
    successful: int
    failed: int

    @classmethod
    def from_flags(cls, flags: Iterable[bool], *, total: int | None = None) -> BatchSummary:
        values = list(flags)
        successful = sum(1 for flag in values if flag)
        count = len(values) if total is None else total
        return cls(total=count, successful=successful, failed=count - successful)


class CommandChannel(StrEnum):
    REPLICATE = "replicate"
    WCM_COMMAND = "wcmcommand"


class ReplicationAction(StrEnum):
    ACTIVATE = "activate"
    DEACTIVATE = "deactivate"


class ReplicationCommandResult(BaseModel):
    """Outcome of a single activate/deactivate with its channel made explicit."""

    model_config = ConfigDict(frozen=True)

    action: ReplicationAction
    path: str
    tree: bool
    channel: CommandChannel
    response: Any = None

    @computed_field
    @property
    def fallback_used(self) -> bool:
        return self.channel is not CommandChannel.REPLICATE


class PathResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    success: bool
    response: Any = None
    error: str | None = None


class PathBatchReport(BaseModel):
    """Per-path outcomes of an operation that always attempts every path."""

    model_config = ConfigDict(frozen=True)

    action: ReplicationAction
    paths: list[str]
    tree: bool
    results: list[PathResult]

    @computed_field
    @property
    def success(self) -> bool:
        return all(result.success for result in self.results)

    @computed_field
    @property
    def summary(self) -> BatchSummary:
        return BatchSummary.from_flags(result.success for result in self.results)


class LocaleResult(BaseModel):
    """One per locale per replication call; only rollback rewrites ``success``."""

    locale: str
    success: bool
    message: str
    path: str | None = None
    replication_id: str | None = None
    error: str | None = None
    error_code: str | None = None
    rolled_back: bool = False

    def mark_rolled_back(self) -> None:
        self.success = False
        self.rolled_back = True
        self.message = f"Rolled back after a failure elsewhere in the batch: {self.message}"


class RollbackRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    locale: str
    path: str
    success: bool
    error: str | None = None


class ReplicationReport(BaseModel):
    selected_locales: list[str]
    results: list[LocaleResult] = Field(default_factory=list)
    rollbacks: list[RollbackRecord] = Field(default_factory=list)
    strict: bool = False

    @computed_field
    @property
    def success(self) -> bool:
        return all(result.success for result in self.results)

    @computed_field
    @property
    def summary(self) -> BatchSummary:
        return BatchSummary.from_flags(result.success for result in self.results)

    @computed_field
    @property
    def successful_locales(self) -> list[str]:
        return [result.locale for result in self.results if result.success]

    @computed_field
    @property
    def failed_locales(self) -> list[str]:
        return [result.locale for result in self.results if not result.success]

    @computed_field
    @property
    def message(self) -> str:
        summary = self.summary
        if summary.failed == 0:
            return "All replications completed successfully"
        return (
            "Replication completed with errors. "
            f"{summary.successful}/{summary.total} locales successful."
        )


class BulkPhase(StrEnum):
    VALIDATION = "validation"
    UPDATE = "update"


class BulkPolicy(StrEnum):
    """Where a bulk update stops.

    ``VALIDATE_*`` probe every target before writing anything; ``*_ABORT``
    stop at the first failure, ``*_CONTINUE`` record it and keep going.
    """

    VALIDATE_THEN_ABORT = "validate_then_abort"
    VALIDATE_THEN_CONTINUE = "validate_then_continue"
    UPDATE_ABORT = "update_abort"
    UPDATE_CONTINUE = "update_continue"

    @classmethod
    def from_flags(
        cls, *, validate_first: bool = True, continue_on_error: bool = False
    ) -> BulkPolicy:
        if validate_first:
            return cls.VALIDATE_THEN_CONTINUE if continue_on_error else cls.VALIDATE_THEN_ABORT
        return cls.UPDATE_CONTINUE if continue_on_error else cls.UPDATE_ABORT

    @property
    def validate_first(self) -> bool:
        return self in {BulkPolicy.VALIDATE_THEN_ABORT, BulkPolicy.VALIDATE_THEN_CONTINUE}

    @property
    def continue_on_error(self) -> bool:
        return self in {BulkPolicy.VALIDATE_THEN_CONTINUE, BulkPolicy.UPDATE_CONTINUE}


class ComponentUpdate(BaseModel):
    model_config = ConfigDict(frozen=True)

    component_path: str
    properties: dict[str, Any]


class BulkUpdateItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    component_path: str
    success: bool
    phase: BulkPhase
    error: str | None = None
    error_code: str | None = None
    result: Any = None


class BulkUpdateReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    policy: BulkPolicy
    total_updates: int
    results: list[BulkUpdateItem]
    stopped_in: BulkPhase | None = None

    @computed_field
    @property
    def successful_updates(self) -> int:
        return sum(
            1 for item in self.results if item.success and item.phase is BulkPhase.UPDATE
        )

    @computed_field
    @property
    def failed_updates(self) -> int:
        return self.total_updates - self.successful_updates

    @computed_field
    @property
    def summary(self) -> BatchSummary:
        return BatchSummary(
            total=self.total_updates,
            successful=self.successful_updates,
            failed=self.failed_updates,
        )

    @computed_field
    @property
    def success(self) -> bool:
        return self.successful_updates == self.total_updates

    @computed_field
    @property
    def message(self) -> str:
        if self.stopped_in is BulkPhase.VALIDATION:
            return "Bulk update failed during validation phase"
        return f"Bulk update completed: {self.successful_updates}/{self.total_updates} successful"


class ReplicationState(StrEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ERROR = "error"


class ReplicationStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    content_path: str
    status: ReplicationState
    last_replicated: str | None = None
    last_replicated_by: str | None = None
    last_action: str | None = None
    error: str | None = None
