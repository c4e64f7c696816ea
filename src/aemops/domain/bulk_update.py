"""Phased, sequential application of many component updates.

``Start -> [validation] -> update -> done``. Targets are always visited in
input order; where the run stops is decided by the :class:`BulkPolicy`.
There is no cross-item atomicity: items updated before a failure stay
updated.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from .errors import ClassifiedError, ErrorCode, invalid_parameters
from .outcome import Failure, TransportError
from .results import (
    BulkPhase,
    BulkPolicy,
    BulkUpdateItem,
    BulkUpdateReport,
    ComponentUpdate,
)
from .retry import classify_error
from .validation import require_content_path

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .ports.content import ComponentUpdater

log = getLogger(__name__)

OPERATION = "bulkUpdateComponents"


def parse_updates(raw: object, roots: Sequence[str]) -> list[ComponentUpdate]:
    """Turn caller input into update requests.

    Rejects an empty or malformed list, and any path outside ``roots``, before
    a single target is probed.
    """

    if not isinstance(raw, list) or not raw:
        raise invalid_parameters("Updates array is required and cannot be empty", updates=raw)
    updates: list[ComponentUpdate] = []
    for index, entry in enumerate(raw):
        if not isinstance(entry, dict):
            raise invalid_parameters("Each update must be an object", index=index)
        path = require_content_path(entry.get("componentPath"), roots, field_name="componentPath")
        properties = entry.get("properties")
        if not isinstance(properties, dict):
            raise invalid_parameters("Each update needs a properties object", index=index)
        updates.append(ComponentUpdate(component_path=path, properties=properties))
    return updates


@dataclass(slots=True)
class _Run:
    updates: Sequence[ComponentUpdate]
    policy: BulkPolicy
    results: list[BulkUpdateItem]
    rejected: set[int]

    def report(self, stopped_in: BulkPhase | None = None) -> BulkUpdateReport:
        return BulkUpdateReport(
            policy=self.policy,
            total_updates=len(self.updates),
            results=list(self.results),
            stopped_in=stopped_in,
        )


@dataclass(slots=True)
class BulkMutationCoordinator:
    updater: ComponentUpdater

    async def run(
        self,
        updates: Sequence[ComponentUpdate],
        policy: BulkPolicy = BulkPolicy.VALIDATE_THEN_ABORT,
    ) -> BulkUpdateReport:
        if not updates:
            raise invalid_parameters("Updates array is required and cannot be empty")

        state = _Run(updates=updates, policy=policy, results=[], rejected=set())
        log.info("Bulk update of %s components with policy %s", len(updates), policy.value)

        if policy.validate_first and not await self._validate(state):
            return state.report(stopped_in=BulkPhase.VALIDATION)
        if not await self._apply(state):
            return state.report(stopped_in=BulkPhase.UPDATE)
        return state.report()

    async def _validate(self, state: _Run) -> bool:
        """Probe every target; ``False`` means the run must stop here."""

        for index, update in enumerate(state.updates):
            outcome = await self.updater.probe(update.component_path)
            if not isinstance(outcome, Failure):
                continue
            if outcome.status_code != 404:
                # Only a definite "missing" rejects an item; the update phase
                # surfaces anything else.
                log.warning(
                    "Could not probe %s before updating: %s",
                    update.component_path,
                    outcome.message,
                )
                continue
            state.rejected.add(index)
            state.results.append(
                BulkUpdateItem(
                    component_path=update.component_path,
                    success=False,
                    phase=BulkPhase.VALIDATION,
                    error=f"Component not found: {update.component_path}",
                    error_code=ErrorCode.COMPONENT_NOT_FOUND.value,
                )
            )
            if not state.policy.continue_on_error:
                return False
        return True

    async def _apply(self, state: _Run) -> bool:
        """Update every target not rejected during validation; ``False`` means stopped early."""

        for index, update in enumerate(state.updates):
            if index in state.rejected:
                continue
            item = await self._update_one(update)
            state.results.append(item)
            if not item.success and not state.policy.continue_on_error:
                return False
        return True

    async def _update_one(self, update: ComponentUpdate) -> BulkUpdateItem:
        try:
            result = await self.updater.update_component(
                update.component_path,
                update.properties,
            )
        except (ClassifiedError, TransportError) as exc:
            error = classify_error(exc, OPERATION)
            log.warning("Update of %s failed: %s", update.component_path, error.message)
            return BulkUpdateItem(
                component_path=update.component_path,
                success=False,
                phase=BulkPhase.UPDATE,
                error=error.message,
                error_code=error.code.value,
            )
        return BulkUpdateItem(
            component_path=update.component_path,
            success=True,
            phase=BulkPhase.UPDATE,
            result=result,
        )
