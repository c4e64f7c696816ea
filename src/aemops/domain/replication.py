"""Publishing, unpublishing and per-locale replication.

Each orchestrated operation is a chain of named steps:

* activation/deactivation: ``attempt`` on the replication servlet, then one
  ``fallback`` over the WCM command channel;
* locale replication: ``preflight`` of every locale, then per locale
  ``resolve path -> probe live copy -> write (rollout | standard) ->
  activate``, then ``compensate`` in strict mode.

All loops are strictly sequential; result order follows input order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any

from aemops.common.clock import Clock, SystemClock, epoch_millis

from .commands import LOCALIZED_PREFIX, UPDATE_COMMAND, ReplicationCommand, WcmCommand
from .errors import ClassifiedError, invalid_parameters
from .locales import is_valid_locale, normalize_locale, validate_locale
from .outcome import Failure, Success, TransportError, unwrap
from .payloads import LiveCopyNode, ReplicationNode, RolloutResponse, child_node, parse_payload
from .results import (
    CommandChannel,
    LocaleResult,
    PathBatchReport,
    PathResult,
    ReplicationAction,
    ReplicationCommandResult,
    ReplicationReport,
    ReplicationState,
    ReplicationStatus,
    RollbackRecord,
)
from .retry import classify_error
from .validation import require_content_path, require_mapping, require_path

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from .outcome import TransportOutcome
    from .ports.replication import ReplicationGateway

log = getLogger(__name__)

OPERATION = "replicateAndPublish"
LIVE_COPY_PROBE_DEPTH = 1

_REPLICATION_COMMANDS = {
    ReplicationAction.ACTIVATE: ReplicationCommand.ACTIVATE,
    ReplicationAction.DEACTIVATE: ReplicationCommand.DEACTIVATE,
}
_WCM_COMMANDS = {
    ReplicationAction.ACTIVATE: WcmCommand.ACTIVATE,
    ReplicationAction.DEACTIVATE: WcmCommand.DEACTIVATE,
}


def require_paths(paths: object, roots: Sequence[str], *, field_name: str) -> list[str]:
    if isinstance(paths, str):
        paths = [paths]
    if not isinstance(paths, list) or not paths:
        raise invalid_parameters(
            f"{field_name} array is required and cannot be empty", **{field_name: paths}
        )
    return [require_content_path(path, roots, field_name=field_name) for path in paths]


def overrides_for_locale(
    overrides: Mapping[str, Any] | None,
    token: str,
    normalized: str,
) -> Mapping[str, Any]:
    """Pick the overrides that apply to one locale.

    ``overrides`` is either one flat mapping shared by every locale or a
    mapping keyed by locale token (raw or normalised). In the keyed form a
    locale without its own entry gets no overrides.
    """

    if not overrides:
        return {}
    for key in (token, normalized):
        value = overrides.get(key)
        if isinstance(value, dict):
            return value
    keyed = all(
        is_valid_locale(key) and isinstance(value, dict) for key, value in overrides.items()
    )
    return {} if keyed else overrides


def standard_write_fields(
    data: Mapping[str, Any],
    overrides: Mapping[str, Any],
) -> dict[str, Any]:
    fields: dict[str, Any] = {"cmd": UPDATE_COMMAND, "_charset_": "utf-8"}
    fields.update(data)
    for key, value in overrides.items():
        fields[f"{LOCALIZED_PREFIX}{key}"] = value
    return fields


@dataclass(slots=True)
class ReplicationOrchestrator:
    gateway: ReplicationGateway
    locale_root: Callable[[str], str]
    content_roots: tuple[str, ...]
    strict: bool = False
    clock: Clock = field(default_factory=SystemClock)

    # -- activation / deactivation -------------------------------------------------

    async def activate_page(
        self, path: object, *, tree: bool = False
    ) -> ReplicationCommandResult:
        target = require_content_path(path, self.content_roots, field_name="pagePath")
        return await self._transition(ReplicationAction.ACTIVATE, target, tree=tree)

    async def deactivate_page(
        self, path: object, *, tree: bool = False
    ) -> ReplicationCommandResult:
        target = require_content_path(path, self.content_roots, field_name="pagePath")
        return await self._transition(ReplicationAction.DEACTIVATE, target, tree=tree)

    async def _transition(
        self,
        action: ReplicationAction,
        path: str,
        *,
        tree: bool,
    ) -> ReplicationCommandResult:
        primary = await self._attempt(action, path, tree=tree)
        if isinstance(primary, Success):
            return ReplicationCommandResult(
                action=action,
                path=path,
                tree=tree,
                channel=CommandChannel.REPLICATE,
                response=primary.value,
            )
        log.warning("%s of %s failed (%s), trying WCM command", action, path, primary.message)
        fallback = await self._fallback(action, path)
        if isinstance(fallback, Success):
            return ReplicationCommandResult(
                action=action,
                path=path,
                tree=tree,
                channel=CommandChannel.WCM_COMMAND,
                response=fallback.value,
            )
        log.warning("WCM command fallback for %s also failed: %s", path, fallback.message)
        raise TransportError(primary)

    async def _attempt(
        self, action: ReplicationAction, path: str, *, tree: bool
    ) -> TransportOutcome[Any]:
        return await self.gateway.replicate(_REPLICATION_COMMANDS[action], path, deep=tree)

    async def _fallback(self, action: ReplicationAction, path: str) -> TransportOutcome[Any]:
        return await self.gateway.wcm_command(_WCM_COMMANDS[action], path)

    # -- multi-path ------------------------------------------------------------------

    async def unpublish(self, paths: object, *, tree: bool = False) -> PathBatchReport:
        """Deactivate every path independently; earlier failures never stop later paths."""

        targets = require_paths(paths, self.content_roots, field_name="contentPaths")
        results: list[PathResult] = []
        for target in targets:
            outcome = await self.gateway.replicate(ReplicationCommand.DEACTIVATE, target, deep=tree)
            match outcome:
                case Success(value=value):
                    results.append(PathResult(path=target, success=True, response=value))
                case Failure() as failure:
                    log.warning("Unpublishing %s failed: %s", target, failure.message)
                    results.append(
                        PathResult(
                            path=target,
                            success=False,
                            response=failure.body,
                            error=failure.message,
                        )
                    )
        return PathBatchReport(
            action=ReplicationAction.DEACTIVATE,
            paths=targets,
            tree=tree,
            results=results,
        )

    async def bulk_activate(self, paths: object, *, tree: bool = False) -> PathBatchReport:
        return await self._bulk(ReplicationAction.ACTIVATE, paths, tree=tree)

    async def bulk_deactivate(self, paths: object, *, tree: bool = False) -> PathBatchReport:
        return await self._bulk(ReplicationAction.DEACTIVATE, paths, tree=tree)

    async def _bulk(
        self, action: ReplicationAction, paths: object, *, tree: bool
    ) -> PathBatchReport:
        targets = require_paths(paths, self.content_roots, field_name="pagePaths")
        results: list[PathResult] = []
        for target in targets:
            try:
                outcome = await self._transition(action, target, tree=tree)
            except TransportError as exc:
                results.append(PathResult(path=target, success=False, error=str(exc)))
                continue
            results.append(PathResult(path=target, success=True, response=outcome.response))
        return PathBatchReport(action=action, paths=targets, tree=tree, results=results)

    # -- locale replication -------------------------------------------------------

    async def replicate(
        self,
        locales: object,
        data: object,
        overrides: object = None,
    ) -> ReplicationReport:
        tokens, component_data, override_map = self._preflight(locales, data, overrides)
        report = ReplicationReport(selected_locales=tokens, strict=self.strict)

        for token in tokens:
            result = await self._replicate_locale(token, component_data, override_map)
            report.results.append(result)

        if self.strict and report.failed_locales:
            await self._compensate(report)
        log.info(
            "Replication finished: %s/%s locales successful",
            report.summary.successful,
            report.summary.total,
        )
        return report

    def _preflight(
        self,
        locales: object,
        data: object,
        overrides: object,
    ) -> tuple[list[str], Mapping[str, Any], Mapping[str, Any] | None]:
        if not isinstance(locales, list) or not locales:
            raise invalid_parameters(
                "selectedLocales array is required and cannot be empty",
                selectedLocales=locales,
            )
        component_data = require_mapping(data, "componentData")
        override_map = (
            None if overrides is None else require_mapping(overrides, "localizedOverrides")
        )
        # Every token is checked before the first call so a typo never leaves
        # a half-published batch behind.
        tokens = [validate_locale(token) for token in locales]
        return tokens, component_data, override_map

    async def _replicate_locale(
        self,
        token: str,
        data: Mapping[str, Any],
        overrides: Mapping[str, Any] | None,
    ) -> LocaleResult:
        path: str | None = None
        try:
            normalized = normalize_locale(token)
            path = self.locale_root(normalized)
            locale_overrides = overrides_for_locale(overrides, token, normalized)
            if await self._is_live_copy(path):
                replication_id = await self._rollout(path, data, locale_overrides)
            else:
                replication_id = await self._standard_write(path, data, locale_overrides)
            await self._activate_locale(path)
        except (ClassifiedError, TransportError) as exc:
            error = classify_error(exc, OPERATION)
            log.error("Failed to replicate to locale %s: %s", token, error.message)
            return LocaleResult(
                locale=token,
                success=False,
                message=f"Failed to replicate to {token}: {error.message}",
                path=path,
                error=error.message,
                error_code=error.code.value,
            )

        log.info("Replicated %s to %s (%s)", token, path, replication_id)
        return LocaleResult(
            locale=token,
            success=True,
            message=f"Content replicated and activated successfully to {token}",
            path=path,
            replication_id=replication_id,
        )

    async def _is_live_copy(self, path: str) -> bool:
        """A page that cannot be read, e.g. a locale not created yet, is not a live copy."""

        match await self.gateway.read_node(path, depth=LIVE_COPY_PROBE_DEPTH):
            case Success(value=node):
                content = child_node(node, "jcr:content")
                return parse_payload(LiveCopyNode, content).is_live_copy
            case Failure() as failure:
                log.warning(
                    "Could not check live copy structure of %s, writing directly: %s",
                    path,
                    failure.message,
                )
                return False

    async def _rollout(
        self,
        path: str,
        data: Mapping[str, Any],
        overrides: Mapping[str, Any],
    ) -> str:
        response = unwrap(
            await self.gateway.rollout(
                path,
                component_data=data or None,
                overrides=overrides or None,
            )
        )
        replication_id = parse_payload(RolloutResponse, response).replication_id
        return replication_id or f"msm_{epoch_millis(self.clock)}"

    async def _standard_write(
        self,
        path: str,
        data: Mapping[str, Any],
        overrides: Mapping[str, Any],
    ) -> str:
        if data:
            unwrap(await self.gateway.post_properties(path, standard_write_fields(data, overrides)))
        return f"std_{epoch_millis(self.clock)}"

    async def _activate_locale(self, path: str) -> None:
        unwrap(await self.gateway.replicate(ReplicationCommand.ACTIVATE, path))

    async def _compensate(self, report: ReplicationReport) -> None:
        """Deactivate what this call published; failures are recorded, never raised."""

        succeeded = [result for result in report.results if result.success]
        log.info("Rolling back %s successful replications", len(succeeded))
        for result in succeeded:
            path = result.path or self.locale_root(normalize_locale(result.locale))
            outcome = await self.gateway.replicate(ReplicationCommand.DEACTIVATE, path)
            match outcome:
                case Success():
                    log.info("Rolled back replication for locale %s", result.locale)
                    report.rollbacks.append(
                        RollbackRecord(locale=result.locale, path=path, success=True)
                    )
                case Failure() as failure:
                    log.error("Failed to roll back locale %s: %s", result.locale, failure.message)
                    report.rollbacks.append(
                        RollbackRecord(
                            locale=result.locale,
                            path=path,
                            success=False,
                            error=failure.message,
                        )
                    )
            result.mark_rolled_back()

    # -- status ---------------------------------------------------------------------

    async def status(self, path: object) -> ReplicationStatus:
        """Tri-state replication status; transport failures become ``error``."""

        target = require_path(path, "contentPath")
        match await self.gateway.read_node(f"{target}/jcr:content"):
            case Success(value=value):
                node = parse_payload(ReplicationNode, value)
                state = (
                    ReplicationState.ACTIVE
                    if node.last_replication_action == ReplicationCommand.ACTIVATE
                    else ReplicationState.INACTIVE
                )
                return ReplicationStatus(
                    content_path=target,
                    status=state,
                    last_replicated=node.last_replicated,
                    last_replicated_by=node.last_replicated_by,
                    last_action=node.last_replication_action,
                )
            case Failure() as failure:
                return ReplicationStatus(
                    content_path=target,
                    status=ReplicationState.ERROR,
                    error=failure.message,
                )
