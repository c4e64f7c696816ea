"""Port for replication, live-copy rollout and content writes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from .content import ContentGateway

if TYPE_CHECKING:
    from collections.abc import Mapping

    from aemops.domain.commands import ReplicationCommand, WcmCommand
    from aemops.domain.outcome import TransportOutcome


@runtime_checkable
class ReplicationGateway(ContentGateway, Protocol):
    async def replicate(
        self,
        command: ReplicationCommand,
        path: str,
        *,
        deep: bool = False,
    ) -> TransportOutcome[Any]: ...

    async def wcm_command(self, command: WcmCommand, path: str) -> TransportOutcome[Any]: ...

    async def rollout(
        self,
        path: str,
        *,
        component_data: Mapping[str, Any] | None,
        overrides: Mapping[str, Any] | None,
    ) -> TransportOutcome[Any]: ...
