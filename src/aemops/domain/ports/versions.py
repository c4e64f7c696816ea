"""Port for the JCR versioning endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from aemops.domain.commands import VersioningCommand
    from aemops.domain.outcome import TransportOutcome


@runtime_checkable
class VersionGateway(Protocol):
    async def read_version_history(self, path: str) -> TransportOutcome[Any]: ...

    async def read_version(self, path: str, version_name: str) -> TransportOutcome[Any]: ...

    async def versioning_command(
        self,
        command: VersioningCommand,
        path: str,
        **fields: str,
    ) -> TransportOutcome[Any]: ...
