"""AEM implementation of the content, replication and versioning ports."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from aemops.domain.commands import MsmCommand

from . import wire

if TYPE_CHECKING:
    from collections.abc import Mapping

    from aemops.domain.commands import ReplicationCommand, VersioningCommand, WcmCommand
    from aemops.domain.outcome import TransportOutcome

    from .transport import AemTransport


class AemGateway:
    def __init__(self, transport: AemTransport) -> None:
        self._transport = transport

    async def read_node(self, path: str, *, depth: int | None = None) -> TransportOutcome[Any]:
        return await self._transport.get_json(
            wire.node_url(path),
            params=wire.depth_params(depth),
        )

    async def post_properties(
        self,
        path: str,
        properties: Mapping[str, Any],
    ) -> TransportOutcome[Any]:
        return await self._transport.post_form(path, wire.encode_properties(properties))

    async def replicate(
        self,
        command: ReplicationCommand,
        path: str,
        *,
        deep: bool = False,
    ) -> TransportOutcome[Any]:
        return await self._transport.post_form(
            wire.REPLICATE_ENDPOINT,
            wire.replication_form(command, path, deep=deep),
        )

    async def wcm_command(self, command: WcmCommand, path: str) -> TransportOutcome[Any]:
        return await self._transport.post_json(
            wire.WCM_COMMAND_ENDPOINT,
            wire.wcm_command_body(command, path),
        )

    async def rollout(
        self,
        path: str,
        *,
        component_data: Mapping[str, Any] | None,
        overrides: Mapping[str, Any] | None,
    ) -> TransportOutcome[Any]:
        return await self._transport.post_form(
            wire.ROLLOUT_ENDPOINT,
            wire.rollout_form(
                MsmCommand.ROLLOUT.value,
                path,
                component_data=component_data,
                overrides=overrides,
            ),
        )

    async def read_version_history(self, path: str) -> TransportOutcome[Any]:
        return await self._transport.get_json(
            wire.version_history_url(path),
            params=wire.depth_params(wire.HISTORY_DEPTH),
        )

    async def read_version(self, path: str, version_name: str) -> TransportOutcome[Any]:
        return await self._transport.get_json(
            wire.version_url(path, version_name),
            params=wire.depth_params(wire.SNAPSHOT_DEPTH),
        )

    async def versioning_command(
        self,
        command: VersioningCommand,
        path: str,
        **fields: str,
    ) -> TransportOutcome[Any]:
        return await self._transport.post_form(
            wire.versioning_url(command),
            wire.versioning_form(command, path, fields),
        )

    async def check_login_page(self) -> TransportOutcome[Any]:
        return await self._transport.get_json(wire.LOGIN_PAGE)

