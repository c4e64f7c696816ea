"""Ports for reading and writing content nodes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

    from aemops.domain.components import ComponentUpdateResult
    from aemops.domain.outcome import TransportOutcome


@runtime_checkable
class ContentReader(Protocol):
    async def read_node(self, path: str, *, depth: int | None = None) -> TransportOutcome[Any]:
        """``<path>.json``, optionally limited to ``depth`` levels."""
        ...


@runtime_checkable
class ContentWriter(Protocol):
    async def post_properties(
        self,
        path: str,
        properties: Mapping[str, Any],
    ) -> TransportOutcome[Any]: ...


@runtime_checkable
class ContentGateway(ContentReader, ContentWriter, Protocol):
    """Read and write access to content nodes."""


@runtime_checkable
class ComponentUpdater(Protocol):
    """What the bulk coordinator needs: an existence probe and the single-item update."""

    async def probe(self, path: str) -> TransportOutcome[Any]: ...

    async def update_component(
        self,
        component_path: str,
        properties: Mapping[str, Any],
    ) -> ComponentUpdateResult: ...
