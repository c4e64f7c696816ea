"""Application entry points: build a connector from configuration and run a method."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING, Any

from aemops.adapters.aem.connector import AemConnector
from aemops.config import get_aem_config
from aemops.dispatch import MethodRegistry, describe_methods

if TYPE_CHECKING:
    from collections.abc import Mapping

    from aemops.adapters.aem.connector import ClientFactory
    from aemops.config import AemConfig
    from aemops.dispatch import MethodInfo

log = getLogger(__name__)


def build_connector(
    config: AemConfig | None = None,
    *,
    client_factory: ClientFactory | None = None,
) -> AemConnector:
    effective_config = config or get_aem_config()
    if client_factory is None:
        return AemConnector(effective_config)
    return AemConnector(effective_config, client_factory=client_factory)


async def run_method_async(
    method: str,
    params: Mapping[str, Any] | None = None,
    *,
    config: AemConfig | None = None,
    client_factory: ClientFactory | None = None,
) -> dict[str, Any]:
    async with build_connector(config, client_factory=client_factory) as connector:
        return await MethodRegistry(connector).call(method, params)


def run_method(
    method: str,
    params: Mapping[str, Any] | None = None,
    *,
    config: AemConfig | None = None,
    client_factory: ClientFactory | None = None,
) -> dict[str, Any]:
    """Run one method to completion and return its envelope in wire form."""

    log.info("Running %s", method)
    result = asyncio.run(
        run_method_async(method, params, config=config, client_factory=client_factory)
    )
    log.info("Finished %s: success=%s", method, result["success"])
    return result


def list_methods() -> list[MethodInfo]:
    return describe_methods()
