"""Public operations against one author instance.

Every method runs through the retry engine and returns the canonical
envelope on success. Failures surface as :class:`ClassifiedError`; the
dispatch layer turns those into error envelopes.
"""

from __future__ import annotations

import asyncio
import time
from datetime import timedelta
from logging import getLogger
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict

from aemops.adapters.http_resilience import ResilientClient
from aemops.common.cache import TtlCache
from aemops.common.clock import SystemClock
from aemops.common.logging import OperationLog
from aemops.domain.bulk_update import BulkMutationCoordinator, parse_updates
from aemops.domain.components import ComponentService
from aemops.domain.errors import ClassifiedError
from aemops.domain.outcome import Failure, Success
from aemops.domain.replication import ReplicationOrchestrator
from aemops.domain.results import BulkPolicy
from aemops.domain.retry import execute
from aemops.domain.templates import TemplateCatalog, TemplateMetadata
from aemops.domain.version_service import VersionService

from .gateway import AemGateway
from .transport import AemTransport

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from types import TracebackType

    from aemops.common.clock import Clock
    from aemops.config.aem import AemConfig
    from aemops.config.http_resilience import ResilienceConfig
    from aemops.domain.envelope import OperationEnvelope
    from aemops.domain.retry import Sleep

log = getLogger(__name__)

type ClientFactory = Callable[[ResilienceConfig], ResilientClient]


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


class ConnectionCheck(BaseModel):
    model_config = ConfigDict(frozen=True)

    connected: bool
    host: str
    status_code: int | None = None
    error: str | None = None


class AemConnector:
    def __init__(
        self,
        config: AemConfig,
        *,
        client_factory: ClientFactory = _default_client_factory,
        clock: Clock | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.config = config
        self._clock = clock or SystemClock()
        self._sleep = sleep
        self._events = OperationLog(log)
        self._client = client_factory(config.resilience())
        self._gateway = AemGateway(AemTransport(self._client))

        roots = config.content_roots.all()
        self.components = ComponentService(
            gateway=self._gateway,
            content_roots=roots,
            allowed_components=config.allowed_component_types,
            allowed_locales=config.allowed_locales,
            clock=self._clock,
        )
        self.bulk = BulkMutationCoordinator(updater=self.components)
        self.replication = ReplicationOrchestrator(
            gateway=self._gateway,
            locale_root=config.locale_root,
            content_roots=roots,
            strict=config.strict_replication,
            clock=self._clock,
        )
        self.versions = VersionService(
            gateway=self._gateway,
            content_roots=roots,
            actor=config.credentials.username,
            clock=self._clock,
        )
        self.templates = TemplateCatalog(
            reader=self._gateway,
            cache=TtlCache[str, TemplateMetadata](
                timedelta(seconds=config.template_cache_ttl_seconds),
                clock=self._clock,
            ),
        )

    async def __aenter__(self) -> AemConnector:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _run[T](
        self,
        operation: str,
        unit_of_work: Callable[[], Awaitable[T]],
        **fields: object,
    ) -> OperationEnvelope:
        self._events.start(operation, **fields)
        started = time.perf_counter()
        try:
            envelope = await execute(
                unit_of_work,
                operation,
                clock=self._clock,
                max_retries=self.config.max_retries,
                base_delay=self.config.retry_base_delay_seconds,
                sleep=self._sleep,
            )
        except ClassifiedError as error:
            self._events.error(operation, code=error.code.value, message=error.message)
            raise
        duration_ms = (time.perf_counter() - started) * 1000
        self._events.end(operation, duration_ms=duration_ms)
        self._events.performance(operation, duration_ms=duration_ms, **fields)
        return envelope

    # Replication

    async def activate_page(
        self, page_path: Any, *, activate_tree: bool = False
    ) -> OperationEnvelope:
        return await self._run(
            "activatePage",
            lambda: self.replication.activate_page(page_path, tree=activate_tree),
            path=page_path,
        )

    async def deactivate_page(
        self, page_path: Any, *, deactivate_tree: bool = False
    ) -> OperationEnvelope:
        return await self._run(
            "deactivatePage",
            lambda: self.replication.deactivate_page(page_path, tree=deactivate_tree),
            path=page_path,
        )

    async def unpublish_content(
        self, content_paths: Any, *, unpublish_tree: bool = False
    ) -> OperationEnvelope:
        return await self._run(
            "unpublishContent",
            lambda: self.replication.unpublish(content_paths, tree=unpublish_tree),
        )

    async def bulk_activate_pages(
        self, page_paths: Any, *, activate_tree: bool = False
    ) -> OperationEnvelope:
        return await self._run(
            "bulkActivatePages",
            lambda: self.replication.bulk_activate(page_paths, tree=activate_tree),
        )

    async def bulk_deactivate_pages(
        self, page_paths: Any, *, deactivate_tree: bool = False
    ) -> OperationEnvelope:
        return await self._run(
            "bulkDeactivatePages",
            lambda: self.replication.bulk_deactivate(page_paths, tree=deactivate_tree),
        )

    async def replicate_and_publish(
        self,
        selected_locales: Any,
        component_data: Any,
        localized_overrides: Any = None,
    ) -> OperationEnvelope:
        return await self._run(
            "replicateAndPublish",
            lambda: self.replication.replicate(
                selected_locales, component_data, localized_overrides
            ),
            locales=selected_locales,
        )

    async def get_replication_status(self, content_path: Any) -> OperationEnvelope:
        return await self._run(
            "getReplicationStatus",
            lambda: self.replication.status(content_path),
            path=content_path,
        )

    # Components

    async def update_component(self, component_path: Any, properties: Any) -> OperationEnvelope:
        return await self._run(
            "updateComponent",
            lambda: self.components.update_component(component_path, properties),
            path=component_path,
        )

    async def validate_component(
        self,
        *,
        locale: Any,
        page_path: Any,
        component: Any,
        props: Any,
    ) -> OperationEnvelope:
        return await self._run(
            "validateComponent",
            lambda: self.components.validate_component(
                locale=locale,
                page_path=page_path,
                component=component,
                props=props,
            ),
            path=page_path,
        )

    async def bulk_update_components(
        self,
        updates: Any,
        *,
        validate_first: bool = True,
        continue_on_error: bool = False,
    ) -> OperationEnvelope:
        policy = BulkPolicy.from_flags(
            validate_first=validate_first,
            continue_on_error=continue_on_error,
        )

        async def unit_of_work() -> Any:
            parsed = parse_updates(updates, self.components.content_roots)
            return await self.bulk.run(parsed, policy)

        return await self._run("bulkUpdateComponents", unit_of_work, policy=policy.value)

    # Versions

    async def get_version_history(self, path: Any) -> OperationEnvelope:
        return await self._run(
            "getVersionHistory",
            lambda: self.versions.history(path),
            path=path,
        )

    async def compare_versions(self, path: Any, version1: Any, version2: Any) -> OperationEnvelope:
        return await self._run(
            "compareVersions",
            lambda: self.versions.compare(path, version1, version2),
            path=path,
        )

    async def create_version(
        self, path: Any, label: Any = None, comment: Any = None
    ) -> OperationEnvelope:
        return await self._run(
            "createVersion",
            lambda: self.versions.create(path, label, comment),
            path=path,
        )

    async def restore_version(self, path: Any, version_name: Any) -> OperationEnvelope:
        return await self._run(
            "restoreVersion",
            lambda: self.versions.restore(path, version_name),
            path=path,
        )

    async def delete_version(self, path: Any, version_name: Any) -> OperationEnvelope:
        return await self._run(
            "deleteVersion",
            lambda: self.versions.delete(path, version_name),
            path=path,
        )

    # Templates

    async def get_template_metadata(
        self, template_path: Any, *, use_cache: bool = True
    ) -> OperationEnvelope:
        return await self._run(
            "getTemplateMetadata",
            lambda: self.templates.metadata(template_path, use_cache=use_cache),
            path=template_path,
        )

    async def clear_template_cache(self) -> OperationEnvelope:
        async def unit_of_work() -> dict[str, str]:
            self.templates.clear_cache()
            return {"message": "Template cache cleared"}

        return await self._run("clearTemplateCache", unit_of_work)

    # Connectivity

    async def test_connection(self) -> OperationEnvelope:
        """Reachability check; any answer below 500 counts as connected."""

        async def unit_of_work() -> ConnectionCheck:
            outcome = await self._gateway.check_login_page()
            match outcome:
                case Success(status_code=status):
                    return ConnectionCheck(
                        connected=True, host=self.config.host, status_code=status
                    )
                case Failure(status_code=int(status)) if status < 500:
                    return ConnectionCheck(
                        connected=True, host=self.config.host, status_code=status
                    )
                case Failure() as failure:
                    log.error("AEM connection failed: %s", failure.message)
                    return ConnectionCheck(
                        connected=False,
                        host=self.config.host,
                        status_code=failure.status_code,
                        error=failure.message,
                    )

        return await self._run("testConnection", unit_of_work)
