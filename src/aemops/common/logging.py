"""Shared logging helpers for aemops."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Initialise the root logger once with sensible defaults.

    Parameters mirror ``logging.basicConfig`` with a simplified contract: we default
    to INFO level and a terse format suitable for CLI output. Pass ``force=True`` to
    reconfigure during tests or specialised entry points.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))


class OperationLog:
    """Operation lifecycle events on top of a stdlib logger.

    ``extra`` carries the structured fields so handlers that understand them
    (JSON formatters, test capture) can read them without parsing messages.
    """

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def start(self, operation: str, **fields: object) -> None:
        self._logger.info("%s started", operation, extra=_extra(operation, fields))

    def end(self, operation: str, *, duration_ms: float, **fields: object) -> None:
        self._logger.info(
            "%s finished in %.1f ms",
            operation,
            duration_ms,
            extra=_extra(operation, {"duration_ms": duration_ms, **fields}),
        )

    def error(self, operation: str, *, code: str, message: str, **fields: object) -> None:
        self._logger.error(
            "%s failed [%s]: %s",
            operation,
            code,
            message,
            extra=_extra(operation, {"code": code, **fields}),
        )

    def performance(self, operation: str, *, duration_ms: float, **fields: object) -> None:
        self._logger.debug(
            "%s took %.1f ms",
            operation,
            duration_ms,
            extra=_extra(operation, {"duration_ms": duration_ms, **fields}),
        )


def _extra(operation: str, fields: Mapping[str, object]) -> dict[str, object]:
    return {"operation": operation, "fields": dict(fields)}
