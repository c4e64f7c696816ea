from __future__ import annotations

from .cache import TtlCache
from .clock import Clock, SystemClock, epoch_millis
from .logging import OperationLog, configure_logging

__all__ = [
    "Clock",
    "OperationLog",
    "SystemClock",
    "TtlCache",
    "configure_logging",
    "epoch_millis",
]
