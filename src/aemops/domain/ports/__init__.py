"""Domain port definitions for adapters."""

from __future__ import annotations

from .content import ComponentUpdater, ContentGateway, ContentReader, ContentWriter
from .replication import ReplicationGateway
from .versions import VersionGateway

__all__ = [
    "ComponentUpdater",
    "ContentGateway",
    "ContentReader",
    "ContentWriter",
    "ReplicationGateway",
    "VersionGateway",
]
