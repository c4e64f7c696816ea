"""Orchestrated content operations against an AEM authoring instance."""

from __future__ import annotations

__version__ = "0.1.0"
