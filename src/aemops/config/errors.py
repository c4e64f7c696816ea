"""Errors raised while loading AEM connection settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


class ConfigurationError(RuntimeError):
    """Raised when AEM settings are invalid.

    ``problems`` holds one entry per failed check, so a single run reports
    every bad setting at once.
    """

    def __init__(self, message: str, problems: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.problems = tuple(problems)


class MissingConfigurationError(ConfigurationError):
    """Raised when required variables such as ``AEM_SERVICE_USER`` are absent or blank."""

    def __init__(self, names: Iterable[str]) -> None:
        self.names = tuple(sorted(names))
        super().__init__(f"Missing configuration for: {', '.join(self.names)}", self.names)
