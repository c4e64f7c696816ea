"""Command vocabulary understood by the AEM servlets.

These names are part of the contract with the remote system.
"""

from __future__ import annotations

from enum import StrEnum


class ReplicationCommand(StrEnum):
    ACTIVATE = "Activate"
    DEACTIVATE = "Deactivate"


class WcmCommand(StrEnum):
    ACTIVATE = "activate"
    DEACTIVATE = "deactivate"


class MsmCommand(StrEnum):
    ROLLOUT = "Rollout"


class VersioningCommand(StrEnum):
    CHECKOUT = "checkout"
    CHECKIN = "checkin"
    CREATE_VERSION = "createVersion"
    RESTORE_VERSION = "restoreVersion"
    DELETE_VERSION = "deleteVersion"


UPDATE_COMMAND = "update"
LOCALIZED_PREFIX = "localized_"
