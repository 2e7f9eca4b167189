from __future__ import annotations

from enum import Enum


class CloudStatus(str, Enum):
    """State of the remote bin link shown as the sync indicator."""

    DISCONNECTED = "disconnected"
    IDLE = "idle"
    SYNCING = "syncing"
    ERROR = "error"


class ChangeOrigin(str, Enum):
    """Where a state change came from."""

    LOCAL = "local"
    REMOTE = "remote"


class Collection(str, Enum):
    """The three persisted collections, named by their storage keys."""

    SESSIONS = "sessions"
    GROUPS = "groups"
    STUDENTS = "students"
