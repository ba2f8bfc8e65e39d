"""
Enumeration types for the control-plane API.

All enums inherit from str or int so they serialise to plain JSON values.
"""

from enum import Enum, IntEnum


class CheckStatus(IntEnum):
    """Exit-code convention for check results."""

    OK = 0
    WARNING = 1
    CRITICAL = 2
    UNKNOWN = 3


class DependencyHealth(str, Enum):
    """Connectivity state reported by ``GET /info``."""

    OK = "ok"
    DOWN = "down"


class DeletionStage(str, Enum):
    """
    Stages of the cascading client deletion workflow.

    FOUND -> RESOLVING_EVENTS -> GRACE_WAIT -> INDEX_CLEANUP -> HISTORY_CLEANUP -> DONE
    """

    FOUND = "found"
    RESOLVING_EVENTS = "resolving_events"
    GRACE_WAIT = "grace_wait"
    INDEX_CLEANUP = "index_cleanup"
    HISTORY_CLEANUP = "history_cleanup"
    DONE = "done"
