"""
Control-plane orchestration engine.

Modules:
    - fanin: concurrent store reads joined into one result
    - resolution: event resolution by synthetic check result
    - deletion: cascading, grace-delayed client removal
"""

from controlplane.engine.deletion import ClientDeletionWorkflow
from controlplane.engine.fanin import FanIn, fan_in
from controlplane.engine.resolution import event_is_open, resolve_event

__all__ = [
    "ClientDeletionWorkflow",
    "FanIn",
    "event_is_open",
    "fan_in",
    "resolve_event",
]
