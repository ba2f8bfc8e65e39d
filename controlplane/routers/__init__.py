"""API routers for all endpoints."""

from controlplane.routers import (
    checks,
    clients,
    events,
    requests,
    stashes,
    system,
)

__all__ = [
    "system",
    "clients",
    "checks",
    "requests",
    "events",
    "stashes",
]
