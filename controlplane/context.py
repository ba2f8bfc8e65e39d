"""
Dependency bundle shared by every request handler.

Built once during application startup and attached to ``app.state``;
handlers receive it through the ``get_context`` dependency instead of
reaching for module-level singletons.
"""

from dataclasses import dataclass, field

from fastapi import Request

from controlplane import __version__
from controlplane.bus.base import MessageBus
from controlplane.checks import CheckRegistry
from controlplane.config import Settings
from controlplane.engine.deletion import ClientDeletionWorkflow
from controlplane.storage.base import StoreBackend


@dataclass
class AppContext:
    """Process-wide dependencies: settings, store, bus, checks, deletion workflow."""

    settings: Settings
    store: StoreBackend
    bus: MessageBus
    checks: CheckRegistry
    deletions: ClientDeletionWorkflow = field(init=False)
    version: str = __version__

    def __post_init__(self) -> None:
        self.deletions = ClientDeletionWorkflow(
            self.store,
            self.bus,
            grace_period=self.settings.client_grace_period_seconds,
            results_queue=self.settings.results_queue,
        )


def get_context(request: Request) -> AppContext:
    """FastAPI dependency returning the application's ``AppContext``."""
    return request.app.state.context
