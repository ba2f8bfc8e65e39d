"""
Cascading Deletion Workflow - two-phase client removal.

Removing a client first resolves each of its open events, then waits a
grace period before deleting the client's indices and history. The delay
gives the result processor a window in which the event records it must
resolve against still exist.

Stages:
    FOUND            client record read; missing client stops here
    RESOLVING_EVENTS one resolution message per open check, no fan-in wait
    GRACE_WAIT       deferred task scheduled; the caller is answered here
    INDEX_CLEANUP    SREM clients, DEL events:<name>, DEL client:<name>
    HISTORY_CLEANUP  DEL history:<name>:<check> for each check, DEL history:<name>
    DONE

A second delete inside the grace window schedules a second, independent
cleanup. Every step is an idempotent delete, so the later pass is a no-op.
Reads during the grace window still observe the client.

Version: client_deletion_v1
"""

import asyncio
import json
from functools import partial
from typing import Optional

from controlplane.bus.base import MessageBus
from controlplane.engine.fanin import fan_in
from controlplane.engine.resolution import DEFAULT_RESULTS_QUEUE, resolve_event
from controlplane.models.enums import DeletionStage
from controlplane.storage import keys
from controlplane.storage.base import StoreBackend
from controlplane.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_GRACE_PERIOD_SECONDS = 5.0


class ClientDeletionWorkflow:
    """
    Orchestrates client deletion and tracks the deferred cleanups.

    Attributes:
        store: Key-value store
        bus: Message bus for resolution messages
        grace_period: Seconds between resolving events and removing keys
        results_queue: Queue resolution messages are published to

    Example:
        >>> workflow = ClientDeletionWorkflow(store, bus)
        >>> if await workflow.delete_client("web-01"):
        ...     return Response(status_code=202)
    """

    def __init__(
        self,
        store: StoreBackend,
        bus: MessageBus,
        grace_period: float = DEFAULT_GRACE_PERIOD_SECONDS,
        results_queue: str = DEFAULT_RESULTS_QUEUE,
    ):
        self.store = store
        self.bus = bus
        self.grace_period = grace_period
        self.results_queue = results_queue
        self._pending: dict[str, list[asyncio.Task]] = {}

    async def delete_client(self, client_name: str) -> bool:
        """
        Resolve a client's events and schedule removal of its keys.

        Returns as soon as the resolutions are published and the cleanup is
        scheduled; the keys are removed after ``grace_period``.

        Args:
            client_name: Client to remove

        Returns:
            False if the client does not exist, True once deletion is under way
        """
        client_json = await self.store.get(keys.client_key(client_name))
        if client_json is None:
            return False

        logger.info(
            "client_deleting",
            client=json.loads(client_json),
            stage=DeletionStage.FOUND.value,
        )

        events = await self.store.hgetall(keys.events_key(client_name))
        self._log_stage(client_name, DeletionStage.RESOLVING_EVENTS, checks=sorted(events))
        for check_name in events:
            await resolve_event(self.bus, client_name, check_name, queue=self.results_queue)

        task = asyncio.create_task(self._cleanup_after_grace(client_name))
        self._pending.setdefault(client_name, []).append(task)
        task.add_done_callback(partial(self._forget, client_name))
        self._log_stage(client_name, DeletionStage.GRACE_WAIT, delay=self.grace_period)
        return True

    async def _cleanup_after_grace(self, client_name: str) -> None:
        await asyncio.sleep(self.grace_period)

        self._log_stage(client_name, DeletionStage.INDEX_CLEANUP)
        await self.store.srem(keys.CLIENTS, client_name)
        await self.store.delete(keys.events_key(client_name))
        await self.store.delete(keys.client_key(client_name))

        self._log_stage(client_name, DeletionStage.HISTORY_CLEANUP)
        history_key = keys.history_key(client_name)
        checks = await self.store.smembers(history_key)
        await fan_in(
            self.store.delete(keys.check_history_key(client_name, check_name))
            for check_name in checks
        )
        await self.store.delete(history_key)

        self._log_stage(client_name, DeletionStage.DONE)

    def _forget(self, client_name: str, task: asyncio.Task) -> None:
        tasks = self._pending.get(client_name)
        if tasks is not None:
            if task in tasks:
                tasks.remove(task)
            if not tasks:
                del self._pending[client_name]
        if not task.cancelled() and task.exception() is not None:
            logger.error(
                "client_cleanup_failed",
                client=client_name,
                exc_info=task.exception(),
            )

    @staticmethod
    def _log_stage(client_name: str, stage: DeletionStage, **context) -> None:
        logger.info("client_deletion_stage", client=client_name, stage=stage.value, **context)

    def pending(self, client_name: Optional[str] = None) -> int:
        """Number of scheduled cleanups, for one client or overall."""
        if client_name is not None:
            return len(self._pending.get(client_name, []))
        return sum(len(tasks) for tasks in self._pending.values())

    async def drain(self) -> None:
        """Wait for every scheduled cleanup to finish."""
        tasks = [task for group in self._pending.values() for task in group]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def cancel_all(self) -> None:
        """Cancel every scheduled cleanup (used on shutdown)."""
        for group in list(self._pending.values()):
            for task in list(group):
                task.cancel()
