"""
Event Resolution Protocol.

Resolving an event never touches the event record. Instead a synthetic OK
check result flagged ``force_resolve`` is published to the results queue,
and the result processor clears the event when it consumes it. Callers
therefore answer 202 rather than 200.
"""

from controlplane.bus.base import MessageBus
from controlplane.models.messages import ResolutionCheck, ResolutionPayload
from controlplane.storage import keys
from controlplane.storage.base import StoreBackend
from controlplane.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_RESULTS_QUEUE = "results"


async def event_is_open(store: StoreBackend, client_name: str, check_name: str) -> bool:
    """Whether ``check_name`` currently has an event recorded for ``client_name``."""
    return await store.hget(keys.events_key(client_name), check_name) is not None


async def resolve_event(
    bus: MessageBus,
    client_name: str,
    check_name: str,
    queue: str = DEFAULT_RESULTS_QUEUE,
) -> ResolutionPayload:
    """
    Publish exactly one resolution message for an open event.

    The caller must already have confirmed the event is open. The publish is
    fire-and-forget: no acknowledgement is awaited and failures are not
    retried.

    Args:
        bus: Message bus
        client_name: Client owning the event
        check_name: Check to resolve
        queue: Results queue name

    Returns:
        The payload that was published
    """
    payload = ResolutionPayload(client=client_name, check=ResolutionCheck(name=check_name))
    body = payload.model_dump()
    logger.info("check_result_publishing", payload=body)
    await bus.publish_to_queue(queue, body)
    return payload
