"""
Abstract message bus interface.

Publication is fire-and-forget: implementations hand the message to the
broker and return without waiting for an acknowledgement, and a failed
publish is logged rather than retried or raised.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable


class MessageBus(ABC):
    """Abstract base class for message bus implementations."""

    @property
    @abstractmethod
    def connected(self) -> bool:
        """Whether the bus connection is open."""

    @abstractmethod
    async def publish_to_queue(self, queue: str, payload: dict[str, Any]) -> None:
        """
        Publish a JSON payload to a named queue.

        Args:
            queue: Queue name (routed through the default exchange)
            payload: JSON-serialisable message body
        """

    @abstractmethod
    async def publish_fanout(self, exchange: str, payload: dict[str, Any]) -> None:
        """
        Publish a JSON payload to a fanout exchange.

        Args:
            exchange: Exchange name; one per subscriber channel
            payload: JSON-serialisable message body
        """

    @abstractmethod
    async def connect(self, on_disconnect: Callable[[], None]) -> None:
        """
        Open the connection.

        Args:
            on_disconnect: Called if the connection drops unexpectedly

        Raises:
            BusUnavailableError: If the broker cannot be reached
        """

    @abstractmethod
    async def close(self) -> None:
        """Close the connection without triggering ``on_disconnect``."""
