"""Message bus layer (check requests and check results)."""

from .amqp_bus import AmqpBus
from .base import MessageBus

__all__ = ["AmqpBus", "MessageBus"]
