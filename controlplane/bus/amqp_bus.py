"""
RabbitMQ implementation of the message bus using aio-pika.

The channel is opened without publisher confirms, so ``publish`` completes as
soon as the frame is written. Startup queues are declared on connect; other
queues and exchanges are declared lazily with default (non-durable)
arguments. Topology beyond that is provisioned elsewhere.
"""

import json
from typing import Any, Callable, Iterable, Optional

import aio_pika
from aio_pika.abc import AbstractChannel, AbstractConnection, AbstractExchange
from aio_pika.exceptions import AMQPException, ChannelInvalidStateError

from controlplane.bus.base import MessageBus
from controlplane.errors import BusUnavailableError
from controlplane.utils.logging import get_logger

logger = get_logger(__name__)


class AmqpBus(MessageBus):
    """
    Message bus backed by an AMQP broker.

    Attributes:
        url: AMQP connection URL
        declare_queues: Queues declared as soon as the channel opens
    """

    def __init__(self, url: str, declare_queues: Iterable[str] = ()):
        self.url = url
        self._startup_queues = list(declare_queues)
        self._connection: Optional[AbstractConnection] = None
        self._channel: Optional[AbstractChannel] = None
        self._exchanges: dict[str, AbstractExchange] = {}
        self._declared_queues: set[str] = set()
        self._on_disconnect: Optional[Callable[[], None]] = None
        self._closing = False

    @property
    def connected(self) -> bool:
        return self._connection is not None and not self._connection.is_closed

    async def connect(self, on_disconnect: Callable[[], None]) -> None:
        self._on_disconnect = on_disconnect
        try:
            self._connection = await aio_pika.connect(self.url)
            self._channel = await self._connection.channel(publisher_confirms=False)
            for queue in self._startup_queues:
                await self._channel.declare_queue(queue)
                self._declared_queues.add(queue)
        except (AMQPException, OSError) as e:
            raise BusUnavailableError(f"cannot connect to rabbitmq: {e}") from e
        self._connection.close_callbacks.add(self._handle_close)
        logger.info("bus_connected")

    async def close(self) -> None:
        self._closing = True
        if self._connection is not None and not self._connection.is_closed:
            await self._connection.close()

    def _handle_close(self, sender: Any, exc: Optional[BaseException] = None) -> None:
        if self._closing:
            return
        logger.critical("bus_disconnected", error=str(exc) if exc else None)
        if self._on_disconnect is not None:
            self._on_disconnect()

    async def publish_to_queue(self, queue: str, payload: dict[str, Any]) -> None:
        channel = self._require_channel()
        try:
            if queue not in self._declared_queues:
                await channel.declare_queue(queue)
                self._declared_queues.add(queue)
            await channel.default_exchange.publish(self._message(payload), routing_key=queue)
        except (AMQPException, ChannelInvalidStateError, ConnectionError) as e:
            logger.error("publish_failed", queue=queue, error=str(e))

    async def publish_fanout(self, exchange: str, payload: dict[str, Any]) -> None:
        channel = self._require_channel()
        try:
            target = self._exchanges.get(exchange)
            if target is None:
                target = await channel.declare_exchange(exchange, aio_pika.ExchangeType.FANOUT)
                self._exchanges[exchange] = target
            await target.publish(self._message(payload), routing_key="")
        except (AMQPException, ChannelInvalidStateError, ConnectionError) as e:
            logger.error("publish_failed", exchange=exchange, error=str(e))

    def _require_channel(self) -> AbstractChannel:
        if self._channel is None:
            raise BusUnavailableError("bus is not connected")
        return self._channel

    @staticmethod
    def _message(payload: dict[str, Any]) -> aio_pika.Message:
        return aio_pika.Message(
            body=json.dumps(payload).encode("utf-8"),
            content_type="application/json",
        )
