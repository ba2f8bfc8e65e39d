"""
Redis implementation of the store contract.

Uses the asyncio client from redis-py. Connectivity is tracked by a
background probe rather than per request: the health gate reads
``connected`` on every request, so it has to be a plain attribute.

redis-py re-establishes pooled connections on the next command after a
failure, so "reconnecting" here only means probing until a PING succeeds
again.
"""

import asyncio
from typing import Callable, Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from controlplane.errors import StoreUnavailableError
from controlplane.storage.base import StoreBackend
from controlplane.utils.logging import get_logger

logger = get_logger(__name__)


class RedisStore(StoreBackend):
    """
    Key-value store backed by Redis.

    Attributes:
        url: Redis connection URL
        health_interval: Seconds between connectivity probes
        reconnect_attempts: Consecutive failed probes tolerated before the
            fatal callback fires (0 = probe forever)
    """

    def __init__(
        self,
        url: str,
        max_connections: int = 50,
        health_interval: float = 1.0,
        reconnect_attempts: int = 0,
    ):
        self.url = url
        self.health_interval = health_interval
        self.reconnect_attempts = reconnect_attempts
        self._redis: Redis = Redis.from_url(
            url, decode_responses=True, max_connections=max_connections
        )
        self._connected = False
        self._monitor: Optional[asyncio.Task] = None

    @property
    def connected(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        try:
            await self._redis.ping()
        except (RedisError, OSError) as e:
            raise StoreUnavailableError(f"cannot connect to redis at {self.url}: {e}") from e
        self._connected = True
        logger.info("store_connected", url=self.url)

    async def close(self) -> None:
        if self._monitor is not None:
            self._monitor.cancel()
            self._monitor = None
        self._connected = False
        await self._redis.aclose()

    def start_health_monitor(self, on_fatal: Callable[[], None]) -> None:
        """
        Start probing connectivity in the background.

        Args:
            on_fatal: Called once when reconnect attempts are exhausted
        """
        if self._monitor is None:
            self._monitor = asyncio.create_task(self._watch(on_fatal))

    async def _watch(self, on_fatal: Callable[[], None]) -> None:
        failures = 0
        while True:
            await asyncio.sleep(self.health_interval)
            try:
                await self._redis.ping()
            except (RedisError, OSError) as e:
                failures += 1
                self._connected = False
                logger.warning("store_reconnecting", url=self.url, attempt=failures, error=str(e))
                if self.reconnect_attempts and failures >= self.reconnect_attempts:
                    logger.critical("store_reconnect_exhausted", url=self.url, attempts=failures)
                    on_fatal()
                    return
                continue
            if not self._connected:
                logger.info("store_reconnected", url=self.url, attempts=failures)
            failures = 0
            self._connected = True

    # =========================================================================
    # Commands
    # =========================================================================

    async def get(self, key: str) -> Optional[str]:
        return await self._redis.get(key)

    async def set(self, key: str, value: str) -> None:
        await self._redis.set(key, value)

    async def delete(self, key: str) -> int:
        return await self._redis.delete(key)

    async def exists(self, key: str) -> bool:
        return bool(await self._redis.exists(key))

    async def smembers(self, key: str) -> list[str]:
        return list(await self._redis.smembers(key))

    async def sadd(self, key: str, member: str) -> int:
        return await self._redis.sadd(key, member)

    async def srem(self, key: str, member: str) -> int:
        return await self._redis.srem(key, member)

    async def hgetall(self, key: str) -> dict[str, str]:
        return await self._redis.hgetall(key)

    async def hget(self, key: str, field: str) -> Optional[str]:
        return await self._redis.hget(key, field)
