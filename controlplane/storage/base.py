"""
Abstract store interface for the control-plane API.

Every handler talks to the shared key-value store through this contract so
that the Redis implementation can be swapped for an in-memory double in
tests. All operations are coroutines; none of them may block the event loop.

Operations mirror the primitive key-value commands the control plane needs:
plain values, set membership and hash fields. Each operation is individually
atomic; no transactions are offered, so callers must keep repeated writes
and deletes idempotent.
"""

from abc import ABC, abstractmethod
from typing import Optional


class StoreBackend(ABC):
    """
    Abstract base class for key-value store implementations.

    Implementations must expose a cheap ``connected`` flag that the health
    gate can read on every request without a round trip.
    """

    @property
    @abstractmethod
    def connected(self) -> bool:
        """Whether the store is currently reachable."""

    # =========================================================================
    # Plain values
    # =========================================================================

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """
        Read a string value.

        Args:
            key: Store key

        Returns:
            Stored value, or None when the key does not exist
        """

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Write a string value, replacing any previous value."""

    @abstractmethod
    async def delete(self, key: str) -> int:
        """
        Delete a key of any type.

        Deleting a missing key is not an error.

        Returns:
            Number of keys removed (0 or 1)
        """

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check whether a key exists."""

    # =========================================================================
    # Sets
    # =========================================================================

    @abstractmethod
    async def smembers(self, key: str) -> list[str]:
        """Return all members of a set (empty list when the set is missing)."""

    @abstractmethod
    async def sadd(self, key: str, member: str) -> int:
        """Add a member to a set. Returns 1 if it was newly added."""

    @abstractmethod
    async def srem(self, key: str, member: str) -> int:
        """Remove a member from a set. Returns 1 if it was present."""

    # =========================================================================
    # Hashes
    # =========================================================================

    @abstractmethod
    async def hgetall(self, key: str) -> dict[str, str]:
        """Return all fields of a hash (empty dict when the hash is missing)."""

    @abstractmethod
    async def hget(self, key: str, field: str) -> Optional[str]:
        """Return one field of a hash, or None when absent."""

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @abstractmethod
    async def connect(self) -> None:
        """
        Establish the connection.

        Raises:
            StoreUnavailableError: If the store cannot be reached
        """

    @abstractmethod
    async def close(self) -> None:
        """Release the connection."""
