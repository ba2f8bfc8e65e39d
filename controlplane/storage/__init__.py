"""
Key-value store layer.

All runtime state (clients, events, history, stashes) lives in the shared
store; this process holds none of it. Redis is the production backend.
"""

from .base import StoreBackend
from .redis_store import RedisStore

__all__ = [
    "StoreBackend",
    "RedisStore",
]
