"""
Cadence Persistence Layer

Public exports for profile stores and the Redis connection.
"""

from .connection import get_redis_client
from .store import ProfileStore, InMemoryProfileStore
from .redis_store import RedisProfileStore

__all__ = [
    "get_redis_client",
    "ProfileStore",
    "InMemoryProfileStore",
    "RedisProfileStore",
]
