"""
Cadence Redis Profile Store

Redis-backed user records shared by several engine processes.

Key Schemas:
    PROFILE:{user_id}       -> UserRecord JSON (profile + history)
    PROFILE_LOCK:{user_id}  -> Redis lock serializing updates of one user
"""

from __future__ import annotations

import json
import logging
import os
from typing import ContextManager, Optional

import redis
from redis.exceptions import RedisError

from cadence.baseline import UserRecord
from .connection import get_redis_client
from .store import ProfileStore


logger = logging.getLogger(__name__)


class RedisProfileStore(ProfileStore):
    """
    Profile store persisting one JSON document per user.

    Per-user serialization uses a Redis lock so that every worker
    sharing the database observes the same critical section.
    """

    LOCK_TIMEOUT: float = 10.0          # seconds a held lock survives a crashed holder
    LOCK_BLOCKING_TIMEOUT: float = 5.0  # seconds to wait before giving up

    def __init__(
        self,
        client: Optional[redis.Redis] = None,
        ttl: Optional[int] = None
    ) -> None:
        super().__init__()
        self.client = client if client is not None else get_redis_client()
        # 0 keeps records until evicted by Redis
        self.ttl = ttl if ttl is not None else int(os.getenv("PROFILE_TTL", 0))

    # -------------------------------------------------------------------------
    # Key Builders
    # -------------------------------------------------------------------------

    def _profile_key(self, user_id: str) -> str:
        return f"PROFILE:{user_id}"

    def _lock_key(self, user_id: str) -> str:
        return f"PROFILE_LOCK:{user_id}"

    # -------------------------------------------------------------------------
    # Record Operations
    # -------------------------------------------------------------------------

    def get(self, user_id: str) -> Optional[UserRecord]:
        try:
            data = self.client.get(self._profile_key(user_id))
        except RedisError as e:
            logger.error(f"Failed to load profile {user_id}: {e}")
            raise

        if data is None:
            return None

        try:
            return UserRecord.from_dict(json.loads(data))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.error(
                f"Corrupted profile record for {user_id}: {e}. "
                f"Profile will be rebuilt from scratch."
            )
            return None

    def put(self, user_id: str, record: UserRecord) -> None:
        payload = json.dumps(record.to_dict())
        try:
            if self.ttl > 0:
                self.client.setex(self._profile_key(user_id), self.ttl, payload)
            else:
                self.client.set(self._profile_key(user_id), payload)
        except RedisError as e:
            logger.error(f"Failed to save profile {user_id}: {e}")
            raise

    def _lock_for(self, user_id: str) -> ContextManager:
        return self.client.lock(
            self._lock_key(user_id),
            timeout=self.LOCK_TIMEOUT,
            blocking_timeout=self.LOCK_BLOCKING_TIMEOUT,
        )
