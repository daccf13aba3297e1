"""
Cadence Profile Store

Key-value storage of per-user behavioral records with per-user serialization.

Every read-modify-write of one user id runs inside transaction(), which holds
that user's lock for the whole load-mutate-save cycle. Different users never
contend on a shared lock; a short structural lock only guards creation of a
per-user lock.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from contextlib import contextmanager
from typing import ContextManager, Dict, Iterator, Optional

from cadence.baseline import BehavioralProfile, UserRecord


logger = logging.getLogger(__name__)


class ProfileStore:
    """
    Base class for user record storage.

    Backends implement get/put and may override _lock_for() when the
    lock must be shared beyond one process.
    """

    def __init__(self) -> None:
        self._locks: Dict[str, threading.Lock] = defaultdict(threading.Lock)
        self._lock_guard = threading.Lock()  # Protects _locks itself

    def get(self, user_id: str) -> Optional[UserRecord]:
        """Return a detached copy of the user's record, or None."""
        raise NotImplementedError

    def put(self, user_id: str, record: UserRecord) -> None:
        raise NotImplementedError

    def _lock_for(self, user_id: str) -> ContextManager:
        """Get or create the per-user lock."""
        with self._lock_guard:
            return self._locks[user_id]

    @contextmanager
    def transaction(self, user_id: str, now: float) -> Iterator[UserRecord]:
        """
        Serialized read-modify-write of one user's record.

        Creates a cold-start profile when the user is unknown. The record
        is written back only if the block exits cleanly.

        Args:
            user_id: User identifier
            now: Current time (epoch ms), used for cold-start creation
        """
        with self._lock_for(user_id):
            record = self.get(user_id)
            if record is None:
                logger.info(f"Creating behavioral profile for {user_id}")
                record = UserRecord(profile=BehavioralProfile.new(user_id, now))

            yield record

            self.put(user_id, record)


class InMemoryProfileStore(ProfileStore):
    """Process-local store. Records live for the lifetime of the process."""

    def __init__(self) -> None:
        super().__init__()
        self._store: Dict[str, UserRecord] = {}
        self._store_lock = threading.Lock()

    def get(self, user_id: str) -> Optional[UserRecord]:
        with self._store_lock:
            record = self._store.get(user_id)
        # Stored records are replaced on put, never mutated in place
        return record.copy() if record is not None else None

    def put(self, user_id: str, record: UserRecord) -> None:
        snapshot = record.copy()
        with self._store_lock:
            self._store[user_id] = snapshot

    def __len__(self) -> int:
        with self._store_lock:
            return len(self._store)
