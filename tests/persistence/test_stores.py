"""
Profile Store Tests

Tests for the in-memory and Redis profile stores: record isolation,
transactional write-back and per-user locking.
"""

import json
import threading
from unittest.mock import MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from cadence.baseline import BehavioralProfile, UserRecord, update_baseline
from cadence.schemas.inputs import Channel, TelemetryPayload
from persistence.redis_store import RedisProfileStore
from persistence.store import InMemoryProfileStore

from tests.conftest import DictRedis, make_keystrokes, make_pointer_path


NOW = 1_700_000_000_000.0
USER = "usr_store"


def trained_record(user_id: str = USER) -> UserRecord:
    profile = BehavioralProfile.new(user_id, NOW)
    update_baseline(profile, TelemetryPayload(
        keystroke=make_keystrokes(),
        pointer=make_pointer_path(click_every=2),
    ), NOW)
    return UserRecord(profile=profile)


# =============================================================================
# In-Memory Store
# =============================================================================

class TestInMemoryStore:

    def test_unknown_user(self, memory_store):
        assert memory_store.get(USER) is None

    def test_get_returns_detached_copy(self, memory_store):
        memory_store.put(USER, trained_record())

        loaded = memory_store.get(USER)
        loaded.profile.total_sessions = 99

        assert memory_store.get(USER).profile.total_sessions == 1

    def test_transaction_creates_and_saves(self, memory_store):
        with memory_store.transaction(USER, NOW) as record:
            assert record.profile.total_sessions == 0
            record.profile.total_sessions = 1

        saved = memory_store.get(USER)
        assert saved.profile.total_sessions == 1
        assert saved.profile.created_at == NOW
        assert len(memory_store) == 1

    def test_failed_transaction_discards_changes(self, memory_store):
        memory_store.put(USER, trained_record())

        with pytest.raises(RuntimeError):
            with memory_store.transaction(USER, NOW) as record:
                record.profile.total_sessions = 42
                raise RuntimeError("boom")

        assert memory_store.get(USER).profile.total_sessions == 1

    def test_lock_per_user(self, memory_store):
        assert memory_store._lock_for("a") is memory_store._lock_for("a")
        assert memory_store._lock_for("a") is not memory_store._lock_for("b")

    def test_copies_made_outside_store_lock(self, memory_store, monkeypatch):
        original_copy = UserRecord.copy
        lock_held = []

        def tracking_copy(record):
            lock_held.append(memory_store._store_lock.locked())
            return original_copy(record)

        monkeypatch.setattr(UserRecord, "copy", tracking_copy)
        memory_store.put(USER, trained_record())
        memory_store.get(USER)

        assert lock_held == [False, False]

    def test_transactions_serialize(self, memory_store):
        def worker():
            for _ in range(25):
                with memory_store.transaction(USER, NOW) as record:
                    record.profile.total_sessions += 1

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert memory_store.get(USER).profile.total_sessions == 100


# =============================================================================
# Redis Store (fake client)
# =============================================================================

class TestRedisStore:

    @pytest.fixture
    def fake_redis(self):
        return DictRedis()

    def test_round_trip(self, fake_redis):
        store = RedisProfileStore(client=fake_redis, ttl=0)
        record = trained_record()

        store.put(USER, record)
        loaded = store.get(USER)

        assert f"PROFILE:{USER}" in fake_redis.data
        assert loaded.profile.total_sessions == 1
        assert loaded.profile.baseline_values(Channel.POINTER) == \
            record.profile.baseline_values(Channel.POINTER)
        assert fake_redis.expiries == {}

    def test_ttl_uses_setex(self, fake_redis):
        store = RedisProfileStore(client=fake_redis, ttl=3600)
        store.put(USER, trained_record())

        assert fake_redis.expiries[f"PROFILE:{USER}"] == 3600

    def test_corrupt_record_treated_as_missing(self, fake_redis):
        fake_redis.data[f"PROFILE:{USER}"] = "{not json"
        store = RedisProfileStore(client=fake_redis, ttl=0)

        assert store.get(USER) is None

    @pytest.mark.parametrize("document", [
        '{"profile": [], "history": []}',
        '[1, 2, 3]',
        '"just a string"',
    ])
    def test_misshapen_record_treated_as_missing(self, fake_redis, document):
        fake_redis.data[f"PROFILE:{USER}"] = document
        store = RedisProfileStore(client=fake_redis, ttl=0)

        assert store.get(USER) is None

    def test_transaction_persists_json(self, fake_redis):
        store = RedisProfileStore(client=fake_redis, ttl=0)

        with store.transaction(USER, NOW) as record:
            update_baseline(record.profile, TelemetryPayload(keystroke=make_keystrokes()), NOW)

        raw = json.loads(fake_redis.data[f"PROFILE:{USER}"])
        assert raw["profile"]["total_sessions"] == 1
        assert raw["history"] == []

    def test_redis_errors_propagate(self):
        client = MagicMock()
        client.get.side_effect = RedisConnectionError("down")
        store = RedisProfileStore(client=client, ttl=0)

        with pytest.raises(RedisConnectionError):
            store.get(USER)

    def test_uses_redis_lock(self):
        client = MagicMock()
        store = RedisProfileStore(client=client, ttl=0)

        store._lock_for(USER)

        client.lock.assert_called_once_with(
            f"PROFILE_LOCK:{USER}",
            timeout=RedisProfileStore.LOCK_TIMEOUT,
            blocking_timeout=RedisProfileStore.LOCK_BLOCKING_TIMEOUT,
        )


# =============================================================================
# Redis Store (live server)
# =============================================================================

class TestRedisStoreLive:

    def test_transaction_round_trip(self, clean_redis):
        store = RedisProfileStore(client=clean_redis, ttl=60)

        with store.transaction(USER, NOW) as record:
            update_baseline(record.profile, TelemetryPayload(keystroke=make_keystrokes()), NOW)

        loaded = store.get(USER)
        assert loaded.profile.total_sessions == 1
        assert clean_redis.ttl(f"PROFILE:{USER}") > 0
