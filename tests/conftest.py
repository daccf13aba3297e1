"""
Cadence Test Suite - Shared Pytest Fixtures

This conftest.py provides fixtures for all test categories including:
- Telemetry event builders
- Analyzer, fusion and policy instances
- Engines backed by an in-memory store with a controllable clock
- Redis connection for live store tests

Usage:
    pytest tests/ -v
"""

import os
import threading
from typing import Dict, List, Optional

import pytest

from cadence.schemas.inputs import (
    KeystrokeEvent,
    PointerEvent,
    PointerEventType,
    TouchEvent,
    TouchEventType,
)


# =============================================================================
# Event Builders
# =============================================================================

def make_keystrokes(
    count: int = 10,
    dwell: Optional[float] = 100.0,
    flight: Optional[float] = 150.0,
    interval: float = 250.0,
    start: float = 1_000_000.0,
) -> List[KeystrokeEvent]:
    """Evenly spaced keystrokes with constant dwell and flight times."""
    return [
        KeystrokeEvent(
            timestamp=start + i * interval,
            duration=dwell,
            flight_time=flight if i > 0 else None,
        )
        for i in range(count)
    ]


def make_pointer_path(
    count: int = 5,
    step_x: float = 30.0,
    step_y: float = 40.0,
    interval: float = 10.0,
    start: float = 1_000_000.0,
    click_every: int = 0,
) -> List[PointerEvent]:
    """
    Straight pointer path; each step covers hypot(step_x, step_y) pixels.

    With the defaults every step is 50px in 10ms, i.e. 5 px/ms.
    """
    events = []
    for i in range(count):
        is_click = click_every > 0 and i > 0 and i % click_every == 0
        events.append(PointerEvent(
            timestamp=start + i * interval,
            x=i * step_x,
            y=i * step_y,
            type=PointerEventType.CLICK if is_click else PointerEventType.MOVE,
        ))
    return events


def make_taps(count: int = 5, duration: Optional[float] = 100.0,
              start: float = 1_000_000.0) -> List[TouchEvent]:
    return [
        TouchEvent(timestamp=start + i * 300.0, type=TouchEventType.TAP, duration=duration)
        for i in range(count)
    ]


def make_swipes(speeds: List[Optional[float]], start: float = 1_000_000.0) -> List[TouchEvent]:
    return [
        TouchEvent(timestamp=start + i * 300.0, type=TouchEventType.SWIPE, speed=speed)
        for i, speed in enumerate(speeds)
    ]


class FixedClock:
    """Controllable epoch-ms clock."""

    def __init__(self, start: float = 1_700_000_000_000.0, step: float = 0.0) -> None:
        self.now = start
        self.step = step
        self._lock = threading.Lock()

    def __call__(self) -> float:
        with self._lock:
            current = self.now
            self.now += self.step
            return current

    def advance(self, ms: float) -> None:
        with self._lock:
            self.now += ms


class DictRedis:
    """Dict-backed stand-in for the few redis.Redis calls the store makes."""

    def __init__(self) -> None:
        self.data: Dict[str, str] = {}
        self.expiries: Dict[str, int] = {}
        self._locks: Dict[str, threading.Lock] = {}

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def setex(self, key: str, ttl: int, value: str) -> None:
        self.data[key] = value
        self.expiries[key] = ttl

    def lock(self, name: str, timeout=None, blocking_timeout=None) -> threading.Lock:
        return self._locks.setdefault(name, threading.Lock())


# =============================================================================
# Analyzer & Model Fixtures
# =============================================================================

@pytest.fixture
def keystroke_analyzer():
    from cadence.analyzers.keystroke import KeystrokeAnalyzer
    return KeystrokeAnalyzer()


@pytest.fixture
def pointer_analyzer():
    from cadence.analyzers.pointer import PointerAnalyzer
    return PointerAnalyzer()


@pytest.fixture
def touch_analyzer():
    from cadence.analyzers.touch import TouchAnalyzer
    return TouchAnalyzer()


@pytest.fixture
def fusion_engine():
    from cadence.models.fusion import FusionEngine
    return FusionEngine()


@pytest.fixture
def decision_policy():
    from cadence.models.policy import DecisionPolicy
    return DecisionPolicy()


# =============================================================================
# Engine Fixtures
# =============================================================================

@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def memory_store():
    from persistence.store import InMemoryProfileStore
    return InMemoryProfileStore()


@pytest.fixture
def engine(memory_store, clock):
    """Engine over a fresh in-memory store with a frozen clock."""
    from cadence.engine import BehavioralEngine
    return BehavioralEngine(store=memory_store, clock=clock)


# =============================================================================
# Redis Fixtures
# =============================================================================

@pytest.fixture(scope="session")
def redis_client():
    """
    Session-scoped Redis client for live store tests.

    Skips when no Redis server is reachable.
    """
    import redis

    host = os.environ.get("REDIS_HOST", "localhost")
    port = int(os.environ.get("REDIS_PORT", "6379"))
    password = os.environ.get("REDIS_PASSWORD")

    client = redis.Redis(
        host=host,
        port=port,
        password=password,
        decode_responses=True,
    )
    try:
        client.ping()
    except redis.RedisError:
        pytest.skip(f"Redis not available at {host}:{port}")

    yield client
    client.close()


@pytest.fixture
def clean_redis(redis_client):
    """Function-scoped clean Redis state."""
    yield redis_client
    redis_client.flushdb()
