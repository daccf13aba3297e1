"""
Cadence Redis Connection

Shared client for the Redis profile store, configured from the environment:
- REDIS_HOST: Hostname (default: localhost)
- REDIS_PORT: Port (default: 6379)
- REDIS_DB: Database index holding profile records (default: 0)
- REDIS_PASSWORD: Password (required)
"""

import os
import logging
from functools import lru_cache
from typing import Any, Dict

import redis
from redis.exceptions import RedisError, AuthenticationError

logger = logging.getLogger(__name__)

MAX_CONNECTIONS = 50
SOCKET_TIMEOUT = 5.0


def redis_settings() -> Dict[str, Any]:
    """Connection settings for the profile store, read from the environment."""
    password = os.getenv("REDIS_PASSWORD")
    if not password:
        logger.critical("PROFILE_STORE=redis but REDIS_PASSWORD is not set")
        raise ValueError("REDIS_PASSWORD must be set to use the redis profile store")

    return {
        "host": os.getenv("REDIS_HOST", "localhost"),
        "port": int(os.getenv("REDIS_PORT", 6379)),
        "db": int(os.getenv("REDIS_DB", 0)),
        "password": password,
    }


@lru_cache(maxsize=1)
def get_redis_client() -> redis.Redis:
    """
    Process-wide Redis client for profile records and profile locks.

    Responses are decoded to str, since records are stored as JSON text.
    The server is pinged once so a bad configuration fails at startup
    rather than on the first scoring call.
    """
    settings = redis_settings()
    location = f"{settings['host']}:{settings['port']}/{settings['db']}"

    pool = redis.ConnectionPool(
        decode_responses=True,
        max_connections=MAX_CONNECTIONS,
        socket_timeout=SOCKET_TIMEOUT,
        **settings,
    )
    client = redis.Redis(connection_pool=pool)

    try:
        client.ping()
    except AuthenticationError:
        logger.critical(f"Profile store rejected credentials at {location}")
        raise
    except RedisError as e:
        logger.critical(f"Profile store unreachable at {location}: {e}")
        raise

    logger.info(f"Profile store using Redis at {location}")
    return client
