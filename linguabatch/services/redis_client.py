"""Redis client for shared state across workers (cache blobs, rate counters)."""

import os
import redis
import logging

logger = logging.getLogger(__name__)

# Redis connection (lazy initialization)
_redis_client = None


def get_redis(redis_url=None):
    """Get or create the Redis connection.

    Returns None when Redis is not configured or unreachable; callers fall
    back to their in-process path.
    """
    global _redis_client

    if _redis_client is not None:
        return _redis_client

    redis_url = redis_url or os.environ.get('REDIS_URL')

    if not redis_url:
        logger.debug("REDIS_URL not set - using in-process state only")
        return None

    try:
        _redis_client = redis.from_url(redis_url, decode_responses=True)
        # Test connection
        _redis_client.ping()
        logger.info("Redis connected successfully")
        return _redis_client
    except Exception as e:
        logger.error(f"Redis connection failed: {e}")
        _redis_client = None
        return None


def reset_redis():
    """Forget the cached connection (tests, config reloads)."""
    global _redis_client
    _redis_client = None


def incr_with_expiry(key: str, window_seconds: int):
    """Increment a fixed-window counter. Returns the new count, or None if Redis is unavailable."""
    r = get_redis()
    if not r:
        return None

    try:
        count = int(r.incr(key))
        if count == 1:
            r.expire(key, window_seconds)
        return count
    except Exception as e:
        logger.error(f"Redis incr_with_expiry error: {e}")
        return None
