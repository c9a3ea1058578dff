# hms/core/redis.py
"""
Redis connection and login throttling.

The app should boot even if Redis is unavailable (degraded mode): the
throttle then lets every attempt through and logs a warning once.
"""

import logging

import redis

from hms.core.config import Settings

logger = logging.getLogger(__name__)


def connect_redis(redis_url: str | None) -> redis.Redis | None:
    """
    Get a Redis client, or None if Redis is not configured or unreachable.
    """
    if not redis_url:
        logger.warning("REDIS_URL not set. Login throttling will be disabled.")
        return None

    try:
        client = redis.from_url(
            redis_url,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        client.ping()
        logger.info("Redis connection established successfully.")
        return client
    except redis.RedisError as e:
        logger.warning("Failed to connect to Redis: %s. Running in degraded mode (no throttling).", e)
        return None


class LoginThrottle:
    """
    Fixed-window counter of login attempts per client key (usually the IP).
    """

    key_prefix = "hms:login-attempts:"

    def __init__(self, client: redis.Redis | None, limit: int, window_seconds: int):
        self.client = client
        self.limit = limit
        self.window_seconds = window_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> "LoginThrottle":
        return cls(
            client=connect_redis(settings.redis_url),
            limit=settings.login_rate_limit,
            window_seconds=settings.login_rate_window_seconds,
        )

    def hit(self, key: str) -> bool:
        """
        Count one attempt. Returns False once the key is over its limit.
        """
        if not self.client or self.limit <= 0:
            return True
        redis_key = f"{self.key_prefix}{key}"
        try:
            attempts = self.client.incr(redis_key)
            if attempts == 1:
                self.client.expire(redis_key, self.window_seconds)
        except redis.RedisError as e:
            logger.warning("Redis throttle error for key '%s': %s", redis_key, e)
            return True
        return int(attempts) <= self.limit

    def reset(self, key: str) -> None:
        if not self.client:
            return
        try:
            self.client.delete(f"{self.key_prefix}{key}")
        except redis.RedisError as e:
            logger.warning("Redis DELETE error for key '%s': %s", key, e)

    def close(self) -> None:
        if self.client:
            self.client.close()
