"""
Redis Cache Store

Dedicated client class for the cache's Redis interactions. Commands are
retried with bounded exponential backoff; a background monitor keeps trying
to reach the server while it is down.
"""
import logging
from typing import Optional

import redis
from redis.backoff import ExponentialBackoff
from redis.retry import Retry

from shared.modules.cache.cache_store import CacheStore
from shared.modules.cache.cache_connection_monitor import CacheConnectionMonitor
from shared.modules.product.errors import CacheUnavailableError

logger = logging.getLogger(__name__)

# Backoff per attempt is capped at 2 seconds.
BACKOFF_CAP_SECONDS = 2
BACKOFF_BASE_SECONDS = 0.05


class RedisCacheStore(CacheStore):
    """
    A CacheStore backed by a single Redis connection pool.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        password: Optional[str] = None,
        socket_timeout: float = 5,
        max_retries: int = 3,
        client: Optional[redis.Redis] = None,
        start_monitor: bool = True,
    ):
        """
        Initializes the Redis client. No connection is made until the first
        command, so an unreachable server does not fail construction.

        Args:
            host (str): The Redis server hostname.
            port (int): The Redis server port.
            password (str): Optional Redis password.
            socket_timeout (float): Socket and connect timeout in seconds.
            max_retries (int): Retries per command on connection/timeout errors.
            client (redis.Redis): Pre-built client, mainly for tests.
            start_monitor (bool): Start the background reconnect monitor.
        """
        self.host = host
        self.port = port
        self.redis_client = client or redis.StrictRedis(
            host=host,
            port=port,
            password=password,
            db=0,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
            retry=Retry(
                ExponentialBackoff(cap=BACKOFF_CAP_SECONDS, base=BACKOFF_BASE_SECONDS),
                max_retries,
            ),
            retry_on_error=[redis.exceptions.ConnectionError, redis.exceptions.TimeoutError],
        )
        self.monitor = CacheConnectionMonitor(self._raw_ping)
        if start_monitor:
            self.monitor.start()
        logger.info(f"Redis cache store initialized for {host}:{port}")

    def get(self, key: str) -> Optional[str]:
        self._fail_fast_if_down("GET", key)
        try:
            return self.redis_client.get(key)
        except redis.exceptions.RedisError as e:
            raise CacheUnavailableError(f"Redis GET failed for key '{key}': {e}") from e
        except UnicodeDecodeError as e:
            raise CacheUnavailableError(f"Redis value for key '{key}' is not valid UTF-8: {e}") from e

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self._fail_fast_if_down("SET", key)
        try:
            self.redis_client.set(key, value, ex=ttl_seconds)
        except redis.exceptions.RedisError as e:
            raise CacheUnavailableError(f"Redis SET failed for key '{key}': {e}") from e

    def delete(self, key: str) -> None:
        self._fail_fast_if_down("DELETE", key)
        try:
            self.redis_client.delete(key)
        except redis.exceptions.RedisError as e:
            raise CacheUnavailableError(f"Redis DELETE failed for key '{key}': {e}") from e

    def ping(self) -> bool:
        if self.monitor.is_down:
            return False
        try:
            return self._raw_ping()
        except redis.exceptions.RedisError as e:
            logger.error(f"Redis ping failed: {e}")
            return False

    def close(self) -> None:
        self.monitor.stop()
        self.redis_client.close()
        logger.info("Redis cache store closed")

    def _fail_fast_if_down(self, command: str, key: str) -> None:
        """
        Skip the round trip while the monitor has the server marked down,
        so callers don't wait out every retry and timeout.
        """
        if self.monitor.is_down:
            raise CacheUnavailableError(f"Redis {command} skipped for key '{key}': server unreachable, reconnecting")

    def _raw_ping(self) -> bool:
        return bool(self.redis_client.ping())
