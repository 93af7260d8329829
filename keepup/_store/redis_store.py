"""Redis-backed key-value store."""

from typing import Iterator, Optional

import redis

from keepup.logging_config import logger

from ..exceptions import StoreReadError, StoreWriteError

DEFAULT_SOCKET_TIMEOUT = 5.0  # seconds


class RedisStore:
    """
    KeyValueStore implementation on top of a Redis database.

    Every command is bounded by the client's socket timeout, so an
    unreachable Redis fails fast instead of stalling a submission.
    """

    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    @classmethod
    def from_config(
        cls, host: str, port: int, db: int = 0, socket_timeout: float = DEFAULT_SOCKET_TIMEOUT
    ) -> "RedisStore":
        """Create a store connected to the given Redis instance."""
        logger.info(f"Using Redis at {host}:{port} (db {db})")
        client = redis.Redis(
            host=host,
            port=port,
            db=db,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
            decode_responses=True,
        )
        return cls(client)

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            self._client.set(key, value, ex=ttl_seconds)
        except redis.RedisError as e:
            raise StoreWriteError(f"Failed to write {key}: {e}")

    def get(self, key: str) -> Optional[str]:
        try:
            value = self._client.get(key)
        except redis.RedisError as e:
            raise StoreReadError(f"Failed to read {key}: {e}")
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def scan_keys(self) -> Iterator[str]:
        try:
            for key in self._client.scan_iter(match="*"):
                yield key.decode("utf-8") if isinstance(key, bytes) else key
        except redis.RedisError as e:
            raise StoreReadError(f"Failed to scan keys: {e}")

    def ping(self) -> bool:
        """Check connectivity to Redis."""
        try:
            return bool(self._client.ping())
        except redis.RedisError as e:
            logger.warning(f"Redis ping failed: {e}")
            return False
