"""Key-value persistence for host records and the EOL cache."""

from .protocol import KeyValueStore
from .redis_store import RedisStore

__all__ = ["KeyValueStore", "RedisStore"]
