"""KeyValueStore protocol for record and cache persistence."""

from typing import Iterator, Optional, Protocol


class KeyValueStore(Protocol):
    """
    Protocol for a string key-value store with per-key expiry.

    Host records and the shared EOL cache document both live here. Values
    are serialized JSON strings; eviction is left entirely to the store.
    """

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """
        Store a value, replacing any existing one, expiring after ttl_seconds.

        Raises:
            StoreWriteError: If the write fails
        """
        ...

    def get(self, key: str) -> Optional[str]:
        """
        Read a value.

        Returns:
            The stored value, or None if the key does not exist

        Raises:
            StoreReadError: If the read fails
        """
        ...

    def scan_keys(self) -> Iterator[str]:
        """Iterate over all keys in the store."""
        ...
