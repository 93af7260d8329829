"""Pytest configuration and shared fixtures for all tests."""

from typing import Dict, Iterator, Optional, Tuple
from unittest.mock import Mock

import pytest

from keepup._eol.models import EndOfLifeEntry, EOLCacheDocument


class MemoryStore:
    """In-memory KeyValueStore that records writes and their TTLs."""

    def __init__(self) -> None:
        self.data: Dict[str, Tuple[str, int]] = {}
        self.set_calls = 0
        self.get_calls = 0

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self.set_calls += 1
        self.data[key] = (value, ttl_seconds)

    def get(self, key: str) -> Optional[str]:
        self.get_calls += 1
        item = self.data.get(key)
        return item[0] if item else None

    def scan_keys(self) -> Iterator[str]:
        return iter(list(self.data))

    def ttl(self, key: str) -> int:
        return self.data[key][1]


class StaticSource:
    """EOLSource returning canned entries and counting calls per package."""

    def __init__(self, entries: Dict[str, list], failing: Tuple[str, ...] = ()) -> None:
        self.entries = entries
        self.failing = failing
        self.calls: list = []

    @property
    def name(self) -> str:
        return "static"

    def fetch(self, package_name, session):
        from keepup.exceptions import ExternalFetchError

        self.calls.append(package_name)
        if package_name in self.failing or package_name not in self.entries:
            raise ExternalFetchError(f"no data for {package_name}")
        return [EndOfLifeEntry.from_dict(item) for item in self.entries[package_name]]


@pytest.fixture(autouse=True)
def disable_sentry_for_tests(monkeypatch):
    """Disable Sentry telemetry for all tests."""
    monkeypatch.setenv("TELEMETRY", "false")


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def mock_session():
    """Create a mock requests session."""
    return Mock()


@pytest.fixture
def redis_cycles():
    """Trimmed endoflife.date response for redis."""
    return [
        {"cycle": "7.2", "eol": False, "latest": "7.2.4", "latestReleaseDate": "2024-01-09"},
        {"cycle": "7.0", "eol": False, "latest": "7.0.15", "latestReleaseDate": "2024-01-09"},
        {"cycle": "6.2", "eol": "2024-08-31", "latest": "6.2.14", "latestReleaseDate": "2024-01-09"},
    ]


def seed_cache(store: MemoryStore, packages: Dict[str, list]) -> None:
    """Write an EOL cache document built from raw upstream entries."""
    from keepup._eol.models import EOL_CACHE_KEY, EOL_CACHE_TTL

    document = EOLCacheDocument(
        packages={name: [EndOfLifeEntry.from_dict(item) for item in items] for name, items in packages.items()}
    )
    store.set(EOL_CACHE_KEY, document.to_json(), EOL_CACHE_TTL)
