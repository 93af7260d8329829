"""Data models for upstream end-of-life release data."""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..exceptions import CacheFormatError, EOLDecodeError

# Single shared cache document, kept apart from per-host record keys
EOL_CACHE_KEY = "eol_cache:all_packages"
EOL_CACHE_TTL = 7 * 24 * 60 * 60  # seconds

# Closed set of packages resolved against endoflife.date
SUPPORTED_PACKAGES = (
    "redis",
    "memcached",
    "mongodb",
    "mysql",
    "rabbitmq",
    "envoy",
    "debian",
    "postgresql",
    "elasticsearch",
)

UNKNOWN_VERSION = "unknown"
NO_EOL = "false"


def parse_eol_marker(value: Any) -> str:
    """
    Decode the upstream ``eol`` field into a single string representation.

    endoflife.date reports either a date string ("2024-01-01") or a boolean
    (false when no EOL is announced, true when EOL without a known date).
    A string is tried first, then a boolean.

    Raises:
        EOLDecodeError: If the value is neither a string nor a boolean
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    raise EOLDecodeError(f"Invalid EOL value: {value!r}")


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


@dataclass
class EndOfLifeEntry:
    """One release cycle as reported by the upstream EOL source."""

    cycle: str
    eol: str
    latest: str
    latest_release_date: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EndOfLifeEntry":
        """Build an entry from one upstream JSON object."""
        if not isinstance(data, dict):
            raise EOLDecodeError(f"Expected an object, got {type(data).__name__}")
        # Absent or null eol stays empty; the aggregator maps it to NO_EOL
        eol = data.get("eol")
        return cls(
            cycle=_as_str(data.get("cycle")),
            eol=parse_eol_marker(eol) if eol is not None else "",
            latest=_as_str(data.get("latest")),
            latest_release_date=_as_str(data.get("latestReleaseDate")),
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "cycle": self.cycle,
            "eol": self.eol,
            "latest": self.latest,
            "latestReleaseDate": self.latest_release_date,
        }


@dataclass
class EOLCacheDocument:
    """
    The shared EOL cache: package name -> ordered release cycles.

    Serialized as ``{"package": {"redis": [...], ...}}``. A refreshed
    document always replaces the previous one as a whole.
    """

    packages: Dict[str, List[EndOfLifeEntry]] = field(default_factory=dict)

    def entries_for(self, package_name: str) -> Optional[List[EndOfLifeEntry]]:
        """Return the cached release cycles for a package, or None if it is not cached."""
        return self.packages.get(package_name)

    def to_json(self) -> str:
        return json.dumps(
            {"package": {name: [entry.to_dict() for entry in entries] for name, entries in self.packages.items()}}
        )

    @classmethod
    def from_json(cls, raw: str) -> "EOLCacheDocument":
        """
        Parse a serialized cache document.

        Raises:
            CacheFormatError: If the payload is not a valid cache document
        """
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise CacheFormatError(f"Failed to parse cached data: {e}")

        packages = data.get("package") if isinstance(data, dict) else None
        if not isinstance(packages, dict):
            raise CacheFormatError("Invalid cache format: missing 'package' key")

        document = cls()
        for name, entries in packages.items():
            if not isinstance(entries, list):
                raise CacheFormatError(f"Invalid cache format: entries for {name} are not a list")
            try:
                document.packages[name] = [EndOfLifeEntry.from_dict(entry) for entry in entries]
            except EOLDecodeError as e:
                raise CacheFormatError(f"Failed to decode cached entries for {name}: {e}")
        return document
