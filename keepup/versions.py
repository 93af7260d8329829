"""Version string normalization and freshness comparison.

Versions reported by hosts come straight from the package manager, e.g.
``1:6.2.5-1+deb11u1`` from dpkg. Both the installed and the upstream
versions are reduced to a ``major.minor`` cycle before comparing:

- ``1:2.3.4`` -> ``2.3`` (epoch dropped)
- ``7.8`` -> ``7.8``
- ``5`` -> ``5``
"""

import re
from typing import Tuple

_NUMERIC_SEGMENT = re.compile(r"[+-]?[0-9]+")


def extract_major_minor(version: str) -> str:
    """
    Reduce a raw version string to its ``major.minor`` cycle.

    Anything up to and including the first colon is a package-manager
    epoch and is dropped. Versions with a single segment are returned as-is.

    Args:
        version: Raw version string (e.g., "1:6.2.5", "7.0.11", "16")

    Returns:
        Normalized version string (e.g., "6.2", "7.0", "16")
    """
    if ":" in version:
        version = version.split(":", 1)[1]

    segments = version.split(".")
    if len(segments) >= 2:
        return f"{segments[0]}.{segments[1]}"
    return segments[0]


def _to_int(segment: str) -> int:
    # ASCII digits only: int() would also take "1_0", " 7" and non-Latin digits
    if not _NUMERIC_SEGMENT.fullmatch(segment):
        return 0
    return int(segment)


def parse_major_minor(version: str) -> Tuple[int, int]:
    """Parse a normalized version into a (major, minor) pair, treating bad segments as 0."""
    segments = version.split(".")
    major = _to_int(segments[0])
    minor = _to_int(segments[1]) if len(segments) > 1 else 0
    return major, minor


def is_version_expired(current: str, newest: str) -> bool:
    """
    Check whether the current version is behind the newest upstream version.

    Args:
        current: Normalized installed version
        newest: Normalized newest upstream version

    Returns:
        True if current is older than newest by major or minor
    """
    current_major, current_minor = parse_major_minor(current)
    newest_major, newest_minor = parse_major_minor(newest)

    if current_major < newest_major:
        return True
    return current_major == newest_major and current_minor < newest_minor
