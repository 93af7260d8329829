"""Upstream end-of-life data and its shared cache.

The cache manager resolves a package name to (latest version, EOL marker)
from a single cached document, rebuilding it from endoflife.date on a miss.

Example:
    from keepup._eol import EOLCacheManager

    with EOLCacheManager(store) as cache:
        latest, eol = cache.lookup("postgresql")
"""

from .cache import EOLCacheManager, resolve_latest
from .models import (
    EOL_CACHE_KEY,
    EOL_CACHE_TTL,
    NO_EOL,
    SUPPORTED_PACKAGES,
    UNKNOWN_VERSION,
    EndOfLifeEntry,
    EOLCacheDocument,
    parse_eol_marker,
)
from .protocol import EOLSource
from .sources import EndOfLifeDateSource

__all__ = [
    "EOLCacheManager",
    "resolve_latest",
    "EOLSource",
    "EndOfLifeDateSource",
    "EndOfLifeEntry",
    "EOLCacheDocument",
    "parse_eol_marker",
    "EOL_CACHE_KEY",
    "EOL_CACHE_TTL",
    "SUPPORTED_PACKAGES",
    "UNKNOWN_VERSION",
    "NO_EOL",
]
