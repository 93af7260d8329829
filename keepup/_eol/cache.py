"""Read-through cache of upstream EOL data kept in the key-value store.

All supported packages share one cache document stored under
``EOL_CACHE_KEY``. A lookup that misses (document absent, unreadable, or
lacking the package) rebuilds the whole document from the upstream source
and retries once.

There is no lock around the rebuild. Two submissions missing at the same
time may both rebuild; each rebuild writes a complete document, so the
last writer wins and nothing is merged.
"""

from typing import Iterable, List, Optional, Tuple

import requests

from keepup.logging_config import logger

from .._store.protocol import KeyValueStore
from ..exceptions import (
    CacheFormatError,
    CacheLookupError,
    ExternalFetchError,
    StoreReadError,
    StoreWriteError,
)
from ..http_client import create_session
from ..versions import extract_major_minor
from .models import (
    EOL_CACHE_KEY,
    EOL_CACHE_TTL,
    NO_EOL,
    SUPPORTED_PACKAGES,
    UNKNOWN_VERSION,
    EndOfLifeEntry,
    EOLCacheDocument,
)
from .protocol import EOLSource
from .sources import EndOfLifeDateSource


class EOLCacheManager:
    """
    Resolve packages to their newest upstream version and EOL marker.

    Example:
        with EOLCacheManager(store) as cache:
            latest, eol = cache.lookup("redis")
    """

    def __init__(
        self,
        store: KeyValueStore,
        source: Optional[EOLSource] = None,
        session: Optional[requests.Session] = None,
        packages: Iterable[str] = SUPPORTED_PACKAGES,
    ) -> None:
        self._store = store
        self._source = source or EndOfLifeDateSource()
        self._session = session
        self._packages = tuple(packages)

    @property
    def packages(self) -> Tuple[str, ...]:
        """Packages covered by a refresh."""
        return self._packages

    def _get_session(self) -> requests.Session:
        """Get or create a requests session."""
        if self._session is None:
            self._session = create_session()
        return self._session

    def close(self) -> None:
        """Close the requests session."""
        if self._session:
            self._session.close()
            self._session = None

    def __enter__(self) -> "EOLCacheManager":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def load_document(self) -> Optional[EOLCacheDocument]:
        """
        Read the cache document from the store.

        Returns:
            The cached document, or None on a miss. Read failures and
            unparseable documents are treated as a miss.
        """
        try:
            raw = self._store.get(EOL_CACHE_KEY)
        except StoreReadError as e:
            logger.warning(f"EOL cache read failed, treating as miss: {e}")
            return None

        if raw is None:
            logger.debug("EOL cache miss: no cached document")
            return None

        try:
            return EOLCacheDocument.from_json(raw)
        except CacheFormatError as e:
            logger.warning(f"EOL cache document is invalid, treating as miss: {e}")
            return None

    def refresh_all(self) -> EOLCacheDocument:
        """
        Rebuild the cache document from the upstream source.

        Each package is fetched independently. A package whose fetch fails
        is left out of the new document; the others are still cached. The
        new document replaces the stored one unconditionally.

        Returns:
            The document that was written

        Raises:
            StoreWriteError: If the document cannot be written to the store
        """
        session = self._get_session()
        document = EOLCacheDocument()

        for package_name in self._packages:
            try:
                document.packages[package_name] = self._source.fetch(package_name, session)
            except ExternalFetchError as e:
                logger.warning(f"Skipping {package_name} in EOL cache refresh: {e}")

        self._store.set(EOL_CACHE_KEY, document.to_json(), EOL_CACHE_TTL)
        logger.info(
            f"Refreshed EOL cache from {self._source.name}: "
            f"{len(document.packages)}/{len(self._packages)} packages cached"
        )
        return document

    def lookup(self, package_name: str) -> Tuple[str, str]:
        """
        Resolve a package to its newest version and EOL marker.

        On a miss the whole cache is refreshed once and the lookup retried
        once. Packages outside the refreshed set fail without a refresh.

        Args:
            package_name: Package name as reported by the host

        Returns:
            Tuple of (normalized latest version, EOL marker)

        Raises:
            CacheLookupError: If the package is still unresolved after the refresh
        """
        entries = self._cached_entries(package_name)
        if entries is None:
            if package_name not in self._packages:
                # A refresh never covers it, so skip the upstream round-trip
                raise CacheLookupError(f"{package_name} is not a supported package")
            logger.debug(f"EOL cache miss for {package_name}, refreshing")
            try:
                self.refresh_all()
            except StoreWriteError as e:
                raise CacheLookupError(f"Failed to update EOL cache: {e}")

            entries = self._cached_entries(package_name)
            if entries is None:
                raise CacheLookupError(f"No EOL data for {package_name} after cache refresh")
        else:
            logger.debug(f"Cache hit (EOL): {package_name}")

        return resolve_latest(package_name, entries)

    def _cached_entries(self, package_name: str) -> Optional[List[EndOfLifeEntry]]:
        document = self.load_document()
        if document is None:
            return None
        return document.entries_for(package_name)


def resolve_latest(package_name: str, entries: List[EndOfLifeEntry]) -> Tuple[str, str]:
    """
    Pick the release cycle describing a package's newest version.

    A cycle named exactly like the package wins. Otherwise the first cycle
    in upstream order is used. That fallback depends on the order the
    upstream returns cycles in (newest first on endoflife.date) and may
    not be what was intended; it is kept for compatibility.

    Returns:
        Tuple of (normalized latest version, EOL marker); ("unknown", "false")
        when there are no cycles at all
    """
    for entry in entries:
        if entry.cycle == package_name:
            return extract_major_minor(entry.latest), entry.eol

    if entries:
        return extract_major_minor(entries[0].latest), entries[0].eol

    return UNKNOWN_VERSION, NO_EOL
