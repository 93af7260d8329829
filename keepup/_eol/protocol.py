"""EOLSource protocol for upstream end-of-life data providers."""

from typing import List, Protocol

import requests

from .models import EndOfLifeEntry


class EOLSource(Protocol):
    """
    Protocol defining the interface for upstream EOL data sources.

    A source returns every known release cycle of one package, in the
    order the upstream reports them. The cache manager relies on that
    order when no cycle matches exactly.

    Example:
        class EndOfLifeDateSource:
            name = "endoflife.date"

            def fetch(self, package_name: str, session: requests.Session) -> List[EndOfLifeEntry]:
                # GET https://endoflife.date/api/<package_name>.json
                ...
    """

    @property
    def name(self) -> str:
        """
        Human-readable name of this source.

        Used for logging which source provided release data.
        """
        ...

    def fetch(self, package_name: str, session: requests.Session) -> List[EndOfLifeEntry]:
        """
        Fetch all release cycles for a package.

        Args:
            package_name: Upstream product name (e.g., "redis")
            session: requests.Session with configured headers

        Returns:
            Release cycles as reported upstream

        Raises:
            ExternalFetchError: If the upstream call or decoding fails
        """
        ...
