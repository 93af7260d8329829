"""endoflife.date data source for release cycles and EOL dates."""

import json
from typing import List

import requests

from keepup.logging_config import logger

from ...exceptions import EOLDecodeError, ExternalFetchError
from ..models import EndOfLifeEntry

ENDOFLIFE_API_BASE = "https://endoflife.date/api"
DEFAULT_TIMEOUT = 10  # seconds


class EndOfLifeDateSource:
    """
    Data source for endoflife.date.

    One request per product: ``GET {base}/{product}.json`` returns a JSON
    array of cycles, each with ``cycle``, ``eol``, ``latest`` and
    ``latestReleaseDate``.
    """

    def __init__(self, api_base: str = ENDOFLIFE_API_BASE, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "endoflife.date"

    def fetch(self, package_name: str, session: requests.Session) -> List[EndOfLifeEntry]:
        """
        Fetch release cycles for a product from endoflife.date.

        Args:
            package_name: Product name on endoflife.date
            session: requests.Session with configured headers

        Returns:
            List of EndOfLifeEntry in upstream order

        Raises:
            ExternalFetchError: On timeout, connection error, non-200 status or bad payload
        """
        url = f"{self._api_base}/{package_name}.json"
        logger.debug(f"Fetching EOL data for: {package_name}")

        try:
            response = session.get(url, timeout=self._timeout)
        except requests.exceptions.Timeout:
            raise ExternalFetchError(f"Timeout fetching EOL data for {package_name}")
        except requests.exceptions.RequestException as e:
            raise ExternalFetchError(f"Error fetching EOL data for {package_name}: {e}")

        if response.status_code != 200:
            raise ExternalFetchError(f"Failed to fetch EOL data for {package_name}: HTTP {response.status_code}")

        try:
            payload = response.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise ExternalFetchError(f"JSON decode error for {package_name}: {e}")

        if not isinstance(payload, list):
            raise ExternalFetchError(f"Unexpected EOL payload for {package_name}: expected a list")

        try:
            return [EndOfLifeEntry.from_dict(item) for item in payload]
        except EOLDecodeError as e:
            raise ExternalFetchError(f"Invalid EOL entry for {package_name}: {e}")
