"""Outbound HTTP sessions identifying keepup to upstream APIs."""

import requests

from . import __version__

USER_AGENT = f"keepup/{__version__}"


def create_session() -> requests.Session:
    """Create a requests session carrying the keepup User-Agent."""
    session = requests.Session()
    session.headers["User-Agent"] = USER_AGENT
    return session
