"""Upstream EOL data sources."""

from .endoflife_date import ENDOFLIFE_API_BASE, EndOfLifeDateSource

__all__ = ["ENDOFLIFE_API_BASE", "EndOfLifeDateSource"]
