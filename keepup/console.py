"""Rich console utilities for keepup.

This module provides a shared Rich Console instance and table helpers
for CLI output.
"""

import os
from typing import Dict, Iterable, Tuple

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

from ._eol.models import EOLCacheDocument
from .packages import PackageRecord

IS_CI = os.getenv("CI") == "true"

custom_theme = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "success": "bold green",
        "highlight": "magenta",
    }
)

# Shared console instance
console = Console(theme=custom_theme, color_system="auto")


def print_refresh_summary(document: EOLCacheDocument, packages: Iterable[str]) -> None:
    """Print which packages made it into a refreshed EOL cache."""
    table = Table(title="EOL Cache Refresh", show_header=True, header_style="bold")
    table.add_column("Package", style="cyan")
    table.add_column("Cycles", justify="right")
    table.add_column("Newest Cycle")
    table.add_column("Status")

    for name in packages:
        entries = document.entries_for(name)
        if entries is None:
            table.add_row(name, "-", "-", "[error]fetch failed[/error]")
        elif not entries:
            table.add_row(name, "0", "-", "[warning]empty[/warning]")
        else:
            table.add_row(name, str(len(entries)), entries[0].cycle, "[success]cached[/success]")

    console.print(table)


def print_lookup_table(results: Dict[str, Tuple[str, str]]) -> None:
    """Print latest version and EOL marker per package."""
    table = Table(title="EOL Lookup", show_header=True, header_style="bold")
    table.add_column("Package", style="cyan")
    table.add_column("Latest")
    table.add_column("EOL")

    for name, (latest, eol) in results.items():
        table.add_row(name, latest, eol)

    console.print(table)


def print_record(record: PackageRecord) -> None:
    """Print a host record with its per-package verdicts."""
    table = Table(
        title=f"{record.data_center or '-'} / {record.host_ip or '-'} ({record.id})",
        show_header=True,
        header_style="bold",
    )
    table.add_column("Package", style="cyan")
    table.add_column("Current")
    table.add_column("Newest")
    table.add_column("EOL")
    table.add_column("Expired")

    for name, detail in sorted(record.packages.items()):
        expired = "[error]yes[/error]" if detail.expired else "[success]no[/success]"
        table.add_row(name, detail.current_version, detail.newest_version, detail.current_version_eof, expired)

    console.print(table)
