"""Output formatting utilities for the CLI."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterable

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

from mcleaner.core.inventory import InventoryCounts
from mcleaner.core.models import Confidence, IndexEntry, OwnerAttribution

_THEME = Theme(
    {
        "ok": "bold green",
        "warn": "yellow",
        "err": "bold red",
        "title": "bold cyan",
        "meta": "dim",
    }
)

_CONFIDENCE_STYLE = {
    Confidence.HIGH: "ok",
    Confidence.MEDIUM: "warn",
    Confidence.LOW: "err",
}

console = Console(theme=_THEME)


@dataclass(frozen=True)
class Out:
    """Output formatter for CLI messages and tables."""

    @contextmanager
    def status(self, msg: str):
        """Show a transient status spinner while work is in progress."""
        with console.status(msg, spinner="dots"):
            yield

    def warn(self, msg: str) -> None:
        """Print a warning message."""
        console.print(f"[warn]⚠[/] {escape(msg)}")

    def error(self, msg: str) -> None:
        """Print an error message."""
        console.print(f"[err]✗[/] {escape(msg)}")

    def inventory_summary(self, counts: InventoryCounts, title: str = "Inventory") -> None:
        """Render the per-source counts of a built inventory."""
        t = Table(title=title, show_lines=False)
        t.add_column("Kind", style="title")
        t.add_column("Count", style="ok", justify="right")

        t.add_row("System apps", str(counts.system_apps))
        t.add_row("User apps", str(counts.user_apps))
        t.add_row("Homebrew formulae", str(counts.formulae))
        t.add_row("Homebrew casks", str(counts.casks))
        t.add_row("Homebrew binaries", str(counts.package_binaries))
        t.add_row("Index keys", str(counts.index_keys))

        console.print(t)

    def index_table(self, entries: Iterable[IndexEntry], title: str = "Index") -> None:
        """
        Render inventory index rows.

        Expects objects with .key .kind .owner_name .owner_source .owner_path
        (like mcleaner.core.models.IndexEntry).
        """
        t = Table(title=title, show_lines=False)
        t.add_column("Key", style="ok", overflow="fold")
        t.add_column("Kind", style="meta")
        t.add_column("Owner")
        t.add_column("Source", style="meta")
        t.add_column("Path", style="meta", overflow="fold")

        for e in entries:
            t.add_row(
                escape(e.key),
                e.kind.value,
                escape(e.owner_name),
                e.owner_source.value,
                escape(e.owner_path or ""),
            )

        console.print(t)

    def attribution_table(
        self,
        query: str,
        attribution: OwnerAttribution,
        title: str = "Owner",
    ) -> None:
        """Render a single owner attribution for a label or path query."""
        style = _CONFIDENCE_STYLE.get(attribution.confidence, "meta")

        t = Table(title=title, show_lines=False, show_header=False)
        t.add_column("Field", style="meta", no_wrap=True)
        t.add_column("Value", overflow="fold")

        t.add_row("Query", escape(query))
        t.add_row("Owner", f"[title]{escape(attribution.owner_name)}[/]")
        t.add_row("Method", attribution.match_method.value)
        t.add_row(
            "Confidence",
            f"[{style}]{attribution.confidence.value}[/{style}]",
        )
        t.add_row("Matched key", escape(attribution.key or ""))
        t.add_row("Source", attribution.source.value if attribution.source else "")
        t.add_row("Installed", "yes" if attribution.installed else "no")

        console.print(t)


out = Out()
