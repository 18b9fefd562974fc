"""Rich terminal renderer for checksum runs.

Color scheme
------------
- green   : hashed / fetched / rewritten
- dim     : skipped or left as-is
- yellow  : placeholder with no published copy
- red     : failed / malformed
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from distsum.models.artifacts import ResolutionOutcome, ResolutionResult
from distsum.models.reports import ReconcileOutcome, ReconcileReport

_RESOLUTION_STYLES: dict[ResolutionOutcome, str] = {
    ResolutionOutcome.HASHED: "green",
    ResolutionOutcome.PLACEHOLDER_FETCHED: "green",
    ResolutionOutcome.PLACEHOLDER_SKIPPED: "dim",
    ResolutionOutcome.PLACEHOLDER_MISSING: "yellow",
    ResolutionOutcome.FAILED: "bold red",
}

_RECONCILE_STYLES: dict[ReconcileOutcome, str] = {
    ReconcileOutcome.REWRITTEN: "bold green",
    ReconcileOutcome.UNCHANGED: "green",
    ReconcileOutcome.MALFORMED: "bold red",
}


class RunRenderer:
    """Prints resolution results and reconcile reports.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def print_resolutions(self, results: list[ResolutionResult]) -> None:
        if not results:
            self.console.print("[dim]No archives found.[/dim]")
            return

        table = Table(title="Checksums")
        table.add_column("Archive", style="cyan", overflow="fold")
        table.add_column("Outcome")
        table.add_column("SHA-1", overflow="fold")

        for r in results:
            style = _RESOLUTION_STYLES.get(r.outcome, "")
            table.add_row(
                escape(r.relative_path),
                f"[{style}]{r.outcome.value}[/{style}]" if style else r.outcome.value,
                r.checksum or escape(r.detail),
            )
        self.console.print(table)

    def print_report(self, report: ReconcileReport, *, show_all: bool = False) -> None:
        rows = report.results if show_all else report.rewritten
        if rows:
            table = Table(title="Registry")
            table.add_column("Package", style="cyan")
            table.add_column("Version")
            table.add_column("Outcome")
            table.add_column("SHA-1", overflow="fold")
            for r in rows:
                style = _RECONCILE_STYLES.get(r.outcome, "dim")
                table.add_row(
                    escape(r.package_name),
                    escape(r.version_string),
                    f"[{style}]{r.outcome.value}[/{style}]",
                    r.shasum or "",
                )
            self.console.print(table)

        self.console.print(
            f"Rewritten {report.modified_count} of {len(report.results)} version record(s)."
        )
