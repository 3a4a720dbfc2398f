"""Rich rendering of traceability reports and CI exit policy."""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.table import Table

from tracegate.artifacts.types import TraceReport

EXIT_OK = 0
EXIT_FAILED = 1


def exit_code_for(report: TraceReport) -> int:
    """Map a report to the process exit status used by CI gates.

    Args:
        report: Completed validation report.

    Returns:
        ``0`` when every invariant holds, ``1`` otherwise.
    """
    return EXIT_OK if report.is_valid else EXIT_FAILED


def _counts_table(report: TraceReport) -> Table:
    table = Table(title="Traceability Validation Summary", header_style="bold")
    table.add_column("Artifacts", style="cyan")
    table.add_column("Count", justify="right")
    table.add_row("Specs", str(report.counts.specs))
    table.add_row("Plans", str(report.counts.plans))
    table.add_row("Tasks", str(report.counts.tasks))
    table.add_row("Issues", str(report.counts.issues))
    return table


def render_report(console: Console, report: TraceReport) -> None:
    """Print counts, then either a confirmation or every error line.

    Args:
        console: Rich console.
        report: Completed validation report.
    """
    console.print(_counts_table(report))
    if report.is_valid:
        console.print("[green]All traceability chains are valid.[/green]")
        return
    console.print(
        f"[red]Traceability validation failed with {len(report.errors)} error(s):[/red]"
    )
    for line in report.errors:
        console.print(f"- {line}", markup=False, highlight=False, soft_wrap=True)


def report_payload(report: TraceReport) -> dict[str, Any]:
    """Build the machine-readable form of a report.

    Args:
        report: Completed validation report.

    Returns:
        JSON-compatible mapping with counts, validity and diagnostics.
    """
    return {
        "valid": report.is_valid,
        "counts": report.counts.model_dump(mode="json"),
        "errors": list(report.errors),
        "diagnostics": [
            diag.model_dump(mode="json", exclude_none=True)
            for diag in report.diagnostics
        ],
    }
