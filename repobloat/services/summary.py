from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from repobloat.models.objects import DirectoryMeasurement
from repobloat.models.report import BloatReport, BloatSummary
from repobloat.services.categories import categorize
from repobloat.services.formatting import format_bytes, format_ratio, shorten_path

# Categories smaller than this are left out of the breakdown table.
_CATEGORY_FLOOR = 1024 * 1024


def _measurement(m: DirectoryMeasurement) -> str:
    if m.available:
        return format_bytes(m.size_bytes)
    return f"[dim]unavailable[/dim] ({escape(m.reason)})" if m.reason else "[dim]unavailable[/dim]"


def _summary_panel(summary: BloatSummary, min_size_bytes: int) -> Panel:
    body = (
        f".git directory: [bold]{_measurement(summary.history_store)}[/bold]\n"
        f"Working directory: [bold]{_measurement(summary.working_tree)}[/bold]\n"
        f"Ratio: [bold]{format_ratio(summary.store_ratio)}[/bold]\n"
        f"Total objects: [bold]{summary.object_count:,}[/bold]\n"
        f"Objects over {format_bytes(min_size_bytes)}: [bold]{summary.filtered_count:,}[/bold]"
    )
    return Panel(body, title="Size Summary", border_style="blue")


def _largest_table(report: BloatReport) -> Table:
    table = Table(title="Largest Files", header_style="bold yellow")
    table.add_column("Path")
    table.add_column("Size", justify="right")
    table.add_column("Category")
    for obj in report.inventory_subset:
        table.add_row(
            escape(shorten_path(obj.display_path)),
            format_bytes(obj.size),
            categorize(obj.logical_path).value,
        )
    return table


def _category_table(report: BloatReport) -> Table | None:
    total = report.summary.total_object_size
    rows = sorted(
        ((cat, size) for cat, size in report.category_totals.items() if size > _CATEGORY_FLOOR),
        key=lambda x: x[1],
        reverse=True,
    )
    if not rows or total <= 0:
        return None
    table = Table(title="Size by Category", header_style="bold magenta")
    table.add_column("Category")
    table.add_column("Size", justify="right")
    table.add_column("Share", justify="right")
    for cat, size in rows:
        table.add_row(cat.value, format_bytes(size), f"{size / total * 100:.1f}%")
    return table


def render_report(console: Console, report: BloatReport, min_size_bytes: int) -> None:
    console.print(_summary_panel(report.summary, min_size_bytes))

    if report.inventory_subset:
        console.print(_largest_table(report))
        remaining = report.summary.filtered_count - len(report.inventory_subset)
        if remaining > 0:
            console.print(f"[yellow]...and {remaining} more large files[/yellow]")

    categories = _category_table(report)
    if categories is not None:
        console.print(categories)

    if report.failed_batches:
        console.print(
            f"[yellow]{len(report.failed_batches)} size batches failed; "
            f"{report.unresolved_count} objects were left out.[/yellow]"
        )

    console.print("[bold cyan]Recommendations[/bold cyan]")
    for rec in report.recommendations:
        console.print(f"  {escape(rec)}")


def report_to_dict(report: BloatReport) -> dict[str, Any]:
    """JSON-ready view of *report*, one category per listed object."""
    return {
        "stats": report.summary.to_dict(),
        "largestFiles": [
            {
                "hash": obj.identifier,
                "path": obj.display_path,
                "size": obj.size,
                "category": categorize(obj.logical_path).value,
            }
            for obj in report.inventory_subset
        ],
        "categoryTotals": {cat.value: total for cat, total in report.category_totals.items()},
        "recommendations": list(report.recommendations),
        "failedBatches": len(report.failed_batches),
        "unresolvedCount": report.unresolved_count,
    }
