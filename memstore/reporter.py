from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from memstore.domain.models import Page, Record


def _fmt_mb(value: Optional[int]) -> str:
    if not value:
        return "N/A"
    return f"{value / (1024 * 1024):.2f}"


def print_results(results: List[Dict[str, Any]], console: Optional[Console] = None) -> None:
    """
    Render scenario results as a rich table.

    Handles both single-run results and aggregated multi-run results.
    """
    console = console or Console()

    if not results:
        console.print("[yellow]No results to display.[/yellow]")
        return

    is_aggregated = (
        "runs" in results[0] and isinstance(results[0]["runs"], int) and results[0]["runs"] > 1
    )

    table = Table(
        title="memstore Contention Results",
        box=box.ROUNDED,
        caption="Sorted by Throughput (descending)",
    )
    table.add_column("Scenario", style="cyan", no_wrap=True)
    table.add_column("Ops", justify="right", style="magenta")

    if is_aggregated:
        table.add_column("Runs", justify="right", style="blue")
        table.add_column(
            "Duration (s)\n[dim](Median ± StdDev)[/dim]", justify="right", style="green"
        )
        table.add_column(
            "Throughput (ops/s)\n[dim](Median)[/dim]", justify="right", style="bold green"
        )
    else:
        table.add_column("OK", justify="right", style="green")
        table.add_column("Conflict", justify="right", style="yellow")
        table.add_column("Not Found", justify="right", style="yellow")
        table.add_column("Errors", justify="right", style="red")
        table.add_column("Duration (s)", justify="right", style="green")
        table.add_column("Throughput (ops/s)", justify="right", style="bold green")
        table.add_column("Peak Memory (MB)", justify="right", style="yellow")
    table.add_column("Invariants", justify="center")

    def get_sort_key(r: Dict[str, Any]) -> float:
        if is_aggregated:
            return r["throughput_ops_per_sec"]["median"]
        return r.get("throughput_ops_per_sec", 0.0)

    for res in sorted(results, key=get_sort_key, reverse=True):
        scenario = res.get("scenario", "Unknown")
        ops = f"{res.get('operations', 0):,}"
        verdict = (
            "[green]ok[/green]" if res.get("invariant_ok") else "[bold red]VIOLATED[/bold red]"
        )

        if is_aggregated:
            duration = res["duration_seconds"]
            table.add_row(
                scenario,
                ops,
                str(res.get("runs", 0)),
                f"{duration['median']:.4f} ± {duration['stddev']:.4f}",
                f"{res['throughput_ops_per_sec']['median']:,.2f}",
                verdict,
            )
        else:
            table.add_row(
                scenario,
                ops,
                str(res.get("successes", 0)),
                str(res.get("conflicts", 0)),
                str(res.get("not_found", 0)),
                str(res.get("errors", 0)),
                f"{res.get('duration_seconds', 0.0):.4f}",
                f"{res.get('throughput_ops_per_sec', 0.0):,.2f}",
                _fmt_mb(res.get("peak_rss_bytes")),
                verdict,
            )

    console.print(table)


def print_records(
    records: Sequence[Record],
    title: str = "Records",
    console: Optional[Console] = None,
) -> None:
    """
    Render records as a table, one column per serialized field.
    """
    console = console or Console()
    if not records:
        console.print(f"[yellow]{title}: no records.[/yellow]")
        return

    rows = [record.model_dump(mode="json") for record in records]
    table = Table(title=title, box=box.ROUNDED)
    for column in rows[0]:
        table.add_column(column, style="cyan" if column == "id" else None)
    for row in rows:
        table.add_row(*(str(row.get(column, "")) for column in rows[0]))
    console.print(table)


def print_page(page: Page[Any], title: str = "Page", console: Optional[Console] = None) -> None:
    print_records(
        page.items,
        title=f"{title} (page {page.page}/{max(page.total_pages, 1)}, total {page.total})",
        console=console,
    )


__all__ = ["print_results", "print_records", "print_page"]
