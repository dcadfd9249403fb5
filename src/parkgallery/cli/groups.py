# Copyright (c) Syntropy Systems
"""Groups command - show scenario groups, cohorts and duplicate tags."""
from __future__ import annotations

from pathlib import Path

import typer
from rich.table import Table

from parkgallery.archive import manifest_json
from parkgallery.cli.common import console, resolve_config, run_batch
from parkgallery.composite import composite_removals, threshold_percent
from parkgallery.render_requests import sort_members


def groups(
    paths: list[Path] = typer.Argument(..., help="Result files or directories"),
    threshold: float | None = typer.Option(
        None, "--threshold", "-t", help="Composite vote threshold (0-1)"
    ),
    composite: bool | None = typer.Option(
        None, "--composite/--no-composite", help="Show composite removal sets"
    ),
    as_json: bool = typer.Option(
        False, "--json", help="Print the batch manifest as JSON"
    ),
) -> None:
    """Group result files by scenario and show duplicate-set tags.

    Example:
        parkgallery groups results/ --threshold 0.75

    """
    config = resolve_config(threshold=threshold, composite=composite)
    result = run_batch(paths, config, quiet=as_json)

    if as_json:
        typer.echo(manifest_json(result))
        return

    if not result.groups:
        console.print("[yellow]No valid result files[/yellow]")
        return

    for gi, group in enumerate(result.groups):
        console.print(
            f"\n[bold]Group {gi + 1}[/bold]: timestamp=\"{group.timestamp}\" "
            f"park layout=\"{group.csv_hash}\" run tag=\"{group.meta_tag}\" "
            f"members={len(group.members)}"
        )

        table = Table(show_header=True, header_style="bold")
        table.add_column("File", style="cyan")
        table.add_column("Model")
        table.add_column("Hint")
        table.add_column("Removed")
        table.add_column("Tags", style="magenta")

        for cohort in group.iter_hint_cohorts():
            if config.composite:
                removal_ids = composite_removals(cohort.members, config.threshold)
                table.add_row(
                    f"[dim]composite {threshold_percent(config.threshold)}[/dim]",
                    cohort.model,
                    cohort.hint_mode or "none",
                    ", ".join(str(i) for i in removal_ids) or "-",
                    "COMPOSITE",
                )
            for record in sort_members(cohort.members):
                table.add_row(
                    record.source_file,
                    record.model,
                    record.hint_mode or "none",
                    ", ".join(str(i) for i in record.removal_ids) or "-",
                    " ".join(record.tags) or "-",
                )

        console.print(table)

    if result.failures:
        console.print(f"\n[yellow]{len(result.failures)} file(s) skipped[/yellow]")
