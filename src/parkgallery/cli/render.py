# Copyright (c) Syntropy Systems
"""Render command - draw every group, cohort composite and result."""
from __future__ import annotations

from pathlib import Path

import typer

from parkgallery.archive import write_archive, write_directory
from parkgallery.cli.common import console, resolve_config, run_batch


def render(
    paths: list[Path] = typer.Argument(..., help="Result files or directories"),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Output directory (default from config)"
    ),
    threshold: float | None = typer.Option(
        None, "--threshold", "-t", help="Composite vote threshold (0-1)"
    ),
    composite: bool | None = typer.Option(
        None, "--composite/--no-composite", help="Render one composite per cohort"
    ),
    size: int | None = typer.Option(
        None, "--size", "-s", min=64, help="Image edge in pixels"
    ),
    archive: bool | None = typer.Option(
        None, "--zip/--no-zip", help="Write a zip archive instead of loose files"
    ),
) -> None:
    """Render park images and a metadata manifest for a batch of results.

    Examples:
        parkgallery render results/
        parkgallery render run1.json run2.json --no-zip -o out/

    """
    config = resolve_config(
        threshold=threshold, composite=composite, image_size=size, archive=archive
    )
    result = run_batch(paths, config)

    if not result.requests:
        console.print("[yellow]No valid result files to render[/yellow]")
        raise typer.Exit(1)

    target_dir = output if output is not None else Path(config.output_dir)
    try:
        if config.archive:
            written = write_archive(result, target_dir, size=config.image_size)
        else:
            written = write_directory(result, target_dir, size=config.image_size)
    except OSError as e:
        console.print(f"[red]Error writing output:[/red] {e}")
        raise typer.Exit(1) from e

    console.print(
        f"[green]Rendered {len(result.requests)} image(s) "
        f"from {len(result.groups)} group(s)[/green]"
    )
    console.print(f"  [dim]output:[/dim] {written}")
    if result.failures:
        console.print(f"  [yellow]skipped:[/yellow] {len(result.failures)} file(s)")
