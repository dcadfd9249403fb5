# Copyright (c) Syntropy Systems
"""Helpers shared by the parkgallery commands."""
from __future__ import annotations

from typing import TYPE_CHECKING

import typer
from rich.console import Console

from parkgallery.composite import clamp_threshold
from parkgallery.config import GalleryConfig, load_config
from parkgallery.parser import NoResultFilesError, load_batch
from parkgallery.pipeline import BatchResult, process_batch

if TYPE_CHECKING:
    from pathlib import Path

console = Console()


def resolve_config(
    threshold: float | None = None,
    composite: bool | None = None,
    image_size: int | None = None,
    archive: bool | None = None,
) -> GalleryConfig:
    """Load the config file and apply command-line overrides."""
    config = load_config()
    if threshold is not None:
        if not 0.0 <= threshold <= 1.0:
            console.print(
                f"[yellow]Threshold {threshold} out of range, "
                f"using {clamp_threshold(threshold)}[/yellow]"
            )
        config.threshold = clamp_threshold(threshold)
    if composite is not None:
        config.composite = composite
    if image_size is not None:
        config.image_size = image_size
    if archive is not None:
        config.archive = archive
    return config


def run_batch(
    paths: list[Path], config: GalleryConfig, *, quiet: bool = False
) -> BatchResult:
    """Load, parse and process result files, reporting per-file failures.

    With ``quiet`` the failures are only recorded in the manifest.
    """
    try:
        records, failures = load_batch(paths)
    except NoResultFilesError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    if not quiet:
        for failure in failures:
            console.print(
                f"[yellow]Could not process {failure.source_file}:[/yellow] "
                f"{failure.reason}"
            )

    return process_batch(records, config, failures)
