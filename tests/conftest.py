# Copyright (c) Syntropy Systems
"""Pytest fixtures for parkgallery tests."""

from __future__ import annotations

import json
import os
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from parkgallery.models.result import ResultRecord
from parkgallery.parser import parse_result

# Store original cwd at module load time
_original_cwd = Path.cwd()

RecordFactory = Callable[..., ResultRecord]


def make_layout(
    trees: list[tuple[int, float, float]] | None = None,
    width: float = 30,
    height: float = 30,
    radius: float = 1.5,
) -> dict[str, object]:
    """Build a raw park layout mapping."""
    if trees is None:
        trees = [(1, 5.0, 5.0), (2, 10.0, 10.0), (3, 15.0, 20.0), (7, 25.0, 25.0)]
    return {
        "width": width,
        "height": height,
        "treeRadius": radius,
        "trees": [{"treeId": tid, "x": x, "y": y} for tid, x, y in trees],
    }


def make_result(  # noqa: PLR0913
    removals: str = "",
    model: str | None = "gpt-4o",
    hint_mode: str | None = None,
    tag: str | None = "run-a",
    timestamp: str | None = "2024-05-01T10:00:00Z",
    layout: dict[str, object] | None = None,
    csv_hash: str | None = "abc123",
    embed_as_string: bool = True,
) -> dict[str, object]:
    """Build a raw result file payload."""
    park = layout if layout is not None else make_layout()
    scenario: dict[str, object] = {
        "trees": json.dumps(park) if embed_as_string else park,
    }
    if csv_hash is not None:
        scenario["csvHash"] = csv_hash
    if hint_mode is not None:
        scenario["hintMode"] = hint_mode
    meta: dict[str, object] = {}
    if tag is not None:
        meta["tag"] = tag
    if timestamp is not None:
        meta["timestamp"] = timestamp
    return {
        "scenario": scenario,
        "result": {"identifiedTrees": removals},
        "meta": meta,
        "llm": {"model": model} if model is not None else {},
    }


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def gallery_project(temp_dir: Path) -> Generator[Path, None, None]:
    """Create a temporary parkgallery project directory."""
    config_dir = temp_dir / ".parkgallery"
    config_dir.mkdir()
    (config_dir / "config.yaml").write_text("threshold: 0.5\ncomposite: true\n")

    # Change to temp directory
    os.chdir(temp_dir)

    yield temp_dir

    # Always return to original cwd
    os.chdir(_original_cwd)


@pytest.fixture
def record() -> RecordFactory:
    """Factory for parsed records; ``index`` sets the upload position."""

    def _make(name: str = "run.json", index: int = 0, **kwargs: object) -> ResultRecord:
        return parse_result(make_result(**kwargs), name, batch_index=index)  # type: ignore[arg-type]

    return _make


@pytest.fixture
def write_results(temp_dir: Path) -> Callable[[dict[str, dict[str, object]]], list[Path]]:
    """Write ``{filename: payload}`` as JSON files into a results directory."""

    def _write(payloads: dict[str, dict[str, object]]) -> list[Path]:
        results_dir = temp_dir / "results"
        results_dir.mkdir(exist_ok=True)
        paths: list[Path] = []
        for name, payload in payloads.items():
            path = results_dir / name
            path.write_text(json.dumps(payload))
            paths.append(path)
        return paths

    return _write
