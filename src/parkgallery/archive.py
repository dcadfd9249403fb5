# Copyright (c) Syntropy Systems
"""Writing rendered images and the manifest to a directory or zip archive."""
from __future__ import annotations

import zipfile
from datetime import datetime
from typing import TYPE_CHECKING

from parkgallery.manifest import MANIFEST_NAME
from parkgallery.raster import encode_png, render_request

if TYPE_CHECKING:
    from pathlib import Path

    from parkgallery.pipeline import BatchResult


def archive_name(now: datetime | None = None) -> str:
    """Archive file name stamped with local time, e.g. ``20240131-235959``."""
    if now is None:
        now = datetime.now()  # noqa: DTZ005
    return f"{now.strftime('%Y%m%d-%H%M%S')}_park_images.zip"


def manifest_json(result: BatchResult) -> str:
    """Serialize the batch manifest."""
    return result.manifest.model_dump_json(by_alias=True, indent=2)


def write_directory(result: BatchResult, target: Path, size: int = 1360) -> Path:
    """Write each image and ``metadata.json`` into ``target``."""
    target.mkdir(parents=True, exist_ok=True)
    for filename, request in result.planned_images():
        _ = (target / filename).write_bytes(encode_png(render_request(request, size)))
    _ = (target / MANIFEST_NAME).write_text(manifest_json(result))
    return target


def write_archive(
    result: BatchResult,
    target_dir: Path,
    size: int = 1360,
    now: datetime | None = None,
) -> Path:
    """Write every image plus ``metadata.json`` into a timestamped zip."""
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / archive_name(now)
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for filename, request in result.planned_images():
            zf.writestr(filename, encode_png(render_request(request, size)))
        zf.writestr(MANIFEST_NAME, manifest_json(result))
    return path
