# Copyright (c) Syntropy Systems
"""Image filenames and the batch manifest."""
from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from parkgallery.models.render import (
    Manifest,
    ManifestDuplicates,
    ManifestGroup,
    ManifestImage,
    ManifestMember,
)
from parkgallery.signature import normalized_key

if TYPE_CHECKING:
    from collections.abc import Sequence

    from parkgallery.grouping import ScenarioGroup
    from parkgallery.models.render import ParseFailure, RenderRequest
    from parkgallery.models.result import ResultRecord

MANIFEST_NAME = "metadata.json"

_UNSAFE = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def utcnow() -> str:
    """Get current UTC time as ISO format string."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def safe_filename(stem: str, suffix: str = ".png") -> str:
    """Replace characters that are not allowed in file names."""
    cleaned = _UNSAFE.sub("_", stem).strip() or "image"
    return f"{cleaned}{suffix}"


def assign_filenames(requests: Sequence[RenderRequest]) -> list[str]:
    """One unique PNG filename per request, suffixing ``-2``, ``-3`` on clashes."""
    used: set[str] = set()
    filenames: list[str] = []
    for request in requests:
        name = safe_filename(request.file_stem)
        count = 1
        while name in used:
            count += 1
            name = safe_filename(f"{request.file_stem}-{count}")
        used.add(name)
        filenames.append(name)
    return filenames


def _manifest_group(group: ScenarioGroup) -> ManifestGroup:
    return ManifestGroup(
        tag=group.meta_tag,
        timestamp=group.timestamp,
        csv_hash=group.csv_hash,
        park_layout=group.csv_hash,
        run_tag=group.meta_tag,
        signature=group.signature,
        members=[
            ManifestMember(file=record.source_file, tags=record.tags)
            for record in group.members
        ],
    )


def _duplicates(records: Sequence[ResultRecord]) -> ManifestDuplicates:
    duplicates = ManifestDuplicates()
    for record in records:
        key = normalized_key(record.removal_ids)
        by_key = duplicates.model_groups.setdefault(record.model, {})
        by_key.setdefault(key, []).append(record.source_file)

        by_hint = duplicates.model_hint_groups.setdefault(record.model, {})
        by_hint_key = by_hint.setdefault(record.hint_mode, {})
        by_hint_key.setdefault(key, []).append(record.source_file)
    return duplicates


def build_manifest(  # noqa: PLR0913
    groups: Sequence[ScenarioGroup],
    requests: Sequence[RenderRequest],
    filenames: Sequence[str],
    failures: Sequence[ParseFailure],
    *,
    threshold: float,
    composite: bool,
    generated_at: str | None = None,
) -> Manifest:
    """Describe which image came from which input file and cohort."""
    images = [
        ManifestImage(
            filename=filename,
            original_file=request.tags.source_file,
            model=request.tags.model,
            hint_mode=request.tags.hint_mode,
            normalized_key=request.tags.normalized_key,
            timestamp=request.tags.timestamp,
            model_tag=request.tags.model_tag,
            model_hint_tag=request.tags.model_hint_tag,
            group_index=request.tags.group_index,
            kind=request.tags.kind,
        )
        for request, filename in zip(requests, filenames)
    ]

    records = [record for group in groups for record in group.members]
    mapping: dict[str, list[str]] = {record.source_file: [] for record in records}
    for image in images:
        if image.original_file is not None:
            mapping.setdefault(image.original_file, []).append(image.filename)

    return Manifest(
        generated_at=generated_at or utcnow(),
        threshold=threshold,
        composite=composite,
        images=images,
        groups=[_manifest_group(group) for group in groups],
        duplicates=_duplicates(records),
        mapping=mapping,
        failures=list(failures),
    )
