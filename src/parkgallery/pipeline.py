# Copyright (c) Syntropy Systems
"""Batch pipeline: records in; groups, render requests and manifest out."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from parkgallery.composite import clamp_threshold
from parkgallery.config import GalleryConfig
from parkgallery.grouping import group_records
from parkgallery.manifest import assign_filenames, build_manifest
from parkgallery.render_requests import build_render_requests
from parkgallery.tagging import assign_duplicate_tags

if TYPE_CHECKING:
    from collections.abc import Sequence

    from parkgallery.grouping import ScenarioGroup
    from parkgallery.models.render import Manifest, ParseFailure, RenderRequest
    from parkgallery.models.result import ResultRecord

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Everything derived from one batch of result files."""

    groups: list[ScenarioGroup]
    requests: list[RenderRequest]
    filenames: list[str]
    manifest: Manifest
    failures: list[ParseFailure] = field(default_factory=list)

    def planned_images(self) -> list[tuple[str, RenderRequest]]:
        """``(filename, request)`` pairs in render order."""
        return list(zip(self.filenames, self.requests))


def process_batch(
    records: Sequence[ResultRecord],
    config: GalleryConfig | None = None,
    failures: Sequence[ParseFailure] = (),
    *,
    generated_at: str | None = None,
) -> BatchResult:
    """Group, tag and composite a batch of parsed records.

    Works on copies: the tag fields of the given records are left untouched,
    so the same records can be processed again with a different config.
    """
    if config is None:
        config = GalleryConfig()
    threshold = clamp_threshold(config.threshold)

    fresh = [
        record.model_copy(update={"model_tag": None, "model_hint_tag": None})
        for record in records
    ]

    groups = group_records(fresh)
    for group in groups:
        assign_duplicate_tags(group)

    requests = build_render_requests(groups, threshold, composite=config.composite)
    filenames = assign_filenames(requests)
    manifest = build_manifest(
        groups,
        requests,
        filenames,
        failures,
        threshold=threshold,
        composite=config.composite,
        generated_at=generated_at,
    )

    logger.info(
        "Processed %d record(s) into %d group(s), %d image(s); %d failure(s)",
        len(fresh),
        len(groups),
        len(requests),
        len(failures),
    )

    return BatchResult(
        groups=groups,
        requests=requests,
        filenames=filenames,
        manifest=manifest,
        failures=list(failures),
    )
