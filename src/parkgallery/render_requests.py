# Copyright (c) Syntropy Systems
"""Assembly of ordered render requests for the rasterizer."""
from __future__ import annotations

import re
from typing import TYPE_CHECKING

from parkgallery.composite import composite_removals, threshold_percent
from parkgallery.models.render import (
    COMPOSITE_TAG,
    ORIGINAL_TAG,
    RenderRequest,
    RenderTags,
)
from parkgallery.signature import normalized_key

if TYPE_CHECKING:
    from collections.abc import Sequence

    from parkgallery.grouping import HintCohort, ScenarioGroup
    from parkgallery.models.result import ResultRecord

_DIGITS = re.compile(r"(\d+)")


def derive_original_stem(stem: str) -> str:
    """Truncate a display stem just after its second ``]``, if it has one."""
    first = stem.find("]")
    if first == -1:
        return stem
    second = stem.find("]", first + 1)
    if second == -1:
        return stem
    return stem[: second + 1]


def natural_key(text: str) -> tuple[str | int, ...]:
    """Sort key comparing digit runs numerically, so ``"1,2"`` < ``"1,10"``."""
    parts = _DIGITS.split(text)
    return tuple(int(p) if i % 2 else p for i, p in enumerate(parts))


def member_sort_key(record: ResultRecord) -> tuple[int, tuple[str | int, ...]]:
    """Order members by removal count, then by their id list."""
    joined = ",".join(str(i) for i in record.removal_ids)
    return len(record.removal_ids), natural_key(joined)


def sort_members(members: Sequence[ResultRecord]) -> list[ResultRecord]:
    """Stable sort of a hint cohort's members for rendering."""
    return sorted(members, key=member_sort_key)


def original_request(group: ScenarioGroup, group_index: int) -> RenderRequest:
    """The unmodified park of a scenario group, from its first member."""
    first = group.first
    return RenderRequest(
        layout=first.layout,
        removal_ids=[],
        label=derive_original_stem(first.display_stem) or first.display_stem,
        tags=RenderTags(
            kind="original",
            model_tag=ORIGINAL_TAG,
            model=first.model,
            hint_mode=first.hint_mode,
            timestamp=first.timestamp,
            scenario_hash=group.csv_hash or None,
            meta_tag=group.meta_tag,
            normalized_key=normalized_key([]),
            source_file=first.source_file,
            group_index=group_index,
        ),
    )


def composite_request(
    group: ScenarioGroup,
    cohort: HintCohort,
    group_index: int,
    threshold: float,
) -> RenderRequest:
    """The majority-vote park of one model/hint cohort."""
    removal_ids = composite_removals(cohort.members, threshold)
    stem = derive_original_stem(group.first.display_stem) or group.first.display_stem
    hint_label = cohort.hint_mode or "none"
    return RenderRequest(
        layout=group.first.layout,
        removal_ids=removal_ids,
        label=f"{stem}_{cohort.model}_{hint_label}_{threshold_percent(threshold)}",
        tags=RenderTags(
            kind="composite",
            model_tag=COMPOSITE_TAG,
            model=cohort.model,
            hint_mode=cohort.hint_mode,
            timestamp=group.timestamp or None,
            scenario_hash=group.csv_hash or None,
            meta_tag=group.meta_tag,
            normalized_key=normalized_key(removal_ids),
            group_index=group_index,
            threshold=threshold,
        ),
    )


def member_request(
    group: ScenarioGroup, record: ResultRecord, group_index: int
) -> RenderRequest:
    """One result record as proposed by its model."""
    return RenderRequest(
        layout=record.layout,
        removal_ids=list(record.removal_ids),
        label=record.display_stem,
        tags=RenderTags(
            kind="member",
            model_tag=record.model_tag,
            model_hint_tag=record.model_hint_tag,
            model=record.model,
            hint_mode=record.hint_mode,
            timestamp=record.timestamp,
            scenario_hash=group.csv_hash or None,
            meta_tag=group.meta_tag,
            normalized_key=normalized_key(record.removal_ids),
            source_file=record.source_file,
            group_index=group_index,
        ),
    )


def build_render_requests(
    groups: Sequence[ScenarioGroup],
    threshold: float,
    *,
    composite: bool = True,
) -> list[RenderRequest]:
    """Build render requests for tagged scenario groups, in display order.

    Each group yields its ORIGINAL, then for every model cohort and hint
    cohort an optional COMPOSITE followed by the sorted members.
    """
    requests: list[RenderRequest] = []
    for group_index, group in enumerate(groups):
        requests.append(original_request(group, group_index))
        for cohort in group.iter_hint_cohorts():
            if composite:
                requests.append(
                    composite_request(group, cohort, group_index, threshold)
                )
            requests.extend(
                member_request(group, record, group_index)
                for record in sort_members(cohort.members)
            )
    return requests


def caption_lines(request: RenderRequest) -> list[str]:
    """Text shown under a rendered image."""
    lines: list[str] = []
    tags = request.tags

    if tags.kind != "original":
        total = len(request.layout.trees)
        remaining = len(request.layout.remaining_trees(request.removal_ids))
        if request.removal_ids:
            removed = ", ".join(str(i) for i in request.removal_ids)
            lines.append(f"Tree ids removed: {removed}")
        lines.append(f"Trees remaining: {remaining} (of {total})")

    parts = [f"[{t}]" for t in (tags.model_tag, tags.model_hint_tag) if t]
    if parts:
        prefix = "Duplicate sets: " if tags.duplicate_tags else ""
        lines.append(prefix + " ".join(parts))

    return lines
