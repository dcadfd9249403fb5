# Copyright (c) Syntropy Systems
"""Majority-vote composite removal sets."""
from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from parkgallery.models.result import ResultRecord

DEFAULT_THRESHOLD = 0.5


def clamp_threshold(value: float | None) -> float:
    """Clamp a vote threshold to [0, 1]; ``None`` means the 50% default."""
    if value is None:
        return DEFAULT_THRESHOLD
    return min(1.0, max(0.0, float(value)))


def vote_counts(members: Sequence[ResultRecord]) -> Counter[int]:
    """Count, per tree id, how many members voted to remove it."""
    counts: Counter[int] = Counter()
    for record in members:
        counts.update(set(record.removal_ids))
    return counts


def composite_removals(
    members: Sequence[ResultRecord],
    threshold: float | None = DEFAULT_THRESHOLD,
) -> list[int]:
    """Tree ids removed by at least ``threshold`` of the members.

    The boundary is inclusive: with 4 members and threshold 0.75, an id
    voted by 3 members is included.
    """
    total = len(members)
    if total == 0:
        return []

    cutoff = clamp_threshold(threshold)
    counts = vote_counts(members)
    return sorted(tree_id for tree_id, n in counts.items() if n / total >= cutoff)


def threshold_percent(threshold: float) -> str:
    """Format a threshold as a percentage label, e.g. ``50%`` or ``62.5%``."""
    pct = round(clamp_threshold(threshold) * 100, 2)
    if pct.is_integer():
        return f"{int(pct)}%"
    return f"{pct:g}%"
