# Copyright (c) Syntropy Systems
"""Partitioning of a batch into scenario groups and model/hint cohorts."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from parkgallery.signature import scenario_signature

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from parkgallery.models.result import ResultRecord

logger = logging.getLogger(__name__)

# Hint modes rendered first, in this order; "" and "none" share the first slot.
PREFERRED_HINT_ORDER = ("none", "clusters", "densities", "clusters,densities")


@dataclass
class HintCohort:
    """Records of one model that share a hint mode."""

    model: str
    hint_mode: str
    members: list[ResultRecord] = field(default_factory=list)


@dataclass
class ModelCohort:
    """Records of one scenario group that share a model."""

    model: str
    members: list[ResultRecord] = field(default_factory=list)
    hint_cohorts: list[HintCohort] = field(default_factory=list)


@dataclass
class ScenarioGroup:
    """Records sharing a park signature, meta tag and timestamp."""

    signature: str
    meta_tag: str
    timestamp: str
    csv_hash: str = ""
    members: list[ResultRecord] = field(default_factory=list)
    model_cohorts: list[ModelCohort] = field(default_factory=list)

    @property
    def key(self) -> str:
        """Grouping key of this scenario group."""
        return group_key(self.signature, self.meta_tag, self.timestamp)

    @property
    def first(self) -> ResultRecord:
        """First member in upload order."""
        return self.members[0]

    def iter_hint_cohorts(self) -> Iterator[HintCohort]:
        """Every hint cohort of the group, in render order."""
        for cohort in self.model_cohorts:
            yield from cohort.hint_cohorts


def group_key(signature: str, meta_tag: str, timestamp: str | None) -> str:
    """Build the key identifying a scenario group."""
    return f"{signature}||{meta_tag}||{timestamp or ''}"


def hint_rank(hint_mode: str) -> int:
    """Rank of a hint mode in the preferred render order."""
    if hint_mode == "":
        return 0
    if hint_mode in PREFERRED_HINT_ORDER:
        return PREFERRED_HINT_ORDER.index(hint_mode)
    return len(PREFERRED_HINT_ORDER)


def order_hint_cohorts(cohorts: list[HintCohort]) -> list[HintCohort]:
    """Sort hint cohorts into preferred order, keeping insertion order otherwise."""
    return sorted(cohorts, key=lambda c: hint_rank(c.hint_mode))


def partition_model_cohort(cohort: ModelCohort) -> None:
    """Split a model cohort's members into ordered hint cohorts."""
    by_hint: dict[str, HintCohort] = {}
    for record in cohort.members:
        if record.hint_mode not in by_hint:
            by_hint[record.hint_mode] = HintCohort(
                model=cohort.model, hint_mode=record.hint_mode
            )
        by_hint[record.hint_mode].members.append(record)
    cohort.hint_cohorts = order_hint_cohorts(list(by_hint.values()))


def partition_group(group: ScenarioGroup) -> None:
    """Split a scenario group's members into model cohorts and hint cohorts."""
    by_model: dict[str, ModelCohort] = {}
    for record in group.members:
        if record.model not in by_model:
            by_model[record.model] = ModelCohort(model=record.model)
        by_model[record.model].members.append(record)

    group.model_cohorts = list(by_model.values())
    for cohort in group.model_cohorts:
        partition_model_cohort(cohort)


def group_records(records: Iterable[ResultRecord]) -> list[ScenarioGroup]:
    """Partition records into scenario groups, model cohorts and hint cohorts.

    Groups are ordered by the upload position of their first member. Model
    cohorts keep first-insertion order; hint cohorts follow
    ``PREFERRED_HINT_ORDER`` and then first-insertion order.
    """
    groups: dict[str, ScenarioGroup] = {}

    for record in records:
        signature = scenario_signature(record.layout)
        key = group_key(signature, record.meta_tag, record.timestamp)
        if key not in groups:
            groups[key] = ScenarioGroup(
                signature=signature,
                meta_tag=record.meta_tag,
                timestamp=record.timestamp or "",
                csv_hash=record.csv_hash or "",
            )
        groups[key].members.append(record)

    ordered = sorted(groups.values(), key=lambda g: g.first.batch_index)
    for index, group in enumerate(ordered):
        partition_group(group)
        logger.debug(
            "Group %d: %d member(s), %d model(s), tag=%r timestamp=%r",
            index + 1,
            len(group.members),
            len(group.model_cohorts),
            group.meta_tag,
            group.timestamp,
        )

    return ordered
