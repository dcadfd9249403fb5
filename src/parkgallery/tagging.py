# Copyright (c) Syntropy Systems
"""Duplicate-set detection and short tag assignment."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Literal

from parkgallery.signature import normalized_key

if TYPE_CHECKING:
    from collections.abc import Hashable, Iterable

    from parkgallery.grouping import ScenarioGroup
    from parkgallery.models.result import ResultRecord

logger = logging.getLogger(__name__)

TagField = Literal["model_tag", "model_hint_tag"]

MODEL_TAG_PREFIX = "M"
MODEL_HINT_TAG_PREFIX = "MH"


def index_to_letters(index: int) -> str:
    """Convert a 0-based index to bijective base-26 letters.

    0 -> A, 25 -> Z, 26 -> AA, 27 -> AB, 701 -> ZZ, 702 -> AAA.
    """
    if index < 0:
        msg = f"index must be non-negative, got {index}"
        raise ValueError(msg)

    letters = ""
    n = index + 1
    while n > 0:
        n, rem = divmod(n - 1, 26)
        letters = chr(ord("A") + rem) + letters
    return letters


def duplicate_sets(members: Iterable[ResultRecord]) -> list[list[ResultRecord]]:
    """Group members by normalized removal key, in first-seen key order."""
    by_key: dict[str, list[ResultRecord]] = {}
    for record in members:
        by_key.setdefault(normalized_key(record.removal_ids), []).append(record)
    return list(by_key.values())


def tag_scope(
    members: Iterable[ResultRecord],
    prefix: str,
    tag_field: TagField,
) -> list[str]:
    """Tag every duplicate set of two or more members within one scope.

    A member's tag field is only set when still empty.

    Returns:
        The tags handed out, in assignment order

    """
    assigned: list[str] = []
    for records in duplicate_sets(members):
        if len(records) < 2:
            continue
        tag = f"{prefix}.{index_to_letters(len(assigned))}"
        assigned.append(tag)
        for record in records:
            if getattr(record, tag_field) is None:
                setattr(record, tag_field, tag)
    return assigned


def _scopes(
    members: Iterable[ResultRecord],
    scope_key: Callable[[ResultRecord], Hashable],
) -> list[list[ResultRecord]]:
    scopes: dict[Hashable, list[ResultRecord]] = {}
    for record in members:
        scopes.setdefault(scope_key(record), []).append(record)
    return list(scopes.values())


def assign_duplicate_tags(group: ScenarioGroup) -> None:
    """Assign ``M.*`` tags per model and ``MH.*`` tags per (model, hint mode).

    Both passes scan the whole scenario group in upload order. Duplicates are
    detected on the removal set alone.
    """
    for scope in _scopes(group.members, lambda r: r.model):
        tags = tag_scope(scope, MODEL_TAG_PREFIX, "model_tag")
        if tags:
            logger.debug("Model %r: duplicate sets %s", scope[0].model, tags)

    for scope in _scopes(group.members, lambda r: (r.model, r.hint_mode)):
        tags = tag_scope(scope, MODEL_HINT_TAG_PREFIX, "model_hint_tag")
        if tags:
            logger.debug(
                "Model %r hint %r: duplicate sets %s",
                scope[0].model,
                scope[0].hint_mode,
                tags,
            )
