# Copyright (c) Syntropy Systems
"""Canonical scenario signatures and removal-id normalization."""
from __future__ import annotations

import json
import re
from collections.abc import Iterable, Mapping
from typing import Union

from parkgallery.models.scenario import InvalidLayoutError, ParkLayout

__all__ = [
    "InvalidLayoutError",
    "normalize_removals",
    "normalized_key",
    "scenario_signature",
]

_LEADING_INT = re.compile(r"[+-]?\d+")

RawRemovals = Union[str, int, Iterable[Union[str, int]], None]


def _format_number(value: float) -> str:
    """Format a number the way it appears in the source JSON (30, not 30.0)."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def scenario_signature(layout: ParkLayout | Mapping[str, object]) -> str:
    """Build the canonical signature of a park layout.

    Two layouts describe the same park iff their signatures are equal. Tree
    order in the input does not matter.

    Raises:
        InvalidLayoutError: if ``layout`` is not a usable layout.

    """
    park = ParkLayout.from_raw(layout)
    entries = sorted(
        f"{tree.tree_id}:{tree.x:.6f},{tree.y:.6f}" for tree in park.trees
    )
    width = _format_number(park.width)
    height = _format_number(park.height)
    radius = _format_number(park.tree_radius)
    return f"{width}x{height}|r={radius}|{'|'.join(entries)}"


def _parse_token(token: str) -> int | None:
    match = _LEADING_INT.match(token.strip())
    if match is None:
        return None
    return int(match.group())


def normalize_removals(raw: RawRemovals) -> list[int]:
    """Normalize a removal-id list to sorted, de-duplicated integers.

    Accepts the comma-separated string found in result files, a single
    number, or an iterable of ids. Unparsable tokens are dropped.
    """
    if raw is None or isinstance(raw, bool):
        return []
    if isinstance(raw, int):
        return [raw]
    tokens = raw.split(",") if isinstance(raw, str) else [str(item) for item in raw]

    ids: set[int] = set()
    for token in tokens:
        parsed = _parse_token(token)
        if parsed is not None:
            ids.add(parsed)
    return sorted(ids)


def normalized_key(ids: Iterable[int]) -> str:
    """Serialize normalized ids as a compact JSON array, e.g. ``[1,2,10]``."""
    return json.dumps(sorted(set(ids)), separators=(",", ":"))
