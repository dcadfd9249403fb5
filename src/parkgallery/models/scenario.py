# Copyright (c) Syntropy Systems
"""Pydantic models for park scenario layouts."""

from __future__ import annotations

import json
from typing import ClassVar, Union, cast

from pydantic import ConfigDict, Field, ValidationError, field_validator, model_validator

from .base import CamelModel

DEFAULT_PARK_SIZE = 30

Number = Union[int, float]


class InvalidLayoutError(ValueError):
    """Raised when a scenario layout cannot be interpreted."""


class Tree(CamelModel):
    """A single circular tree placed in the park."""

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    tree_id: int
    x: float
    y: float


class ParkLayout(CamelModel):
    """Park dimensions, tree radius and tree positions.

    Width and height fall back to ``parkWidth``/``parkHeight`` and then to
    30 when missing or zero. A missing radius is 0.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    width: Number = DEFAULT_PARK_SIZE
    height: Number = DEFAULT_PARK_SIZE
    tree_radius: Number = 0
    trees: tuple[Tree, ...] = Field(default_factory=tuple)

    @model_validator(mode="before")
    @classmethod
    def _apply_defaults(cls, data: object) -> object:
        if not isinstance(data, dict):
            return data
        raw = cast("dict[str, object]", data)
        values = dict(raw)
        values["width"] = raw.get("width") or raw.get("parkWidth") or DEFAULT_PARK_SIZE
        values["height"] = (
            raw.get("height") or raw.get("parkHeight") or DEFAULT_PARK_SIZE
        )
        radius = raw.get("treeRadius", raw.get("tree_radius"))
        values["treeRadius"] = radius or 0
        values.pop("tree_radius", None)
        if values.get("trees") is None:
            values["trees"] = []
        return values

    @field_validator("trees", mode="before")
    @classmethod
    def _require_list(cls, value: object) -> object:
        if not isinstance(value, (list, tuple)):
            msg = "trees must be a list"
            raise ValueError(msg)  # noqa: TRY004
        return value

    @classmethod
    def from_raw(cls, value: object) -> ParkLayout:
        """Build a layout from a mapping, a JSON string or an existing layout.

        Raises:
            InvalidLayoutError: if the value is not a usable layout.

        """
        if isinstance(value, ParkLayout):
            return value
        if isinstance(value, (str, bytes)):
            try:
                value = json.loads(value)
            except (ValueError, RecursionError) as e:
                reason = e.msg if isinstance(e, json.JSONDecodeError) else str(e)
                msg = f"layout is not valid JSON: {reason}"
                raise InvalidLayoutError(msg) from e
        if not isinstance(value, dict):
            msg = f"layout must be an object, got {type(value).__name__}"
            raise InvalidLayoutError(msg)
        try:
            return cls.model_validate(value)
        except ValidationError as e:
            first = e.errors()[0]
            where = ".".join(str(p) for p in first["loc"]) or "layout"
            msg = f"invalid layout at {where}: {first['msg']}"
            raise InvalidLayoutError(msg) from e

    def remaining_trees(self, removal_ids: list[int]) -> list[Tree]:
        """Return the trees that survive removal of ``removal_ids``."""
        removed = set(removal_ids)
        return [tree for tree in self.trees if tree.tree_id not in removed]
