# Copyright (c) Syntropy Systems
"""Pydantic models for uploaded result files and normalized records."""

from __future__ import annotations

from pydantic import Field, field_validator

from .base import ExtraAllowModel, GalleryBaseModel, JSONValue
from .scenario import ParkLayout

UNKNOWN_MODEL = "<<unknown>>"


def _text_or_none(value: object) -> str | None:
    """Stringify a free-text field, treating empty values as absent."""
    if value is None or value == "" or value is False:
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class _Section(ExtraAllowModel):
    """Optional section of a result file; ``null`` behaves like ``{}``."""


class ScenarioSection(_Section):
    """The ``scenario`` block of a result file."""

    trees: JSONValue = None
    csv_hash: str | None = Field(default=None, alias="csvHash")
    hint_mode: str | None = Field(default=None, alias="hintMode")

    @field_validator("csv_hash", "hint_mode", mode="before")
    @classmethod
    def _stringify(cls, value: object) -> str | None:
        return _text_or_none(value)


class ResultSection(_Section):
    """The ``result`` block of a result file."""

    identified_trees: JSONValue = Field(default=None, alias="identifiedTrees")


class MetaSection(_Section):
    """The ``meta`` block of a result file."""

    tag: str | None = None
    timestamp: str | None = None

    @field_validator("tag", "timestamp", mode="before")
    @classmethod
    def _stringify(cls, value: object) -> str | None:
        return _text_or_none(value)


class LlmSection(_Section):
    """The ``llm`` block of a result file."""

    model: str | None = None

    @field_validator("model", mode="before")
    @classmethod
    def _stringify(cls, value: object) -> str | None:
        return _text_or_none(value)


class ResultFile(ExtraAllowModel):
    """Top-level shape of one uploaded result file."""

    scenario: ScenarioSection
    result: ResultSection = Field(default_factory=ResultSection)
    meta: MetaSection = Field(default_factory=MetaSection)
    llm: LlmSection = Field(default_factory=LlmSection)

    @field_validator("result", "meta", "llm", mode="before")
    @classmethod
    def _null_as_empty(cls, value: object) -> object:
        return {} if value is None else value


class ResultRecord(GalleryBaseModel):
    """One parsed result, normalized for grouping and tagging.

    ``model_tag`` and ``model_hint_tag`` are attached by the tagging stage
    and are never overwritten once set.
    """

    layout: ParkLayout
    removal_ids: list[int] = Field(default_factory=list)
    raw_removals: str = ""
    source_file: str
    display_stem: str
    model: str = UNKNOWN_MODEL
    hint_mode: str = ""
    meta_tag: str = ""
    timestamp: str | None = None
    csv_hash: str | None = None
    batch_index: int = 0

    model_tag: str | None = None
    model_hint_tag: str | None = None

    @property
    def tags(self) -> list[str]:
        """Assigned duplicate-set tags, model tag first."""
        return [t for t in (self.model_tag, self.model_hint_tag) if t]
