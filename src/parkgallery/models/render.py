# Copyright (c) Syntropy Systems
"""Pydantic models for render requests, failures and the batch manifest."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from .base import CamelModel
from .scenario import ParkLayout

RenderKind = Literal["original", "composite", "member"]

ORIGINAL_TAG = "ORIGINAL"
COMPOSITE_TAG = "COMPOSITE"


class RenderTags(CamelModel):
    """Provenance carried by every render request."""

    kind: RenderKind
    model_tag: str | None = None
    model_hint_tag: str | None = None
    model: str
    hint_mode: str
    timestamp: str | None = None
    scenario_hash: str | None = None
    meta_tag: str = ""
    normalized_key: str
    source_file: str | None = None
    group_index: int
    threshold: float | None = None

    @property
    def duplicate_tags(self) -> list[str]:
        """Tags of the ``M.*``/``MH.*`` duplicate-set kind."""
        return [
            t
            for t in (self.model_tag, self.model_hint_tag)
            if t and t.startswith(("M.", "MH."))
        ]


class RenderRequest(CamelModel):
    """Everything an external rasterizer needs to draw and file one image."""

    layout: ParkLayout
    removal_ids: list[int] = Field(default_factory=list)
    label: str
    tags: RenderTags

    @property
    def file_stem(self) -> str:
        """Label with the model/model-hint tags appended, as used for filenames."""
        stem = self.label
        if self.tags.model_tag:
            stem += f"_[{self.tags.model_tag}]"
        if self.tags.model_hint_tag:
            stem += f"_[{self.tags.model_hint_tag}]"
        return stem


class ParseFailure(CamelModel):
    """A result file that could not be parsed and was left out of the batch."""

    source_file: str
    reason: str


class ManifestImage(CamelModel):
    """One produced image in the manifest."""

    filename: str
    original_file: str | None = None
    model: str
    hint_mode: str
    normalized_key: str
    timestamp: str | None = None
    model_tag: str | None = None
    model_hint_tag: str | None = None
    group_index: int
    kind: RenderKind


class ManifestMember(CamelModel):
    """A group member and the duplicate-set tags it received."""

    file: str
    tags: list[str] = Field(default_factory=list)


class ManifestGroup(CamelModel):
    """Summary of one scenario group."""

    tag: str
    timestamp: str
    csv_hash: str
    park_layout: str
    run_tag: str
    signature: str
    members: list[ManifestMember] = Field(default_factory=list)


class ManifestDuplicates(CamelModel):
    """Batch-wide index of files sharing a normalized key."""

    model_groups: dict[str, dict[str, list[str]]] = Field(default_factory=dict)
    model_hint_groups: dict[str, dict[str, dict[str, list[str]]]] = Field(
        default_factory=dict
    )


class Manifest(CamelModel):
    """Batch metadata written next to the rendered images."""

    generated_at: str
    threshold: float
    composite: bool
    images: list[ManifestImage] = Field(default_factory=list)
    groups: list[ManifestGroup] = Field(default_factory=list)
    duplicates: ManifestDuplicates = Field(default_factory=ManifestDuplicates)
    mapping: dict[str, list[str]] = Field(default_factory=dict)
    failures: list[ParseFailure] = Field(default_factory=list)
