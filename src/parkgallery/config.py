# Copyright (c) Syntropy Systems
"""Configuration management for parkgallery."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import cast

import yaml

from parkgallery.composite import DEFAULT_THRESHOLD, clamp_threshold

CONFIG_DIR_NAME = ".parkgallery"
CONFIG_FILE_NAME = "config.yaml"


@dataclass
class GalleryConfig:
    """Configuration for a gallery batch."""

    # Fraction of cohort members that must remove a tree for the composite
    threshold: float = DEFAULT_THRESHOLD

    # Emit one COMPOSITE image per model/hint cohort
    composite: bool = True

    # Square image edge in pixels
    image_size: int = 1360

    # Write a zip archive instead of a plain directory
    archive: bool = True

    # Where rendered output goes
    output_dir: str = "gallery"

    def to_dict(self) -> dict[str, object]:
        """Plain mapping suitable for ``config.yaml``."""
        return {
            "threshold": self.threshold,
            "composite": self.composite,
            "image_size": self.image_size,
            "archive": self.archive,
            "output_dir": self.output_dir,
        }


def find_config_dir(start_path: Path | None = None) -> Path | None:
    """Find the nearest .parkgallery directory by walking up from start_path.

    Returns None if no .parkgallery directory is found.
    """
    if start_path is None:
        start_path = Path.cwd()

    current = start_path.resolve()

    while current != current.parent:
        config_dir = current / CONFIG_DIR_NAME
        if config_dir.is_dir():
            return config_dir
        current = current.parent

    # Check root
    config_dir = current / CONFIG_DIR_NAME
    if config_dir.is_dir():
        return config_dir

    return None


def get_global_config_dir() -> Path:
    """Get the global parkgallery config directory (~/.parkgallery)."""
    return Path.home() / CONFIG_DIR_NAME


def load_config(config_dir: Path | None = None) -> GalleryConfig:
    """Load configuration from .parkgallery/config.yaml or defaults.

    Looks for config in:
    1. Provided config_dir
    2. Nearest .parkgallery directory walking up
    3. ~/.parkgallery/config.yaml
    4. Defaults

    Values of the wrong type are ignored; the threshold is clamped to [0, 1].
    """
    config = GalleryConfig()

    config_path = None

    if config_dir is not None:
        config_path = config_dir / CONFIG_FILE_NAME
    else:
        found_dir = find_config_dir()
        if found_dir is not None:
            config_path = found_dir / CONFIG_FILE_NAME
        else:
            global_config = get_global_config_dir() / CONFIG_FILE_NAME
            if global_config.exists():
                config_path = global_config

    if config_path is not None and config_path.exists():
        with config_path.open() as f:
            data = cast("dict[str, object]", yaml.safe_load(f) or {})

        threshold = data.get("threshold")
        if isinstance(threshold, (int, float)) and not isinstance(threshold, bool):
            config.threshold = clamp_threshold(threshold)
        composite = data.get("composite")
        if isinstance(composite, bool):
            config.composite = composite
        image_size = data.get("image_size")
        if (
            isinstance(image_size, int)
            and not isinstance(image_size, bool)
            and image_size > 0
        ):
            config.image_size = image_size
        archive = data.get("archive")
        if isinstance(archive, bool):
            config.archive = archive
        output_dir = data.get("output_dir")
        if isinstance(output_dir, str) and output_dir:
            config.output_dir = output_dir

    return config
