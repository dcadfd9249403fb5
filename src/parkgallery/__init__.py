"""
parkgallery - Park scenario result gallery.

Group LLM tree-removal results by park layout, tag duplicate answers,
and render majority-vote composites.
"""

from parkgallery.config import GalleryConfig, load_config
from parkgallery.parser import load_batch, parse_batch, parse_result
from parkgallery.pipeline import BatchResult, process_batch

__version__ = "0.3.0"
__all__ = [
    "BatchResult",
    "GalleryConfig",
    "__version__",
    "load_batch",
    "load_config",
    "parse_batch",
    "parse_result",
    "process_batch",
]
