# src/viewer_core/config.py
"""
Configuration for viewer_core.

All limits and sentinel names used by the flattening and partitioning
logic live here so the presentation layer can tune them per deployment.
Instances are passed explicitly; there is no module-level singleton.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ViewerConfig:
    """Tunables for tag rendering and folder handling."""
    # Tag value rendering
    max_value_length: int = 200
    max_binary_items: int = 10

    # Folder partitioning
    root_bucket: str = "(root)"
    path_separator: str = "/"

    # Well-known DICOM elements
    pixel_data_tag: str = "7FE00010"
    pixel_data_keyword: str = "PixelData"
    instance_number_tag: str = "00200013"
    instance_number_keyword: str = "InstanceNumber"
    transfer_syntax_tag: str = "00020010"

    # Development builds fail loudly on unknown folder selections
    strict_buckets: bool = False


DEFAULT_CONFIG = ViewerConfig()
