# src/viewer_core/folders.py
"""
Folder partitioning for multi-folder selections.

When the user picks a directory, the browser hands over a flat list of
files carrying their relative paths ("study/series1/img.dcm"). Files are
grouped by their top-level folder so each folder can be loaded as its own
dataset. Files without a folder land in the "(root)" bucket.

Bucket order is sorted, not insertion order, so selecting the same file
set twice always yields the same buttons in the same order.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
import os
from pathlib import PurePath
from typing import Any, Dict, List, Optional, Sequence

from .config import DEFAULT_CONFIG, ViewerConfig
from .errors import BucketNotFound

logger = logging.getLogger(__name__)


def relative_path_of(file: Any) -> str:
    """
    Best-effort relative path of a file handle.

    Accepts plain strings/paths, or objects exposing `relative_path`
    (or the browser's `webkitRelativePath`) and `name`.
    """
    if isinstance(file, str):
        return file
    if isinstance(file, os.PathLike):
        return PurePath(file).as_posix()
    for attr in ('relative_path', 'webkitRelativePath'):
        value = getattr(file, attr, None)
        if value:
            return str(value)
    name = getattr(file, 'name', None)
    if name is not None:
        return str(name)
    return str(file)


def bucket_name_for(path: str, config: ViewerConfig = DEFAULT_CONFIG) -> str:
    """First path segment when the path has a folder, else the root sentinel."""
    segments = path.split(config.path_separator)
    if len(segments) > 1:
        return segments[0]
    return config.root_bucket


@dataclass
class FolderPartition:
    """
    Files grouped by top-level folder.

    Attributes:
        buckets: folder name -> files, in original relative order
        ordered_bucket_names: sorted folder names (code point order)
        selected_bucket: current selection, first name by default
        files: the full input, in input order
    """
    buckets: Dict[str, List[Any]] = field(default_factory=dict)
    ordered_bucket_names: List[str] = field(default_factory=list)
    selected_bucket: Optional[str] = None
    files: List[Any] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.buckets

    def select_bucket(self, name: str) -> List[Any]:
        """
        Select a folder and return its files.

        Raises:
            BucketNotFound: if `name` is not a folder of this partition
        """
        if name not in self.buckets:
            raise BucketNotFound(name, self.ordered_bucket_names)
        self.selected_bucket = name
        return list(self.buckets[name])

    def files_to_load(self) -> List[Any]:
        """Files of the selected folder, or every file when nothing is selected."""
        if self.selected_bucket is not None:
            return list(self.buckets[self.selected_bucket])
        return list(self.files)


def partition(files: Sequence[Any], config: ViewerConfig = DEFAULT_CONFIG) -> FolderPartition:
    """
    Group files by the first segment of their relative path.

    Args:
        files: file handles (see relative_path_of for accepted shapes)
        config: supplies the root sentinel and path separator

    Returns:
        FolderPartition with the first sorted folder selected
    """
    buckets: Dict[str, List[Any]] = {}
    for f in files:
        key = bucket_name_for(relative_path_of(f), config)
        buckets.setdefault(key, []).append(f)

    ordered = sorted(buckets)
    selected = ordered[0] if ordered else None

    logger.info("Partitioned %d files into %d folders", len(files), len(ordered))
    return FolderPartition(
        buckets=buckets,
        ordered_bucket_names=ordered,
        selected_bucket=selected,
        files=list(files),
    )
