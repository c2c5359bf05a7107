# src/viewer_core/__init__.py
"""
Viewer Core - Non-visual logic of the DICOM viewing widget.

This package contains pure Python logic with ZERO UI or rendering
dependencies. All modules accept/return plain Python objects.

Architecture:
- events.py: LoadEvent values for the engine's load event stream
- load_session.py: LoadSession state and the apply_event() transition
- folders.py: partition() of selected files into top-level folders
- tags.py: TagFlattener - metadata dictionary to display rows
- search.py: filter_rows() - case-insensitive row search
- tools.py: tool registry, capability gating, orientation cycle
- controller.py: ViewerController glue and ViewModel
- config.py / errors.py: ViewerConfig and the exception taxonomy
- cli.py: viewer-tags developer CLI

HARD RULE: no UI toolkit imports in this package.
"""

# Configuration & errors
from .config import ViewerConfig, DEFAULT_CONFIG
from .errors import ViewerCoreError, BucketNotFound, UnknownEventError

# Load lifecycle
from .events import LoadEvent, LoadEventKind
from .load_session import (
    Capabilities,
    EventResult,
    LoadOutcome,
    LoadSession,
    LoadStatus,
    SideEffect,
    SideEffectType,
    apply_event,
)

# Folders
from .folders import FolderPartition, partition, bucket_name_for

# Tags
from .tags import (
    DisplayRow,
    InstanceSelector,
    TagFlattener,
    TagLeaf,
    TagSequence,
    dataset_to_tag_dict,
    flatten_tags,
    instance_numbers,
    is_dicom_meta,
)

# Search
from .search import filter_rows

# Tools & controller
from .tools import TOOLS, can_run_tool, next_orientation
from .controller import ViewerController, ViewModel, ViewingEngine

__version__ = "0.1.0"

__all__ = [
    # Config / errors
    'ViewerConfig',
    'DEFAULT_CONFIG',
    'ViewerCoreError',
    'BucketNotFound',
    'UnknownEventError',

    # Load lifecycle
    'LoadEvent',
    'LoadEventKind',
    'Capabilities',
    'EventResult',
    'LoadOutcome',
    'LoadSession',
    'LoadStatus',
    'SideEffect',
    'SideEffectType',
    'apply_event',

    # Folders
    'FolderPartition',
    'partition',
    'bucket_name_for',

    # Tags
    'DisplayRow',
    'InstanceSelector',
    'TagFlattener',
    'TagLeaf',
    'TagSequence',
    'dataset_to_tag_dict',
    'flatten_tags',
    'instance_numbers',
    'is_dicom_meta',

    # Search
    'filter_rows',

    # Tools / controller
    'TOOLS',
    'can_run_tool',
    'next_orientation',
    'ViewerController',
    'ViewModel',
    'ViewingEngine',
]
