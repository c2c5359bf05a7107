# src/viewer_core/tools.py
"""
Viewer tools and view orientation.

The tool set is fixed. Scroll and WindowLevel depend on what the loaded
data supports (see LoadSession capabilities); the others are always
available once data is loaded.
"""
from __future__ import annotations

from typing import Dict, List, Optional

from .load_session import Capabilities, TOOL_SCROLL, TOOL_ZOOM_AND_PAN

TOOL_WINDOW_LEVEL = "WindowLevel"
TOOL_DRAW = "Draw"

# Tool name -> tool options (Draw shapes)
TOOLS: Dict[str, Dict[str, List[str]]] = {
    TOOL_SCROLL: {},
    TOOL_ZOOM_AND_PAN: {},
    TOOL_WINDOW_LEVEL: {},
    TOOL_DRAW: {'options': ['Ruler']},
}

ORIENTATIONS = ('axial', 'coronal', 'sagittal')


def tool_names() -> List[str]:
    return list(TOOLS)


def default_shape(tool: str) -> Optional[str]:
    """First drawing shape of a tool, None for tools without shapes."""
    options = TOOLS.get(tool, {}).get('options')
    return options[0] if options else None


def can_run_tool(tool: str, capabilities: Capabilities) -> bool:
    if tool == TOOL_SCROLL:
        return capabilities.can_scroll
    if tool == TOOL_WINDOW_LEVEL:
        return capabilities.can_adjust_contrast
    return True


def next_orientation(current: Optional[str]) -> str:
    """
    Orientation after `current`: axial -> coronal -> sagittal -> axial.

    The initial (unset) view is acquisition-defined; the first toggle
    goes to coronal.
    """
    if current not in ORIENTATIONS:
        return 'coronal'
    return ORIENTATIONS[(ORIENTATIONS.index(current) + 1) % len(ORIENTATIONS)]
