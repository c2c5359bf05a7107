# src/viewer_core/controller.py
"""
Glue between the viewing engine and the viewer_core state.

The engine (decoding, rendering, zoom/pan/window-level) is external. It is
described here only by the ViewingEngine protocol; tests drive the
controller with a fake engine.

Flow:
    file selection -> partition() -> engine.load_files(selected folder)
    engine events  -> handle_event() -> apply_event() -> side effects
    load{dataid}   -> engine.metadata_for() -> TagFlattener rows
    render         -> compute_view_model() (never stored)
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

from .config import DEFAULT_CONFIG, ViewerConfig
from .errors import BucketNotFound
from .events import LoadEvent, LoadEventKind
from .folders import FolderPartition, partition
from .load_session import (
    EventResult,
    LoadSession,
    SideEffect,
    SideEffectType,
    apply_event,
)
from .search import filter_rows
from .tags import DisplayRow, InstanceSelector, TagFlattener
from .tools import TOOLS, can_run_tool, default_shape, next_orientation

logger = logging.getLogger(__name__)


class ViewControllerProtocol(Protocol):
    """Per-dataset view controller exposed by the engine."""
    def can_scroll(self) -> bool: ...
    def is_monochrome(self) -> bool: ...


class ViewingEngine(Protocol):
    """The subset of the rendering engine used by the controller."""
    def load_files(self, files: Sequence[Any]) -> None: ...
    def reset_layout(self) -> None: ...
    def set_tool(self, tool: str) -> None: ...
    def set_tool_features(self, features: Dict[str, Any]) -> None: ...
    def set_data_view_config(self, orientation: str) -> None: ...
    def view_controller_for(self, data_id: Optional[str]) -> ViewControllerProtocol: ...
    def metadata_for(self, data_id: Optional[str]) -> Mapping[str, Any]: ...


@dataclass
class ViewModel:
    """
    Render-only derived state computed from the controller.

    NEVER store this; always recompute.
    """
    progress_percent: int = 0
    data_loaded: bool = False
    show_dropbox: bool = True
    selected_tool: Optional[str] = None
    tool_enabled: Dict[str, bool] = field(default_factory=dict)

    # Folder selection
    folder_names: List[str] = field(default_factory=list)
    selected_folder: Optional[str] = None

    # View actions (all require loaded data)
    orientation: Optional[str] = None
    can_reset: bool = False
    can_toggle_orientation: bool = False
    can_show_tags: bool = False

    notifications: List[str] = field(default_factory=list)

    @property
    def folder_count(self) -> int:
        return len(self.folder_names)


class ViewerController:
    """
    Owns one viewer's LoadSession, folder partition and metadata.

    Each viewer constructs its own controller; nothing is shared.
    """

    def __init__(
        self,
        engine: ViewingEngine,
        config: Optional[ViewerConfig] = None,
        flattener: Optional[TagFlattener] = None,
    ):
        self.engine = engine
        self.config = config or DEFAULT_CONFIG
        self.flattener = flattener or TagFlattener(self.config)
        self.session = LoadSession()
        self.partition = FolderPartition()
        self.metadata: Dict[str, Any] = {}
        self.instance_selector = InstanceSelector()
        self.orientation: Optional[str] = None
        self.selected_tool: Optional[str] = None
        self.show_dropbox = True
        self.notifications: List[str] = []

    # ─────────────────────────────────────────────────────────────────────────
    # File selection
    # ─────────────────────────────────────────────────────────────────────────

    def _start_loading(self, files: List[Any]) -> None:
        self.session.data_loaded = False
        self.session.progress_percent = 0
        self.engine.reset_layout()
        if files:
            self.engine.load_files(files)

    def on_input_files(self, files: Sequence[Any]) -> List[Any]:
        """
        Handle a file or folder selection.

        Files are partitioned by top-level folder and the first folder is
        loaded; a selection without any file loads nothing.

        Returns:
            The files handed to the engine
        """
        self.partition = partition(files, self.config)
        batch = self.partition.files_to_load()
        self._start_loading(batch)
        return batch

    def on_select_folder(self, name: str) -> List[Any]:
        """
        Load another folder of the current selection.

        Raises:
            BucketNotFound: unknown folder and config.strict_buckets is set
        """
        try:
            files = self.partition.select_bucket(name)
        except BucketNotFound:
            if self.config.strict_buckets:
                raise
            logger.warning("Ignoring selection of unknown folder %r", name)
            return []
        self._start_loading(files)
        return files

    # ─────────────────────────────────────────────────────────────────────────
    # Engine events
    # ─────────────────────────────────────────────────────────────────────────

    def handle_engine_event(self, kind: str, payload: Optional[Dict[str, Any]] = None) -> EventResult:
        """Handle a raw (type, payload) engine event."""
        return self.handle_event(LoadEvent.from_engine(kind, payload))

    def handle_event(self, event: LoadEvent) -> EventResult:
        if event.kind == LoadEventKind.RENDER_END and event.can_scroll is None:
            if not self.session.first_render_seen:
                view = self.engine.view_controller_for(event.data_id)
                event = event.with_view_capabilities(view.can_scroll(), view.is_monochrome())
        result = apply_event(self.session, event)
        for effect in result.side_effects:
            self._execute(effect)
        return result

    def _execute(self, effect: SideEffect) -> None:
        payload = effect.payload or {}
        if effect.type == SideEffectType.SET_TOOL:
            self._activate_tool(payload['tool'])
        elif effect.type == SideEffectType.FETCH_METADATA:
            self.metadata = dict(self.engine.metadata_for(payload.get('data_id')) or {})
            self.instance_selector = InstanceSelector.from_record(self.metadata, self.config)
        elif effect.type == SideEffectType.NOTIFY:
            self.notifications.append(payload['message'])
        elif effect.type == SideEffectType.SHOW_DROPBOX:
            self.show_dropbox = bool(payload.get('show'))

    # ─────────────────────────────────────────────────────────────────────────
    # Tools & view
    # ─────────────────────────────────────────────────────────────────────────

    def _activate_tool(self, tool: str) -> None:
        self.selected_tool = tool
        self.engine.set_tool(tool)
        shape = default_shape(tool)
        if shape is not None:
            self.engine.set_tool_features({'shapeName': shape})

    def change_tool(self, tool: str) -> bool:
        """Switch tools. Returns False for unknown or unsupported tools."""
        if tool not in TOOLS:
            logger.warning("Unknown tool %r", tool)
            return False
        if not can_run_tool(tool, self.session.capabilities):
            logger.info("Tool %s not supported by the loaded data", tool)
            return False
        self._activate_tool(tool)
        return True

    def reset(self) -> None:
        self.engine.reset_layout()

    def toggle_orientation(self) -> str:
        self.orientation = next_orientation(self.orientation)
        self.engine.set_data_view_config(self.orientation)
        return self.orientation

    # ─────────────────────────────────────────────────────────────────────────
    # Tags
    # ─────────────────────────────────────────────────────────────────────────

    def select_instance(self, index: int):
        return self.instance_selector.select(index)

    def tag_rows(self, search: str = '') -> List[DisplayRow]:
        """Flattened metadata at the selected instance, narrowed by `search`."""
        rows = self.flattener.flatten(self.metadata, self.instance_selector.instance_number)
        return filter_rows(rows, search)

    def pop_notifications(self) -> List[str]:
        notifications, self.notifications = self.notifications, []
        return notifications

    def compute_view_model(self) -> ViewModel:
        """
        Compute derived UI state. This function is PURE - it never writes.
        """
        loaded = self.session.data_loaded
        capabilities = self.session.capabilities
        return ViewModel(
            progress_percent=self.session.progress_percent,
            data_loaded=loaded,
            show_dropbox=self.show_dropbox,
            selected_tool=self.selected_tool,
            tool_enabled={
                tool: loaded and can_run_tool(tool, capabilities) for tool in TOOLS
            },
            folder_names=list(self.partition.ordered_bucket_names),
            selected_folder=self.partition.selected_bucket,
            orientation=self.orientation,
            can_reset=loaded,
            can_toggle_orientation=loaded,
            can_show_tags=loaded,
            notifications=list(self.notifications),
        )
