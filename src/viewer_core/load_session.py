# src/viewer_core/load_session.py
"""
Load lifecycle state for the viewing widget.

NO UI OR ENGINE IMPORTS ALLOWED IN THIS MODULE.

The viewing engine loads files asynchronously, one task per file, and
reports progress as an interleaved stream of events. LoadSession folds
that stream into the handful of values the UI needs:

    progress bar      -> progress_percent
    tool buttons      -> data_loaded, capabilities
    end-of-load alert -> LoadOutcome (errors before aborts)

Event Flow:
    engine event -> LoadEvent -> apply_event(session, event) ->
    session mutated in place -> EventResult(side_effects) -> UI executes

Policies:
- Capabilities are sticky for the lifetime of a session object. Once a
  series proved scrollable the Scroll tool stays enabled, even if a later
  series in the same session is a single frame.
- Only the first render of a cycle decides capabilities and the default
  tool. Later renders (one per loaded series) are ignored.
- Progress is last-write-wins. Concurrent file loads may make the bar
  move backwards; this is accepted and not corrected here.
- Per-item errors and aborts are counted, never raised.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, Flag, auto
import logging
from typing import Any, Dict, List, Optional

from .events import LoadEvent, LoadEventKind

logger = logging.getLogger(__name__)

TOOL_SCROLL = "Scroll"
TOOL_ZOOM_AND_PAN = "ZoomAndPan"

ERROR_MESSAGE = "Received errors during load. Check log for details."
ABORT_MESSAGE = "Load was aborted."


# ═══════════════════════════════════════════════════════════════════════════════
# OUTCOME & CAPABILITIES
# ═══════════════════════════════════════════════════════════════════════════════

class LoadOutcome(Flag):
    """
    Classification of a finished load cycle.

    PARTIAL_ERROR and ABORTED are not mutually exclusive; a cycle with
    both errors and aborts carries both flags.
    """
    SUCCESS = 0
    PARTIAL_ERROR = auto()
    ABORTED = auto()

    @property
    def is_success(self) -> bool:
        return self.value == 0

    @property
    def has_error(self) -> bool:
        return bool(self & LoadOutcome.PARTIAL_ERROR)

    @property
    def was_aborted(self) -> bool:
        return bool(self & LoadOutcome.ABORTED)

    def messages(self) -> List[str]:
        """User-facing notifications, errors before aborts."""
        messages = []
        if self.has_error:
            messages.append(ERROR_MESSAGE)
        if self.was_aborted:
            messages.append(ABORT_MESSAGE)
        return messages


@dataclass
class Capabilities:
    """Tool capabilities discovered at first render. Only ever turn on."""
    can_scroll: bool = False
    can_adjust_contrast: bool = False

    def merge(self, scrollable: bool, monochrome: bool) -> None:
        self.can_scroll = self.can_scroll or bool(scrollable)
        self.can_adjust_contrast = self.can_adjust_contrast or bool(monochrome)


@dataclass(frozen=True)
class LoadStatus:
    """Read-only snapshot of a LoadSession for the presentation layer."""
    progress_percent: int
    is_complete: bool
    has_error: bool
    has_abort: bool
    item_count: int
    data_loaded: bool = False
    can_scroll: bool = False
    can_adjust_contrast: bool = False


# ═══════════════════════════════════════════════════════════════════════════════
# SESSION
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass
class LoadSession:
    """
    Mutable state of one viewer's load cycles.

    Each viewer owns its own instance; nothing here is process-wide.
    """
    items_loaded: int = 0
    error_count: int = 0
    abort_count: int = 0
    progress_percent: int = 0
    first_render_seen: bool = False
    ended: bool = False
    data_loaded: bool = False
    data_id: Optional[str] = None
    selected_tool: Optional[str] = None
    capabilities: Capabilities = field(default_factory=Capabilities)

    def on_load_start(self) -> None:
        """Start a new cycle. Capabilities survive."""
        self.items_loaded = 0
        self.error_count = 0
        self.abort_count = 0
        self.first_render_seen = False
        self.ended = False
        self.data_loaded = False
        self.progress_percent = 0

    def on_progress(self, loaded_percent: int) -> None:
        self.progress_percent = max(0, min(100, int(loaded_percent)))

    def on_load_item(self) -> None:
        self.items_loaded += 1

    def on_load_error(self, error: Any = None) -> None:
        self.error_count += 1
        logger.error("Load error (%d this cycle): %s", self.error_count, error)

    def on_load_abort(self) -> None:
        self.abort_count += 1

    def on_first_render_for_load(self, scrollable: bool, monochrome: bool) -> Optional[str]:
        """
        Record capabilities from the first rendered frame of this cycle.

        Returns:
            The recommended initial tool ("Scroll" or "ZoomAndPan"), or
            None when a render was already seen this cycle.
        """
        if self.first_render_seen:
            return None
        self.first_render_seen = True
        self.capabilities.merge(scrollable, monochrome)
        self.selected_tool = TOOL_SCROLL if scrollable else TOOL_ZOOM_AND_PAN
        return self.selected_tool

    def on_load_complete(self, metadata_id: Optional[str]) -> Optional[str]:
        """Mark data as loaded; returns the id to fetch metadata for."""
        self.progress_percent = 100
        self.data_loaded = True
        self.data_id = metadata_id
        return metadata_id

    def on_load_end(self) -> LoadOutcome:
        self.ended = True
        outcome = LoadOutcome.SUCCESS
        if self.error_count:
            outcome |= LoadOutcome.PARTIAL_ERROR
        if self.abort_count:
            outcome |= LoadOutcome.ABORTED

        if not outcome.is_success:
            self.progress_percent = 0

        logger.info(
            "Load cycle ended: items=%d errors=%d aborts=%d",
            self.items_loaded, self.error_count, self.abort_count,
        )
        return outcome

    def status(self) -> LoadStatus:
        return LoadStatus(
            progress_percent=self.progress_percent,
            is_complete=self.ended,
            has_error=self.error_count > 0,
            has_abort=self.abort_count > 0,
            item_count=self.items_loaded,
            data_loaded=self.data_loaded,
            can_scroll=self.capabilities.can_scroll,
            can_adjust_contrast=self.capabilities.can_adjust_contrast,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# TRANSITION FUNCTION
# ═══════════════════════════════════════════════════════════════════════════════

class SideEffectType(Enum):
    """Work the presentation layer performs after a transition."""
    SET_TOOL = auto()
    FETCH_METADATA = auto()
    NOTIFY = auto()
    SHOW_DROPBOX = auto()


@dataclass
class SideEffect:
    """
    Description of a side effect to be executed by the caller.

    Side effects are NOT executed within the core logic.
    """
    type: SideEffectType
    payload: Optional[Dict[str, Any]] = None


@dataclass
class EventResult:
    """Result of applying one event: the cycle outcome (loadend only) and side effects."""
    side_effects: List[SideEffect] = field(default_factory=list)
    outcome: Optional[LoadOutcome] = None


def apply_event(session: LoadSession, event: LoadEvent) -> EventResult:
    """
    Apply one engine event to the session.

    This is the only entry point the controller needs; the on_* methods
    stay public so tests and callers without an event stream can drive
    the session directly.

    Args:
        session: LoadSession to mutate in place
        event: The event to apply

    Returns:
        EventResult with side effects for the presentation layer
    """
    result = EventResult()
    kind = event.kind
    logger.debug("Applying %s", kind.value)

    if kind == LoadEventKind.LOAD_START:
        session.on_load_start()
        result.side_effects.append(SideEffect(
            type=SideEffectType.SHOW_DROPBOX,
            payload={'show': False},
        ))

    elif kind == LoadEventKind.LOAD_PROGRESS:
        session.on_progress(event.loaded or 0)

    elif kind == LoadEventKind.LOAD_ITEM:
        session.on_load_item()

    elif kind == LoadEventKind.LOAD_ERROR:
        session.on_load_error(event.error)

    elif kind == LoadEventKind.LOAD_ABORT:
        session.on_load_abort()

    elif kind == LoadEventKind.RENDER_END:
        tool = session.on_first_render_for_load(
            bool(event.can_scroll), bool(event.is_monochrome)
        )
        if tool is not None:
            result.side_effects.append(SideEffect(
                type=SideEffectType.SET_TOOL,
                payload={'tool': tool},
            ))

    elif kind == LoadEventKind.LOAD:
        data_id = session.on_load_complete(event.data_id)
        result.side_effects.append(SideEffect(
            type=SideEffectType.FETCH_METADATA,
            payload={'data_id': data_id},
        ))

    elif kind == LoadEventKind.LOAD_END:
        outcome = session.on_load_end()
        result.outcome = outcome
        for message in outcome.messages():
            result.side_effects.append(SideEffect(
                type=SideEffectType.NOTIFY,
                payload={'message': message},
            ))
        # Nothing usable on screen: offer the drop target again
        if outcome.was_aborted or (outcome.has_error and session.items_loaded == 0):
            result.side_effects.append(SideEffect(
                type=SideEffectType.SHOW_DROPBOX,
                payload={'show': True},
            ))

    return result
