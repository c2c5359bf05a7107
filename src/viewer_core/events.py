# src/viewer_core/events.py
"""
Load events emitted by the viewing engine.

The engine reports its file loads as a stream of loosely typed callbacks.
Here each callback becomes one immutable LoadEvent value: a kind plus the
few payload fields that kind carries. LoadSession consumes these through
a single transition function (see load_session.apply_event).

Event kinds (engine names):
    loadstart, loadprogress{loaded}, loaditem, loaderror{error},
    loadabort, loadend, load{dataid}, renderend{dataid}
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional

from .errors import UnknownEventError


class LoadEventKind(Enum):
    """All event kinds understood by LoadSession."""
    LOAD_START = "loadstart"
    LOAD_PROGRESS = "loadprogress"
    LOAD_ITEM = "loaditem"
    LOAD_ERROR = "loaderror"
    LOAD_ABORT = "loadabort"
    LOAD_END = "loadend"
    LOAD = "load"
    RENDER_END = "renderend"


@dataclass(frozen=True)
class LoadEvent:
    """
    One event from the engine.

    Only the fields relevant to `kind` are populated:
    - LOAD_PROGRESS: loaded (0..100)
    - LOAD_ERROR: error (opaque detail, logged not stored)
    - LOAD / RENDER_END: data_id
    - RENDER_END: can_scroll / is_monochrome once resolved from the
      engine's view controller (None while unresolved)
    """
    kind: LoadEventKind
    loaded: Optional[int] = None
    error: Optional[Any] = None
    data_id: Optional[str] = None
    can_scroll: Optional[bool] = None
    is_monochrome: Optional[bool] = None

    @classmethod
    def load_start(cls) -> 'LoadEvent':
        return cls(kind=LoadEventKind.LOAD_START)

    @classmethod
    def progress(cls, loaded: int) -> 'LoadEvent':
        return cls(kind=LoadEventKind.LOAD_PROGRESS, loaded=loaded)

    @classmethod
    def load_item(cls) -> 'LoadEvent':
        return cls(kind=LoadEventKind.LOAD_ITEM)

    @classmethod
    def load_error(cls, error: Any = None) -> 'LoadEvent':
        return cls(kind=LoadEventKind.LOAD_ERROR, error=error)

    @classmethod
    def load_abort(cls) -> 'LoadEvent':
        return cls(kind=LoadEventKind.LOAD_ABORT)

    @classmethod
    def load_end(cls) -> 'LoadEvent':
        return cls(kind=LoadEventKind.LOAD_END)

    @classmethod
    def load(cls, data_id: str) -> 'LoadEvent':
        return cls(kind=LoadEventKind.LOAD, data_id=data_id)

    @classmethod
    def render_end(
        cls,
        data_id: Optional[str] = None,
        *,
        can_scroll: Optional[bool] = None,
        is_monochrome: Optional[bool] = None,
    ) -> 'LoadEvent':
        return cls(
            kind=LoadEventKind.RENDER_END,
            data_id=data_id,
            can_scroll=can_scroll,
            is_monochrome=is_monochrome,
        )

    def with_view_capabilities(self, can_scroll: bool, is_monochrome: bool) -> 'LoadEvent':
        """Return a copy of a RENDER_END event with its capabilities resolved."""
        return replace(self, can_scroll=bool(can_scroll), is_monochrome=bool(is_monochrome))

    @classmethod
    def from_engine(cls, kind: str, payload: Optional[Dict[str, Any]] = None) -> 'LoadEvent':
        """
        Build an event from the engine's raw (type, payload) pair.

        Args:
            kind: Engine event type, e.g. "loadprogress"
            payload: Engine event attributes, e.g. {"loaded": 40}

        Raises:
            UnknownEventError: if `kind` is not a load event
        """
        try:
            event_kind = LoadEventKind(kind)
        except ValueError:
            raise UnknownEventError(f"Unknown load event kind: {kind!r}") from None

        payload = payload or {}
        data_id = payload.get('dataid', payload.get('data_id'))
        loaded = payload.get('loaded')
        return cls(
            kind=event_kind,
            loaded=int(loaded) if loaded is not None else None,
            error=payload.get('error'),
            data_id=str(data_id) if data_id is not None else None,
        )
