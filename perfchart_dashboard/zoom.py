"""
Click-drag zoom over the time axis.

The controller is a small state machine driven by pointer events:

- press(position) starts a drag at a valid axis position (idle -> dragging)
- move(position) updates the drag cursor while dragging
- release() commits [min, max] of anchor and cursor as the zoom window
  when both are known and differ, then goes back to idle
- reset() clears the window and any drag in progress, from any state

Every transition returns a new ZoomState; nothing is mutated in place.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from . import config
from .errors import ParseError
from .normalizer import parse_number

IDLE = "idle"
DRAGGING = "dragging"


@dataclass(frozen=True)
class ZoomWindow:
    left: float
    right: float

    def __post_init__(self) -> None:
        if self.left > self.right:
            raise ValueError(f"zoom window left ({self.left}) is after right ({self.right})")

    def contains(self, t: float) -> bool:
        return self.left <= t <= self.right


@dataclass(frozen=True)
class InteractionDraft:
    anchor: Optional[float] = None
    cursor: Optional[float] = None
    active: bool = False


@dataclass(frozen=True)
class ZoomState:
    window: Optional[ZoomWindow] = None
    draft: InteractionDraft = InteractionDraft()

    @property
    def phase(self) -> str:
        return DRAGGING if self.draft.active else IDLE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "window": [self.window.left, self.window.right] if self.window else None,
            "draft": {
                "anchor": self.draft.anchor,
                "cursor": self.draft.cursor,
                "active": self.draft.active,
            },
        }

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "ZoomState":
        if not data:
            return cls()
        window = data.get("window")
        draft = data.get("draft") or {}
        return cls(
            window=ZoomWindow(float(window[0]), float(window[1])) if window else None,
            draft=InteractionDraft(
                anchor=draft.get("anchor"),
                cursor=draft.get("cursor"),
                active=bool(draft.get("active", False)),
            ),
        )


def axis_position(value: Any) -> Optional[float]:
    """Resolve a pointer label to a time value, or None when it is not on the axis."""
    try:
        return parse_number(value)
    except ParseError:
        return None


def press(state: ZoomState, position: Any) -> ZoomState:
    pos = axis_position(position)
    if pos is None:
        return state
    return replace(state, draft=InteractionDraft(anchor=pos, cursor=None, active=True))


def move(state: ZoomState, position: Any) -> ZoomState:
    if not state.draft.active:
        return state
    pos = axis_position(position)
    if pos is None:
        return state
    return replace(state, draft=replace(state.draft, cursor=pos))


def release(state: ZoomState) -> ZoomState:
    draft = state.draft
    if not draft.active:
        return state

    window = state.window
    if draft.anchor is not None and draft.cursor is not None and draft.anchor != draft.cursor:
        window = ZoomWindow(min(draft.anchor, draft.cursor), max(draft.anchor, draft.cursor))
    return ZoomState(window=window, draft=InteractionDraft())


def reset(state: ZoomState) -> ZoomState:
    return ZoomState()


def select_range(state: ZoomState, start: Any, end: Any) -> ZoomState:
    """A whole drag gesture at once, as reported by a box selection."""
    return release(move(press(state, start), end))


def draft_band(state: ZoomState) -> Optional[Tuple[float, float]]:
    """The band to shade while dragging, once both ends are known."""
    draft = state.draft
    if draft.active and draft.anchor is not None and draft.cursor is not None:
        return draft.anchor, draft.cursor
    return None


def apply_window(rows: Sequence[Mapping[str, Any]], state: ZoomState) -> list:
    if state.window is None:
        return list(rows)
    return [r for r in rows if state.window.contains(r[config.TIME_FIELD])]
