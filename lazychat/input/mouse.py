"""Mouse wheel and click routing for the unified list."""

from __future__ import annotations

from collections.abc import Callable

from .. import actions as a
from ..state import FOCUS_NAVIGATION, FOCUS_READER
from ..viewport import visible_height, visible_range
from .key_common import KeyContext, parse_mouse_col_row

LIST_FIRST_SCREEN_ROW = 2
WHEEL_STEP = 3


def row_at_screen_row(context: KeyContext, screen_row: int) -> int | None:
    """Map a 1-based terminal row to a flat-list index, if a row is drawn there."""
    state = context.state
    rows = visible_range(state.viewport_offset, visible_height(state.rows), len(state.flat_items))
    index = state.viewport_offset + (screen_row - LIST_FIRST_SCREEN_ROW)
    return index if index in rows else None


def handle_mouse_key(key: str, context: KeyContext, activate: Callable[[], object] | None = None) -> bool:
    """Handle ``MOUSE_*`` tokens; returns ``True`` when the token was a mouse event."""
    if not key.startswith("MOUSE"):
        return False
    state = context.state
    dispatch = context.dispatch
    if key.startswith(("MOUSE_WHEEL_UP:", "MOUSE_WHEEL_DOWN:")):
        direction = -1 if key.startswith("MOUSE_WHEEL_UP:") else 1
        if state.focus_mode == FOCUS_READER:
            action = a.ReaderScrollDown() if direction < 0 else a.ReaderScrollUp()
            for _ in range(WHEEL_STEP):
                dispatch(action)
        else:
            dispatch(a.MoveBy(direction * WHEEL_STEP))
        return True
    if key.startswith("MOUSE_LEFT_DOWN:") and state.focus_mode == FOCUS_NAVIGATION:
        _col, row = parse_mouse_col_row(key)
        if row is None:
            return True
        index = row_at_screen_row(context, row)
        if index is None:
            return True
        if index == state.selected_index and activate is not None:
            activate()
        else:
            dispatch(a.SelectIndex(index))
    return True
