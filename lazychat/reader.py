"""Reader-mode windowing for one focused channel.

The reader keeps a per-channel offset (messages back from the newest) and a
selection inside the visible window, independent of the outer row cursor.
All functions take and return ``AppState`` snapshots.
"""

from __future__ import annotations

from dataclasses import replace

from .model import (
    Message,
    adjacent_expanded_channel,
    channel_row_index,
    max_reader_offset,
    message_window,
)
from .state import FOCUS_NAVIGATION, FOCUS_READER, AppState


def channel_messages(state: AppState, channel_id: str | None) -> tuple[Message, ...]:
    if channel_id is None:
        return ()
    data = state.expanded_data.get(channel_id)
    if data is None or data.is_loading:
        return ()
    return data.messages


def reader_window(state: AppState, channel_id: str | None = None) -> tuple[int, int]:
    """Return the ``[start, end)`` message indices of the reader window."""
    channel_id = channel_id or state.reader_channel_id
    total = len(channel_messages(state, channel_id))
    offset = state.reader_offsets.get(channel_id, 0) if channel_id else 0
    return message_window(total, offset, state.visible_count)


def _window_size(state: AppState, channel_id: str | None) -> int:
    start, end = reader_window(state, channel_id)
    return end - start


def reader_selected_message(state: AppState) -> Message | None:
    """Return the message under the reader cursor, if reader mode is active."""
    if state.focus_mode != FOCUS_READER or state.reader_channel_id is None:
        return None
    messages = channel_messages(state, state.reader_channel_id)
    start, end = reader_window(state)
    if end <= start:
        return None
    index = start + max(0, min(state.reader_selected, end - start - 1))
    return messages[index]


def _with_offset(state: AppState, channel_id: str, offset: int) -> dict[str, int]:
    offsets = dict(state.reader_offsets)
    offsets[channel_id] = offset
    return offsets


def enter_reader(state: AppState, channel_id: str) -> AppState:
    """Focus ``channel_id`` in reader mode with the newest message selected."""
    offsets = state.reader_offsets
    if channel_id not in offsets:
        offsets = _with_offset(state, channel_id, 0)
    focused = replace(
        state,
        focus_mode=FOCUS_READER,
        reader_channel_id=channel_id,
        reader_offsets=offsets,
    )
    row = channel_row_index(state.flat_items, channel_id)
    return replace(
        focused,
        reader_selected=max(0, _window_size(focused, channel_id) - 1),
        selected_index=state.selected_index if row is None else row,
    )


def leave_reader(state: AppState) -> AppState:
    """Return to navigation; stored offsets are kept for the next visit."""
    return replace(state, focus_mode=FOCUS_NAVIGATION, reader_channel_id=None, reader_selected=0)


def scroll_up(state: AppState) -> AppState:
    """Select the next older message, sliding the window at its oldest row."""
    channel_id = state.reader_channel_id
    if state.focus_mode != FOCUS_READER or channel_id is None:
        return state
    size = _window_size(state, channel_id)
    selected = max(0, min(state.reader_selected, size - 1))
    if selected > 0:
        return replace(state, reader_selected=selected - 1)
    total = len(channel_messages(state, channel_id))
    offset = state.reader_offsets.get(channel_id, 0)
    if offset < max_reader_offset(total, state.visible_count):
        return replace(
            state,
            reader_offsets=_with_offset(state, channel_id, offset + 1),
            reader_selected=0,
        )
    return replace(state, reader_selected=selected)


def scroll_down(state: AppState) -> AppState:
    """Select the next newer message, sliding the window at its newest row."""
    channel_id = state.reader_channel_id
    if state.focus_mode != FOCUS_READER or channel_id is None:
        return state
    size = _window_size(state, channel_id)
    selected = max(0, min(state.reader_selected, size - 1))
    if selected < size - 1:
        return replace(state, reader_selected=selected + 1)
    offset = state.reader_offsets.get(channel_id, 0)
    if offset > 0:
        return replace(
            state,
            reader_offsets=_with_offset(state, channel_id, offset - 1),
            reader_selected=max(0, size - 1),
        )
    return replace(state, reader_selected=selected)


def focus_adjacent(state: AppState, direction: int) -> AppState:
    """Move reader focus to the nearest expanded channel above or below."""
    current = state.reader_channel_id
    if state.focus_mode != FOCUS_READER or current is None:
        return state
    target = adjacent_expanded_channel(state.flat_items, current, direction, state.expanded)
    if target is None:
        return state
    if target not in state.reader_offsets:
        return enter_reader(state, target)
    focused = replace(state, reader_channel_id=target)
    size = _window_size(focused, target)
    row = channel_row_index(state.flat_items, target)
    return replace(
        focused,
        reader_selected=max(0, min(state.reader_selected, size - 1)),
        selected_index=state.selected_index if row is None else row,
    )


def clamp_reader(state: AppState) -> AppState:
    """Keep the reader offset and selection inside the current message list."""
    channel_id = state.reader_channel_id
    if state.focus_mode != FOCUS_READER or channel_id is None:
        return state
    total = len(channel_messages(state, channel_id))
    offset = state.reader_offsets.get(channel_id, 0)
    limit = max_reader_offset(total, state.visible_count)
    if offset > limit:
        state = replace(state, reader_offsets=_with_offset(state, channel_id, limit))
    size = _window_size(state, channel_id)
    selected = max(0, min(state.reader_selected, size - 1))
    if selected != state.reader_selected:
        state = replace(state, reader_selected=selected)
    return state
