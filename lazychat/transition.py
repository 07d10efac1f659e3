"""Total state transition function for the unified inbox.

``transition(state, action)`` looks up a reducer by action type, then runs
one normalization pass: focus-mode sanity, reader clamping, projection
rebuild with selection re-anchoring, and viewport scrolling. Reducers never
raise and never mutate the containers of the incoming snapshot.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from typing import Any

from . import actions as a
from . import reader
from .model import (
    ExpandedChannelData,
    channel_row_index,
    clamp_index,
    find_item_index,
    first_selectable_index,
    owning_channel_id,
)
from .state import (
    EMPTY_COMPOSE,
    FOCUS_COMPOSE,
    FOCUS_MODES,
    FOCUS_NAVIGATION,
    FOCUS_READER,
    VIEW_REACT,
    VIEW_UNIFIED,
    VIEWS,
    AppState,
    AttachedFile,
    ComposeState,
    project_state,
)
from .viewport import scroll_viewport, visible_height

Reducer = Callable[[AppState, Any], AppState]
_REDUCERS: dict[type, Reducer] = {}


def _reduces(action_type: type) -> Callable[[Reducer], Reducer]:
    def register(fn: Reducer) -> Reducer:
        _REDUCERS[action_type] = fn
        return fn

    return register


def transition(state: AppState, action: object) -> AppState:
    """Return the snapshot that results from applying ``action`` to ``state``."""
    reducer = _REDUCERS.get(type(action))
    if reducer is None:
        return state
    reduced = reducer(state, action)
    if reduced is state:
        return state
    return _normalize(state, reduced)


def apply_all(state: AppState, actions: list[object] | tuple[object, ...]) -> AppState:
    for action in actions:
        state = transition(state, action)
    return state


# ---------------------------------------------------------------- normalize


def _projection_inputs(state: AppState) -> tuple[object, ...]:
    return (
        state.listing,
        state.expanded,
        state.expanded_data,
        state.reader_channel_id,
        state.reader_offsets,
        state.visible_count,
    )


def _normalize_focus(state: AppState) -> AppState:
    if state.focus_mode == FOCUS_READER and (
        state.reader_channel_id is None or state.reader_channel_id not in state.expanded
    ):
        state = reader.leave_reader(state)
    if state.focus_mode == FOCUS_COMPOSE and (
        state.compose_channel_id is None or state.compose_channel_id not in state.expanded
    ):
        state = _leave_compose(state)
    return state


def _reanchor(previous: AppState, state: AppState, flat_items: tuple) -> int:
    """Find the row in ``flat_items`` matching the reducer's selection.

    Reducers select rows in the coordinates of the previous row list. The
    same row keeps the cursor; a vanished row falls back to its channel row.
    """
    old_items = previous.flat_items
    if not old_items:
        return first_selectable_index(flat_items)
    old_index = clamp_index(state.selected_index, old_items)
    anchor = old_items[old_index]
    found = find_item_index(flat_items, anchor.key)
    if found is not None:
        return found
    channel_id = owning_channel_id(old_items, old_index)
    if channel_id is not None:
        row = channel_row_index(flat_items, channel_id)
        if row is not None:
            return row
    if not flat_items:
        return 0
    return clamp_index(old_index, flat_items)


def _normalize(previous: AppState, state: AppState) -> AppState:
    state = _normalize_focus(state)
    state = reader.clamp_reader(state)
    if _projection_inputs(previous) != _projection_inputs(state):
        flat_items = project_state(state)
        if flat_items != state.flat_items:
            state = replace(
                state,
                flat_items=flat_items,
                selected_index=_reanchor(previous, state, flat_items),
            )
    selected = clamp_index(state.selected_index, state.flat_items)
    viewport_offset = scroll_viewport(
        selected,
        state.viewport_offset,
        visible_height(state.rows),
        len(state.flat_items),
    )
    if selected != state.selected_index or viewport_offset != state.viewport_offset:
        state = replace(state, selected_index=selected, viewport_offset=viewport_offset)
    return state


# ---------------------------------------------------------------- selection


@_reduces(a.SetChannels)
def _set_channels(state: AppState, action: a.SetChannels) -> AppState:
    return replace(state, listing=action.listing)


@_reduces(a.SelectIndex)
def _select_index(state: AppState, action: a.SelectIndex) -> AppState:
    return replace(state, selected_index=clamp_index(action.index, state.flat_items))


@_reduces(a.MoveBy)
def _move_by(state: AppState, action: a.MoveBy) -> AppState:
    return replace(state, selected_index=clamp_index(state.selected_index + action.delta, state.flat_items))


@_reduces(a.SelectChannel)
def _select_channel(state: AppState, action: a.SelectChannel) -> AppState:
    row = channel_row_index(state.flat_items, action.channel_id)
    if row is None:
        return state
    return replace(state, selected_index=row)


# ---------------------------------------------------------------- expansion


@_reduces(a.ToggleExpand)
def _toggle_expand(state: AppState, action: a.ToggleExpand) -> AppState:
    if action.channel_id in state.expanded:
        return replace(state, expanded=state.expanded - {action.channel_id})
    return replace(state, expanded=state.expanded | {action.channel_id})


@_reduces(a.ExpandChannel)
def _expand_channel(state: AppState, action: a.ExpandChannel) -> AppState:
    if action.channel_id in state.expanded:
        return state
    return replace(state, expanded=state.expanded | {action.channel_id})


@_reduces(a.CollapseChannel)
def _collapse_channel(state: AppState, action: a.CollapseChannel) -> AppState:
    if action.channel_id not in state.expanded:
        return state
    return replace(state, expanded=state.expanded - {action.channel_id})


@_reduces(a.CollapseAll)
def _collapse_all(state: AppState, _action: a.CollapseAll) -> AppState:
    return replace(state, expanded=frozenset())


@_reduces(a.BeginChannelLoad)
def _begin_channel_load(state: AppState, action: a.BeginChannelLoad) -> AppState:
    expanded_data = dict(state.expanded_data)
    expanded_data[action.channel_id] = ExpandedChannelData.loading(action.channel_id, action.load_token)
    return replace(state, expanded_data=expanded_data)


@_reduces(a.SetExpandedChannelData)
def _set_expanded_channel_data(state: AppState, action: a.SetExpandedChannelData) -> AppState:
    current = state.expanded_data.get(action.channel_id)
    data = action.data
    if action.load_token is not None:
        if current is None or current.load_token != action.load_token:
            return state
        data = replace(data, load_token=action.load_token)
    elif current is not None and data.load_token != current.load_token:
        data = replace(data, load_token=current.load_token)
    expanded_data = dict(state.expanded_data)
    expanded_data[action.channel_id] = data
    return replace(state, expanded_data=expanded_data)


@_reduces(a.SetExpandedChannels)
def _set_expanded_channels(state: AppState, action: a.SetExpandedChannels) -> AppState:
    return replace(
        state,
        expanded=frozenset(action.expanded),
        expanded_data={data.channel_id: data for data in action.data},
    )


# ---------------------------------------------------------------- focus modes


def _leave_compose(state: AppState) -> AppState:
    return replace(
        state,
        focus_mode=FOCUS_NAVIGATION,
        compose_channel_id=None,
        compose=EMPTY_COMPOSE,
        view=VIEW_UNIFIED if state.view == VIEW_REACT else state.view,
    )


def _to_navigation(state: AppState) -> AppState:
    if state.focus_mode == FOCUS_COMPOSE:
        return _leave_compose(state)
    if state.focus_mode == FOCUS_READER:
        return reader.leave_reader(state)
    return state


def _selected_channel_id(state: AppState) -> str | None:
    if state.focus_mode == FOCUS_READER and state.reader_channel_id is not None:
        return state.reader_channel_id
    return owning_channel_id(state.flat_items, state.selected_index)


def _enter_compose(state: AppState, channel_id: str | None) -> AppState:
    channel_id = channel_id or _selected_channel_id(state)
    if channel_id is None or channel_id not in state.expanded:
        return state
    if state.focus_mode == FOCUS_COMPOSE:
        if channel_id == state.compose_channel_id:
            return state
        return replace(state, compose_channel_id=channel_id, compose=EMPTY_COMPOSE)
    state = _to_navigation(state)
    return replace(
        state,
        focus_mode=FOCUS_COMPOSE,
        compose_channel_id=channel_id,
        compose=EMPTY_COMPOSE,
        view=VIEW_UNIFIED if state.view == VIEW_REACT else state.view,
    )


def _enter_reader(state: AppState, channel_id: str | None) -> AppState:
    channel_id = channel_id or _selected_channel_id(state)
    if channel_id is None or channel_id not in state.expanded:
        return state
    state = _to_navigation(state)
    return reader.enter_reader(state, channel_id)


@_reduces(a.SetFocusMode)
def _set_focus_mode(state: AppState, action: a.SetFocusMode) -> AppState:
    if action.mode not in FOCUS_MODES or action.mode == state.focus_mode:
        return state
    if action.mode == FOCUS_COMPOSE:
        return _enter_compose(state, None)
    if action.mode == FOCUS_READER:
        return _enter_reader(state, None)
    return _to_navigation(state)


@_reduces(a.EnterCompose)
def _enter_compose_action(state: AppState, action: a.EnterCompose) -> AppState:
    return _enter_compose(state, action.channel_id)


@_reduces(a.EnterReader)
def _enter_reader_action(state: AppState, action: a.EnterReader) -> AppState:
    return _enter_reader(state, action.channel_id)


@_reduces(a.ReaderScrollUp)
def _reader_scroll_up(state: AppState, _action: a.ReaderScrollUp) -> AppState:
    return reader.scroll_up(state)


@_reduces(a.ReaderScrollDown)
def _reader_scroll_down(state: AppState, _action: a.ReaderScrollDown) -> AppState:
    return reader.scroll_down(state)


@_reduces(a.ReaderFocusAdjacent)
def _reader_focus_adjacent(state: AppState, action: a.ReaderFocusAdjacent) -> AppState:
    return reader.focus_adjacent(state, action.direction)


@_reduces(a.Cancel)
def _cancel(state: AppState, _action: a.Cancel) -> AppState:
    if state.view == VIEW_REACT:
        return replace(state, view=VIEW_UNIFIED, compose=EMPTY_COMPOSE)
    if state.view != VIEW_UNIFIED:
        return replace(state, view=VIEW_UNIFIED, modal_title="", modal_lines=())
    return _to_navigation(state)


# ---------------------------------------------------------------- compose buffer


def _with_compose(state: AppState, compose: ComposeState) -> AppState:
    if compose == state.compose:
        return state
    return replace(state, compose=compose)


@_reduces(a.InsertText)
def _insert_text(state: AppState, action: a.InsertText) -> AppState:
    compose = state.compose
    cursor = max(0, min(compose.cursor, len(compose.text)))
    text = compose.text[:cursor] + action.text + compose.text[cursor:]
    return _with_compose(state, replace(compose, text=text, cursor=cursor + len(action.text)))


@_reduces(a.DeleteBackward)
def _delete_backward(state: AppState, _action: a.DeleteBackward) -> AppState:
    compose = state.compose
    cursor = max(0, min(compose.cursor, len(compose.text)))
    if cursor == 0:
        return state
    text = compose.text[: cursor - 1] + compose.text[cursor:]
    return _with_compose(state, replace(compose, text=text, cursor=cursor - 1))


@_reduces(a.DeleteForward)
def _delete_forward(state: AppState, _action: a.DeleteForward) -> AppState:
    compose = state.compose
    cursor = max(0, min(compose.cursor, len(compose.text)))
    if cursor >= len(compose.text):
        return state
    text = compose.text[:cursor] + compose.text[cursor + 1 :]
    return _with_compose(state, replace(compose, text=text, cursor=cursor))


@_reduces(a.MoveCursor)
def _move_cursor(state: AppState, action: a.MoveCursor) -> AppState:
    compose = state.compose
    cursor = max(0, min(compose.cursor + action.delta, len(compose.text)))
    return _with_compose(state, replace(compose, cursor=cursor))


@_reduces(a.MoveCursorTo)
def _move_cursor_to(state: AppState, action: a.MoveCursorTo) -> AppState:
    compose = state.compose
    position = len(compose.text) if action.position < 0 else action.position
    return _with_compose(state, replace(compose, cursor=max(0, min(position, len(compose.text)))))


@_reduces(a.SetInputText)
def _set_input_text(state: AppState, action: a.SetInputText) -> AppState:
    return _with_compose(state, replace(state.compose, text=action.text, cursor=len(action.text)))


@_reduces(a.SetReplyTarget)
def _set_reply_target(state: AppState, action: a.SetReplyTarget) -> AppState:
    return _with_compose(state, replace(state.compose, reply_to=action.message_id))


@_reduces(a.SetReactTarget)
def _set_react_target(state: AppState, action: a.SetReactTarget) -> AppState:
    return _with_compose(state, replace(state.compose, react_to=action.message_id))


@_reduces(a.SetEditTarget)
def _set_edit_target(state: AppState, action: a.SetEditTarget) -> AppState:
    if action.message_id is None:
        return _with_compose(state, replace(state.compose, edit_target=None))
    return _with_compose(
        state,
        replace(state.compose, edit_target=action.message_id, text=action.text, cursor=len(action.text)),
    )


@_reduces(a.AddAttachment)
def _add_attachment(state: AppState, action: a.AddAttachment) -> AppState:
    attachments = state.compose.attachments + (AttachedFile(path=action.path, name=action.name),)
    return _with_compose(state, replace(state.compose, attachments=attachments))


@_reduces(a.ClearAttachments)
def _clear_attachments(state: AppState, _action: a.ClearAttachments) -> AppState:
    return _with_compose(state, replace(state.compose, attachments=()))


@_reduces(a.ResetComposeState)
def _reset_compose_state(state: AppState, _action: a.ResetComposeState) -> AppState:
    return _with_compose(state, EMPTY_COMPOSE)


# ---------------------------------------------------------------- transient UI


@_reduces(a.SetStatus)
def _set_status(state: AppState, action: a.SetStatus) -> AppState:
    if action.text == state.status_text:
        return state
    return replace(state, status_text=action.text)


@_reduces(a.SetLoading)
def _set_loading(state: AppState, action: a.SetLoading) -> AppState:
    if bool(action.loading) == state.loading:
        return state
    return replace(state, loading=bool(action.loading))


@_reduces(a.SetDimensions)
def _set_dimensions(state: AppState, action: a.SetDimensions) -> AppState:
    rows = action.rows if action.rows > 0 else state.rows
    cols = action.cols if action.cols > 0 else state.cols
    if (rows, cols) == (state.rows, state.cols):
        return state
    return replace(state, rows=rows, cols=cols)


@_reduces(a.SetView)
def _set_view(state: AppState, action: a.SetView) -> AppState:
    if action.view not in VIEWS or action.view == state.view:
        return state
    if action.view == VIEW_REACT:
        return replace(state, view=VIEW_REACT, compose=replace(state.compose, text="", cursor=0))
    return replace(state, view=action.view)


@_reduces(a.ShowModal)
def _show_modal(state: AppState, action: a.ShowModal) -> AppState:
    if action.view not in VIEWS or action.view in {VIEW_UNIFIED, VIEW_REACT}:
        return state
    return replace(state, view=action.view, modal_title=action.title, modal_lines=tuple(action.lines))


@_reduces(a.CloseModal)
def _close_modal(state: AppState, _action: a.CloseModal) -> AppState:
    if state.view == VIEW_UNIFIED:
        return state
    return replace(state, view=VIEW_UNIFIED, modal_title="", modal_lines=())
