"""Navigation-mode keyboard handling for the unified list."""

from __future__ import annotations

from .. import actions as a
from ..model import CHANNEL, HEADER, INPUT, MESSAGE, next_channel_index, owning_channel_id
from ..viewport import visible_height
from .key_common import KeyContext, message_bindings, selected_section
from .key_registry import KeyComboBinding, KeyComboRegistry


def handle_navigation_key(key: str, context: KeyContext) -> bool:
    """Handle one navigation-mode key and return ``True`` when app should quit."""
    state = context.state
    dispatch = context.dispatch
    commands = context.commands
    item = state.selected_item
    channel_id = owning_channel_id(state.flat_items, state.selected_index)

    def move(delta: int) -> bool:
        dispatch(a.MoveBy(delta))
        return False

    def page(direction: int) -> bool:
        return move(direction * visible_height(state.rows))

    def jump_channel(direction: int) -> bool:
        target = next_channel_index(state.flat_items, state.selected_index, direction)
        if target is not None:
            dispatch(a.SelectIndex(target))
        return False

    def activate() -> bool:
        if item is None:
            return False
        if item.kind == HEADER:
            section = selected_section(state)
            if section is not None:
                commands.toggle_section(section)
        elif item.kind == CHANNEL and item.channel_id is not None:
            commands.toggle_channel(item.channel_id)
        elif item.kind == INPUT:
            dispatch(a.EnterCompose(item.channel_id))
        elif item.kind == MESSAGE:
            dispatch(a.EnterReader(item.channel_id))
        return False

    def collapse_current() -> bool:
        if channel_id is not None and channel_id in state.expanded:
            dispatch(a.CollapseChannel(channel_id))
            dispatch(a.SelectChannel(channel_id))
        return False

    def expand_current() -> bool:
        if item is not None and item.kind == CHANNEL and channel_id not in state.expanded:
            return activate()
        return False

    def with_channel(command) -> bool:
        if channel_id is not None:
            command(channel_id)
        return False

    def compose() -> bool:
        if channel_id is None:
            return False
        if channel_id not in state.expanded:
            commands.toggle_channel(channel_id)
        dispatch(a.EnterCompose(channel_id))
        return False

    def reader() -> bool:
        if channel_id is not None:
            dispatch(a.EnterReader(channel_id))
        return False

    def collapse_all() -> bool:
        dispatch(a.CollapseAll())
        return False

    def refresh() -> bool:
        commands.refresh_all()
        return False

    def help_() -> bool:
        commands.show_help()
        return False

    registry = KeyComboRegistry().register_bindings(
        KeyComboBinding(("UP", "k"), lambda: move(-1)),
        KeyComboBinding(("DOWN", "j"), lambda: move(1)),
        KeyComboBinding(("PAGE_UP",), lambda: page(-1)),
        KeyComboBinding(("PAGE_DOWN",), lambda: page(1)),
        KeyComboBinding(("HOME", "g"), lambda: move(-len(state.flat_items))),
        KeyComboBinding(("END", "G"), lambda: move(len(state.flat_items))),
        KeyComboBinding(("n",), lambda: jump_channel(1)),
        KeyComboBinding(("N", "p"), lambda: jump_channel(-1)),
        KeyComboBinding(("ENTER", "TAB"), activate),
        KeyComboBinding(("RIGHT", "l"), expand_current),
        KeyComboBinding(("LEFT", "h"), collapse_current),
        KeyComboBinding(("i",), compose),
        KeyComboBinding(("v",), reader),
        KeyComboBinding(("c",), collapse_all),
        KeyComboBinding(("R", "CTRL_L"), refresh),
        KeyComboBinding(("y",), lambda: with_channel(commands.follow)),
        KeyComboBinding(("x",), lambda: with_channel(commands.unfollow)),
        KeyComboBinding(("L",), lambda: with_channel(commands.load_older)),
        KeyComboBinding(("?",), help_),
        KeyComboBinding(("q", "ESC"), lambda: True),
    )
    registry.register_bindings(*message_bindings(context))
    return bool(registry.dispatch(key))
