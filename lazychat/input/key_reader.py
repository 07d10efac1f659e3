"""Reader-mode keys: scroll the focused channel's message window.

Messages render newest first, so moving down the screen means older.
"""

from __future__ import annotations

from .. import actions as a
from .key_common import KeyContext, message_bindings
from .key_registry import KeyComboBinding, KeyComboRegistry


def handle_reader_key(key: str, context: KeyContext) -> bool:
    state = context.state
    dispatch = context.dispatch
    commands = context.commands
    channel_id = state.reader_channel_id

    def send(action: object) -> bool:
        dispatch(action)
        return False

    def scroll(action: object, times: int) -> bool:
        for _ in range(times):
            dispatch(action)
        return False

    def compose() -> bool:
        return send(a.EnterCompose(channel_id))

    def load_older() -> bool:
        if channel_id is not None:
            commands.load_older(channel_id)
        return False

    page = max(1, state.visible_count)
    registry = KeyComboRegistry().register_bindings(
        KeyComboBinding(("DOWN", "j"), lambda: send(a.ReaderScrollUp())),
        KeyComboBinding(("UP", "k"), lambda: send(a.ReaderScrollDown())),
        KeyComboBinding(("PAGE_DOWN",), lambda: scroll(a.ReaderScrollUp(), page)),
        KeyComboBinding(("PAGE_UP",), lambda: scroll(a.ReaderScrollDown(), page)),
        KeyComboBinding(("TAB", "n"), lambda: send(a.ReaderFocusAdjacent(1))),
        KeyComboBinding(("SHIFT_TAB", "N", "p"), lambda: send(a.ReaderFocusAdjacent(-1))),
        KeyComboBinding(("i",), compose),
        KeyComboBinding(("L",), load_older),
        KeyComboBinding(("ESC", "v", "q"), lambda: send(a.Cancel())),
    )
    registry.register_bindings(*message_bindings(context, show_keys=("m", "ENTER")))
    return bool(registry.dispatch(key))
