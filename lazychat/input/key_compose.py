"""Text-entry keys for the compose line and the reaction prompt."""

from __future__ import annotations

from .. import actions as a
from .key_common import KeyContext, is_text_key
from .key_registry import KeyComboBinding, KeyComboRegistry


def _editing_registry(context: KeyContext) -> KeyComboRegistry:
    dispatch = context.dispatch
    text = context.state.compose.text

    def send(action: object) -> bool:
        dispatch(action)
        return False

    def delete_word() -> bool:
        cursor = context.state.compose.cursor
        head = text[:cursor].rstrip()
        cut = head.rfind(" ") + 1
        dispatch(a.SetInputText(text[:cut] + text[cursor:]))
        dispatch(a.MoveCursorTo(cut))
        return False

    return KeyComboRegistry().register_bindings(
        KeyComboBinding(("BACKSPACE",), lambda: send(a.DeleteBackward())),
        KeyComboBinding(("DELETE", "CTRL_D"), lambda: send(a.DeleteForward())),
        KeyComboBinding(("LEFT",), lambda: send(a.MoveCursor(-1))),
        KeyComboBinding(("RIGHT",), lambda: send(a.MoveCursor(1))),
        KeyComboBinding(("HOME", "CTRL_A"), lambda: send(a.MoveCursorTo(0))),
        KeyComboBinding(("END", "CTRL_E"), lambda: send(a.MoveCursorTo(-1))),
        KeyComboBinding(("CTRL_U",), lambda: send(a.SetInputText(""))),
        KeyComboBinding(("CTRL_W",), delete_word),
        KeyComboBinding(("ESC",), lambda: send(a.Cancel())),
    )


def handle_compose_key(key: str, context: KeyContext) -> bool:
    """Edit the compose buffer; Enter sends, Alt+Enter inserts a newline."""
    registry = _editing_registry(context)

    def submit() -> bool:
        context.commands.send_compose()
        return False

    def newline() -> bool:
        context.dispatch(a.InsertText("\n"))
        return False

    registry.register_bindings(
        KeyComboBinding(("ENTER",), submit),
        KeyComboBinding(("ALT_ENTER",), newline),
    )
    if registry.dispatch(key) is None and is_text_key(key):
        context.dispatch(a.InsertText(key))
    return False


def handle_react_key(key: str, context: KeyContext) -> bool:
    """Edit the emoji prompt; Enter adds the reaction, Esc cancels."""
    registry = _editing_registry(context)

    def submit() -> bool:
        context.commands.submit_reaction()
        return False

    registry.register_binding(KeyComboBinding(("ENTER",), submit))
    if registry.dispatch(key) is None and is_text_key(key):
        context.dispatch(a.InsertText(key))
    return False
