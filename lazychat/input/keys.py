"""Keyboard dispatch facade: picks a handler from view and focus mode."""

from __future__ import annotations

from ..state import FOCUS_COMPOSE, FOCUS_READER, VIEW_REACT, VIEW_UNIFIED
from .key_common import ChatCommands, KeyContext
from .key_compose import handle_compose_key, handle_react_key
from .key_modal import handle_modal_key
from .key_navigation import handle_navigation_key
from .key_reader import handle_reader_key
from .key_registry import KeyComboBinding, KeyComboRegistry
from .mouse import handle_mouse_key

__all__ = [
    "ChatCommands",
    "KeyComboBinding",
    "KeyComboRegistry",
    "KeyContext",
    "handle_key",
]


def handle_key(key: str, context: KeyContext) -> bool:
    """Route one key token and return ``True`` when the app should quit."""
    if not key:
        return False
    state = context.state
    if state.view == VIEW_REACT:
        return handle_react_key(key, context)
    if state.view != VIEW_UNIFIED:
        return handle_modal_key(key, context)
    if handle_mouse_key(key, context, activate=lambda: handle_navigation_key("ENTER", context)):
        return False
    if state.focus_mode == FOCUS_COMPOSE:
        return handle_compose_key(key, context)
    if state.focus_mode == FOCUS_READER:
        return handle_reader_key(key, context)
    return handle_navigation_key(key, context)
