"""Keys for read-only overlays (full message, reaction users)."""

from __future__ import annotations

from .. import actions as a
from .key_common import KeyContext

CLOSE_KEYS = frozenset({"ESC", "q", "ENTER", "m", "u", "?"})


def handle_modal_key(key: str, context: KeyContext) -> bool:
    if key in CLOSE_KEYS:
        context.dispatch(a.CloseModal())
    return False
