"""Input-layer public API for key decoding and mode handlers."""

from __future__ import annotations

from .key_common import ChatCommands, KeyContext, selected_message
from .keys import handle_key
from .reader import ESC_SEQUENCE_TIMEOUT_MS, read_key

__all__ = [
    "ChatCommands",
    "ESC_SEQUENCE_TIMEOUT_MS",
    "KeyContext",
    "handle_key",
    "read_key",
    "selected_message",
]
