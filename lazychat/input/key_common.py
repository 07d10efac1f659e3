"""Shared key-handling context and helper functions."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from ..model import HEADER, MESSAGE, Message
from ..reader import reader_selected_message
from ..state import FOCUS_READER, AppState
from .key_registry import KeyComboBinding

MessageCommand = Callable[[Message], None]
ChannelCommand = Callable[[str], None]


@dataclass(frozen=True)
class ChatCommands:
    """Side-effecting operations bound by the controller.

    Commands that do I/O schedule it and return immediately; results come
    back later as dispatched actions.
    """

    toggle_channel: ChannelCommand
    toggle_section: Callable[[str], None]
    refresh_all: Callable[[], None]
    follow: ChannelCommand
    unfollow: ChannelCommand
    load_older: ChannelCommand
    send_compose: Callable[[], None]
    submit_reaction: Callable[[], None]
    begin_reply: MessageCommand
    begin_react: MessageCommand
    begin_edit: MessageCommand
    delete_message: MessageCommand
    open_urls: MessageCommand
    show_reaction_users: MessageCommand
    show_message: MessageCommand
    show_help: Callable[[], None]


@dataclass(frozen=True)
class KeyContext:
    """Current snapshot plus the ways a key handler can change it."""

    state: AppState
    dispatch: Callable[[object], None]
    commands: ChatCommands


def selected_message(state: AppState) -> Message | None:
    """Return the message under the cursor in reader or navigation mode."""
    if state.focus_mode == FOCUS_READER:
        return reader_selected_message(state)
    item = state.selected_item
    if item is None or item.kind != MESSAGE or item.channel_id is None:
        return None
    data = state.expanded_data.get(item.channel_id)
    if data is None or not 0 <= item.message_index < len(data.messages):
        return None
    return data.messages[item.message_index]


def selected_section(state: AppState) -> str | None:
    item = state.selected_item
    if item is None or item.kind != HEADER:
        return None
    display_items = state.listing.display_items
    if not 0 <= item.source_index < len(display_items):
        return None
    return display_items[item.source_index].section


def message_bindings(context: KeyContext, show_keys: tuple[str, ...] = ("m",)) -> tuple[KeyComboBinding, ...]:
    """Bindings that act on the selected message, shared by several modes."""
    commands = context.commands

    def on_message(command: MessageCommand) -> Callable[[], bool]:
        def run() -> bool:
            message = selected_message(context.state)
            if message is not None:
                command(message)
            return False

        return run

    return (
        KeyComboBinding(("r",), on_message(commands.begin_reply)),
        KeyComboBinding(("+",), on_message(commands.begin_react)),
        KeyComboBinding(("E",), on_message(commands.begin_edit)),
        KeyComboBinding(("d",), on_message(commands.delete_message)),
        KeyComboBinding(("o",), on_message(commands.open_urls)),
        KeyComboBinding(("u",), on_message(commands.show_reaction_users)),
        KeyComboBinding(show_keys, on_message(commands.show_message)),
    )


def parse_mouse_col_row(mouse_key: str) -> tuple[int | None, int | None]:
    """Parse ``MOUSE_*:col:row`` key tokens into integer coordinates."""
    parts = mouse_key.split(":")
    if len(parts) < 3:
        return None, None
    try:
        return int(parts[1]), int(parts[2])
    except ValueError:
        return None, None


def is_text_key(key: str) -> bool:
    """Single printable character produced by typing; named keys are longer."""
    return len(key) == 1 and key.isprintable()
