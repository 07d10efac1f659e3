"""Application state snapshot for the unified inbox view.

``AppState`` is frozen: the transition function returns a new snapshot for
every change and never touches the containers of the previous one.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace

from .model import (
    DEFAULT_VISIBLE_COUNT,
    ChannelListing,
    ExpandedChannelData,
    FlatItem,
    build_flat_items,
    first_selectable_index,
)

VIEW_UNIFIED = "unified"
VIEW_REACT = "react"
VIEW_REACTION_USERS = "reaction_users"
VIEW_MESSAGE = "message"
VIEWS = frozenset({VIEW_UNIFIED, VIEW_REACT, VIEW_REACTION_USERS, VIEW_MESSAGE})

FOCUS_NAVIGATION = "navigation"
FOCUS_COMPOSE = "compose"
FOCUS_READER = "reader"
FOCUS_MODES = frozenset({FOCUS_NAVIGATION, FOCUS_COMPOSE, FOCUS_READER})

DEFAULT_ROWS = 24
DEFAULT_COLUMNS = 80


@dataclass(frozen=True)
class AttachedFile:
    path: str
    name: str


@dataclass(frozen=True)
class ComposeState:
    """Compose buffer plus the message targets of the current session."""

    text: str = ""
    cursor: int = 0
    reply_to: str | None = None
    react_to: str | None = None
    edit_target: str | None = None
    attachments: tuple[AttachedFile, ...] = ()

    @property
    def is_empty(self) -> bool:
        return self == EMPTY_COMPOSE


EMPTY_COMPOSE = ComposeState()


@dataclass(frozen=True)
class AppState:
    listing: ChannelListing
    flat_items: tuple[FlatItem, ...] = ()
    selected_index: int = 0
    view: str = VIEW_UNIFIED
    expanded: frozenset[str] = frozenset()
    expanded_data: Mapping[str, ExpandedChannelData] = field(default_factory=dict)
    focus_mode: str = FOCUS_NAVIGATION
    compose_channel_id: str | None = None
    compose: ComposeState = EMPTY_COMPOSE
    reader_channel_id: str | None = None
    reader_offsets: Mapping[str, int] = field(default_factory=dict)
    reader_selected: int = 0
    viewport_offset: int = 0
    rows: int = DEFAULT_ROWS
    cols: int = DEFAULT_COLUMNS
    visible_count: int = DEFAULT_VISIBLE_COUNT
    title: str = "lazychat"
    status_text: str = ""
    loading: bool = False
    modal_title: str = ""
    modal_lines: tuple[str, ...] = ()

    @property
    def selected_item(self) -> FlatItem | None:
        if 0 <= self.selected_index < len(self.flat_items):
            return self.flat_items[self.selected_index]
        return None


def project_state(state: AppState) -> tuple[FlatItem, ...]:
    """Run the flat projection over ``state``'s current inputs."""
    listing = state.listing
    return tuple(
        build_flat_items(
            listing.display_items,
            listing.channels,
            state.expanded,
            state.expanded_data,
            listing.index_to_channel,
            reader_focus_channel_id=state.reader_channel_id,
            reader_offsets=state.reader_offsets,
            visible_count=state.visible_count,
        )
    )


def initial_state(
    listing: ChannelListing,
    *,
    title: str = "lazychat",
    rows: int = DEFAULT_ROWS,
    cols: int = DEFAULT_COLUMNS,
    visible_count: int = DEFAULT_VISIBLE_COUNT,
) -> AppState:
    """Create the startup snapshot with the first channel row selected."""
    state = AppState(
        listing=listing,
        rows=max(1, rows),
        cols=max(1, cols),
        visible_count=max(1, visible_count),
        title=title,
        status_text=f"{title} - ↑↓ navigate · Enter/Tab expand · R refresh · i compose · Esc exit",
    )
    flat_items = project_state(state)
    return replace(state, flat_items=flat_items, selected_index=first_selectable_index(flat_items))
