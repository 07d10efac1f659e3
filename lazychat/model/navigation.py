"""Index lookups over the flat row list.

Used by key handlers and the transition function to move between rows
without caring about the row variants in between.
"""

from __future__ import annotations

from collections.abc import Sequence

from .types import CHANNEL, HEADER, MESSAGE, FlatItem


def first_selectable_index(items: Sequence[FlatItem]) -> int:
    """Return the first non-header row, or ``0`` when there is none."""
    for idx, item in enumerate(items):
        if item.kind != HEADER:
            return idx
    return 0


def clamp_index(index: int, items: Sequence[FlatItem]) -> int:
    if not items:
        return 0
    return max(0, min(index, len(items) - 1))


def find_item_index(items: Sequence[FlatItem], key: tuple[str, ...]) -> int | None:
    for idx, item in enumerate(items):
        if item.key == key:
            return idx
    return None


def channel_row_index(items: Sequence[FlatItem], channel_id: str) -> int | None:
    """Return the index of ``channel_id``'s channel row."""
    for idx, item in enumerate(items):
        if item.kind == CHANNEL and item.channel_id == channel_id:
            return idx
    return None


def owning_channel_id(items: Sequence[FlatItem], index: int) -> str | None:
    """Return the channel a row belongs to (headers belong to none)."""
    if index < 0 or index >= len(items):
        return None
    return items[index].channel_id


def next_channel_index(items: Sequence[FlatItem], index: int, direction: int) -> int | None:
    """Return the next channel row after ``index`` in ``direction``."""
    step = 1 if direction >= 0 else -1
    idx = index + step
    while 0 <= idx < len(items):
        if items[idx].kind == CHANNEL:
            return idx
        idx += step
    return None


def adjacent_expanded_channel(
    items: Sequence[FlatItem],
    channel_id: str,
    direction: int,
    expanded: frozenset[str] | set[str],
) -> str | None:
    """Return the nearest expanded channel above or below ``channel_id``."""
    start = channel_row_index(items, channel_id)
    if start is None:
        return None
    idx = next_channel_index(items, start, direction)
    while idx is not None:
        candidate = items[idx].channel_id
        if candidate is not None and candidate in expanded:
            return candidate
        idx = next_channel_index(items, idx, direction)
    return None


def message_rows_for_channel(items: Sequence[FlatItem], channel_id: str) -> list[int]:
    return [
        idx
        for idx, item in enumerate(items)
        if item.kind == MESSAGE and item.channel_id == channel_id
    ]
