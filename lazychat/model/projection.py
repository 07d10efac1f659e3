"""Flat projection of the channel hierarchy into navigable rows.

``build_flat_items`` walks the display listing and emits header, channel,
message, and input rows. It is pure: identical inputs give identical output.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence

from .types import Channel, DisplayItem, ExpandedChannelData, FlatItem

DEFAULT_VISIBLE_COUNT = 5


def max_reader_offset(total: int, visible_count: int = DEFAULT_VISIBLE_COUNT) -> int:
    """Largest reader offset that still fills a whole window."""
    return max(0, total - max(1, visible_count))


def message_window(
    total: int,
    offset: int,
    visible_count: int = DEFAULT_VISIBLE_COUNT,
    *,
    use_offset: bool = True,
) -> tuple[int, int]:
    """Return ``[start, end)`` message indices shown for one channel.

    ``offset`` counts messages back from the newest one, so the window is
    ``[offset, offset + visible_count)`` over the newest-first sequence.
    Without ``use_offset`` the newest ``visible_count`` messages are shown.
    """
    count = max(1, visible_count)
    if total <= 0:
        return 0, 0
    if not use_offset:
        return max(0, total - count), total
    offset = max(0, min(offset, max_reader_offset(total, count)))
    end = total - offset
    return max(0, end - count), end


def build_flat_items(
    display_items: Sequence[DisplayItem],
    channels: Sequence[Channel],
    expanded: frozenset[str] | set[str],
    expanded_data: Mapping[str, ExpandedChannelData],
    index_to_channel: Callable[[int], Channel | None],
    reader_focus_channel_id: str | None = None,
    reader_offsets: Mapping[str, int] | None = None,
    visible_count: int = DEFAULT_VISIBLE_COUNT,
) -> list[FlatItem]:
    """Build the unified row list for the current expansion state.

    Expanded channels contribute their channel row, the messages of their
    visible window newest first, and one trailing input row. Loading or
    empty channels contribute no message rows.
    """
    del channels  # joined through ``index_to_channel``
    offsets = reader_offsets or {}
    items: list[FlatItem] = []
    for source_index, display_item in enumerate(display_items):
        if display_item.is_header:
            items.append(FlatItem.header(display_item.label, source_index))
            continue

        channel = index_to_channel(source_index)
        if channel is None:
            continue
        items.append(FlatItem.channel(channel.id, source_index))
        if channel.id not in expanded:
            continue

        data = expanded_data.get(channel.id)
        if data is not None and not data.is_loading and data.messages:
            total = len(data.messages)
            start, end = message_window(
                total,
                offsets.get(channel.id, 0),
                visible_count,
                use_offset=channel.id == reader_focus_channel_id or total <= visible_count,
            )
            for message_index in range(end - 1, start - 1, -1):
                message = data.messages[message_index]
                items.append(FlatItem.message(channel.id, message_index, message.id))
        items.append(FlatItem.input(channel.id))
    return items
