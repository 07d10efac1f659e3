"""Channel/message datatypes and the flat row projection."""

from __future__ import annotations

from .navigation import (
    adjacent_expanded_channel,
    channel_row_index,
    clamp_index,
    find_item_index,
    first_selectable_index,
    message_rows_for_channel,
    next_channel_index,
    owning_channel_id,
)
from .projection import DEFAULT_VISIBLE_COUNT, build_flat_items, max_reader_offset, message_window
from .types import (
    CHANNEL,
    GROUP_FOLLOWING,
    GROUP_NEW,
    GROUP_UNFOLLOWED,
    HEADER,
    INPUT,
    MESSAGE,
    Attachment,
    Channel,
    ChannelListing,
    DisplayItem,
    ExpandedChannelData,
    FlatItem,
    Message,
    Reaction,
    ReplyRef,
)

__all__ = [
    "HEADER",
    "CHANNEL",
    "MESSAGE",
    "INPUT",
    "GROUP_NEW",
    "GROUP_FOLLOWING",
    "GROUP_UNFOLLOWED",
    "Attachment",
    "Reaction",
    "ReplyRef",
    "Message",
    "Channel",
    "DisplayItem",
    "ChannelListing",
    "ExpandedChannelData",
    "FlatItem",
    "DEFAULT_VISIBLE_COUNT",
    "build_flat_items",
    "message_window",
    "max_reader_offset",
    "first_selectable_index",
    "clamp_index",
    "find_item_index",
    "channel_row_index",
    "owning_channel_id",
    "next_channel_index",
    "adjacent_expanded_channel",
    "message_rows_for_channel",
]
