"""Datatypes shared by the projection, state, and collaborator layers.

Everything here is immutable so prior state snapshots stay valid.
``FlatItem`` is the tagged row type of the unified channel list.
"""

from __future__ import annotations

from dataclasses import dataclass

HEADER = "header"
CHANNEL = "channel"
MESSAGE = "message"
INPUT = "input"

GROUP_NEW = "new"
GROUP_FOLLOWING = "following"
GROUP_UNFOLLOWED = "unfollowed"


@dataclass(frozen=True)
class Attachment:
    id: str
    name: str
    url: str
    size: int = 0


@dataclass(frozen=True)
class Reaction:
    emoji: str
    count: int
    name: str = ""
    users: tuple[str, ...] = ()


@dataclass(frozen=True)
class ReplyRef:
    """Preview of the message a reply points at."""

    message_id: str
    author: str
    content: str


@dataclass(frozen=True)
class Message:
    """One chat message as loaded from a platform or the cache."""

    id: str
    channel_id: str
    author: str
    author_id: str
    content: str
    timestamp: str
    is_bot: bool = False
    attachments: tuple[Attachment, ...] = ()
    reactions: tuple[Reaction, ...] = ()
    reply_to: ReplyRef | None = None

    @property
    def has_attachments(self) -> bool:
        return bool(self.attachments)


@dataclass(frozen=True)
class Channel:
    """Channel or conversation identity plus inbox membership flags."""

    id: str
    name: str
    kind: str = "text"
    platform: str = "demo"
    parent_name: str | None = None
    group: str = GROUP_FOLLOWING
    badge: int = 0

    @property
    def is_new(self) -> bool:
        return self.group == GROUP_NEW

    @property
    def is_following(self) -> bool:
        return self.group in {GROUP_NEW, GROUP_FOLLOWING}

    @property
    def is_unfollowed(self) -> bool:
        return self.group == GROUP_UNFOLLOWED

    @property
    def display_name(self) -> str:
        if self.parent_name:
            return f"{self.parent_name} / {self.name}"
        return self.name


@dataclass(frozen=True)
class DisplayItem:
    """One row of the collaborator-supplied channel listing."""

    label: str
    is_header: bool = False
    section: str | None = None


@dataclass(frozen=True)
class ChannelListing:
    """Ordered display rows joined to channels by position.

    ``channel_index[i]`` is the index into ``channels`` for display row ``i``
    or ``None`` for section headers.
    """

    channels: tuple[Channel, ...] = ()
    display_items: tuple[DisplayItem, ...] = ()
    channel_index: tuple[int | None, ...] = ()

    @classmethod
    def flat(cls, channels: tuple[Channel, ...] | list[Channel]) -> ChannelListing:
        """Build a header-less listing with one row per channel."""
        channels = tuple(channels)
        return cls(
            channels=channels,
            display_items=tuple(DisplayItem(label=ch.display_name) for ch in channels),
            channel_index=tuple(range(len(channels))),
        )

    def index_to_channel(self, index: int) -> Channel | None:
        if index < 0 or index >= len(self.channel_index):
            return None
        channel_idx = self.channel_index[index]
        if channel_idx is None or channel_idx < 0 or channel_idx >= len(self.channels):
            return None
        return self.channels[channel_idx]

    def find_channel(self, channel_id: str) -> Channel | None:
        for channel in self.channels:
            if channel.id == channel_id:
                return channel
        return None


@dataclass(frozen=True)
class ExpandedChannelData:
    """Loaded messages of one expanded channel (oldest to newest)."""

    channel_id: str
    messages: tuple[Message, ...] = ()
    is_loading: bool = False
    has_more_older: bool = True
    load_token: int = 0
    error: str | None = None

    @classmethod
    def loading(cls, channel_id: str, load_token: int = 0) -> ExpandedChannelData:
        return cls(channel_id=channel_id, is_loading=True, load_token=load_token)


@dataclass(frozen=True)
class FlatItem:
    """Tagged row of the unified list: header, channel, message, or input."""

    kind: str
    channel_id: str | None = None
    label: str = ""
    source_index: int = -1
    message_index: int = -1
    message_id: str | None = None

    @classmethod
    def header(cls, label: str, source_index: int) -> FlatItem:
        return cls(kind=HEADER, label=label, source_index=source_index)

    @classmethod
    def channel(cls, channel_id: str, source_index: int) -> FlatItem:
        return cls(kind=CHANNEL, channel_id=channel_id, source_index=source_index)

    @classmethod
    def message(cls, channel_id: str, message_index: int, message_id: str) -> FlatItem:
        return cls(kind=MESSAGE, channel_id=channel_id, message_index=message_index, message_id=message_id)

    @classmethod
    def input(cls, channel_id: str) -> FlatItem:
        return cls(kind=INPUT, channel_id=channel_id)

    @property
    def key(self) -> tuple[str, ...]:
        """Identity used to keep the selection on the same row across rebuilds."""
        if self.kind == HEADER:
            return (HEADER, self.label)
        if self.kind == MESSAGE:
            return (MESSAGE, self.channel_id or "", self.message_id or "")
        return (self.kind, self.channel_id or "")
