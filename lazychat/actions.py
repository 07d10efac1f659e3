"""Action vocabulary accepted by ``lazychat.transition.transition``.

Each action is a small frozen record. Handlers that perform I/O dispatch
actions carrying the I/O result; actions themselves never do I/O.
"""

from __future__ import annotations

from dataclasses import dataclass

from .model import ChannelListing, ExpandedChannelData


@dataclass(frozen=True)
class SetChannels:
    listing: ChannelListing


@dataclass(frozen=True)
class SelectIndex:
    index: int


@dataclass(frozen=True)
class MoveBy:
    delta: int


@dataclass(frozen=True)
class SelectChannel:
    channel_id: str


@dataclass(frozen=True)
class ToggleExpand:
    channel_id: str


@dataclass(frozen=True)
class ExpandChannel:
    channel_id: str


@dataclass(frozen=True)
class CollapseChannel:
    channel_id: str


@dataclass(frozen=True)
class CollapseAll:
    pass


@dataclass(frozen=True)
class BeginChannelLoad:
    """Mark a channel as loading under a fresh load token."""

    channel_id: str
    load_token: int


@dataclass(frozen=True)
class SetExpandedChannelData:
    """Replace one channel's loaded data wholesale.

    When ``load_token`` is set the replacement only applies while the stored
    data still carries the same token, so superseded loads are dropped.
    """

    channel_id: str
    data: ExpandedChannelData
    load_token: int | None = None


@dataclass(frozen=True)
class SetExpandedChannels:
    expanded: frozenset[str]
    data: tuple[ExpandedChannelData, ...]


@dataclass(frozen=True)
class SetFocusMode:
    mode: str


@dataclass(frozen=True)
class EnterCompose:
    channel_id: str | None = None


@dataclass(frozen=True)
class EnterReader:
    channel_id: str | None = None


@dataclass(frozen=True)
class ReaderScrollUp:
    """Move the reader selection toward older messages."""


@dataclass(frozen=True)
class ReaderScrollDown:
    """Move the reader selection toward newer messages."""


@dataclass(frozen=True)
class ReaderFocusAdjacent:
    direction: int


@dataclass(frozen=True)
class Cancel:
    pass


@dataclass(frozen=True)
class InsertText:
    text: str


@dataclass(frozen=True)
class DeleteBackward:
    pass


@dataclass(frozen=True)
class DeleteForward:
    pass


@dataclass(frozen=True)
class MoveCursor:
    delta: int


@dataclass(frozen=True)
class MoveCursorTo:
    position: int


@dataclass(frozen=True)
class SetInputText:
    text: str


@dataclass(frozen=True)
class SetReplyTarget:
    message_id: str | None


@dataclass(frozen=True)
class SetReactTarget:
    message_id: str | None


@dataclass(frozen=True)
class SetEditTarget:
    message_id: str | None
    text: str = ""


@dataclass(frozen=True)
class AddAttachment:
    path: str
    name: str


@dataclass(frozen=True)
class ClearAttachments:
    pass


@dataclass(frozen=True)
class ResetComposeState:
    pass


@dataclass(frozen=True)
class SetStatus:
    text: str


@dataclass(frozen=True)
class SetLoading:
    loading: bool


@dataclass(frozen=True)
class SetDimensions:
    rows: int
    cols: int


@dataclass(frozen=True)
class SetView:
    view: str


@dataclass(frozen=True)
class ShowModal:
    view: str
    title: str
    lines: tuple[str, ...]


@dataclass(frozen=True)
class CloseModal:
    pass
