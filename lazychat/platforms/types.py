"""Platform client protocol consumed by the message and channel providers.

Concrete SDK adapters live outside this package; the demo client in
``lazychat.platforms.demo`` implements the protocol in memory.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from ..model import Channel, Message

MessageCallback = Callable[[Message], None]
DeleteCallback = Callable[[str, str], None]


@dataclass(frozen=True)
class CurrentUser:
    id: str
    username: str


@dataclass(frozen=True)
class OutgoingAttachment:
    name: str
    path: str | None = None
    url: str | None = None


@dataclass(frozen=True)
class SendMessageOptions:
    content: str
    channel_id: str
    reply_to_message_id: str | None = None
    attachments: tuple[OutgoingAttachment, ...] = ()


class PlatformClient(Protocol):
    """Async operations and push subscriptions of one chat platform."""

    platform: str

    @property
    def is_connected(self) -> bool: ...

    async def connect(self) -> None: ...

    async def disconnect(self) -> None: ...

    async def get_channels(self) -> list[Channel]: ...

    async def get_messages(self, channel_id: str, limit: int = 20) -> list[Message]: ...

    async def get_messages_before(self, channel_id: str, before_id: str, limit: int = 20) -> list[Message]: ...

    async def send_message(self, options: SendMessageOptions) -> Message: ...

    async def edit_message(self, channel_id: str, message_id: str, text: str) -> Message: ...

    async def delete_message(self, channel_id: str, message_id: str) -> None: ...

    async def add_reaction(self, channel_id: str, message_id: str, emoji: str) -> None: ...

    def current_user(self) -> CurrentUser | None: ...

    def on_message(self, callback: MessageCallback) -> None: ...

    def on_message_update(self, callback: MessageCallback) -> None: ...

    def on_message_delete(self, callback: DeleteCallback) -> None: ...
