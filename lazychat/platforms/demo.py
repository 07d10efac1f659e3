"""In-memory platform client used for demos and tests.

Seeds a handful of channels with messages, simulates network latency, and
can emit live create/update/delete events from a background asyncio task.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import random
from dataclasses import replace
from datetime import datetime, timedelta, timezone

from ..errors import NotAuthorizedError, PlatformError, ReadOnlyError
from ..model import Attachment, Channel, Message, Reaction, ReplyRef
from .types import (
    CurrentUser,
    DeleteCallback,
    MessageCallback,
    SendMessageOptions,
)

logger = logging.getLogger(__name__)

DEMO_USER = CurrentUser(id="u-me", username="me")
_AUTHORS = (("u-alice", "alice"), ("u-bob", "bob"), ("u-carol", "carol"), ("u-bot", "deploybot"))
_CHATTER = (
    "anyone around?",
    "pushed the fix, CI is green",
    "lunch at noon :)",
    "see https://example.com/notes for the agenda",
    "```python\nprint('hello from the demo')\n```",
    "sounds good",
    "can you review my PR?",
    "build #481 deployed to staging",
)
_SEED_CHANNELS = (
    ("c-general", "general", "text", "Acme"),
    ("c-dev", "dev", "text", "Acme"),
    ("c-random", "random", "text", "Acme"),
    ("c-alice", "alice", "dm", None),
    ("c-weekend", "weekend plans", "group", None),
)
_BASE_TIME = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


def _timestamp(minutes: int) -> str:
    return (_BASE_TIME + timedelta(minutes=minutes)).isoformat()


class DemoPlatformClient:
    """Platform client backed by dictionaries instead of a network SDK."""

    platform = "demo"

    def __init__(
        self,
        *,
        latency: float = 0.05,
        seed: int = 7,
        messages_per_channel: int = 12,
        fail_channels: frozenset[str] = frozenset(),
    ) -> None:
        self.latency = max(0.0, latency)
        self.fail_channels = fail_channels
        self._rng = random.Random(seed)
        self._ids = itertools.count(1)
        self._clock = itertools.count(messages_per_channel * len(_SEED_CHANNELS) + 1)
        self._connected = False
        self._channels: list[Channel] = []
        self._messages: dict[str, list[Message]] = {}
        self._on_message: list[MessageCallback] = []
        self._on_update: list[MessageCallback] = []
        self._on_delete: list[DeleteCallback] = []
        self._live_task: asyncio.Task | None = None
        self._seed(messages_per_channel)

    def _seed(self, per_channel: int) -> None:
        minute = 0
        for channel_id, name, kind, parent in _SEED_CHANNELS:
            self._channels.append(
                Channel(id=channel_id, name=name, kind=kind, platform=self.platform, parent_name=parent)
            )
            messages: list[Message] = []
            for _ in range(per_channel):
                author_id, author = self._rng.choice(_AUTHORS)
                messages.append(self._make_message(channel_id, author_id, author, self._rng.choice(_CHATTER), minute))
                minute += 1
            self._messages[channel_id] = messages

    def _make_message(self, channel_id: str, author_id: str, author: str, content: str, minute: int) -> Message:
        message_id = f"m{next(self._ids)}"
        attachments: tuple[Attachment, ...] = ()
        if "deployed" in content:
            attachments = (Attachment(id=f"a-{message_id}", name="build.log", url=f"https://example.com/{message_id}.log"),)
        return Message(
            id=message_id,
            channel_id=channel_id,
            author=author,
            author_id=author_id,
            content=content,
            timestamp=_timestamp(minute),
            is_bot=author_id == "u-bot",
            attachments=attachments,
        )

    async def _io(self, channel_id: str | None = None, *, write: bool = False) -> None:
        """Simulate a round trip; reads work offline, writes need a connection."""
        if self.latency:
            await asyncio.sleep(self.latency)
        if write and not self._connected:
            raise ReadOnlyError()
        if channel_id is not None and channel_id in self.fail_channels:
            raise PlatformError(f"Channel {channel_id} is unavailable")

    def _channel_messages(self, channel_id: str) -> list[Message]:
        try:
            return self._messages[channel_id]
        except KeyError:
            raise PlatformError(f"Unknown channel {channel_id}") from None

    def _find(self, channel_id: str, message_id: str) -> tuple[int, Message]:
        for idx, message in enumerate(self._channel_messages(channel_id)):
            if message.id == message_id:
                return idx, message
        raise PlatformError(f"Unknown message {message_id}")

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        self._connected = True
        logger.info("demo client connected with %d channels", len(self._channels))

    async def disconnect(self) -> None:
        await self.stop_live_events()
        self._connected = False

    async def get_channels(self) -> list[Channel]:
        await self._io()
        return list(self._channels)

    async def get_messages(self, channel_id: str, limit: int = 20) -> list[Message]:
        await self._io(channel_id)
        return list(self._channel_messages(channel_id)[-limit:])

    async def get_messages_before(self, channel_id: str, before_id: str, limit: int = 20) -> list[Message]:
        await self._io(channel_id)
        idx, _message = self._find(channel_id, before_id)
        return list(self._channel_messages(channel_id)[max(0, idx - limit) : idx])

    async def send_message(self, options: SendMessageOptions) -> Message:
        await self._io(options.channel_id, write=True)
        reply_to = None
        if options.reply_to_message_id:
            _idx, target = self._find(options.channel_id, options.reply_to_message_id)
            reply_to = ReplyRef(message_id=target.id, author=target.author, content=target.content[:60])
        message = self._make_message(
            options.channel_id, DEMO_USER.id, DEMO_USER.username, options.content, next(self._clock)
        )
        message = replace(
            message,
            reply_to=reply_to,
            attachments=tuple(
                Attachment(id=f"a-{message.id}-{n}", name=item.name, url=item.url or item.path or "")
                for n, item in enumerate(options.attachments)
            ),
        )
        self._channel_messages(options.channel_id).append(message)
        self._emit(self._on_message, message)
        return message

    async def edit_message(self, channel_id: str, message_id: str, text: str) -> Message:
        await self._io(channel_id, write=True)
        idx, message = self._find(channel_id, message_id)
        if message.author_id != DEMO_USER.id:
            raise NotAuthorizedError("Can only edit your own messages")
        edited = replace(message, content=text)
        self._messages[channel_id][idx] = edited
        self._emit(self._on_update, edited)
        return edited

    async def delete_message(self, channel_id: str, message_id: str) -> None:
        await self._io(channel_id, write=True)
        idx, message = self._find(channel_id, message_id)
        if message.author_id != DEMO_USER.id:
            raise NotAuthorizedError("Can only delete your own messages")
        del self._messages[channel_id][idx]
        for callback in list(self._on_delete):
            callback(channel_id, message_id)

    async def add_reaction(self, channel_id: str, message_id: str, emoji: str) -> None:
        await self._io(channel_id, write=True)
        idx, message = self._find(channel_id, message_id)
        reactions = list(message.reactions)
        for n, reaction in enumerate(reactions):
            if reaction.emoji == emoji:
                if DEMO_USER.username in reaction.users:
                    return
                reactions[n] = replace(reaction, count=reaction.count + 1, users=reaction.users + (DEMO_USER.username,))
                break
        else:
            reactions.append(Reaction(emoji=emoji, count=1, name=emoji, users=(DEMO_USER.username,)))
        updated = replace(message, reactions=tuple(reactions))
        self._messages[channel_id][idx] = updated
        self._emit(self._on_update, updated)

    def current_user(self) -> CurrentUser | None:
        return DEMO_USER if self._connected else None

    def on_message(self, callback: MessageCallback) -> None:
        self._on_message.append(callback)

    def on_message_update(self, callback: MessageCallback) -> None:
        self._on_update.append(callback)

    def on_message_delete(self, callback: DeleteCallback) -> None:
        self._on_delete.append(callback)

    def _emit(self, callbacks: list[MessageCallback], message: Message) -> None:
        for callback in list(callbacks):
            callback(message)

    def inject_message(self, channel_id: str, content: str, author: str = "alice") -> Message:
        """Append a message from another user and fire the created event."""
        author_id = next((aid for aid, name in _AUTHORS if name == author), f"u-{author}")
        message = self._make_message(channel_id, author_id, author, content, next(self._clock))
        self._channel_messages(channel_id).append(message)
        self._emit(self._on_message, message)
        return message

    def start_live_events(self, interval: float = 8.0) -> None:
        if self._live_task is None or self._live_task.done():
            self._live_task = asyncio.get_running_loop().create_task(self._live_events(interval))

    async def stop_live_events(self) -> None:
        task = self._live_task
        self._live_task = None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _live_events(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            channel_id, _name, _kind, _parent = self._rng.choice(_SEED_CHANNELS)
            _author_id, author = self._rng.choice(_AUTHORS)
            self.inject_message(channel_id, self._rng.choice(_CHATTER), author=author)
