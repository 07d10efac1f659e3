"""In-memory message cache keyed by platform and channel.

Entries keep messages sorted oldest-first, are trimmed to the newest
``MAX_MESSAGES_PER_CHANNEL`` and evicted least-recently-used beyond
``MAX_CACHED_CHANNELS``.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from .model import Message

MAX_MESSAGES_PER_CHANNEL = 200
CACHE_TTL_SECONDS = 60.0
MAX_CACHED_CHANNELS = 50


@dataclass
class CacheEntry:
    messages: list[Message] = field(default_factory=list)
    fetched_at: float = 0.0
    has_more_before: bool = True


def _sort_key(message: Message) -> tuple[str, str]:
    return (message.timestamp, message.id)


class MessageCache:
    def __init__(
        self,
        *,
        max_messages: int = MAX_MESSAGES_PER_CHANNEL,
        ttl: float = CACHE_TTL_SECONDS,
        max_channels: int = MAX_CACHED_CHANNELS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_messages = max_messages
        self.ttl = ttl
        self.max_channels = max_channels
        self._clock = clock
        self._entries: OrderedDict[tuple[str, str], CacheEntry] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def _touch(self, key: tuple[str, str]) -> CacheEntry | None:
        entry = self._entries.get(key)
        if entry is not None:
            self._entries.move_to_end(key)
        return entry

    def _store(self, key: tuple[str, str], entry: CacheEntry) -> None:
        entry.messages.sort(key=_sort_key)
        if len(entry.messages) > self.max_messages:
            del entry.messages[: len(entry.messages) - self.max_messages]
        self._entries[key] = entry
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_channels:
            self._entries.popitem(last=False)

    def get_cached_messages(self, platform: str, channel_id: str) -> list[Message] | None:
        entry = self._touch((platform, channel_id))
        if entry is None:
            return None
        return list(entry.messages)

    def has_more_before(self, platform: str, channel_id: str) -> bool:
        entry = self._entries.get((platform, channel_id))
        return True if entry is None else entry.has_more_before

    def set_cached_messages(
        self,
        platform: str,
        channel_id: str,
        messages: Iterable[Message],
        *,
        has_more_before: bool = True,
    ) -> None:
        entry = CacheEntry(messages=list(messages), fetched_at=self._clock(), has_more_before=has_more_before)
        self._store((platform, channel_id), entry)

    def prepend_cached_messages(
        self,
        platform: str,
        channel_id: str,
        older: Iterable[Message],
        *,
        has_more_before: bool = True,
    ) -> int:
        """Merge older messages into an entry; returns how many were new."""
        key = (platform, channel_id)
        entry = self._touch(key)
        if entry is None:
            entry = CacheEntry(fetched_at=self._clock())
        known = {message.id for message in entry.messages}
        added = [message for message in older if message.id not in known]
        entry.messages = added + entry.messages
        entry.has_more_before = has_more_before
        self._store(key, entry)
        return len(added)

    def upsert_cached_message(self, platform: str, message: Message) -> bool:
        """Insert or replace ``message`` in an existing entry.

        Returns False when the channel is not cached.
        """
        key = (platform, message.channel_id)
        entry = self._touch(key)
        if entry is None:
            return False
        for idx, existing in enumerate(entry.messages):
            if existing.id == message.id:
                entry.messages[idx] = message
                break
        else:
            entry.messages.append(message)
        self._store(key, entry)
        return True

    def delete_cached_message(self, platform: str, channel_id: str, message_id: str) -> bool:
        entry = self._touch((platform, channel_id))
        if entry is None:
            return False
        before = len(entry.messages)
        entry.messages = [message for message in entry.messages if message.id != message_id]
        return len(entry.messages) != before

    def is_cache_stale(self, platform: str, channel_id: str) -> bool:
        entry = self._entries.get((platform, channel_id))
        if entry is None:
            return True
        return self._clock() - entry.fetched_at > self.ttl

    def clear(self) -> None:
        self._entries.clear()
