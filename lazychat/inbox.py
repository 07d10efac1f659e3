"""Inbox-style channel listing grouped by follow state.

Channels the user has visited are *followed*. A followed channel with
messages from other people newer than the last visit lands in NEW MESSAGES,
the rest in FOLLOWING. Channels without a visit record are UNFOLLOWED.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timezone

from .model import (
    GROUP_FOLLOWING,
    GROUP_NEW,
    GROUP_UNFOLLOWED,
    Channel,
    ChannelListing,
    DisplayItem,
    Message,
)
from .platforms.types import PlatformClient
from .runtime import config

logger = logging.getLogger(__name__)

SECTION_ORDER = (GROUP_NEW, GROUP_FOLLOWING, GROUP_UNFOLLOWED)
SECTION_TITLES = {
    GROUP_NEW: "🆕 NEW MESSAGES",
    GROUP_FOLLOWING: "✓ FOLLOWING",
    GROUP_UNFOLLOWED: "UNFOLLOWED",
}
NEW_MESSAGE_SCAN_LIMIT = 20


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_time(value: str) -> datetime | None:
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def section_header(section: str, count: int, collapsed: bool) -> str:
    marker = "▸" if collapsed else "▾"
    return f"══════ {marker} {SECTION_TITLES[section]} ({count}) ══════"


def channel_label(channel: Channel) -> str:
    badge = f" [{channel.badge} new]" if channel.badge else ""
    return f"{channel.display_name}{badge}"


def build_listing(channels: list[Channel], collapsed_sections: set[str] | frozenset[str] = frozenset()) -> ChannelListing:
    """Assemble a sectioned listing from already-grouped channels.

    Empty sections are omitted; collapsed sections keep their header only.
    """
    ordered: list[Channel] = []
    display_items: list[DisplayItem] = []
    channel_index: list[int | None] = []
    for section in SECTION_ORDER:
        members = [channel for channel in channels if channel.group == section]
        if not members:
            continue
        collapsed = section in collapsed_sections
        display_items.append(
            DisplayItem(label=section_header(section, len(members), collapsed), is_header=True, section=section)
        )
        channel_index.append(None)
        if collapsed:
            continue
        for channel in members:
            display_items.append(DisplayItem(label=channel_label(channel), section=section))
            channel_index.append(len(ordered))
            ordered.append(channel)
    return ChannelListing(channels=tuple(ordered), display_items=tuple(display_items), channel_index=tuple(channel_index))


class InboxChannelProvider:
    """Builds fresh ``ChannelListing`` values from a platform client.

    Visit records and collapsed sections are read from and written to the
    JSON config unless ``persist`` is false.
    """

    def __init__(
        self,
        client: PlatformClient,
        *,
        visits: dict[str, config.VisitRecord] | None = None,
        collapsed_sections: set[str] | None = None,
        persist: bool = True,
        clock: Callable[[], str] = _utcnow,
    ) -> None:
        self.client = client
        self.persist = persist
        self._clock = clock
        self.visits = visits if visits is not None else (config.load_visits() if persist else {})
        self.collapsed_sections = (
            collapsed_sections if collapsed_sections is not None else (config.load_collapsed_sections() if persist else set())
        )
        self._channels: list[Channel] = []

    def visit_key(self, channel_id: str) -> str:
        return f"{self.client.platform}:{channel_id}"

    def is_following(self, channel_id: str) -> bool:
        return self.visit_key(channel_id) in self.visits

    async def refresh(self) -> ChannelListing:
        """Fetch channels, regroup them and return the new listing."""
        channels = await self.client.get_channels()
        self._channels = list(await asyncio.gather(*(self._classify(channel) for channel in channels)))
        logger.debug("inbox refreshed: %d channels", len(self._channels))
        return self.listing()

    def listing(self) -> ChannelListing:
        return build_listing(self._channels, self.collapsed_sections)

    async def _classify(self, channel: Channel) -> Channel:
        record = self.visits.get(self.visit_key(channel.id))
        if record is None:
            return replace(channel, group=GROUP_UNFOLLOWED, badge=0)
        last_visited = _parse_time(record["last_visited"])
        try:
            recent = await self.client.get_messages(channel.id, NEW_MESSAGE_SCAN_LIMIT)
        except Exception:
            logger.warning("could not scan %s for new messages", channel.id, exc_info=True)
            return replace(channel, group=GROUP_FOLLOWING, badge=0)
        user = self.client.current_user()
        fresh = 0
        for message in recent:
            if user is not None and message.author_id == user.id:
                continue
            sent = _parse_time(message.timestamp)
            if last_visited is None or (sent is not None and sent > last_visited):
                fresh += 1
        group = GROUP_NEW if fresh else GROUP_FOLLOWING
        return replace(channel, group=group, badge=fresh)

    def _set_channel(self, channel_id: str, **changes: object) -> None:
        self._channels = [
            replace(channel, **changes) if channel.id == channel_id else channel for channel in self._channels
        ]

    def mark_visited(self, channel_id: str) -> ChannelListing:
        """Record a visit now; the channel moves to FOLLOWING with no badge."""
        self.visits[self.visit_key(channel_id)] = {"last_visited": self._clock()}
        self._set_channel(channel_id, group=GROUP_FOLLOWING, badge=0)
        self._save_visits()
        return self.listing()

    def follow(self, channel_id: str) -> ChannelListing:
        return self.mark_visited(channel_id)

    def unfollow(self, channel_id: str) -> ChannelListing:
        self.visits.pop(self.visit_key(channel_id), None)
        self._set_channel(channel_id, group=GROUP_UNFOLLOWED, badge=0)
        self._save_visits()
        return self.listing()

    def toggle_section(self, section: str) -> ChannelListing:
        if section in self.collapsed_sections:
            self.collapsed_sections.discard(section)
        else:
            self.collapsed_sections.add(section)
        if self.persist:
            config.save_collapsed_sections(self.collapsed_sections)
        return self.listing()

    def _save_visits(self) -> None:
        if self.persist:
            config.save_visits(self.visits)

    def note_incoming(self, message: Message) -> ChannelListing | None:
        """Bump the badge of a followed channel for a message from someone else.

        Returns the new listing, or None when nothing changed.
        """
        user = self.client.current_user()
        if user is not None and message.author_id == user.id:
            return None
        if not self.is_following(message.channel_id):
            return None
        channel = next((ch for ch in self._channels if ch.id == message.channel_id), None)
        if channel is None:
            return None
        self._set_channel(channel.id, group=GROUP_NEW, badge=channel.badge + 1)
        return self.listing()
