"""Live-event bus and the bridge that turns push events into actions.

Platform callbacks publish onto named topics. ``SyncBridge`` subscribes once
and, for every event touching an expanded channel, dispatches one wholesale
``SetExpandedChannelData`` built from the message cache.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import replace

from .actions import SetChannels, SetExpandedChannelData
from .cache import MessageCache
from .model import ChannelListing, Message
from .platforms.types import PlatformClient
from .state import AppState

logger = logging.getLogger(__name__)

MESSAGE_CREATED = "message.created"
MESSAGE_UPDATED = "message.updated"
MESSAGE_DELETED = "message.deleted"
TOPICS = (MESSAGE_CREATED, MESSAGE_UPDATED, MESSAGE_DELETED)

Handler = Callable[..., None]


class EventBus:
    """Synchronous publish/subscribe over a fixed set of topic names."""

    def __init__(self, topics: tuple[str, ...] = TOPICS) -> None:
        self._topics = frozenset(topics)
        self._handlers: dict[str, list[Handler]] = defaultdict(list)

    def subscribe(self, topic: str, handler: Handler) -> Callable[[], None]:
        if topic not in self._topics:
            raise ValueError(f"unknown topic {topic!r}")
        self._handlers[topic].append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers[topic]:
                self._handlers[topic].remove(handler)

        return unsubscribe

    def publish(self, topic: str, *payload: object) -> None:
        """Deliver ``payload`` to every subscriber in subscription order.

        A failing subscriber is logged and does not stop delivery to others.
        """
        for handler in list(self._handlers.get(topic, ())):
            try:
                handler(*payload)
            except Exception:
                logger.exception("event handler failed for %s", topic)

    def bind_client(self, client: PlatformClient) -> None:
        """Forward a platform client's push callbacks onto the bus."""
        client.on_message(lambda message: self.publish(MESSAGE_CREATED, message))
        client.on_message_update(lambda message: self.publish(MESSAGE_UPDATED, message))
        client.on_message_delete(lambda channel_id, message_id: self.publish(MESSAGE_DELETED, channel_id, message_id))


class SyncBridge:
    """Applies push events to the cache and the application state."""

    def __init__(
        self,
        bus: EventBus,
        cache: MessageCache,
        platform: str,
        get_state: Callable[[], AppState],
        dispatch: Callable[[object], None],
        *,
        on_unseen_message: Callable[[Message], ChannelListing | None] | None = None,
    ) -> None:
        self.bus = bus
        self.cache = cache
        self.platform = platform
        self._get_state = get_state
        self._dispatch = dispatch
        self._on_unseen_message = on_unseen_message
        self._unsubscribers: list[Callable[[], None]] = []

    @property
    def attached(self) -> bool:
        return bool(self._unsubscribers)

    def attach(self) -> None:
        if self._unsubscribers:
            return
        self._unsubscribers = [
            self.bus.subscribe(MESSAGE_CREATED, self.on_message_created),
            self.bus.subscribe(MESSAGE_UPDATED, self.on_message_updated),
            self.bus.subscribe(MESSAGE_DELETED, self.on_message_deleted),
        ]

    def detach(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    def on_message_created(self, message: Message) -> None:
        if self._upsert(message):
            return
        if self._on_unseen_message is None:
            return
        listing = self._on_unseen_message(message)
        if listing is not None:
            self._dispatch(SetChannels(listing))

    def on_message_updated(self, message: Message) -> None:
        self._upsert(message)

    def on_message_deleted(self, channel_id: str, message_id: str) -> None:
        self.cache.delete_cached_message(self.platform, channel_id, message_id)
        self._replace_from_cache(channel_id)

    def apply_listing(self, listing: ChannelListing) -> None:
        """Push a refreshed channel listing through the transition function."""
        self._dispatch(SetChannels(listing))

    def _upsert(self, message: Message) -> bool:
        """Cache ``message`` and refresh its channel; False when not expanded."""
        channel_id = message.channel_id
        if not self.cache.upsert_cached_message(self.platform, message):
            current = self._get_state().expanded_data.get(channel_id)
            if current is not None and not current.is_loading:
                self.cache.set_cached_messages(
                    self.platform,
                    channel_id,
                    [*(m for m in current.messages if m.id != message.id), message],
                    has_more_before=current.has_more_older,
                )
        return self._replace_from_cache(channel_id)

    def _replace_from_cache(self, channel_id: str) -> bool:
        state = self._get_state()
        if channel_id not in state.expanded:
            return False
        current = state.expanded_data.get(channel_id)
        if current is None or current.is_loading:
            return True
        messages = self.cache.get_cached_messages(self.platform, channel_id)
        if messages is None:
            return True
        data = replace(current, messages=tuple(messages), is_loading=False, error=None)
        self._dispatch(SetExpandedChannelData(channel_id, data))
        return True
