"""Event bus and sync bridge tests.

Push events must land in the cache and reach state only through
``SetExpandedChannelData`` dispatches for expanded, settled channels.
"""

from __future__ import annotations

import unittest
from dataclasses import replace

from lazychat import actions as a
from lazychat.cache import MessageCache
from lazychat.model import Channel, ChannelListing, ExpandedChannelData, Message
from lazychat.state import initial_state
from lazychat.sync import MESSAGE_CREATED, MESSAGE_DELETED, MESSAGE_UPDATED, EventBus, SyncBridge
from lazychat.transition import apply_all, transition


def _message(message_id: str, minute: int, channel_id: str = "general", content: str = "hi") -> Message:
    return Message(
        id=message_id,
        channel_id=channel_id,
        author="alice",
        author_id="u-alice",
        content=content,
        timestamp=f"2024-05-01T09:{minute:02d}:00+00:00",
    )


class EventBusTests(unittest.TestCase):
    def test_publish_reaches_subscribers_until_unsubscribed(self) -> None:
        bus = EventBus()
        seen: list[object] = []
        unsubscribe = bus.subscribe(MESSAGE_CREATED, seen.append)
        bus.publish(MESSAGE_CREATED, "one")
        unsubscribe()
        bus.publish(MESSAGE_CREATED, "two")
        self.assertEqual(seen, ["one"])

    def test_unknown_topic_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            EventBus().subscribe("message.exploded", print)

    def test_failing_subscriber_does_not_block_others(self) -> None:
        bus = EventBus()
        seen: list[object] = []

        def boom(_payload: object) -> None:
            raise RuntimeError("boom")

        bus.subscribe(MESSAGE_UPDATED, boom)
        bus.subscribe(MESSAGE_UPDATED, seen.append)
        with self.assertLogs("lazychat.sync", level="ERROR"):
            bus.publish(MESSAGE_UPDATED, "payload")
        self.assertEqual(seen, ["payload"])


class _Harness:
    def __init__(self) -> None:
        listing = ChannelListing.flat([Channel(id="general", name="general"), Channel(id="dev", name="dev")])
        self.state = initial_state(listing)
        self.dispatched: list[object] = []
        self.unseen: list[Message] = []
        self.bus = EventBus()
        self.cache = MessageCache()
        self.bridge = SyncBridge(
            self.bus,
            self.cache,
            "demo",
            lambda: self.state,
            self.dispatch,
            on_unseen_message=self._unseen,
        )
        self.bridge.attach()

    def dispatch(self, action: object) -> None:
        self.dispatched.append(action)
        self.state = transition(self.state, action)

    def _unseen(self, message: Message) -> ChannelListing | None:
        self.unseen.append(message)
        return None

    def expand(self, channel_id: str, messages: list[Message]) -> None:
        self.cache.set_cached_messages("demo", channel_id, messages)
        self.state = apply_all(
            self.state,
            [
                a.ExpandChannel(channel_id),
                a.SetExpandedChannelData(channel_id, ExpandedChannelData(channel_id, messages=tuple(messages))),
            ],
        )


class SyncBridgeTests(unittest.TestCase):
    def test_created_message_for_expanded_channel_replaces_data(self) -> None:
        harness = _Harness()
        harness.expand("general", [_message("m1", 1)])

        harness.bus.publish(MESSAGE_CREATED, _message("m2", 2))

        self.assertEqual(len(harness.dispatched), 1)
        self.assertIsInstance(harness.dispatched[0], a.SetExpandedChannelData)
        self.assertEqual([m.id for m in harness.state.expanded_data["general"].messages], ["m1", "m2"])
        self.assertEqual(harness.unseen, [])

    def test_created_message_for_collapsed_channel_goes_to_inbox(self) -> None:
        harness = _Harness()
        message = _message("m9", 9, channel_id="dev")
        harness.bus.publish(MESSAGE_CREATED, message)
        self.assertEqual(harness.unseen, [message])
        self.assertEqual(harness.dispatched, [])

    def test_update_and_delete(self) -> None:
        harness = _Harness()
        harness.expand("general", [_message("m1", 1), _message("m2", 2)])

        harness.bus.publish(MESSAGE_UPDATED, _message("m1", 1, content="edited"))
        self.assertEqual(harness.state.expanded_data["general"].messages[0].content, "edited")

        harness.bus.publish(MESSAGE_DELETED, "general", "m2")
        self.assertEqual([m.id for m in harness.state.expanded_data["general"].messages], ["m1"])
        self.assertEqual([m.id for m in harness.cache.get_cached_messages("demo", "general")], ["m1"])

    def test_push_while_loading_only_touches_cache(self) -> None:
        harness = _Harness()
        harness.cache.set_cached_messages("demo", "general", [_message("m1", 1)])
        harness.state = apply_all(harness.state, [a.ExpandChannel("general"), a.BeginChannelLoad("general", 3)])
        loading = harness.state.expanded_data["general"]

        harness.bus.publish(MESSAGE_CREATED, _message("m2", 2))

        self.assertEqual(harness.dispatched, [])
        self.assertIs(harness.state.expanded_data["general"], loading)
        self.assertEqual(len(harness.cache.get_cached_messages("demo", "general")), 2)

    def test_push_for_other_channel_leaves_loading_channel_untouched(self) -> None:
        harness = _Harness()
        harness.expand("dev", [_message("d1", 1, channel_id="dev")])
        harness.state = apply_all(harness.state, [a.ExpandChannel("general"), a.BeginChannelLoad("general", 1)])
        loading = harness.state.expanded_data["general"]

        harness.bus.publish(MESSAGE_CREATED, _message("d2", 2, channel_id="dev"))

        self.assertIs(harness.state.expanded_data["general"], loading)
        self.assertEqual(len(harness.state.expanded_data["dev"].messages), 2)

    def test_cache_miss_is_seeded_from_state(self) -> None:
        harness = _Harness()
        harness.expand("general", [_message("m1", 1)])
        harness.cache.clear()

        harness.bus.publish(MESSAGE_UPDATED, replace(_message("m1", 1), content="changed"))

        messages = harness.state.expanded_data["general"].messages
        self.assertEqual([(m.id, m.content) for m in messages], [("m1", "changed")])

    def test_detach_stops_delivery(self) -> None:
        harness = _Harness()
        harness.expand("general", [_message("m1", 1)])
        harness.bridge.detach()
        self.assertFalse(harness.bridge.attached)
        harness.bus.publish(MESSAGE_CREATED, _message("m2", 2))
        self.assertEqual(harness.dispatched, [])


if __name__ == "__main__":
    unittest.main()
