"""Inbox grouping tests: sections, badges, follow state, and persistence."""

from __future__ import annotations

import tempfile
import unittest
from dataclasses import replace
from pathlib import Path
from unittest import mock

from lazychat.inbox import InboxChannelProvider, build_listing, section_header
from lazychat.model import GROUP_FOLLOWING, GROUP_NEW, GROUP_UNFOLLOWED, Channel
from lazychat.platforms import DemoPlatformClient
from lazychat.runtime import config

NOW = "2024-05-01T12:00:00+00:00"


def _provider(client: DemoPlatformClient, visits=None, **kwargs) -> InboxChannelProvider:
    return InboxChannelProvider(
        client,
        visits=visits if visits is not None else {},
        collapsed_sections=set(),
        persist=False,
        clock=lambda: NOW,
        **kwargs,
    )


class BuildListingTests(unittest.TestCase):
    def test_sections_in_order_and_empty_sections_omitted(self) -> None:
        channels = [
            Channel(id="a", name="a", group=GROUP_UNFOLLOWED),
            Channel(id="b", name="b", group=GROUP_NEW, badge=2),
        ]
        listing = build_listing(channels)
        labels = [item.label for item in listing.display_items]
        self.assertEqual(
            labels,
            [section_header(GROUP_NEW, 1, False), "b [2 new]", section_header(GROUP_UNFOLLOWED, 1, False), "a"],
        )
        self.assertEqual(listing.channel_index, (None, 0, None, 1))
        self.assertEqual(listing.index_to_channel(1).id, "b")
        self.assertIsNone(listing.index_to_channel(0))

    def test_collapsed_section_keeps_only_header(self) -> None:
        channels = [Channel(id="a", name="a", group=GROUP_FOLLOWING)]
        listing = build_listing(channels, {GROUP_FOLLOWING})
        self.assertEqual(len(listing.display_items), 1)
        self.assertTrue(listing.display_items[0].is_header)
        self.assertIn("▸", listing.display_items[0].label)
        self.assertEqual(listing.display_items[0].section, GROUP_FOLLOWING)
        self.assertEqual(listing.channels, ())


class InboxProviderTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.client = DemoPlatformClient(latency=0)
        await self.client.connect()

    async def test_refresh_groups_by_visit_records(self) -> None:
        inbox = _provider(
            self.client,
            visits={
                "demo:c-general": {"last_visited": "2024-05-01T09:05:30+00:00"},
                "demo:c-dev": {"last_visited": NOW},
            },
        )
        listing = await inbox.refresh()

        groups = {channel.id: channel.group for channel in listing.channels}
        self.assertEqual(groups["c-general"], GROUP_NEW)
        self.assertEqual(groups["c-dev"], GROUP_FOLLOWING)
        self.assertEqual(groups["c-random"], GROUP_UNFOLLOWED)
        general = listing.find_channel("c-general")
        self.assertEqual(general.badge, 6)
        self.assertEqual([item.is_header for item in listing.display_items].count(True), 3)
        self.assertIn("Acme / general [6 new]", [item.label for item in listing.display_items])

    async def test_mark_visited_moves_channel_to_following(self) -> None:
        inbox = _provider(self.client)
        await inbox.refresh()
        listing = inbox.mark_visited("c-random")

        self.assertTrue(inbox.is_following("c-random"))
        self.assertEqual(inbox.visits["demo:c-random"], {"last_visited": NOW})
        self.assertEqual(listing.find_channel("c-random").group, GROUP_FOLLOWING)

    async def test_unfollow_and_follow(self) -> None:
        inbox = _provider(self.client, visits={"demo:c-dev": {"last_visited": NOW}})
        await inbox.refresh()

        listing = inbox.unfollow("c-dev")
        self.assertEqual(listing.find_channel("c-dev").group, GROUP_UNFOLLOWED)
        self.assertFalse(inbox.is_following("c-dev"))

        listing = inbox.follow("c-dev")
        self.assertEqual(listing.find_channel("c-dev").group, GROUP_FOLLOWING)

    async def test_toggle_section_hides_members(self) -> None:
        inbox = _provider(self.client)
        await inbox.refresh()
        listing = inbox.toggle_section(GROUP_UNFOLLOWED)
        self.assertEqual(listing.channels, ())
        listing = inbox.toggle_section(GROUP_UNFOLLOWED)
        self.assertEqual(len(listing.channels), 5)

    async def test_note_incoming_badges_followed_channels_only(self) -> None:
        inbox = _provider(self.client, visits={"demo:c-dev": {"last_visited": NOW}})
        await inbox.refresh()

        message = self.client.inject_message("c-dev", "ping")
        listing = inbox.note_incoming(message)
        self.assertEqual(listing.find_channel("c-dev").group, GROUP_NEW)
        self.assertEqual(listing.find_channel("c-dev").badge, 1)

        other = self.client.inject_message("c-random", "ping")
        self.assertIsNone(inbox.note_incoming(other))

        own = replace(message, author_id=self.client.current_user().id)
        self.assertIsNone(inbox.note_incoming(own))

    async def test_scan_failure_keeps_channel_following(self) -> None:
        self.client.fail_channels = frozenset({"c-dev"})
        inbox = _provider(self.client, visits={"demo:c-dev": {"last_visited": "2000-01-01T00:00:00+00:00"}})
        with self.assertLogs("lazychat.inbox", level="WARNING"):
            listing = await inbox.refresh()
        self.assertEqual(listing.find_channel("c-dev").group, GROUP_FOLLOWING)

    async def test_visits_and_sections_persist_to_config(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with mock.patch("lazychat.runtime.config.CONFIG_PATH", Path(tmp) / "config.json"):
                inbox = InboxChannelProvider(self.client, clock=lambda: NOW)
                await inbox.refresh()
                inbox.mark_visited("c-alice")
                inbox.toggle_section(GROUP_UNFOLLOWED)

                self.assertEqual(config.load_visits(), {"demo:c-alice": {"last_visited": NOW}})
                self.assertEqual(config.load_collapsed_sections(), {GROUP_UNFOLLOWED})

                reloaded = InboxChannelProvider(self.client)
                self.assertTrue(reloaded.is_following("c-alice"))
                self.assertEqual(reloaded.collapsed_sections, {GROUP_UNFOLLOWED})


if __name__ == "__main__":
    unittest.main()
