"""Key routing tests for navigation, compose, reader, react, and modal modes."""

from __future__ import annotations

import unittest

from lazychat import actions as a
from lazychat.input import ChatCommands, KeyContext, handle_key
from lazychat.model import (
    CHANNEL,
    INPUT,
    MESSAGE,
    Channel,
    ChannelListing,
    DisplayItem,
    ExpandedChannelData,
    Message,
)
from lazychat.state import (
    FOCUS_COMPOSE,
    FOCUS_NAVIGATION,
    FOCUS_READER,
    VIEW_MESSAGE,
    VIEW_REACT,
    VIEW_UNIFIED,
    initial_state,
)
from lazychat.transition import apply_all, transition


def _messages(channel_id: str, count: int) -> tuple[Message, ...]:
    return tuple(
        Message(
            id=f"{channel_id}-{n}",
            channel_id=channel_id,
            author="alice",
            author_id="u-alice",
            content=f"message {n}",
            timestamp=f"2024-05-01T09:{n:02d}:00+00:00",
        )
        for n in range(count)
    )


class _Harness:
    """Applies dispatched actions and records command calls."""

    def __init__(self, state) -> None:
        self.state = state
        self.calls: list[tuple] = []
        names = ChatCommands.__dataclass_fields__.keys()
        self.commands = ChatCommands(**{name: self._recorder(name) for name in names})

    def _recorder(self, name: str):
        def record(*args):
            self.calls.append((name, *args))
            if name == "toggle_channel":
                channel_id = args[0]
                if channel_id in self.state.expanded:
                    self.dispatch(a.CollapseChannel(channel_id))
                else:
                    self.dispatch(a.ExpandChannel(channel_id))
                    self.dispatch(
                        a.SetExpandedChannelData(
                            channel_id, ExpandedChannelData(channel_id, messages=_messages(channel_id, 3))
                        )
                    )

        return record

    def dispatch(self, action: object) -> None:
        self.state = transition(self.state, action)

    def press(self, *keys: str) -> bool:
        quit_requested = False
        for key in keys:
            quit_requested = handle_key(key, KeyContext(self.state, self.dispatch, self.commands))
        return quit_requested

    def call_names(self) -> list[str]:
        return [call[0] for call in self.calls]


def _listing() -> ChannelListing:
    channels = (Channel(id="general", name="general"), Channel(id="dev", name="dev"))
    return ChannelListing(
        channels=channels,
        display_items=(
            DisplayItem(label="FOLLOWING (2)", is_header=True, section="following"),
            DisplayItem(label="general"),
            DisplayItem(label="dev"),
        ),
        channel_index=(None, 0, 1),
    )


class NavigationKeyTests(unittest.TestCase):
    def test_movement_keys(self) -> None:
        harness = _Harness(initial_state(_listing()))
        self.assertEqual(harness.state.selected_index, 1)
        harness.press("j")
        self.assertEqual(harness.state.selected_index, 2)
        harness.press("UP", "k")
        self.assertEqual(harness.state.selected_index, 0)
        harness.press("G")
        self.assertEqual(harness.state.selected_index, 2)
        harness.press("HOME")
        self.assertEqual(harness.state.selected_index, 0)

    def test_enter_on_header_toggles_section(self) -> None:
        harness = _Harness(initial_state(_listing()))
        harness.press("k", "ENTER")
        self.assertEqual(harness.calls, [("toggle_section", "following")])

    def test_enter_expands_and_left_collapses(self) -> None:
        harness = _Harness(initial_state(_listing()))
        harness.press("ENTER")
        self.assertIn("general", harness.state.expanded)
        self.assertEqual(harness.state.flat_items[2].kind, MESSAGE)

        harness.press("j", "j", "h")
        self.assertNotIn("general", harness.state.expanded)
        self.assertEqual(harness.state.selected_item.channel_id, "general")
        self.assertEqual(harness.state.selected_item.kind, CHANNEL)

    def test_channel_jump_skips_message_rows(self) -> None:
        harness = _Harness(initial_state(_listing()))
        harness.press("TAB", "n")
        self.assertEqual(harness.state.selected_item.channel_id, "dev")
        harness.press("p")
        self.assertEqual(harness.state.selected_item.channel_id, "general")

    def test_i_expands_collapsed_channel_and_enters_compose(self) -> None:
        harness = _Harness(initial_state(_listing()))
        harness.press("j", "i")
        self.assertEqual(harness.state.focus_mode, FOCUS_COMPOSE)
        self.assertEqual(harness.state.compose_channel_id, "dev")

    def test_enter_on_message_opens_reader(self) -> None:
        harness = _Harness(initial_state(_listing()))
        harness.press("ENTER", "j", "ENTER")
        self.assertEqual(harness.state.focus_mode, FOCUS_READER)
        self.assertEqual(harness.state.reader_channel_id, "general")

    def test_enter_on_input_row_starts_compose(self) -> None:
        harness = _Harness(initial_state(_listing()))
        harness.press("ENTER", "j", "j", "j", "j")
        self.assertEqual(harness.state.selected_item.kind, INPUT)
        harness.press("ENTER")
        self.assertEqual(harness.state.focus_mode, FOCUS_COMPOSE)

    def test_message_command_keys_receive_selected_message(self) -> None:
        harness = _Harness(initial_state(_listing()))
        harness.press("ENTER", "j")
        harness.press("r", "+", "E", "d", "o", "u", "m")
        self.assertEqual(
            harness.call_names(),
            [
                "toggle_channel",
                "begin_reply",
                "begin_react",
                "begin_edit",
                "delete_message",
                "open_urls",
                "show_reaction_users",
                "show_message",
            ],
        )
        self.assertTrue(all(call[1].id == "general-2" for call in harness.calls[1:]))

    def test_message_keys_on_channel_row_do_nothing(self) -> None:
        harness = _Harness(initial_state(_listing()))
        harness.press("r", "d")
        self.assertEqual(harness.calls, [])

    def test_channel_command_keys(self) -> None:
        harness = _Harness(initial_state(_listing()))
        harness.press("y", "x", "L", "R", "?")
        self.assertEqual(
            harness.calls,
            [("follow", "general"), ("unfollow", "general"), ("load_older", "general"), ("refresh_all",), ("show_help",)],
        )

    def test_collapse_all_and_quit(self) -> None:
        harness = _Harness(initial_state(_listing()))
        harness.press("ENTER", "c")
        self.assertEqual(harness.state.expanded, frozenset())
        self.assertTrue(harness.press("q"))
        self.assertFalse(harness.press("z"))


class ComposeKeyTests(unittest.TestCase):
    def _composing(self) -> _Harness:
        harness = _Harness(initial_state(_listing()))
        harness.press("i")
        return harness

    def test_typing_and_editing(self) -> None:
        harness = self._composing()
        harness.press("h", "e", "l", "l", "o", " ", "w", "o", "r", "l", "d")
        self.assertEqual(harness.state.compose.text, "hello world")
        harness.press("CTRL_W")
        self.assertEqual(harness.state.compose.text, "hello ")
        harness.press("HOME", "DELETE", "END", "BACKSPACE")
        self.assertEqual(harness.state.compose.text, "ello")
        harness.press("CTRL_U")
        self.assertEqual(harness.state.compose.text, "")

    def test_navigation_letters_are_text_in_compose(self) -> None:
        harness = self._composing()
        harness.press("q", "j", "c")
        self.assertEqual(harness.state.compose.text, "qjc")
        self.assertEqual(harness.state.focus_mode, FOCUS_COMPOSE)

    def test_enter_sends_and_alt_enter_inserts_newline(self) -> None:
        harness = self._composing()
        harness.press("a", "ALT_ENTER", "b", "ENTER")
        self.assertEqual(harness.state.compose.text, "a\nb")
        self.assertEqual(harness.calls[-1], ("send_compose",))

    def test_escape_cancels_compose(self) -> None:
        harness = self._composing()
        harness.press("x", "ESC")
        self.assertEqual(harness.state.focus_mode, FOCUS_NAVIGATION)
        self.assertEqual(harness.state.compose.text, "")


class ReaderKeyTests(unittest.TestCase):
    def _reading(self, count: int = 8) -> _Harness:
        state = initial_state(_listing())
        state = apply_all(
            state,
            [
                a.ExpandChannel("general"),
                a.SetExpandedChannelData("general", ExpandedChannelData("general", messages=_messages("general", count))),
                a.ExpandChannel("dev"),
                a.SetExpandedChannelData("dev", ExpandedChannelData("dev", messages=_messages("dev", 2))),
            ],
        )
        harness = _Harness(state)
        harness.press("v")
        return harness

    def test_down_moves_toward_older_messages(self) -> None:
        harness = self._reading()
        self.assertEqual(harness.state.reader_selected, 4)
        harness.press("j")
        self.assertEqual(harness.state.reader_selected, 3)
        harness.press("k")
        self.assertEqual(harness.state.reader_selected, 4)

    def test_page_down_slides_window(self) -> None:
        harness = self._reading()
        harness.press("PAGE_DOWN", "PAGE_DOWN")
        self.assertEqual(harness.state.reader_offsets["general"], 3)

    def test_tab_moves_focus_to_next_expanded_channel(self) -> None:
        harness = self._reading()
        harness.press("TAB")
        self.assertEqual(harness.state.reader_channel_id, "dev")
        harness.press("SHIFT_TAB")
        self.assertEqual(harness.state.reader_channel_id, "general")

    def test_enter_shows_reader_message_and_escape_leaves(self) -> None:
        harness = self._reading()
        harness.press("ENTER")
        self.assertEqual(harness.calls[-1][0], "show_message")
        self.assertEqual(harness.calls[-1][1].id, "general-7")
        harness.press("ESC")
        self.assertEqual(harness.state.focus_mode, FOCUS_NAVIGATION)

    def test_i_switches_to_compose(self) -> None:
        harness = self._reading()
        harness.press("i")
        self.assertEqual(harness.state.focus_mode, FOCUS_COMPOSE)
        self.assertEqual(harness.state.compose_channel_id, "general")


class OverlayKeyTests(unittest.TestCase):
    def test_react_prompt_edits_and_submits(self) -> None:
        state = apply_all(initial_state(_listing()), [a.SetReactTarget("general-1"), a.SetView(VIEW_REACT)])
        harness = _Harness(state)
        harness.press(":", "+", "1", ":", "ENTER")
        self.assertEqual(harness.state.compose.text, ":+1:")
        self.assertEqual(harness.calls, [("submit_reaction",)])
        harness.press("ESC")
        self.assertEqual(harness.state.view, VIEW_UNIFIED)

    def test_modal_closes_on_escape_and_ignores_other_keys(self) -> None:
        state = transition(initial_state(_listing()), a.ShowModal(VIEW_MESSAGE, "t", ("x",)))
        harness = _Harness(state)
        self.assertFalse(harness.press("j"))
        self.assertEqual(harness.state.view, VIEW_MESSAGE)
        harness.press("ESC")
        self.assertEqual(harness.state.view, VIEW_UNIFIED)


class MouseKeyTests(unittest.TestCase):
    def test_click_selects_then_activates(self) -> None:
        harness = _Harness(initial_state(_listing()))
        harness.press("MOUSE_LEFT_DOWN:5:4")
        self.assertEqual(harness.state.selected_item.channel_id, "dev")
        harness.press("MOUSE_LEFT_DOWN:5:4")
        self.assertEqual(harness.calls, [("toggle_channel", "dev")])

    def test_click_below_list_is_ignored(self) -> None:
        harness = _Harness(initial_state(_listing()))
        harness.press("MOUSE_LEFT_DOWN:5:20")
        self.assertEqual(harness.state.selected_index, 1)

    def test_wheel_moves_selection(self) -> None:
        harness = _Harness(initial_state(_listing()))
        harness.press("MOUSE_WHEEL_DOWN:1:1")
        self.assertEqual(harness.state.selected_index, 2)
        harness.press("MOUSE_WHEEL_UP:1:1")
        self.assertEqual(harness.state.selected_index, 0)


if __name__ == "__main__":
    unittest.main()
