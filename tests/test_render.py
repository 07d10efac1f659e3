"""Frame rendering tests.

Rows are compared after stripping ANSI so the assertions are about layout,
not colors.
"""

from __future__ import annotations

import os
import unittest

from lazychat import actions as a
from lazychat.ansi import display_width, strip_ansi
from lazychat.model import Attachment, Channel, ChannelListing, ExpandedChannelData, Message, Reaction
from lazychat.render import build_status_line, paint, render_rows, selected_with_ansi
from lazychat.render.highlight import highlight_code, sanitize_terminal_text, split_fenced_blocks
from lazychat.render.message_view import message_modal, reaction_users_lines
from lazychat.state import VIEW_MESSAGE, VIEW_REACT, initial_state
from lazychat.transition import apply_all
from lazychat.ui_theme import PLAIN_THEME, available_theme_names, resolve_theme


def _message(n: int, **kwargs) -> Message:
    fields = dict(
        id=f"m{n}",
        channel_id="general",
        author="alice",
        author_id="u-alice",
        content=f"hello {n}",
        timestamp=f"2024-05-01T09:{n:02d}:00+00:00",
    )
    fields.update(kwargs)
    return Message(**fields)


def _state(rows: int = 12, cols: int = 60, count: int = 3):
    listing = ChannelListing.flat([Channel(id="general", name="general"), Channel(id="dev", name="dev")])
    state = initial_state(listing, rows=rows, cols=cols)
    messages = tuple(_message(n) for n in range(count))
    return apply_all(
        state,
        [
            a.ExpandChannel("general"),
            a.SetExpandedChannelData("general", ExpandedChannelData("general", messages=messages)),
        ],
    )


def _plain(rows: list[str]) -> list[str]:
    return [strip_ansi(row).rstrip() for row in rows]


class RenderRowsTests(unittest.TestCase):
    def test_frame_has_exact_row_count_and_width(self) -> None:
        rows = render_rows(_state(rows=12, cols=60), PLAIN_THEME)
        self.assertEqual(len(rows), 12)
        for row in rows:
            self.assertEqual(display_width(row), 60)

    def test_list_rows_show_channel_messages_and_input(self) -> None:
        plain = _plain(render_rows(_state(), PLAIN_THEME))
        self.assertIn("lazychat", plain[0])
        self.assertEqual(plain[1].strip(), "▾ general")
        self.assertTrue(plain[2].endswith("alice: hello 2"))
        self.assertTrue(plain[4].endswith("alice: hello 0"))
        self.assertIn("press i to write", plain[5])
        self.assertEqual(plain[6].strip(), "▸ dev")

    def test_selected_row_is_reverse_video(self) -> None:
        rows = render_rows(_state(), PLAIN_THEME)
        self.assertTrue(rows[1].startswith("\033[7m"))
        self.assertFalse(rows[2].startswith("\033[7m"))

    def test_loading_channel_shows_marker(self) -> None:
        state = apply_all(_state(), [a.ExpandChannel("dev"), a.BeginChannelLoad("dev", 1)])
        plain = _plain(render_rows(state, PLAIN_THEME))
        self.assertTrue(any("dev" in row and "loading…" in row for row in plain))

    def test_failed_channel_shows_error(self) -> None:
        failed = ExpandedChannelData("dev", error="boom", has_more_older=False)
        state = apply_all(_state(), [a.ExpandChannel("dev"), a.SetExpandedChannelData("dev", failed)])
        plain = _plain(render_rows(state, PLAIN_THEME))
        self.assertTrue(any("❌ boom" in row for row in plain))

    def test_compose_row_shows_tags_and_text(self) -> None:
        state = apply_all(
            _state(),
            [a.EnterCompose("general"), a.SetReplyTarget("m1"), a.InsertText("hi there")],
        )
        plain = _plain(render_rows(state, PLAIN_THEME))
        self.assertTrue(any("> [reply → alice] hi there" in row for row in plain))
        self.assertIn("[compose]", plain[0])

    def test_reader_highlights_reader_message(self) -> None:
        state = apply_all(_state(count=3), [a.EnterReader("general"), a.ReaderScrollUp()])
        rows = render_rows(state, PLAIN_THEME)
        highlighted = [strip_ansi(row) for row in rows if row.startswith("\033[7m")]
        self.assertEqual(len(highlighted), 1)
        self.assertIn("hello 1", highlighted[0])

    def test_status_row_error_and_spinner(self) -> None:
        state = apply_all(_state(), [a.SetStatus("❌ Error: nope"), a.SetLoading(True)])
        plain = _plain(render_rows(state, PLAIN_THEME, spinner_frame=1))
        self.assertTrue(plain[-1].startswith("⠙ ❌ Error: nope"))
        self.assertTrue(plain[-1].endswith("│ ? Help"))

    def test_react_view_replaces_status_with_prompt(self) -> None:
        state = apply_all(_state(), [a.SetReactTarget("m1"), a.SetView(VIEW_REACT), a.InsertText(":fire:")])
        plain = _plain(render_rows(state, PLAIN_THEME))
        self.assertTrue(plain[-1].startswith("React with"))
        self.assertIn(":fire:", plain[-1])

    def test_modal_replaces_list_body(self) -> None:
        state = apply_all(_state(), [a.ShowModal(VIEW_MESSAGE, "alice", ("first line", "second line"))])
        plain = _plain(render_rows(state, PLAIN_THEME))
        self.assertTrue(plain[1].startswith("╭"))
        self.assertIn("alice", plain[1])
        self.assertIn("first line", plain[2])
        self.assertTrue(plain[-2].startswith("╰"))

    def test_viewport_scrolls_with_selection(self) -> None:
        state = apply_all(_state(rows=5, count=3), [a.MoveBy(5)])
        plain = _plain(render_rows(state, PLAIN_THEME))
        self.assertEqual(len(plain), 5)
        self.assertEqual(plain[-2].strip(), "▸ dev")

    def test_paint_writes_cursor_addressed_rows(self) -> None:
        read_fd, write_fd = os.pipe()
        try:
            paint(["ab", "cd"], write_fd)
            data = os.read(read_fd, 1024).decode("utf-8")
        finally:
            os.close(read_fd)
            os.close(write_fd)
        self.assertIn("\033[1;1Hab\033[K", data)
        self.assertIn("\033[2;1Hcd\033[K", data)


class StatusLineTests(unittest.TestCase):
    def test_right_text_is_aligned(self) -> None:
        line = build_status_line("left", 20)
        self.assertEqual(display_width(line), 19)
        self.assertTrue(line.startswith("left"))
        self.assertTrue(line.endswith("│ ? Help"))

    def test_selected_with_ansi_survives_inner_resets(self) -> None:
        self.assertEqual(selected_with_ansi("a\033[0mb"), "\033[7ma\033[0;7mb\033[0m")
        self.assertEqual(selected_with_ansi(""), "")


class MessageViewTests(unittest.TestCase):
    def test_modal_includes_code_attachments_and_reactions(self) -> None:
        message = _message(
            1,
            content="look:\n```python\nprint('x')\n```\ndone",
            attachments=(Attachment(id="a1", name="log.txt", url="https://example.com/log.txt"),),
            reactions=(Reaction(emoji="🔥", count=2, users=("bob", "carol")),),
        )
        title, lines = message_modal(message, color=False)
        self.assertEqual(title, "alice · 2024-05-01T09:01:00+00:00")
        self.assertEqual(lines[:4], ("look:", "```python", "print('x')", "```"))
        self.assertIn("done", lines)
        self.assertIn("📎 log.txt  https://example.com/log.txt", lines)
        self.assertEqual(lines[-1], "🔥 2")
        self.assertEqual(reaction_users_lines(message), ("🔥 2  bob, carol",))

    def test_highlight_code_colors_when_enabled(self) -> None:
        colored = highlight_code("def f():\n    return 1", "python")
        self.assertEqual(len(colored), 2)
        self.assertIn("\x1b[", colored[0])
        self.assertEqual(highlight_code("x = 1", "python", color=False), ["x = 1"])

    def test_split_fenced_blocks(self) -> None:
        self.assertEqual(
            split_fenced_blocks("a\n```\ncode\n```\nb"),
            [("a", None), ("code", ""), ("b", None)],
        )

    def test_sanitize_escapes_control_bytes(self) -> None:
        self.assertEqual(sanitize_terminal_text("a\x07b"), "a\\x07b")
        self.assertEqual(sanitize_terminal_text("plain\n"), "plain\n")


class ThemeTests(unittest.TestCase):
    def test_theme_resolution(self) -> None:
        self.assertEqual(available_theme_names(), ("default", "ocean", "plain"))
        self.assertEqual(resolve_theme("OCEAN").name, "ocean")
        self.assertEqual(resolve_theme("missing").name, "default")
        self.assertIs(resolve_theme("ocean", no_color=True), PLAIN_THEME)


if __name__ == "__main__":
    unittest.main()
