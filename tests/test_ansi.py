from __future__ import annotations

import unittest

from lazychat.ansi import (
    clip_ansi_line,
    display_width,
    fit_ansi_line,
    strip_ansi,
    truncate_text,
    wrap_text,
)


class AnsiWidthTests(unittest.TestCase):
    def test_escape_sequences_do_not_count(self) -> None:
        text = "\033[1;36mhello\033[0m"
        self.assertEqual(strip_ansi(text), "hello")
        self.assertEqual(display_width(text), 5)

    def test_wide_characters_count_two_columns(self) -> None:
        self.assertEqual(display_width("日本"), 4)
        self.assertEqual(clip_ansi_line("日本語", 5), "日本")

    def test_clip_keeps_escape_codes(self) -> None:
        self.assertEqual(clip_ansi_line("\033[31mabcdef\033[0m", 3), "\033[31mabc")

    def test_fit_pads_to_width(self) -> None:
        self.assertEqual(fit_ansi_line("ab", 4), "ab  ")
        self.assertEqual(fit_ansi_line("abcdef", 4), "abcd")

    def test_truncate_marks_cut(self) -> None:
        self.assertEqual(truncate_text("abcdef", 4), "abc…")
        self.assertEqual(truncate_text("abc", 4), "abc")
        self.assertEqual(truncate_text("abc", 0), "")

    def test_wrap_text_splits_words_and_long_tokens(self) -> None:
        self.assertEqual(wrap_text("one two three", 7), ["one two", "three"])
        self.assertEqual(wrap_text("abcdefghij", 4), ["abcd", "efgh", "ij"])
        self.assertEqual(wrap_text("a\nb", 10), ["a", "b"])


if __name__ == "__main__":
    unittest.main()
