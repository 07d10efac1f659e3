from __future__ import annotations

import unittest

from lazychat.viewport import FIXED_CHROME_ROWS, scroll_viewport, visible_height, visible_range


class ViewportTests(unittest.TestCase):
    def test_visible_height_subtracts_chrome_and_never_drops_below_one(self) -> None:
        self.assertEqual(visible_height(24), 24 - FIXED_CHROME_ROWS)
        self.assertEqual(visible_height(1), 1)

    def test_selection_inside_window_keeps_offset(self) -> None:
        self.assertEqual(scroll_viewport(5, 3, 10, 40), 3)

    def test_selection_above_window_pulls_offset_up(self) -> None:
        self.assertEqual(scroll_viewport(2, 6, 10, 40), 2)

    def test_selection_below_window_pushes_offset_down(self) -> None:
        self.assertEqual(scroll_viewport(15, 0, 10, 40), 6)

    def test_shrinking_list_clamps_offset(self) -> None:
        self.assertEqual(scroll_viewport(4, 8, 10, 12), 2)
        self.assertEqual(scroll_viewport(0, 5, 10, 3), 0)

    def test_offset_is_never_negative(self) -> None:
        self.assertEqual(scroll_viewport(0, -4, 10, 0), 0)

    def test_visible_range(self) -> None:
        self.assertEqual(list(visible_range(2, 3, 10)), [2, 3, 4])
        self.assertEqual(list(visible_range(8, 5, 10)), [8, 9])


if __name__ == "__main__":
    unittest.main()
