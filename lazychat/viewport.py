"""Viewport scrolling for the unified row list."""

from __future__ import annotations

FIXED_CHROME_ROWS = 2


def visible_height(terminal_rows: int, chrome_rows: int = FIXED_CHROME_ROWS) -> int:
    """Rows available for list content below/above the status and help bars."""
    return max(1, terminal_rows - chrome_rows)


def scroll_viewport(selected_index: int, viewport_offset: int, height: int, total: int) -> int:
    """Return a first-visible-row offset that keeps ``selected_index`` on screen.

    Moves the window only when the selection left it, then clamps so the
    window never starts past the last full page or before row 0.
    """
    height = max(1, height)
    offset = max(0, viewport_offset)
    if selected_index < offset:
        offset = selected_index
    elif selected_index >= offset + height:
        offset = selected_index - height + 1
    return max(0, min(offset, max(0, total - height)))


def visible_range(viewport_offset: int, height: int, total: int) -> range:
    start = max(0, min(viewport_offset, total))
    return range(start, min(total, start + max(1, height)))
