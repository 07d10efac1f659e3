"""Help modal content.

Key text is grouped by focus mode; rendering happens in the modal renderer.
"""

from __future__ import annotations

from ..ui_theme import DEFAULT_THEME, UITheme

_SECTIONS: tuple[tuple[str, tuple[tuple[str, str], ...]], ...] = (
    (
        "Navigation",
        (
            ("↑/↓ j/k", "move"),
            ("PgUp/PgDn g/G", "page / top / bottom"),
            ("n/N", "next / previous channel"),
            ("Enter/Tab", "expand channel, toggle section, open reader on a message"),
            ("←/h", "collapse channel"),
            ("c", "collapse all"),
            ("R", "refresh channels and expanded messages"),
            ("y/x", "follow / unfollow channel"),
            ("L", "load older messages"),
            ("q/Esc", "quit"),
        ),
    ),
    (
        "Messages",
        (
            ("i", "compose in channel"),
            ("r", "reply to message"),
            ("+", "react (emoji or :shortcode:)"),
            ("E/d", "edit / delete your message"),
            ("o", "open links in browser"),
            ("u", "who reacted"),
            ("m", "view full message"),
        ),
    ),
    (
        "Reader (v)",
        (
            ("↓/j ↑/k", "older / newer message"),
            ("Tab/Shift+Tab", "next / previous expanded channel"),
            ("Esc", "back to navigation"),
        ),
    ),
    (
        "Compose",
        (
            ("Enter", "send"),
            ("Alt+Enter", "new line"),
            ("/attach <path>", "attach a file (escape spaces with \\)"),
            ("Ctrl+U/Ctrl+W", "clear line / delete word"),
            ("Esc", "discard draft"),
        ),
    ),
)


def help_lines(theme: UITheme = DEFAULT_THEME) -> tuple[str, ...]:
    """Return styled modal lines describing every key binding."""
    reset = theme.reset if theme.title else ""
    lines: list[str] = []
    for heading, entries in _SECTIONS:
        if lines:
            lines.append("")
        lines.append(f"{theme.title}{heading}{reset}")
        width = max(len(keys) for keys, _text in entries)
        for keys, text in entries:
            lines.append(f"  {theme.input_prompt}{keys.ljust(width)}{reset}  {text}")
    return tuple(lines)
