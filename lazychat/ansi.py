"""Width-aware helpers for styled terminal rows.

Escape sequences are preserved and never counted; East Asian wide and
fullwidth characters count two columns.
"""

from __future__ import annotations

import re
import unicodedata

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
RESET = "\033[0m"


def char_display_width(ch: str) -> int:
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    if ch < " " or ch == "\x7f":
        return 0
    return 1


def strip_ansi(text: str) -> str:
    return ANSI_ESCAPE_RE.sub("", text)


def display_width(text: str) -> int:
    return sum(char_display_width(ch) for ch in strip_ansi(text))


def clip_ansi_line(text: str, max_cols: int) -> str:
    """Trim a styled line to at most ``max_cols`` display columns.

    A wide character that would straddle the limit is dropped whole.
    """
    if max_cols <= 0 or not text:
        return ""
    out: list[str] = []
    col = 0
    i = 0
    n = len(text)
    while i < n:
        if text[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, i)
            if match:
                out.append(match.group(0))
                i = match.end()
                continue
        ch = text[i]
        w = char_display_width(ch)
        if col + w > max_cols:
            break
        out.append(ch)
        col += w
        i += 1
    return "".join(out)


def fit_ansi_line(text: str, width: int) -> str:
    """Clip then right-pad ``text`` so it occupies exactly ``width`` columns."""
    clipped = clip_ansi_line(text, width)
    return clipped + " " * max(0, width - display_width(clipped))


def truncate_text(text: str, width: int, ellipsis: str = "…") -> str:
    """Shorten plain text to ``width`` columns, marking the cut with ``ellipsis``."""
    if display_width(text) <= width:
        return text
    if width <= 0:
        return ""
    return clip_ansi_line(text, max(0, width - display_width(ellipsis))) + ellipsis


def wrap_text(text: str, width: int) -> list[str]:
    """Hard-wrap plain text into rows of at most ``width`` columns.

    Existing newlines are kept; words longer than a row are split.
    """
    if width <= 0:
        return [""]
    rows: list[str] = []
    for paragraph in text.split("\n"):
        current = ""
        for word in paragraph.split(" "):
            candidate = word if not current else f"{current} {word}"
            if display_width(candidate) <= width:
                current = candidate
                continue
            if current:
                rows.append(current)
            while display_width(word) > width:
                head = clip_ansi_line(word, width)
                rows.append(head)
                word = word[len(head) :]
            current = word
        rows.append(current)
    return rows
