"""Message body formatting for the full-message view.

Fenced code blocks are highlighted with Pygments; everything else is
sanitized so control bytes in message text cannot move the cursor.
"""

from __future__ import annotations

import re
from functools import lru_cache

from pygments import highlight
from pygments.formatters import TerminalFormatter
from pygments.lexer import Lexer
from pygments.lexers import TextLexer, get_lexer_by_name, guess_lexer
from pygments.util import ClassNotFound

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
_FENCE_RE = re.compile(r"```([\w+#.-]*)[ \t]*\n(.*?)(?:\n)?```", re.DOTALL)


def sanitize_terminal_text(text: str) -> str:
    """Escape terminal control bytes to avoid side effects (bell, cursor moves, etc.)."""
    if _CONTROL_RE.search(text) is None:
        return text
    return _CONTROL_RE.sub(lambda match: f"\\x{ord(match.group(0)):02x}", text)


@lru_cache(maxsize=32)
def _lexer_for(language: str) -> Lexer:
    try:
        return get_lexer_by_name(language)
    except ClassNotFound:
        return TextLexer()


def _lexer_for_code(language: str, code: str) -> Lexer:
    if language:
        return _lexer_for(language.lower())
    try:
        return guess_lexer(code)
    except ClassNotFound:
        return TextLexer()


def highlight_code(code: str, language: str = "", *, color: bool = True) -> list[str]:
    code = sanitize_terminal_text(code)
    if not color:
        return code.split("\n")
    rendered = highlight(code, _lexer_for_code(language, code), TerminalFormatter())
    return rendered.rstrip("\n").split("\n")


def split_fenced_blocks(text: str) -> list[tuple[str, str | None]]:
    """Split message text into ``(chunk, language)`` parts.

    Plain prose has language ``None``; fenced code has its tag or ``""``.
    """
    parts: list[tuple[str, str | None]] = []
    pos = 0
    for match in _FENCE_RE.finditer(text):
        if match.start() > pos:
            parts.append((text[pos : match.start()].strip("\n"), None))
        parts.append((match.group(2), match.group(1)))
        pos = match.end()
    if pos < len(text):
        parts.append((text[pos:].strip("\n"), None))
    return [(chunk, language) for chunk, language in parts if chunk or language is not None]
