"""Content for the full-message and reaction-users overlays."""

from __future__ import annotations

from ..model import Message
from .highlight import highlight_code, sanitize_terminal_text, split_fenced_blocks


def message_modal(message: Message, *, color: bool = True) -> tuple[str, tuple[str, ...]]:
    """Return ``(title, lines)`` showing one message in full.

    Fenced code blocks are syntax highlighted when ``color`` is set.
    """
    title = f"{message.author} · {message.timestamp}"
    lines: list[str] = []
    if message.reply_to is not None:
        preview = sanitize_terminal_text(message.reply_to.content)
        lines.append(f"↳ replying to @{message.reply_to.author}: {preview}")
        lines.append("")
    for chunk, language in split_fenced_blocks(message.content):
        if language is None:
            lines.extend(sanitize_terminal_text(chunk).split("\n"))
            continue
        lines.append(f"```{language}")
        lines.extend(highlight_code(chunk, language, color=color))
        lines.append("```")
    if message.attachments:
        lines.append("")
        for attachment in message.attachments:
            lines.append(f"📎 {attachment.name}  {attachment.url}")
    if message.reactions:
        lines.append("")
        lines.append("  ".join(f"{reaction.emoji} {reaction.count}" for reaction in message.reactions))
    return title, tuple(lines)


def reaction_users_lines(message: Message) -> tuple[str, ...]:
    lines: list[str] = []
    for reaction in message.reactions:
        who = ", ".join(reaction.users) if reaction.users else "(unknown)"
        lines.append(f"{reaction.emoji} {reaction.count}  {who}")
    return tuple(lines)
