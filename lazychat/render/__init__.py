"""Frame rendering for the unified inbox.

``render_rows`` turns an ``AppState`` into exactly ``state.rows`` styled
terminal rows; ``paint`` writes them. Rendering never mutates state.
"""

from __future__ import annotations

import os
from datetime import datetime

from ..ansi import display_width, fit_ansi_line, truncate_text, wrap_text
from ..model import CHANNEL, HEADER, INPUT, MESSAGE, FlatItem, Message
from ..reader import reader_selected_message
from ..state import FOCUS_COMPOSE, FOCUS_READER, VIEW_REACT, VIEW_UNIFIED, AppState
from ..ui_theme import DEFAULT_THEME, UITheme
from ..viewport import visible_height, visible_range
from .highlight import sanitize_terminal_text

ERROR_MARKER = "❌"
SPINNER_FRAMES: tuple[str, ...] = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")
MESSAGE_INDENT = "    "


def selected_with_ansi(text: str) -> str:
    """Apply selection styling without discarding existing ANSI colors."""
    if not text:
        return text
    # Keep reverse video active even when the text contains internal resets.
    return "\033[7m" + text.replace("\033[0m", "\033[0;7m") + "\033[0m"


def build_status_line(left_text: str, width: int, right_text: str = "│ ? Help") -> str:
    usable = max(1, width - 1)
    if usable <= display_width(right_text):
        return truncate_text(right_text, usable, ellipsis="")
    left = truncate_text(left_text, max(0, usable - display_width(right_text) - 1))
    gap = " " * (usable - display_width(left) - display_width(right_text))
    return f"{left}{gap}{right_text}"


def format_time(timestamp: str) -> str:
    try:
        return datetime.fromisoformat(timestamp).astimezone().strftime("%H:%M")
    except ValueError:
        return timestamp[11:16] or timestamp[:5]


def _styled(style: str, text: str, theme: UITheme) -> str:
    if not style:
        return text
    return f"{style}{text}{theme.reset}"


def _channel_row(state: AppState, item: FlatItem, theme: UITheme) -> str:
    channel = state.listing.index_to_channel(item.source_index)
    display_items = state.listing.display_items
    if 0 <= item.source_index < len(display_items):
        label = display_items[item.source_index].label
    else:
        label = channel.display_name if channel is not None else str(item.channel_id)
    expanded = item.channel_id in state.expanded
    marker = "▾" if expanded else "▸"
    suffix = ""
    if expanded:
        data = state.expanded_data.get(item.channel_id or "")
        if data is None or data.is_loading:
            suffix = _styled(theme.dim, "  loading…", theme)
        elif data.error and not data.messages:
            suffix = _styled(theme.error, f"  {ERROR_MARKER} {data.error}", theme)
        elif not data.messages:
            suffix = _styled(theme.dim, "  (no messages)", theme)
    if state.focus_mode == FOCUS_READER and state.reader_channel_id == item.channel_id:
        suffix += _styled(theme.input_active, "  [reader]", theme)
    style = theme.channel_expanded if expanded else theme.channel
    return f" {_styled(style, f'{marker} {label}', theme)}{suffix}"


def _message_summary(message: Message, theme: UITheme, self_user_id: str | None) -> str:
    if message.author_id == self_user_id:
        author_style = theme.author_self
    elif message.is_bot:
        author_style = theme.author_bot
    else:
        author_style = theme.author
    parts = [
        _styled(theme.timestamp, format_time(message.timestamp), theme),
        " ",
    ]
    if message.reply_to is not None:
        parts.append(_styled(theme.reply, f"↳ @{message.reply_to.author} ", theme))
    parts.append(_styled(author_style, message.author, theme))
    parts.append(": ")
    content = sanitize_terminal_text(message.content)
    parts.append(" ⏎ ".join(line for line in content.splitlines() if line.strip()))
    if message.attachments:
        parts.append(_styled(theme.attachment, f"  📎{len(message.attachments)}", theme))
    if message.reactions:
        reactions = " ".join(f"{reaction.emoji}{reaction.count}" for reaction in message.reactions)
        parts.append(_styled(theme.reaction, f"  {reactions}", theme))
    return "".join(parts)


def _message_row(state: AppState, item: FlatItem, theme: UITheme, self_user_id: str | None) -> str:
    data = state.expanded_data.get(item.channel_id or "")
    if data is None or not 0 <= item.message_index < len(data.messages):
        return MESSAGE_INDENT
    return MESSAGE_INDENT + _message_summary(data.messages[item.message_index], theme, self_user_id)


def _compose_text(state: AppState, theme: UITheme, active: bool) -> str:
    compose = state.compose
    text = compose.text.replace("\n", "⏎")
    if not active:
        return text
    cursor = max(0, min(compose.cursor, len(text)))
    under = text[cursor : cursor + 1] or " "
    return f"{text[:cursor]}{theme.reverse}{under}{theme.reset}{text[cursor + 1 :]}"


def _input_row(state: AppState, item: FlatItem, theme: UITheme) -> str:
    active = state.focus_mode == FOCUS_COMPOSE and state.compose_channel_id == item.channel_id
    prompt = _styled(theme.input_active if active else theme.input_prompt, "> ", theme)
    if not active:
        return f"{MESSAGE_INDENT}{prompt}{_styled(theme.dim, 'press i to write', theme)}"
    tags: list[str] = []
    compose = state.compose
    if compose.edit_target:
        tags.append("[edit]")
    if compose.reply_to:
        data = state.expanded_data.get(item.channel_id or "")
        author = next((m.author for m in (data.messages if data else ()) if m.id == compose.reply_to), "message")
        tags.append(f"[reply → {author}]")
    tags.extend(f"[📎 {attachment.name}]" for attachment in compose.attachments)
    tag_text = _styled(theme.reply, " ".join(tags) + " ", theme) if tags else ""
    return f"{MESSAGE_INDENT}{prompt}{tag_text}{_compose_text(state, theme, True)}"


def render_list_row(state: AppState, index: int, theme: UITheme = DEFAULT_THEME, self_user_id: str | None = None) -> str:
    """Render flat row ``index`` without selection styling."""
    item = state.flat_items[index]
    if item.kind == HEADER:
        return _styled(theme.header, item.label, theme)
    if item.kind == CHANNEL:
        return _channel_row(state, item, theme)
    if item.kind == MESSAGE:
        return _message_row(state, item, theme, self_user_id)
    if item.kind == INPUT:
        return _input_row(state, item, theme)
    return ""


def _is_highlighted(state: AppState, index: int, reader_message_id: str | None) -> bool:
    item = state.flat_items[index]
    if state.focus_mode == FOCUS_READER:
        return item.kind == MESSAGE and item.channel_id == state.reader_channel_id and item.message_id == reader_message_id
    if state.focus_mode == FOCUS_COMPOSE:
        return False
    return index == state.selected_index


def _title_row(state: AppState, theme: UITheme) -> str:
    mode = ""
    if state.focus_mode == FOCUS_READER:
        mode = "  [reader]"
    elif state.focus_mode == FOCUS_COMPOSE:
        mode = "  [compose]"
    count = len(state.listing.channels)
    text = f" {state.title}{mode}  ·  {count} channels  ·  {len(state.expanded)} open"
    return _styled(theme.title, text, theme)


def _status_row(state: AppState, theme: UITheme, spinner_frame: int) -> str:
    if state.view == VIEW_REACT:
        prompt = "React with (emoji or :shortcode:): "
        return _styled(theme.input_active, prompt, theme) + _compose_text(state, theme, True)
    text = state.status_text
    if state.loading:
        text = f"{SPINNER_FRAMES[spinner_frame % len(SPINNER_FRAMES)]} {text}"
    line = build_status_line(text, state.cols)
    style = theme.error if text.lstrip().startswith(ERROR_MARKER) else theme.status
    return _styled(style, line, theme)


def _modal_rows(state: AppState, theme: UITheme, height: int) -> list[str]:
    width = state.cols
    inner = max(1, width - 4)
    body: list[str] = []
    for line in state.modal_lines:
        if "\x1b" in line:
            body.append(line)
        else:
            body.extend(wrap_text(line, inner))
    title = f" {state.modal_title} " if state.modal_title else ""
    border = theme.modal_border
    top = _styled(border, "╭" + title.center(max(0, width - 2), "─") + "╮", theme)
    bottom = _styled(border, "╰" + "─" * max(0, width - 2) + "╯", theme)
    side = _styled(border, "│", theme)
    rows = [top]
    room = max(0, height - 2)
    for line in body[:room]:
        rows.append(f"{side} {fit_ansi_line(line, inner)}{theme.reset} {side}")
    while len(rows) < height - 1:
        rows.append(f"{side}{' ' * max(0, width - 2)}{side}")
    rows.append(bottom)
    return rows[:height]


def render_rows(
    state: AppState,
    theme: UITheme = DEFAULT_THEME,
    *,
    self_user_id: str | None = None,
    spinner_frame: int = 0,
) -> list[str]:
    """Render a full frame: title row, list body, status row."""
    height = visible_height(state.rows)
    rows = [_title_row(state, theme)]
    if state.view not in {VIEW_UNIFIED, VIEW_REACT}:
        rows.extend(_modal_rows(state, theme, height))
    else:
        reader_message = reader_selected_message(state)
        reader_message_id = reader_message.id if reader_message is not None else None
        for index in visible_range(state.viewport_offset, height, len(state.flat_items)):
            line = render_list_row(state, index, theme, self_user_id)
            line = fit_ansi_line(line, state.cols)
            if _is_highlighted(state, index, reader_message_id):
                line = selected_with_ansi(line)
            rows.append(line)
    while len(rows) < height + 1:
        rows.append("")
    rows = rows[: height + 1]
    rows.append(_status_row(state, theme, spinner_frame))
    return [fit_ansi_line(row, state.cols) + (theme.reset if "\x1b" in row else "") for row in rows[: state.rows]]


def paint(rows: list[str], fd: int) -> None:
    """Write a rendered frame, one absolute cursor move per row."""
    out = ["\033[H"]
    for number, row in enumerate(rows, start=1):
        out.append(f"\033[{number};1H{row}\033[K")
    os.write(fd, "".join(out).encode("utf-8", errors="replace"))
