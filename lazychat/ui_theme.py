"""UI theme definitions and selection helpers.

Themes are ANSI palettes for the inbox chrome. Code highlighting inside the
message view uses the Pygments terminal formatter independently.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by renderers."""

    name: str
    reverse: str
    reset: str
    title: str
    header: str
    channel: str
    channel_expanded: str
    badge: str
    author: str
    author_self: str
    author_bot: str
    timestamp: str
    attachment: str
    reaction: str
    reply: str
    input_prompt: str
    input_active: str
    dim: str
    status: str
    error: str
    modal_title: str
    modal_border: str


DEFAULT_THEME = UITheme(
    name="default",
    reverse="\033[7m",
    reset="\033[0m",
    title="\033[1;38;5;81m",
    header="\033[1;38;5;45m",
    channel="\033[38;5;252m",
    channel_expanded="\033[1;38;5;229m",
    badge="\033[38;5;214m",
    author="\033[1;38;5;110m",
    author_self="\033[1;38;5;42m",
    author_bot="\033[38;5;177m",
    timestamp="\033[2;38;5;250m",
    attachment="\033[38;5;109m",
    reaction="\033[38;5;221m",
    reply="\033[2;38;5;250m",
    input_prompt="\033[38;5;44m",
    input_active="\033[1;38;5;81m",
    dim="\033[2m",
    status="\033[2;38;5;250m",
    error="\033[1;38;5;203m",
    modal_title="\033[1;38;5;45m",
    modal_border="\033[38;5;45m",
)

OCEAN_THEME = UITheme(
    name="ocean",
    reverse="\033[7m",
    reset="\033[0m",
    title="\033[1;38;5;45m",
    header="\033[1;38;5;39m",
    channel="\033[38;5;153m",
    channel_expanded="\033[1;38;5;117m",
    badge="\033[38;5;215m",
    author="\033[1;38;5;117m",
    author_self="\033[1;38;5;84m",
    author_bot="\033[38;5;141m",
    timestamp="\033[2;38;5;110m",
    attachment="\033[38;5;73m",
    reaction="\033[38;5;222m",
    reply="\033[2;38;5;110m",
    input_prompt="\033[38;5;39m",
    input_active="\033[1;38;5;45m",
    dim="\033[2;38;5;24m",
    status="\033[2;38;5;110m",
    error="\033[1;38;5;209m",
    modal_title="\033[1;38;5;39m",
    modal_border="\033[38;5;39m",
)

PLAIN_THEME = UITheme(
    name="plain",
    reverse="\033[7m",
    reset="\033[0m",
    title="",
    header="",
    channel="",
    channel_expanded="",
    badge="",
    author="",
    author_self="",
    author_bot="",
    timestamp="",
    attachment="",
    reaction="",
    reply="",
    input_prompt="",
    input_active="",
    dim="",
    status="",
    error="",
    modal_title="",
    modal_border="",
)

_THEMES: dict[str, UITheme] = {
    DEFAULT_THEME.name: DEFAULT_THEME,
    OCEAN_THEME.name: OCEAN_THEME,
    PLAIN_THEME.name: PLAIN_THEME,
}


def available_theme_names() -> tuple[str, ...]:
    return tuple(sorted(_THEMES.keys()))


def normalize_theme_name(name: str | None) -> str:
    """Return a valid theme name, falling back to default."""
    candidate = str(name or "").strip().lower()
    return candidate if candidate in _THEMES else DEFAULT_THEME.name


def resolve_theme(name: str | None, *, no_color: bool = False) -> UITheme:
    """Return concrete theme for requested name and color mode.

    ``no_color`` keeps reverse video so the selection stays visible.
    """
    if no_color:
        return PLAIN_THEME
    return _THEMES[normalize_theme_name(name)]
