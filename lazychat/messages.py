"""Cache-first message loading and compose-text helpers."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass

from .cache import MessageCache
from .model import Channel, Message
from .platforms.types import PlatformClient

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20

_ATTACH_RE = re.compile(r"/attach\s+((?:\\\s|\S)+)")
_URL_RE = re.compile(
    r"(https?://[^\s]+|www\.[^\s]+|[a-zA-Z0-9][a-zA-Z0-9-]*[a-zA-Z0-9]*\.[a-zA-Z]{2,}[^\s]*)",
    re.IGNORECASE,
)
_SHORTCODE_RE = re.compile(r"^:([a-z0-9_+-]+):$", re.IGNORECASE)

EMOJI_ALIASES = {
    "thumbsup": "👍",
    "+1": "👍",
    "thumbsdown": "👎",
    "-1": "👎",
    "heart": "❤️",
    "fire": "🔥",
    "smile": "😄",
    "laughing": "😂",
    "wink": "😉",
    "thinking": "🤔",
    "eyes": "👀",
    "wave": "👋",
    "clap": "👏",
    "ok_hand": "👌",
    "pray": "🙏",
    "muscle": "💪",
    "party": "🎉",
    "tada": "🎉",
    "rocket": "🚀",
    "star": "⭐",
    "sparkles": "✨",
    "check": "✅",
    "cross": "❌",
    "warning": "⚠️",
    "question": "❓",
}


@dataclass(frozen=True)
class OlderMessages:
    messages: list[Message]
    new_count: int
    has_more: bool


def extract_urls(text: str) -> list[str]:
    return [url for url in _URL_RE.findall(text) if len(url) > 4 and (url.startswith("http") or "." in url)]


def normalize_url(url: str) -> str:
    if url.startswith(("http://", "https://")):
        return url
    return "https://" + url


def parse_attachments(text: str) -> tuple[str, list[str]]:
    """Split ``/attach <path>`` tokens out of compose text.

    Paths may contain backslash-escaped spaces. Returns the remaining text and
    the unescaped, user-expanded paths in order.
    """
    paths: list[str] = []

    def _collect(match: re.Match[str]) -> str:
        raw = re.sub(r"\\(\s)", r"\1", match.group(1))
        paths.append(os.path.expanduser(raw))
        return ""

    remaining = _ATTACH_RE.sub(_collect, text)
    return re.sub(r"[ \t]{2,}", " ", remaining).strip(), paths


def resolve_emoji(value: str) -> str | None:
    """Resolve ``:shortcode:`` through the alias table; other text passes through."""
    value = value.strip()
    if not value:
        return None
    match = _SHORTCODE_RE.match(value)
    if match is None:
        return value
    return EMOJI_ALIASES.get(match.group(1).lower())


class MessageProvider:
    """Loads channel messages through a ``MessageCache``."""

    def __init__(self, client: PlatformClient, cache: MessageCache | None = None) -> None:
        self.client = client
        self.cache = cache if cache is not None else MessageCache()

    @property
    def platform(self) -> str:
        return self.client.platform

    def cached(self, channel_id: str) -> list[Message] | None:
        return self.cache.get_cached_messages(self.platform, channel_id)

    async def load_messages(
        self,
        channel: Channel,
        limit: int = DEFAULT_PAGE_SIZE,
        force_refresh: bool = False,
    ) -> list[Message]:
        cached = self.cached(channel.id)
        if cached is not None and not force_refresh and not self.cache.is_cache_stale(self.platform, channel.id):
            return cached
        try:
            messages = await self.client.get_messages(channel.id, limit)
        except Exception:
            if cached is None:
                raise
            logger.warning("using stale cache for %s after fetch failure", channel.id, exc_info=True)
            return cached
        self.cache.set_cached_messages(
            self.platform, channel.id, messages, has_more_before=len(messages) >= limit
        )
        return self.cached(channel.id) or []

    async def load_older_messages(
        self,
        channel: Channel,
        before_id: str,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> OlderMessages:
        older = await self.client.get_messages_before(channel.id, before_id, limit)
        has_more = len(older) >= limit
        new_count = self.cache.prepend_cached_messages(
            self.platform, channel.id, older, has_more_before=has_more
        )
        messages = self.cached(channel.id) or []
        return OlderMessages(messages=messages, new_count=new_count, has_more=has_more and new_count > 0)

    def has_more_older(self, channel_id: str) -> bool:
        return self.cache.has_more_before(self.platform, channel_id)
