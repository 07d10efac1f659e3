"""Top-level controller: owns ``AppState`` and runs side-effecting commands.

Every state change goes through ``dispatch``. Commands that need I/O run as
asyncio tasks and report back with actions; their failures are logged and
shown as a single status line, never raised into the UI loop.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import os
import webbrowser
from collections.abc import Callable, Coroutine
from dataclasses import replace
from typing import Any

from .. import actions as a
from ..errors import LazychatError, NotAuthorizedError, ReadOnlyError
from ..inbox import InboxChannelProvider
from ..input import ChatCommands, KeyContext, handle_key
from ..messages import MessageProvider, extract_urls, normalize_url, parse_attachments, resolve_emoji
from ..model import Channel, ExpandedChannelData, Message
from ..platforms.types import OutgoingAttachment, PlatformClient, SendMessageOptions
from ..render import ERROR_MARKER, render_rows
from ..render.help import help_lines
from ..render.message_view import message_modal, reaction_users_lines
from ..state import VIEW_MESSAGE, VIEW_REACT, VIEW_REACTION_USERS, AppState, ComposeState
from ..sync import EventBus, SyncBridge
from ..transition import transition
from ..ui_theme import DEFAULT_THEME, UITheme

logger = logging.getLogger(__name__)


def format_error(exc: BaseException) -> str:
    """Single-line status text for a failed operation."""
    if isinstance(exc, (ReadOnlyError, NotAuthorizedError)):
        return f"{ERROR_MARKER} {exc}"
    return f"{ERROR_MARKER} Error: {exc}"


class AppController:
    def __init__(
        self,
        state: AppState,
        *,
        client: PlatformClient,
        provider: MessageProvider,
        inbox: InboxChannelProvider,
        bus: EventBus | None = None,
        theme: UITheme = DEFAULT_THEME,
        color: bool = True,
        open_url: Callable[[str], object] = webbrowser.open,
    ) -> None:
        self.state = state
        self.client = client
        self.provider = provider
        self.inbox = inbox
        self.bus = bus if bus is not None else EventBus()
        self.theme = theme
        self.color = color
        self._open_url = open_url
        self.bridge = SyncBridge(
            self.bus,
            provider.cache,
            client.platform,
            lambda: self.state,
            self.dispatch,
            on_unseen_message=inbox.note_incoming,
        )
        self.should_quit = False
        self.spinner_frame = 0
        self._changed = asyncio.Event()
        self._tasks: set[asyncio.Task[None]] = set()
        self._load_tokens = itertools.count(1)
        self._pending: set[str] = set()
        self.commands = ChatCommands(
            toggle_channel=self.toggle_channel,
            toggle_section=self.toggle_section,
            refresh_all=self.refresh_all,
            follow=self.follow,
            unfollow=self.unfollow,
            load_older=self.load_older,
            send_compose=self.send_compose,
            submit_reaction=self.submit_reaction,
            begin_reply=self.begin_reply,
            begin_react=self.begin_react,
            begin_edit=self.begin_edit,
            delete_message=self.delete_message,
            open_urls=self.open_urls,
            show_reaction_users=self.show_reaction_users,
            show_message=self.show_message,
            show_help=self.show_help,
        )

    # ------------------------------------------------------------ plumbing

    def dispatch(self, action: object) -> None:
        updated = transition(self.state, action)
        if updated is not self.state:
            self.state = updated
            self._changed.set()

    def handle_key(self, key: str) -> None:
        if handle_key(key, KeyContext(self.state, self.dispatch, self.commands)):
            self.should_quit = True
            self._changed.set()

    def render_rows(self) -> list[str]:
        user = self.client.current_user()
        return render_rows(
            self.state,
            self.theme,
            self_user_id=user.id if user is not None else None,
            spinner_frame=self.spinner_frame,
        )

    async def wait_for_change(self, timeout: float) -> bool:
        """Wait until state changes; returns False on timeout."""
        try:
            await asyncio.wait_for(self._changed.wait(), timeout)
        except asyncio.TimeoutError:
            return False
        self._changed.clear()
        return True

    def spawn(self, coro: Coroutine[Any, Any, None], *, description: str) -> asyncio.Task[None]:
        task = asyncio.get_running_loop().create_task(self._guarded(coro, description))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _guarded(self, coro: Coroutine[Any, Any, None], description: str) -> None:
        try:
            await coro
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self.report_error(exc, description)

    def report_error(self, exc: BaseException, description: str) -> None:
        if isinstance(exc, LazychatError):
            logger.warning("%s failed: %s", description, exc)
        else:
            logger.error("%s failed", description, exc_info=exc)
        self._settle_loading()
        self.dispatch(a.SetStatus(format_error(exc)))

    async def drain(self) -> None:
        """Wait for every scheduled command, including ones they schedule."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    @property
    def read_only(self) -> bool:
        return not self.client.is_connected

    def _require_writable(self) -> None:
        if self.read_only:
            raise ReadOnlyError()

    def _claim(self, key: str) -> bool:
        """Mark a long operation as running; False while the same one is pending."""
        if key in self._pending:
            return False
        self._pending.add(key)
        self.dispatch(a.SetLoading(True))
        return True

    def _release(self, key: str) -> None:
        self._pending.discard(key)
        self._settle_loading()

    def _settle_loading(self) -> None:
        self.dispatch(a.SetLoading(bool(self._pending)))

    def _is_own(self, message: Message) -> bool:
        user = self.client.current_user()
        return user is not None and message.author_id == user.id

    def _channel(self, channel_id: str) -> Channel:
        return self.state.listing.find_channel(channel_id) or Channel(
            id=channel_id, name=channel_id, platform=self.client.platform
        )

    # ------------------------------------------------------------ lifecycle

    async def start(self, *, connect: bool = True) -> None:
        """Connect, subscribe to push events, and load the channel list."""
        if connect and not self.client.is_connected:
            try:
                await self.client.connect()
            except Exception as exc:
                self.report_error(exc, "connect")
        self.bus.bind_client(self.client)
        self.bridge.attach()
        try:
            await self._refresh_all()
        except Exception as exc:
            self.report_error(exc, "refresh")
            return
        if self.read_only:
            self.dispatch(a.SetStatus(f"{ERROR_MARKER} Archive mode - read only"))

    async def shutdown(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*list(self._tasks), return_exceptions=True)
        self.bridge.detach()
        if self.client.is_connected:
            await self.client.disconnect()

    # ------------------------------------------------------------ channels

    def toggle_channel(self, channel_id: str) -> None:
        if channel_id in self.state.expanded:
            self.dispatch(a.CollapseChannel(channel_id))
            return
        self.dispatch(a.ExpandChannel(channel_id))
        self._start_load(channel_id)
        self.dispatch(a.SetChannels(self.inbox.mark_visited(channel_id)))

    def _start_load(self, channel_id: str, *, force_refresh: bool = False) -> None:
        token = next(self._load_tokens)
        self.dispatch(a.BeginChannelLoad(channel_id, token))
        self.spawn(self._load_channel(channel_id, token, force_refresh), description=f"load {channel_id}")

    async def _load_channel(self, channel_id: str, token: int, force_refresh: bool) -> None:
        try:
            messages = await self.provider.load_messages(self._channel(channel_id), force_refresh=force_refresh)
        except Exception as exc:
            failed = ExpandedChannelData(channel_id=channel_id, has_more_older=False, error=str(exc))
            self.dispatch(a.SetExpandedChannelData(channel_id, failed, load_token=token))
            raise
        data = ExpandedChannelData(
            channel_id=channel_id,
            messages=tuple(messages),
            has_more_older=self.provider.has_more_older(channel_id),
        )
        self.dispatch(a.SetExpandedChannelData(channel_id, data, load_token=token))

    def refresh_all(self) -> None:
        self.spawn(self._refresh_all(), description="refresh")

    async def _refresh_all(self) -> None:
        self.dispatch(a.SetLoading(True))
        self.dispatch(a.SetStatus("Refreshing channels..."))
        try:
            listing = await self.inbox.refresh()
        finally:
            self._settle_loading()
        self.bridge.apply_listing(listing)
        for channel_id in sorted(self.state.expanded):
            self._start_load(channel_id, force_refresh=True)
        self.dispatch(a.SetStatus(f"Loaded {len(listing.channels)} channels"))

    def toggle_section(self, section: str) -> None:
        self.dispatch(a.SetChannels(self.inbox.toggle_section(section)))

    def follow(self, channel_id: str) -> None:
        self.dispatch(a.SetChannels(self.inbox.follow(channel_id)))
        self.dispatch(a.SetStatus(f"Following {self._channel(channel_id).display_name}"))

    def unfollow(self, channel_id: str) -> None:
        self.dispatch(a.SetChannels(self.inbox.unfollow(channel_id)))
        self.dispatch(a.SetStatus(f"Unfollowed {self._channel(channel_id).display_name}"))

    def load_older(self, channel_id: str) -> None:
        data = self.state.expanded_data.get(channel_id)
        if channel_id not in self.state.expanded or data is None or data.is_loading:
            self.dispatch(a.SetStatus("Expand the channel to load older messages"))
            return
        if not data.messages or not data.has_more_older:
            self.dispatch(a.SetStatus("No older messages"))
            return
        key = f"older:{channel_id}"
        if not self._claim(key):
            return
        self.spawn(self._load_older(channel_id, data.messages[0].id, key), description="load older messages")

    async def _load_older(self, channel_id: str, before_id: str, key: str) -> None:
        self.dispatch(a.SetStatus("Loading older messages..."))
        try:
            result = await self.provider.load_older_messages(self._channel(channel_id), before_id)
        finally:
            self._release(key)
        current = self.state.expanded_data.get(channel_id)
        if current is None or current.is_loading:
            return
        data = replace(current, messages=tuple(result.messages), has_more_older=result.has_more)
        self.dispatch(a.SetExpandedChannelData(channel_id, data))
        if result.new_count:
            self.dispatch(a.SetStatus(f"Loaded {result.new_count} older messages"))
        else:
            self.dispatch(a.SetStatus("No older messages"))

    # ------------------------------------------------------------ compose

    def send_compose(self) -> None:
        state = self.state
        channel_id = state.compose_channel_id
        compose = state.compose
        text, paths = parse_attachments(compose.text)
        if channel_id is None or (not text and not paths and not compose.attachments):
            return
        if not self._claim("send"):
            return
        self.spawn(self._send(channel_id, compose, text, paths), description="send message")

    async def _send(self, channel_id: str, compose: ComposeState, text: str, paths: list[str]) -> None:
        try:
            self._require_writable()
            missing = [path for path in paths if not os.path.isfile(path)]
            if missing:
                raise LazychatError(f"Attachment not found: {missing[0]}")
            if compose.edit_target:
                self.dispatch(a.SetStatus("Saving edit..."))
                message = await self.client.edit_message(channel_id, compose.edit_target, text)
                status = "Message edited"
            else:
                self.dispatch(a.SetStatus("Sending message..."))
                attachments = tuple(
                    [OutgoingAttachment(name=item.name, path=item.path) for item in compose.attachments]
                    + [OutgoingAttachment(name=os.path.basename(path), path=path) for path in paths]
                )
                options = SendMessageOptions(
                    content=text,
                    channel_id=channel_id,
                    reply_to_message_id=compose.reply_to,
                    attachments=attachments,
                )
                message = await self.client.send_message(options)
                status = "Message sent"
        finally:
            self._release("send")
        self.bridge.on_message_updated(message)
        # Only clear the draft that was sent.
        if self.state.compose_channel_id == channel_id and self.state.compose == compose:
            self.dispatch(a.ResetComposeState())
        self.dispatch(a.SetStatus(status))

    def begin_reply(self, message: Message) -> None:
        self.dispatch(a.EnterCompose(message.channel_id))
        self.dispatch(a.SetReplyTarget(message.id))
        self.dispatch(a.SetStatus(f"Replying to {message.author} - Enter send · Esc cancel"))

    def begin_edit(self, message: Message) -> None:
        if not self._is_own(message):
            self.report_error(NotAuthorizedError("Can only edit your own messages"), "edit")
            return
        self.dispatch(a.EnterCompose(message.channel_id))
        self.dispatch(a.SetEditTarget(message.id, message.content))
        self.dispatch(a.SetStatus("Editing message - Enter save · Esc cancel"))

    def delete_message(self, message: Message) -> None:
        if not self._is_own(message):
            self.report_error(NotAuthorizedError("Can only delete your own messages"), "delete")
            return
        self.spawn(self._delete(message), description="delete message")

    async def _delete(self, message: Message) -> None:
        self._require_writable()
        await self.client.delete_message(message.channel_id, message.id)
        self.bridge.on_message_deleted(message.channel_id, message.id)
        self.dispatch(a.SetStatus("Message deleted"))

    # ------------------------------------------------------------ reactions

    def begin_react(self, message: Message) -> None:
        if self.read_only:
            self.report_error(ReadOnlyError(), "react")
            return
        self.dispatch(a.SetReactTarget(message.id))
        self.dispatch(a.SetView(VIEW_REACT))

    def submit_reaction(self) -> None:
        state = self.state
        target = state.compose.react_to
        raw = state.compose.text
        if target is None:
            self.dispatch(a.Cancel())
            return
        emoji = resolve_emoji(raw)
        if emoji is None:
            self.dispatch(a.SetStatus(f"{ERROR_MARKER} Unknown emoji: {raw.strip() or '(empty)'}"))
            return
        message = self._find_message(target)
        self.dispatch(a.Cancel())
        if message is None:
            return
        self.spawn(self._react(message, emoji), description="add reaction")

    async def _react(self, message: Message, emoji: str) -> None:
        self._require_writable()
        await self.client.add_reaction(message.channel_id, message.id, emoji)
        self.dispatch(a.SetStatus(f"Reacted with {emoji}"))

    def _find_message(self, message_id: str) -> Message | None:
        for data in self.state.expanded_data.values():
            for message in data.messages:
                if message.id == message_id:
                    return message
        return None

    # ------------------------------------------------------------ viewing

    def open_urls(self, message: Message) -> None:
        urls = extract_urls(message.content) + [item.url for item in message.attachments if item.url]
        if not urls:
            self.dispatch(a.SetStatus("No links in message"))
            return
        for url in urls:
            try:
                self._open_url(normalize_url(url))
            except Exception as exc:
                self.report_error(exc, f"open {url}")
                return
        self.dispatch(a.SetStatus(f"Opened {len(urls)} link(s)"))

    def show_reaction_users(self, message: Message) -> None:
        if not message.reactions:
            self.dispatch(a.SetStatus("No reactions on this message"))
            return
        self.dispatch(a.ShowModal(VIEW_REACTION_USERS, "Reactions", reaction_users_lines(message)))

    def show_message(self, message: Message) -> None:
        title, lines = message_modal(message, color=self.color)
        self.dispatch(a.ShowModal(VIEW_MESSAGE, title, lines))

    def show_help(self) -> None:
        self.dispatch(a.ShowModal(VIEW_MESSAGE, "lazychat help", help_lines(self.theme)))
