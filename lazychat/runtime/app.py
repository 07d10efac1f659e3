"""Application bootstrap: wire collaborators, then run the TUI or one frame."""

from __future__ import annotations

import asyncio
import logging
import sys
from dataclasses import dataclass

from ..cache import MessageCache
from ..inbox import InboxChannelProvider
from ..messages import MessageProvider
from ..model import ChannelListing
from ..platforms import DemoPlatformClient
from ..platforms.types import PlatformClient
from ..state import initial_state
from ..ui_theme import UITheme
from .controller import AppController
from .loop import run_main_loop
from .terminal import TerminalController, terminal_size

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppOptions:
    theme: UITheme
    color: bool = True
    visible_count: int = 5
    read_only: bool = False
    persist: bool = True
    title: str = "lazychat"


def build_controller(client: PlatformClient, options: AppOptions, *, rows: int, cols: int) -> AppController:
    provider = MessageProvider(client, MessageCache())
    inbox = InboxChannelProvider(client, persist=options.persist)
    state = initial_state(
        ChannelListing(),
        title=options.title,
        rows=rows,
        cols=cols,
        visible_count=options.visible_count,
    )
    return AppController(
        state,
        client=client,
        provider=provider,
        inbox=inbox,
        theme=options.theme,
        color=options.color,
    )


async def _run_interactive(client: PlatformClient, options: AppOptions) -> None:
    rows, cols = terminal_size()
    controller = build_controller(client, options, rows=rows, cols=cols)
    stdin_fd = sys.stdin.fileno()
    stdout_fd = sys.stdout.fileno()
    terminal = TerminalController(stdin_fd, stdout_fd)
    logger.info("starting interactive session at %dx%d (read_only=%s)", cols, rows, options.read_only)
    with terminal.raw_mode():
        controller.spawn(controller.start(connect=not options.read_only), description="startup")
        if isinstance(client, DemoPlatformClient) and not options.read_only:
            client.start_live_events()
        try:
            await run_main_loop(controller, stdin_fd=stdin_fd, stdout_fd=stdout_fd)
        finally:
            await controller.shutdown()


def run_app(client: PlatformClient, options: AppOptions) -> int:
    if not sys.stdin.isatty() or not sys.stdout.isatty():
        print("lazychat needs an interactive terminal (try --render)", file=sys.stderr)
        return 2
    asyncio.run(_run_interactive(client, options))
    return 0


async def _render_once(client: PlatformClient, options: AppOptions, rows: int, cols: int) -> list[str]:
    controller = build_controller(client, options, rows=rows, cols=cols)
    await controller.start(connect=not options.read_only)
    first = next((channel.id for channel in controller.state.listing.channels), None)
    if first is not None:
        controller.toggle_channel(first)
    await controller.drain()
    rows_out = controller.render_rows()
    await controller.shutdown()
    return rows_out


def render_once(client: PlatformClient, options: AppOptions, *, rows: int = 24, cols: int = 80) -> list[str]:
    """Load the inbox, expand the first channel, and return one rendered frame."""
    return asyncio.run(_render_once(client, options, rows, cols))
