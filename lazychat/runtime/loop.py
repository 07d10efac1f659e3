"""Asyncio main loop: stdin keys, resize signals, and repaint on change."""

from __future__ import annotations

import asyncio
import signal
from dataclasses import dataclass

from ..actions import SetDimensions
from ..input import read_key
from ..render import paint
from .controller import AppController
from .terminal import terminal_size


@dataclass(frozen=True)
class RuntimeLoopTiming:
    frame_interval: float = 0.1
    max_keys_per_wakeup: int = 256


def drain_keys(controller: AppController, stdin_fd: int, limit: int) -> int:
    """Feed every key already buffered on ``stdin_fd`` to the controller."""
    handled = 0
    while handled < limit and not controller.should_quit:
        key = read_key(stdin_fd, timeout_ms=0)
        if not key:
            break
        controller.handle_key(key)
        handled += 1
    return handled


async def run_main_loop(
    controller: AppController,
    *,
    stdin_fd: int,
    stdout_fd: int,
    timing: RuntimeLoopTiming = RuntimeLoopTiming(),
) -> None:
    """Run until the controller asks to quit.

    Keys are read from a loop reader callback so pending network tasks keep
    running while the user types.
    """
    loop = asyncio.get_running_loop()

    def on_stdin() -> None:
        drain_keys(controller, stdin_fd, timing.max_keys_per_wakeup)

    def on_resize() -> None:
        rows, cols = terminal_size()
        controller.dispatch(SetDimensions(rows, cols))

    loop.add_reader(stdin_fd, on_stdin)
    loop.add_signal_handler(signal.SIGWINCH, on_resize)
    try:
        paint(controller.render_rows(), stdout_fd)
        while not controller.should_quit:
            changed = await controller.wait_for_change(timing.frame_interval)
            if controller.should_quit:
                break
            if controller.state.loading:
                controller.spinner_frame += 1
            elif not changed:
                continue
            paint(controller.render_rows(), stdout_fd)
    finally:
        loop.remove_reader(stdin_fd)
        loop.remove_signal_handler(signal.SIGWINCH)
