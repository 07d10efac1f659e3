"""Terminal control helpers for the TUI session.

Owns raw-mode lifecycle, alternate-screen switching, and mouse reporting.
"""

from __future__ import annotations

import contextlib
import os
import shutil
import termios
import tty

from ..state import DEFAULT_COLUMNS, DEFAULT_ROWS

_ENTER_TUI = b"\x1b[?1049h\x1b[?25l\x1b[?1000h\x1b[?1002h\x1b[?1006h"
_LEAVE_TUI = b"\x1b[?1000l\x1b[?1002l\x1b[?1006l\x1b[?25h\x1b[?1049l"


def terminal_size() -> tuple[int, int]:
    """Return ``(rows, columns)``, falling back to 80x24 when unknown."""
    size = shutil.get_terminal_size((DEFAULT_COLUMNS, DEFAULT_ROWS))
    rows = size.lines if size.lines > 0 else DEFAULT_ROWS
    cols = size.columns if size.columns > 0 else DEFAULT_COLUMNS
    return rows, cols


class TerminalController:
    """Manage terminal mode transitions for the chat UI."""

    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        """Capture tty state and bind stdin/stdout file descriptors."""
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self._saved_tty_state = termios.tcgetattr(stdin_fd)

    def enable_tui_mode(self) -> None:
        """Enter raw alternate-screen mode with mouse reporting enabled."""
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        os.write(self.stdout_fd, _ENTER_TUI)

    def disable_tui_mode(self) -> None:
        """Restore normal terminal state and disable TUI mouse mode."""
        os.write(self.stdout_fd, _LEAVE_TUI)
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)

    @contextlib.contextmanager
    def raw_mode(self):
        """Context manager that brackets code with TUI enter/exit calls."""
        try:
            self.enable_tui_mode()
            yield
        finally:
            self.disable_tui_mode()
