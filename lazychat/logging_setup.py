"""Logging setup for the lazychat TUI.

The terminal belongs to the UI while it runs, so records go to a file.
"""

from __future__ import annotations

import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_level(level: str | None) -> int:
    if not level:
        return logging.WARNING
    value = getattr(logging, level.upper(), None)
    return value if isinstance(value, int) else logging.WARNING


def setup_logging(level: str | None = "WARNING", log_file: str | Path | None = None) -> Path | None:
    """Send package logs to ``log_file`` at ``level``.

    Returns the file actually used, or None when it could not be opened; in
    that case records are discarded rather than written over the UI.
    """
    root = logging.getLogger("lazychat")
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(resolve_level(level))
    root.propagate = False

    handler: logging.Handler
    used: Path | None = None
    if log_file is not None:
        path = Path(log_file).expanduser()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            handler = logging.FileHandler(path, encoding="utf-8")
            used = path
        except OSError:
            handler = logging.NullHandler()
    else:
        handler = logging.NullHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    root.addHandler(handler)
    return used
