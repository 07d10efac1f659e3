"""Persistent JSON config helpers.

Stores the theme, visible message count, log level, channel visit records and
collapsed inbox sections. All access is defensive: malformed or missing config
falls back safely.
"""

from __future__ import annotations

import json
from pathlib import Path

from platformdirs import user_config_dir, user_log_dir

APP_NAME = "lazychat"
CONFIG_FILENAME = "config.json"
LOG_FILENAME = "lazychat.log"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

VisitRecord = dict[str, str]


def default_log_path() -> Path:
    return Path(user_log_dir(APP_NAME, appauthor=False)) / LOG_FILENAME


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except Exception:
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Any filesystem/serialization error is ignored to keep runtime behavior
    non-fatal when config cannot be written.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    except Exception:
        pass


def _update_config(key: str, value: object) -> None:
    config = load_config()
    config[key] = value
    save_config(config)


def _load_str(key: str) -> str | None:
    value = load_config().get(key)
    return value if isinstance(value, str) and value else None


def load_theme_name() -> str | None:
    return _load_str("theme")


def load_log_level() -> str | None:
    return _load_str("log_level")


def load_visible_count() -> int | None:
    """Return the persisted messages-per-channel count.

    Booleans, non-integers and values below one are ignored.
    """
    value = load_config().get("visible_count")
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        return None
    return value


def load_visits() -> dict[str, VisitRecord]:
    """Load channel visit records keyed by ``platform:channel_id``.

    Entries without a string ``last_visited`` timestamp are dropped.
    """
    value = load_config().get("visits")
    if not isinstance(value, dict):
        return {}
    visits: dict[str, VisitRecord] = {}
    for key, record in value.items():
        if not isinstance(key, str) or not isinstance(record, dict):
            continue
        last_visited = record.get("last_visited")
        if not isinstance(last_visited, str):
            continue
        visits[key] = {"last_visited": last_visited}
    return visits


def save_visits(visits: dict[str, VisitRecord]) -> None:
    _update_config("visits", {key: dict(record) for key, record in visits.items()})


def load_collapsed_sections() -> set[str]:
    value = load_config().get("collapsed_sections")
    if not isinstance(value, list):
        return set()
    return {item for item in value if isinstance(item, str)}


def save_collapsed_sections(sections: set[str] | frozenset[str]) -> None:
    _update_config("collapsed_sections", sorted(sections))
