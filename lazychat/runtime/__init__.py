"""Runtime orchestration: controller, main loop, terminal, and config."""

from __future__ import annotations


def run_app(*args, **kwargs):
    """Lazily import the app bootstrap to keep package import light."""
    from .app import run_app as _run_app

    return _run_app(*args, **kwargs)


def render_once(*args, **kwargs):
    from .app import render_once as _render_once

    return _render_once(*args, **kwargs)


__all__ = ["render_once", "run_app"]
