"""Command-line interface registration for the Flask application."""

from __future__ import annotations

from flask import Flask

from .sessions import sessions_cli


def init_app(app: Flask) -> None:
    """Register the ``flask sessions`` command group on ``app``."""
    app.cli.add_command(sessions_cli)
