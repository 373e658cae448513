"""Application factory wiring Flask extensions and blueprints."""

from __future__ import annotations

from flask import Flask

from accounts.core.config import BaseConfig, get_config
from accounts.core.logger import configure_logging
from accounts.core.logger import init_app as init_logging


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    Parameters
    ----------
    config:
        Configuration object or import path. Defaults to the class selected by
        ``APP_ENV`` (see :func:`accounts.core.config.get_config`).
    instance_relative_config:
        Load overrides from the instance folder when ``True``.
    instance_config_filename:
        Optional instance file applied after ``config``.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    # Proxy headers if running behind a reverse proxy
    from accounts.core import proxy

    proxy.init_app(app)

    from accounts.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from accounts.core import cors

    cors.init_app(app)

    from accounts.api import init_app as init_api

    init_api(app)

    from accounts.core import errors

    errors.init_app(app)

    from accounts import cli as accounts_cli

    accounts_cli.init_app(app)

    return app
