"""Global Flask extension instances and initialization helpers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from flask import Flask, current_app
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import MetaData

if TYPE_CHECKING:
    from accounts.services._shared.ports import MediaUploader, TokenProvider
    from accounts.services.tokens.dto import TokenConfig

# Global naming convention for all constraints
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

# Global singletons (import-safe)
db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
migrate = Migrate(render_as_batch=True)
limiter = Limiter(key_func=get_remote_address)

TOKEN_CONFIG_KEY = "token_config"
TOKEN_PROVIDER_KEY = "token_provider"
MEDIA_UPLOADER_KEY = "media_uploader"


def init_app(app: Flask) -> None:
    """Initialize SQLAlchemy, migrations, rate limiting and token/media adapters.

    Parameters
    ----------
    app: flask.Flask
        Application used to bind extension instances. This call imports the
        :mod:`accounts.models` package to ensure SQLAlchemy metadata is ready
        for migrations.

    Raises
    ------
    ValueError
        If the token lifetimes cannot be parsed or both token classes share
        the same signing secret.
    """
    db.init_app(app)

    # Ensure models are imported so Alembic sees metadata
    from accounts import models as _models  # noqa: F401

    migrate.init_app(app, db)
    limiter.init_app(app)

    from accounts.infra.cloudinary import CloudinaryMediaUploader
    from accounts.infra.jwt import PyJWTTokenProvider
    from accounts.services.tokens.dto import TokenConfig

    token_config = TokenConfig.from_mapping(app.config)
    app.extensions[TOKEN_CONFIG_KEY] = token_config
    app.extensions[TOKEN_PROVIDER_KEY] = PyJWTTokenProvider(token_config)
    app.extensions[MEDIA_UPLOADER_KEY] = CloudinaryMediaUploader(
        cloud_name=app.config.get("CLOUDINARY_CLOUD_NAME", ""),
        api_key=app.config.get("CLOUDINARY_API_KEY", ""),
        api_secret=app.config.get("CLOUDINARY_API_SECRET", ""),
        timeout=float(app.config.get("MEDIA_UPLOAD_TIMEOUT", 30)),
    )


def get_token_config() -> TokenConfig:
    """Return the token settings bound to the current application."""
    return current_app.extensions[TOKEN_CONFIG_KEY]


def get_token_provider() -> TokenProvider:
    """Return the token signer/verifier bound to the current application."""
    return current_app.extensions[TOKEN_PROVIDER_KEY]


def get_media_uploader() -> MediaUploader:
    """Return the media host adapter bound to the current application.

    Tests swap the adapter by assigning ``app.extensions["media_uploader"]``.
    """
    return current_app.extensions[MEDIA_UPLOADER_KEY]
