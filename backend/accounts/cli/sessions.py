"""Flask CLI commands for inspecting and revoking refresh sessions."""

from __future__ import annotations

import logging

import click
from flask.cli import with_appcontext

from accounts.core.extensions import get_token_config, get_token_provider
from accounts.services import ServiceContext, TokenService
from accounts.services._shared.errors import NotFoundError
from accounts.uow import SQLAlchemyReadOnlyUnitOfWork

LOGGER = logging.getLogger(__name__)


def _token_service() -> TokenService:
    return TokenService(
        config=get_token_config(),
        token_provider=get_token_provider(),
        ctx=ServiceContext(request_id="cli"),
    )


def _resolve_user_id(username: str) -> int:
    """Map a channel handle to its user id or abort the command."""
    with SQLAlchemyReadOnlyUnitOfWork() as uow:
        user = uow.users.get_by_username(username)
        if user is None:
            raise click.ClickException(f"No user named {username!r}")
        return user.id


@click.group("sessions")
def sessions_cli() -> None:
    """Inspect and revoke stored refresh sessions."""


@sessions_cli.command("status")
@click.argument("username")
@with_appcontext
def status_command(username: str) -> None:
    """Print whether USERNAME currently holds a refresh token."""
    user_id = _resolve_user_id(username)
    state = _token_service().refresh_state(user_id)
    click.echo(f"{username}: {state}")


@sessions_cli.command("revoke")
@click.argument("username")
@with_appcontext
def revoke_command(username: str) -> None:
    """Revoke the refresh token of USERNAME (forces a new login)."""
    user_id = _resolve_user_id(username)
    try:
        _token_service().revoke(user_id)
    except NotFoundError as exc:
        raise click.ClickException(str(exc)) from exc
    LOGGER.info("sessions.revoked", extra={"user_id": user_id})
    click.echo(f"Revoked refresh session of {username}")
