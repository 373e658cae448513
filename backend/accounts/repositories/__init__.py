"""Repository package exposing persistence-layer access for the account models."""

from __future__ import annotations

from accounts.repositories.base import BaseRepository
from accounts.repositories.channel import ChannelRepository
from accounts.repositories.user import PUBLIC_COLUMNS, UserRepository

__all__ = [
    "BaseRepository",
    "ChannelRepository",
    "PUBLIC_COLUMNS",
    "UserRepository",
]
