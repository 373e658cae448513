# accounts/services/channels/service.py
from __future__ import annotations

from accounts.services._shared.base import BaseService
from accounts.services._shared.errors import NotFoundError, ValidationError
from accounts.services.channels.dto import ChannelProfileOut, WatchedVideoOut


class ChannelService(BaseService):
    """Read-only aggregations: channel profile and watch history."""

    def channel_profile(self, username: str | None, viewer_id: int | None) -> ChannelProfileOut:
        """
        Build the public card of the channel owned by ``username``.

        :param username: Channel handle, matched case-insensitively.
        :param viewer_id: Authenticated viewer, drives ``is_subscribed``.
        :raises ValidationError: Blank username.
        :raises NotFoundError: No such channel.
        """
        handle = (username or "").strip().lower()
        if not handle:
            raise ValidationError("username is missing")
        with self.ro_uow() as uow:
            row = uow.channels.channel_profile(handle, viewer_id)
        if row is None:
            raise NotFoundError("Channel", handle, "Channel not found")
        return ChannelProfileOut.from_mapping(row)

    def watch_history(self, user_id: int) -> list[WatchedVideoOut]:
        """Return the videos ``user_id`` watched, in list order."""
        with self.ro_uow() as uow:
            rows = uow.channels.watch_history(user_id)
        return [WatchedVideoOut.from_mapping(row) for row in rows]
