"""Read-model queries: channel profile and watch history."""

from __future__ import annotations

from typing import Any

from sqlalchemy import exists, false, func, select
from sqlalchemy.orm import aliased

from accounts.models.subscription import Subscription
from accounts.models.user import User
from accounts.models.video import Video, WatchHistoryEntry
from accounts.repositories.base import BaseRepository


class ChannelRepository(BaseRepository[User]):
    """Aggregations over users, subscriptions and watch history.

    Each method is a single ``SELECT``; counts are correlated subqueries so
    the profile never loads subscription rows into Python.
    """

    model = User

    def channel_profile(self, username: str, viewer_id: int | None) -> dict[str, Any] | None:
        """Return the public channel card for ``username``.

        :param username: Normalized (lower-case) channel handle.
        :param viewer_id: Authenticated viewer, used for ``is_subscribed``.
        :returns: Mapping with profile columns plus ``subscribers_count``,
            ``channels_subscribed_to_count`` and ``is_subscribed``; ``None``
            when the channel does not exist.
        """
        subscribers_count = (
            select(func.count(Subscription.id))
            .where(Subscription.channel_id == User.id)
            .correlate(User)
            .scalar_subquery()
        )
        subscribed_to_count = (
            select(func.count(Subscription.id))
            .where(Subscription.subscriber_id == User.id)
            .correlate(User)
            .scalar_subquery()
        )
        if viewer_id is None:
            is_subscribed: Any = false()
        else:
            is_subscribed = (
                exists()
                .where(
                    Subscription.channel_id == User.id,
                    Subscription.subscriber_id == viewer_id,
                )
                .correlate(User)
            )

        stmt = select(
            User.id,
            User.full_name,
            User.username,
            User.email,
            User.avatar,
            User.cover_image,
            subscribers_count.label("subscribers_count"),
            subscribed_to_count.label("channels_subscribed_to_count"),
            is_subscribed.label("is_subscribed"),
        ).where(User.username == username)

        row = self.session.execute(stmt).first()
        if row is None:
            return None
        profile = dict(row._mapping)
        profile["is_subscribed"] = bool(profile["is_subscribed"])
        return profile

    def watch_history(self, user_id: int) -> list[dict[str, Any]]:
        """Return the user's watched videos in list order, each with its owner card."""
        owner = aliased(User)
        stmt = (
            select(
                Video.id,
                Video.title,
                Video.description,
                Video.video_file,
                Video.thumbnail,
                Video.duration,
                Video.views,
                WatchHistoryEntry.watched_at,
                owner.full_name.label("owner_full_name"),
                owner.username.label("owner_username"),
                owner.avatar.label("owner_avatar"),
            )
            .join(WatchHistoryEntry, WatchHistoryEntry.video_id == Video.id)
            .join(owner, owner.id == Video.owner_id)
            .where(WatchHistoryEntry.user_id == user_id)
            .order_by(WatchHistoryEntry.position, WatchHistoryEntry.id)
        )
        return [dict(row._mapping) for row in self.session.execute(stmt)]
