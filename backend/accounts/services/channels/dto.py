"""DTOs for the channel read models."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class ChannelProfileOut:
    """
    Public channel card.

    :param subscribers_count: Users subscribed to this channel.
    :param channels_subscribed_to_count: Channels this user subscribes to.
    :param is_subscribed: Whether the viewer subscribes to this channel.
    """

    id: int
    full_name: str
    username: str
    email: str
    avatar: str
    cover_image: str
    subscribers_count: int
    channels_subscribed_to_count: int
    is_subscribed: bool

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> ChannelProfileOut:
        return cls(
            id=int(row["id"]),
            full_name=row["full_name"],
            username=row["username"],
            email=row["email"],
            avatar=row["avatar"],
            cover_image=row["cover_image"] or "",
            subscribers_count=int(row["subscribers_count"] or 0),
            channels_subscribed_to_count=int(row["channels_subscribed_to_count"] or 0),
            is_subscribed=bool(row["is_subscribed"]),
        )


@dataclass(frozen=True, slots=True)
class VideoOwnerOut:
    full_name: str
    username: str
    avatar: str


@dataclass(frozen=True, slots=True)
class WatchedVideoOut:
    """One entry of a watch history, in list order."""

    id: int
    title: str
    description: str
    video_file: str
    thumbnail: str
    duration: float
    views: int
    watched_at: datetime | None
    owner: VideoOwnerOut

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> WatchedVideoOut:
        return cls(
            id=int(row["id"]),
            title=row["title"],
            description=row["description"],
            video_file=row["video_file"],
            thumbnail=row["thumbnail"],
            duration=float(row["duration"]),
            views=int(row["views"]),
            watched_at=row.get("watched_at"),
            owner=VideoOwnerOut(
                full_name=row["owner_full_name"],
                username=row["owner_username"],
                avatar=row["owner_avatar"],
            ),
        )
