"""Factories for videos and watch-history entries."""

from __future__ import annotations

import factory
from accounts.models.video import Video, WatchHistoryEntry

from tests.factories import BaseFactory
from tests.factories.user import UserFactory


class VideoFactory(BaseFactory):
    class Meta:
        model = Video

    id = None
    owner = factory.SubFactory(UserFactory)
    title = factory.Sequence(lambda n: f"Video {n}")
    description = factory.Faker("sentence")
    video_file = factory.Sequence(lambda n: f"https://media.test/upload/v1/video-{n}.mp4")
    thumbnail = factory.Sequence(lambda n: f"https://media.test/upload/v1/thumb-{n}.png")
    duration = 120.5
    views = 0
    is_published = True


class WatchHistoryFactory(BaseFactory):
    """Append ``video`` to ``user``'s watch history at ``position``."""

    class Meta:
        model = WatchHistoryEntry

    id = None
    user = factory.SubFactory(UserFactory)
    video = factory.SubFactory(VideoFactory)
    position = factory.Sequence(lambda n: n)
