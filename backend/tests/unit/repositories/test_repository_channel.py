from __future__ import annotations

from accounts.repositories import ChannelRepository

from tests.factories.subscription import SubscriptionFactory
from tests.factories.user import UserFactory
from tests.factories.video import VideoFactory, WatchHistoryFactory


def test_channel_profile_columns(session):
    channel = UserFactory(username="tube")
    SubscriptionFactory(channel=channel)

    row = ChannelRepository(session=session).channel_profile("tube", None)

    assert row["id"] == channel.id
    assert row["subscribers_count"] == 1
    assert row["channels_subscribed_to_count"] == 0
    assert row["is_subscribed"] is False
    assert "password_hash" not in row
    assert "refresh_token" not in row


def test_channel_profile_missing(session):
    assert ChannelRepository(session=session).channel_profile("missing", None) is None


def test_watch_history_is_scoped_to_user(session):
    viewer, stranger = UserFactory(), UserFactory()
    WatchHistoryFactory(user=viewer, position=0)
    WatchHistoryFactory(user=stranger, position=0)
    VideoFactory()  # never watched

    rows = ChannelRepository(session=session).watch_history(viewer.id)

    assert len(rows) == 1
    assert {"owner_full_name", "owner_username", "owner_avatar"} <= set(rows[0])
