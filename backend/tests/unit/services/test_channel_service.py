from __future__ import annotations

import pytest
from accounts.services import ChannelService
from accounts.services._shared.errors import NotFoundError, ValidationError

from tests.factories.subscription import SubscriptionFactory
from tests.factories.user import UserFactory
from tests.factories.video import VideoFactory, WatchHistoryFactory


@pytest.fixture()
def service(app) -> ChannelService:
    return ChannelService()


def test_channel_profile_counts_and_subscription_flag(service):
    channel = UserFactory(username="chan")
    viewer = UserFactory()
    other = UserFactory()
    SubscriptionFactory(subscriber=viewer, channel=channel)
    SubscriptionFactory(subscriber=other, channel=channel)
    SubscriptionFactory(subscriber=channel, channel=other)

    as_viewer = service.channel_profile("CHAN", viewer.id)
    as_stranger = service.channel_profile("chan", UserFactory().id)

    assert as_viewer.id == channel.id
    assert as_viewer.subscribers_count == 2
    assert as_viewer.channels_subscribed_to_count == 1
    assert as_viewer.is_subscribed is True
    assert as_stranger.is_subscribed is False


def test_channel_profile_without_subscriptions(service):
    UserFactory(username="quiet")
    profile = service.channel_profile("quiet", None)
    assert profile.subscribers_count == 0
    assert profile.channels_subscribed_to_count == 0
    assert profile.is_subscribed is False


@pytest.mark.parametrize("username", ["", "   ", None])
def test_channel_profile_requires_username(service, username):
    with pytest.raises(ValidationError) as exc:
        service.channel_profile(username, None)
    assert exc.value.message == "username is missing"


def test_channel_profile_unknown(service):
    with pytest.raises(NotFoundError) as exc:
        service.channel_profile("nobody", None)
    assert str(exc.value) == "Channel not found"


def test_watch_history_in_list_order_with_owner(service):
    viewer = UserFactory()
    owner = UserFactory(full_name="Owner", username="maker")
    first = VideoFactory(owner=owner, title="First")
    second = VideoFactory(owner=owner, title="Second")
    WatchHistoryFactory(user=viewer, video=second, position=2)
    WatchHistoryFactory(user=viewer, video=first, position=1)

    history = service.watch_history(viewer.id)

    assert [v.title for v in history] == ["First", "Second"]
    assert history[0].owner.username == "maker"
    assert history[0].owner.full_name == "Owner"
    assert history[0].owner.avatar == owner.avatar


def test_watch_history_empty(service):
    assert service.watch_history(UserFactory().id) == []
