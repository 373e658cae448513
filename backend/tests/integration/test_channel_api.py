"""Channel profile and watch history endpoints."""

from __future__ import annotations

import pytest

from tests.factories.subscription import SubscriptionFactory
from tests.factories.user import DEFAULT_PASSWORD, UserFactory
from tests.factories.video import VideoFactory, WatchHistoryFactory
from tests.helpers.http import API, bearer, login


@pytest.fixture()
def viewer():
    return UserFactory(username="morpheus")


@pytest.fixture()
def auth(client, viewer) -> dict[str, str]:
    token = login(client, username="morpheus", password=DEFAULT_PASSWORD).get_json()["data"][
        "accessToken"
    ]
    return bearer(token)


def test_channel_profile(client, viewer, auth):
    channel = UserFactory(username="zion")
    SubscriptionFactory(subscriber=viewer, channel=channel)

    resp = client.get(f"{API}/c/Zion", headers=auth)

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["username"] == "zion"
    assert data["subscribersCount"] == 1
    assert data["channelsSubscribedToCount"] == 0
    assert data["isSubscribed"] is True
    assert "refreshToken" not in data


def test_channel_profile_not_found(client, auth):
    resp = client.get(f"{API}/c/nobody", headers=auth)
    assert resp.status_code == 404
    assert resp.get_json()["message"] == "Channel not found"


def test_channel_profile_requires_auth(client):
    assert client.get(f"{API}/c/zion").status_code == 401


def test_watch_history(client, viewer, auth):
    owner = UserFactory(username="oracle")
    video = VideoFactory(owner=owner, title="Cookies")
    WatchHistoryFactory(user=viewer, video=video, position=0)

    resp = client.get(f"{API}/watch-history", headers=auth)

    assert resp.status_code == 200
    videos = resp.get_json()["data"]
    assert [v["title"] for v in videos] == ["Cookies"]
    assert videos[0]["owner"] == {
        "fullName": owner.full_name,
        "username": "oracle",
        "avatar": owner.avatar,
    }


def test_watch_history_empty(client, auth):
    resp = client.get(f"{API}/watch-history", headers=auth)
    assert resp.get_json()["data"] == []


@pytest.mark.parametrize("path", ["/get-user-watch-history", "/watch-history"])
def test_watch_history_paths(client, viewer, auth, path):
    WatchHistoryFactory(user=viewer, video=VideoFactory(title="Red pill"), position=0)

    resp = client.get(f"{API}{path}", headers=auth)

    assert resp.status_code == 200
    assert resp.get_json()["message"] == "Watch history fetched successfully"
    assert [v["title"] for v in resp.get_json()["data"]] == ["Red pill"]
