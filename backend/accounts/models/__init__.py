from accounts.models.subscription import Subscription
from accounts.models.user import User
from accounts.models.video import Video, WatchHistoryEntry

__all__ = [
    "Subscription",
    "User",
    "Video",
    "WatchHistoryEntry",
]
