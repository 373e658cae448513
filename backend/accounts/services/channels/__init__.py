from .dto import ChannelProfileOut, VideoOwnerOut, WatchedVideoOut
from .service import ChannelService

__all__ = ["ChannelProfileOut", "ChannelService", "VideoOwnerOut", "WatchedVideoOut"]
