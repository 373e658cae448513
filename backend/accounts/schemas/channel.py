"""Channel read-model schemas."""

from __future__ import annotations

from marshmallow import Schema, fields


class ChannelProfileSchema(Schema):
    id = fields.Integer()
    full_name = fields.String(data_key="fullName")
    username = fields.String()
    email = fields.String()
    avatar = fields.String()
    cover_image = fields.String(data_key="coverImage")
    subscribers_count = fields.Integer(data_key="subscribersCount")
    channels_subscribed_to_count = fields.Integer(data_key="channelsSubscribedToCount")
    is_subscribed = fields.Boolean(data_key="isSubscribed")


class VideoOwnerSchema(Schema):
    full_name = fields.String(data_key="fullName")
    username = fields.String()
    avatar = fields.String()


class WatchedVideoSchema(Schema):
    """One watched video with its owner card."""

    id = fields.Integer()
    title = fields.String()
    description = fields.String()
    video_file = fields.String(data_key="videoFile")
    thumbnail = fields.String()
    duration = fields.Float()
    views = fields.Integer()
    watched_at = fields.DateTime(data_key="watchedAt", allow_none=True)
    owner = fields.Nested(VideoOwnerSchema)
