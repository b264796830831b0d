"""Message schemas."""
from typing import List, Optional

from anonymchat.db.models import Message, UserPreference
from anonymchat.db.models.base import Timestamp
from anonymchat.schemas.common import APIModel


class MessageDetail(APIModel):
    """Message as shown in the public feed, decorated with its author's preferences."""

    id: str
    nickname: str
    content: str
    timestamp: Timestamp
    parent_id: Optional[str] = None
    reposts: int
    reply_count: int
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    file_type: Optional[str] = None
    file_preview: Optional[str] = None
    video_embed_url: Optional[str] = None
    author_badges: List[str] = []
    author_background_gif_url: Optional[str] = None

    @classmethod
    def from_message(cls, message: Message, preference: Optional[UserPreference] = None):
        data = message.to_record()
        if preference is not None:
            data["authorBadges"] = preference.badges
            data["authorBackgroundGifUrl"] = preference.background_gif_url
        return cls.model_validate(data)


class AdminMessageDetail(MessageDetail):
    """Message with moderation data."""

    ip_address: Optional[str] = None
