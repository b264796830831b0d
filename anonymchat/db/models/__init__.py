"""Stored entity models."""
from anonymchat.db.models.message import Attachment, FileAttachment, Message, VideoEmbed
from anonymchat.db.models.poll import Poll, PollOption
from anonymchat.db.models.user_preference import UserPreference

__all__ = [
    "Attachment",
    "FileAttachment",
    "Message",
    "VideoEmbed",
    "Poll",
    "PollOption",
    "UserPreference",
]
