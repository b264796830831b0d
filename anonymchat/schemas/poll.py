"""Poll schemas."""
from typing import List, Optional

from pydantic import Field

from anonymchat.core.constants import MAX_POLL_OPTIONS
from anonymchat.db.models import Poll, UserPreference
from anonymchat.db.models.base import Timestamp
from anonymchat.schemas.common import APIModel


class PollCreate(APIModel):
    question: str = Field(..., min_length=1, max_length=300)
    # Blank entries are dropped by the service before the 2..10 check
    options: List[str] = Field(..., max_length=MAX_POLL_OPTIONS * 2)


class VoteRequest(APIModel):
    option_id: str = Field(..., min_length=1, max_length=100)


class PollOptionDetail(APIModel):
    id: str
    text: str
    votes: int


class PollDetail(APIModel):
    id: str
    nickname: str
    question: str
    options: List[PollOptionDetail]
    timestamp: Timestamp
    total_votes: int
    author_badges: List[str] = []
    author_background_gif_url: Optional[str] = None

    @classmethod
    def from_poll(cls, poll: Poll, preference: Optional[UserPreference] = None):
        data = poll.to_record()
        if preference is not None:
            data["authorBadges"] = preference.badges
            data["authorBackgroundGifUrl"] = preference.background_gif_url
        return cls.model_validate(data)


class AdminPollDetail(PollDetail):
    ip_address: Optional[str] = None
