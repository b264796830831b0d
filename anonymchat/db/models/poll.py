"""Poll model."""
from typing import List, Optional

from pydantic import Field

from anonymchat.db.models.base import StoredModel, Timestamp


class PollOption(StoredModel):
    id: str
    text: str
    votes: int = Field(default=0, ge=0)


class Poll(StoredModel):
    """Poll with an ordered option list; ``total_votes`` mirrors the option sum."""

    id: str
    nickname: str
    question: str
    options: List[PollOption]
    timestamp: Timestamp
    total_votes: int = Field(default=0, ge=0)
    ip_address: Optional[str] = None

    def find_option(self, option_id: str) -> Optional[PollOption]:
        return next((option for option in self.options if option.id == option_id), None)

    @property
    def counted_votes(self) -> int:
        return sum(option.votes for option in self.options)
