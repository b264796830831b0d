"""User preference schemas."""
from typing import List, Optional

from pydantic import field_validator

from anonymchat.core.sanitization import validate_embed_url
from anonymchat.schemas.common import APIModel


class UserPreferenceDetail(APIModel):
    nickname: str
    badges: List[str] = []
    background_gif_url: Optional[str] = None


class UserPreferenceUpdate(APIModel):
    """
    Partial preference update.

    Omitted fields stay unchanged; ``backgroundGifUrl: null`` removes the
    background.
    """

    badges: Optional[List[str]] = None
    background_gif_url: Optional[str] = None

    @field_validator('background_gif_url')
    @classmethod
    def validate_background_url(cls, v: Optional[str]) -> Optional[str]:
        if v is None or v.startswith("/"):
            return v
        return validate_embed_url(v)


class KnownUser(APIModel):
    """A nickname seen on the forum with its preferences, if any."""

    nickname: str
    preference: Optional[UserPreferenceDetail] = None
