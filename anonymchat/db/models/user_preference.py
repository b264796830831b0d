"""Per-nickname display preferences."""
from typing import List, Optional

from anonymchat.db.models.base import StoredModel


class UserPreference(StoredModel):
    nickname: str
    badges: List[str] = []
    background_gif_url: Optional[str] = None
