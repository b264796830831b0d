"""Authentication schemas."""
from pydantic import BaseModel, Field, field_validator

from anonymchat.core.sanitization import sanitize_nickname


class NicknameRequest(BaseModel):
    nickname: str = Field(..., max_length=100)

    @field_validator('nickname')
    @classmethod
    def sanitize_nickname_field(cls, v: str) -> str:
        return sanitize_nickname(v)


class AdminLoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
