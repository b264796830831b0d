"""Shared API dependencies."""
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Request

from anonymchat.core.constants import ADMIN_COOKIE, NICKNAME_COOKIE
from anonymchat.core.rate_limit import get_client_ip
from anonymchat.core.security import decode_admin_token, verify_admin_token
from anonymchat.db import get_store, get_upload_storage


@dataclass(frozen=True)
class Identity:
    """Who is making the request, resolved once from cookies and headers."""

    nickname: Optional[str]
    is_admin: bool
    ip_address: Optional[str]


def get_identity(request: Request) -> Identity:
    nickname = (request.cookies.get(NICKNAME_COOKIE) or "").strip() or None
    return Identity(
        nickname=nickname,
        is_admin=decode_admin_token(request.cookies.get(ADMIN_COOKIE)) is not None,
        ip_address=get_client_ip(request),
    )


def require_nickname(identity: Identity = Depends(get_identity)) -> Identity:
    """Identity of a user who has picked a nickname; 401 otherwise."""
    if not identity.nickname:
        raise HTTPException(
            status_code=401,
            detail="User not authenticated. Please set a nickname and make sure cookies are enabled.",
        )
    return identity


__all__ = [
    "Identity",
    "get_identity",
    "require_nickname",
    "get_store",
    "get_upload_storage",
    "verify_admin_token",
]
