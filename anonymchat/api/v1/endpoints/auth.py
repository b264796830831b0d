"""Authentication endpoints.

Forum users identify with a plain nickname cookie (no password). Admins log
in with the configured username/password and receive a signed JWT cookie.
"""
import logging

from fastapi import APIRouter, HTTPException, Request, Response

from anonymchat.schemas import AdminLoginRequest, NicknameRequest, SuccessResponse
from anonymchat.core.security import verify_admin_credentials, create_access_token
from anonymchat.core.constants import ADMIN_COOKIE, NICKNAME_COOKIE, NICKNAME_COOKIE_MAX_AGE
from anonymchat.core.rate_limit import limiter, RATE_LIMITS
from anonymchat.core import config

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/nickname", response_model=SuccessResponse)
@limiter.limit(RATE_LIMITS["set_nickname"])
async def set_nickname(request: Request, payload: NicknameRequest, response: Response) -> SuccessResponse:
    """
    Choose the nickname used to post messages.

    The nickname is stored in a plain httpOnly cookie for one week. It is not
    unique and not verified; anyone can pick any nickname.

    Example:
        Request:
            POST /api/v1/auth/nickname
            {"nickname": "anon42"}

        Response (200):
            {"success": true, "message": "Nickname set"}
            Set-Cookie: nickname=anon42; HttpOnly; Max-Age=604800; SameSite=Lax

        Response (422):
            nickname shorter than 3 or longer than 20 characters
    """
    response.set_cookie(
        key=NICKNAME_COOKIE,
        value=payload.nickname,
        httponly=True,
        secure=config.settings.ENVIRONMENT == "production",
        samesite="lax",
        max_age=NICKNAME_COOKIE_MAX_AGE,
        path="/",
    )
    return SuccessResponse(success=True, message="Nickname set")


@router.post("/signout", response_model=SuccessResponse)
async def sign_out(response: Response) -> SuccessResponse:
    """Forget the nickname cookie."""
    response.delete_cookie(key=NICKNAME_COOKIE, path="/")
    return SuccessResponse(success=True, message="Signed out")


@router.post("/admin/login", response_model=SuccessResponse)
@limiter.limit(RATE_LIMITS["admin_login"])
async def admin_login(request: Request, credentials: AdminLoginRequest, response: Response) -> SuccessResponse:
    """
    Authenticate the admin and set a JWT in an httpOnly cookie.

    Credentials are compared with ADMIN_USERNAME / ADMIN_PASSWORD. The
    password may be stored as an Argon2 hash (see hash_password.py).

    Example:
        Request:
            POST /api/v1/auth/admin/login
            {"username": "admin", "password": "your-secure-password"}

        Response (200):
            {"success": true, "message": "Logged in successfully"}
            Set-Cookie: admin_token=eyJhbGc...; HttpOnly; SameSite=Lax

        Response (401):
            {"detail": "Invalid username or password"}
    """
    if not verify_admin_credentials(credentials.username, credentials.password):
        logger.warning("Failed admin login attempt")
        raise HTTPException(status_code=401, detail="Invalid username or password")

    access_token = create_access_token(data={"is_admin": True})

    response.set_cookie(
        key=ADMIN_COOKIE,
        value=access_token,
        httponly=True,
        secure=config.settings.ENVIRONMENT == "production",
        samesite="lax",
        max_age=config.settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        path="/",
    )

    return SuccessResponse(success=True, message="Logged in successfully")


@router.post("/admin/logout", response_model=SuccessResponse)
async def admin_logout(response: Response) -> SuccessResponse:
    """Clear the admin cookie. Safe to call when not logged in."""
    response.delete_cookie(key=ADMIN_COOKIE, path="/")
    return SuccessResponse(success=True, message="Logged out successfully")
