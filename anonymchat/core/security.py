"""Security and authentication utilities."""
import hmac
from datetime import datetime, timedelta, timezone
from typing import Optional
import argon2
import jwt
from fastapi import HTTPException, Request

from anonymchat.core import config
from anonymchat.core.constants import ADMIN_COOKIE

ph = argon2.PasswordHasher(
    time_cost=2,
    memory_cost=65536,
    parallelism=1,
    hash_len=32,
    salt_len=16
)


def get_password_hash(password: str) -> str:
    """Hash a password using Argon2."""
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its Argon2 hash."""
    try:
        ph.verify(password_hash, password)
        return True
    except argon2.exceptions.VerifyMismatchError:
        return False
    except argon2.exceptions.InvalidHashError:
        return False


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=config.settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, config.settings.SECRET_KEY, algorithm=config.settings.ALGORITHM)


def decode_admin_token(token: Optional[str]) -> Optional[dict]:
    """Return the admin token payload, or None when missing, invalid or not an admin token."""
    if not token:
        return None
    try:
        payload = jwt.decode(token, config.settings.SECRET_KEY, algorithms=[config.settings.ALGORITHM])
    except jwt.PyJWTError:
        return None
    if not payload.get("is_admin"):
        return None
    return payload


def verify_admin_token(request: Request) -> dict:
    """Verify JWT token from cookie and return payload."""
    token = request.cookies.get(ADMIN_COOKIE)

    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        payload = jwt.decode(token, config.settings.SECRET_KEY, algorithms=[config.settings.ALGORITHM])
        if not payload.get("is_admin"):
            raise HTTPException(status_code=403, detail="Not authorized")
        return payload
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.PyJWTError:
        raise HTTPException(status_code=401, detail="Invalid token")


def verify_admin_credentials(username: str, password: str) -> bool:
    """Check a username/password pair against the configured admin account.

    ADMIN_PASSWORD may be an Argon2 hash (recommended, see hash_password.py)
    or plaintext for local development.
    """
    settings = config.settings
    if not hmac.compare_digest(username.encode(), settings.ADMIN_USERNAME.encode()):
        return False

    stored_password = settings.ADMIN_PASSWORD
    if stored_password.startswith("$argon2"):
        return verify_password(password, stored_password)
    return hmac.compare_digest(password.encode(), stored_password.encode())
