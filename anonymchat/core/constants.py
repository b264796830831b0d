"""Application constants.

This module contains magic strings and numbers used throughout the application.
Centralizing these values makes them easier to maintain and modify.
"""

# Badges
# Fixed vocabulary an admin can attach to a nickname
AVAILABLE_BADGES = ("admin", "mod", "negro")

# Poll Options
MIN_POLL_OPTIONS = 2
MAX_POLL_OPTIONS = 10

# Nicknames
NICKNAME_MIN_LENGTH = 3
NICKNAME_MAX_LENGTH = 20

# Author recorded on polls created from the admin panel
ADMIN_POLL_AUTHOR = "Admin"

# Cookies
NICKNAME_COOKIE = "nickname"
ADMIN_COOKIE = "admin_token"
NICKNAME_COOKIE_MAX_AGE = 60 * 60 * 24 * 7  # 1 week

# JWT Token Configuration
# Admin session expiration time in minutes (1 day)
ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 24

# Uploads
MAX_UPLOAD_BYTES = 5 * 1024 * 1024  # 5MB
ALLOWED_ATTACHMENT_TYPES = (
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
)
BACKGROUND_GIF_TYPE = "image/gif"
BACKGROUND_FILE_PREFIX = "userbg"

# ID prefixes
MESSAGE_ID_PREFIX = "msg"
POLL_ID_PREFIX = "poll"
OPTION_ID_PREFIX = "opt"
