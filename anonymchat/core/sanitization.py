"""Input sanitization utilities."""
import re
from typing import Optional
from urllib.parse import urlparse

from anonymchat.core.constants import NICKNAME_MAX_LENGTH, NICKNAME_MIN_LENGTH


# Maximum length constraints
MAX_MESSAGE_LENGTH = 5000
MAX_POLL_QUESTION_LENGTH = 300
MAX_POLL_OPTION_LENGTH = 100
MAX_URL_LENGTH = 2048
MAX_FILENAME_STEM_LENGTH = 80


def sanitize_text(text: str, max_length: Optional[int] = None, strip_html: bool = True) -> str:
    """
    Sanitize single-line text input.

    Strips HTML tags and normalizes whitespace. Output is not HTML-escaped;
    escaping is left to whatever renders it.

    Raises:
        ValueError: If text exceeds max_length or contains HTML-like leftovers
    """
    if not isinstance(text, str):
        raise ValueError("Input must be a string")

    sanitized = text.strip()

    if max_length and len(sanitized) > max_length:
        raise ValueError(f"Input exceeds maximum length of {max_length} characters")

    if strip_html:
        sanitized = re.sub(r'<[^>]*>', '', sanitized)

    if '<' in sanitized or '>' in sanitized:
        raise ValueError("Input contains invalid HTML-like patterns")

    sanitized = re.sub(r'\s+', ' ', sanitized)

    return sanitized


def sanitize_nickname(nickname: str) -> str:
    """Validate a nickname: 3 to 20 characters after trimming, no markup."""
    sanitized = sanitize_text(nickname)

    if len(sanitized) < NICKNAME_MIN_LENGTH:
        raise ValueError(f"Nickname must be at least {NICKNAME_MIN_LENGTH} characters")
    if len(sanitized) > NICKNAME_MAX_LENGTH:
        raise ValueError(f"Nickname can be at most {NICKNAME_MAX_LENGTH} characters long")

    return sanitized


def validate_message_content(content: Optional[str]) -> str:
    """
    Validate message body text.

    Multi-line content is kept verbatim apart from surrounding whitespace.
    """
    if content is None or not content.strip():
        raise ValueError("Message content cannot be empty")

    content = content.strip()
    if len(content) > MAX_MESSAGE_LENGTH:
        raise ValueError(f"Message exceeds maximum length of {MAX_MESSAGE_LENGTH} characters")

    return content


def sanitize_poll_question(question: str) -> str:
    sanitized = sanitize_text(question or "", max_length=MAX_POLL_QUESTION_LENGTH)

    if not sanitized:
        raise ValueError("Poll question cannot be empty")

    return sanitized


def sanitize_poll_option(option: str) -> str:
    """Sanitize one poll option; blank options come back as an empty string."""
    return sanitize_text(option or "", max_length=MAX_POLL_OPTION_LENGTH)


def validate_embed_url(url: str) -> str:
    """Validate an external video URL (http/https only)."""
    url = url.strip()

    if len(url) > MAX_URL_LENGTH:
        raise ValueError(f"URL exceeds maximum length of {MAX_URL_LENGTH} characters")

    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("Video URL must be an http or https link")

    return url


def safe_filename_part(value: str, fallback: str = "file") -> str:
    """
    Reduce an arbitrary string to a filesystem-safe filename fragment.

    Keeps letters, digits, dot, dash and underscore; anything else becomes a
    dash. Path separators are dropped first so only the basename survives.
    """
    value = re.split(r'[\\/]', value or "")[-1]
    value = re.sub(r'[^A-Za-z0-9._-]+', '-', value).strip('.-')
    value = value[:MAX_FILENAME_STEM_LENGTH]
    return value or fallback
