"""General utility functions."""
import secrets
import string
import time
from datetime import datetime, timezone

_ID_ALPHABET = string.ascii_lowercase + string.digits


def now_millis() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def random_suffix(length: int = 7) -> str:
    """Random lowercase base36 string."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


def generate_id(prefix: str) -> str:
    """
    Generate an opaque entity id: ``<prefix>_<epoch-millis>_<random>``.

    The millisecond timestamp plus a 7-character random suffix keeps ids
    unique across a single store without a counter file.
    """
    return f"{prefix}_{now_millis()}_{random_suffix()}"


def utc_now() -> datetime:
    """Timezone-aware current UTC time truncated to milliseconds."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def to_utc(dt: datetime) -> datetime:
    """Convert datetime to UTC timezone."""
    if dt.tzinfo is None:
        # Assume UTC if no timezone
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_timestamp(dt: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    return to_utc(dt).isoformat(timespec="milliseconds").replace("+00:00", "Z")
