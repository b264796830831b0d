"""Storage for uploaded attachments and background GIFs.

Files are written under a public directory served at ``url_prefix``. Stored
names never reuse the client's name verbatim:

- attachments: ``<basename>-<epoch-millis>-<random>.<ext>``
- backgrounds: ``userbg-<nickname>-<epoch-millis>-<random>.gif``
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from anonymchat.core.constants import (
    ALLOWED_ATTACHMENT_TYPES,
    BACKGROUND_FILE_PREFIX,
    BACKGROUND_GIF_TYPE,
    MAX_UPLOAD_BYTES,
)
from anonymchat.core.logging_config import get_logger
from anonymchat.core.sanitization import safe_filename_part
from anonymchat.core.utils import now_millis, random_suffix

logger = get_logger(__name__)


@dataclass
class IncomingFile:
    """An uploaded file already read into memory."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


def validate_attachment(content_type: Optional[str], size: int, max_bytes: int = MAX_UPLOAD_BYTES) -> None:
    """Reject attachments that are too large or of an unsupported type."""
    if size > max_bytes:
        raise ValueError(f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB")

    content_type = (content_type or "").lower()
    if not (content_type.startswith("image/") or content_type in ALLOWED_ATTACHMENT_TYPES):
        raise ValueError("Unsupported file type. Allowed: images, PDF, Word documents and plain text")


def validate_background_gif(content_type: Optional[str], size: int, max_bytes: int = MAX_UPLOAD_BYTES) -> None:
    if (content_type or "").lower() != BACKGROUND_GIF_TYPE:
        raise ValueError("Background image must be a GIF file")
    if size > max_bytes:
        raise ValueError(f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB")


class UploadStorage:
    """Writes uploaded bytes to disk and maps them to public URLs."""

    def __init__(self, root: Union[str, Path], url_prefix: str = "/uploads"):
        self.root = Path(root)
        self.url_prefix = "/" + url_prefix.strip("/")

    def _write(self, filename: str, data: bytes) -> str:
        self.root.mkdir(parents=True, exist_ok=True)
        (self.root / filename).write_bytes(data)
        url = f"{self.url_prefix}/{filename}"
        logger.info("upload_stored", url=url, size=len(data))
        return url

    def save_attachment(self, original_name: str, data: bytes) -> str:
        """Persist a message attachment and return its public URL."""
        stem, ext = os.path.splitext(os.path.basename(original_name or ""))
        ext = safe_filename_part(ext, fallback="").lstrip(".")
        filename = f"{safe_filename_part(stem)}-{now_millis()}-{random_suffix(9)}"
        if ext:
            filename = f"{filename}.{ext}"
        return self._write(filename, data)

    def save_background(self, nickname: str, data: bytes) -> str:
        """Persist a nickname's background GIF and return its public URL."""
        owner = safe_filename_part(nickname, fallback="user")
        filename = f"{BACKGROUND_FILE_PREFIX}-{owner}-{now_millis()}-{random_suffix(9)}.gif"
        return self._write(filename, data)

    def path_for_url(self, url: Optional[str]) -> Optional[Path]:
        """Map a URL produced by this storage back to its file, or None for foreign URLs."""
        if not url or not url.startswith(self.url_prefix + "/"):
            return None
        name = url[len(self.url_prefix) + 1:]
        if not name or name != os.path.basename(name) or name in (".", ".."):
            return None
        return self.root / name

    def delete(self, url: Optional[str]) -> bool:
        """
        Best-effort removal of a stored file.

        Returns True when a file was removed. Missing files, foreign URLs and
        OS errors are logged and reported as False.
        """
        path = self.path_for_url(url)
        if path is None:
            if url:
                logger.warning("upload_delete_skipped", url=url, reason="not a stored upload")
            return False

        try:
            path.unlink()
        except FileNotFoundError:
            logger.warning("upload_delete_missing", url=url)
            return False
        except OSError as exc:
            logger.error("upload_delete_failed", url=url, error=str(exc))
            return False

        logger.info("upload_deleted", url=url)
        return True
