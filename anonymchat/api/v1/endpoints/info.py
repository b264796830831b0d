"""Static information page."""
import logging
from pathlib import Path

from fastapi import APIRouter

from anonymchat.core import config
from anonymchat.schemas import ImportantInfo

logger = logging.getLogger(__name__)
router = APIRouter()

FALLBACK_INFO = "Could not load important information. Please check server logs."


@router.get("/important", response_model=ImportantInfo)
async def get_important_info():
    """Text of the "important information" page, read from IMPORTANT_INFO_PATH."""
    path = Path(config.settings.IMPORTANT_INFO_PATH)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        logger.error(f"Failed to read important info from {path}: {e}")
        content = FALLBACK_INFO
    return ImportantInfo(content=content)
