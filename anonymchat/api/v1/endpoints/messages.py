"""Message endpoints."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile

from anonymchat.api.deps import Identity, get_store, get_upload_storage, require_nickname
from anonymchat.api.presenters import present_messages
from anonymchat.core import config
from anonymchat.core.cache import invalidate_feed
from anonymchat.core.rate_limit import limiter, RATE_LIMITS
from anonymchat.core.sanitization import validate_message_content
from anonymchat.db.models import FileAttachment
from anonymchat.db.store import JsonFileStore
from anonymchat.db.uploads import IncomingFile, UploadStorage
from anonymchat.schemas import ErrorResponse, MessageDetail
from anonymchat.services import (
    build_attachment,
    create_message,
    get_user_preference,
    increment_reposts,
    list_replies,
    list_top_level_messages,
    preference_lookup,
)

logger = logging.getLogger(__name__)
router = APIRouter()


async def _read_upload(file: Optional[UploadFile], max_bytes: int) -> Optional[IncomingFile]:
    """Read an optional multipart file; one byte past the limit is enough to reject it."""
    if file is None or not file.filename:
        return None
    data = await file.read(max_bytes + 1)
    return IncomingFile(
        filename=file.filename,
        content_type=file.content_type or "application/octet-stream",
        data=data,
    )


@router.get("", response_model=List[MessageDetail])
async def get_feed(store: JsonFileStore = Depends(get_store)):
    """
    Latest top-level messages, newest first.

    Each message carries its author's badges and background GIF. Replies are
    fetched per message through ``/messages/{id}/replies``.
    """
    return present_messages(list_top_level_messages(store), preference_lookup(store))


@router.get("/{message_id}/replies", response_model=List[MessageDetail])
async def get_replies(message_id: str, store: JsonFileStore = Depends(get_store)):
    """Replies to a message, oldest first. Unknown ids yield an empty list."""
    return present_messages(list_replies(store, message_id), preference_lookup(store))


@router.post(
    "",
    response_model=MessageDetail,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
@limiter.limit(RATE_LIMITS["post_message"])
async def post_message(
    request: Request,
    content: str = Form(""),
    parent_id: Optional[str] = Form(None, alias="parentId"),
    video_embed_url: Optional[str] = Form(None, alias="videoEmbedUrl"),
    file_preview: Optional[str] = Form(None, alias="filePreview"),
    file: Optional[UploadFile] = File(None),
    identity: Identity = Depends(require_nickname),
    store: JsonFileStore = Depends(get_store),
    upload_storage: UploadStorage = Depends(get_upload_storage),
):
    """
    Post a top-level message, or a reply when ``parentId`` is set.

    Multipart form fields:
        content: message text (required, not blank)
        parentId: id of the top-level message being replied to
        videoEmbedUrl: external video link; takes precedence over ``file``
        file: single attachment (images, PDF, Word, plain text; 5MB max)
        filePreview: data URI shown for image attachments until the upload
            URL is used

    Response (400):
        {"detail": "Message content cannot be empty"}

    Response (401):
        no nickname cookie
    """
    max_bytes = config.settings.MAX_UPLOAD_BYTES
    attachment = None
    try:
        content = validate_message_content(content)
        upload = await _read_upload(file, max_bytes)
        attachment = build_attachment(
            upload_storage,
            video_embed_url=video_embed_url,
            upload=upload,
            file_preview=file_preview,
            max_bytes=max_bytes,
        )
        message = create_message(
            store,
            nickname=identity.nickname,
            content=content,
            parent_id=parent_id or None,
            attachment=attachment,
            ip_address=identity.ip_address,
        )
    except ValueError as e:
        if isinstance(attachment, FileAttachment):
            upload_storage.delete(attachment.file_url)
        raise HTTPException(status_code=400, detail=str(e))
    except OSError:
        logger.exception("Error posting message")
        if isinstance(attachment, FileAttachment):
            upload_storage.delete(attachment.file_url)
        raise HTTPException(status_code=500, detail="Failed to post message. Please try again.")

    invalidate_feed(f"message posted, message_id={message.id}")
    return MessageDetail.from_message(message, get_user_preference(store, message.nickname))


@router.post(
    "/{message_id}/reposts",
    response_model=MessageDetail,
    responses={404: {"model": ErrorResponse}},
)
@limiter.limit(RATE_LIMITS["repost"])
async def repost_message(
    request: Request,
    message_id: str,
    identity: Identity = Depends(require_nickname),
    store: JsonFileStore = Depends(get_store),
):
    """
    Increment a message's repost counter.

    No content is duplicated and nothing stops the same user reposting
    repeatedly.
    """
    try:
        message = increment_reposts(store, message_id)
    except OSError:
        logger.exception("Error reposting message")
        raise HTTPException(status_code=500, detail="Failed to repost message.")

    if message is None:
        raise HTTPException(status_code=404, detail="Message not found or failed to repost.")

    invalidate_feed(f"message reposted, message_id={message_id}")
    return MessageDetail.from_message(message, get_user_preference(store, message.nickname))
