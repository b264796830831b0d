"""Message business logic."""
from typing import List, Optional

from anonymchat.core.constants import MAX_UPLOAD_BYTES, MESSAGE_ID_PREFIX
from anonymchat.core.logging_config import get_logger
from anonymchat.core.sanitization import validate_embed_url, validate_message_content
from anonymchat.core.utils import generate_id, utc_now
from anonymchat.db.models import Attachment, FileAttachment, Message, VideoEmbed
from anonymchat.db.store import JsonFileStore, StoreKind
from anonymchat.db.uploads import IncomingFile, UploadStorage, validate_attachment
from anonymchat.services._records import find_record, parse_records, sort_by_timestamp

logger = get_logger(__name__)


def list_all_messages(store: JsonFileStore) -> List[Message]:
    """Every message, top-level and replies, newest first."""
    messages = parse_records(Message, store.read(StoreKind.MESSAGES))
    return sort_by_timestamp(messages, newest_first=True)


def list_top_level_messages(store: JsonFileStore) -> List[Message]:
    """Messages without a parent, newest first."""
    return [message for message in list_all_messages(store) if not message.is_reply]


def list_replies(store: JsonFileStore, parent_id: str) -> List[Message]:
    """Replies to ``parent_id`` in conversational (oldest first) order."""
    replies = [message for message in list_all_messages(store) if message.parent_id == parent_id]
    return sort_by_timestamp(replies, newest_first=False)


def get_message(store: JsonFileStore, message_id: str) -> Optional[Message]:
    record = find_record(store.read(StoreKind.MESSAGES), message_id)
    return Message.model_validate(record) if record else None


def build_attachment(
    upload_storage: UploadStorage,
    video_embed_url: Optional[str] = None,
    upload: Optional[IncomingFile] = None,
    file_preview: Optional[str] = None,
    max_bytes: int = MAX_UPLOAD_BYTES,
) -> Optional[Attachment]:
    """
    Resolve the attachment for a new message.

    A non-empty video URL wins and any uploaded file is ignored. Otherwise a
    non-empty upload is validated and written to disk. The client preview is
    only kept for images.
    """
    if video_embed_url and video_embed_url.strip():
        return VideoEmbed(video_embed_url=validate_embed_url(video_embed_url))

    if upload is None or upload.size == 0:
        return None

    validate_attachment(upload.content_type, upload.size, max_bytes=max_bytes)

    file_url = upload_storage.save_attachment(upload.filename, upload.data)
    is_image = upload.content_type.startswith("image/")
    return FileAttachment(
        file_url=file_url,
        file_name=upload.filename,
        file_type=upload.content_type,
        file_preview=file_preview if is_image and file_preview else None,
    )


def create_message(
    store: JsonFileStore,
    nickname: str,
    content: str,
    parent_id: Optional[str] = None,
    attachment: Optional[Attachment] = None,
    ip_address: Optional[str] = None,
) -> Message:
    """
    Create a message, or a reply when ``parent_id`` is given.

    Replies must target an existing top-level message. The parent's reply
    counter is bumped in the same rewrite that stores the reply.
    """
    content = validate_message_content(content)

    with store.transaction(StoreKind.MESSAGES) as records:
        parent = None
        if parent_id:
            parent = find_record(records, parent_id)
            if parent is None:
                raise ValueError("Parent message not found")
            if parent.get("parentId"):
                raise ValueError("Replies cannot be replied to")

        message = Message(
            id=generate_id(MESSAGE_ID_PREFIX),
            nickname=nickname,
            content=content,
            timestamp=utc_now(),
            parent_id=parent_id or None,
            attachment=attachment,
            ip_address=ip_address,
        )
        records.append(message.to_record())

        if parent is not None:
            parent["replyCount"] = int(parent.get("replyCount") or 0) + 1

    logger.info("message_created", message_id=message.id, parent_id=message.parent_id)
    return message


def increment_reposts(store: JsonFileStore, message_id: str) -> Optional[Message]:
    """Bump the repost counter. Returns None when the message does not exist."""
    with store.transaction(StoreKind.MESSAGES) as records:
        record = find_record(records, message_id)
        if record is None:
            return None
        record["reposts"] = int(record.get("reposts") or 0) + 1

    return Message.model_validate(record)


def delete_message(store: JsonFileStore, upload_storage: UploadStorage, message_id: str) -> bool:
    """
    Delete a message.

    Deleting a top-level message removes its replies too. Deleting a reply
    decrements the parent's reply counter (never below zero). Uploaded files
    of every removed message are deleted afterwards on a best-effort basis.

    Returns:
        False if the message does not exist
    """
    with store.transaction(StoreKind.MESSAGES) as records:
        target = find_record(records, message_id)
        if target is None:
            return False

        doomed = {message_id}
        parent_id = target.get("parentId")
        if parent_id:
            parent = find_record(records, parent_id)
            if parent is not None:
                parent["replyCount"] = max(0, int(parent.get("replyCount") or 0) - 1)
        else:
            doomed.update(record.get("id") for record in records if record.get("parentId") == message_id)

        removed = [record for record in records if record.get("id") in doomed]
        records[:] = [record for record in records if record.get("id") not in doomed]

    logger.info("message_deleted", message_id=message_id, removed=len(removed))

    for record in removed:
        if record.get("fileUrl"):
            upload_storage.delete(record["fileUrl"])

    return True
