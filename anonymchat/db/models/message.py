"""Message model."""
import mimetypes
import posixpath
from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import Field, model_serializer, model_validator

from anonymchat.db.models.base import StoredModel, Timestamp

_FILE_FIELDS = ("fileUrl", "fileName", "fileType", "filePreview")
_VIDEO_FIELDS = ("videoEmbedUrl",)
_SNAKE_ALIASES = {
    "file_url": "fileUrl",
    "file_name": "fileName",
    "file_type": "fileType",
    "file_preview": "filePreview",
    "video_embed_url": "videoEmbedUrl",
}


class FileAttachment(StoredModel):
    """Uploaded file stored under the public uploads directory."""

    kind: Literal["file"] = "file"
    file_url: str
    file_name: str
    file_type: str
    # Client-side data URI for instant image display; fileUrl is authoritative
    file_preview: Optional[str] = None

    @property
    def is_image(self) -> bool:
        return self.file_type.startswith("image/")


class VideoEmbed(StoredModel):
    """Link to an externally hosted video."""

    kind: Literal["video"] = "video"
    video_embed_url: str


Attachment = Annotated[Union[FileAttachment, VideoEmbed], Field(discriminator="kind")]


class Message(StoredModel):
    """
    Forum message or reply.

    A message with ``parent_id`` is a reply; replies only ever point at
    top-level messages. The attachment is a tagged union so a message carries
    a file or a video link, never both. On disk and on the wire it is flattened
    into the ``fileUrl``/``fileName``/``fileType``/``filePreview`` or
    ``videoEmbedUrl`` fields.
    """

    id: str
    nickname: str
    content: str
    timestamp: Timestamp
    parent_id: Optional[str] = None
    reposts: int = Field(default=0, ge=0)
    reply_count: int = Field(default=0, ge=0)
    attachment: Optional[Attachment] = None
    ip_address: Optional[str] = None

    @property
    def is_reply(self) -> bool:
        return self.parent_id is not None

    @model_validator(mode="before")
    @classmethod
    def _fold_attachment_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict) or data.get("attachment") is not None:
            return data

        data = {_SNAKE_ALIASES.get(key, key): value for key, value in data.items()}
        video = {key: data.pop(key) for key in _VIDEO_FIELDS if key in data}
        file = {key: data.pop(key) for key in _FILE_FIELDS if key in data}

        if video.get("videoEmbedUrl"):
            data["attachment"] = {"kind": "video", **video}
        elif file.get("fileUrl"):
            # Older records may carry only the URL
            url = file["fileUrl"]
            if not file.get("fileName"):
                file["fileName"] = posixpath.basename(url) or "file"
            if not file.get("fileType"):
                file["fileType"] = mimetypes.guess_type(url)[0] or "application/octet-stream"
            data["attachment"] = {"kind": "file", **file}
        return data

    @model_serializer(mode="wrap")
    def _flatten_attachment(self, handler) -> Dict[str, Any]:
        data = handler(self)
        attachment = data.pop("attachment", None)
        if attachment:
            attachment.pop("kind", None)
            data.update(attachment)
        return data
