"""Unit tests for message service."""
from datetime import datetime, timedelta, timezone

import pytest

from anonymchat.db.models import FileAttachment, VideoEmbed
from anonymchat.db.store import StoreKind
from anonymchat.db.uploads import IncomingFile
from anonymchat.services.message import (
    build_attachment,
    create_message,
    delete_message,
    get_message,
    increment_reposts,
    list_all_messages,
    list_replies,
    list_top_level_messages,
)

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def _stored_reply_count(store, message_id):
    return get_message(store, message_id).reply_count


@pytest.mark.unit
class TestMessageCreation:

    def test_create_message_success(self, store):
        message = create_message(store, "anon", "Hello world")

        assert message.id.startswith("msg_")
        assert message.nickname == "anon"
        assert message.content == "Hello world"
        assert message.reposts == 0
        assert message.reply_count == 0
        assert message.parent_id is None
        assert message.timestamp.tzinfo is not None
        assert get_message(store, message.id) == message

    @pytest.mark.parametrize("content", ["", "   ", "\n\t "])
    def test_create_message_empty_content(self, store, content):
        with pytest.raises(ValueError, match="Message content cannot be empty"):
            create_message(store, "anon", content)

        assert store.read(StoreKind.MESSAGES) == []

    def test_ids_are_unique(self, store):
        ids = {create_message(store, "anon", f"message {i}").id for i in range(30)}
        assert len(ids) == 30

    def test_ip_address_recorded(self, store):
        message = create_message(store, "anon", "hi", ip_address="203.0.113.9")

        assert get_message(store, message.id).ip_address == "203.0.113.9"


@pytest.mark.unit
class TestReplies:

    def test_reply_increments_parent_count(self, store):
        """Create A, reply B to A: A.replyCount == 1 and replies(A) == [B]."""
        a = create_message(store, "anon", "A")
        b = create_message(store, "other", "B", parent_id=a.id)

        assert _stored_reply_count(store, a.id) == 1
        assert list_replies(store, a.id) == [b]

    def test_replies_are_oldest_first(self, store):
        a = create_message(store, "anon", "A")
        replies = [create_message(store, "anon", f"reply {i}", parent_id=a.id) for i in range(5)]

        assert [r.id for r in list_replies(store, a.id)] == [r.id for r in replies]
        assert _stored_reply_count(store, a.id) == 5

    def test_reply_to_missing_parent_rejected(self, store):
        with pytest.raises(ValueError, match="Parent message not found"):
            create_message(store, "anon", "orphan", parent_id="msg_0_missing")

        assert store.read(StoreKind.MESSAGES) == []

    def test_reply_to_reply_rejected(self, store):
        a = create_message(store, "anon", "A")
        b = create_message(store, "anon", "B", parent_id=a.id)

        with pytest.raises(ValueError, match="Replies cannot be replied to"):
            create_message(store, "anon", "C", parent_id=b.id)

        assert _stored_reply_count(store, b.id) == 0
        assert _stored_reply_count(store, a.id) == 1

    def test_list_replies_unknown_parent(self, store):
        create_message(store, "anon", "A")
        assert list_replies(store, "msg_unknown") == []


@pytest.mark.unit
class TestListing:

    def test_top_level_newest_first_without_replies(self, store):
        first = create_message(store, "anon", "first")
        second = create_message(store, "anon", "second")
        create_message(store, "anon", "reply", parent_id=first.id)

        assert [m.id for m in list_top_level_messages(store)] == [second.id, first.id]

    def test_all_messages_includes_replies(self, store):
        a = create_message(store, "anon", "A")
        b = create_message(store, "anon", "B", parent_id=a.id)

        assert [m.id for m in list_all_messages(store)] == [b.id, a.id]

    def test_sorting_uses_timestamps_not_file_order(self, store):
        now = datetime.now(timezone.utc)
        store.write(StoreKind.MESSAGES, [
            {"id": "msg_old", "nickname": "a", "content": "old",
             "timestamp": (now - timedelta(days=1)).isoformat()},
            {"id": "msg_new", "nickname": "a", "content": "new", "timestamp": now.isoformat()},
            {"id": "msg_mid", "nickname": "a", "content": "mid",
             "timestamp": (now - timedelta(hours=1)).isoformat()},
        ])

        assert [m.id for m in list_top_level_messages(store)] == ["msg_new", "msg_mid", "msg_old"]

    def test_malformed_records_are_skipped(self, store):
        store.write(StoreKind.MESSAGES, [
            {"id": "msg_broken"},
            {"id": "msg_ok", "nickname": "a", "content": "ok", "timestamp": "2024-01-01T00:00:00Z"},
        ])

        assert [m.id for m in list_all_messages(store)] == ["msg_ok"]

    def test_legacy_attachment_without_type_is_listed(self, store):
        store.write(StoreKind.MESSAGES, [
            {"id": "msg_old", "nickname": "a", "content": "pic", "timestamp": "2024-01-01T00:00:00Z",
             "fileUrl": "/uploads/pic-1-2.gif"},
        ])

        [message] = list_all_messages(store)

        assert message.attachment.file_type == "image/gif"

    def test_non_object_entries_do_not_break_operations(self, store, upload_storage):
        store.data_dir.mkdir(parents=True)
        store.path_for(StoreKind.MESSAGES).write_text(
            '[1, {"id": "msg_2", "nickname": "a", "content": "ok", "timestamp": "2024-01-01T00:00:00Z"}]',
            encoding="utf-8",
        )

        assert [m.id for m in list_all_messages(store)] == ["msg_2"]

        reply = create_message(store, "anon", "reply", parent_id="msg_2")
        assert get_message(store, "msg_2").reply_count == 1
        assert increment_reposts(store, "msg_2").reposts == 1
        assert delete_message(store, upload_storage, reply.id) is True


@pytest.mark.unit
class TestReposts:

    def test_repost_three_times(self, store):
        a = create_message(store, "anon", "A")

        for _ in range(3):
            updated = increment_reposts(store, a.id)

        assert updated.reposts == 3
        assert get_message(store, a.id).reposts == 3

    def test_repost_unknown_message(self, store):
        assert increment_reposts(store, "msg_missing") is None


@pytest.mark.unit
class TestDeletion:

    def test_delete_top_level_cascades_to_replies(self, store, upload_storage):
        a = create_message(store, "anon", "A")
        create_message(store, "anon", "B", parent_id=a.id)
        create_message(store, "anon", "C", parent_id=a.id)
        other = create_message(store, "anon", "other")

        assert delete_message(store, upload_storage, a.id) is True

        assert [m.id for m in list_all_messages(store)] == [other.id]
        assert list_replies(store, a.id) == []

    def test_delete_reply_decrements_parent(self, store, upload_storage):
        a = create_message(store, "anon", "A")
        b = create_message(store, "anon", "B", parent_id=a.id)
        c = create_message(store, "anon", "C", parent_id=a.id)

        assert delete_message(store, upload_storage, b.id) is True

        assert _stored_reply_count(store, a.id) == 1
        assert list_replies(store, a.id) == [c]

    def test_delete_reply_count_floors_at_zero(self, store, upload_storage):
        a = create_message(store, "anon", "A")
        b = create_message(store, "anon", "B", parent_id=a.id)

        # Simulate drift: counter already zero although a reply exists
        with store.transaction(StoreKind.MESSAGES) as records:
            next(r for r in records if r["id"] == a.id)["replyCount"] = 0

        assert delete_message(store, upload_storage, b.id) is True
        assert _stored_reply_count(store, a.id) == 0

    def test_delete_unknown_message(self, store, upload_storage):
        create_message(store, "anon", "A")
        assert delete_message(store, upload_storage, "msg_missing") is False
        assert len(list_all_messages(store)) == 1

    def test_delete_removes_uploaded_files(self, store, upload_storage):
        attachment = build_attachment(
            upload_storage, upload=IncomingFile("cat.png", "image/png", PNG_BYTES)
        )
        a = create_message(store, "anon", "A", attachment=attachment)
        reply_attachment = build_attachment(
            upload_storage, upload=IncomingFile("notes.txt", "text/plain", b"notes")
        )
        create_message(store, "anon", "B", parent_id=a.id, attachment=reply_attachment)

        paths = [upload_storage.path_for_url(att.file_url) for att in (attachment, reply_attachment)]
        assert all(path.exists() for path in paths)

        delete_message(store, upload_storage, a.id)

        assert not any(path.exists() for path in paths)

    def test_delete_succeeds_when_file_already_gone(self, store, upload_storage):
        attachment = build_attachment(
            upload_storage, upload=IncomingFile("cat.png", "image/png", PNG_BYTES)
        )
        a = create_message(store, "anon", "A", attachment=attachment)
        upload_storage.path_for_url(attachment.file_url).unlink()

        assert delete_message(store, upload_storage, a.id) is True


@pytest.mark.unit
class TestAttachments:

    def test_no_attachment(self, upload_storage):
        assert build_attachment(upload_storage) is None
        assert build_attachment(upload_storage, video_embed_url="  ") is None

    def test_empty_upload_ignored(self, upload_storage):
        assert build_attachment(upload_storage, upload=IncomingFile("a.png", "image/png", b"")) is None

    def test_video_takes_precedence_over_file(self, upload_storage):
        attachment = build_attachment(
            upload_storage,
            video_embed_url="https://www.youtube.com/watch?v=abc",
            upload=IncomingFile("cat.png", "image/png", PNG_BYTES),
            file_preview="data:image/png;base64,AAAA",
        )

        assert isinstance(attachment, VideoEmbed)
        assert not upload_storage.root.exists() or list(upload_storage.root.iterdir()) == []

    def test_video_url_must_be_http(self, upload_storage):
        with pytest.raises(ValueError, match="http or https"):
            build_attachment(upload_storage, video_embed_url="javascript:alert(1)")

    def test_image_upload_keeps_preview(self, upload_storage):
        attachment = build_attachment(
            upload_storage,
            upload=IncomingFile("my cat.png", "image/png", PNG_BYTES),
            file_preview="data:image/png;base64,AAAA",
        )

        assert isinstance(attachment, FileAttachment)
        assert attachment.file_name == "my cat.png"
        assert attachment.file_type == "image/png"
        assert attachment.file_preview == "data:image/png;base64,AAAA"
        assert attachment.file_url.startswith("/uploads/my-cat-")
        assert attachment.file_url.endswith(".png")
        assert upload_storage.path_for_url(attachment.file_url).read_bytes() == PNG_BYTES

    def test_non_image_upload_drops_preview(self, upload_storage):
        attachment = build_attachment(
            upload_storage,
            upload=IncomingFile("doc.pdf", "application/pdf", b"%PDF-1.4"),
            file_preview="data:image/png;base64,AAAA",
        )

        assert attachment.file_preview is None

    def test_unsupported_type_rejected(self, upload_storage):
        with pytest.raises(ValueError, match="Unsupported file type"):
            build_attachment(upload_storage, upload=IncomingFile("run.exe", "application/x-msdownload", b"MZ"))

    def test_oversized_upload_rejected(self, upload_storage):
        with pytest.raises(ValueError, match="File too large"):
            build_attachment(
                upload_storage,
                upload=IncomingFile("big.png", "image/png", b"x" * 2048),
                max_bytes=1024,
            )
