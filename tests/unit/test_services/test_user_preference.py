"""Unit tests for user preference service."""
import pytest

from anonymchat.db.store import StoreKind
from anonymchat.db.uploads import IncomingFile
from anonymchat.services.message import create_message
from anonymchat.services.poll import create_poll
from anonymchat.services.user_preference import (
    get_user_preference,
    list_known_nicknames,
    list_user_preferences,
    normalize_badges,
    preference_lookup,
    set_background_gif,
    upsert_user_preference,
)

GIF_BYTES = b"GIF89a" + b"\x00" * 16


@pytest.mark.unit
class TestUpsert:

    def test_creates_record(self, store, upload_storage):
        preference = upsert_user_preference(store, upload_storage, "anon", badges=["mod"])

        assert preference.nickname == "anon"
        assert preference.badges == ["mod"]
        assert preference.background_gif_url is None
        assert get_user_preference(store, "anon") == preference

    def test_create_without_fields(self, store, upload_storage):
        preference = upsert_user_preference(store, upload_storage, "anon")

        assert preference.badges == []
        assert [p.nickname for p in list_user_preferences(store)] == ["anon"]

    def test_unset_fields_are_left_alone(self, store, upload_storage):
        upsert_user_preference(store, upload_storage, "anon", badges=["admin"],
                               background_gif_url="https://example.com/a.gif")

        updated = upsert_user_preference(store, upload_storage, "anon", badges=["mod"])
        assert updated.badges == ["mod"]
        assert updated.background_gif_url == "https://example.com/a.gif"

        updated = upsert_user_preference(store, upload_storage, "anon",
                                         background_gif_url="https://example.com/b.gif")
        assert updated.badges == ["mod"]
        assert updated.background_gif_url == "https://example.com/b.gif"

    def test_none_removes_background(self, store, upload_storage):
        upsert_user_preference(store, upload_storage, "anon", background_gif_url="https://example.com/a.gif")

        updated = upsert_user_preference(store, upload_storage, "anon", background_gif_url=None)

        assert updated.background_gif_url is None
        assert "backgroundGifUrl" not in store.read(StoreKind.USER_PREFERENCES)[0]

    def test_empty_badge_list_clears_badges(self, store, upload_storage):
        upsert_user_preference(store, upload_storage, "anon", badges=["admin", "mod"])
        assert upsert_user_preference(store, upload_storage, "anon", badges=[]).badges == []

    def test_unknown_badge_rejected(self, store, upload_storage):
        with pytest.raises(ValueError, match="Unknown badge"):
            upsert_user_preference(store, upload_storage, "anon", badges=["superuser"])

        assert get_user_preference(store, "anon") is None

    def test_blank_nickname_rejected(self, store, upload_storage):
        with pytest.raises(ValueError, match="Nickname cannot be empty"):
            upsert_user_preference(store, upload_storage, "  ")

    def test_badges_normalized(self):
        assert normalize_badges(["MOD", "admin", "mod", " negro "]) == ["admin", "mod", "negro"]


@pytest.mark.unit
class TestBackgroundGif:

    def test_set_background_stores_file(self, store, upload_storage):
        preference = set_background_gif(store, upload_storage, "anon",
                                        IncomingFile("party.gif", "image/gif", GIF_BYTES))

        assert preference.background_gif_url.startswith("/uploads/userbg-anon-")
        assert preference.background_gif_url.endswith(".gif")
        assert upload_storage.path_for_url(preference.background_gif_url).read_bytes() == GIF_BYTES

    def test_replacing_background_deletes_previous_file(self, store, upload_storage):
        first = set_background_gif(store, upload_storage, "anon",
                                   IncomingFile("a.gif", "image/gif", GIF_BYTES))
        first_path = upload_storage.path_for_url(first.background_gif_url)

        second = set_background_gif(store, upload_storage, "anon",
                                    IncomingFile("b.gif", "image/gif", GIF_BYTES))

        assert not first_path.exists()
        assert upload_storage.path_for_url(second.background_gif_url).exists()

    def test_removing_background_deletes_file(self, store, upload_storage):
        preference = set_background_gif(store, upload_storage, "anon",
                                        IncomingFile("a.gif", "image/gif", GIF_BYTES))
        path = upload_storage.path_for_url(preference.background_gif_url)

        upsert_user_preference(store, upload_storage, "anon", background_gif_url=None)

        assert not path.exists()

    def test_non_gif_rejected(self, store, upload_storage):
        with pytest.raises(ValueError, match="must be a GIF"):
            set_background_gif(store, upload_storage, "anon",
                               IncomingFile("a.png", "image/png", b"\x89PNG"))

        assert get_user_preference(store, "anon") is None


@pytest.mark.unit
class TestOverlay:

    def test_known_nicknames(self, store, upload_storage):
        create_message(store, "zed", "hi")
        create_message(store, "Alice", "hi")
        create_message(store, "zed", "again")
        create_poll(store, "Q?", ["a", "b"])
        upsert_user_preference(store, upload_storage, "bob", badges=["mod"])

        assert list_known_nicknames(store) == ["Admin", "Alice", "bob", "zed"]

    def test_preference_lookup(self, store, upload_storage):
        upsert_user_preference(store, upload_storage, "anon", badges=["mod"])

        lookup = preference_lookup(store)

        assert set(lookup) == {"anon"}
        assert lookup["anon"].badges == ["mod"]
