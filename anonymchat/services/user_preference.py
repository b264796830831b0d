"""User preference business logic.

Preferences are keyed by nickname and overlaid onto messages and polls at
read time, so a badge or background change applies to everything the
nickname has posted.
"""
from typing import Dict, Iterable, List, Optional, Union

from anonymchat.core.constants import AVAILABLE_BADGES, MAX_UPLOAD_BYTES
from anonymchat.core.logging_config import get_logger
from anonymchat.db.models import UserPreference
from anonymchat.db.store import JsonFileStore, StoreKind
from anonymchat.db.uploads import IncomingFile, UploadStorage, validate_background_gif
from anonymchat.services._records import parse_records

logger = get_logger(__name__)


class _Unset:
    """Marker for "leave this field unchanged"."""

    def __repr__(self) -> str:
        return "UNSET"


UNSET = _Unset()


def normalize_badges(badges: Iterable[str]) -> List[str]:
    """Validate badges against the fixed vocabulary; dedupe and order them."""
    requested = set()
    for badge in badges:
        label = (badge or "").strip().lower()
        if label not in AVAILABLE_BADGES:
            raise ValueError(f"Unknown badge: {badge!r}. Allowed: {', '.join(AVAILABLE_BADGES)}")
        requested.add(label)
    return [badge for badge in AVAILABLE_BADGES if badge in requested]


def list_user_preferences(store: JsonFileStore) -> List[UserPreference]:
    preferences = parse_records(UserPreference, store.read(StoreKind.USER_PREFERENCES))
    return sorted(preferences, key=lambda preference: preference.nickname.lower())


def get_user_preference(store: JsonFileStore, nickname: str) -> Optional[UserPreference]:
    return preference_lookup(store).get(nickname)


def preference_lookup(store: JsonFileStore) -> Dict[str, UserPreference]:
    """Map nickname -> preference for the read-time join onto messages and polls."""
    return {preference.nickname: preference for preference in list_user_preferences(store)}


def list_known_nicknames(store: JsonFileStore) -> List[str]:
    """Every nickname that has posted, authored a poll or has preferences."""
    nicknames = set()
    for kind in (StoreKind.MESSAGES, StoreKind.POLLS, StoreKind.USER_PREFERENCES):
        nicknames.update(record["nickname"] for record in store.read(kind) if record.get("nickname"))
    return sorted(nicknames, key=str.lower)


def upsert_user_preference(
    store: JsonFileStore,
    upload_storage: UploadStorage,
    nickname: str,
    badges: Union[Iterable[str], _Unset] = UNSET,
    background_gif_url: Union[Optional[str], _Unset] = UNSET,
) -> UserPreference:
    """
    Create or update the preferences of ``nickname``.

    Only fields passed explicitly change. ``background_gif_url=None`` removes
    the background. A background that is replaced or removed has its file
    deleted after the store is written.
    """
    nickname = (nickname or "").strip()
    if not nickname:
        raise ValueError("Nickname cannot be empty")

    if not isinstance(badges, _Unset):
        badges = normalize_badges(badges)

    stale_url = None
    with store.transaction(StoreKind.USER_PREFERENCES) as records:
        record = next((record for record in records if record.get("nickname") == nickname), None)
        if record is None:
            record = {"nickname": nickname, "badges": []}
            records.append(record)

        if not isinstance(badges, _Unset):
            record["badges"] = badges

        if not isinstance(background_gif_url, _Unset):
            previous = record.get("backgroundGifUrl")
            if previous and previous != background_gif_url:
                stale_url = previous
            if background_gif_url is None:
                record.pop("backgroundGifUrl", None)
            else:
                record["backgroundGifUrl"] = background_gif_url

    logger.info("user_preference_saved", nickname=nickname, replaced_background=stale_url is not None)

    if stale_url:
        upload_storage.delete(stale_url)

    return UserPreference.model_validate(record)


def set_background_gif(
    store: JsonFileStore,
    upload_storage: UploadStorage,
    nickname: str,
    upload: IncomingFile,
    max_bytes: int = MAX_UPLOAD_BYTES,
) -> UserPreference:
    """Store a new background GIF for ``nickname``, replacing any previous one."""
    validate_background_gif(upload.content_type, upload.size, max_bytes=max_bytes)

    url = upload_storage.save_background(nickname, upload.data)
    try:
        return upsert_user_preference(store, upload_storage, nickname, background_gif_url=url)
    except (ValueError, OSError):
        upload_storage.delete(url)
        raise
