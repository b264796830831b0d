"""Admin endpoints."""
import logging
from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from anonymchat.api.deps import get_store, get_upload_storage, verify_admin_token
from anonymchat.api.presenters import present_messages, present_polls
from anonymchat.core import config
from anonymchat.core.cache import global_cache, invalidate_feed
from anonymchat.db.store import JsonFileStore
from anonymchat.db.uploads import IncomingFile, UploadStorage
from anonymchat.schemas import (
    AdminMessageDetail,
    AdminPollDetail,
    KnownUser,
    ReconcileReport,
    SuccessResponse,
    UserPreferenceDetail,
    UserPreferenceUpdate,
)
from anonymchat.services import (
    UNSET,
    delete_message,
    delete_poll,
    list_all_messages,
    list_known_nicknames,
    list_polls,
    preference_lookup,
    reconcile_counters,
    set_background_gif,
    upsert_user_preference,
)

logger = logging.getLogger(__name__)
router = APIRouter(dependencies=[Depends(verify_admin_token)])


@router.get("/messages", response_model=List[AdminMessageDetail])
async def get_all_messages(store: JsonFileStore = Depends(get_store)):
    """Every message including replies, newest first, with IP addresses."""
    return present_messages(list_all_messages(store), preference_lookup(store), admin=True)


@router.delete("/messages/{message_id}", response_model=SuccessResponse)
async def delete_message_endpoint(
    message_id: str,
    store: JsonFileStore = Depends(get_store),
    upload_storage: UploadStorage = Depends(get_upload_storage),
):
    """
    Delete a message (admin only).

    Deleting a top-level message also deletes its replies; deleting a reply
    decrements its parent's reply count. Attached files are removed from disk
    when possible.
    """
    try:
        deleted = delete_message(store, upload_storage, message_id)
    except OSError:
        logger.exception("Error deleting message")
        raise HTTPException(status_code=500, detail="Failed to delete message.")

    if not deleted:
        raise HTTPException(status_code=404, detail="Message not found or already deleted.")

    invalidate_feed(f"message deleted, message_id={message_id}")
    return SuccessResponse(success=True, message="Message and any replies deleted successfully.")


@router.get("/polls", response_model=List[AdminPollDetail])
async def get_all_polls(store: JsonFileStore = Depends(get_store)):
    return present_polls(list_polls(store), preference_lookup(store), admin=True)


@router.delete("/polls/{poll_id}", response_model=SuccessResponse)
async def delete_poll_endpoint(poll_id: str, store: JsonFileStore = Depends(get_store)):
    """Delete a poll (admin only)."""
    try:
        deleted = delete_poll(store, poll_id)
    except OSError:
        logger.exception("Error deleting poll")
        raise HTTPException(status_code=500, detail="Failed to delete poll.")

    if not deleted:
        raise HTTPException(status_code=404, detail="Poll not found or already deleted.")

    invalidate_feed(f"poll deleted, poll_id={poll_id}")
    return SuccessResponse(success=True, message="Poll deleted successfully.")


@router.get("/users", response_model=List[KnownUser])
async def get_users(store: JsonFileStore = Depends(get_store)):
    """Every nickname seen on the forum, with its badges and background if set."""
    preferences = preference_lookup(store)
    return [
        KnownUser(
            nickname=nickname,
            preference=(
                UserPreferenceDetail.model_validate(preferences[nickname].to_record())
                if nickname in preferences else None
            ),
        )
        for nickname in list_known_nicknames(store)
    ]


@router.patch("/users/{nickname}/preferences", response_model=UserPreferenceDetail)
async def update_user_preferences(
    nickname: str,
    update: UserPreferenceUpdate,
    store: JsonFileStore = Depends(get_store),
    upload_storage: UploadStorage = Depends(get_upload_storage),
):
    """
    Create or update a nickname's badges and background.

    Only fields present in the body change:

        {"badges": ["mod"]}               badges replaced, background kept
        {"backgroundGifUrl": null}        background removed
        {}                                record created if missing, nothing else
    """
    fields = update.model_fields_set
    try:
        preference = upsert_user_preference(
            store,
            upload_storage,
            nickname,
            badges=(update.badges or []) if "badges" in fields else UNSET,
            background_gif_url=update.background_gif_url if "background_gif_url" in fields else UNSET,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OSError:
        logger.exception("Error saving user preferences")
        raise HTTPException(status_code=500, detail="Failed to save user preferences.")

    invalidate_feed(f"preferences updated, nickname={nickname}")
    return UserPreferenceDetail.model_validate(preference.to_record())


@router.put("/users/{nickname}/background", response_model=UserPreferenceDetail)
async def upload_user_background(
    nickname: str,
    file: UploadFile = File(...),
    store: JsonFileStore = Depends(get_store),
    upload_storage: UploadStorage = Depends(get_upload_storage),
):
    """Upload a GIF as the nickname's background, replacing any previous one."""
    max_bytes = config.settings.MAX_UPLOAD_BYTES
    upload = IncomingFile(
        filename=file.filename or "background.gif",
        content_type=file.content_type or "",
        data=await file.read(max_bytes + 1),
    )
    try:
        preference = set_background_gif(store, upload_storage, nickname, upload, max_bytes=max_bytes)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OSError:
        logger.exception("Error storing background GIF")
        raise HTTPException(status_code=500, detail="Failed to store background image.")

    invalidate_feed(f"background set, nickname={nickname}")
    return UserPreferenceDetail.model_validate(preference.to_record())


@router.delete("/users/{nickname}/background", response_model=UserPreferenceDetail)
async def remove_user_background(
    nickname: str,
    store: JsonFileStore = Depends(get_store),
    upload_storage: UploadStorage = Depends(get_upload_storage),
):
    try:
        preference = upsert_user_preference(store, upload_storage, nickname, background_gif_url=None)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OSError:
        logger.exception("Error removing background GIF")
        raise HTTPException(status_code=500, detail="Failed to remove background image.")

    invalidate_feed(f"background removed, nickname={nickname}")
    return UserPreferenceDetail.model_validate(preference.to_record())


@router.post("/maintenance/reconcile", response_model=ReconcileReport)
async def reconcile_endpoint(
    store: JsonFileStore = Depends(get_store),
    upload_storage: UploadStorage = Depends(get_upload_storage),
):
    """
    Recompute reply counts and poll totals from the stored data.

    Also removes replies whose parent no longer exists, along with their
    uploaded files.
    """
    try:
        report = reconcile_counters(store, upload_storage)
    except OSError:
        logger.exception("Error reconciling counters")
        raise HTTPException(status_code=500, detail="Failed to reconcile counters.")

    invalidate_feed("counters reconciled")
    return ReconcileReport(**report)


@router.get("/cache/stats")
async def get_cache_stats():
    """Feed cache metrics: size, capacity, hits, misses, hit rate, entry ages."""
    return global_cache.get_stats()
