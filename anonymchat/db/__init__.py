"""Persistence package."""
from anonymchat.db.store import JsonFileStore, StoreKind
from anonymchat.db.uploads import UploadStorage
from anonymchat.db.session import get_store, get_upload_storage, store, upload_storage

__all__ = [
    "JsonFileStore",
    "StoreKind",
    "UploadStorage",
    "get_store",
    "get_upload_storage",
    "store",
    "upload_storage",
]
