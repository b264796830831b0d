"""Store and upload storage instances shared by the application."""
from anonymchat.core.config import settings
from anonymchat.db.store import JsonFileStore
from anonymchat.db.uploads import UploadStorage

store = JsonFileStore(settings.DATA_DIR)
upload_storage = UploadStorage(settings.UPLOADS_DIR, settings.UPLOADS_URL_PREFIX)


def get_store() -> JsonFileStore:
    """Dependency for FastAPI to get the JSON store."""
    return store


def get_upload_storage() -> UploadStorage:
    """Dependency for FastAPI to get the upload storage."""
    return upload_storage
