"""Main FastAPI application."""
import os
from pathlib import Path

from fastapi import FastAPI, HTTPException, Request, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from anonymchat.api.v1.router import api_router
from anonymchat.api.deps import get_store
from anonymchat.core.config import settings
from anonymchat.core.rate_limit import limiter
from anonymchat.core.logging_config import setup_logging, get_logger
from anonymchat.core.cache import global_cache
from anonymchat.db.store import JsonFileStore, StoreKind
from anonymchat.middleware import LoggingMiddleware

setup_logging(level=settings.LOG_LEVEL, json_output=settings.ENVIRONMENT == "production")
logger = get_logger(__name__)

if settings.ENVIRONMENT == "production":
    settings.validate_production_config()

logger.info(
    "application_starting",
    app_title=settings.APP_TITLE,
    app_version=settings.APP_VERSION,
    environment=settings.ENVIRONMENT,
    data_dir=settings.DATA_DIR,
)

app = FastAPI(
    title=settings.APP_TITLE,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Added before CORS so it wraps the whole request
app.add_middleware(LoggingMiddleware)


@app.middleware("http")
async def add_api_version_header(request: Request, call_next):
    """Add X-API-Version header to all responses for version tracking."""
    response = await call_next(request)
    response.headers["X-API-Version"] = settings.APP_VERSION
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,  # Required for cookies
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)

app.include_router(api_router)

# Uploaded attachments and background GIFs
Path(settings.UPLOADS_DIR).mkdir(parents=True, exist_ok=True)
app.mount(settings.UPLOADS_URL_PREFIX, StaticFiles(directory=settings.UPLOADS_DIR), name="uploads")


@app.get("/health")
async def health_check(store: JsonFileStore = Depends(get_store)):
    """
    Health check endpoint.

    Returns:
        - status: "healthy" or "unhealthy"
        - environment: Current environment setting
        - cache: Feed cache statistics
        - storage: data directory, writability and record counts per file

    Returns 503 if the data directory cannot be written.
    """
    data_dir = store.data_dir
    probe = data_dir if data_dir.exists() else data_dir.parent
    writable = os.access(probe, os.W_OK)

    health_status = {
        "status": "healthy" if writable else "unhealthy",
        "environment": settings.ENVIRONMENT,
        "cache": global_cache.get_stats(),
        "storage": {
            "data_dir": str(data_dir),
            "writable": writable,
            "records": {kind.value: len(store.read(kind)) for kind in StoreKind},
        },
    }

    if not writable:
        logger.error("health_check_failed", data_dir=str(data_dir))
        raise HTTPException(status_code=503, detail=health_status)

    return health_status
