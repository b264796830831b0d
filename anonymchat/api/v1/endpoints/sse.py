"""Server-Sent Events endpoints."""
import asyncio
import json
import logging
from typing import Any, Callable

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from anonymchat.api.deps import get_store
from anonymchat.api.presenters import build_feed_snapshot
from anonymchat.core import config
from anonymchat.core.cache import FEED_CACHE_KEY, global_cache
from anonymchat.db.store import JsonFileStore

logger = logging.getLogger(__name__)
router = APIRouter()


async def event_generator(request: Request, data_func: Callable[[], Any], interval: float = 5):
    """
    Generic SSE event generator.

    Args:
        request: FastAPI request object to check for client disconnect
        data_func: Function that returns the data to send
        interval: Seconds between updates
    """
    consecutive_errors = 0
    max_consecutive_errors = 3

    try:
        while True:
            if await request.is_disconnected():
                break

            try:
                data = data_func()
                yield f"data: {json.dumps(data)}\n\n"
                consecutive_errors = 0
            except OSError as e:
                # Disk errors can be transient; skip this tick and retry
                consecutive_errors += 1
                logger.warning(f"SSE storage error (attempt {consecutive_errors}/{max_consecutive_errors}): {e}")

                if consecutive_errors >= max_consecutive_errors:
                    yield f"event: error\ndata: {json.dumps({'error': 'Service temporarily unavailable'})}\n\n"
                    break
            except Exception as e:
                logger.exception(f"SSE unexpected error: {e}")
                yield f"event: error\ndata: {json.dumps({'error': 'Internal error'})}\n\n"
                break

            await asyncio.sleep(interval)

    except asyncio.CancelledError:
        # Client disconnected
        pass


@router.get("/sse/forum")
async def sse_forum(request: Request, store: JsonFileStore = Depends(get_store)):
    """
    SSE stream of the public feed: ``{"messages": [...], "polls": [...]}``.

    Pushes a fresh snapshot every SSE_FEED_INTERVAL seconds. Snapshots are
    shared across connections through the feed cache and rebuilt when a write
    invalidates it or FEED_CACHE_TTL elapses.
    """
    def get_data():
        return global_cache.get_or_fetch(
            FEED_CACHE_KEY,
            lambda: build_feed_snapshot(store),
            ttl_seconds=config.settings.FEED_CACHE_TTL,
        )

    return StreamingResponse(
        event_generator(request, get_data, interval=config.settings.SSE_FEED_INTERVAL),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable buffering in nginx
        }
    )
