"""Main API router for v1."""
from fastapi import APIRouter

from anonymchat.api.v1.endpoints import admin, auth, info, messages, polls, sse

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(messages.router, prefix="/messages", tags=["Messages"])
api_router.include_router(polls.router, prefix="/polls", tags=["Polls"])
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])
api_router.include_router(info.router, prefix="/info", tags=["Info"])
api_router.include_router(sse.router, tags=["SSE"])
