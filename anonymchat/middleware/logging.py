"""Request logging with the forum identity of the caller."""
import time
import uuid
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from anonymchat.core.constants import ADMIN_COOKIE, NICKNAME_COOKIE
from anonymchat.core.rate_limit import get_client_ip
from anonymchat.core.security import decode_admin_token

logger = structlog.get_logger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Tag every log line of a request with who made it.

    Binds a request id, the nickname cookie, whether a valid admin session is
    present and the client IP (the same X-Forwarded-For aware address stored
    on messages and polls for moderation). The request id is echoed back in
    ``X-Request-ID``.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_ip=get_client_ip(request),
            nickname=(request.cookies.get(NICKNAME_COOKIE) or "").strip() or None,
            is_admin=decode_admin_token(request.cookies.get(ADMIN_COOKIE)) is not None,
        )

        start_time = time.time()
        logger.debug("request_started")

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "request_failed",
                exception=str(exc),
                exception_type=type(exc).__name__,
                duration_ms=round((time.time() - start_time) * 1000, 2),
            )
            raise

        response.headers["X-Request-ID"] = request_id

        if response.status_code >= 500:
            log = logger.error
        elif response.status_code >= 400:
            log = logger.warning
        else:
            log = logger.info
        log(
            "request_completed",
            status_code=response.status_code,
            duration_ms=round((time.time() - start_time) * 1000, 2),
        )

        return response
