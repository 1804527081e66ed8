"""Request context middleware: request id, timing and one structured log
line per request.
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from ..core.config import settings
from ..core.logging_config import request_id_var

logger = logging.getLogger(__name__)

# Health checks and static blobs would drown the request log.
_QUIET_PREFIXES = ("/health", f"{settings.media_url_prefix}/")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Propagate ``X-Request-ID``, add ``X-Response-Time`` and log the request."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        rid = request.headers.get("x-request-id") or uuid.uuid4().hex[:16]
        token = request_id_var.set(rid)

        start = time.monotonic()
        try:
            response = await call_next(request)
        finally:
            duration_ms = round((time.monotonic() - start) * 1000, 1)

        response.headers["X-Request-ID"] = rid
        response.headers["X-Response-Time"] = f"{duration_ms}ms"

        log = logger.debug if request.url.path.startswith(_QUIET_PREFIXES) else logger.info
        log(
            f"{request.method} {request.url.path} {response.status_code}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        request_id_var.reset(token)

        return response
