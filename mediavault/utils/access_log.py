"""Per-request access logging."""

import logging
import time
from datetime import UTC, datetime

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from mediavault.constants import SERVED_BY_HEADER
from mediavault.utils.http import get_client_ip

logger = logging.getLogger("mediavault.access")


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Log one line per request with client IP, status, duration and serving branch."""

    async def dispatch(self, request: Request, call_next) -> Response:
        start_time = time.monotonic()
        status = "500"
        served_by = "-"
        try:
            response = await call_next(request)
            status = str(response.status_code)
            served_by = response.headers.get(SERVED_BY_HEADER, "-")
        finally:
            duration_ms = int((time.monotonic() - start_time) * 1000)
            logger.info(
                f"{datetime.now(UTC).isoformat()} - {get_client_ip(request)} - "
                f"{request.method} {request.url} - {status} [{duration_ms}ms] "
                f"Served-By: {served_by}"
            )

        return response
