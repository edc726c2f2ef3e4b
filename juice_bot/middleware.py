"""
FastAPI middleware for request correlation.
"""

import logging
import uuid
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Adds a unique request ID to each request.

    An incoming X-Request-ID header is reused; otherwise a UUID is generated.
    The ID is available in request.state.request_id and returned in the
    X-Request-ID response header.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        logger.debug("%s %s [%s]", request.method, request.url.path, request_id)
        response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
