"""Error handling pipeline for requests.

Maps HTTPError exceptions and unexpected failures inside module handlers
to plain-text responses. A failing module never touches registry state.
"""

import logging

from modserver.errors import HTTPError
from modserver.http.request import Request
from modserver.http.response import Response

logger = logging.getLogger("modserver.server")


def handle_http_error(exc: HTTPError, request: Request) -> Response:
    """Map an HTTPError to a Response."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.full_path, exc.detail)
    response = Response(
        body=exc.detail or f"Error {exc.status}",
        status=exc.status,
        content_type="text/plain; charset=utf-8",
    )
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


def handle_internal_error(exc: Exception, request: Request) -> Response:
    """Handle unexpected exceptions as 500 errors."""
    logger.error(
        "500 %s %s", request.method, request.full_path, exc_info=(type(exc), exc, exc.__traceback__)
    )
    return Response(
        body="Internal Server Error",
        status=500,
        content_type="text/plain; charset=utf-8",
    )
