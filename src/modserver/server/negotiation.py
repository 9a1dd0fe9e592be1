"""Content negotiation — maps module handler return values to Responses.

isinstance-based dispatch, no magic, fully predictable.
"""

import json as json_module
from typing import Any
from urllib.parse import quote

from modserver.http.response import Redirect, Response


# Reserved URL characters and existing %XX escapes pass through untouched
_LOCATION_SAFE = "/:?#[]@!$&'()*+,;=%~"


def encode_location(url: str) -> str:
    """Percent-encode a redirect target so it fits in a latin-1 header.

    ``/привет`` becomes ``/%D0%BF%D1%80%D0%B8%D0%B2%D0%B5%D1%82``; an
    already-encoded URL is returned unchanged.
    """
    return quote(url, safe=_LOCATION_SAFE)


def negotiate(value: Any) -> Response:
    """Convert a route handler's return value to a Response.

    Dispatch order:

    1. ``Response``         -> pass through
    2. ``Redirect``         -> 3xx with Location header
    3. ``None``             -> 204, empty body
    4. ``str``              -> 200, text/html
    5. ``bytes``            -> 200, application/octet-stream
    6. ``dict`` / ``list``  -> 200, application/json
    7. ``(value, int)``     -> negotiate value, override status
    8. ``(value, int, dict)`` -> negotiate value, override status + headers
    """
    match value:
        case Response():
            return value
        case Redirect():
            return (
                Response(body="")
                .with_status(value.status)
                .with_header("Location", encode_location(value.url))
                .with_headers(dict(value.headers))
            )
        case None:
            return Response(body="", status=204)
        case str():
            return Response(body=value)
        case bytes():
            return Response(body=value, content_type="application/octet-stream")
        case dict() | list():
            return Response(
                body=json_module.dumps(value, default=str),
                content_type="application/json",
            )
        case (inner, int() as status):
            return negotiate(inner).with_status(status)
        case (inner, int() as status, dict() as headers):
            return negotiate(inner).with_status(status).with_headers(headers)
        case _:
            msg = (
                f"Cannot convert {type(value).__name__} to a response. "
                "Return str, bytes, dict, list, Response, or Redirect."
            )
            raise TypeError(msg)
