"""In-process client for exercising a ``ModuleHost``.

Requests go straight into the host's ASGI callable, so tests see the
same routing, mounts and error handling as the listener does, with no
socket or server thread involved.
"""

import json as json_module
from typing import Any
from urllib.parse import quote

from modserver.host import ModuleHost
from modserver.http.response import Response

type Message = dict[str, Any]


class TestClient:
    __test__ = False  # Tell pytest this is not a test class
    """Async client for a ``ModuleHost``.

    Usage::

        async with TestClient(host) as client:
            response = await client.get("/hi/greet/alice")
            assert response.text == "Hello, alice!"
    """

    __slots__ = ("host",)

    def __init__(self, host: ModuleHost) -> None:
        self.host = host

    async def __aenter__(self) -> "TestClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        return None

    async def get(self, path: str, *, headers: dict[str, str] | None = None) -> Response:
        return await self.request("GET", path, headers=headers)

    async def head(self, path: str, *, headers: dict[str, str] | None = None) -> Response:
        return await self.request("HEAD", path, headers=headers)

    async def post(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes = b"",
        json: object = None,
    ) -> Response:
        return await self.request("POST", path, headers=headers, body=body, json=json)

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes = b"",
        json: object = None,
    ) -> Response:
        """Run one request through the host and collect what it sends back.

        *path* may carry a ``?query``. Passing *json* encodes it as the
        body and sets ``content-type: application/json``.
        """
        headers = dict(headers or {})
        if json is not None:
            body = json_module.dumps(json).encode("utf-8")
            headers.setdefault("content-type", "application/json")

        pending: list[Message] = [{"type": "http.request", "body": body, "more_body": False}]
        sent: list[Message] = []

        async def receive() -> Message:
            return pending.pop(0) if pending else {"type": "http.disconnect"}

        async def send(message: Message) -> None:
            sent.append(message)

        await self.host(_http_scope(method, path, headers), receive, send)
        return _collect(sent)


def _http_scope(method: str, target: str, headers: dict[str, str]) -> Message:
    path, _, query = target.partition("?")
    return {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method.upper(),
        "scheme": "http",
        "path": path,
        "raw_path": quote(path).encode("ascii"),
        "query_string": query.encode("utf-8"),
        "root_path": "",
        "headers": [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in headers.items()
        ],
        "server": ("testserver", 80),
        "client": ("127.0.0.1", 0),
    }


def _collect(sent: list[Message]) -> Response:
    """Rebuild a ``Response`` from the ASGI messages the host sent."""
    start = next(m for m in sent if m["type"] == "http.response.start")
    body = b"".join(m.get("body", b"") for m in sent if m["type"] == "http.response.body")

    content_type = ""
    headers: list[tuple[str, str]] = []
    for raw_name, raw_value in start.get("headers", []):
        name, value = raw_name.decode("latin-1"), raw_value.decode("latin-1")
        if name == "content-type":
            content_type = value
        else:
            headers.append((name, value))

    return Response(
        body=body,
        status=start["status"],
        content_type=content_type,
        headers=tuple(headers),
    )
