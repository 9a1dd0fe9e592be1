"""Immutable HTTP request.

Frozen metadata with async body access. When a request is dispatched into a
mounted module, ``path`` is relative to the mount and ``root_path`` holds the
mount prefix.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Iterable
from dataclasses import dataclass, field, replace
from typing import Any
from urllib.parse import parse_qs

from modserver._internal.asgi import Receive


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Metadata (method, path, headers, etc.) is frozen at creation.
    Body is accessed asynchronously via ``.body()``, ``.json()``, ``.text()``.
    """

    method: str
    path: str
    headers: dict[str, str]
    query_string: bytes
    path_params: dict[str, str]
    http_version: str
    client: tuple[str, int] | None

    # Private: ASGI receive callable for body streaming
    _receive: Receive

    root_path: str = ""

    # Private: mutable cache for the body (the field reference stays frozen)
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def query(self) -> dict[str, str]:
        """Query parameters, first value per key."""
        parsed = parse_qs(self.query_string.decode("latin-1"), keep_blank_values=True)
        return {key: values[0] for key, values in parsed.items()}

    def header(self, name: str, default: str | None = None) -> str | None:
        """Look up a header by name, ignoring case."""
        return self.headers.get(name.lower(), default)

    @property
    def content_type(self) -> str | None:
        return self.header("content-type")

    @property
    def full_path(self) -> str:
        """The path as the client sent it (mount prefix included)."""
        if self.path == "/":
            return self.root_path or "/"
        return f"{self.root_path}{self.path}"

    def with_mount(self, root_path: str, path: str, path_params: dict[str, str]) -> Request:
        """Return a copy re-rooted under a mount prefix.

        Shares the body cache so a body read before dispatch isn't lost.
        """
        return replace(self, root_path=root_path, path=path, path_params=path_params)

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body.

        Result is cached: the ASGI receive is consumed once, then
        the same bytes are returned on subsequent calls.
        """
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks = [chunk async for chunk in self.stream()]
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes]:
        """Stream the request body in chunks."""
        while True:
            message = await self._receive()
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    async def json(self) -> Any:
        """Parse the body as JSON."""
        import json as json_module

        raw = await self.body()
        return json_module.loads(raw)

    async def text(self) -> str:
        """Read the body as text (UTF-8)."""
        raw = await self.body()
        return raw.decode("utf-8")

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: dict[str, Any], receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=_decode_headers(scope.get("headers", ())),
            query_string=scope.get("query_string", b""),
            path_params={},
            http_version=scope.get("http_version", "1.1"),
            client=tuple(client) if client else None,
            _receive=receive,
        )


def _decode_headers(raw: Iterable[tuple[bytes, bytes]]) -> dict[str, str]:
    """ASGI header pairs to a dict keyed by lower-case name.

    A repeated header keeps its first value.
    """
    headers: dict[str, str] = {}
    for name, value in raw:
        headers.setdefault(name.decode("latin-1").lower(), value.decode("latin-1"))
    return headers
