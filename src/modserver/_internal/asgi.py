"""Raw ASGI type aliases.

The request pipeline and the test client are the only components that
touch raw ASGI directly.
"""

from collections.abc import Awaitable, Callable, MutableMapping
from typing import Any, TypeAlias

Scope: TypeAlias = MutableMapping[str, Any]
Receive: TypeAlias = Callable[[], Awaitable[MutableMapping[str, Any]]]
Send: TypeAlias = Callable[[MutableMapping[str, Any]], Awaitable[None]]

# Route handler: module-defined function with variable signature
Handler: TypeAlias = Callable[..., Any]
