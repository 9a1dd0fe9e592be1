"""Invoke helpers — call sync or async callables uniformly.

Module route handlers and module factories can be ``def`` or ``async def``.
Any code that calls one must handle both cases, so the check lives here.

Usage::

    from modserver._internal.invoke import invoke

    result = await invoke(handler, *args, **kwargs)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler and await the result if it's awaitable."""
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
