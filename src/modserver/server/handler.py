"""ASGI handler — translates ASGI scope/messages to modserver types.

Builds a typed Request, answers the site root from the registry's default
root, dispatches everything else through the live mount table, and sends
the Response back through ASGI send().
"""

import inspect
from typing import Any

from modserver._internal.asgi import Receive, Scope, Send
from modserver._internal.invoke import invoke
from modserver.errors import HTTPError, MethodNotAllowed, NotFound
from modserver.http.request import Request
from modserver.http.response import Redirect, Response
from modserver.registry import ModuleRegistry
from modserver.routing.mounts import MountMatch
from modserver.server.errors import handle_http_error, handle_internal_error
from modserver.server.negotiation import negotiate
from modserver.server.sender import send_response

_ROOT_METHODS = frozenset({"GET", "HEAD"})


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    registry: ModuleRegistry,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)

    try:
        response = await dispatch(request, registry)
    except HTTPError as exc:
        response = handle_http_error(exc, request)
    except Exception as exc:
        response = handle_internal_error(exc, request)

    await send_response(response, send, head=request.method == "HEAD")


async def dispatch(request: Request, registry: ModuleRegistry) -> Response:
    """Route *request* to the site root or to a mounted module."""
    if request.path in ("", "/"):
        return root_response(request, registry.default_root)

    match = registry.mounts.resolve(request.method, request.path)
    return await _invoke_handler(match, request)


def root_response(request: Request, default_root: str | None) -> Response:
    """Redirect ``GET /`` to the default root, or 404 when there is none."""
    if request.method not in _ROOT_METHODS:
        raise MethodNotAllowed(_ROOT_METHODS)
    if default_root is None:
        raise NotFound("No default root module is enabled")
    return negotiate(Redirect(default_root))


async def _invoke_handler(match: MountMatch, request: Request) -> Response:
    """Call the matched module handler with a mount-relative request."""
    handler = match.route_match.route.handler
    request = request.with_mount(
        root_path=match.mount.prefix,
        path=match.path,
        path_params=match.route_match.path_params,
    )
    kwargs = _build_handler_kwargs(handler, request)
    result = await invoke(handler, **kwargs)
    return negotiate(result)


def _build_handler_kwargs(handler: Any, request: Request) -> dict[str, Any]:
    """Inspect handler signature and build kwargs from request + path params.

    Resolution order:
    1. ``request`` parameter (by name or ``Request`` annotation)
    2. Path parameters (by name, converted to the annotated type if possible)
    """
    sig = inspect.signature(handler, eval_str=True)
    kwargs: dict[str, Any] = {}

    for name, param in sig.parameters.items():
        if name == "request" or param.annotation is Request:
            kwargs[name] = request
        elif name in request.path_params:
            value = request.path_params[name]
            if param.annotation is not inspect.Parameter.empty:
                try:
                    kwargs[name] = param.annotation(value)
                except (ValueError, TypeError):
                    kwargs[name] = value
            else:
                kwargs[name] = value

    return kwargs
