"""Server modules — independently loadable units of request handlers.

A module collects its routes during setup and is frozen the first time it
is mounted. The host only ever sees its ``match()`` method; everything else
about the module is private to it.

Usage::

    from modserver import ServerModule

    module = ServerModule("helloworld")

    @module.route("/")
    def index():
        return "Hello World!"
"""

import threading
from collections.abc import Callable

from modserver._internal.asgi import Handler
from modserver.routing.route import Route, RouteMatch
from modserver.routing.router import Router


class ServerModule:
    """A request-handling subtree that can be mounted under any prefix.

    Thread safety:
        Route registration happens at import time on one thread. The
        freeze uses a Lock + double-check so exactly one thread compiles
        the router, even if two server workers hit a fresh mount at once.
    """

    __slots__ = ("_freeze_lock", "_frozen", "_pending_routes", "_router", "name")

    def __init__(self, name: str | None = None) -> None:
        self.name = name
        self._pending_routes: list[Route] = []
        self._router: Router | None = None
        self._frozen = False
        self._freeze_lock = threading.Lock()

    def __repr__(self) -> str:
        return f"<ServerModule {self.name!r} routes={len(self._pending_routes)}>"

    def route(
        self,
        path: str,
        *,
        methods: list[str] | None = None,
    ) -> Callable[[Handler], Handler]:
        """Register a route handler via decorator.

        Args:
            path: Path relative to the mount prefix. Use ``{param}`` for
                path parameters.
            methods: HTTP methods. Defaults to ``["GET"]``.
        """

        def decorator(func: Handler) -> Handler:
            if self._frozen:
                msg = (
                    f"Cannot add routes to module {self.name!r} after it has been mounted."
                )
                raise RuntimeError(msg)
            allowed = frozenset(m.upper() for m in (methods or ["GET"]))
            self._pending_routes.append(Route(path=path, handler=func, methods=allowed))
            return func

        return decorator

    @property
    def routes(self) -> tuple[Route, ...]:
        return tuple(self._pending_routes)

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a mount-relative path against this module's routes."""
        self.freeze()
        assert self._router is not None
        return self._router.match(method, path)

    def freeze(self) -> None:
        """Compile the route table. Idempotent; called by the loader before mounting."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            router = Router()
            for route in self._pending_routes:
                router.add(route)
            router.compile()
            self._router = router
            self._frozen = True
