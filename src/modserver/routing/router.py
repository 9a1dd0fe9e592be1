"""Per-module route table.

A module's patterns are made of literal segments and ``{param}``
captures, each capture matching exactly one non-empty segment. The table
is compiled when the module is first mounted and is read-only after that.
Modules that need richer matching do it inside their own handlers.
"""

import re
from dataclasses import dataclass

from modserver.errors import ConfigurationError, MethodNotAllowed, NotFound
from modserver.routing.route import Route, RouteMatch

_CAPTURE_RE = re.compile(r"^\{([A-Za-z_][A-Za-z0-9_]*)\}$")


def split_path(path: str) -> list[str]:
    """``"/greet//alice/"`` -> ``["greet", "alice"]``."""
    return [part for part in path.split("/") if part]


@dataclass(frozen=True, slots=True)
class Segment:
    """One piece of a route pattern. ``capture`` is None for literal text."""

    text: str
    capture: str | None = None


def parse_path(path: str) -> tuple[Segment, ...]:
    """Parse a route pattern into segments.

    Raises ``ConfigurationError`` for anything but literal segments and
    ``{param}`` captures, such as ``<param>`` or ``{param:int}``.
    """
    segments: list[Segment] = []
    seen: set[str] = set()
    for part in split_path(path):
        if not part.startswith(("{", "<")):
            segments.append(Segment(part))
            continue
        found = _CAPTURE_RE.match(part)
        if found is None:
            msg = (
                f"Invalid segment {part!r} in route {path!r}: "
                "module routes use literal segments and {param} captures"
            )
            raise ConfigurationError(msg)
        name = found.group(1)
        if name in seen:
            msg = f"Route {path!r} captures {{{name}}} twice"
            raise ConfigurationError(msg)
        seen.add(name)
        segments.append(Segment(part, capture=name))
    return tuple(segments)


@dataclass(frozen=True, slots=True)
class _Pattern:
    route: Route
    segments: tuple[Segment, ...]

    def rank(self) -> tuple[bool, ...]:
        # Literal segments sort ahead of captures, position by position
        return tuple(seg.capture is not None for seg in self.segments)

    def bind(self, parts: list[str]) -> dict[str, str] | None:
        if len(parts) != len(self.segments):
            return None
        params: dict[str, str] = {}
        for seg, part in zip(self.segments, parts, strict=True):
            if seg.capture is not None:
                params[seg.capture] = part
            elif seg.text != part:
                return None
        return params


class Router:
    """Route table for one module.

    Usage::

        router = Router()
        router.add(Route("/greet/{name}", greet, frozenset({"GET"})))
        router.compile()
        match = router.match("GET", "/greet/alice")
    """

    __slots__ = ("_compiled", "_patterns", "_routes")

    def __init__(self) -> None:
        self._routes: list[Route] = []
        self._patterns: list[_Pattern] = []
        self._compiled = False

    def add(self, route: Route) -> None:
        """Add a route. Raises ``RuntimeError`` after ``compile()``."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)
        self._patterns.append(_Pattern(route, parse_path(route.path)))
        self._routes.append(route)

    @property
    def routes(self) -> tuple[Route, ...]:
        """Every registered route, in registration order."""
        return tuple(self._routes)

    @property
    def compiled(self) -> bool:
        return self._compiled

    def compile(self) -> None:
        """Freeze the table and order it most-literal first."""
        self._patterns.sort(key=_Pattern.rank)
        self._compiled = True

    def match(self, method: str, path: str) -> RouteMatch:
        """Find the route for *method* and mount-relative *path*.

        A literal segment beats a capture at the same position; ties go
        to the route registered first. HEAD is served by a GET route.

        Raises ``NotFound`` if no pattern fits the path, or
        ``MethodNotAllowed`` if some do but none accept *method*.
        """
        parts = split_path(path)
        allowed: set[str] = set()
        for pattern in self._patterns:
            params = pattern.bind(parts)
            if params is None:
                continue
            methods = pattern.route.methods
            if method in methods or (method == "HEAD" and "GET" in methods):
                return RouteMatch(route=pattern.route, path_params=params)
            allowed |= methods
        if allowed:
            raise MethodNotAllowed(frozenset(allowed))
        raise NotFound(f"No route matches {method} {path!r}")
