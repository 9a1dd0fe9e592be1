"""Route and RouteMatch frozen dataclasses."""

from dataclasses import dataclass

from modserver._internal.asgi import Handler


@dataclass(frozen=True, slots=True)
class Route:
    """One handler in a module's route table.

    ``path`` is relative to wherever the module is mounted.
    """

    path: str
    handler: Handler
    methods: frozenset[str]


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """A route plus the ``{param}`` values captured from the request path."""

    route: Route
    path_params: dict[str, str]
