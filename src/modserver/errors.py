"""modserver exception hierarchy.

Shared across the loader, registry, console, and request pipeline so every
module raises and catches the same types.
"""

from dataclasses import dataclass


class ModServerError(Exception):
    """Base for all modserver-specific errors."""


class ConfigurationError(ModServerError):
    """Raised when startup configuration or a mount path is invalid.

    Fatal during startup (the process exits before the listener binds).
    Local to a single command when raised from the console.
    """


class UsageError(ModServerError):
    """Raised when a console command is missing required arguments."""


class ModuleError(ModServerError):
    """Base for failures resolving a module name to a handle."""

    def __init__(self, module_name: str, reason: str) -> None:
        super().__init__(reason)
        self.module_name = module_name
        self.reason = reason


class ModuleNotFound(ModuleError):  # noqa: N818
    """No module matching the requested name exists in the known namespace."""

    def __init__(self, module_name: str, reason: str = "") -> None:
        super().__init__(
            module_name,
            reason or f"no server module named {module_name!r}",
        )


class ModuleLoadError(ModuleError):
    """The module exists but failed during its own initialization."""


@dataclass(frozen=True, slots=True)
class HTTPError(ModServerError):
    """An error that maps directly to an HTTP status code.

    Raised by routers and handlers. The ASGI handler catches these and
    turns them into plain-text responses.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404 — no mount or route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405 — route exists but not for this HTTP method.

    Includes an ``Allow`` header listing the valid methods.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )
