"""modserver — mount and unmount HTTP modules at runtime.

A single host process serves whatever modules are currently enabled.
Modules are added and removed from an interactive console without
restarting the listener.

Writing a module::

    from modserver import ServerModule

    module = ServerModule("hello")

    @module.route("/")
    def index():
        return "Hello World!"

Starting the host::

    modserver port=8080 enable=helloworld:/hi default=helloworld
"""

__version__ = "0.1.0"
__all__ = [
    "ConfigurationError",
    "HostConfig",
    "ModServerError",
    "ModuleDescriptor",
    "ModuleHost",
    "ModuleLoadError",
    "ModuleLoader",
    "ModuleNotFound",
    "ModuleRegistry",
    "MountTable",
    "Redirect",
    "Request",
    "Response",
    "ServerModule",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import modserver`` fast while providing a clean top-level API.
    """
    if name == "ServerModule":
        from modserver.module import ServerModule

        return ServerModule

    if name == "ModuleHost":
        from modserver.host import ModuleHost

        return ModuleHost

    if name == "HostConfig":
        from modserver.config import HostConfig

        return HostConfig

    if name == "ModuleLoader":
        from modserver.loader import ModuleLoader

        return ModuleLoader

    if name in ("ModuleRegistry", "ModuleDescriptor"):
        from modserver import registry as _registry

        return getattr(_registry, name)

    if name == "MountTable":
        from modserver.routing.mounts import MountTable

        return MountTable

    if name == "Request":
        from modserver.http.request import Request

        return Request

    if name in ("Response", "Redirect"):
        from modserver.http import response as _resp

        return getattr(_resp, name)

    if name in (
        "ConfigurationError",
        "ModServerError",
        "ModuleLoadError",
        "ModuleNotFound",
    ):
        from modserver import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
