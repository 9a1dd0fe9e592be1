"""Module loader — resolves a module name to a ``ServerModule``.

Two sources, checked in order:

1. An explicit registration table (``loader.register(name, factory)``),
   populated at process start.
2. The module namespace package: ``<package>.<name>`` is imported and its
   ``module`` attribute (or ``create_module`` factory) is used.

Loading is the only registry step that may suspend: async factories are
awaited on the control loop.
"""

import importlib
import logging
import re
from collections.abc import Callable
from typing import Any

from modserver._internal.invoke import invoke
from modserver.errors import ModuleLoadError, ModuleNotFound
from modserver.module import ServerModule

logger = logging.getLogger("modserver.loader")

_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

type ModuleFactory = Callable[[], ServerModule | Any]


class ModuleLoader:
    """Resolves module names against a registration table and a package.

    Usage::

        loader = ModuleLoader("modserver.modules")
        loader.register("status", create_status_module)
        module = await loader.load("helloworld")
    """

    __slots__ = ("_factories", "package")

    def __init__(self, package: str | None = "modserver.modules") -> None:
        self.package = package
        self._factories: dict[str, ModuleFactory] = {}

    def register(self, name: str, factory: ModuleFactory) -> None:
        """Make *factory* resolvable as *name*. Later registrations win."""
        self._factories[name] = factory

    def __contains__(self, name: str) -> bool:
        return name in self._factories

    async def load(self, module_name: str) -> ServerModule:
        """Resolve *module_name* to a frozen, mountable ``ServerModule``.

        Raises:
            ModuleNotFound: No module with that name exists.
            ModuleLoadError: The module exists but failed to initialize.
        """
        if not _NAME_RE.match(module_name):
            raise ModuleNotFound(module_name, f"{module_name!r} is not a valid module name")

        factory = self._factories.get(module_name)
        if factory is not None:
            obj: Any = factory
        else:
            obj = self._import_entry(module_name)

        if callable(obj) and not isinstance(obj, ServerModule):
            try:
                obj = await invoke(obj)
            except Exception as exc:
                logger.debug("Factory for %r raised", module_name, exc_info=True)
                raise ModuleLoadError(
                    module_name, f"module factory raised {type(exc).__name__}: {exc}"
                ) from exc

        if not isinstance(obj, ServerModule):
            raise ModuleLoadError(
                module_name,
                f"resolved to {type(obj).__name__}, not a ServerModule",
            )

        try:
            obj.freeze()
        except Exception as exc:
            raise ModuleLoadError(module_name, f"invalid route table: {exc}") from exc

        logger.debug("Loaded module %r (%d routes)", module_name, len(obj.routes))
        return obj

    def _import_entry(self, module_name: str) -> Any:
        """Import ``<package>.<name>`` and return its module entry point."""
        if self.package is None:
            raise ModuleNotFound(module_name)

        import_path = f"{self.package}.{module_name}"
        try:
            source = importlib.import_module(import_path)
        except ModuleNotFoundError as exc:
            # Only a missing *target* means "not found"; a missing dependency
            # inside an existing module is a load failure.
            if exc.name is not None and (
                import_path == exc.name or import_path.startswith(exc.name + ".")
            ):
                raise ModuleNotFound(module_name) from exc
            raise ModuleLoadError(module_name, str(exc)) from exc
        except Exception as exc:
            raise ModuleLoadError(
                module_name, f"import failed with {type(exc).__name__}: {exc}"
            ) from exc

        entry = getattr(source, "module", None) or getattr(source, "create_module", None)
        if entry is None:
            raise ModuleLoadError(
                module_name,
                f"{import_path} defines neither 'module' nor 'create_module'",
            )
        return entry
