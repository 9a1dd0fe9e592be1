"""Module mount registry — the authoritative record of active modules.

Owns the ordered list of active modules and the default root, and keeps
the live ``MountTable`` in step with that list:

- at most one active descriptor per module name;
- every descriptor has exactly one live mount, and every mount it created
  has a descriptor (the two change together, never one without the other);
- ``default_root`` points at the requested default module's path, or at
  the first-mounted module's path.

``enable()`` and ``disable()`` hold an ``anyio.Lock`` across their
scan-then-mutate sequence, so they stay atomic even when called from
several tasks. Requests already dispatched into a subtree are not drained
before it is unmounted (see ``modserver.routing.mounts``).
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass

import anyio

from modserver.loader import ModuleLoader
from modserver.module import ServerModule
from modserver.routing.mounts import Mount, MountTable, normalize_mount_path

logger = logging.getLogger("modserver.registry")


@dataclass(frozen=True, slots=True)
class ModuleDescriptor:
    """One active module. Created by enable, destroyed by disable."""

    module_name: str
    mount_path: str
    handle: ServerModule
    mount: Mount


@dataclass(frozen=True, slots=True)
class EnableResult:
    """Outcome of ``enable()``: a fresh mount or an already-loaded no-op."""

    descriptor: ModuleDescriptor
    already_loaded: bool = False

    def __str__(self) -> str:
        d = self.descriptor
        if self.already_loaded:
            return f"{d.module_name} is already loaded at {d.mount_path}"
        return f"Successfully loaded and enabled {d.module_name} at path {d.mount_path}!"


@dataclass(frozen=True, slots=True)
class DisableResult:
    """Outcome of ``disable()``. ``descriptor`` is None for the no-op case."""

    module_name: str
    descriptor: ModuleDescriptor | None = None

    @property
    def disabled(self) -> bool:
        return self.descriptor is not None

    def __str__(self) -> str:
        if self.disabled:
            return f"Module {self.module_name} disabled!"
        return f"Module {self.module_name} is not loaded yet. No action taken."


class ModuleRegistry:
    """Tracks active modules and drives mount/unmount on a ``MountTable``.

    Usage::

        registry = ModuleRegistry(ModuleLoader(), MountTable())
        print(await registry.enable("helloworld", "/hi"))
        registry.resolve_default_root("helloworld")
        print(await registry.disable("helloworld"))
    """

    __slots__ = ("_active", "_default_root", "_lock", "loader", "mounts")

    def __init__(self, loader: ModuleLoader, mounts: MountTable | None = None) -> None:
        self.loader = loader
        self.mounts = mounts if mounts is not None else MountTable()
        self._active: list[ModuleDescriptor] = []
        self._default_root: str | None = None
        self._lock = anyio.Lock()

    # -- Read access --

    @property
    def active(self) -> tuple[ModuleDescriptor, ...]:
        """Active descriptors in mount order."""
        return tuple(self._active)

    @property
    def default_root(self) -> str | None:
        """The path ``GET /`` redirects to, or None."""
        return self._default_root

    def get(self, module_name: str) -> ModuleDescriptor | None:
        for descriptor in self._active:
            if descriptor.module_name == module_name:
                return descriptor
        return None

    def __contains__(self, module_name: object) -> bool:
        return any(d.module_name == module_name for d in self._active)

    def __iter__(self) -> Iterator[ModuleDescriptor]:
        return iter(tuple(self._active))

    def __len__(self) -> int:
        return len(self._active)

    # -- Mutation --

    async def enable(self, module_name: str, mount_path: str) -> EnableResult:
        """Load *module_name* and mount it at *mount_path*.

        Enabling a module that is already active is a no-op that reports
        where it is mounted; it never loads or mounts a second copy.

        Raises:
            ConfigurationError: *mount_path* is not a valid mount path.
            ModuleNotFound: No module with that name exists.
            ModuleLoadError: The module failed to initialize.

        On any exception, the active list and the mount table are unchanged.
        """
        async with self._lock:
            existing = self.get(module_name)
            if existing is not None:
                logger.debug(
                    "enable %r: already mounted at %s", module_name, existing.mount_path
                )
                return EnableResult(existing, already_loaded=True)

            path = normalize_mount_path(mount_path)
            handle = await self.loader.load(module_name)

            mount = self.mounts.mount(path, handle)
            descriptor = ModuleDescriptor(
                module_name=module_name,
                mount_path=mount.prefix,
                handle=handle,
                mount=mount,
            )
            self._active.append(descriptor)
            if self._default_root is None:
                self._default_root = descriptor.mount_path

            logger.info("Enabled module %r at %s", module_name, descriptor.mount_path)
            return EnableResult(descriptor)

    async def disable(self, module_name: str) -> DisableResult:
        """Unmount *module_name* and forget it.

        Disabling a module that is not active is a no-op report, never an
        error. If the module's path was the default root, the default root
        falls back to the first remaining module (or None).
        """
        async with self._lock:
            for index, descriptor in enumerate(self._active):
                if descriptor.module_name != module_name:
                    continue
                self.mounts.unmount(descriptor.mount)
                del self._active[index]
                self._reresolve_after_removal(descriptor)
                logger.info("Disabled module %r (was at %s)", module_name, descriptor.mount_path)
                return DisableResult(module_name, descriptor)

        logger.debug("disable %r: not loaded", module_name)
        return DisableResult(module_name)

    # -- Default root --

    def resolve_default_root(self, requested: str | None = None) -> str | None:
        """Pick the path ``GET /`` redirects to.

        Runs once after the startup batch. The requested module wins if it
        is active; otherwise the first-mounted module; otherwise None.
        """
        chosen = self.get(requested) if requested is not None else None
        if chosen is None and requested is not None:
            logger.warning(
                "Default module %r is not enabled; falling back to the first module",
                requested,
            )
        if chosen is None and self._active:
            chosen = self._active[0]

        self._default_root = chosen.mount_path if chosen is not None else None
        logger.debug("Default root resolved to %s", self._default_root)
        return self._default_root

    def _reresolve_after_removal(self, removed: ModuleDescriptor) -> None:
        if self._default_root != removed.mount_path:
            return
        if any(d.mount_path == removed.mount_path for d in self._active):
            return
        self._default_root = self._active[0].mount_path if self._active else None
        logger.info("Default root moved from %s to %s", removed.mount_path, self._default_root)
