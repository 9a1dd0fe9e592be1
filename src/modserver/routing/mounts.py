"""Live mount table — the router facade the module registry drives.

Unlike a module's ``Router`` (compiled once, immutable), the mount table
changes while the server is running: the control thread mounts and
unmounts module subtrees while server workers dispatch requests.

Free-threading safety:
    - Writers serialize on a ``threading.Lock`` and publish a brand-new
      tuple of ``Mount`` objects.
    - Readers take the current tuple without locking. A request that
      resolved a mount before it was removed finishes against that
      subtree; there is no drain step before unmount.
"""

import itertools
import threading
from dataclasses import dataclass
from typing import Protocol

from modserver.errors import ConfigurationError, MethodNotAllowed, NotFound
from modserver.routing.route import RouteMatch


class Subtree(Protocol):
    """Anything that can answer requests below a mount prefix."""

    def match(self, method: str, path: str) -> RouteMatch: ...


@dataclass(frozen=True, slots=True, eq=False)
class Mount:
    """Opaque token for one mounted subtree.

    Returned by ``MountTable.mount()`` and consumed by ``unmount()``.
    Compared by identity: two mounts of the same subtree at the same
    prefix are still distinct tokens.
    """

    prefix: str
    subtree: Subtree
    serial: int

    def covers(self, path: str) -> bool:
        """True if *path* is the prefix itself or lies beneath it."""
        return path == self.prefix or path.startswith(self.prefix + "/")


@dataclass(frozen=True, slots=True)
class MountMatch:
    """A request resolved to a mount and a route inside its subtree."""

    mount: Mount
    route_match: RouteMatch
    path: str


def normalize_mount_path(path: str) -> str:
    """Normalize a mount path to ``/segment[/segment...]``.

    ``"hi"`` and ``"/hi/"`` both become ``"/hi"``. The site root is
    reserved for the default-root redirect, so ``""`` and ``"/"`` are
    rejected.
    """
    parts = [p for p in path.strip().split("/") if p]
    if not parts:
        msg = f"Invalid mount path {path!r}: a module cannot be mounted at the site root"
        raise ConfigurationError(msg)
    return "/" + "/".join(parts)


class MountTable:
    """Mutable table of mounted subtrees with longest-prefix dispatch.

    Usage::

        table = MountTable()
        mount = table.mount("/hi", module)
        match = table.resolve("GET", "/hi/greet/alice")
        table.unmount(mount)
    """

    __slots__ = ("_lock", "_mounts", "_serials")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._mounts: tuple[Mount, ...] = ()
        self._serials = itertools.count(1)

    def mount(self, path: str, subtree: Subtree) -> Mount:
        """Attach *subtree* under *path* and return its token."""
        prefix = normalize_mount_path(path)
        with self._lock:
            token = Mount(prefix=prefix, subtree=subtree, serial=next(self._serials))
            self._mounts = (*self._mounts, token)
        return token

    def unmount(self, mount: Mount) -> None:
        """Detach the subtree behind *mount*.

        Raises ``KeyError`` if the token is not currently mounted.
        """
        with self._lock:
            remaining = tuple(m for m in self._mounts if m is not mount)
            if len(remaining) == len(self._mounts):
                msg = f"{mount.prefix!r} (mount #{mount.serial}) is not mounted"
                raise KeyError(msg)
            self._mounts = remaining

    @property
    def mounts(self) -> tuple[Mount, ...]:
        """Snapshot of current mounts in mount order."""
        return self._mounts

    def __len__(self) -> int:
        return len(self._mounts)

    def __contains__(self, mount: object) -> bool:
        return any(m is mount for m in self._mounts)

    def resolve(self, method: str, path: str) -> MountMatch:
        """Find the mount and route that serve *path*.

        Longer prefixes are tried first; among equal prefixes the earlier
        mount wins. A subtree with no matching route falls through to the
        next candidate.

        Raises ``NotFound`` when nothing matches, or ``MethodNotAllowed``
        when the only matching routes reject *method*.
        """
        candidates = sorted(
            (m for m in self._mounts if m.covers(path)),
            key=lambda m: len(m.prefix),
            reverse=True,
        )
        not_allowed: MethodNotAllowed | None = None
        for mount in candidates:
            relative = path[len(mount.prefix) :] or "/"
            try:
                route_match = mount.subtree.match(method, relative)
            except MethodNotAllowed as exc:
                not_allowed = not_allowed or exc
                continue
            except NotFound:
                continue
            return MountMatch(mount=mount, route_match=route_match, path=relative)

        if not_allowed is not None:
            raise not_allowed
        raise NotFound(f"No mounted module serves {method} {path!r}")
