"""Shared fixtures: in-memory modules, a loader that knows them, a registry."""

import pytest

from modserver.loader import ModuleLoader
from modserver.module import ServerModule
from modserver.registry import ModuleRegistry
from modserver.routing.mounts import MountTable

KNOWN_MODULES = ("a", "b", "c", "x", "y", "good")


def build_module(name: str) -> ServerModule:
    """A small module with an index route and a path-param route."""
    module = ServerModule(name)

    @module.route("/")
    def index():
        return f"{name} index"

    @module.route("/echo/{word}")
    def echo(word: str):
        return f"{name}:{word}"

    return module


def _broken_factory() -> ServerModule:
    msg = "database unreachable"
    raise RuntimeError(msg)


@pytest.fixture
def loader() -> ModuleLoader:
    """Loader backed only by the registration table (no package lookups)."""
    loader = ModuleLoader(package=None)
    for name in KNOWN_MODULES:
        loader.register(name, lambda name=name: build_module(name))
    loader.register("broken", _broken_factory)
    return loader


@pytest.fixture
def make_module():
    """Factory for fresh in-memory modules."""
    return build_module


@pytest.fixture
def mounts() -> MountTable:
    return MountTable()


@pytest.fixture
def registry(loader: ModuleLoader, mounts: MountTable) -> ModuleRegistry:
    return ModuleRegistry(loader, mounts)
