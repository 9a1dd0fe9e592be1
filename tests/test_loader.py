"""Tests for modserver.loader — name to ServerModule resolution."""

import textwrap
import uuid
from pathlib import Path

import pytest

from modserver.errors import ModuleLoadError, ModuleNotFound
from modserver.loader import ModuleLoader
from modserver.module import ServerModule


@pytest.fixture
def module_package(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    """A throwaway module namespace package on sys.path."""
    name = f"mods_{uuid.uuid4().hex}"
    package = tmp_path / name
    package.mkdir()
    (package / "__init__.py").write_text("")

    sources = {
        "boom": """
            raise RuntimeError("boom at import")
        """,
        "needsdep": """
            import modserver_dependency_that_is_not_installed
        """,
        "nothing": """
            VALUE = 1
        """,
        "wrongtype": """
            module = 42
        """,
        "factory": """
            from modserver.module import ServerModule

            def create_module():
                module = ServerModule("factory")

                @module.route("/")
                def index():
                    return "made"

                return module
        """,
        "hello_world": """
            from modserver.module import ServerModule

            module = ServerModule("hello_world")

            @module.route("/")
            def index():
                return "underscored"
        """,
    }
    for filename, source in sources.items():
        (package / f"{filename}.py").write_text(textwrap.dedent(source))

    monkeypatch.syspath_prepend(str(tmp_path))
    return name


class TestBundledModules:
    @pytest.mark.asyncio
    async def test_helloworld(self) -> None:
        module = await ModuleLoader().load("helloworld")

        assert isinstance(module, ServerModule)
        assert module.name == "helloworld"
        assert module.match("GET", "/").route.handler() == "Hello World!"

    @pytest.mark.asyncio
    async def test_unknown_name(self) -> None:
        with pytest.raises(ModuleNotFound) as exc_info:
            await ModuleLoader().load("nonexistent")
        assert exc_info.value.module_name == "nonexistent"
        assert "nonexistent" in str(exc_info.value)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["", "../etc", "a.b", "1abc", "has space", "foo-bar"])
    async def test_invalid_names_are_not_found(self, name: str) -> None:
        with pytest.raises(ModuleNotFound):
            await ModuleLoader().load(name)


class TestRegistrationTable:
    @pytest.mark.asyncio
    async def test_registered_instance(self) -> None:
        module = ServerModule("status")
        loader = ModuleLoader(package=None)
        loader.register("status", lambda: module)

        assert "status" in loader
        assert await loader.load("status") is module

    @pytest.mark.asyncio
    async def test_registration_beats_package(self) -> None:
        custom = ServerModule("custom")
        loader = ModuleLoader()
        loader.register("helloworld", lambda: custom)

        assert await loader.load("helloworld") is custom

    @pytest.mark.asyncio
    async def test_async_factory(self) -> None:
        async def create() -> ServerModule:
            return ServerModule("async")

        loader = ModuleLoader(package=None)
        loader.register("async", create)

        module = await loader.load("async")
        assert module.name == "async"

    @pytest.mark.asyncio
    async def test_factory_raising(self) -> None:
        def create() -> ServerModule:
            msg = "no config"
            raise ValueError(msg)

        loader = ModuleLoader(package=None)
        loader.register("bad", create)

        with pytest.raises(ModuleLoadError, match="ValueError: no config"):
            await loader.load("bad")

    @pytest.mark.asyncio
    async def test_factory_wrong_type(self) -> None:
        loader = ModuleLoader(package=None)
        loader.register("bad", lambda: "not a module")

        with pytest.raises(ModuleLoadError, match="str"):
            await loader.load("bad")

    @pytest.mark.asyncio
    async def test_invalid_route_table(self) -> None:
        module = ServerModule("bad")
        module.route("/items/<id>")(lambda: "x")
        loader = ModuleLoader(package=None)
        loader.register("bad", lambda: module)

        with pytest.raises(ModuleLoadError, match="invalid route table"):
            await loader.load("bad")

    @pytest.mark.asyncio
    async def test_no_package_and_unregistered(self) -> None:
        with pytest.raises(ModuleNotFound):
            await ModuleLoader(package=None).load("helloworld")

    @pytest.mark.asyncio
    async def test_loaded_module_is_frozen(self) -> None:
        module = ServerModule("late")
        loader = ModuleLoader(package=None)
        loader.register("late", lambda: module)

        await loader.load("late")

        with pytest.raises(RuntimeError, match="after it has been mounted"):
            module.route("/late")(lambda: "x")


class TestPackageLookup:
    @pytest.mark.asyncio
    async def test_missing_module(self, module_package: str) -> None:
        with pytest.raises(ModuleNotFound):
            await ModuleLoader(module_package).load("absent")

    @pytest.mark.asyncio
    async def test_import_error_is_load_error(self, module_package: str) -> None:
        with pytest.raises(ModuleLoadError, match="boom at import"):
            await ModuleLoader(module_package).load("boom")

    @pytest.mark.asyncio
    async def test_missing_dependency_is_load_error(self, module_package: str) -> None:
        with pytest.raises(ModuleLoadError, match="modserver_dependency_that_is_not_installed"):
            await ModuleLoader(module_package).load("needsdep")

    @pytest.mark.asyncio
    async def test_no_entry_point(self, module_package: str) -> None:
        with pytest.raises(ModuleLoadError, match="neither 'module' nor 'create_module'"):
            await ModuleLoader(module_package).load("nothing")

    @pytest.mark.asyncio
    async def test_entry_point_wrong_type(self, module_package: str) -> None:
        with pytest.raises(ModuleLoadError, match="int"):
            await ModuleLoader(module_package).load("wrongtype")

    @pytest.mark.asyncio
    async def test_factory_gives_fresh_handles(self, module_package: str) -> None:
        loader = ModuleLoader(module_package)

        first = await loader.load("factory")
        second = await loader.load("factory")

        assert first is not second
        assert first.match("GET", "/").route.handler() == "made"

    @pytest.mark.asyncio
    async def test_only_exact_spelling_resolves(self, module_package: str) -> None:
        loader = ModuleLoader(module_package)

        module = await loader.load("hello_world")
        assert module.name == "hello_world"

        with pytest.raises(ModuleNotFound, match="not a valid module name"):
            await loader.load("hello-world")
