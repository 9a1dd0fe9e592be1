"""The module host — the ASGI application the listener serves.

Owns the module registry (and through it the live mount table) for the
lifetime of the process. Everything that enables or disables modules,
whether the startup batch or the console, goes through ``host.registry``.
"""

import logging
from dataclasses import dataclass

from modserver._internal.asgi import Receive, Scope, Send
from modserver.config import HostConfig, ModuleSpec
from modserver.errors import ModServerError
from modserver.loader import ModuleLoader
from modserver.registry import EnableResult, ModuleRegistry
from modserver.routing.mounts import MountTable
from modserver.server.handler import handle_request

logger = logging.getLogger("modserver.server")


@dataclass(frozen=True, slots=True)
class BatchOutcome:
    """Result of enabling one startup ``name:path`` entry."""

    spec: ModuleSpec
    result: EnableResult | None = None
    error: ModServerError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def __str__(self) -> str:
        if self.result is not None:
            return str(self.result)
        return f"Module loading error: {self.error}"


class ModuleHost:
    """ASGI application that serves whatever modules are currently mounted.

    Usage::

        host = ModuleHost(HostConfig(port=8080, enable=(ModuleSpec("helloworld", "/hi"),)))
        await host.startup()
        # hand ``host`` to any ASGI server
    """

    __slots__ = ("config", "registry")

    def __init__(
        self,
        config: HostConfig | None = None,
        *,
        loader: ModuleLoader | None = None,
        mounts: MountTable | None = None,
    ) -> None:
        self.config: HostConfig = config or HostConfig()
        self.registry = ModuleRegistry(
            loader if loader is not None else ModuleLoader(self.config.module_package),
            mounts,
        )

    # -- Startup batch --

    async def enable_batch(self, specs: tuple[ModuleSpec, ...]) -> list[BatchOutcome]:
        """Enable each spec in order. Failures are logged, never fatal."""
        outcomes: list[BatchOutcome] = []
        for spec in specs:
            try:
                result = await self.registry.enable(spec.module_name, spec.mount_path)
            except ModServerError as exc:
                logger.error("Module loading error: %s: %s", spec.module_name, exc)
                outcomes.append(BatchOutcome(spec, error=exc))
            else:
                outcomes.append(BatchOutcome(spec, result=result))
        return outcomes

    async def startup(self) -> list[BatchOutcome]:
        """Run the configured startup batch, then resolve the default root."""
        outcomes = await self.enable_batch(self.config.enable)
        self.registry.resolve_default_root(self.config.default_module)
        return outcomes

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        await handle_request(scope, receive, send, registry=self.registry)

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Acknowledge the ASGI lifespan protocol.

        Modules are enabled by the control thread, not during lifespan, so
        startup and shutdown have nothing to wait for.
        """
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                logger.debug("Lifespan startup with %d module(s) mounted", len(self.registry))
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                logger.debug("Lifespan shutdown")
                await send({"type": "lifespan.shutdown.complete"})
                return
