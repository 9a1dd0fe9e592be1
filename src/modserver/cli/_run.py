"""Host startup — startup batch, control console, and listener.

The control thread runs one anyio event loop: it enables the startup
batch, resolves the default root, signals the main thread, then runs the
console until ``quit``. The main thread runs the listener until the
console (or Ctrl-C) interrupts it.

If the startup batch itself crashes, the listener is never started. If
the console crashes later, the listener is stopped: a host nobody can
control does not keep serving.
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field

import anyio

from modserver.config import HostConfig
from modserver.console import Console
from modserver.host import ModuleHost
from modserver.server.listener import run_listener, stop_listener

logger = logging.getLogger("modserver.cli")


@dataclass(slots=True)
class StartupGate:
    """Hands the startup result from the control thread to the main thread."""

    ready: threading.Event = field(default_factory=threading.Event)
    error: Exception | None = None


def run_host(config: HostConfig) -> None:
    """Start the host described by *config* and block until it stops.

    Raises ``SystemExit(1)`` if the startup batch crashes.
    """
    host = ModuleHost(config)
    console = Console(host.registry, color=config.color, on_quit=stop_listener)
    gate = StartupGate()

    control = threading.Thread(
        target=anyio.run,
        args=(_control, host, console, gate),
        name="modserver-control",
        daemon=True,
    )
    control.start()
    gate.ready.wait()
    if gate.error is not None:
        raise SystemExit(1)

    run_listener(
        host,
        bind=config.host,
        port=config.port,
        workers=config.workers,
        log_level=config.log_level,
    )
    console.stop()


async def _control(
    host: ModuleHost,
    console: Console,
    gate: StartupGate,
    *,
    on_console_crash: Callable[[], None] = stop_listener,
) -> None:
    try:
        outcomes = await host.startup()
    except Exception as exc:
        logger.exception("Startup failed; not starting the listener")
        gate.error = exc
        return
    else:
        for outcome in outcomes:
            console.print(str(outcome), tone="green" if outcome.ok else "red")
        if host.registry.default_root is not None:
            logger.info("Root redirects to %s", host.registry.default_root)
    finally:
        gate.ready.set()

    try:
        await console.run()
    except Exception:
        logger.exception("Console stopped unexpectedly; stopping listener")
        on_console_crash()
