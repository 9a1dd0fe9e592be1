"""HTTP listener — runs the module host under a pounce ASGI server.

Pounce's ``run()`` blocks and owns signal handling, so it runs on the main
thread while the control console runs on its own thread. ``stop_listener``
asks the server to shut down the same way Ctrl-C does.
"""

from __future__ import annotations

import logging
import signal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from modserver.host import ModuleHost

logger = logging.getLogger("modserver.server")


def run_listener(
    host: ModuleHost,
    *,
    bind: str,
    port: int,
    workers: int = 1,
    log_level: str = "info",
) -> None:
    """Serve *host* on ``bind:port`` until the server is interrupted.

    Args:
        host: The ASGI module host.
        bind: Bind host address.
        port: Bind port number.
        workers: Worker count. Every worker shares the one in-process
            registry, so mounts made from the console are visible to all.
        log_level: Pounce log level (debug, info, warning, error).
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(
        host=bind,
        port=port,
        workers=workers,
        log_level=log_level,
    )
    server = Server(config, host)
    logger.info("Listening on %s:%d!", bind, port)
    try:
        server.run()
    except KeyboardInterrupt:
        logger.info("Listener stopped")


def stop_listener() -> None:
    """Interrupt the listener from any thread."""
    logger.debug("Stopping listener")
    signal.raise_signal(signal.SIGINT)
