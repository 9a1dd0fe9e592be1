"""Host configuration.

HostConfig is a frozen dataclass. It is built once from the process arguments
and handed to the host and the console.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ModuleSpec:
    """A ``name:path`` pair from the startup ``enable=`` option."""

    module_name: str
    mount_path: str


@dataclass(frozen=True, slots=True)
class HostConfig:
    """Host configuration. Immutable after creation.

    ``port`` has no usable default: the CLI refuses to start without one.
    Override what you need::

        config = HostConfig(port=8080, enable=(ModuleSpec("helloworld", "/hi"),))
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 0
    workers: int = 1

    # Modules
    enable: tuple[ModuleSpec, ...] = ()
    default_module: str | None = None
    module_package: str = "modserver.modules"

    # Console
    color: bool = False

    # Logging
    log_level: str = "info"
