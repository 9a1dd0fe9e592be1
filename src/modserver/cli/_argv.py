"""Process argument parsing — ``key=value`` options and bare flags.

Arguments containing ``=`` are options, split on the first ``=``;
everything else is a flag. ``config_from_args`` turns the options into a
``HostConfig`` and rejects anything the host cannot start with.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from modserver.config import HostConfig, ModuleSpec
from modserver.errors import ConfigurationError

logger = logging.getLogger("modserver.cli")

LOG_LEVELS = ("debug", "info", "warning", "error", "critical")

_KNOWN_OPTIONS = frozenset({"port", "enable", "default", "host", "modules", "log_level"})


@dataclass(frozen=True, slots=True)
class ParsedArgs:
    """Flags and options in the order they appeared on the command line."""

    flags: tuple[str, ...] = ()
    options: tuple[tuple[str, str], ...] = ()

    def option_map(self) -> dict[str, str]:
        """Options as a dict. A repeated key keeps its last value."""
        return dict(self.options)


def parse_argv(argv: Iterable[str]) -> ParsedArgs:
    """Split raw arguments into flags and ``key=value`` options.

    Examples::

        parse_argv(["port=8080", "--color"])
        # ParsedArgs(flags=("--color",), options=(("port", "8080"),))

        parse_argv(["enable=a:/x=1"])
        # options=(("enable", "a:/x=1"),)
    """
    flags: list[str] = []
    options: list[tuple[str, str]] = []
    for arg in argv:
        if "=" in arg:
            key, _, value = arg.partition("=")
            options.append((key, value))
        else:
            flags.append(arg)
    return ParsedArgs(flags=tuple(flags), options=tuple(options))


def parse_enable_list(value: str) -> tuple[ModuleSpec, ...]:
    """Parse ``name1:path1,name2:path2`` into module specs.

    An entry without ``:path`` keeps an empty mount path; enabling it
    fails on its own without stopping the rest of the batch.
    """
    specs: list[ModuleSpec] = []
    for entry in value.split(","):
        entry = entry.strip()
        if not entry:
            continue
        name, _, path = entry.partition(":")
        specs.append(ModuleSpec(module_name=name, mount_path=path))
    return tuple(specs)


def parse_port(value: str | None) -> int:
    """Validate the ``port=`` option. Zero or missing means no port."""
    if value is None or value.strip() in ("", "0"):
        msg = "NO PORT SPECIFIED"
        raise ConfigurationError(msg)
    try:
        port = int(value)
    except ValueError:
        msg = f"Invalid port {value!r}: expected an integer"
        raise ConfigurationError(msg) from None
    if not 0 < port < 65536:
        msg = f"Invalid port {port}: must be between 1 and 65535"
        raise ConfigurationError(msg)
    return port


def config_from_args(options: Mapping[str, str], *, color: bool = False) -> HostConfig:
    """Build a ``HostConfig`` from parsed ``key=value`` options.

    Raises ``ConfigurationError`` for a missing or invalid port or an
    unknown log level.
    """
    for key in options:
        if key not in _KNOWN_OPTIONS:
            logger.warning("Ignoring unknown option %r", key)

    log_level = options.get("log_level", "info").lower()
    if log_level not in LOG_LEVELS:
        msg = f"Invalid log_level {log_level!r}: expected one of {', '.join(LOG_LEVELS)}"
        raise ConfigurationError(msg)

    defaults = HostConfig()
    return HostConfig(
        host=options.get("host") or defaults.host,
        port=parse_port(options.get("port")),
        enable=parse_enable_list(options.get("enable", "")),
        default_module=options.get("default") or None,
        module_package=options.get("modules") or defaults.module_package,
        color=color,
        log_level=log_level,
    )
