"""modserver CLI — start the module host.

Entry point registered as ``modserver`` in ``pyproject.toml``::

    [project.scripts]
    modserver = "modserver.cli:main"
"""

import argparse
import logging
import sys

from modserver.cli._argv import config_from_args, parse_argv
from modserver.errors import ConfigurationError

logger = logging.getLogger("modserver.cli")

USAGE_EPILOG = """\
options (key=value):
  port=<port>   Required. The port the server listens on.

  enable        Takes a comma separated list of modules and mountpoints to
                initialize on startup. Do NOT separate the comma separated
                list with spaces!
                Example: enable=helloworld:/hi,test:/mountpoint

  default       Specifies the default "root" module for the server.
                When the user goes to "server.com/", they will go
                to whatever is defined here. If not defined, the
                first module enabled will be the root. If no modules
                are enabled at startup, the root will simply not exist.

  host          Bind address (default 127.0.0.1).
  modules       Package that server modules are loaded from
                (default modserver.modules).
  log_level     debug, info, warning, error, or critical (default info).
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="modserver",
        description="Modular server: mount and unmount HTTP modules at runtime.",
        usage="modserver port=<port> [key=value ...] [--color]",
        epilog=USAGE_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--color",
        action="store_true",
        help="Enable colored console output",
    )
    parser.add_argument(
        "options",
        nargs="*",
        metavar="key=value",
        help="Startup options (see below)",
    )
    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``modserver`` command."""
    parser = build_parser()
    args, extras = parser.parse_known_args(argv)
    parsed = parse_argv([*args.options, *extras])

    try:
        config = config_from_args(parsed.option_map(), color=args.color)
    except ConfigurationError as exc:
        print(f"{exc}\n", file=sys.stderr)
        parser.print_help(sys.stderr)
        raise SystemExit(1) from exc

    configure_logging(config.log_level)
    for flag in parsed.flags:
        logger.warning("Ignoring unknown flag %r", flag)

    from modserver.cli._run import run_host

    run_host(config)
