"""Control console — a line-oriented command loop over the module registry.

Reads one line, runs the command to completion (including any module
load it awaits), prints the result, then reads the next line. Commands
never overlap, so enable/disable issued here are strictly serialized.

Output is plain text; with ``color=True`` results are tinted with ANSI
escapes (green for changes, yellow for no-ops, red for failures).
"""

import logging
import sys
from collections.abc import Awaitable, Callable
from typing import TextIO

import anyio

from modserver.errors import ModServerError, UsageError
from modserver.registry import ModuleRegistry

logger = logging.getLogger("modserver.console")

PROMPT = "> "

HELP_TEXT = """
SERVER COMMANDS:

enable <modulename> <serverpath>
      Enables the server module named <modulename> and mounts it
      on the server at 'server.com:port/<serverpath>'.

disable <modulename>
      If the module is currently loaded, disables it by removing
      all routes that would lead to it. Does nothing if the module
      is not loaded.

list
      Lists all currently enabled modules.

CONSOLE COMMANDS:

clear     Attempt to clear the console
help      Display help message
quit      Quit server
"""

CLEAR_SCREEN = "\033[2J\033[H"

type LineReader = Callable[[str], Awaitable[str]]


async def read_stdin_line(prompt: str) -> str:
    """Read one line from stdin on a worker thread.

    The control loop keeps running while the read is pending. Worker
    threads inherit the control thread's daemon flag, so a pending read
    never holds up process exit.

    Raises ``EOFError`` when stdin is closed.
    """
    return await anyio.to_thread.run_sync(input, prompt, abandon_on_cancel=True)


class _Palette:
    """ANSI escape sequences — empty strings when color is disabled."""

    __slots__ = ("green", "red", "reset", "yellow")

    def __init__(self, *, enabled: bool) -> None:
        if enabled:
            self.reset = "\033[0m"
            self.red = "\033[31m"
            self.green = "\033[32m"
            self.yellow = "\033[33m"
        else:
            self.reset = self.red = self.green = self.yellow = ""


class Console:
    """Interactive dispatcher onto a ``ModuleRegistry``.

    Usage::

        console = Console(host.registry, color=True, on_quit=stop_listener)
        await console.run()
    """

    __slots__ = ("_on_quit", "_out", "_palette", "_read_line", "registry", "running")

    def __init__(
        self,
        registry: ModuleRegistry,
        *,
        read_line: LineReader | None = None,
        out: TextIO | None = None,
        color: bool = False,
        on_quit: Callable[[], None] | None = None,
    ) -> None:
        self.registry = registry
        self.running = False
        self._read_line = read_line or read_stdin_line
        self._out = out
        self._palette = _Palette(enabled=color)
        self._on_quit = on_quit

    # -- Output --

    def print(self, text: str = "", *, tone: str | None = None) -> None:
        color = getattr(self._palette, tone) if tone else ""
        reset = self._palette.reset if color else ""
        print(f"{color}{text}{reset}", file=self._out or sys.stdout, flush=True)

    # -- Loop --

    async def run(self) -> None:
        """Read and execute commands until ``quit``, EOF, or ``stop()``."""
        self.running = True
        while self.running:
            try:
                line = await self._read_line(PROMPT)
            except EOFError:
                line = "quit"
            await self.execute(line)

    def stop(self) -> None:
        """Stop the loop after the current command finishes."""
        self.running = False

    async def execute(self, line: str) -> None:
        """Run a single command line. Failures are printed, never raised."""
        verb, *args = line.split() or [""]
        if not verb:
            return

        command = self._commands.get(verb)
        if command is None:
            self.print(
                f"'{verb}' is not a command recognized. Type 'help' for command list.",
                tone="red",
            )
            return

        try:
            await command(self, args)
        except UsageError as exc:
            self.print(str(exc), tone="red")
        except ModServerError as exc:
            self.print(f"Error: {exc}", tone="red")
        except Exception:
            logger.exception("Command %r failed", line)
            self.print(f"Command '{verb}' failed unexpectedly. See the log for details.", tone="red")

    # -- Commands --

    async def _enable(self, args: list[str]) -> None:
        if len(args) < 2:
            msg = "Command 'enable' requires at least 2 arguments: enable <modulename> <serverpath>"
            raise UsageError(msg)
        module_name, mount_path = args[0], args[1]
        try:
            result = await self.registry.enable(module_name, mount_path)
        except ModServerError as exc:
            self.print(f"Enabling server module {module_name} failed: {exc}.", tone="red")
            return
        self.print(str(result), tone="yellow" if result.already_loaded else "green")

    async def _disable(self, args: list[str]) -> None:
        if not args:
            msg = "Command 'disable' requires at least 1 argument: disable <modulename>"
            raise UsageError(msg)
        result = await self.registry.disable(args[0])
        self.print(str(result), tone="green" if result.disabled else "yellow")

    async def _list(self, args: list[str]) -> None:
        active = self.registry.active
        if not active:
            self.print("There are no currently enabled modules.")
            return
        for descriptor in active:
            self.print(
                f"Module {descriptor.module_name} currently mounted at {descriptor.mount_path}"
            )

    async def _help(self, args: list[str]) -> None:
        self.print(HELP_TEXT)

    async def _clear(self, args: list[str]) -> None:
        out = self._out or sys.stdout
        out.write(CLEAR_SCREEN)
        out.flush()

    async def _quit(self, args: list[str]) -> None:
        self.print("Quitting server!")
        self.running = False
        if self._on_quit is not None:
            self._on_quit()

    _commands: dict[str, Callable[["Console", list[str]], Awaitable[None]]] = {
        "enable": _enable,
        "disable": _disable,
        "list": _list,
        "help": _help,
        "clear": _clear,
        "quit": _quit,
    }
