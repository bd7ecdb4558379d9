"""Interactive REPL (Read-Eval-Print Loop) for the shell.

The REPL wires everything together and runs the classic loop:

    1. **Render** — draw the prompt and the line being edited.
    2. **Read** — block until one key is pressed.
    3. **Edit** — the key becomes an editor action.
    4. **Eval** — a submitted line goes to ``shell.execute()``, with the
       terminal handed back to cooked mode while a program runs.
    5. **Loop** — until ``exit``, Ctrl-D on an empty line, or Ctrl-Q.

``Session`` is the explicit context the loop owns: editor (with its
clipboard and search state), history, shell, and key map.  It has no
I/O of its own, so it is fully testable by feeding key identifiers.

When standard input is not a terminal, ``run_script_stream`` executes
one command per input line instead, without any line editing.
"""

import argparse
import contextlib
import os
import sys
from collections.abc import Callable, Iterable, Iterator
from contextlib import AbstractContextManager
from typing import TextIO

from timbee import __version__
from timbee.builtins import ShellStatus
from timbee.config import ConfigError, ShellConfig, parse_capacity, parse_level
from timbee.display import AnsiDisplay, PlainDisplay
from timbee.editor import LineEditor, Outcome
from timbee.history import HistoryStore
from timbee.keys import KeyMap, decode_key
from timbee.logging import Logger
from timbee.oslayer import PosixOsLayer
from timbee.shell import Shell
from timbee.terminal import Terminal

_BANNER_WIDTH = 38


def format_banner() -> str:
    """Return the greeting shown when an interactive session starts."""
    border = "=" * _BANNER_WIDTH
    return (
        f"  {border}\n"
        f"            TIMBEE {__version__}\n"
        f"      An interactive command shell\n"
        f"  {border}\n"
        "Type 'help' for commands and keys, 'exit' to quit."
    )


class Session:
    """The state of one interactive session, driven key by key."""

    def __init__(
        self,
        *,
        editor: LineEditor,
        shell: Shell,
        keymap: KeyMap | None = None,
        foreground: Callable[[], AbstractContextManager[None]] = contextlib.nullcontext,
    ) -> None:
        """Create a session.

        Args:
            editor: The line editor (owns line, clipboard, search state).
            shell: Executes submitted lines.
            keymap: Key bindings (defaults to ``DEFAULT_BINDINGS``).
            foreground: Context manager factory wrapped around every
                command execution, e.g. to restore cooked mode.

        """
        self._editor = editor
        self._shell = shell
        self._keymap = keymap if keymap is not None else KeyMap()
        self._foreground = foreground

    @property
    def editor(self) -> LineEditor:
        """Return the line editor."""
        return self._editor

    @property
    def history(self) -> HistoryStore:
        """Return the session history."""
        return self._editor.history

    def render(self) -> None:
        """Draw the prompt (or search prompt) for the current state."""
        self._editor.render(self._shell.working_directory())

    def feed(self, key: str) -> ShellStatus:
        """Handle one decoded key identifier.

        Unbound non-printable keys are ignored.

        Returns:
            ``ShellStatus.EXIT`` when the session should end.

        """
        binding = self._keymap.lookup(key)
        if binding is None:
            return ShellStatus.CONTINUE
        action, text = binding
        result = self._editor.handle(action, text)

        if result.outcome is Outcome.SUBMIT and result.line is not None:
            with self._foreground():
                return self._shell.execute(result.line)
        if result.outcome in (Outcome.END_OF_INPUT, Outcome.QUIT):
            return ShellStatus.EXIT
        return ShellStatus.CONTINUE

    def feed_all(self, keys: Iterable[str]) -> ShellStatus:
        """Feed keys until one ends the session; return the final status."""
        for key in keys:
            if self.feed(key) is ShellStatus.EXIT:
                return ShellStatus.EXIT
        return ShellStatus.CONTINUE


def run_interactive(config: ShellConfig, logger: Logger, history: HistoryStore) -> None:
    """Run the key-by-key loop on the controlling terminal."""
    os_layer = PosixOsLayer()
    keymap = KeyMap()
    terminal = Terminal()
    display = AnsiDisplay(terminal, prompt=config.prompt)
    shell = Shell(os_layer=os_layer, display=display, logger=logger, keymap=keymap)
    editor = LineEditor(history, display, capacity=config.capacity, logger=logger)

    @contextlib.contextmanager
    def foreground() -> Iterator[None]:
        display.finish_line()
        with terminal.cooked():
            yield

    session = Session(editor=editor, shell=shell, keymap=keymap, foreground=foreground)

    with terminal:
        display.report(format_banner())
        while True:
            session.render()
            try:
                raw = terminal.read_key()
            except EOFError:
                break
            key = decode_key(raw)
            if key is not None and session.feed(key) is ShellStatus.EXIT:
                break
        display.finish_line()


def run_script_stream(stream: TextIO, logger: Logger, history: HistoryStore) -> None:
    """Execute one command per line of *stream*, without line editing."""
    shell = Shell(os_layer=PosixOsLayer(), display=PlainDisplay(sys.stdout), logger=logger)
    for raw_line in stream:
        line = raw_line.rstrip("\n")
        if not line:
            continue
        history.append(line)
        sys.stdout.flush()
        if shell.execute(line) is ShellStatus.EXIT:
            break


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line options (each overrides its ``TIMBEE_*`` variable)."""
    parser = argparse.ArgumentParser(prog="timbee", description="Interactive command shell.")
    parser.add_argument("--prompt", help="Prompt template; {cwd} is the working directory")
    parser.add_argument("--buffer-capacity", type=parse_capacity, help="Initial line buffer size")
    parser.add_argument(
        "--print-history",
        action="store_true",
        default=None,
        help="Print the session history on exit",
    )
    parser.add_argument("--log-file", help="Append the session log to this file")
    parser.add_argument("--log-level", type=parse_level, help="debug, info, warning or error")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace, environ: dict[str, str] | None = None) -> ShellConfig:
    """Combine environment variables and command-line options."""
    base = ShellConfig.from_env(os.environ if environ is None else environ)
    return base.with_overrides(
        prompt=args.prompt,
        capacity=args.buffer_capacity,
        print_history=args.print_history,
        log_file=args.log_file,
        log_level=args.log_level,
    )


def main(argv: list[str] | None = None) -> int:
    """Console entry point; returns the process exit status."""
    args = parse_args(argv)
    try:
        config = build_config(args)
    except ConfigError as e:
        print(f"timbee: {e}", file=sys.stderr)  # noqa: T201
        return 2

    history = HistoryStore()
    with contextlib.ExitStack() as stack:
        sink = None
        if config.log_file:
            sink = stack.enter_context(open(config.log_file, "a", encoding="utf-8"))  # noqa: SIM115
        logger = Logger(sink=sink, min_level=config.log_level)
        logger.info("session started", source="shell")

        if sys.stdin.isatty():
            run_interactive(config, logger, history)
        else:
            run_script_stream(sys.stdin, logger, history)

        logger.info(f"session ended after {len(history)} commands", source="shell")

    if config.print_history:
        for entry in history.entries:
            print(entry)  # noqa: T201
    return 0
