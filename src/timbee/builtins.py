"""Builtin commands — handled inside the shell, never spawned.

There are exactly four builtins, and the set is closed:

- ``cd [dir | -]`` — change the shell's working directory.  No argument
  means ``$HOME``; ``-`` means ``$OLDPWD`` (and prints the new
  directory).  On success ``OLDPWD`` gets the old directory and
  ``PWD`` the new one; on failure nothing changes.
- ``exit`` — end the session.
- ``help`` — describe the builtins and the editing keys.
- ``ls [-a] [dir]`` — list a directory, directories marked with ``/``.

``cd`` *must* be a builtin: a child process changing its own directory
would have no effect on the shell.  ``ls`` is one only for convenience.

Design choices:
    - **Resolved once to an enum.**  ``Builtin.lookup(name)`` is the
      single "is this a builtin?" decision; dispatch is an exhaustive
      table keyed by the enum, not repeated string comparisons.
    - **Errors are reports, not exceptions.**  A bad ``cd`` target is
      shown to the user and the builtin returns normally.
    - **Output honours ``>``.**  When the request carries an output
      descriptor, builtin output is written there instead of the screen.
"""

from collections.abc import Callable
from enum import StrEnum

from timbee.display import Display
from timbee.editor import EditorAction
from timbee.keys import KeyMap
from timbee.logging import Logger
from timbee.oslayer import OsLayer
from timbee.process import ExecutionRequest


class ShellStatus(StrEnum):
    """Whether the main loop keeps going after a command."""

    CONTINUE = "continue"
    EXIT = "exit"


class Builtin(StrEnum):
    """The closed set of builtin command names."""

    CD = "cd"
    EXIT = "exit"
    HELP = "help"
    LS = "ls"

    @classmethod
    def lookup(cls, name: str) -> "Builtin | None":
        """Return the builtin called *name*, or ``None`` for external programs."""
        try:
            return cls(name)
        except ValueError:
            return None


_BUILTIN_SUMMARIES: dict[Builtin, str] = {
    Builtin.CD: "cd [dir | -]     change directory (default $HOME, - for $OLDPWD)",
    Builtin.EXIT: "exit             leave the shell",
    Builtin.HELP: "help             show this help",
    Builtin.LS: "ls [-a] [dir]    list a directory",
}

_ACTION_SUMMARIES: dict[EditorAction, str] = {
    EditorAction.MOVE_TO_START: "start of line",
    EditorAction.MOVE_TO_END: "end of line",
    EditorAction.MOVE_LEFT: "back one character",
    EditorAction.MOVE_RIGHT: "forward one character",
    EditorAction.KILL_TO_END: "cut to end of line",
    EditorAction.KILL_TO_START: "cut to start of line",
    EditorAction.PASTE: "paste",
    EditorAction.RECALL_PREVIOUS: "previous history entry",
    EditorAction.RECALL_NEXT: "next history entry",
    EditorAction.DELETE_BACKWARD: "delete previous character",
    EditorAction.CLEAR_DISPLAY: "clear the screen",
    EditorAction.SUBMIT: "run the line",
    EditorAction.END_OF_INPUT: "end of input (on an empty line)",
    EditorAction.START_SEARCH: "reverse history search / next match",
    EditorAction.ACCEPT_SEARCH: "keep the search match",
    EditorAction.CANCEL_SEARCH: "abandon the search",
    EditorAction.QUIT: "quit",
}


def format_help(keymap: KeyMap) -> str:
    """Return the help text: builtins, redirection syntax, and key bindings."""
    lines = ["Builtins:"]
    lines.extend(f"  {_BUILTIN_SUMMARIES[builtin]}" for builtin in Builtin)
    lines.append("")
    lines.append("Redirection:  cmd args < infile > outfile")
    lines.append("Quoting:      'single' or \"double\" quotes keep spaces")
    lines.append("")
    lines.append("Keys:")
    for action, summary in _ACTION_SUMMARIES.items():
        keys = keymap.keys_for(action)
        if keys:
            lines.append(f"  {', '.join(keys):<20} {summary}")
    return "\n".join(lines)


class BuiltinDispatcher:
    """Run builtin commands against the OS layer."""

    def __init__(
        self,
        os_layer: OsLayer,
        display: Display,
        logger: Logger,
        *,
        keymap: KeyMap | None = None,
    ) -> None:
        """Create a dispatcher.

        Args:
            os_layer: Directory and environment access.
            display: Receives output and error reports.
            logger: Session log.
            keymap: Bindings described by ``help``.

        """
        self._os = os_layer
        self._display = display
        self._logger = logger
        self._keymap = keymap if keymap is not None else KeyMap()
        self._handlers: dict[Builtin, Callable[[ExecutionRequest], ShellStatus]] = {
            Builtin.CD: self._cmd_cd,
            Builtin.EXIT: self._cmd_exit,
            Builtin.HELP: self._cmd_help,
            Builtin.LS: self._cmd_ls,
        }

    def run(self, builtin: Builtin, request: ExecutionRequest) -> ShellStatus:
        """Execute *builtin* with the arguments in *request*.

        The request's descriptors are not closed here; the caller owns
        them.
        """
        self._logger.info(f"builtin {list(request.argv)}", source="builtin")
        return self._handlers[builtin](request)

    # -- Handlers -------------------------------------------------------------

    def _cmd_cd(self, request: ExecutionRequest) -> ShellStatus:
        """Change directory and keep PWD/OLDPWD in step."""
        env = self._os.environment
        args = request.args
        announce = False
        if len(args) > 1:
            self._error("cd: too many arguments")
            return ShellStatus.CONTINUE
        if not args:
            target = env.get("HOME")
            if target is None:
                self._error("cd: HOME not set")
                return ShellStatus.CONTINUE
        elif args[0] == "-":
            target = env.get("OLDPWD")
            if target is None:
                self._error("cd: OLDPWD not set")
                return ShellStatus.CONTINUE
            announce = True
        else:
            target = args[0]

        try:
            previous = self._os.get_working_directory()
        except OSError:
            # The current directory may have been deleted under us.
            previous = env.get("PWD", "")

        try:
            self._os.change_directory(target)
        except OSError as e:
            self._error(f"cd: {target}: {e.strerror or e}")
            return ShellStatus.CONTINUE

        current = self._os.get_working_directory()
        if previous:
            env.set("OLDPWD", previous)
        env.set("PWD", current)
        self._logger.info(f"cd {previous} -> {current}", source="builtin")
        if announce:
            self._emit(request, current)
        return ShellStatus.CONTINUE

    def _cmd_exit(self, _request: ExecutionRequest) -> ShellStatus:
        """Signal the main loop to stop."""
        return ShellStatus.EXIT

    def _cmd_help(self, request: ExecutionRequest) -> ShellStatus:
        """Show the builtins and key bindings."""
        self._emit(request, format_help(self._keymap))
        return ShellStatus.CONTINUE

    def _cmd_ls(self, request: ExecutionRequest) -> ShellStatus:
        """List directory contents, sorted by name."""
        args = list(request.args)
        show_hidden = "-a" in args
        paths = [a for a in args if a != "-a"]
        path = paths[0] if paths else "."
        try:
            entries = self._os.list_directory(path)
        except OSError as e:
            self._error(f"ls: {path}: {e.strerror or e}")
            return ShellStatus.CONTINUE
        names = sorted(
            entry.name + ("/" if entry.is_dir else "")
            for entry in entries
            if show_hidden or not entry.name.startswith(".")
        )
        if names:
            self._emit(request, "\n".join(names))
        return ShellStatus.CONTINUE

    # -- Helpers --------------------------------------------------------------

    def _emit(self, request: ExecutionRequest, text: str) -> None:
        if request.stdout_fd is None:
            self._display.report(text)
            return
        try:
            self._os.write(request.stdout_fd, (text + "\n").encode())
        except OSError as e:
            self._error(f"{request.name}: write error: {e.strerror or e}")

    def _error(self, message: str) -> None:
        self._logger.warning(message, source="builtin")
        self._display.report(f"timbee: {message}")
