"""The shell — turn a submitted line into something that runs.

``Shell.execute`` is the whole command pipeline::

    line ──tokenize──▶ tokens ──resolve──▶ ExecutionRequest
                                              │
                         Builtin.lookup(name) ┤
                                              ├─ builtin → BuiltinDispatcher
                                              └─ other   → ProcessExecutor

The shell reports everything through the ``Display`` and returns a
``ShellStatus`` telling the main loop whether to continue.

Design choices:
    - **The shell owns no editing state.**  History, clipboard and the
      command line live in the editor; the shell only sees finished
      lines.
    - **Descriptors are released on every path.**  External commands
      hand them to the executor; builtins and no-op lines release them
      here.
    - **Collaborators are injected** (OS layer, display, logger), so the
      same pipeline runs against the real system or a test double.
"""

from timbee.builtins import Builtin, BuiltinDispatcher, ShellStatus
from timbee.display import Display
from timbee.executor import ProcessExecutor
from timbee.keys import KeyMap
from timbee.logging import Logger
from timbee.oslayer import OsLayer
from timbee.parser import tokenize
from timbee.process import ProcessOutcome
from timbee.redirection import RedirectionResolver


class Shell:
    """Command interpreter: parse, redirect, dispatch, execute."""

    def __init__(
        self,
        *,
        os_layer: OsLayer,
        display: Display,
        logger: Logger | None = None,
        keymap: KeyMap | None = None,
    ) -> None:
        """Create a shell over the given collaborators.

        Args:
            os_layer: Process, file and environment services.
            display: Where reports go.
            logger: Session log; a private one is created if omitted.
            keymap: Key bindings described by ``help``.

        """
        self._os = os_layer
        self._display = display
        self._logger = logger if logger is not None else Logger()
        self._resolver = RedirectionResolver(os_layer, display, self._logger)
        self._builtins = BuiltinDispatcher(os_layer, display, self._logger, keymap=keymap)
        self._executor = ProcessExecutor(os_layer, display, self._logger)

    @property
    def logger(self) -> Logger:
        """Return the session log."""
        return self._logger

    @property
    def last_outcome(self) -> ProcessOutcome | None:
        """Return the outcome of the most recent external command."""
        return self._executor.last_outcome

    def working_directory(self) -> str:
        """Return the working directory for the prompt.

        Falls back to ``$PWD`` (or ``?``) when the directory has vanished.
        """
        try:
            return self._os.get_working_directory()
        except OSError:
            return self._os.environment.get("PWD") or "?"

    def execute(self, line: str) -> ShellStatus:
        """Run one submitted command line.

        Args:
            line: The raw text from the editor.

        Returns:
            ``ShellStatus.EXIT`` after the ``exit`` builtin, otherwise
            ``ShellStatus.CONTINUE``.

        """
        tokens = tokenize(line)
        if not tokens:
            return ShellStatus.CONTINUE

        request = self._resolver.resolve(tokens)
        if request is None:
            self._logger.debug(f"nothing to run in {line!r}", source="shell")
            return ShellStatus.CONTINUE

        builtin = Builtin.lookup(request.name)
        if builtin is None:
            self._executor.run(request)
            return ShellStatus.CONTINUE

        try:
            return self._builtins.run(builtin, request)
        finally:
            self._executor.release(request)
