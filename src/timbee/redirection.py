"""Redirection — bind a command's stdin/stdout to files.

Syntax (operator and filename are separate tokens)::

    sort < names.txt
    ls -l > listing.txt
    grep foo < in.txt > out.txt
    grep foo > out.txt < in.txt

Resolution happens in two passes:

1. ``split_redirections`` (pure) walks the tokens left to right and
   removes every ``<``/``>`` operator together with its filename.  The
   **first** occurrence of each operator wins; later ones are still
   removed from the argument vector but ignored.
2. ``RedirectionResolver.resolve`` opens the winning files through the
   OS layer and builds an ``ExecutionRequest``.

Failure handling:
    - A file that cannot be opened is reported, and that direction
      falls back to the terminal.  The other direction is unaffected.
    - An operator with no filename after it is reported and ignored.
    - If nothing but redirections was typed, no request is produced and
      every descriptor opened along the way is closed again.
"""

from dataclasses import dataclass, field

from timbee.display import Display
from timbee.logging import Logger
from timbee.oslayer import OsLayer
from timbee.process import ExecutionRequest

INPUT_OPERATOR = "<"
OUTPUT_OPERATOR = ">"
_OPERATORS = frozenset({INPUT_OPERATOR, OUTPUT_OPERATOR})


@dataclass
class Redirections:
    """Parsed redirection targets for one command.

    Attributes:
        argv: The tokens left after removing operators and filenames.
        stdin: Input file path (``< file``), if any.
        stdout: Output file path (``> file``), if any.
        dangling: Operators that had no filename after them.

    """

    argv: list[str] = field(default_factory=list)
    stdin: str | None = None
    stdout: str | None = None
    dangling: list[str] = field(default_factory=list)


def split_redirections(tokens: list[str]) -> Redirections:
    """Separate redirection operators and their filenames from the arguments.

    Args:
        tokens: Output of ``timbee.parser.tokenize``.

    Returns:
        The clean argument vector and the first target of each operator.

    """
    result = Redirections()
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token not in _OPERATORS:
            result.argv.append(token)
            i += 1
            continue
        if i + 1 >= len(tokens):
            result.dangling.append(token)
            break
        target = tokens[i + 1]
        if token == INPUT_OPERATOR and result.stdin is None:
            result.stdin = target
        elif token == OUTPUT_OPERATOR and result.stdout is None:
            result.stdout = target
        i += 2
    return result


class RedirectionResolver:
    """Open redirection targets and produce execution requests."""

    def __init__(self, os_layer: OsLayer, display: Display, logger: Logger) -> None:
        """Create a resolver.

        Args:
            os_layer: Used to open (and, on a no-op, close) files.
            display: Receives open-failure reports.
            logger: Session log.

        """
        self._os = os_layer
        self._display = display
        self._logger = logger

    def resolve(self, tokens: list[str]) -> ExecutionRequest | None:
        """Turn tokens into a request with opened descriptors.

        Args:
            tokens: The tokenized command line.

        Returns:
            The request, or ``None`` when no arguments remain (every
            descriptor opened on the way has been closed).  The caller
            owns the descriptors of a returned request.

        """
        parsed = split_redirections(tokens)
        for operator in parsed.dangling:
            self._fail(f"syntax error: missing filename after '{operator}'")

        stdin_fd = self._open(parsed.stdin, for_write=False)
        stdout_fd = self._open(parsed.stdout, for_write=True)

        if not parsed.argv:
            for fd in (stdin_fd, stdout_fd):
                if fd is not None:
                    self._os.close(fd)
            return None
        return ExecutionRequest(argv=tuple(parsed.argv), stdin_fd=stdin_fd, stdout_fd=stdout_fd)

    def _open(self, path: str | None, *, for_write: bool) -> int | None:
        if path is None:
            return None
        try:
            if for_write:
                fd = self._os.open_for_write_truncate(path)
            else:
                fd = self._os.open_for_read(path)
        except OSError as e:
            self._fail(f"{path}: {e.strerror or e}")
            return None
        direction = "output" if for_write else "input"
        self._logger.debug(f"{direction} bound to {path} (fd {fd})", source="redirect")
        return fd

    def _fail(self, message: str) -> None:
        self._logger.warning(message, source="redirect")
        self._display.report(f"timbee: {message}")
