"""OS layer — the only place the shell touches processes and files.

The command pipeline needs a handful of operating-system services:
open files for redirection, change directory, list a directory, read
environment variables, and spawn a program and wait for it.  They are
collected behind the ``OsLayer`` protocol so the pipeline can be tested
with an in-memory double.

``PosixOsLayer`` is the real implementation.  Spawning is the classic
Unix sequence::

    fork()
      ├─ child:  dup2(stdin_fd, 0); dup2(stdout_fd, 1); execvp(argv)
      │          (exec failure → message on stderr, _exit(127/126))
      └─ parent: waitpid(pid) until the child exits or is killed

Design choices:
    - **Synchronous by design.**  ``spawn`` returns only after the child
      is gone; there is no job table and no background execution.
    - **Fork failure is a value.**  ``spawn`` returns
      ``ProcessOutcome.spawn_failed`` instead of raising, so the caller
      has one result type to handle.
    - **File operations raise ``OSError``.**  Callers decide how to
      report them; this layer never prints.
    - **Interrupts belong to the child.**  While waiting, the parent
      ignores SIGINT/SIGQUIT so Ctrl-C stops the program, not the shell;
      the child restores the default handlers before exec.
"""

import contextlib
import os
import signal
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import NoReturn, Protocol

from timbee.env import Environment
from timbee.process import ProcessOutcome

# Exit statuses used by POSIX shells when exec fails.
EXIT_NOT_FOUND = 127
EXIT_NOT_EXECUTABLE = 126

_CREATE_MODE = 0o666
_INTERRUPT_SIGNALS = (signal.SIGINT, signal.SIGQUIT)


@dataclass(frozen=True)
class DirectoryEntry:
    """One name in a directory listing."""

    name: str
    is_dir: bool


class OsLayer(Protocol):
    """Operating-system services used by the shell."""

    @property
    def environment(self) -> Environment:
        """Return the environment the shell and its children share."""
        ...

    def spawn(
        self, argv: Sequence[str], stdin_fd: int | None, stdout_fd: int | None
    ) -> ProcessOutcome:
        """Run *argv* with the given descriptors and wait for it."""
        ...

    def open_for_read(self, path: str) -> int:
        """Open *path* read-only and return the descriptor."""
        ...

    def open_for_write_truncate(self, path: str) -> int:
        """Open *path* for writing, creating or truncating it."""
        ...

    def write(self, fd: int, data: bytes) -> None:
        """Write all of *data* to *fd*."""
        ...

    def close(self, fd: int) -> None:
        """Close *fd*."""
        ...

    def change_directory(self, path: str) -> None:
        """Make *path* the working directory."""
        ...

    def get_working_directory(self) -> str:
        """Return the working directory."""
        ...

    def list_directory(self, path: str) -> list[DirectoryEntry]:
        """Return the entries of directory *path*."""
        ...


class PosixOsLayer:
    """``OsLayer`` backed by the real process, file system and environment."""

    def __init__(self, environment: Environment | None = None) -> None:
        """Create the layer.

        Args:
            environment: Environment view to use; defaults to one backed
                by ``os.environ`` so spawned programs inherit it.

        """
        self._environment = environment if environment is not None else Environment.from_process()

    @property
    def environment(self) -> Environment:
        """Return the shared environment."""
        return self._environment

    # -- Processes ------------------------------------------------------------

    def spawn(
        self, argv: Sequence[str], stdin_fd: int | None = None, stdout_fd: int | None = None
    ) -> ProcessOutcome:
        """Fork, exec *argv* in the child, and block until it terminates.

        Args:
            argv: Program name (looked up on ``PATH``) and arguments.
            stdin_fd: Descriptor to install as fd 0 in the child.
            stdout_fd: Descriptor to install as fd 1 in the child.

        Returns:
            ``exited(code)``, ``signaled(signum)``, or ``spawn_failed``
            if the child could not be created.

        """
        with _interrupts_ignored():
            try:
                pid = os.fork()
            except OSError as e:
                return ProcessOutcome.spawn_failed(e.strerror or str(e))
            if pid == 0:
                _exec_child(list(argv), stdin_fd, stdout_fd)
            return _wait_for_exit(pid)

    # -- Files ------------------------------------------------------------------

    def open_for_read(self, path: str) -> int:
        """Open *path* read-only."""
        return os.open(path, os.O_RDONLY)

    def open_for_write_truncate(self, path: str) -> int:
        """Open *path* write-only, creating it (mode 0666 & ~umask) or truncating it."""
        return os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, _CREATE_MODE)

    def write(self, fd: int, data: bytes) -> None:
        """Write all of *data*, retrying short writes."""
        view = memoryview(data)
        while view:
            written = os.write(fd, view)
            view = view[written:]

    def close(self, fd: int) -> None:
        """Close *fd*."""
        os.close(fd)

    # -- Directories ----------------------------------------------------------

    def change_directory(self, path: str) -> None:
        """Change the working directory."""
        os.chdir(path)

    def get_working_directory(self) -> str:
        """Return the working directory as a fresh string."""
        return os.getcwd()

    def list_directory(self, path: str) -> list[DirectoryEntry]:
        """Return the entries of *path* (unsorted, no ``.``/``..``)."""
        with os.scandir(path) as it:
            return [DirectoryEntry(name=e.name, is_dir=e.is_dir()) for e in it]


@contextlib.contextmanager
def _interrupts_ignored() -> Iterator[None]:
    """Ignore keyboard signals in the shell for the duration of the block."""
    previous = {signum: signal.signal(signum, signal.SIG_IGN) for signum in _INTERRUPT_SIGNALS}
    try:
        yield
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler if handler is not None else signal.SIG_DFL)


def _exec_child(argv: list[str], stdin_fd: int | None, stdout_fd: int | None) -> NoReturn:
    """Set up descriptors and exec; never returns to the caller."""
    status = EXIT_NOT_FOUND
    try:
        for signum in _INTERRUPT_SIGNALS:
            signal.signal(signum, signal.SIG_DFL)
        if stdin_fd is not None:
            os.dup2(stdin_fd, 0)
        if stdout_fd is not None:
            os.dup2(stdout_fd, 1)
        os.execvp(argv[0], argv)
    except (FileNotFoundError, ValueError):
        _child_error(argv[0], "command not found")
    except OSError as e:
        status = EXIT_NOT_EXECUTABLE
        _child_error(argv[0], e.strerror or str(e))
    finally:
        # The child must never fall back into the shell's main loop.
        os._exit(status)


def _child_error(name: str, reason: str) -> None:
    with contextlib.suppress(OSError):
        os.write(2, f"timbee: {name}: {reason}\n".encode())


def _wait_for_exit(pid: int) -> ProcessOutcome:
    """Block until *pid* exits or is killed.  Stopped children are not completion."""
    while True:
        _, status = os.waitpid(pid, 0)
        if os.WIFEXITED(status):
            return ProcessOutcome.exited(os.WEXITSTATUS(status))
        if os.WIFSIGNALED(status):
            return ProcessOutcome.signaled(os.WTERMSIG(status))
