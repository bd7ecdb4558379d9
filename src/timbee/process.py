"""Execution requests and process outcomes.

A command line that survives parsing and redirection becomes an
``ExecutionRequest``: the argument vector plus where the program's
standard input and output should point.  Running it produces a
``ProcessOutcome``.

Outcomes mirror what ``waitpid`` can tell a shell::

    EXITED    — the program called exit(code)
    SIGNALED  — the program was killed by a signal
    SPAWN_FAILED — no child was ever created (fork failed)

Design choices:
    - **``None`` means "inherit the terminal"** for both descriptors,
      so the common case needs no special values.
    - **Frozen dataclasses** — a request or outcome is a fact, not a
      work-in-progress.
    - **Named constructors** (``ProcessOutcome.exited(0)``) keep call
      sites readable and the fields consistent with the kind.
"""

import signal
from dataclasses import dataclass
from enum import StrEnum


class OutcomeKind(StrEnum):
    """How a command finished."""

    EXITED = "exited"
    SIGNALED = "signaled"
    SPAWN_FAILED = "spawn-failed"


@dataclass(frozen=True)
class ExecutionRequest:
    """A command ready to run.

    Attributes:
        argv: Program name followed by its arguments (never empty).
        stdin_fd: Descriptor to use as standard input, or ``None``.
        stdout_fd: Descriptor to use as standard output, or ``None``.

    """

    argv: tuple[str, ...]
    stdin_fd: int | None = None
    stdout_fd: int | None = None

    def __post_init__(self) -> None:
        """Reject an empty argument vector."""
        if not self.argv:
            msg = "ExecutionRequest needs at least a program name"
            raise ValueError(msg)

    @property
    def name(self) -> str:
        """Return the program (or builtin) name."""
        return self.argv[0]

    @property
    def args(self) -> tuple[str, ...]:
        """Return the arguments after the name."""
        return self.argv[1:]

    @property
    def descriptors(self) -> list[int]:
        """Return the redirection descriptors that are actually bound."""
        return [fd for fd in (self.stdin_fd, self.stdout_fd) if fd is not None]


@dataclass(frozen=True)
class ProcessOutcome:
    """The result of running one command.

    Attributes:
        kind: Which of the three outcomes this is.
        code: Exit status (``EXITED`` only).
        signal: Terminating signal number (``SIGNALED`` only).
        reason: Why the child could not be created (``SPAWN_FAILED`` only).

    """

    kind: OutcomeKind
    code: int | None = None
    signal: int | None = None
    reason: str | None = None

    @classmethod
    def exited(cls, code: int) -> "ProcessOutcome":
        """Build an outcome for a normal exit."""
        return cls(OutcomeKind.EXITED, code=code)

    @classmethod
    def signaled(cls, signum: int) -> "ProcessOutcome":
        """Build an outcome for death by signal."""
        return cls(OutcomeKind.SIGNALED, signal=signum)

    @classmethod
    def spawn_failed(cls, reason: str) -> "ProcessOutcome":
        """Build an outcome for a child that was never created."""
        return cls(OutcomeKind.SPAWN_FAILED, reason=reason)

    @property
    def succeeded(self) -> bool:
        """Return True only for ``exited(0)``."""
        return self.kind is OutcomeKind.EXITED and self.code == 0

    def describe(self) -> str:
        """Return a one-line human description, e.g. ``exit status 2``."""
        if self.kind is OutcomeKind.EXITED:
            return f"exit status {self.code}"
        if self.kind is OutcomeKind.SIGNALED:
            return f"terminated by {_signal_name(self.signal)}"
        return f"could not start: {self.reason}"


def _signal_name(signum: int | None) -> str:
    if signum is None:
        return "unknown signal"
    try:
        return signal.Signals(signum).name
    except ValueError:
        return f"signal {signum}"
