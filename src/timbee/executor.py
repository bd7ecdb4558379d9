"""Process executor — run one external command in the foreground.

The executor takes an ``ExecutionRequest`` (argv plus redirection
descriptors), asks the OS layer to spawn it, and blocks until the child
has terminated.  It then closes the redirection descriptors and reports
the outcome.

Ownership of descriptors is the important rule here: once a request
reaches ``run``, its descriptors belong to the executor and are closed
exactly once, whatever happened to the child — including a failed fork.

Reporting:
    - ``exited(0)`` — silent, like every shell.
    - ``exited(n)`` — ``[exit status n]``.
    - ``signaled(s)`` — ``[terminated by SIGxxx]``.
    - ``spawn_failed`` — ``timbee: name: could not start: reason``.
"""

from timbee.display import Display
from timbee.logging import Logger
from timbee.oslayer import OsLayer
from timbee.process import ExecutionRequest, OutcomeKind, ProcessOutcome


class ProcessExecutor:
    """Spawn-and-wait for external programs."""

    def __init__(self, os_layer: OsLayer, display: Display, logger: Logger) -> None:
        """Create an executor.

        Args:
            os_layer: Performs the actual fork/exec/wait.
            display: Receives outcome reports.
            logger: Session log.

        """
        self._os = os_layer
        self._display = display
        self._logger = logger
        self._last_outcome: ProcessOutcome | None = None

    @property
    def last_outcome(self) -> ProcessOutcome | None:
        """Return the outcome of the most recent command, if any."""
        return self._last_outcome

    def run(self, request: ExecutionRequest) -> ProcessOutcome:
        """Run *request* to completion and close its descriptors.

        Args:
            request: The command and its redirections.

        Returns:
            How the command finished.

        """
        self._logger.info(f"spawning {list(request.argv)}", source="executor")
        try:
            outcome = self._os.spawn(request.argv, request.stdin_fd, request.stdout_fd)
        finally:
            self.release(request)

        self._last_outcome = outcome
        self._report(request.name, outcome)
        return outcome

    def release(self, request: ExecutionRequest) -> None:
        """Close every descriptor the request holds."""
        for fd in request.descriptors:
            try:
                self._os.close(fd)
            except OSError as e:
                self._logger.error(f"closing fd {fd} failed: {e}", source="executor")

    def _report(self, name: str, outcome: ProcessOutcome) -> None:
        if outcome.kind is OutcomeKind.SPAWN_FAILED:
            self._logger.error(f"{name}: {outcome.describe()}", source="executor")
            self._display.report(f"timbee: {name}: {outcome.describe()}")
            return
        self._logger.info(f"{name}: {outcome.describe()}", source="executor")
        if not outcome.succeeded:
            self._display.report(f"[{outcome.describe()}]")
