"""Shared test doubles for the display and the OS layer.

``RecordingDisplay`` remembers every call so tests can assert on what
the user would have seen.  ``FakeOsLayer`` is an in-memory stand-in for
processes, files and the environment: it hands out fake descriptors,
tracks which are open, and records every spawn request.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

import pytest

from timbee.env import Environment
from timbee.history import HistoryStore
from timbee.logging import Logger
from timbee.oslayer import DirectoryEntry
from timbee.process import ProcessOutcome


@dataclass
class RecordingDisplay:
    """A ``Display`` that records instead of drawing."""

    prompts: list[tuple[str, str, int]] = field(default_factory=list)
    searches: list[tuple[str, str]] = field(default_factory=list)
    reports: list[str] = field(default_factory=list)
    flashes: int = 0
    clears: int = 0

    def render_prompt(self, working_directory: str, line_text: str, cursor_offset: int) -> None:
        """Record a prompt redraw."""
        self.prompts.append((working_directory, line_text, cursor_offset))

    def render_search(self, term: str, matched_line: str) -> None:
        """Record a search redraw."""
        self.searches.append((term, matched_line))

    def report(self, message: str) -> None:
        """Record a message."""
        self.reports.append(message)

    def flash(self) -> None:
        """Count a flash."""
        self.flashes += 1

    def clear_region(self) -> None:
        """Count a screen clear."""
        self.clears += 1

    @property
    def text(self) -> str:
        """Return every report joined by newlines."""
        return "\n".join(self.reports)


@dataclass(frozen=True)
class SpawnCall:
    """One recorded ``spawn`` request."""

    argv: tuple[str, ...]
    stdin_fd: int | None
    stdout_fd: int | None


class FakeOsLayer:
    """In-memory ``OsLayer`` double."""

    def __init__(self, *, cwd: str = "/home/user", env: dict[str, str] | None = None) -> None:
        """Create a fake with one working directory and an environment."""
        self.cwd = cwd
        self.directories: dict[str, list[DirectoryEntry]] = {cwd: []}
        self.readable: set[str] = set()
        self.unwritable: set[str] = set()
        self.open_fds: dict[int, str] = {}
        self.closed: list[int] = []
        self.written: dict[int, bytes] = {}
        self.spawns: list[SpawnCall] = []
        self.outcome = ProcessOutcome.exited(0)
        self._environment = Environment(dict(env or {}))
        self._next_fd = 3

    @property
    def environment(self) -> Environment:
        """Return the fake environment."""
        return self._environment

    def spawn(
        self, argv: Sequence[str], stdin_fd: int | None = None, stdout_fd: int | None = None
    ) -> ProcessOutcome:
        """Record the request and return ``self.outcome``."""
        self.spawns.append(SpawnCall(tuple(argv), stdin_fd, stdout_fd))
        return self.outcome

    def open_for_read(self, path: str) -> int:
        """Open a path listed in ``readable``."""
        if path not in self.readable:
            raise FileNotFoundError(2, "No such file or directory", path)
        return self._allocate(path)

    def open_for_write_truncate(self, path: str) -> int:
        """Open any path not listed in ``unwritable``."""
        if path in self.unwritable:
            raise PermissionError(13, "Permission denied", path)
        return self._allocate(path)

    def write(self, fd: int, data: bytes) -> None:
        """Collect written bytes per descriptor."""
        self.written[fd] = self.written.get(fd, b"") + data

    def close(self, fd: int) -> None:
        """Close an open fake descriptor."""
        if fd not in self.open_fds:
            raise OSError(9, "Bad file descriptor")
        del self.open_fds[fd]
        self.closed.append(fd)

    def change_directory(self, path: str) -> None:
        """Enter a known directory (relative paths resolve against ``cwd``)."""
        target = path if path.startswith("/") else f"{self.cwd.rstrip('/')}/{path}"
        if target not in self.directories:
            raise FileNotFoundError(2, "No such file or directory", path)
        self.cwd = target

    def get_working_directory(self) -> str:
        """Return the fake working directory."""
        return self.cwd

    def list_directory(self, path: str) -> list[DirectoryEntry]:
        """List a known directory (``.`` is the working directory)."""
        target = self.cwd if path == "." else path
        if target not in self.directories:
            raise FileNotFoundError(2, "No such file or directory", path)
        return list(self.directories[target])

    def _allocate(self, path: str) -> int:
        fd = self._next_fd
        self._next_fd += 1
        self.open_fds[fd] = path
        return fd


@pytest.fixture
def display() -> RecordingDisplay:
    """Return a fresh recording display."""
    return RecordingDisplay()


@pytest.fixture
def os_layer() -> FakeOsLayer:
    """Return a fresh fake OS layer."""
    return FakeOsLayer(env={"HOME": "/home/user"})


@pytest.fixture
def logger() -> Logger:
    """Return an empty session log."""
    return Logger()


@pytest.fixture
def history() -> HistoryStore:
    """Return an empty history."""
    return HistoryStore()
