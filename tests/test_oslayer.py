"""Tests for the POSIX OS layer against the real system.

These fork real children (``/bin/sh``) and touch real files under
``tmp_path``; nothing here needs a terminal.
"""

import errno
import os
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from timbee.env import Environment
from timbee.oslayer import EXIT_NOT_EXECUTABLE, EXIT_NOT_FOUND, DirectoryEntry, PosixOsLayer
from timbee.process import OutcomeKind

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="POSIX only")


@pytest.fixture
def posix() -> PosixOsLayer:
    """Return an OS layer with a private environment."""
    return PosixOsLayer(Environment({}))


class TestSpawn:
    """Verify fork/exec/wait."""

    def test_exit_status(self, posix: PosixOsLayer) -> None:
        """The child's exit code comes back."""
        outcome = posix.spawn(["sh", "-c", "exit 3"])
        assert outcome.kind is OutcomeKind.EXITED
        expected_code = 3
        assert outcome.code == expected_code

    def test_success(self, posix: PosixOsLayer) -> None:
        """A clean exit succeeded."""
        assert posix.spawn(["sh", "-c", ":"]).succeeded

    def test_killed_by_signal(self, posix: PosixOsLayer) -> None:
        """A child that kills itself is reported as signaled."""
        outcome = posix.spawn(["sh", "-c", "kill -TERM $$"])
        assert outcome.kind is OutcomeKind.SIGNALED
        assert outcome.describe() == "terminated by SIGTERM"

    def test_fork_failure(self, posix: PosixOsLayer) -> None:
        """A failed fork is a value, not an exception."""
        error = OSError(errno.EAGAIN, "Resource temporarily unavailable")
        with patch("timbee.oslayer.os.fork", side_effect=error):
            outcome = posix.spawn(["true"])
        assert outcome.kind is OutcomeKind.SPAWN_FAILED
        assert outcome.reason == "Resource temporarily unavailable"

    def test_command_not_found(self, posix: PosixOsLayer) -> None:
        """An unknown program exits with 127."""
        outcome = posix.spawn(["timbee-no-such-program-xyz"])
        assert outcome.code == EXIT_NOT_FOUND

    def test_not_executable(self, posix: PosixOsLayer, tmp_path: Path) -> None:
        """A file without execute permission exits with 126."""
        script = tmp_path / "script"
        script.write_text("echo hi\n")
        script.chmod(0o644)
        outcome = posix.spawn([str(script)])
        assert outcome.code == EXIT_NOT_EXECUTABLE

    def test_stdout_redirected(self, posix: PosixOsLayer, tmp_path: Path) -> None:
        """The output descriptor becomes the child's stdout."""
        out = tmp_path / "out.txt"
        fd = posix.open_for_write_truncate(str(out))
        try:
            posix.spawn(["sh", "-c", "echo hello"], stdout_fd=fd)
        finally:
            posix.close(fd)
        assert out.read_text() == "hello\n"

    def test_stdin_redirected(self, posix: PosixOsLayer, tmp_path: Path) -> None:
        """The input descriptor becomes the child's stdin."""
        src = tmp_path / "in.txt"
        src.write_text("b\na\n")
        out = tmp_path / "out.txt"
        in_fd = posix.open_for_read(str(src))
        out_fd = posix.open_for_write_truncate(str(out))
        try:
            posix.spawn(["sort"], stdin_fd=in_fd, stdout_fd=out_fd)
        finally:
            posix.close(in_fd)
            posix.close(out_fd)
        assert out.read_text() == "a\nb\n"


class TestFiles:
    """Verify file helpers."""

    def test_write_truncates(self, posix: PosixOsLayer, tmp_path: Path) -> None:
        """Opening for output empties an existing file."""
        target = tmp_path / "f"
        target.write_text("old contents")
        fd = posix.open_for_write_truncate(str(target))
        posix.write(fd, b"new")
        posix.close(fd)
        assert target.read_text() == "new"

    def test_open_missing_for_read(self, posix: PosixOsLayer, tmp_path: Path) -> None:
        """A missing input raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            posix.open_for_read(str(tmp_path / "missing"))

    def test_close_twice_raises(self, posix: PosixOsLayer, tmp_path: Path) -> None:
        """A closed descriptor cannot be closed again."""
        fd = posix.open_for_write_truncate(str(tmp_path / "f"))
        posix.close(fd)
        with pytest.raises(OSError, match="Bad file descriptor"):
            posix.close(fd)


class TestDirectories:
    """Verify directory helpers."""

    def test_change_and_get(self, posix: PosixOsLayer, tmp_path: Path, monkeypatch) -> None:
        """chdir is visible through getcwd."""
        monkeypatch.chdir(os.getcwd())
        posix.change_directory(str(tmp_path))
        assert Path(posix.get_working_directory()) == tmp_path.resolve()

    def test_change_to_missing(self, posix: PosixOsLayer, tmp_path: Path) -> None:
        """A missing directory raises and changes nothing."""
        before = posix.get_working_directory()
        with pytest.raises(FileNotFoundError):
            posix.change_directory(str(tmp_path / "nope"))
        assert posix.get_working_directory() == before

    def test_list_directory(self, posix: PosixOsLayer, tmp_path: Path) -> None:
        """Entries are reported with a directory flag."""
        (tmp_path / "sub").mkdir()
        (tmp_path / "file.txt").write_text("")
        entries = sorted(posix.list_directory(str(tmp_path)), key=lambda e: e.name)
        assert entries == [
            DirectoryEntry("file.txt", is_dir=False),
            DirectoryEntry("sub", is_dir=True),
        ]
