"""Raw-mode terminal — read one key at a time.

A terminal normally runs in *cooked* mode: the kernel buffers a whole
line, handles backspace itself, and turns Ctrl-C into SIGINT.  A line
editor needs *raw* mode instead, where every key press arrives
immediately and uninterpreted.

``Terminal`` manages that switch:

- ``with Terminal() as term:`` enters raw mode and always restores the
  original settings on the way out, even after an exception.
- ``term.cooked()`` temporarily restores the original settings, e.g.
  while a child program owns the terminal.
- ``term.read_key()`` returns the characters of one key press, gathering
  the rest of an escape sequence when the first byte is ESC.
"""

import codecs
import contextlib
import os
import select
import sys
import termios
import tty
from collections.abc import Iterator

from timbee.keys import ESCAPE, is_complete_sequence

# How long to wait for the rest of an escape sequence before deciding
# the user pressed a lone Escape.
ESCAPE_TIMEOUT = 0.05


class Terminal:
    """A raw-mode terminal on a pair of file descriptors."""

    def __init__(self, fd_in: int | None = None, fd_out: int | None = None) -> None:
        """Create a terminal (stdin/stdout by default); raw mode is not yet on."""
        self._fd_in = sys.stdin.fileno() if fd_in is None else fd_in
        self._fd_out = sys.stdout.fileno() if fd_out is None else fd_out
        self._original: list | None = None
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    @property
    def is_raw(self) -> bool:
        """Return True while raw mode is active."""
        return self._original is not None

    def __enter__(self) -> "Terminal":
        """Save the current settings and switch to raw mode."""
        self._original = termios.tcgetattr(self._fd_in)
        tty.setraw(self._fd_in)
        return self

    def __exit__(self, *_exc: object) -> None:
        """Restore the saved settings."""
        if self._original is not None:
            termios.tcsetattr(self._fd_in, termios.TCSADRAIN, self._original)
            self._original = None

    @contextlib.contextmanager
    def cooked(self) -> Iterator[None]:
        """Restore the original settings for the duration of the block."""
        if self._original is None:
            yield
            return
        termios.tcsetattr(self._fd_in, termios.TCSADRAIN, self._original)
        try:
            yield
        finally:
            tty.setraw(self._fd_in)

    def write(self, data: str) -> None:
        """Write *data* to the output descriptor."""
        view = memoryview(data.encode())
        while view:
            view = view[os.write(self._fd_out, view) :]

    def read_key(self) -> str:
        """Block until a key is pressed and return its characters.

        Raises:
            EOFError: If the input descriptor reached end of file.

        """
        data = self._read_char()
        if data != ESCAPE:
            return data
        while not is_complete_sequence(data) and self._input_pending(ESCAPE_TIMEOUT):
            data += self._read_char()
        return data

    def _read_char(self) -> str:
        while True:
            chunk = os.read(self._fd_in, 1)
            if not chunk:
                raise EOFError
            text = self._decoder.decode(chunk)
            if text:
                return text

    def _input_pending(self, timeout: float) -> bool:
        readable, _, _ = select.select([self._fd_in], [], [], timeout)
        return bool(readable)
