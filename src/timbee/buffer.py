"""Growable line buffer — the editing primitive behind every text field.

The shell edits three independent pieces of text: the command line, the
clipboard, and the reverse-search term.  All three are ``LineBuffer``
instances, each owned by exactly one role (no sharing, no aliasing).

A buffer is a sequence of characters plus a **cursor**, an insertion
point between characters:

    h e l l o
   0 1 2 3 4 5      ← valid cursor positions (0 … length)

Invariant: ``0 <= cursor <= length`` after every operation.

Design choices:
    - **Explicit capacity with doubling growth.**  The backing list is
      pre-sized and doubled when full, so a long run of ``insert`` calls
      costs O(1) amortised.  ``capacity`` is observable for tests.
    - **Clamped motion.**  Moving past either end is a silent no-op
      rather than an error — the user holding an arrow key should not
      crash the shell.
    - **Bad ranges raise.**  ``delete_range`` with out-of-bounds or
      inverted indices is a programming error, so it raises
      ``LineBufferError`` instead of guessing.
"""

DEFAULT_CAPACITY = 128


class LineBufferError(Exception):
    """Raise when a buffer operation receives an invalid range."""


class LineBuffer:
    """A resizable character sequence with a cursor.

    Characters live in ``_data[:_length]``; the slots beyond that are
    spare capacity.  Every mutation keeps the cursor inside
    ``[0, length]``.
    """

    def __init__(self, text: str = "", *, capacity: int = DEFAULT_CAPACITY) -> None:
        """Create a buffer, optionally pre-filled (cursor at the end).

        Args:
            text: Initial contents.
            capacity: Initial number of character slots.

        Raises:
            ValueError: If *capacity* is not positive.

        """
        if capacity <= 0:
            msg = f"Capacity must be positive, got {capacity}"
            raise ValueError(msg)
        self._data: list[str] = [""] * capacity
        self._length = 0
        self._cursor = 0
        if text:
            self.insert_text(text)

    # -- Read-only views ----------------------------------------------------

    @property
    def length(self) -> int:
        """Return the number of characters in the buffer."""
        return self._length

    @property
    def cursor(self) -> int:
        """Return the cursor position (0 … length)."""
        return self._cursor

    @property
    def capacity(self) -> int:
        """Return the number of allocated character slots."""
        return len(self._data)

    @property
    def text(self) -> str:
        """Return the buffer contents as a string."""
        return "".join(self._data[: self._length])

    def __len__(self) -> int:
        """Return the number of characters in the buffer."""
        return self._length

    def __str__(self) -> str:
        """Return the buffer contents."""
        return self.text

    def __repr__(self) -> str:
        """Show contents and cursor, e.g. ``LineBuffer('ls', cursor=2)``."""
        return f"LineBuffer({self.text!r}, cursor={self._cursor})"

    # -- Mutation -----------------------------------------------------------

    def insert(self, ch: str) -> None:
        """Insert a single character at the cursor and advance past it.

        Raises:
            ValueError: If *ch* is not exactly one character.

        """
        if len(ch) != 1:
            msg = f"insert() takes one character, got {ch!r}"
            raise ValueError(msg)
        self._reserve(self._length + 1)
        # Shift the tail one slot right to open a gap at the cursor.
        self._data[self._cursor + 1 : self._length + 1] = self._data[self._cursor : self._length]
        self._data[self._cursor] = ch
        self._length += 1
        self._cursor += 1

    def insert_text(self, text: str) -> None:
        """Insert *text* at the cursor; the cursor ends after it."""
        if not text:
            return
        size = len(text)
        self._reserve(self._length + size)
        tail = self._data[self._cursor : self._length]
        self._data[self._cursor : self._cursor + size] = list(text)
        self._data[self._cursor + size : self._length + size] = tail
        self._length += size
        self._cursor += size

    def delete_range(self, lo: int, hi: int) -> str:
        """Remove characters ``[lo, hi)`` and return them.

        A cursor inside or after the removed span moves left: to ``lo``
        when it was inside, by ``hi - lo`` when it was after.

        Raises:
            LineBufferError: If ``0 <= lo <= hi <= length`` does not hold.

        """
        if not 0 <= lo <= hi <= self._length:
            msg = f"Invalid range [{lo}, {hi}) for buffer of length {self._length}"
            raise LineBufferError(msg)
        removed = "".join(self._data[lo:hi])
        width = hi - lo
        self._data[lo : self._length - width] = self._data[hi : self._length]
        for i in range(self._length - width, self._length):
            self._data[i] = ""
        self._length -= width
        if self._cursor >= hi:
            self._cursor -= width
        elif self._cursor > lo:
            self._cursor = lo
        return removed

    def replace_all(self, text: str) -> None:
        """Replace the whole contents with *text*; cursor goes to the end."""
        self.clear()
        self.insert_text(text)

    def clear(self) -> None:
        """Empty the buffer and reset the cursor (capacity is kept)."""
        for i in range(self._length):
            self._data[i] = ""
        self._length = 0
        self._cursor = 0

    # -- Cursor motion ------------------------------------------------------

    def move_to(self, position: int) -> None:
        """Place the cursor at *position*, clamped to ``[0, length]``."""
        self._cursor = max(0, min(position, self._length))

    def move_left(self) -> None:
        """Move one character left (no-op at the start)."""
        self.move_to(self._cursor - 1)

    def move_right(self) -> None:
        """Move one character right (no-op at the end)."""
        self.move_to(self._cursor + 1)

    def move_to_start(self) -> None:
        """Move to the start of the line."""
        self._cursor = 0

    def move_to_end(self) -> None:
        """Move past the last character."""
        self._cursor = self._length

    # -- Internals ----------------------------------------------------------

    def _reserve(self, needed: int) -> None:
        """Double the backing storage until it holds *needed* characters."""
        capacity = len(self._data)
        if needed <= capacity:
            return
        while capacity < needed:
            capacity *= 2
        self._data.extend([""] * (capacity - len(self._data)))
