"""Command history — recall and reverse-incremental search.

Every submitted line is appended to the history exactly once.  Entries
are immutable and never empty; index 0 is the oldest.

Besides the entries, the store tracks a **navigation cursor**: which
entry is currently shown on the command line while the user browses
with Up/Down.  It is ``None`` when not browsing.

    entries:   ["ls", "cd /tmp", "make"]
    Up     →   position 2 ("make")
    Up     →   position 1 ("cd /tmp")
    Down   →   position 2 ("make")
    Down   →   position None, caller shows an empty line

Design choices:
    - **Recall returns text, not a buffer.**  The editor decides how to
      display it; the store never touches the command line.
    - **Search is a pure scan** over entries relative to a starting
      index, so repeat-search is simply "search again before the
      current match".
    - **No-match is a value (``None``), not an exception** — failing to
      find something is normal during incremental search.
"""

from enum import StrEnum


class SearchDirection(StrEnum):
    """Which way ``search`` scans from its starting index."""

    BACKWARD = "backward"
    FORWARD = "forward"


class HistoryStore:
    """Append-only list of submitted lines plus a navigation cursor."""

    def __init__(self, entries: list[str] | None = None) -> None:
        """Create a history, optionally seeded with earlier entries.

        Args:
            entries: Lines to preload (oldest first).  Empty strings are
                rejected just like in ``append``.

        """
        self._entries: list[str] = []
        self._position: int | None = None
        for entry in entries or []:
            self.append(entry)

    @property
    def entries(self) -> list[str]:
        """Return all entries, oldest first."""
        return list(self._entries)

    @property
    def position(self) -> int | None:
        """Return the navigation cursor (``None`` when not browsing)."""
        return self._position

    def __len__(self) -> int:
        """Return the number of entries."""
        return len(self._entries)

    def __getitem__(self, index: int) -> str:
        """Return the entry at *index*."""
        return self._entries[index]

    def append(self, text: str) -> None:
        """Record a submitted line and stop browsing.

        Raises:
            ValueError: If *text* is empty.

        """
        if not text:
            msg = "History entries must not be empty"
            raise ValueError(msg)
        self._entries.append(text)
        self._position = None

    def reset_navigation(self) -> None:
        """Stop browsing; the next ``recall_previous`` starts at the newest entry."""
        self._position = None

    def recall_previous(self) -> str | None:
        """Step to the next-older entry and return it.

        Starts at the newest entry when not browsing, and stays on the
        oldest entry once it is reached.

        Returns:
            The selected entry, or ``None`` if the history is empty.

        """
        if not self._entries:
            return None
        if self._position is None:
            self._position = len(self._entries) - 1
        else:
            self._position = max(0, self._position - 1)
        return self._entries[self._position]

    def recall_next(self) -> str:
        """Step to the next-newer entry and return it.

        Stepping past the newest entry ends browsing and returns ``""``
        so the caller shows a blank line.  When not browsing at all the
        result is also ``""``: enough Downs always end on a blank line.

        Returns:
            The selected entry, or ``""`` when there is no newer entry.

        """
        if self._position is None:
            return ""
        if self._position + 1 >= len(self._entries):
            self._position = None
            return ""
        self._position += 1
        return self._entries[self._position]

    def search(
        self,
        term: str,
        from_index: int | None = None,
        direction: SearchDirection = SearchDirection.BACKWARD,
    ) -> int | None:
        """Find the nearest entry containing *term* as a substring.

        Args:
            term: Text to look for.  An empty term never matches.
            from_index: Exclusive starting index.  ``None`` means "from the
                end" for a backward scan and "from the start" for a
                forward scan.
            direction: ``BACKWARD`` scans towards older entries,
                ``FORWARD`` towards newer ones.

        Returns:
            The index of the match, or ``None`` if nothing matches.

        """
        if not term:
            return None
        if direction is SearchDirection.BACKWARD:
            count = len(self._entries)
            start = count if from_index is None else min(from_index, count)
            candidates = range(start - 1, -1, -1)
        else:
            start = -1 if from_index is None else from_index
            candidates = range(max(start + 1, 0), len(self._entries))
        return next((i for i in candidates if term in self._entries[i]), None)
