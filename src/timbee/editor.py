"""Line editor — the state machine behind the command line.

The editor turns key actions into edits of the command-line buffer.  It
has two modes::

    EDITING ──start-search──▶ SEARCHING
       ▲                          │
       └── accept / cancel / ESC ─┘

**Editing** supports cursor motion, Emacs-style kill and yank (one
clipboard, overwritten by every kill), history recall, insertion,
backspace, screen clearing, submission and end-of-input.

**Searching** is reverse-incremental history search: every character
typed narrows the term and re-runs the search from the newest entry,
showing the match on the line.  Repeating the search (Ctrl-R again)
steps to older matches.  Accept keeps whatever is on the line; cancel
puts back the line as it was before the last match was shown (the
original line if nothing matched yet).

The editor never draws anything itself — ``render`` hands the current
state to a ``Display``, and a failed search calls ``display.flash()``.

Design choices:
    - **Actions are an enum dispatched through dicts**, one table per
      mode.  An action without an entry in the search table first
      accepts the search, then runs as a normal editing action — the
      way readline behaves when you press an arrow key mid-search.
    - **Search state is ``None`` when inactive.**  An active search is
      a ``SearchState`` value; leaving search mode discards it.
    - **Submit returns the line, it does not run it.**  Executing the
      command belongs to the shell; the editor only records history.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum

from timbee.buffer import DEFAULT_CAPACITY, LineBuffer
from timbee.display import Display
from timbee.history import HistoryStore
from timbee.logging import Logger


class EditorMode(StrEnum):
    """The two states of the line editor."""

    EDITING = "editing"
    SEARCHING = "searching"


class EditorAction(StrEnum):
    """Every operation a key can be bound to."""

    MOVE_TO_START = "move-to-start"
    MOVE_TO_END = "move-to-end"
    MOVE_LEFT = "move-left"
    MOVE_RIGHT = "move-right"
    KILL_TO_END = "kill-to-end"
    KILL_TO_START = "kill-to-start"
    PASTE = "paste"
    RECALL_PREVIOUS = "recall-previous"
    RECALL_NEXT = "recall-next"
    INSERT = "insert"
    DELETE_BACKWARD = "delete-backward"
    CLEAR_DISPLAY = "clear-display"
    SUBMIT = "submit"
    END_OF_INPUT = "end-of-input"
    START_SEARCH = "start-search"
    ACCEPT_SEARCH = "accept-search"
    CANCEL_SEARCH = "cancel-search"
    QUIT = "quit"


class Outcome(StrEnum):
    """What the main loop should do after an action."""

    CONTINUE = "continue"
    SUBMIT = "submit"
    END_OF_INPUT = "end-of-input"
    QUIT = "quit"


@dataclass(frozen=True)
class EditResult:
    """Result of handling one action.

    Attributes:
        outcome: What the caller should do next.
        line: The submitted text (only for ``Outcome.SUBMIT``).

    """

    outcome: Outcome
    line: str | None = None


_CONTINUE = EditResult(Outcome.CONTINUE)


@dataclass
class SearchState:
    """An active reverse-incremental search.

    Attributes:
        term: The text being searched for.
        matched_index: History index of the current match, if any.
            Whenever set, ``history[matched_index]`` contains the term.
        saved_text: The command line as it was before the current
            match replaced it (or when search started).
        saved_cursor: Cursor position at that moment.

    """

    term: LineBuffer = field(default_factory=LineBuffer)
    matched_index: int | None = None
    saved_text: str = ""
    saved_cursor: int = 0


class LineEditor:
    """Edit one command line against a shared history."""

    def __init__(
        self,
        history: HistoryStore,
        display: Display,
        *,
        capacity: int = DEFAULT_CAPACITY,
        logger: Logger | None = None,
    ) -> None:
        """Create an editor with an empty line and an empty clipboard.

        Args:
            history: The session history used for recall and search.
            display: Where to flash and clear the screen.
            capacity: Initial capacity of the editor's buffers.
            logger: Session log; a private one is created if omitted.

        """
        self._history = history
        self._display = display
        self._capacity = capacity
        self._logger = logger if logger is not None else Logger()
        self._line = LineBuffer(capacity=capacity)
        self._clipboard = LineBuffer(capacity=capacity)
        self._search: SearchState | None = None

        self._editing_actions: dict[EditorAction, Callable[[], EditResult | None]] = {
            EditorAction.MOVE_TO_START: self._line.move_to_start,
            EditorAction.MOVE_TO_END: self._line.move_to_end,
            EditorAction.MOVE_LEFT: self._line.move_left,
            EditorAction.MOVE_RIGHT: self._line.move_right,
            EditorAction.KILL_TO_END: self.kill_to_end,
            EditorAction.KILL_TO_START: self.kill_to_start,
            EditorAction.PASTE: self.paste,
            EditorAction.RECALL_PREVIOUS: self.recall_previous,
            EditorAction.RECALL_NEXT: self.recall_next,
            EditorAction.DELETE_BACKWARD: self.delete_backward,
            EditorAction.CLEAR_DISPLAY: self._display.clear_region,
            EditorAction.SUBMIT: self.submit,
            EditorAction.END_OF_INPUT: self.end_of_input,
            EditorAction.START_SEARCH: self.start_search,
            # Outside search mode these are harmless no-ops.
            EditorAction.ACCEPT_SEARCH: lambda: None,
            EditorAction.CANCEL_SEARCH: lambda: None,
        }
        self._search_actions: dict[EditorAction, Callable[[], EditResult | None]] = {
            EditorAction.DELETE_BACKWARD: self.search_delete,
            EditorAction.START_SEARCH: self.search_repeat,
            EditorAction.ACCEPT_SEARCH: self.accept_search,
            EditorAction.CANCEL_SEARCH: self.cancel_search,
            EditorAction.SUBMIT: self._accept_and_submit,
        }

    # -- State --------------------------------------------------------------

    @property
    def mode(self) -> EditorMode:
        """Return the current editor mode."""
        return EditorMode.EDITING if self._search is None else EditorMode.SEARCHING

    @property
    def line(self) -> LineBuffer:
        """Return the command-line buffer."""
        return self._line

    @property
    def clipboard(self) -> str:
        """Return the clipboard contents."""
        return self._clipboard.text

    @property
    def search_state(self) -> SearchState | None:
        """Return the active search, or ``None`` when editing."""
        return self._search

    @property
    def history(self) -> HistoryStore:
        """Return the history this editor records into."""
        return self._history

    # -- Dispatch -----------------------------------------------------------

    def handle(self, action: EditorAction, text: str = "") -> EditResult:
        """Apply one action and tell the caller what to do next.

        Args:
            action: The bound action.
            text: The character(s) to insert for ``EditorAction.INSERT``.

        Returns:
            The resulting ``EditResult``.

        """
        if action is EditorAction.QUIT:
            self._search = None
            return EditResult(Outcome.QUIT)

        if self._search is not None:
            if action is EditorAction.INSERT:
                self.search_append(text)
                return _CONTINUE
            handler = self._search_actions.get(action)
            if handler is not None:
                return handler() or _CONTINUE
            # Any other key leaves search mode and then acts normally.
            self.accept_search()
            if action is EditorAction.END_OF_INPUT:
                return _CONTINUE

        if action is EditorAction.INSERT:
            self.insert(text)
            return _CONTINUE
        return self._editing_actions[action]() or _CONTINUE

    def render(self, working_directory: str) -> None:
        """Draw the current state on the display."""
        if self._search is None:
            self._display.render_prompt(working_directory, self._line.text, self._line.cursor)
        else:
            self._display.render_search(self._search.term.text, self._line.text)

    # -- Editing operations -------------------------------------------------

    def insert(self, text: str) -> None:
        """Insert printable *text* at the cursor."""
        for ch in text:
            self._line.insert(ch)

    def delete_backward(self) -> None:
        """Delete the character before the cursor (no-op at position 0)."""
        cursor = self._line.cursor
        if cursor > 0:
            self._line.delete_range(cursor - 1, cursor)

    def kill_to_end(self) -> None:
        """Cut from the cursor to the end of the line into the clipboard."""
        self._kill(self._line.cursor, self._line.length)

    def kill_to_start(self) -> None:
        """Cut from the start of the line to the cursor into the clipboard."""
        self._kill(0, self._line.cursor)

    def paste(self) -> None:
        """Insert the clipboard at the cursor; the cursor ends after it."""
        self._line.insert_text(self._clipboard.text)

    def recall_previous(self) -> None:
        """Replace the line with the next-older history entry."""
        text = self._history.recall_previous()
        if text is not None:
            self._line.replace_all(text)

    def recall_next(self) -> None:
        """Replace the line with the next-newer entry (blank past the newest)."""
        self._line.replace_all(self._history.recall_next())

    def submit(self) -> EditResult:
        """Record the line in history and hand it back for execution.

        An empty line is ignored: nothing is recorded or returned.
        """
        if self._line.length == 0:
            return _CONTINUE
        text = self._line.text
        self._history.append(text)
        self._line.clear()
        self._history.reset_navigation()
        self._logger.debug(f"submitted {text!r}", source="editor")
        return EditResult(Outcome.SUBMIT, line=text)

    def end_of_input(self) -> EditResult:
        """End the session, but only when the line is empty."""
        if self._line.length == 0:
            return EditResult(Outcome.END_OF_INPUT)
        return _CONTINUE

    # -- Search operations --------------------------------------------------

    def start_search(self) -> None:
        """Enter search mode with an empty term."""
        self._search = SearchState(
            term=LineBuffer(capacity=self._capacity),
            saved_text=self._line.text,
            saved_cursor=self._line.cursor,
        )

    def search_append(self, text: str) -> None:
        """Grow the term and search again from the newest entry."""
        search = self._require_search()
        search.term.move_to_end()
        search.term.insert_text(text)
        self._search_from_newest(search)

    def search_delete(self) -> None:
        """Shrink the term by one character and search again from the newest entry."""
        search = self._require_search()
        term = search.term
        if term.length == 0:
            return
        term.delete_range(term.length - 1, term.length)
        self._search_from_newest(search)

    def search_repeat(self) -> None:
        """Step to the next older entry that matches the current term."""
        search = self._require_search()
        found = self._history.search(search.term.text, from_index=search.matched_index)
        if found is None:
            self._no_match(search.term.text)
            return
        self._show_match(search, found)

    def accept_search(self) -> None:
        """Leave search mode, keeping the line as it is now."""
        self._search = None

    def cancel_search(self) -> None:
        """Leave search mode, restoring the line from before the last match."""
        search = self._require_search()
        self._line.replace_all(search.saved_text)
        self._line.move_to(search.saved_cursor)
        self._search = None

    # -- Internals ----------------------------------------------------------

    def _kill(self, lo: int, hi: int) -> None:
        if lo == hi:
            return
        killed = self._line.delete_range(lo, hi)
        self._clipboard.replace_all(killed)

    def _accept_and_submit(self) -> EditResult:
        self.accept_search()
        return self.submit()

    def _require_search(self) -> SearchState:
        if self._search is None:
            msg = "Not in search mode"
            raise RuntimeError(msg)
        return self._search

    def _search_from_newest(self, search: SearchState) -> None:
        term = search.term.text
        found = self._history.search(term)
        if found is None:
            # The old match may not contain the new term.
            search.matched_index = None
            if term:
                self._no_match(term)
            return
        self._show_match(search, found)

    def _show_match(self, search: SearchState, index: int) -> None:
        # Narrowing the term onto the same entry is not a new match.
        if index != search.matched_index:
            search.saved_text = self._line.text
            search.saved_cursor = self._line.cursor
        search.matched_index = index
        self._line.replace_all(self._history[index])

    def _no_match(self, term: str) -> None:
        self._logger.debug(f"no history match for {term!r}", source="editor")
        self._display.flash()
