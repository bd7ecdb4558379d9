"""Tests for the line editor in editing mode.

Search mode has its own module (``test_search.py``).
"""

import pytest

from timbee.editor import EditorAction, EditorMode, LineEditor, Outcome
from timbee.history import HistoryStore
from timbee.logging import Logger, LogLevel


def _type(editor: LineEditor, text: str) -> None:
    for ch in text:
        editor.handle(EditorAction.INSERT, ch)


@pytest.fixture
def editor(history, display) -> LineEditor:
    """Return an editor over the shared fixtures."""
    return LineEditor(history, display)


# ---------------------------------------------------------------------------
# Cycle 1: typing and motion
# ---------------------------------------------------------------------------


class TestInsertAndDelete:
    """Verify typing and backspace."""

    def test_typing_builds_the_line(self, editor: LineEditor) -> None:
        """Characters appear in order with the cursor after them."""
        _type(editor, "ls -l")
        assert editor.line.text == "ls -l"
        expected_cursor = 5
        assert editor.line.cursor == expected_cursor

    def test_backspace_removes_before_cursor(self, editor: LineEditor) -> None:
        """Backspace deletes the character to the left."""
        _type(editor, "lsx")
        editor.handle(EditorAction.DELETE_BACKWARD)
        assert editor.line.text == "ls"

    def test_backspace_at_start_is_a_no_op(self, editor: LineEditor) -> None:
        """Nothing happens at position 0."""
        _type(editor, "ab")
        editor.handle(EditorAction.MOVE_TO_START)
        editor.handle(EditorAction.DELETE_BACKWARD)
        assert editor.line.text == "ab"
        assert editor.line.cursor == 0

    def test_insert_mid_line(self, editor: LineEditor) -> None:
        """Typing after moving left inserts at the cursor."""
        _type(editor, "l -l")
        editor.handle(EditorAction.MOVE_TO_START)
        editor.handle(EditorAction.MOVE_RIGHT)
        editor.handle(EditorAction.INSERT, "s")
        assert editor.line.text == "ls -l"


class TestMotion:
    """Verify the motion actions reach the buffer."""

    def test_start_end_left_right(self, editor: LineEditor) -> None:
        """Each motion moves the cursor as expected."""
        _type(editor, "abcd")
        editor.handle(EditorAction.MOVE_TO_START)
        assert editor.line.cursor == 0
        editor.handle(EditorAction.MOVE_RIGHT)
        assert editor.line.cursor == 1
        editor.handle(EditorAction.MOVE_TO_END)
        expected_end = 4
        assert editor.line.cursor == expected_end
        editor.handle(EditorAction.MOVE_LEFT)
        expected_left = 3
        assert editor.line.cursor == expected_left


# ---------------------------------------------------------------------------
# Cycle 2: kill and paste
# ---------------------------------------------------------------------------


class TestKillAndPaste:
    """Verify the single-slot clipboard."""

    def test_kill_to_end(self, editor: LineEditor) -> None:
        """Ctrl-K cuts from the cursor to the end."""
        _type(editor, "echo hello world")
        editor.line.move_to(10)
        editor.handle(EditorAction.KILL_TO_END)
        assert editor.line.text == "echo hello"
        assert editor.clipboard == " world"

    def test_kill_to_start(self, editor: LineEditor) -> None:
        """Ctrl-U cuts from the start to the cursor."""
        _type(editor, "sudo make")
        editor.line.move_to(5)
        editor.handle(EditorAction.KILL_TO_START)
        assert editor.line.text == "make"
        assert editor.line.cursor == 0
        assert editor.clipboard == "sudo "

    def test_kill_then_paste_restores_line(self, editor: LineEditor) -> None:
        """Killing to the end then pasting gives back the original line."""
        _type(editor, "git status --short")
        editor.line.move_to(3)
        editor.handle(EditorAction.KILL_TO_END)
        editor.handle(EditorAction.PASTE)
        assert editor.line.text == "git status --short"
        assert editor.line.cursor == editor.line.length

    def test_paste_leaves_cursor_after_text(self, editor: LineEditor) -> None:
        """The cursor advances by the pasted length."""
        _type(editor, "ab")
        editor.handle(EditorAction.KILL_TO_START)
        _type(editor, "xy")
        editor.handle(EditorAction.MOVE_TO_START)
        editor.handle(EditorAction.PASTE)
        assert editor.line.text == "abxy"
        expected_cursor = 2
        assert editor.line.cursor == expected_cursor

    def test_paste_is_repeatable(self, editor: LineEditor) -> None:
        """Pasting does not consume the clipboard."""
        _type(editor, "ab")
        editor.handle(EditorAction.KILL_TO_START)
        editor.handle(EditorAction.PASTE)
        editor.handle(EditorAction.PASTE)
        assert editor.line.text == "abab"

    def test_new_kill_overwrites_clipboard(self, editor: LineEditor) -> None:
        """There is one slot; the newest kill wins."""
        _type(editor, "one two")
        editor.line.move_to(3)
        editor.handle(EditorAction.KILL_TO_END)
        editor.handle(EditorAction.KILL_TO_START)
        assert editor.clipboard == "one"

    def test_empty_kill_keeps_clipboard(self, editor: LineEditor) -> None:
        """Killing nothing leaves the previous clipboard intact."""
        _type(editor, "abc")
        editor.line.move_to(1)
        editor.handle(EditorAction.KILL_TO_END)
        editor.handle(EditorAction.KILL_TO_END)
        assert editor.clipboard == "bc"

    def test_paste_with_empty_clipboard(self, editor: LineEditor) -> None:
        """Pasting nothing changes nothing."""
        _type(editor, "ls")
        editor.handle(EditorAction.PASTE)
        assert editor.line.text == "ls"


# ---------------------------------------------------------------------------
# Cycle 3: history recall
# ---------------------------------------------------------------------------


class TestRecall:
    """Verify Up/Down recall through the editor."""

    def test_up_recalls_newest_first(self, display) -> None:
        """Repeated Up walks from newest to oldest."""
        editor = LineEditor(HistoryStore(["first", "second"]), display)
        editor.handle(EditorAction.RECALL_PREVIOUS)
        assert editor.line.text == "second"
        editor.handle(EditorAction.RECALL_PREVIOUS)
        assert editor.line.text == "first"
        editor.handle(EditorAction.RECALL_PREVIOUS)
        assert editor.line.text == "first"

    def test_down_past_newest_blanks_line(self, display) -> None:
        """Down after the newest entry gives an empty line."""
        editor = LineEditor(HistoryStore(["first", "second"]), display)
        editor.handle(EditorAction.RECALL_PREVIOUS)
        editor.handle(EditorAction.RECALL_NEXT)
        assert editor.line.text == ""

    def test_down_without_browsing_blanks_line(self, display) -> None:
        """Down with no recall in progress clears the typed text."""
        history = HistoryStore(["ls"])
        editor = LineEditor(history, display)
        _type(editor, "draft")
        editor.handle(EditorAction.RECALL_NEXT)
        assert editor.line.text == ""
        assert editor.line.cursor == 0
        assert history.position is None

    def test_repeated_down_ends_blank_from_anywhere(self, display) -> None:
        """Enough Downs always finish on an empty line with browsing over."""
        history = HistoryStore(["ls", "pwd", "make"])
        editor = LineEditor(history, display)
        editor.handle(EditorAction.RECALL_PREVIOUS)
        editor.handle(EditorAction.RECALL_PREVIOUS)
        _type(editor, " -k")
        for _ in range(5):
            editor.handle(EditorAction.RECALL_NEXT)
        assert editor.line.text == ""
        assert history.position is None

    def test_up_with_empty_history(self, editor: LineEditor) -> None:
        """Up with no history keeps the line."""
        _type(editor, "draft")
        editor.handle(EditorAction.RECALL_PREVIOUS)
        assert editor.line.text == "draft"

    def test_recalled_line_has_cursor_at_end(self, display) -> None:
        """A recalled entry is ready to extend."""
        editor = LineEditor(HistoryStore(["make test"]), display)
        editor.handle(EditorAction.RECALL_PREVIOUS)
        expected_cursor = 9
        assert editor.line.cursor == expected_cursor


# ---------------------------------------------------------------------------
# Cycle 4: submit, end of input, quit, clear
# ---------------------------------------------------------------------------


class TestSubmit:
    """Verify submission."""

    def test_submit_returns_line_and_records_it(self, editor: LineEditor, history) -> None:
        """The line is returned, stored in history and cleared."""
        _type(editor, "pwd")
        result = editor.handle(EditorAction.SUBMIT)
        assert result.outcome is Outcome.SUBMIT
        assert result.line == "pwd"
        assert history.entries == ["pwd"]
        assert editor.line.text == ""

    def test_empty_submit_is_ignored(self, editor: LineEditor, history) -> None:
        """Enter on an empty line records nothing."""
        result = editor.handle(EditorAction.SUBMIT)
        assert result.outcome is Outcome.CONTINUE
        assert len(history) == 0

    def test_submit_resets_recall(self, display) -> None:
        """After submitting, Up starts again from the newest entry."""
        history = HistoryStore(["a", "b"])
        editor = LineEditor(history, display)
        editor.handle(EditorAction.RECALL_PREVIOUS)
        editor.handle(EditorAction.RECALL_PREVIOUS)
        editor.handle(EditorAction.SUBMIT)
        editor.handle(EditorAction.RECALL_PREVIOUS)
        assert editor.line.text == "a"
        assert history.entries == ["a", "b", "a"]

    def test_submit_is_logged(self, history, display) -> None:
        """A debug entry records each submitted line."""
        logger = Logger()
        editor = LineEditor(history, display, logger=logger)
        _type(editor, "ls")
        editor.handle(EditorAction.SUBMIT)
        entries = logger.filter(min_level=LogLevel.DEBUG, source="editor")
        assert any("'ls'" in e.message for e in entries)


class TestEndOfInputAndQuit:
    """Verify the two ways to leave."""

    def test_ctrl_d_on_empty_line_ends(self, editor: LineEditor) -> None:
        """End-of-input only counts on an empty line."""
        assert editor.handle(EditorAction.END_OF_INPUT).outcome is Outcome.END_OF_INPUT

    def test_ctrl_d_with_text_is_ignored(self, editor: LineEditor) -> None:
        """A non-empty line keeps the session alive."""
        _type(editor, "x")
        assert editor.handle(EditorAction.END_OF_INPUT).outcome is Outcome.CONTINUE
        assert editor.line.text == "x"

    def test_quit_always_quits(self, editor: LineEditor) -> None:
        """Quit works whatever is on the line."""
        _type(editor, "half typed")
        assert editor.handle(EditorAction.QUIT).outcome is Outcome.QUIT


class TestClearAndRender:
    """Verify display interaction."""

    def test_clear_display(self, editor: LineEditor, display) -> None:
        """Ctrl-L asks the display to clear."""
        editor.handle(EditorAction.CLEAR_DISPLAY)
        assert display.clears == 1

    def test_render_editing(self, editor: LineEditor, display) -> None:
        """Editing mode draws the prompt with line and cursor."""
        _type(editor, "ls")
        editor.handle(EditorAction.MOVE_LEFT)
        editor.render("/tmp")
        assert display.prompts[-1] == ("/tmp", "ls", 1)

    def test_accept_and_cancel_outside_search_are_no_ops(self, editor: LineEditor) -> None:
        """Search-only actions do nothing in editing mode."""
        _type(editor, "ls")
        editor.handle(EditorAction.ACCEPT_SEARCH)
        editor.handle(EditorAction.CANCEL_SEARCH)
        assert editor.mode is EditorMode.EDITING
        assert editor.line.text == "ls"
