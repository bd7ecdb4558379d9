"""Display — everything the shell shows the user goes through here.

The editor and the command pipeline never write escape sequences
themselves.  They call a small ``Display`` interface:

- ``render_prompt`` — redraw the prompt and the line being edited.
- ``render_search`` — redraw the reverse-search prompt and its match.
- ``report`` — show a message (errors, help, builtin output).
- ``flash`` — signal "no match" (terminal bell).
- ``clear_region`` — wipe the screen.

``AnsiDisplay`` is the concrete implementation for a VT100-style
terminal in raw mode.  Tests substitute a recording fake.

Design choices:
    - **Protocol, not a base class** — any object with these five
      methods is a display; nothing needs to inherit.
    - **Writer injected** — ``AnsiDisplay`` takes anything with
      ``write(str)``, so it can target a ``Terminal`` or a ``StringIO``.
"""

from typing import Protocol

SEARCH_PROMPT = "(reverse-i-search)`{term}': "
DEFAULT_PROMPT = "[TIMBEE 2.0] {cwd}$ "

_CLEAR_LINE = "\r\x1b[2K"
_CLEAR_SCREEN = "\x1b[2J\x1b[H"
_CURSOR_LEFT_FMT = "\x1b[{}D"
_BELL = "\x07"
_NEWLINE = "\r\n"


class Display(Protocol):
    """Rendering operations the shell core depends on."""

    def render_prompt(self, working_directory: str, line_text: str, cursor_offset: int) -> None:
        """Draw the prompt followed by *line_text*, cursor at *cursor_offset*."""
        ...

    def render_search(self, term: str, matched_line: str) -> None:
        """Draw the reverse-search prompt for *term* and the matched line."""
        ...

    def report(self, message: str) -> None:
        """Show *message* on its own line(s)."""
        ...

    def flash(self) -> None:
        """Signal a failed search or other no-op."""
        ...

    def clear_region(self) -> None:
        """Clear the visible screen."""
        ...


class Writer(Protocol):
    """Anything text can be written to."""

    def write(self, data: str) -> object:
        """Write *data*."""
        ...


def build_prompt(template: str, working_directory: str) -> str:
    """Expand a prompt template.

    The only placeholder is ``{cwd}``; a home-directory prefix is not
    abbreviated.  Unknown braces are left alone so a user-supplied
    template can never crash the shell.
    """
    return template.replace("{cwd}", working_directory)


class AnsiDisplay:
    """Render the shell onto a raw-mode ANSI terminal."""

    def __init__(self, writer: Writer, *, prompt: str = DEFAULT_PROMPT) -> None:
        """Create a display writing to *writer*.

        Args:
            writer: Destination for output (usually a ``Terminal``).
            prompt: Prompt template; ``{cwd}`` expands to the working
                directory.

        """
        self._writer = writer
        self._prompt = prompt
        # The line is drawn once per keystroke; report() must start on a
        # fresh line below it.
        self._line_drawn = False

    def render_prompt(self, working_directory: str, line_text: str, cursor_offset: int) -> None:
        """Redraw the current line, then move the cursor back into place."""
        prompt = build_prompt(self._prompt, working_directory)
        self._redraw(prompt + line_text, len(line_text) - cursor_offset)

    def render_search(self, term: str, matched_line: str) -> None:
        """Redraw the line as ``(reverse-i-search)`term': match``."""
        self._redraw(SEARCH_PROMPT.format(term=term) + matched_line, 0)

    def report(self, message: str) -> None:
        """Write *message* below the current line (raw mode needs ``\\r\\n``)."""
        if self._line_drawn:
            self._writer.write(_NEWLINE)
            self._line_drawn = False
        for line in message.splitlines() or [""]:
            self._writer.write(line + _NEWLINE)

    def flash(self) -> None:
        """Ring the terminal bell."""
        self._writer.write(_BELL)

    def clear_region(self) -> None:
        """Clear the screen and home the cursor."""
        self._writer.write(_CLEAR_SCREEN)
        self._line_drawn = False

    def finish_line(self) -> None:
        """Move below the current line, e.g. before a command runs."""
        if self._line_drawn:
            self._writer.write(_NEWLINE)
            self._line_drawn = False

    def _redraw(self, visible: str, cells_from_end: int) -> None:
        self._writer.write(_CLEAR_LINE + visible)
        if cells_from_end > 0:
            self._writer.write(_CURSOR_LEFT_FMT.format(cells_from_end))
        self._line_drawn = True


class PlainDisplay:
    """Display for non-interactive input: only reports are written."""

    def __init__(self, writer: Writer) -> None:
        """Create a display writing reports to *writer*."""
        self._writer = writer

    def render_prompt(self, working_directory: str, line_text: str, cursor_offset: int) -> None:
        """Draw nothing; there is no one to see a prompt."""

    def render_search(self, term: str, matched_line: str) -> None:
        """Draw nothing."""

    def report(self, message: str) -> None:
        """Write *message* followed by a newline."""
        self._writer.write(message + "\n")

    def flash(self) -> None:
        """Do nothing."""

    def clear_region(self) -> None:
        """Do nothing."""
