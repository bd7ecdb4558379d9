"""Key decoding and the default key map.

Terminals report keys as bytes: a printable character is itself, Ctrl
plus a letter is a control byte (Ctrl-A = ``\\x01``), and cursor keys
arrive as escape sequences (Up = ``ESC [ A`` or ``ESC O A``).

``decode_key`` turns one key's worth of raw input into a readable key
identifier — ``"a"``, ``"ctrl+a"``, ``"up"``, ``"enter"`` — and
``KeyMap`` turns identifiers into editor actions.

Design choices:
    - **Identifiers are plain strings** in the ``modifier+name`` form,
      easy to write in a binding table and easy to read in a log.
    - **Printable characters are not in the map.**  Anything printable
      that is not explicitly bound becomes an ``INSERT``.
    - **Unknown sequences decode to ``None``** and are ignored by the
      caller rather than inserted as garbage.
"""

from timbee.editor import EditorAction

ESCAPE = "\x1b"

# CSI (ESC [) and SS3 (ESC O) sequences for navigation keys.
_SEQUENCES: dict[str, str] = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1b[H": "home",
    "\x1b[F": "end",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
    "\x1bOH": "home",
    "\x1bOF": "end",
    "\x1b[1~": "home",
    "\x1b[3~": "delete",
    "\x1b[4~": "end",
    "\x1b[7~": "home",
    "\x1b[8~": "end",
}

_SINGLE_BYTE: dict[str, str] = {
    "\x1b": "escape",
    "\r": "enter",
    "\n": "enter",
    "\t": "tab",
    "\x7f": "backspace",
    "\x08": "backspace",
    "\x00": "ctrl+space",
}

# Highest byte that is Ctrl plus a letter (Ctrl-Z).
_LAST_CTRL_LETTER = 26

# A CSI sequence ends with a byte in this range ("@" through "~").
_CSI_FINAL_FIRST = 0x40
_CSI_FINAL_LAST = 0x7E


def decode_key(data: str) -> str | None:
    """Return the key identifier for one key's raw input.

    Args:
        data: The characters read for a single key press.

    Returns:
        An identifier such as ``"x"``, ``"ctrl+r"`` or ``"left"``, or
        ``None`` for empty or unrecognised input.

    """
    if not data:
        return None
    if data in _SEQUENCES:
        return _SEQUENCES[data]
    if data in _SINGLE_BYTE:
        return _SINGLE_BYTE[data]
    if len(data) == 1 and 1 <= ord(data) <= _LAST_CTRL_LETTER:
        return "ctrl+" + chr(ord(data) + ord("a") - 1)
    if len(data) == 1 and data.isprintable():
        return data
    return None


def is_complete_sequence(data: str) -> bool:
    """Return True once *data* holds a whole key, known or not.

    ``ESC [`` (CSI) runs until a final byte in ``0x40``-``0x7E``, so
    PageUp (``ESC [ 5 ~``) and Ctrl-Left (``ESC [ 1 ; 5 D``) are read in
    full even though they are not bound.  ``ESC O`` (SS3) takes one more
    character, and ``ESC`` plus anything else is a two-character key.
    """
    if not data.startswith(ESCAPE):
        return True
    after = data[1:]
    if not after:
        return False
    if after[0] == "[":
        return len(after) > 1 and _CSI_FINAL_FIRST <= ord(after[-1]) <= _CSI_FINAL_LAST
    if after[0] == "O":
        return len(after) > 1
    return True


DEFAULT_BINDINGS: dict[str, EditorAction] = {
    "ctrl+a": EditorAction.MOVE_TO_START,
    "home": EditorAction.MOVE_TO_START,
    "ctrl+e": EditorAction.MOVE_TO_END,
    "end": EditorAction.MOVE_TO_END,
    "ctrl+b": EditorAction.MOVE_LEFT,
    "left": EditorAction.MOVE_LEFT,
    "ctrl+f": EditorAction.MOVE_RIGHT,
    "right": EditorAction.MOVE_RIGHT,
    "ctrl+k": EditorAction.KILL_TO_END,
    "ctrl+u": EditorAction.KILL_TO_START,
    "ctrl+y": EditorAction.PASTE,
    "ctrl+p": EditorAction.RECALL_PREVIOUS,
    "up": EditorAction.RECALL_PREVIOUS,
    "ctrl+n": EditorAction.RECALL_NEXT,
    "down": EditorAction.RECALL_NEXT,
    "backspace": EditorAction.DELETE_BACKWARD,
    "ctrl+l": EditorAction.CLEAR_DISPLAY,
    "enter": EditorAction.SUBMIT,
    "ctrl+d": EditorAction.END_OF_INPUT,
    "ctrl+r": EditorAction.START_SEARCH,
    "escape": EditorAction.ACCEPT_SEARCH,
    "ctrl+g": EditorAction.CANCEL_SEARCH,
    "ctrl+q": EditorAction.QUIT,
}


class KeyMap:
    """Translate key identifiers into editor actions."""

    def __init__(self, bindings: dict[str, EditorAction] | None = None) -> None:
        """Create a key map (a copy of ``DEFAULT_BINDINGS`` by default)."""
        self._bindings = dict(DEFAULT_BINDINGS if bindings is None else bindings)

    @property
    def bindings(self) -> dict[str, EditorAction]:
        """Return a copy of the binding table."""
        return dict(self._bindings)

    def keys_for(self, action: EditorAction) -> list[str]:
        """Return every key bound to *action*, in binding order."""
        return [key for key, bound in self._bindings.items() if bound is action]

    def lookup(self, key: str) -> tuple[EditorAction, str] | None:
        """Map a key identifier to ``(action, text)``.

        Bound keys take priority; any other single printable character
        becomes ``(EditorAction.INSERT, key)``.  Returns ``None`` for
        unbound non-printable keys.
        """
        action = self._bindings.get(key)
        if action is not None:
            return action, ""
        if len(key) == 1 and key.isprintable():
            return EditorAction.INSERT, key
        return None
