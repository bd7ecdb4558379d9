"""timbee — an interactive command shell with an Emacs-style line editor.

Re-exports the pieces most callers need::

    from timbee import HistoryStore, LineBuffer, LineEditor, Shell
"""

from timbee.buffer import LineBuffer, LineBufferError
from timbee.editor import EditorAction, EditorMode, LineEditor
from timbee.history import HistoryStore, SearchDirection
from timbee.parser import tokenize
from timbee.process import ExecutionRequest, OutcomeKind, ProcessOutcome
from timbee.shell import Shell

__version__ = "2.0.0"

__all__ = [
    "EditorAction",
    "EditorMode",
    "ExecutionRequest",
    "HistoryStore",
    "LineBuffer",
    "LineBufferError",
    "LineEditor",
    "OutcomeKind",
    "ProcessOutcome",
    "SearchDirection",
    "Shell",
    "__version__",
    "tokenize",
]
