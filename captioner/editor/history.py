"""
Linear undo/redo history for the Captioner editor.

Each committed EditorState is pushed onto a QUndoStack as a snapshot
command. The stack index is the history cursor: index 0 is the state the
log was (re)initialized with, and pushing a new snapshot discards any redo
branch above the cursor.

Continuous edits (typing, slider drags, element drags) are applied live and
only committed at the end of the gesture, so each entry is one meaningful
step rather than one per pointer move.
"""

from typing import Optional

from PySide6.QtGui import QUndoCommand, QUndoStack

from captioner.editor.elements import EditorState
from captioner.services.logging_service import get_logger


class SnapshotCommand(QUndoCommand):
    """Command switching the history between two committed states."""

    def __init__(
        self,
        history: "HistoryManager",
        previous: EditorState,
        snapshot: EditorState,
        text: str = "Edit",
    ) -> None:
        super().__init__(text)
        self._history = history
        self._previous = previous
        self._snapshot = snapshot

    def redo(self) -> None:
        self._history._set_current(self._snapshot)

    def undo(self) -> None:
        self._history._set_current(self._previous)


class HistoryManager:
    """
    Cursor-addressed log of EditorState snapshots.

    Snapshots are immutable values, so the log can hold references to them
    without copying.
    """

    def __init__(self, initial: Optional[EditorState] = None, limit: int = 0) -> None:
        """
        Initialize the history.

        Args:
            initial: The state at cursor 0. Defaults to an empty state.
            limit: Maximum number of undo steps kept; 0 keeps everything.
        """
        self._logger = get_logger(__name__)
        self._stack = QUndoStack()
        self._limit = limit
        self._current: EditorState = initial if initial is not None else EditorState()
        self._stack.setUndoLimit(limit)

    def _set_current(self, state: EditorState) -> None:
        self._current = state

    def reset(self, state: EditorState) -> None:
        """Replace the whole log with a single entry at cursor 0."""
        self._stack.clear()
        self._stack.setUndoLimit(self._limit)
        self._set_current(state)
        self._logger.debug("History reset")

    def commit(self, state: EditorState, label: str = "Edit") -> None:
        """Append a snapshot after the cursor, discarding the redo branch."""
        self._stack.push(SnapshotCommand(self, self._current, state, label))
        self._logger.debug(f"Committed '{label}' at index {self.cursor}")

    def undo(self) -> Optional[EditorState]:
        """Step back one entry; returns the new current state or None at the start."""
        if not self._stack.canUndo():
            return None
        self._stack.undo()
        self._logger.debug(f"Undo -> index {self.cursor}")
        return self._current

    def redo(self) -> Optional[EditorState]:
        """Step forward one entry; returns the new current state or None at the end."""
        if not self._stack.canRedo():
            return None
        self._stack.redo()
        self._logger.debug(f"Redo -> index {self.cursor}")
        return self._current

    # ─── Properties ───────────────────────────────────────────────────────

    @property
    def current(self) -> EditorState:
        return self._current

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def cursor(self) -> int:
        return self._stack.index()

    @property
    def can_undo(self) -> bool:
        return self._stack.canUndo()

    @property
    def can_redo(self) -> bool:
        return self._stack.canRedo()

    def __len__(self) -> int:
        return self._stack.count() + 1
