"""
Snapshot-based undo/redo history for the annotation editor.

Each entry is a full deep copy of the annotation sequence. History is linear:
pushing after an undo discards the states that could have been redone.
"""

import copy
from typing import Callable, List, Optional, Sequence

from photomark.editor.annotations import AnnotationBase
from photomark.services.logging_service import get_logger

DEFAULT_MAX_HISTORY = 20

Snapshot = List[AnnotationBase]
HistoryListener = Callable[[bool, bool], None]


class HistoryManager:
    """
    Bounded undo/redo stack of annotation snapshots.

    current_index is -1 while empty; once any snapshot exists it always lies
    in [0, len - 1].
    """

    def __init__(self, max_history: int = DEFAULT_MAX_HISTORY) -> None:
        if max_history < 1:
            raise ValueError(f"max_history must be at least 1, got {max_history}")

        self._logger = get_logger(__name__)
        self._max_history = max_history
        self._snapshots: List[Snapshot] = []
        self._index = -1
        self._listeners: List[HistoryListener] = []

    @property
    def max_history(self) -> int:
        return self._max_history

    @property
    def current_index(self) -> int:
        return self._index

    def __len__(self) -> int:
        return len(self._snapshots)

    def push(self, snapshot: Sequence[AnnotationBase]) -> None:
        """
        Record a new state.

        Truncates any redo states after the current index, appends a deep
        copy, then evicts the oldest snapshot if over capacity.
        """
        del self._snapshots[self._index + 1:]
        self._snapshots.append(copy.deepcopy(list(snapshot)))
        self._index += 1

        if len(self._snapshots) > self._max_history:
            self._snapshots.pop(0)
            self._index -= 1

        self._logger.debug(
            f"Snapshot pushed ({len(snapshot)} annotations, "
            f"index {self._index}, total {len(self._snapshots)})"
        )
        self._notify_listeners()

    def undo(self) -> Optional[Snapshot]:
        """
        Step back one state.

        Returns:
            A copy of the previous snapshot, or None if already at the oldest.
        """
        if not self.can_undo():
            return None

        self._index -= 1
        self._notify_listeners()
        return copy.deepcopy(self._snapshots[self._index])

    def redo(self) -> Optional[Snapshot]:
        """
        Step forward one state.

        Returns:
            A copy of the next snapshot, or None if already at the newest.
        """
        if not self.can_redo():
            return None

        self._index += 1
        self._notify_listeners()
        return copy.deepcopy(self._snapshots[self._index])

    def current(self) -> Optional[Snapshot]:
        """Copy of the snapshot at the current index, or None when empty."""
        if self._index < 0:
            return None
        return copy.deepcopy(self._snapshots[self._index])

    def can_undo(self) -> bool:
        return self._index > 0

    def can_redo(self) -> bool:
        return self._index < len(self._snapshots) - 1

    def clear(self) -> None:
        """Forget every snapshot."""
        self._snapshots = []
        self._index = -1
        self._notify_listeners()

    # ─── Listeners ────────────────────────────────────────────────────────

    def add_listener(self, callback: HistoryListener) -> None:
        """Register callback(can_undo, can_redo), called after every change."""
        self._listeners.append(callback)

    def remove_listener(self, callback: HistoryListener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify_listeners(self) -> None:
        can_undo = self.can_undo()
        can_redo = self.can_redo()
        for callback in list(self._listeners):
            callback(can_undo, can_redo)
