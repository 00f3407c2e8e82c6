"""
Ordered annotation storage for one editor instance.

The store is the single owner of the committed annotations for the photo
being edited. It is append-only from the user's point of view: there is no
per-annotation delete, only append, clear-all, and undo/redo restores.
"""

from typing import Iterable, Iterator, Optional, Tuple

from PySide6.QtCore import QObject, Signal

from photomark.editor.annotations import AnnotationBase
from photomark.editor.history import HistoryManager
from photomark.services.logging_service import get_logger


class AnnotationStore(QObject):
    """
    Ordered sequence of committed annotations with snapshot history.

    Signals:
        changed: Emitted after any change to the sequence.
    """

    changed = Signal()

    def __init__(
        self,
        annotations: Optional[Iterable[AnnotationBase]] = None,
        history: Optional[HistoryManager] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        """
        Initialize the store.

        The initial sequence (empty or loaded from a previously annotated
        photo) is pushed as the first history snapshot, so undo can always
        return to the state the editor opened with.

        Args:
            annotations: Pre-existing annotations for the photo.
            history: History to record snapshots in. A default one is created if omitted.
            parent: Optional QObject parent.
        """
        super().__init__(parent)
        self._logger = get_logger(__name__)
        self._annotations = list(annotations or [])
        self._history = history if history is not None else HistoryManager()
        self._history.push(self._annotations)

    @property
    def history(self) -> HistoryManager:
        return self._history

    @property
    def annotations(self) -> Tuple[AnnotationBase, ...]:
        return tuple(self._annotations)

    def __len__(self) -> int:
        return len(self._annotations)

    def __iter__(self) -> Iterator[AnnotationBase]:
        return iter(tuple(self._annotations))

    def append(self, annotation: AnnotationBase) -> None:
        """Add an annotation at the end and record a history snapshot."""
        self._annotations.append(annotation)
        self._history.push(self._annotations)
        self._logger.debug(
            f"Committed {annotation.annotation_type.value} annotation {annotation.id}"
        )
        self.changed.emit()

    def replace_all(self, annotations: Iterable[AnnotationBase]) -> None:
        """Restore a whole sequence. Does not touch history."""
        self._annotations = list(annotations)
        self.changed.emit()

    def clear(self) -> None:
        """
        Remove every annotation.

        Records one snapshot, so clearing is undoable. Callers must have
        confirmed the action with the user before calling this.
        """
        self._annotations = []
        self._history.push(self._annotations)
        self._logger.info("All annotations cleared")
        self.changed.emit()

    def undo(self) -> bool:
        """Restore the previous snapshot. Returns False if there is none."""
        snapshot = self._history.undo()
        if snapshot is None:
            return False
        self.replace_all(snapshot)
        return True

    def redo(self) -> bool:
        """Restore the next snapshot. Returns False if there is none."""
        snapshot = self._history.redo()
        if snapshot is None:
            return False
        self.replace_all(snapshot)
        return True
