"""
Transparent native-resolution layer holding the on-screen annotations.

The canvas scales this layer onto the letterboxed photo. Drawing on a
separate layer means the base image never has to be repainted while the
user drags, and freehand strokes can be added one segment at a time.
"""

from typing import Iterable, Optional

from PySide6.QtCore import QPointF, QSize, Qt
from PySide6.QtGui import QImage, QPainter

from photomark.editor.annotations import (
    AnnotationBase,
    apply_stroke_style,
    paint_annotations,
)


class AnnotationLayer:
    """ARGB surface the size of the photo, in native image pixels."""

    def __init__(self, size: Optional[QSize] = None) -> None:
        self._image = QImage()
        if size is not None:
            self.resize(size)

    @property
    def image(self) -> QImage:
        return self._image

    @property
    def is_null(self) -> bool:
        return self._image.isNull()

    def resize(self, size: QSize) -> None:
        """Replace the surface with a transparent one of the given size."""
        self._image = QImage(size, QImage.Format.Format_ARGB32_Premultiplied)
        self._image.fill(Qt.GlobalColor.transparent)

    def clear(self) -> None:
        if not self._image.isNull():
            self._image.fill(Qt.GlobalColor.transparent)

    def redraw(self, annotations: Iterable[AnnotationBase]) -> None:
        """Wipe the layer and paint every committed annotation in order."""
        if self._image.isNull():
            return

        self._image.fill(Qt.GlobalColor.transparent)
        painter = QPainter(self._image)
        try:
            paint_annotations(painter, annotations)
        finally:
            painter.end()

    def draw_preview(self, annotation: AnnotationBase) -> None:
        """Paint one uncommitted annotation on top of what is already there."""
        if self._image.isNull():
            return

        painter = QPainter(self._image)
        try:
            paint_annotations(painter, (), preview=annotation)
        finally:
            painter.end()

    def draw_segment(self, start: QPointF, end: QPointF, color: str, stroke_width: int) -> None:
        """Stroke a single line segment, used for live freehand drawing."""
        if self._image.isNull():
            return

        painter = QPainter(self._image)
        try:
            painter.setRenderHint(QPainter.RenderHint.Antialiasing)
            apply_stroke_style(painter, color, stroke_width)
            painter.drawLine(start, end)
        finally:
            painter.end()
