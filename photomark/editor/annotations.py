"""
Annotation models for the Photomark editor.

Every mark a user draws on a photo is one of five immutable annotation kinds.
Each annotation knows how to:
- Report its kind tag
- Compute its own geometry in native image coordinates
- Paint itself on a QPainter

Annotation Types:
- ArrowAnnotation: Line with a two-stroke arrowhead
- CircleAnnotation: Circle whose diameter equals the drag distance
- RectangleAnnotation: Axis-aligned outlined box
- FreehandAnnotation: Polyline traced during one drag
- TextAnnotation: Label on a white backing plate

The same paint() routines are used for the live editing layer and for the
flattened export, so what the user sees while drawing is what gets saved.
"""

import math
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Tuple
from uuid import uuid4

from PySide6.QtCore import QPointF, QRectF, Qt
from PySide6.QtGui import (
    QColor,
    QFont,
    QFontMetricsF,
    QPainter,
    QPainterPath,
    QPen,
)

Point = Tuple[float, float]

# Arrowhead strokes are angled this far from the shaft
ARROWHEAD_ANGLE = math.pi / 6
ARROWHEAD_MIN_LENGTH = 10
TEXT_MIN_FONT_SIZE = 16
TEXT_PLATE_PADDING = 4
TEXT_FONT_FAMILY = "Arial"
TEXT_PLATE_COLOR = QColor(255, 255, 255, round(255 * 0.9))


class AnnotationType(Enum):
    """Kind tags. Values are the tags used in persisted annotation records."""
    ARROW = "arrow"
    TEXT = "text"
    CIRCLE = "circle"
    RECTANGLE = "rectangle"
    FREEHAND = "freehand"


def new_annotation_id() -> str:
    return str(uuid4())


def current_timestamp() -> int:
    """Milliseconds since the epoch."""
    return int(time.time() * 1000)


def apply_stroke_style(painter: QPainter, color: str, stroke_width: float) -> None:
    """Set up a round-capped, unfilled pen for an annotation stroke."""
    pen = QPen(QColor(color))
    pen.setWidthF(stroke_width)
    pen.setCapStyle(Qt.PenCapStyle.RoundCap)
    pen.setJoinStyle(Qt.PenJoinStyle.RoundJoin)
    painter.setPen(pen)
    painter.setBrush(Qt.BrushStyle.NoBrush)


@dataclass(frozen=True)
class AnnotationBase(ABC):
    """
    Fields shared by all annotations.

    x, y is the anchor in native image coordinates. Records are frozen:
    once committed, an annotation's geometry never changes.
    """
    x: float
    y: float
    color: str
    stroke_width: int

    @property
    @abstractmethod
    def annotation_type(self) -> AnnotationType:
        """Return the kind tag of this annotation."""

    @abstractmethod
    def paint(self, painter: QPainter) -> None:
        """
        Paint the annotation.

        Args:
            painter: A painter whose coordinate system is native image pixels.
        """

    @property
    def anchor(self) -> QPointF:
        return QPointF(self.x, self.y)


@dataclass(frozen=True)
class DeltaAnnotation(AnnotationBase):
    """An annotation defined by its anchor plus a signed width/height delta."""
    width: float
    height: float
    id: str = field(default_factory=new_annotation_id)
    timestamp: int = field(default_factory=current_timestamp)

    @property
    def end(self) -> QPointF:
        return QPointF(self.x + self.width, self.y + self.height)


@dataclass(frozen=True)
class ArrowAnnotation(DeltaAnnotation):
    """Line from the anchor to anchor + delta with an open arrowhead at the end."""

    @property
    def annotation_type(self) -> AnnotationType:
        return AnnotationType.ARROW

    @property
    def head_length(self) -> float:
        return max(ARROWHEAD_MIN_LENGTH, self.stroke_width * 3)

    @property
    def angle(self) -> float:
        return math.atan2(self.height, self.width)

    @property
    def head_points(self) -> Tuple[Point, Point]:
        """End points of the two arrowhead strokes, both starting at the tip."""
        tip_x = self.x + self.width
        tip_y = self.y + self.height
        length = self.head_length
        angle = self.angle

        left = (
            tip_x - length * math.cos(angle - ARROWHEAD_ANGLE),
            tip_y - length * math.sin(angle - ARROWHEAD_ANGLE),
        )
        right = (
            tip_x - length * math.cos(angle + ARROWHEAD_ANGLE),
            tip_y - length * math.sin(angle + ARROWHEAD_ANGLE),
        )
        return left, right

    def paint(self, painter: QPainter) -> None:
        apply_stroke_style(painter, self.color, self.stroke_width)

        tip = self.end
        painter.drawLine(self.anchor, tip)

        for head_x, head_y in self.head_points:
            painter.drawLine(tip, QPointF(head_x, head_y))


@dataclass(frozen=True)
class CircleAnnotation(DeltaAnnotation):
    """
    Circle centered on the middle of the drag.

    The diameter is the length of the drag vector, not the bounding box.
    """

    @property
    def annotation_type(self) -> AnnotationType:
        return AnnotationType.CIRCLE

    @property
    def center(self) -> Point:
        return (self.x + self.width / 2, self.y + self.height / 2)

    @property
    def radius(self) -> float:
        return math.sqrt(self.width * self.width + self.height * self.height) / 2

    def paint(self, painter: QPainter) -> None:
        apply_stroke_style(painter, self.color, self.stroke_width)

        center_x, center_y = self.center
        radius = self.radius
        painter.drawEllipse(QPointF(center_x, center_y), radius, radius)


@dataclass(frozen=True)
class RectangleAnnotation(DeltaAnnotation):
    """Axis-aligned box. Negative width/height mean the drag went left/up."""

    @property
    def annotation_type(self) -> AnnotationType:
        return AnnotationType.RECTANGLE

    @property
    def rect(self) -> QRectF:
        return QRectF(self.x, self.y, self.width, self.height).normalized()

    def paint(self, painter: QPainter) -> None:
        apply_stroke_style(painter, self.color, self.stroke_width)
        painter.drawRect(self.rect)


@dataclass(frozen=True)
class FreehandAnnotation(AnnotationBase):
    """
    Freehand stroke - the points traced during a single drag, in order.

    The anchor is the first point. A stroke with fewer than two points
    renders nothing.
    """
    points: Tuple[Point, ...] = ()
    id: str = field(default_factory=new_annotation_id)
    timestamp: int = field(default_factory=current_timestamp)

    def __post_init__(self) -> None:
        # Accept any iterable of pairs but store an immutable tuple of tuples
        object.__setattr__(
            self, "points", tuple((float(px), float(py)) for px, py in self.points)
        )

    @property
    def annotation_type(self) -> AnnotationType:
        return AnnotationType.FREEHAND

    def _build_path(self) -> QPainterPath:
        path = QPainterPath()
        first_x, first_y = self.points[0]
        path.moveTo(first_x, first_y)
        for px, py in self.points[1:]:
            path.lineTo(px, py)
        return path

    def paint(self, painter: QPainter) -> None:
        if len(self.points) < 2:
            return

        apply_stroke_style(painter, self.color, self.stroke_width)
        painter.drawPath(self._build_path())


@dataclass(frozen=True)
class TextAnnotation(AnnotationBase):
    """
    Text label drawn with its top-left corner at the anchor.

    A semi-opaque white plate is painted behind the text so it stays
    legible over any part of the photo.
    """
    text: str = ""
    id: str = field(default_factory=new_annotation_id)
    timestamp: int = field(default_factory=current_timestamp)

    @property
    def annotation_type(self) -> AnnotationType:
        return AnnotationType.TEXT

    @property
    def font_size(self) -> int:
        return max(TEXT_MIN_FONT_SIZE, self.stroke_width * 6)

    def font(self) -> QFont:
        font = QFont(TEXT_FONT_FAMILY)
        font.setPixelSize(self.font_size)
        return font

    def plate_rect(self, text_width: float) -> QRectF:
        """Backing plate for a run of text text_width pixels wide."""
        padding = TEXT_PLATE_PADDING
        return QRectF(
            self.x - padding,
            self.y - padding,
            text_width + padding * 2,
            self.font_size + padding * 2,
        )

    def paint(self, painter: QPainter) -> None:
        if not self.text:
            return

        font = self.font()
        metrics = QFontMetricsF(font)
        text_width = metrics.horizontalAdvance(self.text)

        painter.save()
        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(TEXT_PLATE_COLOR)
        painter.drawRect(self.plate_rect(text_width))

        painter.setFont(font)
        painter.setPen(QColor(self.color))
        # QPainter positions text on its baseline; shift down so the top sits on the anchor
        painter.drawText(QPointF(self.x, self.y + metrics.ascent()), self.text)
        painter.restore()


ANNOTATION_CLASSES = {
    AnnotationType.ARROW: ArrowAnnotation,
    AnnotationType.TEXT: TextAnnotation,
    AnnotationType.CIRCLE: CircleAnnotation,
    AnnotationType.RECTANGLE: RectangleAnnotation,
    AnnotationType.FREEHAND: FreehandAnnotation,
}


def paint_annotations(
    painter: QPainter,
    annotations: Iterable[AnnotationBase],
    preview: Optional[AnnotationBase] = None,
) -> None:
    """
    Paint annotations in order, later ones on top.

    Args:
        painter: Painter in native image coordinates.
        annotations: Committed annotations, in store order.
        preview: Optional uncommitted shape painted last.
    """
    painter.setRenderHint(QPainter.RenderHint.Antialiasing)
    painter.setRenderHint(QPainter.RenderHint.TextAntialiasing)

    for annotation in annotations:
        annotation.paint(painter)

    if preview is not None:
        preview.paint(painter)
