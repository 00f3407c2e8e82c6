"""
Tests for annotation geometry and painting.

Covers:
- Arrowhead symmetry and length
- Circle center/radius derived from the drag vector
- Rectangle normalization for negative deltas
- Text font size and backing plate
- Freehand point coercion and fewer-than-two-points rendering
- Records are immutable and carry ids/timestamps
"""
import dataclasses
import math

import pytest
from PySide6.QtGui import QColor, QImage, QPainter

from photomark.editor.annotations import (
    ANNOTATION_CLASSES,
    ARROWHEAD_ANGLE,
    AnnotationType,
    ArrowAnnotation,
    CircleAnnotation,
    FreehandAnnotation,
    RectangleAnnotation,
    TextAnnotation,
    paint_annotations,
)
from conftest import make_image


def _paint(annotation, size=100):
    image = make_image(size, size)
    painter = QPainter(image)
    paint_annotations(painter, [annotation])
    painter.end()
    return image


def _is_white(image, x, y):
    return QColor(image.pixel(x, y)) == QColor(255, 255, 255)


# ══════════════════════════════════════════════════════════════════════════
# Arrow
# ══════════════════════════════════════════════════════════════════════════

class TestArrow:

    def test_horizontal_arrowhead_is_symmetric(self):
        arrow = ArrowAnnotation(x=0, y=0, width=100, height=0, color="#EF4444", stroke_width=3)
        (lx, ly), (rx, ry) = arrow.head_points

        # Mirror images across the shaft (the x axis)
        assert lx == pytest.approx(rx)
        assert ly == pytest.approx(-ry)

        left_offset = math.atan2(ly - 0, lx - 100)
        right_offset = math.atan2(ry - 0, rx - 100)
        assert abs(left_offset) == pytest.approx(abs(right_offset))
        assert abs(math.pi - abs(left_offset)) == pytest.approx(ARROWHEAD_ANGLE)

    def test_head_length_has_minimum(self):
        thin = ArrowAnnotation(x=0, y=0, width=50, height=0, color="#000000", stroke_width=1)
        thick = ArrowAnnotation(x=0, y=0, width=50, height=0, color="#000000", stroke_width=8)
        assert thin.head_length == 10
        assert thick.head_length == 24

    def test_head_segments_have_head_length(self):
        arrow = ArrowAnnotation(x=10, y=20, width=30, height=40, color="#000000", stroke_width=5)
        for hx, hy in arrow.head_points:
            assert math.hypot(hx - 40, hy - 60) == pytest.approx(arrow.head_length)

    def test_zero_length_arrow_paints(self, qapp):
        arrow = ArrowAnnotation(x=50, y=50, width=0, height=0, color="#000000", stroke_width=3)
        _paint(arrow)


# ══════════════════════════════════════════════════════════════════════════
# Circle / Rectangle
# ══════════════════════════════════════════════════════════════════════════

class TestCircle:

    def test_horizontal_drag_center_and_radius(self):
        circle = CircleAnnotation(x=0, y=0, width=40, height=0, color="#000000", stroke_width=2)
        assert circle.center == (20, 0)
        assert circle.radius == pytest.approx(20)

    def test_diagonal_drag_uses_vector_length(self):
        circle = CircleAnnotation(x=10, y=10, width=30, height=40, color="#000000", stroke_width=2)
        assert circle.radius == pytest.approx(25)
        assert circle.center == (25, 30)

    def test_paints_outline_not_fill(self, qapp):
        circle = CircleAnnotation(x=20, y=50, width=60, height=0, color="#000000", stroke_width=3)
        image = _paint(circle)
        assert not _is_white(image, 50, 20)
        assert _is_white(image, 50, 50)


class TestRectangle:

    def test_negative_delta_is_normalized(self):
        rect = RectangleAnnotation(x=50, y=60, width=-30, height=-20, color="#000000", stroke_width=2).rect
        assert (rect.x(), rect.y(), rect.width(), rect.height()) == (20, 40, 30, 20)

    def test_paints_outline(self, qapp):
        rect = RectangleAnnotation(x=10, y=10, width=60, height=60, color="#000000", stroke_width=3)
        image = _paint(rect)
        assert not _is_white(image, 10, 40)
        assert _is_white(image, 40, 40)


# ══════════════════════════════════════════════════════════════════════════
# Text
# ══════════════════════════════════════════════════════════════════════════

class TestText:

    @pytest.mark.parametrize("stroke_width,size", [(1, 16), (2, 16), (3, 18), (5, 30), (8, 48)])
    def test_font_size_from_stroke_width(self, stroke_width, size):
        text = TextAnnotation(x=0, y=0, color="#000000", stroke_width=stroke_width, text="Hi")
        assert text.font_size == size

    def test_plate_is_padded(self):
        text = TextAnnotation(x=10, y=20, color="#000000", stroke_width=3, text="Hi")
        plate = text.plate_rect(50)
        assert (plate.x(), plate.y()) == (6, 16)
        assert plate.width() == 58
        assert plate.height() == text.font_size + 8

    def test_paints_plate_and_glyphs(self, qapp):
        image = make_image(200, 60, QColor(0, 0, 0))
        painter = QPainter(image)
        paint_annotations(painter, [
            TextAnnotation(x=10, y=10, color="#EF4444", stroke_width=3, text="WWWW"),
        ])
        painter.end()
        # The white plate lightens the black photo at the anchor corner
        assert QColor(image.pixel(8, 8)).lightness() > 200

    def test_empty_text_paints_nothing(self, qapp):
        image = _paint(TextAnnotation(x=10, y=10, color="#000000", stroke_width=3, text=""))
        assert _is_white(image, 12, 12)


# ══════════════════════════════════════════════════════════════════════════
# Freehand
# ══════════════════════════════════════════════════════════════════════════

class TestFreehand:

    def test_points_coerced_to_tuples(self):
        stroke = FreehandAnnotation(x=0, y=0, color="#000000", stroke_width=2, points=[[1, 2], (3, 4)])
        assert stroke.points == ((1.0, 2.0), (3.0, 4.0))

    def test_single_point_paints_nothing(self, qapp):
        stroke = FreehandAnnotation(x=50, y=50, color="#000000", stroke_width=8, points=[(50, 50)])
        image = _paint(stroke)
        assert _is_white(image, 50, 50)

    def test_two_points_paint_a_segment(self, qapp):
        stroke = FreehandAnnotation(
            x=10, y=50, color="#000000", stroke_width=3, points=[(10, 50), (90, 50)]
        )
        image = _paint(stroke)
        assert not _is_white(image, 50, 50)


# ══════════════════════════════════════════════════════════════════════════
# Records
# ══════════════════════════════════════════════════════════════════════════

class TestRecords:

    def test_records_are_frozen(self):
        arrow = ArrowAnnotation(x=0, y=0, width=1, height=1, color="#000000", stroke_width=1)
        with pytest.raises(dataclasses.FrozenInstanceError):
            arrow.x = 5

    def test_ids_are_unique(self):
        a = RectangleAnnotation(x=0, y=0, width=1, height=1, color="#000000", stroke_width=1)
        b = RectangleAnnotation(x=0, y=0, width=1, height=1, color="#000000", stroke_width=1)
        assert a.id != b.id
        assert a.timestamp > 0

    def test_every_kind_has_a_class(self):
        assert set(ANNOTATION_CLASSES) == set(AnnotationType)
        for kind, cls in ANNOTATION_CLASSES.items():
            assert cls.__name__.lower().startswith(kind.value)
