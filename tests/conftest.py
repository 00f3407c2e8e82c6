"""
Shared fixtures for Photomark tests.

Provides a solid-color base photo, a recording stand-in for the canvas, and
a controller wired to a fresh store.
"""
import os

import pytest

# Widgets are created in tests; run Qt without a display
os.environ.setdefault("QT_QPA_PLATFORM", "minimal")

from PySide6.QtCore import QPointF
from PySide6.QtGui import QColor, QImage

from photomark.editor.annotation_store import AnnotationStore
from photomark.editor.interaction import InteractionController


class RecordingView:
    """Stands in for EditorCanvas and records every view call."""

    def __init__(self):
        self.calls = []
        self.previews = []
        self.segments = []
        self.prompt_anchor = None

    def redraw(self):
        self.calls.append("redraw")

    def draw_preview(self, annotation):
        self.calls.append("draw_preview")
        self.previews.append(annotation)

    def draw_segment(self, start, end, color, stroke_width):
        self.calls.append("draw_segment")
        self.segments.append(((start.x(), start.y()), (end.x(), end.y()), color, stroke_width))

    def open_text_prompt(self, anchor):
        self.calls.append("open_text_prompt")
        self.prompt_anchor = (anchor.x(), anchor.y())

    def close_text_prompt(self):
        self.calls.append("close_text_prompt")
        self.prompt_anchor = None


def make_image(width=100, height=100, color=QColor(255, 255, 255)):
    image = QImage(width, height, QImage.Format.Format_RGB32)
    image.fill(color)
    return image


def drag(controller, points):
    """Press at the first point, move through the rest, release at the last."""
    first = QPointF(*points[0])
    controller.pointer_down(first)
    for px, py in points[1:]:
        controller.pointer_move(QPointF(px, py))
    controller.pointer_up(QPointF(*points[-1]))


@pytest.fixture
def white_image(qapp):
    """100x100 white photo"""
    return make_image()


@pytest.fixture
def view():
    return RecordingView()


@pytest.fixture
def store(qapp):
    return AnnotationStore()


@pytest.fixture
def controller(store, view):
    return InteractionController(store, view)


@pytest.fixture
def read_only_controller(store, view):
    return InteractionController(store, view, read_only=True)
