"""
Editor canvas widget for Photomark.

The EditorCanvas is the drawing area that displays:
- The photo, scaled to fit and centered (letterboxed)
- The annotation layer, scaled onto the same rectangle
- An inline text prompt while a text label is being typed

Pointer positions are mapped to native image pixels before they reach the
interaction controller, so everything stored is independent of the window
size.
"""

from typing import Optional

from PySide6.QtCore import QPointF, QRectF, Qt, Signal
from PySide6.QtGui import QColor, QImage, QKeyEvent, QMouseEvent, QPainter
from PySide6.QtWidgets import QLineEdit, QWidget

from photomark.editor.annotation_store import AnnotationStore
from photomark.editor.annotations import AnnotationBase
from photomark.editor.coordinates import CoordinateTransform
from photomark.editor.interaction import DrawingSession, InteractionController
from photomark.editor.render_layer import AnnotationLayer
from photomark.editor.tools import ToolType
from photomark.services.logging_service import get_logger

BACKGROUND_COLOR = QColor(26, 26, 26)


class TextPrompt(QLineEdit):
    """
    Single-line input shown where a text label will be placed.

    Enter confirms and Escape cancels. Losing focus leaves it open.
    """

    cancelled = Signal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setPlaceholderText("Type label, Enter to place")
        self.setMinimumWidth(180)
        self.setStyleSheet("""
            QLineEdit {
                background-color: rgba(255, 255, 255, 0.95);
                color: #111;
                border: 1px solid #4a90e2;
                border-radius: 4px;
                padding: 4px 6px;
            }
        """)
        self.hide()

    def keyPressEvent(self, event: QKeyEvent) -> None:
        if event.key() == Qt.Key.Key_Escape:
            self.cancelled.emit()
            return
        super().keyPressEvent(event)


class EditorCanvas(QWidget):
    """
    Canvas for drawing annotations over one photo.

    Implements the view side of the interaction controller: redraw,
    draw_preview, draw_segment, open_text_prompt and close_text_prompt.

    Signals:
        image_changed: Emitted when a new photo is loaded.
    """

    image_changed = Signal()

    def __init__(
        self,
        store: Optional[AnnotationStore] = None,
        read_only: bool = False,
        session: Optional[DrawingSession] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._logger = get_logger(__name__)

        self._image = QImage()
        self._layer = AnnotationLayer()
        self._transform: Optional[CoordinateTransform] = None

        self._store = store if store is not None else AnnotationStore(parent=self)
        self._controller = InteractionController(
            self._store, self, read_only=read_only, session=session
        )

        self._text_prompt = TextPrompt(self)
        self._text_prompt.returnPressed.connect(self._on_text_confirmed)
        self._text_prompt.cancelled.connect(self._controller.cancel_text)

        self._setup_widget()

    def _setup_widget(self) -> None:
        """Configure widget properties."""
        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setMinimumSize(200, 200)
        self._update_cursor()

    # ─── Properties ───────────────────────────────────────────────────────

    @property
    def image(self) -> QImage:
        return self._image

    @property
    def store(self) -> AnnotationStore:
        return self._store

    @property
    def controller(self) -> InteractionController:
        return self._controller

    @property
    def transform(self) -> Optional[CoordinateTransform]:
        return self._transform

    @property
    def layer(self) -> AnnotationLayer:
        return self._layer

    @property
    def text_prompt(self) -> TextPrompt:
        return self._text_prompt

    @property
    def read_only(self) -> bool:
        return self._controller.read_only

    def set_read_only(self, read_only: bool) -> None:
        self._controller.read_only = read_only
        self._update_cursor()

    # ─── Image Management ─────────────────────────────────────────────────

    def set_image(self, image: QImage) -> None:
        """
        Load the photo to annotate.

        The annotation layer is recreated at the photo's native size and
        the display transform is recomputed for the current widget size.
        """
        self._image = image
        self._layer.resize(image.size())
        self._recalculate_transform()
        self.redraw()
        self.image_changed.emit()

        self._logger.info(f"Image loaded: {image.width()}x{image.height()}")

    def _recalculate_transform(self) -> None:
        if self._image.isNull() or self.width() <= 0 or self.height() <= 0:
            self._transform = None
            return

        self._transform = CoordinateTransform.fit(
            self._image.width(),
            self._image.height(),
            self.width(),
            self.height(),
        )
        self._position_text_prompt()

    def display_rect(self) -> QRectF:
        """Where the photo sits inside the widget, in widget pixels."""
        if self._transform is None:
            return QRectF()
        return QRectF(
            self._transform.offset_x,
            self._transform.offset_y,
            self._transform.display_width,
            self._transform.display_height,
        )

    # ─── Tool Management ──────────────────────────────────────────────────

    def set_tool(self, tool_type: ToolType) -> None:
        self._controller.set_tool(tool_type)
        self._update_cursor()

    def _update_cursor(self) -> None:
        if self._controller.read_only:
            self.setCursor(Qt.CursorShape.ArrowCursor)
        else:
            self.setCursor(self._controller.active_tool.cursor)

    # ─── Undo/Redo ────────────────────────────────────────────────────────

    def undo(self) -> bool:
        return self._controller.undo()

    def redo(self) -> bool:
        return self._controller.redo()

    def clear_annotations(self) -> bool:
        return self._controller.clear()

    # ─── View contract ────────────────────────────────────────────────────

    def redraw(self) -> None:
        """Repaint the layer from the committed annotations."""
        self._layer.redraw(self._store.annotations)
        self.update()

    def draw_preview(self, annotation: AnnotationBase) -> None:
        """Repaint committed annotations with one in-progress shape on top."""
        self._layer.redraw(self._store.annotations)
        self._layer.draw_preview(annotation)
        self.update()

    def draw_segment(self, start: QPointF, end: QPointF, color: str, stroke_width: int) -> None:
        self._layer.draw_segment(start, end, color, stroke_width)
        self.update()

    def open_text_prompt(self, anchor: QPointF) -> None:
        self._text_prompt.clear()
        self._text_prompt.show()
        self._position_text_prompt()
        self._text_prompt.setFocus()

    def close_text_prompt(self) -> None:
        self._text_prompt.hide()
        self._text_prompt.clear()
        self.setFocus()

    def _position_text_prompt(self) -> None:
        anchor = self._controller.session.text_anchor
        if anchor is None or self._transform is None or self._text_prompt.isHidden():
            return
        display = self._transform.to_display(anchor)
        self._text_prompt.move(int(display.x()), int(display.y()))

    def _on_text_confirmed(self) -> None:
        self._controller.confirm_text(self._text_prompt.text())

    # ─── Event Handlers ───────────────────────────────────────────────────

    def paintEvent(self, event) -> None:
        """Paint the letterboxed photo and the annotation layer."""
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
        painter.fillRect(self.rect(), BACKGROUND_COLOR)

        if self._image.isNull() or self._transform is None:
            painter.setPen(QColor(100, 100, 100))
            painter.drawText(self.rect(), Qt.AlignmentFlag.AlignCenter, "No image loaded")
            painter.end()
            return

        target = self.display_rect()
        painter.drawImage(target, self._image)
        if not self._layer.is_null:
            painter.drawImage(target, self._layer.image)

        painter.end()

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if event.button() != Qt.MouseButton.LeftButton or self._transform is None:
            return

        pos = event.position()
        if not self._transform.contains_display(pos):
            return

        self._controller.pointer_down(self._transform.to_native(pos))

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        if self._transform is None:
            return
        self._controller.pointer_move(self._transform.to_native(event.position()))

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        if event.button() != Qt.MouseButton.LeftButton or self._transform is None:
            return
        self._controller.pointer_up(self._transform.to_native(event.position()))

    def keyPressEvent(self, event: QKeyEvent) -> None:
        key = event.key()
        modifiers = event.modifiers()

        if modifiers & Qt.KeyboardModifier.ControlModifier and not self.read_only:
            if key == Qt.Key.Key_Z:
                if modifiers & Qt.KeyboardModifier.ShiftModifier:
                    self.redo()
                else:
                    self.undo()
                return
            if key == Qt.Key.Key_Y:
                self.redo()
                return

        super().keyPressEvent(event)

    def resizeEvent(self, event) -> None:
        """Keep the photo fitted to the new size."""
        super().resizeEvent(event)
        self._recalculate_transform()
        self.update()
