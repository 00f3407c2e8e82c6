"""
Editor widget for Photomark - the complete annotation editor UI.

This widget composes the editor interface:
- Top toolbar with tool buttons, color palette, stroke width, history and save
- Center canvas for the photo and its annotations
- Bottom status line with annotation count, view-only badge and a hint

The toolbar is hidden entirely when the editor is opened read-only.
"""

from typing import Callable, Dict, Iterable, List, Optional

from PySide6.QtCore import QPointF, Qt, Signal, Slot
from PySide6.QtGui import QColor, QIcon, QImage, QPainter, QPainterPath, QPixmap, QPolygonF
from PySide6.QtWidgets import (
    QButtonGroup,
    QComboBox,
    QFrame,
    QHBoxLayout,
    QLabel,
    QMessageBox,
    QSizePolicy,
    QToolBar,
    QToolButton,
    QVBoxLayout,
    QWidget,
)

from photomark.editor.annotation_store import AnnotationStore
from photomark.editor.annotations import AnnotationBase
from photomark.editor.compositor import ExportError, export_image
from photomark.editor.editor_canvas import EditorCanvas
from photomark.editor.history import HistoryManager
from photomark.editor.interaction import DrawingSession
from photomark.editor.tools import ToolType
from photomark.services.config_service import DEFAULT_CONFIG, ConfigService
from photomark.services.logging_service import get_logger

SaveCallback = Callable[[List[AnnotationBase], bytes], None]

TOOL_CONFIGS = [
    (ToolType.ARROW, "Arrow", "A"),
    (ToolType.TEXT, "Text", "T"),
    (ToolType.CIRCLE, "Circle", "C"),
    (ToolType.RECTANGLE, "Rectangle", "R"),
    (ToolType.FREEHAND, "Freehand", "F"),
]

TOOL_SHORTCUTS = {
    Qt.Key.Key_A: ToolType.ARROW,
    Qt.Key.Key_T: ToolType.TEXT,
    Qt.Key.Key_C: ToolType.CIRCLE,
    Qt.Key.Key_R: ToolType.RECTANGLE,
    Qt.Key.Key_F: ToolType.FREEHAND,
}

EMPTY_HINT = "Add annotations: choose a tool and draw on the photo"
READ_ONLY_BADGE = "View only"


def _create_tool_icon(shape: str, color: QColor = QColor(220, 220, 220)) -> QIcon:
    """Draw a small toolbar icon."""
    size = 24
    pixmap = QPixmap(size, size)
    pixmap.fill(Qt.GlobalColor.transparent)

    painter = QPainter(pixmap)
    painter.setRenderHint(QPainter.RenderHint.Antialiasing)
    painter.setPen(color)
    painter.setBrush(Qt.BrushStyle.NoBrush)

    margin = 4

    if shape == "arrow":
        painter.drawLine(6, 18, 18, 6)
        painter.drawLine(18, 6, 12, 6)
        painter.drawLine(18, 6, 18, 12)

    elif shape == "text":
        font = painter.font()
        font.setPixelSize(16)
        font.setBold(True)
        painter.setFont(font)
        painter.drawText(pixmap.rect(), Qt.AlignmentFlag.AlignCenter, "T")

    elif shape == "circle":
        painter.drawEllipse(margin, margin, size - margin * 2, size - margin * 2)

    elif shape == "rectangle":
        painter.drawRect(margin, margin + 2, size - margin * 2, size - margin * 2 - 4)

    elif shape == "freehand":
        path = QPainterPath()
        path.moveTo(4, 12)
        path.cubicTo(8, 4, 12, 20, 16, 10)
        path.lineTo(20, 8)
        painter.drawPath(path)

    elif shape in ("undo", "redo"):
        path = QPainterPath()
        if shape == "undo":
            path.moveTo(18, 18)
            path.cubicTo(18, 8, 10, 8, 6, 10)
            head = [QPointF(6, 10), QPointF(10, 5), QPointF(11, 13)]
        else:
            path.moveTo(6, 18)
            path.cubicTo(6, 8, 14, 8, 18, 10)
            head = [QPointF(18, 10), QPointF(14, 5), QPointF(13, 13)]
        painter.drawPath(path)
        painter.setBrush(color)
        painter.drawPolygon(QPolygonF(head))

    elif shape == "clear":
        # Trash can
        painter.drawLine(5, 7, 19, 7)
        painter.drawLine(10, 4, 14, 4)
        painter.drawRect(7, 7, 10, 13)
        painter.drawLine(10, 10, 10, 17)
        painter.drawLine(14, 10, 14, 17)

    elif shape == "save":
        painter.drawRect(4, 4, 16, 16)
        painter.drawRect(7, 4, 10, 6)
        painter.drawRect(7, 12, 10, 6)

    elif shape == "close":
        painter.drawLine(6, 6, 18, 18)
        painter.drawLine(18, 6, 6, 18)

    painter.end()
    return QIcon(pixmap)


class ColorSwatch(QToolButton):
    """Checkable palette button filled with one color."""

    def __init__(self, color: str, parent=None):
        super().__init__(parent)
        self._color = color
        self.setCheckable(True)
        self.setFixedSize(24, 24)
        self.setToolTip(color)
        self.setStyleSheet(f"""
            QToolButton {{
                background-color: {color};
                border: 2px solid #444;
                border-radius: 4px;
                min-width: 0px;
                min-height: 0px;
                padding: 0px;
            }}
            QToolButton:hover {{
                border-color: #888;
            }}
            QToolButton:checked {{
                border-color: #ffffff;
            }}
        """)

    @property
    def color(self) -> str:
        return self._color


class EditorStatusLine(QFrame):
    """
    Bottom status line: annotation count, view-only badge, and a hint
    while an editable photo has no annotations yet.
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        self._setup_ui()

    def _setup_ui(self) -> None:
        self.setFrameStyle(QFrame.Shape.StyledPanel)
        self.setFixedHeight(32)
        self.setStyleSheet("""
            QFrame {
                background-color: #2a2a2a;
                border-top: 1px solid #3a3a3a;
            }
            QLabel {
                color: #aaa;
                font-size: 11px;
            }
        """)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(12, 0, 12, 0)
        layout.setSpacing(20)

        self._badge = QLabel(READ_ONLY_BADGE)
        self._badge.setStyleSheet("""
            background-color: #fef3c7;
            color: #92400e;
            border: 1px solid #fcd34d;
            border-radius: 4px;
            padding: 1px 8px;
        """)
        self._badge.setVisible(False)
        layout.addWidget(self._badge)

        self._hint = QLabel(EMPTY_HINT)
        layout.addWidget(self._hint)

        self._message = QLabel("")
        layout.addWidget(self._message)

        layout.addStretch()

        self._count = QLabel("")
        layout.addWidget(self._count)

    @property
    def count_text(self) -> str:
        return self._count.text()

    @property
    def message_text(self) -> str:
        return self._message.text()

    @property
    def hint_visible(self) -> bool:
        return not self._hint.isHidden()

    @property
    def badge_visible(self) -> bool:
        return not self._badge.isHidden()

    def update_state(self, count: int, read_only: bool) -> None:
        if count == 0:
            self._count.setText("")
        elif count == 1:
            self._count.setText("1 annotation")
        else:
            self._count.setText(f"{count} annotations")

        self._badge.setVisible(read_only)
        self._hint.setVisible(not read_only and count == 0)

    def show_message(self, text: str) -> None:
        self._message.setText(text)


class EditorWidget(QWidget):
    """
    Annotation editor for one photo.

    Signals:
        saved: Emitted with (annotations, encoded image bytes) after a save.
        closed: Emitted when the user closes the editor. Unsaved work is dropped.
    """

    saved = Signal(list, object)
    closed = Signal()

    def __init__(
        self,
        image: Optional[QImage] = None,
        annotations: Optional[Iterable[AnnotationBase]] = None,
        read_only: bool = False,
        config_service: Optional[ConfigService] = None,
        on_save: Optional[SaveCallback] = None,
        parent=None,
    ):
        super().__init__(parent)
        self._logger = get_logger(__name__)
        self._config = config_service
        self._on_save = on_save
        self._read_only = read_only

        history = HistoryManager(max_history=self._config_value("history_limit"))
        self._store = AnnotationStore(annotations, history=history, parent=self)

        session = DrawingSession(
            tool_type=self._initial_tool(),
            color=self._config_value("default_color"),
            stroke_width=self._config_value("default_stroke_width"),
        )

        self._tool_buttons: Dict[ToolType, QToolButton] = {}
        self._swatches: List[ColorSwatch] = []

        self._canvas = EditorCanvas(store=self._store, read_only=read_only, session=session)

        self._setup_ui()
        self._connect_signals()

        self._sync_tool_buttons(session.tool_type)
        self._sync_swatches(session.color)
        self._update_history_buttons(
            self._store.history.can_undo(), self._store.history.can_redo()
        )
        self._update_status()

        if image is not None:
            self.set_image(image)

    def _config_value(self, key: str):
        """Typed setting from the config service, or the built-in default."""
        if self._config is not None:
            return getattr(self._config, key)
        return DEFAULT_CONFIG[key]

    def _initial_tool(self) -> ToolType:
        name = self._config_value("default_tool")
        try:
            return ToolType(name)
        except ValueError:
            self._logger.warning(f"Unknown default tool '{name}' in config, using arrow")
            return ToolType.ARROW

    def _setup_ui(self) -> None:
        """Build the UI layout."""
        main_layout = QVBoxLayout(self)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.setSpacing(0)

        # ─── Top Toolbar ──────────────────────────────────────────────
        self._toolbar = QToolBar()
        self._toolbar.setMovable(False)
        self._toolbar.setStyleSheet("""
            QToolBar {
                background-color: #2a2a2a;
                border-bottom: 1px solid #3a3a3a;
                padding: 6px 8px;
                spacing: 4px;
            }
            QToolBar::separator {
                background-color: #444;
                width: 1px;
                margin: 4px 6px;
            }
            QToolButton {
                background-color: transparent;
                border: none;
                border-radius: 8px;
                padding: 6px 8px;
                margin: 2px;
                min-width: 32px;
                min-height: 32px;
            }
            QToolButton:hover {
                background-color: rgba(255, 255, 255, 0.1);
            }
            QToolButton:checked {
                background-color: rgba(74, 144, 226, 0.3);
            }
            QComboBox {
                background-color: #3a3a3a;
                color: #ddd;
                border: 1px solid #555;
                padding: 2px 8px;
            }
        """)

        # Tool buttons
        self._tool_group = QButtonGroup(self)
        self._tool_group.setExclusive(True)

        for tool_type, tooltip, shortcut in TOOL_CONFIGS:
            btn = QToolButton()
            btn.setIcon(_create_tool_icon(tool_type.value))
            btn.setToolTip(f"{tooltip} ({shortcut})")
            btn.setCheckable(True)
            btn.clicked.connect(lambda checked, t=tool_type: self.select_tool(t))
            self._tool_group.addButton(btn)
            self._toolbar.addWidget(btn)
            self._tool_buttons[tool_type] = btn

        self._toolbar.addSeparator()

        # Palette
        self._swatch_group = QButtonGroup(self)
        self._swatch_group.setExclusive(True)
        for color in self._config_value("palette"):
            swatch = ColorSwatch(color)
            swatch.clicked.connect(lambda checked, c=color: self.select_color(c))
            self._swatch_group.addButton(swatch)
            self._toolbar.addWidget(swatch)
            self._swatches.append(swatch)

        self._toolbar.addSeparator()

        # Stroke width
        self._stroke_width_combo = QComboBox()
        self._stroke_width_combo.setToolTip("Stroke width")
        for width in self._config_value("stroke_widths"):
            self._stroke_width_combo.addItem(f"{width}px", int(width))
        index = self._stroke_width_combo.findData(self._canvas.controller.session.stroke_width)
        if index >= 0:
            self._stroke_width_combo.setCurrentIndex(index)
        self._stroke_width_combo.currentIndexChanged.connect(self._on_stroke_width_selected)
        self._toolbar.addWidget(self._stroke_width_combo)

        self._toolbar.addSeparator()

        # Undo/Redo/Clear
        self._undo_btn = QToolButton()
        self._undo_btn.setIcon(_create_tool_icon("undo"))
        self._undo_btn.setToolTip("Undo (Ctrl+Z)")
        self._undo_btn.clicked.connect(self.undo)
        self._toolbar.addWidget(self._undo_btn)

        self._redo_btn = QToolButton()
        self._redo_btn.setIcon(_create_tool_icon("redo"))
        self._redo_btn.setToolTip("Redo (Ctrl+Shift+Z)")
        self._redo_btn.clicked.connect(self.redo)
        self._toolbar.addWidget(self._redo_btn)

        self._clear_btn = QToolButton()
        self._clear_btn.setIcon(_create_tool_icon("clear"))
        self._clear_btn.setToolTip("Clear all annotations")
        self._clear_btn.clicked.connect(self.clear_all)
        self._toolbar.addWidget(self._clear_btn)

        # Spacer
        spacer = QWidget()
        spacer.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Preferred)
        self._toolbar.addWidget(spacer)

        self._save_btn = QToolButton()
        self._save_btn.setIcon(_create_tool_icon("save"))
        self._save_btn.setToolTip("Save (Ctrl+S)")
        self._save_btn.clicked.connect(self.save)
        self._toolbar.addWidget(self._save_btn)

        close_btn = QToolButton()
        close_btn.setIcon(_create_tool_icon("close"))
        close_btn.setToolTip("Close without saving")
        close_btn.clicked.connect(self.close_editor)
        self._toolbar.addWidget(close_btn)

        self._toolbar.setVisible(not self._read_only)
        main_layout.addWidget(self._toolbar)

        # ─── Canvas ───────────────────────────────────────────────────
        main_layout.addWidget(self._canvas, 1)

        # ─── Status Line ──────────────────────────────────────────────
        self._status = EditorStatusLine()
        main_layout.addWidget(self._status)

    def _connect_signals(self) -> None:
        self._store.changed.connect(self._update_status)
        self._store.history.add_listener(self._update_history_buttons)

    # ─── Accessors ────────────────────────────────────────────────────────

    @property
    def canvas(self) -> EditorCanvas:
        return self._canvas

    @property
    def store(self) -> AnnotationStore:
        return self._store

    @property
    def toolbar(self) -> QToolBar:
        return self._toolbar

    @property
    def status_line(self) -> EditorStatusLine:
        return self._status

    @property
    def read_only(self) -> bool:
        return self._read_only

    @property
    def undo_button(self) -> QToolButton:
        return self._undo_btn

    @property
    def redo_button(self) -> QToolButton:
        return self._redo_btn

    @property
    def clear_button(self) -> QToolButton:
        return self._clear_btn

    def set_image(self, image: QImage) -> None:
        self._canvas.set_image(image)

    # ─── Tool / Style Selection ───────────────────────────────────────────

    def select_tool(self, tool_type: ToolType) -> None:
        if self._read_only:
            return
        self._canvas.set_tool(tool_type)
        self._sync_tool_buttons(tool_type)

    def select_color(self, color: str) -> None:
        if self._read_only:
            return
        self._canvas.controller.set_color(color)
        self._sync_swatches(color)

    def select_stroke_width(self, stroke_width: int) -> None:
        if self._read_only:
            return
        self._canvas.controller.set_stroke_width(stroke_width)
        index = self._stroke_width_combo.findData(stroke_width)
        if index >= 0 and index != self._stroke_width_combo.currentIndex():
            self._stroke_width_combo.blockSignals(True)
            self._stroke_width_combo.setCurrentIndex(index)
            self._stroke_width_combo.blockSignals(False)

    def _sync_tool_buttons(self, tool_type: ToolType) -> None:
        btn = self._tool_buttons.get(tool_type)
        if btn is not None:
            btn.setChecked(True)

    def _sync_swatches(self, color: str) -> None:
        for swatch in self._swatches:
            if swatch.color.lower() == color.lower():
                swatch.setChecked(True)
                break

    @Slot(int)
    def _on_stroke_width_selected(self, index: int) -> None:
        width = self._stroke_width_combo.itemData(index)
        if width is not None:
            self.select_stroke_width(int(width))

    # ─── History ──────────────────────────────────────────────────────────

    def undo(self) -> None:
        self._canvas.undo()

    def redo(self) -> None:
        self._canvas.redo()

    def clear_all(self) -> None:
        """Remove every annotation after the user confirms."""
        if self._read_only or len(self._store) == 0:
            return
        if not self.confirm_clear():
            return
        self._canvas.clear_annotations()

    def confirm_clear(self) -> bool:
        answer = QMessageBox.question(
            self,
            "Clear annotations",
            "Remove all annotations from this photo?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            QMessageBox.StandardButton.No,
        )
        return answer == QMessageBox.StandardButton.Yes

    def _update_history_buttons(self, can_undo: bool, can_redo: bool) -> None:
        self._undo_btn.setEnabled(can_undo)
        self._redo_btn.setEnabled(can_redo)

    @Slot()
    def _update_status(self) -> None:
        count = len(self._store)
        self._clear_btn.setEnabled(count > 0)
        self._status.update_state(count, self._read_only)

    # ─── Save / Close ─────────────────────────────────────────────────────

    def save(self) -> Optional[bytes]:
        """
        Flatten the photo with its annotations and hand the result out.

        Emits saved(annotations, bytes) and calls on_save if given.
        Export failures are logged and shown in the status line.

        Returns:
            The encoded image, or None if the export failed.
        """
        if self._read_only:
            return None

        annotations = list(self._store.annotations)
        try:
            data = export_image(
                self._canvas.image,
                annotations,
                image_format=self._config_value("export_format"),
                quality=self._config_value("export_quality"),
            )
        except ExportError as e:
            self._logger.error(f"Save failed: {e}")
            self._status.show_message(f"Save failed: {e}")
            return None

        self._logger.info(f"Saved photo with {len(annotations)} annotations")
        self._status.show_message("Saved")
        self.saved.emit(annotations, data)
        if self._on_save is not None:
            self._on_save(annotations, data)
        return data

    def close_editor(self) -> None:
        """Discard the editing session and tell the host."""
        self._canvas.controller.cancel_text()
        self._logger.info("Editor closed")
        self.closed.emit()

    # ─── Key Events ───────────────────────────────────────────────────────

    def keyPressEvent(self, event) -> None:
        """Handle keyboard shortcuts."""
        key = event.key()
        modifiers = event.modifiers()

        if self._read_only:
            super().keyPressEvent(event)
            return

        if key in TOOL_SHORTCUTS and not modifiers:
            self.select_tool(TOOL_SHORTCUTS[key])
            return

        if key == Qt.Key.Key_S and modifiers & Qt.KeyboardModifier.ControlModifier:
            self.save()
            return

        super().keyPressEvent(event)
