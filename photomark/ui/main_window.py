"""
Main window for Photomark.

Hosts one EditorWidget for the photo being annotated, plus a small menu bar
mirroring the toolbar actions.
"""

from typing import Iterable, Optional

from PySide6.QtGui import QAction, QImage, QKeySequence
from PySide6.QtWidgets import QMainWindow, QMessageBox, QWidget

from photomark import __version__
from photomark.editor.annotations import AnnotationBase
from photomark.editor.editor_widget import EditorWidget, SaveCallback
from photomark.services.config_service import ConfigService
from photomark.services.logging_service import get_logger


class MainWindow(QMainWindow):
    """
    Main application window.

    The editor is created by open_photo(); closing the editor closes the
    window.
    """

    def __init__(
        self,
        config_service: Optional[ConfigService] = None,
        parent: Optional[QWidget] = None
    ) -> None:
        super().__init__(parent)
        self._logger = get_logger(__name__)
        self._config = config_service
        self._editor: Optional[EditorWidget] = None

        self._setup_window()
        self._setup_menu_bar()

        self._logger.info("MainWindow initialized")

    def _setup_window(self) -> None:
        self.setWindowTitle("Photomark")
        self.setMinimumSize(800, 600)
        self.resize(1200, 800)

    def _setup_menu_bar(self) -> None:
        menu_bar = self.menuBar()

        # ─── File Menu ────────────────────────────────────────────────
        file_menu = menu_bar.addMenu("&File")

        self._save_action = QAction("&Save", self)
        self._save_action.setShortcut(QKeySequence.StandardKey.Save)
        self._save_action.triggered.connect(self._on_save)
        file_menu.addAction(self._save_action)

        file_menu.addSeparator()

        close_action = QAction("&Close", self)
        close_action.setShortcut(QKeySequence.StandardKey.Close)
        close_action.triggered.connect(self.close)
        file_menu.addAction(close_action)

        # ─── Edit Menu ────────────────────────────────────────────────
        self._edit_menu = menu_bar.addMenu("&Edit")

        undo_action = QAction("&Undo", self)
        undo_action.setShortcut(QKeySequence.StandardKey.Undo)
        undo_action.triggered.connect(self._on_undo)
        self._edit_menu.addAction(undo_action)

        redo_action = QAction("&Redo", self)
        redo_action.setShortcut(QKeySequence.StandardKey.Redo)
        redo_action.triggered.connect(self._on_redo)
        self._edit_menu.addAction(redo_action)

        self._edit_menu.addSeparator()

        clear_action = QAction("C&lear All...", self)
        clear_action.triggered.connect(self._on_clear)
        self._edit_menu.addAction(clear_action)

        # ─── Help Menu ────────────────────────────────────────────────
        help_menu = menu_bar.addMenu("&Help")

        about_action = QAction("&About", self)
        about_action.triggered.connect(self._show_about_dialog)
        help_menu.addAction(about_action)

    # ─── Public Methods ───────────────────────────────────────────────────

    @property
    def editor(self) -> Optional[EditorWidget]:
        return self._editor

    def open_photo(
        self,
        image: QImage,
        annotations: Optional[Iterable[AnnotationBase]] = None,
        read_only: bool = False,
        title: str = "",
        on_save: Optional[SaveCallback] = None,
    ) -> EditorWidget:
        """
        Create an editor for a photo and show the window.

        Args:
            image: The photo at native resolution.
            annotations: Annotations previously saved for the photo.
            read_only: Open for viewing only.
            title: Shown in the window title, typically the file name.
            on_save: Called with (annotations, bytes) after each save.

        Returns:
            The new editor widget.
        """
        self._editor = EditorWidget(
            image=image,
            annotations=annotations,
            read_only=read_only,
            config_service=self._config,
            on_save=on_save,
            parent=self,
        )
        self._editor.closed.connect(self.close)
        self.setCentralWidget(self._editor)

        self._save_action.setEnabled(not read_only)
        self._edit_menu.setEnabled(not read_only)
        self._update_title(image, title, read_only)

        self.show()
        self.raise_()
        self.activateWindow()
        self._editor.canvas.setFocus()

        self._logger.info(f"Opened photo {title or '(untitled)'} ({image.width()}x{image.height()})")
        return self._editor

    def _update_title(self, image: QImage, title: str, read_only: bool) -> None:
        parts = ["Photomark"]
        if title:
            parts.append(title)
        parts.append(f"{image.width()}×{image.height()}")
        if read_only:
            parts.append("view only")
        self.setWindowTitle(" - ".join(parts))

    # ─── Menu Actions ─────────────────────────────────────────────────────

    def _on_save(self) -> None:
        if self._editor:
            self._editor.save()

    def _on_undo(self) -> None:
        if self._editor:
            self._editor.undo()

    def _on_redo(self) -> None:
        if self._editor:
            self._editor.redo()

    def _on_clear(self) -> None:
        if self._editor:
            self._editor.clear_all()

    def _show_about_dialog(self) -> None:
        about_text = (
            "<h2>Photomark</h2>"
            "<p>Draw arrows, circles, rectangles, freehand strokes and text "
            "labels on photos.</p>"
            f"<p><b>Version:</b> {__version__}</p>"
            "<p><b>Keyboard Shortcuts:</b></p>"
            "<ul>"
            "<li>A - Arrow tool</li>"
            "<li>T - Text tool</li>"
            "<li>C - Circle tool</li>"
            "<li>R - Rectangle tool</li>"
            "<li>F - Freehand tool</li>"
            "<li>Ctrl+Z - Undo</li>"
            "<li>Ctrl+Shift+Z / Ctrl+Y - Redo</li>"
            "<li>Ctrl+S - Save</li>"
            "</ul>"
        )
        QMessageBox.about(self, "About Photomark", about_text)

    def closeEvent(self, event) -> None:
        self._logger.info("MainWindow closing")
        event.accept()
