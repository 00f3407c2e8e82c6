"""
Application core for Photomark.

This module contains the AppCore class which is responsible for:
- Initializing services (config, photo storage)
- Applying global styling (dark theme)
- Loading the photo and its saved annotations
- Opening the editor and persisting what it saves
"""

from pathlib import Path
from typing import List, Optional

from PySide6.QtCore import QObject, Slot
from PySide6.QtGui import QColor, QPalette
from PySide6.QtWidgets import QApplication

from photomark.editor.annotations import AnnotationBase
from photomark.services.config_service import ConfigService
from photomark.services.logging_service import get_logger
from photomark.services.photo_storage import PhotoStorage
from photomark.ui.main_window import MainWindow


class AppCore(QObject):
    """
    Wires services and the editor together for one photo.

    Raises PhotoStorageError from the constructor if the photo or its
    annotations cannot be loaded.
    """

    def __init__(
        self,
        app: QApplication,
        image_path: Path,
        annotations_path: Optional[Path] = None,
        output_dir: Optional[Path] = None,
        read_only: bool = False,
        config_service: Optional[ConfigService] = None,
    ) -> None:
        """
        Initialize the application core.

        Args:
            app: The QApplication instance.
            image_path: Photo to open.
            annotations_path: Annotation file to load instead of the photo's sidecar.
            output_dir: Where saves go. Overrides the configured output folder.
            read_only: Open the photo for viewing only.
            config_service: Configuration to use. Loaded from disk if omitted.
        """
        super().__init__()
        self._app = app
        self._logger = get_logger(__name__)

        self._image_path = Path(image_path)
        self._annotations_path = annotations_path
        self._read_only = read_only

        self._config_service = config_service if config_service is not None else ConfigService()
        output_folder = Path(output_dir) if output_dir else Path(self._config_service.output_folder).expanduser()
        self._storage = PhotoStorage(output_folder)
        self._main_window: Optional[MainWindow] = None

        self._apply_dark_theme()
        self._open_photo()

    def _apply_dark_theme(self) -> None:
        """Apply a dark color palette to the application."""
        palette = QPalette()

        palette.setColor(QPalette.ColorRole.Window, QColor(45, 45, 45))
        palette.setColor(QPalette.ColorRole.WindowText, QColor(220, 220, 220))
        palette.setColor(QPalette.ColorRole.Base, QColor(35, 35, 35))
        palette.setColor(QPalette.ColorRole.AlternateBase, QColor(50, 50, 50))
        palette.setColor(QPalette.ColorRole.Text, QColor(220, 220, 220))
        palette.setColor(QPalette.ColorRole.BrightText, QColor(255, 255, 255))
        palette.setColor(QPalette.ColorRole.Button, QColor(55, 55, 55))
        palette.setColor(QPalette.ColorRole.ButtonText, QColor(220, 220, 220))
        palette.setColor(QPalette.ColorRole.Highlight, QColor(80, 120, 180))
        palette.setColor(QPalette.ColorRole.HighlightedText, QColor(255, 255, 255))
        palette.setColor(QPalette.ColorRole.ToolTipBase, QColor(60, 60, 60))
        palette.setColor(QPalette.ColorRole.ToolTipText, QColor(220, 220, 220))

        for role in (
            QPalette.ColorRole.WindowText,
            QPalette.ColorRole.Text,
            QPalette.ColorRole.ButtonText,
        ):
            palette.setColor(QPalette.ColorGroup.Disabled, role, QColor(127, 127, 127))

        self._app.setPalette(palette)
        self._app.setStyleSheet("""
            QToolTip {
                background-color: #3d3d3d;
                color: #dcdcdc;
                border: 1px solid #5a5a5a;
                padding: 4px;
            }
            QMenuBar {
                background-color: #2d2d2d;
                padding: 2px;
            }
            QMenu {
                background-color: #2d2d2d;
                border: 1px solid #3a3a3a;
            }
            QMenu::item:selected {
                background-color: #4a6a9a;
            }
        """)

        self._logger.debug("Dark theme applied")

    def _open_photo(self) -> None:
        image = self._storage.load_image(self._image_path)
        annotations = self._storage.load_annotations(self._image_path, self._annotations_path)

        self._main_window = MainWindow(self._config_service)
        editor = self._main_window.open_photo(
            image,
            annotations=annotations,
            read_only=self._read_only,
            title=self._image_path.name,
        )
        editor.saved.connect(self._on_saved)

    # ─── Save Flow ────────────────────────────────────────────────────────

    @Slot(list, object)
    def _on_saved(self, annotations: List[AnnotationBase], data: bytes) -> None:
        """Write the flattened photo and its annotations to the output folder."""
        try:
            target = self._storage.save(
                self._image_path,
                annotations,
                data,
                self._config_service.export_format,
            )
        except OSError as e:
            self._logger.error(f"Could not write annotated photo: {e}")
            if self._main_window and self._main_window.editor:
                self._main_window.editor.status_line.show_message(f"Could not write file: {e}")
            return

        if self._main_window and self._main_window.editor:
            self._main_window.editor.status_line.show_message(f"Saved to {target}")

    # ─── Properties ───────────────────────────────────────────────────────

    @property
    def config(self) -> ConfigService:
        return self._config_service

    @property
    def storage(self) -> PhotoStorage:
        return self._storage

    @property
    def main_window(self) -> MainWindow:
        if self._main_window is None:
            raise RuntimeError("MainWindow not initialized")
        return self._main_window
