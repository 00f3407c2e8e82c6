"""
Photo storage service for Photomark.

Loads a photo and any annotations previously saved for it, and writes the
flattened result back out:

- <image>.annotations.json   sidecar next to the photo, read on open
- <output>/<stem>_annotated.<ext>          the flattened image
- <output>/<stem>_annotated.<ext>.annotations.json   its annotation sidecar
"""

from pathlib import Path
from typing import List, Optional, Sequence

from PySide6.QtGui import QImage

from photomark.editor.annotations import AnnotationBase
from photomark.editor.serialization import (
    AnnotationFormatError,
    dumps_annotations,
    loads_annotations,
)
from photomark.services.logging_service import get_logger

SIDECAR_SUFFIX = ".annotations.json"

FORMAT_EXTENSIONS = {
    "JPEG": "jpg",
    "JPG": "jpg",
    "PNG": "png",
    "WEBP": "webp",
    "BMP": "bmp",
}


class PhotoStorageError(Exception):
    """Raised when a photo or its annotations cannot be loaded."""


def sidecar_path(image_path: Path) -> Path:
    """Annotation sidecar belonging to an image file."""
    return image_path.with_name(image_path.name + SIDECAR_SUFFIX)


class PhotoStorage:
    """Reads photos and annotation sidecars, writes annotated exports."""

    def __init__(self, output_folder: Path) -> None:
        self._logger = get_logger(__name__)
        self._output_folder = Path(output_folder)

    @property
    def output_folder(self) -> Path:
        return self._output_folder

    def load_image(self, image_path: Path) -> QImage:
        """
        Load a photo from disk.

        Raises:
            PhotoStorageError: If the file is missing or not a readable image.
        """
        image_path = Path(image_path)
        if not image_path.is_file():
            raise PhotoStorageError(f"Image not found: {image_path}")

        image = QImage(str(image_path))
        if image.isNull():
            raise PhotoStorageError(f"Could not decode image: {image_path}")

        self._logger.info(f"Loaded {image_path} ({image.width()}x{image.height()})")
        return image

    def load_annotations(
        self,
        image_path: Path,
        annotations_path: Optional[Path] = None,
    ) -> List[AnnotationBase]:
        """
        Load previously saved annotations for a photo.

        Args:
            image_path: The photo being opened.
            annotations_path: Explicit annotation file. If omitted, the
                photo's sidecar is used when it exists.

        Returns:
            The annotations, or an empty list when there is no sidecar.

        Raises:
            PhotoStorageError: If an explicit file is missing, or any file is unreadable or invalid.
        """
        if annotations_path is None:
            path = sidecar_path(Path(image_path))
            if not path.exists():
                return []
        else:
            path = Path(annotations_path)
            if not path.is_file():
                raise PhotoStorageError(f"Annotations file not found: {path}")

        try:
            annotations = loads_annotations(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise PhotoStorageError(f"Could not read annotations from {path}: {e}") from e
        except AnnotationFormatError as e:
            raise PhotoStorageError(f"Invalid annotations in {path}: {e}") from e

        self._logger.info(f"Loaded {len(annotations)} annotations from {path}")
        return annotations

    def output_path(self, image_path: Path, image_format: str) -> Path:
        """Where the annotated copy of image_path is written."""
        image_path = Path(image_path)
        extension = FORMAT_EXTENSIONS.get(image_format.upper(), image_format.lower())
        return self._output_folder / f"{image_path.stem}_annotated.{extension}"

    def save(
        self,
        image_path: Path,
        annotations: Sequence[AnnotationBase],
        data: bytes,
        image_format: str,
    ) -> Path:
        """
        Write the flattened image and its annotation sidecar.

        Returns:
            Path of the written image.

        Raises:
            OSError: If the output folder or files cannot be written.
        """
        target = self.output_path(image_path, image_format)
        self._output_folder.mkdir(parents=True, exist_ok=True)

        target.write_bytes(data)
        sidecar_path(target).write_text(dumps_annotations(annotations), encoding="utf-8")

        self._logger.info(f"Saved {target} with {len(annotations)} annotations")
        return target
