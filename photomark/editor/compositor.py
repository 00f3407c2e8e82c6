"""
Flattening of a photo and its annotations into one exported image.

Annotations are painted with the same routines as the live layer, but
directly at native resolution, so the export is independent of how large
the editor window happened to be.
"""

from typing import Iterable

from PySide6.QtCore import QBuffer, QByteArray, QIODevice
from PySide6.QtGui import QImage, QPainter

from photomark.editor.annotations import AnnotationBase, paint_annotations
from photomark.services.logging_service import get_logger

DEFAULT_EXPORT_FORMAT = "JPEG"
DEFAULT_EXPORT_QUALITY = 90

logger = get_logger(__name__)


class ExportError(Exception):
    """Raised when the composed image cannot be encoded."""


def compose(base_image: QImage, annotations: Iterable[AnnotationBase]) -> QImage:
    """
    Draw the base image and then every annotation, in order, onto a new surface.

    The result has the base image's native size. The base image itself is
    left untouched.
    """
    result = QImage(base_image.size(), QImage.Format.Format_ARGB32_Premultiplied)
    result.fill(0)

    painter = QPainter(result)
    try:
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
        painter.drawImage(0, 0, base_image)
        paint_annotations(painter, annotations)
    finally:
        painter.end()

    return result


def export_image(
    base_image: QImage,
    annotations: Iterable[AnnotationBase],
    image_format: str = DEFAULT_EXPORT_FORMAT,
    quality: int = DEFAULT_EXPORT_QUALITY,
) -> bytes:
    """
    Compose and encode the annotated photo.

    Args:
        base_image: The photo at native resolution.
        annotations: Committed annotations in store order.
        image_format: Any format Qt can write, e.g. "JPEG" or "PNG".
        quality: Encoder quality, 0-100.

    Returns:
        The encoded image bytes.

    Raises:
        ExportError: If the base image is null or encoding fails.
    """
    if base_image.isNull():
        raise ExportError("Cannot export: no base image")

    composed = compose(base_image, annotations)

    if image_format.upper() in ("JPEG", "JPG"):
        # JPEG has no alpha channel
        composed = composed.convertToFormat(QImage.Format.Format_RGB32)

    data = QByteArray()
    buffer = QBuffer(data)
    buffer.open(QIODevice.OpenModeFlag.WriteOnly)
    try:
        ok = composed.save(buffer, image_format, quality)
    finally:
        buffer.close()

    if not ok or data.isEmpty():
        raise ExportError(f"Failed to encode image as {image_format}")

    logger.info(
        f"Exported {composed.width()}x{composed.height()} {image_format} "
        f"({data.size()} bytes)"
    )
    return bytes(data.data())
