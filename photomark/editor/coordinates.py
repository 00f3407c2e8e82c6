"""
Display <-> native image coordinate mapping.

The photo is shown letterboxed inside the canvas: scaled uniformly to fit,
then centered along the dimension that does not bind. Pointer positions
arrive in display (widget) pixels and must be stored in native image pixels.
"""

from dataclasses import dataclass

from PySide6.QtCore import QPointF


@dataclass(frozen=True)
class CoordinateTransform:
    """
    Uniform scale plus centering offset between display and native space.

    Attributes:
        scale: Native image pixels per display pixel.
        offset_x: Horizontal letterbox padding in display pixels.
        offset_y: Vertical letterbox padding in display pixels.
        display_width: Width of the scaled image on screen.
        display_height: Height of the scaled image on screen.
    """
    scale: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0
    display_width: float = 0.0
    display_height: float = 0.0

    @classmethod
    def fit(
        cls,
        image_width: float,
        image_height: float,
        container_width: float,
        container_height: float,
    ) -> "CoordinateTransform":
        """
        Fit an image into a container preserving its aspect ratio.

        Raises:
            ValueError: If any dimension is not positive.
        """
        if min(image_width, image_height, container_width, container_height) <= 0:
            raise ValueError(
                f"Cannot fit {image_width}x{image_height} image into "
                f"{container_width}x{container_height} container"
            )

        image_aspect = image_width / image_height
        container_aspect = container_width / container_height

        if image_aspect > container_aspect:
            # Width is the binding constraint
            display_width = container_width
            display_height = display_width / image_aspect
        else:
            display_height = container_height
            display_width = display_height * image_aspect

        return cls(
            scale=image_width / display_width,
            offset_x=(container_width - display_width) / 2,
            offset_y=(container_height - display_height) / 2,
            display_width=display_width,
            display_height=display_height,
        )

    def to_native(self, point: QPointF) -> QPointF:
        """Convert a display (widget) position to native image coordinates."""
        return QPointF(
            (point.x() - self.offset_x) * self.scale,
            (point.y() - self.offset_y) * self.scale,
        )

    def to_display(self, point: QPointF) -> QPointF:
        """Convert a native image position to display (widget) coordinates."""
        return QPointF(
            point.x() / self.scale + self.offset_x,
            point.y() / self.scale + self.offset_y,
        )

    def contains_display(self, point: QPointF) -> bool:
        """True if a display position falls on the image (not the letterbox)."""
        return (
            self.offset_x <= point.x() <= self.offset_x + self.display_width
            and self.offset_y <= point.y() <= self.offset_y + self.display_height
        )
