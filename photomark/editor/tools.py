"""
Drawing tools for the Photomark editor.

Each tool interprets pointer gestures for one annotation kind. Tools do not
keep gesture state of their own: the in-progress drag lives in the
controller's DrawingSession, so switching tools can never leak a half-made
gesture from one tool into another.

Tools:
- ArrowTool: Drag to draw an arrow
- CircleTool: Drag across the circle's diameter
- RectangleTool: Drag corner to corner
- FreehandTool: Drag to trace a stroke
- TextTool: Click to place a text label
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Type

from PySide6.QtCore import QPointF, Qt

from photomark.editor.annotations import (
    ArrowAnnotation,
    CircleAnnotation,
    DeltaAnnotation,
    FreehandAnnotation,
    RectangleAnnotation,
)
from photomark.services.logging_service import get_logger

if TYPE_CHECKING:
    from photomark.editor.interaction import DrawingSession, InteractionController


class ToolType(Enum):
    """The five tool modes. Values match the annotation kind tags."""
    ARROW = "arrow"
    TEXT = "text"
    CIRCLE = "circle"
    RECTANGLE = "rectangle"
    FREEHAND = "freehand"


class ToolBase(ABC):
    """
    Base class for all tools.

    Positions passed to the handlers are already in native image coordinates.
    """

    def __init__(self) -> None:
        self._logger = get_logger(__name__)

    @property
    @abstractmethod
    def tool_type(self) -> ToolType:
        """Return the type of this tool."""

    @property
    def cursor(self) -> Qt.CursorShape:
        return Qt.CursorShape.CrossCursor

    @abstractmethod
    def on_mouse_press(self, pos: QPointF, controller: "InteractionController") -> None:
        """Handle pointer-down."""

    def on_mouse_move(self, pos: QPointF, controller: "InteractionController") -> None:
        """Handle pointer-move. Most tools only react while dragging."""

    def on_mouse_release(self, pos: QPointF, controller: "InteractionController") -> None:
        """Handle pointer-up."""

    def on_deactivate(self, controller: "InteractionController") -> None:
        """Called when another tool is selected."""


class ShapeTool(ToolBase):
    """
    Base for tools whose annotation is an anchor plus a drag delta.

    While dragging, the controller redraws the committed annotations and
    overlays a preview; the preview is only stored on release.
    """

    annotation_class: Type[DeltaAnnotation] = DeltaAnnotation

    def build(self, session: "DrawingSession", pos: QPointF) -> DeltaAnnotation:
        """Create the annotation spanning from the drag origin to pos."""
        origin = session.origin
        return self.annotation_class(
            x=origin.x(),
            y=origin.y(),
            width=pos.x() - origin.x(),
            height=pos.y() - origin.y(),
            color=session.color,
            stroke_width=session.stroke_width,
        )

    def on_mouse_press(self, pos: QPointF, controller: "InteractionController") -> None:
        controller.session.begin_drag(pos)

    def on_mouse_move(self, pos: QPointF, controller: "InteractionController") -> None:
        session = controller.session
        if session.is_drawing and session.origin is not None:
            controller.show_preview(self.build(session, pos))

    def on_mouse_release(self, pos: QPointF, controller: "InteractionController") -> None:
        session = controller.session
        if session.is_drawing and session.origin is not None:
            annotation = self.build(session, pos)
            self._logger.debug(
                f"{self.tool_type.value} drawn: ({annotation.x:.0f}, {annotation.y:.0f}) "
                f"delta ({annotation.width:.0f}, {annotation.height:.0f})"
            )
            controller.commit(annotation)


class ArrowTool(ShapeTool):
    annotation_class = ArrowAnnotation

    @property
    def tool_type(self) -> ToolType:
        return ToolType.ARROW


class CircleTool(ShapeTool):
    annotation_class = CircleAnnotation

    @property
    def tool_type(self) -> ToolType:
        return ToolType.CIRCLE


class RectangleTool(ShapeTool):
    annotation_class = RectangleAnnotation

    @property
    def tool_type(self) -> ToolType:
        return ToolType.RECTANGLE


class FreehandTool(ToolBase):
    """
    Freehand drawing tool.

    Records every pointer position of the drag and draws only the newest
    segment on each move, without a full redraw.
    """

    @property
    def tool_type(self) -> ToolType:
        return ToolType.FREEHAND

    def on_mouse_press(self, pos: QPointF, controller: "InteractionController") -> None:
        session = controller.session
        session.begin_drag(pos)
        session.points.append((pos.x(), pos.y()))

    def on_mouse_move(self, pos: QPointF, controller: "InteractionController") -> None:
        session = controller.session
        if not session.is_drawing:
            return

        last_x, last_y = session.points[-1]
        session.points.append((pos.x(), pos.y()))
        controller.draw_segment(QPointF(last_x, last_y), pos)

    def on_mouse_release(self, pos: QPointF, controller: "InteractionController") -> None:
        session = controller.session
        if not session.is_drawing:
            return

        # A tap without movement commits a single-point stroke that renders nothing
        self._logger.debug(f"Freehand stroke drawn with {len(session.points)} points")
        first_x, first_y = session.points[0]
        controller.commit(FreehandAnnotation(
            x=first_x,
            y=first_y,
            color=session.color,
            stroke_width=session.stroke_width,
            points=tuple(session.points),
        ))


class TextTool(ToolBase):
    """
    Text tool - a click opens a text prompt anchored at the click.

    Nothing is stored until the prompt is confirmed with non-blank text.
    """

    @property
    def tool_type(self) -> ToolType:
        return ToolType.TEXT

    @property
    def cursor(self) -> Qt.CursorShape:
        return Qt.CursorShape.IBeamCursor

    def on_mouse_press(self, pos: QPointF, controller: "InteractionController") -> None:
        controller.request_text(pos)

    def on_deactivate(self, controller: "InteractionController") -> None:
        if controller.session.text_anchor is not None:
            self._logger.debug("Pending text discarded on tool change")
            controller.cancel_text()


def create_tool(tool_type: ToolType) -> ToolBase:
    """
    Factory function to create tools by type.

    Args:
        tool_type: The type of tool to create.

    Returns:
        A new instance of the requested tool.

    Raises:
        ValueError: For anything that is not one of the five tool types.
    """
    tool_classes = {
        ToolType.ARROW: ArrowTool,
        ToolType.TEXT: TextTool,
        ToolType.CIRCLE: CircleTool,
        ToolType.RECTANGLE: RectangleTool,
        ToolType.FREEHAND: FreehandTool,
    }

    if tool_type not in tool_classes:
        raise ValueError(f"Unknown tool type: {tool_type!r}")

    return tool_classes[tool_type]()
