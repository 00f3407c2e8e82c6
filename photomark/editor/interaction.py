"""
Pointer interaction state machine for the annotation editor.

The controller turns pointer-down/move/up events (already mapped to native
image coordinates) into committed annotations. It owns the ephemeral
DrawingSession and talks to the on-screen canvas only through a small view
protocol, so it can be driven without any widgets.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from PySide6.QtCore import QPointF

from photomark.editor.annotation_store import AnnotationStore
from photomark.editor.annotations import AnnotationBase, Point, TextAnnotation
from photomark.editor.tools import ToolBase, ToolType, create_tool
from photomark.services.logging_service import get_logger

DEFAULT_COLOR = "#EF4444"
DEFAULT_STROKE_WIDTH = 3


class AnnotationView(Protocol):
    """What the controller needs from whatever displays the annotations."""

    def redraw(self) -> None: ...

    def draw_preview(self, annotation: AnnotationBase) -> None: ...

    def draw_segment(self, start: QPointF, end: QPointF, color: str, stroke_width: int) -> None: ...

    def open_text_prompt(self, anchor: QPointF) -> None: ...

    def close_text_prompt(self) -> None: ...


@dataclass
class DrawingSession:
    """
    Ephemeral state of the gesture in progress.

    Tool, color and stroke width survive reset(); everything else describes
    a single gesture and is cleared when it ends.
    """
    tool_type: ToolType = ToolType.ARROW
    color: str = DEFAULT_COLOR
    stroke_width: int = DEFAULT_STROKE_WIDTH
    is_drawing: bool = False
    origin: Optional[QPointF] = None
    points: List[Point] = field(default_factory=list)
    text_anchor: Optional[QPointF] = None

    def begin_drag(self, pos: QPointF) -> None:
        self.is_drawing = True
        self.origin = QPointF(pos)
        self.points = []

    def reset(self) -> None:
        self.is_drawing = False
        self.origin = None
        self.points = []
        self.text_anchor = None


class InteractionController:
    """
    Dispatches pointer events to the active tool and commits the results.

    In read-only mode every mutating entry point is a no-op.
    """

    def __init__(
        self,
        store: AnnotationStore,
        view: AnnotationView,
        read_only: bool = False,
        session: Optional[DrawingSession] = None,
    ) -> None:
        self._logger = get_logger(__name__)
        self._store = store
        self._view = view
        self._read_only = read_only
        self._session = session if session is not None else DrawingSession()
        self._tool: ToolBase = create_tool(self._session.tool_type)

    # ─── Properties ───────────────────────────────────────────────────────

    @property
    def store(self) -> AnnotationStore:
        return self._store

    @property
    def view(self) -> AnnotationView:
        return self._view

    @property
    def session(self) -> DrawingSession:
        return self._session

    @property
    def active_tool(self) -> ToolBase:
        return self._tool

    @property
    def read_only(self) -> bool:
        return self._read_only

    @read_only.setter
    def read_only(self, value: bool) -> None:
        self._read_only = value
        if value:
            self._abort_gesture()

    # ─── Settings ─────────────────────────────────────────────────────────

    def set_tool(self, tool_type: ToolType) -> None:
        """
        Switch the active tool.

        Any gesture in progress is abandoned: a pending text prompt is closed
        and a shape preview is wiped by a full redraw.

        Raises:
            ValueError: If tool_type is not a known tool.
        """
        if self._read_only:
            return

        tool = create_tool(tool_type)
        self._tool.on_deactivate(self)
        self._abort_gesture()

        self._tool = tool
        self._session.tool_type = tool.tool_type
        self._logger.debug(f"Tool changed to: {tool.tool_type.value}")

    def set_color(self, color: str) -> None:
        if self._read_only:
            return
        self._session.color = color

    def set_stroke_width(self, stroke_width: int) -> None:
        if self._read_only:
            return
        if stroke_width <= 0:
            raise ValueError(f"Stroke width must be positive, got {stroke_width}")
        self._session.stroke_width = stroke_width

    # ─── Pointer events ───────────────────────────────────────────────────

    def pointer_down(self, pos: QPointF) -> None:
        if self._read_only:
            return
        self._tool.on_mouse_press(pos, self)

    def pointer_move(self, pos: QPointF) -> None:
        if self._read_only:
            return
        self._tool.on_mouse_move(pos, self)

    def pointer_up(self, pos: QPointF) -> None:
        if self._read_only:
            return
        self._tool.on_mouse_release(pos, self)

    # ─── Text entry ───────────────────────────────────────────────────────

    def request_text(self, anchor: QPointF) -> None:
        """Remember where the label goes and ask the view for a prompt."""
        self._session.text_anchor = QPointF(anchor)
        self._view.open_text_prompt(anchor)

    def confirm_text(self, value: str) -> None:
        """
        Finish a text prompt.

        Text that is blank after stripping is discarded. The stored label
        keeps the text as typed.
        """
        if self._read_only:
            return

        anchor = self._session.text_anchor
        if anchor is None:
            return

        self._session.text_anchor = None
        self._view.close_text_prompt()

        if not value.strip():
            self._logger.debug("Discarded blank text annotation")
            return

        self.commit(TextAnnotation(
            x=anchor.x(),
            y=anchor.y(),
            color=self._session.color,
            stroke_width=self._session.stroke_width,
            text=value,
        ))

    def cancel_text(self) -> None:
        if self._session.text_anchor is None:
            return
        self._session.text_anchor = None
        self._view.close_text_prompt()

    # ─── Tool callbacks ───────────────────────────────────────────────────

    def commit(self, annotation: AnnotationBase) -> None:
        """Store a finished annotation and repaint from the store."""
        self._store.append(annotation)
        self._session.reset()
        self._view.redraw()

    def show_preview(self, annotation: AnnotationBase) -> None:
        self._view.draw_preview(annotation)

    def draw_segment(self, start: QPointF, end: QPointF) -> None:
        self._view.draw_segment(start, end, self._session.color, self._session.stroke_width)

    # ─── History ──────────────────────────────────────────────────────────

    def undo(self) -> bool:
        if self._read_only:
            return False
        self._abort_gesture()
        if not self._store.undo():
            return False
        self._view.redraw()
        return True

    def redo(self) -> bool:
        if self._read_only:
            return False
        self._abort_gesture()
        if not self._store.redo():
            return False
        self._view.redraw()
        return True

    def clear(self) -> bool:
        """Remove every annotation. The caller is responsible for confirming first."""
        if self._read_only:
            return False
        self._abort_gesture()
        self._store.clear()
        self._view.redraw()
        return True

    def _abort_gesture(self) -> None:
        had_preview = self._session.is_drawing
        if self._session.text_anchor is not None:
            self._view.close_text_prompt()
        self._session.reset()
        if had_preview:
            self._view.redraw()
