"""
Tests for the interaction controller and tools.

Covers:
- Shape drags: preview while moving, commit on release, nothing stored mid-drag
- Freehand: incremental segments and all points committed
- Text: prompt on click, blank text discarded, text kept as typed
- Tool changes reset the gesture and drop previews/prompts
- Degenerate shapes are committed
- Read-only mode ignores every mutation
- Tool factory rejects unknown types
- Tools log what they commit or discard
"""
import logging

import pytest
from PySide6.QtCore import QPointF

from photomark.editor.annotations import (
    ArrowAnnotation,
    CircleAnnotation,
    FreehandAnnotation,
    RectangleAnnotation,
    TextAnnotation,
)
from photomark.editor.interaction import DrawingSession
from photomark.editor.tools import (
    ArrowTool,
    FreehandTool,
    TextTool,
    ToolType,
    create_tool,
)
from conftest import drag


# ══════════════════════════════════════════════════════════════════════════
# Session / tool factory
# ══════════════════════════════════════════════════════════════════════════

class TestDrawingSession:

    def test_defaults(self):
        session = DrawingSession()
        assert session.tool_type == ToolType.ARROW
        assert session.color == "#EF4444"
        assert session.stroke_width == 3
        assert not session.is_drawing

    def test_reset_keeps_style(self):
        session = DrawingSession(tool_type=ToolType.CIRCLE, color="#000000", stroke_width=5)
        session.begin_drag(QPointF(1, 2))
        session.points.append((1, 2))
        session.text_anchor = QPointF(3, 4)
        session.reset()
        assert not session.is_drawing
        assert session.origin is None
        assert session.points == []
        assert session.text_anchor is None
        assert (session.tool_type, session.color, session.stroke_width) == (ToolType.CIRCLE, "#000000", 5)


class TestCreateTool:

    @pytest.mark.parametrize("tool_type", list(ToolType))
    def test_creates_each_type(self, tool_type):
        assert create_tool(tool_type).tool_type == tool_type

    def test_unknown_type_raises(self):
        with pytest.raises(ValueError):
            create_tool("eraser")

    def test_controller_rejects_unknown_tool(self, controller):
        with pytest.raises(ValueError):
            controller.set_tool("eraser")
        assert isinstance(controller.active_tool, ArrowTool)


# ══════════════════════════════════════════════════════════════════════════
# Shape tools
# ══════════════════════════════════════════════════════════════════════════

class TestShapeTools:

    @pytest.mark.parametrize("tool_type,cls", [
        (ToolType.ARROW, ArrowAnnotation),
        (ToolType.CIRCLE, CircleAnnotation),
        (ToolType.RECTANGLE, RectangleAnnotation),
    ])
    def test_drag_commits_shape_from_final_delta(self, controller, store, tool_type, cls):
        controller.set_tool(tool_type)
        drag(controller, [(10, 20), (30, 30), (50, 70)])

        assert len(store) == 1
        shape = store.annotations[0]
        assert isinstance(shape, cls)
        assert (shape.x, shape.y, shape.width, shape.height) == (10, 20, 40, 50)
        assert shape.color == "#EF4444"
        assert shape.stroke_width == 3

    def test_moves_preview_without_storing(self, controller, store, view):
        controller.set_tool(ToolType.RECTANGLE)
        controller.pointer_down(QPointF(0, 0))
        controller.pointer_move(QPointF(10, 10))
        controller.pointer_move(QPointF(20, 30))

        assert len(store) == 0
        assert view.calls == ["draw_preview", "draw_preview"]
        last = view.previews[-1]
        assert (last.width, last.height) == (20, 30)

    def test_release_commits_and_redraws(self, controller, store, view):
        drag(controller, [(0, 0), (5, 5)])
        assert view.calls[-1] == "redraw"
        assert not controller.session.is_drawing
        assert controller.session.origin is None

    def test_move_without_press_does_nothing(self, controller, store, view):
        controller.pointer_move(QPointF(5, 5))
        controller.pointer_up(QPointF(5, 5))
        assert len(store) == 0
        assert view.calls == []

    def test_zero_size_shape_is_committed(self, controller, store):
        controller.set_tool(ToolType.RECTANGLE)
        controller.pointer_down(QPointF(40, 40))
        controller.pointer_up(QPointF(40, 40))
        assert len(store) == 1
        assert (store.annotations[0].width, store.annotations[0].height) == (0, 0)

    def test_uses_current_style(self, controller, store):
        controller.set_color("#3B82F6")
        controller.set_stroke_width(8)
        drag(controller, [(0, 0), (10, 0)])
        assert store.annotations[0].color == "#3B82F6"
        assert store.annotations[0].stroke_width == 8

    def test_invalid_stroke_width(self, controller):
        with pytest.raises(ValueError):
            controller.set_stroke_width(0)


# ══════════════════════════════════════════════════════════════════════════
# Freehand
# ══════════════════════════════════════════════════════════════════════════

class TestFreehand:

    def test_segments_drawn_incrementally(self, controller, view):
        controller.set_tool(ToolType.FREEHAND)
        controller.pointer_down(QPointF(0, 0))
        controller.pointer_move(QPointF(5, 0))
        controller.pointer_move(QPointF(5, 5))

        assert view.calls == ["draw_segment", "draw_segment"]
        assert view.segments == [
            ((0, 0), (5, 0), "#EF4444", 3),
            ((5, 0), (5, 5), "#EF4444", 3),
        ]

    def test_commits_all_points(self, controller, store):
        controller.set_tool(ToolType.FREEHAND)
        points = [(10, 10), (20, 15), (30, 25), (40, 20), (50, 10)]
        drag(controller, points)

        assert len(store) == 1
        stroke = store.annotations[0]
        assert isinstance(stroke, FreehandAnnotation)
        assert stroke.points == tuple((float(x), float(y)) for x, y in points)
        assert (stroke.x, stroke.y) == (10, 10)

    def test_tap_commits_single_point(self, controller, store):
        controller.set_tool(ToolType.FREEHAND)
        controller.pointer_down(QPointF(7, 8))
        controller.pointer_up(QPointF(7, 8))
        assert store.annotations[0].points == ((7.0, 8.0),)

    def test_second_stroke_does_not_reuse_points(self, controller, store):
        controller.set_tool(ToolType.FREEHAND)
        drag(controller, [(0, 0), (1, 1)])
        drag(controller, [(50, 50), (60, 60)])
        assert store.annotations[1].points == ((50.0, 50.0), (60.0, 60.0))


# ══════════════════════════════════════════════════════════════════════════
# Text
# ══════════════════════════════════════════════════════════════════════════

class TestText:

    def test_click_opens_prompt_without_dragging(self, controller, view):
        controller.set_tool(ToolType.TEXT)
        controller.pointer_down(QPointF(12, 34))
        assert view.prompt_anchor == (12, 34)
        assert not controller.session.is_drawing

    def test_confirm_commits_text_at_anchor(self, controller, store, view):
        controller.set_tool(ToolType.TEXT)
        controller.set_color("#10B981")
        controller.pointer_down(QPointF(12, 34))
        controller.pointer_up(QPointF(12, 34))
        controller.confirm_text("  Upper molar  ")

        assert len(store) == 1
        label = store.annotations[0]
        assert isinstance(label, TextAnnotation)
        assert (label.x, label.y) == (12, 34)
        assert label.text == "  Upper molar  "
        assert label.color == "#10B981"
        assert view.prompt_anchor is None
        assert controller.session.text_anchor is None

    @pytest.mark.parametrize("value", ["", "   ", "\t\n"])
    def test_blank_text_is_discarded(self, controller, store, view, value):
        controller.set_tool(ToolType.TEXT)
        controller.pointer_down(QPointF(1, 1))
        controller.confirm_text(value)
        assert len(store) == 0
        assert "close_text_prompt" in view.calls
        assert controller.session.text_anchor is None

    def test_cancel_discards_anchor(self, controller, store, view):
        controller.set_tool(ToolType.TEXT)
        controller.pointer_down(QPointF(1, 1))
        controller.cancel_text()
        controller.confirm_text("late")
        assert len(store) == 0
        assert view.prompt_anchor is None

    def test_confirm_without_prompt_ignored(self, controller, store):
        controller.confirm_text("stray")
        assert len(store) == 0


# ══════════════════════════════════════════════════════════════════════════
# Tool changes
# ══════════════════════════════════════════════════════════════════════════

class TestToolChange:

    def test_tool_change_mid_drag_drops_preview(self, controller, store, view):
        controller.set_tool(ToolType.RECTANGLE)
        controller.pointer_down(QPointF(0, 0))
        controller.pointer_move(QPointF(10, 10))
        controller.set_tool(ToolType.CIRCLE)

        assert view.calls[-1] == "redraw"
        assert not controller.session.is_drawing

        # Release after switching does not commit the abandoned gesture
        controller.pointer_up(QPointF(20, 20))
        assert len(store) == 0

    def test_tool_change_closes_text_prompt(self, controller, store, view):
        controller.set_tool(ToolType.TEXT)
        controller.pointer_down(QPointF(5, 5))
        controller.set_tool(ToolType.ARROW)

        assert view.prompt_anchor is None
        assert controller.session.text_anchor is None
        controller.confirm_text("orphan")
        assert len(store) == 0

    def test_freehand_points_do_not_leak_into_next_tool(self, controller, store):
        controller.set_tool(ToolType.FREEHAND)
        controller.pointer_down(QPointF(0, 0))
        controller.pointer_move(QPointF(3, 3))
        controller.set_tool(ToolType.FREEHAND)
        assert controller.session.points == []

    def test_tool_type_tracked_in_session(self, controller):
        controller.set_tool(ToolType.TEXT)
        assert controller.session.tool_type == ToolType.TEXT
        assert isinstance(controller.active_tool, TextTool)
        controller.set_tool(ToolType.FREEHAND)
        assert isinstance(controller.active_tool, FreehandTool)


# ══════════════════════════════════════════════════════════════════════════
# History through the controller
# ══════════════════════════════════════════════════════════════════════════

class TestControllerHistory:

    def test_undo_redo_redraw(self, controller, store, view):
        drag(controller, [(0, 0), (10, 10)])
        view.calls.clear()

        assert controller.undo()
        assert len(store) == 0
        assert controller.redo()
        assert len(store) == 1
        assert view.calls == ["redraw", "redraw"]

    def test_undo_with_nothing_returns_false(self, controller, view):
        assert not controller.undo()
        assert view.calls == []

    def test_clear(self, controller, store):
        drag(controller, [(0, 0), (10, 10)])
        drag(controller, [(5, 5), (15, 15)])
        assert controller.clear()
        assert len(store) == 0
        assert controller.undo()
        assert len(store) == 2


# ══════════════════════════════════════════════════════════════════════════
# Read-only
# ══════════════════════════════════════════════════════════════════════════

class TestReadOnly:

    def test_drag_ignored(self, read_only_controller, store, view):
        drag(read_only_controller, [(0, 0), (10, 10), (20, 20)])
        assert len(store) == 0
        assert view.calls == []

    def test_text_ignored(self, store, view):
        from photomark.editor.interaction import InteractionController

        controller = InteractionController(store, view)
        controller.set_tool(ToolType.TEXT)
        controller.read_only = True
        controller.pointer_down(QPointF(1, 1))
        controller.confirm_text("nope")
        assert len(store) == 0

    def test_settings_and_history_ignored(self, read_only_controller, store):
        read_only_controller.set_tool(ToolType.FREEHAND)
        read_only_controller.set_color("#000000")
        read_only_controller.set_stroke_width(8)
        assert read_only_controller.session.tool_type == ToolType.ARROW
        assert read_only_controller.session.color == "#EF4444"
        assert read_only_controller.session.stroke_width == 3
        assert not read_only_controller.undo()
        assert not read_only_controller.clear()


class TestToolLogging:

    @pytest.fixture(autouse=True)
    def debug_logs(self, caplog):
        caplog.set_level(logging.DEBUG, logger="photomark.editor.tools")
        return caplog

    def _tool_messages(self, caplog):
        return [r.getMessage() for r in caplog.records if r.name == "photomark.editor.tools"]

    def test_shape_commit_logged(self, controller, caplog):
        controller.set_tool(ToolType.RECTANGLE)
        drag(controller, [(10, 20), (40, 60)])
        assert "rectangle drawn: (10, 20) delta (30, 40)" in self._tool_messages(caplog)

    def test_freehand_commit_logged(self, controller, caplog):
        controller.set_tool(ToolType.FREEHAND)
        drag(controller, [(0, 0), (5, 5), (10, 0)])
        assert "Freehand stroke drawn with 3 points" in self._tool_messages(caplog)

    def test_discarded_text_logged(self, controller, caplog):
        controller.set_tool(ToolType.TEXT)
        controller.pointer_down(QPointF(5, 5))
        controller.set_tool(ToolType.ARROW)
        assert "Pending text discarded on tool change" in self._tool_messages(caplog)
