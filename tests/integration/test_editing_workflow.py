"""
Integration tests for the editing workflow.

Tests:
- Drawing shapes through the canvas controller into the store
- Selecting, moving, resizing and duplicating
- Panning the view
- Multi-click paths and vertex editing
- Exporting the edited canvas as a Tkinter script
"""

import pytest
from PyQt6.QtCore import QPointF
from tests.conftest import assert_valid_python

from models import (
    CursorKind, HandleKind, MouseButton, Point, PointerEvent, RectangleShape,
    ShapeType, Tool, ViewTransform,
)
from services.canvas_controller import INITIAL_VIEW, CanvasController
from services.settings_manager import AppSettings
from services.shape_store import ShapeStore
from services.text_layout import ApproximateTextMeasurer
from services.tkinter_generator import TkinterScriptGenerator
from views.shape_renderer import ShapeRenderer


def at(x, y, **kwargs):
    return PointerEvent.at(x, y, **kwargs)


@pytest.fixture
def settings():
    """Settings with snapping off so pointer positions are used as-is."""
    settings = AppSettings()
    settings.editor.snap_to_grid = False
    return settings


@pytest.fixture
def controller(settings):
    return CanvasController(ShapeStore(), settings, ApproximateTextMeasurer())


def draw(controller, tool, start, end):
    controller.set_tool(tool)
    controller.press(at(*start))
    controller.move(at(*end))
    return controller.release(at(*end))


class TestDrawing:
    """Tests for creating shapes on the canvas."""

    def test_draw_rectangle(self, controller):
        shape = draw(controller, Tool.RECTANGLE, (10, 10), (60, 40))

        assert len(controller.store) == 1
        assert controller.store.get(shape.id) is shape
        assert (shape.x, shape.y, shape.width, shape.height) == (10, 10, 50, 30)
        assert shape.fill == controller.settings.drawing.fill_color
        assert controller.selected_id == shape.id

    def test_preview_shown_while_drawing(self, controller):
        controller.set_tool(Tool.ELLIPSE)
        controller.press(at(0, 0))
        controller.move(at(40, 20))

        assert len(controller.store) == 0
        displayed = controller.display_shapes()
        assert len(displayed) == 1
        assert displayed[0].type == ShapeType.ELLIPSE

    def test_cancel_discards_drawing(self, controller):
        controller.set_tool(Tool.RECTANGLE)
        controller.press(at(10, 10))
        controller.move(at(60, 40))
        controller.cancel()

        assert controller.preview is None
        assert controller.release(at(60, 40)) is None
        assert len(controller.store) == 0

    def test_click_does_not_create(self, controller):
        assert draw(controller, Tool.RECTANGLE, (10, 10), (11, 11)) is None
        assert len(controller.store) == 0

    def test_snapping(self, controller):
        controller.settings.editor.snap_to_grid = True
        shape = draw(controller, Tool.RECTANGLE, (12, 13), (58, 44))
        assert (shape.x, shape.y, shape.width, shape.height) == (10, 10, 50, 30)

    def test_center_mode(self, controller):
        controller.settings.editor.draw_mode = "center"
        shape = draw(controller, Tool.RECTANGLE, (50, 50), (60, 70))
        assert (shape.x, shape.y, shape.width, shape.height) == (40, 30, 20, 40)

    def test_text_click_to_place(self, controller):
        controller.set_tool(Tool.TEXT)
        controller.press(at(20, 30))
        shape = controller.release(at(20, 30))

        assert shape.type == ShapeType.TEXT
        assert (shape.x, shape.y) == (20, 30)
        assert controller.selected_id == shape.id


class TestSelectionEditing:
    """Tests for editing existing shapes with the select tool."""

    @pytest.fixture
    def drawn(self, controller):
        shape = draw(controller, Tool.RECTANGLE, (10, 10), (60, 40))
        controller.set_tool(Tool.SELECT)
        return shape

    def test_selection_kept_when_switching_to_select(self, controller, drawn):
        assert controller.selected_id == drawn.id
        assert controller.handles()

    def test_drag_moves_shape(self, controller, drawn):
        controller.press(at(35, 25))
        controller.move(at(45, 35))
        moved = controller.release(at(45, 35))

        assert moved.id == drawn.id
        assert (moved.x, moved.y) == (20, 20)
        assert controller.store.get(drawn.id) is moved

    def test_resize_from_corner_handle(self, controller, drawn):
        controller.press(at(60, 40))
        controller.move(at(80, 60))
        resized = controller.release(at(80, 60))

        assert (resized.x, resized.y, resized.width, resized.height) == (10, 10, 70, 50)

    def test_right_drag_duplicates(self, controller, drawn):
        controller.press(at(35, 25, button=MouseButton.RIGHT))
        controller.move(at(135, 25))
        clone = controller.release(at(135, 25))

        assert len(controller.store) == 2
        assert clone.id != drawn.id
        assert clone.x == 110
        assert controller.selected_id == clone.id

    def test_click_empty_canvas_deselects_and_pans(self, controller, drawn):
        controller.press(at(500, 500))
        assert controller.selected_id is None
        controller.move(at(520, 490))
        assert controller.view == ViewTransform(1.0, INITIAL_VIEW.x + 20, INITIAL_VIEW.y - 10)
        assert controller.release(at(520, 490)) is None

        controller.reset_view()
        assert controller.view == INITIAL_VIEW

    def test_delete_selected(self, controller, drawn):
        removed = controller.delete_selected()
        assert removed.id == drawn.id
        assert len(controller.store) == 0
        assert controller.selected_id is None

    def test_cursors(self, controller, drawn):
        assert controller.cursor_at(Point(35, 25)) == CursorKind.GRAB
        assert controller.cursor_at(Point(300, 300)) == CursorKind.DEFAULT
        assert controller.cursor_at(Point(60, 40)) == CursorKind.NWSE_RESIZE
        controller.set_tool(Tool.ELLIPSE)
        assert controller.cursor_at(Point(300, 300)) == CursorKind.CROSSHAIR


class TestPaths:
    """Tests for multi-click paths."""

    def _click_points(self, controller, tool, points):
        controller.set_tool(tool)
        for x, y in points:
            controller.press(at(x, y))

    def test_open_polyline(self, controller):
        self._click_points(controller, Tool.POLYLINE, [(0, 0), (50, 0), (50, 50)])
        assert controller.path_preview() is not None

        shape = controller.complete_path(is_closed=False)
        assert shape.type == ShapeType.POLYLINE
        assert not shape.is_closed
        assert controller.store.get(shape.id) is shape
        assert controller.path_preview() is None

    def test_double_click_finishes(self, controller):
        # The second press of a double click lands on the last point again
        self._click_points(controller, Tool.POLYLINE, [(0, 0), (50, 0), (50, 0)])
        shape = controller.double_click(at(50, 0))
        assert len(shape.points) == 2

    def test_closed_bezier(self, controller):
        self._click_points(controller, Tool.BEZIER, [(0, 0), (50, 0), (50, 50)])
        shape = controller.complete_path(is_closed=True)
        assert shape.type == ShapeType.BEZIER
        assert shape.is_closed

    def test_escape_discards_points(self, controller):
        self._click_points(controller, Tool.POLYLINE, [(0, 0), (50, 0)])
        controller.cancel()
        assert controller.complete_path() is None
        assert len(controller.store) == 0


class TestPointEditing:
    """Tests for the edit-points tool."""

    def test_move_vertex_converts_to_polyline(self, controller):
        drawn = draw(controller, Tool.RECTANGLE, (10, 10), (60, 40))
        controller.set_tool(Tool.EDIT_POINTS)
        assert controller.selected_id == drawn.id

        controller.press(at(60, 40))
        controller.move(at(80, 50))
        edited = controller.release(at(80, 50))

        assert edited.id == drawn.id
        assert edited.type == ShapeType.POLYLINE
        assert edited.points[2] == Point(80, 50)
        assert len(controller.store) == 1

    def test_rotated_vertex_painted_under_pointer(self, controller):
        rect = RectangleShape(x=0, y=0, width=100, height=50, rotation=30)
        controller.store.add(rect)
        controller.select(rect.id)
        controller.set_tool(Tool.EDIT_POINTS)
        vertex = [h for h in controller.handles() if h.kind == HandleKind.VERTEX][2]
        target = Point(vertex.position.x + 15, vertex.position.y + 20)

        controller.press(at(*vertex.position))
        controller.move(at(*target))

        preview = controller.preview
        centers = controller.rotation_centers()
        assert set(centers) == {rect.id}
        transform = ShapeRenderer.rotation_transform(preview, controller.measurer,
                                                     centers[preview.id])
        mapped = transform.map(QPointF(*preview.points[2]))
        assert mapped.x() == pytest.approx(target.x)
        assert mapped.y() == pytest.approx(target.y)

        committed = controller.release(at(*target))
        assert committed.points[2].x == pytest.approx(target.x)
        assert committed.points[2].y == pytest.approx(target.y)
        assert controller.rotation_centers() == {}

    def test_press_off_handles_does_nothing(self, controller):
        draw(controller, Tool.RECTANGLE, (10, 10), (60, 40))
        controller.set_tool(Tool.EDIT_POINTS)
        controller.press(at(30, 20))
        assert not controller.is_interacting


class TestExport:
    """Tests for exporting the canvas."""

    def test_export_edited_canvas(self, controller):
        draw(controller, Tool.RECTANGLE, (10, 10), (60, 40))
        draw(controller, Tool.STAR, (100, 100), (200, 200))
        draw(controller, Tool.LINE, (0, 0), (100, 100))

        script = TkinterScriptGenerator().generate(controller.store.shapes,
                                                   controller.settings.canvas)
        assert_valid_python(script)
        assert script.count(".create_") == 3
