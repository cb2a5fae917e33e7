"""
Unit tests for the interaction state machine.

Tests:
- Shape creation per tool (corner and center modes, aspect lock)
- Click vs drag, degenerate shapes
- Dragging, duplicating, panning
- Resizing (unrotated and rotated), rotating
- Vertex editing and segment insertion
- Special handle edits (arc angles, apex, trapezoid, parallelogram, star)
- Multi-click paths
"""

import pytest

from models import (
    ActionKind, ArcStyle, DrawMode, HandleKind,
    ImageShape, MouseButton, Point, PointerEvent,
    RectangleShape, ShapeState, ShapeType, StarShape, Tool, TransformHandle,
    ViewTransform, ParallelogramShape, PolygonShape, TrapezoidShape, TriangleShape,
)
from services.geometry import compute_vertices
from services.handles import selection_handles, edit_point_handles
from services.interaction import (
    InteractionContext, PathBuilder, PendingImage, begin_interaction,
    cancel_interaction, commit_interaction, convert_to_polyline,
    create_shape_for_tool, is_degenerate, snap_point, update_interaction,
)
from tests.conftest import assert_points_close


def at(x, y, **kwargs):
    return PointerEvent.at(x, y, **kwargs)


def drag(tool, start, end, context, shape=None, handle=None, shift=False):
    """Press at ``start``, move to ``end`` and release; returns (state, result)."""
    state = begin_interaction(at(*start), tool, shape, handle, context)
    assert state is not None
    state, _ = update_interaction(state, at(*end, shift=shift), context)
    return state, commit_interaction(state, context)


def handle_of(shape, kind, transform=None):
    for h in selection_handles(shape):
        if h.kind == kind and (transform is None or h.transform == transform):
            return h
    raise AssertionError(f"no {kind} handle")


def scaled_corner(handle, factor):
    """Pointer position that scales the box about the handle's anchor."""
    return Point(handle.anchor.x + factor * (handle.position.x - handle.anchor.x),
                 handle.anchor.y + factor * (handle.position.y - handle.anchor.y))


# Each corner handle mapped to the one diagonally opposite
CORNERS = {
    TransformHandle.TOP_LEFT: TransformHandle.BOTTOM_RIGHT,
    TransformHandle.TOP_RIGHT: TransformHandle.BOTTOM_LEFT,
    TransformHandle.BOTTOM_LEFT: TransformHandle.TOP_RIGHT,
    TransformHandle.BOTTOM_RIGHT: TransformHandle.TOP_LEFT,
}


class TestHelpers:
    """Tests for snapping and degenerate checks."""

    def test_snap(self):
        assert snap_point(Point(12, 17), 10) == Point(10, 20)
        assert snap_point(Point(12, 17), 0) == Point(12, 17)

    def test_degenerate(self):
        assert is_degenerate(RectangleShape(width=2, height=50))
        assert not is_degenerate(RectangleShape(width=10, height=10))
        assert is_degenerate(StarShape(radius=1))


class TestCreateShape:
    """Tests for create_shape_for_tool."""

    def test_square_is_locked(self, context):
        shape = create_shape_for_tool(Tool.SQUARE, Point(5, 5), context)
        assert shape.type == ShapeType.RECTANGLE
        assert shape.is_aspect_ratio_locked
        assert shape.name == "Square"

    def test_arc_defaults(self, context):
        arc = create_shape_for_tool(Tool.ARC, Point(0, 0), context)
        assert arc.style == ArcStyle.ARC
        assert arc.extent == 90
        assert arc.fill == "none"
        pie = create_shape_for_tool(Tool.PIESLICE, Point(0, 0), context)
        assert pie.extent == 270

    def test_polygon_uses_side_count(self):
        ctx = InteractionContext(number_of_sides=8)
        assert create_shape_for_tool(Tool.POLYGON, Point(0, 0), ctx).sides == 8

    def test_image_needs_pending_image(self, context):
        assert create_shape_for_tool(Tool.IMAGE, Point(0, 0), context) is None
        ctx = InteractionContext(pending_image=PendingImage("cat.png", 64, 32))
        image = create_shape_for_tool(Tool.IMAGE, Point(5, 5), ctx)
        assert isinstance(image, ImageShape)
        assert (image.width, image.height, image.src) == (64, 32, "cat.png")

    def test_non_creation_tools(self, context):
        assert create_shape_for_tool(Tool.SELECT, Point(0, 0), context) is None
        assert create_shape_for_tool(Tool.POLYLINE, Point(0, 0), context) is None


class TestDrawing:
    """Tests for drag-to-create."""

    def test_rectangle_corner_mode(self, context):
        _, shape = drag(Tool.RECTANGLE, (10, 10), (60, 40), context)
        assert (shape.x, shape.y, shape.width, shape.height) == (10, 10, 50, 30)
        assert shape.fill == context.fill_color

    def test_rectangle_dragged_up_left(self, context):
        _, shape = drag(Tool.RECTANGLE, (60, 40), (10, 10), context)
        assert (shape.x, shape.y, shape.width, shape.height) == (10, 10, 50, 30)

    def test_square_takes_larger_side(self, context):
        _, shape = drag(Tool.SQUARE, (0, 0), (30, 10), context)
        assert shape.width == shape.height == 30

    def test_shift_locks_aspect(self, context):
        _, shape = drag(Tool.RECTANGLE, (0, 0), (30, 10), context, shift=True)
        assert shape.width == shape.height == 30

    def test_rectangle_center_mode(self):
        ctx = InteractionContext(draw_mode=DrawMode.CENTER)
        _, shape = drag(Tool.RECTANGLE, (50, 50), (60, 70), ctx)
        assert (shape.x, shape.y, shape.width, shape.height) == (40, 30, 20, 40)

    def test_ellipse_corner_mode(self, context):
        _, shape = drag(Tool.ELLIPSE, (0, 0), (40, 20), context)
        assert (shape.cx, shape.cy, shape.rx, shape.ry) == (20, 10, 20, 10)

    def test_ellipse_center_mode(self):
        ctx = InteractionContext(draw_mode=DrawMode.CENTER)
        _, shape = drag(Tool.ELLIPSE, (50, 50), (70, 60), ctx)
        assert (shape.cx, shape.cy, shape.rx, shape.ry) == (50, 50, 20, 10)

    def test_circle_radius(self, context):
        _, shape = drag(Tool.CIRCLE, (0, 0), (30, 40), context)
        assert shape.rx == shape.ry == 25

    def test_line(self, context):
        _, shape = drag(Tool.LINE, (0, 0), (30, 40), context)
        assert shape.points == (Point(0, 0), Point(30, 40))

    def test_pencil_accumulates(self, context):
        state = begin_interaction(at(0, 0), Tool.PENCIL, context=context)
        for x in (10, 20, 30):
            state, _ = update_interaction(state, at(x, x), context)
        shape = commit_interaction(state, context)
        assert len(shape.points) == 4

    def test_star_inner_radius(self, context):
        _, shape = drag(Tool.STAR, (0, 0), (100, 60), context)
        assert shape.radius == 30
        assert shape.inner_radius == 15
        assert (shape.cx, shape.cy) == (50, 30)

    def test_click_without_drag_creates_nothing(self, context):
        state = begin_interaction(at(10, 10), Tool.RECTANGLE, context=context)
        state, _ = update_interaction(state, at(11, 11), context)
        assert not state.has_dragged
        assert commit_interaction(state, context) is None

    def test_degenerate_drag_discarded(self, context):
        _, shape = drag(Tool.RECTANGLE, (0, 0), (100, 2), context)
        assert shape is None

    def test_text_click_to_place(self, context):
        state = begin_interaction(at(25, 35), Tool.TEXT, context=context)
        assert state.preview is not None
        shape = commit_interaction(state, context)
        assert shape.type == ShapeType.TEXT
        assert (shape.x, shape.y) == (25, 35)
        assert shape.font_size == context.text_font_size

    def test_snapping(self):
        ctx = InteractionContext(snap_step=10)
        _, shape = drag(Tool.RECTANGLE, (12, 13), (58, 44), ctx)
        assert (shape.x, shape.y, shape.width, shape.height) == (10, 10, 50, 30)


class TestSelectTool:
    """Tests for dragging, duplicating and panning."""

    def test_drag_moves_shape(self, rectangle, context):
        _, moved = drag(Tool.SELECT, (20, 30), (50, 40), context, shape=rectangle)
        assert moved.id == rectangle.id
        assert (moved.x, moved.y) == (40, 30)

    def test_shift_constrains_axis(self, rectangle, context):
        _, moved = drag(Tool.SELECT, (20, 30), (50, 35), context, shape=rectangle, shift=True)
        assert (moved.x, moved.y) == (40, 20)

    def test_disabled_shape_not_dragged(self, rectangle, context):
        disabled = rectangle.copy(state=ShapeState.DISABLED)
        assert begin_interaction(at(20, 30), Tool.SELECT, disabled, context=context) is None

    def test_right_drag_duplicates(self, rectangle, context):
        state = begin_interaction(at(20, 30, button=MouseButton.RIGHT), Tool.SELECT, rectangle,
                                  context=context)
        assert state.kind == ActionKind.DUPLICATING
        state, _ = update_interaction(state, at(70, 30), context)
        clone = commit_interaction(state, context)
        assert clone.id != rectangle.id
        assert clone.x == 60

    def test_right_click_without_drag_does_not_duplicate(self, rectangle, context):
        state = begin_interaction(at(20, 30, button=MouseButton.RIGHT), Tool.SELECT, rectangle,
                                  context=context)
        assert commit_interaction(state, context) is None

    def test_empty_press_pans(self):
        ctx = InteractionContext(view=ViewTransform(1.0, 50, 50))
        state = begin_interaction(at(100, 100), Tool.SELECT, None, context=ctx)
        assert state.kind == ActionKind.PANNING
        state, preview = update_interaction(state, at(130, 90), ctx)
        assert preview is None
        assert state.view == ViewTransform(1.0, 80, 40)
        assert commit_interaction(state, ctx) is None

    def test_middle_button_pans_with_any_tool(self, context):
        state = begin_interaction(at(0, 0, button=MouseButton.MIDDLE), Tool.RECTANGLE,
                                  context=context)
        assert state.kind == ActionKind.PANNING


class TestResizing:
    """Tests for box and endpoint resizing."""

    def test_corner_resize_keeps_anchor(self, rectangle, context):
        handle = handle_of(rectangle, HandleKind.RESIZE, TransformHandle.BOTTOM_RIGHT)
        _, shape = drag(None, (110, 70), (130, 100), context, rectangle, handle)
        assert (shape.x, shape.y, shape.width, shape.height) == (10, 20, 120, 80)

    def test_top_left_resize(self, rectangle, context):
        handle = handle_of(rectangle, HandleKind.RESIZE, TransformHandle.TOP_LEFT)
        _, shape = drag(None, (10, 20), (0, 0), context, rectangle, handle)
        assert (shape.x, shape.y, shape.width, shape.height) == (0, 0, 110, 70)

    def test_edge_resize_changes_one_dimension(self, rectangle, context):
        handle = handle_of(rectangle, HandleKind.RESIZE, TransformHandle.MIDDLE_RIGHT)
        _, shape = drag(None, (110, 45), (160, 90), context, rectangle, handle)
        assert (shape.x, shape.y, shape.width, shape.height) == (10, 20, 150, 50)

    def test_locked_corner_keeps_ratio(self, rectangle, context):
        locked = rectangle.copy(is_aspect_ratio_locked=True)
        handle = handle_of(locked, HandleKind.RESIZE, TransformHandle.BOTTOM_RIGHT)
        _, shape = drag(None, (110, 70), (210, 80), context, locked, handle)
        assert shape.width == pytest.approx(200)
        assert shape.height == pytest.approx(100)

    def test_rotated_resize_keeps_anchor_fixed(self, context):
        rect = RectangleShape(x=0, y=0, width=100, height=50, rotation=30)
        handle = handle_of(rect, HandleKind.RESIZE, TransformHandle.BOTTOM_RIGHT)
        anchor_before = compute_vertices(rect)[0]
        target = Point(handle.position.x + 20, handle.position.y + 10)
        _, shape = drag(None, handle.position, target, context, rect, handle)
        anchor_after = compute_vertices(shape)[0]
        assert anchor_after.x == pytest.approx(anchor_before.x)
        assert anchor_after.y == pytest.approx(anchor_before.y)
        assert shape.rotation == 30

    def test_ellipse_resize(self, ellipse, context):
        handle = handle_of(ellipse, HandleKind.RESIZE, TransformHandle.BOTTOM_RIGHT)
        _, shape = drag(None, (90, 70), (110, 90), context, ellipse, handle)
        assert (shape.cx, shape.cy, shape.rx, shape.ry) == (60, 60, 50, 30)

    def test_line_endpoint(self, line, context):
        handle = handle_of(line, HandleKind.RESIZE, TransformHandle.LINE_END)
        _, shape = drag(None, (100, 0), (80, 60), context, line, handle)
        assert shape.points == (Point(0, 0), Point(80, 60))

    def test_polyline_resize_scales_points(self, polyline, context):
        handle = handle_of(polyline, HandleKind.RESIZE, TransformHandle.BOTTOM_RIGHT)
        _, shape = drag(None, (50, 50), (100, 100), context, polyline, handle)
        assert shape.points == (Point(0, 0), Point(100, 0), Point(100, 100))

    def test_text_resize_scales_font(self, text, context):
        handle = handle_of(text, HandleKind.RESIZE, TransformHandle.BOTTOM_RIGHT)
        # 30x10 text box doubled in width
        _, shape = drag(None, (40, 20), (70, 30), context, text, handle)
        assert shape.font_size == 20
        assert (shape.x, shape.y) == (10, 10)

    def test_triangle_resize_uses_vertex_box(self, triangle, context):
        handle = handle_of(triangle, HandleKind.RESIZE, TransformHandle.BOTTOM_RIGHT)
        _, shape = drag(None, (100, 80), (200, 160), context, triangle, handle)
        assert (shape.x, shape.y) == (0, 0)
        assert (shape.width, shape.height) == (200, 160)

    def test_locked_star_doubles_both_radii(self, star, context):
        locked = star.copy(is_aspect_ratio_locked=True)
        handle = handle_of(locked, HandleKind.RESIZE, TransformHandle.BOTTOM_RIGHT)
        _, shape = drag(None, handle.position, scaled_corner(handle, 2), context, locked, handle)
        assert shape.radius == pytest.approx(100)
        assert shape.inner_radius == pytest.approx(40)

    @pytest.mark.parametrize("corner", CORNERS)
    @pytest.mark.parametrize("shape", [
        PolygonShape(cx=100, cy=100, radius=50, sides=5, is_aspect_ratio_locked=True),
        StarShape(cx=100, cy=100, radius=50, inner_radius=20, sides=5,
                  is_aspect_ratio_locked=True),
        PolygonShape(cx=100, cy=100, radius=50, sides=5, rotation=30),
        StarShape(cx=100, cy=100, radius=50, inner_radius=20, sides=5, rotation=75),
        TriangleShape(x=0, y=0, width=100, height=80),
        TriangleShape(x=10, y=20, width=100, height=80, top_vertex_offset=0.2, rotation=45),
    ], ids=["pentagon", "star", "rotated-pentagon", "rotated-star",
            "triangle", "rotated-triangle"])
    def test_opposite_corner_stays_fixed(self, shape, corner, context):
        handle = handle_of(shape, HandleKind.RESIZE, corner)
        _, resized = drag(None, handle.position, scaled_corner(handle, 2), context, shape, handle)
        after = handle_of(resized, HandleKind.RESIZE, CORNERS[corner])
        assert after.position.x == pytest.approx(handle.anchor.x)
        assert after.position.y == pytest.approx(handle.anchor.y)

    def test_free_polygon_resize_keeps_anchor(self, context):
        """A polygon scales uniformly by the larger factor, still from the anchor."""
        pentagon = PolygonShape(cx=100, cy=100, radius=50, sides=5)
        handle = handle_of(pentagon, HandleKind.RESIZE, TransformHandle.TOP_LEFT)
        target = Point(handle.anchor.x - 2 * (handle.anchor.x - handle.position.x),
                       handle.anchor.y - 1.5 * (handle.anchor.y - handle.position.y))
        _, resized = drag(None, handle.position, target, context, pentagon, handle)
        assert resized.radius == pytest.approx(100)
        after = handle_of(resized, HandleKind.RESIZE, TransformHandle.BOTTOM_RIGHT)
        assert after.position.x == pytest.approx(handle.anchor.x)
        assert after.position.y == pytest.approx(handle.anchor.y)


class TestRotating:
    """Tests for the rotate handle."""

    def test_quarter_turn(self, rectangle, context):
        handle = handle_of(rectangle, HandleKind.ROTATE)
        # Handle sits straight above the center (60, 45); move to its right
        _, shape = drag(None, handle.position, (105, 45), context, rectangle, handle)
        assert shape.rotation == 90

    def test_rotation_rounded(self, rectangle, context):
        handle = handle_of(rectangle, HandleKind.ROTATE)
        _, shape = drag(None, handle.position, (61, 0), context, rectangle, handle)
        assert shape.rotation == round(shape.rotation)


class TestSpecialHandles:
    """Tests for shape-specific adjustment handles."""

    def test_arc_end_changes_extent(self, arc, context):
        handle = handle_of(arc, HandleKind.ARC_END)
        # From 90 degrees (top) to 180 degrees (left)
        _, shape = drag(None, handle.position, (0, 50), context, arc, handle)
        assert shape.extent == pytest.approx(180)
        assert shape.start == 0

    def test_arc_start_keeps_end(self, arc, context):
        handle = handle_of(arc, HandleKind.ARC_START)
        _, shape = drag(None, handle.position, (50, 100), context, arc, handle)
        assert shape.start == pytest.approx(-90)
        assert shape.extent == pytest.approx(180)

    def test_arc_move_keeps_extent(self, arc, context):
        handle = handle_of(arc, HandleKind.ARC_MOVE)
        _, shape = drag(None, handle.position, (50, 0), context, arc, handle)
        assert shape.extent == 90
        assert shape.start == pytest.approx(45)

    def test_triangle_apex(self, triangle, context):
        handle = handle_of(triangle, HandleKind.TRIANGLE_APEX)
        _, shape = drag(None, handle.position, (75, 0), context, triangle, handle)
        assert shape.top_vertex_offset == pytest.approx(0.25)

    def test_star_inner_radius_clamped(self, star, context):
        handle = handle_of(star, HandleKind.STAR_INNER_RADIUS)
        _, shape = drag(None, handle.position, (100, 300), context, star, handle)
        assert shape.inner_radius == star.radius

    def test_trapezoid_symmetric(self, context):
        trap = TrapezoidShape(x=0, y=0, width=100, height=50)
        handle = handle_of(trap, HandleKind.TRAPEZOID_LEFT)
        _, shape = drag(None, handle.position, (10, 0), context, trap, handle)
        assert shape.top_left_offset_ratio == pytest.approx(0.1)
        assert shape.top_right_offset_ratio == pytest.approx(0.1)

    def test_trapezoid_overlap_rejected(self, context):
        trap = TrapezoidShape(x=0, y=0, width=100, height=50, is_symmetrical=False)
        handle = handle_of(trap, HandleKind.TRAPEZOID_LEFT)
        state, shape = drag(None, handle.position, (90, 0), context, trap, handle)
        # Invalid positions keep the last valid preview (none yet)
        assert shape is None

    def test_parallelogram_angle(self, context):
        para = ParallelogramShape(x=0, y=0, width=100, height=20, angle=75)
        handle = handle_of(para, HandleKind.PARALLELOGRAM_ANGLE)
        _, shape = drag(None, handle.position, (20, 0), context, para, handle)
        assert shape.angle == pytest.approx(45)


class TestPointEditing:
    """Tests for vertex editing and segment insertion."""

    def test_convert_rectangle(self, rectangle):
        converted = convert_to_polyline(rectangle)
        assert converted.type == ShapeType.POLYLINE
        assert converted.id == rectangle.id
        assert converted.is_closed
        assert len(converted.points) == 4

    def test_convert_keeps_custom_name(self, rectangle):
        assert convert_to_polyline(rectangle.copy(name="Roof")).name == "Roof"

    def test_convert_open_arc(self, arc):
        converted = convert_to_polyline(arc.copy(style=ArcStyle.ARC))
        assert not converted.is_closed
        assert converted.fill == "none"

    def test_convert_text_is_none(self, text):
        assert convert_to_polyline(text) is None

    def test_move_vertex(self, rectangle, context):
        handle = edit_point_handles(rectangle)[2]
        state = begin_interaction(at(110, 70), Tool.EDIT_POINTS, rectangle, handle, context)
        assert state.preview.type == ShapeType.POLYLINE
        state, _ = update_interaction(state, at(130, 90), context)
        shape = commit_interaction(state, context)
        assert shape.points[2] == Point(130, 90)
        assert shape.id == rectangle.id
        assert shape.name == "Polygon"

    def test_rotation_baked_on_commit(self, context):
        rect = RectangleShape(x=0, y=0, width=20, height=10, rotation=90)
        handle = edit_point_handles(rect)[0]
        state = begin_interaction(at(*handle.position), Tool.EDIT_POINTS, rect, handle, context)
        state, _ = update_interaction(state, at(*handle.position), context)
        shape = commit_interaction(state, context)
        assert shape.rotation == 0
        assert_points_close(list(shape.points), compute_vertices(rect))

    def test_quarter_turn_vertex_edit(self, context):
        """Local (60, 50) about the center (50, 50) shows at (50, 60) when turned 90."""
        rect = RectangleShape(x=40, y=40, width=20, height=20, rotation=90)
        handle = edit_point_handles(rect)[1]
        state = begin_interaction(at(*handle.position), Tool.EDIT_POINTS, rect, handle, context)
        state, _ = update_interaction(state, at(50, 60), context)

        preview = state.preview
        assert preview.rotation == 90
        assert_points_close([preview.points[1]], [Point(60, 50)])
        shown = compute_vertices(preview, state.action.center)
        assert_points_close([shown[1]], [Point(50, 60)])

        shape = commit_interaction(state, context)
        assert shape.rotation == 0
        assert_points_close([shape.points[1]], [Point(50, 60)])

    def test_segment_insertion(self, polyline, context):
        handle = [h for h in edit_point_handles(polyline) if h.kind == HandleKind.SEGMENT][0]
        state = begin_interaction(at(20, 2), Tool.EDIT_POINTS, polyline, handle, context)
        assert state.preview.points[1] == Point(20, 0)
        state, _ = update_interaction(state, at(20, -20), context)
        shape = commit_interaction(state, context)
        assert shape.points == (Point(0, 0), Point(20, -20), Point(50, 0), Point(50, 50))


class TestCancel:
    """Tests for cancel_interaction."""

    def test_cancel_returns_idle(self, rectangle, context):
        state = begin_interaction(at(20, 30), Tool.SELECT, rectangle, context=context)
        assert cancel_interaction(state) is None

    def test_update_idle(self, context):
        assert update_interaction(None, at(0, 0), context) == (None, None)
        assert commit_interaction(None, context) is None


class TestPathBuilder:
    """Tests for multi-click polylines and beziers."""

    def test_open_polyline(self, context):
        builder = PathBuilder(Tool.POLYLINE)
        for p in ((0, 0), (10, 0), (10, 10)):
            builder.add_point(Point(*p))
        shape = builder.complete(False, context)
        assert shape.type == ShapeType.POLYLINE
        assert not shape.is_closed
        assert shape.fill == "none"
        assert shape.name == "Polyline"
        assert not builder.is_active

    def test_closed_bezier(self, context):
        builder = PathBuilder(Tool.BEZIER)
        for p in ((0, 0), (10, 0), (10, 10)):
            builder.add_point(Point(*p))
        shape = builder.complete(True, context)
        assert shape.type == ShapeType.BEZIER
        assert shape.smooth
        assert shape.fill == context.fill_color

    def test_double_click_duplicate_dropped(self, context):
        builder = PathBuilder()
        for p in ((0, 0), (10, 0), (10, 0)):
            builder.add_point(Point(*p))
        shape = builder.complete(False, context)
        assert len(shape.points) == 2

    def test_too_few_points(self, context):
        builder = PathBuilder()
        builder.add_point(Point(0, 0))
        builder.add_point(Point(5, 5))
        assert builder.complete(True, context) is None

    def test_preview_follows_pointer(self, context):
        builder = PathBuilder()
        builder.add_point(Point(0, 0))
        preview = builder.preview_shape(Point(7, 7), context)
        assert preview.points == (Point(0, 0), Point(7, 7))
        assert builder.preview_shape(None, context) is None

    def test_cancel(self):
        builder = PathBuilder()
        builder.add_point(Point(1, 1))
        builder.cancel()
        assert not builder.is_active
