"""
Unit tests for shape and geometry value types.

Tests:
- Shape construction and field coercion
- copy/duplicate value semantics
- Shape lookup by type tag
- Point, BoundingBox and ViewTransform helpers
"""

import pytest
from dataclasses import FrozenInstanceError

from models import (
    ArcShape, ArcStyle, BezierShape, BoundingBox, EllipseShape, JoinStyle,
    LineShape, MAX_ZOOM, MIN_ZOOM, Point, PolygonShape, PolylineShape,
    RectangleShape, ShapeState, ShapeType, StarShape, TextAnchor, TextShape,
    Tool, TransformHandle, ViewTransform, ActionKind, InteractionState,
    DraggingAction, action_kind, is_line_like, is_smooth_curve,
    shape_from_type,
)


class TestShapeConstruction:
    """Tests for shape dataclasses."""

    def test_type_tag(self):
        """Each class reports its own type."""
        assert RectangleShape().type == ShapeType.RECTANGLE
        assert StarShape().type == ShapeType.STAR
        assert BezierShape().type == ShapeType.BEZIER

    def test_star_is_tagged_star(self):
        """A star subclasses polygon but keeps its own tag."""
        star = StarShape(sides=5)
        assert isinstance(star, PolygonShape)
        assert star.type == ShapeType.STAR

    def test_ids_are_unique(self):
        ids = {RectangleShape().id for _ in range(50)}
        assert len(ids) == 50
        assert all(len(i) == 8 for i in ids)

    def test_rotation_normalized(self):
        assert RectangleShape(rotation=370).rotation == 10
        assert RectangleShape(rotation=-90).rotation == 270

    def test_enum_values_coerced(self):
        """String values are converted to their enums."""
        shape = ArcShape(style="chord", state="hidden", joinstyle="bevel")
        assert shape.style == ArcStyle.CHORD
        assert shape.state == ShapeState.HIDDEN
        assert shape.joinstyle == JoinStyle.BEVEL

    def test_invalid_enum_raises(self):
        with pytest.raises(ValueError):
            ArcShape(style="wedge")

    def test_negative_sizes_clamped(self):
        rect = RectangleShape(width=-5, height=10, stroke_width=-1)
        assert rect.width == 0
        assert rect.stroke_width == 0

    def test_polygon_minimum_sides(self):
        assert PolygonShape(sides=1).sides == 3

    def test_points_stored_as_tuple(self):
        """Point lists become tuples of Points."""
        line = LineShape(points=[(0, 0), [10, 5]])
        assert line.points == (Point(0, 0), Point(10, 5))
        assert isinstance(line.points, tuple)

    def test_bezier_smooth_by_default(self):
        assert BezierShape().smooth is True
        assert PolylineShape().smooth is False

    def test_text_defaults(self):
        text = TextShape()
        assert text.text == "Text"
        assert text.anchor == TextAnchor.NW


class TestValueSemantics:
    """Tests for immutability and copies."""

    def test_frozen(self, rectangle):
        with pytest.raises(FrozenInstanceError):
            rectangle.x = 5

    def test_copy_keeps_id(self, rectangle):
        moved = rectangle.copy(x=50)
        assert moved.id == rectangle.id
        assert moved.x == 50
        assert rectangle.x == 10

    def test_duplicate_new_id(self, rectangle):
        clone = rectangle.duplicate()
        assert clone.id != rectangle.id
        assert clone.width == rectangle.width

    def test_state_helpers(self, rectangle):
        assert not rectangle.is_hidden
        assert rectangle.copy(state=ShapeState.HIDDEN).is_hidden
        assert rectangle.copy(state=ShapeState.DISABLED).is_disabled


class TestShapeLookup:
    """Tests for shape_from_type and classification helpers."""

    def test_from_type_string(self):
        shape = shape_from_type("ellipse", rx=5, ry=5)
        assert isinstance(shape, EllipseShape)

    def test_from_unknown_type(self):
        with pytest.raises(ValueError):
            shape_from_type("hexagon")

    def test_line_like(self, line, polyline, rectangle):
        assert is_line_like(line)
        assert is_line_like(polyline)
        assert not is_line_like(polyline.copy(is_closed=True))
        assert not is_line_like(rectangle)

    def test_smooth_curve(self, polyline):
        assert not is_smooth_curve(polyline)
        assert is_smooth_curve(polyline.copy(smooth=True))
        assert is_smooth_curve(BezierShape())


class TestGeometryTypes:
    """Tests for Point, BoundingBox and ViewTransform."""

    def test_point_offset(self):
        assert Point(1, 2).offset(3, 4) == Point(4, 6)

    def test_bbox_edges(self):
        box = BoundingBox(10, 20, 30, 40)
        assert box.right == 40
        assert box.bottom == 60
        assert box.center == Point(25, 40)

    def test_bbox_from_points(self):
        box = BoundingBox.from_points([Point(5, 1), Point(-2, 7), Point(3, 3)])
        assert box == BoundingBox(-2, 1, 7, 6)

    def test_bbox_contains_with_tolerance(self):
        box = BoundingBox(0, 0, 10, 10)
        assert box.contains(Point(5, 5))
        assert not box.contains(Point(12, 5))
        assert box.contains(Point(12, 5), tolerance=2)

    def test_view_round_trip(self):
        view = ViewTransform(2.0, 50, 30)
        screen = view.to_screen(Point(10, 10))
        assert screen == Point(70, 50)
        assert view.to_canvas(screen) == Point(10, 10)

    def test_zoom_keeps_point_fixed(self):
        """The canvas point under the pointer stays under it."""
        view = ViewTransform(1.0, 50, 50)
        screen = Point(200, 150)
        before = view.to_canvas(screen)
        after = view.zoomed_at(screen, zoom_in=True)
        assert after.scale > view.scale
        fixed = after.to_canvas(screen)
        assert fixed.x == pytest.approx(before.x)
        assert fixed.y == pytest.approx(before.y)

    def test_zoom_clamped(self):
        view = ViewTransform(MAX_ZOOM, 0, 0).zoomed_at(Point(0, 0), zoom_in=True)
        assert view.scale == MAX_ZOOM
        view = ViewTransform(MIN_ZOOM, 0, 0).zoomed_at(Point(0, 0), zoom_in=False)
        assert view.scale == MIN_ZOOM


class TestToolsAndActions:
    """Tests for tool flags and action helpers."""

    def test_tool_flags(self):
        assert not Tool.SELECT.is_creation_tool
        assert Tool.RECTANGLE.is_creation_tool
        assert Tool.POLYLINE.is_multi_click
        assert Tool.TEXT.is_click_to_place

    def test_opposite_handles(self):
        assert TransformHandle.TOP_LEFT.opposite == TransformHandle.BOTTOM_RIGHT
        assert TransformHandle.LINE_START.opposite == TransformHandle.LINE_END
        assert TransformHandle.TOP_RIGHT.is_corner
        assert not TransformHandle.TOP_CENTER.is_corner

    def test_action_kind(self, rectangle):
        assert action_kind(None) == ActionKind.IDLE
        state = InteractionState(DraggingAction(rectangle, Point(0, 0)), down_pos=Point(0, 0))
        assert action_kind(state) == ActionKind.DRAGGING
