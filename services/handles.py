"""
Selection handle geometry and hit testing.

Handles are laid out in the selected shape's unrotated local frame from its
bounding box, then rotated about the shape's handle center into canvas
space. Sizes are given in screen pixels and divided by the view scale so
handles keep a constant on-screen size while zooming.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from models import (
    ArcStyle, BoundingBox, CursorKind, HandleKind, NONE_COLOR, Point, Shape,
    ShapeType, TransformHandle, is_line_like,
)
from .geometry import (
    bounding_box, compute_center, compute_vertices, distance, distance_to_segment,
    editable_points, midpoint, parallelogram_points, point_in_polygon,
    rotate_point, rotate_points, rotation_center, trapezoid_points,
    triangle_points, polygon_points,
)
from .text_layout import TextMeasurer


# Handle sizes in screen pixels
HANDLE_SIZE = 8
TOUCH_HANDLE_SIZE = 24
ROTATE_HANDLE_OFFSET = 20

# Distance of the star inner-radius handle from the center when the inner radius is 0
STAR_HANDLE_OFFSET = 10

# Default pick tolerance for shape outlines, in canvas units
HIT_TOLERANCE = 3.0

# Screen-space direction of each box handle, in degrees (0 = east, clockwise)
_HANDLE_ANGLES = {
    TransformHandle.MIDDLE_RIGHT: 0,
    TransformHandle.BOTTOM_RIGHT: 45,
    TransformHandle.BOTTOM_CENTER: 90,
    TransformHandle.BOTTOM_LEFT: 135,
    TransformHandle.MIDDLE_LEFT: 180,
    TransformHandle.TOP_LEFT: 225,
    TransformHandle.TOP_CENTER: 270,
    TransformHandle.TOP_RIGHT: 315,
}

_RESIZE_CURSORS = (
    CursorKind.EW_RESIZE,
    CursorKind.NWSE_RESIZE,
    CursorKind.NS_RESIZE,
    CursorKind.NESW_RESIZE,
)

_SPECIAL_KINDS = frozenset({
    HandleKind.ARC_START, HandleKind.ARC_END, HandleKind.ARC_MOVE,
    HandleKind.TRIANGLE_APEX, HandleKind.TRAPEZOID_LEFT,
    HandleKind.TRAPEZOID_RIGHT, HandleKind.PARALLELOGRAM_ANGLE,
    HandleKind.STAR_INNER_RADIUS,
})


@dataclass(frozen=True)
class Handle:
    """
    One interactive control point of the selected shape.

    Attributes:
        kind: What pressing the handle starts
        position: Canvas-space position, rotation applied
        cursor: Cursor to show while hovering
        transform: Box or line-endpoint identity, for resize handles
        anchor: Canvas-space point that stays fixed while resizing
        index: Vertex index, for vertex handles
        segment: (start index, insertion index), for segment handles
        span: Canvas-space end points of the segment, for segment handles
    """
    kind: HandleKind
    position: Point
    cursor: CursorKind
    transform: Optional[TransformHandle] = None
    anchor: Optional[Point] = None
    index: int = -1
    segment: Optional[Tuple[int, int]] = None
    span: Optional[Tuple[Point, Point]] = None


def cursor_for_handle(handle: TransformHandle, rotation: float = 0.0) -> CursorKind:
    """
    Resize cursor for a box handle, turned by the shape's rotation.

    The handle direction is bucketed to the nearest 45 degrees, so a corner
    handle of a shape rotated by 45 degrees shows an axis cursor.
    """
    if handle.is_line_endpoint:
        return CursorKind.GRAB
    angle = (_HANDLE_ANGLES[handle] + rotation) % 180
    bucket = int(math.floor(angle / 45 + 0.5)) % 4
    return _RESIZE_CURSORS[bucket]


def handle_center(shape: Shape, measurer: Optional[TextMeasurer] = None) -> Optional[Point]:
    """Point the handle layout rotates about (the text anchor for text)."""
    if shape.type == ShapeType.TEXT:
        return Point(shape.x, shape.y)
    return compute_center(shape, measurer)


# =============================================================================
# Handle layout
# =============================================================================

def _box_handle_positions(box: BoundingBox) -> List[Tuple[TransformHandle, Point]]:
    cx = box.x + box.width / 2
    cy = box.y + box.height / 2
    return [
        (TransformHandle.TOP_LEFT, Point(box.x, box.y)),
        (TransformHandle.TOP_CENTER, Point(cx, box.y)),
        (TransformHandle.TOP_RIGHT, Point(box.right, box.y)),
        (TransformHandle.MIDDLE_LEFT, Point(box.x, cy)),
        (TransformHandle.MIDDLE_RIGHT, Point(box.right, cy)),
        (TransformHandle.BOTTOM_LEFT, Point(box.x, box.bottom)),
        (TransformHandle.BOTTOM_CENTER, Point(cx, box.bottom)),
        (TransformHandle.BOTTOM_RIGHT, Point(box.right, box.bottom)),
    ]


def _rotate_handle(shape: Shape, box: BoundingBox, center: Point, view_scale: float) -> Handle:
    offset = ROTATE_HANDLE_OFFSET / view_scale
    x = box.center.x if shape.type == ShapeType.TEXT else center.x
    # Flip below the box when the top position would leave the canvas
    y = box.y - offset
    if y < 0:
        y = box.bottom + offset
    position = rotate_point(Point(x, y), center, shape.rotation)
    return Handle(HandleKind.ROTATE, position, CursorKind.ROTATE)


def _special(kind: HandleKind, local: Point, center: Point, rotation: float) -> Handle:
    return Handle(kind, rotate_point(local, center, rotation), CursorKind.ADJUST)


def special_handles(shape: Shape, center: Point, view_scale: float = 1.0) -> List[Handle]:
    """Shape-specific adjustment handles (arc angles, apex, offsets, inner radius)."""
    rotation = shape.rotation
    t = shape.type

    if t == ShapeType.ARC:
        rx = shape.width / 2
        ry = shape.height / 2
        cx = shape.x + rx
        cy = shape.y + ry

        def on_arc(degrees: float) -> Point:
            angle = math.radians(degrees)
            return Point(cx + rx * math.cos(angle), cy - ry * math.sin(angle))

        return [
            _special(HandleKind.ARC_START, on_arc(shape.start), center, rotation),
            _special(HandleKind.ARC_END, on_arc(shape.start + shape.extent), center, rotation),
            _special(HandleKind.ARC_MOVE, on_arc(shape.start + shape.extent / 2), center, rotation),
        ]

    if t == ShapeType.TRIANGLE:
        apex = triangle_points(shape)[0]
        return [_special(HandleKind.TRIANGLE_APEX, apex, center, rotation)]

    if t == ShapeType.TRAPEZOID:
        points = trapezoid_points(shape)
        if shape.is_flipped_vertically:
            left, right = points[3], points[2]
        else:
            left, right = points[0], points[1]
        return [
            _special(HandleKind.TRAPEZOID_LEFT, left, center, rotation),
            _special(HandleKind.TRAPEZOID_RIGHT, right, center, rotation),
        ]

    if t == ShapeType.PARALLELOGRAM:
        points = parallelogram_points(shape)
        vertex = points[3] if shape.is_flipped_vertically else points[0]
        return [_special(HandleKind.PARALLELOGRAM_ANGLE, vertex, center, rotation)]

    if t == ShapeType.STAR:
        points = polygon_points(shape)
        if len(points) < 2:
            return []
        inner = points[1]
        if shape.inner_radius == 0:
            angle = math.pi / shape.sides - math.pi / 2
            offset = STAR_HANDLE_OFFSET / view_scale
            inner = Point(shape.cx + math.cos(angle) * offset, shape.cy + math.sin(angle) * offset)
        return [_special(HandleKind.STAR_INNER_RADIUS, inner, center, rotation)]

    return []


def selection_handles(shape: Shape, view_scale: float = 1.0,
                      measurer: Optional[TextMeasurer] = None) -> List[Handle]:
    """
    Handles of a selected shape in the select tool.

    Returns special handles first, then the rotate handle, then the resize
    handles. A line gets two endpoint handles instead of the eight box
    handles. Shapes without a usable bounding box get no handles.
    """
    center = handle_center(shape, measurer)
    if center is None:
        return []
    box = bounding_box(shape, measurer)
    if box is None or (box.width <= 0 and box.height <= 0):
        return []

    rotation = shape.rotation
    handles = special_handles(shape, center, view_scale)
    handles.append(_rotate_handle(shape, box, center, view_scale))

    if shape.type == ShapeType.LINE:
        start, end = rotate_points(shape.points[:2], center, rotation)
        handles.append(Handle(HandleKind.RESIZE, start, CursorKind.GRAB,
                              transform=TransformHandle.LINE_START, anchor=end))
        handles.append(Handle(HandleKind.RESIZE, end, CursorKind.GRAB,
                              transform=TransformHandle.LINE_END, anchor=start))
        return handles

    positions = dict(_box_handle_positions(box))
    for transform, local in positions.items():
        handles.append(Handle(
            HandleKind.RESIZE,
            rotate_point(local, center, rotation),
            cursor_for_handle(transform, rotation),
            transform=transform,
            anchor=rotate_point(positions[transform.opposite], center, rotation),
        ))
    return handles


def edit_point_handles(shape: Shape, center_override: Optional[Point] = None,
                       view_scale: float = 1.0,
                       measurer: Optional[TextMeasurer] = None) -> List[Handle]:
    """
    Vertex and segment handles shown in edit-points mode.

    Args:
        shape: Shape being edited
        center_override: Rotation center held fixed by an active vertex edit
        view_scale: Current zoom factor
        measurer: Text measurement collaborator
    """
    local = editable_points(shape, measurer)
    if not local:
        return []
    center = center_override if center_override is not None else handle_center(shape, measurer)
    if center is None:
        return []

    points = rotate_points(local, center, shape.rotation)
    handles = [
        Handle(HandleKind.VERTEX, p, CursorKind.GRAB, index=i)
        for i, p in enumerate(points)
    ]

    n = len(points)
    closed = not is_line_like(shape)
    for i in range(n if closed else n - 1):
        j = (i + 1) % n
        if j == i:
            continue
        handles.append(Handle(
            HandleKind.SEGMENT,
            midpoint(points[i], points[j]),
            CursorKind.COPY,
            segment=(i, j),
            span=(points[i], points[j]),
        ))
    return handles


# =============================================================================
# Hit testing
# =============================================================================

def _handle_hit(handle: Handle, point: Point, radius: float) -> bool:
    if handle.kind == HandleKind.RESIZE and not handle.transform.is_line_endpoint:
        return (abs(point.x - handle.position.x) <= radius and
                abs(point.y - handle.position.y) <= radius)
    return distance(point, handle.position) <= radius


def hit_test_handles(handles: Sequence[Handle], point: Point,
                     view_scale: float = 1.0) -> Optional[Handle]:
    """
    Find the handle under ``point``.

    Special handles win over the rotate handle, which wins over resize
    handles. Vertex handles win over segment handles. Within a group the
    closest handle is returned.
    """
    radius = TOUCH_HANDLE_SIZE / view_scale / 2
    groups = (
        lambda h: h.kind in _SPECIAL_KINDS,
        lambda h: h.kind == HandleKind.ROTATE,
        lambda h: h.kind == HandleKind.RESIZE,
        lambda h: h.kind == HandleKind.VERTEX,
    )
    for in_group in groups:
        hits = [h for h in handles if in_group(h) and _handle_hit(h, point, radius)]
        if hits:
            return min(hits, key=lambda h: distance(point, h.position))

    segment_radius = HANDLE_SIZE / view_scale
    best = None
    best_distance = segment_radius
    for h in handles:
        if h.kind != HandleKind.SEGMENT:
            continue
        d = distance_to_segment(point, h.span[0], h.span[1])
        if d <= best_distance:
            best, best_distance = h, d
    return best


def hit_test_shape(shape: Shape, point: Point, tolerance: float = HIT_TOLERANCE,
                   measurer: Optional[TextMeasurer] = None) -> bool:
    """
    True if ``point`` picks ``shape``.

    Text, images and bitmaps pick anywhere inside their box. Filled closed
    shapes pick inside their outline. Everything else picks within half the
    stroke width plus ``tolerance`` of its outline.
    """
    if shape.type in (ShapeType.TEXT, ShapeType.IMAGE, ShapeType.BITMAP):
        box = bounding_box(shape, measurer)
        center = rotation_center(shape, measurer)
        if box is None or center is None:
            return False
        local = rotate_point(point, center, -shape.rotation)
        return box.contains(local, tolerance)

    vertices = compute_vertices(shape, measurer=measurer)
    if not vertices:
        return False

    closed = not is_line_like(shape)
    if shape.type == ShapeType.ARC and shape.style == ArcStyle.ARC:
        closed = False

    if closed and shape.fill != NONE_COLOR and len(vertices) >= 3:
        if point_in_polygon(point, vertices):
            return True

    margin = shape.stroke_width / 2 + tolerance
    if len(vertices) == 1:
        return distance(point, vertices[0]) <= margin

    edges = list(zip(vertices, vertices[1:]))
    if closed:
        edges.append((vertices[-1], vertices[0]))
    return any(distance_to_segment(point, a, b) <= margin for a, b in edges)


def shape_at(shapes: Sequence[Shape], point: Point, tolerance: float = HIT_TOLERANCE,
             measurer: Optional[TextMeasurer] = None) -> Optional[Shape]:
    """Topmost visible shape under ``point``; later shapes paint on top."""
    for shape in reversed(shapes):
        if shape.is_hidden:
            continue
        if hit_test_shape(shape, point, tolerance, measurer):
            return shape
    return None


__all__ = [
    'HANDLE_SIZE',
    'TOUCH_HANDLE_SIZE',
    'ROTATE_HANDLE_OFFSET',
    'STAR_HANDLE_OFFSET',
    'HIT_TOLERANCE',
    'Handle',
    'cursor_for_handle',
    'handle_center',
    'special_handles',
    'selection_handles',
    'edit_point_handles',
    'hit_test_handles',
    'hit_test_shape',
    'shape_at',
]
