"""
Geometry Library.

Pure functions from shape parameters to renderable and geometric facts:
vertices, bounding boxes, centers, path strings and spline approximations.

Conventions:
- Canvas Y grows downward, so a positive rotation is clockwise on screen.
- Arc ``start``/``extent`` follow Tk: degrees, counter-clockwise positive.
- Degenerate shapes yield empty lists or None instead of raising.
"""

import math
from typing import List, Optional, Sequence, Tuple

from models import (
    ArcStyle, BoundingBox, Point, Shape, ShapeType,
    BOX_TYPES, POINT_LIST_TYPES, POLYGONAL_TYPES,
)
from .text_layout import TextMeasurer, text_bounding_box


# Line segments per quadratic piece of a smoothed curve
SPLINE_SEGMENTS_PER_CURVE = 8

# Line segments in an arc approximation
ARC_SEGMENTS = 32

# Minimum number of sides in an ellipse approximation
MIN_ELLIPSE_SEGMENTS = 24

# Parallelogram shear angle limits (degrees)
MIN_PARALLELOGRAM_ANGLE = 1.0
MAX_PARALLELOGRAM_ANGLE = 179.0

# Closing-point duplicate tolerance
_CLOSE_EPSILON = 0.01


# =============================================================================
# Point primitives
# =============================================================================

def rotate_point(point: Point, center: Point, angle_degrees: float) -> Point:
    """Rotate ``point`` about ``center``; positive angles turn clockwise on screen."""
    angle = math.radians(angle_degrees)
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    dx = point[0] - center[0]
    dy = point[1] - center[1]
    return Point(
        center[0] + dx * cos_a - dy * sin_a,
        center[1] + dx * sin_a + dy * cos_a,
    )


def rotate_points(points: Sequence[Point], center: Point, angle_degrees: float) -> List[Point]:
    return [rotate_point(p, center, angle_degrees) for p in points]


def midpoint(a: Point, b: Point) -> Point:
    return Point((a[0] + b[0]) / 2, (a[1] + b[1]) / 2)


def distance(a: Point, b: Point) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def closest_point_on_segment(p: Point, a: Point, b: Point) -> Tuple[Point, float]:
    """
    Project ``p`` onto segment ``ab``.

    Returns:
        (closest point, parameter t in [0, 1] along the segment)
    """
    abx = b[0] - a[0]
    aby = b[1] - a[1]
    ab2 = abx * abx + aby * aby
    if ab2 == 0:
        return Point(a[0], a[1]), 0.0
    t = ((p[0] - a[0]) * abx + (p[1] - a[1]) * aby) / ab2
    t = max(0.0, min(1.0, t))
    return Point(a[0] + abx * t, a[1] + aby * t), t


def distance_to_segment(p: Point, a: Point, b: Point) -> float:
    closest, _ = closest_point_on_segment(p, a, b)
    return distance(p, closest)


def point_in_polygon(p: Point, polygon: Sequence[Point]) -> bool:
    """Even-odd rule containment test."""
    inside = False
    n = len(polygon)
    j = n - 1
    for i in range(n):
        xi, yi = polygon[i]
        xj, yj = polygon[j]
        if (yi > p[1]) != (yj > p[1]):
            x_cross = (xj - xi) * (p[1] - yi) / (yj - yi) + xi
            if p[0] < x_cross:
                inside = not inside
        j = i
    return inside


# =============================================================================
# Splines
# =============================================================================

def quadratic_bezier_points(p0: Point, p1: Point, p2: Point,
                            segments: int = SPLINE_SEGMENTS_PER_CURVE) -> List[Point]:
    """Sample a quadratic Bezier at t = 1/segments .. 1 (the start point is omitted)."""
    points = []
    for i in range(1, segments + 1):
        t = i / segments
        u = 1 - t
        points.append(Point(
            u * u * p0[0] + 2 * u * t * p1[0] + t * t * p2[0],
            u * u * p0[1] + 2 * u * t * p1[1] + t * t * p2[1],
        ))
    return points


def spline_points(points: Sequence[Point], is_closed: bool) -> List[Point]:
    """
    Emulate Tk's ``smooth=True`` quadratic B-spline.

    User points are quadratic control points; midpoints between successive
    points are the knots. An open curve runs straight from its first point
    to the first midpoint and from the last midpoint into its last point.
    A closed curve starts and ends at the midpoint of the last and first
    points. Fewer than 3 points are returned unchanged.
    """
    pts = [Point(p[0], p[1]) for p in points]
    n = len(pts)
    if n < 3:
        return pts

    result: List[Point] = []
    if is_closed:
        result.append(midpoint(pts[-1], pts[0]))
        for i in range(n):
            end = midpoint(pts[i], pts[(i + 1) % n])
            result.extend(quadratic_bezier_points(result[-1], pts[i], end))
        return result

    result.append(pts[0])
    result.extend(quadratic_bezier_points(pts[0], pts[0], midpoint(pts[0], pts[1])))
    for i in range(1, n - 1):
        result.extend(quadratic_bezier_points(
            midpoint(pts[i - 1], pts[i]), pts[i], midpoint(pts[i], pts[i + 1])))
    result.extend(quadratic_bezier_points(midpoint(pts[-2], pts[-1]), pts[-1], pts[-1]))
    return result


def spline_approximation(shape: Shape) -> List[Point]:
    """Rendered point list of a polyline or bezier (smoothed when enabled)."""
    if len(shape.points) < 2:
        return list(shape.points)
    if shape.smooth:
        return spline_points(shape.points, shape.is_closed)
    return list(shape.points)


# =============================================================================
# Path strings
# =============================================================================

def _fmt(value: float) -> str:
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def polyline_path(points: Sequence[Point]) -> str:
    """``M x y L x y ...`` path through the points."""
    if not points:
        return ""
    first, rest = points[0], points[1:]
    parts = [f"M {_fmt(first[0])} {_fmt(first[1])}"]
    parts.extend(f"L {_fmt(p[0])} {_fmt(p[1])}" for p in rest)
    return " ".join(parts)


def compute_smoothed_path(points: Sequence[Point], smooth: bool, is_closed: bool) -> str:
    """Path description of a point list, optionally smoothed and closed."""
    if not points:
        return ""
    if len(points) < 2:
        path = f"M {_fmt(points[0][0])} {_fmt(points[0][1])}"
        return path + " Z" if is_closed else path
    to_draw = spline_points(points, is_closed) if smooth else points
    path = polyline_path(to_draw)
    return path + " Z" if is_closed else path


def compute_arc_path(shape: Shape) -> str:
    """
    Path description of an arc shape.

    Angles are Tk-style (counter-clockwise, Y up), converted for the
    Y-down canvas. Extents of 360 degrees or more are drawn as two
    half-ellipse arcs, since a single full-turn arc command is degenerate.
    """
    if shape.width <= 0 or shape.height <= 0 or shape.extent == 0:
        return ""

    rx = shape.width / 2
    ry = shape.height / 2
    cx = shape.x + rx
    cy = shape.y + ry
    radii = f"{_fmt(rx)} {_fmt(ry)}"

    if abs(shape.extent) >= 360:
        return (f"M {_fmt(cx + rx)} {_fmt(cy)} "
                f"A {radii} 0 0 0 {_fmt(cx - rx)} {_fmt(cy)} "
                f"A {radii} 0 0 0 {_fmt(cx + rx)} {_fmt(cy)}")

    start = math.radians(shape.start)
    end = math.radians(shape.start + shape.extent)
    x1 = cx + rx * math.cos(start)
    y1 = cy - ry * math.sin(start)
    x2 = cx + rx * math.cos(end)
    y2 = cy - ry * math.sin(end)

    large_arc = 1 if abs(shape.extent) > 180 else 0
    sweep = 0 if shape.extent > 0 else 1
    arc = f"A {radii} 0 {large_arc} {sweep} {_fmt(x2)} {_fmt(y2)}"

    if shape.style == ArcStyle.ARC:
        return f"M {_fmt(x1)} {_fmt(y1)} {arc}"
    if shape.style == ArcStyle.CHORD:
        return f"M {_fmt(x1)} {_fmt(y1)} {arc} Z"
    return f"M {_fmt(cx)} {_fmt(cy)} L {_fmt(x1)} {_fmt(y1)} {arc} Z"


# =============================================================================
# Closed-form vertices
# =============================================================================

def triangle_points(shape: Shape) -> List[Point]:
    """Isosceles triangle: apex, then the two base corners."""
    x, y, w, h = shape.x, shape.y, shape.width, shape.height
    apex_x = x + w / 2 + shape.top_vertex_offset * w
    if shape.is_flipped_vertically:
        return [Point(apex_x, y + h), Point(x + w, y), Point(x, y)]
    return [Point(apex_x, y), Point(x + w, y + h), Point(x, y + h)]


def right_triangle_points(shape: Shape) -> List[Point]:
    """Right angle first; unflipped it sits at the bottom-left."""
    x, y, w, h = shape.x, shape.y, shape.width, shape.height
    points = [Point(x, y + h), Point(x, y), Point(x + w, y + h)]
    if shape.is_flipped_horizontally:
        center_x = x + w / 2
        points = [Point(2 * center_x - p.x, p.y) for p in points]
    if shape.is_flipped_vertically:
        center_y = y + h / 2
        points = [Point(p.x, 2 * center_y - p.y) for p in points]
    return points


def rhombus_points(shape: Shape) -> List[Point]:
    x, y, w, h = shape.x, shape.y, shape.width, shape.height
    return [
        Point(x + w / 2, y),
        Point(x + w, y + h / 2),
        Point(x + w / 2, y + h),
        Point(x, y + h / 2),
    ]


def trapezoid_points(shape: Shape) -> List[Point]:
    """Top-left, top-right, bottom-right, bottom-left (short edge on top)."""
    x, y, w, h = shape.x, shape.y, shape.width, shape.height
    left = w * shape.top_left_offset_ratio
    right = w * shape.top_right_offset_ratio
    if shape.is_flipped_vertically:
        return [
            Point(x, y),
            Point(x + w, y),
            Point(x + w - right, y + h),
            Point(x + left, y + h),
        ]
    return [
        Point(x + left, y),
        Point(x + w - right, y),
        Point(x + w, y + h),
        Point(x, y + h),
    ]


def parallelogram_points(shape: Shape) -> List[Point]:
    """
    Parallelogram filling its box, sheared by ``angle``.

    The horizontal shear offset is ``height / tan(angle)``; when it exceeds
    the width the base collapses and all four vertices coincide.
    """
    x, y, w, h = shape.x, shape.y, shape.width, shape.height
    if h == 0:
        return [Point(x, y), Point(x + w, y), Point(x + w, y + h), Point(x, y + h)]

    angle = max(MIN_PARALLELOGRAM_ANGLE, min(MAX_PARALLELOGRAM_ANGLE, shape.angle))
    offset = h / math.tan(math.radians(angle))
    base = w - abs(offset)
    if base < 0:
        return [Point(x, y)] * 4

    if shape.is_flipped_vertically:
        if offset >= 0:
            return [Point(x, y), Point(x + base, y),
                    Point(x + w, y + h), Point(x + offset, y + h)]
        return [Point(x - offset, y), Point(x + w, y),
                Point(x + base, y + h), Point(x, y + h)]

    if offset >= 0:
        return [Point(x + offset, y), Point(x + w, y),
                Point(x + base, y + h), Point(x, y + h)]
    return [Point(x, y), Point(x + base, y),
            Point(x + w, y + h), Point(x - offset, y + h)]


def polygon_points(shape: Shape) -> List[Point]:
    """
    Regular polygon or star vertices, starting at the top (-90 degrees).

    A star alternates outer and inner radius over ``2 * sides`` points.
    """
    cx, cy = shape.cx, shape.cy
    is_star = shape.type == ShapeType.STAR
    step = 2 * math.pi / shape.sides
    total = shape.sides * 2 if is_star else shape.sides
    if is_star:
        step /= 2

    points = []
    for i in range(total):
        r = shape.inner_radius if is_star and i % 2 else shape.radius
        angle = i * step - math.pi / 2
        px = cx + math.cos(angle) * r
        py = cy + math.sin(angle) * r
        if shape.is_flipped_horizontally:
            px = 2 * cx - px
        if shape.is_flipped_vertically:
            py = 2 * cy - py
        points.append(Point(px, py))
    return points


def ellipse_segment_count(shape: Shape) -> int:
    return max(MIN_ELLIPSE_SEGMENTS, round(max(shape.rx, shape.ry) / 4))


def ellipse_points(shape: Shape) -> List[Point]:
    """Polygon approximation of an ellipse, starting at the top."""
    sides = ellipse_segment_count(shape)
    step = 2 * math.pi / sides
    points = []
    for i in range(sides):
        angle = i * step - math.pi / 2
        points.append(Point(shape.cx + shape.rx * math.cos(angle),
                            shape.cy + shape.ry * math.sin(angle)))
    return points


def arc_points(shape: Shape) -> List[Point]:
    """
    Piecewise-linear arc; a pieslice starts and ends at the center.
    Empty for a zero-size arc or a zero extent.
    """
    if shape.width <= 0 or shape.height <= 0 or shape.extent == 0:
        return []
    rx = shape.width / 2
    ry = shape.height / 2
    cx = shape.x + rx
    cy = shape.y + ry
    step = shape.extent / ARC_SEGMENTS

    points = []
    if shape.style == ArcStyle.PIESLICE:
        points.append(Point(cx, cy))
    for i in range(ARC_SEGMENTS + 1):
        angle = math.radians(shape.start + i * step)
        points.append(Point(cx + rx * math.cos(angle), cy - ry * math.sin(angle)))
    if shape.style == ArcStyle.PIESLICE:
        points.append(Point(cx, cy))
    return points


def box_corners(box: BoundingBox) -> List[Point]:
    return [
        Point(box.x, box.y),
        Point(box.x + box.width, box.y),
        Point(box.x + box.width, box.y + box.height),
        Point(box.x, box.y + box.height),
    ]


# =============================================================================
# Vertices, bounding boxes and centers
# =============================================================================

def local_vertices(shape: Shape, measurer: Optional[TextMeasurer] = None) -> List[Point]:
    """Vertices of the shape in its unrotated local frame."""
    t = shape.type
    if t in (ShapeType.LINE, ShapeType.PENCIL):
        return list(shape.points)
    if t in (ShapeType.POLYLINE, ShapeType.BEZIER):
        return spline_approximation(shape)
    if t in (ShapeType.RECTANGLE, ShapeType.IMAGE, ShapeType.BITMAP):
        return box_corners(BoundingBox(shape.x, shape.y, shape.width, shape.height))
    if t == ShapeType.TEXT:
        return box_corners(text_bounding_box(shape, measurer))
    if t == ShapeType.TRIANGLE:
        return triangle_points(shape)
    if t == ShapeType.RIGHT_TRIANGLE:
        return right_triangle_points(shape)
    if t == ShapeType.RHOMBUS:
        return rhombus_points(shape)
    if t == ShapeType.TRAPEZOID:
        return trapezoid_points(shape)
    if t == ShapeType.PARALLELOGRAM:
        return parallelogram_points(shape)
    if t in (ShapeType.POLYGON, ShapeType.STAR):
        return polygon_points(shape)
    if t == ShapeType.ELLIPSE:
        return ellipse_points(shape)
    if t == ShapeType.ARC:
        return arc_points(shape)
    return []


def compute_vertices(shape: Shape, override_center: Optional[Point] = None,
                     measurer: Optional[TextMeasurer] = None) -> List[Point]:
    """
    Ordered screen-space vertices of a shape, rotation applied.

    Args:
        shape: Shape to evaluate
        override_center: Rotate about this point instead of the shape's own
            rotation center (used while a vertex edit moves the bbox center)
        measurer: Text measurement collaborator for text shapes
    """
    points = local_vertices(shape, measurer)
    if shape.rotation == 0 or not points:
        return points
    center = override_center if override_center is not None else rotation_center(shape, measurer)
    if center is None:
        return points
    return rotate_points(points, center, shape.rotation)


def _box_of(points: Sequence[Point]) -> Optional[BoundingBox]:
    if not points:
        return None
    return BoundingBox.from_points(points)


def bounding_box(shape: Shape, measurer: Optional[TextMeasurer] = None) -> Optional[BoundingBox]:
    """
    Axis-aligned box of the shape in its unrotated local frame.

    Point-list shapes use their control points so the box stays stable
    while smoothing changes.
    """
    t = shape.type
    if t in BOX_TYPES:
        return BoundingBox(shape.x, shape.y, shape.width, shape.height)
    if t == ShapeType.ELLIPSE:
        return BoundingBox(shape.cx - shape.rx, shape.cy - shape.ry, shape.rx * 2, shape.ry * 2)
    if t == ShapeType.TEXT:
        return text_bounding_box(shape, measurer)
    if t in POLYGONAL_TYPES:
        return _box_of(local_vertices(shape))
    if t in POINT_LIST_TYPES:
        return _box_of(shape.points)
    return None


def visual_bounding_box(shape: Shape, override_center: Optional[Point] = None,
                        measurer: Optional[TextMeasurer] = None) -> Optional[BoundingBox]:
    """Screen-space axis-aligned box of the shape with rotation applied."""
    if shape.rotation == 0 and override_center is None:
        return bounding_box(shape, measurer)

    if shape.type == ShapeType.ELLIPSE:
        angle = math.radians(shape.rotation)
        cos_a, sin_a = math.cos(angle), math.sin(angle)
        width = 2 * math.sqrt((shape.rx * cos_a) ** 2 + (shape.ry * sin_a) ** 2)
        height = 2 * math.sqrt((shape.rx * sin_a) ** 2 + (shape.ry * cos_a) ** 2)
        return BoundingBox(shape.cx - width / 2, shape.cy - height / 2, width, height)

    points = compute_vertices(shape, override_center, measurer)
    if points:
        return BoundingBox.from_points(points)
    if shape.type in BOX_TYPES:
        return BoundingBox(shape.x, shape.y, shape.width, shape.height)
    return None


def compute_bounding_box(shape: Shape, rotated: bool = False,
                         measurer: Optional[TextMeasurer] = None) -> Optional[BoundingBox]:
    """Local (``rotated=False``) or visual (``rotated=True``) bounding box."""
    if rotated:
        return visual_bounding_box(shape, measurer=measurer)
    return bounding_box(shape, measurer)


def compute_center(shape: Shape, measurer: Optional[TextMeasurer] = None) -> Optional[Point]:
    """
    Geometric center: ``(cx, cy)`` when stored, else the center of the
    unrotated bounding box.
    """
    if shape.type in (ShapeType.ELLIPSE, ShapeType.POLYGON, ShapeType.STAR):
        return Point(shape.cx, shape.cy)
    box = bounding_box(shape, measurer)
    if box is None:
        return None
    return box.center


def rotation_center(shape: Shape, measurer: Optional[TextMeasurer] = None) -> Optional[Point]:
    """Point the shape rotates about; text rotates about its anchor."""
    if shape.type == ShapeType.TEXT:
        return Point(shape.x, shape.y)
    return compute_center(shape, measurer)


def editable_points(shape: Shape, measurer: Optional[TextMeasurer] = None) -> List[Point]:
    """
    Unrotated points shown as vertex handles in edit-points mode.

    Point-list shapes expose their raw control points. Other shapes expose
    their local vertices without a duplicated closing point.
    """
    if shape.type in POINT_LIST_TYPES:
        return list(shape.points)

    points = local_vertices(shape, measurer)
    is_closed = not (shape.type == ShapeType.ARC and shape.style == ArcStyle.ARC)
    if is_closed and len(points) > 1:
        first, last = points[0], points[-1]
        if abs(first.x - last.x) < _CLOSE_EPSILON and abs(first.y - last.y) < _CLOSE_EPSILON:
            return points[:-1]
    return points


# =============================================================================
# Misc shape helpers
# =============================================================================

def is_polyline_axis_aligned_rectangle(shape: Shape) -> bool:
    """True for a closed 4-point polyline with two distinct x and two distinct y values."""
    if not shape.is_closed:
        return False
    points = list(shape.points)
    if len(points) > 1 and points[0] == points[-1]:
        points.pop()
    if len(points) != 4:
        return False
    return len({p.x for p in points}) == 2 and len({p.y for p in points}) == 2


def polygon_side_length(shape: Shape) -> float:
    """Edge length of a regular polygon (outer radius for stars)."""
    if shape.sides < 2:
        return 0.0
    return 2 * shape.radius * math.sin(math.pi / shape.sides)


def polygon_radius_from_side_length(side_length: float, sides: int) -> float:
    if sides < 2:
        return 0.0
    return side_length / (2 * math.sin(math.pi / sides))


def translate_shape(shape: Shape, dx: float, dy: float) -> Shape:
    """Move a shape by (dx, dy) in its native parameterization."""
    t = shape.type
    if t in POINT_LIST_TYPES:
        return shape.copy(points=tuple(p.offset(dx, dy) for p in shape.points))
    if t in (ShapeType.ELLIPSE, ShapeType.POLYGON, ShapeType.STAR):
        return shape.copy(cx=shape.cx + dx, cy=shape.cy + dy)
    return shape.copy(x=shape.x + dx, y=shape.y + dy)


__all__ = [
    'SPLINE_SEGMENTS_PER_CURVE',
    'ARC_SEGMENTS',
    'MIN_ELLIPSE_SEGMENTS',
    'MIN_PARALLELOGRAM_ANGLE',
    'MAX_PARALLELOGRAM_ANGLE',
    'rotate_point',
    'rotate_points',
    'midpoint',
    'distance',
    'closest_point_on_segment',
    'distance_to_segment',
    'point_in_polygon',
    'quadratic_bezier_points',
    'spline_points',
    'spline_approximation',
    'polyline_path',
    'compute_smoothed_path',
    'compute_arc_path',
    'triangle_points',
    'right_triangle_points',
    'rhombus_points',
    'trapezoid_points',
    'parallelogram_points',
    'polygon_points',
    'ellipse_segment_count',
    'ellipse_points',
    'arc_points',
    'box_corners',
    'local_vertices',
    'compute_vertices',
    'bounding_box',
    'visual_bounding_box',
    'compute_bounding_box',
    'compute_center',
    'rotation_center',
    'editable_points',
    'is_polyline_axis_aligned_rectangle',
    'polygon_side_length',
    'polygon_radius_from_side_length',
    'translate_shape',
]
