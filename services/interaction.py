"""
Interaction State Machine.

Drives pointer-based creation, moving, resizing, rotating and per-vertex
editing of shapes. The machine is a set of functions over an immutable
InteractionState:

    state = begin_interaction(event, tool, shape_under_pointer, handle, context)
    state, preview = update_interaction(state, event, context)
    final = commit_interaction(state, context)

``None`` stands for the idle state. No function mutates its inputs or keeps
references to shapes between calls; the caller merges the preview or the
committed shape into its own shape list.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional, Tuple

from models import (
    ActionKind, ArcShape, ArcStyle, BezierShape, BitmapShape, BoundingBox,
    CapStyle, DrawingAction, DraggingAction, DrawMode, DuplicatingAction,
    EllipseShape, HandleKind, ImageShape, InteractionState, JoinStyle,
    LineShape, MouseButton, NONE_COLOR, PanningAction, ParallelogramShape,
    ParallelogramAngleEditingAction, PencilShape, Point, PointEditingAction,
    PointerEvent, PolygonShape, PolylineShape, RectangleShape, ResizingAction,
    RhombusShape, RightTriangleShape, RotatingAction, Shape, ShapeType,
    StarInnerRadiusEditingAction, StarShape, TextAnchor, TextJustify,
    TextShape, Tool, TOOL_DISPLAY_NAMES, TransformHandle, TrapezoidShape,
    TrapezoidOffsetEditingAction, TriangleShape, TriangleVertexEditingAction,
    ViewTransform, ArcAngleEditingAction, BOX_TYPES, POINT_LIST_TYPES,
    is_smooth_curve,
)
from .geometry import (
    MAX_PARALLELOGRAM_ANGLE, MIN_PARALLELOGRAM_ANGLE, bounding_box,
    closest_point_on_segment, compute_center, compute_vertices, distance,
    editable_points, midpoint, rotate_point, rotate_points, rotation_center,
    translate_shape, triangle_points,
)
from .handles import Handle, handle_center
from .naming import default_name, is_default_name
from .text_layout import TextMeasurer, text_bounding_box

logger = logging.getLogger(__name__)


# Pointer movement (canvas units) below which a press counts as a click
DRAG_THRESHOLD = 3.0

BITMAP_SIZE = 50.0
DEFAULT_TEXT = "Text"
BEZIER_SPLINE_STEPS = 12

_ANCHOR_EPSILON = 1e-6


class PendingImage(NamedTuple):
    """Image chosen by the user and waiting to be placed with a click."""
    src: str
    width: float
    height: float


@dataclass
class InteractionContext:
    """
    Editor settings and collaborators the state machine reads.

    Attributes:
        draw_mode: Whether a creation drag starts at a corner or the center
        snap_step: Grid step for snapping pointer positions (0 disables)
        drag_threshold: Movement that turns a click into a drag
        view: Current pan/zoom of the canvas
        measurer: Text measurement collaborator
        pending_image: Image to place with the image tool
    """
    draw_mode: DrawMode = DrawMode.CORNER
    snap_step: float = 0.0
    drag_threshold: float = DRAG_THRESHOLD
    fill_color: str = "#4f46e5"
    stroke_color: str = "#000000"
    stroke_width: float = 1.0
    number_of_sides: int = 5
    text_font: str = "Arial"
    text_font_size: float = 24.0
    text_color: str = "#000000"
    view: ViewTransform = field(default_factory=ViewTransform)
    measurer: Optional[TextMeasurer] = None
    pending_image: Optional[PendingImage] = None


# =============================================================================
# Helpers
# =============================================================================

def snap_point(point: Point, step: float) -> Point:
    """Quantize a point to the nearest multiple of ``step`` (no-op when step <= 0)."""
    if step <= 0:
        return Point(point[0], point[1])
    return Point(round(point[0] / step) * step, round(point[1] / step) * step)


def _named(shape: Shape, name: str) -> Shape:
    return shape.copy(name=name)


def _is_custom_name(name: str) -> bool:
    return bool(name) and not is_default_name(name)


def is_degenerate(shape: Shape, threshold: float = DRAG_THRESHOLD) -> bool:
    """True if a freshly drawn shape is too small to keep."""
    t = shape.type
    if t in BOX_TYPES:
        return shape.width <= threshold or shape.height <= threshold
    if t == ShapeType.ELLIPSE:
        return shape.rx * 2 <= threshold or shape.ry * 2 <= threshold
    if t in (ShapeType.POLYGON, ShapeType.STAR):
        return shape.radius <= threshold
    if t == ShapeType.LINE:
        return len(shape.points) < 2 or distance(shape.points[0], shape.points[-1]) <= threshold
    if t == ShapeType.PENCIL:
        return len(shape.points) <= 2
    return False


def create_shape_for_tool(tool: Tool, pos: Point,
                          context: Optional[InteractionContext] = None) -> Optional[Shape]:
    """
    Zero-size start form of the shape a creation tool draws.

    Returns None for tools that do not create a shape with a single press
    (select, edit-points, the multi-click tools, and the image tool without
    a pending image).
    """
    ctx = context or InteractionContext()
    name = TOOL_DISPLAY_NAMES[tool]
    paint = dict(name=name, fill=ctx.fill_color, stroke=ctx.stroke_color,
                 stroke_width=ctx.stroke_width)
    box = dict(x=pos.x, y=pos.y, width=0.0, height=0.0)

    if tool in (Tool.RECTANGLE, Tool.SQUARE):
        return RectangleShape(is_aspect_ratio_locked=tool == Tool.SQUARE, **box, **paint)
    if tool in (Tool.ELLIPSE, Tool.CIRCLE):
        return EllipseShape(cx=pos.x, cy=pos.y, is_aspect_ratio_locked=tool == Tool.CIRCLE, **paint)
    if tool == Tool.LINE:
        return LineShape(name=name, points=(pos, pos), stroke=ctx.stroke_color,
                         stroke_width=ctx.stroke_width, capstyle=CapStyle.ROUND)
    if tool == Tool.PENCIL:
        return PencilShape(name=name, points=(pos,), stroke=ctx.stroke_color,
                           stroke_width=ctx.stroke_width, joinstyle=JoinStyle.ROUND,
                           capstyle=CapStyle.ROUND)
    if tool == Tool.TRIANGLE:
        return TriangleShape(joinstyle=JoinStyle.MITER, **box, **paint)
    if tool == Tool.RIGHT_TRIANGLE:
        return RightTriangleShape(joinstyle=JoinStyle.MITER, **box, **paint)
    if tool == Tool.RHOMBUS:
        return RhombusShape(joinstyle=JoinStyle.MITER, **box, **paint)
    if tool == Tool.TRAPEZOID:
        return TrapezoidShape(joinstyle=JoinStyle.MITER, **box, **paint)
    if tool == Tool.PARALLELOGRAM:
        return ParallelogramShape(joinstyle=JoinStyle.MITER, **box, **paint)
    if tool in (Tool.POLYGON, Tool.STAR):
        cls = StarShape if tool == Tool.STAR else PolygonShape
        return cls(cx=pos.x, cy=pos.y, sides=ctx.number_of_sides, joinstyle=JoinStyle.MITER,
                   is_aspect_ratio_locked=True, **paint)
    if tool in (Tool.ARC, Tool.PIESLICE, Tool.CHORD):
        style = ArcStyle(tool.value)
        if style == ArcStyle.ARC:
            paint["fill"] = NONE_COLOR
        extent = 90.0 if style == ArcStyle.ARC else 270.0
        return ArcShape(start=0.0, extent=extent, style=style, **box, **paint)
    if tool == Tool.TEXT:
        return TextShape(name=name, x=pos.x, y=pos.y, text=DEFAULT_TEXT, font=ctx.text_font,
                         font_size=ctx.text_font_size, fill=ctx.text_color,
                         stroke=NONE_COLOR, stroke_width=0.0, anchor=TextAnchor.NW,
                         justify=TextJustify.LEFT)
    if tool == Tool.BITMAP:
        return BitmapShape(name=name, x=pos.x, y=pos.y, width=BITMAP_SIZE, height=BITMAP_SIZE,
                           stroke=NONE_COLOR, stroke_width=0.0)
    if tool == Tool.IMAGE:
        image = ctx.pending_image
        if image is None:
            return None
        return ImageShape(name=name, x=pos.x, y=pos.y, width=image.width, height=image.height,
                          src=image.src, stroke=NONE_COLOR, stroke_width=0.0,
                          is_aspect_ratio_locked=True)
    return None


def convert_to_polyline(shape: Shape,
                        measurer: Optional[TextMeasurer] = None) -> Optional[Shape]:
    """
    Editable polyline form of a primitive, keeping its id and rotation.

    Point-list shapes are returned unchanged. Text, images and bitmaps have
    no path form and yield None.
    """
    if shape.type in POINT_LIST_TYPES:
        return shape
    if shape.type in (ShapeType.TEXT, ShapeType.IMAGE, ShapeType.BITMAP):
        return None

    points = editable_points(shape, measurer)
    if len(points) < 2:
        return None

    is_closed = not (shape.type == ShapeType.ARC and shape.style == ArcStyle.ARC)
    polyline = PolylineShape(
        id=shape.id,
        points=tuple(points),
        is_closed=is_closed,
        rotation=shape.rotation,
        state=shape.state,
        stroke=shape.stroke,
        stroke_width=shape.stroke_width,
        fill=shape.fill if is_closed else NONE_COLOR,
        joinstyle=shape.joinstyle,
        stipple=shape.stipple,
        dash=shape.dash,
        dashoffset=shape.dashoffset,
        comment=shape.comment,
        is_aspect_ratio_locked=shape.is_aspect_ratio_locked,
    )
    name = shape.name if _is_custom_name(shape.name) else default_name(polyline)
    return _named(polyline, name)


# =============================================================================
# Begin
# =============================================================================

def begin_interaction(event: PointerEvent, tool: Tool,
                      shape_under_pointer: Optional[Shape] = None,
                      handle: Optional[Handle] = None,
                      context: Optional[InteractionContext] = None) -> Optional[InteractionState]:
    """
    Start an interaction from a pointer press.

    Args:
        event: The press, in canvas coordinates
        tool: Active tool
        shape_under_pointer: Shape picked at the press position, or the
            selected shape when ``handle`` is given
        handle: Handle of the selected shape under the pointer, if any
        context: Editor settings

    Returns:
        The new interaction state, or None when the press starts nothing
    """
    ctx = context or InteractionContext()
    pos = snap_point(event.position, ctx.snap_step)
    state = None

    if event.button == MouseButton.MIDDLE:
        state = _begin_panning(event, pos, ctx)
    elif handle is not None and shape_under_pointer is not None and event.button == MouseButton.LEFT:
        state = begin_handle_interaction(handle, shape_under_pointer, pos, ctx)
    elif event.button == MouseButton.RIGHT:
        if shape_under_pointer is not None and not shape_under_pointer.is_disabled:
            state = InteractionState(DuplicatingAction(shape_under_pointer, pos), down_pos=pos)
    elif tool == Tool.SELECT:
        if shape_under_pointer is None:
            state = _begin_panning(event, pos, ctx)
        elif not shape_under_pointer.is_disabled:
            state = InteractionState(DraggingAction(shape_under_pointer, pos), down_pos=pos)
    elif tool.is_creation_tool and not tool.is_multi_click:
        shape = create_shape_for_tool(tool, pos, ctx)
        if shape is not None:
            action = DrawingAction(shape, pos, click_to_place=tool.is_click_to_place)
            preview = shape if tool.is_click_to_place else None
            state = InteractionState(action, down_pos=pos, preview=preview)

    if state is not None:
        logger.debug(f"Begin {state.kind.value} at ({pos.x:.1f}, {pos.y:.1f})")
    return state


def _begin_panning(event: PointerEvent, pos: Point, ctx: InteractionContext) -> InteractionState:
    return InteractionState(PanningAction(event.screen, ctx.view), down_pos=pos, view=ctx.view)


def begin_handle_interaction(handle: Handle, shape: Shape, pos: Point,
                             context: Optional[InteractionContext] = None) -> Optional[InteractionState]:
    """Start the interaction a handle of ``shape`` controls."""
    ctx = context or InteractionContext()
    measurer = ctx.measurer
    kind = handle.kind

    if kind == HandleKind.RESIZE:
        box = bounding_box(shape, measurer)
        center = handle_center(shape, measurer)
        geometric = compute_center(shape, measurer)
        if box is None or center is None or geometric is None or handle.anchor is None:
            return None
        action = ResizingAction(handle.transform, shape, handle.anchor, box, center, geometric)
        return InteractionState(action, down_pos=pos)

    if kind == HandleKind.ROTATE:
        center = rotation_center(shape, measurer)
        if center is None:
            return None
        pointer_angle = math.atan2(pos.y - center.y, pos.x - center.x)
        offset = math.radians(shape.rotation) - pointer_angle
        return InteractionState(RotatingAction(shape, center, offset), down_pos=pos)

    if kind in (HandleKind.ARC_START, HandleKind.ARC_END, HandleKind.ARC_MOVE):
        if shape.type != ShapeType.ARC:
            return None
        center = compute_center(shape)
        angle = math.degrees(math.atan2(-(pos.y - center.y), pos.x - center.x))
        return InteractionState(ArcAngleEditingAction(kind, shape, center, angle), down_pos=pos)

    if kind == HandleKind.TRIANGLE_APEX and shape.type == ShapeType.TRIANGLE:
        return InteractionState(TriangleVertexEditingAction(shape), down_pos=pos)
    if kind == HandleKind.STAR_INNER_RADIUS and shape.type == ShapeType.STAR:
        return InteractionState(StarInnerRadiusEditingAction(shape), down_pos=pos)
    if kind in (HandleKind.TRAPEZOID_LEFT, HandleKind.TRAPEZOID_RIGHT) and shape.type == ShapeType.TRAPEZOID:
        return InteractionState(TrapezoidOffsetEditingAction(kind, shape), down_pos=pos)
    if kind == HandleKind.PARALLELOGRAM_ANGLE and shape.type == ShapeType.PARALLELOGRAM:
        return InteractionState(ParallelogramAngleEditingAction(shape), down_pos=pos)

    if kind == HandleKind.VERTEX:
        return begin_point_editing(shape, handle.index, pos, ctx)
    if kind == HandleKind.SEGMENT and handle.segment is not None:
        return begin_segment_insertion(shape, handle.segment, pos, ctx)
    return None


def begin_point_editing(shape: Shape, index: int, pos: Point,
                        context: Optional[InteractionContext] = None) -> Optional[InteractionState]:
    """
    Start moving vertex ``index`` of ``shape``.

    Primitives are converted to a polyline first; the converted shape is the
    preview, so the caller shows it immediately.
    """
    ctx = context or InteractionContext()
    center = compute_center(shape, ctx.measurer)
    target = convert_to_polyline(shape, ctx.measurer)
    if center is None or target is None:
        return None
    if not 0 <= index < len(target.points):
        return None
    action = PointEditingAction(target, index, center)
    return InteractionState(action, down_pos=pos, preview=target)


def begin_segment_insertion(shape: Shape, segment: Tuple[int, int], pos: Point,
                            context: Optional[InteractionContext] = None) -> Optional[InteractionState]:
    """
    Insert a vertex on an edge and start moving it.

    The new vertex is the point of the edge closest to the pointer, found in
    the shape's unrotated frame.
    """
    ctx = context or InteractionContext()
    center = compute_center(shape, ctx.measurer)
    points = editable_points(shape, ctx.measurer)
    first, insert_at = segment
    if center is None or not (0 <= first < len(points) and 0 <= insert_at < len(points)):
        return None

    local = rotate_point(pos, center, -shape.rotation)
    new_point, _ = closest_point_on_segment(local, points[first], points[insert_at])
    points.insert(insert_at, new_point)

    target = convert_to_polyline(shape, ctx.measurer)
    if target is None:
        return None
    target = target.copy(points=tuple(points))
    action = PointEditingAction(target, insert_at, center)
    return InteractionState(action, down_pos=pos, preview=target)


# =============================================================================
# Update
# =============================================================================

def update_interaction(state: Optional[InteractionState], event: PointerEvent,
                       context: Optional[InteractionContext] = None
                       ) -> Tuple[Optional[InteractionState], Optional[Shape]]:
    """
    Advance the interaction with a pointer move.

    Returns:
        (new state, preview shape). The preview keeps its last valid value
        when an update rule rejects the pointer position.
    """
    if state is None:
        return None, None

    ctx = context or InteractionContext()
    pos = snap_point(event.position, ctx.snap_step)
    has_dragged = state.has_dragged or distance(pos, state.down_pos) > ctx.drag_threshold
    action = state.action

    if state.kind == ActionKind.PANNING:
        dx = event.screen.x - action.start_screen.x
        dy = event.screen.y - action.start_screen.y
        view = action.initial_view.panned(dx, dy)
        return state.evolve(view=view, has_dragged=has_dragged), None

    updater = _UPDATERS.get(state.kind)
    result = updater(state, pos, event.shift, ctx) if updater else None
    preview = result if result is not None else state.preview
    return state.evolve(preview=preview, has_dragged=has_dragged), preview


def _update_drawing(state: InteractionState, pos: Point, shift: bool,
                    ctx: InteractionContext) -> Optional[Shape]:
    action = state.action
    if action.click_to_place:
        return None

    shape = action.shape
    start = action.start_pos
    dx = pos.x - start.x
    dy = pos.y - start.y
    locked = shape.is_aspect_ratio_locked or shift
    center_mode = ctx.draw_mode == DrawMode.CENTER
    t = shape.type

    if t in BOX_TYPES:
        width, height = abs(dx), abs(dy)
        if center_mode:
            if locked:
                width = height = max(width, height) * 2
            else:
                width *= 2
                height *= 2
            return shape.copy(x=start.x - width / 2, y=start.y - height / 2,
                              width=width, height=height)
        if locked:
            width = height = max(width, height)
        x = start.x - width if pos.x < start.x else start.x
        y = start.y - height if pos.y < start.y else start.y
        return shape.copy(x=x, y=y, width=width, height=height)

    if t == ShapeType.ELLIPSE:
        if center_mode:
            cx, cy = start.x, start.y
        else:
            cx, cy = start.x + dx / 2, start.y + dy / 2
        if locked:
            r = math.hypot(dx, dy)
            if not center_mode:
                r /= 2
            return shape.copy(cx=cx, cy=cy, rx=r, ry=r)
        scale = 1 if center_mode else 0.5
        return shape.copy(cx=cx, cy=cy, rx=abs(dx) * scale, ry=abs(dy) * scale)

    if t == ShapeType.LINE:
        return shape.copy(points=(start, pos))

    if t == ShapeType.PENCIL:
        current = state.preview if state.preview is not None else shape
        return current.copy(points=current.points + (pos,))

    if t in (ShapeType.POLYGON, ShapeType.STAR):
        if center_mode:
            center = start
            radius = math.hypot(dx, dy)
        else:
            center = midpoint(start, pos)
            radius = min(abs(dx), abs(dy)) / 2
        changes = dict(cx=center.x, cy=center.y, radius=radius)
        if t == ShapeType.STAR:
            changes["inner_radius"] = radius / 2
        return shape.copy(**changes)

    return None


def _update_translation(state: InteractionState, pos: Point, shift: bool,
                        ctx: InteractionContext) -> Optional[Shape]:
    action = state.action
    dx = pos.x - action.start_pos.x
    dy = pos.y - action.start_pos.y
    if shift:
        if abs(dx) > abs(dy):
            dy = 0.0
        else:
            dx = 0.0
    return translate_shape(action.initial_shape, dx, dy)


def _resized_box(action: ResizingAction, mouse: Point, anchor: Point, locked: bool) -> BoundingBox:
    """New local bounding box for a box-handle resize."""
    handle = action.handle
    box = action.bbox

    if handle.is_corner:
        width = abs(mouse.x - anchor.x)
        height = abs(mouse.y - anchor.y)
        if locked and box.width > 0 and box.height > 0:
            ratio = box.width / box.height
            if width / box.width > height / box.height:
                height = width / ratio
            else:
                width = height * ratio
        x = anchor.x - width if "left" in handle.value else anchor.x
        y = anchor.y - height if "top" in handle.value else anchor.y
        return BoundingBox(x, y, width, height)

    horizontal = handle in (TransformHandle.MIDDLE_LEFT, TransformHandle.MIDDLE_RIGHT)
    if locked:
        ratio = 1.0 if box.width == 0 or box.height == 0 else box.width / box.height
        if horizontal:
            width = abs(mouse.x - anchor.x)
            height = width / ratio
            return BoundingBox(min(mouse.x, anchor.x), box.center.y - height / 2, width, height)
        height = abs(mouse.y - anchor.y)
        width = height * ratio
        return BoundingBox(box.center.x - width / 2, min(mouse.y, anchor.y), width, height)

    if horizontal:
        return BoundingBox(min(mouse.x, anchor.x), box.y, abs(mouse.x - anchor.x), box.height)
    return BoundingBox(box.x, min(mouse.y, anchor.y), box.width, abs(mouse.y - anchor.y))


def _update_resizing(state: InteractionState, pos: Point, shift: bool,
                     ctx: InteractionContext) -> Optional[Shape]:
    """
    Resize in the shape's unrotated frame, then map back to its parameters.

    The pointer and the fixed anchor are un-rotated about the rotation
    center, the new local box is built from them, and the shift of the box
    center is rotated back to place the shape so the anchor stays put.
    """
    action = state.action
    shape = action.initial_shape

    if action.handle.is_line_endpoint:
        if action.handle == TransformHandle.LINE_START:
            points = (pos, action.anchor_point)
        else:
            points = (action.anchor_point, pos)
        return shape.copy(points=points, rotation=0)

    rotation = shape.rotation
    mouse = rotate_point(pos, action.rotation_center, -rotation)
    anchor = rotate_point(action.anchor_point, action.rotation_center, -rotation)
    locked = shape.is_aspect_ratio_locked or shift

    new_box = _resized_box(action, mouse, anchor, locked)
    if shape.type in POINT_LIST_TYPES:
        new_box = new_box._replace(width=max(1.0, new_box.width), height=max(1.0, new_box.height))

    old_box = action.bbox
    shift_x = new_box.center.x - old_box.center.x
    shift_y = new_box.center.y - old_box.center.y
    rotated_shift = rotate_point(Point(shift_x, shift_y), Point(0.0, 0.0), rotation)
    center = Point(action.geometric_center.x + rotated_shift.x,
                   action.geometric_center.y + rotated_shift.y)
    width, height = new_box.width, new_box.height
    t = shape.type

    if t == ShapeType.TEXT:
        old_width = text_bounding_box(shape, ctx.measurer).width
        if old_width <= 0:
            return None
        font_size = round(max(0.1, shape.font_size * width / old_width), 1)
        x = center.x - width / 2
        y = center.y - height / 2
        if shape.anchor in (TextAnchor.N, TextAnchor.S, TextAnchor.CENTER):
            x += width / 2
        elif shape.anchor in (TextAnchor.NE, TextAnchor.E, TextAnchor.SE):
            x += width
        if shape.anchor in (TextAnchor.W, TextAnchor.E, TextAnchor.CENTER):
            y += height / 2
        elif shape.anchor in (TextAnchor.SW, TextAnchor.S, TextAnchor.SE):
            y += height
        return shape.copy(font_size=font_size, x=x, y=y)

    if t == ShapeType.TRIANGLE:
        return _resize_triangle(shape, old_box, anchor, center, width, height)

    if t in BOX_TYPES:
        return shape.copy(x=center.x - width / 2, y=center.y - height / 2,
                          width=width, height=height)

    if t == ShapeType.ELLIPSE:
        return shape.copy(cx=center.x, cy=center.y, rx=width / 2, ry=height / 2)

    if t in (ShapeType.POLYGON, ShapeType.STAR):
        scale_x = width / old_box.width if old_box.width > 0 else 1.0
        scale_y = height / old_box.height if old_box.height > 0 else 1.0
        scale = max(scale_x, scale_y)
        # The uniformly scaled vertex box keeps the edges that touch the anchor
        local_center = Point(
            _anchored_center(anchor.x, new_box.x, new_box.width, old_box.width * scale),
            _anchored_center(anchor.y, new_box.y, new_box.height, old_box.height * scale),
        )
        box_center = rotate_point(local_center, action.rotation_center, rotation)
        # The vertex box is not centered on (cx, cy); keep that offset scaled
        offset = rotate_point(
            Point((old_box.center.x - action.geometric_center.x) * scale,
                  (old_box.center.y - action.geometric_center.y) * scale),
            Point(0.0, 0.0), rotation)
        changes = dict(cx=box_center.x - offset.x, cy=box_center.y - offset.y,
                       radius=shape.radius * scale)
        if t == ShapeType.STAR:
            changes["inner_radius"] = shape.inner_radius * scale
        return shape.copy(**changes)

    if t in POINT_LIST_TYPES:
        scale_x = width / old_box.width if old_box.width != 0 else 1.0
        scale_y = height / old_box.height if old_box.height != 0 else 1.0
        left = center.x - width / 2
        top = center.y - height / 2
        points = tuple(
            Point(left + (p.x - old_box.x) * scale_x, top + (p.y - old_box.y) * scale_y)
            for p in shape.points
        )
        return shape.copy(points=points)

    return None


def _anchored_center(anchor: float, start: float, size: float, new_size: float) -> float:
    """Center along one axis of a span of ``new_size`` sharing the resized span's anchored edge."""
    if abs(anchor - start) < _ANCHOR_EPSILON:
        return anchor + new_size / 2
    if abs(anchor - (start + size)) < _ANCHOR_EPSILON:
        return anchor - new_size / 2
    return start + size / 2


def _resize_triangle(shape: Shape, old_box: BoundingBox, anchor: Point, center: Point,
                     width: float, height: float) -> Shape:
    """
    Scale triangle vertices about the anchor and recover its parameters.

    Width, height and apex offset are read back from the scaled vertices,
    and the result is placed so its vertex box is centered on ``center``.
    """
    scale_x = width / old_box.width if old_box.width > 0 else 1.0
    scale_y = height / old_box.height if old_box.height > 0 else 1.0
    scaled = [
        Point(anchor.x + (v.x - anchor.x) * scale_x, anchor.y + (v.y - anchor.y) * scale_y)
        for v in triangle_points(shape)
    ]
    vertex_box = BoundingBox.from_points(scaled)
    apex, base_a, base_b = scaled

    new_width = abs(base_a.x - base_b.x)
    new_height = abs(apex.y - base_a.y)
    local_x = min(base_a.x, base_b.x)
    local_y = min(apex.y, base_a.y)
    offset = (apex.x - (local_x + new_width / 2)) / new_width if new_width > 0 else 0.0

    return shape.copy(
        x=center.x - vertex_box.width / 2 + (local_x - vertex_box.x),
        y=center.y - vertex_box.height / 2 + (local_y - vertex_box.y),
        width=new_width,
        height=new_height,
        top_vertex_offset=offset,
    )


def _update_rotating(state: InteractionState, pos: Point, shift: bool,
                     ctx: InteractionContext) -> Optional[Shape]:
    action = state.action
    center = action.center
    angle = math.atan2(pos.y - center.y, pos.x - center.x) + action.start_offset
    return action.initial_shape.copy(rotation=round(math.degrees(angle)))


def _update_point_editing(state: InteractionState, pos: Point, shift: bool,
                          ctx: InteractionContext) -> Optional[Shape]:
    action = state.action
    shape = action.initial_shape
    local = pos
    if shape.rotation != 0:
        local = rotate_point(pos, action.center, -shape.rotation)
    points = list(shape.points)
    points[action.point_index] = local
    return shape.copy(points=tuple(points))


def _update_arc_angle(state: InteractionState, pos: Point, shift: bool,
                      ctx: InteractionContext) -> Optional[Shape]:
    action = state.action
    shape = action.initial_shape
    center = action.center
    current = math.degrees(math.atan2(-(pos.y - center.y), pos.x - center.x))

    delta = current - action.initial_mouse_angle
    if delta > 180:
        delta -= 360
    if delta < -180:
        delta += 360

    if action.handle == HandleKind.ARC_MOVE or shape.is_extent_locked:
        return shape.copy(start=shape.start + delta)
    if action.handle == HandleKind.ARC_START:
        return shape.copy(start=shape.start + delta, extent=math.fmod(shape.extent - delta, 360))
    return shape.copy(extent=math.fmod(shape.extent + delta, 360))


def _local_pointer(shape: Shape, pos: Point, ctx: InteractionContext) -> Optional[Point]:
    center = compute_center(shape, ctx.measurer)
    if center is None:
        return None
    return rotate_point(pos, center, -shape.rotation)


def _update_triangle_vertex(state: InteractionState, pos: Point, shift: bool,
                            ctx: InteractionContext) -> Optional[Shape]:
    shape = state.action.initial_shape
    local = _local_pointer(shape, pos, ctx)
    if local is None or shape.width == 0:
        return None
    offset = (local.x - (shape.x + shape.width / 2)) / shape.width
    return shape.copy(top_vertex_offset=offset)


def _update_star_inner_radius(state: InteractionState, pos: Point, shift: bool,
                              ctx: InteractionContext) -> Optional[Shape]:
    shape = state.action.initial_shape
    radius = distance(pos, Point(shape.cx, shape.cy))
    return shape.copy(inner_radius=max(0.0, min(radius, shape.radius)))


def _update_trapezoid_offset(state: InteractionState, pos: Point, shift: bool,
                             ctx: InteractionContext) -> Optional[Shape]:
    action = state.action
    shape = action.initial_shape
    local = _local_pointer(shape, pos, ctx)
    if local is None or shape.width == 0:
        return None

    left = shape.top_left_offset_ratio
    right = shape.top_right_offset_ratio
    if action.handle == HandleKind.TRAPEZOID_LEFT:
        left = (local.x - shape.x) / shape.width
        if shape.is_symmetrical:
            right = left
    else:
        right = (shape.x + shape.width - local.x) / shape.width
        if shape.is_symmetrical:
            left = right

    left = max(0.0, left)
    right = max(0.0, right)
    if left + right >= 1:
        return None
    return shape.copy(top_left_offset_ratio=left, top_right_offset_ratio=right)


def _update_parallelogram_angle(state: InteractionState, pos: Point, shift: bool,
                                ctx: InteractionContext) -> Optional[Shape]:
    shape = state.action.initial_shape
    local = _local_pointer(shape, pos, ctx)
    if local is None or shape.height == 0:
        return None

    offset = local.x - shape.x
    if shape.width - abs(offset) <= 0:
        return None
    angle = math.degrees(math.atan2(shape.height, offset))
    angle = max(MIN_PARALLELOGRAM_ANGLE, min(MAX_PARALLELOGRAM_ANGLE, angle))
    return shape.copy(angle=angle)


_UPDATERS = {
    ActionKind.DRAWING: _update_drawing,
    ActionKind.DRAGGING: _update_translation,
    ActionKind.DUPLICATING: _update_translation,
    ActionKind.RESIZING: _update_resizing,
    ActionKind.ROTATING: _update_rotating,
    ActionKind.POINT_EDITING: _update_point_editing,
    ActionKind.ARC_ANGLE_EDITING: _update_arc_angle,
    ActionKind.TRIANGLE_VERTEX_EDITING: _update_triangle_vertex,
    ActionKind.STAR_INNER_RADIUS_EDITING: _update_star_inner_radius,
    ActionKind.TRAPEZOID_OFFSET_EDITING: _update_trapezoid_offset,
    ActionKind.PARALLELOGRAM_ANGLE_EDITING: _update_parallelogram_angle,
}


# =============================================================================
# Commit / cancel
# =============================================================================

def commit_interaction(state: Optional[InteractionState],
                       context: Optional[InteractionContext] = None) -> Optional[Shape]:
    """
    Finish the interaction on pointer release.

    Returns:
        The shape to merge into the shape list (replacing the shape with the
        same id, or added when the id is new), or None when nothing changes.
    """
    if state is None:
        return None

    ctx = context or InteractionContext()
    kind = state.kind
    action = state.action
    result = None

    if kind == ActionKind.DRAWING:
        if action.click_to_place:
            result = action.shape
        elif state.has_dragged and state.preview is not None:
            if is_degenerate(state.preview, ctx.drag_threshold):
                logger.debug(f"Discarded degenerate {state.preview.type.value}")
            else:
                result = state.preview
    elif kind == ActionKind.DUPLICATING:
        if state.has_dragged and state.preview is not None:
            result = state.preview.duplicate()
    elif kind == ActionKind.POINT_EDITING:
        result = _bake_point_edit(state, ctx)
    elif kind != ActionKind.PANNING:
        result = state.preview

    logger.debug(f"Commit {kind.value} -> {result.id if result is not None else None}")
    return result


def _bake_point_edit(state: InteractionState, ctx: InteractionContext) -> Optional[Shape]:
    """
    Final form of a vertex edit.

    A rotated shape gets its rotation baked into the stored points: smooth
    curves rotate their control points, other paths use their rendered
    vertices. The name follows the new form unless the user chose one.
    """
    action = state.action
    initial = action.initial_shape
    shape = state.preview if state.preview is not None else initial
    keep_name = _is_custom_name(initial.name)

    if initial.rotation != 0:
        if is_smooth_curve(initial):
            points = rotate_points(shape.points, action.center, initial.rotation)
        else:
            points = compute_vertices(shape, action.center, ctx.measurer)
        if points:
            shape = shape.copy(points=tuple(points), rotation=0)

    name = initial.name if keep_name else default_name(shape)
    if shape.name != name:
        shape = shape.copy(name=name)
    return shape


def cancel_interaction(state: Optional[InteractionState]) -> None:
    """Abort the interaction, discarding its preview. Always returns idle."""
    if state is not None:
        logger.debug(f"Cancel {state.kind.value}")
    return None


# =============================================================================
# Multi-click paths
# =============================================================================

class PathBuilder:
    """
    Accumulates clicks for a polyline or bezier under construction.

    Each click adds a point; the shape is created on completion as an open
    or closed path. Escape (``cancel``) discards the points.
    """

    def __init__(self, tool: Tool = Tool.POLYLINE):
        self.tool = tool
        self.points: List[Point] = []

    @property
    def is_active(self) -> bool:
        return bool(self.points)

    def add_point(self, point: Point):
        self.points.append(Point(point[0], point[1]))

    def preview_points(self, pointer: Optional[Point] = None) -> List[Point]:
        """Clicked points followed by the rubber-band point under the pointer."""
        if pointer is None or not self.points:
            return list(self.points)
        return self.points + [Point(pointer[0], pointer[1])]

    def preview_shape(self, pointer: Optional[Point] = None,
                      context: Optional[InteractionContext] = None) -> Optional[Shape]:
        points = self.preview_points(pointer)
        if len(points) < 2:
            return None
        return self._build(points, False, context or InteractionContext())

    def complete(self, is_closed: bool = False,
                 context: Optional[InteractionContext] = None) -> Optional[Shape]:
        """
        Create the path shape and reset the builder.

        A trailing duplicate point (from a double click) is dropped. Open
        paths need 2 points, closed ones 3; fewer yields None.
        """
        points = self.points
        self.points = []
        if len(points) > 1 and points[-1] == points[-2]:
            points = points[:-1]

        minimum = 3 if is_closed else 2
        if len(points) < minimum:
            logger.debug(f"Discarded {self.tool.value} with {len(points)} points")
            return None
        shape = self._build(points, is_closed, context or InteractionContext())
        logger.debug(f"Completed {self.tool.value} {shape.id} with {len(points)} points")
        return shape

    def cancel(self):
        if self.points:
            logger.debug(f"Cancelled {self.tool.value} with {len(self.points)} points")
        self.points = []

    def _build(self, points: List[Point], is_closed: bool, ctx: InteractionContext) -> Shape:
        cls = BezierShape if self.tool == Tool.BEZIER else PolylineShape
        extra = dict(smooth=True, splinesteps=BEZIER_SPLINE_STEPS) if self.tool == Tool.BEZIER else {}
        shape = cls(
            points=tuple(points),
            is_closed=is_closed,
            fill=ctx.fill_color if is_closed else NONE_COLOR,
            stroke=ctx.stroke_color,
            stroke_width=ctx.stroke_width,
            capstyle=CapStyle.ROUND,
            **extra,
        )
        return _named(shape, default_name(shape))


__all__ = [
    'DRAG_THRESHOLD',
    'PendingImage',
    'InteractionContext',
    'snap_point',
    'is_degenerate',
    'create_shape_for_tool',
    'convert_to_polyline',
    'begin_interaction',
    'begin_handle_interaction',
    'begin_point_editing',
    'begin_segment_insertion',
    'update_interaction',
    'commit_interaction',
    'cancel_interaction',
    'PathBuilder',
]
