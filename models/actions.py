"""
Interaction action models.

An action is the captured state of one pointer interaction. Each variant
carries exactly the fields its update rule needs; the active action is
replaced wholesale on every pointer move and never mutated in place.
"""

from dataclasses import dataclass, replace
from typing import ClassVar, Optional, Union
from enum import Enum

from .geometry_types import Point, BoundingBox, ViewTransform
from .shapes import Shape
from .tools import HandleKind, TransformHandle


# =============================================================================
# Enumerations
# =============================================================================

class ActionKind(Enum):
    """Interaction states; exactly one is active at a time."""
    IDLE = "idle"
    DRAWING = "drawing"
    DRAGGING = "dragging"
    DUPLICATING = "duplicating"
    RESIZING = "resizing"
    ROTATING = "rotating"
    PANNING = "panning"
    POINT_EDITING = "point-editing"
    ARC_ANGLE_EDITING = "arc-angle-editing"
    TRIANGLE_VERTEX_EDITING = "triangle-vertex-editing"
    STAR_INNER_RADIUS_EDITING = "star-inner-radius-editing"
    TRAPEZOID_OFFSET_EDITING = "trapezoid-offset-editing"
    PARALLELOGRAM_ANGLE_EDITING = "parallelogram-angle-editing"


class MouseButton(Enum):
    LEFT = "left"
    MIDDLE = "middle"
    RIGHT = "right"


# =============================================================================
# Pointer input
# =============================================================================

@dataclass(frozen=True)
class PointerEvent:
    """
    A pointer event already mapped into canvas coordinates.

    Attributes:
        position: Canvas-space position before snapping
        screen: Widget-space position (used for panning)
        button: Button that changed state, for press/release events
        shift: Shift modifier (axis constraint / aspect-ratio override)
    """
    position: Point
    screen: Point
    button: MouseButton = MouseButton.LEFT
    shift: bool = False

    @classmethod
    def at(cls, x: float, y: float, button: MouseButton = MouseButton.LEFT,
           shift: bool = False) -> 'PointerEvent':
        """Create an event for an unpanned, unzoomed view."""
        return cls(Point(x, y), Point(x, y), button, shift)


# =============================================================================
# Action variants
# =============================================================================

@dataclass(frozen=True)
class DrawingAction:
    """Creating a new shape from a zero-size start form."""
    KIND: ClassVar[ActionKind] = ActionKind.DRAWING
    shape: Shape
    start_pos: Point
    click_to_place: bool = False


@dataclass(frozen=True)
class DraggingAction:
    KIND: ClassVar[ActionKind] = ActionKind.DRAGGING
    initial_shape: Shape
    start_pos: Point


@dataclass(frozen=True)
class DuplicatingAction:
    """Dragging a copy; the release clones under a new identity."""
    KIND: ClassVar[ActionKind] = ActionKind.DUPLICATING
    initial_shape: Shape
    start_pos: Point


@dataclass(frozen=True)
class ResizingAction:
    """
    Resizing from a box or line-endpoint handle.

    Attributes:
        handle: The dragged handle
        anchor_point: Screen-space position of the opposite handle
        bbox: Unrotated bounding box at the start of the resize
        rotation_center: Point the shape rotates about
        geometric_center: Stored center of the shape before the resize
    """
    KIND: ClassVar[ActionKind] = ActionKind.RESIZING
    handle: TransformHandle
    initial_shape: Shape
    anchor_point: Point
    bbox: BoundingBox
    rotation_center: Point
    geometric_center: Point


@dataclass(frozen=True)
class RotatingAction:
    KIND: ClassVar[ActionKind] = ActionKind.ROTATING
    initial_shape: Shape
    center: Point
    start_offset: float     # radians between current rotation and pointer angle


@dataclass(frozen=True)
class PanningAction:
    KIND: ClassVar[ActionKind] = ActionKind.PANNING
    start_screen: Point
    initial_view: ViewTransform


@dataclass(frozen=True)
class PointEditingAction:
    """Moving one vertex of a point-list shape."""
    KIND: ClassVar[ActionKind] = ActionKind.POINT_EDITING
    initial_shape: Shape
    point_index: int
    center: Point           # rotation center, held fixed during the edit


@dataclass(frozen=True)
class ArcAngleEditingAction:
    KIND: ClassVar[ActionKind] = ActionKind.ARC_ANGLE_EDITING
    handle: HandleKind      # ARC_START, ARC_END or ARC_MOVE
    initial_shape: Shape
    center: Point
    initial_mouse_angle: float  # degrees, CCW-positive


@dataclass(frozen=True)
class TriangleVertexEditingAction:
    KIND: ClassVar[ActionKind] = ActionKind.TRIANGLE_VERTEX_EDITING
    initial_shape: Shape


@dataclass(frozen=True)
class StarInnerRadiusEditingAction:
    KIND: ClassVar[ActionKind] = ActionKind.STAR_INNER_RADIUS_EDITING
    initial_shape: Shape


@dataclass(frozen=True)
class TrapezoidOffsetEditingAction:
    KIND: ClassVar[ActionKind] = ActionKind.TRAPEZOID_OFFSET_EDITING
    handle: HandleKind      # TRAPEZOID_LEFT or TRAPEZOID_RIGHT
    initial_shape: Shape


@dataclass(frozen=True)
class ParallelogramAngleEditingAction:
    KIND: ClassVar[ActionKind] = ActionKind.PARALLELOGRAM_ANGLE_EDITING
    initial_shape: Shape


Action = Union[
    DrawingAction, DraggingAction, DuplicatingAction, ResizingAction,
    RotatingAction, PanningAction, PointEditingAction, ArcAngleEditingAction,
    TriangleVertexEditingAction, StarInnerRadiusEditingAction,
    TrapezoidOffsetEditingAction, ParallelogramAngleEditingAction,
]


# =============================================================================
# Interaction state
# =============================================================================

@dataclass(frozen=True)
class InteractionState:
    """
    The single active interaction.

    Attributes:
        action: Captured state of the interaction variant
        down_pos: Snapped pointer position at press time
        preview: Latest computed shape, or None until the pointer moves
        has_dragged: Movement exceeded the drag threshold at some point
        view: Current view transform while panning
    """
    action: Action
    down_pos: Point
    preview: Optional[Shape] = None
    has_dragged: bool = False
    view: Optional[ViewTransform] = None

    @property
    def kind(self) -> ActionKind:
        return self.action.KIND

    def evolve(self, **changes) -> 'InteractionState':
        return replace(self, **changes)


def action_kind(state: Optional[InteractionState]) -> ActionKind:
    """Kind of the active interaction; None means idle."""
    return state.kind if state is not None else ActionKind.IDLE


__all__ = [
    'ActionKind',
    'MouseButton',
    'PointerEvent',
    'DrawingAction',
    'DraggingAction',
    'DuplicatingAction',
    'ResizingAction',
    'RotatingAction',
    'PanningAction',
    'PointEditingAction',
    'ArcAngleEditingAction',
    'TriangleVertexEditingAction',
    'StarInnerRadiusEditingAction',
    'TrapezoidOffsetEditingAction',
    'ParallelogramAngleEditingAction',
    'Action',
    'InteractionState',
    'action_kind',
]
