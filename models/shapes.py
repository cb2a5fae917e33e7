"""
Shape Models for the vector canvas.

Each drawable element is a frozen dataclass tagged by its ``type``. Shapes
are values: every edit produces a new instance through ``copy(**changes)``,
and point sequences are stored as tuples so no two shapes can share a
mutable point list.

Key concepts:
- Box shapes: anchored at the top-left corner (x, y, width, height)
- Radial shapes: anchored at a center (cx, cy) with radius-like fields
- Point-list shapes: an ordered tuple of points defining the path
- Text: anchored at (x, y) with a 9-point anchor
"""

from dataclasses import dataclass, field, replace
from typing import ClassVar, Dict, Tuple, Type, Union
from enum import Enum
import uuid

from .geometry_types import Point


# =============================================================================
# Enumerations
# =============================================================================

class ShapeType(Enum):
    """Discriminant of the shape union."""
    RECTANGLE = "rectangle"
    ELLIPSE = "ellipse"
    LINE = "line"
    PENCIL = "pencil"
    POLYLINE = "polyline"
    BEZIER = "bezier"
    TRIANGLE = "triangle"
    RIGHT_TRIANGLE = "right-triangle"
    RHOMBUS = "rhombus"
    TRAPEZOID = "trapezoid"
    PARALLELOGRAM = "parallelogram"
    POLYGON = "polygon"
    STAR = "star"
    ARC = "arc"
    TEXT = "text"
    IMAGE = "image"
    BITMAP = "bitmap"


class ShapeState(Enum):
    """Visibility/interactivity state (maps to the Tk ``state`` option)."""
    NORMAL = "normal"
    HIDDEN = "hidden"
    DISABLED = "disabled"


class ArcStyle(Enum):
    PIESLICE = "pieslice"
    CHORD = "chord"
    ARC = "arc"


class JoinStyle(Enum):
    ROUND = "round"
    BEVEL = "bevel"
    MITER = "miter"


class CapStyle(Enum):
    BUTT = "butt"
    PROJECTING = "projecting"
    ROUND = "round"


class ArrowStyle(Enum):
    NONE = "none"
    FIRST = "first"
    LAST = "last"
    BOTH = "both"


class TextAnchor(Enum):
    """9-point text anchor."""
    N = "n"
    S = "s"
    E = "e"
    W = "w"
    NE = "ne"
    NW = "nw"
    SE = "se"
    SW = "sw"
    CENTER = "center"


class TextJustify(Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class FontWeight(Enum):
    NORMAL = "normal"
    BOLD = "bold"


class FontSlant(Enum):
    ROMAN = "roman"
    ITALIC = "italic"


class BitmapType(Enum):
    """Built-in Tk bitmaps."""
    ERROR = "error"
    GRAY75 = "gray75"
    GRAY50 = "gray50"
    GRAY25 = "gray25"
    GRAY12 = "gray12"
    HOURGLASS = "hourglass"
    INFO = "info"
    QUESTHEAD = "questhead"
    QUESTION = "question"
    WARNING = "warning"


# Sentinel color meaning "skip this paint pass entirely"
NONE_COLOR = "none"

MIN_POLYGON_SIDES = 3


# =============================================================================
# Helper Functions
# =============================================================================

def _generate_id() -> str:
    """Generate a short unique ID."""
    return str(uuid.uuid4())[:8]


def _points_tuple(points) -> Tuple[Point, ...]:
    return tuple(Point(float(p[0]), float(p[1])) for p in points)


def _coerce_enum(shape, name: str, enum_cls: Type[Enum]):
    value = getattr(shape, name)
    if not isinstance(value, enum_cls):
        object.__setattr__(shape, name, enum_cls(value))


def _non_negative(shape, *names: str):
    for name in names:
        value = getattr(shape, name)
        if value < 0:
            object.__setattr__(shape, name, 0.0)


# =============================================================================
# Base Shape
# =============================================================================

@dataclass(frozen=True)
class BaseShape:
    """
    Attributes shared by every shape variant.

    Attributes:
        id: Unique identifier, stable for the lifetime of the shape
        name: Display name (auto-assigned default or user-chosen)
        stroke: Outline color, or "none" to skip the stroke pass
        stroke_width: Outline width in canvas units
        fill: Fill color, or "none" to skip the fill pass
        state: normal, hidden or disabled
        rotation: Clockwise rotation in degrees, normalized to [0, 360)
        is_aspect_ratio_locked: Keep width/height ratio when resizing
    """
    TYPE: ClassVar[ShapeType]

    id: str = field(default_factory=_generate_id)
    name: str = ""
    stroke: str = "#000000"
    stroke_width: float = 1.0
    fill: str = NONE_COLOR
    state: ShapeState = ShapeState.NORMAL
    rotation: float = 0.0
    is_aspect_ratio_locked: bool = False
    comment: str = ""
    dash: Tuple[int, ...] = ()
    dashoffset: float = 0.0
    stipple: str = ""
    joinstyle: JoinStyle = JoinStyle.ROUND

    def __post_init__(self):
        """Coerce enum values and normalize rotation."""
        _coerce_enum(self, "state", ShapeState)
        _coerce_enum(self, "joinstyle", JoinStyle)
        object.__setattr__(self, "rotation", float(self.rotation) % 360)
        object.__setattr__(self, "dash", tuple(int(d) for d in self.dash))
        if self.stroke_width < 0:
            object.__setattr__(self, "stroke_width", 0.0)

    @property
    def type(self) -> ShapeType:
        return self.TYPE

    @property
    def is_hidden(self) -> bool:
        return self.state == ShapeState.HIDDEN

    @property
    def is_disabled(self) -> bool:
        return self.state == ShapeState.DISABLED

    def copy(self, **changes):
        """Return a new shape value with the given fields replaced."""
        return replace(self, **changes)

    def duplicate(self, **changes):
        """Return a copy under a fresh identity."""
        return replace(self, id=_generate_id(), **changes)


# =============================================================================
# Box Shapes (top-left anchored)
# =============================================================================

@dataclass(frozen=True)
class BoxShape(BaseShape):
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    def __post_init__(self):
        super().__post_init__()
        _non_negative(self, "width", "height")


@dataclass(frozen=True)
class RectangleShape(BoxShape):
    TYPE: ClassVar[ShapeType] = ShapeType.RECTANGLE


@dataclass(frozen=True)
class TriangleShape(BoxShape):
    """
    Isosceles triangle. ``top_vertex_offset`` shifts the apex horizontally
    as a fraction of the width (0 keeps it centered).
    """
    TYPE: ClassVar[ShapeType] = ShapeType.TRIANGLE
    top_vertex_offset: float = 0.0
    is_flipped_vertically: bool = False


@dataclass(frozen=True)
class RightTriangleShape(BoxShape):
    TYPE: ClassVar[ShapeType] = ShapeType.RIGHT_TRIANGLE
    is_flipped_horizontally: bool = False
    is_flipped_vertically: bool = False


@dataclass(frozen=True)
class RhombusShape(BoxShape):
    TYPE: ClassVar[ShapeType] = ShapeType.RHOMBUS


@dataclass(frozen=True)
class TrapezoidShape(BoxShape):
    """
    Trapezoid whose top edge is inset from each side by a ratio of the width.
    """
    TYPE: ClassVar[ShapeType] = ShapeType.TRAPEZOID
    top_left_offset_ratio: float = 0.25
    top_right_offset_ratio: float = 0.25
    is_symmetrical: bool = True
    is_flipped_vertically: bool = False


@dataclass(frozen=True)
class ParallelogramShape(BoxShape):
    """Parallelogram sheared by ``angle`` degrees (1..179) at the base."""
    TYPE: ClassVar[ShapeType] = ShapeType.PARALLELOGRAM
    angle: float = 75.0
    is_flipped_vertically: bool = False


@dataclass(frozen=True)
class ArcShape(BoxShape):
    """
    Elliptical arc inscribed in the box.

    ``start`` and ``extent`` are degrees, counter-clockwise positive, with
    0 pointing at three o'clock.
    """
    TYPE: ClassVar[ShapeType] = ShapeType.ARC
    start: float = 0.0
    extent: float = 90.0
    style: ArcStyle = ArcStyle.PIESLICE
    is_extent_locked: bool = False

    def __post_init__(self):
        super().__post_init__()
        _coerce_enum(self, "style", ArcStyle)


@dataclass(frozen=True)
class ImageShape(BoxShape):
    TYPE: ClassVar[ShapeType] = ShapeType.IMAGE
    src: str = ""


@dataclass(frozen=True)
class BitmapShape(BoxShape):
    TYPE: ClassVar[ShapeType] = ShapeType.BITMAP
    bitmap_type: BitmapType = BitmapType.ERROR
    foreground: str = "#000000"
    background: str = "#ffffff"

    def __post_init__(self):
        super().__post_init__()
        _coerce_enum(self, "bitmap_type", BitmapType)


# =============================================================================
# Radial Shapes (center anchored)
# =============================================================================

@dataclass(frozen=True)
class EllipseShape(BaseShape):
    TYPE: ClassVar[ShapeType] = ShapeType.ELLIPSE
    cx: float = 0.0
    cy: float = 0.0
    rx: float = 0.0
    ry: float = 0.0

    def __post_init__(self):
        super().__post_init__()
        _non_negative(self, "rx", "ry")


@dataclass(frozen=True)
class PolygonShape(BaseShape):
    """Regular polygon inscribed in a circle of ``radius``."""
    TYPE: ClassVar[ShapeType] = ShapeType.POLYGON
    cx: float = 0.0
    cy: float = 0.0
    radius: float = 0.0
    sides: int = 5
    is_flipped_horizontally: bool = False
    is_flipped_vertically: bool = False

    def __post_init__(self):
        super().__post_init__()
        _non_negative(self, "radius")
        object.__setattr__(self, "sides", max(MIN_POLYGON_SIDES, int(self.sides)))


@dataclass(frozen=True)
class StarShape(PolygonShape):
    """Star with ``sides`` outer points alternating with inner points."""
    TYPE: ClassVar[ShapeType] = ShapeType.STAR
    inner_radius: float = 0.0

    def __post_init__(self):
        super().__post_init__()
        _non_negative(self, "inner_radius")


# =============================================================================
# Point-List Shapes
# =============================================================================

@dataclass(frozen=True)
class PointListShape(BaseShape):
    points: Tuple[Point, ...] = ()

    def __post_init__(self):
        super().__post_init__()
        object.__setattr__(self, "points", _points_tuple(self.points))


@dataclass(frozen=True)
class LineShape(PointListShape):
    TYPE: ClassVar[ShapeType] = ShapeType.LINE
    capstyle: CapStyle = CapStyle.ROUND
    arrow: ArrowStyle = ArrowStyle.NONE
    arrowshape: Tuple[float, float, float] = (8.0, 10.0, 3.0)

    def __post_init__(self):
        super().__post_init__()
        _coerce_enum(self, "capstyle", CapStyle)
        _coerce_enum(self, "arrow", ArrowStyle)
        object.__setattr__(self, "arrowshape", tuple(float(v) for v in self.arrowshape))


@dataclass(frozen=True)
class PencilShape(PointListShape):
    TYPE: ClassVar[ShapeType] = ShapeType.PENCIL
    capstyle: CapStyle = CapStyle.ROUND

    def __post_init__(self):
        super().__post_init__()
        _coerce_enum(self, "capstyle", CapStyle)


@dataclass(frozen=True)
class PolylineShape(PointListShape):
    TYPE: ClassVar[ShapeType] = ShapeType.POLYLINE
    is_closed: bool = False
    smooth: bool = False
    splinesteps: int = 12
    capstyle: CapStyle = CapStyle.ROUND

    def __post_init__(self):
        super().__post_init__()
        _coerce_enum(self, "capstyle", CapStyle)


@dataclass(frozen=True)
class BezierShape(PolylineShape):
    """Quadratic B-spline through user control points (Tk ``smooth=True``)."""
    TYPE: ClassVar[ShapeType] = ShapeType.BEZIER
    smooth: bool = True


# =============================================================================
# Text
# =============================================================================

@dataclass(frozen=True)
class TextShape(BaseShape):
    """
    Text item anchored at (x, y).

    ``width`` is the wrap width; 0 disables wrapping. Text rotates about
    its anchor point rather than its bounding-box center.
    """
    TYPE: ClassVar[ShapeType] = ShapeType.TEXT
    x: float = 0.0
    y: float = 0.0
    text: str = "Text"
    font: str = "Arial"
    font_size: float = 12.0
    weight: FontWeight = FontWeight.NORMAL
    slant: FontSlant = FontSlant.ROMAN
    underline: bool = False
    overstrike: bool = False
    anchor: TextAnchor = TextAnchor.NW
    justify: TextJustify = TextJustify.LEFT
    width: float = 0.0

    def __post_init__(self):
        super().__post_init__()
        _coerce_enum(self, "weight", FontWeight)
        _coerce_enum(self, "slant", FontSlant)
        _coerce_enum(self, "anchor", TextAnchor)
        _coerce_enum(self, "justify", TextJustify)
        _non_negative(self, "width")


# =============================================================================
# Union and lookup tables
# =============================================================================

Shape = Union[
    RectangleShape, EllipseShape, LineShape, PencilShape, PolylineShape,
    BezierShape, TriangleShape, RightTriangleShape, RhombusShape,
    TrapezoidShape, ParallelogramShape, PolygonShape, StarShape, ArcShape,
    TextShape, ImageShape, BitmapShape,
]

SHAPE_CLASSES: Dict[ShapeType, Type[BaseShape]] = {
    cls.TYPE: cls for cls in (
        RectangleShape, EllipseShape, LineShape, PencilShape, PolylineShape,
        BezierShape, TriangleShape, RightTriangleShape, RhombusShape,
        TrapezoidShape, ParallelogramShape, PolygonShape, StarShape, ArcShape,
        TextShape, ImageShape, BitmapShape,
    )
}

# Shapes stored as x, y, width, height
BOX_TYPES = frozenset({
    ShapeType.RECTANGLE, ShapeType.TRIANGLE, ShapeType.RIGHT_TRIANGLE,
    ShapeType.RHOMBUS, ShapeType.TRAPEZOID, ShapeType.PARALLELOGRAM,
    ShapeType.ARC, ShapeType.IMAGE, ShapeType.BITMAP,
})

# Shapes whose vertices come from a closed-form formula
POLYGONAL_TYPES = frozenset({
    ShapeType.TRIANGLE, ShapeType.RIGHT_TRIANGLE, ShapeType.RHOMBUS,
    ShapeType.TRAPEZOID, ShapeType.PARALLELOGRAM, ShapeType.POLYGON,
    ShapeType.STAR,
})

POINT_LIST_TYPES = frozenset({
    ShapeType.LINE, ShapeType.PENCIL, ShapeType.POLYLINE, ShapeType.BEZIER,
})

RADIAL_TYPES = frozenset({ShapeType.POLYGON, ShapeType.STAR})


def shape_from_type(shape_type, **fields) -> Shape:
    """
    Create a shape from its type tag.

    Raises:
        ValueError: if ``shape_type`` is not a known shape type
    """
    if not isinstance(shape_type, ShapeType):
        shape_type = ShapeType(shape_type)
    return SHAPE_CLASSES[shape_type](**fields)


def is_line_like(shape: Shape) -> bool:
    """True for open path shapes (no interior to fill)."""
    if shape.type in (ShapeType.LINE, ShapeType.PENCIL):
        return True
    if shape.type in (ShapeType.POLYLINE, ShapeType.BEZIER):
        return not shape.is_closed
    return False


def is_smooth_curve(shape: Shape) -> bool:
    """True for shapes rendered as a quadratic B-spline."""
    if shape.type == ShapeType.BEZIER:
        return True
    return shape.type == ShapeType.POLYLINE and shape.smooth


__all__ = [
    # Enums
    'ShapeType',
    'ShapeState',
    'ArcStyle',
    'JoinStyle',
    'CapStyle',
    'ArrowStyle',
    'TextAnchor',
    'TextJustify',
    'FontWeight',
    'FontSlant',
    'BitmapType',
    # Constants
    'NONE_COLOR',
    'MIN_POLYGON_SIDES',
    'SHAPE_CLASSES',
    'BOX_TYPES',
    'POLYGONAL_TYPES',
    'POINT_LIST_TYPES',
    'RADIAL_TYPES',
    # Shapes
    'Shape',
    'BaseShape',
    'BoxShape',
    'RectangleShape',
    'TriangleShape',
    'RightTriangleShape',
    'RhombusShape',
    'TrapezoidShape',
    'ParallelogramShape',
    'ArcShape',
    'ImageShape',
    'BitmapShape',
    'EllipseShape',
    'PolygonShape',
    'StarShape',
    'PointListShape',
    'LineShape',
    'PencilShape',
    'PolylineShape',
    'BezierShape',
    'TextShape',
    # Functions
    'shape_from_type',
    'is_line_like',
    'is_smooth_curve',
]
