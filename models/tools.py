"""
Editor tools and handle identifiers.
"""

from enum import Enum
from typing import Dict


class Tool(Enum):
    """Active canvas tool."""
    SELECT = "select"
    EDIT_POINTS = "edit-points"
    RECTANGLE = "rectangle"
    SQUARE = "square"
    CIRCLE = "circle"
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
    PIESLICE = "pieslice"
    CHORD = "chord"
    TEXT = "text"
    IMAGE = "image"
    BITMAP = "bitmap"

    @property
    def is_creation_tool(self) -> bool:
        return self not in (Tool.SELECT, Tool.EDIT_POINTS)

    @property
    def is_multi_click(self) -> bool:
        """Tools whose shape is built over several clicks."""
        return self in (Tool.POLYLINE, Tool.BEZIER)

    @property
    def is_click_to_place(self) -> bool:
        """Tools that create their shape on press, without a drag."""
        return self in (Tool.TEXT, Tool.IMAGE, Tool.BITMAP)


class DrawMode(Enum):
    """How a creation drag maps to the shape's box."""
    CORNER = "corner"   # start point is a corner
    CENTER = "center"   # start point is the center


class TransformHandle(Enum):
    """Resize handles of the selection box, plus the two line endpoints."""
    TOP_LEFT = "top-left"
    TOP_CENTER = "top-center"
    TOP_RIGHT = "top-right"
    MIDDLE_LEFT = "middle-left"
    MIDDLE_RIGHT = "middle-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_CENTER = "bottom-center"
    BOTTOM_RIGHT = "bottom-right"
    LINE_START = "line-start"
    LINE_END = "line-end"

    @property
    def is_corner(self) -> bool:
        return self in (TransformHandle.TOP_LEFT, TransformHandle.TOP_RIGHT,
                        TransformHandle.BOTTOM_LEFT, TransformHandle.BOTTOM_RIGHT)

    @property
    def is_line_endpoint(self) -> bool:
        return self in (TransformHandle.LINE_START, TransformHandle.LINE_END)

    @property
    def opposite(self) -> "TransformHandle":
        return OPPOSITE_HANDLES[self]


OPPOSITE_HANDLES: Dict[TransformHandle, TransformHandle] = {
    TransformHandle.TOP_LEFT: TransformHandle.BOTTOM_RIGHT,
    TransformHandle.TOP_CENTER: TransformHandle.BOTTOM_CENTER,
    TransformHandle.TOP_RIGHT: TransformHandle.BOTTOM_LEFT,
    TransformHandle.MIDDLE_LEFT: TransformHandle.MIDDLE_RIGHT,
    TransformHandle.MIDDLE_RIGHT: TransformHandle.MIDDLE_LEFT,
    TransformHandle.BOTTOM_LEFT: TransformHandle.TOP_RIGHT,
    TransformHandle.BOTTOM_CENTER: TransformHandle.TOP_CENTER,
    TransformHandle.BOTTOM_RIGHT: TransformHandle.TOP_LEFT,
    TransformHandle.LINE_START: TransformHandle.LINE_END,
    TransformHandle.LINE_END: TransformHandle.LINE_START,
}


class HandleKind(Enum):
    """What pressing a handle starts."""
    RESIZE = "resize"
    ROTATE = "rotate"
    VERTEX = "vertex"
    SEGMENT = "segment"
    ARC_START = "arc-start"
    ARC_END = "arc-end"
    ARC_MOVE = "arc-move"
    TRIANGLE_APEX = "triangle-apex"
    TRAPEZOID_LEFT = "trapezoid-left"
    TRAPEZOID_RIGHT = "trapezoid-right"
    PARALLELOGRAM_ANGLE = "parallelogram-angle"
    STAR_INNER_RADIUS = "star-inner-radius"


class CursorKind(Enum):
    """Pointer cursor shown over a handle or during an action."""
    DEFAULT = "default"
    CROSSHAIR = "crosshair"
    EW_RESIZE = "ew-resize"
    NS_RESIZE = "ns-resize"
    NWSE_RESIZE = "nwse-resize"
    NESW_RESIZE = "nesw-resize"
    GRAB = "grab"
    GRABBING = "grabbing"
    ROTATE = "rotate"
    ADJUST = "adjust"
    COPY = "copy"


TOOL_DISPLAY_NAMES: Dict[Tool, str] = {
    Tool.SELECT: "Select",
    Tool.EDIT_POINTS: "Edit Points",
    Tool.RECTANGLE: "Rectangle",
    Tool.SQUARE: "Square",
    Tool.CIRCLE: "Circle",
    Tool.ELLIPSE: "Ellipse",
    Tool.LINE: "Line",
    Tool.PENCIL: "Pencil",
    Tool.POLYLINE: "Polyline",
    Tool.BEZIER: "Bezier Curve",
    Tool.TRIANGLE: "Triangle",
    Tool.RIGHT_TRIANGLE: "Right Triangle",
    Tool.RHOMBUS: "Rhombus",
    Tool.TRAPEZOID: "Trapezoid",
    Tool.PARALLELOGRAM: "Parallelogram",
    Tool.POLYGON: "Polygon",
    Tool.STAR: "Star",
    Tool.ARC: "Arc",
    Tool.PIESLICE: "Pie Slice",
    Tool.CHORD: "Chord",
    Tool.TEXT: "Text",
    Tool.IMAGE: "Image",
    Tool.BITMAP: "Bitmap",
}

# Common dash patterns offered for outlines, as (name, pattern)
DASH_STYLES = [
    ("Solid", ()),
    ("Dashed", (5, 3)),
    ("Long dashes", (10, 5)),
    ("Fine dots", (2, 2)),
    ("Sparse dots", (2, 4)),
    ("Dash-dot", (10, 3, 2, 3)),
    ("Dash-dot-dot", (15, 3, 2, 3, 2, 3)),
    ("Double dot", (2, 3, 2, 6)),
    ("Long-short dash", (20, 5, 5, 5)),
]


__all__ = [
    'Tool',
    'DrawMode',
    'TransformHandle',
    'OPPOSITE_HANDLES',
    'HandleKind',
    'CursorKind',
    'TOOL_DISPLAY_NAMES',
    'DASH_STYLES',
]
