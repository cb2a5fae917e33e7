"""
Shape naming and drawing-API item types.

Maps each shape to the Tk canvas item it exports as, and derives the
default display name that follows from it.
"""

from models import (
    ArcStyle, Shape, ShapeType, Tool, TOOL_DISPLAY_NAMES,
)
from .geometry import is_polyline_axis_aligned_rectangle


# Name used for any shape exported as a generic polygon
POLYGON_NAME = TOOL_DISPLAY_NAMES[Tool.POLYGON]

_ARC_STYLE_TOOLS = {
    ArcStyle.ARC: Tool.ARC,
    ArcStyle.PIESLICE: Tool.PIESLICE,
    ArcStyle.CHORD: Tool.CHORD,
}

_DEFAULT_NAMES = frozenset(TOOL_DISPLAY_NAMES.values()) | {POLYGON_NAME}


def tk_item_type(shape: Shape) -> str:
    """
    Tk canvas item type a shape is exported as.

    Rotation forces most primitives into ``polygon`` (or ``line`` for open
    arcs), since Tk rectangles, ovals and arcs cannot rotate.
    """
    t = shape.type
    if t == ShapeType.TEXT:
        return "text"
    if t == ShapeType.IMAGE:
        return "image"
    if t == ShapeType.BITMAP:
        return "bitmap"

    # A circle looks the same at any rotation
    if t == ShapeType.ELLIPSE and shape.is_aspect_ratio_locked:
        return "oval"

    if t == ShapeType.ARC:
        if shape.rotation == 0:
            return "arc"
        return "line" if shape.style == ArcStyle.ARC else "polygon"

    if shape.rotation == 0:
        if t == ShapeType.RECTANGLE:
            return "rectangle"
        if t == ShapeType.ELLIPSE:
            return "oval"
        if t == ShapeType.POLYLINE and shape.is_closed and is_polyline_axis_aligned_rectangle(shape):
            return "rectangle"

    if t in (ShapeType.LINE, ShapeType.PENCIL):
        return "line"
    if t in (ShapeType.POLYLINE, ShapeType.BEZIER) and not shape.is_closed:
        return "line"
    return "polygon"


def default_name(shape: Shape) -> str:
    """Default display name for a shape in its current form."""
    t = shape.type
    if t == ShapeType.ARC:
        return TOOL_DISPLAY_NAMES[_ARC_STYLE_TOOLS[shape.style]]

    item_type = tk_item_type(shape)
    if item_type == "polygon" and t not in (ShapeType.POLYGON, ShapeType.STAR):
        return POLYGON_NAME
    if item_type == "rectangle" and t == ShapeType.POLYLINE:
        return TOOL_DISPLAY_NAMES[Tool.RECTANGLE]

    if t == ShapeType.RECTANGLE and shape.is_aspect_ratio_locked:
        return TOOL_DISPLAY_NAMES[Tool.SQUARE]
    if t == ShapeType.ELLIPSE and shape.is_aspect_ratio_locked:
        return TOOL_DISPLAY_NAMES[Tool.CIRCLE]
    if t == ShapeType.POLYLINE:
        return POLYGON_NAME if shape.is_closed else TOOL_DISPLAY_NAMES[Tool.POLYLINE]
    if t == ShapeType.BEZIER:
        return POLYGON_NAME if shape.is_closed else TOOL_DISPLAY_NAMES[Tool.BEZIER]

    return TOOL_DISPLAY_NAMES[Tool(t.value)]


def is_default_name(name: str) -> bool:
    """True if ``name`` was auto-assigned rather than chosen by the user."""
    return name in _DEFAULT_NAMES


__all__ = [
    'POLYGON_NAME',
    'tk_item_type',
    'default_name',
    'is_default_name',
]
