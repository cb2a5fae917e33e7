"""
Models package.

This package contains the value types of the vector canvas editor:

- Geometry primitives (Point, BoundingBox, ViewTransform)
- The shape union (one frozen dataclass per shape type)
- Tools, handles and cursors
- Interaction actions and pointer events
"""

# ============================================================================
# Geometry Types
# ============================================================================

from .geometry_types import (
    Point,
    BoundingBox,
    ViewTransform,
    MIN_ZOOM,
    MAX_ZOOM,
    ZOOM_STEP,
)

# ============================================================================
# Shapes
# ============================================================================

from .shapes import (
    ShapeType,
    ShapeState,
    ArcStyle,
    JoinStyle,
    CapStyle,
    ArrowStyle,
    TextAnchor,
    TextJustify,
    FontWeight,
    FontSlant,
    BitmapType,
    NONE_COLOR,
    MIN_POLYGON_SIDES,
    SHAPE_CLASSES,
    BOX_TYPES,
    POLYGONAL_TYPES,
    POINT_LIST_TYPES,
    RADIAL_TYPES,
    Shape,
    BaseShape,
    BoxShape,
    RectangleShape,
    TriangleShape,
    RightTriangleShape,
    RhombusShape,
    TrapezoidShape,
    ParallelogramShape,
    ArcShape,
    ImageShape,
    BitmapShape,
    EllipseShape,
    PolygonShape,
    StarShape,
    PointListShape,
    LineShape,
    PencilShape,
    PolylineShape,
    BezierShape,
    TextShape,
    shape_from_type,
    is_line_like,
    is_smooth_curve,
)

# ============================================================================
# Tools and Handles
# ============================================================================

from .tools import (
    Tool,
    DrawMode,
    TransformHandle,
    OPPOSITE_HANDLES,
    HandleKind,
    CursorKind,
    TOOL_DISPLAY_NAMES,
    DASH_STYLES,
)

# ============================================================================
# Interaction Actions
# ============================================================================

from .actions import (
    ActionKind,
    MouseButton,
    PointerEvent,
    DrawingAction,
    DraggingAction,
    DuplicatingAction,
    ResizingAction,
    RotatingAction,
    PanningAction,
    PointEditingAction,
    ArcAngleEditingAction,
    TriangleVertexEditingAction,
    StarInnerRadiusEditingAction,
    TrapezoidOffsetEditingAction,
    ParallelogramAngleEditingAction,
    Action,
    InteractionState,
    action_kind,
)


__all__ = [
    # Geometry types
    'Point', 'BoundingBox', 'ViewTransform', 'MIN_ZOOM', 'MAX_ZOOM', 'ZOOM_STEP',

    # Shape enums
    'ShapeType', 'ShapeState', 'ArcStyle', 'JoinStyle', 'CapStyle',
    'ArrowStyle', 'TextAnchor', 'TextJustify', 'FontWeight', 'FontSlant',
    'BitmapType',

    # Shape constants
    'NONE_COLOR', 'MIN_POLYGON_SIDES', 'SHAPE_CLASSES', 'BOX_TYPES',
    'POLYGONAL_TYPES', 'POINT_LIST_TYPES', 'RADIAL_TYPES',

    # Shapes
    'Shape', 'BaseShape', 'BoxShape', 'RectangleShape', 'TriangleShape',
    'RightTriangleShape', 'RhombusShape', 'TrapezoidShape',
    'ParallelogramShape', 'ArcShape', 'ImageShape', 'BitmapShape',
    'EllipseShape', 'PolygonShape', 'StarShape', 'PointListShape',
    'LineShape', 'PencilShape', 'PolylineShape', 'BezierShape', 'TextShape',
    'shape_from_type', 'is_line_like', 'is_smooth_curve',

    # Tools
    'Tool', 'DrawMode', 'TransformHandle', 'OPPOSITE_HANDLES', 'HandleKind',
    'CursorKind', 'TOOL_DISPLAY_NAMES', 'DASH_STYLES',

    # Actions
    'ActionKind', 'MouseButton', 'PointerEvent', 'DrawingAction',
    'DraggingAction', 'DuplicatingAction', 'ResizingAction', 'RotatingAction',
    'PanningAction', 'PointEditingAction', 'ArcAngleEditingAction',
    'TriangleVertexEditingAction', 'StarInnerRadiusEditingAction',
    'TrapezoidOffsetEditingAction', 'ParallelogramAngleEditingAction',
    'Action', 'InteractionState', 'action_kind',
]
