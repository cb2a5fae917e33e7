"""Services package."""

from .geometry import (
    rotate_point,
    rotate_points,
    distance,
    point_in_polygon,
    compute_vertices,
    compute_bounding_box,
    compute_center,
    compute_smoothed_path,
    compute_arc_path,
    editable_points,
    translate_shape,
)
from .text_layout import (
    FontSpec,
    TextMeasurer,
    ApproximateTextMeasurer,
    TextLayout,
    layout_text,
    text_bounding_box,
)
from .naming import default_name, is_default_name, tk_item_type
from .handles import (
    Handle,
    selection_handles,
    edit_point_handles,
    hit_test_handles,
    shape_at,
)
from .interaction import (
    InteractionContext,
    PendingImage,
    PathBuilder,
    begin_interaction,
    update_interaction,
    commit_interaction,
    cancel_interaction,
    convert_to_polyline,
)
from .settings_manager import (
    SettingsManager,
    AppSettings,
    EditorSettings,
    DrawingDefaults,
    CanvasSettings,
    get_settings,
    reset_settings_manager,
)
from .shape_store import ShapeStore
from .canvas_controller import CanvasController
from .tkinter_generator import (
    CodeLine,
    TkinterScriptGenerator,
    generate_tkinter_script,
)

__all__ = [
    # Geometry
    "rotate_point",
    "rotate_points",
    "distance",
    "point_in_polygon",
    "compute_vertices",
    "compute_bounding_box",
    "compute_center",
    "compute_smoothed_path",
    "compute_arc_path",
    "editable_points",
    "translate_shape",
    # Text
    "FontSpec",
    "TextMeasurer",
    "ApproximateTextMeasurer",
    "TextLayout",
    "layout_text",
    "text_bounding_box",
    # Naming
    "default_name",
    "is_default_name",
    "tk_item_type",
    # Handles
    "Handle",
    "selection_handles",
    "edit_point_handles",
    "hit_test_handles",
    "shape_at",
    # Interaction
    "InteractionContext",
    "PendingImage",
    "PathBuilder",
    "begin_interaction",
    "update_interaction",
    "commit_interaction",
    "cancel_interaction",
    "convert_to_polyline",
    # Settings
    "SettingsManager",
    "AppSettings",
    "EditorSettings",
    "DrawingDefaults",
    "CanvasSettings",
    "get_settings",
    "reset_settings_manager",
    # Editor state
    "ShapeStore",
    "CanvasController",
    # Code generation
    "CodeLine",
    "TkinterScriptGenerator",
    "generate_tkinter_script",
]
