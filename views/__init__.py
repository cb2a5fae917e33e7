"""Views package."""

from .text_measurer import QtTextMeasurer, qfont_for
from .shape_renderer import ShapeRenderer, render_shape, shape_path
from .drawing_canvas import DrawingCanvas
from .code_preview_dialog import CodePreviewDialog
from .main_window import MainWindow, ToolPalette

__all__ = [
    "QtTextMeasurer",
    "qfont_for",
    "ShapeRenderer",
    "render_shape",
    "shape_path",
    "DrawingCanvas",
    "CodePreviewDialog",
    "MainWindow",
    "ToolPalette",
]
