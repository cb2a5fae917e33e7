"""
Main application window.

Assembles the tool bar, the drawing canvas and the status bar, and wires
menu actions (export, image insertion, path completion) to the canvas
controller.
"""

import logging
from pathlib import Path
from typing import Dict

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction, QActionGroup, QKeySequence, QPixmap
from PyQt6.QtWidgets import (
    QMainWindow, QWidget, QToolBar, QLabel, QStatusBar, QMessageBox,
    QFileDialog,
)

from models import DrawMode, Tool, TOOL_DISPLAY_NAMES
from services import (
    CanvasController, PendingImage, ShapeStore, TkinterScriptGenerator,
    get_settings,
)
from .code_preview_dialog import CodePreviewDialog
from .drawing_canvas import DrawingCanvas
from .text_measurer import QtTextMeasurer

logger = logging.getLogger(__name__)


# Tool bar layout; None marks a separator
TOOL_ORDER = [
    Tool.SELECT, Tool.EDIT_POINTS, None,
    Tool.LINE, Tool.PENCIL, Tool.POLYLINE, Tool.BEZIER, None,
    Tool.RECTANGLE, Tool.SQUARE, Tool.CIRCLE, Tool.ELLIPSE, None,
    Tool.TRIANGLE, Tool.RIGHT_TRIANGLE, Tool.RHOMBUS, Tool.TRAPEZOID,
    Tool.PARALLELOGRAM, Tool.POLYGON, Tool.STAR, None,
    Tool.ARC, Tool.PIESLICE, Tool.CHORD, None,
    Tool.TEXT, Tool.IMAGE, Tool.BITMAP,
]

TOOL_HINTS = {
    Tool.SELECT: "Drag to move • Alt-drag to duplicate • Shift to lock aspect • Middle-drag to pan",
    Tool.EDIT_POINTS: "Drag vertices • Click a segment dot to insert a point",
    Tool.POLYLINE: "Click to add points • Enter or double-click to finish • Shift+Enter to close",
    Tool.BEZIER: "Click to add control points • Enter or double-click to finish • Shift+Enter to close",
    Tool.TEXT: "Click to place text",
    Tool.IMAGE: "Insert an image, then click to place it",
    Tool.BITMAP: "Click to place a bitmap",
}


class ToolPalette(QToolBar):
    """Tool bar with one exclusive checkable action per tool."""

    def __init__(self, parent=None):
        super().__init__("Tools", parent)
        self.setMovable(False)
        self.setToolButtonStyle(Qt.ToolButtonStyle.ToolButtonTextOnly)
        self.setStyleSheet("""
            QToolBar {
                background: #F9FAFB;
                border-bottom: 1px solid #E5E7EB;
                padding: 4px 8px;
                spacing: 2px;
            }
            QToolButton {
                padding: 4px 8px;
                border-radius: 4px;
                font-size: 12px;
                color: #374151;
            }
            QToolButton:checked {
                background: #DBEAFE;
                color: #1D4ED8;
            }
        """)

        self._group = QActionGroup(self)
        self._group.setExclusive(True)
        self._actions: Dict[Tool, QAction] = {}
        for tool in TOOL_ORDER:
            if tool is None:
                self.addSeparator()
                continue
            action = QAction(TOOL_DISPLAY_NAMES[tool], self)
            action.setCheckable(True)
            action.setData(tool)
            self._group.addAction(action)
            self.addAction(action)
            self._actions[tool] = action
        self._actions[Tool.SELECT].setChecked(True)

    @property
    def group(self) -> QActionGroup:
        return self._group

    def set_tool(self, tool: Tool):
        action = self._actions.get(tool)
        if action is not None and not action.isChecked():
            action.setChecked(True)


class MainWindow(QMainWindow):
    """
    Main application window for the canvas editor.

    Layout:
    ┌─────────────────────────────────────────────────────┐
    │  Menu Bar                                           │
    ├─────────────────────────────────────────────────────┤
    │  Tool Palette                                       │
    ├─────────────────────────────────────────────────────┤
    │                                                     │
    │                  Drawing Canvas                     │
    │                                                     │
    ├─────────────────────────────────────────────────────┤
    │  Status Bar                                         │
    └─────────────────────────────────────────────────────┘
    """

    def __init__(self):
        super().__init__()

        # Settings manager (JSON file based)
        self.settings_manager = get_settings()

        self.store = ShapeStore()
        self.controller = CanvasController(
            self.store, self.settings_manager.settings, QtTextMeasurer(), self)
        self.generator = TkinterScriptGenerator()

        self._setup_window()
        self._setup_menu()
        self._setup_toolbar()
        self._setup_central_widget()
        self._setup_status_bar()
        self._connect_signals()

        self._load_window_settings()

    def _load_window_settings(self):
        """Restore window geometry and state."""
        geometry, state = self.settings_manager.get_window_geometry()
        if geometry:
            self.restoreGeometry(geometry)
        if state:
            self.restoreState(state)

    def _save_window_settings(self):
        """Save window geometry and state."""
        self.settings_manager.save_window_geometry(
            bytes(self.saveGeometry()),
            bytes(self.saveState())
        )

    def closeEvent(self, event):
        """Handle window close - save settings."""
        self._save_window_settings()
        super().closeEvent(event)

    def _setup_window(self):
        self.setWindowTitle(f"{self.settings_manager.canvas.project_name} - Canvas Editor")
        self.setMinimumSize(900, 600)
        self.resize(1200, 800)
        self.setStyleSheet("""
            QMainWindow {
                background: #F3F4F6;
            }
        """)

    def _setup_menu(self):
        """Create menu bar."""
        menubar = self.menuBar()

        # File menu
        file_menu = menubar.addMenu("&File")

        new_action = QAction("&New Canvas", self)
        new_action.setShortcut(QKeySequence.StandardKey.New)
        new_action.triggered.connect(self._on_new_canvas)
        file_menu.addAction(new_action)

        file_menu.addSeparator()

        preview_action = QAction("&Preview Tkinter Code...", self)
        preview_action.setShortcut("F5")
        preview_action.triggered.connect(self._on_preview_code)
        file_menu.addAction(preview_action)

        export_action = QAction("&Export Tkinter Script...", self)
        export_action.setShortcut("Ctrl+E")
        export_action.triggered.connect(self._on_export_script)
        file_menu.addAction(export_action)

        file_menu.addSeparator()

        exit_action = QAction("E&xit", self)
        exit_action.setShortcut(QKeySequence.StandardKey.Quit)
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)

        # Edit menu
        edit_menu = menubar.addMenu("&Edit")

        delete_action = QAction("&Delete Selected", self)
        delete_action.setShortcut(QKeySequence.StandardKey.Delete)
        delete_action.triggered.connect(self._on_delete_selected)
        edit_menu.addAction(delete_action)

        cancel_action = QAction("&Cancel Operation", self)
        cancel_action.triggered.connect(self.controller.cancel)
        edit_menu.addAction(cancel_action)

        # Draw menu
        draw_menu = menubar.addMenu("&Draw")

        finish_action = QAction("&Finish Path", self)
        finish_action.triggered.connect(lambda: self._on_complete_path(False))
        draw_menu.addAction(finish_action)

        close_path_action = QAction("&Close Path", self)
        close_path_action.triggered.connect(lambda: self._on_complete_path(True))
        draw_menu.addAction(close_path_action)

        draw_menu.addSeparator()

        image_action = QAction("Insert &Image...", self)
        image_action.setShortcut("Ctrl+I")
        image_action.triggered.connect(self._on_insert_image)
        draw_menu.addAction(image_action)

        draw_menu.addSeparator()

        self._center_mode_action = QAction("Draw From &Center", self)
        self._center_mode_action.setCheckable(True)
        self._center_mode_action.setChecked(self.settings_manager.draw_mode == DrawMode.CENTER)
        self._center_mode_action.toggled.connect(self._on_toggle_center_mode)
        draw_menu.addAction(self._center_mode_action)

        snap_action = QAction("&Snap to Grid", self)
        snap_action.setCheckable(True)
        snap_action.setChecked(self.settings_manager.editor.snap_to_grid)
        snap_action.toggled.connect(self._on_toggle_snap)
        draw_menu.addAction(snap_action)

        # View menu
        view_menu = menubar.addMenu("&View")

        grid_action = QAction("Show &Grid", self)
        grid_action.setCheckable(True)
        grid_action.setChecked(self.settings_manager.editor.show_grid)
        grid_action.toggled.connect(self._on_toggle_grid)
        view_menu.addAction(grid_action)

        reset_view_action = QAction("&Reset View", self)
        reset_view_action.setShortcut("Ctrl+0")
        reset_view_action.triggered.connect(self._on_reset_view)
        view_menu.addAction(reset_view_action)

        # Help menu
        help_menu = menubar.addMenu("&Help")

        about_action = QAction("&About", self)
        about_action.triggered.connect(self._on_about)
        help_menu.addAction(about_action)

    def _setup_toolbar(self):
        self.toolbar = ToolPalette()
        self.addToolBar(self.toolbar)

    def _setup_central_widget(self):
        self.canvas = DrawingCanvas(self.controller)
        self.setCentralWidget(self.canvas)
        self.canvas.setFocus()

    def _setup_status_bar(self):
        """Create status bar."""
        status = QStatusBar()
        status.setStyleSheet("""
            QStatusBar {
                background: #F9FAFB;
                border-top: 1px solid #E5E7EB;
                padding: 4px 8px;
                color: #6B7280;
                font-size: 12px;
            }
        """)
        self.setStatusBar(status)

        self._count_label = QLabel("Shapes: 0")
        status.addWidget(self._count_label)

        self._hint_label = QLabel(TOOL_HINTS[Tool.SELECT])
        status.addWidget(self._hint_label)

        # Spacer
        status.addWidget(QWidget(), 1)

        self._position_label = QLabel("x: 0  y: 0")
        status.addPermanentWidget(self._position_label)

    def _connect_signals(self):
        self.toolbar.group.triggered.connect(self._on_tool_action)
        self.controller.toolChanged.connect(self._on_tool_changed)
        self.store.shapesChanged.connect(self._update_counts)
        self.canvas.pointerMoved.connect(self._on_pointer_moved)

    # =========================================================================
    # Handlers
    # =========================================================================

    def _on_tool_action(self, action: QAction):
        tool = action.data()
        if tool == Tool.IMAGE and self.controller.pending_image is None:
            self._on_insert_image()
            return
        self.controller.set_tool(tool)
        self.canvas.setFocus()

    def _on_tool_changed(self, tool: Tool):
        self.toolbar.set_tool(tool)
        self._hint_label.setText(TOOL_HINTS.get(tool, "Drag to draw • Shift for a square box"))

    def _update_counts(self):
        self._count_label.setText(f"Shapes: {len(self.store)}")

    def _on_pointer_moved(self, x: float, y: float):
        self._position_label.setText(f"x: {x:.0f}  y: {y:.0f}")

    def _on_new_canvas(self):
        if len(self.store) > 0:
            reply = QMessageBox.question(
                self, "New Canvas",
                "Discard all shapes on the current canvas?",
                QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No
            )
            if reply != QMessageBox.StandardButton.Yes:
                return
        self.controller.cancel()
        self.controller.select(None)
        self.store.clear()
        self.statusBar().showMessage("New canvas", 2000)

    def _on_delete_selected(self):
        removed = self.controller.delete_selected()
        if removed is not None:
            self.statusBar().showMessage(f"Deleted {removed.name}", 2000)

    def _on_complete_path(self, closed: bool):
        shape = self.controller.complete_path(is_closed=closed)
        if shape is None:
            self.statusBar().showMessage("Not enough points to finish the path", 2000)

    def _on_insert_image(self):
        """Pick an image file and arm the image tool with it."""
        path, _ = QFileDialog.getOpenFileName(
            self, "Insert Image", "",
            "Images (*.png *.gif *.jpg *.jpeg *.bmp);;All Files (*)"
        )
        if not path:
            self.toolbar.set_tool(self.controller.tool)
            return
        pixmap = QPixmap(path)
        if pixmap.isNull():
            logger.warning(f"Could not load image {path}")
            QMessageBox.warning(self, "Insert Image", f"Could not load image:\n{path}")
            self.toolbar.set_tool(self.controller.tool)
            return
        self.controller.pending_image = PendingImage(path, float(pixmap.width()), float(pixmap.height()))
        self.controller.set_tool(Tool.IMAGE)
        self.statusBar().showMessage(f"Click to place {Path(path).name}", 3000)
        self.canvas.setFocus()

    def _on_toggle_center_mode(self, checked: bool):
        self.settings_manager.draw_mode = DrawMode.CENTER if checked else DrawMode.CORNER

    def _on_toggle_snap(self, checked: bool):
        self.settings_manager.editor.snap_to_grid = checked
        self.settings_manager.save()

    def _on_toggle_grid(self, checked: bool):
        self.settings_manager.editor.show_grid = checked
        self.settings_manager.save()
        self.canvas.update()

    def _on_reset_view(self):
        self.controller.reset_view()

    def _script_name(self) -> str:
        name = self.settings_manager.canvas.project_name.strip().lower().replace(" ", "_")
        return f"{name or 'canvas'}.py"

    def _on_preview_code(self):
        lines = self.generator.generate_lines(self.store.shapes, self.settings_manager.canvas)
        CodePreviewDialog.show_code(
            lines, self._script_name(), self.controller.selected_id, self)

    def _on_export_script(self):
        filepath, _ = QFileDialog.getSaveFileName(
            self, "Export Tkinter Script", self._script_name(),
            "Python Files (*.py);;All Files (*)"
        )
        if not filepath:
            return
        code = self.generator.generate(self.store.shapes, self.settings_manager.canvas)
        try:
            with open(filepath, "w", encoding="utf-8") as f:
                f.write(code)
        except OSError as e:
            logger.error(f"Failed to export script: {e}")
            QMessageBox.critical(self, "Export Failed", f"Could not write the script:\n{e}")
            return
        self.settings_manager.add_recent_file(filepath)
        logger.info(f"Exported {len(self.store)} shapes to {filepath}")
        self.statusBar().showMessage(f"Exported to {Path(filepath).name}", 2000)

    def _on_about(self):
        QMessageBox.about(
            self, "About Canvas Editor",
            "<h3>Canvas Editor</h3>"
            "<p>Draw shapes and export them as a Tkinter Canvas script.</p>"
        )
