"""
Canvas Controller Service.

Ties the shape store, the editor settings and the interaction state machine
together for a canvas view. The view forwards pointer and key input already
mapped to canvas coordinates; the controller decides what the press grabs
(handle, shape or empty canvas), runs the state machine, and merges the
committed shape back into the store.

Usage:
    controller = CanvasController(store, settings)
    controller.set_tool(Tool.RECTANGLE)

    controller.press(event)
    controller.move(event)
    controller.release(event)
"""

import logging
from typing import Dict, List, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from models import (
    ActionKind, CursorKind, DrawMode, InteractionState, MouseButton, Point,
    PointerEvent, Shape, Tool, ViewTransform, action_kind,
)
from .handles import (
    HIT_TOLERANCE, Handle, edit_point_handles, hit_test_handles,
    selection_handles, shape_at,
)
from .interaction import (
    InteractionContext, PathBuilder, PendingImage, begin_interaction,
    cancel_interaction, commit_interaction, snap_point, update_interaction,
)
from .settings_manager import AppSettings
from .shape_store import ShapeStore
from .text_layout import TextMeasurer

logger = logging.getLogger(__name__)

# Pan offset leaves a margin around the page at startup
INITIAL_VIEW = ViewTransform(1.0, 50.0, 50.0)


# Cursor shown while an action is in progress
_ACTION_CURSORS = {
    ActionKind.DRAWING: CursorKind.CROSSHAIR,
    ActionKind.DRAGGING: CursorKind.GRABBING,
    ActionKind.DUPLICATING: CursorKind.COPY,
    ActionKind.PANNING: CursorKind.GRABBING,
    ActionKind.ROTATING: CursorKind.ROTATE,
    ActionKind.POINT_EDITING: CursorKind.GRABBING,
}


class CanvasController(QObject):
    """
    Editing session of one canvas.

    Holds the active tool, the selection, the view transform, the running
    interaction and the multi-click path under construction.

    Signals:
        selectionChanged(object): Selected shape id, or None
        toolChanged(object): The new Tool
        viewChanged(): Pan or zoom changed
        previewChanged(): The transient preview changed (repaint needed)
    """

    selectionChanged = pyqtSignal(object)
    toolChanged = pyqtSignal(object)
    viewChanged = pyqtSignal()
    previewChanged = pyqtSignal()

    def __init__(self, store: Optional[ShapeStore] = None,
                 settings: Optional[AppSettings] = None,
                 measurer: Optional[TextMeasurer] = None,
                 parent: Optional[QObject] = None):
        super().__init__(parent)
        self._store = store if store is not None else ShapeStore()
        self._settings = settings if settings is not None else AppSettings()
        self._measurer = measurer
        self._tool = Tool.SELECT
        self._selected_id: Optional[str] = None
        self._view = INITIAL_VIEW
        self._state: Optional[InteractionState] = None
        self._path = PathBuilder(Tool.POLYLINE)
        self._pointer: Optional[Point] = None
        self.pending_image: Optional[PendingImage] = None

        self._store.shapeRemoved.connect(self._on_shape_removed)

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def store(self) -> ShapeStore:
        return self._store

    @property
    def settings(self) -> AppSettings:
        return self._settings

    @property
    def measurer(self) -> Optional[TextMeasurer]:
        return self._measurer

    @property
    def tool(self) -> Tool:
        return self._tool

    @property
    def view(self) -> ViewTransform:
        return self._view

    @property
    def state(self) -> Optional[InteractionState]:
        return self._state

    @property
    def path_builder(self) -> PathBuilder:
        return self._path

    @property
    def selected_id(self) -> Optional[str]:
        return self._selected_id

    @property
    def selected_shape(self) -> Optional[Shape]:
        """Selected shape as currently displayed (the preview while editing it)."""
        if self._selected_id is None:
            return None
        preview = self.preview
        if preview is not None and preview.id == self._selected_id:
            return preview
        return self._store.get(self._selected_id)

    @property
    def preview(self) -> Optional[Shape]:
        return self._state.preview if self._state is not None else None

    @property
    def is_interacting(self) -> bool:
        return self._state is not None

    def context(self) -> InteractionContext:
        """Interaction settings for the current editor state."""
        editor = self._settings.editor
        drawing = self._settings.drawing
        try:
            draw_mode = DrawMode(editor.draw_mode)
        except ValueError:
            draw_mode = DrawMode.CORNER
        return InteractionContext(
            draw_mode=draw_mode,
            snap_step=float(editor.grid_snap_step) if editor.snap_to_grid else 0.0,
            drag_threshold=float(editor.drag_threshold),
            fill_color=drawing.fill_color,
            stroke_color=drawing.stroke_color,
            stroke_width=float(drawing.stroke_width),
            number_of_sides=int(drawing.number_of_sides),
            text_font=drawing.text_font,
            text_font_size=float(drawing.text_font_size),
            text_color=drawing.text_color,
            view=self._view,
            measurer=self._measurer,
            pending_image=self.pending_image,
        )

    # =========================================================================
    # Tool, selection and view
    # =========================================================================

    def set_tool(self, tool: Tool):
        """Switch tools, abandoning any running interaction or open path."""
        if tool == self._tool:
            return
        self.cancel()
        self._tool = tool
        self._path = PathBuilder(tool if tool.is_multi_click else Tool.POLYLINE)
        if tool.is_creation_tool:
            self.select(None)
        logger.debug(f"Tool changed to {tool.value}")
        self.toolChanged.emit(tool)

    def select(self, shape_id: Optional[str]):
        if shape_id == self._selected_id:
            return
        self._selected_id = shape_id
        self.selectionChanged.emit(shape_id)

    def set_view(self, view: ViewTransform):
        if view == self._view:
            return
        self._view = view
        self.viewChanged.emit()

    def zoom(self, screen: Point, zoom_in: bool):
        """One wheel step of zoom about the widget-space position ``screen``."""
        self.set_view(self._view.zoomed_at(screen, zoom_in))

    def reset_view(self):
        self.set_view(INITIAL_VIEW)

    def delete_selected(self) -> Optional[Shape]:
        if self._selected_id is None or self._selected_id not in self._store:
            return None
        return self._store.remove(self._selected_id)

    def _on_shape_removed(self, shape_id: str):
        if shape_id == self._selected_id:
            self.select(None)

    # =========================================================================
    # Display
    # =========================================================================

    def display_shapes(self) -> List[Shape]:
        """
        Shapes to paint, bottom to top.

        The interaction preview replaces the stored shape with its id, or is
        painted on top when it is new (drawing, duplicating). The open path
        preview comes last.
        """
        shapes = list(self._store.shapes)
        preview = self.preview
        if preview is not None:
            index = self._store.index_of(preview.id)
            if action_kind(self._state) == ActionKind.DUPLICATING:
                shapes.append(preview)
            elif index >= 0:
                shapes[index] = preview
            else:
                shapes.append(preview)

        path_preview = self.path_preview()
        if path_preview is not None:
            shapes.append(path_preview)
        return shapes

    def path_preview(self) -> Optional[Shape]:
        if not self._path.is_active:
            return None
        return self._path.preview_shape(self._pointer, self.context())

    def point_edit_center(self) -> Optional[Point]:
        """Rotation center held fixed by a running vertex edit."""
        if action_kind(self._state) == ActionKind.POINT_EDITING:
            return self._state.action.center
        return None

    def rotation_centers(self) -> Dict[str, Point]:
        """Rotation centers that override a displayed shape's own, by shape id."""
        if action_kind(self._state) == ActionKind.POINT_EDITING:
            action = self._state.action
            return {action.initial_shape.id: action.center}
        return {}

    def handles(self) -> List[Handle]:
        """Handles of the selected shape for the active tool."""
        shape = self.selected_shape
        if shape is None or shape.is_hidden:
            return []
        if self._tool == Tool.EDIT_POINTS:
            return edit_point_handles(shape, self.point_edit_center(),
                                      self._view.scale, self._measurer)
        if self._tool == Tool.SELECT and not shape.is_disabled:
            return selection_handles(shape, self._view.scale, self._measurer)
        return []

    def cursor_at(self, position: Point) -> CursorKind:
        """Cursor for the pointer at a canvas position."""
        kind = action_kind(self._state)
        if kind in _ACTION_CURSORS:
            return _ACTION_CURSORS[kind]
        if self._state is not None:
            return CursorKind.ADJUST

        handle = hit_test_handles(self.handles(), position, self._view.scale)
        if handle is not None:
            return handle.cursor
        if self._tool.is_creation_tool:
            return CursorKind.CROSSHAIR
        if self._pick(position) is not None:
            return CursorKind.GRAB
        return CursorKind.DEFAULT

    def _pick(self, position: Point) -> Optional[Shape]:
        tolerance = HIT_TOLERANCE / self._view.scale
        return shape_at(self._store.shapes, position, tolerance, self._measurer)

    # =========================================================================
    # Pointer input
    # =========================================================================

    def press(self, event: PointerEvent):
        """Pointer press in canvas coordinates."""
        if self._state is not None:
            return

        ctx = self.context()
        if self._tool.is_multi_click and event.button == MouseButton.LEFT:
            self._path.add_point(snap_point(event.position, ctx.snap_step))
            self.previewChanged.emit()
            return

        handle = None
        target = None
        if event.button == MouseButton.LEFT and self._tool in (Tool.SELECT, Tool.EDIT_POINTS):
            handle = hit_test_handles(self.handles(), event.position, self._view.scale)
        if handle is not None:
            target = self.selected_shape
        else:
            target = self._pick(event.position)
            if target is not None and not self._tool.is_creation_tool:
                self.select(target.id)
            elif target is None and self._tool == Tool.SELECT and event.button == MouseButton.LEFT:
                self.select(None)

        if self._tool == Tool.EDIT_POINTS and handle is None and event.button == MouseButton.LEFT:
            # Edit-points presses only grab vertices and segments
            return

        self._state = begin_interaction(event, self._tool, target, handle, ctx)
        if self._state is not None:
            self.previewChanged.emit()

    def move(self, event: PointerEvent):
        """Pointer move in canvas coordinates."""
        self._pointer = event.position
        if self._state is None:
            if self._path.is_active:
                self._pointer = snap_point(event.position, self.context().snap_step)
                self.previewChanged.emit()
            return

        self._state, _ = update_interaction(self._state, event, self.context())
        if self._state.kind == ActionKind.PANNING and self._state.view is not None:
            self.set_view(self._state.view)
        self.previewChanged.emit()

    def release(self, event: PointerEvent) -> Optional[Shape]:
        """
        Pointer release; commits the running interaction.

        Returns:
            The shape merged into the store, or None
        """
        if self._state is None:
            return None

        state = self._state
        self._state = None
        result = commit_interaction(state, self.context())
        if result is not None:
            self._store.upsert(result)
            if state.kind in (ActionKind.DRAWING, ActionKind.DUPLICATING):
                self.select(result.id)
        self.previewChanged.emit()
        return result

    def double_click(self, event: PointerEvent) -> Optional[Shape]:
        """Double click finishes an open multi-click path."""
        if not self._path.is_active:
            return None
        return self.complete_path(is_closed=False)

    def complete_path(self, is_closed: bool = False) -> Optional[Shape]:
        """Create the multi-click path shape, open or closed."""
        shape = self._path.complete(is_closed, self.context())
        self._pointer = None
        if shape is not None:
            self._store.add(shape)
            self.select(shape.id)
        self.previewChanged.emit()
        return shape

    def cancel(self):
        """Escape: drop the running interaction and any open path."""
        had_work = self._state is not None or self._path.is_active
        self._state = cancel_interaction(self._state)
        self._path.cancel()
        self._pointer = None
        if had_work:
            self.previewChanged.emit()


__all__ = [
    'CanvasController',
]
