"""
Drawing canvas widget.

A QWidget that paints the shapes of a CanvasController and translates Qt
mouse, wheel and key events into canvas-space PointerEvents for it.
"""

import logging
from typing import Optional

from PyQt6.QtCore import Qt, QPointF, QRectF, pyqtSignal
from PyQt6.QtGui import (
    QPainter, QPen, QColor, QMouseEvent, QWheelEvent, QKeyEvent, QPaintEvent,
)
from PyQt6.QtWidgets import QWidget

from models import CursorKind, MouseButton, Point, PointerEvent
from services.canvas_controller import CanvasController
from services.geometry import compute_vertices
from .shape_renderer import ShapeRenderer

logger = logging.getLogger(__name__)


COLORS = {
    "background": QColor("#E5E7EB"),
    "grid": QColor("#E5E7EB"),
    "border": QColor("#9CA3AF"),
}

CURSOR_SHAPES = {
    CursorKind.DEFAULT: Qt.CursorShape.ArrowCursor,
    CursorKind.CROSSHAIR: Qt.CursorShape.CrossCursor,
    CursorKind.EW_RESIZE: Qt.CursorShape.SizeHorCursor,
    CursorKind.NS_RESIZE: Qt.CursorShape.SizeVerCursor,
    CursorKind.NWSE_RESIZE: Qt.CursorShape.SizeFDiagCursor,
    CursorKind.NESW_RESIZE: Qt.CursorShape.SizeBDiagCursor,
    CursorKind.GRAB: Qt.CursorShape.OpenHandCursor,
    CursorKind.GRABBING: Qt.CursorShape.ClosedHandCursor,
    CursorKind.ROTATE: Qt.CursorShape.CrossCursor,
    CursorKind.ADJUST: Qt.CursorShape.PointingHandCursor,
    CursorKind.COPY: Qt.CursorShape.DragCopyCursor,
}

_BUTTONS = {
    Qt.MouseButton.LeftButton: MouseButton.LEFT,
    Qt.MouseButton.MiddleButton: MouseButton.MIDDLE,
    Qt.MouseButton.RightButton: MouseButton.RIGHT,
}


class DrawingCanvas(QWidget):
    """
    Canvas view of one CanvasController.

    Signals:
        pointerMoved(float, float): Canvas position under the pointer
    """

    pointerMoved = pyqtSignal(float, float)

    def __init__(self, controller: CanvasController, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.controller = controller
        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setContextMenuPolicy(Qt.ContextMenuPolicy.PreventContextMenu)
        self.setMinimumSize(400, 300)

        controller.previewChanged.connect(self.update)
        controller.viewChanged.connect(self.update)
        controller.selectionChanged.connect(self.update)
        controller.toolChanged.connect(self.update)
        controller.store.shapesChanged.connect(self.update)

    # =========================================================================
    # Event translation
    # =========================================================================

    def _pointer_event(self, event, button: MouseButton = MouseButton.LEFT) -> PointerEvent:
        pos = event.position()
        screen = Point(pos.x(), pos.y())
        shift = bool(event.modifiers() & Qt.KeyboardModifier.ShiftModifier)
        return PointerEvent(self.controller.view.to_canvas(screen), screen, button, shift)

    def _update_cursor(self, position: Point):
        kind = self.controller.cursor_at(position)
        self.setCursor(CURSOR_SHAPES.get(kind, Qt.CursorShape.ArrowCursor))

    def mousePressEvent(self, event: QMouseEvent):
        button = _BUTTONS.get(event.button())
        if button is None:
            super().mousePressEvent(event)
            return
        pointer = self._pointer_event(event, button)
        self.controller.press(pointer)
        self._update_cursor(pointer.position)
        event.accept()

    def mouseMoveEvent(self, event: QMouseEvent):
        pointer = self._pointer_event(event)
        self.controller.move(pointer)
        self._update_cursor(pointer.position)
        self.pointerMoved.emit(pointer.position.x, pointer.position.y)

    def mouseReleaseEvent(self, event: QMouseEvent):
        button = _BUTTONS.get(event.button(), MouseButton.LEFT)
        pointer = self._pointer_event(event, button)
        self.controller.release(pointer)
        self._update_cursor(pointer.position)
        event.accept()

    def mouseDoubleClickEvent(self, event: QMouseEvent):
        if event.button() == Qt.MouseButton.LeftButton:
            self.controller.double_click(self._pointer_event(event))
        event.accept()

    def wheelEvent(self, event: QWheelEvent):
        """Zoom about the pointer, one step per wheel notch."""
        delta = event.angleDelta().y()
        if delta == 0:
            return
        pos = event.position()
        self.controller.zoom(Point(pos.x(), pos.y()), zoom_in=delta > 0)
        event.accept()

    def keyPressEvent(self, event: QKeyEvent):
        key = event.key()
        if key == Qt.Key.Key_Escape:
            self.controller.cancel()
        elif key in (Qt.Key.Key_Return, Qt.Key.Key_Enter):
            closed = bool(event.modifiers() & Qt.KeyboardModifier.ShiftModifier)
            self.controller.complete_path(is_closed=closed)
        elif key in (Qt.Key.Key_Delete, Qt.Key.Key_Backspace):
            self.controller.delete_selected()
        else:
            super().keyPressEvent(event)

    # =========================================================================
    # Painting
    # =========================================================================

    def paintEvent(self, event: QPaintEvent):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.fillRect(self.rect(), COLORS["background"])

        controller = self.controller
        view = controller.view
        canvas = controller.settings.canvas
        editor = controller.settings.editor

        painter.save()
        painter.translate(view.x, view.y)
        painter.scale(view.scale, view.scale)

        page = QRectF(0, 0, canvas.width, canvas.height)
        painter.fillRect(page, QColor(canvas.background))
        if editor.show_grid and editor.grid_size > 0:
            self._draw_grid(painter, page, editor.grid_size, view.scale)
        painter.setPen(QPen(COLORS["border"], 0))
        painter.drawRect(page)

        ShapeRenderer.render_all(painter, controller.display_shapes(), controller.measurer,
                                 controller.rotation_centers())
        painter.restore()

        selected = controller.selected_shape
        if selected is not None and not selected.is_hidden:
            vertices = compute_vertices(selected, controller.point_edit_center(), controller.measurer)
            ShapeRenderer.render_selection_outline(painter, vertices, view)
            ShapeRenderer.render_handles(painter, controller.handles(), view)
        painter.end()

    def _draw_grid(self, painter: QPainter, page: QRectF, grid_size: int, scale: float):
        """Grid lines across the page; skipped when they would be denser than 4px."""
        if grid_size * scale < 4:
            return
        painter.setPen(QPen(COLORS["grid"], 0))
        x = page.left()
        while x <= page.right():
            painter.drawLine(QPointF(x, page.top()), QPointF(x, page.bottom()))
            x += grid_size
        y = page.top()
        while y <= page.bottom():
            painter.drawLine(QPointF(page.left(), y), QPointF(page.right(), y))
            y += grid_size
