"""
Shape Renderer.

Renders editor shapes to a QPainter in canvas coordinates. Paths are built
in each shape's unrotated local frame and the painter is rotated about the
shape's rotation center, which matches the clockwise-positive rotation of
the geometry library on Qt's Y-down device.

Also draws the selection overlay (handles) in screen coordinates.
"""

import base64
import math
from typing import Dict, Iterable, List, Optional, Sequence

from PyQt6.QtCore import Qt, QRectF, QPointF
from PyQt6.QtGui import (
    QPainter, QColor, QPen, QBrush, QPainterPath, QPixmap, QPolygonF, QTransform,
)

from models import (
    ArcStyle, ArrowStyle, CapStyle, HandleKind, JoinStyle,
    NONE_COLOR, Point, Shape, ShapeType, ViewTransform, is_line_like,
)
from services.geometry import (
    local_vertices, rotation_center, spline_approximation,
)
from services.handles import HANDLE_SIZE, Handle
from services.text_layout import FontSpec, TextMeasurer, layout_text
from .text_measurer import qfont_for


_JOIN_STYLES = {
    JoinStyle.ROUND: Qt.PenJoinStyle.RoundJoin,
    JoinStyle.BEVEL: Qt.PenJoinStyle.BevelJoin,
    JoinStyle.MITER: Qt.PenJoinStyle.MiterJoin,
}

_CAP_STYLES = {
    CapStyle.BUTT: Qt.PenCapStyle.FlatCap,
    CapStyle.PROJECTING: Qt.PenCapStyle.SquareCap,
    CapStyle.ROUND: Qt.PenCapStyle.RoundCap,
}


def _points_to_path(points: Sequence[Point], closed: bool) -> QPainterPath:
    path = QPainterPath()
    if not points:
        return path
    path.moveTo(QPointF(points[0].x, points[0].y))
    for p in points[1:]:
        path.lineTo(QPointF(p.x, p.y))
    if closed:
        path.closeSubpath()
    return path


def _arc_path(shape: Shape) -> QPainterPath:
    """Arc in Qt's angle convention, which is counter-clockwise like Tk."""
    rect = QRectF(shape.x, shape.y, shape.width, shape.height)
    path = QPainterPath()
    if shape.style == ArcStyle.PIESLICE:
        path.moveTo(rect.center())
        path.arcTo(rect, shape.start, shape.extent)
        path.closeSubpath()
    else:
        path.arcMoveTo(rect, shape.start)
        path.arcTo(rect, shape.start, shape.extent)
        if shape.style == ArcStyle.CHORD:
            path.closeSubpath()
    return path


def shape_path(shape: Shape) -> QPainterPath:
    """
    Outline of a shape in its unrotated local frame.

    Text, images and bitmaps are painted directly and return an empty path.
    """
    t = shape.type
    if t == ShapeType.RECTANGLE:
        return _points_to_path(local_vertices(shape), True)
    if t == ShapeType.ELLIPSE:
        path = QPainterPath()
        path.addEllipse(QPointF(shape.cx, shape.cy), shape.rx, shape.ry)
        return path
    if t == ShapeType.ARC:
        return _arc_path(shape)
    if t in (ShapeType.LINE, ShapeType.PENCIL):
        return _points_to_path(shape.points, False)
    if t in (ShapeType.POLYLINE, ShapeType.BEZIER):
        return _points_to_path(spline_approximation(shape), shape.is_closed)
    if t in (ShapeType.TEXT, ShapeType.IMAGE, ShapeType.BITMAP):
        return QPainterPath()
    return _points_to_path(local_vertices(shape), True)


def _arrow_head(tip: Point, tail: Point, shape: Shape) -> Optional[QPolygonF]:
    """Tk-style arrowhead: (d1, d2, d3) scaled by the stroke width."""
    length = math.hypot(tip.x - tail.x, tip.y - tail.y)
    if length == 0:
        return None
    width = shape.stroke_width if shape.stroke_width > 0 else 1.0
    d1, d2, d3 = (v * width for v in shape.arrowshape)
    ux, uy = (tip.x - tail.x) / length, (tip.y - tail.y) / length
    px, py = -uy, ux
    neck = QPointF(tip.x - ux * d1, tip.y - uy * d1)
    back_x, back_y = tip.x - ux * d2, tip.y - uy * d2
    return QPolygonF([
        QPointF(tip.x, tip.y),
        QPointF(back_x + px * d3, back_y + py * d3),
        neck,
        QPointF(back_x - px * d3, back_y - py * d3),
    ])


class ShapeRenderer:
    """
    Static utility class for painting shapes.

    Provides methods to:
    - Render the shape list in paint order
    - Render a single shape with its fill, stroke, dash and arrows
    - Draw the selection handles of the active tool
    """

    SELECTION_COLOR = QColor("#3B82F6")
    HANDLE_FILL = QColor("#FFFFFF")
    SPECIAL_HANDLE_COLOR = QColor("#F59E0B")
    PATH_PREVIEW_COLOR = QColor("#6B7280")

    @staticmethod
    def render_all(painter: QPainter, shapes: Iterable[Shape],
                   measurer: Optional[TextMeasurer] = None,
                   centers: Optional[Dict[str, Point]] = None):
        """Render shapes in paint order; ``centers`` overrides rotation centers by shape id."""
        centers = centers or {}
        for shape in shapes:
            ShapeRenderer.render(painter, shape, measurer, centers.get(shape.id))

    @staticmethod
    def rotation_transform(shape: Shape, measurer: Optional[TextMeasurer] = None,
                           center: Optional[Point] = None) -> QTransform:
        """Local-to-canvas transform rotating the shape about ``center`` or its own center."""
        transform = QTransform()
        if not shape.rotation:
            return transform
        if center is None:
            center = rotation_center(shape, measurer)
        if center is not None:
            transform.translate(center.x, center.y)
            transform.rotate(shape.rotation)
            transform.translate(-center.x, -center.y)
        return transform

    @staticmethod
    def render(painter: QPainter, shape: Shape, measurer: Optional[TextMeasurer] = None,
               center: Optional[Point] = None):
        """
        Render one shape in canvas coordinates.

        Args:
            painter: QPainter with the view transform already applied
            shape: Shape to render; hidden shapes are skipped
            measurer: Text measurement collaborator for text shapes
            center: Rotation center to use instead of the shape's own, as
                held by a running vertex edit
        """
        if shape.is_hidden:
            return

        painter.save()
        painter.setTransform(ShapeRenderer.rotation_transform(shape, measurer, center), True)
        if shape.is_disabled:
            painter.setOpacity(0.6)

        t = shape.type
        if t == ShapeType.TEXT:
            ShapeRenderer._render_text(painter, shape, measurer)
        elif t == ShapeType.IMAGE:
            ShapeRenderer._render_image(painter, shape)
        elif t == ShapeType.BITMAP:
            ShapeRenderer._render_bitmap(painter, shape)
        else:
            ShapeRenderer._render_path(painter, shape)

        painter.restore()

    @staticmethod
    def stroke_pen(shape: Shape) -> QPen:
        if shape.stroke == NONE_COLOR or shape.stroke_width <= 0:
            return QPen(Qt.PenStyle.NoPen)
        pen = QPen(QColor(shape.stroke), shape.stroke_width)
        pen.setJoinStyle(_JOIN_STYLES[shape.joinstyle])
        capstyle = getattr(shape, "capstyle", CapStyle.BUTT)
        pen.setCapStyle(_CAP_STYLES[capstyle])
        if shape.dash:
            pattern = [float(max(1, d)) for d in shape.dash]
            if len(pattern) % 2:
                pattern = pattern * 2
            pen.setDashPattern(pattern)
            pen.setDashOffset(shape.dashoffset)
        return pen

    @staticmethod
    def _render_path(painter: QPainter, shape: Shape):
        path = shape_path(shape)
        open_path = is_line_like(shape) or (
            shape.type == ShapeType.ARC and shape.style == ArcStyle.ARC)

        if shape.fill != NONE_COLOR and not open_path:
            painter.fillPath(path, QBrush(QColor(shape.fill)))

        pen = ShapeRenderer.stroke_pen(shape)
        if pen.style() == Qt.PenStyle.NoPen:
            return
        painter.strokePath(path, pen)

        arrow = getattr(shape, "arrow", ArrowStyle.NONE)
        if arrow != ArrowStyle.NONE and len(shape.points) >= 2:
            points = shape.points
            heads = []
            if arrow in (ArrowStyle.FIRST, ArrowStyle.BOTH):
                heads.append(_arrow_head(points[0], points[1], shape))
            if arrow in (ArrowStyle.LAST, ArrowStyle.BOTH):
                heads.append(_arrow_head(points[-1], points[-2], shape))
            painter.setPen(Qt.PenStyle.NoPen)
            painter.setBrush(QBrush(QColor(shape.stroke)))
            for head in heads:
                if head is not None:
                    painter.drawPolygon(head)

    @staticmethod
    def _render_text(painter: QPainter, shape: Shape, measurer: Optional[TextMeasurer]):
        if shape.fill == NONE_COLOR:
            return
        layout = layout_text(shape, measurer)
        painter.setFont(qfont_for(FontSpec.from_shape(shape)))
        painter.setPen(QPen(QColor(shape.fill)))
        for line, baseline in zip(layout.lines, layout.baselines):
            painter.drawText(QPointF(baseline.x, baseline.y), line)

    @staticmethod
    def _image_pixmap(src: str) -> QPixmap:
        pixmap = QPixmap()
        if src.startswith("data:") and "," in src:
            pixmap.loadFromData(base64.b64decode(src.split(",", 1)[1]))
        elif src:
            pixmap.load(src)
        return pixmap

    @staticmethod
    def _render_image(painter: QPainter, shape: Shape):
        rect = QRectF(shape.x, shape.y, shape.width, shape.height)
        pixmap = ShapeRenderer._image_pixmap(shape.src)
        if pixmap.isNull():
            painter.setPen(QPen(ShapeRenderer.PATH_PREVIEW_COLOR, 1, Qt.PenStyle.DashLine))
            painter.setBrush(Qt.BrushStyle.NoBrush)
            painter.drawRect(rect)
            painter.drawLine(rect.topLeft(), rect.bottomRight())
            painter.drawLine(rect.topRight(), rect.bottomLeft())
            return
        painter.drawPixmap(rect, pixmap, QRectF(pixmap.rect()))

    @staticmethod
    def _render_bitmap(painter: QPainter, shape: Shape):
        rect = QRectF(shape.x, shape.y, shape.width, shape.height)
        if shape.background != NONE_COLOR:
            painter.fillRect(rect, QColor(shape.background))
        painter.setPen(QPen(QColor(shape.foreground), 1))
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawRect(rect)
        painter.drawText(rect, Qt.AlignmentFlag.AlignCenter, shape.bitmap_type.value)

    # =========================================================================
    # Overlay
    # =========================================================================

    @staticmethod
    def render_handles(painter: QPainter, handles: List[Handle], view: ViewTransform):
        """
        Draw handles in screen space so they keep a constant size.

        Segment handles are drawn as small dots at the edge midpoints.
        """
        if not handles:
            return
        painter.save()
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        half = HANDLE_SIZE / 2
        outline = QPen(ShapeRenderer.SELECTION_COLOR, 1)

        for handle in handles:
            pos = view.to_screen(handle.position)
            center = QPointF(pos.x, pos.y)
            painter.setPen(outline)
            if handle.kind == HandleKind.SEGMENT:
                painter.setBrush(QBrush(ShapeRenderer.SELECTION_COLOR))
                painter.drawEllipse(center, half / 2, half / 2)
            elif handle.kind in (HandleKind.ROTATE, HandleKind.VERTEX):
                painter.setBrush(QBrush(ShapeRenderer.HANDLE_FILL))
                painter.drawEllipse(center, half, half)
            elif handle.kind == HandleKind.RESIZE:
                painter.setBrush(QBrush(ShapeRenderer.HANDLE_FILL))
                painter.drawRect(QRectF(pos.x - half, pos.y - half, HANDLE_SIZE, HANDLE_SIZE))
            else:
                painter.setBrush(QBrush(ShapeRenderer.SPECIAL_HANDLE_COLOR))
                painter.drawEllipse(center, half, half)
        painter.restore()

    @staticmethod
    def render_selection_outline(painter: QPainter, vertices: Sequence[Point], view: ViewTransform):
        """Dashed outline around the selected shape's rendered vertices."""
        if len(vertices) < 2:
            return
        painter.save()
        pen = QPen(ShapeRenderer.SELECTION_COLOR, 1, Qt.PenStyle.DashLine)
        painter.setPen(pen)
        painter.setBrush(Qt.BrushStyle.NoBrush)
        screen = [view.to_screen(p) for p in vertices]
        painter.drawPolygon(QPolygonF([QPointF(p.x, p.y) for p in screen]))
        painter.restore()


def render_shape(painter: QPainter, shape: Shape, measurer: Optional[TextMeasurer] = None):
    """Convenience function for rendering one shape."""
    ShapeRenderer.render(painter, shape, measurer)
