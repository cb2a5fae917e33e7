"""
Geometric value types.

Small immutable types shared by the shape model, the geometry library and
the interaction state machine.
"""

from dataclasses import dataclass
from typing import NamedTuple


class Point(NamedTuple):
    """A 2D point in canvas coordinates (Y grows downward)."""
    x: float
    y: float

    def offset(self, dx: float, dy: float) -> "Point":
        return Point(self.x + dx, self.y + dy)


class BoundingBox(NamedTuple):
    """Axis-aligned box, anchored at its top-left corner."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)

    @classmethod
    def from_points(cls, points) -> "BoundingBox":
        """Create the tightest box around a non-empty point sequence."""
        xs = [p[0] for p in points]
        ys = [p[1] for p in points]
        min_x, min_y = min(xs), min(ys)
        return cls(min_x, min_y, max(xs) - min_x, max(ys) - min_y)

    def contains(self, point: Point, tolerance: float = 0.0) -> bool:
        return (self.x - tolerance <= point.x <= self.right + tolerance and
                self.y - tolerance <= point.y <= self.bottom + tolerance)


# Wheel zoom limits
MIN_ZOOM = 0.05
MAX_ZOOM = 30.0
ZOOM_STEP = 1.1


@dataclass(frozen=True)
class ViewTransform:
    """
    Pan/zoom of the canvas view.

    Screen position = canvas position * scale + (x, y).
    """
    scale: float = 1.0
    x: float = 0.0
    y: float = 0.0

    def to_canvas(self, screen: Point) -> Point:
        """Map a widget-space position into canvas coordinates."""
        return Point((screen.x - self.x) / self.scale, (screen.y - self.y) / self.scale)

    def to_screen(self, point: Point) -> Point:
        return Point(point.x * self.scale + self.x, point.y * self.scale + self.y)

    def panned(self, dx: float, dy: float) -> "ViewTransform":
        return ViewTransform(self.scale, self.x + dx, self.y + dy)

    def zoomed_at(self, screen: Point, zoom_in: bool) -> "ViewTransform":
        """
        Zoom one wheel step keeping the canvas point under `screen` fixed.
        """
        factor = ZOOM_STEP if zoom_in else 1 / ZOOM_STEP
        new_scale = min(MAX_ZOOM, max(MIN_ZOOM, self.scale * factor))
        ratio = new_scale / self.scale
        return ViewTransform(
            new_scale,
            screen.x - (screen.x - self.x) * ratio,
            screen.y - (screen.y - self.y) * ratio,
        )


__all__ = [
    'Point',
    'BoundingBox',
    'ViewTransform',
    'MIN_ZOOM',
    'MAX_ZOOM',
    'ZOOM_STEP',
]
