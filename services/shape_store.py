"""
Shape Store Service.

Owns the editor's shape list. Every change replaces the stored tuple, so
observers can compare references to detect a change, and emits Qt signals
for the canvas and other views.

Usage:
    store = ShapeStore()
    store.shapesChanged.connect(canvas.update)

    store.add(shape)
    store.update(shape.copy(fill="#ff0000"))
"""

import logging
from typing import Iterable, Optional, Tuple

from PyQt6.QtCore import QObject, pyqtSignal

from models import Shape

logger = logging.getLogger(__name__)


class ShapeStore(QObject):
    """
    Ordered shape list; later shapes paint on top.

    Signals:
        shapeAdded(str): A shape was added (shape_id)
        shapeChanged(str): A shape was replaced (shape_id)
        shapeRemoved(str): A shape was removed (shape_id)
        shapesChanged(): The list changed in any way
    """

    shapeAdded = pyqtSignal(str)
    shapeChanged = pyqtSignal(str)
    shapeRemoved = pyqtSignal(str)
    shapesChanged = pyqtSignal()

    def __init__(self, shapes: Iterable[Shape] = (), parent: Optional[QObject] = None):
        super().__init__(parent)
        self._shapes: Tuple[Shape, ...] = tuple(shapes)

    @property
    def shapes(self) -> Tuple[Shape, ...]:
        return self._shapes

    def __len__(self) -> int:
        return len(self._shapes)

    def __iter__(self):
        return iter(self._shapes)

    def __contains__(self, shape_id: str) -> bool:
        return self.index_of(shape_id) >= 0

    def index_of(self, shape_id: str) -> int:
        """Position of a shape in paint order, or -1."""
        for i, shape in enumerate(self._shapes):
            if shape.id == shape_id:
                return i
        return -1

    def get(self, shape_id: str) -> Optional[Shape]:
        index = self.index_of(shape_id)
        return self._shapes[index] if index >= 0 else None

    def add(self, shape: Shape):
        """Append a shape on top of the others."""
        self._shapes = self._shapes + (shape,)
        logger.debug(f"Added {shape.type.value} {shape.id}")
        self.shapeAdded.emit(shape.id)
        self.shapesChanged.emit()

    def update(self, shape: Shape):
        """
        Replace the stored shape with the same id.

        Raises:
            KeyError: if no shape has that id
        """
        index = self.index_of(shape.id)
        if index < 0:
            raise KeyError(shape.id)
        if self._shapes[index] is shape:
            return
        self._shapes = self._shapes[:index] + (shape,) + self._shapes[index + 1:]
        logger.debug(f"Updated {shape.type.value} {shape.id}")
        self.shapeChanged.emit(shape.id)
        self.shapesChanged.emit()

    def upsert(self, shape: Shape):
        """Replace the shape with the same id, or add it when the id is new."""
        if shape.id in self:
            self.update(shape)
        else:
            self.add(shape)

    def remove(self, shape_id: str) -> Shape:
        """
        Remove and return a shape.

        Raises:
            KeyError: if no shape has that id
        """
        index = self.index_of(shape_id)
        if index < 0:
            raise KeyError(shape_id)
        removed = self._shapes[index]
        self._shapes = self._shapes[:index] + self._shapes[index + 1:]
        logger.debug(f"Removed {removed.type.value} {shape_id}")
        self.shapeRemoved.emit(shape_id)
        self.shapesChanged.emit()
        return removed

    def clear(self):
        if not self._shapes:
            return
        self._shapes = ()
        logger.debug("Cleared all shapes")
        self.shapesChanged.emit()

    def replace_all(self, shapes: Iterable[Shape]):
        self._shapes = tuple(shapes)
        logger.debug(f"Loaded {len(self._shapes)} shapes")
        self.shapesChanged.emit()
