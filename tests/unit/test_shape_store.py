"""
Unit tests for the shape store.

Tests:
- Paint order and lookup
- Add, update, upsert, remove and clear
- Signals emitted for each change
"""

import pytest

from services.shape_store import ShapeStore


class SignalRecorder:
    """Collects the store's signal emissions in order."""

    def __init__(self, store: ShapeStore):
        self.events = []
        store.shapeAdded.connect(lambda shape_id: self.events.append(("added", shape_id)))
        store.shapeChanged.connect(lambda shape_id: self.events.append(("changed", shape_id)))
        store.shapeRemoved.connect(lambda shape_id: self.events.append(("removed", shape_id)))
        store.shapesChanged.connect(lambda: self.events.append(("list",)))


class TestLookup:
    """Tests for ordering and lookup."""

    def test_paint_order(self, store, rectangle, ellipse):
        store.add(rectangle)
        store.add(ellipse)
        assert store.shapes == (rectangle, ellipse)
        assert list(store) == [rectangle, ellipse]
        assert len(store) == 2
        assert store.index_of(ellipse.id) == 1

    def test_get_and_contains(self, store, rectangle):
        store.add(rectangle)
        assert store.get(rectangle.id) is rectangle
        assert rectangle.id in store
        assert store.get("missing") is None
        assert "missing" not in store
        assert store.index_of("missing") == -1

    def test_initial_shapes(self, rectangle, ellipse):
        store = ShapeStore([rectangle, ellipse])
        assert len(store) == 2


class TestChanges:
    """Tests for mutating operations and their signals."""

    def test_add_signals(self, store, rectangle):
        recorder = SignalRecorder(store)
        store.add(rectangle)
        assert recorder.events == [("added", rectangle.id), ("list",)]

    def test_update_replaces_in_place(self, store, rectangle, ellipse):
        store.add(rectangle)
        store.add(ellipse)
        recorder = SignalRecorder(store)
        before = store.shapes
        moved = rectangle.copy(x=0)
        store.update(moved)
        assert store.shapes == (moved, ellipse)
        assert store.shapes is not before
        assert recorder.events == [("changed", rectangle.id), ("list",)]

    def test_update_same_object_is_silent(self, store, rectangle):
        store.add(rectangle)
        recorder = SignalRecorder(store)
        store.update(rectangle)
        assert recorder.events == []

    def test_update_unknown_raises(self, store, rectangle):
        with pytest.raises(KeyError):
            store.update(rectangle)

    def test_upsert(self, store, rectangle):
        store.upsert(rectangle)
        store.upsert(rectangle.copy(width=5))
        assert len(store) == 1
        assert store.get(rectangle.id).width == 5

    def test_remove(self, store, rectangle, ellipse):
        store.add(rectangle)
        store.add(ellipse)
        recorder = SignalRecorder(store)
        removed = store.remove(rectangle.id)
        assert removed is rectangle
        assert store.shapes == (ellipse,)
        assert recorder.events == [("removed", rectangle.id), ("list",)]

    def test_remove_unknown_raises(self, store):
        with pytest.raises(KeyError):
            store.remove("missing")

    def test_clear(self, store, rectangle):
        recorder = SignalRecorder(store)
        store.clear()
        assert recorder.events == []
        store.add(rectangle)
        store.clear()
        assert len(store) == 0
        assert recorder.events[-1] == ("list",)

    def test_replace_all(self, store, rectangle, ellipse):
        store.add(rectangle)
        recorder = SignalRecorder(store)
        store.replace_all([ellipse])
        assert store.shapes == (ellipse,)
        assert recorder.events == [("list",)]
