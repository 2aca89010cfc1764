"""Tests for DrawingEventAdapter: create/edit/delete event handling."""

from datetime import datetime, timezone

import pytest

from agritagger.domain import CreateEvent, DeleteEvent, EditEvent
from agritagger.services.drawing_adapter import DrawingEventAdapter
from agritagger.surface import LayerTag, MemoryLayer
from tests.samples import FIELD_POINT, MOVED_PLOT, SMALL_PLOT


@pytest.fixture
def adapter(store, surface, state, vocabulary):
    return DrawingEventAdapter(store, surface, state, vocabulary)


def _draw(adapter, geometry=SMALL_PLOT, kind="polygon"):
    layer = MemoryLayer(geometry)
    fid = adapter.handle(CreateEvent(kind, layer))
    return fid, layer


class TestCreate:
    """CreateEvent seeds the store and tags the layer."""

    def test_defaults(self, adapter, store, state):
        """A drawn polygon gets default attributes and becomes selected."""
        when = datetime(2025, 3, 1, 8, 30, tzinfo=timezone.utc)
        layer = MemoryLayer(SMALL_PLOT)
        fid = adapter.handle(CreateEvent("polygon", layer, occurred_at=when))

        attrs = store.get(fid).attributes
        assert attrs == {
            "name": "Lahan 1",
            "crop": "Padi",
            "season": "Musim Tanam 1",
            "color": "#10b981",
            "notes": "",
            "createdAt": "2025-03-01T08:30:00.000Z",
        }
        assert state.selected_id == fid

    def test_layer_tagged_styled_and_added(self, adapter, surface, state):
        """The drawn layer carries the new id and the current draw color."""
        state.draw_color = "#ff0000"
        fid, layer = _draw(adapter)
        assert layer.tag == LayerTag(fid)
        assert layer.color == "#ff0000"
        assert list(surface.layers()) == [layer]

    def test_names_count_per_shape_kind(self, adapter, store):
        """Markers are named Titik N, other shapes Lahan N."""
        first, _ = _draw(adapter)
        second, _ = _draw(adapter, FIELD_POINT, kind="marker")
        third, _ = _draw(adapter, SMALL_PLOT, kind="rectangle")
        assert store.get(first).name == "Lahan 1"
        assert store.get(second).name == "Titik 2"
        assert store.get(third).name == "Lahan 3"

    def test_custom_labels(self, store, surface, state, vocabulary):
        """Labels are configurable."""
        adapter = DrawingEventAdapter(store, surface, state, vocabulary, point_label="Point", plot_label="Plot")
        fid, _ = _draw(adapter, FIELD_POINT, kind="marker")
        assert store.get(fid).name == "Point 1"


class TestEdit:
    """EditEvent updates geometry in place."""

    def test_edit_keeps_identity(self, adapter, store):
        """Edits replace coordinates but keep id and count."""
        fid, layer = _draw(adapter)
        for _ in range(3):
            layer.set_geometry(MOVED_PLOT)
            adapter.handle(EditEvent((layer,)))
        assert store.ids() == [fid]
        assert store.get(fid).geometry == MOVED_PLOT

    def test_untagged_layers_ignored(self, adapter, store):
        """Layers without a tag are skipped."""
        fid, _ = _draw(adapter)
        adapter.handle(EditEvent((MemoryLayer(MOVED_PLOT),)))
        assert store.get(fid).geometry == SMALL_PLOT

    def test_stale_id_ignored(self, adapter, store):
        """An edit for a deleted feature is treated as already handled."""
        fid, layer = _draw(adapter)
        store.delete(fid)
        layer.set_geometry(MOVED_PLOT)
        adapter.handle(EditEvent((layer,)))
        assert len(store) == 0

    def test_kind_change_skipped(self, adapter, store):
        """A layer reporting a different geometry kind does not break the batch."""
        poly_id, poly = _draw(adapter)
        other_id, other = _draw(adapter)
        poly.set_geometry(FIELD_POINT)
        other.set_geometry(MOVED_PLOT)
        adapter.handle(EditEvent((poly, other)))
        assert store.get(poly_id).geometry == SMALL_PLOT
        assert store.get(other_id).geometry == MOVED_PLOT

    def test_rejected_edit_restores_layer(self, adapter, surface):
        """A layer whose edit is refused shows the stored geometry again."""
        fid, _ = _draw(adapter)
        for geometry in (FIELD_POINT, {"type": "Polygon"}):
            for layer in surface.resolve(fid, geometry):
                adapter.handle(EditEvent((layer,)))
            assert [layer.to_geometry() for layer in surface.layers()] == [SMALL_PLOT]


class TestDelete:
    """DeleteEvent removes features and clears selection."""

    def test_delete_clears_selection(self, adapter, store, surface, state):
        """Deleting the selected feature clears the selection."""
        fid, layer = _draw(adapter)
        adapter.handle(DeleteEvent((layer,)))
        assert len(store) == 0
        assert state.selected_id is None
        assert len(surface) == 0

    def test_delete_other_keeps_selection(self, adapter, state):
        """Selection survives deleting a different feature."""
        first, first_layer = _draw(adapter)
        second, _ = _draw(adapter)
        assert state.selected_id == second
        adapter.handle(DeleteEvent((first_layer,)))
        assert state.selected_id == second

    def test_double_delete_is_harmless(self, adapter, store):
        """A repeated delete event is ignored."""
        keep, _ = _draw(adapter)
        _, layer = _draw(adapter)
        adapter.handle(DeleteEvent((layer,)))
        adapter.handle(DeleteEvent((layer,)))
        assert store.ids() == [keep]


def test_unknown_event_type_raises(adapter):
    """Anything but the three event kinds is rejected."""
    with pytest.raises(TypeError):
        adapter.handle("created")
