from __future__ import annotations

import logging
from typing import List, Optional

from agritagger.domain.events import CreateEvent, DeleteEvent, DrawingEvent, EditEvent
from agritagger.domain.features import EditorState, Vocabulary, utc_timestamp
from agritagger.services.feature_store import FeatureStore, FeatureStoreError
from agritagger.surface.protocols import DrawingSurface, LayerTag, SurfaceLayer

logger = logging.getLogger(__name__)

POINT_SHAPE_KINDS = frozenset({"marker", "point"})


class DrawingEventAdapter:
    """Translate drawing toolkit events into store mutations."""

    def __init__(
        self,
        store: FeatureStore,
        surface: DrawingSurface,
        state: EditorState,
        vocabulary: Vocabulary,
        point_label: str = "Titik",
        plot_label: str = "Lahan",
    ) -> None:
        self._store = store
        self._surface = surface
        self._state = state
        self._vocabulary = vocabulary
        self._point_label = point_label
        self._plot_label = plot_label

    def handle(self, event: DrawingEvent) -> Optional[str]:
        """
        Apply one drawing event.

        Returns the new feature id for a CreateEvent, None otherwise.

        Raises:
            TypeError: If the event is not one of the known event types.
        """
        if isinstance(event, CreateEvent):
            return self._on_created(event)
        if isinstance(event, EditEvent):
            self._on_edited(event)
            return None
        if isinstance(event, DeleteEvent):
            self._on_deleted(event)
            return None
        raise TypeError(f"Unsupported drawing event: {type(event).__name__}")

    def default_name(self, shape_kind: str) -> str:
        label = self._point_label if shape_kind in POINT_SHAPE_KINDS else self._plot_label
        return f"{label} {len(self._store) + 1}"

    def _on_created(self, event: CreateEvent) -> str:
        layer = event.layer
        color = self._state.draw_color
        attributes = {
            "name": self.default_name(event.shape_kind),
            "crop": self._vocabulary.default_crop,
            "season": self._vocabulary.default_season,
            "color": color,
            "notes": "",
            "createdAt": utc_timestamp(event.occurred_at),
        }

        feature_id = self._store.create(layer.to_geometry(), attributes)

        layer.tag = LayerTag(feature_id)
        layer.set_style(color)
        self._surface.add_layer(layer)

        self._state.select(feature_id)
        logger.info("Drew %s as feature %s", event.shape_kind, feature_id)
        return feature_id

    def _on_edited(self, event: EditEvent) -> None:
        for layer in event.layers:
            tag = _tag_of(layer)
            if tag is None:
                logger.debug("Skipping untagged layer in edit event")
                continue
            try:
                self._store.update_geometry(tag.feature_id, layer.to_geometry())
            except FeatureStoreError as exc:
                logger.warning("Skipping edit: %s", exc)
                # Put the layer back where the store still has it.
                layer.set_geometry(self._store.get(tag.feature_id).geometry)

    def _on_deleted(self, event: DeleteEvent) -> None:
        ids: List[str] = []
        for layer in event.layers:
            tag = _tag_of(layer)
            if tag is not None:
                ids.append(tag.feature_id)
            self._surface.remove_layer(layer)

        self._store.delete_many(ids)
        self._state.clear_selection_if(ids)


def _tag_of(layer: SurfaceLayer) -> Optional[LayerTag]:
    tag = getattr(layer, "tag", None)
    return tag if isinstance(tag, LayerTag) else None
