from __future__ import annotations

import logging
from typing import Callable, List, Optional, Tuple

from shapely.geometry import shape

from agritagger.services.feature_store import FeatureStore, StoreChange
from agritagger.surface.protocols import DrawingSurface, LayerTag, SurfaceLayer

logger = logging.getLogger(__name__)

Bounds = Tuple[float, float, float, float]


class MapReconciler:
    """
    Project store state onto the drawing surface.

    Geometry edits flow from the surface into the store through the
    drawing adapter; this class only ever writes in the other direction.
    """

    def __init__(self, store: FeatureStore, surface: DrawingSurface, fallback_color: Callable[[], str]) -> None:
        self._store = store
        self._surface = surface
        self._fallback_color = fallback_color

    def on_store_change(self, change: StoreChange) -> None:
        """Store listener: rebuild on hydration/import, restyle on attribute edits."""
        if change.kind in (StoreChange.LOADED, StoreChange.IMPORTED):
            self.rebuild()
        elif change.kind == StoreChange.ATTRIBUTES:
            self.repair_styles()

    def rebuild(self) -> int:
        """
        Tear down every surface layer and recreate one per feature.

        Returns the number of layers created.
        """
        self._surface.clear_layers()
        count = 0
        for feature in self._store.list():
            color = feature.color or self._fallback_color()
            layer = self._surface.layer_from_geometry(feature.geometry, color)
            layer.tag = LayerTag(feature.id)
            layer.set_style(color)
            self._surface.add_layer(layer)
            count += 1
        logger.debug("Rebuilt drawing surface with %d layers", count)
        return count

    def repair_styles(self) -> int:
        """Reapply each tagged layer's feature color. Returns the number of layers restyled."""
        restyled = 0
        for layer in self._surface.layers():
            tag = getattr(layer, "tag", None)
            if not isinstance(tag, LayerTag):
                continue
            feature = self._store.get(tag.feature_id)
            if feature is None or not feature.color:
                continue
            layer.set_style(feature.color)
            restyled += 1
        return restyled

    def layers_for(self, feature_id: str) -> List[SurfaceLayer]:
        return [
            layer for layer in self._surface.layers()
            if isinstance(getattr(layer, "tag", None), LayerTag) and layer.tag.feature_id == feature_id
        ]

    def remove_feature_layers(self, feature_id: str) -> int:
        """Drop the layers rendering a feature deleted outside the drawing toolkit."""
        layers = self.layers_for(feature_id)
        for layer in layers:
            self._surface.remove_layer(layer)
        return len(layers)

    def bounds_for(self, feature_id: str) -> Optional[Bounds]:
        """Bounding box ``(minx, miny, maxx, maxy)`` of a feature's layers, for zooming."""
        boxes = []
        for layer in self.layers_for(feature_id):
            try:
                geom = shape(layer.to_geometry())
            except Exception as exc:
                logger.debug("Cannot compute bounds for layer of %s: %s", feature_id, exc)
                continue
            if not geom.is_empty:
                boxes.append(geom.bounds)
        if not boxes:
            return None
        return (
            min(box[0] for box in boxes),
            min(box[1] for box in boxes),
            max(box[2] for box in boxes),
            max(box[3] for box in boxes),
        )
