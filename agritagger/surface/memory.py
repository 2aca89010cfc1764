from __future__ import annotations

import copy
from typing import Any, Dict, Iterator, List, Optional

from agritagger.surface.protocols import DrawingSurface, LayerTag


class MemoryLayer:
    """Layer handle holding a geometry snapshot and a stroke color."""

    def __init__(self, geometry: Dict[str, Any], color: Optional[str] = None, tag: Optional[LayerTag] = None) -> None:
        self._geometry = copy.deepcopy(geometry)
        self.color = color
        self.tag = tag

    def to_geometry(self) -> Dict[str, Any]:
        return copy.deepcopy(self._geometry)

    def set_style(self, color: str) -> None:
        self.color = color

    def set_geometry(self, geometry: Dict[str, Any]) -> None:
        """Move vertices in place, as the toolkit does while editing."""
        self._geometry = copy.deepcopy(geometry)

    def to_frontend_json(self) -> Dict[str, Any]:
        return {
            "featureId": self.tag.feature_id if self.tag else None,
            "geometry": self.to_geometry(),
            "style": {"color": self.color},
        }

    def __repr__(self) -> str:
        return f"MemoryLayer(tag={self.tag!r}, color={self.color!r})"


class MemorySurface(DrawingSurface):
    """In-process layer group; the browser renders whatever it holds."""

    def __init__(self) -> None:
        self._layers: List[MemoryLayer] = []

    def clear_layers(self) -> None:
        self._layers.clear()

    def add_layer(self, layer: MemoryLayer) -> None:
        if layer not in self._layers:
            self._layers.append(layer)

    def remove_layer(self, layer: MemoryLayer) -> None:
        try:
            self._layers.remove(layer)
        except ValueError:
            pass

    def layers(self) -> Iterator[MemoryLayer]:
        return iter(list(self._layers))

    def layer_from_geometry(self, geometry: Dict[str, Any], color: str) -> MemoryLayer:
        return MemoryLayer(geometry, color=color)

    def find_by_feature(self, feature_id: str) -> List[MemoryLayer]:
        return [layer for layer in self._layers if layer.tag and layer.tag.feature_id == feature_id]

    def resolve(self, feature_id: Optional[str], geometry: Optional[Dict[str, Any]] = None) -> List[MemoryLayer]:
        """
        Map a remote layer reference onto the layers held here.

        A reference that matches nothing still yields a detached handle
        carrying the tag, so stale ids reach the adapter and are ignored there.
        """
        tag = LayerTag(feature_id) if isinstance(feature_id, str) and feature_id else None
        layers = self.find_by_feature(feature_id) if tag else []
        if not layers:
            layers = [MemoryLayer(geometry or {}, tag=tag)]
        if geometry is not None:
            for layer in layers:
                layer.set_geometry(geometry)
        return layers

    def __len__(self) -> int:
        return len(self._layers)
