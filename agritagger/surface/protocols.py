from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Protocol


@dataclass(frozen=True)
class LayerTag:
    """Back-reference from a surface layer to the store feature it renders."""

    feature_id: str


class SurfaceLayer(Protocol):
    """Interface for one interactive layer on the drawing surface."""

    tag: Optional[LayerTag]

    def to_geometry(self) -> Dict[str, Any]:
        ...

    def set_style(self, color: str) -> None:
        ...

    def set_geometry(self, geometry: Dict[str, Any]) -> None:
        ...

    def to_frontend_json(self) -> Dict[str, Any]:
        ...


class DrawingSurface(Protocol):
    """Interface for the layer group the drawing toolkit edits."""

    def clear_layers(self) -> None:
        ...

    def add_layer(self, layer: SurfaceLayer) -> None:
        ...

    def remove_layer(self, layer: SurfaceLayer) -> None:
        ...

    def layers(self) -> Iterable[SurfaceLayer]:
        ...

    def layer_from_geometry(self, geometry: Dict[str, Any], color: str) -> SurfaceLayer:
        ...
