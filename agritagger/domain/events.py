"""Drawing events emitted by the map toolkit and consumed by the adapter."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Tuple, Union

from agritagger.surface.protocols import SurfaceLayer


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CreateEvent:
    """A shape was drawn. ``shape_kind`` is the toolkit's layer type (marker, polygon, rectangle)."""

    shape_kind: str
    layer: SurfaceLayer
    occurred_at: datetime = field(default_factory=_now)


@dataclass(frozen=True)
class EditEvent:
    """Existing layers had their vertices moved."""

    layers: Tuple[SurfaceLayer, ...]


@dataclass(frozen=True)
class DeleteEvent:
    """Layers were removed with the toolkit's delete tool."""

    layers: Tuple[SurfaceLayer, ...]


DrawingEvent = Union[CreateEvent, EditEvent, DeleteEvent]
