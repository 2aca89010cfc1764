"""
Domain models for tagged map features.

A Feature pairs one GeoJSON geometry with the descriptive attributes the
user attaches to a plot. The same object knows how to render itself for
local persistence (with its id) and for GeoJSON interchange (without it).
"""

from __future__ import annotations

import copy
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from shapely.geometry import shape

ATTRIBUTE_NAMES = ("name", "crop", "season", "color", "notes", "createdAt")

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")


def is_hex_color(value: Any) -> bool:
    """Return True for a ``#rrggbb`` color string."""
    return isinstance(value, str) and bool(_HEX_COLOR.match(value))


def utc_timestamp(moment: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision."""
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def geometry_kind(geometry: Any) -> Optional[str]:
    """Return the GeoJSON ``type`` of a geometry mapping, if any."""
    if isinstance(geometry, dict):
        kind = geometry.get("type")
        if isinstance(kind, str):
            return kind
    return None


def geometry_problem(geometry: Any) -> Optional[str]:
    """Describe why a mapping is not a usable GeoJSON geometry, or None when it is."""
    kind = geometry_kind(geometry)
    if kind is None:
        return "missing geometry"
    try:
        parsed = shape(geometry)
    except Exception as exc:
        return f"invalid {kind} geometry ({exc})"
    if parsed.is_empty:
        return f"empty {kind} geometry"
    return None


class Feature:
    """
    One tagged geographic shape.

    The id is fixed at construction. Geometry and attributes are held as
    private copies so callers cannot mutate store state through a reference
    they were handed.
    """

    def __init__(self, feature_id: str, geometry: Dict[str, Any], attributes: Optional[Dict[str, Any]] = None):
        if not isinstance(feature_id, str) or not feature_id:
            raise TypeError("Feature id must be a non-empty string")
        if geometry_kind(geometry) is None:
            raise TypeError("Feature geometry must be a GeoJSON geometry mapping")
        self.__id = feature_id
        self.__geometry = copy.deepcopy(geometry)
        self.__attributes = dict(attributes or {})

    @property
    def id(self) -> str:
        """Get feature ID."""
        return self.__id

    @property
    def geometry(self) -> Dict[str, Any]:
        """Get a copy of the geometry mapping."""
        return copy.deepcopy(self.__geometry)

    @geometry.setter
    def geometry(self, value: Dict[str, Any]) -> None:
        if geometry_kind(value) is None:
            raise TypeError("Geometry must be a GeoJSON geometry mapping")
        self.__geometry = copy.deepcopy(value)

    @property
    def geometry_type(self) -> Optional[str]:
        return geometry_kind(self.__geometry)

    @property
    def attributes(self) -> Dict[str, Any]:
        """Get a copy of the attributes dictionary."""
        return dict(self.__attributes)

    @attributes.setter
    def attributes(self, value: Dict[str, Any]) -> None:
        if not isinstance(value, dict):
            raise TypeError("Attributes must be a dictionary")
        self.__attributes = dict(value)

    def get_attribute(self, key: str, default: Any = None) -> Any:
        return self.__attributes.get(key, default)

    @property
    def name(self) -> str:
        return str(self.__attributes.get("name") or "")

    @property
    def crop(self) -> Optional[str]:
        return self.__attributes.get("crop")

    @property
    def notes(self) -> str:
        return str(self.__attributes.get("notes") or "")

    @property
    def color(self) -> Optional[str]:
        return self.__attributes.get("color")

    def to_storage_json(self) -> Dict[str, Any]:
        """Convert to the persisted record format ``{id, geometry, properties}``."""
        return {
            "id": self.__id,
            "geometry": copy.deepcopy(self.__geometry),
            "properties": dict(self.__attributes),
        }

    def to_interchange_json(self) -> Dict[str, Any]:
        """Convert to a GeoJSON Feature. The id stays internal to the store."""
        return {
            "type": "Feature",
            "geometry": copy.deepcopy(self.__geometry),
            "properties": dict(self.__attributes),
        }

    @classmethod
    def from_storage_json(cls, data: Dict[str, Any]) -> "Feature":
        """Create Feature from a persisted record."""
        if not isinstance(data, dict):
            raise TypeError("Feature record must be an object")
        properties = data.get("properties")
        if properties is None:
            properties = {}
        if not isinstance(properties, dict):
            raise TypeError("Feature properties must be an object")
        return cls(data.get("id"), data.get("geometry"), properties)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Feature):
            return NotImplemented
        return self.to_storage_json() == other.to_storage_json()

    def __repr__(self) -> str:
        return f"Feature(id={self.__id!r}, type={self.geometry_type!r}, name={self.name!r})"


@dataclass(frozen=True)
class Vocabulary:
    """Crop and season choices offered by the editor."""

    crops: Sequence[str]
    seasons: Sequence[str]

    def __post_init__(self) -> None:
        if not self.crops or not self.seasons:
            raise ValueError("Vocabulary needs at least one crop and one season")

    @property
    def default_crop(self) -> str:
        return self.crops[0]

    @property
    def default_season(self) -> str:
        return self.seasons[0]

    def to_json(self) -> Dict[str, List[str]]:
        return {"crops": list(self.crops), "seasons": list(self.seasons)}


@dataclass
class EditorState:
    """Per-session UI state that is not part of the store."""

    draw_color: str
    selected_id: Optional[str] = None

    def select(self, feature_id: Optional[str]) -> None:
        self.selected_id = feature_id

    def clear_selection_if(self, feature_ids) -> None:
        if self.selected_id is not None and self.selected_id in feature_ids:
            self.selected_id = None
