from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from agritagger.domain.features import Feature, geometry_kind, geometry_problem

logger = logging.getLogger(__name__)

IMMUTABLE_ATTRIBUTES = frozenset({"createdAt"})


class FeatureStoreError(Exception):
    """Base exception raised for feature store issues."""


class GeometryKindError(FeatureStoreError):
    """Raised when an edit would change a feature's geometry kind."""


class InvalidGeometryError(FeatureStoreError):
    """Raised when a geometry cannot be parsed as GeoJSON."""


@dataclass(frozen=True)
class StoreChange:
    """Notification sent to listeners after a completed store mutation."""

    CREATED = "created"
    GEOMETRY = "geometry"
    ATTRIBUTES = "attributes"
    DELETED = "deleted"
    LOADED = "loaded"
    IMPORTED = "imported"

    kind: str
    ids: Tuple[str, ...] = ()


StoreListener = Callable[[StoreChange], None]


class FeatureStore:
    """
    Ordered mapping from feature id to Feature.

    The store is the only writer of feature geometry and attributes.
    Mutations against ids that are no longer present are silent no-ops so
    that late edit/delete events cannot resurrect a feature.
    """

    def __init__(self, features: Optional[Iterable[Feature]] = None) -> None:
        self._features: Dict[str, Feature] = {}
        self._listeners: List[StoreListener] = []
        for feature in features or ():
            self._insert(feature)

    # Listeners

    def add_listener(self, listener: StoreListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: StoreListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, kind: str, ids: Iterable[str] = ()) -> None:
        change = StoreChange(kind=kind, ids=tuple(ids))
        for listener in list(self._listeners):
            listener(change)

    # Identity

    def new_id(self) -> str:
        """Return an id not used by any feature in the store."""
        feature_id = uuid.uuid4().hex
        while feature_id in self._features:
            feature_id = uuid.uuid4().hex
        return feature_id

    def _insert(self, feature: Feature) -> None:
        if feature.id in self._features:
            raise FeatureStoreError(f"Duplicate feature id {feature.id}")
        self._features[feature.id] = feature

    # Mutations

    def create(self, geometry: Dict[str, Any], attributes: Dict[str, Any]) -> str:
        """
        Insert a new feature at the end of the store.

        Returns the freshly generated feature id.

        Raises:
            InvalidGeometryError: If the geometry is not usable GeoJSON.
        """
        _check_geometry(geometry)
        feature = Feature(self.new_id(), geometry, attributes)
        self._insert(feature)
        logger.debug("Created feature %s (%s)", feature.id, feature.geometry_type)
        self._notify(StoreChange.CREATED, [feature.id])
        return feature.id

    def extend(self, entries: Iterable[Tuple[Dict[str, Any], Dict[str, Any]]], kind: str = StoreChange.IMPORTED) -> List[str]:
        """
        Append several ``(geometry, attributes)`` entries as one mutation.

        Every entry is built before any is inserted, so a bad entry leaves
        the store untouched.
        """
        staged: List[Feature] = []
        taken = set(self._features)
        for geometry, attributes in entries:
            _check_geometry(geometry)
            feature_id = self.new_id()
            while feature_id in taken:
                feature_id = self.new_id()
            taken.add(feature_id)
            staged.append(Feature(feature_id, geometry, attributes))

        for feature in staged:
            self._insert(feature)
        ids = [feature.id for feature in staged]
        if ids:
            self._notify(kind, ids)
        return ids

    def replace_all(self, features: Iterable[Feature]) -> None:
        """Swap the whole content, as done when hydrating from persistence."""
        incoming: Dict[str, Feature] = {}
        for feature in features:
            if feature.id in incoming:
                raise FeatureStoreError(f"Duplicate feature id {feature.id}")
            incoming[feature.id] = feature
        self._features = incoming
        self._notify(StoreChange.LOADED, list(incoming))

    def update_geometry(self, feature_id: str, geometry: Dict[str, Any]) -> bool:
        """
        Replace a feature's geometry in place.

        Returns False when the id is unknown.

        Raises:
            GeometryKindError: If the new geometry has a different type.
            InvalidGeometryError: If the new geometry is not usable GeoJSON.
        """
        feature = self._features.get(feature_id)
        if feature is None:
            logger.debug("Ignoring geometry update for unknown feature %s", feature_id)
            return False

        _check_geometry(geometry)
        new_kind = geometry_kind(geometry)
        if new_kind != feature.geometry_type:
            raise GeometryKindError(
                f"Feature {feature_id} is a {feature.geometry_type}, cannot become {new_kind}"
            )

        feature.geometry = geometry
        self._notify(StoreChange.GEOMETRY, [feature_id])
        return True

    def update_attributes(self, feature_id: str, patch: Dict[str, Any]) -> bool:
        """Merge named fields into a feature's attributes. Returns False when the id is unknown."""
        feature = self._features.get(feature_id)
        if feature is None:
            logger.debug("Ignoring attribute update for unknown feature %s", feature_id)
            return False

        current = feature.attributes
        changed = False
        for key, value in patch.items():
            if key in IMMUTABLE_ATTRIBUTES and key in current:
                continue
            if current.get(key, object()) != value:
                current[key] = value
                changed = True

        if changed:
            feature.attributes = current
            self._notify(StoreChange.ATTRIBUTES, [feature_id])
        return True

    def delete(self, feature_id: str) -> bool:
        """Remove a feature. Deleting an unknown id is a no-op returning False."""
        if self._features.pop(feature_id, None) is None:
            return False
        self._notify(StoreChange.DELETED, [feature_id])
        return True

    def delete_many(self, feature_ids: Iterable[str]) -> List[str]:
        """Remove several features with a single notification."""
        removed = [fid for fid in dict.fromkeys(feature_ids) if self._features.pop(fid, None) is not None]
        if removed:
            self._notify(StoreChange.DELETED, removed)
        return removed

    # Reads

    def get(self, feature_id: str) -> Optional[Feature]:
        return self._features.get(feature_id)

    def list(self) -> List[Feature]:
        return list(self._features.values())

    def ids(self) -> List[str]:
        return list(self._features)

    def __len__(self) -> int:
        return len(self._features)

    def __contains__(self, feature_id: object) -> bool:
        return feature_id in self._features

    def __iter__(self):
        return iter(self.list())

    def to_storage_json(self) -> List[Dict[str, Any]]:
        return [feature.to_storage_json() for feature in self._features.values()]


def _check_geometry(geometry: Dict[str, Any]) -> None:
    problem = geometry_problem(geometry)
    if problem:
        raise InvalidGeometryError(problem)
