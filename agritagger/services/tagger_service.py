from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from datetime import date
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from flask import current_app

from agritagger.domain.events import DrawingEvent
from agritagger.domain.features import EditorState, Feature, Vocabulary, is_hex_color
from agritagger.services.area import area_ha
from agritagger.services.drawing_adapter import DrawingEventAdapter
from agritagger.services.feature_store import FeatureStore, StoreChange
from agritagger.services.geojson_gateway import GeoJSONGateway, ImportOutcome
from agritagger.services.persistence import PersistenceAdapter, PersistenceError
from agritagger.services.query import ALL_CROPS, query_features
from agritagger.services.reconciler import Bounds, MapReconciler
from agritagger.storage import LocalKeyValueStorage
from agritagger.surface.memory import MemorySurface
from agritagger.surface.protocols import DrawingSurface

logger = logging.getLogger(__name__)


class TaggerError(Exception):
    """Base exception raised for tagging session issues."""


class FeatureNotFoundError(TaggerError):
    """Raised when a feature id does not resolve."""


class InvalidAttributeError(TaggerError):
    """Raised when an attribute patch carries an unusable value."""


class TaggerService:
    """
    Own the feature store and everything that keeps it in sync.

    The store is hydrated from persistence on construction and the drawing
    surface rebuilt from it. Afterwards every store mutation is saved, and
    attribute changes are pushed back to the surface as layer styles.
    """

    def __init__(
        self,
        persistence: PersistenceAdapter,
        vocabulary: Vocabulary,
        surface: Optional[DrawingSurface] = None,
        draw_color: str = "#10b981",
        all_crops: str = ALL_CROPS,
        point_label: str = "Titik",
        plot_label: str = "Lahan",
    ) -> None:
        if not is_hex_color(draw_color):
            raise InvalidAttributeError(f"Invalid draw color: {draw_color}")

        self._lock = threading.RLock()
        self._persistence = persistence
        self._vocabulary = vocabulary
        self._all_crops = all_crops
        self._surface = surface if surface is not None else MemorySurface()
        self._state = EditorState(draw_color=draw_color)

        self._store = FeatureStore()
        self._reconciler = MapReconciler(self._store, self._surface, lambda: self._state.draw_color)
        self._adapter = DrawingEventAdapter(
            self._store,
            self._surface,
            self._state,
            vocabulary,
            point_label=point_label,
            plot_label=plot_label,
        )
        self._gateway = GeoJSONGateway(self._store, self._state, vocabulary, plot_label=plot_label)

        # Hydrate before persistence listens, so loading never rewrites the blob.
        self._store.add_listener(self._reconciler.on_store_change)
        self._store.replace_all(self._persistence.load())
        self._store.add_listener(self._save)

    @classmethod
    def from_app_config(cls) -> "TaggerService":
        """Create TaggerService from Flask app configuration."""
        config = current_app.config
        storage_dir = config.get("STORAGE_DIR") or Path(current_app.instance_path) / "storage"
        storage = LocalKeyValueStorage(Path(storage_dir))
        persistence = PersistenceAdapter(storage, key=config["PERSISTENCE_KEY"])
        vocabulary = Vocabulary(
            crops=tuple(config["CROP_OPTIONS"]),
            seasons=tuple(config["SEASON_OPTIONS"]),
        )
        return cls(
            persistence=persistence,
            vocabulary=vocabulary,
            draw_color=config["DEFAULT_DRAW_COLOR"],
            all_crops=config["ALL_CROPS"],
            point_label=config["POINT_LABEL"],
            plot_label=config["PLOT_LABEL"],
        )

    def _save(self, change: StoreChange) -> None:
        self._persistence.save(self._store.list())

    @contextmanager
    def _mutation(self) -> Iterator[None]:
        """
        Run a store mutation that must either be saved or undone.

        When saving fails the store, selection and surface return to the
        state they had before, and the PersistenceError propagates.
        """
        with self._lock:
            snapshot = [Feature.from_storage_json(record) for record in self._store.to_storage_json()]
            selected_id = self._state.selected_id
            try:
                yield
            except PersistenceError:
                self._store.remove_listener(self._save)
                try:
                    self._store.replace_all(snapshot)
                    self._state.select(selected_id)
                finally:
                    self._store.add_listener(self._save)
                logger.warning("Save failed; reverted to %d features", len(snapshot))
                raise

    # Accessors

    @property
    def store(self) -> FeatureStore:
        return self._store

    @property
    def surface(self) -> DrawingSurface:
        return self._surface

    @property
    def state(self) -> EditorState:
        return self._state

    @property
    def vocabulary(self) -> Vocabulary:
        return self._vocabulary

    @property
    def all_crops(self) -> str:
        return self._all_crops

    # Drawing events

    def handle_event(self, event: DrawingEvent) -> Optional[str]:
        with self._mutation():
            return self._adapter.handle(event)

    # Editor panel

    def get_feature(self, feature_id: str) -> Feature:
        feature = self._store.get(feature_id)
        if feature is None:
            raise FeatureNotFoundError(f"Feature with id {feature_id} not found.")
        return feature

    def select(self, feature_id: Optional[str]) -> None:
        with self._lock:
            if feature_id is not None:
                self.get_feature(feature_id)
            self._state.select(feature_id)

    def set_draw_color(self, color: str) -> None:
        if not is_hex_color(color):
            raise InvalidAttributeError(f"Invalid color: {color}")
        with self._lock:
            self._state.draw_color = color

    def update_attributes(self, feature_id: str, patch: Dict[str, Any]) -> Feature:
        """
        Merge an attribute patch into one feature.

        Raises:
            FeatureNotFoundError: If the feature does not exist.
            InvalidAttributeError: If the patch is not a mapping or carries a bad color.
        """
        if not isinstance(patch, dict):
            raise InvalidAttributeError("Attribute patch must be an object")
        if "color" in patch and not is_hex_color(patch["color"]):
            raise InvalidAttributeError(f"Invalid color: {patch['color']}")
        for key in ("name", "notes", "crop", "season"):
            if key in patch and not isinstance(patch[key], str):
                raise InvalidAttributeError(f"Attribute {key} must be text")

        with self._mutation():
            self.get_feature(feature_id)
            self._store.update_attributes(feature_id, patch)
            return self.get_feature(feature_id)

    def update_selected(self, patch: Dict[str, Any]) -> Optional[Feature]:
        """Patch the selected feature; does nothing without a selection."""
        with self._lock:
            selected_id = self._state.selected_id
            if selected_id is None or selected_id not in self._store:
                return None
            return self.update_attributes(selected_id, patch)

    def delete_feature(self, feature_id: str) -> bool:
        """Delete from the list panel: drop the feature and its surface layers."""
        with self._mutation():
            self._reconciler.remove_feature_layers(feature_id)
            removed = self._store.delete(feature_id)
            self._state.clear_selection_if([feature_id])
            return removed

    def zoom_bounds(self, feature_id: str) -> Optional[Bounds]:
        with self._lock:
            self.get_feature(feature_id)
            return self._reconciler.bounds_for(feature_id)

    # Views

    def query(self, search: Optional[str] = None, crop: Optional[str] = None) -> List[Feature]:
        """Filter the store for one list request; criteria are not remembered."""
        with self._lock:
            return query_features(self._store.list(), search, crop, all_crops=self._all_crops)

    def summarize(self, feature: Feature) -> Dict[str, Any]:
        """Storage record plus derived display fields."""
        record = feature.to_storage_json()
        record["areaHa"] = round(area_ha(record["geometry"]), 4)
        record["selected"] = feature.id == self._state.selected_id
        return record

    def surface_layers(self) -> List[Dict[str, Any]]:
        with self._lock:
            return [layer.to_frontend_json() for layer in self._surface.layers()]

    # Import / export

    def export_document(self) -> Dict[str, Any]:
        with self._lock:
            return self._gateway.export_document()

    def export_text(self) -> str:
        with self._lock:
            return self._gateway.dumps()

    @staticmethod
    def export_filename(today: Optional[date] = None) -> str:
        return GeoJSONGateway.export_filename(today)

    def import_document(self, document: Union[str, bytes, Dict[str, Any]]) -> ImportOutcome:
        with self._mutation():
            return self._gateway.import_document(document)
