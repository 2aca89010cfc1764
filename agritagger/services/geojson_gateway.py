"""
GeoJSON import and export of the feature store.

Exported documents carry each feature's attributes as its properties and
never the store id. Imported entries always receive fresh ids so a
re-imported export cannot collide with features already in the store.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple, Union

from agritagger.domain.features import EditorState, Vocabulary, geometry_problem, is_hex_color, utc_timestamp
from agritagger.services.feature_store import FeatureStore

logger = logging.getLogger(__name__)

GEOJSON_MEDIA_TYPE = "application/geo+json"
EXPORT_PREFIX = "agritagger"


class FeatureImportError(Exception):
    """Raised when an uploaded document is not a usable FeatureCollection."""


@dataclass
class ImportOutcome:
    """Result of a successful import."""

    imported_ids: List[str] = field(default_factory=list)
    skipped: int = 0
    reasons: List[str] = field(default_factory=list)

    @property
    def imported(self) -> int:
        return len(self.imported_ids)

    def to_json(self) -> Dict[str, Any]:
        return {
            "imported": self.imported,
            "importedIds": list(self.imported_ids),
            "skipped": self.skipped,
            "reasons": list(self.reasons),
        }


class GeoJSONGateway:
    """Convert between the feature store and GeoJSON FeatureCollections."""

    def __init__(self, store: FeatureStore, state: EditorState, vocabulary: Vocabulary, plot_label: str = "Lahan") -> None:
        self._store = store
        self._state = state
        self._vocabulary = vocabulary
        self._plot_label = plot_label

    # Export

    def export_document(self) -> Dict[str, Any]:
        return {
            "type": "FeatureCollection",
            "features": [feature.to_interchange_json() for feature in self._store.list()],
        }

    def dumps(self) -> str:
        return json.dumps(self.export_document(), indent=2, ensure_ascii=False)

    @staticmethod
    def export_filename(today: Optional[date] = None) -> str:
        today = today or datetime.now().date()
        return f"{EXPORT_PREFIX}_{today.isoformat()}.geojson"

    # Import

    def import_document(self, document: Union[str, bytes, Dict[str, Any]]) -> ImportOutcome:
        """
        Append the features of a FeatureCollection to the store.

        Structural problems reject the whole document and leave the store
        untouched. Entry-level problems are handled by defaulting missing
        attributes, or by skipping entries with no usable geometry.

        Raises:
            FeatureImportError: If the document is not a FeatureCollection
                with a ``features`` list.
        """
        data = self._parse(document)
        entries, outcome = self._prepare_entries(data["features"])

        outcome.imported_ids = self._store.extend(entries)
        if outcome.imported_ids:
            self._state.select(outcome.imported_ids[0])

        logger.info("Imported %d features (%d skipped)", outcome.imported, outcome.skipped)
        return outcome

    @staticmethod
    def _parse(document: Union[str, bytes, Dict[str, Any]]) -> Dict[str, Any]:
        if isinstance(document, (bytes, bytearray)):
            try:
                document = document.decode("utf-8-sig")
            except UnicodeDecodeError as exc:
                raise FeatureImportError("File is not UTF-8 text") from exc
        if isinstance(document, str):
            try:
                document = json.loads(document)
            except ValueError as exc:
                raise FeatureImportError(f"Invalid JSON: {exc}") from exc

        if not isinstance(document, dict) or document.get("type") != "FeatureCollection":
            raise FeatureImportError("Not a FeatureCollection")
        if not isinstance(document.get("features"), list):
            raise FeatureImportError("FeatureCollection has no features array")
        return document

    def _prepare_entries(self, raw_features: List[Any]) -> Tuple[List[Tuple[Dict[str, Any], Dict[str, Any]]], ImportOutcome]:
        outcome = ImportOutcome()
        entries: List[Tuple[Dict[str, Any], Dict[str, Any]]] = []
        imported_at = utc_timestamp()
        base_count = len(self._store)

        for index, raw in enumerate(raw_features):
            problem = _entry_problem(raw)
            if problem:
                outcome.skipped += 1
                outcome.reasons.append(f"Feature {index + 1}: {problem}")
                continue

            properties = raw.get("properties")
            if not isinstance(properties, dict):
                properties = {}

            attributes = dict(properties)
            defaults = {
                "name": f"{self._plot_label} {base_count + len(entries) + 1}",
                "crop": self._vocabulary.default_crop,
                "season": self._vocabulary.default_season,
                "notes": "",
                "createdAt": imported_at,
            }
            for key, value in defaults.items():
                if attributes.get(key) is None:
                    attributes[key] = value
            if not is_hex_color(attributes.get("color")):
                attributes["color"] = self._state.draw_color

            entries.append((raw["geometry"], attributes))

        for reason in outcome.reasons:
            logger.debug("Import skipped %s", reason)
        return entries, outcome


def _entry_problem(raw: Any) -> Optional[str]:
    """Describe why an entry cannot be imported, or None when it can."""
    if not isinstance(raw, dict):
        return "entry is not an object"
    return geometry_problem(raw.get("geometry"))
