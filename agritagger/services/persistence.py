from __future__ import annotations

import json
import logging
from typing import Iterable, List

from agritagger.domain.features import Feature
from agritagger.storage import LocalStorageError
from agritagger.storage.protocols import KeyValueStorage

logger = logging.getLogger(__name__)

DEFAULT_KEY = "agritagger:features"


class PersistenceError(Exception):
    """Base exception raised for persistence issues."""


class PersistenceWriteError(PersistenceError):
    """Raised when the serialized store cannot be written."""


class PersistenceAdapter:
    """Load and save the whole feature store as one serialized blob."""

    def __init__(self, storage: KeyValueStorage, key: str = DEFAULT_KEY) -> None:
        self._storage = storage
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def load(self) -> List[Feature]:
        """
        Read the persisted snapshot.

        An absent, unreadable or malformed blob yields an empty list; stale
        local state must never prevent startup.
        """
        try:
            raw = self._storage.read(self._key)
        except LocalStorageError as exc:
            logger.warning("Persisted features unreadable, starting empty: %s", exc)
            return []
        if raw is None or not raw.strip():
            return []

        try:
            records = json.loads(raw)
            if not isinstance(records, list):
                raise ValueError("persisted document is not a list")
            features = [Feature.from_storage_json(record) for record in records]
        except (ValueError, TypeError) as exc:
            logger.warning("Persisted features corrupt, starting empty: %s", exc)
            return []

        ids = [feature.id for feature in features]
        if len(set(ids)) != len(ids):
            logger.warning("Persisted features contain duplicate ids, starting empty")
            return []

        logger.debug("Loaded %d persisted features", len(features))
        return features

    def save(self, features: Iterable[Feature]) -> None:
        """Serialize the full snapshot and write it in a single call."""
        payload = json.dumps(
            [feature.to_storage_json() for feature in features],
            ensure_ascii=False,
        )
        try:
            self._storage.write(self._key, payload)
        except LocalStorageError as exc:
            raise PersistenceWriteError(f"Failed to save features: {exc}") from exc
