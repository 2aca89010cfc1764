from agritagger.services.feature_store import FeatureStore, FeatureStoreError, GeometryKindError, InvalidGeometryError, StoreChange
from agritagger.services.geojson_gateway import FeatureImportError, GeoJSONGateway, ImportOutcome
from agritagger.services.persistence import PersistenceAdapter, PersistenceError, PersistenceWriteError
from agritagger.services.tagger_service import (
    FeatureNotFoundError,
    InvalidAttributeError,
    TaggerError,
    TaggerService,
)

__all__ = [
    "FeatureImportError",
    "FeatureNotFoundError",
    "FeatureStore",
    "FeatureStoreError",
    "GeoJSONGateway",
    "GeometryKindError",
    "InvalidGeometryError",
    "ImportOutcome",
    "InvalidAttributeError",
    "PersistenceAdapter",
    "PersistenceError",
    "PersistenceWriteError",
    "StoreChange",
    "TaggerError",
    "TaggerService",
]
