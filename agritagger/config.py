from __future__ import annotations

import os
from typing import Any, Dict, List, Type


class Config:
    """Base application configuration."""

    SECRET_KEY: str = os.getenv("SECRET_KEY", "change-me")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Local key/value storage holding the serialized feature store.
    # When unset, the factory places it under the instance folder.
    STORAGE_DIR: str | None = os.getenv("AGRITAGGER_STORAGE_DIR")
    PERSISTENCE_KEY: str = os.getenv("AGRITAGGER_PERSISTENCE_KEY", "agritagger:features")

    CROP_OPTIONS: List[str] = [
        "Padi",
        "Jagung",
        "Kedelai",
        "Tebu",
        "Kopi",
        "Kelapa Sawit",
        "Sayuran Campuran",
        "Lainnya",
    ]
    SEASON_OPTIONS: List[str] = [
        "Musim Tanam 1",
        "Musim Tanam 2",
        "Musim Tanam 3",
        "Musim Kering",
        "Musim Hujan",
    ]
    ALL_CROPS: str = "all"

    DEFAULT_DRAW_COLOR: str = "#10b981"
    POINT_LABEL: str = "Titik"
    PLOT_LABEL: str = "Lahan"

    BASEMAPS: Dict[str, Dict[str, Any]] = {
        "OSM": {
            "name": "OpenStreetMap",
            "url": "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png",
            "attribution": "&copy; OpenStreetMap contributors",
        },
        "ESRI_SAT": {
            "name": "Esri Satellite",
            "url": "https://server.arcgisonline.com/ArcGIS/rest/services/World_Imagery/MapServer/tile/{z}/{x}/{y}",
            "attribution": "Tiles &copy; Esri",
        },
    }
    DEFAULT_BASEMAP: str = "OSM"
    MAP_CENTER: List[float] = [-2.5, 117.0]
    MAP_ZOOM: int = 5


class DevelopmentConfig(Config):
    DEBUG: bool = True
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "DEBUG")


class ProductionConfig(Config):
    DEBUG: bool = False


class TestingConfig(Config):
    TESTING: bool = True
    DEBUG: bool = False


CONFIG_MAP: Dict[str, Type[Config]] = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
    "default": Config,
}


def resolve_config(config_name: str | None) -> Type[Config]:
    """Return the configuration class for the given name."""
    if not config_name:
        return CONFIG_MAP["default"]
    return CONFIG_MAP.get(config_name, CONFIG_MAP["default"])
