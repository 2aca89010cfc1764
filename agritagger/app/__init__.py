from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

from flask import Flask

from agritagger.config import resolve_config
from agritagger.app.container import register_services


def create_app(config_name: str | None = None, overrides: Optional[Dict[str, Any]] = None) -> Flask:
    """Application factory."""
    project_root = Path(__file__).resolve().parents[2]
    app = Flask(
        __name__,
        instance_relative_config=True,
        instance_path=str(project_root / "instance"),
    )

    config_class = resolve_config(config_name or os.getenv("FLASK_ENV"))
    app.config.from_object(config_class)
    if overrides:
        app.config.update(overrides)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))
    _ensure_storage_dir(app)

    register_services(app)
    _register_blueprints(app)
    return app


def _register_blueprints(app: Flask) -> None:
    from agritagger.api.drawing.routes import drawing_bp
    from agritagger.api.editor.routes import editor_bp
    from agritagger.api.exchange.routes import exchange_bp
    from agritagger.api.features.routes import features_bp

    app.register_blueprint(features_bp)
    app.register_blueprint(drawing_bp)
    app.register_blueprint(exchange_bp)
    app.register_blueprint(editor_bp)


def _ensure_storage_dir(app: Flask) -> None:
    """Resolve the local storage directory, defaulting to the instance folder."""
    storage_dir = app.config.get("STORAGE_DIR")
    if not storage_dir:
        storage_dir = Path(app.instance_path) / "storage"
        app.config["STORAGE_DIR"] = str(storage_dir)
    Path(storage_dir).mkdir(parents=True, exist_ok=True)
