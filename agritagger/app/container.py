from __future__ import annotations

from flask import current_app

from agritagger.services.tagger_service import TaggerService

TAGGER_SERVICE_KEY = "tagger_service"


def register_services(app) -> None:
    """Pre-instantiate core services and store them on the application."""
    with app.app_context():
        tagger_service = TaggerService.from_app_config()
        app.extensions[TAGGER_SERVICE_KEY] = tagger_service
        app.logger.info(
            f"Loaded {len(tagger_service.store)} features from {app.config['STORAGE_DIR']}"
        )


def get_tagger_service() -> TaggerService:
    """Return the shared tagger service instance."""
    service = current_app.extensions.get(TAGGER_SERVICE_KEY)
    if service is None:
        service = TaggerService.from_app_config()
        current_app.extensions[TAGGER_SERVICE_KEY] = service
    return service
