from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from agritagger.app.container import get_tagger_service
from agritagger.services.tagger_service import InvalidAttributeError

editor_bp = Blueprint("editor", __name__)


@editor_bp.get("/api/config")
def editor_config():
    """Vocabulary, basemaps and drawing defaults for the editor."""
    service = get_tagger_service()
    config = current_app.config
    return jsonify({
        **service.vocabulary.to_json(),
        "allCrops": service.all_crops,
        "drawColor": service.state.draw_color,
        "basemaps": config["BASEMAPS"],
        "defaultBasemap": config["DEFAULT_BASEMAP"],
        "center": config["MAP_CENTER"],
        "zoom": config["MAP_ZOOM"],
    }), 200


@editor_bp.put("/api/editor/color")
def set_draw_color():
    """Change the stroke color used for newly drawn shapes."""
    data = request.get_json(silent=True) or {}
    service = get_tagger_service()
    try:
        service.set_draw_color(data.get("color"))
    except InvalidAttributeError as exc:
        return jsonify({"message": str(exc)}), 400
    return jsonify({"drawColor": service.state.draw_color}), 200
