from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from agritagger.app.container import get_tagger_service
from agritagger.services.persistence import PersistenceError
from agritagger.services.tagger_service import FeatureNotFoundError, InvalidAttributeError

features_bp = Blueprint("features", __name__)


@features_bp.get("/api/features")
def list_features():
    """List features for the side panel, filtered by search text and crop."""
    service = get_tagger_service()
    search = request.args.get("search", "")
    crop = request.args.get("crop") or service.all_crops

    features = service.query(search=search, crop=crop)
    return jsonify({
        "features": [service.summarize(feature) for feature in features],
        "count": len(features),
        "total": len(service.store),
        "selectedId": service.state.selected_id,
        "search": search,
        "crop": crop,
    }), 200


@features_bp.get("/api/features/<feature_id>")
def get_feature(feature_id: str):
    """Get one feature with its computed area."""
    service = get_tagger_service()
    try:
        feature = service.get_feature(feature_id)
    except FeatureNotFoundError as exc:
        return jsonify({"message": str(exc)}), 404
    return jsonify({"feature": service.summarize(feature)}), 200


@features_bp.patch("/api/features/<feature_id>")
def update_feature(feature_id: str):
    """Update feature attributes (name, crop, season, color, notes)."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data:
        return jsonify({"message": "At least one attribute must be provided"}), 400

    service = get_tagger_service()
    try:
        feature = service.update_attributes(feature_id, data)
    except FeatureNotFoundError as exc:
        return jsonify({"message": str(exc)}), 404
    except InvalidAttributeError as exc:
        return jsonify({"message": str(exc)}), 400
    except PersistenceError as exc:
        current_app.logger.error(f"Error saving feature {feature_id}: {exc}", exc_info=True)
        return jsonify({"message": "Failed to save features; the change was undone"}), 500

    return jsonify({"message": "Feature updated successfully.", "feature": service.summarize(feature)}), 200


@features_bp.delete("/api/features/<feature_id>")
def delete_feature(feature_id: str):
    """Delete a feature from the list panel."""
    service = get_tagger_service()
    try:
        removed = service.delete_feature(feature_id)
    except PersistenceError as exc:
        current_app.logger.error(f"Error deleting feature {feature_id}: {exc}", exc_info=True)
        return jsonify({"message": "Failed to save features; the change was undone"}), 500

    return jsonify({
        "message": "Feature deleted." if removed else "Feature already removed.",
        "deleted": removed,
        "selectedId": service.state.selected_id,
    }), 200


@features_bp.post("/api/features/<feature_id>/select")
def select_feature(feature_id: str):
    """Make a feature the one shown in the editor panel."""
    service = get_tagger_service()
    try:
        service.select(feature_id)
    except FeatureNotFoundError as exc:
        return jsonify({"message": str(exc)}), 404
    return jsonify({"selectedId": service.state.selected_id}), 200


@features_bp.get("/api/features/<feature_id>/bounds")
def feature_bounds(feature_id: str):
    """Bounding box used to zoom the map onto a feature."""
    service = get_tagger_service()
    try:
        bounds = service.zoom_bounds(feature_id)
    except FeatureNotFoundError as exc:
        return jsonify({"message": str(exc)}), 404
    if bounds is None:
        return jsonify({"message": f"Feature {feature_id} has no layer on the map"}), 404

    min_x, min_y, max_x, max_y = bounds
    return jsonify({
        "featureId": feature_id,
        "bounds": {"minX": min_x, "minY": min_y, "maxX": max_x, "maxY": max_y},
    }), 200
