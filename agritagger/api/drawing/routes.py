from __future__ import annotations

from typing import Any, List

from flask import Blueprint, current_app, jsonify, request

from agritagger.app.container import get_tagger_service
from agritagger.domain.events import CreateEvent, DeleteEvent, EditEvent
from agritagger.domain.features import geometry_problem
from agritagger.services.persistence import PersistenceError
from agritagger.surface.memory import MemoryLayer, MemorySurface

drawing_bp = Blueprint("drawing", __name__)


def _tagged_layers(surface: MemorySurface, items: Any, need_geometry: bool) -> List[MemoryLayer]:
    """Resolve ``[{featureId, geometry}]`` payload items to surface layers."""
    if not isinstance(items, list):
        raise ValueError("layers must be a list")
    for item in items:
        if not isinstance(item, dict):
            raise ValueError("each layer must be an object")
        if need_geometry:
            problem = geometry_problem(item.get("geometry"))
            if problem:
                raise ValueError(f"layer {item.get('featureId')!r} has {problem}")

    layers = []
    for item in items:
        geometry = item.get("geometry") if need_geometry else None
        layers.extend(surface.resolve(item.get("featureId"), geometry))
    return layers


@drawing_bp.post("/api/draw/created")
def shape_created():
    """A shape was drawn on the map; register it as a new feature."""
    data = request.get_json(silent=True) or {}
    shape_kind = data.get("shapeKind") or data.get("layerType")
    geometry = data.get("geometry")
    if not isinstance(shape_kind, str):
        return jsonify({"message": "shapeKind is required"}), 400
    problem = geometry_problem(geometry)
    if problem:
        return jsonify({"message": f"Invalid drawn shape: {problem}"}), 400

    service = get_tagger_service()
    try:
        feature_id = service.handle_event(CreateEvent(shape_kind, MemoryLayer(geometry)))
    except PersistenceError as exc:
        current_app.logger.error(f"Error saving drawn shape: {exc}", exc_info=True)
        return jsonify({"message": "Failed to save features; the change was undone"}), 500

    feature = service.get_feature(feature_id)
    return jsonify({
        "message": "Feature created.",
        "featureId": feature_id,
        "feature": service.summarize(feature),
        "selectedId": service.state.selected_id,
    }), 201


@drawing_bp.post("/api/draw/edited")
def shapes_edited():
    """Vertices of existing layers were moved."""
    data = request.get_json(silent=True) or {}
    service = get_tagger_service()
    try:
        layers = _tagged_layers(service.surface, data.get("layers"), need_geometry=True)
    except ValueError as exc:
        return jsonify({"message": f"Invalid edit event: {exc}"}), 400

    try:
        service.handle_event(EditEvent(tuple(layers)))
    except PersistenceError as exc:
        current_app.logger.error(f"Error saving edited shapes: {exc}", exc_info=True)
        return jsonify({"message": "Failed to save features; the change was undone"}), 500

    return jsonify({"message": "Features updated.", "count": len(layers)}), 200


@drawing_bp.post("/api/draw/deleted")
def shapes_deleted():
    """Layers were removed with the map's delete tool."""
    data = request.get_json(silent=True) or {}
    service = get_tagger_service()
    try:
        layers = _tagged_layers(service.surface, data.get("layers"), need_geometry=False)
    except ValueError as exc:
        return jsonify({"message": f"Invalid delete event: {exc}"}), 400

    try:
        service.handle_event(DeleteEvent(tuple(layers)))
    except PersistenceError as exc:
        current_app.logger.error(f"Error saving after delete: {exc}", exc_info=True)
        return jsonify({"message": "Failed to save features; the change was undone"}), 500

    return jsonify({"message": "Features deleted.", "selectedId": service.state.selected_id}), 200


@drawing_bp.get("/api/surface")
def surface_layers():
    """Layers the map should display, each tagged with its feature id."""
    service = get_tagger_service()
    return jsonify({"layers": service.surface_layers()}), 200
