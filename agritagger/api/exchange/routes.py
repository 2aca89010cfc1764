from __future__ import annotations

from flask import Blueprint, Response, current_app, jsonify, request
from werkzeug.utils import secure_filename

from agritagger.app.container import get_tagger_service
from agritagger.services.geojson_gateway import GEOJSON_MEDIA_TYPE, FeatureImportError
from agritagger.services.persistence import PersistenceError

exchange_bp = Blueprint("exchange", __name__)

_ALLOWED_EXTENSIONS = {"json", "geojson"}


@exchange_bp.get("/api/export")
def export_geojson():
    """Download every feature as a dated GeoJSON FeatureCollection."""
    service = get_tagger_service()
    filename = service.export_filename()
    body = service.export_text()
    current_app.logger.info(f"Exporting {len(service.store)} features as {filename}")
    return Response(
        body,
        mimetype=GEOJSON_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@exchange_bp.post("/api/import")
def import_geojson():
    """Import a GeoJSON FeatureCollection uploaded as the ``file`` field."""
    file = request.files.get("file")
    if file is None or not file.filename:
        return jsonify({"message": "No file was provided."}), 400

    filename = secure_filename(file.filename)
    extension = filename.rsplit(".", 1)[1].lower() if "." in filename else ""
    if extension and extension not in _ALLOWED_EXTENSIONS:
        return jsonify({"message": f"Failed to import GeoJSON: unsupported file type .{extension}"}), 400

    content = file.read()
    if not content:
        return jsonify({"message": "Failed to import GeoJSON: file is empty"}), 400

    service = get_tagger_service()
    try:
        outcome = service.import_document(content)
    except FeatureImportError as exc:
        current_app.logger.info(f"Rejected import of {filename}: {exc}")
        return jsonify({"message": f"Failed to import GeoJSON: {exc}"}), 400
    except PersistenceError as exc:
        current_app.logger.error(f"Error saving imported features: {exc}", exc_info=True)
        return jsonify({"message": "Failed to save features; the change was undone"}), 500

    return jsonify({
        "message": f"Imported {outcome.imported} features.",
        "outcome": outcome.to_json(),
        "selectedId": service.state.selected_id,
    }), 201
