"""Geometries shared across the test modules (GeoJSON lng/lat order)."""

UNIT_SQUARE = {
    "type": "Polygon",
    "coordinates": [[[0, 0], [0, 1], [1, 1], [1, 0], [0, 0]]],
}

SMALL_PLOT = {
    "type": "Polygon",
    "coordinates": [[[110.0, -7.0], [110.01, -7.0], [110.01, -7.01], [110.0, -7.01], [110.0, -7.0]]],
}

MOVED_PLOT = {
    "type": "Polygon",
    "coordinates": [[[110.0, -7.0], [110.02, -7.0], [110.02, -7.01], [110.0, -7.01], [110.0, -7.0]]],
}

FIELD_POINT = {"type": "Point", "coordinates": [110.005, -7.005]}
