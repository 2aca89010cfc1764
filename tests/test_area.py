"""Tests for the geodesic hectare calculator."""

import pytest

from agritagger.services.area import area_ha, area_m2
from tests.samples import FIELD_POINT, SMALL_PLOT, UNIT_SQUARE


class TestAreaHa:
    """Polygon area in hectares, zero for everything else."""

    def test_one_degree_cell_at_equator(self):
        """A 1x1 degree cell at the equator is about 12,308 km2 on WGS84."""
        assert area_ha(UNIT_SQUARE) == pytest.approx(1_230_800, rel=0.01)

    def test_orientation_does_not_matter(self):
        """Clockwise and counter-clockwise rings give the same positive area."""
        ring = UNIT_SQUARE["coordinates"][0]
        reversed_square = {"type": "Polygon", "coordinates": [list(reversed(ring))]}
        assert area_ha(reversed_square) == pytest.approx(area_ha(UNIT_SQUARE))
        assert area_ha(reversed_square) > 0

    def test_small_plot(self):
        """A 0.01 degree square near Java is roughly 120 ha."""
        assert area_ha(SMALL_PLOT) == pytest.approx(122.5, rel=0.02)

    def test_hole_is_subtracted(self):
        """Interior rings reduce the area."""
        holed = {
            "type": "Polygon",
            "coordinates": [
                UNIT_SQUARE["coordinates"][0],
                [[0.25, 0.25], [0.75, 0.25], [0.75, 0.75], [0.25, 0.75], [0.25, 0.25]],
            ],
        }
        assert area_ha(holed) == pytest.approx(area_ha(UNIT_SQUARE) * 0.75, rel=0.01)

    def test_multipolygon_sums_parts(self):
        """A MultiPolygon area is the sum of its parts."""
        shifted = [[[x + 2, y] for x, y in UNIT_SQUARE["coordinates"][0]]]
        multi = {"type": "MultiPolygon", "coordinates": [UNIT_SQUARE["coordinates"], shifted]}
        assert area_ha(multi) == pytest.approx(2 * area_ha(UNIT_SQUARE), rel=1e-6)

    def test_point_is_exactly_zero(self):
        """Points have no area."""
        assert area_ha(FIELD_POINT) == 0

    def test_linestring_is_zero(self):
        """Lines have no area."""
        assert area_ha({"type": "LineString", "coordinates": [[0, 0], [1, 1]]}) == 0

    def test_feature_wrapper_is_unwrapped(self):
        """A GeoJSON Feature is measured by its geometry."""
        feature = {"type": "Feature", "geometry": UNIT_SQUARE, "properties": {}}
        assert area_ha(feature) == pytest.approx(area_ha(UNIT_SQUARE))

    @pytest.mark.parametrize("bad", [
        None,
        "Polygon",
        {},
        {"type": "Polygon"},
        {"type": "Polygon", "coordinates": "nope"},
        {"type": "Polygon", "coordinates": [[[0, 0], [1, 1]]]},
        {"type": "Feature", "geometry": None},
    ])
    def test_malformed_input_is_zero(self, bad):
        """Malformed geometries never raise."""
        assert area_ha(bad) == 0.0

    def test_square_meters_scale(self):
        """area_m2 and area_ha differ by a factor of 10,000."""
        assert area_m2(SMALL_PLOT) == pytest.approx(area_ha(SMALL_PLOT) * 10_000)
