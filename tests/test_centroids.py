import math

import pytest

from world_pulse.centroids import CentroidIndex, feature_area, polygons_centroid
from world_pulse.country_codes import alpha2_from_numeric, normalize_country_code
from world_pulse.topology import CountryFeature


def test_alpha2_from_numeric():
    assert alpha2_from_numeric("840") == "US"
    assert alpha2_from_numeric(840) == "US"
    assert alpha2_from_numeric("4") == "AF"
    assert alpha2_from_numeric("-99") is None
    assert alpha2_from_numeric("abc") is None
    assert alpha2_from_numeric(None) is None
    assert alpha2_from_numeric("999") is None


def test_normalize_country_code():
    assert normalize_country_code(" us ") == "US"
    assert normalize_country_code("USA") is None
    assert normalize_country_code("U1") is None
    assert normalize_country_code(None) is None


def test_square_centroid():
    square = [[(0, 0), (4, 0), (4, 2), (0, 2), (0, 0)]]
    assert polygons_centroid([square]) == pytest.approx((2, 1))
    # 绕向不影响结果
    assert polygons_centroid([[square[0][::-1]]]) == pytest.approx((2, 1))


def test_hole_shifts_centroid():
    outer = [(0, 0), (4, 0), (4, 4), (0, 4), (0, 0)]
    hole = [(2, 1), (3, 1), (3, 3), (2, 3), (2, 1)]
    # (16 * 2 - 2 * 2.5) / 14
    assert polygons_centroid([[outer, hole]]) == pytest.approx((27 / 14, 2))


def test_multipolygon_weighted_by_area():
    big = [(0, 0), (4, 0), (4, 4), (0, 4), (0, 0)]
    small = [(10, 0), (12, 0), (12, 2), (10, 2), (10, 0)]
    # x = (16 * 2 + 4 * 11) / 20, y = (16 * 2 + 4 * 1) / 20
    assert polygons_centroid([[big], [small]]) == pytest.approx((3.8, 1.8))


def test_empty_geometry_has_no_centroid():
    assert polygons_centroid([]) is None
    assert polygons_centroid([[[(0, 0), (1, 1)]]]) is None
    assert feature_area(CountryFeature("1", [])) == 0


def test_index_uses_projected_space(state):
    us = state.centroids.get("US")
    assert us == pytest.approx(state.projection.project(0, 0))
    assert state.centroids.codes() == {"US", "CA", "AQ"}


def test_index_skips_unknown_and_non_finite(state):
    class ExplodingProjection:
        def project_ring(self, ring):
            return [(math.nan, math.nan) for _ in ring]

    feats = state.countries + [CountryFeature(id="-99", polygons=state.countries[0].polygons)]
    index = CentroidIndex()
    index.rebuild(state.projection, feats)
    assert len(index) == 3

    index.rebuild(ExplodingProjection(), feats)
    assert len(index) == 0


def test_resolve_computes_missing_entry(state):
    index = CentroidIndex()
    assert "US" not in index
    pos = index.resolve("us", state.projection, state.countries)
    assert pos == pytest.approx(state.projection.project(0, 0))
    assert "US" in index
    assert index.resolve("ZZ", state.projection, state.countries) is None
    assert index.resolve("bad!", state.projection, state.countries) is None


def test_feature_area_subtracts_holes():
    outer = [(0, 0), (4, 0), (4, 4), (0, 4), (0, 0)]
    hole = [(1, 1), (2, 1), (2, 2), (1, 2), (1, 1)]
    assert feature_area(CountryFeature("1", [[outer, hole]])) == pytest.approx(15)
