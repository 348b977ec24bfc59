import math

import pytest

from world_pulse.config import FIT_UPSCALE
from world_pulse.projection import (
    EquirectangularProjection,
    ProjectionFitError,
    fallback_projection,
    fit_viewport,
    point_in_ring,
    polygon_contains,
)


@pytest.mark.parametrize("lon,lat", [(0, 0), (-120.5, 45.25), (179.9, -59.0), (12.3, 78.9)])
def test_round_trip(lon, lat):
    proj = fit_viewport(1280, 720, (-180, -90, 180, 90))
    x, y = proj.project(lon, lat)
    assert proj.invert(x, y) == pytest.approx((lon, lat), abs=1e-9)


def test_north_is_up():
    proj = EquirectangularProjection(100, (0, 0))
    assert proj.project(0, 10)[1] < proj.project(0, -10)[1]


def test_fit_viewport_padding_and_upscale():
    bounds = (-180, -90, 180, 90)
    proj = fit_viewport(1000, 500, bounds)
    padding = max(12, 500 * 0.028)
    fitted = EquirectangularProjection().fit_extent(
        ((padding, padding), (1000 - padding, 500 - padding)), bounds)
    assert proj.scale == pytest.approx(fitted.scale * FIT_UPSCALE)
    assert proj.translate == fitted.translate
    # 全球范围的中心就在视口中心
    assert proj.project(0, 0) == pytest.approx((500, 250))


def test_fit_viewport_minimum_padding():
    bounds = (-180, -90, 180, 90)
    proj = fit_viewport(300, 200, bounds)
    fitted = EquirectangularProjection().fit_extent(((12, 12), (288, 188)), bounds)
    assert proj.scale == pytest.approx(fitted.scale * FIT_UPSCALE)


def test_fit_extent_rejects_empty():
    with pytest.raises(ProjectionFitError):
        EquirectangularProjection().fit_extent(((0, 0), (100, 100)), None)
    with pytest.raises(ProjectionFitError):
        EquirectangularProjection().fit_extent(((0, 0), (100, 100)), (5, 5, 5, 5))


def test_fallback_when_no_geometry():
    proj = fit_viewport(800, 600, None)
    assert proj.scale == pytest.approx(800 / (2 * math.pi) * FIT_UPSCALE)
    assert proj.translate == (400, 300)
    assert proj == fallback_projection(800, 600)


def test_point_in_polygon_with_hole():
    outer = [(0, 0), (10, 0), (10, 10), (0, 10), (0, 0)]
    hole = [(4, 4), (6, 4), (6, 6), (4, 6), (4, 4)]
    assert point_in_ring(2, 2, outer)
    assert not point_in_ring(12, 2, outer)
    assert polygon_contains([outer, hole], 2, 2)
    assert not polygon_contains([outer, hole], 5, 5)
    assert not polygon_contains([], 5, 5)
