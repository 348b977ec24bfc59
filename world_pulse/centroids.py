"""国家中心点索引（屏幕坐标），随投影一起重建"""
from __future__ import annotations

import logging
import math

from shapely.errors import ShapelyError
from shapely.geometry import MultiPolygon, Polygon

from .country_codes import alpha2_from_numeric, normalize_country_code

_LOGGER = logging.getLogger("world_pulse.centroids")


def to_shape(polygons) -> MultiPolygon:
    """[[外环, 洞, ...], ...] → shapely MultiPolygon，少于 3 个点的环跳过。"""
    parts = []
    for poly in polygons:
        if not poly or len(poly[0]) < 3:
            continue
        holes = [ring for ring in poly[1:] if len(ring) >= 3]
        parts.append(Polygon(poly[0], holes))
    return MultiPolygon(parts)


def polygons_centroid(polygons) -> tuple[float, float] | None:
    """面积加权中心点（洞的面积扣除）；空几何或非有限值返回 None。"""
    try:
        shape = to_shape(polygons)
        if shape.is_empty:
            return None
        c = shape.centroid
    except (ValueError, ShapelyError) as exc:
        _LOGGER.debug("centroid failed: %s", exc)
        return None
    if c.is_empty or not (math.isfinite(c.x) and math.isfinite(c.y)):
        return None
    return c.x, c.y


def feature_alpha2(feat) -> str | None:
    if feat.id is None:
        return None
    return alpha2_from_numeric(feat.id)


def feature_area(feat) -> float:
    """经纬度平面里的面积（用于飞地判定）。"""
    try:
        return to_shape(feat.polygons).area
    except (ValueError, ShapelyError):
        return math.inf


def projected_centroid(projection, feat) -> tuple[float, float] | None:
    projected = [[projection.project_ring(ring) for ring in poly] for poly in feat.polygons]
    return polygons_centroid(projected)


class CentroidIndex:
    """二位码 → 屏幕中心点。只对当前投影有效。"""

    def __init__(self):
        self._points: dict[str, tuple[float, float]] = {}

    def __len__(self):
        return len(self._points)

    def __contains__(self, code):
        return code in self._points

    def get(self, code: str):
        return self._points.get(code)

    def items(self):
        return self._points.items()

    def codes(self) -> set[str]:
        return set(self._points)

    def clear(self):
        self._points.clear()

    def rebuild(self, projection, countries) -> None:
        """清空后按当前投影重新计算所有国家的中心点。"""
        self._points.clear()
        if projection is None or not countries:
            return
        for feat in countries:
            code = feature_alpha2(feat)
            if not code:
                continue
            try:
                c = projected_centroid(projection, feat)
            except (TypeError, ValueError, ZeroDivisionError, OverflowError) as exc:
                _LOGGER.debug("centroid failed for %s: %s", code, exc)
                continue
            if c is not None:
                self._points[code] = c
        _LOGGER.debug("centroid index rebuilt: %d countries", len(self._points))

    def resolve(self, code, projection, countries):
        """查询中心点；索引中还没有时现场计算并缓存。"""
        code = normalize_country_code(code)
        if code is None:
            return None
        pos = self._points.get(code)
        if pos is not None or projection is None or not countries:
            return pos
        for feat in countries:
            if feature_alpha2(feat) != code:
                continue
            try:
                pos = projected_centroid(projection, feat)
            except (TypeError, ValueError, ZeroDivisionError, OverflowError) as exc:
                _LOGGER.debug("centroid failed for %s: %s", code, exc)
                return None
            if pos is not None:
                self._points[code] = pos
            return pos
        return None
