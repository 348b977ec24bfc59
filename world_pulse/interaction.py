"""鼠标交互：点击选国家、悬停找最近的中心点"""
from __future__ import annotations

from .centroids import feature_alpha2, feature_area
from .channels import HoverEvent
from .config import HOVER_THRESHOLD_PX, LEAVE_POSITION
from .projection import polygon_contains


def feature_contains(feat, lon: float, lat: float) -> bool:
    return any(polygon_contains(poly, lon, lat) for poly in feat.polygons)


def hit_test(countries, lon: float, lat: float):
    """返回包含该经纬度的国家要素。

    国家互不重叠时就是第一个命中的要素；有飞地嵌套时取面积最小的那个。
    """
    best = None
    best_area = None
    for feat in countries:
        if not feature_contains(feat, lon, lat):
            continue
        area = feature_area(feat)
        if best is None or area < best_area:
            best, best_area = feat, area
    return best


def country_at(state, x: float, y: float) -> str | None:
    """屏幕坐标 → 二位码（无投影或未命中时为 None）。"""
    if state.projection is None or not state.countries:
        return None
    lon, lat = state.projection.invert(x, y)
    feat = hit_test(state.countries, lon, lat)
    if feat is None:
        return None
    return feature_alpha2(feat)


def handle_click(state, x: float, y: float, on_select=None, now=None) -> str | None:
    """点击：命中国家则回调并在中心点（没有时用点击位置）放一个 new 脉冲。"""
    code = country_at(state, x, y)
    if code is None:
        return None
    if on_select is not None:
        on_select(code)
    pos = state.centroids.get(code) or (x, y)
    state.blips.spawn(pos[0], pos[1], 'new', now)
    return code


def nearest_hover(centroids, x: float, y: float,
                  threshold: float = HOVER_THRESHOLD_PX) -> HoverEvent:
    nearest = None
    best_d2 = None
    for code, (cx, cy) in centroids.items():
        dx = cx - x
        dy = cy - y
        d2 = dx * dx + dy * dy
        if best_d2 is None or d2 < best_d2:
            nearest, best_d2 = code, d2
    if nearest is not None and best_d2 <= threshold * threshold:
        return HoverEvent(nearest, x, y)
    return HoverEvent(None, x, y)


def handle_pointer_move(state, x: float, y: float) -> HoverEvent:
    return nearest_hover(state.centroids, x, y)


def handle_pointer_leave() -> HoverEvent:
    return HoverEvent(None, *LEAVE_POSITION)
