"""等距圆柱投影（经纬度 ↔ 屏幕像素）与反算。

单位尺度下 x = λ、y = −φ（弧度），屏幕坐标再乘以 scale 并加上 translate。
投影只随视口尺寸变化，每次 resize 都要重新 fit。
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from .config import FIT_PADDING_MIN, FIT_PADDING_RATIO, FIT_UPSCALE


class ProjectionFitError(ValueError):
    """几何为空或退化，无法自动适配视口。"""


def lonlat_to_unit(lon_deg: float, lat_deg: float) -> tuple[float, float]:
    """经纬度(度) → 单位平面坐标。"""
    return math.radians(lon_deg), -math.radians(lat_deg)


def unit_to_lonlat(x: float, y: float) -> tuple[float, float]:
    """单位平面坐标 → 经纬度(度)。"""
    return math.degrees(x), math.degrees(-y)


@dataclass
class EquirectangularProjection:
    scale: float = 150.0
    translate: tuple[float, float] = (480.0, 250.0)

    def project(self, lon: float, lat: float) -> tuple[float, float]:
        ux, uy = lonlat_to_unit(lon, lat)
        tx, ty = self.translate
        return tx + ux * self.scale, ty + uy * self.scale

    def invert(self, x: float, y: float) -> tuple[float, float]:
        tx, ty = self.translate
        return unit_to_lonlat((x - tx) / self.scale, (y - ty) / self.scale)

    def project_ring(self, ring) -> list[tuple[float, float]]:
        return [self.project(lon, lat) for lon, lat in ring]

    def scaled(self, factor: float) -> "EquirectangularProjection":
        """放大 scale，translate 不变（以经纬度原点为中心放大）。"""
        return EquirectangularProjection(self.scale * factor, self.translate)

    def fit_extent(self, extent, bounds) -> "EquirectangularProjection":
        """让经纬度范围 bounds 恰好放进屏幕矩形 extent。

        extent: ((x0, y0), (x1, y1))
        bounds: (min_lon, min_lat, max_lon, max_lat)
        """
        if bounds is None:
            raise ProjectionFitError("no geometry to fit")
        (x0, y0), (x1, y1) = extent
        min_lon, min_lat, max_lon, max_lat = bounds
        bx0, by0 = lonlat_to_unit(min_lon, max_lat)
        bx1, by1 = lonlat_to_unit(max_lon, min_lat)
        bw, bh = bx1 - bx0, by1 - by0
        w, h = x1 - x0, y1 - y0
        if not (bw > 0 and bh > 0 and w > 0 and h > 0):
            raise ProjectionFitError(f"degenerate extent {extent} for bounds {bounds}")

        k = min(w / bw, h / bh)
        tx = x0 + (w - k * (bx0 + bx1)) / 2
        ty = y0 + (h - k * (by0 + by1)) / 2
        if not all(math.isfinite(v) for v in (k, tx, ty)):
            raise ProjectionFitError("non-finite projection parameters")
        return EquirectangularProjection(k, (tx, ty))


def fallback_projection(width: float, height: float) -> EquirectangularProjection:
    """按宽度估算 scale，居中显示。"""
    scale = max(1.0, width) / (2 * math.pi)
    return EquirectangularProjection(scale * FIT_UPSCALE, (width / 2, height / 2))


def fit_viewport(width: float, height: float, bounds) -> EquirectangularProjection:
    """按当前视口生成投影：对称留白 + 6% 放大，失败时退化为按宽度缩放。"""
    padding = max(FIT_PADDING_MIN, min(width, height) * FIT_PADDING_RATIO)
    try:
        fitted = EquirectangularProjection().fit_extent(
            ((padding, padding), (width - padding, height - padding)), bounds)
    except ProjectionFitError:
        return fallback_projection(width, height)
    return fitted.scaled(FIT_UPSCALE)


def point_in_ring(lon: float, lat: float, ring) -> bool:
    """射线法判断点是否在环内（不处理洞，洞由 polygon_contains 扣除）"""
    n = len(ring)
    inside = False

    j = n - 1
    for i in range(n):
        xi, yi = ring[i]
        xj, yj = ring[j]

        if ((yi > lat) != (yj > lat)) and \
           (lon < (xj - xi) * (lat - yi) / (yj - yi) + xi):
            inside = not inside
        j = i

    return inside


def polygon_contains(polygon, lon: float, lat: float) -> bool:
    """在外环内且不在任何洞内。"""
    if not polygon or not point_in_ring(lon, lat, polygon[0]):
        return False
    return not any(point_in_ring(lon, lat, hole) for hole in polygon[1:])

