"""渲染器的全部可变状态（单一所有者）"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .centroids import CentroidIndex
from .config import MAX_PIXEL_RATIO
from .effects import BlipScheduler
from .projection import EquirectangularProjection, fit_viewport
from .topology import GeometryBundle

_LOGGER = logging.getLogger("world_pulse.state")


def clamp_pixel_ratio(ratio) -> float:
    try:
        ratio = float(ratio or 1.0)
    except (TypeError, ValueError):
        ratio = 1.0
    return max(1.0, min(ratio, MAX_PIXEL_RATIO))


@dataclass
class WorldState:
    width: int = 0
    height: int = 0
    pixel_ratio: float = 1.0
    geometry: GeometryBundle | None = None
    projection: EquirectangularProjection | None = None
    centroids: CentroidIndex = field(default_factory=CentroidIndex)
    pins: set[str] = field(default_factory=set)
    blips: BlipScheduler = field(default_factory=BlipScheduler)

    @property
    def countries(self):
        return self.geometry.countries if self.geometry else []

    def resize(self, width: int, height: int, pixel_ratio=None) -> None:
        """更新视口并同时重建投影和中心点索引。"""
        self.width = max(0, int(width))
        self.height = max(0, int(height))
        if pixel_ratio is not None:
            self.pixel_ratio = clamp_pixel_ratio(pixel_ratio)
        self.relayout()

    def relayout(self) -> None:
        if self.geometry is None:
            self.projection = None
            self.centroids.clear()
            return
        self.projection = fit_viewport(self.width, self.height, self.geometry.land.bounds())
        self.centroids.rebuild(self.projection, self.geometry.countries)
        _LOGGER.debug("relayout %dx%d scale=%.2f", self.width, self.height, self.projection.scale)
