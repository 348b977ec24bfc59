"""世界地图渲染模块（霓虹描边风格）

绘制顺序：径向渐变背景 → 陆地轮廓 → 国界 → 图钉 → 脉冲。
陆地和国界只依赖几何、投影和画布尺寸，合成到一张缓存图层里，
每帧只重画图钉和脉冲。
"""
from __future__ import annotations

import math

import pygame

from .config import (
    BG_CENTER, BG_RADIUS_RATIO, BG_STOPS, BLIP_NEW_GLOW, BLIP_REPEAT_GLOW,
    BLIP_RING_WIDTH, BORDER_CORE, BORDER_PASSES, CORE_STOPS, CYAN, LAND_CORE,
    LAND_PASSES, PIN_DOT_RADIUS, PIN_GLOW, PIN_RING_ALPHA, PIN_RING_RADIUS,
    PIN_RING_WIDTH, SOUTH_GATE_LAT, VIOLET, WHITE,
)

# 背景渐变按 1/4 分辨率生成再放大
_BG_DOWNSAMPLE = 4


def lerp_color(stops, t: float) -> tuple[int, int, int]:
    """在颜色节点 [(位置, (r, g, b)), ...] 之间线性插值。"""
    t = min(1.0, max(0.0, t))
    for (p0, c0), (p1, c1) in zip(stops, stops[1:]):
        if t <= p1:
            u = 0.0 if p1 <= p0 else (t - p0) / (p1 - p0)
            return tuple(int(round(a + (b - a) * u)) for a, b in zip(c0, c1))
    return tuple(stops[-1][1])


def south_gate_y(projection, height: float) -> float:
    """南纬 60° 在屏幕上的 y；其下方的线条被裁掉。"""
    if projection is None:
        return height
    _, y = projection.project(0.0, SOUTH_GATE_LAT)
    if not math.isfinite(y):
        return height
    return max(0.0, min(float(height), y))


def _alpha(value: float) -> int:
    return max(0, min(255, int(round(value * 255))))


def _line_width(width: float, ratio: float) -> int:
    return max(1, int(round(width * ratio)))


def blur(surface: pygame.Surface, radius: float) -> pygame.Surface:
    """缩小再放大，近似高斯模糊。"""
    if radius <= 1:
        return surface.copy()
    w, h = surface.get_size()
    factor = max(2.0, radius / 2.0)
    small = pygame.transform.smoothscale(
        surface, (max(1, int(w / factor)), max(1, int(h / factor))))
    return pygame.transform.smoothscale(small, (w, h))


class MapRenderer:
    def __init__(self):
        self._bg_key = None
        self._bg = None
        self._grad_key = None
        self._grad = None
        self._map_key = None
        self._map = None

    # ---- 背景 ----
    def background(self, size) -> pygame.Surface:
        if self._bg_key == size:
            return self._bg
        w, h = size
        sw, sh = max(1, w // _BG_DOWNSAMPLE), max(1, h // _BG_DOWNSAMPLE)
        small = pygame.Surface((sw, sh), 0, 32)
        cx, cy = sw * BG_CENTER[0], sh * BG_CENTER[1]
        r1 = math.hypot(sw, sh) * BG_RADIUS_RATIO
        r0 = r1 * 0.05
        small.fill(lerp_color(BG_STOPS, 1.0))
        # 由外向内画同心圆
        r = int(math.ceil(r1))
        while r > 0:
            t = 0.0 if r <= r0 else (r - r0) / (r1 - r0)
            pygame.draw.circle(small, lerp_color(BG_STOPS, t), (int(cx), int(cy)), r)
            r -= 1
        self._bg = pygame.transform.smoothscale(small, (w, h))
        self._bg_key = size
        return self._bg

    def core_gradient(self, size) -> pygame.Surface:
        """从左到右 紫 → 青 → 靛 的渐变（用于描边主体）。"""
        if self._grad_key == size:
            return self._grad
        w, h = size
        row = pygame.Surface((w, 1), pygame.SRCALPHA)
        for x in range(w):
            t = x / max(1, w - 1)
            row.set_at((x, 0), lerp_color(CORE_STOPS, t) + (255,))
        self._grad = pygame.transform.scale(row, (w, h))
        self._grad_key = size
        return self._grad

    # ---- 陆地 / 国界 ----
    def _stroke_layer(self, size, lines, closed, color, width, alpha) -> pygame.Surface:
        layer = pygame.Surface(size, pygame.SRCALPHA)
        rgba = tuple(color) + (_alpha(alpha),)
        for pts in lines:
            if len(pts) >= 2:
                pygame.draw.lines(layer, rgba, closed, pts, width)
        return layer

    def _glow_stroke(self, target, lines, closed, passes, core, ratio):
        """三层描边：两层模糊光晕 + 一层渐变主体。"""
        size = target.get_size()
        for color, width, alpha, glow in passes:
            layer = self._stroke_layer(size, lines, closed, color, _line_width(width, ratio), alpha)
            halo = blur(layer, glow * ratio)
            target.blit(halo, (0, 0))
            target.blit(layer, (0, 0))

        core_width, core_alpha = core
        mask = self._stroke_layer(size, lines, closed, WHITE, _line_width(core_width, ratio), core_alpha)
        mask.blit(self.core_gradient(size), (0, 0), special_flags=pygame.BLEND_RGBA_MULT)
        target.blit(mask, (0, 0))

    def _projected(self, projection, rings, ratio):
        out = []
        for ring in rings:
            out.append([(x * ratio, y * ratio) for x, y in projection.project_ring(ring)])
        return out

    def map_layer(self, state, size) -> pygame.Surface | None:
        """陆地 + 国界图层（缓存，投影或尺寸变化时重建）。"""
        if state.geometry is None or state.projection is None:
            return None
        proj = state.projection
        key = (id(state.geometry), proj.scale, tuple(proj.translate), size, state.pixel_ratio)
        if key == self._map_key:
            return self._map

        ratio = state.pixel_ratio
        layer = pygame.Surface(size, pygame.SRCALPHA)
        land_rings = [ring for poly in state.geometry.land.polygons for ring in poly]
        self._glow_stroke(layer, self._projected(proj, land_rings, ratio), True,
                          LAND_PASSES, LAND_CORE, ratio)
        self._glow_stroke(layer, self._projected(proj, state.geometry.borders.lines, ratio), False,
                          BORDER_PASSES, BORDER_CORE, ratio)
        self._map = layer
        self._map_key = key
        return layer

    # ---- 图钉 / 脉冲 ----
    def _glow_circle(self, canvas, center, radius, color, alpha, glow, width=0):
        """带光晕的圆（临时 surface 实现透明度）。"""
        pad = int(math.ceil(radius + glow + 2))
        temp = pygame.Surface((pad * 2, pad * 2), pygame.SRCALPHA)
        c = (pad, pad)
        for i in range(int(glow), 0, -2):
            a = _alpha(alpha * 0.35 * (1 - i / (glow + 1)))
            if a <= 0:
                continue
            pygame.draw.circle(temp, tuple(color) + (a,), c, radius + i,
                               0 if width == 0 else max(1, width + i))
        pygame.draw.circle(temp, tuple(color) + (_alpha(alpha),), c, max(1, int(round(radius))), width)
        canvas.blit(temp, (center[0] - pad, center[1] - pad))

    def draw_pins(self, canvas, state) -> list[str]:
        """画所有已知中心点的图钉，返回实际画出的国家码。"""
        ratio = state.pixel_ratio
        drawn = []
        for code in sorted(state.pins):
            pos = state.centroids.get(code)
            if pos is None:
                continue
            center = (pos[0] * ratio, pos[1] * ratio)
            self._glow_circle(canvas, center, PIN_DOT_RADIUS * ratio, CYAN, 0.95, PIN_GLOW * ratio)
            self._glow_circle(canvas, center, PIN_RING_RADIUS * ratio, VIOLET, PIN_RING_ALPHA, 4 * ratio,
                              width=_line_width(PIN_RING_WIDTH, ratio))
            drawn.append(code)
        return drawn

    def draw_blips(self, canvas, frames, ratio):
        for f in frames:
            center = (f.blip.x * ratio, f.blip.y * ratio)
            if f.blip.kind == 'new':
                self._glow_circle(canvas, center, f.radius * ratio, WHITE, f.alpha, BLIP_NEW_GLOW * ratio)
            else:
                self._glow_circle(canvas, center, f.radius * ratio, WHITE, f.alpha, BLIP_REPEAT_GLOW * ratio,
                                  width=_line_width(BLIP_RING_WIDTH, ratio))

    # ---- 每帧 ----
    def draw(self, canvas: pygame.Surface, state, now: float) -> list[str]:
        """画一帧，返回本帧画出的图钉。"""
        size = canvas.get_size()
        canvas.blit(self.background(size), (0, 0))

        layer = self.map_layer(state, size)
        if layer is not None:
            gate = south_gate_y(state.projection, state.height) * state.pixel_ratio
            canvas.set_clip(pygame.Rect(0, 0, size[0], int(round(gate))))
            canvas.blit(layer, (0, 0))
            canvas.set_clip(None)

        pins = self.draw_pins(canvas, state)
        self.draw_blips(canvas, state.blips.advance(now), state.pixel_ratio)
        return pins
