"""WorldBackground：全屏世界地图组件

- 后台线程加载地形数据，加载完成前只画渐变背景
- 点击地图选中国家并放一个 new 脉冲，回调 on_country_select(alpha2)
- 订阅 pins / blips 通道，向 hover 通道发布悬停状态
- initialize() / teardown() 成对调用，teardown 可重复调用
"""
from __future__ import annotations

import logging
from concurrent.futures import CancelledError, ThreadPoolExecutor

import pygame

from .channels import BlipEvent, PinEvent, WorldChannels
from .config import COUNTRIES_TOPOLOGY_URL, LAND_TOPOLOGY_URL
from .country_codes import normalize_country_code
from .effects import BLIP_KINDS, now_ms
from .interaction import handle_click, handle_pointer_leave, handle_pointer_move
from .map_renderer import MapRenderer
from .state import WorldState
from .topology import TopologyError, load_world

_LOGGER = logging.getLogger("world_pulse.world_background")


class WorldBackground:
    def __init__(self, channels: WorldChannels | None = None, on_country_select=None,
                 land_source=LAND_TOPOLOGY_URL, countries_source=COUNTRIES_TOPOLOGY_URL,
                 loader=load_world, executor=None):
        self.channels = channels or WorldChannels.create()
        self.on_country_select = on_country_select
        self.land_source = land_source
        self.countries_source = countries_source
        self.loader = loader

        self.state = WorldState()
        self.renderer = MapRenderer()
        self.canvas: pygame.Surface | None = None
        self.alive = False
        self._torn_down = False
        self._unsubscribers = []
        self._executor = executor
        self._owns_executor = executor is None
        self._future = None

    # ---- 生命周期 ----
    def initialize(self, width: int, height: int, pixel_ratio: float = 1.0) -> None:
        if self.alive or self._torn_down:
            return
        self.alive = True
        self.resize(width, height, pixel_ratio)
        self._unsubscribers = [
            self.channels.pins.subscribe(self.on_pin),
            self.channels.blips.subscribe(self.on_blip),
        ]
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="world-geometry")
        self._future = self._executor.submit(self.loader, self.land_source, self.countries_source)

    def teardown(self) -> None:
        """取消订阅、丢弃未完成的加载。只生效一次。"""
        if self._torn_down:
            return
        self._torn_down = True
        self.alive = False
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        if self._future is not None:
            self._future.cancel()
            self._future = None
        if self._executor is not None and self._owns_executor:
            self._executor.shutdown(wait=False)
        self._executor = None
        _LOGGER.debug("world background torn down")

    def poll_geometry(self) -> None:
        """加载完成后在主线程应用几何；失败则保持只有背景。"""
        future = self._future
        if future is None or not future.done():
            return
        self._future = None
        try:
            bundle = future.result()
        except CancelledError:
            return
        except TopologyError as exc:
            _LOGGER.warning("world geometry unavailable, drawing background only: %s", exc)
            return
        if not self.alive:
            return
        self.apply_geometry(bundle)

    def apply_geometry(self, bundle) -> None:
        self.state.geometry = bundle
        self.state.relayout()

    # ---- 视口 ----
    def resize(self, width: int, height: int, pixel_ratio: float | None = None) -> None:
        if not self.alive:
            return
        self.state.resize(width, height, pixel_ratio)
        r = self.state.pixel_ratio
        size = (max(1, int(self.state.width * r)), max(1, int(self.state.height * r)))
        self.canvas = pygame.Surface(size, 0, 32)

    # ---- 外部通道 ----
    def on_pin(self, event: PinEvent) -> None:
        code = normalize_country_code(getattr(event, "code", None))
        if code is None:
            return
        self.state.pins.add(code)

    def on_blip(self, event: BlipEvent) -> None:
        code = normalize_country_code(getattr(event, "code", None))
        kind = getattr(event, "kind", None)
        if code is None or kind not in BLIP_KINDS:
            return
        pos = self.state.centroids.resolve(code, self.state.projection, self.state.countries)
        if pos is None:
            return
        self.state.blips.spawn(pos[0], pos[1], kind)

    # ---- 指针 ----
    def click(self, x: float, y: float, now: float | None = None) -> str | None:
        if not self.alive:
            return None
        return handle_click(self.state, x, y, self.on_country_select, now)

    def pointer_move(self, x: float, y: float) -> None:
        if not self.alive:
            return
        self.channels.hover.publish(handle_pointer_move(self.state, x, y))

    def pointer_leave(self) -> None:
        if not self.alive:
            return
        self.channels.hover.publish(handle_pointer_leave())

    def handle_event(self, event) -> bool:
        """分发 pygame 事件，返回是否已处理。"""
        if not self.alive:
            return False
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            self.click(*event.pos)
        elif event.type == pygame.MOUSEMOTION:
            self.pointer_move(*event.pos)
        elif event.type == pygame.WINDOWLEAVE:
            self.pointer_leave()
        elif event.type == pygame.VIDEORESIZE:
            self.resize(event.w, event.h)
        else:
            return False
        return True

    # ---- 绘制 ----
    def frame(self, now: float | None = None) -> pygame.Surface | None:
        """推进一帧并返回画布。"""
        if not self.alive or self.canvas is None:
            return None
        self.poll_geometry()
        self.renderer.draw(self.canvas, self.state, now_ms() if now is None else now)
        return self.canvas

    def present(self, screen: pygame.Surface) -> None:
        if self.canvas is None:
            return
        if self.canvas.get_size() == screen.get_size():
            screen.blit(self.canvas, (0, 0))
        else:
            screen.blit(pygame.transform.smoothscale(self.canvas, screen.get_size()), (0, 0))
