"""One Click One World 主程序 - pygame可视化"""
from __future__ import annotations

import argparse
import logging
import math
import sys

import pygame

from .channels import BlipEvent, HoverEvent, PinEvent, WorldChannels
from .config import (
    BUTTON_RADIUS, COUNTRIES_TOPOLOGY_URL, CYAN, FPS, LAND_TOPOLOGY_URL,
    PIN_CLICK_THRESHOLD, PURPLE, TOOLTIP_SIZE, WINDOW_HEIGHT, WINDOW_WIDTH,
)
from .country_codes import normalize_country_code
from .world_background import WorldBackground

_LOGGER = logging.getLogger("world_pulse.main")


class ClickTally:
    """本地的国家点击计数；第一次点击发 new 脉冲，之后发 repeat，达到阈值固定图钉。"""

    def __init__(self, channels: WorldChannels, pin_threshold: int = PIN_CLICK_THRESHOLD):
        self.channels = channels
        self.pin_threshold = pin_threshold
        self.counts: dict[str, int] = {}

    def total(self) -> int:
        return sum(self.counts.values())

    def record(self, code) -> int:
        """记一次点击并返回该国累计次数；无效国家码返回 0。"""
        code = normalize_country_code(code)
        if code is None:
            return 0
        count = self.counts.get(code, 0) + 1
        self.counts[code] = count
        self.channels.blips.publish(BlipEvent(code, 'new' if count == 1 else 'repeat'))
        if count == self.pin_threshold:
            self.channels.pins.publish(PinEvent(code))
        return count

    def top(self, n: int) -> list[tuple[str, int]]:
        ranked = sorted(self.counts.items(), key=lambda kv: kv[1], reverse=True)
        return ranked[:max(0, n)]


def tooltip_label(hover: HoverEvent, counts: dict[str, int]) -> str | None:
    """只有点击过的国家才显示提示。"""
    if hover.code is None or counts.get(hover.code, 0) <= 0:
        return None
    return f"{hover.code} • {counts[hover.code]} clicks"


def tooltip_position(hover: HoverEvent, window_size) -> tuple[float, float]:
    """提示框跟随鼠标，限制在窗口内。"""
    w, h = window_size
    tw, th = TOOLTIP_SIZE
    left = min(max(8, hover.x + 10), w - tw)
    top = min(max(8, hover.y + 10), h - th)
    return left, top


class WorldPulseApp:
    def __init__(self, width=WINDOW_WIDTH, height=WINDOW_HEIGHT, pixel_ratio=1.0,
                 land_source=LAND_TOPOLOGY_URL, countries_source=COUNTRIES_TOPOLOGY_URL):
        pygame.init()
        self.screen = pygame.display.set_mode((width, height), pygame.RESIZABLE)
        pygame.display.set_caption("One Click One World")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.Font(None, 24)
        self.font_small = pygame.font.Font(None, 18)

        self.channels = WorldChannels.create()
        self.tally = ClickTally(self.channels)
        self.selected: str | None = None
        self.hover = HoverEvent(None, -1, -1)
        self.channels.hover.subscribe(self.on_hover)

        self.world = WorldBackground(
            self.channels,
            on_country_select=self.on_country_select,
            land_source=land_source,
            countries_source=countries_source,
        )
        self.world.initialize(width, height, pixel_ratio)
        self.running = True

    def on_country_select(self, code: str):
        self.selected = code
        _LOGGER.info("selected %s", code)

    def on_hover(self, event: HoverEvent):
        self.hover = event

    def button_center(self) -> tuple[int, int]:
        w, h = self.screen.get_size()
        return w // 2, h - BUTTON_RADIUS - 40

    def button_hit(self, pos) -> bool:
        cx, cy = self.button_center()
        return math.hypot(pos[0] - cx, pos[1] - cy) <= BUTTON_RADIUS

    def press_button(self):
        if self.selected is None:
            _LOGGER.info("click ignored: no country selected")
            return
        count = self.tally.record(self.selected)
        _LOGGER.info("%s now has %d clicks (total %d)", self.selected, count, self.tally.total())

    def draw_button(self):
        """绘制圆形按钮"""
        cx, cy = self.button_center()
        glow = pygame.Surface((BUTTON_RADIUS * 4, BUTTON_RADIUS * 4), pygame.SRCALPHA)
        c = (BUTTON_RADIUS * 2, BUTTON_RADIUS * 2)
        pygame.draw.circle(glow, PURPLE + (60,), c, BUTTON_RADIUS + 18)
        pygame.draw.circle(glow, CYAN + (90,), c, BUTTON_RADIUS + 8)
        self.screen.blit(glow, (cx - c[0], cy - c[1]))
        pygame.draw.circle(self.screen, (8, 12, 22), (cx, cy), BUTTON_RADIUS)
        pygame.draw.circle(self.screen, CYAN, (cx, cy), BUTTON_RADIUS, 2)

        for i, text in enumerate(("One Click", "One World")):
            surf = self.font.render(text, True, (255, 255, 255))
            self.screen.blit(surf, surf.get_rect(center=(cx, cy - 10 + i * 20)))

    def draw_status(self):
        label = f"selected: {self.selected or '-'}   total clicks: {self.tally.total()}"
        self.screen.blit(self.font_small.render(label, True, (200, 210, 220)), (12, 12))
        for i, (code, count) in enumerate(self.tally.top(5)):
            row = self.font_small.render(f"{i + 1}. {code}  {count}", True, (200, 210, 220))
            self.screen.blit(row, (12, 34 + i * 18))

    def draw_tooltip(self):
        label = tooltip_label(self.hover, self.tally.counts)
        if label is None:
            return
        left, top = tooltip_position(self.hover, self.screen.get_size())
        box = pygame.Rect(int(left), int(top), *TOOLTIP_SIZE)
        box.height = 28
        bg = pygame.Surface(box.size, pygame.SRCALPHA)
        bg.fill((6, 13, 23, 235))
        self.screen.blit(bg, box.topleft)
        pygame.draw.rect(self.screen, (255, 255, 255), box, 1)
        text = self.font_small.render(label, True, (255, 255, 255))
        self.screen.blit(text, text.get_rect(midleft=(box.left + 8, box.centery)))

    def handle_events(self):
        """处理事件"""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                self.running = False
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1 and self.button_hit(event.pos):
                self.press_button()
            elif event.type == pygame.VIDEORESIZE:
                self.screen = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)
                self.world.handle_event(event)
            else:
                self.world.handle_event(event)

    def run(self):
        """主循环"""
        try:
            while self.running:
                self.clock.tick(FPS)
                self.handle_events()

                self.world.frame()
                self.world.present(self.screen)
                self.draw_button()
                self.draw_status()
                self.draw_tooltip()

                pygame.display.flip()
        finally:
            self.world.teardown()
            pygame.quit()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="One Click One World - neon world map")
    parser.add_argument("--land", default=LAND_TOPOLOGY_URL, help="land TopoJSON path or URL")
    parser.add_argument("--countries", default=COUNTRIES_TOPOLOGY_URL, help="countries TopoJSON path or URL")
    parser.add_argument("--width", type=int, default=WINDOW_WIDTH)
    parser.add_argument("--height", type=int, default=WINDOW_HEIGHT)
    parser.add_argument("--pixel-ratio", type=float, default=1.0, help="canvas pixel ratio (capped at 2)")
    parser.add_argument("--log-level", default="INFO")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = WorldPulseApp(args.width, args.height, args.pixel_ratio, args.land, args.countries)
    app.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
