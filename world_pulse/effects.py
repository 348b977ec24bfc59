"""点击脉冲（blip）动画调度"""
from __future__ import annotations

import time
from dataclasses import dataclass

from .config import BLIP_NEW, BLIP_REPEAT

BLIP_KINDS = {
    'new': BLIP_NEW,
    'repeat': BLIP_REPEAT,
}


def now_ms() -> float:
    """单调时钟（毫秒）"""
    return time.perf_counter() * 1000.0


@dataclass
class Blip:
    x: float
    y: float
    kind: str
    start: float  # ms


@dataclass
class BlipFrame:
    """某一帧里一个 blip 的绘制参数"""
    blip: Blip
    radius: float
    alpha: float


def blip_params(kind: str, t: float) -> tuple[float, float]:
    """进度 t ∈ [0, 1] → (半径, 透明度)，线性插值。"""
    _, r0, r1, a0 = BLIP_KINDS[kind]
    t = min(1.0, max(0.0, t))
    return r0 + (r1 - r0) * t, max(0.0, a0 * (1.0 - t))


class BlipScheduler:
    def __init__(self):
        self.blips: list[Blip] = []

    def __len__(self):
        return len(self.blips)

    def spawn(self, x: float, y: float, kind: str, now: float | None = None) -> Blip | None:
        """新增 blip；未知类型直接忽略。"""
        if kind not in BLIP_KINDS:
            return None
        blip = Blip(x, y, kind, now_ms() if now is None else now)
        self.blips.append(blip)
        return blip

    def advance(self, now: float) -> list[BlipFrame]:
        """计算本帧要画的 blip，超时的立即移除。"""
        frames = []
        alive = []
        for b in self.blips:
            duration = BLIP_KINDS[b.kind][0]
            elapsed = now - b.start
            if elapsed > duration:
                continue
            radius, alpha = blip_params(b.kind, elapsed / duration)
            frames.append(BlipFrame(b, radius, alpha))
            alive.append(b)
        self.blips = alive
        return frames
