"""组件之间的同步事件通道（pin / blip / hover）"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

T = TypeVar("T")

_LOGGER = logging.getLogger("world_pulse.channels")


@dataclass(frozen=True)
class PinEvent:
    code: str


@dataclass(frozen=True)
class BlipEvent:
    code: str
    kind: str = 'new'


@dataclass(frozen=True)
class HoverEvent:
    code: str | None
    x: float
    y: float


class Channel(Generic[T]):
    """按订阅顺序同步派发，不排队。"""

    def __init__(self, name: str = ""):
        self.name = name
        self._handlers: list[Callable[[T], None]] = []

    def __len__(self):
        return len(self._handlers)

    def subscribe(self, handler: Callable[[T], None]) -> Callable[[], None]:
        """注册处理函数，返回取消订阅的函数（可重复调用）。"""
        self._handlers.append(handler)

        def unsubscribe():
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def publish(self, event: T) -> None:
        _LOGGER.debug("%s -> %r (%d handlers)", self.name, event, len(self._handlers))
        for handler in list(self._handlers):
            handler(event)


@dataclass
class WorldChannels:
    pins: Channel[PinEvent]
    blips: Channel[BlipEvent]
    hover: Channel[HoverEvent]

    @classmethod
    def create(cls) -> "WorldChannels":
        return cls(Channel("world:pin"), Channel("world:blip"), Channel("world:hover"))
