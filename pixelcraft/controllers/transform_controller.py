"""Перевод жестов указателя в изменения панорамирования и масштаба.

`apply_event` — чистый редьюсер (трансформация, событие) -> трансформация.
`TransformController` добавляет к нему состояние перетаскивания:
Idle -> Dragging по нажатию, обратно по отпусканию или уходу курсора.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Union

from pixelcraft import config
from pixelcraft.models.image_model import Transform

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ZoomEvent:
    """Прокрутка колеса; `delta` в единицах deltaY браузера (вниз > 0)."""
    delta: float


@dataclass(frozen=True)
class PanEvent:
    """Смещение указателя в экранных пикселях с прошлого события."""
    dx: float
    dy: float


@dataclass(frozen=True)
class PressEvent:
    pass


@dataclass(frozen=True)
class ReleaseEvent:
    pass


@dataclass(frozen=True)
class LeaveEvent:
    pass


@dataclass(frozen=True)
class ResetEvent:
    pass


PointerEvent = Union[ZoomEvent, PanEvent, PressEvent, ReleaseEvent, LeaveEvent, ResetEvent]


class DragState(enum.Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


def zoom(transform: Transform, delta: float) -> Transform:
    """Масштаб меняется пропорционально текущему, поэтому шаг ощущается одинаково на всём диапазоне."""
    step = -delta * config.ZOOM_SENSITIVITY
    scale = transform.scale + step * transform.scale * config.ZOOM_SPEED
    scale = max(config.MIN_SCALE, min(config.MAX_SCALE, scale))
    return Transform(transform.x, transform.y, scale)


def pan(transform: Transform, dx: float, dy: float) -> Transform:
    """Экранное смещение делится на масштаб: при сильном увеличении пиксель экрана = меньше исходника."""
    k = config.PAN_SENSITIVITY / transform.scale
    return Transform(transform.x + dx * k, transform.y + dy * k, transform.scale)


def apply_event(transform: Transform, event: PointerEvent) -> Transform:
    if isinstance(event, ZoomEvent):
        return zoom(transform, event.delta)
    if isinstance(event, PanEvent):
        return pan(transform, event.dx, event.dy)
    if isinstance(event, ResetEvent):
        return Transform.identity()
    return transform


def wheel_delta(event_delta: int = 0, button: int | None = None) -> float:
    """Нормализует колесо Tk в deltaY браузера.

    Windows/macOS передают `event.delta` (вверх > 0), X11 — кнопки 4/5.
    """
    if button == 4:
        return -float(config.WHEEL_STEP_X11)
    if button == 5:
        return float(config.WHEEL_STEP_X11)
    return -float(event_delta)


class TransformController:
    """Держит текущую трансформацию и состояние перетаскивания."""

    def __init__(self, transform: Transform | None = None) -> None:
        self._transform = transform or Transform.identity()
        self._state = DragState.IDLE

    @property
    def transform(self) -> Transform:
        return self._transform

    @property
    def state(self) -> DragState:
        return self._state

    @property
    def is_dragging(self) -> bool:
        return self._state is DragState.DRAGGING

    def handle(self, event: PointerEvent) -> Transform:
        """Применяет событие и возвращает новую трансформацию."""
        if isinstance(event, PressEvent):
            self._state = DragState.DRAGGING
        elif isinstance(event, (ReleaseEvent, LeaveEvent)):
            self._state = DragState.IDLE
        elif isinstance(event, PanEvent) and self._state is DragState.IDLE:
            return self._transform
        self._transform = apply_event(self._transform, event)
        return self._transform

    def reset(self) -> Transform:
        return self.handle(ResetEvent())

    def replace_source(self) -> Transform:
        """Новый исходник: полный сброс, включая перетаскивание."""
        self._state = DragState.IDLE
        self._transform = Transform.identity()
        logger.debug("Transform reset for new source")
        return self._transform
