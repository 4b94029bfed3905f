"""Отложенный пересчёт: серия изменений за один кадр даёт один пересчёт.

Таймер берётся у Tk (`after` / `after_cancel`), поэтому всё выполняется в
главном потоке. Каждый `trigger()` увеличивает поколение; результат, пришедший
от устаревшего поколения, вызывающий отбрасывает через `is_current()`.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from pixelcraft import config

logger = logging.getLogger(__name__)

AfterFn = Callable[[int, Callable[[], None]], Any]
AfterCancelFn = Callable[[Any], None]


class RecomputeScheduler:
    def __init__(
        self,
        after: AfterFn,
        after_cancel: AfterCancelFn,
        callback: Callable[[int], None],
        delay_ms: int = config.RECOMPUTE_DELAY_MS,
    ) -> None:
        self._after = after
        self._after_cancel = after_cancel
        self._callback = callback
        self._delay_ms = delay_ms
        self._handle: Optional[Any] = None
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self) -> int:
        """Отменяет запланированный запуск и планирует новый с последним состоянием."""
        self.cancel()
        self._generation += 1
        token = self._generation
        self._handle = self._after(self._delay_ms, lambda: self._fire(token))
        return token

    def cancel(self) -> None:
        if self._handle is not None:
            self._after_cancel(self._handle)
            self._handle = None

    def is_current(self, token: int) -> bool:
        return token == self._generation

    def _fire(self, token: int) -> None:
        if not self.is_current(token):
            logger.debug("Dropping stale recompute %d (current %d)", token, self._generation)
            return
        self._handle = None
        self._callback(token)
