"""Оркестрация конвейера без привязки к виджетам.

SOLID:
- SRP: хранит единственную тройку (исходник, трансформация, настройки) и последний удачный буфер.
- DIP: таймер и сервисы передаются снаружи; в тестах вместо Tk подставляется фейковый таймер.
Clean Code:
- Любое изменение входов пересэмплирования планирует пересчёт; ошибка не трогает прошлый буфер.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Optional, Union

from PIL import Image

from pixelcraft.controllers.scheduler import AfterCancelFn, AfterFn, RecomputeScheduler
from pixelcraft.controllers.transform_controller import PointerEvent, TransformController
from pixelcraft.models.image_model import PixelBuffer, PixelSettings, SourceImage, Transform
from pixelcraft.services.errors import EmptyInputError, PixelCraftError
from pixelcraft.services.image_service import ImageService, SourceLike
from pixelcraft.services.present_service import ExportResult, PresentService
from pixelcraft.services.resample_service import ResampleService

logger = logging.getLogger(__name__)

# изменения этих полей требуют пересэмплирования; show_grid — только перерисовки
_RESAMPLE_FIELDS = ("grid_size", "contrast", "saturation")


class PixelController:
    def __init__(
        self,
        after: AfterFn,
        after_cancel: AfterCancelFn,
        settings: Optional[PixelSettings] = None,
        image_service: Optional[ImageService] = None,
        resample_service: Optional[ResampleService] = None,
        present_service: Optional[PresentService] = None,
    ) -> None:
        self._image_service = image_service or ImageService()
        self._resample_service = resample_service or ResampleService(self._image_service)
        self._present_service = present_service or PresentService(self._resample_service)
        self._scheduler = RecomputeScheduler(after, after_cancel, self._on_scheduled)
        self._transforms = TransformController()
        self._settings = (settings or PixelSettings()).clamped()
        self._source: Optional[SourceImage] = None
        self._buffer: Optional[PixelBuffer] = None

        self.on_buffer: Optional[Callable[[PixelBuffer], None]] = None
        self.on_error: Optional[Callable[[PixelCraftError], None]] = None
        self.on_transform_change: Optional[Callable[[Transform], None]] = None
        self.on_redraw: Optional[Callable[[], None]] = None

    # ---- State ----
    @property
    def source(self) -> Optional[SourceImage]:
        return self._source

    @property
    def buffer(self) -> Optional[PixelBuffer]:
        return self._buffer

    @property
    def settings(self) -> PixelSettings:
        return self._settings

    @property
    def transform(self) -> Transform:
        return self._transforms.transform

    @property
    def is_dragging(self) -> bool:
        return self._transforms.is_dragging

    @property
    def scheduler(self) -> RecomputeScheduler:
        return self._scheduler

    # ---- Commands ----
    def load_source(self, source: Union[str, Path, SourceLike]) -> SourceImage:
        """Заменяет исходник целиком и сбрасывает трансформацию.

        Raises:
            FileNotFoundError, DecodeError, EmptyInputError: прошлый исходник и буфер при этом сохраняются.
        """
        if isinstance(source, (str, Path)):
            loaded = self._image_service.load_image(source)
        else:
            loaded = self._image_service.ensure_source(source)
        self._source = loaded
        self._notify_transform(self._transforms.replace_source())
        self._scheduler.trigger()
        return loaded

    def clear_source(self) -> None:
        """«Начать заново»: исходник и буфер сбрасываются, отложенный пересчёт отменяется."""
        self._scheduler.cancel()
        self._source = None
        self._buffer = None
        self._notify_transform(self._transforms.replace_source())

    def update_settings(self, **changes: Any) -> PixelSettings:
        """Меняет настройки; значения вне диапазонов приводятся к границам."""
        previous = self._settings
        self._settings = replace(previous, **changes).clamped()
        if any(getattr(previous, f) != getattr(self._settings, f) for f in _RESAMPLE_FIELDS):
            self._schedule()
        elif previous.show_grid != self._settings.show_grid and self.on_redraw:
            self.on_redraw()
        return self._settings

    def handle_pointer(self, event: PointerEvent) -> Transform:
        before = self._transforms.transform
        after = self._transforms.handle(event)
        if after != before:
            self._notify_transform(after)
            self._schedule()
        return after

    def reset_transform(self) -> Transform:
        before = self._transforms.transform
        after = self._transforms.reset()
        if after != before:
            self._notify_transform(after)
            self._schedule()
        return after

    def recompute(self, token: Optional[int] = None) -> Optional[PixelBuffer]:
        """Пересэмплирует текущую тройку.

        Результат для устаревшего `token` отбрасывается и возвращается None.

        Raises:
            EmptyInputError: если исходника нет.
            DecodeError, SurfaceError: прошлый буфер остаётся прежним.
        """
        settings = self._settings
        buffer = self._resample_service.resample(
            self._source, self._transforms.transform, settings.grid_size, settings.contrast, settings.saturation
        )
        if token is not None and not self._scheduler.is_current(token):
            logger.debug("Discarding stale buffer for token %d", token)
            return None
        self._buffer = buffer
        if self.on_buffer:
            self.on_buffer(buffer)
        return buffer

    def render_preview(self, output_size: int, show_source: bool = False) -> Image.Image:
        """Растр для экрана: пиксельный буфер или, при `show_source`, исходник в той же рамке."""
        if show_source:
            if self._source is None:
                raise EmptyInputError("Исходное изображение не задано")
            settings = self._settings
            return self._present_service.render_source_preview(
                self._source,
                self._transforms.transform,
                output_size,
                settings.contrast,
                settings.saturation,
                show_grid=settings.show_grid,
                grid_size=settings.grid_size,
            )
        if self._buffer is None:
            raise EmptyInputError("Буфер ещё не построен")
        return self._present_service.render(self._buffer, output_size, self._settings.show_grid)

    def export(self, multiplier: int) -> ExportResult:
        if self._buffer is None:
            raise EmptyInputError("Нечего экспортировать: буфер ещё не построен")
        return self._present_service.export_bytes(self._buffer, multiplier)

    # ---- Helpers ----
    def _schedule(self) -> None:
        if self._source is not None:
            self._scheduler.trigger()

    def _on_scheduled(self, token: int) -> None:
        try:
            self.recompute(token)
        except PixelCraftError as exc:
            logger.warning("Resample failed: %s", exc)
            if self.on_error:
                self.on_error(exc)

    def _notify_transform(self, transform: Transform) -> None:
        if self.on_transform_change:
            self.on_transform_change(transform)
