"""Общие фикстуры: изображения строятся в памяти, файлы на диске не нужны."""
from __future__ import annotations

import io
from typing import Any, Callable, Dict, List, Tuple

import numpy as np
import pytest
from PIL import Image

from pixelcraft.services.image_service import ImageService
from pixelcraft.services.present_service import PresentService
from pixelcraft.services.resample_service import ResampleService


class FakeTimer:
    """Заменяет `after`/`after_cancel` Tk: задачи копятся и запускаются вручную."""

    def __init__(self) -> None:
        self.pending: Dict[int, Callable[[], None]] = {}
        self.scheduled: List[Tuple[int, Callable[[], None]]] = []
        self.cancelled: List[int] = []
        self._next = 0

    def after(self, _delay_ms: int, fn: Callable[[], None]) -> int:
        self._next += 1
        self.pending[self._next] = fn
        self.scheduled.append((self._next, fn))
        return self._next

    def after_cancel(self, handle: Any) -> None:
        self.pending.pop(handle, None)
        self.cancelled.append(handle)

    def run_all(self) -> None:
        items = list(self.pending.items())
        self.pending.clear()
        for _handle, fn in items:
            fn()


def solid_image(size: Tuple[int, int], color: Tuple[int, ...], mode: str = "RGBA") -> Image.Image:
    return Image.new(mode, size, color)


def gradient_image(width: int = 120, height: int = 80) -> Image.Image:
    """Детерминированный RGB-узор: по осям разные каналы, чтобы каждая ячейка отличалась."""
    ys, xs = np.mgrid[0:height, 0:width]
    arr = np.stack(
        [
            (xs * 255 // max(1, width - 1)),
            (ys * 255 // max(1, height - 1)),
            ((xs + ys) * 7 % 256),
        ],
        axis=-1,
    ).astype(np.uint8)
    return Image.fromarray(arr)


def stripes_image(size: int, on: Tuple[int, int, int, int], off: Tuple[int, int, int, int]) -> Image.Image:
    """Вертикальные полосы шириной в один пиксель."""
    arr = np.zeros((size, size, 4), dtype=np.uint8)
    arr[:, 0::2] = on
    arr[:, 1::2] = off
    return Image.fromarray(arr)


def encode_png(image: Image.Image) -> bytes:
    out = io.BytesIO()
    image.save(out, format="PNG")
    return out.getvalue()


@pytest.fixture
def image_service() -> ImageService:
    return ImageService()


@pytest.fixture
def resample_service(image_service: ImageService) -> ResampleService:
    return ResampleService(image_service)


@pytest.fixture
def present_service(resample_service: ResampleService) -> PresentService:
    return PresentService(resample_service)


@pytest.fixture
def gradient_source(image_service: ImageService):
    return image_service.from_pil(gradient_image())


@pytest.fixture
def timer() -> FakeTimer:
    return FakeTimer()
