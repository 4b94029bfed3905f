"""Модели данных конвейера пикселизации.

Принципы:
- SRP: только структуры данных, без логики обработки.
- Чистый код: неизменяемость (`frozen=True`) для предсказуемости.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

import numpy as np
from PIL import Image

from pixelcraft import config


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


@dataclass(frozen=True)
class SourceImage:
    """Исходное изображение (загруженное или сгенерированное).

    Fields:
        pil_image: Изображение PIL в режиме RGBA.
        width: Ширина, px.
        height: Высота, px.
        mode: Режим PIL исходного файла до конвертации, например "RGB".
        path: Путь к файлу, если изображение читалось с диска.
        size_bytes: Размер закодированных данных, если известен.
    """
    pil_image: Image.Image
    width: int
    height: int
    mode: str
    path: Optional[Path] = None
    size_bytes: Optional[int] = None

    @property
    def pixels(self) -> np.ndarray:
        """RGBA-пиксели формы (height, width, 4), только для чтения."""
        arr = np.asarray(self.pil_image, dtype=np.uint8)
        arr.flags.writeable = False
        return arr


@dataclass(frozen=True)
class Transform:
    """Панорамирование и масштаб области выборки.

    `x`, `y` задаются в пикселях исходника (не экрана), `scale` в [0.1, 20].
    """
    x: float = 0.0
    y: float = 0.0
    scale: float = 1.0

    @classmethod
    def identity(cls) -> "Transform":
        return cls(0.0, 0.0, 1.0)

    def clamped(self) -> "Transform":
        return replace(self, scale=_clamp(self.scale, config.MIN_SCALE, config.MAX_SCALE))


@dataclass(frozen=True)
class CropRegion:
    """Квадрат исходника, который сэмплируется в сетку: левый верхний угол и сторона."""
    x: float
    y: float
    size: float

    @property
    def right(self) -> float:
        return self.x + self.size

    @property
    def bottom(self) -> float:
        return self.y + self.size


@dataclass(frozen=True)
class PixelSettings:
    """Параметры пикселизации из UI.

    Fields:
        grid_size: Сторона сетки в ячейках, 8..64 (шаг 2 в UI).
        contrast: Сдвиг контраста в процентах, -50..50.
        saturation: Сдвиг насыщенности в процентах, -50..50.
        show_grid: Рисовать ли сетку поверх превью.
    """
    grid_size: int = config.DEFAULT_GRID_SIZE
    contrast: int = config.DEFAULT_CONTRAST
    saturation: int = config.DEFAULT_SATURATION
    show_grid: bool = False

    def clamped(self) -> "PixelSettings":
        """Возвращает копию с параметрами, приведёнными к допустимым диапазонам."""
        return PixelSettings(
            grid_size=int(_clamp(int(self.grid_size), config.MIN_GRID_SIZE, config.MAX_GRID_SIZE)),
            contrast=int(_clamp(int(self.contrast), config.MIN_ADJUSTMENT, config.MAX_ADJUSTMENT)),
            saturation=int(_clamp(int(self.saturation), config.MIN_ADJUSTMENT, config.MAX_ADJUSTMENT)),
            show_grid=bool(self.show_grid),
        )


@dataclass(frozen=True)
class PixelBuffer:
    """Результат пересэмплирования: RGBA-растр `grid_size × grid_size`.

    Fields:
        image: Изображение PIL (RGBA).
        grid_size: Сторона сетки.
        crop: Область исходника, из которой получен буфер.
    """
    image: Image.Image
    grid_size: int
    crop: CropRegion

    @property
    def pixels(self) -> np.ndarray:
        arr = np.asarray(self.image, dtype=np.uint8)
        arr.flags.writeable = False
        return arr

    def tobytes(self) -> bytes:
        return self.image.tobytes()
