"""Пересэмплирование исходника в сетку `grid_size × grid_size`.

Одна чистая функция от (исходник, трансформация, размер сетки, контраст,
насыщенность): никакого состояния между вызовами, никакого кэша.
"""
from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np
from PIL import Image

from pixelcraft import config
from pixelcraft.models.image_model import CropRegion, PixelBuffer, PixelSettings, SourceImage, Transform
from pixelcraft.services.errors import SurfaceError
from pixelcraft.services.image_service import ImageService, SourceLike

logger = logging.getLogger(__name__)

# Веса яркости из матрицы saturate() (Filter Effects, feColorMatrix)
_LUMA = np.array([0.213, 0.715, 0.072], dtype=np.float64)


def crop_region(width: int, height: int, transform: Transform) -> CropRegion:
    """Квадрат исходника, видимый при данной трансформации.

    Сторона считается от меньшего измерения, поэтому при scale=1 квадрат
    вписан в изображение: длинная сторона обрезается, полей нет.
    Смещение вычитается: рост `x` сдвигает окно влево, а картинку вправо.
    Масштаб приводится к [0.1, 20]; NaN и бесконечности отвергаются до этого.
    """
    if not all(math.isfinite(v) for v in (transform.x, transform.y, transform.scale)):
        raise SurfaceError(f"Некорректная трансформация: {transform}")
    transform = transform.clamped()
    size = min(width, height) / transform.scale
    sx = width / 2 - size / 2 - transform.x
    sy = height / 2 - size / 2 - transform.y
    if not all(math.isfinite(v) for v in (size, sx, sy)) or size <= 0:
        raise SurfaceError(f"Некорректная область выборки: x={sx}, y={sy}, size={size}")
    return CropRegion(x=sx, y=sy, size=size)


def _padded_sample(premult: Image.Image, left: int, top: int, crop: CropRegion, size: int) -> Image.Image:
    """Выборка области, выходящей за края: видимая часть кладётся на прозрачный холст.

    Холст не больше `MAX_SAMPLE_SIDE` по стороне; при сильном отдалении
    видимая часть сначала уменьшается тем же box-фильтром.
    """
    origin_x = math.floor(crop.x)
    origin_y = math.floor(crop.y)
    span_x = math.ceil(crop.right) - origin_x
    span_y = math.ceil(crop.bottom) - origin_y
    factor = max(1, math.ceil(max(span_x, span_y) / config.MAX_SAMPLE_SIDE))
    if factor > 1:
        reduced = (max(1, round(premult.width / factor)), max(1, round(premult.height / factor)))
        premult = premult.resize(reduced, Image.Resampling.BOX)

    canvas = Image.new("RGBa", (math.ceil(span_x / factor), math.ceil(span_y / factor)), (0, 0, 0, 0))
    canvas.paste(premult, (round((left - origin_x) / factor), round((top - origin_y) / factor)))
    box = (
        (crop.x - origin_x) / factor,
        (crop.y - origin_y) / factor,
        min(canvas.width, (crop.right - origin_x) / factor),
        min(canvas.height, (crop.bottom - origin_y) / factor),
    )
    return canvas.resize((size, size), Image.Resampling.BOX, box=box)


def _box_sample(image: Image.Image, crop: CropRegion, size: int) -> np.ndarray:
    """Усреднение по площади (box filter) квадрата `crop` в `size × size`.

    Считает Pillow в режиме "RGBa" (премультиплицированная альфа), поэтому
    прозрачные пиксели не отдают свой цвет соседям, а всё за краями
    исходника считается прозрачным чёрным.

    Возвращает float64 массив (size, size, 4): RGB в [0, 1] без
    премультипликации и альфа в [0, 1].
    """
    width, height = image.size
    left = max(0, math.floor(crop.x))
    top = max(0, math.floor(crop.y))
    right = min(width, math.ceil(crop.right))
    bottom = min(height, math.ceil(crop.bottom))
    if right <= left or bottom <= top:
        return np.zeros((size, size, 4), dtype=np.float64)

    premult = image.crop((left, top, right, bottom)).convert("RGBa")
    inside = crop.x >= 0 and crop.y >= 0 and crop.right <= width and crop.bottom <= height
    if inside:
        box = (crop.x - left, crop.y - top, crop.right - left, crop.bottom - top)
        sampled = premult.resize((size, size), Image.Resampling.BOX, box=box)
    else:
        sampled = _padded_sample(premult, left, top, crop, size)

    out = np.frombuffer(sampled.tobytes(), dtype=np.uint8).reshape(size, size, 4) / 255.0
    alpha = out[..., 3:4]
    with np.errstate(divide="ignore", invalid="ignore"):
        rgb = np.where(alpha > 0, out[..., :3] / alpha, 0.0)
    return np.concatenate([np.clip(rgb, 0.0, 1.0), alpha], axis=-1)


def _apply_contrast(rgb: np.ndarray, contrast: int) -> np.ndarray:
    if contrast == 0:
        return rgb
    k = (100 + contrast) / 100.0
    return np.clip((rgb - 0.5) * k + 0.5, 0.0, 1.0)


def _apply_saturation(rgb: np.ndarray, saturation: int) -> np.ndarray:
    if saturation == 0:
        return rgb
    t = (100 + saturation) / 100.0
    # saturate(t) = t·I + (1 - t)·L, где каждая строка L равна весам яркости
    matrix = t * np.eye(3) + (1.0 - t) * np.tile(_LUMA, (3, 1))
    return np.clip(rgb @ matrix.T, 0.0, 1.0)


def adjust_colors(rgba: np.ndarray, contrast: int, saturation: int) -> np.ndarray:
    """Контраст, затем насыщенность, как в цепочке CSS `contrast() saturate()`.

    Работает с float RGBA в [0, 1]; альфа не меняется.
    """
    rgb = _apply_contrast(rgba[..., :3], contrast)
    rgb = _apply_saturation(rgb, saturation)
    return np.concatenate([rgb, rgba[..., 3:4]], axis=-1)


def _to_image(rgba: np.ndarray) -> Image.Image:
    arr = np.clip(np.rint(rgba * 255.0), 0, 255).astype(np.uint8)
    return Image.fromarray(arr)


class ResampleService:
    def __init__(self, image_service: Optional[ImageService] = None) -> None:
        self._image_service = image_service or ImageService()

    def resample(
        self,
        source: Optional[SourceLike],
        transform: Transform,
        grid_size: int,
        contrast: int = 0,
        saturation: int = 0,
    ) -> PixelBuffer:
        """Строит буфер `grid_size × grid_size` из квадратной области исходника.

        Args:
            source: `SourceImage`, растр PIL или закодированные байты.
            transform: Панорамирование/масштаб; scale приводится к [0.1, 20].
            grid_size: Сторона сетки; приводится к [8, 64].
            contrast: Сдвиг контраста, %; приводится к [-50, 50].
            saturation: Сдвиг насыщенности, %; приводится к [-50, 50].

        Raises:
            EmptyInputError: если исходника нет.
            DecodeError: если байты не читаются как изображение.
            SurfaceError: если область выборки или буфер не могут быть построены.
        """
        settings = PixelSettings(grid_size=grid_size, contrast=contrast, saturation=saturation).clamped()
        src = self._image_service.ensure_source(source)
        crop = crop_region(src.width, src.height, transform)
        image = self._render(src, crop, settings.grid_size, settings.contrast, settings.saturation)
        logger.debug(
            "Resampled %dx%d crop=(%.1f, %.1f, %.1f) -> %dx%d",
            src.width, src.height, crop.x, crop.y, crop.size, settings.grid_size, settings.grid_size,
        )
        return PixelBuffer(image=image, grid_size=settings.grid_size, crop=crop)

    def sample(
        self,
        source: Optional[SourceLike],
        transform: Transform,
        size: int,
        contrast: int = 0,
        saturation: int = 0,
    ) -> Image.Image:
        """Та же выборка, но в произвольный размер без ограничения сетки (для превью исходника)."""
        if size < 1 or size > config.MAX_SURFACE_SIDE:
            raise SurfaceError(f"Недопустимый размер поверхности: {size}")
        settings = PixelSettings(contrast=contrast, saturation=saturation).clamped()
        src = self._image_service.ensure_source(source)
        crop = crop_region(src.width, src.height, transform)
        return self._render(src, crop, size, settings.contrast, settings.saturation)

    def _render(self, src: SourceImage, crop: CropRegion, size: int, contrast: int, saturation: int) -> Image.Image:
        try:
            sampled = _box_sample(src.pil_image, crop, size)
            return _to_image(adjust_colors(sampled, contrast, saturation))
        except MemoryError as exc:
            raise SurfaceError(f"Не удалось выделить поверхность {size}×{size}") from exc
