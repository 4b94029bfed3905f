"""Вывод буфера на экран и в файл.

Увеличение всегда ближайшим соседом: сглаживание здесь уничтожает жёсткие
границы пикселей, ради которых существует весь конвейер.
"""
from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import Optional

from PIL import Image, ImageDraw

from pixelcraft import config
from pixelcraft.models.image_model import PixelBuffer, Transform
from pixelcraft.services.errors import EmptyInputError, SurfaceError
from pixelcraft.services.image_service import SourceLike
from pixelcraft.services.resample_service import ResampleService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportResult:
    """Готовый к сохранению файл: имя, закодированные байты и сторона в пикселях."""
    filename: str
    data: bytes
    size: int


def export_filename(grid_size: int, ext: str = config.EXPORT_EXTENSION) -> str:
    return f"pixel-art-{grid_size}x{grid_size}.{ext}"


def display_size(available: int, limit: int = config.MAX_DISPLAY_SIZE) -> int:
    """Сторона превью: доступное место, но не больше `limit`."""
    return max(1, min(int(available), limit))


def _check_surface(size: int) -> None:
    if size < 1 or size > config.MAX_SURFACE_SIDE:
        raise SurfaceError(f"Недопустимый размер поверхности: {size}×{size}")


class PresentService:
    def __init__(self, resample_service: Optional[ResampleService] = None) -> None:
        self._resample_service = resample_service or ResampleService()

    def magnify(self, buffer: PixelBuffer, output_size: int) -> Image.Image:
        """Увеличивает буфер до `output_size × output_size` ближайшим соседом."""
        if buffer is None:
            raise EmptyInputError("Нет буфера для отображения")
        _check_surface(output_size)
        try:
            return buffer.image.resize((output_size, output_size), Image.Resampling.NEAREST)
        except MemoryError as exc:
            raise SurfaceError(f"Не удалось выделить поверхность {output_size}×{output_size}") from exc

    def render(self, buffer: PixelBuffer, output_size: int, show_grid: bool = False) -> Image.Image:
        """Превью для экрана с необязательной сеткой.

        Сетка рисуется на отдельном слое и накладывается на копию, буфер не меняется.
        """
        image = self.magnify(buffer, output_size)
        if show_grid:
            image = Image.alpha_composite(image, self.grid_overlay(buffer.grid_size, output_size))
        return image

    def grid_overlay(self, grid_size: int, output_size: int) -> Image.Image:
        """Прозрачный слой с `grid_size + 1` вертикальными и горизонтальными линиями."""
        _check_surface(output_size)
        layer = Image.new("RGBA", (output_size, output_size), (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        cell = output_size / grid_size
        last = output_size - 1
        for i in range(grid_size + 1):
            # последняя линия прижимается к краю, иначе выпадает за холст
            pos = min(int(i * cell), last)
            draw.line([(pos, 0), (pos, last)], fill=config.GRID_LINE_RGBA, width=1)
            draw.line([(0, pos), (last, pos)], fill=config.GRID_LINE_RGBA, width=1)
        return layer

    def render_source_preview(
        self,
        source: Optional[SourceLike],
        transform: Transform,
        output_size: int,
        contrast: int = 0,
        saturation: int = 0,
        show_grid: bool = False,
        grid_size: int = config.DEFAULT_GRID_SIZE,
    ) -> Image.Image:
        """Исходник в разрешении экрана по той же геометрии кадрирования, что и у сетки.

        При `show_grid` поверх кладётся та же сетка `grid_size`, что и у пиксельного превью.
        """
        _check_surface(output_size)
        preview = self._resample_service.sample(source, transform, output_size, contrast, saturation)
        if not show_grid:
            return preview
        return Image.alpha_composite(preview, self.grid_overlay(grid_size, output_size))

    def export(self, buffer: PixelBuffer, multiplier: int) -> Image.Image:
        """Растр `grid_size*multiplier` в квадрате: каждая ячейка становится сплошным блоком."""
        if buffer is None:
            raise EmptyInputError("Нет буфера для экспорта")
        if int(multiplier) < 1:
            raise SurfaceError(f"Множитель экспорта должен быть не меньше 1: {multiplier}")
        return self.magnify(buffer, buffer.grid_size * int(multiplier))

    def encode(self, image: Image.Image, fmt: str = config.EXPORT_FORMAT) -> bytes:
        """Кодирует растр без потерь (PNG по умолчанию)."""
        out = io.BytesIO()
        image.save(out, format=fmt)
        return out.getvalue()

    def export_bytes(self, buffer: PixelBuffer, multiplier: int) -> ExportResult:
        image = self.export(buffer, multiplier)
        data = self.encode(image)
        logger.info("Exported %dx%d sprite at %dx (%d bytes)", buffer.grid_size, buffer.grid_size, multiplier, len(data))
        return ExportResult(filename=export_filename(buffer.grid_size), data=data, size=image.width)
