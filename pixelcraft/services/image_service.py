"""Загрузка и декодирование исходных изображений.

Принципы:
- SRP: класс отвечает только за декодирование и базовое извлечение свойств.
- OCP: новые источники (поток, генератор) добавляются отдельными методами.
- LSP/ISP: возвращает `SourceImage` с предсказуемыми полями; интерфейс узкий и конкретный.
"""
from __future__ import annotations

import io
import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional, Union

from PIL import Image, UnidentifiedImageError

from pixelcraft.models.image_model import SourceImage
from pixelcraft.services.errors import DecodeError, EmptyInputError

logger = logging.getLogger(__name__)

SourceLike = Union[SourceImage, Image.Image, bytes, bytearray, memoryview]


class ImageService:
    def load_image(self, file_path: str | Path) -> SourceImage:
        """Загружает изображение с диска и возвращает его вместе с метаданными.

        Args:
            file_path: Путь до файла изображения.

        Returns:
            `SourceImage` c `PIL.Image.Image` в режиме RGBA, размерами и режимом.

        Raises:
            FileNotFoundError: если путь не существует или не указывает на файл.
            DecodeError: если файл не распознан как изображение.
        """
        path = Path(file_path)
        if not path.exists() or not path.is_file():
            raise FileNotFoundError(f"Файл не найден: {path}")

        data = path.read_bytes()
        source = self.decode_bytes(data, path=path)
        logger.info("Loaded %s (%dx%d, %s)", path, source.width, source.height, source.mode)
        return source

    def decode_bytes(self, data: bytes | bytearray | memoryview, path: Optional[Path] = None) -> SourceImage:
        """Декодирует байты любого формата, который читает Pillow (JPEG, PNG, WEBP...).

        Raises:
            EmptyInputError: если данных нет.
            DecodeError: если байты не являются изображением или растр превышает
                предел Pillow на число пикселей.
        """
        if not data:
            raise EmptyInputError("Нет данных изображения")
        try:
            with Image.open(io.BytesIO(bytes(data))) as img:
                img.load()
                source = self.from_pil(img, path=path)
        except DecodeError:
            raise
        except Image.DecompressionBombError as exc:
            # не наследует OSError; растр больше предела Pillow
            raise DecodeError(f"Изображение слишком велико: {exc}") from exc
        except UnidentifiedImageError as exc:
            raise DecodeError(f"Данные не являются изображением: {path or '<bytes>'}") from exc
        except (OSError, SyntaxError, ValueError) as exc:
            # усечённый или повреждённый файл
            raise DecodeError(f"Не удалось декодировать изображение: {exc}") from exc
        return replace(source, size_bytes=len(data))

    def from_pil(self, image: Image.Image, path: Optional[Path] = None) -> SourceImage:
        """Оборачивает уже декодированный растр; исходный объект не изменяется."""
        width, height = image.size
        if width <= 0 or height <= 0:
            raise DecodeError(f"Пустой растр: {width}×{height}")
        rgba = image.convert("RGBA") if image.mode != "RGBA" else image.copy()
        return SourceImage(pil_image=rgba, width=width, height=height, mode=image.mode, path=path)

    def ensure_source(self, source: Optional[SourceLike]) -> SourceImage:
        """Приводит вход к `SourceImage`: готовый объект, растр PIL или закодированные байты."""
        if source is None:
            raise EmptyInputError("Исходное изображение не задано")
        if isinstance(source, SourceImage):
            return source
        if isinstance(source, Image.Image):
            return self.from_pil(source)
        if isinstance(source, (bytes, bytearray, memoryview)):
            return self.decode_bytes(source)
        raise DecodeError(f"Неподдерживаемый источник: {type(source).__name__}")
