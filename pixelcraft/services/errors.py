"""Ошибки конвейера пикселизации.

Каждая ошибка прерывает только вызвавшую её операцию: последний удачный
буфер и настройки остаются нетронутыми.
"""
from __future__ import annotations


class PixelCraftError(Exception):
    """Базовая ошибка приложения."""


class DecodeError(PixelCraftError, ValueError):
    """Данные не удалось прочитать как изображение."""


class SurfaceError(PixelCraftError):
    """Поверхность нужного размера не может быть выделена."""


class EmptyInputError(PixelCraftError):
    """Запрошена обработка без исходного изображения."""
