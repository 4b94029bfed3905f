"""Константы приложения и настройка логирования.

Все ограничения параметров собраны здесь: UI и сервисы берут значения отсюда,
а не хранят собственные копии.
"""
from __future__ import annotations

import logging
import os
from typing import Optional, Tuple

# Сетка
MIN_GRID_SIZE = 8
MAX_GRID_SIZE = 64
GRID_SIZE_STEP = 2
DEFAULT_GRID_SIZE = 16

# Цветокоррекция, проценты относительно 100%
MIN_ADJUSTMENT = -50
MAX_ADJUSTMENT = 50
DEFAULT_CONTRAST = 10
DEFAULT_SATURATION = 20

# Панорамирование и масштаб
MIN_SCALE = 0.1
MAX_SCALE = 20.0
ZOOM_SENSITIVITY = 0.001
ZOOM_SPEED = 5.0
PAN_SENSITIVITY = 2.0
WHEEL_STEP_X11 = 100  # deltaY для Button-4/5

# Отрисовка
RECOMPUTE_DELAY_MS = 16
MAX_DISPLAY_SIZE = 512
MAX_SURFACE_SIDE = 16384
MAX_SAMPLE_SIDE = 2048  # холст с прозрачными полями при сильном отдалении
GRID_LINE_RGBA: Tuple[int, int, int, int] = (255, 255, 255, 38)

# Экспорт
EXPORT_MULTIPLIERS: Tuple[int, ...] = (1, 32)
EXPORT_FORMAT = "PNG"
EXPORT_EXTENSION = "png"

LOG_LEVEL_ENV = "PIXELCRAFT_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

logging.getLogger("pixelcraft").addHandler(logging.NullHandler())


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """Настраивает вывод логов пакета в stderr.

    Уровень берётся из аргумента, затем из переменной окружения
    `PIXELCRAFT_LOG_LEVEL`, по умолчанию INFO.
    """
    logger = logging.getLogger("pixelcraft")
    name = (level or os.environ.get(LOG_LEVEL_ENV) or "INFO").upper()
    logger.setLevel(getattr(logging, name, logging.INFO))

    for handler in list(logger.handlers):
        if isinstance(handler, logging.StreamHandler):
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
    logger.addHandler(handler)
    return logger
