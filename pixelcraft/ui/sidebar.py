"""Боковая панель: открытие файла, информация, параметры пикселизации.

Принципы:
- SRP: управляет только UI параметров, не содержит алгоритмов.
- ISP: выдаёт параметры через компактные методы `set_*`, события через `on_*`.
"""
from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk

from pixelcraft import config
from pixelcraft.models.image_model import PixelSettings, SourceImage, Transform


class Sidebar(ctk.CTkFrame):
    """Панель инструментов с блоками: файл, информация, параметры, положение."""
    def __init__(self, master: ctk.CTk, **kwargs) -> None:
        super().__init__(master, width=280, **kwargs)

        self.grid_columnconfigure(0, weight=1)

        # Callbacks
        self.on_open_file: Optional[Callable[[], None]] = None
        self.on_grid_size_change: Optional[Callable[[int], None]] = None
        self.on_contrast_change: Optional[Callable[[int], None]] = None
        self.on_saturation_change: Optional[Callable[[int], None]] = None
        self.on_show_grid_change: Optional[Callable[[bool], None]] = None
        self.on_reset_transform: Optional[Callable[[], None]] = None
        self.on_clear_image: Optional[Callable[[], None]] = None

        # Controls
        self._title = ctk.CTkLabel(self, text="Инструменты", font=ctk.CTkFont(size=16, weight="bold"))
        self._title.grid(row=0, column=0, padx=8, pady=(8, 4), sticky="w")

        self._open_btn = ctk.CTkButton(self, text="Открыть изображение…", command=self._emit_open_file)
        self._open_btn.grid(row=1, column=0, padx=8, pady=(0, 12), sticky="ew")

        # Info section
        self._info_title = ctk.CTkLabel(self, text="Информация", font=ctk.CTkFont(size=16, weight="bold"))
        self._info_title.grid(row=2, column=0, padx=8, pady=(8, 4), sticky="w")

        self._path_val = ctk.StringVar(value="—")
        self._size_val = ctk.StringVar(value="—")
        self._dims_val = ctk.StringVar(value="—")
        self._mode_val = ctk.StringVar(value="—")

        self._info_path = ctk.CTkLabel(self, textvariable=self._path_val, wraplength=250, anchor="w", justify="left")
        self._info_size = ctk.CTkLabel(self, textvariable=self._size_val, anchor="w", justify="left")
        self._info_dims = ctk.CTkLabel(self, textvariable=self._dims_val, anchor="w", justify="left")
        self._info_mode = ctk.CTkLabel(self, textvariable=self._mode_val, anchor="w", justify="left")

        self._info_path.grid(row=3, column=0, padx=8, pady=(0, 2), sticky="ew")
        self._info_size.grid(row=4, column=0, padx=8, pady=(0, 2), sticky="ew")
        self._info_dims.grid(row=5, column=0, padx=8, pady=(0, 2), sticky="ew")
        self._info_mode.grid(row=6, column=0, padx=8, pady=(0, 10), sticky="ew")

        # Параметры
        self._params_title = ctk.CTkLabel(self, text="Параметры", font=ctk.CTkFont(size=16, weight="bold"))
        self._params_title.grid(row=7, column=0, padx=8, pady=(8, 4), sticky="w")

        grid_steps = (config.MAX_GRID_SIZE - config.MIN_GRID_SIZE) // config.GRID_SIZE_STEP
        self._grid_val = ctk.StringVar(value=f"{config.DEFAULT_GRID_SIZE} px")
        self._grid_label = ctk.CTkLabel(self, text="Размер сетки:")
        self._grid_slider = ctk.CTkSlider(
            self,
            from_=config.MIN_GRID_SIZE,
            to=config.MAX_GRID_SIZE,
            number_of_steps=grid_steps,
            command=self._on_grid_size_change,
        )
        self._grid_slider.set(config.DEFAULT_GRID_SIZE)
        self._grid_value = ctk.CTkLabel(self, textvariable=self._grid_val, width=48, anchor="w")
        self._grid_label.grid(row=8, column=0, padx=8, pady=(0, 2), sticky="w")
        self._grid_slider.grid(row=9, column=0, padx=8, pady=(0, 2), sticky="ew")
        self._grid_value.grid(row=10, column=0, padx=8, pady=(0, 6), sticky="w")

        adj_steps = config.MAX_ADJUSTMENT - config.MIN_ADJUSTMENT
        self._contrast_val = ctk.StringVar(value=f"{config.DEFAULT_CONTRAST}")
        self._contrast_label = ctk.CTkLabel(self, text="Контраст:")
        self._contrast_slider = ctk.CTkSlider(
            self,
            from_=config.MIN_ADJUSTMENT,
            to=config.MAX_ADJUSTMENT,
            number_of_steps=adj_steps,
            command=self._on_contrast_change,
        )
        self._contrast_slider.set(config.DEFAULT_CONTRAST)
        self._contrast_value = ctk.CTkLabel(self, textvariable=self._contrast_val, width=48, anchor="w")
        self._contrast_label.grid(row=11, column=0, padx=8, pady=(0, 2), sticky="w")
        self._contrast_slider.grid(row=12, column=0, padx=8, pady=(0, 2), sticky="ew")
        self._contrast_value.grid(row=13, column=0, padx=8, pady=(0, 6), sticky="w")

        self._saturation_val = ctk.StringVar(value=f"{config.DEFAULT_SATURATION}")
        self._saturation_label = ctk.CTkLabel(self, text="Насыщенность:")
        self._saturation_slider = ctk.CTkSlider(
            self,
            from_=config.MIN_ADJUSTMENT,
            to=config.MAX_ADJUSTMENT,
            number_of_steps=adj_steps,
            command=self._on_saturation_change,
        )
        self._saturation_slider.set(config.DEFAULT_SATURATION)
        self._saturation_value = ctk.CTkLabel(self, textvariable=self._saturation_val, width=48, anchor="w")
        self._saturation_label.grid(row=14, column=0, padx=8, pady=(0, 2), sticky="w")
        self._saturation_slider.grid(row=15, column=0, padx=8, pady=(0, 2), sticky="ew")
        self._saturation_value.grid(row=16, column=0, padx=8, pady=(0, 6), sticky="w")

        self._show_grid = ctk.BooleanVar(value=False)
        self._grid_switch = ctk.CTkSwitch(
            self, text="Показать сетку", variable=self._show_grid, command=self._emit_show_grid_change
        )
        self._grid_switch.grid(row=17, column=0, padx=8, pady=(4, 8), sticky="w")

        # Положение
        self._scale_val = ctk.StringVar(value="Масштаб: 1.0x")
        self._scale_label = ctk.CTkLabel(self, textvariable=self._scale_val, anchor="w")
        self._scale_label.grid(row=18, column=0, padx=8, pady=(4, 2), sticky="w")
        self._reset_btn = ctk.CTkButton(self, text="Сбросить положение", command=self._emit_reset_transform)
        self._reset_btn.grid(row=19, column=0, padx=8, pady=(0, 8), sticky="ew")

        # filler
        self.grid_rowconfigure(99, weight=1)

        self._clear_btn = ctk.CTkButton(
            self, text="Начать заново", fg_color="gray40", command=self._emit_clear_image
        )
        self._clear_btn.grid(row=100, column=0, padx=8, pady=(0, 8), sticky="ew")

    # ---- Public API ----
    def set_image_info(self, image_data: Optional[SourceImage]) -> None:
        """Отображает метаданные загруженного изображения (None сбрасывает блок)."""
        if image_data is None:
            for var in (self._path_val, self._size_val, self._dims_val, self._mode_val):
                var.set("—")
            return
        self._path_val.set(str(image_data.path) if image_data.path else "—")
        self._size_val.set(self._format_size(image_data.size_bytes))
        self._dims_val.set(f"{image_data.width} × {image_data.height} px")
        self._mode_val.set(image_data.mode)

    def set_settings(self, settings: PixelSettings) -> None:
        """Синхронизирует слайдеры с настройками (после приведения к диапазонам)."""
        self._grid_slider.set(settings.grid_size)
        self._grid_val.set(f"{settings.grid_size} px")
        self._contrast_slider.set(settings.contrast)
        self._contrast_val.set(f"{settings.contrast}")
        self._saturation_slider.set(settings.saturation)
        self._saturation_val.set(f"{settings.saturation}")
        self._show_grid.set(settings.show_grid)

    def set_transform(self, transform: Transform) -> None:
        self._scale_val.set(f"Масштаб: {transform.scale:.1f}x")

    # ---- Events ----
    def _emit_open_file(self) -> None:
        if self.on_open_file:
            self.on_open_file()

    def _on_grid_size_change(self, value: float) -> None:
        size = int(round(value))
        self._grid_val.set(f"{size} px")
        if self.on_grid_size_change:
            self.on_grid_size_change(size)

    def _on_contrast_change(self, value: float) -> None:
        contrast = int(round(value))
        self._contrast_val.set(f"{contrast}")
        if self.on_contrast_change:
            self.on_contrast_change(contrast)

    def _on_saturation_change(self, value: float) -> None:
        saturation = int(round(value))
        self._saturation_val.set(f"{saturation}")
        if self.on_saturation_change:
            self.on_saturation_change(saturation)

    def _emit_show_grid_change(self) -> None:
        if self.on_show_grid_change:
            self.on_show_grid_change(bool(self._show_grid.get()))

    def _emit_reset_transform(self) -> None:
        if self.on_reset_transform:
            self.on_reset_transform()

    def _emit_clear_image(self) -> None:
        if self.on_clear_image:
            self.on_clear_image()

    # ---- Helpers ----
    def _format_size(self, size_bytes: Optional[int]) -> str:
        if size_bytes is None:
            return "—"
        thresholds = [("Б", 1024), ("КБ", 1024**2), ("МБ", 1024**3), ("ГБ", 1024**4)]
        for label, limit in thresholds:
            if size_bytes < limit:
                if label == "Б":
                    return f"{size_bytes} {label}"
                value = size_bytes / (limit // 1024)
                return f"{value:.1f} {label}"
        value = size_bytes / (1024**4)
        return f"{value:.1f} ГБ"
