"""Контроллер приложения: связывает виджеты с конвейером пикселизации.

SOLID:
- SRP: класс управляет связями между UI и `PixelController` (без логики обработки изображений).
- DIP: зависит от контроллера конвейера; сервисы инкапсулированы в нём.
Clean Code:
- Обработчики компактны; ошибки показываются пользователю и не сбрасывают прошлый результат.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from tkinter import TclError, filedialog, messagebox
from typing import Optional

import customtkinter as ctk

from pixelcraft.controllers.pixel_controller import PixelController
from pixelcraft.controllers.transform_controller import PointerEvent
from pixelcraft.models.image_model import PixelBuffer, Transform
from pixelcraft.services.errors import PixelCraftError
from pixelcraft.ui.bottom_bar import BottomBar
from pixelcraft.ui.image_viewer import ImageViewer
from pixelcraft.ui.sidebar import Sidebar

logger = logging.getLogger(__name__)


@dataclass
class AppController:
    """Связывает элементы UI с прикладной логикой.

    Ответственности:
    - Инициализация и бинд событий (UI -> контроллер).
    - Загрузка изображений и экспорт результата через диалоги Tk.
    - Перерисовка превью после каждого пересчёта буфера.
    """
    viewer: ImageViewer
    sidebar: Sidebar
    bottom: BottomBar
    window: ctk.CTk

    _pixels: Optional[PixelController] = field(default=None, init=False)

    def bind_events(self) -> None:
        """Регистрирует обработчики событий между UI-компонентами.

        Сохраняет слабую связность: компоненты UI ничего не знают друг о друге,
        общаются через контроллер.
        """
        self._pixels = PixelController(after=self.window.after, after_cancel=self.window.after_cancel)
        self._pixels.on_buffer = self._handle_buffer
        self._pixels.on_error = self._handle_pipeline_error
        self._pixels.on_transform_change = self._handle_transform_change
        self._pixels.on_redraw = self._redraw

        self.sidebar.on_open_file = self._handle_open_file
        self.sidebar.on_grid_size_change = lambda v: self._pixels.update_settings(grid_size=v)
        self.sidebar.on_contrast_change = lambda v: self._pixels.update_settings(contrast=v)
        self.sidebar.on_saturation_change = lambda v: self._pixels.update_settings(saturation=v)
        self.sidebar.on_show_grid_change = lambda v: self._pixels.update_settings(show_grid=v)
        self.sidebar.on_reset_transform = self._pixels.reset_transform
        self.sidebar.on_clear_image = self._handle_clear_image
        self.sidebar.set_settings(self._pixels.settings)

        self.viewer.on_pointer_event = self._handle_pointer
        self.viewer.on_hold_source_change = lambda _active: self._redraw()
        self.viewer.on_resize = lambda _size: self._redraw()

        self.bottom.on_export = self._handle_export

    # ---- Handlers ----
    def _handle_open_file(self) -> None:
        try:
            file_path = filedialog.askopenfilename(
                title="Выберите изображение",
                filetypes=(
                    ("Images", "*.png *.jpg *.jpeg *.bmp *.gif *.tiff *.webp"),
                    ("All files", "*.*"),
                ),
            )
        except TclError:
            # Silent fail if dialog cannot open
            return

        if not file_path:
            return

        try:
            source = self._pixels.load_source(file_path)
        except (PixelCraftError, OSError) as exc:
            self._show_error("Не удалось открыть изображение", exc)
            return

        self.sidebar.set_image_info(source)
        self.bottom.set_status(f"{Path(file_path).name}: {source.width} × {source.height} px")

    def _handle_clear_image(self) -> None:
        self._pixels.clear_source()
        self.sidebar.set_image_info(None)
        self.viewer.set_preview(None)
        self.bottom.set_export_enabled(False)
        self.bottom.set_status("Откройте изображение, чтобы начать")

    def _handle_pointer(self, event: PointerEvent) -> None:
        if self._pixels.source is None:
            return
        self._pixels.handle_pointer(event)

    def _handle_transform_change(self, transform: Transform) -> None:
        self.sidebar.set_transform(transform)

    def _handle_buffer(self, _buffer: PixelBuffer) -> None:
        self.bottom.set_export_enabled(True)
        self._redraw()

    def _handle_pipeline_error(self, exc: PixelCraftError) -> None:
        # прошлый буфер остаётся на экране
        self.bottom.set_status(f"Ошибка обработки: {exc}", error=True)

    def _handle_export(self, multiplier: int) -> None:
        try:
            result = self._pixels.export(multiplier)
        except PixelCraftError as exc:
            self._show_error("Не удалось экспортировать", exc)
            return

        try:
            target = filedialog.asksaveasfilename(
                title="Сохранить спрайт",
                initialfile=result.filename,
                defaultextension=".png",
                filetypes=(("PNG", "*.png"),),
            )
        except TclError:
            return
        if not target:
            return

        try:
            Path(target).write_bytes(result.data)
        except OSError as exc:
            self._show_error("Не удалось сохранить файл", exc)
            return
        self.bottom.set_status(f"Сохранено: {target} ({result.size} × {result.size} px)")

    # ---- Helpers ----
    def _redraw(self) -> None:
        """Перерисовывает превью из последнего удачного буфера (или исходник при зажатом пробеле)."""
        if self._pixels is None or self._pixels.buffer is None:
            return
        size = self.viewer.get_display_size()
        try:
            image = self._pixels.render_preview(size, show_source=self.viewer.hold_source_active)
        except PixelCraftError as exc:
            self.bottom.set_status(f"Ошибка отображения: {exc}", error=True)
            return
        self.viewer.set_preview(image)

    def _show_error(self, title: str, exc: Exception) -> None:
        logger.error("%s: %s", title, exc)
        self.bottom.set_status(f"{title}: {exc}", error=True)
        try:
            messagebox.showerror(title, str(exc), parent=self.window)
        except TclError:
            # dialog unavailable; the status line already carries the message
            return
