"""Виджет превью спрайта: отображение, перетаскивание и колесо масштаба.

Принципы:
- SRP: отвечает только за представление и сбор жестов; геометрию считает контроллер.
- Чистый код: чёткое разделение публичного API и внутренних обработчиков событий.
"""
from __future__ import annotations

from typing import Callable, Optional, Tuple

import customtkinter as ctk
import tkinter as tk
from PIL import Image, ImageTk

from pixelcraft.controllers.transform_controller import (
    LeaveEvent,
    PanEvent,
    PointerEvent,
    PressEvent,
    ReleaseEvent,
    ZoomEvent,
    wheel_delta,
)
from pixelcraft.services.present_service import display_size


class ImageViewer(ctk.CTkFrame):
    """Канва с пиксельным превью; пробел показывает исходник «до»."""
    def __init__(self, master: ctk.CTk | tk.Misc, **kwargs) -> None:
        super().__init__(master, **kwargs)
        self.grid_rowconfigure(0, weight=1)
        self.grid_columnconfigure(0, weight=1)

        self._canvas = tk.Canvas(self, highlightthickness=0, bg=self._get_canvas_bg(), cursor="fleur")
        self._canvas.grid(row=0, column=0, sticky="nsew")

        self._tk_image: Optional[ImageTk.PhotoImage] = None
        self._has_content: bool = False
        self._hold_source_active: bool = False
        self._last_pointer_xy: Optional[Tuple[int, int]] = None

        self.on_pointer_event: Optional[Callable[[PointerEvent], None]] = None
        self.on_hold_source_change: Optional[Callable[[bool], None]] = None
        self.on_resize: Optional[Callable[[int], None]] = None

        self._canvas.bind("<Configure>", self._on_canvas_resize)
        self._canvas.bind("<Leave>", self._on_mouse_leave)

        # Mouse wheel zoom (cross-platform)
        self._canvas.bind("<MouseWheel>", self._on_mouse_wheel)      # Windows/macOS
        self._canvas.bind("<Button-4>", self._on_mouse_wheel_linux)  # Linux scroll up
        self._canvas.bind("<Button-5>", self._on_mouse_wheel_linux)  # Linux scroll down

        # Panning with left mouse drag
        self._canvas.bind("<ButtonPress-1>", self._on_pan_start)
        self._canvas.bind("<B1-Motion>", self._on_pan_move)
        self._canvas.bind("<ButtonRelease-1>", self._on_pan_end)

        # Hold space to preview "before"
        self._canvas.bind("<KeyPress-space>", self._on_space_down)
        self._canvas.bind("<KeyRelease-space>", self._on_space_up)

    # ---- Public API ----
    def get_display_size(self) -> int:
        """Сторона квадратного превью: меньшая сторона канвы, не больше 512 px."""
        canvas_w = int(self._canvas.winfo_width())
        canvas_h = int(self._canvas.winfo_height())
        return display_size(min(canvas_w, canvas_h))

    def set_preview(self, image: Optional[Image.Image]) -> None:
        """Показывает готовый растр по центру канвы (None очищает канву)."""
        self._canvas.delete("all")
        self._has_content = image is not None
        if image is None:
            self._tk_image = None
            self._draw_placeholder()
            return
        canvas_w = int(self._canvas.winfo_width())
        canvas_h = int(self._canvas.winfo_height())
        x = max(0, (canvas_w - image.width) // 2)
        y = max(0, (canvas_h - image.height) // 2)
        self._tk_image = ImageTk.PhotoImage(image)
        self._canvas.create_image(x, y, image=self._tk_image, anchor="nw")

    @property
    def hold_source_active(self) -> bool:
        return self._hold_source_active

    # ---- Internals ----
    def _draw_placeholder(self) -> None:
        canvas_w = int(self._canvas.winfo_width())
        canvas_h = int(self._canvas.winfo_height())
        color = "#8a8a8a"
        self._canvas.create_text(
            canvas_w // 2,
            canvas_h // 2,
            text="Откройте изображение, чтобы начать",
            fill=color,
        )

    def _on_canvas_resize(self, _event: tk.Event) -> None:
        if not self._has_content:
            self._canvas.delete("all")
            self._draw_placeholder()
        if self.on_resize:
            self.on_resize(self.get_display_size())

    def _emit(self, event: PointerEvent) -> None:
        if self.on_pointer_event:
            self.on_pointer_event(event)

    def _on_mouse_leave(self, _event: tk.Event) -> None:
        self._last_pointer_xy = None
        self._emit(LeaveEvent())

    def _get_canvas_bg(self) -> str:
        # Soft checker-like color; CTk does not expose canvas theme, so pick neutral
        return "#1f1f1f" if ctk.get_appearance_mode().lower() == "dark" else "#f2f2f2"

    # ---- Mouse wheel zoom ----
    def _on_mouse_wheel(self, event: tk.Event) -> None:
        if not self._has_content or event.delta == 0:
            return
        self._emit(ZoomEvent(wheel_delta(event_delta=event.delta)))

    def _on_mouse_wheel_linux(self, event: tk.Event) -> None:
        # On X11, Button-4 is up, Button-5 is down
        if not self._has_content:
            return
        self._emit(ZoomEvent(wheel_delta(button=getattr(event, "num", None))))

    # ---- Panning ----
    def _on_pan_start(self, event: tk.Event) -> None:
        self._canvas.focus_set()
        self._last_pointer_xy = (event.x, event.y)
        self._emit(PressEvent())

    def _on_pan_move(self, event: tk.Event) -> None:
        if self._last_pointer_xy is None:
            return
        lx, ly = self._last_pointer_xy
        self._last_pointer_xy = (event.x, event.y)
        dx, dy = event.x - lx, event.y - ly
        if dx or dy:
            self._emit(PanEvent(dx, dy))

    def _on_pan_end(self, _event: tk.Event) -> None:
        self._last_pointer_xy = None
        self._emit(ReleaseEvent())

    def _on_space_down(self, _event: tk.Event) -> None:
        if not self._hold_source_active:
            self._hold_source_active = True
            if self.on_hold_source_change:
                self.on_hold_source_change(True)

    def _on_space_up(self, _event: tk.Event) -> None:
        if self._hold_source_active:
            self._hold_source_active = False
            if self.on_hold_source_change:
                self.on_hold_source_change(False)
