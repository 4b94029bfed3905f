from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk

from pixelcraft import config


class BottomBar(ctk.CTkFrame):
    def __init__(self, master: ctk.CTk, **kwargs) -> None:
        super().__init__(master, height=64, **kwargs)

        # callbacks
        self.on_export: Optional[Callable[[int], None]] = None

        # layout
        self.grid_rowconfigure(0, weight=1)
        self.grid_columnconfigure(0, weight=1)  # status stretches

        self._status_value = ctk.StringVar(value="Перетаскивайте для сдвига, колесо для масштаба, пробел — исходник")
        self._status_label = ctk.CTkLabel(self, textvariable=self._status_value, anchor="w")
        self._status_label.grid(row=0, column=0, padx=(10, 6), pady=8, sticky="ew")

        # Export buttons, one per multiplier
        self._export_buttons = []
        for col, multiplier in enumerate(config.EXPORT_MULTIPLIERS, start=1):
            btn = ctk.CTkButton(
                self,
                text=f"Скачать ({multiplier}x)",
                width=120,
                command=lambda m=multiplier: self._emit_export(m),
            )
            btn.grid(row=0, column=col, padx=6, pady=8, sticky="e")
            self._export_buttons.append(btn)
        self.set_export_enabled(False)

    # public API (sync from controller)
    def set_status(self, text: str, error: bool = False) -> None:
        self._status_value.set(text)
        self._status_label.configure(text_color="#e06c75" if error else ("gray10", "gray90"))

    def set_export_enabled(self, enabled: bool) -> None:
        state = "normal" if enabled else "disabled"
        for btn in self._export_buttons:
            btn.configure(state=state)

    # events
    def _emit_export(self, multiplier: int) -> None:
        if self.on_export:
            self.on_export(multiplier)
