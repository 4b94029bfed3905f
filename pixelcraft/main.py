"""Точка входа в приложение."""
from pixelcraft.app import PixelCraftApp
from pixelcraft.config import setup_logging


def main() -> None:
    """Настраивает логирование, создаёт и запускает главное окно приложения."""
    setup_logging()
    app = PixelCraftApp()
    app.mainloop()


if __name__ == "__main__":
    main()
