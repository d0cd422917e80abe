"""
Application core for Captioner.

This module contains the AppCore class which is responsible for:
- Initializing the configuration service
- Applying global styling (dark theme)
- Creating and showing the main window

This is the central orchestration point for the application.
"""

from pathlib import Path
from typing import Optional

from PySide6.QtCore import QObject
from PySide6.QtGui import QColor, QPalette
from PySide6.QtWidgets import QApplication

from captioner.services.config_service import ConfigService
from captioner.services.logging_service import get_logger
from captioner.ui.main_window import MainWindow


class AppCore(QObject):
    """
    Central application core that wires together all components.

    Responsibilities:
    - Initialize services
    - Apply the dark theme when configured
    - Create and show the MainWindow, optionally with an image
    """

    def __init__(
        self,
        app: QApplication,
        image_path: Optional[Path] = None,
        config_service: Optional[ConfigService] = None,
    ) -> None:
        """
        Initialize the application core.

        Args:
            app: The QApplication instance.
            image_path: Optional image to open on startup.
            config_service: Optional pre-built config service.
        """
        super().__init__()
        self._app = app
        self._logger = get_logger(__name__)
        self._logger.info("Initializing Captioner application core...")

        self._config_service = config_service or ConfigService()
        self._logger.info(f"Theme from config: {self._config_service.theme}")

        if self._config_service.theme == "dark":
            self._apply_dark_theme()

        self._main_window = MainWindow(self._config_service)
        if image_path is not None:
            self._main_window.open_image(Path(image_path))
        self._main_window.show()

    @property
    def config_service(self) -> ConfigService:
        return self._config_service

    @property
    def main_window(self) -> MainWindow:
        return self._main_window

    def _apply_dark_theme(self) -> None:
        """
        Apply a dark color palette to the application.

        Uses Qt's QPalette for a native-looking dark theme.
        """
        self._logger.debug("Applying dark theme...")

        palette = QPalette()

        palette.setColor(QPalette.ColorRole.Window, QColor(45, 45, 45))
        palette.setColor(QPalette.ColorRole.WindowText, QColor(220, 220, 220))
        palette.setColor(QPalette.ColorRole.Base, QColor(35, 35, 35))
        palette.setColor(QPalette.ColorRole.AlternateBase, QColor(50, 50, 50))
        palette.setColor(QPalette.ColorRole.Text, QColor(220, 220, 220))
        palette.setColor(QPalette.ColorRole.BrightText, QColor(255, 255, 255))
        palette.setColor(QPalette.ColorRole.Button, QColor(55, 55, 55))
        palette.setColor(QPalette.ColorRole.ButtonText, QColor(220, 220, 220))
        palette.setColor(QPalette.ColorRole.Highlight, QColor(0, 174, 255))
        palette.setColor(QPalette.ColorRole.HighlightedText, QColor(255, 255, 255))
        palette.setColor(QPalette.ColorRole.ToolTipBase, QColor(60, 60, 60))
        palette.setColor(QPalette.ColorRole.ToolTipText, QColor(220, 220, 220))

        # Disabled menu entries
        for role in (QPalette.ColorRole.WindowText, QPalette.ColorRole.Text,
                     QPalette.ColorRole.ButtonText):
            palette.setColor(QPalette.ColorGroup.Disabled, role, QColor(127, 127, 127))

        self._app.setPalette(palette)

        self._app.setStyleSheet("""
            QMenuBar {
                background-color: #2d2d2d;
                padding: 2px;
            }
            QMenuBar::item:selected {
                background-color: #4a4a4a;
            }
            QMenu {
                background-color: #2d2d2d;
                border: 1px solid #3a3a3a;
            }
            QMenu::item:selected {
                background-color: #00aeff;
            }
        """)

        self._logger.info("Dark theme applied")
