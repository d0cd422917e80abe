"""
Captioner - a text-overlay image editor.

This is the main entry point for the application.
Run with: python -m captioner.app [IMAGE]
"""

import sys
from pathlib import Path

from PySide6.QtWidgets import QApplication

from captioner import __version__
from captioner.core.app_core import AppCore
from captioner.services.logging_service import get_logger, setup_logging, shutdown_logging


def main() -> int:
    """
    Main entry point for Captioner.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    setup_logging()
    logger = get_logger(__name__)

    try:
        logger.info("Starting Captioner...")

        app = QApplication(sys.argv)
        app.setApplicationName("Captioner")
        app.setOrganizationName("Captioner")
        app.setApplicationVersion(__version__)

        args = app.arguments()[1:]
        image_path = Path(args[0]) if args else None

        app_core = AppCore(app, image_path)
        app_core.main_window.raise_()

        logger.info("Captioner initialization complete. Entering event loop...")
        exit_code = app.exec()

        logger.info(f"Captioner exiting with code {exit_code}")
        shutdown_logging()
        return exit_code

    except Exception as e:
        logger.critical(f"Fatal error during startup: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
