"""
Main window for Captioner.

This module contains the main application window with the editor canvas
and the properties panel docked on the right, plus the menu bar with file
and edit actions.
"""

from pathlib import Path
from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import (
    QDockWidget,
    QFileDialog,
    QMainWindow,
    QMessageBox,
    QWidget,
)

from captioner.editor import project_io
from captioner.editor.editor_canvas import EditorCanvas
from captioner.editor.session import EditorSession
from captioner.errors import CaptionerError
from captioner.services.config_service import ConfigService
from captioner.services.logging_service import get_logger
from captioner.ui.properties_panel import PropertiesPanel


IMAGE_FILTER = "Images (*.png *.jpg *.jpeg *.bmp *.gif *.webp);;All Files (*)"
PROJECT_FILTER = "Captioner Project (*.json);;All Files (*)"


class MainWindow(QMainWindow):
    """
    Main application window for Captioner.

    Features:
    - Editor canvas showing the captioned image
    - Properties panel for the selected text and the image filters
    - File menu for images, projects and PNG export
    - Edit menu for history and text element actions
    """

    def __init__(
        self,
        config_service: Optional[ConfigService] = None,
        parent: Optional[QWidget] = None
    ) -> None:
        """
        Initialize the MainWindow.

        Args:
            config_service: Optional config service for folders and editor settings.
            parent: Optional parent widget.
        """
        super().__init__(parent)
        self._logger = get_logger(__name__)
        self._config = config_service
        self._session = EditorSession(config_service, self)
        self._canvas = EditorCanvas(self._session, config_service, self)

        self._setup_window()
        self.setCentralWidget(self._canvas)
        self._setup_properties_dock()
        self._setup_menu_bar()

        self._session.history_changed.connect(self._update_actions)
        self._session.selection_changed.connect(self._update_actions)
        self._update_actions()

        self._logger.info("MainWindow initialized")

    def _setup_window(self) -> None:
        self.setWindowTitle("Captioner")
        self.setMinimumSize(800, 600)
        self.resize(1200, 800)

    def _setup_properties_dock(self) -> None:
        self._properties = PropertiesPanel(self._session, self)
        dock = QDockWidget("Properties", self)
        dock.setObjectName("PropertiesDock")
        dock.setFeatures(QDockWidget.DockWidgetFeature.NoDockWidgetFeatures)
        dock.setWidget(self._properties)
        self.addDockWidget(Qt.DockWidgetArea.RightDockWidgetArea, dock)

    def _setup_menu_bar(self) -> None:
        """Create and configure the menu bar."""
        menu_bar = self.menuBar()

        # ─── File Menu ────────────────────────────────────────────────
        file_menu = menu_bar.addMenu("&File")

        open_image_action = QAction("&Open Image...", self)
        open_image_action.setShortcut(QKeySequence.StandardKey.Open)
        open_image_action.triggered.connect(self._on_open_image)
        file_menu.addAction(open_image_action)

        open_project_action = QAction("Open &Project...", self)
        open_project_action.triggered.connect(self._on_open_project)
        file_menu.addAction(open_project_action)

        self._save_project_action = QAction("&Save Project...", self)
        self._save_project_action.setShortcut(QKeySequence.StandardKey.Save)
        self._save_project_action.triggered.connect(self._on_save_project)
        file_menu.addAction(self._save_project_action)

        self._export_action = QAction("&Export PNG...", self)
        self._export_action.setShortcut("Ctrl+E")
        self._export_action.triggered.connect(self._on_export)
        file_menu.addAction(self._export_action)

        file_menu.addSeparator()

        quit_action = QAction("&Quit", self)
        quit_action.setShortcut(QKeySequence.StandardKey.Quit)
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)

        # ─── Edit Menu ────────────────────────────────────────────────
        # Undo/redo/delete keys are handled by the canvas itself
        edit_menu = menu_bar.addMenu("&Edit")

        self._undo_action = QAction("&Undo", self)
        self._undo_action.triggered.connect(self._session.undo)
        edit_menu.addAction(self._undo_action)

        self._redo_action = QAction("&Redo", self)
        self._redo_action.triggered.connect(self._session.redo)
        edit_menu.addAction(self._redo_action)

        edit_menu.addSeparator()

        self._add_text_action = QAction("&Add Text", self)
        self._add_text_action.setShortcut("Ctrl+T")
        self._add_text_action.triggered.connect(self._session.add_text)
        edit_menu.addAction(self._add_text_action)

        self._delete_text_action = QAction("&Delete Text", self)
        self._delete_text_action.triggered.connect(self._session.delete_active)
        edit_menu.addAction(self._delete_text_action)

        self._reset_rotation_action = QAction("Reset &Rotation", self)
        self._reset_rotation_action.triggered.connect(self._session.reset_rotation)
        edit_menu.addAction(self._reset_rotation_action)

        edit_menu.addSeparator()

        self._reset_filters_action = QAction("Reset &Filters", self)
        self._reset_filters_action.triggered.connect(self._session.reset_filters)
        edit_menu.addAction(self._reset_filters_action)

    # ─── Public Methods ───────────────────────────────────────────────────

    @property
    def session(self) -> EditorSession:
        return self._session

    @property
    def canvas(self) -> EditorCanvas:
        return self._canvas

    @property
    def properties(self) -> PropertiesPanel:
        return self._properties

    def open_image(self, path: Path) -> bool:
        """
        Load an image file into a fresh session.

        Args:
            path: Image file to open.

        Returns:
            True if the image was loaded.
        """
        try:
            image = project_io.load_image_file(path)
        except CaptionerError as e:
            self._show_error("Open Image", str(e))
            return False

        self._session.load_image(image)
        self.setWindowTitle(f"Captioner - {Path(path).name} - {image.width()}×{image.height()}")
        return True

    # ─── Menu Actions ─────────────────────────────────────────────────────

    def _start_folder(self) -> str:
        if self._config is None:
            return str(Path.home())
        return str(self._config.default_save_folder)

    def _default_path(self, filename: str) -> str:
        return str(Path(self._start_folder()) / filename)

    def _on_open_image(self) -> None:
        path, _ = QFileDialog.getOpenFileName(
            self, "Open Image", self._start_folder(), IMAGE_FILTER
        )
        if path:
            self.open_image(Path(path))

    def _on_open_project(self) -> None:
        path, _ = QFileDialog.getOpenFileName(
            self, "Open Project", self._start_folder(), PROJECT_FILTER
        )
        if not path:
            return

        try:
            self._session.load_state(project_io.read_project(Path(path)))
        except CaptionerError as e:
            self._logger.error(f"Failed to open project {path}: {e}")
            self._show_error("Open Project", str(e))

    def _on_save_project(self) -> None:
        filename = self._config.project_filename if self._config else "my-project.json"
        path, _ = QFileDialog.getSaveFileName(
            self, "Save Project", self._default_path(filename), PROJECT_FILTER
        )
        if not path:
            return

        try:
            project_io.write_project(Path(path), self._session.state)
        except OSError as e:
            self._logger.error(f"Failed to save project {path}: {e}")
            self._show_error("Save Project", f"Could not save project: {e}")

    def _on_export(self) -> None:
        if not self._session.has_image:
            return

        filename = self._config.export_filename if self._config else "captioned-image.png"
        path, _ = QFileDialog.getSaveFileName(
            self, "Export PNG", self._default_path(filename), "PNG Image (*.png)"
        )
        if not path:
            return

        try:
            saved = project_io.save_image_file(Path(path), self._session.export_image())
        except OSError as e:
            self._logger.error(f"Failed to export {path}: {e}")
            saved = False
        if not saved:
            self._show_error("Export PNG", f"Could not export image to {path}")

    def _update_actions(self, *args) -> None:
        history = self._session.history
        has_image = self._session.has_image
        has_selection = self._session.active_id is not None

        self._undo_action.setEnabled(history.can_undo)
        self._redo_action.setEnabled(history.can_redo)
        self._save_project_action.setEnabled(has_image)
        self._export_action.setEnabled(has_image)
        self._add_text_action.setEnabled(has_image)
        self._delete_text_action.setEnabled(has_selection)
        self._reset_rotation_action.setEnabled(has_selection)
        self._reset_filters_action.setEnabled(has_image)

    def _show_error(self, title: str, message: str) -> None:
        QMessageBox.warning(self, title, message)
