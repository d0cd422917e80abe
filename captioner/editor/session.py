"""
Editor session for Captioner.

The EditorSession is the explicitly owned context of one editing session:
the base image, the element model (with the selection), the image filters
and the undo/redo history. The interaction controller and the canvas receive
it instead of reaching for global state.

Live edits (typing, slider drags, element drags) change the state without
committing; commit() records a history entry at the end of the gesture.
Every change emits state_changed so the canvas re-renders before the next
event is processed.
"""

from typing import Any, Optional

from PySide6.QtCore import QObject, Signal
from PySide6.QtGui import QImage

from captioner.editor import presets, project_io
from captioner.editor.elements import EditorState, ImageFilters, TextElementModel
from captioner.editor.history import HistoryManager
from captioner.editor.renderer import render_to_image
from captioner.services.config_service import ConfigService
from captioner.services.logging_service import get_logger


# Rotation values a released rotation control snaps to
ROTATION_SNAP_ANGLES = (-180, -135, -90, -45, 0, 45, 90, 135, 180)
DEFAULT_ROTATION_SNAP_THRESHOLD = 4.0


def snap_rotation(
    degrees: float,
    threshold: float = DEFAULT_ROTATION_SNAP_THRESHOLD,
) -> float:
    """Snap to the first 45 degree step within threshold, else keep the value."""
    for angle in ROTATION_SNAP_ANGLES:
        if abs(degrees - angle) <= threshold:
            return float(angle)
    return degrees


class EditorSession(QObject):
    """
    Owner of the editable state of one editing session.

    Signals:
        state_changed: Emitted after any live or committed mutation.
        selection_changed: Emitted with the active TextElement or None.
        history_changed: Emitted when undo/redo availability may have changed.
    """

    state_changed = Signal()
    selection_changed = Signal(object)  # TextElement or None
    history_changed = Signal()

    def __init__(
        self,
        config_service: Optional[ConfigService] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._logger = get_logger(__name__)
        self._config = config_service

        self._image: Optional[QImage] = None
        self._model = TextElementModel()
        self._filters = presets.DEFAULT_FILTERS

        history_limit = config_service.history_limit if config_service else 0
        self._history = HistoryManager(self.state, limit=history_limit)

        self._rotation_snap_threshold = (
            config_service.rotation_snap_threshold
            if config_service else DEFAULT_ROTATION_SNAP_THRESHOLD
        )

    # ─── Properties ───────────────────────────────────────────────────────

    @property
    def image(self) -> Optional[QImage]:
        return self._image

    @property
    def has_image(self) -> bool:
        return self._image is not None and not self._image.isNull()

    @property
    def model(self) -> TextElementModel:
        return self._model

    @property
    def filters(self) -> ImageFilters:
        return self._filters

    @property
    def history(self) -> HistoryManager:
        return self._history

    @property
    def state(self) -> EditorState:
        """The current live state (elements + filters) as an immutable value."""
        return EditorState(self._model.elements, self._filters)

    @property
    def active_id(self) -> Optional[str]:
        return self._model.active_id

    # ─── Notifications ────────────────────────────────────────────────────

    def _notify(self) -> None:
        self.state_changed.emit()

    def _notify_selection(self) -> None:
        self.selection_changed.emit(self._model.active)
        self.state_changed.emit()

    def _apply_state(self, state: EditorState) -> None:
        self._model.replace_all(state.elements)
        self._filters = state.filters

    # ─── Image and Project Lifecycle ──────────────────────────────────────

    def load_image(self, image: QImage) -> None:
        """
        Install a new base image.

        Resets elements to the starter set, filters to defaults and the
        history to a single entry.
        """
        self._image = image
        self._model.select(None)
        self._apply_state(EditorState(presets.starter_elements(), presets.DEFAULT_FILTERS))
        self._history.reset(self.state)

        self._logger.info(f"Image loaded: {image.width()}x{image.height()}")
        self.history_changed.emit()
        self._notify_selection()

    def load_project(self, text: str) -> None:
        """
        Replace elements and filters from project JSON.

        Raises:
            ProjectLoadError: The data is malformed; current state is kept.
        """
        self.load_state(project_io.loads(text))

    def load_state(self, state: EditorState) -> None:
        """Replace elements and filters with a decoded project state."""
        self._model.select(None)
        self._apply_state(state)
        self._history.reset(self.state)

        self._logger.info(f"Project loaded with {len(state.elements)} text elements")
        self.history_changed.emit()
        self._notify_selection()

    def save_project(self) -> str:
        """Encode the current state as project JSON."""
        return project_io.dumps(self.state)

    def export_image(self) -> QImage:
        """Render the composite without the selection box (null if no image)."""
        return render_to_image(self._image, self._filters, self._model.elements)

    # ─── History ──────────────────────────────────────────────────────────

    def commit(self, label: str = "Edit") -> None:
        """Record the current live state as one history entry."""
        self._history.commit(self.state, label)
        self.history_changed.emit()

    def undo(self) -> bool:
        state = self._history.undo()
        if state is None:
            return False
        self._restore(state)
        return True

    def redo(self) -> bool:
        state = self._history.redo()
        if state is None:
            return False
        self._restore(state)
        return True

    def _restore(self, state: EditorState) -> None:
        previous_active = self._model.active_id
        self._apply_state(state)
        self.history_changed.emit()
        if self._model.active_id != previous_active:
            self._notify_selection()
        else:
            self._notify()

    # ─── Selection ────────────────────────────────────────────────────────

    def select(self, element_id: Optional[str]) -> None:
        if element_id == self._model.active_id:
            return
        self._model.select(element_id)
        self._notify_selection()

    # ─── Element Actions ──────────────────────────────────────────────────

    def add_text(self) -> str:
        """Add a "New Text" element on top, select it and commit."""
        element_id = self._model.add(presets.new_text_element())
        self.commit("Add Text")
        self._notify_selection()
        return element_id

    def delete_active(self) -> None:
        """Delete the selected element and commit; no-op with no selection."""
        element_id = self._model.active_id
        if element_id is None:
            return
        self._model.remove(element_id)
        self.commit("Delete Text")
        self._notify_selection()

    def update_element(self, element_id: str, **props: Any) -> None:
        """Live edit of any element; not committed."""
        self._model.update(element_id, **props)
        self._notify()

    def update_active(self, **props: Any) -> None:
        """Live edit of the selected element; no-op with no selection."""
        if self._model.active_id is None:
            return
        self.update_element(self._model.active_id, **props)

    def apply_color_swatch(self, color: str) -> None:
        """Set the selected element's colour from a palette and commit."""
        if self._model.active_id is None:
            return
        self.update_active(color=color)
        self.commit("Color")

    # ─── Rotation ─────────────────────────────────────────────────────────

    def set_rotation(self, degrees: float) -> None:
        """Live rotation change from the rotation control."""
        self.update_active(rotation=float(degrees))

    def release_rotation(self) -> None:
        """Snap the selected element's rotation to a 45 degree step and commit."""
        active = self._model.active
        if active is None:
            return
        snapped = snap_rotation(active.rotation, self._rotation_snap_threshold)
        self.update_active(rotation=snapped)
        self.commit("Rotate")

    def reset_rotation(self) -> None:
        if self._model.active_id is None:
            return
        self.update_active(rotation=0.0)
        self.commit("Reset Rotation")

    # ─── Filters ──────────────────────────────────────────────────────────

    def set_filter(self, name: str, value: float) -> None:
        """Live filter change, clamped to the filter's range; not committed."""
        self._filters = self._filters.with_value(name, value)
        self._notify()

    def reset_filters(self) -> None:
        self._filters = presets.DEFAULT_FILTERS
        self.commit("Reset Filters")
        self._notify()
