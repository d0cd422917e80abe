"""
Properties panel for Captioner.

Side panel with the controls for the selected text element (text, font,
size, alignment, colour, background/shadow/outline toggles, rotation) and
for the base image filters.

Controls edit the session live while they move; a history entry is
recorded when the gesture ends (editing finished, slider released, or a
discrete choice such as a combo entry, swatch or checkbox).
"""

from typing import Dict, Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QCheckBox,
    QColorDialog,
    QComboBox,
    QFrame,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QSlider,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from captioner.editor import presets
from captioner.editor.elements import ImageFilters, TextAlign, TextElement
from captioner.editor.renderer import parse_color
from captioner.editor.session import EditorSession
from captioner.services.logging_service import get_logger


SWATCHES_PER_ROW = 6

FILTER_LABELS = {
    "brightness": "Brightness",
    "contrast": "Contrast",
    "grayscale": "Grayscale",
    "sepia": "Sepia",
}


class ColorButton(QPushButton):
    """Button that shows a colour and emits it when clicked."""

    color_picked = Signal(str)

    def __init__(self, color: str = "#FFFFFF", size: int = 22, parent=None):
        super().__init__(parent)
        self._color = color
        self.setFixedSize(size, size)
        self.setToolTip(color)
        self.clicked.connect(self._on_click)
        self._update_style()

    @property
    def color(self) -> str:
        return self._color

    @color.setter
    def color(self, value: str) -> None:
        self._color = value
        self._update_style()

    def _update_style(self) -> None:
        self.setStyleSheet(f"""
            QPushButton {{
                background-color: {parse_color(self._color).name()};
                border: 2px solid #555;
                border-radius: 4px;
            }}
            QPushButton:hover {{
                border-color: #888;
            }}
        """)

    def _on_click(self) -> None:
        self.color_picked.emit(self._color)


class CustomColorButton(ColorButton):
    """Colour button that opens a colour picker on click."""

    def _on_click(self) -> None:
        color = QColorDialog.getColor(parse_color(self._color), self, "Select Color")
        if color.isValid():
            self.color = color.name().upper()
            self.color_picked.emit(self._color)


class PropertiesPanel(QFrame):
    """
    Panel that edits the selected element and the image filters.

    Mirrors the session: it refreshes from state_changed and
    selection_changed, and element controls are disabled while nothing
    is selected.
    """

    def __init__(self, session: EditorSession, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._logger = get_logger(__name__)
        self._session = session
        self._updating = False

        self._setup_ui()
        self._connect_signals()
        self.sync_from_session()

    # ─── UI ───────────────────────────────────────────────────────────────

    def _setup_ui(self) -> None:
        self.setFrameStyle(QFrame.Shape.StyledPanel)
        self.setFixedWidth(240)
        self.setStyleSheet("""
            QFrame {
                background-color: #2d2d2d;
                border-left: 1px solid #3a3a3a;
            }
            QLabel, QCheckBox {
                color: #ddd;
                font-size: 11px;
            }
            QLineEdit, QSpinBox, QComboBox {
                background-color: #3a3a3a;
                color: #ddd;
                border: 1px solid #555;
                padding: 4px;
            }
        """)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(8)

        # ─── Text Element ─────────────────────────────────────────────────
        self._element_group = QWidget()
        element_layout = QVBoxLayout(self._element_group)
        element_layout.setContentsMargins(0, 0, 0, 0)
        element_layout.setSpacing(8)

        title = QLabel("Text")
        title.setStyleSheet("font-weight: bold; font-size: 13px;")
        element_layout.addWidget(title)

        self._text_edit = QLineEdit()
        element_layout.addWidget(self._text_edit)

        element_layout.addWidget(QLabel("Font"))
        self._font_combo = QComboBox()
        self._font_combo.addItems(presets.FONTS)
        element_layout.addWidget(self._font_combo)

        size_row = QHBoxLayout()
        self._size_spin = QSpinBox()
        self._size_spin.setRange(6, 300)
        self._align_combo = QComboBox()
        for align in TextAlign:
            self._align_combo.addItem(align.value.capitalize(), align.value)
        size_row.addWidget(self._size_spin)
        size_row.addWidget(self._align_combo)
        element_layout.addWidget(QLabel("Size / Align"))
        element_layout.addLayout(size_row)

        element_layout.addWidget(QLabel("Color"))
        self._swatches = []
        for name, colors in presets.COLOR_PALETTES.items():
            row = QGridLayout()
            row.setSpacing(4)
            for i, color in enumerate(colors):
                button = ColorButton(color)
                button.color_picked.connect(self._on_color_picked)
                row.addWidget(button, i // SWATCHES_PER_ROW, i % SWATCHES_PER_ROW)
                self._swatches.append(button)
            element_layout.addWidget(QLabel(name))
            element_layout.addLayout(row)

        custom_row = QHBoxLayout()
        custom_row.addWidget(QLabel("Custom"))
        self._custom_color = CustomColorButton()
        self._custom_color.color_picked.connect(self._on_color_picked)
        custom_row.addWidget(self._custom_color)
        custom_row.addStretch()
        element_layout.addLayout(custom_row)

        self._background_check = QCheckBox("Background")
        self._shadow_check = QCheckBox("Shadow")
        self._stroke_check = QCheckBox("Outline")
        for check in (self._background_check, self._shadow_check, self._stroke_check):
            element_layout.addWidget(check)

        rotation_row = QHBoxLayout()
        self._rotation_slider = QSlider(Qt.Orientation.Horizontal)
        self._rotation_slider.setRange(-180, 180)
        self._rotation_reset = QPushButton("0°")
        self._rotation_reset.setFixedWidth(36)
        rotation_row.addWidget(self._rotation_slider)
        rotation_row.addWidget(self._rotation_reset)
        element_layout.addWidget(QLabel("Rotation"))
        element_layout.addLayout(rotation_row)

        layout.addWidget(self._element_group)

        # ─── Image Filters ────────────────────────────────────────────────
        self._filter_group = QWidget()
        filter_layout = QVBoxLayout(self._filter_group)
        filter_layout.setContentsMargins(0, 8, 0, 0)
        filter_layout.setSpacing(6)

        title = QLabel("Image")
        title.setStyleSheet("font-weight: bold; font-size: 13px;")
        filter_layout.addWidget(title)

        self._filter_sliders: Dict[str, QSlider] = {}
        for name, (low, high) in ImageFilters.RANGES.items():
            slider = QSlider(Qt.Orientation.Horizontal)
            slider.setRange(int(low), int(high))
            filter_layout.addWidget(QLabel(FILTER_LABELS[name]))
            filter_layout.addWidget(slider)
            self._filter_sliders[name] = slider

        self._reset_filters = QPushButton("Reset Filters")
        filter_layout.addWidget(self._reset_filters)

        layout.addWidget(self._filter_group)
        layout.addStretch()

    def _connect_signals(self) -> None:
        self._session.state_changed.connect(self.sync_from_session)
        self._session.selection_changed.connect(self._on_selection_changed)

        self._text_edit.textEdited.connect(self._on_text_edited)
        self._text_edit.editingFinished.connect(lambda: self._commit("Edit Text"))
        self._font_combo.currentTextChanged.connect(self._on_font_changed)
        self._size_spin.valueChanged.connect(self._on_size_changed)
        self._size_spin.editingFinished.connect(lambda: self._commit("Font Size"))
        self._align_combo.currentIndexChanged.connect(self._on_align_changed)

        self._background_check.toggled.connect(
            lambda checked: self._on_style_toggled("bg_color", checked, "Background"))
        self._shadow_check.toggled.connect(
            lambda checked: self._on_style_toggled("shadow", checked, "Shadow"))
        self._stroke_check.toggled.connect(
            lambda checked: self._on_style_toggled("stroke", checked, "Outline"))

        self._rotation_slider.valueChanged.connect(self._on_rotation_changed)
        self._rotation_slider.sliderReleased.connect(self._on_rotation_released)
        self._rotation_reset.clicked.connect(self._session.reset_rotation)

        for name, slider in self._filter_sliders.items():
            slider.valueChanged.connect(
                lambda value, name=name: self._on_filter_changed(name, value))
            slider.sliderReleased.connect(lambda: self._commit("Filter"))
        self._reset_filters.clicked.connect(self._session.reset_filters)

    # ─── Public Methods ───────────────────────────────────────────────────

    def sync_from_session(self) -> None:
        """Update every control from the session without feeding changes back."""
        self._updating = True
        try:
            self._show_element(self._session.model.active)
            self._show_filters(self._session.filters)
        finally:
            self._updating = False

    def _show_element(self, element: Optional[TextElement]) -> None:
        self._element_group.setEnabled(element is not None)
        if element is None:
            return

        if self._text_edit.text() != element.text:
            self._text_edit.setText(element.text)
        if self._font_combo.findText(element.font) < 0:
            self._font_combo.addItem(element.font)
        self._font_combo.setCurrentText(element.font)
        self._size_spin.setValue(round(element.size))
        self._align_combo.setCurrentIndex(self._align_combo.findData(element.align.value))
        self._custom_color.color = element.color
        self._background_check.setChecked(element.bg_color.enabled)
        self._shadow_check.setChecked(element.shadow.enabled)
        self._stroke_check.setChecked(element.stroke.enabled)
        self._rotation_slider.setValue(round(element.rotation))

    def _show_filters(self, filters: ImageFilters) -> None:
        self._filter_group.setEnabled(self._session.has_image)
        for name, slider in self._filter_sliders.items():
            slider.setValue(round(getattr(filters, name)))

    # ─── Handlers ─────────────────────────────────────────────────────────

    def _commit(self, label: str) -> None:
        """Record a history entry if the live state moved since the last one."""
        if self._session.state != self._session.history.current:
            self._session.commit(label)

    def _on_selection_changed(self, element: Optional[TextElement]) -> None:
        self._logger.debug(f"Showing properties for {element.id if element else None}")
        self.sync_from_session()

    def _on_text_edited(self, text: str) -> None:
        if not self._updating:
            self._session.update_active(text=text)

    def _on_font_changed(self, font: str) -> None:
        if self._updating or not font:
            return
        self._session.update_active(font=font)
        self._commit("Font")

    def _on_size_changed(self, value: int) -> None:
        if not self._updating:
            self._session.update_active(size=float(value))

    def _on_align_changed(self, index: int) -> None:
        if self._updating or index < 0:
            return
        self._session.update_active(align=TextAlign(self._align_combo.itemData(index)))
        self._commit("Align")

    def _on_color_picked(self, color: str) -> None:
        if not self._updating:
            self._session.apply_color_swatch(color)

    def _on_style_toggled(self, style_field: str, checked: bool, label: str) -> None:
        if self._updating:
            return
        self._session.update_active(**{style_field: {"enabled": checked}})
        self._commit(label)

    def _on_rotation_changed(self, value: int) -> None:
        if not self._updating:
            self._session.set_rotation(value)

    def _on_rotation_released(self) -> None:
        self._session.release_rotation()

    def _on_filter_changed(self, name: str, value: int) -> None:
        if not self._updating:
            self._session.set_filter(name, value)
