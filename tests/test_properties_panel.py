import pytest

from captioner.editor import presets
from captioner.editor.elements import TextAlign
from captioner.ui.properties_panel import PropertiesPanel


@pytest.fixture
def panel(loaded_session):
    return PropertiesPanel(loaded_session)


@pytest.fixture
def title(loaded_session):
    element = loaded_session.model.elements[0]
    loaded_session.select(element.id)
    return element


def test_element_controls_follow_selection(panel, loaded_session):
    assert not panel._element_group.isEnabled()
    assert panel._filter_group.isEnabled()

    title = loaded_session.model.elements[0]
    loaded_session.select(title.id)

    assert panel._element_group.isEnabled()
    assert panel._text_edit.text() == title.text
    assert panel._font_combo.currentText() == "Lobster"
    assert panel._size_spin.value() == 50

    loaded_session.select(None)
    assert not panel._element_group.isEnabled()


def test_font_choice_updates_and_commits(panel, loaded_session, title):
    panel._font_combo.setCurrentText("Pacifico")

    assert loaded_session.model.active.font == "Pacifico"
    assert loaded_session.history.cursor == 1

    loaded_session.undo()
    assert panel._font_combo.currentText() == "Lobster"


def test_text_edits_are_live_until_editing_finishes(panel, loaded_session, title):
    panel._text_edit.textEdited.emit("Hello")

    assert loaded_session.model.active.text == "Hello"
    assert loaded_session.history.cursor == 0

    panel._text_edit.editingFinished.emit()
    assert loaded_session.history.cursor == 1


def test_editing_finished_without_change_records_nothing(panel, loaded_session, title):
    panel._text_edit.editingFinished.emit()
    panel._size_spin.editingFinished.emit()

    assert loaded_session.history.cursor == 0


def test_swatch_sets_color_and_commits(panel, loaded_session, title):
    swatch = panel._swatches[2]

    swatch.click()

    assert swatch.color == presets.COLOR_PALETTES["Vibrant & High Contrast"][2]
    assert loaded_session.model.active.color == swatch.color
    assert loaded_session.history.cursor == 1


def test_align_and_background_toggle_commit(panel, loaded_session, title):
    panel._align_combo.setCurrentIndex(panel._align_combo.findData("left"))
    panel._background_check.setChecked(True)

    active = loaded_session.model.active
    assert active.align is TextAlign.LEFT
    assert active.bg_color.enabled
    assert loaded_session.history.cursor == 2


def test_rotation_slider_snaps_on_release(panel, loaded_session, title):
    panel._rotation_slider.setValue(43)

    assert loaded_session.model.active.rotation == 43
    assert loaded_session.history.cursor == 0

    panel._rotation_slider.sliderReleased.emit()

    assert loaded_session.model.active.rotation == 45
    assert panel._rotation_slider.value() == 45
    assert loaded_session.history.cursor == 1


def test_filter_slider_is_live_until_released(panel, loaded_session):
    slider = panel._filter_sliders["sepia"]

    slider.setValue(60)
    assert loaded_session.filters.sepia == 60
    assert loaded_session.history.cursor == 0

    slider.sliderReleased.emit()
    assert loaded_session.history.cursor == 1

    panel._reset_filters.click()
    assert loaded_session.filters.is_identity
    assert slider.value() == 0
