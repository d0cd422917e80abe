import pytest

from captioner.editor.elements import ImageFilters
from captioner.editor.session import EditorSession, snap_rotation
from captioner.errors import ProjectLoadError
from captioner.services.config_service import ConfigService


def test_load_image_installs_starter_state(loaded_session):
    assert loaded_session.has_image
    assert [e.font for e in loaded_session.model] == ["Lobster", "Roboto"]
    assert loaded_session.filters == ImageFilters()
    assert loaded_session.active_id is None
    assert len(loaded_session.history) == 1


def test_add_edit_undo_redo(loaded_session):
    element_id = loaded_session.add_text()
    assert loaded_session.active_id == element_id

    loaded_session.update_active(text="Hello")
    loaded_session.commit("Text")
    assert loaded_session.history.cursor == 2

    assert loaded_session.undo()
    assert loaded_session.model.get(element_id).text == "New Text"

    assert loaded_session.undo()
    assert loaded_session.model.get(element_id) is None
    assert loaded_session.active_id is None

    assert loaded_session.redo()
    assert loaded_session.redo()
    assert loaded_session.model.get(element_id).text == "Hello"
    assert not loaded_session.redo()


def test_live_edits_are_not_committed(loaded_session):
    first = loaded_session.model.elements[0]
    loaded_session.select(first.id)

    loaded_session.update_active(size=90)
    loaded_session.set_filter("contrast", 150)

    assert loaded_session.history.cursor == 0
    assert loaded_session.model.get(first.id).size == 90
    assert loaded_session.filters.contrast == 150


def test_delete_active_commits(loaded_session):
    first = loaded_session.model.elements[0]
    loaded_session.select(first.id)

    loaded_session.delete_active()

    assert loaded_session.model.get(first.id) is None
    assert loaded_session.active_id is None
    assert loaded_session.history.cursor == 1


def test_delete_without_selection_is_noop(loaded_session):
    loaded_session.delete_active()
    assert len(loaded_session.model) == 2
    assert loaded_session.history.cursor == 0


def test_rotation_snaps_on_release(loaded_session):
    first = loaded_session.model.elements[0]
    loaded_session.select(first.id)

    loaded_session.set_rotation(88)
    loaded_session.release_rotation()
    assert loaded_session.model.get(first.id).rotation == 90
    assert loaded_session.history.cursor == 1

    loaded_session.set_rotation(80)
    loaded_session.release_rotation()
    assert loaded_session.model.get(first.id).rotation == 80


def test_snap_rotation_values():
    assert snap_rotation(-47) == -45
    assert snap_rotation(3.9) == 0
    assert snap_rotation(179) == 180
    assert snap_rotation(20) == 20


def test_reset_filters_commits(loaded_session):
    loaded_session.set_filter("grayscale", 70)
    loaded_session.reset_filters()

    assert loaded_session.filters == ImageFilters()
    assert loaded_session.history.cursor == 1


def test_apply_color_swatch(loaded_session):
    first = loaded_session.model.elements[0]
    loaded_session.select(first.id)

    loaded_session.apply_color_swatch("#FFD700")

    assert loaded_session.model.get(first.id).color == "#FFD700"
    assert loaded_session.history.cursor == 1


def test_project_load_replaces_state_and_resets_history(loaded_session):
    loaded_session.set_filter("sepia", 50)
    loaded_session.commit()
    saved = loaded_session.save_project()

    other = EditorSession()
    other.load_project(saved)

    assert other.state == loaded_session.state
    assert len(other.history) == 1


def test_bad_project_keeps_current_state(loaded_session):
    loaded_session.add_text()
    before = loaded_session.state
    cursor = loaded_session.history.cursor

    with pytest.raises(ProjectLoadError):
        loaded_session.load_project('{"textElements": "oops"}')

    assert loaded_session.state == before
    assert loaded_session.history.cursor == cursor


def test_state_changed_emitted_for_live_edits(loaded_session):
    calls = []
    loaded_session.state_changed.connect(lambda: calls.append(1))

    loaded_session.set_filter("brightness", 130)

    assert calls


def test_export_image_matches_image_size(loaded_session):
    loaded_session.select(loaded_session.model.elements[0].id)
    exported = loaded_session.export_image()
    assert (exported.width(), exported.height()) == (800, 600)


def test_config_limits_history(tmp_path):
    config = ConfigService(tmp_path / "config.json")
    config.set("history_limit", 1)
    session = EditorSession(config)
    assert session.history.limit == 1
