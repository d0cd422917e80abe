from captioner.editor.elements import EditorState, ImageFilters, TextElement
from captioner.editor.history import HistoryManager


def state(text):
    return EditorState((TextElement(id="a", text=text),), ImageFilters())


def test_undo_then_redo_restores_state():
    initial = state("0")
    history = HistoryManager(initial)
    s1, s2 = state("1"), state("2")

    history.commit(s1)
    history.commit(s2)

    assert history.undo() == s1
    assert history.redo() == s2
    assert history.current == s2
    assert history.cursor == 2


def test_undo_and_redo_are_noops_at_the_ends():
    initial = state("0")
    history = HistoryManager(initial)

    assert history.undo() is None
    assert history.current == initial

    history.commit(state("1"))
    assert history.redo() is None
    assert not history.can_redo


def test_commit_after_undo_discards_redo_branch():
    initial = state("0")
    history = HistoryManager(initial)
    history.commit(state("1"))
    history.commit(state("2"))
    history.undo()
    history.undo()

    s3 = state("3")
    history.commit(s3)

    assert history.current == s3
    assert history.cursor == 1
    assert len(history) == 2
    assert not history.can_redo
    assert history.undo() == initial


def test_reset_collapses_to_single_entry():
    history = HistoryManager(state("0"))
    history.commit(state("1"))
    fresh = state("fresh")

    history.reset(fresh)

    assert len(history) == 1
    assert history.cursor == 0
    assert history.current == fresh
    assert not history.can_undo


def test_undo_limit_drops_oldest_steps():
    history = HistoryManager(state("0"), limit=2)
    s1 = state("1")
    history.commit(s1)
    history.commit(state("2"))
    history.commit(state("3"))

    history.undo()
    assert history.undo() == s1
    assert history.undo() is None


def test_redo_after_reset_is_unavailable():
    history = HistoryManager(state("0"))
    history.commit(state("1"))
    history.undo()

    history.reset(state("new"))

    assert history.redo() is None
    assert history.current == state("new")
