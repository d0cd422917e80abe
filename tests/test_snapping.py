from PySide6.QtCore import QRectF

from captioner.editor.snapping import GuideOrientation, SnapMode, snap


CANVAS = QRectF(0, 0, 1000, 800)


def test_drag_snaps_left_edge_to_sibling():
    sibling = QRectF(100, 300, 200, 50)
    proposed = QRectF(103, 500, 150, 40)

    result = snap(proposed, [sibling], CANVAS)

    assert result.rect.x() == 100
    assert result.rect.y() == 500
    assert result.rect.width() == 150
    assert len(result.guides) == 1
    assert result.guides[0].orientation is GuideOrientation.VERTICAL
    assert result.guides[0].position == 100


def test_no_snap_beyond_threshold():
    sibling = QRectF(100, 300, 200, 50)
    proposed = QRectF(106, 500, 150, 40)

    result = snap(proposed, [sibling], CANVAS)

    assert result.rect == proposed
    assert result.guides == ()


def test_point_exactly_at_threshold_does_not_snap():
    sibling = QRectF(100, 300, 200, 50)
    proposed = QRectF(105, 500, 150, 40)

    result = snap(proposed, [sibling], CANVAS)

    assert result.rect == proposed
    assert result.guides == ()


def test_non_finite_box_produces_no_guides():
    proposed = QRectF(float("nan"), 10, 100, 40)

    result = snap(proposed, [], CANVAS)

    assert result.guides == ()


def test_canvas_targets_win_over_siblings():
    sibling = QRectF(498, 300, 100, 50)
    proposed = QRectF(502, 600, 150, 40)

    result = snap(proposed, [sibling], CANVAS)

    assert result.rect.x() == 500
    assert [g.position for g in result.guides] == [500]


def test_both_axes_snap_independently():
    proposed = QRectF(2, 757, 100, 40)

    result = snap(proposed, [], CANVAS)

    assert result.rect.x() == 0
    assert result.rect.bottom() == 800
    orientations = {g.orientation for g in result.guides}
    assert orientations == {GuideOrientation.VERTICAL, GuideOrientation.HORIZONTAL}


def test_resize_moves_only_the_far_edge():
    sibling = QRectF(200, 500, 100, 20)
    proposed = QRectF(100, 100, 197, 60)

    result = snap(proposed, [sibling], CANVAS, mode=SnapMode.RESIZE)

    assert result.rect == QRectF(100, 100, 200, 60)
    assert result.guides[0].position == 300


def test_resize_snap_below_minimum_is_skipped():
    sibling = QRectF(148, 600, 1, 1)
    proposed = QRectF(100, 100, 52, 30)

    result = snap(
        proposed, [sibling], CANVAS,
        mode=SnapMode.RESIZE, min_size=(50, 20),
    )

    assert result.rect.width() == 52
    assert result.guides == ()
