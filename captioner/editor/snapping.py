"""
Alignment snapping for drag and resize gestures.

Given the proposed box of the element being manipulated, its siblings and
the canvas bounds, snap() pulls the box onto nearby alignment targets and
reports the guide lines to show. Guides are transient and are thrown away
when the gesture ends.

Targets per axis, in priority order:
- Canvas start, centre, end
- Each sibling's start, centre, end (in collection order)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

from PySide6.QtCore import QRectF


DEFAULT_SNAP_THRESHOLD = 5.0


class SnapMode(Enum):
    """What a snap is allowed to change."""
    MOVE = "move"      # shift x/y so a box point lands on the target
    RESIZE = "resize"  # grow/shrink width/height so the far edge lands on it


class GuideOrientation(Enum):
    VERTICAL = "vertical"      # produced by x-axis snaps
    HORIZONTAL = "horizontal"  # produced by y-axis snaps


@dataclass(frozen=True)
class Guide:
    """A line at a fixed image coordinate along which the box is aligned."""
    orientation: GuideOrientation
    position: float


@dataclass(frozen=True)
class SnapResult:
    rect: QRectF
    guides: Tuple[Guide, ...] = field(default_factory=tuple)


def _axis_points(start: float, length: float) -> Tuple[float, float, float]:
    return (start, start + length / 2, start + length)


def _targets(canvas: QRectF, siblings: Iterable[QRectF], horizontal: bool) -> List[float]:
    if horizontal:
        points = list(_axis_points(canvas.x(), canvas.width()))
        for rect in siblings:
            points.extend(_axis_points(rect.x(), rect.width()))
    else:
        points = list(_axis_points(canvas.y(), canvas.height()))
        for rect in siblings:
            points.extend(_axis_points(rect.y(), rect.height()))
    return points


def _snap_axis(
    start: float,
    length: float,
    targets: Sequence[float],
    mode: SnapMode,
    threshold: float,
    min_length: float,
) -> Optional[Tuple[float, float, float]]:
    """
    Find the first (target, point) pair within threshold on one axis.

    Returns (new_start, new_length, target) or None.
    """
    points = _axis_points(start, length)
    if mode is SnapMode.RESIZE:
        points = points[2:]

    for target in targets:
        for point in points:
            if not abs(point - target) < threshold:
                continue
            if mode is SnapMode.MOVE:
                return (start + (target - point), length, target)
            new_length = target - start
            if new_length >= min_length:
                return (start, new_length, target)
    return None


def snap(
    proposed: QRectF,
    siblings: Iterable[QRectF],
    canvas: QRectF,
    mode: SnapMode = SnapMode.MOVE,
    threshold: float = DEFAULT_SNAP_THRESHOLD,
    min_size: Tuple[float, float] = (0.0, 0.0),
) -> SnapResult:
    """
    Snap a proposed box to the canvas and sibling boxes.

    The x and y axes are snapped independently; each yields at most one
    guide. In RESIZE mode only the right/bottom edges move, and a snap that
    would make the box smaller than min_size is skipped.

    Args:
        proposed: Box of the active element after the raw pointer delta.
        siblings: Boxes of every other element.
        canvas: Image bounds, normally QRectF(0, 0, width, height).
        mode: Whether the gesture moves or resizes the box.
        threshold: A point snaps only when strictly closer than this, in image pixels.
        min_size: (min_width, min_height) enforced in RESIZE mode.

    Returns:
        The adjusted box and the guides to display.
    """
    siblings = list(siblings)
    x, y = proposed.x(), proposed.y()
    width, height = proposed.width(), proposed.height()
    guides: List[Guide] = []

    hit = _snap_axis(
        x, width, _targets(canvas, siblings, horizontal=True),
        mode, threshold, min_size[0],
    )
    if hit is not None:
        x, width, target = hit
        guides.append(Guide(GuideOrientation.VERTICAL, target))

    hit = _snap_axis(
        y, height, _targets(canvas, siblings, horizontal=False),
        mode, threshold, min_size[1],
    )
    if hit is not None:
        y, height, target = hit
        guides.append(Guide(GuideOrientation.HORIZONTAL, target))

    return SnapResult(QRectF(x, y, width, height), tuple(guides))
