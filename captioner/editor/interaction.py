"""
Pointer interaction for the Captioner editor.

The InteractionController turns pointer events into element edits:
- Press on an element: select it and start dragging
- Press on the bottom-right handle: select it and start resizing
- Press on empty canvas: clear the selection
- Move: live drag/resize with alignment snapping (not committed)
- Release or leave: commit one history entry and clear the guides

States: Idle -> Dragging | Resizing -> Idle.

Hit-testing happens in image pixels on the unrotated box, independently of
the handles the renderer draws.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, Tuple

from PySide6.QtCore import QObject, QPointF, QRectF, Signal

from captioner.editor.elements import TextElement
from captioner.editor.session import EditorSession
from captioner.editor.snapping import (
    DEFAULT_SNAP_THRESHOLD,
    Guide,
    SnapMode,
    SnapResult,
    snap,
)
from captioner.services.config_service import ConfigService
from captioner.services.logging_service import get_logger


MIN_WIDTH = 50.0
MIN_HEIGHT = 20.0
HANDLE_HIT_SIZE = 20.0


class GestureType(Enum):
    NONE = auto()
    DRAG = auto()
    RESIZE = auto()


class Handle(Enum):
    """Resize handles. Only the bottom-right corner is interactive."""
    BOTTOM_RIGHT = auto()


@dataclass
class Viewport:
    """
    Mapping from device (widget) coordinates to image pixels.

    image = (device - offset) / zoom
    """
    zoom: float = 1.0
    offset: QPointF = field(default_factory=lambda: QPointF(0, 0))

    def to_image(self, pos: QPointF) -> QPointF:
        return QPointF(
            (pos.x() - self.offset.x()) / self.zoom,
            (pos.y() - self.offset.y()) / self.zoom,
        )

    def to_device(self, pos: QPointF) -> QPointF:
        return QPointF(
            pos.x() * self.zoom + self.offset.x(),
            pos.y() * self.zoom + self.offset.y(),
        )


@dataclass
class InteractionState:
    """Transient gesture state; never persisted or undone."""
    gesture: GestureType = GestureType.NONE
    handle: Optional[Handle] = None
    anchor: QPointF = field(default_factory=QPointF)  # pointer at gesture start
    start_rect: QRectF = field(default_factory=QRectF)


class InteractionController(QObject):
    """
    State machine translating pointer events into element mutations.

    Signals:
        guides_changed: Emitted when the alignment guides change.
    """

    guides_changed = Signal()

    def __init__(
        self,
        session: EditorSession,
        config_service: Optional[ConfigService] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._logger = get_logger(__name__)
        self._session = session
        self.viewport = Viewport()

        self._state = InteractionState()
        self._guides: Tuple[Guide, ...] = ()

        if config_service is not None:
            self.snapping_enabled = config_service.snapping_enabled
            self.snap_threshold = config_service.snap_threshold
            self.min_size = (config_service.min_width, config_service.min_height)
            self.handle_size = config_service.handle_size
        else:
            self.snapping_enabled = True
            self.snap_threshold = DEFAULT_SNAP_THRESHOLD
            self.min_size = (MIN_WIDTH, MIN_HEIGHT)
            self.handle_size = HANDLE_HIT_SIZE

    # ─── Properties ───────────────────────────────────────────────────────

    @property
    def state(self) -> InteractionState:
        return self._state

    @property
    def gesture(self) -> GestureType:
        return self._state.gesture

    @property
    def is_active(self) -> bool:
        return self._state.gesture is not GestureType.NONE

    @property
    def guides(self) -> Tuple[Guide, ...]:
        return self._guides

    # ─── Hit Testing ──────────────────────────────────────────────────────

    def hit_test_handle(self, element: TextElement, pos: QPointF) -> Optional[Handle]:
        """Return the handle under pos (image pixels), if any."""
        half = self.handle_size / 2
        corner_x = element.x + element.width
        corner_y = element.y + element.height
        if (corner_x - half < pos.x() < corner_x + half
                and corner_y - half < pos.y() < corner_y + half):
            return Handle.BOTTOM_RIGHT
        return None

    @staticmethod
    def hit_test_body(element: TextElement, pos: QPointF) -> bool:
        return (element.x < pos.x() < element.x + element.width
                and element.y < pos.y() < element.y + element.height)

    # ─── Pointer Events ───────────────────────────────────────────────────

    def on_pointer_down(self, device_pos: QPointF) -> None:
        """Select the topmost element under the pointer and start a gesture."""
        if not self._session.has_image:
            return

        pos = self.viewport.to_image(device_pos)

        for element in reversed(self._session.model.elements):
            handle = self.hit_test_handle(element, pos)
            if handle is not None:
                self._session.select(element.id)
                self._state = InteractionState(
                    gesture=GestureType.RESIZE,
                    handle=handle,
                    anchor=pos,
                    start_rect=element.rect,
                )
                return

            if self.hit_test_body(element, pos):
                self._session.select(element.id)
                self._state = InteractionState(
                    gesture=GestureType.DRAG,
                    anchor=pos,
                    start_rect=element.rect,
                )
                return

        self._session.select(None)
        self._state = InteractionState()

    def on_pointer_move(self, device_pos: QPointF) -> None:
        """Apply the live drag/resize for the current pointer position."""
        active = self._session.model.active
        if not self.is_active or active is None:
            return

        pos = self.viewport.to_image(device_pos)
        dx = pos.x() - self._state.anchor.x()
        dy = pos.y() - self._state.anchor.y()
        start = self._state.start_rect

        if self._state.gesture is GestureType.DRAG:
            mode = SnapMode.MOVE
            proposed = start.translated(dx, dy)
        else:
            mode = SnapMode.RESIZE
            proposed = QRectF(
                start.x(),
                start.y(),
                max(start.width() + dx, self.min_size[0]),
                max(start.height() + dy, self.min_size[1]),
            )

        result = self._snap(active, proposed, mode)
        self._set_guides(result.guides)

        rect = result.rect
        if mode is SnapMode.MOVE:
            self._session.update_element(active.id, x=rect.x(), y=rect.y())
        else:
            self._session.update_element(active.id, width=rect.width(), height=rect.height())

    def on_pointer_up(self) -> None:
        """End the gesture, committing it as one history entry."""
        if self.is_active:
            label = "Move" if self._state.gesture is GestureType.DRAG else "Resize"
            self._session.commit(label)
        self._state = InteractionState()
        self._set_guides(())

    def on_pointer_leave(self) -> None:
        """Leaving the surface ends the gesture like a release."""
        self.on_pointer_up()

    # ─── Helpers ──────────────────────────────────────────────────────────

    def _snap(self, active: TextElement, proposed: QRectF, mode: SnapMode) -> SnapResult:
        if not self.snapping_enabled:
            return SnapResult(proposed)

        image = self._session.image
        canvas = QRectF(0, 0, image.width(), image.height())
        siblings = [e.rect for e in self._session.model.elements if e.id != active.id]
        return snap(
            proposed, siblings, canvas,
            mode=mode,
            threshold=self.snap_threshold,
            min_size=self.min_size,
        )

    def _set_guides(self, guides: Tuple[Guide, ...]) -> None:
        if guides != self._guides:
            self._guides = guides
            self.guides_changed.emit()
