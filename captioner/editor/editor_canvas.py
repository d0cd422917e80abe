"""
Editor canvas widget for Captioner.

The EditorCanvas displays the rendered composite of an EditorSession:
- The filtered base image and every text element, at native resolution
- The selection box for the active element
- Alignment guides while dragging/resizing (on-screen only)

The composite is re-rendered on every session change and scaled to fit the
widget. Mouse events are forwarded to the InteractionController, whose
viewport is kept in sync with the fit transform.
"""

from typing import Optional

from PySide6.QtCore import QEvent, QPointF, Qt
from PySide6.QtGui import (
    QColor,
    QKeyEvent,
    QMouseEvent,
    QPainter,
    QPen,
)
from PySide6.QtWidgets import QWidget

from captioner.editor.interaction import InteractionController
from captioner.editor.renderer import RenderSurface, render
from captioner.editor.session import EditorSession
from captioner.editor.snapping import GuideOrientation
from captioner.services.config_service import ConfigService
from captioner.services.logging_service import get_logger


GUIDE_COLOR = QColor(255, 0, 170)
BACKGROUND_COLOR = QColor(26, 26, 26)


class EditorCanvas(QWidget):
    """Widget hosting the rendered session and routing pointer input."""

    # Space kept around the image in fit mode
    FIT_PADDING = 40

    def __init__(
        self,
        session: EditorSession,
        config_service: Optional[ConfigService] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._logger = get_logger(__name__)
        self._session = session
        self._controller = InteractionController(session, config_service, self)
        self._surface = RenderSurface()

        self._setup_widget()

        session.state_changed.connect(self._on_state_changed)
        self._controller.guides_changed.connect(self.update)

    def _setup_widget(self) -> None:
        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setMinimumSize(200, 200)

    @property
    def controller(self) -> InteractionController:
        return self._controller

    @property
    def surface(self) -> RenderSurface:
        return self._surface

    # ─── Rendering ────────────────────────────────────────────────────────

    def _on_state_changed(self) -> None:
        self.refresh()

    def refresh(self) -> None:
        """Re-render the session into the surface and schedule a repaint."""
        render(
            self._surface,
            self._session.image,
            self._session.filters,
            self._session.model.elements,
            self._session.active_id,
        )
        self._update_viewport()
        self.update()

    def _update_viewport(self) -> None:
        """Fit the image inside the widget, never enlarging past 100%."""
        image = self._session.image
        if image is None or image.isNull():
            return

        img_w = image.width()
        img_h = image.height()
        if img_w == 0 or img_h == 0 or self.width() == 0 or self.height() == 0:
            return

        zoom_x = (self.width() - self.FIT_PADDING) / img_w
        zoom_y = (self.height() - self.FIT_PADDING) / img_h
        zoom = max(0.01, min(zoom_x, zoom_y, 1.0))

        viewport = self._controller.viewport
        viewport.zoom = zoom
        viewport.offset = QPointF(
            (self.width() - img_w * zoom) / 2,
            (self.height() - img_h * zoom) / 2,
        )

    # ─── Event Handlers ───────────────────────────────────────────────────

    def paintEvent(self, event) -> None:
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
        painter.fillRect(self.rect(), BACKGROUND_COLOR)

        if not self._session.has_image or self._surface.image.isNull():
            painter.setPen(QColor(100, 100, 100))
            painter.drawText(self.rect(), Qt.AlignmentFlag.AlignCenter, "No image loaded")
            painter.end()
            return

        viewport = self._controller.viewport
        painter.translate(viewport.offset)
        painter.scale(viewport.zoom, viewport.zoom)
        painter.drawImage(0, 0, self._surface.image)

        self._draw_guides(painter)
        painter.end()

    def _draw_guides(self, painter: QPainter) -> None:
        if not self._controller.guides:
            return

        width, height = self._surface.size
        painter.setPen(QPen(GUIDE_COLOR, 1 / self._controller.viewport.zoom))
        for guide in self._controller.guides:
            if guide.orientation is GuideOrientation.VERTICAL:
                painter.drawLine(QPointF(guide.position, 0), QPointF(guide.position, height))
            else:
                painter.drawLine(QPointF(0, guide.position), QPointF(width, guide.position))

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if event.button() == Qt.MouseButton.LeftButton:
            self._controller.on_pointer_down(event.position())

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        if self._controller.is_active:
            self._controller.on_pointer_move(event.position())
            return
        self._update_cursor(event.position())

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        if event.button() == Qt.MouseButton.LeftButton:
            self._controller.on_pointer_up()

    def leaveEvent(self, event: QEvent) -> None:
        self._controller.on_pointer_leave()
        super().leaveEvent(event)

    def _update_cursor(self, device_pos: QPointF) -> None:
        """Show a resize cursor over handles and a move cursor over bodies."""
        pos = self._controller.viewport.to_image(device_pos)
        for element in reversed(self._session.model.elements):
            if self._controller.hit_test_handle(element, pos) is not None:
                self.setCursor(Qt.CursorShape.SizeFDiagCursor)
                return
            if self._controller.hit_test_body(element, pos):
                self.setCursor(Qt.CursorShape.SizeAllCursor)
                return
        self.setCursor(Qt.CursorShape.ArrowCursor)

    def keyPressEvent(self, event: QKeyEvent) -> None:
        key = event.key()
        modifiers = event.modifiers()

        if modifiers & Qt.KeyboardModifier.ControlModifier:
            if key == Qt.Key.Key_Z:
                if modifiers & Qt.KeyboardModifier.ShiftModifier:
                    self._session.redo()
                else:
                    self._session.undo()
                return
            if key == Qt.Key.Key_Y:
                self._session.redo()
                return

        if key in (Qt.Key.Key_Delete, Qt.Key.Key_Backspace) and self._session.active_id:
            self._session.delete_active()
            return

        super().keyPressEvent(event)

    def resizeEvent(self, event) -> None:
        super().resizeEvent(event)
        self._update_viewport()
