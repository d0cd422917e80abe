"""
Renderer for the Captioner editor.

Turns the base image, its filters and the ordered text elements into pixels
on a RenderSurface, always at the image's native resolution. Rendering is
deterministic: the same inputs always produce the same pixels, so it is
safe to call after every state change.

Order of operations:
1. Resize the surface to the image size
2. Draw the filtered base image (filters never touch text)
3. Draw each element bottom to top inside its own rotated frame:
   background, shadow, stroke, fill
4. Draw the selection box and handles for the active element
"""

import math
import re
from typing import Callable, Iterable, List, Optional, Tuple

import cv2
import numpy as np
from PySide6.QtCore import QPointF, QRectF, Qt
from PySide6.QtGui import (
    QColor,
    QFont,
    QFontMetricsF,
    QImage,
    QPainter,
    QPainterPath,
    QPen,
    QTransform,
)

from captioner.editor.elements import ImageFilters, TextAlign, TextElement
from captioner.services.logging_service import get_logger

LINE_HEIGHT_FACTOR = 1.2

# Selection affordance
SELECTION_COLOR = QColor(0, 174, 255)
SELECTION_LINE_WIDTH = 3
SELECTION_DASH = (8, 4)
SELECTION_HANDLE_SIZE = 12

_RGB_FUNC = re.compile(r"^rgba?\(\s*([^)]*)\)$", re.IGNORECASE)


def parse_color(value: str) -> QColor:
    """
    Parse a CSS-style colour string.

    Accepts #RGB / #RRGGBB / #AARRGGBB, Qt colour names, and
    rgb(r, g, b) / rgba(r, g, b, a) with a in [0, 1].
    Unparseable values fall back to opaque black.
    """
    text = (value or "").strip()
    match = _RGB_FUNC.match(text)
    if match:
        parts = [p.strip() for p in match.group(1).split(",")]
        try:
            r, g, b = (int(round(float(p))) for p in parts[:3])
            alpha = float(parts[3]) if len(parts) > 3 else 1.0
        except (ValueError, TypeError):
            get_logger(__name__).warning(f"Invalid colour {value!r}, using black")
            return QColor(0, 0, 0)
        color = QColor(
            max(0, min(255, r)), max(0, min(255, g)), max(0, min(255, b))
        )
        color.setAlphaF(max(0.0, min(1.0, alpha)))
        return color

    color = QColor(text)
    if not color.isValid():
        get_logger(__name__).warning(f"Invalid colour {value!r}, using black")
        return QColor(0, 0, 0)
    return color


def make_font(element: TextElement) -> QFont:
    font = QFont(element.font)
    font.setPixelSize(max(1, int(round(element.size))))
    return font


# ─── Word Wrap ────────────────────────────────────────────────────────────────

def wrap_text(text: str, max_width: float, measure: Callable[[str], float]) -> List[str]:
    """
    Greedily pack words into lines no wider than max_width.

    A word that is wider than max_width on its own gets a line to itself;
    words are never split. Explicit newlines start a new line.

    Args:
        text: The text to wrap.
        max_width: Available line width in pixels.
        measure: Returns the rendered width of a string.

    Returns:
        The wrapped lines (at least one, possibly empty).
    """
    lines: List[str] = []
    for paragraph in text.split("\n"):
        words = paragraph.split()
        if not words:
            lines.append("")
            continue

        current = words[0]
        for word in words[1:]:
            candidate = f"{current} {word}"
            if measure(candidate) > max_width:
                lines.append(current)
                current = word
            else:
                current = candidate
        lines.append(current)
    return lines


def wrap_element_text(element: TextElement, metrics: Optional[QFontMetricsF] = None) -> List[str]:
    """Wrap an element's text with its own font and box width."""
    if metrics is None:
        metrics = QFontMetricsF(make_font(element))
    return wrap_text(element.text, element.width, metrics.horizontalAdvance)


# ─── Image Filters ────────────────────────────────────────────────────────────

def _grayscale_matrix(amount: float) -> np.ndarray:
    k = 1.0 - amount
    return np.array([
        [0.2126 + 0.7874 * k, 0.7152 - 0.7152 * k, 0.0722 - 0.0722 * k],
        [0.2126 - 0.2126 * k, 0.7152 + 0.2848 * k, 0.0722 - 0.0722 * k],
        [0.2126 - 0.2126 * k, 0.7152 - 0.7152 * k, 0.0722 + 0.9278 * k],
    ], dtype=np.float32)


def _sepia_matrix(amount: float) -> np.ndarray:
    k = 1.0 - amount
    return np.array([
        [0.393 + 0.607 * k, 0.769 - 0.769 * k, 0.189 - 0.189 * k],
        [0.349 - 0.349 * k, 0.686 + 0.314 * k, 0.168 - 0.168 * k],
        [0.272 - 0.272 * k, 0.534 - 0.534 * k, 0.131 + 0.869 * k],
    ], dtype=np.float32)


def _image_to_array(image: QImage, fmt: QImage.Format) -> np.ndarray:
    """Copy a QImage into an (h, w, 4) uint8 array in the given 32-bit format."""
    converted = image.convertToFormat(fmt)
    width = converted.width()
    height = converted.height()
    ptr = converted.constBits()
    arr = np.frombuffer(ptr, np.uint8).reshape((height, converted.bytesPerLine()))
    return arr[:, : width * 4].reshape((height, width, 4)).copy()


def _array_to_image(arr: np.ndarray, fmt: QImage.Format) -> QImage:
    arr = np.ascontiguousarray(arr)
    height, width = arr.shape[:2]
    # .copy() so the QImage owns its pixels
    return QImage(arr.data, width, height, width * 4, fmt).copy()


def apply_filters(image: QImage, filters: ImageFilters) -> QImage:
    """
    Apply brightness, contrast, grayscale and sepia (in that order).

    Uses the CSS filter-function definitions; the result is clamped after
    each stage and alpha is left untouched. Identity filters return the
    image unchanged.
    """
    if filters.is_identity or image.isNull():
        return image

    rgba = _image_to_array(image, QImage.Format.Format_RGBA8888)
    rgb = rgba[:, :, :3].astype(np.float32) / 255.0

    if filters.brightness != 100:
        rgb = np.clip(rgb * (filters.brightness / 100.0), 0.0, 1.0)
    if filters.contrast != 100:
        rgb = np.clip((rgb - 0.5) * (filters.contrast / 100.0) + 0.5, 0.0, 1.0)
    if filters.grayscale > 0:
        rgb = np.clip(rgb @ _grayscale_matrix(filters.grayscale / 100.0).T, 0.0, 1.0)
    if filters.sepia > 0:
        rgb = np.clip(rgb @ _sepia_matrix(filters.sepia / 100.0).T, 0.0, 1.0)

    rgba[:, :, :3] = np.round(rgb * 255.0).astype(np.uint8)
    return _array_to_image(rgba, QImage.Format.Format_RGBA8888)


# ─── Surface ──────────────────────────────────────────────────────────────────

class RenderSurface:
    """Raster target that is resized to the base image on every render."""

    FORMAT = QImage.Format.Format_ARGB32_Premultiplied

    def __init__(self) -> None:
        self._image = QImage()
        self._filtered = QImage()
        self._filtered_key: Optional[Tuple[int, ImageFilters]] = None

    @property
    def image(self) -> QImage:
        return self._image

    @property
    def size(self) -> tuple:
        return (self._image.width(), self._image.height())

    def resize(self, width: int, height: int) -> None:
        if self.size != (width, height) or self._image.isNull():
            self._image = QImage(width, height, self.FORMAT)
        self._image.fill(Qt.GlobalColor.transparent)

    def filtered_base(self, image: QImage, filters: ImageFilters) -> QImage:
        """Filtered copy of image, reused while the image and filters are unchanged."""
        key = (image.cacheKey(), filters)
        if key != self._filtered_key:
            self._filtered = apply_filters(image, filters)
            self._filtered_key = key
        return self._filtered


# ─── Element Drawing ──────────────────────────────────────────────────────────

def _rotate_about_center(painter: QPainter, element: TextElement) -> None:
    center = element.center
    painter.translate(center.x(), center.y())
    painter.rotate(element.rotation)
    painter.translate(-center.x(), -center.y())


def _line_anchor_x(element: TextElement) -> float:
    if element.align is TextAlign.CENTER:
        return element.x + element.width / 2
    if element.align is TextAlign.RIGHT:
        return element.x + element.width
    return element.x


def build_text_path(element: TextElement, lines: List[str], font: QFont) -> QPainterPath:
    """Glyph outlines of the wrapped lines, top-aligned at each line's y."""
    metrics = QFontMetricsF(font)
    line_height = element.size * LINE_HEIGHT_FACTOR
    anchor_x = _line_anchor_x(element)
    path = QPainterPath()

    for index, line in enumerate(lines):
        if not line:
            continue
        advance = metrics.horizontalAdvance(line)
        if element.align is TextAlign.CENTER:
            left = anchor_x - advance / 2
        elif element.align is TextAlign.RIGHT:
            left = anchor_x - advance
        else:
            left = anchor_x
        baseline = element.y + index * line_height + metrics.ascent()
        path.addText(QPointF(left, baseline), font, line)
    return path


def _gaussian_blur(layer: QImage, sigma: float) -> QImage:
    """Blur a premultiplied ARGB layer with OpenCV."""
    arr = _image_to_array(layer, RenderSurface.FORMAT)
    blurred = cv2.GaussianBlur(arr, (0, 0), sigmaX=sigma, sigmaY=sigma)
    return _array_to_image(blurred, RenderSurface.FORMAT)


def _draw_shadow(painter: QPainter, element: TextElement, path: QPainterPath) -> None:
    """
    Draw the blurred shadow of the glyph path.

    The blur happens in the element's frame; the offset is applied in
    surface space so it does not rotate with the text.
    """
    shadow = element.shadow
    color = parse_color(shadow.color)
    if color.alpha() == 0 or path.isEmpty():
        return

    stroke_width = element.stroke.width if element.stroke.enabled else 0.0
    sigma = max(0.0, shadow.blur) / 2
    pad = int(math.ceil(sigma * 3 + stroke_width + 2))
    bounds = path.boundingRect()
    left = math.floor(bounds.left()) - pad
    top = math.floor(bounds.top()) - pad
    width = int(math.ceil(bounds.width())) + pad * 2 + 1
    height = int(math.ceil(bounds.height())) + pad * 2 + 1

    layer = QImage(width, height, RenderSurface.FORMAT)
    layer.fill(Qt.GlobalColor.transparent)
    layer_painter = QPainter(layer)
    layer_painter.setRenderHint(QPainter.RenderHint.Antialiasing)
    layer_painter.translate(-left, -top)
    if element.stroke.enabled:
        layer_painter.strokePath(path, QPen(color, element.stroke.width))
    layer_painter.fillPath(path, color)
    layer_painter.end()

    if sigma > 0:
        layer = _gaussian_blur(layer, sigma)

    painter.save()
    offset = QTransform.fromTranslate(shadow.offset_x, shadow.offset_y)
    painter.setWorldTransform(painter.worldTransform() * offset)
    painter.drawImage(QPointF(left, top), layer)
    painter.restore()


def draw_element(painter: QPainter, element: TextElement) -> None:
    """Draw one text element; the painter state is restored afterwards."""
    font = make_font(element)
    lines = wrap_element_text(element, QFontMetricsF(font))
    total_height = len(lines) * element.size * LINE_HEIGHT_FACTOR

    painter.save()
    _rotate_about_center(painter, element)

    if element.bg_color.enabled:
        painter.fillRect(
            QRectF(element.x, element.y, element.width, total_height),
            parse_color(element.bg_color.color),
        )

    path = build_text_path(element, lines, font)

    if element.shadow.enabled:
        _draw_shadow(painter, element, path)

    if element.stroke.enabled:
        painter.strokePath(
            path, QPen(parse_color(element.stroke.color), element.stroke.width)
        )
    painter.fillPath(path, parse_color(element.color))

    painter.restore()


def draw_selection(painter: QPainter, element: TextElement) -> None:
    """Draw the dashed bounding box and corner handles (visual only)."""
    painter.save()
    _rotate_about_center(painter, element)

    pen = QPen(SELECTION_COLOR, SELECTION_LINE_WIDTH)
    # Dash pattern is in units of the pen width
    pen.setDashPattern([d / SELECTION_LINE_WIDTH for d in SELECTION_DASH])
    painter.setPen(pen)
    painter.setBrush(Qt.BrushStyle.NoBrush)
    painter.drawRect(element.rect)

    rect = element.rect
    half = SELECTION_HANDLE_SIZE / 2
    painter.setPen(QPen(QColor(255, 255, 255), 2))
    painter.setBrush(SELECTION_COLOR)
    for corner in (rect.topLeft(), rect.topRight(), rect.bottomLeft(), rect.bottomRight()):
        painter.drawRect(QRectF(
            corner.x() - half, corner.y() - half,
            SELECTION_HANDLE_SIZE, SELECTION_HANDLE_SIZE,
        ))

    painter.restore()


# ─── Public API ───────────────────────────────────────────────────────────────

def render(
    surface: RenderSurface,
    image: Optional[QImage],
    filters: ImageFilters,
    elements: Iterable[TextElement],
    active_id: Optional[str] = None,
) -> None:
    """
    Render the composite onto surface at the image's native resolution.

    Does nothing when no image is loaded.
    """
    if image is None or image.isNull():
        return

    elements = list(elements)
    surface.resize(image.width(), image.height())

    painter = QPainter(surface.image)
    painter.setRenderHint(QPainter.RenderHint.Antialiasing)
    painter.setRenderHint(QPainter.RenderHint.TextAntialiasing)
    painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)

    painter.drawImage(0, 0, surface.filtered_base(image, filters))

    for element in elements:
        draw_element(painter, element)

    if active_id is not None:
        for element in elements:
            if element.id == active_id:
                draw_selection(painter, element)
                break

    painter.end()


def render_to_image(
    image: Optional[QImage],
    filters: ImageFilters,
    elements: Iterable[TextElement],
) -> QImage:
    """
    Render a static export of the composite, never including the selection.

    Returns a null QImage when no image is loaded.
    """
    surface = RenderSurface()
    render(surface, image, filters, elements, active_id=None)
    return surface.image.copy()
