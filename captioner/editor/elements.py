"""
Text element models for the Captioner editor.

This module provides the data model for the text blocks overlaid on the
base image, plus the image filter record and the editor state snapshot.

All records are frozen dataclasses and collections are tuples, so a stored
snapshot can never be altered by later live edits. Every mutation goes
through TextElementModel, which swaps in a new tuple instead of changing
an element in place.

Geometry is in image pixels (not widget coordinates).
"""

import math
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple
from uuid import uuid4

from PySide6.QtCore import QPointF, QRectF

from captioner.services.logging_service import get_logger


class TextAlign(str, Enum):
    """Horizontal alignment of wrapped lines inside the element box."""
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


def new_element_id() -> str:
    return str(uuid4())


def _require_finite(owner: str, **values: float) -> None:
    for name, value in values.items():
        if not math.isfinite(value):
            raise ValueError(f"{owner}.{name} must be a finite number, got {value}")


@dataclass(frozen=True)
class ShadowStyle:
    """Drop shadow applied to both the stroke and fill glyph passes."""
    enabled: bool = True
    color: str = "rgba(0,0,0,0.7)"
    blur: float = 5
    offset_x: float = 2
    offset_y: float = 2

    def __post_init__(self) -> None:
        _require_finite(
            "ShadowStyle",
            blur=self.blur, offset_x=self.offset_x, offset_y=self.offset_y,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "color": self.color,
            "blur": self.blur,
            "offsetX": self.offset_x,
            "offsetY": self.offset_y,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ShadowStyle":
        default = cls()
        return cls(
            enabled=bool(data.get("enabled", default.enabled)),
            color=str(data.get("color", default.color)),
            blur=float(data.get("blur", default.blur)),
            offset_x=float(data.get("offsetX", default.offset_x)),
            offset_y=float(data.get("offsetY", default.offset_y)),
        )


@dataclass(frozen=True)
class BackgroundStyle:
    """Fill drawn behind the wrapped text lines."""
    enabled: bool = False
    color: str = "rgba(0,0,0,0.5)"

    def to_dict(self) -> Dict[str, Any]:
        return {"enabled": self.enabled, "color": self.color}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BackgroundStyle":
        default = cls()
        return cls(
            enabled=bool(data.get("enabled", default.enabled)),
            color=str(data.get("color", default.color)),
        )


@dataclass(frozen=True)
class StrokeStyle:
    """Glyph outline, drawn before (under) the fill."""
    enabled: bool = False
    color: str = "#000000"
    width: float = 2

    def __post_init__(self) -> None:
        _require_finite("StrokeStyle", width=self.width)

    def to_dict(self) -> Dict[str, Any]:
        return {"enabled": self.enabled, "color": self.color, "width": self.width}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StrokeStyle":
        default = cls()
        return cls(
            enabled=bool(data.get("enabled", default.enabled)),
            color=str(data.get("color", default.color)),
            width=float(data.get("width", default.width)),
        )


# Fields holding a style record; update() merges mappings into these
STYLE_FIELDS: Dict[str, type] = {
    "shadow": ShadowStyle,
    "bg_color": BackgroundStyle,
    "stroke": StrokeStyle,
}


@dataclass(frozen=True)
class TextElement:
    """
    One positioned, styled text block.

    x/y is the top-left of the box; rotation (degrees) is applied about
    the box centre.
    """
    id: str = field(default_factory=new_element_id)
    text: str = "New Text"
    font: str = "Roboto"
    size: float = 40
    color: str = "#FFFFFF"
    align: TextAlign = TextAlign.CENTER
    x: float = 100
    y: float = 100
    width: float = 250
    height: float = 50
    rotation: float = 0
    shadow: ShadowStyle = field(default_factory=ShadowStyle)
    bg_color: BackgroundStyle = field(default_factory=BackgroundStyle)
    stroke: StrokeStyle = field(default_factory=StrokeStyle)

    def __post_init__(self) -> None:
        if not isinstance(self.align, TextAlign):
            object.__setattr__(self, "align", TextAlign(self.align))
        _require_finite(
            "TextElement",
            x=self.x, y=self.y, width=self.width, height=self.height,
            size=self.size, rotation=self.rotation,
        )
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Element size must be positive, got {self.width}x{self.height}"
            )

    @property
    def rect(self) -> QRectF:
        return QRectF(self.x, self.y, self.width, self.height)

    @property
    def center(self) -> QPointF:
        return QPointF(self.x + self.width / 2, self.y + self.height / 2)

    def merged(self, **props: Any) -> "TextElement":
        """
        Return a copy with props applied.

        Top-level fields are replaced; a mapping given for a style field
        (shadow, bg_color, stroke) is merged into the existing record.
        """
        names = {f.name for f in fields(self)}
        changes: Dict[str, Any] = {}
        for name, value in props.items():
            if name not in names or name == "id":
                raise ValueError(f"Unknown or read-only element field: {name}")
            if name in STYLE_FIELDS and isinstance(value, Mapping):
                value = replace(getattr(self, name), **value)
            changes[name] = value
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "font": self.font,
            "size": self.size,
            "color": self.color,
            "align": self.align.value,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "rotation": self.rotation,
            "shadow": self.shadow.to_dict(),
            "bgColor": self.bg_color.to_dict(),
            "stroke": self.stroke.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TextElement":
        default = cls(id="")
        return cls(
            id=str(data.get("id") or new_element_id()),
            text=str(data.get("text", default.text)),
            font=str(data.get("font", default.font)),
            size=float(data.get("size", default.size)),
            color=str(data.get("color", default.color)),
            align=TextAlign(data.get("align", default.align.value)),
            x=float(data.get("x", default.x)),
            y=float(data.get("y", default.y)),
            width=float(data.get("width", default.width)),
            height=float(data.get("height", default.height)),
            rotation=float(data.get("rotation", default.rotation)),
            shadow=ShadowStyle.from_dict(data.get("shadow") or {}),
            bg_color=BackgroundStyle.from_dict(data.get("bgColor") or {}),
            stroke=StrokeStyle.from_dict(data.get("stroke") or {}),
        )


@dataclass(frozen=True)
class ImageFilters:
    """
    Filters applied to the base image only, never to text.

    brightness/contrast are percentages in [0, 200] (100 = identity);
    grayscale/sepia are percentages in [0, 100] (0 = identity).
    """
    brightness: float = 100
    contrast: float = 100
    grayscale: float = 0
    sepia: float = 0

    RANGES = {
        "brightness": (0.0, 200.0),
        "contrast": (0.0, 200.0),
        "grayscale": (0.0, 100.0),
        "sepia": (0.0, 100.0),
    }

    @property
    def is_identity(self) -> bool:
        return self == ImageFilters()

    def with_value(self, name: str, value: float) -> "ImageFilters":
        """Return a copy with one filter set, clamped to its range."""
        if name not in self.RANGES:
            raise ValueError(f"Unknown image filter: {name}")
        _require_finite("ImageFilters", **{name: float(value)})
        low, high = self.RANGES[name]
        return replace(self, **{name: max(low, min(high, float(value)))})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "brightness": self.brightness,
            "contrast": self.contrast,
            "grayscale": self.grayscale,
            "sepia": self.sepia,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ImageFilters":
        filters = cls()
        for name in cls.RANGES:
            if name in data:
                filters = filters.with_value(name, data[name])
        return filters


@dataclass(frozen=True)
class EditorState:
    """The unit stored by the history: elements in z-order plus filters."""
    elements: Tuple[TextElement, ...] = ()
    filters: ImageFilters = field(default_factory=ImageFilters)


class TextElementModel:
    """
    Owner of the element collection and of the current selection.

    The collection is an immutable tuple in render order: later entries
    draw on top and are hit-tested first. The selection is session state
    and never part of a snapshot.
    """

    def __init__(self, elements: Tuple[TextElement, ...] = ()) -> None:
        self._logger = get_logger(__name__)
        self._elements: Tuple[TextElement, ...] = ()
        self._active_id: Optional[str] = None
        self.replace_all(elements)

    # ─── Collection Access ────────────────────────────────────────────────

    @property
    def elements(self) -> Tuple[TextElement, ...]:
        return self._elements

    def __iter__(self) -> Iterator[TextElement]:
        return iter(self._elements)

    def __len__(self) -> int:
        return len(self._elements)

    def get(self, element_id: Optional[str]) -> Optional[TextElement]:
        for element in self._elements:
            if element.id == element_id:
                return element
        return None

    def replace_all(self, elements: Tuple[TextElement, ...]) -> None:
        """Install a whole collection (undo/redo, project load)."""
        elements = tuple(elements)
        ids = [e.id for e in elements]
        if len(set(ids)) != len(ids):
            raise ValueError("Element ids must be unique")
        self._elements = elements
        if self._active_id not in ids:
            self._active_id = None

    # ─── Selection ────────────────────────────────────────────────────────

    @property
    def active_id(self) -> Optional[str]:
        return self._active_id

    @property
    def active(self) -> Optional[TextElement]:
        return self.get(self._active_id)

    def select(self, element_id: Optional[str]) -> None:
        """Select an element by id, or clear the selection with None."""
        if element_id is not None and self.get(element_id) is None:
            element_id = None
        self._active_id = element_id

    # ─── Mutation ─────────────────────────────────────────────────────────

    def add(self, element: TextElement) -> str:
        """Append on top of the z-order and make it the active selection."""
        if self.get(element.id) is not None:
            raise ValueError(f"Duplicate element id: {element.id}")
        self._elements = self._elements + (element,)
        self._active_id = element.id
        return element.id

    def remove(self, element_id: str) -> None:
        """Delete an element; absent ids are ignored."""
        remaining = tuple(e for e in self._elements if e.id != element_id)
        if len(remaining) == len(self._elements):
            return
        self._elements = remaining
        if self._active_id == element_id:
            self._active_id = None

    def update(self, element_id: str, **props: Any) -> Tuple[TextElement, ...]:
        """
        Apply props to one element and return the new collection.

        An unknown id is treated as a stale reference: it is logged and
        the collection is returned unchanged.
        """
        for index, element in enumerate(self._elements):
            if element.id == element_id:
                updated = element.merged(**props)
                self._elements = (
                    self._elements[:index] + (updated,) + self._elements[index + 1:]
                )
                return self._elements

        self._logger.warning(f"Ignoring update to unknown element id {element_id}")
        return self._elements
