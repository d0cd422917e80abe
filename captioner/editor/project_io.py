"""
Project and image I/O for Captioner.

A project file is JSON with two top-level fields:

    {
      "textElements": [ {...TextElement...}, ... ],
      "imageFilters": {"brightness": 100, "contrast": 100, "grayscale": 0, "sepia": 0}
    }

Loading validates the whole document before anything is applied, so a bad
file never leaves the editor half-updated.
"""

import json
from pathlib import Path
from typing import Any, List, Union

from PySide6.QtGui import QImage, QImageReader

from captioner.editor.elements import EditorState, ImageFilters, TextElement
from captioner.errors import ImageLoadError, ProjectLoadError
from captioner.services.logging_service import get_logger

ELEMENTS_KEY = "textElements"
FILTERS_KEY = "imageFilters"


def dumps(state: EditorState) -> str:
    """Encode an editor state as project JSON."""
    data = {
        ELEMENTS_KEY: [element.to_dict() for element in state.elements],
        FILTERS_KEY: state.filters.to_dict(),
    }
    return json.dumps(data, indent=2)


def loads(text: Union[str, bytes]) -> EditorState:
    """
    Decode project JSON into an editor state.

    Raises:
        ProjectLoadError: Invalid JSON, missing fields or invalid values.
    """
    try:
        data: Any = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ProjectLoadError(f"Project file is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ProjectLoadError("Project file must contain a JSON object")
    if ELEMENTS_KEY not in data or FILTERS_KEY not in data:
        raise ProjectLoadError(
            f"Project file must contain '{ELEMENTS_KEY}' and '{FILTERS_KEY}'"
        )

    raw_elements = data[ELEMENTS_KEY]
    raw_filters = data[FILTERS_KEY]
    if not isinstance(raw_elements, list):
        raise ProjectLoadError(f"'{ELEMENTS_KEY}' must be a list")
    if not isinstance(raw_filters, dict):
        raise ProjectLoadError(f"'{FILTERS_KEY}' must be an object")

    elements: List[TextElement] = []
    seen_ids = set()
    for index, raw in enumerate(raw_elements):
        if not isinstance(raw, dict):
            raise ProjectLoadError(f"Text element {index} must be an object")
        try:
            element = TextElement.from_dict(raw)
        except (TypeError, ValueError, AttributeError) as e:
            raise ProjectLoadError(f"Text element {index} is invalid: {e}") from e
        if element.id in seen_ids:
            raise ProjectLoadError(f"Duplicate text element id: {element.id}")
        seen_ids.add(element.id)
        elements.append(element)

    try:
        filters = ImageFilters.from_dict(raw_filters)
    except (TypeError, ValueError) as e:
        raise ProjectLoadError(f"Image filters are invalid: {e}") from e

    return EditorState(tuple(elements), filters)


def read_project(path: Path) -> EditorState:
    """Read and decode a project file."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ProjectLoadError(f"Could not read project file {path}: {e}") from e
    state = loads(text)
    get_logger(__name__).info(f"Project read from {path}")
    return state


def write_project(path: Path, state: EditorState) -> None:
    """Encode and write a project file, creating parent folders."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps(state), encoding="utf-8")
    get_logger(__name__).info(f"Project saved to {path}")


def load_image_file(path: Path) -> QImage:
    """
    Decode an image file, honouring EXIF orientation.

    Raises:
        ImageLoadError: The file is missing or not a decodable image.
    """
    reader = QImageReader(str(path))
    reader.setAutoTransform(True)
    image = reader.read()
    if image.isNull():
        raise ImageLoadError(f"Could not load image {path}: {reader.errorString()}")
    get_logger(__name__).info(f"Image read from {path}: {image.width()}x{image.height()}")
    return image


def save_image_file(path: Path, image: QImage) -> bool:
    """Write a rendered image as PNG; returns False on failure."""
    logger = get_logger(__name__)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if image.save(str(path), "PNG"):
        logger.info(f"Image exported to {path}")
        return True
    logger.error(f"Failed to export image to {path}")
    return False
