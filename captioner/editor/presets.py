"""
Built-in fonts, colour palettes and starter elements for new projects.
"""

from typing import Dict, List, Tuple

from captioner.editor.elements import (
    ImageFilters,
    ShadowStyle,
    TextAlign,
    TextElement,
)


FONTS: List[str] = [
    "Roboto",
    "Open Sans",
    "Lato",
    "Montserrat",
    "Oswald",
    "Raleway",
    "Merriweather",
    "Playfair Display",
    "Dancing Script",
    "Lobster",
    "Pacifico",
    "Caveat",
    "Bangers",
    "Creepster",
]

# Palette name -> swatch colours, in display order
COLOR_PALETTES: Dict[str, List[str]] = {
    "Vibrant & High Contrast": ["#FFFFFF", "#000000", "#FFFF00", "#FF0000", "#00FFFF", "#00FF00"],
    "Corporate & Clean": ["#004085", "#155724", "#721c24", "#383d41", "#F8F9FA", "#007BFF"],
    "Social Media Pop": ["#FF4500", "#FFD700", "#1E90FF", "#F400A1", "#32CD32", "#FFFFFF"],
}

DEFAULT_FILTERS = ImageFilters()


def starter_elements() -> Tuple[TextElement, ...]:
    """Title and explanation blocks placed on every newly loaded image."""
    return (
        TextElement(
            text="Your Title Here",
            font="Lobster",
            size=50,
            align=TextAlign.CENTER,
            x=50, y=50, width=400, height=60,
            shadow=ShadowStyle(offset_x=5, offset_y=5),
        ),
        TextElement(
            text="Your explanation text goes here. It will wrap automatically.",
            font="Roboto",
            size=25,
            align=TextAlign.CENTER,
            x=50, y=150, width=500, height=100,
        ),
    )


def new_text_element() -> TextElement:
    """Element added by the "Add Text" action."""
    return TextElement(
        text="New Text",
        font="Roboto",
        size=40,
        x=100, y=100, width=250, height=50,
    )
