"""Exception types raised at the editor's I/O boundary."""


class CaptionerError(Exception):
    """Base class for Captioner errors."""


class ProjectLoadError(CaptionerError):
    """Raised when project data cannot be read or is malformed."""


class ImageLoadError(CaptionerError):
    """Raised when an image file cannot be decoded."""
