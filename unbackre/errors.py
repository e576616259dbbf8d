"""Exception types raised by unbackre."""


class UnbackreError(Exception):
    """Base class for all unbackre errors."""


class ConfigurationError(UnbackreError, ValueError):
    """Raised when processing options are invalid, before any pixel work starts."""


class ImageIOError(UnbackreError, ValueError):
    """Raised when an image cannot be found, decoded or written."""


class SegmentationError(UnbackreError, RuntimeError):
    """Raised when the AI segmentation model fails to produce a cutout."""
