"""Shared utilities and type definitions for unbackre."""

import cv2
import numpy as np
from PIL import Image as PILImage
from PIL import ImageOps
from pathlib import Path
from typing import List, NamedTuple, Tuple, Union, Optional
import logging

from .errors import ImageIOError
from .raster import Raster


class RGBColor(NamedTuple):
    """An 8-bit RGB colour."""
    r: int
    g: int
    b: int

    def __str__(self) -> str:
        return f"RGB({self.r}, {self.g}, {self.b})"


# Type aliases for clarity
MaskArray = np.ndarray   # H×W bool
BBox = Tuple[int, int, int, int]  # (x, y, width, height)
ImagePath = Union[str, Path]

# Largest possible distance between two RGB colours: sqrt(255² × 3)
MAX_COLOR_DISTANCE = 441

# EXIF tag holding the camera orientation (1 = stored upright)
EXIF_ORIENTATION_TAG = 0x0112

# Supported input image extensions
IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.webp', '.bmp', '.gif'}


def setup_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """Set up a logger with consistent formatting.

    Args:
        name: Logger name
        level: Logging level

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if not logger.handlers:  # Avoid duplicate handlers
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level)
    return logger


def is_supported_image(path: ImagePath) -> bool:
    return Path(path).suffix.lower() in IMAGE_EXTENSIONS


def load_image(image_path: ImagePath) -> Raster:
    """Load an image from file path as an RGBA raster.

    Grayscale and RGB inputs get a fully opaque alpha channel. GIF files
    are decoded through Pillow since OpenCV cannot read them, as are
    images whose EXIF orientation says they are stored rotated, so the
    raster always comes out upright.

    Args:
        image_path: Path to image file

    Returns:
        Decoded RGBA raster

    Raises:
        ImageIOError: If the file is missing, unsupported or undecodable
    """
    image_path = Path(image_path)
    if not image_path.is_file():
        raise ImageIOError(f"Input file not found: {image_path}")
    if not is_supported_image(image_path):
        raise ImageIOError(f"Unsupported file format: {image_path.suffix.lower()}")

    if image_path.suffix.lower() == '.gif' or _exif_orientation(image_path) not in (None, 1):
        return _load_with_pillow(image_path)

    image = cv2.imread(str(image_path), cv2.IMREAD_UNCHANGED)
    if image is None:
        raise ImageIOError(f"Could not load image: {image_path}")

    if image.dtype == np.uint16:
        image = (image >> 8).astype(np.uint8)

    if image.ndim == 2:
        rgba = cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    elif image.shape[2] == 3:
        rgba = cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)
    else:
        rgba = cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
    return Raster(np.ascontiguousarray(rgba))


def _exif_orientation(image_path: Path) -> Optional[int]:
    """Read the EXIF orientation tag, or None when the file has none."""
    try:
        with PILImage.open(image_path) as pil_image:
            return pil_image.getexif().get(EXIF_ORIENTATION_TAG)
    except OSError:
        # Not readable by Pillow; OpenCV gets to decide whether it loads
        return None


def _load_with_pillow(image_path: Path) -> Raster:
    try:
        with PILImage.open(image_path) as pil_image:
            upright = ImageOps.exif_transpose(pil_image)
            rgba = np.array(upright.convert("RGBA"), dtype=np.uint8)
    except OSError as e:
        raise ImageIOError(f"Could not load image: {image_path}: {e}") from e
    return Raster(rgba)


def decode_image(data: bytes) -> Raster:
    """Decode an in-memory encoded image (e.g. PNG bytes) into an RGBA raster."""
    buffer = np.frombuffer(data, dtype=np.uint8)
    image = cv2.imdecode(buffer, cv2.IMREAD_UNCHANGED)
    if image is None:
        raise ImageIOError("Could not decode image buffer")
    if image.ndim == 2:
        return Raster(cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA))
    if image.shape[2] == 3:
        return Raster(cv2.cvtColor(image, cv2.COLOR_BGR2RGBA))
    return Raster(cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA))


def save_image(raster: Raster, output_path: ImagePath) -> None:
    """Save a raster as a lossless PNG with its alpha channel.

    Args:
        raster: RGBA raster to encode
        output_path: Path where to save the image; parent directories are created

    Raises:
        ImageIOError: If image cannot be saved
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    bgra = cv2.cvtColor(raster.pixels, cv2.COLOR_RGBA2BGRA)
    # PNG with high compression (0-9, where 9 is max compression)
    params = [cv2.IMWRITE_PNG_COMPRESSION, 8]

    success = cv2.imwrite(str(output_path), bgra, params)
    if not success:
        raise ImageIOError(f"Could not save image to: {output_path}")


def get_image_files(path: Path) -> List[Path]:
    """Get sorted list of supported image files from path (file or directory).

    Args:
        path: Path to file or directory

    Returns:
        List of image file paths
    """
    if path.is_file():
        if is_supported_image(path):
            return [path]
        else:
            return []

    return sorted(f for f in path.glob("*") if f.is_file() and is_supported_image(f))


def dilate_bbox(bbox: BBox, dilation: int, image_shape: Optional[Tuple[int, int]] = None) -> BBox:
    """Dilate a bounding box by the specified amount.

    Args:
        bbox: Bounding box as (x, y, width, height)
        dilation: Number of pixels to dilate by
        image_shape: Optional image shape (height, width) to clamp coordinates

    Returns:
        Dilated bounding box; width or height may be zero when the box
        lies entirely outside the image
    """
    x, y, w, h = bbox
    x1 = x - dilation
    y1 = y - dilation
    x2 = x + w + dilation
    y2 = y + h + dilation

    # Clamp to image bounds if provided
    if image_shape is not None:
        img_h, img_w = image_shape
        x1 = max(0, x1)
        y1 = max(0, y1)
        x2 = min(img_w, x2)
        y2 = min(img_h, y2)

    return (x1, y1, max(0, x2 - x1), max(0, y2 - y1))


def color_distance(color1: Tuple[int, int, int], color2: Tuple[int, int, int]) -> float:
    """Calculate Euclidean distance between two RGB colors.

    Args:
        color1: First color as RGB tuple
        color2: Second color as RGB tuple

    Returns:
        Euclidean distance between colors, in [0, 441.67]
    """
    return float(np.sqrt(sum((int(a) - int(b)) ** 2 for a, b in zip(color1, color2))))


def distance_map(rgb: np.ndarray, color: Tuple[int, int, int]) -> np.ndarray:
    """Per-pixel Euclidean distance from an H×W×3 RGB array to one colour.

    Same metric as color_distance, evaluated for every pixel at once.
    """
    diff = rgb.astype(np.int32) - np.asarray(color, dtype=np.int32)
    return np.sqrt(np.sum(diff * diff, axis=-1, dtype=np.int64))
