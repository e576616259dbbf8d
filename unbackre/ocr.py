"""Word-level text recognition using EasyOCR.

OCR is best effort: any failure is logged and reported as "no text found"
so the hybrid pipeline can still produce a person-only cutout.
"""

import threading
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .raster import Raster
from .regions import Region
from .utils import setup_logger

logger = setup_logger(__name__)

# Module-level reader for persistent loading
_reader = None
_reader_languages: Optional[Tuple[str, ...]] = None
_reader_lock = threading.Lock()


def initialize_reader(languages: Sequence[str] = ("en", "ja")) -> None:
    """Create the EasyOCR reader once; later calls with the same languages reuse it."""
    global _reader, _reader_languages

    languages = tuple(languages)
    with _reader_lock:
        if _reader is not None and _reader_languages == languages:
            return

        import easyocr

        logger.info(f"Initializing EasyOCR reader for {', '.join(languages)}...")
        _reader = easyocr.Reader(list(languages), verbose=False)
        _reader_languages = languages
        logger.info("EasyOCR reader ready")


def _points_to_region(points, text: str, confidence: float) -> Region:
    """Convert EasyOCR's four corner points to an axis-aligned Region."""
    corners = np.asarray(points, dtype=np.float32)
    x0, y0 = np.floor(corners.min(axis=0)).astype(int)
    x1, y1 = np.ceil(corners.max(axis=0)).astype(int)
    width = int(x1 - x0)
    height = int(y1 - y0)
    return Region(
        x=int(x0),
        y=int(y0),
        width=width,
        height=height,
        pixel_count=width * height,
        text=text,
        confidence=float(confidence),
    )


def recognize_words(raster: Raster, languages: Sequence[str] = ("en", "ja")) -> List[Region]:
    """Recognise words in a raster and return their bounding boxes.

    Args:
        raster: Decoded source image
        languages: EasyOCR language codes

    Returns:
        One Region per recognised word, carrying text and confidence. Empty
        if recognition fails.
    """
    try:
        initialize_reader(languages)
        results = _reader.readtext(np.ascontiguousarray(raster.rgb))
    except Exception as e:
        logger.error(f"Text detection error: {e}")
        return []

    regions = [_points_to_region(points, text, confidence) for points, text, confidence in results]
    logger.info(f"Found {len(regions)} text region(s) via OCR")
    for region in regions:
        logger.debug(f"  '{region.text}' at {region.bbox} (confidence {region.confidence:.2f})")
    return regions
