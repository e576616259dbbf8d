"""Connected-region detection over boolean masks.

Used to turn a per-pixel "looks like text" classification into a handful of
bounding boxes that the compositor can preserve. Components are labelled by
OpenCV with 8-connectivity; anything smaller than MIN_REGION_SIZE pixels is
treated as noise and dropped.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import cv2
import numpy as np

from .raster import Raster
from .utils import MaskArray, distance_map, setup_logger

logger = setup_logger(__name__)

MIN_REGION_SIZE = 50


@dataclass(frozen=True)
class Region:
    """Axis-aligned bounding box of a connected pixel group.

    OCR-derived regions also carry the recognised text and its confidence.
    """
    x: int
    y: int
    width: int
    height: int
    pixel_count: int
    text: Optional[str] = None
    confidence: Optional[float] = None

    @property
    def bbox(self) -> Tuple[int, int, int, int]:
        return (self.x, self.y, self.width, self.height)


def label_regions(mask: MaskArray, min_size: int = MIN_REGION_SIZE) -> List[Region]:
    """Find 8-connected groups of true cells and reduce each to a Region.

    Regions are returned in row-major order of their first cell, whatever
    order the labelling pass numbered them in.

    Args:
        mask: H×W boolean mask
        min_size: Smallest component (in cells) that is reported

    Returns:
        List of regions with at least min_size cells
    """
    mask = np.asarray(mask, dtype=bool)
    if not mask.any():
        return []

    num_labels, labels, stats, _ = cv2.connectedComponentsWithStats(
        mask.astype(np.uint8), connectivity=8, ltype=cv2.CV_32S)

    found = []
    discarded = 0
    for label in range(1, num_labels):  # label 0 is the background
        area = int(stats[label, cv2.CC_STAT_AREA])
        if area < min_size:
            discarded += 1
            continue
        top = int(stats[label, cv2.CC_STAT_TOP])
        first_x = int(np.argmax(labels[top] == label))
        found.append(((top, first_x), Region(
            x=int(stats[label, cv2.CC_STAT_LEFT]),
            y=top,
            width=int(stats[label, cv2.CC_STAT_WIDTH]),
            height=int(stats[label, cv2.CC_STAT_HEIGHT]),
            pixel_count=area,
        )))

    found.sort(key=lambda item: item[0])
    regions = [region for _, region in found]

    logger.debug(f"Labelled {len(regions)} regions, discarded {discarded} below {min_size} pixels")
    return regions


def build_text_mask(raster: Raster, text_colors: Sequence[Tuple[int, int, int]],
                    text_threshold: float) -> MaskArray:
    """Mark pixels whose colour is within text_threshold of any text colour.

    Args:
        raster: Source raster
        text_colors: Reference text colours as RGB tuples
        text_threshold: Maximum Euclidean RGB distance for a match

    Returns:
        H×W boolean mask
    """
    mask = np.zeros(raster.shape, dtype=bool)
    rgb = raster.rgb
    for color in text_colors:
        mask |= distance_map(rgb, color) <= text_threshold

    logger.debug(f"Text mask: {int(np.count_nonzero(mask))} pixels matched {len(text_colors)} colors")
    return mask


def detect_text_regions_by_color(raster: Raster, text_colors: Sequence[Tuple[int, int, int]],
                                 text_threshold: float) -> List[Region]:
    """Find text-coloured regions of a raster.

    Builds a colour mask with build_text_mask and labels it with
    label_regions.
    """
    mask = build_text_mask(raster, text_colors, text_threshold)
    regions = label_regions(mask)
    logger.info(f"Found {len(regions)} text region(s) via color detection")
    return regions
