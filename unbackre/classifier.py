"""Colour-distance background classification.

Each pass compares every visible pixel with a reference colour. Pixels
within the pass threshold become fully transparent; with feathering, pixels
just beyond the threshold get a linear alpha ramp instead of a hard edge.
Transparent pixels are never revisited, so chained passes only ever remove
more of the image.
"""

from dataclasses import dataclass, field
from typing import List, Sequence

import numpy as np

from .config import ColorPass
from .raster import Raster
from .utils import MAX_COLOR_DISTANCE, RGBColor, distance_map, setup_logger

logger = setup_logger(__name__)


@dataclass
class PassResult:
    """Diagnostics for one colour pass."""
    color_pass: ColorPass
    pixels_removed: int
    pixels_feathered: int
    total_pixels: int

    @property
    def removed_percent(self) -> float:
        if self.total_pixels == 0:
            return 0.0
        return 100.0 * self.pixels_removed / self.total_pixels


@dataclass
class ClassificationResult:
    raster: Raster
    passes: List[PassResult] = field(default_factory=list)

    @property
    def pixels_removed(self) -> int:
        return sum(p.pixels_removed for p in self.passes)


def apply_color_pass(raster: Raster, color_pass: ColorPass, feather: int = 0) -> PassResult:
    """Run one colour pass over a raster, modifying its alpha channel in place.

    Args:
        raster: RGBA raster to classify
        color_pass: Reference colour and distance threshold
        feather: Width of the alpha ramp beyond the threshold; 0 disables it

    Returns:
        Counts of pixels made transparent and pixels feathered by this pass
    """
    threshold = color_pass.threshold
    alpha = raster.alpha
    visible = alpha != 0
    distances = distance_map(raster.rgb, color_pass.color)

    if threshold >= MAX_COLOR_DISTANCE:
        # 441 is the cube diagonal rounded down; opposite corners sit at 441.67
        logger.warning(
            f"Threshold {threshold} covers the whole RGB cube; every visible pixel will be removed")
        remove = visible.copy()
    else:
        remove = visible & (distances <= threshold)
    alpha[remove] = 0

    feathered = 0
    if feather > 0:
        fade = visible & ~remove & (distances <= threshold + feather)
        ratio = (distances[fade] - threshold) / feather
        alpha[fade] = np.floor(alpha[fade] * ratio).astype(np.uint8)
        feathered = int(np.count_nonzero(fade))

    newly_transparent = int(np.count_nonzero(visible & (alpha == 0)))
    return PassResult(
        color_pass=color_pass,
        pixels_removed=newly_transparent,
        pixels_feathered=feathered,
        total_pixels=raster.width * raster.height,
    )


def classify(raster: Raster, passes: Sequence[ColorPass], feather: int = 0) -> ClassificationResult:
    """Apply colour passes in order, accumulating transparency.

    A pixel removed by an earlier pass is skipped by every later one. An
    empty pass list leaves the raster untouched.

    Args:
        raster: RGBA raster, modified in place and returned in the result
        passes: Ordered colour passes
        feather: Alpha ramp width applied by each pass

    Returns:
        The classified raster plus per-pass diagnostics
    """
    result = ClassificationResult(raster=raster)
    total = len(passes)

    for i, color_pass in enumerate(passes, 1):
        logger.debug(f"Pass {i}/{total}: {RGBColor(*color_pass.color)}, threshold={color_pass.threshold}")
        pass_result = apply_color_pass(raster, color_pass, feather)
        result.passes.append(pass_result)
        logger.info(
            f"Pass {i}/{total}: pixels made transparent: {pass_result.pixels_removed} "
            f"({pass_result.removed_percent:.1f}%)")

    return result


def alpha_stats(raster: Raster) -> dict:
    """Count transparent, opaque and partially transparent pixels."""
    alpha = raster.alpha
    total = raster.width * raster.height
    transparent = int(np.count_nonzero(alpha == 0))
    opaque = int(np.count_nonzero(alpha == 255))
    return {
        'total': total,
        'transparent': transparent,
        'opaque': opaque,
        'partial': total - transparent - opaque,
    }
