"""Merge preserved regions back into a background-removed cutout."""

from typing import Iterable

from .raster import Raster
from .regions import Region
from .utils import dilate_bbox, setup_logger

logger = setup_logger(__name__)


def composite_mask(base: Raster, source: Raster, regions: Iterable[Region], padding: int) -> Raster:
    """Force padded regions of a cutout back to the original, fully opaque.

    Every pixel inside a region expanded by ``padding`` on each side takes
    its RGB from ``source`` and an alpha of 255, whatever the cutout held
    there. Everything else keeps the cutout's values. Overlapping regions
    and repeated application give the same result.

    Args:
        base: Cutout raster, e.g. from the AI segmentation model
        source: Original decoded image, same size as base
        regions: Regions to preserve
        padding: Margin added around every region

    Returns:
        New raster; base and source are left unchanged

    Raises:
        ValueError: If base and source differ in size or padding is negative
    """
    if not base.same_size(source):
        raise ValueError(f"Cutout {base!r} and source {source!r} must have the same size")
    if padding < 0:
        raise ValueError(f"Padding must be non-negative, got {padding}")

    result = base.copy()
    pixels = result.pixels
    applied = 0

    for region in regions:
        x, y, w, h = dilate_bbox(region.bbox, padding, result.shape)
        if w == 0 or h == 0:
            logger.debug(f"Region {region.bbox} lies outside the image, skipping")
            continue
        pixels[y:y + h, x:x + w, :3] = source.rgb[y:y + h, x:x + w]
        pixels[y:y + h, x:x + w, 3] = 255
        applied += 1

    logger.debug(f"Composited {applied} region(s) with {padding}px padding")
    return result
