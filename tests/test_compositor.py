"""Tests for compositing preserved regions into a cutout."""

import numpy as np
import pytest

from unbackre.compositor import composite_mask
from unbackre.raster import Raster
from unbackre.regions import Region


@pytest.fixture
def source():
    """10×8 source with a distinct colour per pixel."""
    pixels = np.zeros((8, 10, 4), dtype=np.uint8)
    ys, xs = np.mgrid[0:8, 0:10]
    pixels[..., 0] = xs * 20
    pixels[..., 1] = ys * 30
    pixels[..., 2] = 77
    pixels[..., 3] = 255
    return Raster(pixels)


@pytest.fixture
def cutout(source):
    """Cutout that removed everything."""
    raster = source.copy()
    raster.pixels[...] = 0
    return raster


def test_region_copied_from_source_and_opaque(source, cutout):
    result = composite_mask(cutout, source, [Region(2, 3, 3, 2, 6)], padding=0)

    assert np.array_equal(result.pixels[3:5, 2:5, :3], source.pixels[3:5, 2:5, :3])
    assert np.all(result.alpha[3:5, 2:5] == 255)
    outside = np.ones((8, 10), dtype=bool)
    outside[3:5, 2:5] = False
    assert np.all(result.pixels[outside] == 0)


def test_padding_expands_region(source, cutout):
    result = composite_mask(cutout, source, [Region(4, 4, 1, 1, 1)], padding=2)

    assert np.all(result.alpha[2:7, 2:7] == 255)
    assert int(np.count_nonzero(result.alpha)) == 25


def test_padding_is_clipped_to_bounds(source, cutout):
    result = composite_mask(cutout, source, [Region(0, 0, 2, 2, 4), Region(9, 7, 1, 1, 1)], padding=3)

    assert np.all(result.alpha[0:5, 0:5] == 255)
    assert np.all(result.alpha[4:8, 6:10] == 255)
    assert result.shape == source.shape


def test_region_outside_image_is_ignored(source, cutout):
    result = composite_mask(cutout, source, [Region(50, 50, 5, 5, 25)], padding=1)
    assert result == cutout


def test_preserves_cutout_elsewhere(source):
    cutout = source.copy()
    cutout.alpha[:, :5] = 0
    cutout.alpha[:, 5:] = 128

    result = composite_mask(cutout, source, [Region(0, 0, 1, 1, 1)], padding=0)

    assert result.alpha[0, 0] == 255
    assert np.all(result.alpha[1:, :5] == 0)
    assert np.all(result.alpha[:, 5:] == 128)


def test_overrides_partially_kept_pixels(source):
    """Region pixels are restored even where the cutout kept a different colour."""
    cutout = source.copy()
    cutout.pixels[..., :3] = 1
    cutout.alpha[...] = 40

    result = composite_mask(cutout, source, [Region(1, 1, 2, 2, 4)], padding=0)

    assert np.array_equal(result.pixels[1:3, 1:3], source.pixels[1:3, 1:3])


def test_idempotent(source, cutout):
    regions = [Region(1, 1, 3, 3, 9), Region(2, 2, 4, 3, 12)]

    once = composite_mask(cutout, source, regions, padding=1)
    twice = composite_mask(once, source, regions, padding=1)

    assert once == twice


def test_order_independent(source, cutout):
    regions = [Region(0, 0, 4, 4, 16), Region(3, 2, 5, 5, 25), Region(7, 6, 2, 2, 4)]

    forward = composite_mask(cutout, source, regions, padding=1)
    backward = composite_mask(cutout, source, list(reversed(regions)), padding=1)

    assert forward == backward


def test_inputs_not_modified(source, cutout):
    before_cutout = cutout.copy()
    before_source = source.copy()

    composite_mask(cutout, source, [Region(1, 1, 4, 4, 16)], padding=2)

    assert cutout == before_cutout
    assert source == before_source


def test_size_mismatch_rejected(source):
    other = Raster.filled(3, 3, (0, 0, 0, 0))
    with pytest.raises(ValueError):
        composite_mask(other, source, [], padding=0)


def test_negative_padding_rejected(source, cutout):
    with pytest.raises(ValueError):
        composite_mask(cutout, source, [], padding=-1)
