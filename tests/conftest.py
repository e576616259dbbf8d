"""Common test fixtures."""

import numpy as np
import pytest
from PIL import Image as PILImage

from unbackre.raster import Raster
from unbackre.utils import EXIF_ORIENTATION_TAG, load_image, save_image


def solid_raster(width, height, rgb, alpha=255):
    """Create a raster filled with a single colour."""
    return Raster.filled(width, height, (*rgb, alpha))


@pytest.fixture
def blue_raster():
    """A 4×4 fully opaque pure blue raster."""
    return solid_raster(4, 4, (0, 0, 255))


@pytest.fixture
def text_raster():
    """Black 40×30 image with a 10×10 white "text" block at (12, 8)."""
    raster = solid_raster(40, 30, (0, 0, 0))
    raster.pixels[8:18, 12:22, :3] = 255
    return raster


@pytest.fixture
def text_image_path(tmp_path, text_raster):
    """The text raster saved as a PNG file."""
    path = tmp_path / "input" / "text.png"
    save_image(text_raster, path)
    return path


@pytest.fixture
def transparent_segmenter():
    """Fake AI collaborator that removes everything, like a cutout with no person."""
    calls = []

    def segment(path, model_name):
        calls.append((path, model_name))
        raster = load_image(path)
        raster.alpha[...] = 0
        return raster

    segment.calls = calls
    return segment


@pytest.fixture
def gradient_raster():
    """1×31 raster whose blue channel runs 0..30, for feathering tests."""
    pixels = np.zeros((1, 31, 4), dtype=np.uint8)
    pixels[0, :, 2] = np.arange(31)
    pixels[..., 3] = 255
    return Raster(pixels)


@pytest.fixture
def rotated_jpeg_path(tmp_path):
    """A 40×20 JPEG stored sideways: EXIF orientation 6 (rotate 90° clockwise to view).

    Stored red on the left half and blue on the right, so viewed upright it
    is 20×40 with red on top.
    """
    stored = PILImage.new("RGB", (40, 20), (220, 0, 0))
    stored.paste((0, 0, 220), (20, 0, 40, 20))
    exif = PILImage.Exif()
    exif[EXIF_ORIENTATION_TAG] = 6
    path = tmp_path / "phone.jpg"
    stored.save(path, exif=exif, quality=95)
    return path
