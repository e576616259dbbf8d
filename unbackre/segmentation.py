"""AI person/foreground segmentation using rembg.

The model session is created once per process and reused for every image,
the same way the text detectors keep their models loaded between images.
"""

import threading
from pathlib import Path
from typing import Optional

from .errors import SegmentationError
from .raster import Raster
from .utils import ImagePath, decode_image, setup_logger

logger = setup_logger(__name__)

# Module-level session for persistent loading
_session = None
_session_model: Optional[str] = None
_session_lock = threading.Lock()


def initialize_model(model_name: str = "u2net") -> None:
    """Load the rembg model session (downloads the weights on first use).

    Args:
        model_name: rembg model name, e.g. "u2net", "u2net_human_seg", "isnet-general-use"
    """
    global _session, _session_model

    with _session_lock:
        if _session is not None and _session_model == model_name:
            return

        from rembg import new_session

        logger.info(f"Initializing {model_name} segmentation model...")
        _session = new_session(model_name)
        _session_model = model_name
        logger.info("Segmentation model ready")


def remove_background(image_path: ImagePath, model_name: str = "u2net") -> Raster:
    """Cut the foreground out of an image file.

    Args:
        image_path: Path to the encoded input image
        model_name: rembg model to use

    Returns:
        RGBA raster the size of the input with a transparent background

    Raises:
        SegmentationError: If the model fails or returns a mismatched image
    """
    image_path = Path(image_path)
    try:
        from rembg import remove

        initialize_model(model_name)
        data = image_path.read_bytes()
        cutout_bytes = remove(data, session=_session)
        cutout = decode_image(cutout_bytes)
    except Exception as e:
        raise SegmentationError(f"Background removal failed for {image_path.name}: {e}") from e

    logger.debug(f"Segmentation produced {cutout!r} for {image_path.name}")
    return cutout
