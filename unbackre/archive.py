"""ZIP packaging of batch output."""

import zipfile
from datetime import datetime
from pathlib import Path

from .errors import ImageIOError
from .utils import ImagePath, setup_logger

logger = setup_logger(__name__)


def timestamp() -> str:
    """Filesystem-safe timestamp, e.g. 2024-05-01T12-30-00."""
    return datetime.now().strftime("%Y-%m-%dT%H-%M-%S")


def create_zip(source_dir: ImagePath, zip_path: ImagePath) -> Path:
    """Write every file in source_dir (non-recursive) into a deflated ZIP.

    Args:
        source_dir: Directory whose files are archived, stored without the directory prefix
        zip_path: Destination archive; parent directories are created

    Returns:
        Path of the written archive

    Raises:
        ImageIOError: If source_dir does not exist
    """
    source_dir = Path(source_dir)
    zip_path = Path(zip_path)
    if not source_dir.is_dir():
        raise ImageIOError(f"Source directory not found: {source_dir}")

    zip_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info(f"Creating ZIP: {zip_path.name}")

    with zipfile.ZipFile(zip_path, 'w', zipfile.ZIP_DEFLATED, compresslevel=9) as zf:
        for file_path in sorted(source_dir.iterdir()):
            if file_path.is_file() and file_path != zip_path:
                zf.write(file_path, file_path.name)

    size_mb = zip_path.stat().st_size / 1024 / 1024
    logger.info(f"ZIP created: {size_mb:.2f} MB")
    return zip_path
