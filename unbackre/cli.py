"""Command-line interface for unbackre.

This module provides the main CLI entry point. It resolves the command-line
flags into ProcessingOptions, then runs either a single image or a whole
directory through the background-removal pipeline.
"""

import logging
import argparse
import sys
import time
from pathlib import Path
from typing import List, Optional

from .archive import create_zip, timestamp
from .classifier import alpha_stats
from .config import (
    DEFAULT_AI_MODEL, DEFAULT_TEXT_PADDING, DEFAULT_TEXT_THRESHOLD, DEFAULT_THRESHOLD,
    MODES, OUTPUT_FORMATS, TEXT_DETECTION_MODES, build_options
)
from .errors import ConfigurationError, UnbackreError
from .pipeline import BackgroundRemover, BatchStats, output_path_for
from .utils import load_image, setup_logger

logger = setup_logger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="unbackre",
        description="Remove image backgrounds with an AI model, by color, or both while preserving text."
    )

    parser.add_argument(
        "image",
        nargs="?",
        help="Process a single image file instead of a directory"
    )

    parser.add_argument(
        "-i", "--input",
        default="./input",
        help="Input directory (default: ./input)"
    )

    parser.add_argument(
        "-o", "--output",
        default="./output",
        help="Output directory (default: ./output)"
    )

    parser.add_argument(
        "-f", "--format",
        choices=OUTPUT_FORMATS,
        default="png",
        help="Output format; webp is written as png (default: png)"
    )

    parser.add_argument(
        "-z", "--zip",
        action="store_true",
        help="Create a ZIP file of the output directory after batch processing"
    )

    parser.add_argument(
        "-m", "--mode",
        choices=MODES,
        default="ai",
        help="Removal mode (default: ai)"
    )

    parser.add_argument(
        "-c", "--target-color",
        help='Target color for color mode as "r,g,b" (e.g. "0,0,255" for blue)'
    )

    parser.add_argument(
        "-t", "--threshold",
        type=int,
        default=DEFAULT_THRESHOLD,
        help=f"Color similarity threshold 0-441 (default: {DEFAULT_THRESHOLD})"
    )

    parser.add_argument(
        "--feather",
        type=int,
        default=0,
        help="Edge feathering width in color distance units (default: 0)"
    )

    parser.add_argument(
        "--passes",
        help='Sequential color passes as "r,g,b:threshold;r,g,b:threshold" (color mode)'
    )

    parser.add_argument(
        "--text-padding",
        type=int,
        default=DEFAULT_TEXT_PADDING,
        help=f"Padding around text regions in hybrid mode (default: {DEFAULT_TEXT_PADDING})"
    )

    parser.add_argument(
        "--text-detection",
        choices=TEXT_DETECTION_MODES,
        default="color",
        help="Text detection method for hybrid mode (default: color)"
    )

    parser.add_argument(
        "--text-colors",
        default="255,255,255",
        help='Text colors as "r,g,b" or "r1,g1,b1;r2,g2,b2" (default: "255,255,255")'
    )

    parser.add_argument(
        "--text-threshold",
        type=int,
        default=DEFAULT_TEXT_THRESHOLD,
        help=f"Color threshold for text detection (default: {DEFAULT_TEXT_THRESHOLD})"
    )

    parser.add_argument(
        "--ocr-languages",
        default="en,ja",
        help="Comma-separated EasyOCR language codes (default: en,ja)"
    )

    parser.add_argument(
        "--model",
        default=DEFAULT_AI_MODEL,
        help=f"rembg segmentation model (default: {DEFAULT_AI_MODEL})"
    )

    parser.add_argument(
        "-w", "--workers",
        type=int,
        default=1,
        help="Number of images processed in parallel in batch mode (default: 1)"
    )

    parser.add_argument(
        "--stats",
        metavar="FILE",
        help="Print transparency statistics for an existing image and exit"
    )

    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Disable the progress bar"
    )

    parser.add_argument(
        "-l", "--logfile",
        help="Path to log file for detailed logging"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    return parser.parse_args(argv)


def _configure_logging(args: argparse.Namespace) -> None:
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        for name in list(logging.root.manager.loggerDict):
            if name.startswith("unbackre"):
                logging.getLogger(name).setLevel(logging.DEBUG)
        logger.debug("Debug logging enabled")

    if args.logfile:
        log_path = Path(args.logfile)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, mode='w')
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        logging.getLogger().addHandler(file_handler)
        logger.info(f"Logging to file: {log_path}")


def show_stats(image_path: Path) -> int:
    """Log transparent/opaque pixel shares of an image. Returns an exit code."""
    try:
        raster = load_image(image_path)
    except UnbackreError as e:
        logger.error(str(e))
        return 1

    stats = alpha_stats(raster)
    total = stats['total'] or 1
    logger.info(f"Image: {image_path}")
    logger.info(f"Transparent: {stats['transparent']} ({stats['transparent'] / total * 100:.1f}%)")
    logger.info(f"Opaque: {stats['opaque']} ({stats['opaque'] / total * 100:.1f}%)")
    logger.info(f"Partial: {stats['partial']} ({stats['partial'] / total * 100:.1f}%)")
    # Corners are usually background
    corners = [(0, 0), (raster.width - 1, 0), (0, raster.height - 1), (raster.width - 1, raster.height - 1)]
    logger.info("Corner alpha: " + ", ".join(str(raster.pixel_at(x, y)[3]) for x, y in corners))
    return 0


def log_summary(stats: BatchStats, duration: float) -> None:
    logger.info("=" * 60)
    logger.info("Processing Summary")
    logger.info("=" * 60)
    logger.info(f"Total files:    {stats.total}")
    logger.info(f"Success:        {stats.success}")
    if stats.failed > 0:
        logger.warning(f"Failed:         {stats.failed}")
        for entry in stats.files:
            if entry['status'] == 'failed':
                logger.warning(f"  {entry['input']}: {entry['error']}")
    if stats.skipped > 0:
        logger.info(f"Skipped:        {stats.skipped}")
    logger.info(f"Processing time: {duration:.2f}s")
    logger.info("=" * 60)


def process_single_file(remover: BackgroundRemover, image: Path, output_dir: Path) -> bool:
    output_path = output_path_for(image.resolve(), output_dir.resolve(), suffix="_no_bg")

    start_time = time.time()
    result = remover.process_image(image.resolve(), output_path)
    duration = time.time() - start_time

    if result.success:
        logger.info(f"Success! Output: {output_path}")
        logger.info(f"Processing time: {duration:.2f}s")
        return True

    logger.error(f"Failed to process file: {result.error}")
    return False


def process_directory(remover: BackgroundRemover, args: argparse.Namespace) -> bool:
    input_dir = Path(args.input).resolve()
    output_dir = Path(args.output).resolve()
    logger.info(f"Input:  {input_dir}")
    logger.info(f"Output: {output_dir}")

    start_time = time.time()
    try:
        stats = remover.process_batch(
            input_dir, output_dir, workers=args.workers, show_progress=not args.no_progress)
    except UnbackreError as e:
        logger.error(f"Batch processing error: {e}")
        return False
    log_summary(stats, time.time() - start_time)

    if stats.success == 0:
        logger.warning("No files were processed successfully")
        return False

    if args.zip:
        zip_path = output_dir.parent / f"bg-removed_{timestamp()}.zip"
        create_zip(output_dir, zip_path)
        logger.info(f"ZIP created: {zip_path.name}")

    return True


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the background removal tool."""
    args = parse_args(argv)
    _configure_logging(args)

    if args.stats:
        sys.exit(show_stats(Path(args.stats)))

    if args.workers < 1:
        logger.error("Error: --workers must be at least 1")
        sys.exit(1)

    try:
        options = build_options(
            mode=args.mode,
            target_color=args.target_color,
            passes=args.passes,
            threshold=args.threshold,
            feather=args.feather,
            text_detection=args.text_detection,
            text_colors=args.text_colors,
            text_threshold=args.text_threshold,
            text_padding=args.text_padding,
            ocr_languages=[lang.strip() for lang in args.ocr_languages.split(',') if lang.strip()],
            ai_model=args.model,
            output_format=args.format,
        )
    except ConfigurationError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)

    remover = BackgroundRemover(options)

    if args.image:
        success = process_single_file(remover, Path(args.image), Path(args.output))
    else:
        success = process_directory(remover, args)

    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
