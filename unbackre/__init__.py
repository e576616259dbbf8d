"""Unbackre: background removal by AI segmentation, color distance, or both.

This package removes image backgrounds in three modes: an AI segmentation
model, per-pixel color-distance classification, and a hybrid mode that keeps
text regions intact on top of the AI cutout.
"""

__version__ = "0.1.0"
__author__ = "Unbackre Team"

# Core engine
from .raster import Raster
from .config import ColorPass, ProcessingOptions, build_options, parse_rgb, parse_color_list, parse_passes
from .classifier import classify, apply_color_pass, alpha_stats
from .regions import Region, label_regions, build_text_mask, detect_text_regions_by_color
from .compositor import composite_mask
from .pipeline import BackgroundRemover, BatchStats, ImageResult, PipelineState
from .errors import UnbackreError, ConfigurationError, ImageIOError, SegmentationError
from .utils import RGBColor, color_distance, load_image, save_image, setup_logger

# CLI entry point
from .cli import main

__all__ = [
    "Raster",
    "RGBColor",
    "ColorPass",
    "ProcessingOptions",
    "build_options",
    "parse_rgb",
    "parse_color_list",
    "parse_passes",
    "color_distance",
    "classify",
    "apply_color_pass",
    "alpha_stats",
    "Region",
    "label_regions",
    "build_text_mask",
    "detect_text_regions_by_color",
    "composite_mask",
    "BackgroundRemover",
    "BatchStats",
    "ImageResult",
    "PipelineState",
    "UnbackreError",
    "ConfigurationError",
    "ImageIOError",
    "SegmentationError",
    "load_image",
    "save_image",
    "setup_logger",
    "main",
]
