"""Processing options for a background-removal run.

Options are parsed from CLI strings, validated once and then frozen. Every
configuration problem is reported as a ConfigurationError before any image
is decoded.
"""

import numbers
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .errors import ConfigurationError
from .utils import MAX_COLOR_DISTANCE, RGBColor, setup_logger

logger = setup_logger(__name__)

MODES = ("ai", "color", "hybrid")
TEXT_DETECTION_MODES = ("ocr", "color")
OUTPUT_FORMATS = ("png", "webp")

DEFAULT_THRESHOLD = 50
DEFAULT_TEXT_THRESHOLD = 60
DEFAULT_TEXT_PADDING = 5
DEFAULT_TEXT_COLORS = (RGBColor(255, 255, 255),)
DEFAULT_OCR_LANGUAGES = ("en", "ja")
DEFAULT_AI_MODEL = "u2net"


@dataclass(frozen=True)
class ColorPass:
    """One sequential colour-removal pass: a reference colour and its threshold."""
    color: RGBColor
    threshold: int

    def __post_init__(self):
        _check_threshold(self.threshold, "pass threshold")


@dataclass(frozen=True)
class ProcessingOptions:
    """Resolved configuration for one run. Immutable once built."""
    mode: str = "ai"
    target_color: Optional[RGBColor] = None
    passes: Tuple[ColorPass, ...] = ()
    threshold: int = DEFAULT_THRESHOLD
    feather: int = 0
    text_detection: str = "color"
    text_colors: Tuple[RGBColor, ...] = DEFAULT_TEXT_COLORS
    text_threshold: int = DEFAULT_TEXT_THRESHOLD
    text_padding: int = DEFAULT_TEXT_PADDING
    ocr_languages: Tuple[str, ...] = DEFAULT_OCR_LANGUAGES
    ai_model: str = DEFAULT_AI_MODEL
    output_format: str = "png"

    def validate(self) -> "ProcessingOptions":
        """Check every option; return self so calls can be chained.

        Raises:
            ConfigurationError: On the first invalid option found
        """
        if self.mode not in MODES:
            raise ConfigurationError(
                f"Unknown mode: {self.mode}. Use 'ai', 'color', or 'hybrid'.")
        if self.text_detection not in TEXT_DETECTION_MODES:
            raise ConfigurationError(
                f"Unknown text detection mode: {self.text_detection}. Use 'ocr' or 'color'.")
        if self.output_format not in OUTPUT_FORMATS:
            raise ConfigurationError(
                f"Invalid format: {self.output_format}. Use 'png' or 'webp'.")

        _check_threshold(self.threshold, "threshold")
        _check_threshold(self.text_threshold, "text threshold")
        if self.feather < 0:
            raise ConfigurationError(f"Feather must be non-negative, got {self.feather}")
        if self.text_padding < 0:
            raise ConfigurationError(f"Text padding must be non-negative, got {self.text_padding}")

        if self.mode == "color":
            if not self.passes and self.target_color is None:
                raise ConfigurationError(
                    "Target color not specified. Use --target-color option.")
            # Feathering reuses the pixel's current alpha, so it is only
            # well defined for a single pass.
            if len(self.passes) > 1 and self.feather > 0:
                raise ConfigurationError(
                    "Feathering is only supported with a single color pass")
        if self.mode == "hybrid" and self.text_detection == "color" and not self.text_colors:
            raise ConfigurationError("Hybrid color text detection needs at least one text color")

        return self

    def color_passes(self) -> List[ColorPass]:
        """Passes to run in color mode: explicit passes, else target colour + threshold."""
        if self.passes:
            return list(self.passes)
        if self.target_color is None:
            return []
        return [ColorPass(self.target_color, self.threshold)]


def _check_threshold(value: int, name: str) -> None:
    if not isinstance(value, numbers.Integral) or isinstance(value, bool):
        raise ConfigurationError(f"{name.capitalize()} must be an integer, got {value!r}")
    if value < 0 or value > MAX_COLOR_DISTANCE:
        raise ConfigurationError(
            f"{name.capitalize()} must be between 0 and {MAX_COLOR_DISTANCE}, got {value}")


def parse_rgb(rgb_string: str) -> RGBColor:
    """Parse an "r,g,b" string such as "0,0,255".

    Raises:
        ConfigurationError: If the string is not three integers in 0-255
    """
    parts = [p.strip() for p in rgb_string.split(',')]
    if len(parts) != 3:
        raise ConfigurationError(
            f"Invalid RGB color format '{rgb_string}'. Use format: \"r,g,b\" (e.g., \"0,0,255\")")
    try:
        values = [int(p) for p in parts]
    except ValueError:
        raise ConfigurationError(
            f"Invalid RGB color format '{rgb_string}'. Use format: \"r,g,b\" (e.g., \"0,0,255\")")
    if any(v < 0 or v > 255 for v in values):
        raise ConfigurationError(f"RGB values must be within 0-255: '{rgb_string}'")
    return RGBColor(*values)


def parse_color_list(colors_string: str) -> Tuple[RGBColor, ...]:
    """Parse "r,g,b" or "r1,g1,b1;r2,g2,b2" into a tuple of colours."""
    entries = [c for c in colors_string.split(';') if c.strip()]
    if not entries:
        raise ConfigurationError("At least one color is required")
    return tuple(parse_rgb(entry) for entry in entries)


def parse_passes(passes_string: str) -> Tuple[ColorPass, ...]:
    """Parse "r,g,b:threshold;r,g,b:threshold" into ordered colour passes."""
    passes = []
    for entry in passes_string.split(';'):
        entry = entry.strip()
        if not entry:
            continue
        color_part, sep, threshold_part = entry.partition(':')
        if not sep:
            raise ConfigurationError(
                f"Invalid pass '{entry}'. Use format: \"r,g,b:threshold\"")
        try:
            threshold = int(threshold_part.strip())
        except ValueError:
            raise ConfigurationError(f"Invalid threshold in pass '{entry}'")
        passes.append(ColorPass(parse_rgb(color_part), threshold))
    if not passes:
        raise ConfigurationError("At least one color pass is required")
    return tuple(passes)


def build_options(
    mode: str = "ai",
    target_color: Optional[str] = None,
    passes: Optional[str] = None,
    threshold: int = DEFAULT_THRESHOLD,
    feather: int = 0,
    text_detection: str = "color",
    text_colors: Optional[str] = None,
    text_threshold: int = DEFAULT_TEXT_THRESHOLD,
    text_padding: int = DEFAULT_TEXT_PADDING,
    ocr_languages: Sequence[str] = DEFAULT_OCR_LANGUAGES,
    ai_model: str = DEFAULT_AI_MODEL,
    output_format: str = "png",
) -> ProcessingOptions:
    """Resolve raw CLI values into validated ProcessingOptions."""
    options = ProcessingOptions(
        mode=mode,
        target_color=parse_rgb(target_color) if target_color else None,
        passes=parse_passes(passes) if passes else (),
        threshold=threshold,
        feather=feather,
        text_detection=text_detection,
        text_colors=parse_color_list(text_colors) if text_colors else DEFAULT_TEXT_COLORS,
        text_threshold=text_threshold,
        text_padding=text_padding,
        ocr_languages=tuple(ocr_languages),
        ai_model=ai_model,
        output_format=output_format,
    ).validate()

    logger.debug(f"Resolved options: {options}")
    return options
