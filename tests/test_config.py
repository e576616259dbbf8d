"""Tests for option parsing and validation."""

import numpy as np
import pytest

from unbackre.config import (
    ColorPass, ProcessingOptions, build_options, parse_color_list, parse_passes, parse_rgb
)
from unbackre.errors import ConfigurationError
from unbackre.utils import RGBColor


def test_parse_rgb():
    assert parse_rgb("0,0,255") == RGBColor(0, 0, 255)
    assert parse_rgb(" 10 , 20,30 ") == RGBColor(10, 20, 30)


@pytest.mark.parametrize("bad", ["", "1,2", "1,2,3,4", "a,b,c", "0,0,256", "-1,0,0"])
def test_parse_rgb_rejects_invalid(bad):
    with pytest.raises(ConfigurationError):
        parse_rgb(bad)


def test_parse_color_list():
    assert parse_color_list("255,255,255;255,0,0") == (RGBColor(255, 255, 255), RGBColor(255, 0, 0))
    with pytest.raises(ConfigurationError):
        parse_color_list(";")


def test_parse_passes():
    passes = parse_passes("0,0,255:50; 255,255,255:30")
    assert passes == (
        ColorPass(RGBColor(0, 0, 255), 50),
        ColorPass(RGBColor(255, 255, 255), 30),
    )


@pytest.mark.parametrize("bad", ["0,0,255", "0,0,255:x", "0,0,255:500", ""])
def test_parse_passes_rejects_invalid(bad):
    with pytest.raises(ConfigurationError):
        parse_passes(bad)


def test_color_pass_threshold_bounds():
    ColorPass(RGBColor(0, 0, 0), 0)
    ColorPass(RGBColor(0, 0, 0), 441)
    with pytest.raises(ConfigurationError):
        ColorPass(RGBColor(0, 0, 0), 442)
    with pytest.raises(ConfigurationError):
        ColorPass(RGBColor(0, 0, 0), -1)


def test_defaults_are_valid():
    options = ProcessingOptions().validate()
    assert options.mode == "ai"
    assert options.threshold == 50
    assert options.text_padding == 5
    assert options.text_colors == (RGBColor(255, 255, 255),)


@pytest.mark.parametrize("changes", [
    {"mode": "magic"},
    {"text_detection": "psychic"},
    {"output_format": "jpg"},
    {"threshold": 442},
    {"text_threshold": -5},
    {"feather": -1},
    {"text_padding": -2},
    {"mode": "color"},
    {"mode": "hybrid", "text_colors": ()},
])
def test_invalid_options_rejected(changes):
    with pytest.raises(ConfigurationError):
        ProcessingOptions(**changes).validate()


def test_feather_with_multiple_passes_rejected():
    passes = parse_passes("0,0,255:50;255,255,255:30")
    with pytest.raises(ConfigurationError):
        ProcessingOptions(mode="color", passes=passes, feather=3).validate()


def test_color_passes_from_target_color():
    options = build_options(mode="color", target_color="0,255,0", threshold=30)
    assert options.color_passes() == [ColorPass(RGBColor(0, 255, 0), 30)]


def test_explicit_passes_take_precedence():
    options = build_options(mode="color", target_color="0,255,0", passes="1,2,3:4")
    assert options.color_passes() == [ColorPass(RGBColor(1, 2, 3), 4)]


def test_build_options_parses_text_colors():
    options = build_options(mode="hybrid", text_colors="255,0,0;0,0,0", ocr_languages=["en"])
    assert options.text_colors == (RGBColor(255, 0, 0), RGBColor(0, 0, 0))
    assert options.ocr_languages == ("en",)


def test_numpy_integer_thresholds_accepted():
    thresholds = np.array([10, 441], dtype=np.int64)

    passes = [ColorPass(RGBColor(0, 0, 255), t) for t in thresholds]

    assert [p.threshold for p in passes] == [10, 441]
    with pytest.raises(ConfigurationError):
        ColorPass(RGBColor(0, 0, 255), np.int32(442))
    with pytest.raises(ConfigurationError):
        ColorPass(RGBColor(0, 0, 255), 12.5)
