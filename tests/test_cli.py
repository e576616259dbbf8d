"""Tests for the command-line entry point (color mode only, no models needed)."""

import logging
import zipfile

import numpy as np
import pytest

from unbackre.cli import main, parse_args
from unbackre.raster import Raster
from unbackre.utils import load_image, save_image


@pytest.fixture
def blue_dir(tmp_path):
    input_dir = tmp_path / "input"
    save_image(Raster.filled(4, 4, (0, 0, 255, 255)), input_dir / "one.png")
    save_image(Raster.filled(3, 3, (0, 0, 250, 255)), input_dir / "two.png")
    return input_dir


def _run(argv):
    with pytest.raises(SystemExit) as exc:
        main(argv)
    return exc.value.code


def test_parse_args_defaults():
    args = parse_args([])
    assert args.mode == "ai"
    assert args.input == "./input"
    assert args.output == "./output"
    assert args.threshold == 50
    assert args.text_detection == "color"
    assert args.text_colors == "255,255,255"
    assert args.text_threshold == 60
    assert args.text_padding == 5
    assert args.image is None


def test_color_batch(blue_dir, tmp_path):
    output_dir = tmp_path / "output"

    code = _run(["-i", str(blue_dir), "-o", str(output_dir), "-m", "color",
                 "-c", "0,0,255", "-t", "10", "--no-progress"])

    assert code == 0
    for name in ["one.png", "two.png"]:
        assert np.all(load_image(output_dir / name).alpha == 0)


def test_single_file(blue_dir, tmp_path):
    output_dir = tmp_path / "single"

    code = _run([str(blue_dir / "one.png"), "-o", str(output_dir), "-m", "color", "-c", "0,0,255"])

    assert code == 0
    assert (output_dir / "one_no_bg.png").exists()


def test_single_file_failure(tmp_path):
    code = _run([str(tmp_path / "missing.png"), "-o", str(tmp_path), "-m", "color", "-c", "0,0,255"])
    assert code == 1


def test_zip_created_next_to_output(blue_dir, tmp_path):
    output_dir = tmp_path / "output"

    code = _run(["-i", str(blue_dir), "-o", str(output_dir), "-m", "color",
                 "-c", "0,0,255", "--zip", "--no-progress", "-w", "2"])

    assert code == 0
    archives = list(tmp_path.glob("bg-removed_*.zip"))
    assert len(archives) == 1
    with zipfile.ZipFile(archives[0]) as zf:
        assert sorted(zf.namelist()) == ["one.png", "two.png"]


def test_color_mode_requires_target(blue_dir, tmp_path):
    assert _run(["-i", str(blue_dir), "-o", str(tmp_path / "o"), "-m", "color"]) == 1


def test_invalid_threshold_is_configuration_error(blue_dir, tmp_path):
    assert _run(["-i", str(blue_dir), "-o", str(tmp_path / "o"), "-m", "color",
                 "-c", "0,0,255", "-t", "500"]) == 1


def test_bad_color_string(blue_dir, tmp_path):
    assert _run(["-i", str(blue_dir), "-o", str(tmp_path / "o"), "-m", "color", "-c", "blue"]) == 1


def test_missing_input_directory(tmp_path):
    assert _run(["-i", str(tmp_path / "nothing"), "-o", str(tmp_path / "o"), "-m", "color",
                 "-c", "0,0,0", "--no-progress"]) == 1


def test_multi_pass_flag(tmp_path):
    input_dir = tmp_path / "input"
    raster = Raster.filled(4, 2, (0, 0, 255, 255))
    raster.pixels[1, :, :3] = (255, 255, 255)
    save_image(raster, input_dir / "mixed.png")

    code = _run(["-i", str(input_dir), "-o", str(tmp_path / "out"), "-m", "color",
                 "--passes", "0,0,255:10;255,255,255:10", "--no-progress"])

    assert code == 0
    assert np.all(load_image(tmp_path / "out" / "mixed.png").alpha == 0)


def test_stats(tmp_path, caplog):
    raster = Raster.filled(2, 2, (0, 0, 0, 255))
    raster.pixels[0, 0] = (0, 0, 0, 0)
    path = tmp_path / "result.png"
    save_image(raster, path)

    with caplog.at_level(logging.INFO, logger="unbackre.cli"):
        code = _run(["--stats", str(path)])

    assert code == 0
    assert any("Transparent: 1 (25.0%)" in record.message for record in caplog.records)
    assert any("Opaque: 3 (75.0%)" in record.message for record in caplog.records)
    assert any("Corner alpha: 0, 255, 255, 255" in record.message for record in caplog.records)
