from __future__ import annotations

import json
from pathlib import Path

import pytest

from deepzoom_packer.models import TileOptions
from deepzoom_packer.tilers import get_tiler, save_suffix
from deepzoom_packer.errors import TilingError


def _vips_tiler():
    try:
        return get_tiler("vips")
    except RuntimeError as exc:
        pytest.skip(f"libvips unavailable: {exc}")


def test_save_suffix() -> None:
    assert save_suffix(TileOptions(suffix=".jpg", jpeg_quality=70)) == ".jpg[Q=70]"
    assert save_suffix(TileOptions(suffix=".jpeg")) == ".jpeg[Q=85]"
    assert save_suffix(TileOptions(suffix=".png")) == ".png"


def test_unknown_tiler() -> None:
    with pytest.raises(KeyError):
        get_tiler("imagemagick")


def test_vips_builds_power_of_two_pyramid(tmp_path: Path) -> None:
    image_module = pytest.importorskip("PIL.Image")
    tiler = _vips_tiler()
    source = tmp_path / "photo.png"
    image_module.new("RGB", (300, 200), color=(200, 30, 30)).save(source)

    result = tiler.tile(source, tmp_path / "out", TileOptions(tile_size=256, suffix=".jpg"))

    assert (result.width, result.height) == (512, 512)
    assert (result.source_width, result.source_height) == (300, 200)
    assert (tmp_path / "out" / "0" / "0" / "0.jpg").exists()
    assert (tmp_path / "out" / "1" / "1" / "1.jpg").exists()


def test_vips_missing_input(tmp_path: Path) -> None:
    tiler = _vips_tiler()
    with pytest.raises(TilingError) as excinfo:
        tiler.tile(tmp_path / "missing.png", tmp_path / "out", TileOptions())
    assert excinfo.value.code == "NOT_FOUND"
