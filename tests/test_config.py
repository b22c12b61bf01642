import json
from pathlib import Path

import pytest

from deepzoom_packer.config import AppConfig, ConfigurationError, dump_config, load_config, validate_config


def test_defaults_when_file_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path / "absent.toml")
    assert config.tiling.tile_size == 512
    assert config.tiling.suffix == ".jpg"
    assert config.tiling.jpeg_quality == 85
    assert config.tiling.keep_tiles is False
    assert config.bundle.blob_name == "tiles_000.binz"
    assert config.bundle.metadata_name == "metadata.json"
    assert config.runtime.report_dir is None
    assert config.runtime.effective_threads >= 1


def test_values_from_toml(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text(
        "[tiling]\ntile_size = 256\nsuffix = \".png\"\nkeep_tiles = true\n"
        "[bundle]\ncompression_level = 9\n"
        "[runtime]\nthreads = 3\nreport_dir = \"runs\"\n",
        encoding="utf-8",
    )
    config = load_config(path)
    assert config.tiling.tile_size == 256
    assert config.tiling.suffix == ".png"
    assert config.tiling.keep_tiles is True
    assert config.bundle.compression_level == 9
    assert config.runtime.threads == 3
    assert config.runtime.effective_threads == 3
    assert config.runtime.report_dir == Path("runs")


@pytest.mark.parametrize(
    "section, body, message",
    [
        ("tiling", "tile_size = 0", "tile-size"),
        ("tiling", "suffix = \".webp\"", "suffix"),
        ("tiling", "jpeg_quality = 101", "jpeg-quality"),
        ("tiling", "tiler = \"magick\"", "Unknown tiler"),
        ("runtime", "threads = -1", "threads"),
        ("bundle", "blob_name = \"../escape.bin\"", "blob_name"),
    ],
)
def test_invalid_values_rejected(tmp_path: Path, section: str, body: str, message: str) -> None:
    path = tmp_path / "config.toml"
    path.write_text(f"[{section}]\n{body}\n", encoding="utf-8")
    with pytest.raises(ConfigurationError, match=message):
        load_config(path)


def test_malformed_toml(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text("[tiling\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_config(path)


def test_same_blob_and_metadata_name() -> None:
    config = AppConfig()
    config.bundle.metadata_name = config.bundle.blob_name
    with pytest.raises(ConfigurationError):
        validate_config(config)


def test_dump_config_is_json() -> None:
    payload = json.loads(dump_config(AppConfig()))
    assert payload["tiling"]["tile_size"] == 512
    assert payload["runtime"]["report_dir"] is None
