from __future__ import annotations

from io import StringIO
from pathlib import Path

import pytest
from rich.console import Console

from deepzoom_packer.config import AppConfig, BundleConfig, RuntimeConfig, TilingConfig
from deepzoom_packer.errors import TilingError
from deepzoom_packer.models import TileOptions, TileResult
from deepzoom_packer.utils import next_power_of_two


class FakeTiler:
    """Stands in for libvips.

    The source file holds ``<width>x<height>``; the tiler writes a Google-layout
    pyramid with one level per halving from the square side down to one tile.
    """

    def __init__(self) -> None:
        self.calls: list[Path] = []

    def tile(self, source: Path, destination: Path, options: TileOptions) -> TileResult:
        self.calls.append(source)
        if not source.is_file():
            raise TilingError(f"Input image not found: {source}", code="NOT_FOUND")
        width, height = (int(part) for part in source.read_text().strip().split("x"))
        side = next_power_of_two(max(width, height))
        level = 0
        tiles_per_side = 1
        while True:
            for row in range(tiles_per_side):
                row_dir = destination / str(level) / str(row)
                row_dir.mkdir(parents=True, exist_ok=True)
                for column in range(tiles_per_side):
                    payload = f"{source.name}:{level}:{row}:{column}\n".encode() * 16
                    (row_dir / f"{column}{options.suffix}").write_bytes(payload)
            if tiles_per_side * options.tile_size >= side:
                break
            level += 1
            tiles_per_side *= 2
        (destination / "blank.png").write_bytes(b"")
        return TileResult(width=side, height=side, source_width=width, source_height=height)


def write_tree(root: Path, files: dict[str, bytes]) -> None:
    for relative, payload in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(payload)


@pytest.fixture
def fake_tiler() -> FakeTiler:
    return FakeTiler()


@pytest.fixture
def quiet_console() -> Console:
    return Console(file=StringIO(), soft_wrap=True, width=200)


@pytest.fixture
def tree_writer():
    return write_tree


@pytest.fixture
def app_config(tmp_path: Path) -> AppConfig:
    return AppConfig(
        tiling=TilingConfig(tile_size=256, suffix=".jpg"),
        bundle=BundleConfig(),
        runtime=RuntimeConfig(threads=2),
    )


@pytest.fixture
def make_image(tmp_path: Path):
    def _make(name: str, width: int, height: int) -> Path:
        path = tmp_path / "images" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"{width}x{height}")
        return path

    return _make
