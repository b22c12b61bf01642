from __future__ import annotations

from pathlib import Path

from .base import save_suffix
from ..errors import TilingError
from ..models import TileOptions, TileResult
from ..utils import next_power_of_two


class VipsTiler:
    """Resize to a power-of-two square and ``dzsave`` it in Google layout."""

    def __init__(self) -> None:
        try:
            import pyvips
        except (ModuleNotFoundError, OSError) as exc:  # pragma: no cover - import guard
            raise RuntimeError(
                "pyvips (with libvips) is required for the vips tiler: pip install 'pyvips[binary]'"
            ) from exc

        self._vips = pyvips

    def tile(self, source: Path, destination: Path, options: TileOptions) -> TileResult:
        if not source.is_file():
            raise TilingError(f"Input image not found: {source}", code="NOT_FOUND")
        try:
            image = self._vips.Image.new_from_file(str(source))
            width, height = image.width, image.height
            side = next_power_of_two(max(width, height))
            image = image.resize(side / width, vscale=side / height)
            destination.parent.mkdir(parents=True, exist_ok=True)
            image.dzsave(
                str(destination),
                layout="google",
                depth="onetile",
                tile_size=options.tile_size,
                skip_blanks=-1,
                suffix=save_suffix(options),
            )
        except self._vips.Error as exc:
            raise TilingError(f"libvips failed on {source}: {exc}") from exc
        except OSError as exc:
            raise TilingError(f"Cannot prepare output for {source}: {exc}") from exc
        return TileResult(width=side, height=side, source_width=width, source_height=height)
