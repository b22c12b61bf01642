from __future__ import annotations

from pathlib import Path
from typing import Protocol

from ..models import TileOptions, TileResult


class Tiler(Protocol):
    """Writes a ``level/row/column.<suffix>`` pyramid for one image."""

    def tile(self, source: Path, destination: Path, options: TileOptions) -> TileResult:  # pragma: no cover - interface
        ...


def save_suffix(options: TileOptions) -> str:
    if options.suffix in {".jpg", ".jpeg"}:
        return f"{options.suffix}[Q={options.jpeg_quality}]"
    return options.suffix
