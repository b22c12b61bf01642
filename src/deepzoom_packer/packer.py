from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path

from .compression import TileCompressor
from .discovery import DirectoryLister, FilesystemLister, TileFile, discover_tiles, level_directories
from .errors import JobIOError
from .models import PackedTileEntry

DEFAULT_BLOB_NAME = "tiles_000.binz"
BLANK_TILE_NAMES: tuple[str, ...] = ("blank.png", "blank.jpg", "blank.jpeg")


@dataclass(slots=True)
class PackResult:
    blob_path: Path
    entries: list[PackedTileEntry]

    @property
    def blob_size(self) -> int:
        return sum(entry.byte_length for entry in self.entries)


class TilePacker:
    """Concatenate the gzip-compressed tiles of one tree into a single blob."""

    def __init__(
        self,
        compressor: TileCompressor | None = None,
        lister: DirectoryLister | None = None,
    ) -> None:
        self._compressor = compressor or TileCompressor()
        self._lister = lister or FilesystemLister()

    def pack(
        self,
        tile_root: Path,
        blob_name: str = DEFAULT_BLOB_NAME,
        keep_source_tiles: bool = False,
    ) -> PackResult:
        tiles = discover_tiles(tile_root, self._lister)
        blob_path = tile_root / blob_name
        try:
            handle = blob_path.open("wb")
        except OSError as exc:
            raise JobIOError(f"Cannot create binary file: {blob_path}: {exc}") from exc

        entries: list[PackedTileEntry] = []
        offset = 0
        with handle:
            for tile in tiles:
                compressed = self._compressor.compress(self._read_tile(tile))
                try:
                    handle.write(compressed)
                except OSError as exc:
                    raise JobIOError(f"Cannot write binary file {blob_path}: {exc}") from exc
                entries.append(
                    PackedTileEntry(
                        coordinate_key=tile.key,
                        blob_name=blob_name,
                        start_offset=offset,
                        byte_length=len(compressed),
                    )
                )
                offset += len(compressed)

        if not keep_source_tiles:
            self.remove_source_tiles(tile_root)
        return PackResult(blob_path=blob_path, entries=entries)

    def remove_source_tiles(self, tile_root: Path) -> None:
        try:
            for level in level_directories(tile_root, self._lister):
                shutil.rmtree(tile_root / level)
            for name in BLANK_TILE_NAMES:
                (tile_root / name).unlink(missing_ok=True)
        except OSError as exc:
            raise JobIOError(f"Cannot remove source tiles under {tile_root}: {exc}") from exc

    def _read_tile(self, tile: TileFile) -> bytes:
        try:
            return tile.path.read_bytes()
        except OSError as exc:
            raise JobIOError(f"Cannot read tile {tile.path}: {exc}") from exc


__all__ = ["BLANK_TILE_NAMES", "DEFAULT_BLOB_NAME", "PackResult", "TilePacker"]
