"""Metadata descriptor written next to each blob.

Shape of the file::

    {"width": int, "height": int, "tile_size": int,
     "tiles": {"<level>_<row>_<column>": {"binaryName": str, "startOffset": int, "size": int}}}

Tile keys keep packing order.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Sequence

from .errors import MetadataWriteError
from .models import PackedTileEntry
from .utils import atomic_write

DEFAULT_METADATA_NAME = "metadata.json"


def build_metadata(
    width: int, height: int, tile_size: int, entries: Sequence[PackedTileEntry]
) -> dict[str, Any]:
    tiles: dict[str, dict[str, Any]] = {}
    for entry in entries:
        tiles[entry.coordinate_key] = {
            "binaryName": entry.blob_name,
            "startOffset": entry.start_offset,
            "size": entry.byte_length,
        }
    return {"width": width, "height": height, "tile_size": tile_size, "tiles": tiles}


def write_metadata(
    output_folder: Path,
    width: int,
    height: int,
    tile_size: int,
    entries: Sequence[PackedTileEntry],
    filename: str = DEFAULT_METADATA_NAME,
) -> Path:
    meta_path = output_folder / filename
    payload = json.dumps(build_metadata(width, height, tile_size, entries), indent=2)
    try:
        atomic_write(meta_path, payload + "\n")
    except OSError as exc:
        raise MetadataWriteError(f"Cannot create metadata file: {meta_path}: {exc}") from exc
    return meta_path


def read_metadata(path: Path) -> dict[str, Any]:
    return json.loads(path.read_text(encoding="utf-8"))


def entries_from_metadata(payload: dict[str, Any]) -> list[PackedTileEntry]:
    tiles = payload.get("tiles") or {}
    return [
        PackedTileEntry(
            coordinate_key=str(key),
            blob_name=str(value["binaryName"]),
            start_offset=int(value["startOffset"]),
            byte_length=int(value["size"]),
        )
        for key, value in tiles.items()
    ]


__all__ = [
    "DEFAULT_METADATA_NAME",
    "build_metadata",
    "entries_from_metadata",
    "read_metadata",
    "write_metadata",
]
