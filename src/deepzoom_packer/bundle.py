"""Read tiles back out of a packed bundle and check its index."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .compression import decompress_tile
from .errors import CompressionError
from .metadata import DEFAULT_METADATA_NAME, entries_from_metadata, read_metadata
from .models import PackedTileEntry, TileCoordinate


def parse_key(key: str) -> TileCoordinate:
    level, row, column = key.split("_")
    return TileCoordinate(level=int(level), row=int(row), column=int(column))


@dataclass(slots=True)
class Bundle:
    folder: Path
    width: int
    height: int
    tile_size: int
    entries: dict[str, PackedTileEntry]

    def read_raw(self, key: str) -> bytes:
        entry = self.entries[key]
        with (self.folder / entry.blob_name).open("rb") as handle:
            handle.seek(entry.start_offset)
            return handle.read(entry.byte_length)

    def read_tile(self, key: str) -> bytes:
        return decompress_tile(self.read_raw(key))


def load_bundle(folder: Path, metadata_name: str = DEFAULT_METADATA_NAME) -> Bundle:
    payload = read_metadata(folder / metadata_name)
    entries = entries_from_metadata(payload)
    return Bundle(
        folder=folder,
        width=int(payload["width"]),
        height=int(payload["height"]),
        tile_size=int(payload["tile_size"]),
        entries={entry.coordinate_key: entry for entry in entries},
    )


def verify_bundle(folder: Path, metadata_name: str = DEFAULT_METADATA_NAME) -> list[str]:
    """Return a list of problems; an empty list means the bundle is consistent."""

    try:
        bundle = load_bundle(folder, metadata_name)
    except (OSError, ValueError, KeyError, TypeError) as exc:
        return [f"unreadable metadata: {exc}"]

    problems: list[str] = []
    by_blob: dict[str, list[PackedTileEntry]] = {}
    for entry in bundle.entries.values():
        by_blob.setdefault(entry.blob_name, []).append(entry)

    for blob_name, entries in by_blob.items():
        blob_path = folder / blob_name
        if not blob_path.is_file():
            problems.append(f"{blob_name}: missing blob file")
            continue
        expected = 0
        for entry in entries:
            if entry.start_offset != expected:
                problems.append(
                    f"{entry.coordinate_key}: starts at {entry.start_offset}, expected {expected}"
                )
            expected = entry.end_offset
        actual = blob_path.stat().st_size
        if actual != expected:
            problems.append(f"{blob_name}: size {actual} does not match indexed total {expected}")

    for key in bundle.entries:
        try:
            bundle.read_tile(key)
        except CompressionError as exc:
            problems.append(f"{key}: {exc}")
        except OSError as exc:
            problems.append(f"{key}: {exc}")
    return problems


__all__ = ["Bundle", "load_bundle", "parse_key", "verify_bundle"]
