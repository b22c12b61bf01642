"""Walk a ``level/row/column.ext`` tile tree.

The walk is a fixed three-step descent. Level and row directories must have
purely numeric names; anything else at those layers is skipped, including the
auxiliary files tilers drop next to the pyramid. Leaves are regular files whose
extension is one of :data:`TILE_EXTENSIONS`, matched case-insensitively.

Directory access goes through a :class:`DirectoryLister` so the filtering and
ordering rules can be exercised without touching a real filesystem.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Iterator, Protocol

from .errors import JobIOError
from .utils import is_numeric_name

TILE_EXTENSIONS: frozenset[str] = frozenset({".png", ".jpg", ".jpeg"})


class DirectoryLister(Protocol):
    def directories(self, path: PurePath) -> list[str]:  # pragma: no cover - interface
        ...

    def files(self, path: PurePath) -> list[str]:  # pragma: no cover - interface
        ...


class FilesystemLister:
    def directories(self, path: PurePath) -> list[str]:
        return [entry.name for entry in self._scan(path) if entry.is_dir()]

    def files(self, path: PurePath) -> list[str]:
        return [entry.name for entry in self._scan(path) if entry.is_file()]

    def _scan(self, path: PurePath) -> list[os.DirEntry[str]]:
        try:
            with os.scandir(path) as entries:
                return list(entries)
        except OSError as exc:
            raise JobIOError(f"Cannot list tile directory {path}: {exc}") from exc


@dataclass(frozen=True, slots=True)
class TileFile:
    """A discovered tile, located by its level/row/file segments under the root."""

    root: PurePath
    level: str
    row: str
    filename: str

    @property
    def path(self) -> Path:
        return Path(self.root, self.level, self.row, self.filename)

    @property
    def column(self) -> str:
        return PurePath(self.filename).stem

    @property
    def key(self) -> str:
        return f"{self.level}_{self.row}_{self.column}"

    @property
    def sort_key(self) -> tuple[str, str, str]:
        return (self.level, self.row, self.filename)


def has_tile_extension(filename: str) -> bool:
    return PurePath(filename).suffix.lower() in TILE_EXTENSIONS


def level_directories(root: PurePath, lister: DirectoryLister | None = None) -> list[str]:
    lister = lister or FilesystemLister()
    return sorted(name for name in lister.directories(root) if is_numeric_name(name))


def iter_tile_files(root: PurePath, lister: DirectoryLister | None = None) -> Iterator[TileFile]:
    lister = lister or FilesystemLister()
    for level in level_directories(root, lister):
        level_path = PurePath(root, level)
        for row in lister.directories(level_path):
            if not is_numeric_name(row):
                continue
            for filename in lister.files(PurePath(level_path, row)):
                if has_tile_extension(filename):
                    yield TileFile(root=root, level=level, row=row, filename=filename)


def discover_tiles(root: PurePath, lister: DirectoryLister | None = None) -> list[TileFile]:
    """Return every tile under *root* in deterministic packing order."""

    return sorted(iter_tile_files(root, lister), key=lambda tile: tile.sort_key)


__all__ = [
    "DirectoryLister",
    "FilesystemLister",
    "TILE_EXTENSIONS",
    "TileFile",
    "discover_tiles",
    "has_tile_extension",
    "iter_tile_files",
    "level_directories",
]
