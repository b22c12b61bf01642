"""Domain models for tile packing runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from .logging import BatchSummary

TileSuffix = Literal[".png", ".jpg", ".jpeg"]


@dataclass(frozen=True, slots=True)
class Job:
    """One image conversion unit read from the paired line files."""

    input_path: Path
    output_path: Path
    index: int


@dataclass(frozen=True, slots=True)
class TileOptions:
    """Parameters handed to the external tiler."""

    tile_size: int = 512
    suffix: TileSuffix = ".jpg"
    jpeg_quality: int = 85


@dataclass(frozen=True, slots=True)
class TileResult:
    """What the tiler reports back: final square side plus original size."""

    width: int
    height: int
    source_width: int = 0
    source_height: int = 0


@dataclass(frozen=True, slots=True, order=True)
class TileCoordinate:
    level: int
    row: int
    column: int

    @property
    def key(self) -> str:
        return f"{self.level}_{self.row}_{self.column}"


@dataclass(frozen=True, slots=True)
class PackedTileEntry:
    """Byte range of one compressed tile inside a blob."""

    coordinate_key: str
    blob_name: str
    start_offset: int
    byte_length: int

    @property
    def end_offset(self) -> int:
        return self.start_offset + self.byte_length


@dataclass(frozen=True, slots=True)
class JobResult:
    """Outcome of a single job. Produced once, never mutated."""

    index: int
    success: bool
    input_path: Path
    output_path: Path
    error_message: str | None = None
    error_code: str | None = None
    final_width: int = 0
    final_height: int = 0
    tile_count: int = 0
    duration_s: float = 0.0


@dataclass(slots=True)
class BatchResult:
    """Aggregate results for a scheduled batch."""

    results: list[JobResult]
    summary: BatchSummary = field(default_factory=BatchSummary)

    @property
    def failed(self) -> list[JobResult]:
        return [result for result in self.results if not result.success]

    @property
    def ok(self) -> bool:
        return self.summary.failures == 0


__all__ = [
    "BatchResult",
    "Job",
    "JobResult",
    "PackedTileEntry",
    "TileCoordinate",
    "TileOptions",
    "TileResult",
    "TileSuffix",
]
