from __future__ import annotations

import time
from dataclasses import dataclass

from .compression import TileCompressor
from .config import AppConfig
from .errors import PackError
from .logging import RunLogEntry, RunLogger, StageTimings
from .metadata import write_metadata
from .models import Job, JobResult, TileOptions, TileResult
from .packer import PackResult, TilePacker
from .scheduler import ProgressReporter
from .tilers import Tiler
from .utils import generate_run_id


@dataclass(slots=True)
class _JobState:
    start: float
    timings: StageTimings
    tiled: TileResult | None = None
    packed: PackResult | None = None


class ImageJobRunner:
    """Tile one image, pack its tiles into a blob and write the descriptor."""

    def __init__(
        self,
        config: AppConfig,
        tiler: Tiler,
        *,
        reporter: ProgressReporter | None = None,
        packer: TilePacker | None = None,
        run_logger: RunLogger | None = None,
        run_id: str | None = None,
    ) -> None:
        self._config = config
        self._tiler = tiler
        self._reporter = reporter or ProgressReporter()
        self._packer = packer or TilePacker(TileCompressor(config.bundle.compression_level))
        self._run_logger = run_logger
        self._run_id = run_id or generate_run_id("batch")
        self._options = TileOptions(
            tile_size=config.tiling.tile_size,
            suffix=config.tiling.suffix,  # type: ignore[arg-type]
            jpeg_quality=config.tiling.jpeg_quality,
        )

    @property
    def options(self) -> TileOptions:
        return self._options

    def execute(self, job: Job) -> JobResult:
        state = _JobState(start=time.perf_counter(), timings=StageTimings())
        try:
            tiled, packed = self._run_stages(job, state)
        except PackError as exc:
            result = self._failure(job, state, exc.code, str(exc))
        except Exception as exc:  # pragma: no cover - unexpected paths
            result = self._failure(job, state, "UNKNOWN", str(exc) or exc.__class__.__name__)
        else:
            result = self._success(job, state, tiled, packed)
        self._append_log(job, result, state)
        return result

    def _run_stages(self, job: Job, state: _JobState) -> tuple[TileResult, PackResult]:
        stage_start = time.perf_counter()
        state.tiled = self._tiler.tile(job.input_path, job.output_path, self._options)
        state.timings.tile_ms = (time.perf_counter() - stage_start) * 1000
        tiled = state.tiled
        self._reporter.info(
            f"[{job.index + 1}] {job.input_path}: {tiled.source_width}x{tiled.source_height}"
            f" -> {tiled.width}x{tiled.height}"
        )

        self._reporter.info("  Merging tiles to binary...")
        stage_start = time.perf_counter()
        packed = self._packer.pack(
            job.output_path,
            self._config.bundle.blob_name,
            keep_source_tiles=self._config.tiling.keep_tiles,
        )
        state.packed = packed
        state.timings.pack_ms = (time.perf_counter() - stage_start) * 1000

        stage_start = time.perf_counter()
        write_metadata(
            job.output_path,
            tiled.width,
            tiled.height,
            self._options.tile_size,
            packed.entries,
            filename=self._config.bundle.metadata_name,
        )
        state.timings.metadata_ms = (time.perf_counter() - stage_start) * 1000
        return tiled, packed

    def _success(self, job: Job, state: _JobState, tiled: TileResult, packed: PackResult) -> JobResult:
        return JobResult(
            index=job.index,
            success=True,
            input_path=job.input_path,
            output_path=job.output_path,
            final_width=tiled.width,
            final_height=tiled.height,
            tile_count=len(packed.entries),
            duration_s=time.perf_counter() - state.start,
        )

    def _failure(self, job: Job, state: _JobState, code: str, message: str) -> JobResult:
        self._reporter.error(str(job.input_path), message)
        return JobResult(
            index=job.index,
            success=False,
            input_path=job.input_path,
            output_path=job.output_path,
            error_message=message,
            error_code=code,
            final_width=state.tiled.width if state.tiled else 0,
            final_height=state.tiled.height if state.tiled else 0,
            duration_s=time.perf_counter() - state.start,
        )

    def _append_log(self, job: Job, result: JobResult, state: _JobState) -> None:
        if self._run_logger is None:
            return
        self._run_logger.append(
            RunLogEntry(
                run_id=self._run_id,
                index=job.index,
                source=str(job.input_path),
                output_path=str(job.output_path),
                status="success" if result.success else "failure",
                error_code=result.error_code,
                error_message=result.error_message,
                width=result.final_width,
                height=result.final_height,
                tile_count=result.tile_count,
                blob_bytes=state.packed.blob_size if state.packed else 0,
                timings=state.timings,
            )
        )


__all__ = ["ImageJobRunner"]
