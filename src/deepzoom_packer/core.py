from __future__ import annotations

from pathlib import Path
from typing import Sequence

from rich.console import Console

from .config import AppConfig, ConfigurationError
from .joblist import read_jobs
from .logging import RunLogger, append_summary_row
from .models import BatchResult, Job
from .runner import ImageJobRunner
from .scheduler import ProgressReporter, TaskScheduler
from .tilers import Tiler, get_tiler
from .utils import generate_run_id


def resolve_tiler(config: AppConfig) -> Tiler:
    try:
        return get_tiler(config.tiling.tiler)
    except KeyError as exc:
        raise ConfigurationError(str(exc)) from exc
    except RuntimeError as exc:
        raise ConfigurationError(str(exc)) from exc


class PackingService:
    """Wires config, tiler, runner and scheduler together for one or more batches."""

    def __init__(
        self,
        config: AppConfig,
        tiler: Tiler | None = None,
        *,
        console: Console | None = None,
        err_console: Console | None = None,
    ) -> None:
        self._config = config
        self._tiler = tiler
        self._console = console or Console()
        self._err_console = err_console or Console(stderr=True)

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def tiler(self) -> Tiler:
        if self._tiler is None:
            self._tiler = resolve_tiler(self._config)
        return self._tiler

    def load_jobs(self, inputs_file: Path, outputs_file: Path) -> list[Job]:
        return read_jobs(inputs_file, outputs_file)

    def run_batch(self, jobs: Sequence[Job], *, max_concurrency: int | None = None) -> BatchResult:
        run_id = generate_run_id("batch")
        threads = max_concurrency or self._config.runtime.effective_threads
        reporter = ProgressReporter(len(jobs), console=self._console, err_console=self._err_console)
        runner = ImageJobRunner(
            self._config,
            self.tiler,
            reporter=reporter,
            run_logger=self._run_logger(),
            run_id=run_id,
        )
        scheduler = TaskScheduler(runner.execute, threads, reporter)
        result = scheduler.run(jobs)
        self._write_batch_summary(result, run_id)
        return result

    def _run_logger(self) -> RunLogger | None:
        report_dir = self._config.runtime.report_dir
        if report_dir is None:
            return None
        return RunLogger(report_dir / self._config.runtime.log_file)

    def _write_batch_summary(self, result: BatchResult, run_id: str) -> None:
        report_dir = self._config.runtime.report_dir
        if report_dir is None or not result.results:
            return
        append_summary_row(report_dir / self._config.runtime.summary_csv, result.summary, run_id)


__all__ = ["PackingService", "resolve_tiler"]
