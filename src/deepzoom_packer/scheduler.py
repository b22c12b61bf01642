from __future__ import annotations

import concurrent.futures
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Sequence

from rich.console import Console

from .logging import BatchSummary
from .models import BatchResult, Job, JobResult
from .utils import default_parallelism, printable

JobExecutor = Callable[[Job], JobResult]


def resolve_concurrency(value: int | None) -> int:
    if value is None or value == 0:
        return max(1, default_parallelism())
    if value < 0:
        raise ValueError(f"max_concurrency must be positive, got {value}")
    return value


class ProgressReporter:
    """Completion counter plus serialized console output shared by all workers."""

    def __init__(
        self,
        total: int = 0,
        *,
        console: Console | None = None,
        err_console: Console | None = None,
    ) -> None:
        self._console = console or Console()
        self._err_console = err_console or Console(stderr=True)
        self._lock = threading.Lock()
        self._total = total
        self._completed = 0

    @property
    def completed(self) -> int:
        with self._lock:
            return self._completed

    @property
    def total(self) -> int:
        return self._total

    def begin(self, total: int) -> None:
        with self._lock:
            self._total = total
            self._completed = 0

    def info(self, message: str) -> None:
        with self._lock:
            self._console.print(printable(message), markup=False, highlight=False)

    def error(self, source: str, message: str) -> None:
        with self._lock:
            self._err_console.print(printable(f"[ERROR] {source}: {message}"), style="red", markup=False, highlight=False)

    def job_finished(self, result: JobResult) -> int:
        with self._lock:
            self._completed += 1
            position = f"[{self._completed}/{self._total}]"
            if result.success:
                self._console.print(
                    printable(f"{position} ✓ {result.input_path} -> {result.output_path} ({result.tile_count} tiles)"),
                    style="green",
                    markup=False,
                    highlight=False,
                )
            else:
                self._console.print(printable(f"{position} ✗ {result.input_path}"), style="red", markup=False, highlight=False)
            return self._completed


class TaskScheduler:
    """Run jobs on a bounded thread pool.

    Admission blocks once ``max_concurrency`` jobs are in flight and resumes as
    soon as any of them finishes. Jobs are admitted in list order. A job that
    fails only degrades its own result.
    """

    def __init__(
        self,
        execute: JobExecutor,
        max_concurrency: int | None = None,
        reporter: ProgressReporter | None = None,
    ) -> None:
        self._execute = execute
        self._max_concurrency = resolve_concurrency(max_concurrency)
        self._reporter = reporter or ProgressReporter()

    @property
    def max_concurrency(self) -> int:
        return self._max_concurrency

    def run(self, jobs: Sequence[Job]) -> BatchResult:
        summary = BatchSummary(total=len(jobs))
        self._reporter.begin(len(jobs))
        if not jobs:
            return BatchResult(results=[], summary=summary)

        slots = threading.BoundedSemaphore(self._max_concurrency)
        futures: dict[Future[JobResult], Job] = {}
        with ThreadPoolExecutor(max_workers=self._max_concurrency, thread_name_prefix="tile-worker") as executor:
            for job in jobs:
                slots.acquire()
                future = executor.submit(self._run_one, job)
                future.add_done_callback(lambda _: slots.release())
                futures[future] = job
            results = [self._collect(future, futures[future]) for future in concurrent.futures.as_completed(futures)]

        results.sort(key=lambda result: result.index)
        summary.successes = sum(1 for result in results if result.success)
        summary.failures = len(results) - summary.successes
        return BatchResult(results=results, summary=summary)

    def _run_one(self, job: Job) -> JobResult:
        start = time.perf_counter()
        try:
            result = self._execute(job)
        except Exception as exc:
            result = _failed_result(job, exc, time.perf_counter() - start)
            self._reporter.error(str(job.input_path), result.error_message or "")
        self._reporter.job_finished(result)
        return result

    def _collect(self, future: Future[JobResult], job: Job) -> JobResult:
        # Reporting runs inside the worker; a broken console fails that job only.
        exc = future.exception()
        if exc is None:
            return future.result()
        return _failed_result(job, exc)


def _failed_result(job: Job, exc: BaseException, duration_s: float = 0.0) -> JobResult:
    return JobResult(
        index=job.index,
        success=False,
        input_path=job.input_path,
        output_path=job.output_path,
        error_message=str(exc) or exc.__class__.__name__,
        error_code="UNKNOWN",
        duration_s=duration_s,
    )


__all__ = ["JobExecutor", "ProgressReporter", "TaskScheduler", "resolve_concurrency"]
