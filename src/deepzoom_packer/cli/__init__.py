from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from ..bundle import verify_bundle
from ..config import AppConfig, ConfigurationError, dump_config, load_config, validate_config
from ..core import PackingService, resolve_tiler
from ..models import BatchResult
from ..settings import get_settings
from ..utils import printable

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)

app = typer.Typer(help="Generate DeepZoom tiles and pack them into compressed bundles")

CONFIG_EXIT_CODE = 2


def _load_config(path: Path | None) -> AppConfig:
    return load_config(path or get_settings().config_path)


def _fail_config(exc: ConfigurationError) -> typer.Exit:
    err_console.print(printable(f"Error: {exc}"), style="red", markup=False, highlight=False)
    return typer.Exit(CONFIG_EXIT_CODE)


def _print_banner(cfg: AppConfig, threads: int, job_count: int) -> None:
    console.print("Configuration:")
    console.print(f"  Tile size: {cfg.tiling.tile_size}")
    console.print(f"  Format: {cfg.tiling.suffix}")
    console.print(f"  JPEG quality: {cfg.tiling.jpeg_quality}")
    console.print(f"  Threads: {threads}")
    console.print(f"  Keep tiles: {'yes' if cfg.tiling.keep_tiles else 'no'}")
    console.print(f"\nProcessing {job_count} images...\n")


def _print_summary(result: BatchResult) -> None:
    summary = result.summary
    console.print(f"\nCompleted: {summary.successes}/{summary.total} images")
    if not summary.failures:
        console.print("[green]All images processed successfully![/green]")
        return
    table = Table(title="Failed images")
    table.add_column("#")
    table.add_column("Input")
    table.add_column("Error")
    for failed in result.failed:
        table.add_row(str(failed.index + 1), printable(failed.input_path), printable(failed.error_message or "-"))
    err_console.print(table)
    err_console.print(f"Warning: {summary.failures} images failed to process", style="yellow")


@app.command()
def run(
    inputs: Path = typer.Option(..., "--inputs", help="File with image paths, one per line"),
    outputs: Path = typer.Option(..., "--outputs", help="File with tile folder paths, one per line"),
    tile_size: int | None = typer.Option(None, "--tile-size", help="Tile size (default: 512)"),
    suffix: str | None = typer.Option(None, "--suffix", help="Tile format: .png, .jpg, .jpeg (default: .jpg)"),
    jpeg_quality: int | None = typer.Option(None, "--jpeg-quality", help="JPEG quality 1-100 (default: 85)"),
    threads: int | None = typer.Option(
        None, "--threads", min=0, help="Parallel workers (default: hardware concurrency)"
    ),
    keep_tiles: bool = typer.Option(False, "--keep-tiles", help="Keep tile files after merging"),
    report_dir: Path | None = typer.Option(None, "--report-dir", help="Write run log and summary CSV here"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    try:
        cfg = _load_config(config)
        if tile_size is not None:
            cfg.tiling.tile_size = tile_size
        if suffix is not None:
            cfg.tiling.suffix = suffix
        if jpeg_quality is not None:
            cfg.tiling.jpeg_quality = jpeg_quality
        if threads is not None:
            cfg.runtime.threads = threads
        if keep_tiles:
            cfg.tiling.keep_tiles = True
        if report_dir is not None:
            cfg.runtime.report_dir = report_dir
        validate_config(cfg)
        service = PackingService(cfg, resolve_tiler(cfg), console=console, err_console=err_console)
        jobs = service.load_jobs(inputs, outputs)
    except ConfigurationError as exc:
        raise _fail_config(exc) from exc

    if not jobs:
        console.print("No tasks to process.")
        raise typer.Exit()

    effective_threads = cfg.runtime.effective_threads
    _print_banner(cfg, effective_threads, len(jobs))
    result = service.run_batch(jobs, max_concurrency=effective_threads)
    _print_summary(result)
    if not result.ok:
        raise typer.Exit(1)


@app.command()
def verify(
    folders: list[Path],
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    """Check that packed bundles match their metadata index."""

    try:
        cfg = _load_config(config)
    except ConfigurationError as exc:
        raise _fail_config(exc) from exc
    broken = 0
    for folder in folders:
        problems = verify_bundle(folder, cfg.bundle.metadata_name)
        if problems:
            broken += 1
            err_console.print(printable(f"✗ {folder}"), style="red", markup=False, highlight=False)
            for problem in problems:
                err_console.print(printable(f"  {problem}"), markup=False, highlight=False)
        else:
            console.print(printable(f"✓ {folder}"), style="green", markup=False, highlight=False)
    if broken:
        raise typer.Exit(1)


@app.command("show-config")
def show_config(
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    try:
        cfg = _load_config(config)
    except ConfigurationError as exc:
        raise _fail_config(exc) from exc
    console.print_json(dump_config(cfg))


@app.command()
def serve(
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    """Run the local HTTP API."""

    import uvicorn

    from ..api import create_app

    try:
        cfg = _load_config(config)
        api = create_app(cfg, require_enabled=False)
    except ConfigurationError as exc:
        raise _fail_config(exc) from exc
    uvicorn.run(api, host=cfg.api.host, port=cfg.api.port)


if __name__ == "__main__":
    app()
