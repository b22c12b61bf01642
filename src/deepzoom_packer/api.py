from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from .config import AppConfig, ConfigurationError, load_config
from .core import PackingService
from .models import Job, JobResult
from .settings import get_settings
from .tilers import Tiler
from .utils import printable


class JobRequest(BaseModel):
    input_path: str = Field(min_length=1)
    output_path: str = Field(min_length=1)


class PackRequest(BaseModel):
    jobs: list[JobRequest]
    threads: int | None = Field(default=None, ge=1)


def _serialize_result(result: JobResult) -> dict[str, Any]:
    return {
        "index": result.index,
        "input_path": printable(result.input_path),
        "output_path": printable(result.output_path),
        "success": result.success,
        "error_code": result.error_code,
        "error_message": printable(result.error_message) if result.error_message else None,
        "width": result.final_width,
        "height": result.final_height,
        "tile_count": result.tile_count,
    }


def create_app(
    config: AppConfig | None = None,
    *,
    config_path: Path | None = None,
    require_enabled: bool = True,
    tiler: Tiler | None = None,
) -> FastAPI:
    if config is None:
        settings = get_settings()
        config = load_config(config_path or settings.config_path)
        if settings.enable_local_api is not None:
            config.runtime.enable_local_api = settings.enable_local_api
    if require_enabled and not config.runtime.enable_local_api:
        raise RuntimeError("Local API is disabled. Enable it via config.runtime.enable_local_api")

    service = PackingService(config, tiler)
    app = FastAPI(title="DeepZoom Packer", version="0.1.0")
    app.state.config = config
    app.state.service = service

    @app.get("/health", summary="Health check")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/pack", summary="Tile and pack a batch of images")
    async def pack(request: PackRequest) -> dict[str, Any]:
        jobs = [
            Job(input_path=Path(item.input_path), output_path=Path(item.output_path), index=position)
            for position, item in enumerate(request.jobs)
        ]
        try:
            batch = await asyncio.to_thread(service.run_batch, jobs, max_concurrency=request.threads)
        except ConfigurationError as exc:
            raise HTTPException(status_code=503, detail=str(exc)) from exc
        summary = batch.summary
        return {
            "results": [_serialize_result(item) for item in batch.results],
            "summary": {
                "total": summary.total,
                "successes": summary.successes,
                "failures": summary.failures,
            },
        }

    return app


__all__ = ["create_app", "JobRequest", "PackRequest"]
