from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from .utils import default_parallelism

CONFIG_FILE = Path("config.toml")
SUPPORTED_SUFFIXES: tuple[str, ...] = (".png", ".jpg", ".jpeg")
KNOWN_TILERS: tuple[str, ...] = ("vips",)


class ConfigurationError(ValueError):
    """Raised for invalid or missing configuration. Fatal before any job runs."""


@dataclass(slots=True)
class TilingConfig:
    tile_size: int = 512
    suffix: str = ".jpg"
    jpeg_quality: int = 85
    keep_tiles: bool = False
    tiler: str = "vips"


@dataclass(slots=True)
class BundleConfig:
    blob_name: str = "tiles_000.binz"
    metadata_name: str = "metadata.json"
    compression_level: int = -1


@dataclass(slots=True)
class RuntimeConfig:
    threads: int = 0
    report_dir: Path | None = None
    log_file: str = "log.jsonl"
    summary_csv: str = "summary.csv"
    enable_local_api: bool = False

    @property
    def effective_threads(self) -> int:
        if self.threads > 0:
            return self.threads
        return default_parallelism()


@dataclass(slots=True)
class APIConfig:
    host: str = "127.0.0.1"
    port: int = 8000


@dataclass(slots=True)
class AppConfig:
    tiling: TilingConfig = field(default_factory=TilingConfig)
    bundle: BundleConfig = field(default_factory=BundleConfig)
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)
    api: APIConfig = field(default_factory=APIConfig)


def _read_toml(path: Path) -> Mapping[str, object]:
    if not path.exists():
        return {}
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"Invalid config file {path}: {exc}") from exc


def _section(raw: Mapping[str, object], name: str) -> Mapping[str, object] | None:
    value = raw.get(name)
    return value if isinstance(value, Mapping) else None


def _build_tiling(data: Mapping[str, object] | None) -> TilingConfig:
    if not data:
        return TilingConfig()
    return TilingConfig(
        tile_size=int(data.get("tile_size", 512)),
        suffix=str(data.get("suffix", ".jpg")),
        jpeg_quality=int(data.get("jpeg_quality", 85)),
        keep_tiles=bool(data.get("keep_tiles", False)),
        tiler=str(data.get("tiler", "vips")),
    )


def _build_bundle(data: Mapping[str, object] | None) -> BundleConfig:
    if not data:
        return BundleConfig()
    return BundleConfig(
        blob_name=str(data.get("blob_name", "tiles_000.binz")),
        metadata_name=str(data.get("metadata_name", "metadata.json")),
        compression_level=int(data.get("compression_level", -1)),
    )


def _build_runtime(data: Mapping[str, object] | None) -> RuntimeConfig:
    if not data:
        return RuntimeConfig()
    report_dir = data.get("report_dir")
    return RuntimeConfig(
        threads=int(data.get("threads", 0)),
        report_dir=Path(str(report_dir)) if report_dir else None,
        log_file=str(data.get("log_file", "log.jsonl")),
        summary_csv=str(data.get("summary_csv", "summary.csv")),
        enable_local_api=bool(data.get("enable_local_api", False)),
    )


def _build_api(data: Mapping[str, object] | None) -> APIConfig:
    if not data:
        return APIConfig()
    return APIConfig(host=str(data.get("host", "127.0.0.1")), port=int(data.get("port", 8000)))


def load_config(path: Path | None = None) -> AppConfig:
    path = path or CONFIG_FILE
    raw = _read_toml(path)
    try:
        config = AppConfig(
            tiling=_build_tiling(_section(raw, "tiling")),
            bundle=_build_bundle(_section(raw, "bundle")),
            runtime=_build_runtime(_section(raw, "runtime")),
            api=_build_api(_section(raw, "api")),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid value in {path}: {exc}") from exc
    validate_config(config)
    return config


def _check_file_name(label: str, value: str) -> None:
    if not value or "/" in value or "\\" in value or value in {".", ".."}:
        raise ConfigurationError(f"{label} must be a plain file name, got {value!r}")


def validate_config(config: AppConfig) -> AppConfig:
    tiling = config.tiling
    if tiling.tile_size <= 0:
        raise ConfigurationError("tile-size must be positive")
    if tiling.suffix not in SUPPORTED_SUFFIXES:
        raise ConfigurationError("suffix must be .png, .jpg, or .jpeg")
    if not 1 <= tiling.jpeg_quality <= 100:
        raise ConfigurationError("jpeg-quality must be between 1 and 100")
    if tiling.tiler not in KNOWN_TILERS:
        raise ConfigurationError(f"Unknown tiler: {tiling.tiler}")
    if config.runtime.threads < 0:
        raise ConfigurationError("threads must not be negative")
    if not -1 <= config.bundle.compression_level <= 9:
        raise ConfigurationError("compression_level must be between -1 and 9")
    _check_file_name("blob_name", config.bundle.blob_name)
    _check_file_name("metadata_name", config.bundle.metadata_name)
    if config.bundle.blob_name == config.bundle.metadata_name:
        raise ConfigurationError("blob_name and metadata_name must differ")
    return config


def dump_config(config: AppConfig) -> str:
    payload = {
        "tiling": {
            "tile_size": config.tiling.tile_size,
            "suffix": config.tiling.suffix,
            "jpeg_quality": config.tiling.jpeg_quality,
            "keep_tiles": config.tiling.keep_tiles,
            "tiler": config.tiling.tiler,
        },
        "bundle": {
            "blob_name": config.bundle.blob_name,
            "metadata_name": config.bundle.metadata_name,
            "compression_level": config.bundle.compression_level,
        },
        "runtime": {
            "threads": config.runtime.threads,
            "effective_threads": config.runtime.effective_threads,
            "report_dir": str(config.runtime.report_dir) if config.runtime.report_dir else None,
            "log_file": config.runtime.log_file,
            "summary_csv": config.runtime.summary_csv,
            "enable_local_api": config.runtime.enable_local_api,
        },
        "api": {
            "host": config.api.host,
            "port": config.api.port,
        },
    }
    return json.dumps(payload, indent=2)
