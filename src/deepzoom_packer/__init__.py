"""Pack DeepZoom tile pyramids into compressed single-blob bundles."""

from .config import AppConfig, ConfigurationError, load_config
from .core import PackingService
from .models import BatchResult, Job, JobResult, PackedTileEntry
from .packer import TilePacker

__all__ = [
    "AppConfig",
    "BatchResult",
    "ConfigurationError",
    "Job",
    "JobResult",
    "PackedTileEntry",
    "PackingService",
    "TilePacker",
    "load_config",
]
