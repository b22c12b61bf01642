from __future__ import annotations

from functools import lru_cache
from typing import Callable, Dict

from .base import Tiler, save_suffix
from .vips import VipsTiler

_TILER_FACTORIES: Dict[str, Callable[[], Tiler]] = {
    "vips": VipsTiler,
}


@lru_cache(maxsize=len(_TILER_FACTORIES))
def get_tiler(name: str) -> Tiler:
    factory = _TILER_FACTORIES.get(name)
    if not factory:
        raise KeyError(f"No tiler registered for {name}")
    return factory()


__all__ = [
    "Tiler",
    "VipsTiler",
    "get_tiler",
    "save_suffix",
]
