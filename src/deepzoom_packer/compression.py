"""Gzip framing for individual tiles."""

from __future__ import annotations

import zlib

from .errors import CompressionError

# 16 + MAX_WBITS selects the gzip container; the header carries mtime 0.
GZIP_WBITS = 31
DEFAULT_LEVEL = zlib.Z_DEFAULT_COMPRESSION


class TileCompressor:
    def __init__(self, level: int = DEFAULT_LEVEL) -> None:
        if not -1 <= level <= 9:
            raise CompressionError(f"Invalid compression level: {level}")
        self._level = level

    @property
    def level(self) -> int:
        return self._level

    def compress(self, data: bytes) -> bytes:
        try:
            compressor = zlib.compressobj(self._level, zlib.DEFLATED, GZIP_WBITS)
            return compressor.compress(data) + compressor.flush(zlib.Z_FINISH)
        except zlib.error as exc:
            raise CompressionError(f"Failed to compress data: {exc}") from exc


def decompress_tile(payload: bytes) -> bytes:
    try:
        return zlib.decompress(payload, GZIP_WBITS)
    except zlib.error as exc:
        raise CompressionError(f"Failed to decompress tile: {exc}") from exc


__all__ = ["TileCompressor", "decompress_tile"]
