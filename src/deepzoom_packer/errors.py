from __future__ import annotations


class PackError(RuntimeError):
    """Per-job failure. Recorded on the job result, never fatal to the batch."""

    code = "PACK"

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code


class TilingError(PackError):
    code = "TILING"


class JobIOError(PackError):
    code = "IO"


class CompressionError(PackError):
    code = "COMPRESSION"


class MetadataWriteError(PackError):
    code = "METADATA"


__all__ = [
    "PackError",
    "TilingError",
    "JobIOError",
    "CompressionError",
    "MetadataWriteError",
]
