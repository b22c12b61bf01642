from __future__ import annotations

from pathlib import Path
from typing import Iterable

from .config import ConfigurationError
from .models import Job


def pair_lines(inputs: Iterable[str], outputs: Iterable[str]) -> list[Job]:
    """Pair two line streams by position.

    The shorter stream wins. A pair where either side is blank is skipped and
    does not consume an index.
    """

    jobs: list[Job] = []
    for input_line, output_line in zip(inputs, outputs):
        input_path = input_line.strip()
        output_path = output_line.strip()
        if not input_path or not output_path:
            continue
        jobs.append(Job(input_path=Path(input_path), output_path=Path(output_path), index=len(jobs)))
    return jobs


def _read_lines(path: Path, label: str) -> list[str]:
    # Lines are file system paths; undecodable bytes survive as surrogates.
    try:
        return path.read_text(encoding="utf-8", errors="surrogateescape").splitlines()
    except OSError as exc:
        raise ConfigurationError(f"Cannot open {label} file: {path}") from exc
    except UnicodeDecodeError as exc:
        raise ConfigurationError(f"Cannot decode {label} file: {path}: {exc}") from exc


def read_jobs(inputs_file: Path, outputs_file: Path) -> list[Job]:
    return pair_lines(_read_lines(inputs_file, "input"), _read_lines(outputs_file, "output"))


__all__ = ["pair_lines", "read_jobs"]
