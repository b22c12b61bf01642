from __future__ import annotations

import hashlib
import os
import tempfile
import time
from pathlib import Path

# Read once at import; os.umask can only be queried by setting it.
_UMASK = os.umask(0)
os.umask(_UMASK)


def is_numeric_name(name: str) -> bool:
    return bool(name) and name.isascii() and name.isdigit()


def printable(text: object) -> str:
    """Render *text* for consoles and logs, replacing undecodable path bytes."""

    return str(text).encode("utf-8", "surrogateescape").decode("utf-8", "replace")


def next_power_of_two(value: int) -> int:
    if value <= 0:
        return 1
    power = 1
    while power < value:
        power *= 2
    return power


def default_parallelism(fallback: int = 4) -> int:
    return os.cpu_count() or fallback


def generate_run_id(prefix: str = "run") -> str:
    epoch_ms = int(time.time() * 1000)
    random_bits = hashlib.sha256(os.urandom(16)).hexdigest()[:8]
    return f"{prefix}-{epoch_ms}-{random_bits}"


def atomic_write(path: Path, data: str, encoding: str = "utf-8") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile("w", delete=False, dir=path.parent, encoding=encoding) as tmp:
        tmp.write(data)
        tmp.flush()
        os.fsync(tmp.fileno())
    os.chmod(tmp.name, 0o666 & ~_UMASK)
    os.replace(tmp.name, path)
