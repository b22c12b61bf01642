import os
from pathlib import Path

from deepzoom_packer.utils import atomic_write, generate_run_id, is_numeric_name, next_power_of_two, printable


def test_next_power_of_two() -> None:
    assert next_power_of_two(1) == 1
    assert next_power_of_two(300) == 512
    assert next_power_of_two(512) == 512
    assert next_power_of_two(513) == 1024
    assert next_power_of_two(0) == 1


def test_is_numeric_name() -> None:
    assert is_numeric_name("0")
    assert is_numeric_name("017")
    assert not is_numeric_name("")
    assert not is_numeric_name("1a")
    assert not is_numeric_name("-1")
    assert not is_numeric_name("٣")


def test_generate_run_id_unique() -> None:
    first = generate_run_id("batch")
    second = generate_run_id("batch")
    assert first != second
    assert first.startswith("batch-")


def test_atomic_write_replaces_content(tmp_path: Path) -> None:
    target = tmp_path / "nested" / "out.json"
    atomic_write(target, "first")
    atomic_write(target, "second")
    assert target.read_text(encoding="utf-8") == "second"
    assert [path.name for path in target.parent.iterdir()] == ["out.json"]


def test_printable_replaces_undecodable_bytes() -> None:
    assert printable(os.fsdecode(b"/img/caf\xe9.png")) == "/img/caf�.png"
    assert printable(Path("/img/ok.png")) == "/img/ok.png"
