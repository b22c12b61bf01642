from __future__ import annotations

from pathlib import Path, PurePath

from deepzoom_packer.discovery import discover_tiles, has_tile_extension


class VirtualLister:
    def __init__(self, tree: dict[str, tuple[list[str], list[str]]]) -> None:
        self._tree = tree

    def directories(self, path: PurePath) -> list[str]:
        return list(self._tree.get(path.as_posix(), ([], []))[0])

    def files(self, path: PurePath) -> list[str]:
        return list(self._tree.get(path.as_posix(), ([], []))[1])


def test_non_numeric_directories_are_skipped() -> None:
    lister = VirtualLister(
        {
            "root": (["0", "assets", "1"], ["blank.png", "vips-properties.xml"]),
            "root/0": (["0"], []),
            "root/0/0": ([], ["0.jpg"]),
            "root/1": (["0", "extra"], []),
            "root/1/0": ([], ["0.jpg", "1.jpg"]),
            "root/1/extra": ([], ["0.jpg"]),
            "root/assets": (["0"], []),
            "root/assets/0": ([], ["0.jpg"]),
        }
    )
    tiles = discover_tiles(PurePath("root"), lister)
    assert [tile.key for tile in tiles] == ["0_0_0", "1_0_0", "1_0_1"]


def test_extension_filter_is_case_insensitive() -> None:
    lister = VirtualLister(
        {
            "root": (["0"], []),
            "root/0": (["0"], []),
            "root/0/0": ([], ["0.JPG", "1.Png", "2.jpeg", "3.txt", "4"]),
        }
    )
    tiles = discover_tiles(PurePath("root"), lister)
    assert [tile.filename for tile in tiles] == ["0.JPG", "1.Png", "2.jpeg"]
    assert [tile.column for tile in tiles] == ["0", "1", "2"]


def test_order_is_lexicographic_by_segment() -> None:
    lister = VirtualLister(
        {
            "root": (["2", "10"], []),
            "root/2": (["1", "0"], []),
            "root/2/0": ([], ["10.jpg", "2.jpg"]),
            "root/2/1": ([], ["0.jpg"]),
            "root/10": (["0"], []),
            "root/10/0": ([], ["0.jpg"]),
        }
    )
    keys = [tile.key for tile in discover_tiles(PurePath("root"), lister)]
    assert keys == ["10_0_0", "2_0_10", "2_0_2", "2_1_0"]


def test_order_does_not_depend_on_listing_order() -> None:
    forward = VirtualLister(
        {"root": (["0", "1"], []), "root/0": (["0"], []), "root/0/0": ([], ["0.png"]),
         "root/1": (["0", "1"], []), "root/1/0": ([], ["0.png", "1.png"]), "root/1/1": ([], ["0.png", "1.png"])}
    )
    backward = VirtualLister(
        {"root": (["1", "0"], []), "root/0": (["0"], []), "root/0/0": ([], ["0.png"]),
         "root/1": (["1", "0"], []), "root/1/0": ([], ["1.png", "0.png"]), "root/1/1": ([], ["1.png", "0.png"])}
    )
    first = [tile.key for tile in discover_tiles(PurePath("root"), forward)]
    second = [tile.key for tile in discover_tiles(PurePath("root"), backward)]
    assert first == second


def test_filesystem_walk(tmp_path: Path, tree_writer) -> None:
    tree_writer(
        tmp_path,
        {
            "0/0/0.jpg": b"a",
            "1/0/0.jpg": b"b",
            "1/0/1.jpg": b"c",
            "1/0/notes.txt": b"x",
            "meta/0/0.jpg": b"y",
        },
    )
    (tmp_path / "1" / "1").mkdir()
    tiles = discover_tiles(tmp_path)
    assert [tile.key for tile in tiles] == ["0_0_0", "1_0_0", "1_0_1"]
    assert tiles[0].path == tmp_path / "0" / "0" / "0.jpg"


def test_has_tile_extension() -> None:
    assert has_tile_extension("3.JPEG")
    assert not has_tile_extension("3.webp")
