from __future__ import annotations

import os
from pathlib import Path

import pytest

from ragify.config import TargetOptions
from ragify.file_manipulation import file_extension, find_files, matches_filters, relpath, walk_tree


def _touch(root: Path, *rels: str) -> None:
    for rel in rels:
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"// {rel}\n", encoding="utf-8")


def _options(include: list[str], exclude: list[str], extensions: list[str]) -> TargetOptions:
    return TargetOptions(
        repoUrl="https://github.com/acme/tool",
        includeFolders=include,
        excludeFolders=exclude,
        fileExtensions=extensions,
    )


@pytest.mark.unit
def test_relpath_uses_posix_separators(tmp_path: Path) -> None:
    assert relpath(tmp_path / "src" / "a.ts", tmp_path) == "src/a.ts"
    assert relpath(Path("/elsewhere/x"), tmp_path) == "/elsewhere/x"


@pytest.mark.unit
def test_file_extension_drops_leading_dot() -> None:
    assert file_extension(Path("src/a.ts")) == "ts"
    assert file_extension(Path("archive.tar.gz")) == "gz"
    assert file_extension(Path("Makefile")) == ""


@pytest.mark.unit
def test_walk_tree_is_depth_first_in_name_order(tmp_path: Path) -> None:
    _touch(tmp_path, "b.md", "a/z.md", "a/b/c.md", "c.md", ".git/config.md")

    rels = [relpath(p, tmp_path) for p in walk_tree(tmp_path)]

    assert rels == ["a/b/c.md", "a/z.md", "b.md", "c.md"]


@pytest.mark.unit
@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
def test_walk_tree_does_not_follow_directory_symlinks(tmp_path: Path) -> None:
    _touch(tmp_path, "src/a.ts")
    (tmp_path / "src" / "loop").symlink_to(tmp_path / "src", target_is_directory=True)

    rels = [relpath(p, tmp_path) for p in walk_tree(tmp_path)]

    assert rels == ["src/a.ts"]


@pytest.mark.unit
def test_matches_filters_empty_include_matches_nothing() -> None:
    assert not matches_filters(
        "src/a.ts",
        "ts",
        include_folders=(),
        exclude_folders=(),
        file_extensions=("ts",),
    )


@pytest.mark.unit
def test_matches_filters_is_substring_not_glob() -> None:
    kwargs = {"exclude_folders": (), "file_extensions": ("md",)}

    assert matches_filters("packages/docs-site/intro.md", "md", include_folders=("docs",), **kwargs)
    assert not matches_filters("packages/src/a.md", "md", include_folders=("packages/*",), **kwargs)


@pytest.mark.unit
def test_find_files_scenario_single_match(tmp_path: Path) -> None:
    _touch(tmp_path, "src/a.ts", "src/b.md", "lib/c.ts")

    found = find_files(tmp_path, _options(["src"], [], ["ts"]))

    assert [c.rel for c in found] == ["src/a.ts"]
    assert found[0].extension == "ts"
    assert found[0].path == tmp_path / "src" / "a.ts"


@pytest.mark.unit
def test_find_files_exclude_wins_over_include(tmp_path: Path) -> None:
    _touch(tmp_path, "src/a.ts", "test/a.ts", "src/test-utils/b.ts")

    found = find_files(tmp_path, _options(["a.ts", "src"], ["test"], ["ts"]))

    assert [c.rel for c in found] == ["src/a.ts"]


@pytest.mark.unit
def test_find_files_nothing_matches(tmp_path: Path) -> None:
    _touch(tmp_path, "lib/c.ts", "src/b.md")

    assert find_files(tmp_path, _options(["src"], [], ["ts"])) == []


@pytest.mark.unit
def test_find_files_empty_tree(tmp_path: Path) -> None:
    assert find_files(tmp_path, _options(["src"], [], ["ts"])) == []


@pytest.mark.unit
def test_find_files_blank_include_matches_everything(tmp_path: Path) -> None:
    _touch(tmp_path, "src/a.ts", "lib/c.ts", "README.md")

    options = _options([""], [], ["ts"])

    assert options.include_folders == ("",)
    assert [c.rel for c in find_files(tmp_path, options)] == ["lib/c.ts", "src/a.ts"]


def _touch_raw_name(directory: Path, raw_name: bytes) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    try:
        with open(os.path.join(os.fsencode(directory), raw_name), "wb") as f:  # noqa: PTH118, PTH123
            f.write(b"# caf\n")
    except OSError:
        pytest.skip("filesystem rejects non-UTF-8 file names")


@pytest.mark.unit
def test_find_files_undecodable_name_gets_printable_rel(tmp_path: Path) -> None:
    _touch_raw_name(tmp_path / "docs", b"caf\xe9.md")

    found = find_files(tmp_path, _options(["docs"], [], ["md"]))

    assert [c.rel for c in found] == ["docs/caf�.md"]
    assert found[0].rel.encode("utf-8")
    assert found[0].path.read_bytes() == b"# caf\n"
