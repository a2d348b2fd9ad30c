from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from ragify.logging import logger

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from ragify.config import TargetOptions

# Never descended into while walking a working copy.
VCS_DIRS = frozenset({".git"})


class FileCandidate(BaseModel):
    """A file of the working copy that passed the filters.

    Attributes:
        path: Absolute path to the file on disk.
        rel: Path relative to the working copy root, POSIX separators.
        extension: File extension without the leading dot (may be empty).
    """

    model_config = ConfigDict(frozen=True)

    path: Path = Field(..., description="Absolute file path")
    rel: str = Field(..., description="File path relative to the working copy")
    extension: str = Field("", description="Extension without leading dot")


def relpath(path: Path, root: Path) -> str:
    """Send the relative path of path from root.

    Args:
        path (Path): the path to "relativise"
        root (Path): the root to relativise from

    Returns:
        str: the relative path from root to path, with POSIX separators.
            If path is not under root, returns the original path as a string.
    """
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return str(path)


def printable_rel(rel: str) -> str:
    """Replace undecodable file-name bytes (surrogate escapes) with U+FFFD."""
    return rel.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


def file_extension(path: Path) -> str:
    """Extension of ``path`` without the leading dot, ``""`` when there is none."""
    return path.suffix[1:]


def walk_tree(root: Path) -> Iterator[Path]:
    """Yield every file under ``root``, depth-first.

    Entries of each directory are visited in lexicographic name order, so a
    subdirectory's files appear where the subdirectory sorts. ``.git`` is
    skipped and symlinked directories are not followed.

    Args:
        root (Path): the directory to walk

    Yields:
        Path: each file found
    """
    for entry in sorted(root.iterdir(), key=lambda p: p.name):
        if entry.is_dir():
            if entry.is_symlink() or entry.name in VCS_DIRS:
                continue
            yield from walk_tree(entry)
        elif entry.is_file():
            yield entry


def matches_filters(
    rel: str,
    extension: str,
    *,
    include_folders: Sequence[str],
    exclude_folders: Sequence[str],
    file_extensions: Sequence[str],
) -> bool:
    """Check a relative path against the include/exclude/extension rules.

    All three must hold: ``rel`` contains one of ``include_folders``, contains
    none of ``exclude_folders`` and ``extension`` is one of ``file_extensions``.
    Tests are plain substring containment, not globs. An empty
    ``include_folders`` matches nothing.

    Args:
        rel (str): path relative to the working copy root
        extension (str): extension without the leading dot
        include_folders (Sequence[str]): substrings of which at least one must occur
        exclude_folders (Sequence[str]): substrings of which none may occur
        file_extensions (Sequence[str]): accepted extensions

    Returns:
        bool: True if the file should be combined
    """
    if not any(folder in rel for folder in include_folders):
        return False
    if exclude_folders and any(folder in rel for folder in exclude_folders):
        return False
    return extension in file_extensions


def find_files(root: Path, options: TargetOptions) -> list[FileCandidate]:
    """Collect the files of ``root`` selected by ``options``, in walk order.

    Args:
        root (Path): the working copy to search
        options (TargetOptions): the filters to apply

    Returns:
        list[FileCandidate]: the matching files, never re-sorted
    """
    logger.info("Searching for files", root=str(root))
    found: list[FileCandidate] = []
    for path in walk_tree(root):
        rel = relpath(path, root)
        ext = file_extension(path)
        if matches_filters(
            rel,
            ext,
            include_folders=options.include_folders,
            exclude_folders=options.exclude_folders,
            file_extensions=options.file_extensions,
        ):
            found.append(FileCandidate(path=path, rel=printable_rel(rel), extension=ext))
    logger.info("Found files to combine", count=len(found))
    return found
