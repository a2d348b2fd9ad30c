"""Derive the on-disk locations used by a run from the repository URL."""

from __future__ import annotations

import hashlib
import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_SLUG = "repo"
HOST_MARKER = "com/"
DIGEST_LENGTH = 8
_SAFE_SLUG = re.compile(r"[A-Za-z0-9._-]+")
_UNSAFE_SLUG_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class WorkspacePaths(BaseModel):
    """Directories owned by one run.

    Attributes:
        repo_slug: Directory-safe name derived from the repository URL.
        clone_dir: Working copy location, ``{output_root}/in/{repo_slug}``.
        out_dir: Artifact directory, ``{output_root}/out``.
    """

    model_config = ConfigDict(frozen=True)

    repo_slug: str = Field(..., min_length=1)
    clone_dir: Path
    out_dir: Path


def derive_repo_slug(repo_url: str) -> str:
    """Turn a repository URL into a single, directory-safe path component.

    Takes what follows the last ``com/`` (the whole URL when absent) and drops
    a trailing ``.git``. A plain ``owner/repo`` tail becomes ``owner-repo``.
    Any other tail (nested groups, unsafe characters) is collapsed into ``-``
    runs and suffixed with a short digest of the tail, so distinct URLs keep
    distinct working copies::

        https://github.com/elysiajs/documentation -> elysiajs-documentation
        https://gitlab.com/group/sub/project.git  -> group-sub-project-<digest>

    Args:
        repo_url (str): the remote repository URL

    Returns:
        str: the slug, or ``DEFAULT_SLUG`` when nothing usable remains
    """
    tail = repo_url.strip().rsplit(HOST_MARKER, 1)[-1].rstrip("/")
    tail = tail.removesuffix(".git")
    simple = tail.replace("/", "-", 1)
    if _SAFE_SLUG.fullmatch(simple) and simple not in {".", ".."}:
        return simple
    slug = _UNSAFE_SLUG_CHARS.sub("-", tail).strip("-")
    if slug in {"", ".", ".."}:
        return DEFAULT_SLUG
    digest = hashlib.sha256(tail.encode("utf-8", "surrogateescape")).hexdigest()[:DIGEST_LENGTH]
    return f"{slug}-{digest}"


def git_transport_url(repo_url: str) -> str:
    """Return ``repo_url`` with a ``.git`` suffix appended if not already present."""
    url = repo_url.strip().rstrip("/")
    return url if url.endswith(".git") else f"{url}.git"


def workspace_paths(repo_url: str, output_root: Path) -> WorkspacePaths:
    """Compute the working copy and artifact directories for ``repo_url``.

    Pure function: nothing is created on disk.
    """
    slug = derive_repo_slug(repo_url)
    return WorkspacePaths(
        repo_slug=slug,
        clone_dir=output_root / "in" / slug,
        out_dir=output_root / "out",
    )
