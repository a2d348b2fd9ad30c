"""The combine run: synchronize, walk, assemble, write."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ragify.cleanup import remove_workspace
from ragify.file_manipulation import find_files
from ragify.git_sync import sync_repository
from ragify.logging import logger
from ragify.output_construction import build_markdown, write_artifact
from ragify.workspace import workspace_paths

if TYPE_CHECKING:
    from datetime import date

    from ragify.config import TargetOptions
    from ragify.git_sync import GitRunner
    from ragify.output_construction import OutputArtifact
    from ragify.settings import Settings


def combine_files_from_repo(
    options: TargetOptions,
    settings: Settings,
    *,
    day: date | None = None,
    runner: GitRunner | None = None,
) -> OutputArtifact | None:
    """Combine the files of ``options.repo_url`` selected by its filters.

    Stages run strictly in order and a failing stage stops the run. The
    working copy is kept for the next run unless ``settings.cleanup`` is set,
    in which case it is removed after the artifact is written.

    Args:
        options (TargetOptions): repository and filters
        settings (Settings): output root, credential and cleanup switch
        day (date | None): date stamp for the artifact name
        runner (GitRunner | None): replacement git runner

    Raises:
        GitCommandError: if the working copy could not be synchronized.

    Returns:
        OutputArtifact | None: the written artifact, or None when nothing matched
    """
    paths = workspace_paths(options.repo_url, settings.resolved_output_root)
    sync_repository(
        options.repo_url,
        paths.clone_dir,
        token=settings.github_token,
        runner=runner,
    )

    candidates = find_files(paths.clone_dir, options)
    content = build_markdown(candidates)
    if not content:
        logger.info("No files to combine", repo_slug=paths.repo_slug)
        return None

    artifact = write_artifact(content, out_dir=paths.out_dir, repo_slug=paths.repo_slug, day=day)

    if settings.cleanup:
        remove_workspace(paths.clone_dir)
    return artifact
