"""Keep a local working copy of a remote repository up to date."""

from __future__ import annotations

import os
import subprocess  # noqa: S404
from typing import TYPE_CHECKING
from urllib.parse import urlsplit, urlunsplit

from ragify.exceptions import GitCommandError
from ragify.logging import logger
from ragify.workspace import git_transport_url

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence
    from pathlib import Path

    GitRunner = Callable[..., str]

# Keeps git from ever waiting on an interactive credential prompt.
NON_INTERACTIVE_ENV: dict[str, str] = {
    "GIT_ASKPASS": "echo",
    "GIT_TERMINAL_PROMPT": "0",
}


def authenticated_url(repo_url: str, token: str) -> str:
    """Embed ``token`` as the user part of an http(s) URL.

    Non-http URLs (ssh, local paths) are returned unchanged.
    """
    parts = urlsplit(repo_url)
    if parts.scheme not in {"http", "https"} or not parts.hostname:
        return repo_url
    netloc = parts.hostname if parts.port is None else f"{parts.hostname}:{parts.port}"
    return urlunsplit((parts.scheme, f"{token}@{netloc}", parts.path, parts.query, parts.fragment))


def redact(text: str, token: str | None) -> str:
    """Replace every occurrence of ``token`` in ``text``."""
    if not token:
        return text
    return text.replace(token, "***")


def git_env(token: str | None) -> dict[str, str] | None:
    """Environment for git subprocesses: inherited plus non-interactive auth when a token is set."""
    if not token:
        return None
    env = os.environ.copy()
    env.update(NON_INTERACTIVE_ENV)
    env["GITHUB_TOKEN"] = token
    return env


def run_git(
    args: Sequence[str],
    *,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
    secret: str | None = None,
) -> str:
    """Run ``git`` with ``args`` and return its stdout.

    Args:
        args (Sequence[str]): arguments passed after ``git``
        cwd (Path | None): working directory for the command
        env (Mapping[str, str] | None): full environment, inherited when None
        secret (str | None): value scrubbed from the command recorded on failure

    Raises:
        GitCommandError: if git exits non-zero or cannot be started.

    Returns:
        str: the command's standard output
    """
    cmd = ["git", *args]
    printable = redact(" ".join(cmd), secret)
    try:
        out = subprocess.run(  # noqa: S603
            cmd,
            cwd=str(cwd) if cwd is not None else None,
            env=dict(env) if env is not None else None,
            text=True,
            capture_output=True,
            check=True,
        )
    except subprocess.CalledProcessError as e:
        raise GitCommandError(
            command=printable,
            returncode=e.returncode,
            stdout=redact(e.stdout or "", secret),
            stderr=redact(e.stderr or "", secret),
        ) from None
    except FileNotFoundError as e:
        raise GitCommandError(command=printable, returncode=127, stdout="", stderr=str(e)) from None
    return out.stdout


def sync_repository(
    repo_url: str,
    clone_dir: Path,
    *,
    token: str | None = None,
    runner: GitRunner | None = None,
) -> None:
    """Make ``clone_dir`` an up-to-date checkout of ``repo_url``.

    An existing directory is updated in place with ``git pull``; otherwise the
    repository is cloned. When ``token`` is given the clone URL carries it and
    git runs without any interactive prompt.

    Args:
        repo_url (str): remote repository URL
        clone_dir (Path): working copy location
        token (str | None): optional access token
        runner (GitRunner | None): replacement for :func:`run_git`

    Raises:
        GitCommandError: if the pull or clone fails; the run must stop.
    """
    run = runner or run_git
    env = git_env(token)

    if clone_dir.exists():
        logger.info("Pulling latest changes", clone_dir=str(clone_dir))
        try:
            run(["pull"], cwd=clone_dir, env=env, secret=token)
        except GitCommandError as e:
            logger.error(
                "Failed to pull latest changes",
                clone_dir=str(clone_dir),
                command=e.command,
                returncode=e.returncode,
                stderr=e.stderr.strip(),
            )
            raise
        return

    transport = git_transport_url(repo_url)
    logger.info("Cloning repository", repo_url=transport, authenticated=bool(token))
    clone_url = authenticated_url(transport, token) if token else transport
    clone_dir.parent.mkdir(parents=True, exist_ok=True)
    try:
        run(["clone", clone_url, str(clone_dir)], env=env, secret=token)
    except GitCommandError as e:
        logger.error(
            "Failed to clone repository",
            repo_url=transport,
            command=e.command,
            returncode=e.returncode,
            stderr=e.stderr.strip(),
        )
        raise
    logger.info("Repository cloned", clone_dir=str(clone_dir))
