#  -*- coding: utf-8 -*-
"""
ragify: combine a remote repository into one Markdown corpus for an LLM.

Overview
--------
Given a named target (a repository URL plus folder and extension filters),
ragify:

1) clones the repository under ``{output-root}/in/{slug}``, or pulls it when
   the working copy already exists (``GITHUB_TOKEN`` authenticates both),
2) walks the working copy and keeps files whose relative path contains one of
   the include folders, none of the exclude folders, and whose extension is
   listed,
3) writes every kept file as a heading plus fenced block into
   ``{output-root}/out/{slug}-{date}-{tokens}.md``.

Targets come from the built-in table, extended by ``--targets-file``.

Usage
-----
    uv run python -m ragify.cli elysia
    uv run python -m ragify.cli mydocs --targets-file targets.yaml --cleanup
    uv run python -m ragify.cli --list-targets
"""

from __future__ import annotations

import argparse
import sys
from typing import TYPE_CHECKING

from ragify import __version__
from ragify.config import available_targets, resolve_target
from ragify.exceptions import MissingTargetError, RagifyError
from ragify.logging import setup_logging
from ragify.pipeline import combine_files_from_repo
from ragify.settings import DEFAULT_OUTPUT_ROOT, Settings, load_environment

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = setup_logging()


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    p = argparse.ArgumentParser(
        prog="ragify",
        description="Combine the files of a repository target into one Markdown file.",
    )
    p.add_argument("target", nargs="?", default="", help="Target name.")
    p.add_argument(
        "--output-root",
        type=str,
        default=str(DEFAULT_OUTPUT_ROOT),
        help="Directory holding in/ and out/.",
    )
    p.add_argument(
        "--targets-file",
        type=str,
        default=None,
        help="YAML file with extra targets.",
    )
    p.add_argument(
        "--cleanup",
        action="store_true",
        default=None,
        help="Delete the working copy after writing.",
    )
    p.add_argument("--log-file", type=str, default="", help="Log file path.")
    p.add_argument("--list-targets", action="store_true", help="List target names and exit.")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    args = p.parse_args(argv)
    values = {k: v for k, v in vars(args).items() if v is not None}
    return Settings(**values)


def main(argv: Sequence[str] | None = None) -> int:
    load_environment()
    settings = parse_args(argv)

    try:
        targets = available_targets(settings.targets_file)
        if settings.list_targets:
            for name in sorted(targets):
                print(name)
            return 0
        if not settings.target:
            raise MissingTargetError
        options = resolve_target(settings.target, targets)
    except (RagifyError, OSError) as e:
        print(e, file=sys.stderr)
        return 1

    if settings.log_file:
        setup_logging(settings.log_file)

    try:
        artifact = combine_files_from_repo(options, settings)
    except (RagifyError, OSError, UnicodeError) as e:
        logger.exception("Combine failed", target=settings.target)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if artifact is not None:
        print(f"Combined file created at: {artifact.path}")
    print("Operation completed successfully.")
    return 0


def entrypoint() -> None:
    raise SystemExit(main())


if __name__ == "__main__":
    entrypoint()
