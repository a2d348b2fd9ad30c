from __future__ import annotations

import io
import re
from datetime import UTC, date, datetime
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from ragify.logging import logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ragify.file_manipulation import FileCandidate

MIN_FENCE = 3
_BACKTICK_RUN = re.compile(r"`+")
_WHITESPACE = re.compile(r"\s+")


class OutputArtifact(BaseModel):
    """The combined document and where it was written."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    path: Path = Field(..., description="Written file")
    content: str = Field(..., description="Markdown document")
    token_count: int = Field(..., ge=0, description="Whitespace-split segment count")


def fence_for(content: str) -> str:
    """Return a backtick fence longer than any backtick run inside ``content``.

    Args:
        content (str): the text to be fenced

    Returns:
        str: at least ``MIN_FENCE`` backticks
    """
    longest = max((len(m.group()) for m in _BACKTICK_RUN.finditer(content)), default=0)
    return "`" * max(MIN_FENCE, longest + 1)


def render_section(rel: str, extension: str, content: str) -> str:
    """Render one file as a level-1 heading followed by a fenced block."""
    fence = fence_for(content)
    return f"# {rel}\n\n{fence}{extension}\n{content}\n{fence}\n\n"


def build_markdown(candidates: Sequence[FileCandidate]) -> str:
    """Concatenate the files of ``candidates`` into one Markdown document.

    Files are read as UTF-8 (undecodable bytes become U+FFFD) and emitted
    verbatim in the order given.

    Args:
        candidates (Sequence[FileCandidate]): the files to combine

    Returns:
        str: the document, empty when ``candidates`` is empty
    """
    out = io.StringIO()
    for candidate in candidates:
        content = candidate.path.read_text(encoding="utf-8", errors="replace")
        out.write(render_section(candidate.rel, candidate.extension, content))
    return out.getvalue()


def approx_token_count(content: str) -> int:
    """Count the segments of ``content`` split on whitespace runs.

    Leading and trailing whitespace each produce an empty segment that is
    counted too. This is a rough size indicator, not a tokenizer.
    """
    return len(_WHITESPACE.split(content))


def today_utc() -> date:
    return datetime.now(UTC).date()


def output_filename(repo_slug: str, day: date, token_count: int) -> str:
    return f"{repo_slug}-{day.isoformat()}-{token_count}.md"


def write_artifact(
    content: str,
    *,
    out_dir: Path,
    repo_slug: str,
    day: date | None = None,
) -> OutputArtifact:
    """Write ``content`` under ``out_dir`` with a name derived from its size.

    The document is encoded before the file is opened, so a failure cannot
    leave an empty artifact behind. The directory is created if needed and an
    existing file with the same name is overwritten.

    Args:
        content (str): the assembled document (non-empty)
        out_dir (Path): artifact directory
        repo_slug (str): name prefix
        day (date | None): date stamp, today in UTC by default

    Returns:
        OutputArtifact: the written artifact
    """
    token_count = approx_token_count(content)
    path = out_dir / output_filename(repo_slug, day or today_utc(), token_count)
    data = content.encode("utf-8", errors="replace")
    out_dir.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    logger.info("Combined file created", path=str(path), token_count=token_count)
    return OutputArtifact(path=path, content=content, token_count=token_count)
