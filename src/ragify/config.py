from __future__ import annotations

from typing import TYPE_CHECKING

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ragify.exceptions import InvalidTargetsFileError, UnknownTargetError

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path


class TargetOptions(BaseModel):
    """Repository and filters for one combine run.

    Attributes:
        repo_url: Remote repository URL (``repoUrl``).
        include_folders: A file is kept only if its relative path contains one of these.
        exclude_folders: A file is dropped if its relative path contains any of these.
        file_extensions: Accepted extensions, without the leading dot.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    repo_url: str = Field(..., alias="repoUrl", min_length=1)
    include_folders: tuple[str, ...] = Field(default=(), alias="includeFolders")
    exclude_folders: tuple[str, ...] = Field(default=(), alias="excludeFolders")
    file_extensions: tuple[str, ...] = Field(default=(), alias="fileExtensions")

    @field_validator("repo_url")
    @classmethod
    def _strip_url(cls, value: str) -> str:
        return value.strip()

    @field_validator("include_folders", mode="before")
    @classmethod
    def _wrap_include(cls, value: object) -> object:
        # "" stays: it is a substring of every path, so it includes everything.
        if isinstance(value, str):
            return (value,)
        return value

    @field_validator("exclude_folders", mode="before")
    @classmethod
    def _drop_blank_excludes(cls, value: object) -> object:
        if isinstance(value, str):
            value = [value]
        if isinstance(value, (list, tuple)):
            return tuple(v for v in value if isinstance(v, str) and v.strip())
        return value

    @field_validator("file_extensions", mode="before")
    @classmethod
    def _normalize_extensions(cls, value: object) -> object:
        if isinstance(value, str):
            value = [value]
        if isinstance(value, (list, tuple)):
            return tuple(v.strip().lstrip(".") for v in value if isinstance(v, str) and v.strip())
        return value


TARGETS: dict[str, TargetOptions] = {
    "discord": TargetOptions(
        repoUrl="https://github.com/discordjs/discord.js",
        includeFolders=["packages/builders/src"],
        excludeFolders=[],
        fileExtensions=["md"],
    ),
    "elysia": TargetOptions(
        repoUrl="https://github.com/elysiajs/documentation",
        includeFolders=["docs"],
        excludeFolders=["public", ".vitepress", "blog"],
        fileExtensions=["md"],
    ),
}


def load_targets_file(path: Path) -> dict[str, TargetOptions]:
    """Parse a YAML mapping of target names to options records.

    Args:
        path (Path): the YAML file to read

    Raises:
        InvalidTargetsFileError: if the document is not a mapping of valid records

    Returns:
        dict[str, TargetOptions]: the targets defined in the file
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise InvalidTargetsFileError(path=path, message=str(e)) from e
    if not isinstance(data, dict):
        raise InvalidTargetsFileError(path=path, message="top level must be a mapping")

    targets: dict[str, TargetOptions] = {}
    for name, record in data.items():
        if not isinstance(record, dict):
            raise InvalidTargetsFileError(path=path, message=f"target {name!r} must be a mapping")
        try:
            targets[str(name)] = TargetOptions.model_validate(record)
        except ValidationError as e:
            raise InvalidTargetsFileError(path=path, message=f"target {name!r}: {e}") from e
    return targets


def available_targets(targets_file: Path | None = None) -> dict[str, TargetOptions]:
    """Built-in targets, extended and overridden by ``targets_file`` when given."""
    targets = dict(TARGETS)
    if targets_file is not None:
        targets.update(load_targets_file(targets_file))
    return targets


def resolve_target(name: str, targets: Mapping[str, TargetOptions]) -> TargetOptions:
    """Look up the options record for ``name``.

    Raises:
        UnknownTargetError: if ``name`` is not configured.
    """
    try:
        return targets[name]
    except KeyError:
        raise UnknownTargetError(name=name) from None
