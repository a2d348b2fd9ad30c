from __future__ import annotations

import os
from pathlib import Path

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_OUTPUT_ROOT = Path("public")
TOKEN_ENV_VAR = "GITHUB_TOKEN"
CLEANUP_ENV_VAR = "RAGIFY_CLEANUP"


def load_environment() -> bool:
    """Load the nearest ``.env`` file into ``os.environ`` without overriding.

    Returns:
        bool: True if a ``.env`` file was found and loaded.
    """
    env_file = find_dotenv(usecwd=True)
    if not env_file:
        return False
    return load_dotenv(env_file, override=False)


def _token_from_env() -> str | None:
    return os.environ.get(TOKEN_ENV_VAR) or None


def _cleanup_from_env() -> bool:
    return os.environ.get(CLEANUP_ENV_VAR, "").strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Configuration settings for a single ragify run."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    target: str = Field(default="", description="Name of the target to combine.")
    output_root: Path = Field(
        default=DEFAULT_OUTPUT_ROOT,
        description="Root holding in/ (working copies) and out/ (artifacts).",
    )
    targets_file: Path | None = Field(
        default=None,
        description="YAML file with extra target definitions.",
    )
    github_token: str | None = Field(
        default_factory=_token_from_env,
        description="Credential used to authenticate clone and pull.",
        repr=False,
    )
    cleanup: bool = Field(
        default_factory=_cleanup_from_env,
        description="Delete the working copy after a successful write.",
    )
    log_file: str = Field(default="", description="Log file path.")
    list_targets: bool = Field(default=False, description="List target names and exit.")

    @property
    def resolved_output_root(self) -> Path:
        """Absolute output root, anchored at the current working directory."""
        return self.output_root.resolve()
