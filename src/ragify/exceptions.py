from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class RagifyError(Exception):
    """Base exception for errors in the ragify module."""


@dataclass(frozen=True)
class GitCommandError(RagifyError):
    """Raised when a git command fails."""

    command: str
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        detail = self.stderr.strip() or self.stdout.strip()
        return f"`{self.command}` exited with status {self.returncode}: {detail}"


@dataclass(frozen=True)
class MissingTargetError(RagifyError):
    """Raised when no target name was given on the command line."""

    message: str = "Please provide a target name."

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class UnknownTargetError(RagifyError):
    """Raised when a target name has no configuration."""

    name: str

    def __str__(self) -> str:
        return f"No configuration found for target: {self.name}"


@dataclass(frozen=True)
class InvalidTargetsFileError(RagifyError):
    """Raised when a targets file cannot be parsed into target options."""

    path: Path
    message: str

    def __str__(self) -> str:
        return f"Invalid targets file {self.path}: {self.message}"
