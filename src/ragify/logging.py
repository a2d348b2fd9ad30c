from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from structlog.typing import EventDict, WrappedLogger

LOG_LEVEL_ENV_VAR = "RAGIFY_LOG_LEVEL"
SECRET_ENV_VARS = ("GITHUB_TOKEN",)
REDACTED = "***"

_LOGGING_CONFIGURED = False


def _scrub(value: Any, secrets: list[str]) -> Any:  # noqa: ANN401
    if isinstance(value, str):
        for secret in secrets:
            value = value.replace(secret, REDACTED)
    return value


def redact_secrets(_logger: WrappedLogger, _method: str, event_dict: EventDict) -> EventDict:
    """Replace access tokens found in the environment in every string value of an event."""
    secrets = [v for name in SECRET_ENV_VARS if (v := os.environ.get(name))]
    if not secrets:
        return event_dict
    return {key: _scrub(value, secrets) for key, value in event_dict.items()}


def _has_file_handler(root: logging.Logger, path: Path) -> bool:
    return any(
        isinstance(h, logging.FileHandler) and Path(h.baseFilename).resolve() == path
        for h in root.handlers
    )


def _level_from_env() -> int:
    name = os.environ.get(LOG_LEVEL_ENV_VAR, "INFO").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def setup_logging(filename: str | Path | None = None) -> structlog.BoundLogger:
    """Set up structured logging for ragify runs.

    structlog is configured once per process, at the level named by
    ``RAGIFY_LOG_LEVEL`` (INFO by default). Events go to stderr as JSON with
    any ``GITHUB_TOKEN`` value scrubbed. A ``filename`` adds a file handler,
    at most once per path.

    Args:
        filename: Optional log file receiving the same events as stderr.

    Returns:
        A structlog logger bound to the ``ragify`` name.
    """
    global _LOGGING_CONFIGURED  # noqa: PLW0603
    if not _LOGGING_CONFIGURED:
        level = _level_from_env()
        logging.basicConfig(
            level=level,
            handlers=[logging.StreamHandler(sys.stderr)],
            format="%(message)s",
        )
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                redact_secrets,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(level),
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        _LOGGING_CONFIGURED = True

    if filename:
        path = Path(filename).resolve()
        root = logging.getLogger()
        if not _has_file_handler(root, path):
            handler = logging.FileHandler(str(path), encoding="utf-8")
            handler.setFormatter(logging.Formatter("%(message)s"))
            root.addHandler(handler)

    return structlog.get_logger("ragify")


logger = setup_logging()
