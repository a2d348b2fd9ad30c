"""Remove a working copy once its artifact has been written."""

from __future__ import annotations

import errno
import shutil
import time
from typing import TYPE_CHECKING

from ragify.logging import logger

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

MAX_ATTEMPTS = 5
RETRY_DELAY_SECONDS = 1.0
_BUSY_ERRNOS = frozenset({errno.EBUSY, errno.ENOTEMPTY, errno.EACCES})


def remove_workspace(
    clone_dir: Path,
    *,
    attempts: int = MAX_ATTEMPTS,
    delay: float = RETRY_DELAY_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Delete ``clone_dir``, retrying while the directory is busy.

    Only "resource busy"-class errors are retried, with a fixed ``delay``
    between attempts. Giving up is logged and reported, never raised.

    Args:
        clone_dir (Path): the working copy to delete
        attempts (int): maximum number of removal attempts
        delay (float): seconds to wait between attempts
        sleep (Callable[[float], None]): waiting function

    Raises:
        OSError: for errors that are not busy-class.

    Returns:
        bool: True if the directory is gone
    """
    for attempt in range(1, attempts + 1):
        try:
            shutil.rmtree(clone_dir)
        except FileNotFoundError:
            return True
        except OSError as e:
            if e.errno not in _BUSY_ERRNOS:
                raise
            logger.warning("Working copy busy, retrying", clone_dir=str(clone_dir), attempt=attempt)
            if attempt < attempts:
                sleep(delay)
        else:
            logger.info("Temporary directory removed", clone_dir=str(clone_dir))
            return True

    logger.error("Failed to remove temporary directory", clone_dir=str(clone_dir), attempts=attempts)
    return False
