"""Single-instance process lock.

Only one vmsnap invocation may touch checkpoints, bitmaps and backup
directories at a time. The lock is an exclusive ``flock`` on a file in the
temporary directory, retried a bounded number of times before giving up.
"""

import fcntl
import logging
import os
import time
from collections.abc import Callable
from pathlib import Path
from types import TracebackType
from typing import IO

from vmsnap.core.errors import LockAcquireError, LockReleaseError
from vmsnap.core.paths import get_lock_path

logger = logging.getLogger(__name__)

DEFAULT_RETRIES = 10
DEFAULT_RETRY_WAIT = 10.0


class ProcessLock:
    """Exclusive, non-reentrant file lock guarding a whole invocation.

    Args:
        path: Lock file path. Defaults to ``<tmpdir>/vmsnap.lock``.
        retries: Attempts after the first one before giving up.
        retry_wait: Seconds to wait between attempts.
        sleep: Sleep function, replaceable in tests.

    Example:
        >>> with ProcessLock() as lock:
        ...     run_backups()
    """

    def __init__(
        self,
        path: Path | None = None,
        retries: int = DEFAULT_RETRIES,
        retry_wait: float = DEFAULT_RETRY_WAIT,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.path = path or get_lock_path()
        self.retries = retries
        self.retry_wait = retry_wait
        self._sleep = sleep
        self._handle: IO[str] | None = None

    @property
    def held(self) -> bool:
        """Check if this instance currently holds the lock."""
        return self._handle is not None

    def acquire(self) -> None:
        """Acquire the lock, retrying while another process holds it.

        Raises:
            LockAcquireError: If the lock is still held after all retries,
                or the lock file cannot be opened.
        """
        if self._handle is not None:
            msg = f"Lock {self.path} is already held by this process"
            raise LockAcquireError(msg)

        try:
            handle = open(self.path, "a")  # noqa: SIM115
        except OSError as e:
            msg = f"Cannot open lock file {self.path}: {e}"
            raise LockAcquireError(msg) from e

        for attempt in range(self.retries + 1):
            try:
                fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
            except BlockingIOError:
                if attempt < self.retries:
                    logger.info(
                        "Another vmsnap process holds %s, retrying in %ss (%d/%d)",
                        self.path,
                        self.retry_wait,
                        attempt + 1,
                        self.retries,
                    )
                    self._sleep(self.retry_wait)
                continue
            except OSError as e:
                handle.close()
                msg = f"Failed to acquire lock {self.path}: {e}"
                raise LockAcquireError(msg) from e

            handle.truncate(0)
            handle.write(f"{os.getpid()}\n")
            handle.flush()
            self._handle = handle
            logger.debug("Acquired lock %s", self.path)
            return

        handle.close()
        msg = f"Could not acquire lock {self.path} after {self.retries} retries"
        raise LockAcquireError(msg)

    def release(self) -> None:
        """Release the lock.

        Raises:
            LockReleaseError: If the lock is not held or cannot be released.
        """
        if self._handle is None:
            msg = f"Lock {self.path} is not held"
            raise LockReleaseError(msg)

        handle = self._handle
        self._handle = None
        try:
            fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
        except OSError as e:
            msg = f"Failed to release lock {self.path}: {e}"
            raise LockReleaseError(msg) from e
        finally:
            handle.close()

        logger.debug("Released lock %s", self.path)

    def __enter__(self) -> "ProcessLock":
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()
