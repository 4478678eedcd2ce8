"""Process-wide transaction lock.

Only one vpm process may modify the plugin tree at a time. The lock is an
exclusively created file holding the owner's PID. It is acquired and released
by the caller (the CLI) and handed to builders, which only check that it is
held.
"""

import logging
import os
from pathlib import Path
from types import TracebackType

logger = logging.getLogger(__name__)


class TransactionError(Exception):
    """Error acquiring or releasing the transaction lock."""

    def __init__(self, message: str, path: Path | None = None):
        self.path = path
        super().__init__(message)


class TransactionLock:
    """Exclusive lock file guarding the plugin tree."""

    def __init__(self, path: Path):
        self.path = path
        self._held = False

    @property
    def held(self) -> bool:
        return self._held

    def acquire(self) -> None:
        """Create the lock file.

        Raises:
            TransactionError: If another process holds the lock
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            fd = os.open(self.path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError as e:
            raise TransactionError(
                f"another vpm process is running (remove {self.path} if not)", self.path
            ) from e
        except OSError as e:
            raise TransactionError(f"failed to begin transaction: {e}", self.path) from e
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(str(os.getpid()))
        self._held = True
        logger.debug("Acquired transaction lock %s", self.path)

    def release(self) -> None:
        """Remove the lock file if this handle holds it."""
        if not self._held:
            return
        try:
            self.path.unlink()
        except FileNotFoundError:
            logger.warning("Transaction lock %s was already removed", self.path)
        self._held = False
        logger.debug("Released transaction lock %s", self.path)

    def __enter__(self) -> "TransactionLock":
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()
