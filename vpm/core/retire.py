"""Replacing a live directory without waiting for the old one to be deleted.

The live directory is renamed away atomically, recreated empty, and the
renamed copy is deleted on a background thread while the caller populates
the fresh directory. The caller joins the deletion at the very end.
"""

import logging
import secrets
import shutil
import threading
from pathlib import Path

logger = logging.getLogger(__name__)


class RetiredDirectory:
    """Background deletion of a renamed-away directory."""

    def __init__(self, path: Path):
        self.path = path
        self._error: OSError | None = None
        self._thread = threading.Thread(
            target=self._remove, name=f"retire-{path.name}", daemon=False
        )

    def start(self) -> "RetiredDirectory":
        self._thread.start()
        return self

    def _remove(self) -> None:
        try:
            shutil.rmtree(self.path)
        except OSError as e:
            self._error = e
        else:
            logger.debug("Removed %s", self.path)

    def wait(self) -> OSError | None:
        """Block until the deletion finishes.

        Returns:
            The deletion's error, or None on success
        """
        self._thread.join()
        return self._error


def retired_name(path: Path) -> Path:
    """Sibling path that a live directory is renamed to.

    The random suffix keeps it clear of remnants left by an earlier failed
    retirement.
    """
    return path.with_name(f"{path.name}.old{secrets.token_hex(8)}")


def retire_directory(path: Path) -> RetiredDirectory | None:
    """Swap ``path`` for a fresh empty directory.

    If ``path`` exists it is renamed to a unique sibling and deleted in the
    background. ``path`` is then recreated empty. A failed rename propagates
    before anything else happens, leaving the old tree untouched.

    Args:
        path: Live directory to replace

    Returns:
        The pending deletion to join later, or None if ``path`` didn't exist

    Raises:
        OSError: If the rename or the recreation fails
    """
    retired: RetiredDirectory | None = None
    if path.exists():
        old = retired_name(path)
        path.rename(old)
        logger.info("Removing %s ...", path)
        retired = RetiredDirectory(old).start()

    path.mkdir(mode=0o755, parents=True, exist_ok=True)
    return retired
