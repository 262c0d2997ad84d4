"""
Staging area for raw publish payloads.

Payloads are written under a private temp directory, named by their sha1,
and removed by the caller once processing ends.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class TempStore:
    """
    Example:
        store = TempStore()
        path = store.create(data, sha1, ".pom")
        try:
            ...
        finally:
            store.delete(path)
    """

    def __init__(self, directory: Optional[Path] = None):
        self.directory = Path(directory) if directory else Path(tempfile.gettempdir()) / 'artifactindex'
        self.directory.mkdir(parents=True, exist_ok=True)

    def create(self, data: bytes, sha1: str, suffix: str) -> Path:
        """Write data to a new staged file and return its path."""
        fd, temp_path = tempfile.mkstemp(dir=self.directory, prefix=f"{sha1}-", suffix=suffix)
        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
        except Exception:
            os.unlink(temp_path)
            raise
        return Path(temp_path)

    def delete(self, path: Path) -> None:
        try:
            Path(path).unlink()
        except FileNotFoundError:
            logger.debug(f"Staged file already removed: {path}")
