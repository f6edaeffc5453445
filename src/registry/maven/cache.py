"""On-disk artifact cache laid out like a Maven repository.

``<root>/<group path>/<artifact>/<version>/<artifact>-<version>.<ext>``

Entries are keyed by coordinate and extension and never re-validated; writes
for the same coordinate produce the same bytes, so concurrent writers need no
locking.
"""
from __future__ import annotations

import logging
import os
import shutil
from typing import Optional

from constants import Constants

from .models import Coordinate

logger = logging.getLogger(__name__)


class ArtifactCache:
    """Filesystem view over the local artifact cache."""

    def __init__(self, root: Optional[str] = None):
        self.root = os.path.abspath(root or Constants.CACHE_DIR)

    def artifact_dir(self, coord: Coordinate) -> str:
        return os.path.join(
            self.root, *coord.group_id.split("."), coord.artifact_id, coord.version or ""
        )

    def ensure_dir(self, coord: Coordinate) -> str:
        path = self.artifact_dir(coord)
        os.makedirs(path, exist_ok=True)
        return path

    def file_path(self, coord: Coordinate, extension: str) -> str:
        return os.path.join(self.artifact_dir(coord), f"{coord.file_stem}.{extension}")

    def binary_path(self, coord: Coordinate) -> str:
        return self.file_path(coord, "jar")

    def manifest_path(self, coord: Coordinate) -> str:
        return self.file_path(coord, "pom")

    def is_cached(self, coord: Coordinate) -> bool:
        return os.path.isfile(self.binary_path(coord))

    def read_manifest(self, coord: Coordinate) -> Optional[str]:
        """Return the cached manifest text, or None when absent or unreadable."""
        path = self.manifest_path(coord)
        if not os.path.isfile(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as fh:
                return fh.read()
        except (OSError, UnicodeDecodeError) as exc:
            logger.debug("Ignoring unreadable cached manifest %s: %s", path, exc)
            return None

    def store_manifest(self, coord: Coordinate, text: str) -> bool:
        """Persist manifest text; failure is logged and reported as False."""
        path = self.manifest_path(coord)
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, "w", encoding="utf-8") as fh:
                fh.write(text)
            return True
        except OSError as exc:
            logger.warning("Could not cache manifest for %s: %s", coord, exc)
            return False

    def clean_artifact(self, group_id: str, artifact_id: str) -> bool:
        """Remove every cached version of ``group_id:artifact_id``."""
        path = os.path.join(self.root, *group_id.split("."), artifact_id)
        if not os.path.isdir(path):
            return False
        shutil.rmtree(path)
        logger.info("Removed cached artifact %s:%s", group_id, artifact_id)
        return True

    def clean_all(self) -> None:
        """Empty the cache, leaving the root directory in place."""
        if os.path.isdir(self.root):
            shutil.rmtree(self.root)
        os.makedirs(self.root, exist_ok=True)
        logger.info("Cleared artifact cache at %s", self.root)
